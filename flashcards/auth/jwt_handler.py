from datetime import datetime, timedelta, timezone

import jwt
from pydantic import BaseModel

from flashcards.core import config
from flashcards.core.errors import InvalidTokenError
from flashcards.models.user import Role

REQUIRED_CLAIMS = ["sub", "exp", "iat", "email", "role"]


class TokenClaims(BaseModel):
    user_id: int
    email: str
    role: Role
    issued_at: datetime
    expires_at: datetime


def _secret_key() -> str:
    if not config.JWT_SECRET_KEY:
        raise RuntimeError("JWT_SECRET_KEY is not configured.")
    return config.JWT_SECRET_KEY


def create_access_token(
    user_id: int,
    email: str,
    role: Role,
    expires_minutes: int | None = None,
    issued_at: datetime | None = None,
) -> str:
    expire_minutes = config.JWT_EXPIRES_MINUTES if expires_minutes is None else expires_minutes
    issued = issued_at or datetime.now(timezone.utc)
    expire = issued + timedelta(minutes=expire_minutes)
    payload = {
        "sub": str(user_id),
        "email": email,
        "role": Role(role).value,
        "iat": issued,
        "exp": expire,
    }
    return jwt.encode(payload, _secret_key(), algorithm=config.JWT_ALGORITHM)


def decode_access_token(token: str) -> TokenClaims:
    try:
        payload = jwt.decode(
            token,
            _secret_key(),
            algorithms=[config.JWT_ALGORITHM],
            options={"require": REQUIRED_CLAIMS},
        )
    except jwt.ExpiredSignatureError as exc:
        raise InvalidTokenError("Token has expired.") from exc
    except jwt.InvalidTokenError as exc:
        raise InvalidTokenError() from exc

    try:
        return TokenClaims(
            user_id=int(payload["sub"]),
            email=payload["email"],
            role=payload["role"],
            issued_at=datetime.fromtimestamp(payload["iat"], tz=timezone.utc),
            expires_at=datetime.fromtimestamp(payload["exp"], tz=timezone.utc),
        )
    except (TypeError, ValueError) as exc:
        raise InvalidTokenError() from exc
