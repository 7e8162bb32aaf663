"""Registration and login.

Both operations return the issued token together with the stored ``User``.
Login failures are reported with a single ``InvalidCredentialsError`` no
matter which check failed.
"""

import logging
from functools import lru_cache

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from flashcards.auth import jwt_handler
from flashcards.auth.password import hash_password, verify_password
from flashcards.core.errors import DuplicateEmailError, InvalidCredentialsError
from flashcards.models.user import Role, User
from flashcards.stores import user_store

logger = logging.getLogger(__name__)


@lru_cache(maxsize=1)
def _dummy_hash() -> str:
    return hash_password("not-a-real-password")


def issue_token_for(user: User) -> str:
    return jwt_handler.create_access_token(user_id=user.id, email=user.email, role=user.role)


def register(db: Session, name: str, email: str, password: str) -> tuple[str, User]:
    if user_store.find_by_email(db, email) is not None:
        raise DuplicateEmailError()

    try:
        user = user_store.insert(
            db,
            name=name,
            email=email,
            hashed_password=hash_password(password),
            role=Role.client,
        )
    except IntegrityError as exc:
        db.rollback()
        raise DuplicateEmailError() from exc

    logger.info("Registered user %s", user.id)
    return issue_token_for(user), user


def login(db: Session, email: str, password: str, user_type: str | None = None) -> tuple[str, User]:
    user = user_store.find_by_email(db, email)
    if user is None:
        # Keep the response time of unknown emails in line with real ones.
        verify_password(password, _dummy_hash())
        logger.warning("Login failed: unknown email")
        raise InvalidCredentialsError()

    password_ok = verify_password(password, user.hashed_password)

    if user_type and Role(user.role).value != user_type:
        logger.warning("Login failed for user %s: role mismatch", user.id)
        raise InvalidCredentialsError()

    if not password_ok:
        logger.warning("Login failed for user %s: bad password", user.id)
        raise InvalidCredentialsError()

    return issue_token_for(user), user
