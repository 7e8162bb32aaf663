from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from flashcards.auth import jwt_handler
from flashcards.auth.jwt_handler import TokenClaims
from flashcards.core.errors import ForbiddenError, MissingTokenError
from flashcards.models.user import Role

security = HTTPBearer(auto_error=False)


def get_current_claims(
    credentials: HTTPAuthorizationCredentials | None = Depends(security),
) -> TokenClaims:
    if credentials is None or not credentials.credentials:
        raise MissingTokenError()
    return jwt_handler.decode_access_token(credentials.credentials)


def get_optional_claims(
    credentials: HTTPAuthorizationCredentials | None = Depends(security),
) -> TokenClaims | None:
    if credentials is None or not credentials.credentials:
        return None
    return jwt_handler.decode_access_token(credentials.credentials)


def require_role(role: Role):
    def check_role(claims: TokenClaims = Depends(get_current_claims)) -> TokenClaims:
        if claims.role != role:
            raise ForbiddenError()
        return claims

    return check_role


require_admin = require_role(Role.admin)
