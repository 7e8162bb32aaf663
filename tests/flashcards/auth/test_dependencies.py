import pytest
from fastapi.security import HTTPAuthorizationCredentials

from flashcards.auth import jwt_handler
from flashcards.auth.dependencies import get_current_claims, get_optional_claims, require_admin, require_role
from flashcards.core.errors import ForbiddenError, InvalidTokenError, MissingTokenError
from flashcards.models.user import Role


def _bearer(token: str) -> HTTPAuthorizationCredentials:
    return HTTPAuthorizationCredentials(scheme='Bearer', credentials=token)


def test_get_current_claims_requires_credentials() -> None:
    with pytest.raises(MissingTokenError) as exception_info:
        get_current_claims(credentials=None)

    assert exception_info.value.status_code == 401


def test_get_current_claims_rejects_invalid_token_with_403() -> None:
    with pytest.raises(InvalidTokenError) as exception_info:
        get_current_claims(credentials=_bearer('garbage'))

    assert exception_info.value.status_code == 403


def test_get_current_claims_returns_decoded_claims() -> None:
    token = jwt_handler.create_access_token(user_id=3, email='c@example.com', role=Role.client)

    claims = get_current_claims(credentials=_bearer(token))

    assert claims.user_id == 3
    assert claims.role is Role.client


def test_get_optional_claims_allows_anonymous_requests() -> None:
    assert get_optional_claims(credentials=None) is None


def test_require_admin_rejects_client_token() -> None:
    token = jwt_handler.create_access_token(user_id=3, email='c@example.com', role=Role.client)
    claims = get_current_claims(credentials=_bearer(token))

    with pytest.raises(ForbiddenError) as exception_info:
        require_admin(claims=claims)

    assert exception_info.value.status_code == 403


def test_require_admin_accepts_admin_token() -> None:
    token = jwt_handler.create_access_token(user_id=1, email='admin@example.com', role=Role.admin)
    claims = get_current_claims(credentials=_bearer(token))

    assert require_admin(claims=claims) is claims


def test_require_client_rejects_admin_token() -> None:
    token = jwt_handler.create_access_token(user_id=1, email='admin@example.com', role=Role.admin)
    claims = get_current_claims(credentials=_bearer(token))

    with pytest.raises(ForbiddenError):
        require_role(Role.client)(claims=claims)
