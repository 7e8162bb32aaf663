import logging

from fastapi import APIRouter, Depends, status
from pydantic import BaseModel, Field, field_validator
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from flashcards.auth import service
from flashcards.auth.dependencies import get_current_claims
from flashcards.auth.jwt_handler import TokenClaims
from flashcards.core.errors import InternalError, NotFoundError
from flashcards.database import get_db
from flashcards.models.user import Role
from flashcards.stores import user_store

router = APIRouter(tags=['auth'])

logger = logging.getLogger(__name__)

# bcrypt only looks at the first 72 bytes of a password.
MAX_PASSWORD_BYTES = 72


def _require_text(value: str, field_name: str) -> str:
    if not value or not value.strip():
        raise ValueError(f'{field_name} is required.')
    return value


class RegisterRequest(BaseModel):
    name: str
    email: str
    password: str

    @field_validator('name')
    @classmethod
    def validate_name(cls, value: str) -> str:
        return _require_text(value, 'Name').strip()

    @field_validator('email')
    @classmethod
    def validate_email(cls, value: str) -> str:
        normalized = _require_text(value, 'Email').strip()
        if '@' not in normalized:
            raise ValueError('Email is not valid.')
        return normalized

    @field_validator('password')
    @classmethod
    def validate_password(cls, value: str) -> str:
        _require_text(value, 'Password')
        if len(value.encode()) > MAX_PASSWORD_BYTES:
            raise ValueError(f'Password must be {MAX_PASSWORD_BYTES} bytes or fewer.')
        return value


class LoginRequest(BaseModel):
    email: str
    password: str
    user_type: str | None = Field(default=None, alias='userType')

    class Config:
        populate_by_name = True


class UserResponse(BaseModel):
    id: int
    name: str
    email: str
    role: Role

    class Config:
        from_attributes = True


class AuthResponse(BaseModel):
    message: str
    token: str
    user: UserResponse


@router.post('/register', response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
def register(data: RegisterRequest, db: Session = Depends(get_db)):
    try:
        token, user = service.register(db, name=data.name, email=data.email, password=data.password)
    except SQLAlchemyError as exc:
        db.rollback()
        logger.exception('Registration failed.')
        raise InternalError('Error registering user.') from exc

    return AuthResponse(
        message='User registered successfully',
        token=token,
        user=UserResponse.model_validate(user),
    )


@router.post('/login', response_model=AuthResponse)
def login(data: LoginRequest, db: Session = Depends(get_db)):
    try:
        token, user = service.login(db, email=data.email, password=data.password, user_type=data.user_type)
    except SQLAlchemyError as exc:
        logger.exception('Login failed.')
        raise InternalError('Error logging in.') from exc

    return AuthResponse(
        message='Login successful',
        token=token,
        user=UserResponse.model_validate(user),
    )


@router.get('/me', response_model=UserResponse)
def me(claims: TokenClaims = Depends(get_current_claims), db: Session = Depends(get_db)):
    try:
        user = user_store.find_by_id(db, claims.user_id)
    except SQLAlchemyError as exc:
        logger.exception('Loading current user failed.')
        raise InternalError('Error loading user.') from exc

    if user is None:
        raise NotFoundError('User not found.')
    return user
