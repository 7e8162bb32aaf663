"""Application error taxonomy.

Each error carries the HTTP status it is rendered with. Handlers raise these
and ``flashcards.main`` turns them into ``{"detail": message}`` responses.
"""

from fastapi import status


class AppError(Exception):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message = 'Internal server error.'

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(AppError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = 'Invalid request.'


class NotFoundError(AppError):
    status_code = status.HTTP_404_NOT_FOUND
    default_message = 'Not found.'


class DuplicateError(AppError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = 'Already exists.'


class DuplicateEmailError(DuplicateError):
    default_message = 'User already exists.'


class AuthError(AppError):
    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = 'Not authenticated.'


class InvalidCredentialsError(AuthError):
    default_message = 'Invalid credentials.'


class MissingTokenError(AuthError):
    default_message = 'Missing token.'


class ForbiddenError(AppError):
    status_code = status.HTTP_403_FORBIDDEN
    default_message = 'Insufficient permissions.'


class InvalidTokenError(ForbiddenError):
    default_message = 'Invalid token.'


class QuizStateError(AppError):
    status_code = status.HTTP_409_CONFLICT
    default_message = 'Quiz is not in a state that allows this action.'


class EmptyDeckError(NotFoundError):
    default_message = 'No cards found.'


class InternalError(AppError):
    pass
