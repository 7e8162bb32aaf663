"""Password hashing and verification with bcrypt."""

import bcrypt

from flashcards.core import config


def hash_password(password: str) -> str:
    """Hash a password with a fresh salt at the configured work factor."""
    salt = bcrypt.gensalt(rounds=config.BCRYPT_ROUNDS)
    return bcrypt.hashpw(password.encode(), salt).decode()


def verify_password(password: str, password_hash: str) -> bool:
    """Constant-time comparison against a bcrypt hash."""
    try:
        return bcrypt.checkpw(password.encode(), password_hash.encode())
    except (ValueError, TypeError):
        return False
