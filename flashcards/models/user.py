"""User model definitions."""

import enum

from sqlalchemy import Column, DateTime, Enum, Integer, String, func
from flashcards.database import Base


class Role(str, enum.Enum):
    """Access tier fixed on a user at creation."""
    admin = "admin"
    client = "client"


class User(Base):
    """Represents an application user."""
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=False)
    email = Column(String, unique=True, index=True, nullable=False)
    hashed_password = Column(String, nullable=False)
    role = Column(Enum(Role, native_enum=False, length=16), nullable=False, default=Role.client)
    created_at = Column(DateTime, server_default=func.now())
