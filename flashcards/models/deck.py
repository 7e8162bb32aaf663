"""Deck model definitions."""

from sqlalchemy import Column, DateTime, Integer, String, Text, func
from sqlalchemy.orm import relationship
from flashcards.database import Base


class Deck(Base):
    """Represents a named collection of cards under a category."""
    __tablename__ = "decks"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=False)
    description = Column(Text)
    category = Column(String, nullable=False)
    created_at = Column(DateTime, server_default=func.now())

    cards = relationship(
        "Card",
        back_populates="deck",
        cascade="all, delete-orphan",
        order_by="Card.id",
    )
