"""Card model definitions."""

import enum

from sqlalchemy import Column, Enum, ForeignKey, Integer, Text
from sqlalchemy.orm import relationship
from flashcards.database import Base


class AnswerOption(str, enum.Enum):
    """The four option keys a card can be answered with."""
    a = "a"
    b = "b"
    c = "c"
    d = "d"


class Card(Base):
    """Represents a multiple-choice question belonging to a deck."""
    __tablename__ = "cards"

    id = Column(Integer, primary_key=True, index=True)
    deck_id = Column(Integer, ForeignKey("decks.id", ondelete="CASCADE"), nullable=False, index=True)
    question = Column(Text, nullable=False)
    option_a = Column(Text, nullable=False)
    option_b = Column(Text, nullable=False)
    option_c = Column(Text, nullable=False)
    option_d = Column(Text, nullable=False)
    correct_answer = Column(Enum(AnswerOption, native_enum=False, length=1), nullable=False)
    explanation = Column(Text)

    deck = relationship("Deck", back_populates="cards")
