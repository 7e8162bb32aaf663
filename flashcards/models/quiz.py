"""Quiz session and score model definitions."""

from sqlalchemy import JSON, Boolean, Column, DateTime, ForeignKey, Integer, String, func
from flashcards.database import Base


class QuizSession(Base):
    """Server-held answer log for one run through a deck."""
    __tablename__ = "quiz_sessions"

    id = Column(String(32), primary_key=True)
    deck_id = Column(Integer, ForeignKey("decks.id", ondelete="CASCADE"), nullable=False, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    answers = Column(JSON, nullable=False, default=list)
    submitted = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime, server_default=func.now())


class QuizScore(Base):
    """Aggregate result recorded when a quiz is submitted."""
    __tablename__ = "quiz_scores"

    id = Column(Integer, primary_key=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True, index=True)
    deck_id = Column(Integer, ForeignKey("decks.id", ondelete="CASCADE"), nullable=False, index=True)
    score = Column(Integer, nullable=False)
    total_questions = Column(Integer, nullable=False)
    created_at = Column(DateTime, server_default=func.now())
