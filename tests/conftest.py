import os

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

os.environ.setdefault('DATABASE_URL', 'sqlite:///:memory:')
os.environ.setdefault('JWT_SECRET_KEY', 'test-secret-key-do-not-use-in-production')
os.environ.setdefault('BCRYPT_ROUNDS', '4')

from flashcards.database import Base  # noqa: E402
from flashcards.models import card, deck, quiz, user  # noqa: E402,F401


@pytest.fixture
def db_engine():
    engine = create_engine(
        'sqlite:///:memory:',
        connect_args={'check_same_thread': False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    try:
        yield engine
    finally:
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


@pytest.fixture
def db(db_engine):
    testing_session_local = sessionmaker(autocommit=False, autoflush=False, bind=db_engine)
    session = testing_session_local()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def make_deck(db):
    def _make_deck(name='Python Basics', category='Programming', answers=('b',)):
        new_deck = deck.Deck(name=name, description='Test deck', category=category)
        db.add(new_deck)
        db.flush()
        for index, correct in enumerate(answers):
            db.add(
                card.Card(
                    deck_id=new_deck.id,
                    question=f'Question {index + 1}?',
                    option_a='Option A',
                    option_b='Option B',
                    option_c='Option C',
                    option_d='Option D',
                    correct_answer=correct,
                    explanation=f'Because {correct}.',
                )
            )
        db.commit()
        db.refresh(new_deck)
        return new_deck

    return _make_deck
