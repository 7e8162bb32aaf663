import logging
import uuid

from fastapi import APIRouter, Depends
from pydantic import BaseModel, model_validator
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from flashcards.auth.dependencies import get_optional_claims
from flashcards.auth.jwt_handler import TokenClaims
from flashcards.core.errors import (
    ForbiddenError,
    InternalError,
    MissingTokenError,
    NotFoundError,
    QuizStateError,
    ValidationError,
)
from flashcards.database import get_db
from flashcards.models.card import AnswerOption, Card
from flashcards.models.quiz import QuizScore, QuizSession
from flashcards.quiz.engine import QuizEngine, QuizQuestion, QuizState
from flashcards.routes.card_routes import CardResponse, get_card_or_404, list_deck_cards
from flashcards.routes.deck_routes import MessageResponse, get_deck_or_404

router = APIRouter(tags=['quiz'])

logger = logging.getLogger(__name__)


class StartQuizRequest(BaseModel):
    deck_id: int


class StartQuizResponse(BaseModel):
    session_id: str
    deck_id: int
    total_questions: int
    first_card: CardResponse


class AnswerRequest(BaseModel):
    card_id: int
    selected_answer: AnswerOption
    session_id: str | None = None


class AnswerResponse(BaseModel):
    is_correct: bool
    correct_answer: AnswerOption
    explanation: str | None = None
    session_id: str | None = None
    state: QuizState | None = None
    score: int | None = None
    answered: int | None = None
    total_questions: int | None = None
    next_card: CardResponse | None = None


class SessionRequest(BaseModel):
    session_id: str


class AnswerReview(BaseModel):
    question_id: int
    selected_answer: AnswerOption
    is_correct: bool
    correct_answer: AnswerOption
    explanation: str | None = None


class SessionResponse(BaseModel):
    session_id: str
    deck_id: int
    state: QuizState
    question_index: int
    score: int
    answered: int
    total_questions: int
    submitted: bool = False
    current_card: CardResponse | None = None
    answers: list[AnswerReview]


class SubmitScoreRequest(BaseModel):
    session_id: str | None = None
    deck_id: int | None = None
    score: int | None = None
    total_questions: int | None = None

    @model_validator(mode='after')
    def validate_reported_score(self):
        if self.session_id is not None:
            return self
        if self.deck_id is None or self.score is None or self.total_questions is None:
            raise ValueError('deck_id, score and total_questions are required without a session_id.')
        if self.total_questions < 1:
            raise ValueError('total_questions must be at least 1.')
        if not 0 <= self.score <= self.total_questions:
            raise ValueError('score must be between 0 and total_questions.')
        return self


class SubmitScoreResponse(BaseModel):
    message: str
    score: int
    total_questions: int


def query_quiz_session(db: Session, session_id: str, for_update: bool = False):
    query = db.query(QuizSession).filter(QuizSession.id == session_id)
    if for_update:
        # Serializes writers appending to the same answer log.
        query = query.with_for_update()
    return query


def get_quiz_session_or_404(
    db: Session,
    session_id: str,
    claims: TokenClaims | None,
    for_update: bool = False,
) -> QuizSession:
    quiz_session = query_quiz_session(db, session_id, for_update=for_update).first()
    if quiz_session is None:
        raise NotFoundError('Quiz session not found.')

    if quiz_session.user_id is not None:
        if claims is None:
            raise MissingTokenError()
        if claims.user_id != quiz_session.user_id:
            raise ForbiddenError('Quiz session belongs to another user.')
    return quiz_session


def load_quiz_session(
    db: Session,
    session_id: str,
    claims: TokenClaims | None,
    for_update: bool = False,
) -> tuple[QuizSession, QuizEngine, dict[int, Card]]:
    quiz_session = get_quiz_session_or_404(db, session_id, claims, for_update=for_update)

    cards = list_deck_cards(db, quiz_session.deck_id)
    engine = QuizEngine.resume(
        [QuizQuestion.from_card(card) for card in cards],
        [(answer['card_id'], answer['selected_answer']) for answer in quiz_session.answers or []],
    )
    return quiz_session, engine, {card.id: card for card in cards}


def build_session_response(quiz_session: QuizSession, engine: QuizEngine, cards_by_id: dict[int, Card]) -> SessionResponse:
    current = engine.current_question
    return SessionResponse(
        session_id=quiz_session.id,
        deck_id=quiz_session.deck_id,
        state=engine.state,
        question_index=engine.question_index,
        score=engine.score,
        answered=engine.answered,
        total_questions=engine.total_questions,
        submitted=quiz_session.submitted,
        current_card=CardResponse.model_validate(cards_by_id[current.id]) if current else None,
        answers=[AnswerReview(**answer.to_dict()) for answer in engine.answers],
    )


@router.post('/start', response_model=StartQuizResponse)
def start_quiz(
    data: StartQuizRequest,
    claims: TokenClaims | None = Depends(get_optional_claims),
    db: Session = Depends(get_db),
):
    try:
        cards = list_deck_cards(db, data.deck_id)
        engine = QuizEngine()
        engine.start([QuizQuestion.from_card(card) for card in cards])

        quiz_session = QuizSession(
            id=uuid.uuid4().hex,
            deck_id=data.deck_id,
            user_id=claims.user_id if claims else None,
            answers=[],
            submitted=False,
        )
        db.add(quiz_session)
        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        logger.exception('Starting quiz for deck %s failed.', data.deck_id)
        raise InternalError('Error starting quiz.') from exc

    logger.info('Started quiz session %s for deck %s', quiz_session.id, data.deck_id)
    return StartQuizResponse(
        session_id=quiz_session.id,
        deck_id=data.deck_id,
        total_questions=engine.total_questions,
        first_card=CardResponse.model_validate(cards[0]),
    )


@router.post('/answer', response_model=AnswerResponse)
def submit_answer(
    data: AnswerRequest,
    claims: TokenClaims | None = Depends(get_optional_claims),
    db: Session = Depends(get_db),
):
    try:
        if data.session_id is None:
            card = get_card_or_404(db, data.card_id)
            correct_answer = AnswerOption(card.correct_answer)
            return AnswerResponse(
                is_correct=data.selected_answer == correct_answer,
                correct_answer=correct_answer,
                explanation=card.explanation,
            )

        quiz_session, engine, cards_by_id = load_quiz_session(db, data.session_id, claims, for_update=True)
        current = engine.current_question
        if current is not None and current.id != data.card_id:
            raise ValidationError('Answer does not match the current question.')

        record = engine.submit_answer(data.selected_answer)
        quiz_session.answers = [
            *(quiz_session.answers or []),
            {'card_id': record.question_id, 'selected_answer': record.selected_answer.value},
        ]
        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        logger.exception('Recording answer for card %s failed.', data.card_id)
        raise InternalError('Error recording answer.') from exc

    next_question = engine.current_question
    return AnswerResponse(
        is_correct=record.is_correct,
        correct_answer=record.correct_answer,
        explanation=record.explanation,
        session_id=quiz_session.id,
        state=engine.state,
        score=engine.score,
        answered=engine.answered,
        total_questions=engine.total_questions,
        next_card=CardResponse.model_validate(cards_by_id[next_question.id]) if next_question else None,
    )


@router.post('/restart', response_model=SessionResponse)
def restart_quiz(
    data: SessionRequest,
    claims: TokenClaims | None = Depends(get_optional_claims),
    db: Session = Depends(get_db),
):
    try:
        quiz_session, engine, cards_by_id = load_quiz_session(db, data.session_id, claims, for_update=True)
        engine.restart()
        quiz_session.answers = []
        quiz_session.submitted = False
        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        logger.exception('Restarting quiz session %s failed.', data.session_id)
        raise InternalError('Error restarting quiz.') from exc

    return build_session_response(quiz_session, engine, cards_by_id)


@router.post('/exit', response_model=MessageResponse)
def exit_quiz(
    data: SessionRequest,
    claims: TokenClaims | None = Depends(get_optional_claims),
    db: Session = Depends(get_db),
):
    try:
        quiz_session = get_quiz_session_or_404(db, data.session_id, claims, for_update=True)
        db.delete(quiz_session)
        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        logger.exception('Ending quiz session %s failed.', data.session_id)
        raise InternalError('Error ending quiz.') from exc

    return MessageResponse(message='Quiz session ended')


@router.get('/sessions/{session_id}', response_model=SessionResponse)
def get_quiz_session(
    session_id: str,
    claims: TokenClaims | None = Depends(get_optional_claims),
    db: Session = Depends(get_db),
):
    try:
        quiz_session, engine, cards_by_id = load_quiz_session(db, session_id, claims)
    except SQLAlchemyError as exc:
        logger.exception('Loading quiz session %s failed.', session_id)
        raise InternalError('Error loading quiz session.') from exc

    return build_session_response(quiz_session, engine, cards_by_id)


@router.post('/submit', response_model=SubmitScoreResponse)
def submit_score(
    data: SubmitScoreRequest,
    claims: TokenClaims | None = Depends(get_optional_claims),
    db: Session = Depends(get_db),
):
    try:
        if data.session_id is not None:
            quiz_session, engine, _ = load_quiz_session(db, data.session_id, claims, for_update=True)
            if quiz_session.submitted:
                raise QuizStateError('Quiz session already submitted.')
            summary = engine.summary()
            quiz_session.submitted = True
            user_id = quiz_session.user_id
            deck_id, score, total_questions = quiz_session.deck_id, summary.score, summary.total_questions
        else:
            get_deck_or_404(db, data.deck_id)
            user_id = claims.user_id if claims else None
            deck_id, score, total_questions = data.deck_id, data.score, data.total_questions

        db.add(
            QuizScore(
                user_id=user_id,
                deck_id=deck_id,
                score=score,
                total_questions=total_questions,
            )
        )
        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        logger.exception('Saving score failed (deck %s, session %s).', data.deck_id, data.session_id)
        raise InternalError('Error saving score.') from exc

    logger.info('Saved score %s/%s for deck %s', score, total_questions, deck_id)
    return SubmitScoreResponse(message='Score saved successfully', score=score, total_questions=total_questions)
