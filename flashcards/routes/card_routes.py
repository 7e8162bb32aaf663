import logging

from fastapi import APIRouter, Depends, status
from pydantic import BaseModel, Field, field_validator
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from flashcards.auth.dependencies import require_admin
from flashcards.core.errors import InternalError, NotFoundError
from flashcards.database import get_db
from flashcards.models.card import AnswerOption, Card
from flashcards.routes.deck_routes import MessageResponse, get_deck_or_404

router = APIRouter(tags=['cards'])

logger = logging.getLogger(__name__)


class CardRequest(BaseModel):
    question: str
    option_a: str
    option_b: str
    option_c: str
    option_d: str
    correct_answer: AnswerOption
    explanation: str | None = None

    @field_validator('question', 'option_a', 'option_b', 'option_c', 'option_d')
    @classmethod
    def validate_required_text(cls, value: str) -> str:
        normalized = value.strip()
        if not normalized:
            raise ValueError('All question and option fields are required.')
        return normalized

    @field_validator('explanation')
    @classmethod
    def validate_explanation(cls, value: str | None) -> str | None:
        if value is None:
            return None
        return value.strip() or None


class CardResponse(BaseModel):
    id: int
    deck_id: int
    question: str
    option_a: str
    option_b: str
    option_c: str
    option_d: str
    correct_answer: AnswerOption
    explanation: str | None = None

    class Config:
        from_attributes = True


class CardCreatedResponse(BaseModel):
    message: str
    card_id: int = Field(serialization_alias='cardId')


def get_card_or_404(db: Session, card_id: int) -> Card:
    card = db.get(Card, card_id)
    if card is None:
        raise NotFoundError('Card not found.')
    return card


def list_deck_cards(db: Session, deck_id: int) -> list[Card]:
    return db.query(Card).filter(Card.deck_id == deck_id).order_by(Card.id.asc()).all()


@router.get('/deck/{deck_id}', response_model=list[CardResponse])
def list_cards(deck_id: int, db: Session = Depends(get_db)):
    try:
        cards = list_deck_cards(db, deck_id)
    except SQLAlchemyError as exc:
        logger.exception('Fetching cards for deck %s failed.', deck_id)
        raise InternalError('Error fetching cards.') from exc

    if not cards:
        raise NotFoundError('No cards found for this deck.')
    return cards


@router.get('/{card_id}', response_model=CardResponse)
def get_card(card_id: int, db: Session = Depends(get_db)):
    try:
        return get_card_or_404(db, card_id)
    except SQLAlchemyError as exc:
        logger.exception('Fetching card %s failed.', card_id)
        raise InternalError('Error fetching card.') from exc


@router.post(
    '/deck/{deck_id}',
    response_model=CardCreatedResponse,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(require_admin)],
)
def create_card(deck_id: int, data: CardRequest, db: Session = Depends(get_db)):
    try:
        get_deck_or_404(db, deck_id)
        card = Card(deck_id=deck_id, **data.model_dump())
        db.add(card)
        db.commit()
        db.refresh(card)
    except SQLAlchemyError as exc:
        db.rollback()
        logger.exception('Creating card in deck %s failed.', deck_id)
        raise InternalError('Error creating card.') from exc

    return CardCreatedResponse(message='Card created successfully', card_id=card.id)


@router.put('/{card_id}', response_model=MessageResponse, dependencies=[Depends(require_admin)])
def update_card(card_id: int, data: CardRequest, db: Session = Depends(get_db)):
    try:
        card = get_card_or_404(db, card_id)
        for field_name, value in data.model_dump().items():
            setattr(card, field_name, value)
        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        logger.exception('Updating card %s failed.', card_id)
        raise InternalError('Error updating card.') from exc

    return MessageResponse(message='Card updated successfully')


@router.delete('/{card_id}', response_model=MessageResponse, dependencies=[Depends(require_admin)])
def delete_card(card_id: int, db: Session = Depends(get_db)):
    try:
        card = get_card_or_404(db, card_id)
        db.delete(card)
        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        logger.exception('Deleting card %s failed.', card_id)
        raise InternalError('Error deleting card.') from exc

    return MessageResponse(message='Card deleted successfully')
