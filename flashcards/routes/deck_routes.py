import logging

from fastapi import APIRouter, Depends, status
from pydantic import BaseModel, Field, field_validator
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from flashcards.auth.dependencies import require_admin
from flashcards.core.errors import InternalError, NotFoundError
from flashcards.database import get_db
from flashcards.models.deck import Deck

router = APIRouter(tags=['decks'])

logger = logging.getLogger(__name__)

MAX_DECK_NAME_LENGTH = 120


class DeckRequest(BaseModel):
    name: str
    description: str | None = None
    category: str

    @field_validator('name', 'category')
    @classmethod
    def validate_required_text(cls, value: str) -> str:
        normalized = value.strip()
        if not normalized:
            raise ValueError('Name and category are required.')
        if len(normalized) > MAX_DECK_NAME_LENGTH:
            raise ValueError(f'Must be {MAX_DECK_NAME_LENGTH} characters or fewer.')
        return normalized

    @field_validator('description')
    @classmethod
    def validate_description(cls, value: str | None) -> str | None:
        if value is None:
            return None
        return value.strip() or None


class DeckResponse(BaseModel):
    id: int
    name: str
    description: str | None = None
    category: str

    class Config:
        from_attributes = True


class DeckCreatedResponse(BaseModel):
    message: str
    deck_id: int = Field(serialization_alias='deckId')


class MessageResponse(BaseModel):
    message: str


def get_deck_or_404(db: Session, deck_id: int) -> Deck:
    deck = db.get(Deck, deck_id)
    if deck is None:
        raise NotFoundError('Deck not found.')
    return deck


@router.get('', response_model=list[DeckResponse])
def list_decks(db: Session = Depends(get_db)):
    try:
        return db.query(Deck).order_by(Deck.id.asc()).all()
    except SQLAlchemyError as exc:
        logger.exception('Fetching decks failed.')
        raise InternalError('Error fetching decks.') from exc


@router.get('/{deck_id}', response_model=DeckResponse)
def get_deck(deck_id: int, db: Session = Depends(get_db)):
    try:
        return get_deck_or_404(db, deck_id)
    except SQLAlchemyError as exc:
        logger.exception('Fetching deck %s failed.', deck_id)
        raise InternalError('Error fetching deck.') from exc


@router.post(
    '',
    response_model=DeckCreatedResponse,
    response_model_by_alias=True,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(require_admin)],
)
def create_deck(data: DeckRequest, db: Session = Depends(get_db)):
    try:
        deck = Deck(name=data.name, description=data.description, category=data.category)
        db.add(deck)
        db.commit()
        db.refresh(deck)
    except SQLAlchemyError as exc:
        db.rollback()
        logger.exception('Creating deck failed.')
        raise InternalError('Error creating deck.') from exc

    logger.info('Created deck %s', deck.id)
    return DeckCreatedResponse(message='Deck created successfully', deck_id=deck.id)


@router.put('/{deck_id}', response_model=MessageResponse, dependencies=[Depends(require_admin)])
def update_deck(deck_id: int, data: DeckRequest, db: Session = Depends(get_db)):
    try:
        deck = get_deck_or_404(db, deck_id)
        deck.name = data.name
        deck.description = data.description
        deck.category = data.category
        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        logger.exception('Updating deck %s failed.', deck_id)
        raise InternalError('Error updating deck.') from exc

    return MessageResponse(message='Deck updated successfully')


@router.delete('/{deck_id}', response_model=MessageResponse, dependencies=[Depends(require_admin)])
def delete_deck(deck_id: int, db: Session = Depends(get_db)):
    try:
        deck = get_deck_or_404(db, deck_id)
        db.delete(deck)
        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        logger.exception('Deleting deck %s failed.', deck_id)
        raise InternalError('Error deleting deck.') from exc

    logger.info('Deleted deck %s', deck_id)
    return MessageResponse(message='Deck deleted successfully')
