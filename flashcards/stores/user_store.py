"""Credential store: persistence of user records.

Every function takes the caller's ``Session`` so the store never owns a
connection of its own.
"""

from sqlalchemy.orm import Session

from flashcards.models.user import Role, User


def find_by_email(db: Session, email: str) -> User | None:
    return db.query(User).filter(User.email == email).first()


def find_by_id(db: Session, user_id: int) -> User | None:
    return db.get(User, user_id)


def insert(db: Session, *, name: str, email: str, hashed_password: str, role: Role = Role.client) -> User:
    user = User(name=name, email=email, hashed_password=hashed_password, role=role)
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


def delete_by_email(db: Session, email: str) -> int:
    deleted = db.query(User).filter(User.email == email).delete(synchronize_session=False)
    db.commit()
    return deleted


def list_users(db: Session) -> list[User]:
    return db.query(User).order_by(User.id.asc()).all()
