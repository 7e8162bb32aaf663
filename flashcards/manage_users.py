"""Maintain user accounts from the command line.

Usage:
    python -m flashcards.manage_users create-admin
    python -m flashcards.manage_users recreate-admin
    python -m flashcards.manage_users list

Admin credentials are read from ADMIN_NAME, ADMIN_EMAIL and ADMIN_PASSWORD.
This is the only way to create users with the admin role.
"""
import argparse
import sys

from sqlalchemy.exc import SQLAlchemyError

from flashcards.auth.password import hash_password
from flashcards.core import config
from flashcards.database import SessionLocal, init_db
from flashcards.models.user import Role
from flashcards.stores import user_store


def create_admin(db, recreate: bool = False) -> int:
    if not config.ADMIN_PASSWORD:
        print("ADMIN_PASSWORD must be set.", file=sys.stderr)
        return 1

    if recreate:
        user_store.delete_by_email(db, config.ADMIN_EMAIL)
        print("Existing admin user deleted (if existed)")
    elif user_store.find_by_email(db, config.ADMIN_EMAIL) is not None:
        print("Admin user already exists. Use 'recreate-admin' to recreate.")
        return 0

    user = user_store.insert(
        db,
        name=config.ADMIN_NAME,
        email=config.ADMIN_EMAIL,
        hashed_password=hash_password(config.ADMIN_PASSWORD),
        role=Role.admin,
    )
    print(f"Admin user created with ID: {user.id}")
    print(f"Email: {user.email}")
    return 0


def list_users(db) -> int:
    print("Users in the database:")
    print("----------------------")
    for user in user_store.list_users(db):
        print(f"ID: {user.id}, Name: {user.name}, Email: {user.email}, Role: {Role(user.role).value}")
    return 0


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(prog="flashcards.manage_users")
    parser.add_argument("command", choices=["create-admin", "recreate-admin", "list"])
    args = parser.parse_args(argv)

    db = SessionLocal()
    try:
        init_db()
        if args.command == "list":
            return list_users(db)
        return create_admin(db, recreate=args.command == "recreate-admin")
    except SQLAlchemyError as exc:
        db.rollback()
        print(f"Database error: {exc}", file=sys.stderr)
        return 1
    finally:
        db.close()


if __name__ == "__main__":
    sys.exit(main())
