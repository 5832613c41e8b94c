"""Identity store lookups shared by the registry and project services."""

from __future__ import annotations

from sqlalchemy import func
from sqlmodel import Session, col, select

from pm_system.core.errors import InvalidReferenceError, NotFoundError
from pm_system.models.users import User


def get_user(session: Session, user_id: int) -> User:
    user = session.get(User, user_id)
    if user is None:
        raise NotFoundError("User not found")
    return user


def get_user_by_username(session: Session, username: str) -> User | None:
    return session.exec(select(User).where(User.username == username)).first()


def require_active_user(session: Session, user_id: int | None, *, field: str) -> User:
    """Resolve ``user_id`` to an active user or raise ``InvalidReferenceError`` naming ``field``."""
    user = session.get(User, user_id) if user_id is not None else None
    if user is None or not user.is_active:
        raise InvalidReferenceError(f"{field} must reference an existing active user")
    return user


def list_users(session: Session) -> list[User]:
    return list(session.exec(select(User).order_by(col(User.id).asc())).all())


def list_active_users(session: Session, *, role: str | None = None) -> list[User]:
    statement = select(User).where(col(User.is_active).is_(True))
    if role:
        statement = statement.where(func.lower(col(User.role)) == role.lower())
    return list(session.exec(statement.order_by(col(User.username).asc())).all())
