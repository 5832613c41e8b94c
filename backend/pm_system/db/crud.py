"""Small persistence helpers shared by the services."""

from __future__ import annotations

from typing import Any, TypeVar

from sqlalchemy.exc import IntegrityError
from sqlmodel import Session, SQLModel

from pm_system.core.errors import ConflictError, NotFoundError

ModelT = TypeVar("ModelT", bound=SQLModel)


def get_or_404(session: Session, model: type[ModelT], obj_id: Any, *, label: str) -> ModelT:
    obj = session.get(model, obj_id)
    if obj is None:
        raise NotFoundError(f"{label} not found")
    return obj


def commit_or_conflict(session: Session, *, detail: str) -> None:
    """Commit the unit of work; a uniqueness race becomes ``ConflictError``."""
    try:
        session.commit()
    except IntegrityError as exc:
        session.rollback()
        raise ConflictError(detail) from exc


def save(session: Session, obj: ModelT, *, conflict_detail: str) -> ModelT:
    session.add(obj)
    commit_or_conflict(session, detail=conflict_detail)
    session.refresh(obj)
    return obj
