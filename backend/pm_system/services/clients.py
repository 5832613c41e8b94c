"""Client registry: listing with filters, lifecycle and the project-ownership guard."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, time, timedelta
from typing import Any

from sqlalchemy import case, func, or_
from sqlmodel import Session, col, select

from pm_system.core.errors import ConflictError, PreconditionFailedError
from pm_system.core.logging import get_logger
from pm_system.db.crud import get_or_404, save
from pm_system.models.clients import Client
from pm_system.models.projects import (
    PROJECT_STATUS_COMPLETED,
    PROJECT_STATUS_ONGOING,
    Project,
)
from pm_system.schemas.clients import ClientCreate, ClientRead, ClientUpdate
from pm_system.services.users import require_active_user

logger = get_logger(__name__)

SORT_MOST_PROJECTS = "mostProjects"

# Fields that may not be cleared to NULL through an update.
_NON_NULLABLE_UPDATE_FIELDS = frozenset(
    {
        "name",
        "company_name",
        "email",
        "phone",
        "client_type",
        "industry",
        "status",
        "location",
        "is_active",
        "assigned_recruiter_name",
    }
)


@dataclass(frozen=True, slots=True)
class ClientFilters:
    industry: str | None = None
    status: str | None = None
    location: str | None = None
    assigned_recruiter_id: int | None = None
    date_added_from: datetime | None = None
    date_added_to: datetime | None = None
    client_type: str | None = None
    is_active: bool | None = None
    search: str | None = None
    sort: str | None = None


@dataclass(frozen=True, slots=True)
class ProjectCounts:
    total: int = 0
    ongoing: int = 0
    completed: int = 0


def _contains(column: Any, term: str) -> Any:
    return func.lower(column).contains(term.lower(), autoescape=True)


def _on_or_before(column: Any, bound: datetime) -> Any:
    # A bare date (midnight) covers that whole day.
    if bound.time() == time.min:
        return column < bound + timedelta(days=1)
    return column <= bound


def project_counts(session: Session, client_ids: list[int]) -> dict[int, ProjectCounts]:
    if not client_ids:
        return {}
    statement = (
        select(
            Project.client_id,
            func.count(col(Project.id)),
            func.sum(case((col(Project.status) == PROJECT_STATUS_ONGOING, 1), else_=0)),
            func.sum(case((col(Project.status) == PROJECT_STATUS_COMPLETED, 1), else_=0)),
        )
        .where(col(Project.client_id).in_(client_ids))
        .group_by(col(Project.client_id))
    )
    return {
        client_id: ProjectCounts(total=int(total or 0), ongoing=int(ongoing or 0), completed=int(done or 0))
        for client_id, total, ongoing, done in session.exec(statement).all()
    }


def to_client_read(client: Client, counts: ProjectCounts | None = None) -> ClientRead:
    counts = counts or ProjectCounts()
    return ClientRead(
        **client.model_dump(),
        total_projects=counts.total,
        ongoing_projects=counts.ongoing,
        completed_projects=counts.completed,
    )


def list_clients(session: Session, filters: ClientFilters | None = None) -> list[ClientRead]:
    """Return clients matching every supplied filter.

    Text matching (``search``, ``location``) is a case-insensitive substring match;
    ``industry``, ``status`` and ``client_type`` are case-insensitive equality.
    """
    filters = filters or ClientFilters()
    statement = select(Client)

    if filters.industry:
        statement = statement.where(func.lower(col(Client.industry)) == filters.industry.lower())
    if filters.status:
        statement = statement.where(func.lower(col(Client.status)) == filters.status.lower())
    if filters.client_type:
        statement = statement.where(func.lower(col(Client.client_type)) == filters.client_type.lower())
    if filters.location:
        statement = statement.where(_contains(col(Client.location), filters.location))
    if filters.assigned_recruiter_id is not None:
        statement = statement.where(col(Client.assigned_recruiter_id) == filters.assigned_recruiter_id)
    if filters.date_added_from is not None:
        statement = statement.where(col(Client.date_added) >= filters.date_added_from)
    if filters.date_added_to is not None:
        statement = statement.where(_on_or_before(col(Client.date_added), filters.date_added_to))
    if filters.is_active is not None:
        statement = statement.where(col(Client.is_active).is_(filters.is_active))
    if filters.search:
        term = filters.search.strip()
        if term:
            statement = statement.where(
                or_(
                    _contains(col(Client.name), term),
                    _contains(col(Client.company_name), term),
                    _contains(col(Client.email), term),
                    _contains(col(Client.location), term),
                )
            )

    clients = list(session.exec(statement.order_by(col(Client.id).asc())).all())
    counts = project_counts(session, [c.id for c in clients])
    results = [to_client_read(c, counts.get(c.id)) for c in clients]
    if filters.sort == SORT_MOST_PROJECTS:
        results.sort(key=lambda r: r.total_projects, reverse=True)
    return results


def get_client(session: Session, client_id: int) -> ClientRead:
    client = get_or_404(session, Client, client_id, label="Client")
    return to_client_read(client, project_counts(session, [client.id]).get(client.id))


def _ensure_email_available(session: Session, email: str, *, exclude_id: int | None = None) -> None:
    statement = select(Client.id).where(Client.email == email)
    if exclude_id is not None:
        statement = statement.where(col(Client.id) != exclude_id)
    if session.exec(statement).first() is not None:
        raise ConflictError("A client with this email already exists")


def _resolve_recruiter(
    session: Session, recruiter_id: int | None, recruiter_name: str | None
) -> tuple[int | None, str]:
    """Validate the recruiter reference and snapshot its display name."""
    if recruiter_id is None or recruiter_id <= 0:
        return None, ""
    recruiter = require_active_user(session, recruiter_id, field="assignedRecruiterId")
    return recruiter.id, recruiter_name or recruiter.username


def create_client(session: Session, payload: ClientCreate) -> ClientRead:
    _ensure_email_available(session, payload.email)
    recruiter_id, recruiter_name = _resolve_recruiter(
        session, payload.assigned_recruiter_id, payload.assigned_recruiter_name
    )

    data = payload.model_dump()
    data.update(assigned_recruiter_id=recruiter_id, assigned_recruiter_name=recruiter_name)
    client = save(session, Client(**data), conflict_detail="A client with this email already exists")
    logger.info("client.created client_id=%s email=%s", client.id, client.email)
    return to_client_read(client)


def update_client(session: Session, client_id: int, payload: ClientUpdate) -> ClientRead:
    client = get_or_404(session, Client, client_id, label="Client")

    updates = payload.model_dump(exclude_unset=True)
    updates = {
        k: v for k, v in updates.items() if v is not None or k not in _NON_NULLABLE_UPDATE_FIELDS
    }

    if "email" in updates and updates["email"] != client.email:
        _ensure_email_available(session, updates["email"], exclude_id=client.id)

    if "assigned_recruiter_id" in updates:
        recruiter_id, recruiter_name = _resolve_recruiter(
            session, updates["assigned_recruiter_id"], updates.get("assigned_recruiter_name")
        )
        updates["assigned_recruiter_id"] = recruiter_id
        updates["assigned_recruiter_name"] = recruiter_name
    elif client.assigned_recruiter_id is None:
        # No recruiter, no recruiter name.
        updates.pop("assigned_recruiter_name", None)

    for key, value in updates.items():
        setattr(client, key, value)

    client = save(session, client, conflict_detail="A client with this email already exists")
    logger.info("client.updated client_id=%s fields=%s", client.id, sorted(updates))
    return to_client_read(client, project_counts(session, [client.id]).get(client.id))


def delete_client(session: Session, client_id: int) -> None:
    client = get_or_404(session, Client, client_id, label="Client")
    project_count = session.exec(
        select(func.count(col(Project.id))).where(col(Project.client_id) == client.id)
    ).one()
    if project_count:
        raise PreconditionFailedError(
            f"Cannot delete client with {project_count} existing project(s)",
            project_count=int(project_count),
        )

    session.delete(client)
    session.commit()
    logger.info("client.deleted client_id=%s", client_id)
