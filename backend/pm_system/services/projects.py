"""Project aggregate: projects with their team members and modules.

Every rule is checked before anything is written, so a rejected request leaves
no partial state behind. Uniqueness races that slip past the pre-flight checks
are caught at commit time and reported as conflicts.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from sqlalchemy import delete, func, or_
from sqlmodel import Session, col, select

from pm_system.core.errors import (
    ConflictError,
    InvalidRangeError,
    InvalidReferenceError,
    NotFoundError,
)
from pm_system.core.logging import get_logger
from pm_system.core.time import utcnow
from pm_system.db.crud import commit_or_conflict, get_or_404, save
from pm_system.models.clients import Client
from pm_system.models.projects import (
    MODULE_STATUS_NOT_STARTED,
    PROJECT_STATUS_ONGOING,
    Project,
    ProjectModule,
    TeamMember,
)
from pm_system.schemas.projects import (
    ModuleCreate,
    ModuleRead,
    ModuleUpdate,
    ProjectCreate,
    ProjectRead,
    ProjectUpdate,
    TeamMemberCreate,
    TeamMemberRead,
)
from pm_system.services.users import require_active_user

logger = get_logger(__name__)

PROGRESS_MIN = 0
PROGRESS_MAX = 100

_NULLABLE_PROJECT_FIELDS = frozenset({"expected_end_date", "actual_end_date"})
_NULLABLE_MODULE_FIELDS = frozenset({"assigned_to_id", "start_date", "end_date"})


@dataclass(frozen=True, slots=True)
class ProjectFilters:
    client_id: int | None = None
    status: str | None = None
    search: str | None = None


@dataclass(frozen=True, slots=True)
class ProjectDeletion:
    project_id: int
    deleted_team_members: int
    deleted_modules: int


def validate_progress(value: int, *, field: str = "progressPercentage") -> int:
    if value < PROGRESS_MIN or value > PROGRESS_MAX:
        raise InvalidRangeError(f"{field} must be between {PROGRESS_MIN} and {PROGRESS_MAX}")
    return value


def _validate_not_before(start: datetime | None, end: datetime | None, *, field: str) -> None:
    if start is not None and end is not None and end < start:
        raise InvalidRangeError(f"{field} cannot be before the start date")


def _drop_nulls(updates: dict, nullable: frozenset[str]) -> dict:
    return {k: v for k, v in updates.items() if v is not None or k in nullable}


# Reads


def _member_read(member: TeamMember) -> TeamMemberRead:
    return TeamMemberRead(**member.model_dump())


def _module_read(module: ProjectModule) -> ModuleRead:
    return ModuleRead(**module.model_dump())


def _project_reads(session: Session, projects: list[Project]) -> list[ProjectRead]:
    if not projects:
        return []
    project_ids = [p.id for p in projects]
    client_ids = {p.client_id for p in projects}

    company_names = dict(
        session.exec(
            select(Client.id, Client.company_name).where(col(Client.id).in_(client_ids))
        ).all()
    )
    members: dict[int, list[TeamMemberRead]] = {pid: [] for pid in project_ids}
    for member in session.exec(
        select(TeamMember)
        .where(col(TeamMember.project_id).in_(project_ids))
        .order_by(col(TeamMember.id).asc())
    ):
        members[member.project_id].append(_member_read(member))
    modules: dict[int, list[ModuleRead]] = {pid: [] for pid in project_ids}
    for module in session.exec(
        select(ProjectModule)
        .where(col(ProjectModule.project_id).in_(project_ids))
        .order_by(col(ProjectModule.id).asc())
    ):
        modules[module.project_id].append(_module_read(module))

    return [
        ProjectRead(
            **p.model_dump(),
            client_name=company_names.get(p.client_id, ""),
            team_members=members[p.id],
            modules=modules[p.id],
        )
        for p in projects
    ]


def to_project_read(session: Session, project: Project) -> ProjectRead:
    return _project_reads(session, [project])[0]


def list_projects(session: Session, filters: ProjectFilters | None = None) -> list[ProjectRead]:
    """Projects matching every supplied filter.

    ``search`` is a case-insensitive substring match over the project name, its
    description and the owning client's company name.
    """
    filters = filters or ProjectFilters()
    statement = select(Project).join(Client, col(Client.id) == col(Project.client_id))
    if filters.client_id is not None:
        statement = statement.where(col(Project.client_id) == filters.client_id)
    if filters.status:
        statement = statement.where(func.lower(col(Project.status)) == filters.status.lower())
    if filters.search and filters.search.strip():
        term = filters.search.strip().lower()
        statement = statement.where(
            or_(
                func.lower(col(Project.name)).contains(term, autoescape=True),
                func.lower(col(Project.description)).contains(term, autoescape=True),
                func.lower(col(Client.company_name)).contains(term, autoescape=True),
            )
        )
    projects = list(session.exec(statement.order_by(col(Project.id).asc())).all())
    return _project_reads(session, projects)


def get_project(session: Session, project_id: int) -> ProjectRead:
    return to_project_read(session, get_or_404(session, Project, project_id, label="Project"))


def get_team_member(session: Session, project_id: int, member_id: int) -> TeamMemberRead:
    member = session.get(TeamMember, member_id)
    if member is None or member.project_id != project_id:
        raise NotFoundError("Team member not found")
    return _member_read(member)


def get_module(session: Session, project_id: int, module_id: int) -> ModuleRead:
    module = session.get(ProjectModule, module_id)
    if module is None or module.project_id != project_id:
        raise NotFoundError("Module not found")
    return _module_read(module)


# Project lifecycle


def _require_active_client(session: Session, client_id: int) -> Client:
    client = session.get(Client, client_id)
    if client is None or not client.is_active:
        raise InvalidReferenceError("clientId must reference an existing active client")
    return client


def create_project(session: Session, payload: ProjectCreate) -> ProjectRead:
    _require_active_client(session, payload.client_id)
    team_lead = require_active_user(session, payload.team_lead_id, field="teamLeadId")
    _validate_not_before(payload.start_date, payload.expected_end_date, field="expectedEndDate")

    now = utcnow()
    project = Project(
        name=payload.name,
        description=payload.description,
        client_id=payload.client_id,
        start_date=payload.start_date,
        expected_end_date=payload.expected_end_date,
        team_lead_id=team_lead.id,
        team_lead_name=payload.team_lead_name or team_lead.username,
        tech_stack=payload.tech_stack,
        status=PROJECT_STATUS_ONGOING,
        progress_percentage=0,
        created_at=now,
        updated_at=now,
    )
    project = save(session, project, conflict_detail="Project violates constraints")
    logger.info("project.created project_id=%s client_id=%s", project.id, project.client_id)
    return to_project_read(session, project)


def update_project(session: Session, project_id: int, payload: ProjectUpdate) -> ProjectRead:
    project = get_or_404(session, Project, project_id, label="Project")

    updates = _drop_nulls(payload.model_dump(exclude_unset=True), _NULLABLE_PROJECT_FIELDS)
    if "progress_percentage" in updates:
        validate_progress(updates["progress_percentage"])
    if "expected_end_date" in updates:
        _validate_not_before(project.start_date, updates["expected_end_date"], field="expectedEndDate")
    if "actual_end_date" in updates:
        _validate_not_before(project.start_date, updates["actual_end_date"], field="actualEndDate")

    for key, value in updates.items():
        setattr(project, key, value)
    project.updated_at = utcnow()

    project = save(session, project, conflict_detail="Project violates constraints")
    logger.info("project.updated project_id=%s fields=%s", project.id, sorted(updates))
    return to_project_read(session, project)


def update_progress(session: Session, project_id: int, progress: int) -> ProjectRead:
    project = get_or_404(session, Project, project_id, label="Project")
    validate_progress(progress)

    project.progress_percentage = progress
    project.updated_at = utcnow()
    project = save(session, project, conflict_detail="Project violates constraints")
    logger.info("project.progress project_id=%s progress=%s", project.id, progress)
    return to_project_read(session, project)


def delete_project(session: Session, project_id: int) -> ProjectDeletion:
    project = get_or_404(session, Project, project_id, label="Project")

    # Modules reference team members, so they go first.
    deleted_modules = session.execute(
        delete(ProjectModule).where(col(ProjectModule.project_id) == project.id)
    ).rowcount
    deleted_members = session.execute(
        delete(TeamMember).where(col(TeamMember.project_id) == project.id)
    ).rowcount
    session.delete(project)
    session.commit()

    logger.info(
        "project.deleted project_id=%s team_members=%s modules=%s",
        project_id,
        deleted_members,
        deleted_modules,
    )
    return ProjectDeletion(
        project_id=project_id,
        deleted_team_members=deleted_members,
        deleted_modules=deleted_modules,
    )


# Team members


def add_team_member(session: Session, project_id: int, payload: TeamMemberCreate) -> TeamMemberRead:
    project = get_or_404(session, Project, project_id, label="Project")
    user = require_active_user(session, payload.user_id, field="userId")

    existing = session.exec(
        select(TeamMember.id).where(
            col(TeamMember.project_id) == project.id,
            col(TeamMember.user_id) == user.id,
            col(TeamMember.is_active).is_(True),
        )
    ).first()
    if existing is not None:
        raise ConflictError("User is already an active member of this project")

    member = TeamMember(
        project_id=project.id,
        user_id=user.id,
        name=user.username,
        email=user.email,
        role=payload.role,
    )
    member = save(session, member, conflict_detail="User is already an active member of this project")
    logger.info(
        "project.team_member.added project_id=%s member_id=%s user_id=%s",
        project.id,
        member.id,
        user.id,
    )
    return _member_read(member)


# Modules


def _resolve_assignee(
    session: Session, project_id: int, assigned_to_id: int | None, assigned_to_name: str | None
) -> tuple[int | None, str]:
    """An assignee must be an active team member of the same project."""
    if assigned_to_id is None or assigned_to_id <= 0:
        return None, ""
    member = session.get(TeamMember, assigned_to_id)
    if member is None or member.project_id != project_id or not member.is_active:
        raise InvalidReferenceError("assignedToId must reference an active team member of this project")
    return member.id, assigned_to_name or member.name


def _ensure_module_name_available(
    session: Session, project_id: int, module_name: str, *, exclude_id: int | None = None
) -> None:
    statement = select(ProjectModule.id).where(
        col(ProjectModule.project_id) == project_id,
        col(ProjectModule.module_name) == module_name,
    )
    if exclude_id is not None:
        statement = statement.where(col(ProjectModule.id) != exclude_id)
    if session.exec(statement).first() is not None:
        raise ConflictError(f"Module '{module_name}' already exists in this project")


def add_module(session: Session, project_id: int, payload: ModuleCreate) -> ModuleRead:
    project = get_or_404(session, Project, project_id, label="Project")
    assigned_to_id, assigned_to_name = _resolve_assignee(
        session, project.id, payload.assigned_to_id, payload.assigned_to_name
    )
    _ensure_module_name_available(session, project.id, payload.module_name)
    _validate_not_before(payload.start_date, payload.end_date, field="endDate")

    module = ProjectModule(
        project_id=project.id,
        module_name=payload.module_name,
        description=payload.description,
        assigned_to_id=assigned_to_id,
        assigned_to_name=assigned_to_name,
        status=MODULE_STATUS_NOT_STARTED,
        progress_percentage=0,
        start_date=payload.start_date,
        end_date=payload.end_date,
    )
    module = save(
        session,
        module,
        conflict_detail=f"Module '{payload.module_name}' already exists in this project",
    )
    logger.info("project.module.added project_id=%s module_id=%s", project.id, module.id)
    return _module_read(module)


def update_module(
    session: Session, project_id: int, module_id: int, payload: ModuleUpdate
) -> ModuleRead:
    project = get_or_404(session, Project, project_id, label="Project")
    module = session.get(ProjectModule, module_id)
    if module is None or module.project_id != project.id:
        raise NotFoundError("Module not found")

    updates = _drop_nulls(payload.model_dump(exclude_unset=True), _NULLABLE_MODULE_FIELDS)
    if "module_name" in updates and updates["module_name"] != module.module_name:
        _ensure_module_name_available(session, project.id, updates["module_name"], exclude_id=module.id)
    if "progress_percentage" in updates:
        validate_progress(updates["progress_percentage"])
    if "assigned_to_id" in updates:
        updates["assigned_to_id"], updates["assigned_to_name"] = _resolve_assignee(
            session, project.id, updates["assigned_to_id"], updates.get("assigned_to_name")
        )
    elif module.assigned_to_id is None:
        updates.pop("assigned_to_name", None)
    _validate_not_before(
        updates.get("start_date", module.start_date),
        updates.get("end_date", module.end_date),
        field="endDate",
    )

    for key, value in updates.items():
        setattr(module, key, value)
    project.updated_at = utcnow()
    session.add(module)
    session.add(project)
    commit_or_conflict(session, detail=f"Module '{module.module_name}' already exists in this project")
    session.refresh(module)

    logger.info(
        "project.module.updated project_id=%s module_id=%s fields=%s",
        project.id,
        module.id,
        sorted(updates),
    )
    return _module_read(module)
