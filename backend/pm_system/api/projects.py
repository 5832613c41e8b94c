from __future__ import annotations

from fastapi import APIRouter, Depends, Query
from sqlmodel import Session

from pm_system.api.deps import AUTH_DEP, ID_PATH, SESSION_DEP
from pm_system.schemas.common import ID_MAX, ID_MIN
from pm_system.schemas.projects import (
    ModuleCreate,
    ModuleRead,
    ModuleUpdate,
    ProgressUpdate,
    ProjectCreate,
    ProjectDeleteResponse,
    ProjectRead,
    ProjectUpdate,
    TeamMemberCreate,
    TeamMemberRead,
)
from pm_system.services import projects as project_service
from pm_system.services.auth import AuthContext
from pm_system.services.projects import ProjectFilters

router = APIRouter(prefix="/projects", tags=["projects"])


def _project_filters(
    client_id: int | None = Query(default=None, alias="clientId", ge=ID_MIN, le=ID_MAX),
    status: str | None = Query(default=None),
    search: str | None = Query(default=None),
) -> ProjectFilters:
    return ProjectFilters(client_id=client_id, status=status, search=search)


FILTERS_DEP = Depends(_project_filters)


@router.get("", response_model=list[ProjectRead])
def list_projects(
    filters: ProjectFilters = FILTERS_DEP,
    session: Session = SESSION_DEP,
    _auth: AuthContext = AUTH_DEP,
) -> list[ProjectRead]:
    return project_service.list_projects(session, filters)


@router.post("", response_model=ProjectRead)
def create_project(
    payload: ProjectCreate,
    session: Session = SESSION_DEP,
    _auth: AuthContext = AUTH_DEP,
) -> ProjectRead:
    return project_service.create_project(session, payload)


@router.get("/{project_id}", response_model=ProjectRead)
def get_project(
    project_id: int = ID_PATH, session: Session = SESSION_DEP, _auth: AuthContext = AUTH_DEP
) -> ProjectRead:
    return project_service.get_project(session, project_id)


@router.put("/{project_id}", response_model=ProjectRead)
def update_project(
    payload: ProjectUpdate,
    project_id: int = ID_PATH,
    session: Session = SESSION_DEP,
    _auth: AuthContext = AUTH_DEP,
) -> ProjectRead:
    return project_service.update_project(session, project_id, payload)


@router.put("/{project_id}/progress", response_model=ProjectRead)
def update_progress(
    payload: ProgressUpdate,
    project_id: int = ID_PATH,
    session: Session = SESSION_DEP,
    _auth: AuthContext = AUTH_DEP,
) -> ProjectRead:
    return project_service.update_progress(session, project_id, payload.progress_percentage)


@router.delete("/{project_id}", response_model=ProjectDeleteResponse)
def delete_project(
    project_id: int = ID_PATH, session: Session = SESSION_DEP, _auth: AuthContext = AUTH_DEP
) -> ProjectDeleteResponse:
    result = project_service.delete_project(session, project_id)
    return ProjectDeleteResponse(
        message="Project deleted successfully",
        deleted_team_members=result.deleted_team_members,
        deleted_modules=result.deleted_modules,
    )


@router.post("/{project_id}/team-members", response_model=TeamMemberRead)
def add_team_member(
    payload: TeamMemberCreate,
    project_id: int = ID_PATH,
    session: Session = SESSION_DEP,
    _auth: AuthContext = AUTH_DEP,
) -> TeamMemberRead:
    return project_service.add_team_member(session, project_id, payload)


@router.get("/{project_id}/team-members/{member_id}", response_model=TeamMemberRead)
def get_team_member(
    project_id: int = ID_PATH,
    member_id: int = ID_PATH,
    session: Session = SESSION_DEP,
    _auth: AuthContext = AUTH_DEP,
) -> TeamMemberRead:
    return project_service.get_team_member(session, project_id, member_id)


@router.post("/{project_id}/modules", response_model=ModuleRead)
def add_module(
    payload: ModuleCreate,
    project_id: int = ID_PATH,
    session: Session = SESSION_DEP,
    _auth: AuthContext = AUTH_DEP,
) -> ModuleRead:
    return project_service.add_module(session, project_id, payload)


@router.get("/{project_id}/modules/{module_id}", response_model=ModuleRead)
def get_module(
    project_id: int = ID_PATH,
    module_id: int = ID_PATH,
    session: Session = SESSION_DEP,
    _auth: AuthContext = AUTH_DEP,
) -> ModuleRead:
    return project_service.get_module(session, project_id, module_id)


@router.put("/{project_id}/modules/{module_id}", response_model=ModuleRead)
def update_module(
    payload: ModuleUpdate,
    project_id: int = ID_PATH,
    module_id: int = ID_PATH,
    session: Session = SESSION_DEP,
    _auth: AuthContext = AUTH_DEP,
) -> ModuleRead:
    return project_service.update_module(session, project_id, module_id, payload)
