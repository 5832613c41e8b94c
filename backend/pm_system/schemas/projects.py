from __future__ import annotations

from datetime import datetime

from sqlmodel import Field

from pm_system.schemas.common import ID_MAX, ID_MIN, APIModel


class ProjectCreate(APIModel):
    name: str
    description: str = ""
    client_id: int = Field(ge=ID_MIN, le=ID_MAX)
    start_date: datetime
    expected_end_date: datetime | None = None
    team_lead_id: int = Field(ge=ID_MIN, le=ID_MAX)
    team_lead_name: str = ""
    tech_stack: str = ""


class ProjectUpdate(APIModel):
    name: str | None = None
    description: str | None = None
    expected_end_date: datetime | None = None
    actual_end_date: datetime | None = None
    status: str | None = None
    progress_percentage: int | None = None
    tech_stack: str | None = None


class ProgressUpdate(APIModel):
    progress_percentage: int


class TeamMemberCreate(APIModel):
    user_id: int = Field(ge=ID_MIN, le=ID_MAX)
    role: str = ""


class ModuleCreate(APIModel):
    module_name: str
    description: str = ""
    assigned_to_id: int | None = Field(default=None, ge=ID_MIN, le=ID_MAX)
    assigned_to_name: str = ""
    start_date: datetime | None = None
    end_date: datetime | None = None


class ModuleUpdate(APIModel):
    module_name: str | None = None
    description: str | None = None
    assigned_to_id: int | None = Field(default=None, ge=ID_MIN, le=ID_MAX)
    assigned_to_name: str | None = None
    status: str | None = None
    progress_percentage: int | None = None
    start_date: datetime | None = None
    end_date: datetime | None = None


class TeamMemberRead(APIModel):
    id: int
    project_id: int
    user_id: int
    name: str
    email: str
    role: str
    joined_date: datetime
    is_active: bool


class ModuleRead(APIModel):
    id: int
    project_id: int
    module_name: str
    description: str
    assigned_to_id: int | None
    assigned_to_name: str
    status: str
    progress_percentage: int
    start_date: datetime | None
    end_date: datetime | None


class ProjectRead(APIModel):
    id: int
    name: str
    description: str
    client_id: int
    client_name: str
    start_date: datetime
    expected_end_date: datetime | None
    actual_end_date: datetime | None
    status: str
    progress_percentage: int
    team_lead_id: int
    team_lead_name: str
    tech_stack: str
    created_at: datetime
    updated_at: datetime
    team_members: list[TeamMemberRead] = []
    modules: list[ModuleRead] = []


class ProjectDeleteResponse(APIModel):
    message: str
    deleted_team_members: int
    deleted_modules: int
