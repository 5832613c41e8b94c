from __future__ import annotations

from datetime import datetime

from sqlmodel import Field

from pm_system.schemas.common import ID_MAX, ID_MIN, APIModel


class ClientCreate(APIModel):
    name: str
    company_name: str
    email: str
    phone: str = ""
    client_type: str = "New"
    industry: str = ""
    status: str = "Active"
    location: str = ""
    assigned_recruiter_id: int | None = Field(default=None, ge=ID_MIN, le=ID_MAX)
    assigned_recruiter_name: str = ""


class ClientUpdate(APIModel):
    name: str | None = None
    company_name: str | None = None
    email: str | None = None
    phone: str | None = None
    client_type: str | None = None
    industry: str | None = None
    status: str | None = None
    location: str | None = None
    is_active: bool | None = None
    assigned_recruiter_id: int | None = Field(default=None, ge=ID_MIN, le=ID_MAX)
    assigned_recruiter_name: str | None = None


class ClientRead(APIModel):
    id: int
    name: str
    company_name: str
    email: str
    phone: str
    client_type: str
    onboarded_date: datetime
    is_active: bool
    industry: str
    status: str
    location: str
    assigned_recruiter_id: int | None
    assigned_recruiter_name: str
    date_added: datetime
    total_projects: int = 0
    ongoing_projects: int = 0
    completed_projects: int = 0
