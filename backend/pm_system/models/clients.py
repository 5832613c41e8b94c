from __future__ import annotations

from datetime import datetime

from sqlalchemy import DateTime
from sqlmodel import Field, SQLModel

from pm_system.core.time import utcnow


class Client(SQLModel, table=True):
    __tablename__ = "clients"

    id: int | None = Field(default=None, primary_key=True)
    name: str = Field(default="")
    company_name: str = Field(default="", index=True)
    email: str = Field(index=True, unique=True)
    phone: str = Field(default="")
    client_type: str = Field(default="New")  # New | Old
    onboarded_date: datetime = Field(default_factory=utcnow, sa_type=DateTime(timezone=False))
    is_active: bool = Field(default=True)

    industry: str = Field(default="", index=True)  # IT, Non-IT, Legal, Payroll, Training
    status: str = Field(default="Active")  # Active | Inactive
    location: str = Field(default="")
    # Recruiter name is a snapshot taken at assignment time.
    assigned_recruiter_id: int | None = Field(
        default=None, foreign_key="users.id", ondelete="SET NULL", index=True
    )
    assigned_recruiter_name: str = Field(default="")
    date_added: datetime = Field(default_factory=utcnow, sa_type=DateTime(timezone=False))
