from __future__ import annotations

from datetime import datetime

from sqlalchemy import DateTime, Index, UniqueConstraint, text
from sqlmodel import Field, SQLModel

from pm_system.core.time import utcnow

PROJECT_STATUS_ONGOING = "Ongoing"
PROJECT_STATUS_COMPLETED = "Completed"
PROJECT_STATUS_ON_HOLD = "OnHold"

MODULE_STATUS_NOT_STARTED = "NotStarted"
MODULE_STATUS_IN_PROGRESS = "InProgress"
MODULE_STATUS_COMPLETED = "Completed"


class Project(SQLModel, table=True):
    __tablename__ = "projects"

    id: int | None = Field(default=None, primary_key=True)
    name: str = Field(index=True)
    description: str = Field(default="")
    client_id: int = Field(foreign_key="clients.id", index=True)

    start_date: datetime = Field(sa_type=DateTime(timezone=False))
    expected_end_date: datetime | None = Field(default=None, sa_type=DateTime(timezone=False))
    actual_end_date: datetime | None = Field(default=None, sa_type=DateTime(timezone=False))

    status: str = Field(default=PROJECT_STATUS_ONGOING)
    progress_percentage: int = Field(default=0)

    team_lead_id: int = Field(foreign_key="users.id", index=True)
    team_lead_name: str = Field(default="")

    tech_stack: str = Field(default="")  # comma-separated or JSON text

    created_at: datetime = Field(default_factory=utcnow, sa_type=DateTime(timezone=False))
    updated_at: datetime = Field(default_factory=utcnow, sa_type=DateTime(timezone=False))


class TeamMember(SQLModel, table=True):
    __tablename__ = "team_members"
    __table_args__ = (
        # A user holds at most one active membership per project.
        Index(
            "uq_team_members_project_user_active",
            "project_id",
            "user_id",
            unique=True,
            sqlite_where=text("is_active"),
            postgresql_where=text("is_active"),
        ),
    )

    id: int | None = Field(default=None, primary_key=True)
    project_id: int = Field(foreign_key="projects.id", ondelete="CASCADE", index=True)
    user_id: int = Field(foreign_key="users.id", index=True)

    # Snapshot of the user's profile when the membership was created.
    name: str = Field(default="")
    email: str = Field(default="")

    role: str = Field(default="")  # Developer, Designer, QA, ...
    joined_date: datetime = Field(default_factory=utcnow, sa_type=DateTime(timezone=False))
    is_active: bool = Field(default=True)


class ProjectModule(SQLModel, table=True):
    __tablename__ = "project_modules"
    __table_args__ = (
        UniqueConstraint("project_id", "module_name", name="uq_project_modules_project_id_module_name"),
    )

    id: int | None = Field(default=None, primary_key=True)
    project_id: int = Field(foreign_key="projects.id", ondelete="CASCADE", index=True)

    module_name: str
    description: str = Field(default="")
    assigned_to_id: int | None = Field(default=None, foreign_key="team_members.id", ondelete="SET NULL")
    assigned_to_name: str = Field(default="")

    status: str = Field(default=MODULE_STATUS_NOT_STARTED)
    progress_percentage: int = Field(default=0)

    start_date: datetime | None = Field(default=None, sa_type=DateTime(timezone=False))
    end_date: datetime | None = Field(default=None, sa_type=DateTime(timezone=False))
