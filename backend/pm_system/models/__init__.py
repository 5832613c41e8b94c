from pm_system.models.clients import Client
from pm_system.models.projects import Project, ProjectModule, TeamMember
from pm_system.models.users import User

__all__ = [
    "User",
    "Client",
    "Project",
    "TeamMember",
    "ProjectModule",
]
