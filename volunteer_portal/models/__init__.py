"""SQLAlchemy models."""

from volunteer_portal.models.account import Account, account_projects
from volunteer_portal.models.base import Base, BaseModel
from volunteer_portal.models.enums import AccountRole, WeeklySummaryOption
from volunteer_portal.models.invitation_token import InvitationToken
from volunteer_portal.models.project import Project
from volunteer_portal.models.reason import Reason

__all__ = [
    "Base",
    "BaseModel",
    "AccountRole",
    "WeeklySummaryOption",
    "Account",
    "account_projects",
    "Project",
    "InvitationToken",
    "Reason",
]
