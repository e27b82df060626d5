"""Enumerations for account roles."""

from enum import Enum


class AccountRole(str, Enum):
    """Account role enumeration.

    Self-service profile setup always produces a VOLUNTEER. Only OWNER and
    ADMINISTRATOR may schedule reasons for other users.
    """

    VOLUNTEER = "Volunteer"
    MENTOR = "Mentor"
    MANAGER = "Manager"
    ASSISTANT_MANAGER = "Assistant Manager"
    CORE_TEAM = "Core Team"
    ADMINISTRATOR = "Administrator"
    OWNER = "Owner"

    @property
    def can_schedule_reasons(self) -> bool:
        return self in (AccountRole.OWNER, AccountRole.ADMINISTRATOR)


class WeeklySummaryOption(str, Enum):
    REQUIRED = "Required"
    NOT_REQUIRED = "Not Required"
    TEAM = "Team"
