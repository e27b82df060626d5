"""Pydantic schemas for profile setup endpoints.

Field names follow the JSON bodies the setup form already sends
(camelCase), mapped onto snake_case attributes through aliases.
"""

from datetime import UTC, datetime
from typing import Any
from uuid import UUID

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator


class IssueInvitationRequest(BaseModel):
    """Request schema for POST /profile-setup/issue-invitation."""

    model_config = ConfigDict(populate_by_name=True)

    email: EmailStr = Field(..., description="Address to send the setup link to")
    base_url: str = Field(..., alias="baseUrl", min_length=1, description="Frontend base URL")


class TokenRequest(BaseModel):
    """Request schema carrying only an invitation token."""

    token: str = Field(..., min_length=1, description="Invitation token from the setup link")


class InvitationTokenResponse(BaseModel):
    """Token record returned by POST /profile-setup/validate-invitation."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID = Field(..., description="Token record identifier")
    token: str = Field(..., description="Invitation token")
    email: str = Field(..., description="Invited email address")
    expiration: datetime = Field(..., description="Absolute expiration timestamp")

    @field_validator("expiration")
    @classmethod
    def _assume_utc(cls, v: datetime) -> datetime:
        # some backends hand back naive UTC timestamps
        return v if v.tzinfo else v.replace(tzinfo=UTC)


class PrivacySettings(BaseModel):
    email: bool = True
    phone_number: bool = Field(True, alias="phoneNumber")

    model_config = ConfigDict(populate_by_name=True)


class RedeemInvitationRequest(BaseModel):
    """Profile fields submitted with the token to complete setup.

    The account is always created for the token's email; ``email`` is
    accepted for form compatibility only.
    """

    model_config = ConfigDict(populate_by_name=True)

    token: str = Field(..., min_length=1)
    first_name: str = Field(..., alias="firstName", min_length=1, max_length=100)
    last_name: str = Field(..., alias="lastName", min_length=1, max_length=100)
    job_title: str | None = Field(None, alias="jobTitle")
    phone_number: str | None = Field(None, alias="phoneNumber")
    weekly_committed_hours: float = Field(0, alias="weeklycommittedHours", ge=0)
    email: str | None = None
    password: str = Field(..., min_length=1)
    collaboration_preference: str | None = Field(None, alias="collaborationPreference")
    time_zone: str | None = Field(None, alias="timeZone")
    location: dict[str, Any] | str | None = None
    privacy_settings: PrivacySettings = Field(default_factory=PrivacySettings, alias="privacySettings")


class SessionTokenResponse(BaseModel):
    """Signed session credential returned after redemption."""

    token: str = Field(..., description="Signed session credential")


class TimeZoneKeyResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    user_api_key: str | None = Field(None, alias="userAPIKey")
