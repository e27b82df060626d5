"""Pydantic schemas for account information."""
from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field


class AccountResponse(BaseModel):
    """Response schema for the current account (GET /me)."""

    model_config = ConfigDict(from_attributes=True, populate_by_name=True)

    id: UUID = Field(..., description="Account unique identifier")
    email: str = Field(..., description="Account email address")
    role: str = Field(..., description="Account role")
    first_name: str = Field(..., alias="firstName")
    last_name: str = Field(..., alias="lastName")
    time_zone: str = Field(..., alias="timeZone")
    is_active: bool = Field(..., alias="isActive")
    created_at: datetime = Field(..., alias="createdAt")
