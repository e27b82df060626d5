"""Pydantic schemas for reason scheduling endpoints."""

from pydantic import BaseModel, ConfigDict, Field


class ReasonData(BaseModel):
    """Date and justification of a scheduled reason.

    ``date`` is an ISO 8601 date or datetime; values without an offset are
    read in the reference time zone.
    """

    date: str = Field(..., description="Sunday the reason applies to")
    message: str = Field("", description="Justification text")


class ReasonRequest(BaseModel):
    """Body of create, update and delete requests."""

    model_config = ConfigDict(populate_by_name=True)

    reason_data: ReasonData = Field(..., alias="reasonData")


class ReasonResponse(BaseModel):
    """A scheduled reason, or the unset sentinel when none exists."""

    model_config = ConfigDict(populate_by_name=True, extra="forbid")

    id: str | None = None
    reason: str = ""
    date: str = ""
    user_id: str = Field("", alias="userId")
    is_set: bool = Field(False, alias="isSet")


class ReasonListResponse(BaseModel):
    model_config = ConfigDict(extra="forbid")

    reasons: list[ReasonResponse] = Field(default_factory=list)


class MessageResponse(BaseModel):
    message: str
