"""Invitation token model."""
from sqlalchemy import Column, DateTime, String

from volunteer_portal.models.base import BaseModel


class InvitationToken(BaseModel):
    """Single-use, time-limited profile setup token.

    At most one token exists per email (unique constraint). Tokens are never
    updated: a new issuance replaces the row and redemption deletes it.
    Expiration is checked when the token is read; stale rows are inert.
    """

    __tablename__ = "invitation_tokens"

    token = Column(String(64), nullable=False, unique=True, index=True)
    email = Column(String(255), nullable=False, unique=True, index=True)
    expiration = Column(DateTime(timezone=True), nullable=False)

    def __repr__(self) -> str:
        return f"<InvitationToken(id={self.id}, email={self.email})>"
