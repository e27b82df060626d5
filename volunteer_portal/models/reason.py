"""Scheduled reason model."""
from sqlalchemy import Column, DateTime, ForeignKey, Text, UniqueConstraint, Uuid
from sqlalchemy.orm import relationship

from volunteer_portal.models.base import BaseModel


class Reason(BaseModel):
    """Justification attached to one Sunday for one account.

    ``date`` is the start of that Sunday in the reference time zone, stored
    as a UTC instant.
    """

    __tablename__ = "reasons"

    user_id = Column(
        Uuid(as_uuid=True),
        ForeignKey("accounts.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    date = Column(DateTime(timezone=True), nullable=False)
    reason = Column(Text, nullable=False)

    account = relationship("Account", back_populates="reasons")

    __table_args__ = (UniqueConstraint("user_id", "date", name="uq_reasons_user_date"),)

    def __repr__(self) -> str:
        return f"<Reason(id={self.id}, user_id={self.user_id}, date={self.date})>"
