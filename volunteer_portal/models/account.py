"""Account model."""
from sqlalchemy import JSON, Boolean, Column, Float, ForeignKey, Integer, String, Table, Text
from sqlalchemy import Enum as SQLEnum
from sqlalchemy import Uuid
from sqlalchemy.orm import relationship

from volunteer_portal.models.base import Base, BaseModel
from volunteer_portal.models.enums import AccountRole, WeeklySummaryOption

account_projects = Table(
    "account_projects",
    Base.metadata,
    Column("account_id", Uuid(as_uuid=True), ForeignKey("accounts.id", ondelete="CASCADE"), primary_key=True),
    Column("project_id", Uuid(as_uuid=True), ForeignKey("projects.id", ondelete="CASCADE"), primary_key=True),
)


def default_permissions() -> dict:
    return {"frontPermissions": [], "backPermissions": []}


class Account(BaseModel):
    """Volunteer account (user profile).

    Self-setup accounts are created exactly once, when an invitation token is
    redeemed. The email address is unique across all accounts.
    """

    __tablename__ = "accounts"

    email = Column(String(255), nullable=False, unique=True, index=True)
    password_hash = Column(String(255), nullable=False)
    role = Column(
        SQLEnum(AccountRole, name="account_role", values_callable=lambda x: [e.value for e in x]),
        nullable=False,
        default=AccountRole.VOLUNTEER,
    )
    is_active = Column(Boolean, nullable=False, default=True)

    first_name = Column(String(100), nullable=False)
    last_name = Column(String(100), nullable=False)
    job_title = Column(String(255), nullable=True)
    phone_number = Column(String(50), nullable=True)
    weekly_committed_hours = Column(Float, nullable=False, default=0)
    collaboration_preference = Column(String(255), nullable=True)
    time_zone = Column(String(64), nullable=False, default="America/Los_Angeles")
    location = Column(JSON, nullable=True)
    privacy_settings = Column(JSON, nullable=False, default=dict)
    permissions = Column(JSON, nullable=False, default=default_permissions)

    bio = Column(Text, nullable=False, default="")
    bio_posted = Column(String(32), nullable=False, default="default")
    personal_links = Column(JSON, nullable=False, default=list)
    admin_links = Column(JSON, nullable=False, default=list)
    weekly_summaries = Column(JSON, nullable=False, default=list)
    weekly_summaries_count = Column(Integer, nullable=False, default=0)
    weekly_summary_option = Column(
        String(32), nullable=False, default=WeeklySummaryOption.REQUIRED.value
    )
    media_url = Column(String(1024), nullable=False, default="")
    team_code = Column(String(16), nullable=False, default="")

    # Relationships
    projects = relationship("Project", secondary=account_projects, lazy="selectin")
    reasons = relationship(
        "Reason", back_populates="account", cascade="all, delete-orphan", passive_deletes=True
    )

    def __repr__(self) -> str:
        return f"<Account(id={self.id}, email={self.email}, role={self.role})>"
