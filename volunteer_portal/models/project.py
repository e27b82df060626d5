"""Project model."""
from sqlalchemy import Boolean, Column, String

from volunteer_portal.models.base import BaseModel


class Project(BaseModel):
    """Project an account can be a member of.

    Only the lookup by name is needed here; projects are maintained elsewhere.
    """

    __tablename__ = "projects"

    project_name = Column(String(255), nullable=False, unique=True)
    category = Column(String(100), nullable=False, default="Unspecified")
    is_active = Column(Boolean, nullable=False, default=True)

    def __repr__(self) -> str:
        return f"<Project(id={self.id}, project_name={self.project_name})>"
