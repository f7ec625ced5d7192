"""
Role assignment model - maps one identity to one role.
"""

from enum import Enum
from typing import Optional

from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column

from src.kernel.models.base import Base, TimestampMixin


class UserRole(str, Enum):
    """
    Roles known to the portal.

    Which of these are in use, and what each may do, depends on the active
    capability policy (three_role or two_role).
    """

    # three_role pipeline
    PROFESSOR = "professor"
    DEPARTMENT_HEAD = "department_head"
    ACADEMIC_DIRECTOR = "academic_director"
    # two_role pipeline
    AUTHOR = "author"
    REVIEWER = "reviewer"
    # both
    ADMIN = "admin"


class RoleAssignment(Base, TimestampMixin):
    """
    Role row for an identity (email).

    The role column is free text as far as the database is concerned;
    RoleDirectory normalizes it on read and never trusts it raw.
    """

    __tablename__ = "role_assignments"

    email: Mapped[str] = mapped_column(
        String(255),
        primary_key=True,
    )
    role: Mapped[str] = mapped_column(
        String(50),
        nullable=False,
    )
    assigned_by: Mapped[Optional[str]] = mapped_column(
        String(255),
        nullable=True,
    )

    def __repr__(self) -> str:
        return f"<RoleAssignment {self.email} {self.role}>"
