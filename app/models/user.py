"""SQLAlchemy model for user profiles."""

from __future__ import annotations

from enum import Enum

from sqlalchemy import Column, DateTime
from sqlalchemy import Enum as SqlEnum
from sqlalchemy import ForeignKey, String
from sqlalchemy.orm import relationship

from app.models.base import Base
from app.utils.clock import utcnow


class UserRole(str, Enum):
    """Enumeration of supported profile roles."""

    DONOR = "donor"
    SCHOOL_ADMIN = "school_admin"


class User(Base):
    """Profile record; ``id`` is the identity provider subject id."""

    __tablename__ = "users"

    id = Column(String(32), primary_key=True)
    name = Column(String(120), nullable=False)
    email = Column(String(255), nullable=False, index=True)
    phone = Column(String(20), nullable=True)
    role = Column(
        SqlEnum(UserRole, name="user_role"),
        nullable=False,
        default=UserRole.DONOR,
    )
    school_id = Column(
        String(32),
        ForeignKey("schools.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )
    school = relationship("School", lazy="joined")
    created_at = Column(DateTime, nullable=False, default=utcnow)
    updated_at = Column(DateTime, nullable=False, default=utcnow, onupdate=utcnow)


__all__ = ["User", "UserRole"]
