"""SQLAlchemy model for sign-in accounts owned by the identity provider."""

from __future__ import annotations

from sqlalchemy import Column, DateTime, String

from app.models.base import Base, new_id
from app.utils.clock import utcnow


class Identity(Base):
    __tablename__ = "identities"

    id = Column(String(32), primary_key=True, default=new_id)
    email = Column(String(255), unique=True, nullable=False, index=True)
    password_hash = Column(String(256), nullable=False)
    created_at = Column(DateTime, nullable=False, default=utcnow)


__all__ = ["Identity"]
