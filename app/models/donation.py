"""SQLAlchemy model for donations submitted by donors."""

from __future__ import annotations

from sqlalchemy import Boolean, Column, DateTime, Integer, String, Text

from app.models.base import Base, new_id
from app.utils.clock import utcnow


class Donation(Base):
    """A single donation.

    References to the donor, school and food item are plain identifiers: the
    donation history outlives deleted accounts and food items.
    """

    __tablename__ = "donations"

    id = Column(String(32), primary_key=True, default=new_id)
    user_id = Column(String(32), nullable=False, index=True)
    food_item_id = Column(String(32), nullable=False, index=True)
    school_id = Column(String(32), nullable=False, index=True)
    quantity = Column(Integer, nullable=False)
    note = Column(Text, nullable=True)
    status = Column(String(20), nullable=False, default="pending")
    need_applied = Column(Boolean, nullable=False, default=False, index=True)
    created_at = Column(DateTime, nullable=False, default=utcnow, index=True)


__all__ = ["Donation"]
