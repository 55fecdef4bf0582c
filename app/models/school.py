"""SQLAlchemy model representing schools that receive donations."""

from __future__ import annotations

from sqlalchemy import CheckConstraint, Column, DateTime, Float, Integer, String

from app.models.base import Base, new_id
from app.utils.clock import utcnow


class School(Base):
    __tablename__ = "schools"

    id = Column(String(32), primary_key=True, default=new_id)
    name = Column(String(120), nullable=False, index=True)
    email = Column(String(255), nullable=True)
    address = Column(String(255), nullable=False, default="")
    phone_number = Column(String(20), nullable=True)
    latitude = Column(Float, nullable=True)
    longitude = Column(Float, nullable=True)
    # NULL means the school has never published a need.
    total_food_needed = Column(Integer, nullable=True)
    status = Column(String(20), nullable=False, default="active")
    admin_id = Column(String(32), nullable=True, index=True)
    created_at = Column(DateTime, nullable=False, default=utcnow)
    updated_at = Column(DateTime, nullable=False, default=utcnow, onupdate=utcnow)

    __table_args__ = (
        CheckConstraint(
            "total_food_needed IS NULL OR total_food_needed >= 0",
            name="ck_schools_total_food_needed_non_negative",
        ),
    )


__all__ = ["School"]
