"""SQLAlchemy model for the food items a school asks donors for."""

from __future__ import annotations

from sqlalchemy import Column, DateTime, ForeignKey, Integer, String, Text

from app.models.base import Base, new_id
from app.utils.clock import utcnow


class FoodItem(Base):
    __tablename__ = "food_items"

    id = Column(String(32), primary_key=True, default=new_id)
    name = Column(String(120), nullable=False)
    description = Column(Text, nullable=True)
    school_id = Column(
        String(32),
        ForeignKey("schools.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    # Display-only running total; no flow updates it after creation.
    current_quantity = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime, nullable=False, default=utcnow)


__all__ = ["FoodItem"]
