"""Pydantic schemas for food items."""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field


class FoodItemCreateRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=120)
    description: Optional[str] = Field(None, max_length=2000)


class FoodItemUpdateRequest(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=120)
    description: Optional[str] = Field(None, max_length=2000)


class FoodItemResponse(BaseModel):
    id: str
    name: str
    description: Optional[str] = None
    schoolId: str = Field(
        ...,
        validation_alias=AliasChoices("schoolId", "school_id"),
        serialization_alias="schoolId",
    )
    currentQuantity: int = Field(
        0,
        validation_alias=AliasChoices("currentQuantity", "current_quantity"),
        serialization_alias="currentQuantity",
    )
    created_at: datetime

    model_config = ConfigDict(from_attributes=True, populate_by_name=True)


__all__ = ["FoodItemCreateRequest", "FoodItemResponse", "FoodItemUpdateRequest"]
