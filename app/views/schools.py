"""Pydantic schemas for School resources."""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, EmailStr, Field, field_validator

from app.views.common import validate_phone_number


class SchoolRegistrationRequest(BaseModel):
    """Payload a school administrator submits to register their school."""

    name: str = Field(..., min_length=1, max_length=120)
    email: Optional[EmailStr] = None
    address: str = Field(..., min_length=1, max_length=255)
    phoneNumber: str = Field(
        ...,
        min_length=1,
        max_length=20,
        validation_alias=AliasChoices("phoneNumber", "phone_number"),
        serialization_alias="phoneNumber",
    )
    latitude: float = Field(..., ge=-90, le=90)
    longitude: float = Field(..., ge=-180, le=180)

    @field_validator("name", "address", "phoneNumber")
    @classmethod
    def strip_required(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("Field cannot be empty")
        return value


class SchoolUpdateRequest(BaseModel):
    """Payload for editing a school's profile."""

    name: Optional[str] = Field(None, min_length=1, max_length=120)
    email: Optional[EmailStr] = None
    address: Optional[str] = Field(None, min_length=1, max_length=255)
    phoneNumber: Optional[str] = Field(
        None,
        validation_alias=AliasChoices("phoneNumber", "phone_number"),
        serialization_alias="phoneNumber",
    )
    latitude: Optional[float] = Field(None, ge=-90, le=90)
    longitude: Optional[float] = Field(None, ge=-180, le=180)
    status: Optional[str] = Field(None, min_length=1, max_length=20)

    @field_validator("phoneNumber")
    @classmethod
    def validate_phone(cls, value: Optional[str]) -> Optional[str]:
        return validate_phone_number(value)


class SchoolResponse(BaseModel):
    """Serialized representation of a School."""

    id: str
    name: str
    email: Optional[str] = None
    address: str
    phoneNumber: Optional[str] = Field(
        None,
        validation_alias=AliasChoices("phoneNumber", "phone_number"),
        serialization_alias="phoneNumber",
    )
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    totalFoodNeeded: Optional[int] = Field(
        None,
        validation_alias=AliasChoices("totalFoodNeeded", "total_food_needed"),
        serialization_alias="totalFoodNeeded",
    )
    status: str
    adminId: Optional[str] = Field(
        None,
        validation_alias=AliasChoices("adminId", "admin_id"),
        serialization_alias="adminId",
    )
    created_at: datetime

    model_config = ConfigDict(from_attributes=True, populate_by_name=True)


class NeedUpdateRequest(BaseModel):
    """Administrator override of the remaining food need."""

    totalFoodNeeded: int = Field(
        ...,
        validation_alias=AliasChoices("totalFoodNeeded", "total_food_needed"),
        serialization_alias="totalFoodNeeded",
    )


class NeedResponse(BaseModel):
    schoolId: str = Field(..., serialization_alias="schoolId")
    totalFoodNeeded: Optional[int] = Field(None, serialization_alias="totalFoodNeeded")


__all__ = [
    "NeedResponse",
    "NeedUpdateRequest",
    "SchoolRegistrationRequest",
    "SchoolResponse",
    "SchoolUpdateRequest",
]
