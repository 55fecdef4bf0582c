"""Pydantic schemas for user profiles and account administration."""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import (
    AliasChoices,
    BaseModel,
    ConfigDict,
    EmailStr,
    Field,
    field_validator,
)

from app.models.user import UserRole
from app.views.schools import SchoolResponse
from app.views.common import validate_phone_number


class UserRegistrationRequest(BaseModel):
    """Sign-up payload for donors and school administrators."""

    name: str = Field(..., min_length=1, max_length=120)
    email: EmailStr
    password: str = Field(..., min_length=6, max_length=128)
    phone: str = Field(..., min_length=1, max_length=20)

    @field_validator("name", "phone")
    @classmethod
    def validate_required(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("Field cannot be empty")
        return value


class UserResponse(BaseModel):
    """General user response model."""

    id: str
    name: str
    email: EmailStr
    phone: Optional[str] = None
    role: UserRole
    schoolId: Optional[str] = Field(
        None,
        validation_alias=AliasChoices("schoolId", "school_id"),
        serialization_alias="schoolId",
    )
    school: Optional[SchoolResponse] = None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True, populate_by_name=True)


class UserRegistrationResponse(UserResponse):
    message: str


class ProfileUpdateRequest(BaseModel):
    """Fields a user may change on their own profile."""

    name: Optional[str] = Field(None, min_length=1, max_length=120)
    phone: Optional[str] = Field(None, min_length=1, max_length=20)


class AdminUserUpdateRequest(BaseModel):
    """Super administrator edit of any user."""

    name: Optional[str] = Field(None, min_length=1, max_length=120)
    email: Optional[EmailStr] = None
    phone: Optional[str] = None

    @field_validator("phone")
    @classmethod
    def validate_phone(cls, value: Optional[str]) -> Optional[str]:
        return validate_phone_number(value)


class AccountDeletionResponse(BaseModel):
    success: bool
    message: str
    profileDeleted: bool = Field(
        ...,
        validation_alias=AliasChoices("profileDeleted", "profile_deleted"),
        serialization_alias="profileDeleted",
    )
    identityDeleted: bool = Field(
        ...,
        validation_alias=AliasChoices("identityDeleted", "identity_deleted"),
        serialization_alias="identityDeleted",
    )

    model_config = ConfigDict(from_attributes=True, populate_by_name=True)


__all__ = [
    "AccountDeletionResponse",
    "AdminUserUpdateRequest",
    "ProfileUpdateRequest",
    "UserRegistrationRequest",
    "UserRegistrationResponse",
    "UserResponse",
]
