"""Pydantic schemas related to authentication."""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, EmailStr, Field


class LoginRequest(BaseModel):
    """Credentials submitted to obtain an access token."""

    email: EmailStr
    password: str = Field(min_length=1, max_length=128)


class TokenResponse(BaseModel):
    """Standard access token response body."""

    access_token: str = Field(serialization_alias="accessToken")
    token_type: str = Field(default="bearer", serialization_alias="tokenType")
    expires_in: int = Field(
        default=0,
        serialization_alias="expiresIn",
        description="Seconds until the token expires",
    )
    user_id: str = Field(serialization_alias="userId")
    role: Optional[str] = Field(default=None, serialization_alias="role")
    name: Optional[str] = Field(default=None, serialization_alias="name")
    school_id: Optional[str] = Field(default=None, serialization_alias="schoolId")
    is_super_admin: bool = Field(default=False, serialization_alias="isSuperAdmin")


class ForgotPasswordRequest(BaseModel):
    """Request payload for password recovery."""

    email: EmailStr


class ForgotPasswordResponse(BaseModel):
    """Response payload for password recovery attempts."""

    exists: bool
    message: str


__all__ = [
    "LoginRequest",
    "TokenResponse",
    "ForgotPasswordRequest",
    "ForgotPasswordResponse",
]
