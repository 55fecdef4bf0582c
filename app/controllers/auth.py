"""Authentication controller providing login and password recovery."""

from __future__ import annotations

from fastapi import APIRouter

from app.config.settings import settings
from app.controllers.dependencies import CurrentPrincipalDep, SessionDep
from app.models.user import User as UserModel
from app.services import is_super_admin_email
from app.services.identity import send_password_reset, sign_in
from app.telemetry import increment_login
from app.views import (
    ForgotPasswordRequest,
    ForgotPasswordResponse,
    LoginRequest,
    SuccessResponse,
    TokenResponse,
)

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/login", response_model=TokenResponse)
async def login(
    payload: LoginRequest,
    session: SessionDep,
) -> TokenResponse:
    """Validate credentials and issue a JWT access token."""

    identity, access_token = await sign_in(session, payload.email, payload.password)
    profile = await session.get(UserModel, identity.id)

    increment_login()

    return TokenResponse(
        access_token=access_token,
        expires_in=settings.security.access_token_expires_minutes * 60,
        user_id=identity.id,
        role=profile.role.value if profile else None,
        name=profile.name if profile else None,
        school_id=profile.school_id if profile else None,
        is_super_admin=is_super_admin_email(identity.email),
    )


@router.post("/logout", response_model=SuccessResponse)
async def logout(_principal: CurrentPrincipalDep) -> SuccessResponse:
    """Tokens are stateless; the client discards its copy."""

    return SuccessResponse(message="Signed out")


@router.post("/forgot-password", response_model=ForgotPasswordResponse)
async def forgot_password(
    payload: ForgotPasswordRequest,
    session: SessionDep,
) -> ForgotPasswordResponse:
    """Generate a temporary password and email it to the requester."""

    if not await send_password_reset(session, payload.email):
        return ForgotPasswordResponse(
            exists=False,
            message="No account is registered with that email.",
        )

    return ForgotPasswordResponse(
        exists=True,
        message="A temporary password was sent to the registered email.",
    )
