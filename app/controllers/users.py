"""User controller: registration and the caller's own profile."""

from __future__ import annotations

from fastapi import APIRouter, status
from sqlalchemy.exc import IntegrityError

from app.controllers.dependencies import CurrentPrincipalDep, SessionDep
from app.errors import NotFound, ValidationError
from app.models.user import User as UserModel
from app.models.user import UserRole
from app.services import Action, authorize
from app.services.identity import create_account
from app.views import (
    ProfileUpdateRequest,
    UserRegistrationRequest,
    UserRegistrationResponse,
    UserResponse,
)

router = APIRouter(prefix="/users", tags=["users"])


async def _register(
    session: SessionDep,
    payload: UserRegistrationRequest,
    role: UserRole,
) -> UserRegistrationResponse:
    identity = await create_account(session, payload.email, payload.password)
    db_user = UserModel(
        id=identity.id,
        name=payload.name,
        email=identity.email,
        phone=payload.phone,
        role=role,
        school=None,
    )
    session.add(db_user)
    try:
        await session.commit()
    except IntegrityError as exc:
        await session.rollback()
        raise ValidationError("This email is already registered") from exc

    return UserRegistrationResponse(
        id=db_user.id,
        name=db_user.name,
        email=db_user.email,
        phone=db_user.phone,
        role=db_user.role,
        schoolId=None,
        school=None,
        created_at=db_user.created_at,
        message="User registered successfully",
    )


@router.post(
    "/", response_model=UserRegistrationResponse, status_code=status.HTTP_201_CREATED
)
async def register_donor(
    payload: UserRegistrationRequest,
    session: SessionDep,
) -> UserRegistrationResponse:
    return await _register(session, payload, UserRole.DONOR)


@router.post(
    "/school-admins",
    response_model=UserRegistrationResponse,
    status_code=status.HTTP_201_CREATED,
)
async def register_school_admin(
    payload: UserRegistrationRequest,
    session: SessionDep,
) -> UserRegistrationResponse:
    """Sign up a school administrator; the school itself is registered next."""

    return await _register(session, payload, UserRole.SCHOOL_ADMIN)


@router.get("/me", response_model=UserResponse)
async def get_current_user_profile(principal: CurrentPrincipalDep) -> UserResponse:
    if principal.profile is None:
        raise NotFound("Profile not found")
    return UserResponse.model_validate(principal.profile)


@router.put("/me", response_model=UserResponse)
async def update_current_user_profile(
    payload: ProfileUpdateRequest,
    session: SessionDep,
    principal: CurrentPrincipalDep,
) -> UserResponse:
    authorize(principal, Action.EDIT_USER, user_id=principal.subject)
    db_user = principal.profile
    if db_user is None:
        raise NotFound("Profile not found")

    if payload.name is not None:
        db_user.name = payload.name.strip()
    if payload.phone is not None:
        db_user.phone = payload.phone.strip()

    await session.commit()
    return UserResponse.model_validate(db_user)
