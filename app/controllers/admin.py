"""Super administrator console."""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Query
from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError

from app.controllers.dependencies import (
    AccountServiceDep,
    BearerTokenDep,
    CurrentPrincipalDep,
    SessionDep,
)
from app.controllers.schools import apply_school_update, get_school_or_404
from app.errors import NotFound, ValidationError
from app.models.identity import Identity
from app.models.school import School as SchoolModel
from app.models.user import User as UserModel
from app.services import Action, authorize
from app.services.reporting import list_all_donations, list_users_with_totals, search_donors
from app.views import (
    AccountDeletionResponse,
    AdminUserUpdateRequest,
    DonationResponse,
    DonorSummaryResponse,
    SchoolResponse,
    SchoolUpdateRequest,
    UserResponse,
)

router = APIRouter(prefix="/admin", tags=["admin"])


@router.get("/schools", response_model=list[SchoolResponse])
async def list_all_schools(
    session: SessionDep,
    principal: CurrentPrincipalDep,
) -> list[SchoolResponse]:
    authorize(principal, Action.ADMINISTER)
    result = await session.execute(select(SchoolModel).order_by(SchoolModel.name))
    return [SchoolResponse.model_validate(school) for school in result.scalars().all()]


@router.get("/users", response_model=list[DonorSummaryResponse])
async def list_all_users(
    session: SessionDep,
    principal: CurrentPrincipalDep,
    search: Optional[str] = Query(None, max_length=120),
) -> list[DonorSummaryResponse]:
    authorize(principal, Action.ADMINISTER)
    summaries = search_donors(await list_users_with_totals(session), search)
    return [DonorSummaryResponse.model_validate(summary) for summary in summaries]


@router.get("/donations", response_model=list[DonationResponse])
async def list_every_donation(
    session: SessionDep,
    principal: CurrentPrincipalDep,
) -> list[DonationResponse]:
    authorize(principal, Action.ADMINISTER)
    records = await list_all_donations(session)
    return [DonationResponse.model_validate(record) for record in records]


@router.put("/schools/{school_id}", response_model=SchoolResponse)
async def edit_school(
    school_id: str,
    payload: SchoolUpdateRequest,
    session: SessionDep,
    principal: CurrentPrincipalDep,
) -> SchoolResponse:
    authorize(principal, Action.ADMINISTER)
    school = await get_school_or_404(session, school_id)
    apply_school_update(school, payload)
    await session.commit()
    return SchoolResponse.model_validate(school)


@router.put("/users/{user_id}", response_model=UserResponse)
async def edit_user(
    user_id: str,
    payload: AdminUserUpdateRequest,
    session: SessionDep,
    principal: CurrentPrincipalDep,
) -> UserResponse:
    """Edit a profile; the sign-in email follows the profile email."""

    authorize(principal, Action.ADMINISTER)
    db_user = await session.get(UserModel, user_id)
    if db_user is None:
        raise NotFound("User not found")

    if payload.name is not None:
        db_user.name = payload.name.strip()
    if payload.phone is not None:
        db_user.phone = payload.phone
    if payload.email is not None:
        email = str(payload.email).strip().lower()
        taken = await session.execute(
            select(Identity.id).where(
                func.lower(Identity.email) == email, Identity.id != user_id
            )
        )
        if taken.first() is not None:
            raise ValidationError("This email is already registered")
        db_user.email = email
        identity = await session.get(Identity, user_id)
        if identity is not None:
            identity.email = email

    try:
        await session.commit()
    except IntegrityError as exc:
        await session.rollback()
        raise ValidationError("This email is already registered") from exc
    return UserResponse.model_validate(db_user)


@router.delete("/users/{user_id}", response_model=AccountDeletionResponse)
async def delete_user(
    user_id: str,
    token: BearerTokenDep,
    principal: CurrentPrincipalDep,
    accounts: AccountServiceDep,
) -> AccountDeletionResponse:
    """Delete the profile, then the sign-in account.

    A partial outcome is reported as an error carrying the full result.
    """

    authorize(principal, Action.ADMINISTER)
    result = await accounts.delete_account(user_id, token)
    result.raise_for_partial()
    return AccountDeletionResponse.model_validate(result)
