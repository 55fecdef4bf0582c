"""School controller: registration, profile, food need and food items."""

from __future__ import annotations

from fastapi import APIRouter, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.controllers.dependencies import (
    CurrentPrincipalDep,
    NeedTrackerDep,
    SessionDep,
)
from app.errors import NotFound
from app.models.food_item import FoodItem as FoodItemModel
from app.models.school import School as SchoolModel
from app.services import Action, authorize
from app.utils.clock import utcnow
from app.views import (
    FoodItemCreateRequest,
    FoodItemResponse,
    NeedResponse,
    NeedUpdateRequest,
    SchoolRegistrationRequest,
    SchoolResponse,
    SchoolUpdateRequest,
)

router = APIRouter(prefix="/schools", tags=["schools"])


async def get_school_or_404(session: AsyncSession, school_id: str) -> SchoolModel:
    school = await session.get(SchoolModel, school_id)
    if school is None:
        raise NotFound("School not found")
    return school


def apply_school_update(school: SchoolModel, payload: SchoolUpdateRequest) -> None:
    """Copy the fields present in ``payload`` onto ``school``."""

    if payload.name is not None:
        school.name = payload.name.strip()
    if payload.email is not None:
        school.email = str(payload.email)
    if payload.address is not None:
        school.address = payload.address.strip()
    if payload.phoneNumber is not None:
        school.phone_number = payload.phoneNumber
    if payload.latitude is not None:
        school.latitude = payload.latitude
    if payload.longitude is not None:
        school.longitude = payload.longitude
    if payload.status is not None:
        school.status = payload.status
    school.updated_at = utcnow()


@router.post("/", response_model=SchoolResponse, status_code=status.HTTP_201_CREATED)
async def register_school(
    payload: SchoolRegistrationRequest,
    session: SessionDep,
    principal: CurrentPrincipalDep,
) -> SchoolResponse:
    authorize(principal, Action.REGISTER_SCHOOL)

    school = SchoolModel(
        name=payload.name,
        email=str(payload.email) if payload.email else principal.email,
        address=payload.address,
        phone_number=payload.phoneNumber,
        latitude=payload.latitude,
        longitude=payload.longitude,
        status="active",
        admin_id=principal.subject,
    )
    session.add(school)
    if principal.profile is not None:
        principal.profile.school = school
    await session.commit()
    return SchoolResponse.model_validate(school)


@router.get("/", response_model=list[SchoolResponse])
async def list_schools(session: SessionDep) -> list[SchoolResponse]:
    result = await session.execute(select(SchoolModel).order_by(SchoolModel.name))
    return [SchoolResponse.model_validate(school) for school in result.scalars().all()]


@router.get("/{school_id}", response_model=SchoolResponse)
async def get_school(school_id: str, session: SessionDep) -> SchoolResponse:
    return SchoolResponse.model_validate(await get_school_or_404(session, school_id))


@router.put("/{school_id}", response_model=SchoolResponse)
async def update_school(
    school_id: str,
    payload: SchoolUpdateRequest,
    session: SessionDep,
    principal: CurrentPrincipalDep,
) -> SchoolResponse:
    authorize(principal, Action.MANAGE_SCHOOL, school_id=school_id)
    school = await get_school_or_404(session, school_id)
    apply_school_update(school, payload)
    await session.commit()
    return SchoolResponse.model_validate(school)


@router.get("/{school_id}/need", response_model=NeedResponse)
async def get_need(school_id: str, need_tracker: NeedTrackerDep) -> NeedResponse:
    value = await need_tracker.get_need(school_id)
    return NeedResponse(schoolId=school_id, totalFoodNeeded=value)


@router.put("/{school_id}/need", response_model=NeedResponse)
async def set_need(
    school_id: str,
    payload: NeedUpdateRequest,
    principal: CurrentPrincipalDep,
    need_tracker: NeedTrackerDep,
) -> NeedResponse:
    authorize(principal, Action.MANAGE_SCHOOL, school_id=school_id)
    value = await need_tracker.set_need(school_id, payload.totalFoodNeeded)
    return NeedResponse(schoolId=school_id, totalFoodNeeded=value)


@router.get("/{school_id}/food-items", response_model=list[FoodItemResponse])
async def list_food_items(school_id: str, session: SessionDep) -> list[FoodItemResponse]:
    await get_school_or_404(session, school_id)
    result = await session.execute(
        select(FoodItemModel)
        .where(FoodItemModel.school_id == school_id)
        .order_by(FoodItemModel.created_at.desc())
    )
    return [FoodItemResponse.model_validate(item) for item in result.scalars().all()]


@router.post(
    "/{school_id}/food-items",
    response_model=FoodItemResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_food_item(
    school_id: str,
    payload: FoodItemCreateRequest,
    session: SessionDep,
    principal: CurrentPrincipalDep,
) -> FoodItemResponse:
    authorize(principal, Action.MANAGE_FOOD_ITEMS, school_id=school_id)
    await get_school_or_404(session, school_id)

    item = FoodItemModel(
        name=payload.name.strip(),
        description=(payload.description or "").strip() or None,
        school_id=school_id,
        current_quantity=0,
    )
    session.add(item)
    await session.commit()
    return FoodItemResponse.model_validate(item)
