"""Food item edits; ownership is checked against the caller's school."""

from __future__ import annotations

from fastapi import APIRouter, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.controllers.dependencies import CurrentPrincipalDep, SessionDep
from app.errors import NotFound
from app.models.food_item import FoodItem as FoodItemModel
from app.services import Action, Principal, authorize
from app.views import FoodItemResponse, FoodItemUpdateRequest

router = APIRouter(prefix="/food-items", tags=["food-items"])


async def _get_owned_item(
    session: AsyncSession,
    principal: Principal,
    item_id: str,
) -> FoodItemModel:
    item = await session.get(FoodItemModel, item_id)
    if item is None:
        raise NotFound("Food item not found")
    authorize(principal, Action.MANAGE_FOOD_ITEMS, school_id=item.school_id)
    return item


@router.put("/{item_id}", response_model=FoodItemResponse)
async def update_food_item(
    item_id: str,
    payload: FoodItemUpdateRequest,
    session: SessionDep,
    principal: CurrentPrincipalDep,
) -> FoodItemResponse:
    item = await _get_owned_item(session, principal, item_id)

    if payload.name is not None:
        item.name = payload.name.strip()
    if "description" in payload.model_fields_set:
        item.description = (payload.description or "").strip() or None

    await session.commit()
    return FoodItemResponse.model_validate(item)


@router.delete("/{item_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_food_item(
    item_id: str,
    session: SessionDep,
    principal: CurrentPrincipalDep,
) -> Response:
    item = await _get_owned_item(session, principal, item_id)
    await session.delete(item)
    await session.commit()
    return Response(status_code=status.HTTP_204_NO_CONTENT)
