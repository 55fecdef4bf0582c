"""Validate and record donations, then hand the decrement to the need tracker."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from app.database import SessionFactory, session_scope
from app.errors import (
    NotAuthenticated,
    NotFound,
    RemoteFailure,
    ValidationError,
)
from app.models.base import new_id
from app.models.donation import Donation
from app.models.food_item import FoodItem
from app.models.school import School
from app.services.need_tracker import NeedTracker
from app.telemetry import record_donation
from app.utils.clock import utcnow

logger = logging.getLogger("app.services.donation_recorder")


@dataclass(slots=True)
class DonationReceipt:
    """Outcome of a submitted donation.

    ``need_synced`` is false when the donation was stored but the school's
    counter could not be lowered yet; the scheduler reconciles it later.
    """

    donation_id: str
    remaining_need: Optional[int]
    need_synced: bool


def _require_positive_quantity(quantity: Any) -> int:
    if isinstance(quantity, bool) or not isinstance(quantity, int) or quantity <= 0:
        raise ValidationError("Please enter a valid quantity")
    return quantity


class DonationRecorder:
    def __init__(
        self,
        need_tracker: NeedTracker | None = None,
        session_factory: async_sessionmaker[AsyncSession] | None = None,
    ) -> None:
        self._session_factory = session_factory or SessionFactory
        self._need_tracker = need_tracker or NeedTracker(self._session_factory)

    async def submit(
        self,
        donor_id: Optional[str],
        school_id: str,
        food_item_id: str,
        quantity: Any,
        note: Optional[str] = None,
    ) -> DonationReceipt:
        """Record one donation.

        A tracked need is lowered in the same transaction as the insert, so a
        donation larger than what remains is refused before anything is
        written, even under concurrent submits. Once written, a donation is
        never rolled back, even when a later counter update fails.
        """

        if not donor_id:
            raise NotAuthenticated("You must be logged in to donate")
        if not school_id:
            raise ValidationError("Please select a school")
        if not food_item_id:
            raise ValidationError("Please select a food item")
        quantity = _require_positive_quantity(quantity)
        cleaned_note = (note or "").strip() or None

        async with session_scope(self._session_factory) as session:
            try:
                school = await session.get(School, school_id)
                if school is None:
                    raise NotFound("School not found")

                food_item = await session.get(FoodItem, food_item_id)
                if food_item is None:
                    raise NotFound("Food item not found")
                if food_item.school_id != school.id:
                    raise ValidationError(
                        "The selected food item does not belong to this school"
                    )

                reserved = await self._need_tracker.reserve_need(
                    session, school.id, quantity
                )

                donation = Donation(
                    id=new_id(),
                    user_id=donor_id,
                    school_id=school.id,
                    food_item_id=food_item.id,
                    quantity=quantity,
                    note=cleaned_note,
                    status="pending",
                    need_applied=reserved is not None,
                    created_at=utcnow(),
                )
                session.add(donation)
                await session.commit()
            except SQLAlchemyError as exc:
                await session.rollback()
                raise RemoteFailure("Could not record the donation") from exc

        record_donation(quantity)
        logger.info(
            "Donation %s recorded: donor=%s school=%s item=%s quantity=%s",
            donation.id,
            donor_id,
            school_id,
            food_item_id,
            quantity,
        )

        if reserved is not None:
            return DonationReceipt(
                donation_id=donation.id, remaining_need=reserved, need_synced=True
            )

        # Untracked at insert time; a need set since then is caught up here.
        try:
            remaining = await self._need_tracker.decrement_need(
                school_id, quantity, donation_id=donation.id
            )
        except RemoteFailure:
            logger.error(
                "Donation %s stored but school %s need is stale; left for reconciliation",
                donation.id,
                school_id,
            )
            return DonationReceipt(
                donation_id=donation.id, remaining_need=None, need_synced=False
            )

        return DonationReceipt(
            donation_id=donation.id, remaining_need=remaining, need_synced=True
        )


__all__ = ["DonationReceipt", "DonationRecorder"]
