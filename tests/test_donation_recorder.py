"""Donation submission: validation, capacity check and counter sync."""

from __future__ import annotations

import asyncio

import pytest
from sqlalchemy import func, select

from app.errors import (
    CapacityExceeded,
    NotAuthenticated,
    NotFound,
    RemoteFailure,
    ValidationError,
)
from app.models import Donation, School
from app.services import DonationRecorder, NeedTracker


async def _donation_count(session_factory) -> int:
    async with session_factory() as session:
        return (await session.execute(select(func.count(Donation.id)))).scalar_one()


async def _need(session_factory, school_id):
    async with session_factory() as session:
        return (await session.get(School, school_id)).total_food_needed


async def test_submit_records_donation_and_decrements(
    make_school, make_food_item, session_factory
):
    school = await make_school(total_food_needed=10)
    item = await make_food_item(school)

    receipt = await DonationRecorder().submit("donor-1", school.id, item.id, 4, " fresh ")

    assert receipt.need_synced is True
    assert receipt.remaining_need == 6
    assert await _need(session_factory, school.id) == 6
    async with session_factory() as session:
        donation = await session.get(Donation, receipt.donation_id)
    assert donation.status == "pending"
    assert donation.note == "fresh"
    assert donation.need_applied is True


async def test_quantity_equal_to_need_is_accepted(make_school, make_food_item, session_factory):
    school = await make_school(total_food_needed=5)
    item = await make_food_item(school)

    receipt = await DonationRecorder().submit("donor-1", school.id, item.id, 5)

    assert receipt.remaining_need == 0


async def test_capacity_exceeded_writes_nothing(make_school, make_food_item, session_factory):
    school = await make_school(total_food_needed=3)
    item = await make_food_item(school)

    with pytest.raises(CapacityExceeded) as excinfo:
        await DonationRecorder().submit("donor-1", school.id, item.id, 5)

    assert "Maximum donation amount is 3" in excinfo.value.message
    assert await _donation_count(session_factory) == 0
    assert await _need(session_factory, school.id) == 3


async def test_zero_need_refuses_any_donation(make_school, make_food_item):
    school = await make_school(total_food_needed=0)
    item = await make_food_item(school)

    with pytest.raises(CapacityExceeded, match="Maximum donation amount is 0"):
        await DonationRecorder().submit("donor-1", school.id, item.id, 1)


async def test_untracked_need_accepts_donation(make_school, make_food_item, session_factory):
    school = await make_school(total_food_needed=None)
    item = await make_food_item(school)

    receipt = await DonationRecorder().submit("donor-1", school.id, item.id, 50)

    assert receipt.need_synced is True
    assert receipt.remaining_need is None
    assert await _need(session_factory, school.id) is None


@pytest.mark.parametrize("quantity", [0, -3, 1.5, "4", True, None])
async def test_invalid_quantity(make_school, make_food_item, session_factory, quantity):
    school = await make_school()
    item = await make_food_item(school)

    with pytest.raises(ValidationError):
        await DonationRecorder().submit("donor-1", school.id, item.id, quantity)
    assert await _donation_count(session_factory) == 0


async def test_anonymous_donor_is_refused(make_school, make_food_item):
    school = await make_school()
    item = await make_food_item(school)

    with pytest.raises(NotAuthenticated):
        await DonationRecorder().submit(None, school.id, item.id, 1)


async def test_unknown_school_and_item(make_school, make_food_item):
    school = await make_school()
    item = await make_food_item(school)
    recorder = DonationRecorder()

    with pytest.raises(NotFound, match="School"):
        await recorder.submit("donor-1", "missing", item.id, 1)
    with pytest.raises(NotFound, match="Food item"):
        await recorder.submit("donor-1", school.id, "missing", 1)


async def test_item_from_another_school(make_school, make_food_item):
    school = await make_school()
    other = await make_school(name="Other School")
    item = await make_food_item(other)

    with pytest.raises(ValidationError):
        await DonationRecorder().submit("donor-1", school.id, item.id, 1)


class FailingTracker(NeedTracker):
    async def decrement_need(self, school_id, amount, *, donation_id=None):
        raise RemoteFailure("store unavailable")


async def test_failed_decrement_keeps_donation_for_reconciliation(
    make_school, make_food_item, session_factory
):
    school = await make_school(total_food_needed=None)
    item = await make_food_item(school)

    receipt = await DonationRecorder(need_tracker=FailingTracker()).submit(
        "donor-1", school.id, item.id, 4
    )

    assert receipt.need_synced is False
    assert receipt.remaining_need is None
    async with session_factory() as session:
        donation = await session.get(Donation, receipt.donation_id)
    assert donation.need_applied is False

    tracker = NeedTracker()
    await tracker.set_need(school.id, 10)
    assert await tracker.reconcile_pending() == 1
    assert await _need(session_factory, school.id) == 6


async def test_concurrent_submits_cannot_overshoot_need(
    make_school, make_food_item, session_factory
):
    school = await make_school(total_food_needed=10)
    item = await make_food_item(school)
    recorder = DonationRecorder()

    results = await asyncio.gather(
        recorder.submit("donor-1", school.id, item.id, 6),
        recorder.submit("donor-2", school.id, item.id, 6),
        return_exceptions=True,
    )

    receipts = [r for r in results if not isinstance(r, BaseException)]
    refusals = [r for r in results if isinstance(r, CapacityExceeded)]
    assert len(receipts) == 1
    assert len(refusals) == 1
    assert "Maximum donation amount is 4" in refusals[0].message
    assert receipts[0].remaining_need == 4
    assert await _donation_count(session_factory) == 1
    assert await _need(session_factory, school.id) == 4


async def test_tracked_donation_is_applied_without_reconciliation(
    make_school, make_food_item, session_factory
):
    school = await make_school(total_food_needed=10)
    item = await make_food_item(school)

    receipt = await DonationRecorder(need_tracker=FailingTracker()).submit(
        "donor-1", school.id, item.id, 4
    )

    assert receipt.need_synced is True
    assert receipt.remaining_need == 6
    assert await NeedTracker().reconcile_pending() == 0
