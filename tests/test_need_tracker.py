"""Need counter: clamping, atomic decrements, retries and the reset."""

from __future__ import annotations

import asyncio

import pytest
from prometheus_client import REGISTRY
from sqlalchemy import select
from sqlalchemy.exc import OperationalError

from app.errors import NotFound, RemoteFailure, ValidationError
from app.models import Donation, School
from app.models.base import new_id
from app.services import NeedTracker


def _failures():
    return REGISTRY.get_sample_value("feednet_need_decrement_failures_total") or 0


async def _need(session_factory, school_id):
    async with session_factory() as session:
        result = await session.execute(
            select(School.total_food_needed).where(School.id == school_id)
        )
        return result.scalar_one()


async def _pending_donation(session_factory, school, quantity):
    async with session_factory() as session:
        donation = Donation(
            id=new_id(),
            user_id="donor",
            food_item_id="item",
            school_id=school.id,
            quantity=quantity,
        )
        session.add(donation)
        await session.commit()
        return donation.id


async def test_set_need_rejects_negative(make_school):
    school = await make_school()
    with pytest.raises(ValidationError):
        await NeedTracker().set_need(school.id, -1)


async def test_set_need_unknown_school():
    with pytest.raises(NotFound):
        await NeedTracker().set_need("missing", 5)


async def test_set_and_get_need(make_school, session_factory):
    school = await make_school(total_food_needed=None)
    tracker = NeedTracker()

    assert await tracker.get_need(school.id) is None
    assert await tracker.set_need(school.id, 25) == 25
    assert await tracker.get_need(school.id) == 25


async def test_decrement_subtracts_exact_amount(make_school, session_factory):
    school = await make_school(total_food_needed=10)

    assert await NeedTracker().decrement_need(school.id, 4) == 6
    assert await _need(session_factory, school.id) == 6


async def test_decrement_clamps_at_zero(make_school, session_factory):
    school = await make_school(total_food_needed=3)

    assert await NeedTracker().decrement_need(school.id, 5) == 0
    assert await _need(session_factory, school.id) == 0


async def test_decrement_leaves_untracked_school_alone(make_school, session_factory):
    school = await make_school(total_food_needed=None)

    assert await NeedTracker().decrement_need(school.id, 5) is None
    assert await _need(session_factory, school.id) is None


async def test_decrement_rejects_non_positive_amount(make_school):
    school = await make_school()
    with pytest.raises(ValidationError):
        await NeedTracker().decrement_need(school.id, 0)


async def test_concurrent_decrements_never_go_negative(make_school, session_factory):
    school = await make_school(total_food_needed=10)
    tracker = NeedTracker()

    await asyncio.gather(*(tracker.decrement_need(school.id, 3) for _ in range(5)))

    assert await _need(session_factory, school.id) == 0


async def test_donation_is_applied_only_once(make_school, session_factory):
    school = await make_school(total_food_needed=10)
    donation_id = await _pending_donation(session_factory, school, 4)
    tracker = NeedTracker()

    assert await tracker.decrement_need(school.id, 4, donation_id=donation_id) == 6
    assert await tracker.decrement_need(school.id, 4, donation_id=donation_id) == 6
    assert await _need(session_factory, school.id) == 6


async def test_decrement_retries_transient_failures(make_school, monkeypatch):
    school = await make_school(total_food_needed=10)
    tracker = NeedTracker(attempts=3, backoff_seconds=0)
    real_apply = tracker._apply_decrement
    calls = {"count": 0}

    async def flaky(*args):
        calls["count"] += 1
        if calls["count"] < 3:
            raise OperationalError("UPDATE schools", {}, Exception("database is locked"))
        return await real_apply(*args)

    monkeypatch.setattr(tracker, "_apply_decrement", flaky)

    assert await tracker.decrement_need(school.id, 2) == 8
    assert calls["count"] == 3


async def test_decrement_gives_up_after_attempts(make_school, monkeypatch):
    school = await make_school(total_food_needed=10)
    tracker = NeedTracker(attempts=2, backoff_seconds=0)
    before = _failures()

    async def broken(*args):
        raise OperationalError("UPDATE schools", {}, Exception("connection lost"))

    monkeypatch.setattr(tracker, "_apply_decrement", broken)

    with pytest.raises(RemoteFailure):
        await tracker.decrement_need(school.id, 2)
    assert _failures() == before + 1


async def test_reset_zeroes_every_school_and_is_idempotent(make_school, session_factory):
    first = await make_school(total_food_needed=10)
    second = await make_school(total_food_needed=None, name="Riverside")
    tracker = NeedTracker()

    assert await tracker.reset_all_needs() == 2
    await tracker.reset_all_needs()

    assert await _need(session_factory, first.id) == 0
    assert await _need(session_factory, second.id) == 0


async def test_reset_supersedes_pending_decrements(make_school, session_factory):
    school = await make_school(total_food_needed=10)
    donation_id = await _pending_donation(session_factory, school, 4)
    tracker = NeedTracker()

    await tracker.reset_all_needs()
    await tracker.set_need(school.id, 10)

    assert await tracker.reconcile_pending() == 0
    assert await _need(session_factory, school.id) == 10
    async with session_factory() as session:
        donation = await session.get(Donation, donation_id)
        assert donation.need_applied is True


async def test_reconcile_pending_applies_each_donation_once(make_school, session_factory):
    school = await make_school(total_food_needed=10)
    await _pending_donation(session_factory, school, 4)
    tracker = NeedTracker()

    assert await tracker.reconcile_pending() == 1
    assert await tracker.reconcile_pending() == 0
    assert await _need(session_factory, school.id) == 6
