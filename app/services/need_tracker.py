"""Per-school remaining food need ("totalFoodNeeded") maintenance.

Every write is a single conditional UPDATE, so concurrent donations never
read-modify-write the counter. A decrement clamps at zero; the daily reset
and an in-flight decrement resolve as last write wins.
"""

from __future__ import annotations

import asyncio
import logging
from datetime import datetime

from sqlalchemy import case, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from app.config.settings import settings
from app.database import SessionFactory, session_scope
from app.errors import CapacityExceeded, NotFound, RemoteFailure, ValidationError
from app.models.donation import Donation
from app.models.school import School
from app.telemetry import record_decrement_failure, record_need_reset
from app.utils.clock import utcnow

logger = logging.getLogger("app.services.need_tracker")


class NeedTracker:
    """Owns the ``total_food_needed`` counter of every school."""

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession] | None = None,
        *,
        attempts: int | None = None,
        backoff_seconds: float | None = None,
    ) -> None:
        config = settings.need_tracker
        self._session_factory = session_factory or SessionFactory
        self._attempts = attempts or config.decrement_attempts
        self._backoff = (
            config.retry_backoff_seconds if backoff_seconds is None else backoff_seconds
        )

    async def get_need(self, school_id: str) -> int | None:
        """Return the stored counter; ``None`` when the school never set one."""

        async with session_scope(self._session_factory) as session:
            try:
                result = await session.execute(
                    select(School.id, School.total_food_needed).where(
                        School.id == school_id
                    )
                )
            except SQLAlchemyError as exc:
                raise RemoteFailure("Could not load the school's food need") from exc
            row = result.one_or_none()

        if row is None:
            raise NotFound("School not found")
        return row.total_food_needed

    async def set_need(self, school_id: str, value: int) -> int:
        """Administrator override of the counter."""

        if value < 0:
            raise ValidationError("Total food needed cannot be negative")

        async with session_scope(self._session_factory) as session:
            try:
                result = await session.execute(
                    update(School)
                    .where(School.id == school_id)
                    .values(total_food_needed=value, updated_at=utcnow())
                    .execution_options(synchronize_session=False)
                )
                await session.commit()
            except SQLAlchemyError as exc:
                await session.rollback()
                raise RemoteFailure("Could not update total food needed") from exc

        if result.rowcount == 0:
            raise NotFound("School not found")

        logger.info("School %s total food needed set to %s", school_id, value)
        return value

    async def decrement_need(
        self,
        school_id: str,
        amount: int,
        *,
        donation_id: str | None = None,
    ) -> int | None:
        """Lower the counter by ``amount`` without going below zero.

        When ``donation_id`` is given, the donation's ``need_applied`` flag is
        claimed in the same transaction; an already-applied donation is never
        decremented twice, which keeps retries safe. Returns the new value, or
        ``None`` for a school that does not track its need.
        """

        if amount <= 0:
            raise ValidationError("Amount must be a positive integer")

        last_error: SQLAlchemyError | None = None
        for attempt in range(1, self._attempts + 1):
            try:
                return await self._apply_decrement(school_id, amount, donation_id)
            except SQLAlchemyError as exc:
                last_error = exc
                logger.warning(
                    "Decrementing school %s by %s failed (attempt %s/%s): %s",
                    school_id,
                    amount,
                    attempt,
                    self._attempts,
                    exc,
                )
                if attempt < self._attempts:
                    await asyncio.sleep(self._backoff * attempt)

        record_decrement_failure()
        logger.error(
            "Giving up on decrementing school %s by %s (donation %s)",
            school_id,
            amount,
            donation_id,
        )
        raise RemoteFailure(
            "Could not update the school's remaining food need"
        ) from last_error

    async def _apply_decrement(
        self,
        school_id: str,
        amount: int,
        donation_id: str | None,
    ) -> int | None:
        async with session_scope(self._session_factory) as session:
            try:
                if donation_id is not None:
                    claimed = await session.execute(
                        update(Donation)
                        .where(
                            Donation.id == donation_id,
                            Donation.need_applied.is_(False),
                        )
                        .values(need_applied=True)
                        .execution_options(synchronize_session=False)
                    )
                    if claimed.rowcount == 0:
                        await session.rollback()
                        logger.info(
                            "Donation %s already applied to school %s",
                            donation_id,
                            school_id,
                        )
                        result = await session.execute(
                            select(School.total_food_needed).where(
                                School.id == school_id
                            )
                        )
                        return result.scalar_one_or_none()

                remaining = case(
                    (
                        School.total_food_needed > amount,
                        School.total_food_needed - amount,
                    ),
                    else_=0,
                )
                result = await session.execute(
                    update(School)
                    .where(
                        School.id == school_id,
                        School.total_food_needed.is_not(None),
                    )
                    .values(total_food_needed=remaining, updated_at=utcnow())
                    .returning(School.total_food_needed)
                    .execution_options(synchronize_session=False)
                )
                new_value = result.scalar_one_or_none()
                await session.commit()
            except SQLAlchemyError:
                await session.rollback()
                raise

        logger.info(
            "School %s need decremented by %s, now %s", school_id, amount, new_value
        )
        return new_value

    async def reserve_need(
        self, session: AsyncSession, school_id: str, amount: int
    ) -> int | None:
        """Take ``amount`` off a tracked counter inside the caller's transaction.

        The capacity check and the decrement are one conditional UPDATE, so
        two concurrent donations cannot both claim the same remaining need.
        Returns the new value, or ``None`` when the school does not track its
        need. Raises ``CapacityExceeded`` when ``amount`` is larger than what
        remains.
        """

        result = await session.execute(
            update(School)
            .where(
                School.id == school_id,
                School.total_food_needed.is_not(None),
                School.total_food_needed >= amount,
            )
            .values(
                total_food_needed=School.total_food_needed - amount,
                updated_at=utcnow(),
            )
            .returning(School.total_food_needed)
            .execution_options(synchronize_session=False)
        )
        remaining = result.scalar_one_or_none()
        if remaining is not None:
            logger.info(
                "School %s need reserved %s, now %s", school_id, amount, remaining
            )
            return remaining

        current = await session.execute(
            select(School.id, School.total_food_needed).where(School.id == school_id)
        )
        row = current.one_or_none()
        if row is None:
            raise NotFound("School not found")
        if row.total_food_needed is not None:
            raise CapacityExceeded(row.total_food_needed)
        return None

    async def apply_reset(self, session: AsyncSession, now: datetime) -> int:
        """Zero every counter inside the caller's transaction.

        Donations still waiting for their decrement are marked applied: the
        reset supersedes them.
        """

        result = await session.execute(
            update(School)
            .values(total_food_needed=0, updated_at=now)
            .execution_options(synchronize_session=False)
        )
        await session.execute(
            update(Donation)
            .where(Donation.need_applied.is_(False), Donation.created_at <= now)
            .values(need_applied=True)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount

    async def reset_all_needs(self) -> int:
        """Set every school's counter to 0. Safe to call repeatedly."""

        now = utcnow()
        async with session_scope(self._session_factory) as session:
            try:
                count = await self.apply_reset(session, now)
                await session.commit()
            except SQLAlchemyError as exc:
                await session.rollback()
                raise RemoteFailure("Could not reset total food needed") from exc

        record_need_reset()
        logger.info("Reset total food needed for %s schools at %s", count, now.isoformat())
        return count

    async def reconcile_pending(self, limit: int = 100) -> int:
        """Retry decrements for donations recorded while the store was failing."""

        async with session_scope(self._session_factory) as session:
            try:
                result = await session.execute(
                    select(Donation.id, Donation.school_id, Donation.quantity)
                    .where(Donation.need_applied.is_(False))
                    .order_by(Donation.created_at)
                    .limit(limit)
                )
            except SQLAlchemyError as exc:
                raise RemoteFailure("Could not load pending donations") from exc
            pending = result.all()

        applied = 0
        for donation_id, school_id, quantity in pending:
            try:
                await self.decrement_need(school_id, quantity, donation_id=donation_id)
            except RemoteFailure:
                logger.warning(
                    "Reconciliation stopped at donation %s; will retry later",
                    donation_id,
                )
                break
            applied += 1

        if applied:
            logger.info("Reconciled %s pending donation(s)", applied)
        return applied


__all__ = ["NeedTracker"]
