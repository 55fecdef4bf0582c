"""Background job that zeroes every school's food need once per local day."""

from __future__ import annotations

import asyncio
import contextlib
import logging
from datetime import datetime
from typing import Optional
from zoneinfo import ZoneInfo

from sqlalchemy import update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from app.config.settings import settings
from app.database import SessionFactory, session_scope
from app.errors import RemoteFailure
from app.models.job_run import JobRun
from app.services.need_tracker import NeedTracker
from app.telemetry import record_need_reset
from app.utils.clock import get_zone, local_midnight, to_storage, utcnow

logger = logging.getLogger("app.services.scheduler")

RESET_JOB_NAME = "reset_food_needs"


class NeedResetScheduler:
    """Runs the daily reset and retries unapplied donation decrements.

    The last reset time lives in the ``job_runs`` table, so a restarted
    process neither skips a missed reset nor repeats one that already ran.
    Claiming a run is a conditional UPDATE, which keeps two processes from
    resetting the same day twice.
    """

    def __init__(
        self,
        need_tracker: NeedTracker | None = None,
        session_factory: async_sessionmaker[AsyncSession] | None = None,
        *,
        interval_seconds: float | None = None,
        zone: ZoneInfo | None = None,
    ) -> None:
        self._session_factory = session_factory or SessionFactory
        self._tracker = need_tracker or NeedTracker(self._session_factory)
        self.interval_seconds = (
            interval_seconds or settings.need_tracker.reset_check_interval_seconds
        )
        self.zone = zone or get_zone()
        self.running = False
        self._task: Optional[asyncio.Task] = None

    async def start(self) -> None:
        if self.running:
            logger.warning("Need reset scheduler already running")
            return

        self.running = True
        self._task = asyncio.create_task(self._loop())
        logger.info(
            "Need reset scheduler started (interval %ss, timezone %s)",
            self.interval_seconds,
            self.zone.key,
        )

    async def stop(self) -> None:
        self.running = False
        if self._task:
            self._task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await self._task
            self._task = None
        logger.info("Need reset scheduler stopped")

    async def _loop(self) -> None:
        while self.running:
            try:
                await self.tick()
            except Exception:
                logger.exception("Scheduled need maintenance failed")

            await asyncio.sleep(self.interval_seconds)

    async def tick(self, now: datetime | None = None) -> bool:
        """One scheduler pass; returns whether a reset ran."""

        reset = await self.run_reset_if_due(now)
        await self._tracker.reconcile_pending()
        return reset

    async def run_reset_if_due(self, now: datetime | None = None) -> bool:
        now = to_storage(now) if now is not None else utcnow()
        boundary = to_storage(local_midnight(now, self.zone))

        async with session_scope(self._session_factory) as session:
            try:
                job = await session.get(JobRun, RESET_JOB_NAME)
                if job is None:
                    return await self._seed(session, now)

                claimed = await session.execute(
                    update(JobRun)
                    .where(
                        JobRun.name == RESET_JOB_NAME,
                        JobRun.last_run_at < boundary,
                    )
                    .values(last_run_at=now)
                    .execution_options(synchronize_session=False)
                )
                if claimed.rowcount == 0:
                    await session.rollback()
                    return False

                count = await self._tracker.apply_reset(session, now)
                await session.commit()
            except SQLAlchemyError as exc:
                await session.rollback()
                raise RemoteFailure("Could not run the daily food need reset") from exc

        record_need_reset()
        logger.info(
            "Daily reset zeroed total food needed for %s schools (local midnight %s)",
            count,
            boundary.isoformat(),
        )
        return True

    async def _seed(self, session: AsyncSession, now: datetime) -> bool:
        """First ever start: the first reset happens at the next local midnight."""

        session.add(JobRun(name=RESET_JOB_NAME, last_run_at=now))
        try:
            await session.commit()
        except IntegrityError:
            await session.rollback()
            logger.info("Reset job already seeded by another process")
            return False

        logger.info("Seeded %s job at %s", RESET_JOB_NAME, now.isoformat())
        return False


__all__ = ["NeedResetScheduler", "RESET_JOB_NAME"]
