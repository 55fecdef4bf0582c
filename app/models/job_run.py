"""Bookkeeping for scheduled jobs."""

from __future__ import annotations

from sqlalchemy import Column, DateTime, String

from app.models.base import Base


class JobRun(Base):
    """Last completed run of a named job, in naive UTC."""

    __tablename__ = "job_runs"

    name = Column(String(64), primary_key=True)
    last_run_at = Column(DateTime, nullable=False)


__all__ = ["JobRun"]
