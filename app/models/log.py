"""Persisted HTTP request log entries."""

from __future__ import annotations

from sqlalchemy import Column, DateTime, Integer, String

from .base import Base
from app.utils.clock import utcnow


class RequestLog(Base):
    __tablename__ = "request_logs"

    id = Column(Integer, primary_key=True, index=True)
    timestamp = Column(DateTime, nullable=False, default=utcnow, index=True)
    method = Column(String(10), nullable=False)
    url = Column(String(2048), nullable=False)
    status_code = Column(Integer, nullable=False)
    client_ip = Column(String(64), nullable=True)
    duration_ms = Column(Integer, nullable=True)
    session_token = Column(String(512), nullable=True)
    session_fingerprint = Column(String(64), nullable=True, index=True)
    subject_id = Column(String(64), nullable=True, index=True)


__all__ = ["RequestLog"]
