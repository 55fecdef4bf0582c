"""Structured request logging middleware."""

from __future__ import annotations

import base64
import hashlib
import json
import logging
import time
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, ClassVar, Optional

from cryptography.fernet import Fernet
from fastapi import Request
from sqlalchemy.exc import SQLAlchemyError
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.responses import Response

from app.config.settings import settings
from app.utils import AuthenticationError, decode_access_token
from app.utils.clock import to_storage

logger = logging.getLogger("app.middleware.structured")

COLOR_RESET = "\u001b[0m"
COLOR_GREEN = "\u001b[32m"
COLOR_CYAN = "\u001b[36m"
COLOR_YELLOW = "\u001b[33m"
COLOR_RED = "\u001b[31m"


@dataclass(slots=True)
class SessionContext:
    """Who made the request, sealed so the log never carries the raw token."""

    token: str
    subject_id: str
    fingerprint: str


class StructuredLoggingMiddleware(BaseHTTPMiddleware):
    """Emit one coloured log line per request and optionally persist it."""

    _cipher: ClassVar[Optional[Fernet]] = None

    async def dispatch(
        self,
        request: Request,
        call_next: RequestResponseEndpoint,
    ) -> Response:
        start_time = time.perf_counter()
        payload: dict[str, Any] = {
            "timestamp": datetime.now(timezone.utc),
            "method": request.method,
            "url": str(request.url),
            "client_ip": request.client.host if request.client else None,
        }
        session_context = self._build_session_context(request, payload["timestamp"])
        if session_context is not None:
            payload["subject_id"] = session_context.subject_id

        try:
            response = await call_next(request)
        except Exception:
            payload["status_code"] = 500
            payload["duration_ms"] = self._elapsed_ms(start_time)
            logger.exception(self._format_console_message(payload))
            raise

        payload["status_code"] = response.status_code
        payload["duration_ms"] = self._elapsed_ms(start_time)
        logger.info(self._format_console_message(payload))
        await self._persist_log(payload, session_context)
        return response

    @staticmethod
    def _elapsed_ms(start_time: float) -> float:
        return round((time.perf_counter() - start_time) * 1000, 2)

    async def _persist_log(
        self,
        payload: dict[str, Any],
        session_context: SessionContext | None,
    ) -> None:
        if not settings.persist_request_logs:
            return

        from app.database import session_scope
        from app.models.log import RequestLog

        entry = RequestLog(
            timestamp=to_storage(payload["timestamp"]),
            method=payload["method"],
            url=payload["url"][:2048],
            status_code=payload["status_code"],
            client_ip=payload.get("client_ip"),
            duration_ms=int(payload["duration_ms"]),
            session_token=session_context.token if session_context else None,
            session_fingerprint=(
                session_context.fingerprint if session_context else None
            ),
            subject_id=session_context.subject_id if session_context else None,
        )

        async with session_scope() as session:
            session.add(entry)
            try:
                await session.commit()
            except SQLAlchemyError:
                await session.rollback()
                logger.exception("Failed to persist request log entry")

    def _build_session_context(
        self,
        request: Request,
        requested_at: datetime,
    ) -> SessionContext | None:
        token = self._extract_bearer_token(request)
        if not token:
            return None

        try:
            claims = decode_access_token(token)
        except AuthenticationError:
            return None

        started_at = claims.iat or requested_at
        fingerprint = hashlib.sha256(
            f"{claims.sub}:{int(started_at.timestamp())}".encode("utf-8")
        ).hexdigest()

        sealed: dict[str, Any] = {
            "session": fingerprint,
            "subject_id": claims.sub,
            "started_at": started_at.isoformat(),
            "expires_at": claims.exp.isoformat(),
        }
        user_agent = request.headers.get("user-agent")
        if user_agent:
            sealed["user_agent"] = user_agent[:256]

        return SessionContext(
            token=self._encrypt_session_metadata(sealed),
            subject_id=claims.sub,
            fingerprint=fingerprint,
        )

    @classmethod
    def _encrypt_session_metadata(cls, metadata: dict[str, Any]) -> str:
        cipher = cls._get_cipher()
        payload_bytes = json.dumps(metadata, default=str, separators=(",", ":")).encode(
            "utf-8"
        )
        return cipher.encrypt(payload_bytes).decode("utf-8")

    @classmethod
    def _get_cipher(cls) -> Fernet:
        """Return a cached Fernet cipher keyed from the JWT secret."""

        if cls._cipher is None:
            secret_bytes = settings.security.jwt_secret_key.get_secret_value().encode(
                "utf-8"
            )
            key = base64.urlsafe_b64encode(hashlib.sha256(secret_bytes).digest())
            cls._cipher = Fernet(key)
        return cls._cipher

    @staticmethod
    def _extract_bearer_token(request: Request) -> Optional[str]:
        auth_header = request.headers.get("authorization")
        if not auth_header:
            return None

        scheme, _, token = auth_header.partition(" ")
        if scheme.lower() != "bearer" or not token:
            return None
        return token

    @staticmethod
    def _format_console_message(payload: dict[str, Any]) -> str:
        status = payload.get("status_code") or 0
        if 200 <= status < 300:
            color = COLOR_GREEN
        elif 400 <= status < 500:
            color = COLOR_YELLOW
        elif status >= 500:
            color = COLOR_RED
        else:
            color = COLOR_CYAN

        fields = [
            ("timestamp", payload["timestamp"].isoformat()),
            ("method", payload.get("method")),
            ("url", payload.get("url")),
            ("status", status),
            ("duration_ms", payload.get("duration_ms")),
            ("client_ip", payload.get("client_ip")),
            ("subject", payload.get("subject_id")),
        ]
        message = ", ".join(
            f"{name}={value if value is not None else '-'}" for name, value in fields
        )
        return f"{color}{message}{COLOR_RESET}"
