"""Identity provider: sign-in accounts, tokens, password recovery, revocation."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod

import httpx
from sqlalchemy import delete, func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from app.config.settings import settings
from app.database import SessionFactory, session_scope
from app.errors import NotAuthenticated, RemoteFailure, ValidationError
from app.models.base import new_id
from app.models.identity import Identity
from app.services.email import EmailServiceError, send_email
from app.utils import (
    create_access_token,
    generate_temporary_password,
    hash_password,
    verify_password,
)

logger = logging.getLogger("app.services.identity")

MIN_PASSWORD_LENGTH = 6


def _normalise_email(email: str) -> str:
    return email.strip().lower()


async def find_identity(session: AsyncSession, email: str) -> Identity | None:
    result = await session.execute(
        select(Identity).where(func.lower(Identity.email) == _normalise_email(email))
    )
    return result.scalar_one_or_none()


async def create_account(session: AsyncSession, email: str, password: str) -> Identity:
    """Add a sign-in account to ``session``; the caller commits."""

    if len(password) < MIN_PASSWORD_LENGTH:
        raise ValidationError(
            f"Password must be at least {MIN_PASSWORD_LENGTH} characters long"
        )
    if await find_identity(session, email) is not None:
        raise ValidationError("This email is already registered")

    identity = Identity(
        id=new_id(),
        email=_normalise_email(email),
        password_hash=hash_password(password),
    )
    session.add(identity)
    await session.flush()
    return identity


async def sign_in(session: AsyncSession, email: str, password: str) -> tuple[Identity, str]:
    """Check credentials and return the identity with a fresh access token."""

    identity = await find_identity(session, email)
    if identity is None or not verify_password(password, identity.password_hash):
        raise NotAuthenticated("Invalid email or password")

    token = create_access_token(subject=identity.id, email=identity.email)
    return identity, token


async def send_password_reset(session: AsyncSession, email: str) -> bool:
    """Replace the password with a temporary one and email it.

    Returns ``False`` when no account uses ``email``.
    """

    identity = await find_identity(session, email)
    if identity is None:
        return False

    temporary_password = generate_temporary_password()
    identity.password_hash = hash_password(temporary_password)

    body = (
        "Hello,\n\n"
        "We received a request to reset your FeedNet password.\n"
        f"Your temporary password is: {temporary_password}\n\n"
        "Sign in with it and change it right away.\n\n"
        "The FeedNet team"
    )
    try:
        await send_email(
            recipient=identity.email, subject="Password reset", body=body
        )
    except EmailServiceError as exc:
        await session.rollback()
        raise RemoteFailure(
            "Could not send the password reset email. Please try again later."
        ) from exc

    await session.commit()
    logger.info("Temporary password issued for identity %s", identity.id)
    return True


class IdentityRevoker(ABC):
    """Removes a sign-in account so the subject can no longer authenticate."""

    @abstractmethod
    async def revoke(self, target_user_id: str, caller_token: str | None) -> None:
        """Raise ``RemoteFailure`` when the account could not be removed."""


class LocalIdentityRevoker(IdentityRevoker):
    def __init__(
        self, session_factory: async_sessionmaker[AsyncSession] | None = None
    ) -> None:
        self._session_factory = session_factory or SessionFactory

    async def revoke(self, target_user_id: str, caller_token: str | None) -> None:
        async with session_scope(self._session_factory) as session:
            try:
                await session.execute(
                    delete(Identity).where(Identity.id == target_user_id)
                )
                await session.commit()
            except SQLAlchemyError as exc:
                await session.rollback()
                raise RemoteFailure("Could not delete the sign-in account") from exc


class RemoteIdentityRevoker(IdentityRevoker):
    """Calls the privileged revocation endpoint with the caller's token."""

    def __init__(
        self,
        url: str,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.url = url
        self.timeout = timeout or settings.identity.timeout_seconds
        self.transport = transport

    async def revoke(self, target_user_id: str, caller_token: str | None) -> None:
        if not caller_token:
            raise RemoteFailure("No session token available to authorize the deletion")

        try:
            async with httpx.AsyncClient(
                timeout=self.timeout, transport=self.transport
            ) as client:
                response = await client.post(
                    self.url,
                    json={"targetUserId": target_user_id},
                    headers={"Authorization": f"Bearer {caller_token}"},
                )
                response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            detail = _error_detail(exc.response)
            raise RemoteFailure(detail or f"HTTP error {exc.response.status_code}") from exc
        except httpx.HTTPError as exc:
            raise RemoteFailure(f"Identity service unreachable: {exc}") from exc


def _error_detail(response: httpx.Response) -> str | None:
    try:
        body = response.json()
    except ValueError:
        return None
    if isinstance(body, dict):
        return body.get("error") or body.get("detail")
    return None


def get_identity_revoker() -> IdentityRevoker:
    if settings.identity.revoke_url:
        return RemoteIdentityRevoker(settings.identity.revoke_url)
    return LocalIdentityRevoker()


__all__ = [
    "IdentityRevoker",
    "LocalIdentityRevoker",
    "MIN_PASSWORD_LENGTH",
    "RemoteIdentityRevoker",
    "create_account",
    "find_identity",
    "get_identity_revoker",
    "send_password_reset",
    "sign_in",
]
