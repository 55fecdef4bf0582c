"""Two-phase account deletion: profile first, then the sign-in account."""

from __future__ import annotations

import logging
from dataclasses import asdict, dataclass

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from app.database import SessionFactory, session_scope
from app.errors import NotFound, PartialDeletion, RemoteFailure
from app.models.user import User
from app.services.identity import IdentityRevoker, get_identity_revoker
from app.telemetry import record_account_deletion

logger = logging.getLogger("app.services.accounts")


@dataclass(slots=True)
class AccountDeletionResult:
    success: bool
    message: str
    profile_deleted: bool
    identity_deleted: bool

    def to_dict(self) -> dict[str, object]:
        return asdict(self)

    def raise_for_partial(self) -> "AccountDeletionResult":
        if self.profile_deleted and not self.identity_deleted:
            raise PartialDeletion(self)
        return self


class AccountService:
    def __init__(
        self,
        revoker: IdentityRevoker | None = None,
        session_factory: async_sessionmaker[AsyncSession] | None = None,
    ) -> None:
        self._session_factory = session_factory or SessionFactory
        self._revoker = revoker or get_identity_revoker()

    async def delete_account(
        self, user_id: str, caller_token: str | None
    ) -> AccountDeletionResult:
        """Delete the profile, then revoke the identity.

        A failing first phase raises and changes nothing. A failing second
        phase returns a partial result: the profile is gone but the sign-in
        account remains.
        """

        async with session_scope(self._session_factory) as session:
            try:
                user = await session.get(User, user_id)
                if user is None:
                    raise NotFound("User not found")
                await session.delete(user)
                await session.commit()
            except SQLAlchemyError as exc:
                await session.rollback()
                raise RemoteFailure("Could not delete the user profile") from exc

        logger.info("Profile %s deleted", user_id)

        try:
            await self._revoker.revoke(user_id, caller_token)
        except RemoteFailure as exc:
            logger.warning("Sign-in account %s could not be revoked: %s", user_id, exc.message)
            record_account_deletion("partial")
            return AccountDeletionResult(
                success=False,
                message=f"Profile deleted, but the sign-in account remains: {exc.message}",
                profile_deleted=True,
                identity_deleted=False,
            )

        record_account_deletion("complete")
        logger.info("Sign-in account %s revoked", user_id)
        return AccountDeletionResult(
            success=True,
            message="User account deleted completely",
            profile_deleted=True,
            identity_deleted=True,
        )


__all__ = ["AccountDeletionResult", "AccountService"]
