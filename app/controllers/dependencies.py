"""Common FastAPI dependencies reused across controllers."""

from __future__ import annotations

from typing import Annotated

from fastapi import Depends
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_session
from app.errors import NotAuthenticated
from app.models.identity import Identity
from app.models.user import User as UserModel
from app.services import (
    AccountService,
    DonationRecorder,
    NeedTracker,
    Principal,
    is_super_admin_email,
)
from app.utils import AuthenticationError, decode_access_token

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/auth/login")
SessionDep = Annotated[AsyncSession, Depends(get_session)]
BearerTokenDep = Annotated[str, Depends(oauth2_scheme)]


async def get_current_principal(
    token: BearerTokenDep,
    session: SessionDep,
) -> Principal:
    """Resolve the identity behind the bearer token and attach its profile."""

    try:
        payload = decode_access_token(token)
    except AuthenticationError:
        raise NotAuthenticated("Could not validate credentials") from None

    identity = await session.get(Identity, payload.sub)
    if identity is None:
        raise NotAuthenticated("Account no longer exists")

    profile = await session.get(UserModel, identity.id)
    return Principal(
        subject=identity.id,
        email=identity.email,
        profile=profile,
        is_super_admin=is_super_admin_email(identity.email),
    )


CurrentPrincipalDep = Annotated[Principal, Depends(get_current_principal)]


def get_need_tracker() -> NeedTracker:
    return NeedTracker()


def get_donation_recorder(
    need_tracker: Annotated[NeedTracker, Depends(get_need_tracker)],
) -> DonationRecorder:
    return DonationRecorder(need_tracker=need_tracker)


def get_account_service() -> AccountService:
    return AccountService()


NeedTrackerDep = Annotated[NeedTracker, Depends(get_need_tracker)]
DonationRecorderDep = Annotated[DonationRecorder, Depends(get_donation_recorder)]
AccountServiceDep = Annotated[AccountService, Depends(get_account_service)]


__all__ = [
    "AccountServiceDep",
    "BearerTokenDep",
    "CurrentPrincipalDep",
    "DonationRecorderDep",
    "NeedTrackerDep",
    "SessionDep",
    "get_account_service",
    "get_current_principal",
    "get_donation_recorder",
    "get_need_tracker",
    "oauth2_scheme",
]
