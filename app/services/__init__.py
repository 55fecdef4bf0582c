"""Service layer: need tracking, donations, reporting and account lifecycle."""

from .accounts import AccountDeletionResult, AccountService
from .authorization import Action, Principal, authorize, is_super_admin_email
from .donation_recorder import DonationReceipt, DonationRecorder
from .email import EmailServiceError, send_email
from .identity import (
    IdentityRevoker,
    LocalIdentityRevoker,
    RemoteIdentityRevoker,
    get_identity_revoker,
)
from .need_tracker import NeedTracker
from .scheduler import NeedResetScheduler

__all__ = [
    "AccountDeletionResult",
    "AccountService",
    "Action",
    "Principal",
    "authorize",
    "is_super_admin_email",
    "DonationReceipt",
    "DonationRecorder",
    "EmailServiceError",
    "send_email",
    "IdentityRevoker",
    "LocalIdentityRevoker",
    "RemoteIdentityRevoker",
    "get_identity_revoker",
    "NeedTracker",
    "NeedResetScheduler",
]
