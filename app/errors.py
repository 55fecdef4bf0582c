"""Domain error taxonomy shared by services and controllers.

Services raise these; ``app.main`` maps each class to an HTTP status so the
initiating action sees a user-facing notification.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from fastapi import status

if TYPE_CHECKING:
    from app.services.accounts import AccountDeletionResult


class FeedNetError(Exception):
    """Base class for errors surfaced to the caller."""

    status_code: int = status.HTTP_400_BAD_REQUEST

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ValidationError(FeedNetError):
    """Bad input: negative numbers, malformed phone numbers, missing fields."""

    status_code = status.HTTP_422_UNPROCESSABLE_ENTITY


class PermissionDenied(FeedNetError):
    """The caller's role or school does not own the target resource."""

    status_code = status.HTTP_403_FORBIDDEN


class NotAuthenticated(FeedNetError):
    status_code = status.HTTP_401_UNAUTHORIZED


class NotFound(FeedNetError):
    status_code = status.HTTP_404_NOT_FOUND


class CapacityExceeded(FeedNetError):
    """A donation asks for more than the school still needs."""

    status_code = status.HTTP_409_CONFLICT

    def __init__(self, maximum: int) -> None:
        super().__init__(f"Maximum donation amount is {maximum}")
        self.maximum = maximum


class RemoteFailure(FeedNetError):
    """The store or the identity provider failed or timed out."""

    status_code = status.HTTP_503_SERVICE_UNAVAILABLE


class PartialDeletion(FeedNetError):
    """Profile deleted but the sign-in account could not be revoked."""

    status_code = status.HTTP_502_BAD_GATEWAY

    def __init__(self, result: "AccountDeletionResult") -> None:
        super().__init__(result.message)
        self.result = result


__all__ = [
    "FeedNetError",
    "ValidationError",
    "PermissionDenied",
    "NotAuthenticated",
    "NotFound",
    "CapacityExceeded",
    "RemoteFailure",
    "PartialDeletion",
]
