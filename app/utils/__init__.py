"""Utility helpers for the FeedNet backend."""

from .security import (
    AuthenticationError,
    TokenPayload,
    create_access_token,
    decode_access_token,
    generate_temporary_password,
    hash_password,
    verify_password,
)

__all__ = [
    "hash_password",
    "verify_password",
    "generate_temporary_password",
    "create_access_token",
    "decode_access_token",
    "AuthenticationError",
    "TokenPayload",
]
