"""Password hashing and JWT access tokens for the identity provider."""

from __future__ import annotations

import base64
import hashlib
import hmac
import secrets
import string
from datetime import datetime, timedelta, timezone
from typing import Any, Optional

from jose import JWTError, jwt
from pydantic import BaseModel, ValidationError

from app.config.settings import settings

_HASH_SCHEME = "pbkdf2_sha256"
_ITERATIONS = 120_000
_SALT_BYTES = 16
_TEMP_PASSWORD_ALPHABET = string.ascii_letters + string.digits


def _b64(raw: bytes) -> str:
    return base64.urlsafe_b64encode(raw).decode("ascii").rstrip("=")


def _unb64(text: str) -> bytes:
    return base64.urlsafe_b64decode(text + "=" * (-len(text) % 4))


def _derive(password: str, salt: bytes, iterations: int) -> bytes:
    return hashlib.pbkdf2_hmac("sha256", password.encode("utf-8"), salt, iterations)


def hash_password(password: str) -> str:
    """Return ``pbkdf2_sha256$<iterations>$<salt>$<digest>``."""

    salt = secrets.token_bytes(_SALT_BYTES)
    digest = _derive(password, salt, _ITERATIONS)
    return f"{_HASH_SCHEME}${_ITERATIONS}${_b64(salt)}${_b64(digest)}"


def verify_password(password: str, hashed: str) -> bool:
    try:
        scheme, iterations, salt, digest = hashed.split("$")
        if scheme != _HASH_SCHEME:
            return False
        expected = _unb64(digest)
        candidate = _derive(password, _unb64(salt), int(iterations))
    except (ValueError, TypeError):
        return False
    return hmac.compare_digest(candidate, expected)


def generate_temporary_password(length: int = 12) -> str:
    """Random password mixing lower case, upper case and digits."""

    if length < 8:
        raise ValueError("Temporary password must be at least 8 characters long.")

    while True:
        candidate = "".join(secrets.choice(_TEMP_PASSWORD_ALPHABET) for _ in range(length))
        classes = (str.islower, str.isupper, str.isdigit)
        if all(any(check(c) for c in candidate) for check in classes):
            return candidate


class AuthenticationError(Exception):
    """Raised when a JWT cannot be decoded or is otherwise invalid."""


class TokenPayload(BaseModel):
    """Claims carried by an access token; ``sub`` is the identity id."""

    sub: str
    exp: datetime
    email: Optional[str] = None
    iat: Optional[datetime] = None


def create_access_token(
    subject: str,
    email: str | None = None,
    expires_delta: Optional[timedelta] = None,
) -> str:
    issued_at = datetime.now(timezone.utc)
    lifetime = expires_delta or timedelta(
        minutes=settings.security.access_token_expires_minutes
    )
    claims: dict[str, Any] = {
        "sub": subject,
        "iat": issued_at,
        "exp": issued_at + lifetime,
    }
    if email is not None:
        claims["email"] = email

    return jwt.encode(
        claims,
        settings.security.jwt_secret_key.get_secret_value(),
        algorithm=settings.security.jwt_algorithm,
    )


def decode_access_token(token: str) -> TokenPayload:
    """Validate signature and expiry, returning the typed claims."""

    try:
        claims = jwt.decode(
            token,
            settings.security.jwt_secret_key.get_secret_value(),
            algorithms=[settings.security.jwt_algorithm],
        )
        return TokenPayload.model_validate(claims)
    except (JWTError, ValidationError) as exc:
        raise AuthenticationError("Invalid authentication token") from exc


__all__ = [
    "hash_password",
    "verify_password",
    "generate_temporary_password",
    "create_access_token",
    "decode_access_token",
    "AuthenticationError",
    "TokenPayload",
]
