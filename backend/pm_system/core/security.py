"""Password hashing (bcrypt) and access-token signing (JWT)."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from typing import Any

import bcrypt
import jwt

from pm_system.core.config import Settings, get_settings
from pm_system.core.errors import UnauthenticatedError

# bcrypt only looks at the first 72 bytes and newer releases refuse longer input.
_BCRYPT_MAX_BYTES = 72


def _password_bytes(password: str) -> bytes:
    return password.encode("utf-8")[:_BCRYPT_MAX_BYTES]


def hash_password(password: str, *, rounds: int | None = None) -> str:
    if rounds is None:
        rounds = get_settings().bcrypt_rounds
    return bcrypt.hashpw(_password_bytes(password), bcrypt.gensalt(rounds=rounds)).decode("ascii")


def verify_password(password: str, password_hash: str) -> bool:
    if not password_hash:
        return False
    try:
        return bcrypt.checkpw(_password_bytes(password), password_hash.encode("ascii"))
    except ValueError:
        # malformed stored hash
        return False


@dataclass(frozen=True, slots=True)
class TokenClaims:
    user_id: int
    username: str
    email: str
    role: str
    expires_at: datetime


def create_access_token(
    *,
    user_id: int,
    username: str,
    email: str,
    role: str,
    settings: Settings | None = None,
    now: datetime | None = None,
) -> tuple[str, datetime]:
    settings = settings or get_settings()
    issued_at = now or datetime.now(UTC)
    expires_at = issued_at + timedelta(days=settings.jwt_expire_days)
    payload: dict[str, Any] = {
        "sub": str(user_id),
        "username": username,
        "email": email,
        "role": role,
        "iat": issued_at,
        "exp": expires_at,
        "iss": settings.jwt_issuer,
        "aud": settings.jwt_audience,
    }
    token = jwt.encode(payload, settings.jwt_secret, algorithm=settings.jwt_algorithm)
    return token, expires_at


def decode_access_token(token: str, *, settings: Settings | None = None) -> TokenClaims:
    settings = settings or get_settings()
    try:
        payload = jwt.decode(
            token,
            settings.jwt_secret,
            algorithms=[settings.jwt_algorithm],
            audience=settings.jwt_audience,
            issuer=settings.jwt_issuer,
            options={"require": ["exp", "sub"]},
        )
    except jwt.ExpiredSignatureError as exc:
        raise UnauthenticatedError("Token has expired") from exc
    except jwt.InvalidTokenError as exc:
        raise UnauthenticatedError("Invalid token") from exc

    try:
        user_id = int(payload["sub"])
    except (TypeError, ValueError) as exc:
        raise UnauthenticatedError("Invalid token payload") from exc

    return TokenClaims(
        user_id=user_id,
        username=str(payload.get("username", "")),
        email=str(payload.get("email", "")),
        role=str(payload.get("role", "")),
        expires_at=datetime.fromtimestamp(int(payload["exp"]), tz=UTC),
    )
