"""Registration, login and token verification."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from sqlmodel import Session, col, select

from pm_system.core.config import Settings, get_settings
from pm_system.core.errors import ConflictError, UnauthenticatedError
from pm_system.core.logging import get_logger
from pm_system.core.security import (
    create_access_token,
    decode_access_token,
    hash_password,
    verify_password,
)
from pm_system.db.crud import save
from pm_system.models.users import User
from pm_system.services.users import get_user_by_username

logger = get_logger(__name__)


@dataclass(frozen=True, slots=True)
class AuthContext:
    """Caller identity resolved once per request from the bearer token."""

    user_id: int
    username: str
    email: str
    role: str

    @property
    def is_manager(self) -> bool:
        return self.role.lower() == "manager"


@dataclass(frozen=True, slots=True)
class LoginResult:
    token: str
    expires_at: datetime
    user: User


def register(
    session: Session,
    *,
    username: str,
    email: str,
    password: str,
    role: str,
    settings: Settings | None = None,
) -> User:
    settings = settings or get_settings()
    if get_user_by_username(session, username) is not None:
        raise ConflictError("Username already exists")
    if session.exec(select(User).where(User.email == email)).first() is not None:
        raise ConflictError("Email already registered")

    user = User(
        username=username,
        email=email,
        password_hash=hash_password(password, rounds=settings.bcrypt_rounds),
        role=role,
    )
    user = save(session, user, conflict_detail="Username or email already exists")
    logger.info("auth.registered user_id=%s role=%s", user.id, user.role)
    return user


def login(
    session: Session,
    *,
    username: str,
    password: str,
    settings: Settings | None = None,
) -> LoginResult:
    settings = settings or get_settings()
    user = session.exec(
        select(User).where(User.username == username, col(User.is_active).is_(True))
    ).first()
    if user is None or not verify_password(password, user.password_hash):
        logger.info("auth.login.rejected username=%s", username)
        raise UnauthenticatedError("Invalid username or password")

    token, expires_at = create_access_token(
        user_id=user.id,
        username=user.username,
        email=user.email,
        role=user.role,
        settings=settings,
    )
    logger.info("auth.login.ok user_id=%s", user.id)
    return LoginResult(token=token, expires_at=expires_at, user=user)


def resolve_auth_context(
    session: Session,
    token: str,
    *,
    settings: Settings | None = None,
) -> AuthContext:
    claims = decode_access_token(token, settings=settings)
    user = session.get(User, claims.user_id)
    if user is None or not user.is_active:
        raise UnauthenticatedError("User is inactive or no longer exists")
    # Role is read from the store, not the token.
    return AuthContext(user_id=user.id, username=user.username, email=user.email, role=user.role)
