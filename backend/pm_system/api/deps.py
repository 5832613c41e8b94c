from __future__ import annotations

from fastapi import Depends, Path
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlmodel import Session

from pm_system.core.config import get_settings
from pm_system.core.errors import UnauthenticatedError, UnauthorizedError
from pm_system.db.session import get_session
from pm_system.schemas.common import ID_MAX, ID_MIN
from pm_system.services.auth import AuthContext, resolve_auth_context

bearer_scheme = HTTPBearer(auto_error=False)
SESSION_DEP = Depends(get_session)
BEARER_DEP = Depends(bearer_scheme)
# Out-of-range ids are rejected before they reach the store.
ID_PATH = Path(ge=ID_MIN, le=ID_MAX)


def get_auth_context(
    credentials: HTTPAuthorizationCredentials | None = BEARER_DEP,
    session: Session = SESSION_DEP,
) -> AuthContext:
    if credentials is None or not credentials.credentials:
        raise UnauthenticatedError("Authentication required. Please login first.")
    return resolve_auth_context(session, credentials.credentials, settings=get_settings())


AUTH_DEP = Depends(get_auth_context)


def require_manager(auth: AuthContext = AUTH_DEP) -> AuthContext:
    if not auth.is_manager:
        raise UnauthorizedError("Access denied. Manager role required.")
    return auth


MANAGER_DEP = Depends(require_manager)
