from __future__ import annotations

from fastapi import APIRouter, Query
from sqlmodel import Session

from pm_system.api.deps import AUTH_DEP, ID_PATH, MANAGER_DEP, SESSION_DEP
from pm_system.schemas.auth import (
    CurrentUser,
    LoginRequest,
    LoginResponse,
    RegisterRequest,
    UserRead,
    UserSummary,
)
from pm_system.services import auth as auth_service
from pm_system.services import users as user_service
from pm_system.services.auth import AuthContext

router = APIRouter(prefix="/auth", tags=["auth"])
ROLE_QUERY = Query(default=None)


@router.post("/register", response_model=UserRead)
def register(payload: RegisterRequest, session: Session = SESSION_DEP) -> UserRead:
    user = auth_service.register(
        session,
        username=payload.username,
        email=payload.email,
        password=payload.password,
        role=payload.role,
    )
    return UserRead(**user.model_dump())


@router.post("/login", response_model=LoginResponse)
def login(payload: LoginRequest, session: Session = SESSION_DEP) -> LoginResponse:
    result = auth_service.login(session, username=payload.username, password=payload.password)
    return LoginResponse(
        token=result.token,
        expires_at=result.expires_at,
        user_id=result.user.id,
        username=result.user.username,
        email=result.user.email,
        role=result.user.role,
    )


@router.get("/me", response_model=CurrentUser)
def current_user(auth: AuthContext = AUTH_DEP) -> CurrentUser:
    return CurrentUser(user_id=auth.user_id, username=auth.username, email=auth.email, role=auth.role)


@router.get("/users", response_model=list[UserRead])
def list_users(session: Session = SESSION_DEP, _manager: AuthContext = MANAGER_DEP) -> list[UserRead]:
    return [UserRead(**u.model_dump()) for u in user_service.list_users(session)]


@router.get("/active-users", response_model=list[UserSummary])
def list_active_users(
    role: str | None = ROLE_QUERY,
    session: Session = SESSION_DEP,
    _auth: AuthContext = AUTH_DEP,
) -> list[UserSummary]:
    """Active users, optionally narrowed to one role, for assignment pickers."""
    return [UserSummary(**u.model_dump()) for u in user_service.list_active_users(session, role=role)]


@router.get("/users/{user_id}", response_model=UserRead)
def get_user(
    user_id: int = ID_PATH, session: Session = SESSION_DEP, _auth: AuthContext = AUTH_DEP
) -> UserRead:
    return UserRead(**user_service.get_user(session, user_id).model_dump())
