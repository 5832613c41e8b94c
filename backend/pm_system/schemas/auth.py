from __future__ import annotations

from datetime import datetime

from pydantic import EmailStr
from sqlmodel import Field

from pm_system.schemas.common import APIModel


class RegisterRequest(APIModel):
    username: str = Field(min_length=1, max_length=100)
    email: EmailStr
    password: str = Field(min_length=1)
    role: str = "Employee"


class LoginRequest(APIModel):
    username: str
    password: str


class LoginResponse(APIModel):
    token: str
    token_type: str = "bearer"
    expires_at: datetime
    user_id: int
    username: str
    email: str
    role: str


class UserRead(APIModel):
    id: int
    username: str
    email: str
    role: str
    is_active: bool
    created_at: datetime


class UserSummary(APIModel):
    id: int
    username: str
    email: str
    role: str


class CurrentUser(APIModel):
    user_id: int
    username: str
    email: str
    role: str
