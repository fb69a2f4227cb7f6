"""Schemas for accounts, authentication and admin user management."""

from datetime import datetime
from typing import Annotated, List, Optional

from pydantic import EmailStr, Field, StringConstraints

from .base import CamelModel, PaginationMeta, RequestModel

Password = Annotated[str, StringConstraints(min_length=8, max_length=128)]


class RegisterRequest(RequestModel):
    name: Annotated[str, StringConstraints(strip_whitespace=True, min_length=2, max_length=100)]
    email: EmailStr
    password: Password
    become_seller: bool = Field(False, description="Also grant the seller role")


class LoginRequest(RequestModel):
    email: EmailStr
    password: Annotated[str, StringConstraints(min_length=1, max_length=128)]


class UserResponse(CamelModel):
    id: str
    name: str
    email: str
    roles: List[str]
    is_active: bool
    last_login_at: Optional[datetime] = None
    created_at: Optional[datetime] = None


class AuthTokenResponse(CamelModel):
    access_token: str
    token_type: str = "bearer"
    expires_in: int
    user: UserResponse


class UserListResponse(CamelModel):
    users: List[UserResponse]
    pagination: PaginationMeta
