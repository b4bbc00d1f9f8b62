"""Pydantic request/response schemas for vst_gateway.

All responses are wrapped in ApiResponse at the router layer.
"""

import re

from pydantic import EmailStr, Field, field_validator

from src.vst_common.schemas import CamelModel


class RegisterRequest(CamelModel):
    username: str = Field(..., min_length=3, max_length=64, pattern=r"^[a-zA-Z0-9_]+$")
    email: EmailStr
    password: str = Field(..., min_length=8, max_length=128)

    @field_validator("password")
    @classmethod
    def password_complexity(cls, v: str) -> str:
        """Enforce: at least one uppercase, one lowercase, one digit."""
        if not re.search(r"[A-Z]", v):
            raise ValueError("Password must contain at least one uppercase letter")
        if not re.search(r"[a-z]", v):
            raise ValueError("Password must contain at least one lowercase letter")
        if not re.search(r"\d", v):
            raise ValueError("Password must contain at least one digit")
        return v


class LoginRequest(CamelModel):
    email: str
    password: str


class RefreshRequest(CamelModel):
    refresh_token: str


class UserInfo(CamelModel):
    """Public user fields; never includes the password hash."""

    user_id: str
    username: str
    email: str
    role: str


class RegisterResponse(CamelModel):
    user_id: str
    username: str
    email: str
    role: str
    created_at: str


class LoginResponse(CamelModel):
    access_token: str
    refresh_token: str
    token_type: str = "Bearer"
    expires_in: int = 1800  # 30 minutes in seconds
    user: UserInfo


class RefreshResponse(CamelModel):
    access_token: str
    expires_in: int = 1800
