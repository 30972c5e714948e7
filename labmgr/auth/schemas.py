# ---------------------------------------------------------------------------
# Author  : Kyle <kyle@hacking-linux.com>
# Version : 20261019v1
# ---------------------------------------------------------------------------
"""Pydantic request / response models for the auth endpoints."""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field, field_validator

from labmgr.core.schemas import CamelModel, check_email
from labmgr.models.user import Role


def _blank_to_none(value):
    # multipart forms send empty strings for untouched optional inputs
    if isinstance(value, str) and not value.strip():
        return None
    return value


# -- Requests --------------------------------------------------------------


class RegisterRequest(CamelModel):
    username: str = Field(min_length=1, max_length=255)
    password: str = Field(min_length=1)
    first_name: str = Field(min_length=1, max_length=255)
    last_name: str = Field(min_length=1, max_length=255)
    email: str
    mobile: Optional[str] = None
    city: Optional[str] = None
    role: Role = Role.STUDENT

    @field_validator("mobile", "city", mode="before")
    @classmethod
    def blank_optional(cls, value):
        return _blank_to_none(value)

    @field_validator("email")
    @classmethod
    def valid_email(cls, value: str) -> str:
        return check_email(value)

    @field_validator("username")
    @classmethod
    def strip_username(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("Username is required")
        return value

    @field_validator("role")
    @classmethod
    def no_self_admin(cls, value: Role) -> Role:
        if value is Role.ADMIN:
            raise ValueError("Admin accounts can only be granted by an administrator")
        return value


class LoginRequest(BaseModel):
    # Optional so that missing credentials take the generic 401 path
    username: Optional[str] = None
    password: Optional[str] = None


class ProfileUpdateRequest(CamelModel):
    """Self-service edits.  Role and password are deliberately absent."""
    first_name: Optional[str] = Field(default=None, min_length=1, max_length=255)
    last_name: Optional[str] = Field(default=None, min_length=1, max_length=255)
    email: Optional[str] = None
    mobile: Optional[str] = None
    city: Optional[str] = None

    @field_validator("email")
    @classmethod
    def valid_email(cls, value: Optional[str]) -> Optional[str]:
        return check_email(value)


class ResetPasswordRequest(BaseModel):
    # Optional so that a missing field yields the endpoint's own 400 message
    username: Optional[str] = None
    password: Optional[str] = None


# -- Responses -------------------------------------------------------------


class UserResponse(CamelModel):
    """Public user record – the password hash is never serialised."""
    id: int
    username: str
    first_name: str
    last_name: str
    email: str
    mobile: Optional[str] = None
    role: Role
    city: Optional[str] = None
    profile_picture: Optional[str] = None
    created_at: datetime
