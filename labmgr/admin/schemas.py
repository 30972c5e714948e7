# ---------------------------------------------------------------------------
# Author  : Kyle <kyle@hacking-linux.com>
# Version : 20261019v1
# ---------------------------------------------------------------------------
"""Pydantic request / response models for the admin endpoints."""

from datetime import datetime
from typing import List, Literal, Optional

from pydantic import Field, field_validator, model_validator

from labmgr.core.schemas import CamelModel, check_email
from labmgr.models.user import Role


# -- Requests --------------------------------------------------------------


class AdminUserUpdate(CamelModel):
    """Any subset of the profile plus the role.  Passwords go through reset-password."""
    username: Optional[str] = Field(default=None, min_length=1, max_length=255)
    first_name: Optional[str] = Field(default=None, min_length=1, max_length=255)
    last_name: Optional[str] = Field(default=None, min_length=1, max_length=255)
    email: Optional[str] = Field(default=None, min_length=3, max_length=255)
    mobile: Optional[str] = None
    city: Optional[str] = None
    role: Optional[Role] = None

    @field_validator("email")
    @classmethod
    def valid_email(cls, value: Optional[str]) -> Optional[str]:
        return check_email(value)


class NotificationBroadcast(CamelModel):
    title: str = Field(min_length=1, max_length=255)
    message: str = Field(min_length=1)
    type: Literal["info", "warning", "success", "error"] = "info"
    target_users: Literal["all", "role", "specific"] = "all"
    target_role: Optional[Role] = None
    specific_user_ids: Optional[List[int]] = None

    @model_validator(mode="after")
    def check_target(self):
        if self.target_users == "role" and self.target_role is None:
            raise ValueError("targetRole is required when targeting a role")
        if self.target_users == "specific" and not self.specific_user_ids:
            raise ValueError("specificUserIds is required when targeting specific users")
        return self


# -- Responses -------------------------------------------------------------


class AdminStats(CamelModel):
    total_users: int
    active_users: int       # joined in the last 7 days
    total_samples: int
    pending_samples: int
    completed_samples: int
    total_reports: int
    pending_reports: int
    system_alerts: int


class ActivityLogRow(CamelModel):
    id: int
    user_id: int
    action: str
    entity_type: str
    entity_id: int
    timestamp: datetime
    user_name: str
    details: str


class SampleTrendPoint(CamelModel):
    date: str               # e.g. "Oct 19"
    samples: int
