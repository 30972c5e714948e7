# ---------------------------------------------------------------------------
# Author  : Kyle <kyle@hacking-linux.com>
# Version : 20261019v1
# ---------------------------------------------------------------------------
"""Pydantic request / response models for the protocol library."""

from datetime import datetime
from typing import Literal, Optional

from pydantic import Field

from labmgr.core.schemas import CamelModel

ProtocolStatus = Literal["active", "review", "inactive"]


class ProtocolCreate(CamelModel):
    title: str = Field(min_length=1, max_length=255)
    description: str = Field(min_length=1)
    category: str = Field(min_length=1, max_length=64)  # experiment or sample type
    content: str = Field(min_length=1)
    status: ProtocolStatus = "active"


class ProtocolUpdate(CamelModel):
    title: Optional[str] = Field(default=None, min_length=1, max_length=255)
    description: Optional[str] = Field(default=None, min_length=1)
    category: Optional[str] = Field(default=None, min_length=1, max_length=64)
    content: Optional[str] = Field(default=None, min_length=1)
    status: Optional[ProtocolStatus] = None


class ProtocolResponse(CamelModel):
    id: int
    title: str
    description: str
    category: str
    content: str
    status: str
    created_by: int
    created_at: datetime
    updated_at: datetime
