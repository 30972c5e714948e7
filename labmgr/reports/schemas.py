# ---------------------------------------------------------------------------
# Author  : Kyle <kyle@hacking-linux.com>
# Version : 20261019v1
# ---------------------------------------------------------------------------
"""Pydantic request / response models for the report endpoints."""

from datetime import datetime
from typing import Any, Literal, Optional

from pydantic import Field, field_validator

from labmgr.core.schemas import CamelModel

ReportStatus = Literal["draft", "completed", "shared"]


class ReportCreate(CamelModel):
    sample_id: int = Field(gt=0)
    title: str = Field(min_length=1, max_length=255)
    content: dict[str, Any]  # charts, analysis results
    status: ReportStatus = "draft"
    pdf_path: Optional[str] = None


class ReportUpdate(CamelModel):
    title: Optional[str] = Field(default=None, min_length=1, max_length=255)
    content: Optional[dict[str, Any]] = None
    status: Optional[ReportStatus] = None
    pdf_path: Optional[str] = None

    @field_validator("title", "content", "status")
    @classmethod
    def not_null(cls, value):
        if value is None:
            raise ValueError("Field cannot be null")
        return value


class ReportResponse(CamelModel):
    id: int
    sample_id: int
    title: str
    content: dict[str, Any]
    generated_by: int
    status: str
    pdf_path: Optional[str] = None
    created_at: datetime
    updated_at: datetime
