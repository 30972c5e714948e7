# ---------------------------------------------------------------------------
# Author  : Kyle <kyle@hacking-linux.com>
# Version : 20261019v1
# ---------------------------------------------------------------------------
"""Pydantic request / response models for the sample endpoints."""

from datetime import datetime
from decimal import Decimal
from typing import Any, Literal, Optional

from pydantic import Field, field_validator

from labmgr.core.schemas import CamelModel

SampleType = Literal["water", "soil", "plant", "biological_fluid", "air"]
SampleStatus = Literal["pending", "processing", "completed"]


class Geolocation(CamelModel):
    lat: float = Field(ge=-90, le=90)
    lng: float = Field(ge=-180, le=180)


# -- Requests --------------------------------------------------------------
# The owner (user_id) is always taken from the session, never from the body.


class SampleCreate(CamelModel):
    sample_id: str = Field(min_length=1, max_length=64)
    sample_type: SampleType
    collection_date: datetime
    collection_time: str = Field(min_length=1, max_length=16)
    location: Optional[str] = None
    geolocation: Optional[Geolocation] = None
    # Decimals arrive as strings from the intake form; both forms are accepted
    temperature: Optional[Decimal] = None
    ph: Optional[Decimal] = Field(default=None, ge=0, le=14)
    salinity: Optional[Decimal] = None
    conductivity: Optional[Decimal] = None
    field_conditions: Optional[dict[str, Any]] = None
    status: SampleStatus = "pending"
    qr_code: Optional[str] = None
    barcode: Optional[str] = None


class SampleUpdate(CamelModel):
    sample_type: Optional[SampleType] = None
    collection_date: Optional[datetime] = None
    collection_time: Optional[str] = Field(default=None, min_length=1, max_length=16)
    location: Optional[str] = None
    geolocation: Optional[Geolocation] = None
    temperature: Optional[Decimal] = None
    ph: Optional[Decimal] = Field(default=None, ge=0, le=14)
    salinity: Optional[Decimal] = None
    conductivity: Optional[Decimal] = None
    field_conditions: Optional[dict[str, Any]] = None
    status: Optional[SampleStatus] = None
    qr_code: Optional[str] = None
    barcode: Optional[str] = None

    @field_validator("sample_type", "collection_date", "collection_time", "status")
    @classmethod
    def not_null(cls, value):
        # these columns are NOT NULL; omit the field to leave it unchanged
        if value is None:
            raise ValueError("Field cannot be null")
        return value


# -- Responses -------------------------------------------------------------


class SampleResponse(CamelModel):
    id: int
    sample_id: str
    user_id: int
    sample_type: str
    collection_date: datetime
    collection_time: str
    location: Optional[str] = None
    geolocation: Optional[dict[str, Any]] = None
    temperature: Optional[Decimal] = None
    ph: Optional[Decimal] = None
    salinity: Optional[Decimal] = None
    conductivity: Optional[Decimal] = None
    field_conditions: Optional[dict[str, Any]] = None
    status: str
    qr_code: Optional[str] = None
    barcode: Optional[str] = None
    created_at: datetime
