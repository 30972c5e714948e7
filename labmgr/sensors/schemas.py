# ---------------------------------------------------------------------------
# Author  : Kyle <kyle@hacking-linux.com>
# Version : 20261019v1
# ---------------------------------------------------------------------------
"""Pydantic request / response models for the sensor-data endpoints."""

from datetime import datetime
from decimal import Decimal

from pydantic import Field

from labmgr.core.schemas import CamelModel


class SensorDataCreate(CamelModel):
    sample_id: int = Field(gt=0)
    sensor_type: str = Field(min_length=1, max_length=32)  # temperature, ph, conductivity
    value: Decimal
    unit: str = Field(min_length=1, max_length=16)


class SensorDataResponse(CamelModel):
    id: int
    sample_id: int
    sensor_type: str
    value: Decimal
    unit: str
    timestamp: datetime
