# ---------------------------------------------------------------------------
# Author  : Kyle <kyle@hacking-linux.com>
# Version : 20261019v1
# ---------------------------------------------------------------------------
"""
Sensor-data endpoints – instrument readings posted against a sample and
the per-sample series behind the dashboard charts.
"""

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from labmgr.database import get_db
from labmgr.core.schemas import parse_id
from labmgr.core.security import get_current_user
from labmgr.models.sample import Sample
from labmgr.models.sensor_data import SensorData
from labmgr.models.user import User
from labmgr.sensors.schemas import SensorDataCreate, SensorDataResponse

router = APIRouter(prefix="/api/sensor-data", tags=["sensor-data"])


@router.post("", response_model=SensorDataResponse, status_code=status.HTTP_201_CREATED)
def create_reading(
    body: SensorDataCreate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    if not db.query(Sample.id).filter(Sample.id == body.sample_id).first():
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Sample not found")

    reading = SensorData(**body.model_dump(mode="python"))
    db.add(reading)
    db.commit()
    db.refresh(reading)
    return reading


@router.get("/sample/{sample_id}", response_model=list[SensorDataResponse])
def list_readings(
    sample_id: str,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """All readings for one sample, newest first."""
    sample_pk = parse_id(sample_id, "sample")
    return (
        db.query(SensorData)
        .filter(SensorData.sample_id == sample_pk)
        .order_by(SensorData.timestamp.desc(), SensorData.id.desc())
        .all()
    )
