# ---------------------------------------------------------------------------
# Author  : Kyle <kyle@hacking-linux.com>
# Version : 20261019v1
# ---------------------------------------------------------------------------
"""SensorData ORM model – instrument readings attached to a sample."""

from sqlalchemy import Column, Integer, String, Numeric, DateTime, ForeignKey
from sqlalchemy.sql import func

from labmgr.database import Base


class SensorData(Base):
    __tablename__ = "sensor_data"

    id = Column(Integer, primary_key=True, autoincrement=True)
    sample_id = Column(
        Integer,
        ForeignKey("samples.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    sensor_type = Column(String(32), nullable=False)  # temperature, ph, conductivity
    value = Column(Numeric(10, 4), nullable=False)
    unit = Column(String(16), nullable=False)
    timestamp = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
