# ---------------------------------------------------------------------------
# Author  : Kyle <kyle@hacking-linux.com>
# Version : 20261019v1
# ---------------------------------------------------------------------------
"""Sample ORM model – one field-collected specimen."""

from sqlalchemy import Column, Integer, String, Text, Numeric, JSON, DateTime
from sqlalchemy.sql import func

from labmgr.database import Base


class Sample(Base):
    __tablename__ = "samples"

    id = Column(Integer, primary_key=True, autoincrement=True)
    # Human-facing identifier printed on labels / QR codes
    sample_id = Column(String(64), unique=True, nullable=False, index=True)
    # Owner.  Plain column: deleting a user leaves their samples in place.
    user_id = Column(Integer, nullable=False, index=True)
    sample_type = Column(String(32), nullable=False)
    collection_date = Column(DateTime(timezone=True), nullable=False)
    collection_time = Column(String(16), nullable=False)
    location = Column(Text, nullable=True)
    geolocation = Column(JSON, nullable=True)  # {"lat": .., "lng": ..}
    temperature = Column(Numeric(5, 2), nullable=True)
    ph = Column(Numeric(3, 1), nullable=True)
    salinity = Column(Numeric(5, 2), nullable=True)
    conductivity = Column(Numeric(8, 2), nullable=True)
    field_conditions = Column(JSON, nullable=True)
    status = Column(String(16), nullable=False, default="pending")
    qr_code = Column(Text, nullable=True)
    barcode = Column(String(128), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
