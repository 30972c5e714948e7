# ---------------------------------------------------------------------------
# Author  : Kyle <kyle@hacking-linux.com>
# Version : 20261019v1
# ---------------------------------------------------------------------------
"""Report ORM model – analysis results generated for a sample."""

from sqlalchemy import Column, Integer, String, JSON, DateTime
from sqlalchemy.sql import func

from labmgr.database import Base


class Report(Base):
    __tablename__ = "reports"

    id = Column(Integer, primary_key=True, autoincrement=True)
    sample_id = Column(Integer, nullable=False, index=True)
    title = Column(String(255), nullable=False)
    content = Column(JSON, nullable=False)  # charts, analysis results
    # Owner of the report
    generated_by = Column(Integer, nullable=False, index=True)
    status = Column(String(16), nullable=False, default="draft")
    pdf_path = Column(String(512), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False,
    )
