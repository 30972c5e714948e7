# ---------------------------------------------------------------------------
# Author  : Kyle <kyle@hacking-linux.com>
# Version : 20261019v1
# ---------------------------------------------------------------------------
"""Headline counters for the landing dashboard."""

from fastapi import APIRouter, Depends
from sqlalchemy import func
from sqlalchemy.orm import Session

from labmgr.database import get_db
from labmgr.core.schemas import CamelModel
from labmgr.core.security import get_current_user
from labmgr.models.report import Report
from labmgr.models.sample import Sample
from labmgr.models.user import User

router = APIRouter(prefix="/api/dashboard", tags=["dashboard"])


class DashboardStats(CamelModel):
    total_samples: int
    active_users: int
    pending_reports: int
    completed_samples: int


@router.get("/stats", response_model=DashboardStats)
def dashboard_stats(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Counts across the whole lab, not just the caller's rows."""
    return DashboardStats(
        total_samples=db.query(func.count(Sample.id)).scalar(),
        active_users=db.query(func.count(User.id)).scalar(),
        pending_reports=db.query(func.count(Report.id)).filter(Report.status == "draft").scalar(),
        completed_samples=db.query(func.count(Sample.id)).filter(Sample.status == "completed").scalar(),
    )
