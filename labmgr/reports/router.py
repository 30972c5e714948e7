# ---------------------------------------------------------------------------
# Author  : Kyle <kyle@hacking-linux.com>
# Version : 20261019v1
# ---------------------------------------------------------------------------
"""
Report endpoints.  A report is owned by the user who generated it; the
same owner-or-admin rule as samples applies to reads and edits.
"""

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from labmgr.database import get_db
from labmgr.core.logger import logger
from labmgr.core.schemas import parse_id
from labmgr.core.security import can_access, ensure_owner_or_admin, get_current_user, is_admin
from labmgr.models.notification import Notification
from labmgr.models.report import Report
from labmgr.models.sample import Sample
from labmgr.models.user import User
from labmgr.reports.schemas import ReportCreate, ReportResponse, ReportUpdate

router = APIRouter(prefix="/api/reports", tags=["reports"])


def _load_report(raw_id: str, user: User, db: Session) -> Report:
    report_pk = parse_id(raw_id, "report")
    report = db.query(Report).filter(Report.id == report_pk).first()
    if not report:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Report not found")
    ensure_owner_or_admin(user, report.generated_by)
    return report


@router.get("", response_model=list[ReportResponse])
def list_reports(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    q = db.query(Report)
    if not is_admin(current_user):
        q = q.filter(Report.generated_by == current_user.id)
    return q.order_by(Report.created_at.desc(), Report.id.desc()).all()


@router.post("", response_model=ReportResponse, status_code=status.HTTP_201_CREATED)
def create_report(
    body: ReportCreate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """
    Generate a report for a sample the caller can see, then notify the
    caller that it is ready.
    """
    sample = db.query(Sample).filter(Sample.id == body.sample_id).first()
    if not sample:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Sample not found")
    if not can_access(current_user, sample.user_id):
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Access denied")

    report = Report(generated_by=current_user.id, **body.model_dump())
    db.add(report)
    db.flush()
    db.add(Notification(
        user_id=current_user.id,
        title="Report Generated",
        message=f'Report "{report.title}" has been generated',
        type="report_generated",
    ))
    db.commit()
    db.refresh(report)

    logger.info("Report id=%d for sample id=%d generated by user id=%d", report.id, sample.id, current_user.id)
    return report


@router.get("/{report_id}", response_model=ReportResponse)
def get_report(
    report_id: str,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return _load_report(report_id, current_user, db)


@router.put("/{report_id}", response_model=ReportResponse)
def update_report(
    report_id: str,
    body: ReportUpdate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    report = _load_report(report_id, current_user, db)
    for key, value in body.model_dump(exclude_unset=True).items():
        setattr(report, key, value)
    db.commit()
    db.refresh(report)
    return report
