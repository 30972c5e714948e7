# ---------------------------------------------------------------------------
# Author  : Kyle <kyle@hacking-linux.com>
# Version : 20261019v1
# ---------------------------------------------------------------------------
"""
Admin endpoints – user management, dashboard aggregates, protocol library
maintenance, broadcast notifications and the sample export.

Every endpoint in this router is guarded by ``require_admin``.  A request
that carries a valid session but belongs to any other role receives 403
before any business logic runs.
"""

import io
from datetime import datetime, timedelta, timezone
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Response, status
from fastapi.responses import StreamingResponse
from openpyxl import Workbook
from openpyxl.styles import Font, PatternFill, Alignment, Border, Side
from sqlalchemy import func
from sqlalchemy.orm import Session

from labmgr.database import get_db
from labmgr.core.logger import logger
from labmgr.core.schemas import parse_id
from labmgr.core.security import AuthContext, get_auth, require_admin
from labmgr.models.notification import Notification
from labmgr.models.protocol import Protocol
from labmgr.models.report import Report
from labmgr.models.sample import Sample
from labmgr.models.user import Role, User
from labmgr.admin.schemas import (
    ActivityLogRow,
    AdminStats,
    AdminUserUpdate,
    NotificationBroadcast,
    SampleTrendPoint,
)
from labmgr.auth.schemas import UserResponse
from labmgr.notifications.schemas import NotificationResponse
from labmgr.protocols.router import create_protocol_for, search_protocols
from labmgr.protocols.schemas import ProtocolCreate, ProtocolResponse, ProtocolUpdate
from labmgr.samples.schemas import SampleResponse

router = APIRouter(prefix="/api/admin", tags=["admin"])

_RECENT_LIMIT = 10
_TREND_DAYS = 7


def _as_utc(value: datetime) -> datetime:
    # SQLite hands back naive datetimes even for timezone=True columns
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


# ---------------------------------------------------------------------------
# GET /api/admin/users  – list all users
# ---------------------------------------------------------------------------


@router.get("/users", response_model=list[UserResponse])
def list_users(
    admin: User = Depends(require_admin),
    db: Session = Depends(get_db),
    auth: AuthContext = Depends(get_auth),
):
    """Every user, newest first (no password data – handled by the schema)."""
    return auth.credentials.list_all(db)


# ---------------------------------------------------------------------------
# PUT /api/admin/users/{id}  – edit profile fields and role
# ---------------------------------------------------------------------------


@router.put("/users/{user_id}", response_model=UserResponse)
def update_user(
    user_id: str,
    body: AdminUserUpdate,
    admin: User = Depends(require_admin),
    db: Session = Depends(get_db),
    auth: AuthContext = Depends(get_auth),
):
    """
    Partial update of another account.  Guards:
    * The body must carry at least one field.
    * Username and email stay unique.
    * An admin cannot demote themselves (prevents accidental self-lockout).
    """
    target_id = parse_id(user_id, "user")
    changes = body.model_dump(exclude_unset=True, exclude_none=True)
    if not changes:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="No update data provided")

    if target_id == admin.id and changes.get("role", Role.ADMIN) is not Role.ADMIN:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Cannot change your own role",
        )

    if "username" in changes:
        clash = auth.credentials.get_by_username(db, changes["username"])
        if clash is not None and clash.id != target_id:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Username already exists")
    if "email" in changes:
        clash = auth.credentials.get_by_email(db, changes["email"])
        if clash is not None and clash.id != target_id:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Email already exists")

    user = auth.credentials.update(db, target_id, **changes)
    if user is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")

    logger.info("Admin id=%d updated user id=%d: %s", admin.id, target_id, ", ".join(sorted(changes)))
    return user


# ---------------------------------------------------------------------------
# DELETE /api/admin/users/{id}
# ---------------------------------------------------------------------------


@router.delete("/users/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_user(
    user_id: str,
    admin: User = Depends(require_admin),
    db: Session = Depends(get_db),
    auth: AuthContext = Depends(get_auth),
):
    """
    Hard-delete an account and every session it holds.  Samples, reports
    and protocols it owns are left in place.

    Guard: an admin cannot delete their own account.
    """
    target_id = parse_id(user_id, "user")
    if target_id == admin.id:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Cannot delete your own account",
        )

    if auth.credentials.get(db, target_id) is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")

    auth.sessions.destroy_for_user(db, target_id)
    auth.credentials.delete(db, target_id)
    logger.info("Admin id=%d deleted user id=%d", admin.id, target_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


# ---------------------------------------------------------------------------
# Dashboard aggregates
# ---------------------------------------------------------------------------


@router.get("/stats", response_model=AdminStats)
def admin_stats(
    admin: User = Depends(require_admin),
    db: Session = Depends(get_db),
):
    # created_at holds UTC; compare against a naive UTC bound
    week_ago = datetime.now(timezone.utc).replace(tzinfo=None) - timedelta(days=7)

    def count(column, *criteria) -> int:
        return db.query(func.count(column)).filter(*criteria).scalar()

    return AdminStats(
        total_users=count(User.id),
        active_users=count(User.id, User.created_at > week_ago),
        total_samples=count(Sample.id),
        pending_samples=count(Sample.id, Sample.status == "pending"),
        completed_samples=count(Sample.id, Sample.status == "completed"),
        total_reports=count(Report.id),
        pending_reports=count(Report.id, Report.status == "draft"),
        system_alerts=0,
    )


@router.get("/recent-users", response_model=list[UserResponse])
def recent_users(
    admin: User = Depends(require_admin),
    db: Session = Depends(get_db),
):
    return db.query(User).order_by(User.created_at.desc(), User.id.desc()).limit(_RECENT_LIMIT).all()


@router.get("/recent-samples", response_model=list[SampleResponse])
def recent_samples(
    admin: User = Depends(require_admin),
    db: Session = Depends(get_db),
):
    return db.query(Sample).order_by(Sample.created_at.desc(), Sample.id.desc()).limit(_RECENT_LIMIT).all()


@router.get("/activity-logs", response_model=list[ActivityLogRow])
def activity_logs(
    admin: User = Depends(require_admin),
    db: Session = Depends(get_db),
):
    """One CREATE_SAMPLE entry per recent sample, newest first."""
    samples = db.query(Sample).order_by(Sample.created_at.desc(), Sample.id.desc()).limit(_RECENT_LIMIT).all()
    owner_ids = {s.user_id for s in samples}
    owners = {u.id: u for u in db.query(User).filter(User.id.in_(owner_ids)).all()} if owner_ids else {}

    rows = []
    for sample in samples:
        owner = owners.get(sample.user_id)
        rows.append(ActivityLogRow(
            id=sample.id,
            user_id=sample.user_id,
            action="CREATE_SAMPLE",
            entity_type="sample",
            entity_id=sample.id,
            timestamp=sample.created_at,
            user_name=f"{owner.first_name} {owner.last_name}" if owner else "Unknown User",
            details=f"Created sample {sample.sample_id} ({sample.sample_type})",
        ))
    return rows


@router.get("/sample-trends", response_model=list[SampleTrendPoint])
def sample_trends(
    admin: User = Depends(require_admin),
    db: Session = Depends(get_db),
):
    """Samples created on each of the last seven UTC days, oldest day first."""
    today = datetime.now(timezone.utc).date()
    first_day = today - timedelta(days=_TREND_DAYS - 1)
    since = datetime.combine(first_day, datetime.min.time(), tzinfo=timezone.utc)

    counts: dict = {}
    for (created_at,) in db.query(Sample.created_at).filter(Sample.created_at >= since).all():
        day = _as_utc(created_at).date()
        counts[day] = counts.get(day, 0) + 1

    points = []
    for offset in range(_TREND_DAYS):
        day = first_day + timedelta(days=offset)
        points.append(SampleTrendPoint(date=f"{day:%b} {day.day}", samples=counts.get(day, 0)))
    return points


# ---------------------------------------------------------------------------
# Protocol library maintenance
# ---------------------------------------------------------------------------


def _load_protocol(raw_id: str, db: Session) -> Protocol:
    protocol_pk = parse_id(raw_id, "protocol")
    protocol = db.query(Protocol).filter(Protocol.id == protocol_pk).first()
    if not protocol:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Protocol not found")
    return protocol


@router.get("/protocols", response_model=list[ProtocolResponse])
def list_protocols(
    search: Optional[str] = Query(None),
    admin: User = Depends(require_admin),
    db: Session = Depends(get_db),
):
    return search_protocols(db, search)


@router.post("/protocols", response_model=ProtocolResponse, status_code=status.HTTP_201_CREATED)
def create_protocol(
    body: ProtocolCreate,
    admin: User = Depends(require_admin),
    db: Session = Depends(get_db),
):
    return create_protocol_for(body, admin, db)


@router.put("/protocols/{protocol_id}", response_model=ProtocolResponse)
def update_protocol(
    protocol_id: str,
    body: ProtocolUpdate,
    admin: User = Depends(require_admin),
    db: Session = Depends(get_db),
):
    protocol = _load_protocol(protocol_id, db)
    for key, value in body.model_dump(exclude_unset=True, exclude_none=True).items():
        setattr(protocol, key, value)
    db.commit()
    db.refresh(protocol)
    return protocol


@router.delete("/protocols/{protocol_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_protocol(
    protocol_id: str,
    admin: User = Depends(require_admin),
    db: Session = Depends(get_db),
):
    protocol = _load_protocol(protocol_id, db)
    db.delete(protocol)
    db.commit()
    return Response(status_code=status.HTTP_204_NO_CONTENT)


# ---------------------------------------------------------------------------
# Notifications
# ---------------------------------------------------------------------------


@router.get("/notifications", response_model=list[NotificationResponse])
def list_all_notifications(
    admin: User = Depends(require_admin),
    db: Session = Depends(get_db),
):
    return db.query(Notification).order_by(Notification.created_at.desc(), Notification.id.desc()).all()


@router.post(
    "/notifications",
    response_model=list[NotificationResponse],
    status_code=status.HTTP_201_CREATED,
)
def broadcast_notification(
    body: NotificationBroadcast,
    admin: User = Depends(require_admin),
    db: Session = Depends(get_db),
):
    """Fan one message out to every user, one role, or listed user ids."""
    q = db.query(User.id)
    if body.target_users == "role":
        q = q.filter(User.role == body.target_role)
    elif body.target_users == "specific":
        q = q.filter(User.id.in_(body.specific_user_ids))
    recipients = [user_id for (user_id,) in q.order_by(User.id).all()]

    if not recipients:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="No matching recipients")

    created = [
        Notification(user_id=user_id, title=body.title, message=body.message, type=body.type)
        for user_id in recipients
    ]
    db.add_all(created)
    db.commit()
    for notification in created:
        db.refresh(notification)

    logger.info("Admin id=%d sent %r to %d user(s)", admin.id, body.title, len(created))
    return created


# ---------------------------------------------------------------------------
# GET /api/admin/samples/export  – download every sample as Excel
# ---------------------------------------------------------------------------

_EXPORT_HEADER_FONT  = Font(name="Calibri", size=11, bold=True, color="FFFFFF")
_EXPORT_HEADER_FILL  = PatternFill(start_color="2E7D32", end_color="2E7D32", fill_type="solid")
_EXPORT_HEADER_ALIGN = Alignment(horizontal="center", vertical="center")
_EXPORT_THIN_BORDER  = Border(
    left=Side(style="thin", color="CCCCCC"),
    right=Side(style="thin", color="CCCCCC"),
    top=Side(style="thin", color="CCCCCC"),
    bottom=Side(style="thin", color="CCCCCC"),
)

_SAMPLE_EXPORT_HEADERS = [
    "ID", "Sample ID", "Owner", "Type", "Collected", "Time", "Location",
    "Temperature", "pH", "Salinity", "Conductivity", "Status", "Created",
]
_SAMPLE_EXPORT_WIDTHS = [8, 18, 22, 16, 12, 8, 30, 12, 8, 10, 12, 12, 20]


def _decimal_cell(value):
    return float(value) if value is not None else ""


@router.get("/samples/export")
def export_samples(
    admin: User = Depends(require_admin),
    db: Session = Depends(get_db),
):
    """Export all samples as an Excel workbook."""
    samples = db.query(Sample).order_by(Sample.created_at.desc(), Sample.id.desc()).all()
    owners = {u.id: u.username for u in db.query(User).all()}

    wb = Workbook()
    ws = wb.active
    ws.title = "Samples"

    # Header row
    ws.append(_SAMPLE_EXPORT_HEADERS)
    for cell in ws[1]:
        cell.font = _EXPORT_HEADER_FONT
        cell.fill = _EXPORT_HEADER_FILL
        cell.alignment = _EXPORT_HEADER_ALIGN
        cell.border = _EXPORT_THIN_BORDER

    # Data rows
    for sample in samples:
        ws.append([
            sample.id,
            sample.sample_id,
            owners.get(sample.user_id, ""),
            sample.sample_type,
            sample.collection_date.strftime("%Y-%m-%d") if sample.collection_date else "",
            sample.collection_time,
            sample.location or "",
            _decimal_cell(sample.temperature),
            _decimal_cell(sample.ph),
            _decimal_cell(sample.salinity),
            _decimal_cell(sample.conductivity),
            sample.status,
            sample.created_at.strftime("%Y-%m-%d %H:%M:%S") if sample.created_at else "",
        ])
        row_idx = ws.max_row
        for col_idx in range(1, len(_SAMPLE_EXPORT_HEADERS) + 1):
            ws.cell(row=row_idx, column=col_idx).border = _EXPORT_THIN_BORDER

    for col_idx, width in enumerate(_SAMPLE_EXPORT_WIDTHS, start=1):
        ws.column_dimensions[chr(64 + col_idx)].width = width

    buf = io.BytesIO()
    wb.save(buf)
    buf.seek(0)
    wb.close()

    return StreamingResponse(
        buf,
        media_type="application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
        headers={"Content-Disposition": 'attachment; filename="samples.xlsx"'},
    )
