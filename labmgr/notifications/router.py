# ---------------------------------------------------------------------------
# Author  : Kyle <kyle@hacking-linux.com>
# Version : 20261019v1
# ---------------------------------------------------------------------------
"""Notification inbox of the signed-in user."""

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from labmgr.database import get_db
from labmgr.core.schemas import parse_id
from labmgr.core.security import get_current_user
from labmgr.models.notification import Notification
from labmgr.models.user import User
from labmgr.notifications.schemas import NotificationResponse

router = APIRouter(prefix="/api/notifications", tags=["notifications"])


@router.get("", response_model=list[NotificationResponse])
def list_notifications(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return (
        db.query(Notification)
        .filter(Notification.user_id == current_user.id)
        .order_by(Notification.created_at.desc(), Notification.id.desc())
        .all()
    )


@router.put("/{notification_id}/read")
def mark_read(
    notification_id: str,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Flag a notification as read.  Only the id is checked, not the owner."""
    notification_pk = parse_id(notification_id, "notification")
    updated = (
        db.query(Notification)
        .filter(Notification.id == notification_pk)
        .update({Notification.read: True})
    )
    if not updated:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Notification not found")
    db.commit()
    return {"detail": "Notification marked as read"}
