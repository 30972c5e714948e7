# ---------------------------------------------------------------------------
# Author  : Kyle <kyle@hacking-linux.com>
# Version : 20261019v1
# ---------------------------------------------------------------------------
"""
Server-side session store backed by the ``sessions`` table.

Lifecycle
---------
* ``create``   – on login / registration; returns the opaque token.
* ``load``     – on every authenticated request; expired rows are ignored
                 and the expiry of a live row is pushed forward (rolling).
* ``destroy``  – on logout.
* ``purge_expired`` – housekeeping, see bin/purge_sessions.py.

The store never caches: every ``load`` is a point query, so a session
destroyed by one worker is immediately invisible to all others.
"""

import secrets
from datetime import datetime, timedelta, timezone
from typing import Optional

from sqlalchemy.orm import Session

from labmgr.models.session import UserSession


def _utcnow() -> datetime:
    # naive UTC, matching the naive DateTime columns on UserSession
    return datetime.now(timezone.utc).replace(tzinfo=None)


class SessionStore:

    def __init__(self, max_age: timedelta):
        self.max_age = max_age

    def create(self, db: Session, user_id: int, data: Optional[dict] = None) -> str:
        now = _utcnow()
        sid = secrets.token_urlsafe(32)
        db.add(UserSession(
            sid=sid,
            user_id=user_id,
            data=data or {},
            created_at=now,
            expires_at=now + self.max_age,
        ))
        db.commit()
        return sid

    def load(self, db: Session, sid: str) -> Optional[UserSession]:
        """Return the live session for *sid* (refreshing its expiry) or None."""
        now = _utcnow()
        row = (
            db.query(UserSession)
            .filter(UserSession.sid == sid, UserSession.expires_at > now)
            .first()
        )
        if row is None:
            return None
        row.expires_at = now + self.max_age
        db.commit()
        return row

    def destroy(self, db: Session, sid: str) -> None:
        db.query(UserSession).filter(UserSession.sid == sid).delete()
        db.commit()

    def destroy_for_user(self, db: Session, user_id: int) -> int:
        count = db.query(UserSession).filter(UserSession.user_id == user_id).delete()
        db.commit()
        return count

    def purge_expired(self, db: Session) -> int:
        count = (
            db.query(UserSession)
            .filter(UserSession.expires_at <= _utcnow())
            .delete()
        )
        db.commit()
        return count
