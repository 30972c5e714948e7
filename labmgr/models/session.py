# ---------------------------------------------------------------------------
# Author  : Kyle <kyle@hacking-linux.com>
# Version : 20261019v1
# ---------------------------------------------------------------------------
"""UserSession ORM model – server-side login state keyed by the cookie token."""

from sqlalchemy import Column, Integer, String, JSON, DateTime, ForeignKey

from labmgr.database import Base


class UserSession(Base):
    __tablename__ = "sessions"

    # Opaque token; the browser only ever holds a signed copy of it.
    sid = Column(String(64), primary_key=True)
    user_id = Column(
        Integer,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    data = Column(JSON, nullable=True)  # client ip, user agent
    # Naive UTC timestamps; compared in SQL against a naive UTC "now".
    created_at = Column(DateTime, nullable=False)
    expires_at = Column(DateTime, nullable=False, index=True)
