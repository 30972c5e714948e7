# ---------------------------------------------------------------------------
# Author  : Kyle <kyle@hacking-linux.com>
# Version : 20261019v1
# ---------------------------------------------------------------------------
"""
Housekeeping script – deletes expired rows from the ``sessions`` table.

Expired sessions are already ignored on lookup; this only reclaims space.
Suitable for cron:
    */30 * * * *  cd /opt/labmgr && python bin/purge_sessions.py
"""

import sys
import os
from datetime import timedelta

_PROJECT_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if _PROJECT_ROOT not in sys.path:
    sys.path.insert(0, _PROJECT_ROOT)

from labmgr.core.config import settings          # noqa: E402
from labmgr.core.logger import logger            # noqa: E402
from labmgr.core.sessions import SessionStore    # noqa: E402
from labmgr.database import SessionLocal         # noqa: E402


def purge():
    store = SessionStore(timedelta(minutes=settings.session_max_age_minutes))
    db = SessionLocal()
    try:
        removed = store.purge_expired(db)
    finally:
        db.close()
    logger.info("Purged %d expired session(s)", removed)
    print(f"[purge_sessions] {removed} expired session(s) removed.")


if __name__ == "__main__":
    purge()
