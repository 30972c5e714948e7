# ---------------------------------------------------------------------------
# Author  : Kyle <kyle@hacking-linux.com>
# Version : 20261019v1
# ---------------------------------------------------------------------------
"""
Bootstrap script – creates the first admin user.

Run once after the initial migration:
    python bin/seed_admin.py

The script reads FIRST_ADMIN_USERNAME, FIRST_ADMIN_PASSWORD and
FIRST_ADMIN_EMAIL from etc/app.conf.  After the row is inserted those
settings are no longer used by the application.  Running it again is a
no-op.
"""

import sys
import os

# ---------------------------------------------------------------------------
# Path setup so the labmgr package is importable
# ---------------------------------------------------------------------------
# bin/seed_admin.py  →  ../  →  project root
_PROJECT_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if _PROJECT_ROOT not in sys.path:
    sys.path.insert(0, _PROJECT_ROOT)

from labmgr.core.config import settings               # noqa: E402
from labmgr.core.credentials import CredentialStore   # noqa: E402
from labmgr.core.security import PasswordHasher       # noqa: E402
from labmgr.database import SessionLocal              # noqa: E402
from labmgr.models.user import Role                   # noqa: E402


def seed():
    if not (settings.first_admin_username and settings.first_admin_password and settings.first_admin_email):
        print("[seed_admin] FIRST_ADMIN_USERNAME, FIRST_ADMIN_PASSWORD or FIRST_ADMIN_EMAIL not set in etc/app.conf – nothing to do.")
        return

    store = CredentialStore()
    db = SessionLocal()
    try:
        if store.get_by_username(db, settings.first_admin_username):
            print(f"[seed_admin] Admin '{settings.first_admin_username}' already exists – skipping.")
            return
        if store.get_by_email(db, settings.first_admin_email):
            print(f"[seed_admin] Email '{settings.first_admin_email}' is already taken – skipping.")
            return

        store.create(
            db,
            username=settings.first_admin_username,
            password=PasswordHasher().hash(settings.first_admin_password),
            first_name="System",
            last_name="Administrator",
            email=settings.first_admin_email,
            role=Role.ADMIN,
        )
        print(f"[seed_admin] Admin '{settings.first_admin_username}' created successfully.")
    finally:
        db.close()


if __name__ == "__main__":
    seed()
