# ---------------------------------------------------------------------------
# Author  : Kyle <kyle@hacking-linux.com>
# Version : 20261019v1
# ---------------------------------------------------------------------------
"""
Alembic environment – wires the migration engine to the same database URL
used by the application.

The URL is loaded from etc/app.conf via the application's Settings class,
so there is a single source of truth for the connection string.
"""

from alembic import context
from sqlalchemy import create_engine

from labmgr.core.config import settings
from labmgr.database import Base

# Import every ORM model so that Base.metadata knows about all tables.
# Without this, ``alembic revision --autogenerate`` cannot detect them.
import labmgr.models.user          # noqa: F401, E402
import labmgr.models.session       # noqa: F401, E402
import labmgr.models.sample        # noqa: F401, E402
import labmgr.models.sensor_data   # noqa: F401, E402
import labmgr.models.protocol      # noqa: F401, E402
import labmgr.models.report        # noqa: F401, E402
import labmgr.models.notification  # noqa: F401, E402


# ---------------------------------------------------------------------------
# Online mode (the default – uses a live DB connection)
# ---------------------------------------------------------------------------
def run_migrations_online():
    connectable = create_engine(settings.database_url)
    with connectable.connect() as conn:
        context.configure(
            connection=conn,
            target_metadata=Base.metadata,
        )
        with context.begin_transaction():
            context.run_migrations()


# ---------------------------------------------------------------------------
# Offline mode (generates SQL without a live connection)
# ---------------------------------------------------------------------------
def run_migrations_offline():
    context.configure(
        url=settings.database_url,
        target_metadata=Base.metadata,
        literal_binds=True,
    )
    with context.begin_transaction():
        context.run_migrations()


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------
if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
