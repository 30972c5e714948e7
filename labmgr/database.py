# ---------------------------------------------------------------------------
# Author  : Kyle <kyle@hacking-linux.com>
# Version : 20261019v1
# ---------------------------------------------------------------------------
"""
SQLAlchemy engine, session factory, declarative base, and the ``get_db``
request dependency.

DATABASE_URL decides the backend: MySQL (PyMySQL) in production, SQLite
for local runs and tests.
"""

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, declarative_base

from labmgr.core.config import settings


def engine_options(url: str) -> dict:
    """Keyword arguments for ``create_engine`` suited to *url*'s backend."""
    if url.startswith("sqlite"):
        # route handlers run in the threadpool, not on the connecting thread
        return {"connect_args": {"check_same_thread": False}}
    # pool_pre_ping keeps idle connections alive across MySQL's wait_timeout
    return {"pool_pre_ping": True}


engine = create_engine(settings.database_url, **engine_options(settings.database_url))

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base = declarative_base()


def get_db():
    """One session per request, closed when the response is done."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
