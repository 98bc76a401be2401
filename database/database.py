"""Database helpers: engines, session factories and DB initialization.

Provides read/write session factories and a simple `init_db` helper that
creates tables and seeds demo recipes when the DB is empty.
"""

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from core.config import WRITE_DATABASE_URL, READ_DATABASE_URL
from .models import Base


def _connect_args(url: str) -> dict:
    # SQLite connections are shared across FastAPI's threadpool workers.
    return {"check_same_thread": False} if url.startswith("sqlite") else {}


# Read/Write partitioning pattern
# In production, set WRITE_DATABASE_URL and READ_DATABASE_URL to different DB instances.
# For SQLite/demo this defaults to the same file but the interfaces are separated.
write_engine = create_engine(WRITE_DATABASE_URL, connect_args=_connect_args(WRITE_DATABASE_URL))
read_engine = create_engine(READ_DATABASE_URL, connect_args=_connect_args(READ_DATABASE_URL))

WriteSessionLocal = sessionmaker(bind=write_engine)
ReadSessionLocal = sessionmaker(bind=read_engine)


def init_db(seed: bool = True):
    """Initialize database schema and optionally seed demo recipes.

    Creates all tables using SQLAlchemy models and populates the recipes
    table with the demo dataset if the table is empty.
    """
    Base.metadata.create_all(bind=write_engine)
    if not seed:
        return
    from data.seed_recipes import seed_recipes

    session = WriteSessionLocal()
    try:
        seed_recipes(session)
    finally:
        session.close()


# Convenience generators for dependency injection
def get_write_session():
    """Yield a write-enabled SQLAlchemy session for the request scope.

    Use this generator as a FastAPI dependency to ensure the session is
    properly closed after the request completes.
    """
    db = WriteSessionLocal()
    try:
        yield db
    finally:
        db.close()


def get_read_session():
    """Yield a read-only SQLAlchemy session for the request scope.

    Used for read endpoints where routing reads to a replica may be desired.
    """
    db = ReadSessionLocal()
    try:
        yield db
    finally:
        db.close()
