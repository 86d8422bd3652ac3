"""
Database session management
"""
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from hrms_attendance.core.config import settings
from hrms_attendance.db.base import Base
from hrms_attendance.models import StoredRecord  # noqa: F401  (registers the table)


def _connect_args(url: str) -> dict:
    """Driver-level timeouts so a stalled store surfaces as an error instead of hanging."""
    if url.startswith("sqlite"):
        return {"check_same_thread": False, "timeout": settings.STORE_TIMEOUT_SECONDS}
    if url.startswith("postgresql"):
        return {"connect_timeout": settings.STORE_TIMEOUT_SECONDS}
    return {}


engine = create_engine(
    settings.DATABASE_URL,
    pool_pre_ping=True,
    connect_args=_connect_args(settings.DATABASE_URL),
    echo=False
)

# Create all tables automatically on startup for SQLite
if "sqlite" in settings.DATABASE_URL:
    Base.metadata.create_all(bind=engine)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

