"""SQLAlchemy engine and sessions for the profile, resume and job tables."""

from typing import Any, Dict, Generator

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, Session
from sqlalchemy.pool import StaticPool, QueuePool

from talentrank.config import get_settings
from talentrank.models.database import Base

settings = get_settings()


def engine_options(database_url: str) -> Dict[str, Any]:
    """Pool arguments for the given URL: one shared connection for SQLite, a pool for Postgres."""
    if database_url.startswith("sqlite"):
        return {"connect_args": {"check_same_thread": False}, "poolclass": StaticPool}
    return {"poolclass": QueuePool, "pool_size": 5, "max_overflow": 10, "pool_pre_ping": True}


engine = create_engine(settings.database_url, echo=settings.debug, **engine_options(settings.database_url))
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def get_db() -> Generator[Session, None, None]:
    """Request-scoped session; the ranking routes only read through it."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def init_db() -> None:
    Base.metadata.create_all(bind=engine)
