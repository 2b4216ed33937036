"""
Database connection and session management.
"""

from pathlib import Path

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.orm import sessionmaker

from config.settings import settings
from prospects.models import Base


def build_engine(url: str = settings.DATABASE_URL) -> Engine:
    """Create an engine, making sure a file-backed sqlite directory exists."""
    parsed = make_url(url)
    if parsed.get_backend_name() == "sqlite" and parsed.database not in (None, "", ":memory:"):
        Path(parsed.database).parent.mkdir(parents=True, exist_ok=True)

    return create_engine(url, echo=settings.DEBUG, future=True)


engine = build_engine()

SessionLocal = sessionmaker(bind=engine, autoflush=False, autocommit=False)


def init_db(bind: Engine = engine):
    """Initialize database tables."""
    Base.metadata.create_all(bind=bind)


def get_db():
    """Get database session."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
