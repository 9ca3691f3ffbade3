"""Database engine, session factory and declarative base."""
from contextlib import contextmanager
from datetime import UTC, datetime
from typing import Iterator

from sqlalchemy import Column, DateTime, create_engine
from sqlalchemy.orm import declarative_base, sessionmaker, Session

from hskvocab.config import settings


def _connect_args(url: str) -> dict:
    # Progress is written from a background thread
    if url.startswith("sqlite"):
        return {"check_same_thread": False}
    return {}


engine = create_engine(
    settings.database.url,
    echo=settings.database.echo,
    connect_args=_connect_args(settings.database.url),
)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base = declarative_base()


class TimestampMixin:
    """Mixin to add timestamp columns to models."""
    created_at = Column(DateTime(timezone=True), default=lambda: datetime.now(UTC))
    updated_at = Column(
        DateTime(timezone=True),
        default=lambda: datetime.now(UTC),
        onupdate=lambda: datetime.now(UTC),
    )


@contextmanager
def session_scope(session_factory=SessionLocal) -> Iterator[Session]:
    """Provide a session that commits on success and rolls back on error."""
    db = session_factory()
    try:
        yield db
        db.commit()
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()


def init_db() -> None:
    """Create the tables for all registered models."""
    import hskvocab.models.models  # noqa: F401

    Base.metadata.create_all(bind=engine)
