"""Database dependencies for FastAPI endpoints."""

from collections.abc import Generator

from sqlalchemy.orm import Session

from obligation_tracker.db.session import SessionLocal


def get_db_session() -> Generator[Session, None, None]:
    """Yield one session per request; work left uncommitted by a failure is rolled back."""

    session = SessionLocal()
    try:
        yield session
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()
