"""Request-scoped database session."""

from collections.abc import Generator

from sqlalchemy.orm import Session

from hyr_admin.db.session import SessionLocal


def get_db_session() -> Generator[Session, None, None]:
    """Yield a session; services commit, anything left pending is rolled back."""

    session = SessionLocal()
    try:
        yield session
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()
