from __future__ import annotations

from collections.abc import Generator

from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker

from campus_hub.settings import get_settings


_settings = get_settings()

engine = create_engine(
    _settings.resolved_db_url(),
    connect_args={"check_same_thread": False} if _settings.resolved_db_url().startswith("sqlite") else {},
)

SessionLocal = sessionmaker(bind=engine, autocommit=False, autoflush=False, class_=Session)


def get_db() -> Generator[Session, None, None]:
    """
    Main DB dependency, one session per request.

    Existing code that does `db.scalars(select(Model))` is scoped without
    changes: the security dependency stores the request's data scope in
    `Session.info["data_scope"]` and `campus_hub.db.filters` reads it.
    """

    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
