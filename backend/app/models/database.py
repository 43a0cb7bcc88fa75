"""Database engine and session factory for SQLAlchemy."""

from collections.abc import Iterator

from fastapi import Request
from sqlalchemy import Engine, create_engine, text
from sqlalchemy.orm import DeclarativeBase, sessionmaker, Session

from ..config import settings


class Base(DeclarativeBase):
    pass


def make_engine(url: str, echo: bool = False, **kwargs) -> Engine:
    """Create an engine; SQLite connections are shared across request threads."""
    if url.startswith("sqlite"):
        connect_args = kwargs.pop("connect_args", {})
        connect_args.setdefault("check_same_thread", False)
        kwargs["connect_args"] = connect_args
    return create_engine(url, echo=echo, **kwargs)


def make_session_factory(bind: Engine) -> sessionmaker[Session]:
    # Rows handed back to callers must stay readable after the unit of work closes
    return sessionmaker(bind=bind, autoflush=False, expire_on_commit=False)


engine = make_engine(settings.database_url, echo=settings.db_echo)

SessionLocal = make_session_factory(engine)


def get_db(request: Request) -> Iterator[Session]:
    """Dependency for FastAPI endpoints."""
    db = request.app.state.session_factory()
    try:
        yield db
    finally:
        db.close()


def init_database(bind: Engine) -> None:
    """Create all tables.

    Models must be imported before create_all() so they register with Base.metadata.
    """
    from . import directory  # noqa: F401
    from . import threshold  # noqa: F401
    from . import measurement  # noqa: F401
    from . import alert  # noqa: F401
    Base.metadata.create_all(bind=bind)

    # Enable WAL mode so dashboard reads don't block ingestion writes
    if bind.dialect.name == "sqlite" and bind.url.database not in (None, "", ":memory:"):
        with bind.connect() as conn:
            conn.execute(text("PRAGMA journal_mode=WAL"))
            conn.commit()
