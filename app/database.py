"""SQLAlchemy engine, session factory and declarative base.

``get_db`` is the FastAPI dependency that yields one session per request and
always closes it.  SQLite URLs (used by the test suite) get
``check_same_thread=False`` and, for in-memory databases, a ``StaticPool`` so
every session sees the same database.

``transient_io`` wraps store calls so a lost connection surfaces as the
retryable ``TransientIOError`` instead of a raw driver exception.
"""

import logging
from collections.abc import Generator, Iterator
from contextlib import contextmanager

from sqlalchemy import create_engine
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import DeclarativeBase, Session, sessionmaker
from sqlalchemy.pool import StaticPool

from app.config import get_settings
from app.engine.errores import TransientIOError

logger = logging.getLogger(__name__)

settings = get_settings()

_engine_kwargs: dict = {"pool_pre_ping": True}
if settings.DATABASE_URL.startswith("sqlite"):
    _engine_kwargs["connect_args"] = {"check_same_thread": False}
    if settings.DATABASE_URL in ("sqlite://", "sqlite:///:memory:"):
        _engine_kwargs["poolclass"] = StaticPool

engine = create_engine(settings.DATABASE_URL, **_engine_kwargs)
SessionLocal = sessionmaker(bind=engine, autocommit=False, autoflush=False)


class Base(DeclarativeBase):
    pass


def get_db() -> Generator[Session, None, None]:
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


@contextmanager
def transient_io(operacion: str) -> Iterator[None]:
    """Translate ``OperationalError`` raised inside the block into ``TransientIOError``."""
    try:
        yield
    except OperationalError as exc:
        logger.error("%s: base de datos no disponible: %s", operacion, exc.orig)
        raise TransientIOError(
            "El almacenamiento no está disponible, intente nuevamente"
        ) from exc
