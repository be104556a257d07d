import asyncio
import logging
from contextlib import contextmanager
from typing import Callable, Iterator, Optional

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.exc import OperationalError, SQLAlchemyError
from sqlalchemy.orm import Session, declarative_base, sessionmaker

from callspend.config import settings
from callspend.errors import StorageError

logger = logging.getLogger(__name__)

Base = declarative_base()

SessionFactory = Callable[[], Session]


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record) -> None:
    # SQLite ignores ON DELETE CASCADE unless enforcement is switched on per connection.
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def create_db_engine(url: str, **options) -> Engine:
    """Build an engine for ``url``. Keyword ``options`` override the pool defaults."""
    if url.startswith("sqlite"):
        engine_options = {
            "connect_args": {"check_same_thread": False},
            "pool_timeout": settings.pool_timeout_seconds,
        }
        engine_options.update(options)
        db_engine = create_engine(url, **engine_options)
        event.listen(db_engine, "connect", _enable_sqlite_foreign_keys)
        return db_engine
    engine_options = {
        "pool_pre_ping": True,
        "pool_size": settings.pool_size,
        "pool_timeout": settings.pool_timeout_seconds,
    }
    engine_options.update(options)
    return create_engine(url, **engine_options)


def create_session_factory(bind: Engine) -> sessionmaker:
    return sessionmaker(autocommit=False, autoflush=False, bind=bind)


engine = create_db_engine(settings.database_url)
SessionLocal = create_session_factory(engine)


def get_db() -> Iterator[Session]:
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def get_session_factory() -> SessionFactory:
    return SessionLocal


@contextmanager
def session_scope(factory: Optional[SessionFactory] = None) -> Iterator[Session]:
    """Open a session from ``factory`` and always close it on exit.

    Closing a session releases its connection back to the pool and discards
    any transaction that was not committed.
    """
    db = (factory or SessionLocal)()
    try:
        yield db
    finally:
        db.close()


def _rollback(db: Session) -> bool:
    try:
        db.rollback()
    except SQLAlchemyError:
        logger.exception("Rollback failed; connection will be discarded.")
        return False
    return True


@contextmanager
def transaction(db: Session) -> Iterator[Session]:
    """Commit ``db`` when the block succeeds, roll it back on any failure.

    Database errors are re-raised as :class:`StorageError`. Anything else,
    including cancellation, is rolled back and propagated unchanged.
    """
    try:
        yield db
        db.commit()
    except SQLAlchemyError as exc:
        rolled_back = _rollback(db)
        raise StorageError(f"{type(exc).__name__}: {exc}", rolled_back=rolled_back) from exc
    except BaseException:
        _rollback(db)
        raise


def init_db(bind: Optional[Engine] = None) -> None:
    from callspend import models  # noqa: F401

    Base.metadata.create_all(bind=bind or engine)


def dispose_engine() -> None:
    engine.dispose()


async def wait_for_database(
    bind: Optional[Engine] = None,
    max_attempts: int = 8,
    delay_seconds: float = 1.5,
    max_delay_seconds: float = 10.0,
) -> None:
    """Block until ``bind`` accepts a connection, backing off between attempts.

    The last :class:`OperationalError` is re-raised once ``max_attempts`` is used up.
    """
    db_engine = bind or engine
    delay = delay_seconds
    for attempt in range(1, max_attempts + 1):
        try:
            with db_engine.connect():
                logger.debug("Database reachable after %s attempt(s).", attempt)
                return
        except OperationalError:
            if attempt == max_attempts:
                logger.error("Giving up on %s after %s attempts.", db_engine.url, attempt)
                raise
            logger.warning(
                "Database %s unavailable (%s/%s), retrying in %.1fs.",
                db_engine.url,
                attempt,
                max_attempts,
                delay,
            )
        await asyncio.sleep(delay)
        delay = min(delay * 2, max_delay_seconds)
