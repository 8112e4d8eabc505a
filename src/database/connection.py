"""
Database Connection Module

This module provides SQLite engine management for the collector. Engines are
cached per database file so every component of a run shares one engine.
"""

from contextlib import contextmanager
from pathlib import Path
from typing import Any, Callable, Dict, Generator, Optional, Union
import atexit
import threading

from sqlalchemy import create_engine, event, text
from sqlalchemy.engine import Connection, Engine
from sqlalchemy.exc import SQLAlchemyError

from src.utils.core.logger import get_logger

logger = get_logger(__name__, utility="database")


# Module-level engine registry keyed by resolved database path
_ENGINES: Dict[str, Engine] = {}
# Use a reentrant lock to allow init routines to call each other without deadlocking
_ENGINE_LOCK = threading.RLock()


def _database_url(db_path: Union[str, Path]) -> str:
    return f"sqlite:///{db_path}"


def _engine_key(db_path: Union[str, Path]) -> str:
    return str(Path(db_path).expanduser().resolve())


def _enable_sqlite_transactions(engine: Engine) -> None:
    """Let SQLAlchemy, not pysqlite, decide where transactions begin."""

    @event.listens_for(engine, "connect")
    def _on_connect(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None

    @event.listens_for(engine, "begin")
    def _on_begin(conn):
        conn.exec_driver_sql("BEGIN")


def get_engine(db_path: Union[str, Path]) -> Engine:
    """Return the engine for a database file, creating it on first use (idempotent)."""
    key = _engine_key(db_path)
    engine = _ENGINES.get(key)
    if engine is None:
        with _ENGINE_LOCK:
            engine = _ENGINES.get(key)
            if engine is None:
                engine = create_engine(_database_url(db_path), future=True)
                _enable_sqlite_transactions(engine)
                _ENGINES[key] = engine
                logger.debug(f"Created SQLite engine for {key}")
    return engine


def dispose_engine(db_path: Union[str, Path]) -> None:
    """Dispose and forget the engine of a database file, if any."""
    with _ENGINE_LOCK:
        engine = _ENGINES.pop(_engine_key(db_path), None)
    if engine is not None:
        engine.dispose()


def close_all_engines() -> None:
    """Dispose every cached engine."""
    with _ENGINE_LOCK:
        engines = list(_ENGINES.values())
        _ENGINES.clear()
    for engine in engines:
        try:
            engine.dispose()
        except SQLAlchemyError as exc:
            logger.error(f"Error disposing engine: {exc}")


@contextmanager
def transaction(engine: Engine) -> Generator[Connection, None, None]:
    """Yield a connection inside a transaction.

    Commits when the block exits normally, rolls back and re-raises on error.
    """
    with engine.begin() as conn:
        yield conn


def run_in_transaction(engine: Engine, fn: Callable[[Connection], Any]) -> Any:
    """Run a callable(fn) inside a transaction. fn(conn) -> result

    Commits on success, rolls back and re-raises on error.
    """
    with transaction(engine) as conn:
        return fn(conn)


def fetch_scalar(engine: Engine, query: str, params: Optional[Dict[str, Any]] = None) -> Any:
    """Execute a read query and return the first column of the first row."""
    with engine.connect() as conn:
        return conn.execute(text(query), params or {}).scalar()


def check_database_health(engine: Engine) -> bool:
    """Check that the database answers a trivial query."""
    try:
        return fetch_scalar(engine, "SELECT 1") == 1
    except SQLAlchemyError as exc:
        logger.error(f"Database health check failed: {exc}")
        return False


# Ensure engines are disposed on normal interpreter exit
atexit.register(close_all_engines)
