"""
Engine and session plumbing for the library database.

Every tool call and resource read works in its own session, and on a SQLite
file every session checks out its own connection, so rolling back one request
never touches another request's pending checkout.

Reads run in pysqlite's default transaction mode: no lock is held between
statements, and a write transaction starts implicitly at the first INSERT,
UPDATE or DELETE. Taking a book needs more than that, because the holder
count it checks must not change before it commits. ``begin_write`` opens that
transaction with ``BEGIN IMMEDIATE``: SQLite grants its single write lock to
one connection at a time, so a second take of the same book waits (up to the
busy timeout) for the first to commit and then counts its checkout.
"""

import logging
from collections.abc import Callable, Generator
from contextlib import contextmanager
from typing import TypeVar

from sqlalchemy import create_engine, event, text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from ..config import get_config
from .schema import Base

logger = logging.getLogger(__name__)

T = TypeVar("T")


def build_engine(database_url: str, echo: bool = False, busy_timeout: float = 5.0) -> Engine:
    """
    Create an engine for the library database.

    SQLite connections get foreign key enforcement and wait ``busy_timeout``
    seconds for a locked database before failing.
    """
    if not database_url.startswith("sqlite"):
        return create_engine(database_url, pool_pre_ping=True, echo=echo)

    options = {
        "echo": echo,
        # Handlers may run on worker threads
        "connect_args": {"check_same_thread": False, "timeout": busy_timeout},
    }
    if ":memory:" in database_url or database_url.rstrip("/") == "sqlite:":
        # An in-memory database lives and dies with its one connection
        options["poolclass"] = StaticPool

    engine = create_engine(database_url, **options)

    @event.listens_for(engine, "connect")
    def enable_foreign_keys(dbapi_connection, connection_record):  # noqa: ARG001
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    return engine


def begin_write(session: Session) -> None:
    """
    Start a transaction that holds the database write lock until it ends.

    Whatever the session has read so far is rolled back first, so rows loaded
    afterwards include every write committed before the lock was granted.
    Backends other than SQLite rely on ``SELECT ... FOR UPDATE`` instead.

    Raises:
        ValueError: If the lock is not granted within the busy timeout
    """
    if session.in_transaction():
        session.rollback()

    connection = session.connection()
    if connection.dialect.name != "sqlite":
        return

    try:
        connection.exec_driver_sql("BEGIN IMMEDIATE")
    except OperationalError as e:
        session.rollback()
        raise ValueError(f"Could not lock the library database: {e.orig}") from e


class DatabaseManager:
    """Owns the engine and hands out sessions for one database."""

    def __init__(
        self,
        database_url: str | None = None,
        echo: bool | None = None,
        busy_timeout: float | None = None,
    ):
        """
        Args:
            database_url: SQLAlchemy URL. Defaults to the configured SQLite file.
            echo: Log emitted SQL. Defaults to ``sql_echo`` from the config.
            busy_timeout: Seconds to wait for the SQLite write lock.
                Defaults to ``database_busy_timeout`` from the config.
        """
        config = get_config()

        self.database_url = database_url or config.get_database_url()
        self.echo = config.sql_echo if echo is None else echo
        self.busy_timeout = config.database_busy_timeout if busy_timeout is None else busy_timeout
        self._engine: Engine | None = None
        self._session_factory: sessionmaker | None = None

    @property
    def engine(self) -> Engine:
        if self._engine is None:
            self._engine = build_engine(self.database_url, self.echo, self.busy_timeout)
            logger.info("Library database: %s", self._engine.url)
        return self._engine

    @property
    def session_factory(self) -> sessionmaker:
        if self._session_factory is None:
            # Handlers read back books and readers after commit
            self._session_factory = sessionmaker(
                bind=self.engine, autoflush=False, expire_on_commit=False
            )
        return self._session_factory

    def create_session(self) -> Session:
        """Open a session; the caller closes it."""
        return self.session_factory()

    @contextmanager
    def session_scope(self) -> Generator[Session, None, None]:
        """Yield a session that is committed on success and rolled back on error."""
        session = self.create_session()
        try:
            yield session
            session.commit()
        except Exception:
            logger.exception("Library database work failed, rolling back")
            session.rollback()
            raise
        finally:
            session.close()

    def init_database(self, drop_existing: bool = False) -> None:
        """Create the books, readers and checkouts tables if they are missing."""
        if drop_existing:
            logger.warning("Dropping library tables")
            Base.metadata.drop_all(bind=self.engine)

        Base.metadata.create_all(bind=self.engine)
        logger.info("Library tables ready")

    def verify_connection(self) -> bool:
        try:
            with self.engine.connect() as conn:
                conn.execute(text("SELECT 1"))
        except Exception:
            logger.exception("Cannot reach the library database")
            return False
        return True

    def close(self) -> None:
        if self._engine is not None:
            self._engine.dispose()
            logger.info("Library database engine disposed")
        self._engine = None
        self._session_factory = None


_db_manager: DatabaseManager | None = None


def get_db_manager(database_url: str | None = None) -> DatabaseManager:
    """Return the process-wide manager, creating it with ``database_url`` on first use."""
    global _db_manager  # noqa: PLW0603

    if _db_manager is None:
        _db_manager = DatabaseManager(database_url)
    return _db_manager


def reset_db_manager() -> None:
    global _db_manager  # noqa: PLW0603

    if _db_manager is not None:
        _db_manager.close()
    _db_manager = None


def get_session() -> Session:
    """Session for a tool call that manages its own commits."""
    return get_db_manager().create_session()


@contextmanager
def session_scope() -> Generator[Session, None, None]:
    """Session for a resource read."""
    with get_db_manager().session_scope() as session:
        yield session


def safe_commit(session: Session, operation: str) -> None:
    """
    Commit, or roll back and raise.

    Raises:
        ValueError: Naming ``operation`` when the commit fails
    """
    try:
        session.commit()
    except Exception as e:
        session.rollback()
        raise ValueError(f"Database operation '{operation}' failed: {e!s}") from e


def safe_query(session: Session, query_func: Callable[[Session], T], error_msg: str) -> T:
    """
    Run ``query_func`` against the session.

    Raises:
        ValueError: Prefixed with ``error_msg`` when the query fails
    """
    try:
        return query_func(session)
    except Exception as e:
        logger.exception("Library query failed")
        raise ValueError(f"{error_msg}: Database query failed") from e
