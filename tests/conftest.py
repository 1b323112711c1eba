"""Test configuration and fixtures for the Librarian Workplace server.

1. Isolated test databases - each test gets a clean SQLite file
2. Configuration overrides - test-specific server configuration
3. Handler routing - tools and resources read and write the test database
"""

import os
from collections.abc import Generator
from contextlib import contextmanager
from datetime import date
from pathlib import Path

import pytest
from sqlalchemy.orm import Session, sessionmaker

from librarian_workplace.config import ServerConfig, reset_config
from librarian_workplace.database.book_repository import BookRepository
from librarian_workplace.database.reader_repository import ReaderRepository
from librarian_workplace.database.schema import Base
from librarian_workplace.database.session import build_engine
from librarian_workplace.models.book import BookCreateSchema
from librarian_workplace.models.reader import ReaderCreateSchema

# Modules that open their own sessions
SESSION_USERS = [
    "librarian_workplace.tools.books",
    "librarian_workplace.tools.readers",
    "librarian_workplace.tools.circulation",
]
SCOPE_USERS = [
    "librarian_workplace.resources.books",
    "librarian_workplace.resources.readers",
]


# === Test Database Fixtures ===


@pytest.fixture
def test_db_path(tmp_path: Path) -> Path:
    """Provide a temporary database path for each test."""
    return tmp_path / "test_library.db"


@pytest.fixture
def test_database_url(test_db_path: Path) -> str:
    return f"sqlite:///{test_db_path}"


@pytest.fixture
def test_engine(test_database_url: str):
    """Engine built the way the server builds it, on a throwaway file."""
    engine = build_engine(test_database_url)
    Base.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def test_session_factory(test_engine) -> sessionmaker:
    return sessionmaker(bind=test_engine, autocommit=False, autoflush=False)


@pytest.fixture
def test_db_session(test_session_factory) -> Generator[Session, None, None]:
    """Provide a SQLAlchemy session for database tests."""
    session = test_session_factory()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()


@pytest.fixture
def mock_get_session(test_session_factory, monkeypatch):
    """Route tool and resource handlers to the test database.

    Each handler call gets a fresh session on the test engine, the same
    way production handlers get one per call.
    """

    def _get_session() -> Session:
        return test_session_factory()

    @contextmanager
    def _session_scope():
        session = test_session_factory()
        try:
            yield session
            session.commit()
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    for module in SESSION_USERS:
        monkeypatch.setattr(f"{module}.get_session", _get_session)
    for module in SCOPE_USERS:
        monkeypatch.setattr(f"{module}.session_scope", _session_scope)

    return test_session_factory


# === Configuration Fixtures ===


@pytest.fixture
def test_config(test_db_path: Path) -> Generator[ServerConfig, None, None]:
    """Provide a test-specific server configuration."""
    reset_config()

    config = ServerConfig(
        server_name="test-librarian",
        server_version="0.0.1-test",
        database_path=test_db_path,
        debug=True,
        log_level="DEBUG",
    )

    yield config

    reset_config()


@pytest.fixture
def clean_env() -> Generator[None, None, None]:
    """Provide a clean environment without LIBRARIAN_* variables."""
    original_env = os.environ.copy()

    for key in list(os.environ.keys()):
        if key.startswith("LIBRARIAN_"):
            del os.environ[key]

    yield

    os.environ.clear()
    os.environ.update(original_env)


# === Test Data Fixtures ===


@pytest.fixture
def sample_book(test_db_session):
    """A book with three copies, none taken."""
    return BookRepository(test_db_session).create(
        BookCreateSchema(
            title="Best Book 1",
            author="NoName",
            release_date=date(2000, 1, 1),
            number_of_copies=3,
        )
    )


@pytest.fixture
def single_copy_book(test_db_session):
    return BookRepository(test_db_session).create(
        BookCreateSchema(
            title="Only Copy",
            author="Somebody",
            release_date=date(2010, 5, 5),
            number_of_copies=1,
        )
    )


@pytest.fixture
def sample_reader(test_db_session):
    return ReaderRepository(test_db_session).create(
        ReaderCreateSchema(full_name="John Smith", date_of_birth=date(1990, 4, 12))
    )


@pytest.fixture
def sample_readers(test_db_session):
    """Four readers, enough to exhaust a three-copy book and ask for one more."""
    repo = ReaderRepository(test_db_session)
    names = ["John Smith", "Jane Doe", "Ivan Petrov", "Anna Karenina"]
    return [
        repo.create(ReaderCreateSchema(full_name=name, date_of_birth=date(1980 + i, 1, 1)))
        for i, name in enumerate(names)
    ]


# === Cleanup Fixtures ===


@pytest.fixture(autouse=True)
def cleanup_after_test():
    """Reset global configuration after each test."""
    yield
    reset_config()
