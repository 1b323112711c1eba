"""
Database package for the Librarian Workplace server.

This package provides:
- SQLAlchemy schema definitions (schema.py)
- Session management and connection handling (session.py)
- Repositories for books and readers
- The library unit, the gateway the checkout workflow reads and writes through
"""

from .book_repository import BookRepository
from .reader_repository import ReaderRepository
from .repository import (
    ALL_BOOKS_BUSY,
    ALL_BOOKS_FREE,
    BOOK_ALREADY_TAKEN,
    BOOK_HAS_READERS,
    BOOK_NOT_TAKEN,
    COPIES_BELOW_TAKEN,
    READER_HAS_BOOKS,
    BaseRepository,
    DuplicateError,
    InvalidOperationError,
    NotFoundError,
    PaginatedResponse,
    PaginationParams,
    RepositoryException,
)
from .schema import Base, Book, Checkout, Reader
from .session import (
    DatabaseManager,
    begin_write,
    build_engine,
    get_db_manager,
    get_session,
    reset_db_manager,
    safe_commit,
    safe_query,
    session_scope,
)
from .unit import LibraryUnit

__all__ = [
    "ALL_BOOKS_BUSY",
    "ALL_BOOKS_FREE",
    "BOOK_ALREADY_TAKEN",
    "BOOK_HAS_READERS",
    "BOOK_NOT_TAKEN",
    "COPIES_BELOW_TAKEN",
    "READER_HAS_BOOKS",
    "Base",
    "BaseRepository",
    "Book",
    "BookRepository",
    "Checkout",
    "DatabaseManager",
    "DuplicateError",
    "InvalidOperationError",
    "LibraryUnit",
    "NotFoundError",
    "PaginatedResponse",
    "PaginationParams",
    "Reader",
    "ReaderRepository",
    "RepositoryException",
    "begin_write",
    "build_engine",
    "get_db_manager",
    "get_session",
    "reset_db_manager",
    "safe_commit",
    "safe_query",
    "session_scope",
]
