"""
SQLAlchemy database schema for the Librarian Workplace server.

Three tables back the whole catalog:

1. ``books``: the catalog, keyed by vendor code
2. ``readers``: library members
3. ``checkouts``: one row per (reader, book) pair currently held

The reader/book relation is stored exactly once, in ``checkouts``. Both
directional views (``Book.readers`` and ``Reader.books`` in the Pydantic
models) are derived from it, so they cannot drift apart. The composite
primary key makes a pair unique.
"""

from datetime import date

from sqlalchemy import (
    CheckConstraint,
    Column,
    Date,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
)
from sqlalchemy.orm import declarative_base, relationship, validates
from sqlalchemy.sql import func

Base = declarative_base()


class Book(Base):
    """
    Books table - stores the library's book catalog.

    MCP Usage:
    - Resource: library://books/list, library://books/{vendor_code}
    - Tools: add_book, change_book, delete_book, take_book, return_book
    """

    __tablename__ = "books"

    # Vendor code is assigned by the store and never changes
    vendor_code = Column(Integer, primary_key=True, autoincrement=True)
    title = Column(String(500), nullable=False)
    author = Column(String(200), nullable=False)
    release_date = Column(Date, nullable=False)
    number_of_copies = Column(Integer, nullable=False, default=1)

    created_at = Column(DateTime, nullable=False, default=func.now())
    updated_at = Column(DateTime, nullable=True, default=func.now(), onupdate=func.now())

    checkouts = relationship("Checkout", back_populates="book")

    __table_args__ = (
        Index("idx_book_title", "title"),
        Index("idx_book_author", "author"),
        CheckConstraint("number_of_copies >= 0", name="check_number_of_copies_non_negative"),
    )


class Reader(Base):
    """
    Readers table - stores library member information.

    MCP Usage:
    - Resource: library://readers/list, library://readers/{reader_id}
    - Tools: add_reader, change_reader, delete_reader
    """

    __tablename__ = "readers"

    id = Column(Integer, primary_key=True, autoincrement=True)
    full_name = Column(String(200), nullable=False)
    date_of_birth = Column(Date, nullable=False)

    created_at = Column(DateTime, nullable=False, default=func.now())
    updated_at = Column(DateTime, nullable=False, default=func.now(), onupdate=func.now())

    checkouts = relationship("Checkout", back_populates="reader")

    __table_args__ = (Index("idx_reader_full_name", "full_name"),)

    @validates("date_of_birth")
    def validate_date_of_birth(self, key, value):  # noqa: ARG002
        """Readers cannot be born in the future."""
        if value and value > date.today():
            raise ValueError("Date of birth cannot be in the future")
        return value


class Checkout(Base):
    """
    Checkouts table - the single source of truth for who holds what.

    A row exists while the reader holds a copy of the book; returning the
    book deletes it.
    """

    __tablename__ = "checkouts"

    reader_id = Column(Integer, ForeignKey("readers.id"), primary_key=True)
    book_vendor_code = Column(Integer, ForeignKey("books.vendor_code"), primary_key=True)
    taken_at = Column(DateTime, nullable=False, default=func.now())

    reader = relationship("Reader", back_populates="checkouts")
    book = relationship("Book", back_populates="checkouts")

    __table_args__ = (
        Index("idx_checkout_book", "book_vendor_code"),
        Index("idx_checkout_reader", "reader_id"),
    )
