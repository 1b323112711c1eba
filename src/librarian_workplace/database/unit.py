"""
Library unit of work: the data access gateway of the checkout workflow.

``LibraryUnit`` bundles the book and reader repositories over one session
and owns the only code that writes the checkouts table. ``take`` and
``return_book`` each run as a single transaction, and ``take`` re-checks
its invariants inside that transaction:

- the transaction holds the write lock from its first statement
  (``BEGIN IMMEDIATE`` on SQLite, ``SELECT ... FOR UPDATE`` on the book row
  elsewhere), so takes run one after another
- the (reader, book) primary key rejects a duplicate checkout
- the holder count is recounted after the insert and the transaction is
  rolled back if it would exceed the number of copies

so two concurrent takes of the last copy cannot both succeed.
"""

import logging

from sqlalchemy import delete
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
from sqlalchemy.orm.exc import FlushError

from ..models.book import Book as BookModel
from ..models.reader import Reader as ReaderModel
from .book_repository import BookRepository
from .reader_repository import ReaderRepository
from .repository import (
    ALL_BOOKS_BUSY,
    BOOK_ALREADY_TAKEN,
    BOOK_NOT_TAKEN,
    InvalidOperationError,
    NotFoundError,
    RepositoryException,
)
from .schema import Checkout as CheckoutDB
from .session import begin_write, safe_commit, safe_query

logger = logging.getLogger(__name__)


class LibraryUnit:
    """Book and reader access over a single session."""

    def __init__(self, session: Session):
        self.session = session
        self.books = BookRepository(session)
        self.readers = ReaderRepository(session)

    def get_book_by_id(self, vendor_code: int) -> BookModel | None:
        return self.books.get_by_id(vendor_code)

    def get_reader_by_id(self, reader_id: int) -> ReaderModel | None:
        return self.readers.get_by_id(reader_id)

    def take(self, reader: ReaderModel, book: BookModel) -> None:
        """
        Persist both sides of a checkout.

        Raises:
            NotFoundError: If either record disappeared since it was read
            InvalidOperationError: If the pair already exists or no copy is left
            RepositoryException: If the write lock or the commit fails
        """
        try:
            begin_write(self.session)
        except ValueError as e:
            raise RepositoryException(str(e)) from e

        book_row = self.books.get_row(book.vendor_code, for_update=True)
        if book_row is None:
            self.session.rollback()
            raise NotFoundError("Book", book.vendor_code)

        reader_row = self.readers.get_row(reader.id)
        if reader_row is None:
            self.session.rollback()
            raise NotFoundError("Reader", reader.id)

        self.session.add(CheckoutDB(reader_id=reader.id, book_vendor_code=book.vendor_code))
        try:
            self.session.flush()
        except (IntegrityError, FlushError) as e:
            self.session.rollback()
            raise InvalidOperationError(BOOK_ALREADY_TAKEN) from e

        if self.books.count_holders(book.vendor_code) > book_row.number_of_copies:
            self.session.rollback()
            raise InvalidOperationError(ALL_BOOKS_BUSY)

        try:
            safe_commit(self.session, "take book")
        except ValueError as e:
            raise RepositoryException(str(e)) from e

        # Relationship collections are not refreshed on commit
        self.session.expire(book_row)
        self.session.expire(reader_row)
        logger.debug("Checkout stored: reader=%s book=%s", reader.id, book.vendor_code)

    def return_book(self, reader: ReaderModel, book: BookModel) -> None:
        """
        Remove both sides of a checkout.

        Raises:
            InvalidOperationError: If the reader does not hold the book
        """
        statement = delete(CheckoutDB).where(
            CheckoutDB.reader_id == reader.id,
            CheckoutDB.book_vendor_code == book.vendor_code,
        )
        result = safe_query(
            self.session,
            lambda s: s.execute(statement),
            "Failed to remove checkout",
        )

        if result.rowcount == 0:
            self.session.rollback()
            raise InvalidOperationError(BOOK_NOT_TAKEN)

        try:
            safe_commit(self.session, "return book")
        except ValueError as e:
            raise RepositoryException(str(e)) from e

        # Bulk deletes bypass the identity map
        self.session.expire_all()
        logger.debug("Checkout removed: reader=%s book=%s", reader.id, book.vendor_code)
