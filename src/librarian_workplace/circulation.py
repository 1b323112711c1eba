"""
Checkout workflow for the Librarian Workplace server.

Each (reader, book) pair is either NotHeld or Held. ``take`` moves a pair
from NotHeld to Held, guarded by the book's aggregate availability;
``return_book`` moves it back. Preconditions are checked in a fixed order
and the first failure wins:

take(reader_id, book_id)
    1. unknown book            -> NotFoundError("Book")
    2. unknown reader          -> NotFoundError("Reader")
    3. every copy is held      -> InvalidOperationError("All books are busy")
    4. reader holds it already -> InvalidOperationError("Reader has already taken this book!")

return_book(reader_id, book_id)
    1. unknown book            -> NotFoundError("Book")
    2. unknown reader          -> NotFoundError("Reader")
    3. reader does not hold it -> InvalidOperationError("Reader has not taken this book")

The workflow only decides. Reading and writing go through a gateway
(``LibraryUnit`` in production) which applies both sides of the relation
in one transaction.
"""

import logging
from typing import Protocol

from .database.repository import (
    ALL_BOOKS_BUSY,
    BOOK_ALREADY_TAKEN,
    BOOK_NOT_TAKEN,
    InvalidOperationError,
    NotFoundError,
)
from .models.book import Book
from .models.reader import Reader

logger = logging.getLogger(__name__)


class LibraryGateway(Protocol):
    """Data access the checkout workflow depends on."""

    def get_book_by_id(self, vendor_code: int) -> Book | None: ...

    def get_reader_by_id(self, reader_id: int) -> Reader | None: ...

    def take(self, reader: Reader, book: Book) -> None: ...

    def return_book(self, reader: Reader, book: Book) -> None: ...


class CheckoutWorkflow:
    """Applies take and return requests against a library gateway."""

    def __init__(self, gateway: LibraryGateway):
        self.gateway = gateway

    def _resolve(self, reader_id: int, book_id: int) -> tuple[Reader, Book]:
        book = self.gateway.get_book_by_id(book_id)
        if book is None:
            raise NotFoundError("Book", book_id)

        reader = self.gateway.get_reader_by_id(reader_id)
        if reader is None:
            raise NotFoundError("Reader", reader_id)

        return reader, book

    def take(self, reader_id: int, book_id: int) -> None:
        """
        Give a copy of a book to a reader.

        Raises:
            NotFoundError: If the book or the reader does not exist
            InvalidOperationError: If no copy is free or the reader already has one
        """
        reader, book = self._resolve(reader_id, book_id)

        if not book.is_available:
            logger.info("Take rejected: book %s has no free copies", book_id)
            raise InvalidOperationError(ALL_BOOKS_BUSY)

        if reader.holds(book_id):
            logger.info("Take rejected: reader %s already holds book %s", reader_id, book_id)
            raise InvalidOperationError(BOOK_ALREADY_TAKEN)

        self.gateway.take(reader, book)
        logger.info("Reader %s took book %s", reader_id, book_id)

    def return_book(self, reader_id: int, book_id: int) -> None:
        """
        Take a copy of a book back from a reader.

        Raises:
            NotFoundError: If the book or the reader does not exist
            InvalidOperationError: If the reader does not hold the book
        """
        reader, book = self._resolve(reader_id, book_id)

        if not reader.holds(book_id):
            logger.info("Return rejected: reader %s does not hold book %s", reader_id, book_id)
            raise InvalidOperationError(BOOK_NOT_TAKEN)

        self.gateway.return_book(reader, book)
        logger.info("Reader %s returned book %s", reader_id, book_id)
