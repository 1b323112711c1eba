"""
Book repository implementation for the Librarian Workplace server.

This repository provides data access for books:

1. **Resources**: browsing by vendor code or title, available and given books
2. **Tools**: add, change and delete books
3. **Pagination**: consistent list responses

The ``readers`` view of each returned book is derived from the checkouts
table, never stored on the book row.
"""

from sqlalchemy import func, select
from sqlalchemy.orm import selectinload

from ..database.schema import Book as BookDB
from ..database.schema import Checkout as CheckoutDB
from ..database.session import safe_query
from ..models.book import Book as BookModel
from ..models.book import BookCreateSchema, BookPatchSchema
from .repository import (
    BOOK_HAS_READERS,
    COPIES_BELOW_TAKEN,
    BaseRepository,
    InvalidOperationError,
)


class BookRepository(BaseRepository[BookDB, BookCreateSchema, BookPatchSchema, BookModel]):
    """
    Repository for book data access.

    - Read methods back the library://books/* resources
    - Write methods back the add_book, change_book and delete_book tools
    - All methods return Pydantic models for clean JSON serialization
    """

    @property
    def model_class(self):
        return BookDB

    @property
    def response_schema(self):
        return BookModel

    @property
    def id_column(self):
        return BookDB.vendor_code

    def _to_response_model(self, db_obj: BookDB) -> BookModel:
        return BookModel(
            vendor_code=db_obj.vendor_code,
            title=db_obj.title,
            author=db_obj.author,
            release_date=db_obj.release_date,
            number_of_copies=db_obj.number_of_copies,
            readers=sorted(checkout.reader_id for checkout in db_obj.checkouts),
        )

    def get_by_title(self, title: str) -> list[BookModel]:
        """
        Find books whose title contains ``title`` (case-insensitive).

        Supports resources like: library://books/title/{title}
        """
        query = (
            select(BookDB)
            .where(BookDB.title.ilike(f"%{title.strip()}%"))
            .options(selectinload(BookDB.checkouts))
            .order_by(BookDB.title, BookDB.vendor_code)
        )
        results = safe_query(
            self.session,
            lambda s: s.execute(query).scalars().all(),
            "Failed to get books by title",
        )
        return [self._to_response_model(book) for book in results]

    def get_available(self) -> list[BookModel]:
        """
        Get books with at least one copy nobody holds.

        Supports resources like: library://books/available
        """
        held = (
            select(
                CheckoutDB.book_vendor_code.label("vendor_code"),
                func.count().label("held"),
            )
            .group_by(CheckoutDB.book_vendor_code)
            .subquery()
        )
        query = (
            select(BookDB)
            .outerjoin(held, held.c.vendor_code == BookDB.vendor_code)
            .where(func.coalesce(held.c.held, 0) < BookDB.number_of_copies)
            .options(selectinload(BookDB.checkouts))
            .order_by(BookDB.vendor_code)
        )
        results = safe_query(
            self.session,
            lambda s: s.execute(query).scalars().all(),
            "Failed to get available books",
        )
        return [self._to_response_model(book) for book in results]

    def get_given(self) -> list[BookModel]:
        """
        Get books held by at least one reader.

        Supports resources like: library://books/given
        """
        query = (
            select(BookDB)
            .where(BookDB.checkouts.any())
            .options(selectinload(BookDB.checkouts))
            .order_by(BookDB.vendor_code)
        )
        results = safe_query(
            self.session,
            lambda s: s.execute(query).scalars().all(),
            "Failed to get given books",
        )
        return [self._to_response_model(book) for book in results]

    def count_holders(self, vendor_code: int) -> int:
        """Number of readers currently holding the book."""
        query = (
            select(func.count())
            .select_from(CheckoutDB)
            .where(CheckoutDB.book_vendor_code == vendor_code)
        )
        return (
            safe_query(
                self.session,
                lambda s: s.execute(query).scalar(),
                "Failed to count book holders",
            )
            or 0
        )

    def _check_update(self, db_obj: BookDB, data: BookPatchSchema) -> None:
        """Reject shrinking the copy count below the copies already taken."""
        if data.number_of_copies is not None:
            if data.number_of_copies < self.count_holders(db_obj.vendor_code):
                raise InvalidOperationError(COPIES_BELOW_TAKEN)

    def _check_delete(self, db_obj: BookDB) -> None:
        """A book can only be removed once every copy is back."""
        if self.count_holders(db_obj.vendor_code) > 0:
            raise InvalidOperationError(BOOK_HAS_READERS)
