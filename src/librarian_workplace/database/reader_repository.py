"""
Reader repository implementation for the Librarian Workplace server.

This repository manages library readers:

1. **Member Management**: add, change and delete readers
2. **Lookup**: by id or by (partial) name
3. **Holdings**: each returned reader carries the vendor codes it holds
"""

from sqlalchemy import func, select
from sqlalchemy.orm import selectinload

from ..database.schema import Checkout as CheckoutDB
from ..database.schema import Reader as ReaderDB
from ..database.session import safe_query
from ..models.reader import Reader as ReaderModel
from ..models.reader import ReaderCreateSchema, ReaderPatchSchema
from .repository import READER_HAS_BOOKS, BaseRepository, InvalidOperationError


class ReaderRepository(
    BaseRepository[ReaderDB, ReaderCreateSchema, ReaderPatchSchema, ReaderModel]
):
    """
    Repository for reader data access.

    - Supports reader Resources (library://readers/*)
    - Supports the add_reader, change_reader and delete_reader tools
    """

    @property
    def model_class(self):
        return ReaderDB

    @property
    def response_schema(self):
        return ReaderModel

    def _to_response_model(self, db_obj: ReaderDB) -> ReaderModel:
        return ReaderModel(
            id=db_obj.id,
            full_name=db_obj.full_name,
            date_of_birth=db_obj.date_of_birth,
            books=sorted(checkout.book_vendor_code for checkout in db_obj.checkouts),
        )

    def get_by_name(self, name: str) -> list[ReaderModel]:
        """
        Find readers whose full name contains ``name`` (case-insensitive).

        Supports resources like: library://readers/name/{name}
        """
        query = (
            select(ReaderDB)
            .where(ReaderDB.full_name.ilike(f"%{name.strip()}%"))
            .options(selectinload(ReaderDB.checkouts))
            .order_by(ReaderDB.full_name, ReaderDB.id)
        )
        results = safe_query(
            self.session,
            lambda s: s.execute(query).scalars().all(),
            "Failed to get readers by name",
        )
        return [self._to_response_model(reader) for reader in results]

    def count_held_books(self, reader_id: int) -> int:
        query = select(func.count()).select_from(CheckoutDB).where(CheckoutDB.reader_id == reader_id)
        return (
            safe_query(
                self.session,
                lambda s: s.execute(query).scalar(),
                "Failed to count held books",
            )
            or 0
        )

    def _check_delete(self, db_obj: ReaderDB) -> None:
        """A reader can only be removed once every book is returned."""
        if self.count_held_books(db_obj.id) > 0:
            raise InvalidOperationError(READER_HAS_BOOKS)
