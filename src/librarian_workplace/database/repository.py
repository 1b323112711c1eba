"""
Repository pattern implementation for the Librarian Workplace server.

Repositories keep SQL out of the tool and resource handlers:

1. **Separation**: handlers deal with protocol concerns, repositories with storage
2. **Testability**: repositories can be replaced with mocks in handler tests
3. **Serialization**: methods return Pydantic models that dump cleanly to JSON

The base repository provides common CRUD operations; the book and reader
repositories add catalog queries and the deletion rules. This module also
holds the error taxonomy shared by the repositories and the checkout
workflow.
"""

from abc import ABC, abstractmethod
from typing import Generic, TypeVar

from pydantic import BaseModel
from sqlalchemy import asc, desc, func, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from ..database.schema import Base
from ..database.session import safe_commit, safe_query

ModelType = TypeVar("ModelType", bound=Base)
CreateSchemaType = TypeVar("CreateSchemaType", bound=BaseModel)
UpdateSchemaType = TypeVar("UpdateSchemaType", bound=BaseModel)
ResponseSchemaType = TypeVar("ResponseSchemaType", bound=BaseModel)

# Reasons are part of the observable contract; callers match on them.
ALL_BOOKS_BUSY = "All books are busy"
ALL_BOOKS_FREE = "All books are free"
BOOK_ALREADY_TAKEN = "Reader has already taken this book!"
BOOK_NOT_TAKEN = "Reader has not taken this book"
BOOK_HAS_READERS = "Book is taken by readers"
READER_HAS_BOOKS = "Reader has not returned all books"
COPIES_BELOW_TAKEN = "Number of copies cannot be less than taken copies"


class RepositoryException(Exception):
    """Base exception for repository operations."""


class NotFoundError(RepositoryException):
    """Raised when an entity is not found.

    ``entity`` names the missing record type, e.g. ``"Book"`` or ``"Reader"``.
    """

    def __init__(self, entity: str, identifier: int | str | None = None):
        self.entity = entity
        self.identifier = identifier
        super().__init__(entity)


class InvalidOperationError(RepositoryException):
    """Raised when both entities exist but a business rule forbids the change."""

    def __init__(self, reason: str):
        self.reason = reason
        super().__init__(reason)


class DuplicateError(RepositoryException):
    """Raised when attempting to create a duplicate entity."""


class PaginationParams(BaseModel):
    """Standard pagination parameters for list operations."""

    page: int = 1
    page_size: int = 20

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.page_size

    def validate_params(self) -> None:
        if self.page < 1:
            raise ValueError("Page must be >= 1")
        if self.page_size < 1 or self.page_size > 100:
            raise ValueError("Page size must be between 1 and 100")


class PaginatedResponse(BaseModel, Generic[ResponseSchemaType]):
    """Standard paginated response for list resources."""

    items: list[ResponseSchemaType]
    total: int
    page: int
    page_size: int
    total_pages: int
    has_next: bool
    has_previous: bool


class BaseRepository(
    ABC, Generic[ModelType, CreateSchemaType, UpdateSchemaType, ResponseSchemaType]
):
    """
    Abstract base repository providing common CRUD operations.

    Subclasses name their table, primary key column and response schema.
    All queries go through ``safe_query`` and all writes through
    ``safe_commit``.
    """

    def __init__(self, session: Session):
        self.session = session

    @property
    @abstractmethod
    def model_class(self) -> type[ModelType]:
        """Return the SQLAlchemy model class."""

    @property
    @abstractmethod
    def response_schema(self) -> type[ResponseSchemaType]:
        """Return the Pydantic response schema."""

    @property
    def id_column(self):
        """Primary key column used by the id-based lookups."""
        return self.model_class.id

    @property
    def entity_name(self) -> str:
        return self.model_class.__name__

    def _to_response_model(self, db_obj: ModelType) -> ResponseSchemaType:
        """Convert database model to Pydantic response model."""
        return self.response_schema.model_validate(db_obj, from_attributes=True)

    def get_row(self, id: int, for_update: bool = False) -> ModelType | None:
        query = select(self.model_class).where(self.id_column == id)
        if for_update:
            query = query.with_for_update()
        return safe_query(
            self.session,
            lambda s: s.execute(query).scalar_one_or_none(),
            f"Failed to get {self.entity_name} by ID",
        )

    def get_by_id(self, id: int) -> ResponseSchemaType | None:
        """
        Get entity by ID.

        Returns:
            Pydantic model or None if not found
        """
        db_obj = self.get_row(id)
        if db_obj is None:
            return None

        return self._to_response_model(db_obj)

    def get_all(
        self,
        pagination: PaginationParams | None = None,
        order_by: str | None = None,
        order_desc: bool = False,
    ) -> list[ResponseSchemaType] | PaginatedResponse[ResponseSchemaType]:
        """
        Get all entities with optional pagination and sorting.

        Args:
            pagination: Pagination parameters
            order_by: Field name to order by (defaults to the primary key)
            order_desc: Whether to order descending

        Returns:
            List of entities, or a paginated response when pagination is given
        """
        query = select(self.model_class)

        order_field = self.id_column
        if order_by and hasattr(self.model_class, order_by):
            order_field = getattr(self.model_class, order_by)
        query = query.order_by(desc(order_field) if order_desc else asc(order_field))

        if pagination:
            pagination.validate_params()

            count_query = select(func.count()).select_from(self.model_class)
            total = (
                safe_query(
                    self.session,
                    lambda s: s.execute(count_query).scalar(),
                    "Failed to get total count",
                )
                or 0
            )

            query = query.offset(pagination.offset).limit(pagination.page_size)
            results = safe_query(
                self.session,
                lambda s: s.execute(query).scalars().all(),
                "Failed to get paginated results",
            )

            return PaginatedResponse(
                items=[self._to_response_model(item) for item in results],
                total=total,
                page=pagination.page,
                page_size=pagination.page_size,
                total_pages=(total + pagination.page_size - 1) // pagination.page_size,
                has_next=pagination.page * pagination.page_size < total,
                has_previous=pagination.page > 1,
            )

        results = safe_query(
            self.session, lambda s: s.execute(query).scalars().all(), "Failed to get all results"
        )
        return [self._to_response_model(item) for item in results]

    def create(self, data: CreateSchemaType) -> ResponseSchemaType:
        """
        Create new entity.

        Raises:
            DuplicateError: If entity already exists
            RepositoryException: On other database errors
        """
        try:
            db_obj = self.model_class(**data.model_dump())
            self.session.add(db_obj)
            self.session.flush()
            safe_commit(self.session, f"create {self.entity_name}")
            self.session.refresh(db_obj)
            return self._to_response_model(db_obj)
        except IntegrityError as e:
            self.session.rollback()
            raise DuplicateError(f"{self.entity_name} already exists: {e!s}") from e
        except (SQLAlchemyError, ValueError) as e:
            self.session.rollback()
            raise RepositoryException(f"Database error: {e!s}") from e

    def update(self, id: int, data: UpdateSchemaType) -> ResponseSchemaType | None:
        """
        Patch an existing entity with the fields set on ``data``.

        Returns:
            Updated entity or None if not found
        """
        db_obj = self.get_row(id, for_update=True)
        if db_obj is None:
            return None

        try:
            self._check_update(db_obj, data)
        except RepositoryException:
            self.session.rollback()
            raise

        for field, value in data.model_dump(exclude_unset=True, exclude_none=True).items():
            setattr(db_obj, field, value)

        try:
            safe_commit(self.session, f"update {self.entity_name}")
            self.session.refresh(db_obj)
            return self._to_response_model(db_obj)
        except (SQLAlchemyError, ValueError) as e:
            self.session.rollback()
            raise RepositoryException(f"Update failed: {e!s}") from e

    def delete(self, id: int) -> bool:
        """
        Delete entity by ID.

        Returns:
            True if deleted, False if not found

        Raises:
            InvalidOperationError: If the entity still takes part in a checkout
        """
        db_obj = self.get_row(id, for_update=True)
        if db_obj is None:
            return False

        try:
            self._check_delete(db_obj)
        except RepositoryException:
            self.session.rollback()
            raise

        try:
            self.session.delete(db_obj)
            safe_commit(self.session, f"delete {self.entity_name}")
            return True
        except (SQLAlchemyError, ValueError) as e:
            self.session.rollback()
            raise RepositoryException(f"Delete failed: {e!s}") from e

    def _check_update(self, db_obj: ModelType, data: UpdateSchemaType) -> None:
        """Hook for subclasses to reject an update before it is applied."""

    def _check_delete(self, db_obj: ModelType) -> None:
        """Hook for subclasses to reject a deletion."""
