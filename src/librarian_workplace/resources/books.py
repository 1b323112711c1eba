"""Book Resources - Library Catalog Access

Exposes book catalog data via read-only resources.

Resources:
- library://books/list - Paginated book catalog
- library://books/{vendor_code} - Individual book by vendor code
- library://books/title/{title} - Books whose title contains the given text
- library://books/available - Books with at least one free copy
- library://books/given - Books held by at least one reader
"""

import logging
from typing import Any

from fastmcp.exceptions import ResourceError
from pydantic import BaseModel, Field

from ..config import get_config
from ..database.book_repository import BookRepository
from ..database.repository import ALL_BOOKS_BUSY, ALL_BOOKS_FREE, PaginationParams
from ..database.session import session_scope
from ..models.book import Book

logger = logging.getLogger(__name__)


class BookListResponse(BaseModel):
    """Response schema with books and pagination metadata."""

    books: list[Book] = Field(..., description="List of books in this page")
    total: int = Field(..., description="Total number of books")
    page: int = Field(..., description="Current page number")
    page_size: int = Field(..., description="Number of items per page")
    total_pages: int = Field(..., description="Total number of pages")
    has_next: bool = Field(..., description="Whether there's a next page")
    has_previous: bool = Field(..., description="Whether there's a previous page")


class BookSelectionResponse(BaseModel):
    """Books matching a filter, with a message when nothing matches."""

    books: list[Book] = Field(default_factory=list)
    total: int = 0
    message: str | None = None


def parse_vendor_code(value: str) -> int:
    """Parse the {vendor_code} URI parameter."""
    try:
        vendor_code = int(value)
    except (TypeError, ValueError) as e:
        raise ResourceError(f"Invalid vendor code: {value}") from e
    if vendor_code < 1:
        raise ResourceError(f"Invalid vendor code: {value}")
    return vendor_code


async def list_books_handler() -> dict[str, Any]:
    """Returns the first page of the book catalog, ordered by vendor code."""
    try:
        pagination = PaginationParams(page=1, page_size=get_config().default_page_size)

        logger.debug("MCP Resource Request - books/list: page_size=%d", pagination.page_size)

        with session_scope() as session:
            result = BookRepository(session).get_all(pagination=pagination)

            response = BookListResponse(
                books=result.items,
                total=result.total,
                page=result.page,
                page_size=result.page_size,
                total_pages=result.total_pages,
                has_next=result.has_next,
                has_previous=result.has_previous,
            )
            return response.model_dump(mode="json")

    except Exception as e:
        logger.exception("Error in books/list resource")
        raise ResourceError(f"Failed to retrieve book list: {e!s}") from e


async def get_book_handler(vendor_code: str) -> dict[str, Any]:
    """Returns one book, including the ids of the readers holding it."""
    code = parse_vendor_code(vendor_code)
    try:
        logger.debug("MCP Resource Request - books/%s", code)

        with session_scope() as session:
            book = BookRepository(session).get_by_id(code)

            if book is None:
                raise ResourceError(f"Book not found: {code}")

            return book.model_dump(mode="json")

    except ResourceError:
        raise
    except Exception as e:
        logger.exception("Error in books/{vendor_code} resource")
        raise ResourceError(f"Failed to retrieve book details: {e!s}") from e


async def get_books_by_title_handler(title: str) -> dict[str, Any]:
    """Returns books whose title contains ``title``, ignoring case."""
    if not title.strip():
        raise ResourceError("Title must not be empty")
    try:
        with session_scope() as session:
            books = BookRepository(session).get_by_title(title)

        if not books:
            raise ResourceError(f"No books found with title: {title}")

        return BookSelectionResponse(books=books, total=len(books)).model_dump(mode="json")

    except ResourceError:
        raise
    except Exception as e:
        logger.exception("Error in books/title/{title} resource")
        raise ResourceError(f"Failed to search books by title: {e!s}") from e


async def list_available_books_handler() -> dict[str, Any]:
    """Returns books a reader can take right now."""
    try:
        with session_scope() as session:
            books = BookRepository(session).get_available()

        response = BookSelectionResponse(
            books=books,
            total=len(books),
            message=None if books else ALL_BOOKS_BUSY,
        )
        return response.model_dump(mode="json")

    except Exception as e:
        logger.exception("Error in books/available resource")
        raise ResourceError(f"Failed to retrieve available books: {e!s}") from e


async def list_given_books_handler() -> dict[str, Any]:
    """Returns books at least one reader is holding."""
    try:
        with session_scope() as session:
            books = BookRepository(session).get_given()

        response = BookSelectionResponse(
            books=books,
            total=len(books),
            message=None if books else ALL_BOOKS_FREE,
        )
        return response.model_dump(mode="json")

    except Exception as e:
        logger.exception("Error in books/given resource")
        raise ResourceError(f"Failed to retrieve given books: {e!s}") from e


book_resources: list[dict[str, Any]] = [
    {
        "uri": "library://books/list",
        "name": "Book Catalog",
        "description": "Browse the library's book catalog, ordered by vendor code.",
        "mime_type": "application/json",
        "handler": list_books_handler,
    },
    {
        "uri": "library://books/available",
        "name": "Available Books",
        "description": "Books with at least one copy no reader holds",
        "mime_type": "application/json",
        "handler": list_available_books_handler,
    },
    {
        "uri": "library://books/given",
        "name": "Given Books",
        "description": "Books held by at least one reader",
        "mime_type": "application/json",
        "handler": list_given_books_handler,
    },
    {
        "uri_template": "library://books/title/{title}",
        "name": "Books by Title",
        "description": "Books whose title contains the given text (case-insensitive)",
        "mime_type": "application/json",
        "handler": get_books_by_title_handler,
    },
    {
        "uri_template": "library://books/{vendor_code}",
        "name": "Book Details",
        "description": "Get a book by vendor code, with the readers holding it",
        "mime_type": "application/json",
        "handler": get_book_handler,
    },
]
