"""
Catalog maintenance tools for books: add_book, change_book, delete_book.

Payloads are checked with ``validate_payload`` first; every field problem
is reported in one error result. Repository rejections (a book that is
still held cannot be deleted, copies cannot drop below the held count)
come back as invalid-operation results with the reason text unchanged.
"""

import logging
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from ..database.book_repository import BookRepository
from ..database.repository import InvalidOperationError, NotFoundError
from ..database.session import get_session
from ..models.book import Book, BookCreateSchema, BookPatchSchema
from ..models.validation import validate_payload
from .results import (
    error_result,
    invalid_operation_result,
    not_found_result,
    success_result,
    validation_error_result,
)

logger = logging.getLogger(__name__)


class ChangeBookInput(BookPatchSchema):
    """Input schema for the change_book tool: the book to patch plus the patch."""

    vendor_code: int = Field(..., description="Vendor code of the book to change", ge=1)

    def to_patch(self) -> BookPatchSchema:
        return BookPatchSchema.model_validate(
            self.model_dump(exclude={"vendor_code"}, exclude_unset=True)
        )


class DeleteBookInput(BaseModel):
    """Input schema for the delete_book tool."""

    vendor_code: int = Field(..., description="Vendor code of the book to delete", ge=1)

    model_config = ConfigDict(extra="forbid")


def format_book_for_tool_response(book: Book) -> dict[str, Any]:
    return {
        **book.model_dump(mode="json"),
        "free_copies": book.free_copies,
        "is_available": book.is_available,
    }


async def add_book_handler(arguments: dict[str, Any]) -> dict[str, Any]:
    """
    Handler for the add_book tool.

    The vendor code is assigned by the store and returned in ``data``.
    """
    payload, validation = validate_payload(BookCreateSchema, arguments)
    if not validation.is_valid:
        logger.warning("Invalid add_book payload: %s", validation.summary())
        return validation_error_result("book", validation)

    try:
        with get_session() as session:
            book = BookRepository(session).create(payload)
    except Exception as e:
        logger.exception("Unexpected error in add_book tool")
        return error_result(f"Failed to add book: {e!s}")

    logger.info("Added book %s: %s", book.vendor_code, book.title)
    return success_result(
        f"Added '{book.title}' by {book.author} with vendor code {book.vendor_code}",
        {"book": format_book_for_tool_response(book)},
    )


async def change_book_handler(arguments: dict[str, Any]) -> dict[str, Any]:
    """Handler for the change_book tool. Fields that are absent or null stay unchanged."""
    params, validation = validate_payload(ChangeBookInput, arguments)
    if not validation.is_valid:
        logger.warning("Invalid change_book payload: %s", validation.summary())
        return validation_error_result("book changes", validation)

    try:
        with get_session() as session:
            book = BookRepository(session).update(params.vendor_code, params.to_patch())
    except InvalidOperationError as e:
        logger.info("Change of book %s rejected - %s", params.vendor_code, e.reason)
        return invalid_operation_result(e)
    except Exception as e:
        logger.exception("Unexpected error in change_book tool")
        return error_result(f"Failed to change book: {e!s}")

    if book is None:
        return not_found_result(NotFoundError("Book", params.vendor_code))

    logger.info("Changed book %s", book.vendor_code)
    return success_result(
        f"Changed book {book.vendor_code}",
        {"book": format_book_for_tool_response(book)},
    )


async def delete_book_handler(arguments: dict[str, Any]) -> dict[str, Any]:
    """Handler for the delete_book tool. Only books with every copy returned can go."""
    params, validation = validate_payload(DeleteBookInput, arguments)
    if not validation.is_valid:
        return validation_error_result("delete parameters", validation)

    try:
        with get_session() as session:
            deleted = BookRepository(session).delete(params.vendor_code)
    except InvalidOperationError as e:
        logger.info("Deletion of book %s rejected - %s", params.vendor_code, e.reason)
        return invalid_operation_result(e)
    except Exception as e:
        logger.exception("Unexpected error in delete_book tool")
        return error_result(f"Failed to delete book: {e!s}")

    if not deleted:
        return not_found_result(NotFoundError("Book", params.vendor_code))

    logger.info("Deleted book %s", params.vendor_code)
    return success_result(
        f"Deleted book {params.vendor_code}",
        {"vendor_code": params.vendor_code},
    )


add_book = {
    "name": "add_book",
    "description": (
        "Add a book to the catalog. Requires title, author, release date "
        "(not in the future) and the number of copies."
    ),
    "inputSchema": BookCreateSchema.model_json_schema(),
    "handler": add_book_handler,
}

change_book = {
    "name": "change_book",
    "description": (
        "Change a book's title, author, release date or number of copies. "
        "The number of copies cannot drop below the copies readers hold."
    ),
    "inputSchema": ChangeBookInput.model_json_schema(),
    "handler": change_book_handler,
}

delete_book = {
    "name": "delete_book",
    "description": "Remove a book from the catalog. Rejected while any reader holds it.",
    "inputSchema": DeleteBookInput.model_json_schema(),
    "handler": delete_book_handler,
}
