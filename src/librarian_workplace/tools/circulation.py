"""
Circulation tools: take_book and return_book.

Both tools validate their arguments, open one session, and hand the
request to ``CheckoutWorkflow``. Workflow errors become tool error results
that carry the reason string unchanged:

- NotFoundError        -> "Book not found" / "Reader not found"
- InvalidOperationError -> "All books are busy",
                           "Reader has already taken this book!",
                           "Reader has not taken this book"
"""

import logging
from typing import Any

from pydantic import BaseModel, Field

from ..circulation import CheckoutWorkflow
from ..database.repository import InvalidOperationError, NotFoundError
from ..database.session import get_session
from ..database.unit import LibraryUnit
from ..models.validation import validate_payload
from .results import (
    error_result,
    invalid_operation_result,
    not_found_result,
    success_result,
    validation_error_result,
)

logger = logging.getLogger(__name__)


class CirculationInput(BaseModel):
    """Input schema shared by take_book and return_book."""

    reader_id: int = Field(
        ...,
        description="ID of the reader",
        examples=[1, 2],
    )

    book_id: int = Field(
        ...,
        description="Vendor code of the book",
        examples=[1, 42],
    )


async def take_book_handler(arguments: dict[str, Any]) -> dict[str, Any]:
    """
    Handler for the take_book tool.

    Success carries no payload beyond a confirmation message.
    """
    params, validation = validate_payload(CirculationInput, arguments)
    if not validation.is_valid:
        logger.warning("Invalid take_book parameters: %s", validation.summary())
        return validation_error_result("take parameters", validation)

    try:
        with get_session() as session:
            CheckoutWorkflow(LibraryUnit(session)).take(params.reader_id, params.book_id)

    except NotFoundError as e:
        logger.info("Take failed - %s not found", e.entity)
        return not_found_result(e)

    except InvalidOperationError as e:
        logger.info("Take failed - %s", e.reason)
        return invalid_operation_result(e)

    except Exception as e:
        logger.exception("Unexpected error in take_book tool")
        return error_result(f"Take failed: {e!s}")

    return success_result(
        f"Reader {params.reader_id} took book {params.book_id}",
        {"reader_id": params.reader_id, "book_id": params.book_id},
    )


async def return_book_handler(arguments: dict[str, Any]) -> dict[str, Any]:
    """Handler for the return_book tool."""
    params, validation = validate_payload(CirculationInput, arguments)
    if not validation.is_valid:
        logger.warning("Invalid return_book parameters: %s", validation.summary())
        return validation_error_result("return parameters", validation)

    try:
        with get_session() as session:
            CheckoutWorkflow(LibraryUnit(session)).return_book(params.reader_id, params.book_id)

    except NotFoundError as e:
        logger.info("Return failed - %s not found", e.entity)
        return not_found_result(e)

    except InvalidOperationError as e:
        logger.info("Return failed - %s", e.reason)
        return invalid_operation_result(e)

    except Exception as e:
        logger.exception("Unexpected error in return_book tool")
        return error_result(f"Return failed: {e!s}")

    return success_result(
        f"Reader {params.reader_id} returned book {params.book_id}",
        {"reader_id": params.reader_id, "book_id": params.book_id},
    )


take_book = {
    "name": "take_book",
    "description": (
        "Give a copy of a book to a reader. Fails if the book or reader does not exist, "
        "if every copy is already taken, or if the reader already holds this book."
    ),
    "inputSchema": CirculationInput.model_json_schema(),
    "handler": take_book_handler,
}

return_book = {
    "name": "return_book",
    "description": "Take a book back from the reader who holds it.",
    "inputSchema": CirculationInput.model_json_schema(),
    "handler": return_book_handler,
}
