"""
Reader maintenance tools: add_reader, change_reader, delete_reader.

A reader who still holds books cannot be deleted; the rejection carries
the reason "Reader has not returned all books".
"""

import logging
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from ..database.reader_repository import ReaderRepository
from ..database.repository import InvalidOperationError, NotFoundError
from ..database.session import get_session
from ..models.reader import ReaderCreateSchema, ReaderPatchSchema
from ..models.validation import validate_payload
from .results import (
    error_result,
    invalid_operation_result,
    not_found_result,
    success_result,
    validation_error_result,
)

logger = logging.getLogger(__name__)


class ChangeReaderInput(ReaderPatchSchema):
    """Input schema for the change_reader tool."""

    reader_id: int = Field(..., description="ID of the reader to change", ge=1)

    def to_patch(self) -> ReaderPatchSchema:
        return ReaderPatchSchema.model_validate(
            self.model_dump(exclude={"reader_id"}, exclude_unset=True)
        )


class DeleteReaderInput(BaseModel):
    """Input schema for the delete_reader tool."""

    reader_id: int = Field(..., description="ID of the reader to delete", ge=1)

    model_config = ConfigDict(extra="forbid")


async def add_reader_handler(arguments: dict[str, Any]) -> dict[str, Any]:
    """Handler for the add_reader tool."""
    payload, validation = validate_payload(ReaderCreateSchema, arguments)
    if not validation.is_valid:
        logger.warning("Invalid add_reader payload: %s", validation.summary())
        return validation_error_result("reader", validation)

    try:
        with get_session() as session:
            reader = ReaderRepository(session).create(payload)
    except Exception as e:
        logger.exception("Unexpected error in add_reader tool")
        return error_result(f"Failed to add reader: {e!s}")

    logger.info("Added reader %s", reader.id)
    return success_result(
        f"Added reader {reader.full_name} with id {reader.id}",
        {"reader": reader.model_dump(mode="json")},
    )


async def change_reader_handler(arguments: dict[str, Any]) -> dict[str, Any]:
    params, validation = validate_payload(ChangeReaderInput, arguments)
    if not validation.is_valid:
        logger.warning("Invalid change_reader payload: %s", validation.summary())
        return validation_error_result("reader changes", validation)

    try:
        with get_session() as session:
            reader = ReaderRepository(session).update(params.reader_id, params.to_patch())
    except InvalidOperationError as e:
        return invalid_operation_result(e)
    except Exception as e:
        logger.exception("Unexpected error in change_reader tool")
        return error_result(f"Failed to change reader: {e!s}")

    if reader is None:
        return not_found_result(NotFoundError("Reader", params.reader_id))

    logger.info("Changed reader %s", reader.id)
    return success_result(
        f"Changed reader {reader.id}",
        {"reader": reader.model_dump(mode="json")},
    )


async def delete_reader_handler(arguments: dict[str, Any]) -> dict[str, Any]:
    """Handler for the delete_reader tool."""
    params, validation = validate_payload(DeleteReaderInput, arguments)
    if not validation.is_valid:
        return validation_error_result("delete parameters", validation)

    try:
        with get_session() as session:
            deleted = ReaderRepository(session).delete(params.reader_id)
    except InvalidOperationError as e:
        logger.info("Deletion of reader %s rejected - %s", params.reader_id, e.reason)
        return invalid_operation_result(e)
    except Exception as e:
        logger.exception("Unexpected error in delete_reader tool")
        return error_result(f"Failed to delete reader: {e!s}")

    if not deleted:
        return not_found_result(NotFoundError("Reader", params.reader_id))

    logger.info("Deleted reader %s", params.reader_id)
    return success_result(
        f"Deleted reader {params.reader_id}",
        {"reader_id": params.reader_id},
    )


add_reader = {
    "name": "add_reader",
    "description": "Register a reader with a full name and a date of birth in the past.",
    "inputSchema": ReaderCreateSchema.model_json_schema(),
    "handler": add_reader_handler,
}

change_reader = {
    "name": "change_reader",
    "description": "Change a reader's full name or date of birth.",
    "inputSchema": ChangeReaderInput.model_json_schema(),
    "handler": change_reader_handler,
}

delete_reader = {
    "name": "delete_reader",
    "description": "Remove a reader. Rejected while the reader holds any book.",
    "inputSchema": DeleteReaderInput.model_json_schema(),
    "handler": delete_reader_handler,
}
