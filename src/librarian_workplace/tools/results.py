"""
Tool result builders.

Tools return content arrays with typed items. ``isError`` marks execution
failures (not protocol errors); ``data`` carries structured output for
clients that want more than the text.
"""

from typing import Any

from ..database.repository import InvalidOperationError, NotFoundError
from ..models.validation import ValidationResult


def success_result(message: str, data: dict[str, Any] | None = None) -> dict[str, Any]:
    result: dict[str, Any] = {"content": [{"type": "text", "text": message}]}
    if data is not None:
        result["data"] = data
    return result


def error_result(message: str, data: dict[str, Any] | None = None) -> dict[str, Any]:
    result: dict[str, Any] = {
        "isError": True,
        "content": [{"type": "text", "text": message}],
    }
    if data is not None:
        result["data"] = data
    return result


def validation_error_result(what: str, validation: ValidationResult) -> dict[str, Any]:
    return error_result(
        f"Invalid {what}: {validation.summary()}",
        {
            "error": "validation",
            "errors": [error.model_dump() for error in validation.errors],
        },
    )


def not_found_result(error: NotFoundError) -> dict[str, Any]:
    return error_result(
        f"{error.entity} not found",
        {"error": "not_found", "entity": error.entity},
    )


def invalid_operation_result(error: InvalidOperationError) -> dict[str, Any]:
    # The reason text is passed through unchanged; clients match on it
    return error_result(
        error.reason,
        {"error": "invalid_operation", "reason": error.reason},
    )
