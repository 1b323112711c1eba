"""
Payload validation for write operations.

Tools validate their input with ``validate_payload`` before they touch a
repository or the checkout workflow. The result is an explicit value, a
list of field errors, instead of an exception, so handlers can report
every problem at once.
"""

from typing import Any, TypeVar

from pydantic import BaseModel, Field, ValidationError


class FieldError(BaseModel):
    """A single validation problem."""

    field: str = Field(..., description="Dotted path of the offending field")
    message: str = Field(..., description="Human-readable description of the problem")

    def __str__(self) -> str:
        return f"{self.field}: {self.message}"


class ValidationResult(BaseModel):
    """Outcome of validating a payload."""

    errors: list[FieldError] = Field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        return not self.errors

    def summary(self) -> str:
        return "; ".join(str(error) for error in self.errors)


def _field_errors(exc: ValidationError) -> list[FieldError]:
    errors = []
    for error in exc.errors():
        field = ".".join(str(part) for part in error["loc"]) or "__root__"
        message = error["msg"].removeprefix("Value error, ")
        errors.append(FieldError(field=field, message=message))
    return errors


M = TypeVar("M", bound=BaseModel)


def validate_payload(
    schema: type[M], payload: dict[str, Any] | None
) -> tuple[M | None, ValidationResult]:
    """
    Validate a raw payload against a schema.

    Args:
        schema: Pydantic model class describing the payload
        payload: Raw arguments, usually straight from a tool call

    Returns:
        The parsed model (None if invalid) and the validation result
    """
    if payload is None:
        return None, ValidationResult(
            errors=[FieldError(field="__root__", message="Payload is required")]
        )

    try:
        return schema.model_validate(payload), ValidationResult()
    except ValidationError as e:
        return None, ValidationResult(errors=_field_errors(e))
