"""Tests for payload validation."""

from datetime import date, timedelta

from librarian_workplace.models import (
    BookCreateSchema,
    FieldError,
    ReaderCreateSchema,
    ValidationResult,
    validate_payload,
)


class TestValidatePayload:
    def test_valid_payload(self):
        model, result = validate_payload(
            BookCreateSchema,
            {
                "title": "Best Book 1",
                "author": "NoName",
                "release_date": "2000-01-01",
                "number_of_copies": 10,
            },
        )

        assert result.is_valid
        assert result.errors == []
        assert model.release_date == date(2000, 1, 1)

    def test_missing_payload(self):
        model, result = validate_payload(BookCreateSchema, None)

        assert model is None
        assert not result.is_valid
        assert result.errors == [FieldError(field="__root__", message="Payload is required")]

    def test_every_problem_is_reported(self):
        model, result = validate_payload(
            BookCreateSchema,
            {
                "title": "",
                "author": "NoName",
                "release_date": (date.today() + timedelta(days=1)).isoformat(),
                "number_of_copies": -1,
            },
        )

        assert model is None
        fields = {error.field for error in result.errors}
        assert fields == {"title", "release_date", "number_of_copies"}

    def test_value_error_prefix_is_stripped(self):
        _, result = validate_payload(
            ReaderCreateSchema,
            {"full_name": "John Smith", "date_of_birth": date.today().isoformat()},
        )

        assert result.errors == [
            FieldError(field="date_of_birth", message="Date of birth must be in the past")
        ]

    def test_missing_field(self):
        _, result = validate_payload(ReaderCreateSchema, {"full_name": "John Smith"})

        assert [error.field for error in result.errors] == ["date_of_birth"]


class TestValidationResult:
    def test_summary(self):
        result = ValidationResult(
            errors=[
                FieldError(field="title", message="too short"),
                FieldError(field="author", message="missing"),
            ]
        )

        assert result.summary() == "title: too short; author: missing"
        assert str(result.errors[0]) == "title: too short"

    def test_empty_result_is_valid(self):
        assert ValidationResult().is_valid
        assert ValidationResult().summary() == ""
