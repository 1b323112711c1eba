"""
Tests for the Book models.

These tests verify that:
1. Book derives availability from its readers and copies
2. The readers view stays consistent with the copy count
3. Create and patch payloads enforce the field rules
"""

from datetime import date, timedelta

import pytest
from pydantic import ValidationError

from librarian_workplace.models.book import Book, BookCreateSchema, BookPatchSchema


def make_book(**overrides) -> Book:
    data = {
        "vendor_code": 1,
        "title": "Best Book 1",
        "author": "NoName",
        "release_date": date(2000, 1, 1),
        "number_of_copies": 10,
        "readers": [],
    }
    data.update(overrides)
    return Book(**data)


class TestBookModel:
    def test_create_valid_book(self):
        book = make_book(readers=[3, 1])

        assert book.vendor_code == 1
        assert book.title == "Best Book 1"
        assert book.held_copies == 2
        assert book.free_copies == 8

    def test_whitespace_is_stripped(self):
        book = make_book(title="  War and Peace  ", author=" Leo Tolstoy ")
        assert book.title == "War and Peace"
        assert book.author == "Leo Tolstoy"

    def test_available_and_given(self):
        free = make_book(number_of_copies=2, readers=[])
        assert free.is_available is True
        assert free.is_given is False

        partly = make_book(number_of_copies=2, readers=[1])
        assert partly.is_available is True
        assert partly.is_given is True

        busy = make_book(number_of_copies=2, readers=[1, 2])
        assert busy.is_available is False
        assert busy.is_given is True

    def test_zero_copies_is_never_available(self):
        book = make_book(number_of_copies=0, readers=[])
        assert book.is_available is False
        assert book.is_given is False

    def test_more_readers_than_copies_rejected(self):
        with pytest.raises(ValidationError):
            make_book(number_of_copies=1, readers=[1, 2])

    def test_duplicate_readers_rejected(self):
        with pytest.raises(ValidationError):
            make_book(readers=[1, 1])

    @pytest.mark.parametrize(
        "field,value",
        [
            ("vendor_code", 0),
            ("title", ""),
            ("author", ""),
            ("number_of_copies", -1),
        ],
    )
    def test_invalid_fields(self, field, value):
        with pytest.raises(ValidationError):
            make_book(**{field: value})

    def test_json_serialization(self):
        book = make_book(readers=[2])
        data = book.model_dump(mode="json")

        assert data["release_date"] == "2000-01-01"
        assert data["readers"] == [2]
        assert Book.model_validate(data) == book


class TestBookCreateSchema:
    def test_valid_payload(self):
        payload = BookCreateSchema(
            title="New Book",
            author="Someone",
            release_date=date(2020, 2, 2),
            number_of_copies=0,
        )
        assert payload.number_of_copies == 0

    def test_release_date_in_future_rejected(self):
        with pytest.raises(ValidationError, match="Release date cannot be in the future"):
            BookCreateSchema(
                title="New Book",
                author="Someone",
                release_date=date.today() + timedelta(days=1),
                number_of_copies=1,
            )

    def test_release_date_today_allowed(self):
        payload = BookCreateSchema(
            title="New Book",
            author="Someone",
            release_date=date.today(),
            number_of_copies=1,
        )
        assert payload.release_date == date.today()

    def test_vendor_code_cannot_be_supplied(self):
        with pytest.raises(ValidationError):
            BookCreateSchema(
                vendor_code=5,
                title="New Book",
                author="Someone",
                release_date=date(2020, 2, 2),
                number_of_copies=1,
            )

    def test_title_length_limit(self):
        with pytest.raises(ValidationError):
            BookCreateSchema(
                title="x" * 501,
                author="Someone",
                release_date=date(2020, 2, 2),
                number_of_copies=1,
            )


class TestBookPatchSchema:
    def test_all_fields_optional(self):
        patch = BookPatchSchema()
        assert patch.model_dump(exclude_unset=True) == {}

    def test_only_set_fields_are_dumped(self):
        patch = BookPatchSchema(title="Renamed", author=None)
        assert patch.model_dump(exclude_unset=True, exclude_none=True) == {"title": "Renamed"}

    def test_negative_copies_rejected(self):
        with pytest.raises(ValidationError):
            BookPatchSchema(number_of_copies=-3)

    def test_future_release_date_rejected(self):
        with pytest.raises(ValidationError):
            BookPatchSchema(release_date=date.today() + timedelta(days=30))
