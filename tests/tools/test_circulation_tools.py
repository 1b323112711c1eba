"""
Tests for the take_book and return_book tools.

Covers input validation, the error results each workflow failure maps to,
and the database state after successful calls.
"""

import pytest

from librarian_workplace.database import BookRepository, ReaderRepository
from librarian_workplace.tools.circulation import (
    CirculationInput,
    return_book,
    return_book_handler,
    take_book,
    take_book_handler,
)


def held_by(session_factory, vendor_code):
    with session_factory() as session:
        return BookRepository(session).get_by_id(vendor_code).readers


class TestTakeBookTool:
    async def test_take_success(self, sample_book, sample_reader, mock_get_session):
        result = await take_book_handler(
            {"reader_id": sample_reader.id, "book_id": sample_book.vendor_code}
        )

        assert not result.get("isError")
        assert result["content"][0]["type"] == "text"
        assert result["data"] == {
            "reader_id": sample_reader.id,
            "book_id": sample_book.vendor_code,
        }
        assert held_by(mock_get_session, sample_book.vendor_code) == [sample_reader.id]

        with mock_get_session() as session:
            reader = ReaderRepository(session).get_by_id(sample_reader.id)
        assert reader.books == [sample_book.vendor_code]

    async def test_book_not_found(self, sample_reader, mock_get_session):
        result = await take_book_handler({"reader_id": sample_reader.id, "book_id": 404})

        assert result["isError"] is True
        assert result["content"][0]["text"] == "Book not found"
        assert result["data"] == {"error": "not_found", "entity": "Book"}

    async def test_reader_not_found(self, sample_book, mock_get_session):
        result = await take_book_handler({"reader_id": 404, "book_id": sample_book.vendor_code})

        assert result["isError"] is True
        assert result["content"][0]["text"] == "Reader not found"
        assert result["data"]["entity"] == "Reader"

    async def test_all_books_busy(self, single_copy_book, sample_readers, mock_get_session):
        first, second = sample_readers[:2]
        await take_book_handler({"reader_id": first.id, "book_id": single_copy_book.vendor_code})

        result = await take_book_handler(
            {"reader_id": second.id, "book_id": single_copy_book.vendor_code}
        )

        assert result["isError"] is True
        assert result["content"][0]["text"] == "All books are busy"
        assert result["data"] == {"error": "invalid_operation", "reason": "All books are busy"}
        assert held_by(mock_get_session, single_copy_book.vendor_code) == [first.id]

    async def test_already_taken(self, sample_book, sample_reader, mock_get_session):
        arguments = {"reader_id": sample_reader.id, "book_id": sample_book.vendor_code}
        await take_book_handler(arguments)

        result = await take_book_handler(arguments)

        assert result["isError"] is True
        assert result["content"][0]["text"] == "Reader has already taken this book!"

    @pytest.mark.parametrize(
        "arguments",
        [
            {},
            {"reader_id": 1},
            {"reader_id": "one", "book_id": 1},
        ],
    )
    async def test_invalid_arguments(self, arguments, mock_get_session):
        result = await take_book_handler(arguments)

        assert result["isError"] is True
        assert result["content"][0]["text"].startswith("Invalid take parameters")
        assert result["data"]["error"] == "validation"

    async def test_unknown_book_reported_whatever_the_reader(self, mock_get_session):
        result = await take_book_handler({"reader_id": 0, "book_id": 999})

        assert result["isError"] is True
        assert result["content"][0]["text"] == "Book not found"
        assert result["data"]["entity"] == "Book"

    async def test_unexpected_error(self, sample_book, sample_reader, mock_get_session, monkeypatch):
        def broken(*_args, **_kwargs):
            raise RuntimeError("disk on fire")

        monkeypatch.setattr(
            "librarian_workplace.tools.circulation.CheckoutWorkflow.take", broken
        )

        result = await take_book_handler(
            {"reader_id": sample_reader.id, "book_id": sample_book.vendor_code}
        )

        assert result["isError"] is True
        assert "disk on fire" in result["content"][0]["text"]


class TestReturnBookTool:
    async def test_return_success(self, sample_book, sample_reader, mock_get_session):
        arguments = {"reader_id": sample_reader.id, "book_id": sample_book.vendor_code}
        await take_book_handler(arguments)

        result = await return_book_handler(arguments)

        assert not result.get("isError")
        assert held_by(mock_get_session, sample_book.vendor_code) == []

    async def test_not_taken(self, sample_book, sample_reader, mock_get_session):
        result = await return_book_handler(
            {"reader_id": sample_reader.id, "book_id": sample_book.vendor_code}
        )

        assert result["isError"] is True
        assert result["content"][0]["text"] == "Reader has not taken this book"

    async def test_book_not_found(self, sample_reader, mock_get_session):
        result = await return_book_handler({"reader_id": sample_reader.id, "book_id": 404})

        assert result["content"][0]["text"] == "Book not found"


class TestToolDefinitions:
    def test_metadata(self):
        for tool in (take_book, return_book):
            assert tool["inputSchema"] == CirculationInput.model_json_schema()
            assert callable(tool["handler"])

        schema = CirculationInput.model_json_schema()
        assert set(schema["required"]) == {"reader_id", "book_id"}
