"""Tests for book and reader resources.

Handlers run against the test database; a couple of error paths use a
patched repository instead.
"""

from unittest.mock import patch

import pytest
from fastmcp.exceptions import ResourceError

from librarian_workplace.resources import all_resources
from librarian_workplace.resources.books import (
    get_book_handler,
    get_books_by_title_handler,
    list_available_books_handler,
    list_books_handler,
    list_given_books_handler,
)
from librarian_workplace.resources.readers import (
    get_reader_handler,
    get_readers_by_name_handler,
    list_readers_handler,
)
from librarian_workplace.tools.circulation import take_book_handler


@pytest.fixture
def small_page(test_config, monkeypatch):
    test_config.default_page_size = 2
    monkeypatch.setattr("librarian_workplace.resources.books.get_config", lambda: test_config)
    monkeypatch.setattr("librarian_workplace.resources.readers.get_config", lambda: test_config)
    return test_config


class TestBookResources:
    async def test_list_books(self, sample_book, single_copy_book, small_page, mock_get_session):
        result = await list_books_handler()

        assert result["total"] == 2
        assert result["page"] == 1
        assert result["page_size"] == 2
        assert [b["vendor_code"] for b in result["books"]] == [
            sample_book.vendor_code,
            single_copy_book.vendor_code,
        ]

    async def test_get_book(self, sample_book, mock_get_session):
        result = await get_book_handler(str(sample_book.vendor_code))

        assert result["title"] == sample_book.title
        assert result["release_date"] == "2000-01-01"
        assert result["readers"] == []

    async def test_get_missing_book(self, mock_get_session):
        with pytest.raises(ResourceError, match="Book not found"):
            await get_book_handler("999")

    @pytest.mark.parametrize("value", ["abc", "0", "-3"])
    async def test_invalid_vendor_code(self, value, mock_get_session):
        with pytest.raises(ResourceError, match="Invalid vendor code"):
            await get_book_handler(value)

    async def test_books_by_title(self, sample_book, single_copy_book, mock_get_session):
        result = await get_books_by_title_handler("best")

        assert result["total"] == 1
        assert result["books"][0]["vendor_code"] == sample_book.vendor_code

    async def test_books_by_title_without_match(self, sample_book, mock_get_session):
        with pytest.raises(ResourceError, match="No books found with title: Dune"):
            await get_books_by_title_handler("Dune")

    async def test_available_and_given(
        self, single_copy_book, sample_reader, mock_get_session
    ):
        available = await list_available_books_handler()
        assert available["total"] == 1
        assert available["message"] is None

        given = await list_given_books_handler()
        assert given["books"] == []
        assert given["message"] == "All books are free"

        await take_book_handler(
            {"reader_id": sample_reader.id, "book_id": single_copy_book.vendor_code}
        )

        available = await list_available_books_handler()
        assert available["books"] == []
        assert available["message"] == "All books are busy"

        given = await list_given_books_handler()
        assert given["total"] == 1
        assert given["books"][0]["readers"] == [sample_reader.id]

    async def test_list_error_becomes_resource_error(self, mock_get_session):
        with patch(
            "librarian_workplace.resources.books.BookRepository.get_all",
            side_effect=RuntimeError("db down"),
        ), pytest.raises(ResourceError, match="Failed to retrieve book list"):
            await list_books_handler()


class TestReaderResources:
    async def test_list_readers(self, sample_readers, small_page, mock_get_session):
        result = await list_readers_handler()

        assert result["total"] == 4
        assert result["total_pages"] == 2
        assert result["has_next"] is True
        assert len(result["readers"]) == 2

    async def test_get_reader(self, sample_book, sample_reader, mock_get_session):
        await take_book_handler({"reader_id": sample_reader.id, "book_id": sample_book.vendor_code})

        result = await get_reader_handler(str(sample_reader.id))

        assert result["full_name"] == "John Smith"
        assert result["books"] == [sample_book.vendor_code]

    async def test_get_missing_reader(self, mock_get_session):
        with pytest.raises(ResourceError, match="Reader not found"):
            await get_reader_handler("999")

    async def test_readers_by_name(self, sample_readers, mock_get_session):
        result = await get_readers_by_name_handler("doe")

        assert result["total"] == 1
        assert result["readers"][0]["full_name"] == "Jane Doe"

    async def test_readers_by_name_without_match(self, sample_readers, mock_get_session):
        with pytest.raises(ResourceError, match="No readers found with name: Tolstoy"):
            await get_readers_by_name_handler("Tolstoy")

    async def test_empty_name_rejected(self, mock_get_session):
        with pytest.raises(ResourceError):
            await get_readers_by_name_handler("   ")


class TestResourceDefinitions:
    def test_uris(self):
        uris = {resource.get("uri_template", resource.get("uri")) for resource in all_resources}
        assert uris == {
            "library://books/list",
            "library://books/{vendor_code}",
            "library://books/title/{title}",
            "library://books/available",
            "library://books/given",
            "library://readers/list",
            "library://readers/{reader_id}",
            "library://readers/name/{name}",
        }

    def test_all_resources_are_json(self):
        for resource in all_resources:
            assert resource["mime_type"] == "application/json"
            assert callable(resource["handler"])
