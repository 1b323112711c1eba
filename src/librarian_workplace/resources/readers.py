"""Reader Resources

Resources:
- library://readers/list - Paginated reader list
- library://readers/{reader_id} - One reader with the books it holds
- library://readers/name/{name} - Readers whose full name contains the text
"""

import logging
from typing import Any

from fastmcp.exceptions import ResourceError
from pydantic import BaseModel, Field

from ..config import get_config
from ..database.reader_repository import ReaderRepository
from ..database.repository import PaginationParams
from ..database.session import session_scope
from ..models.reader import Reader

logger = logging.getLogger(__name__)


class ReaderListResponse(BaseModel):
    readers: list[Reader] = Field(..., description="Readers in this page")
    total: int
    page: int
    page_size: int
    total_pages: int
    has_next: bool
    has_previous: bool


def parse_reader_id(value: str) -> int:
    try:
        reader_id = int(value)
    except (TypeError, ValueError) as e:
        raise ResourceError(f"Invalid reader id: {value}") from e
    if reader_id < 1:
        raise ResourceError(f"Invalid reader id: {value}")
    return reader_id


async def list_readers_handler() -> dict[str, Any]:
    """Returns the first page of readers, ordered by id."""
    try:
        pagination = PaginationParams(page=1, page_size=get_config().default_page_size)

        with session_scope() as session:
            result = ReaderRepository(session).get_all(pagination=pagination)

            return ReaderListResponse(
                readers=result.items,
                total=result.total,
                page=result.page,
                page_size=result.page_size,
                total_pages=result.total_pages,
                has_next=result.has_next,
                has_previous=result.has_previous,
            ).model_dump(mode="json")

    except Exception as e:
        logger.exception("Error in readers/list resource")
        raise ResourceError(f"Failed to retrieve reader list: {e!s}") from e


async def get_reader_handler(reader_id: str) -> dict[str, Any]:
    """Returns one reader, including the vendor codes of the books held."""
    rid = parse_reader_id(reader_id)
    try:
        logger.debug("MCP Resource Request - readers/%s", rid)

        with session_scope() as session:
            reader = ReaderRepository(session).get_by_id(rid)

            if reader is None:
                raise ResourceError(f"Reader not found: {rid}")

            return reader.model_dump(mode="json")

    except ResourceError:
        raise
    except Exception as e:
        logger.exception("Error in readers/{reader_id} resource")
        raise ResourceError(f"Failed to retrieve reader details: {e!s}") from e


async def get_readers_by_name_handler(name: str) -> dict[str, Any]:
    if not name.strip():
        raise ResourceError("Name must not be empty")
    try:
        with session_scope() as session:
            readers = ReaderRepository(session).get_by_name(name)

        if not readers:
            raise ResourceError(f"No readers found with name: {name}")

        return {
            "readers": [reader.model_dump(mode="json") for reader in readers],
            "total": len(readers),
        }

    except ResourceError:
        raise
    except Exception as e:
        logger.exception("Error in readers/name/{name} resource")
        raise ResourceError(f"Failed to search readers by name: {e!s}") from e


reader_resources: list[dict[str, Any]] = [
    {
        "uri": "library://readers/list",
        "name": "Reader List",
        "description": "Browse registered readers, ordered by id",
        "mime_type": "application/json",
        "handler": list_readers_handler,
    },
    {
        "uri_template": "library://readers/name/{name}",
        "name": "Readers by Name",
        "description": "Readers whose full name contains the given text (case-insensitive)",
        "mime_type": "application/json",
        "handler": get_readers_by_name_handler,
    },
    {
        "uri_template": "library://readers/{reader_id}",
        "name": "Reader Details",
        "description": "Get a reader by id, with the books the reader holds",
        "mime_type": "application/json",
        "handler": get_reader_handler,
    },
]
