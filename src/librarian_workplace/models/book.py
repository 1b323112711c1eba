"""
Book models for the Librarian Workplace server.

``Book`` is the read model returned by repositories and resources. It
carries the derived ``readers`` view of the checkout relation, which makes
the availability predicates plain properties:

- available: at least one copy is not held (``len(readers) < number_of_copies``)
- given: at least one copy is held (``len(readers) > 0``)

A book with several copies can be both at once.

``BookCreateSchema`` and ``BookPatchSchema`` validate incoming payloads for
the add and change operations.
"""

from datetime import date

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


def _release_date_not_in_future(v: date | None) -> date | None:
    if v is not None and v > date.today():
        raise ValueError("Release date cannot be in the future")
    return v


class Book(BaseModel):
    """
    Represents a book in the library catalog.

    The vendor code is assigned when the book is added and never changes.
    """

    vendor_code: int = Field(
        ...,
        description="Unique vendor code of the book",
        ge=1,
        examples=[1, 42],
    )

    title: str = Field(
        ...,
        description="The title of the book",
        min_length=1,
        max_length=500,
        examples=["Best Book 1", "War and Peace"],
    )

    author: str = Field(
        ...,
        description="Author of the book",
        min_length=1,
        max_length=200,
        examples=["NoName", "Leo Tolstoy"],
    )

    release_date: date = Field(
        ...,
        description="Date the book was released",
        examples=["2000-01-01"],
    )

    number_of_copies: int = Field(
        ...,
        description="Number of copies owned; ceiling on simultaneous checkouts",
        ge=0,
        examples=[1, 10],
    )

    readers: list[int] = Field(
        default_factory=list,
        description="IDs of readers currently holding a copy",
    )

    @field_validator("readers")
    @classmethod
    def validate_unique_readers(cls, v: list[int]) -> list[int]:
        """A reader can hold at most one copy of a book."""
        if len(set(v)) != len(v):
            raise ValueError("A reader cannot hold the same book twice")
        return v

    @model_validator(mode="after")
    def validate_held_copies(self) -> "Book":
        """Ensure held copies never exceed owned copies."""
        if len(self.readers) > self.number_of_copies:
            raise ValueError("Readers cannot exceed number of copies")
        return self

    @property
    def held_copies(self) -> int:
        return len(self.readers)

    @property
    def free_copies(self) -> int:
        return self.number_of_copies - len(self.readers)

    @property
    def is_available(self) -> bool:
        """Check if the book has at least one copy nobody holds."""
        return len(self.readers) < self.number_of_copies

    @property
    def is_given(self) -> bool:
        """Check if at least one reader holds a copy."""
        return len(self.readers) > 0

    model_config = ConfigDict(
        validate_assignment=True,
        str_strip_whitespace=True,
        json_schema_extra={
            "example": {
                "vendor_code": 1,
                "title": "Best Book 1",
                "author": "NoName",
                "release_date": "2000-01-01",
                "number_of_copies": 10,
                "readers": [1, 3],
            }
        },
    )


class BookCreateSchema(BaseModel):
    """Payload for adding a book. The vendor code is assigned by the store."""

    title: str = Field(..., min_length=1, max_length=500)
    author: str = Field(..., min_length=1, max_length=200)
    release_date: date
    number_of_copies: int = Field(..., ge=0)

    @field_validator("release_date")
    @classmethod
    def validate_release_date(cls, v: date | None) -> date | None:
        return _release_date_not_in_future(v)

    model_config = ConfigDict(str_strip_whitespace=True, extra="forbid")


class BookPatchSchema(BaseModel):
    """Payload for changing a book - all fields optional."""

    title: str | None = Field(None, min_length=1, max_length=500)
    author: str | None = Field(None, min_length=1, max_length=200)
    release_date: date | None = None
    number_of_copies: int | None = Field(None, ge=0)

    @field_validator("release_date")
    @classmethod
    def validate_release_date(cls, v: date | None) -> date | None:
        return _release_date_not_in_future(v)

    model_config = ConfigDict(str_strip_whitespace=True, extra="forbid")
