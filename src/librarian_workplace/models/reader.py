"""
Reader models for the Librarian Workplace server.

A reader is a library member who can take books. ``Reader.books`` is the
reader-side view of the checkout relation: the vendor codes of the books
the reader currently holds.

Reader resources can be accessed via:
- library://readers/list
- library://readers/{reader_id}
"""

from datetime import date

from pydantic import BaseModel, ConfigDict, Field, field_validator


def _born_in_the_past(v: date | None) -> date | None:
    if v is not None and v >= date.today():
        raise ValueError("Date of birth must be in the past")
    return v


class Reader(BaseModel):
    """Represents a library reader and the books they currently hold."""

    id: int = Field(
        ...,
        description="Unique identifier for the reader",
        ge=1,
        examples=[1, 17],
    )

    full_name: str = Field(
        ...,
        description="Full name of the reader",
        min_length=2,
        max_length=200,
        examples=["John Smith", "Jane Doe"],
    )

    date_of_birth: date = Field(
        ...,
        description="Reader's date of birth",
        examples=["2000-01-01"],
    )

    books: list[int] = Field(
        default_factory=list,
        description="Vendor codes of books the reader currently holds",
    )

    @field_validator("books")
    @classmethod
    def validate_unique_books(cls, v: list[int]) -> list[int]:
        """A reader cannot hold the same book twice."""
        if len(set(v)) != len(v):
            raise ValueError("A reader cannot hold the same book twice")
        return v

    @property
    def has_books(self) -> bool:
        return len(self.books) > 0

    def holds(self, vendor_code: int) -> bool:
        """Check whether the reader currently holds the given book."""
        return vendor_code in self.books

    model_config = ConfigDict(
        validate_assignment=True,
        str_strip_whitespace=True,
        json_schema_extra={
            "example": {
                "id": 1,
                "full_name": "John Smith",
                "date_of_birth": "2000-01-01",
                "books": [1],
            }
        },
    )


class ReaderCreateSchema(BaseModel):
    """Payload for adding a reader."""

    full_name: str = Field(..., min_length=2, max_length=200)
    date_of_birth: date

    @field_validator("date_of_birth")
    @classmethod
    def validate_date_of_birth(cls, v: date) -> date:
        return _born_in_the_past(v)

    model_config = ConfigDict(str_strip_whitespace=True, extra="forbid")


class ReaderPatchSchema(BaseModel):
    """Payload for changing a reader - all fields optional."""

    full_name: str | None = Field(None, min_length=2, max_length=200)
    date_of_birth: date | None = None

    @field_validator("date_of_birth")
    @classmethod
    def validate_date_of_birth(cls, v: date | None) -> date | None:
        return _born_in_the_past(v)

    model_config = ConfigDict(str_strip_whitespace=True, extra="forbid")
