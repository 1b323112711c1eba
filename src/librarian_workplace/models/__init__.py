"""
Librarian Workplace Models.

Pydantic models for the core entities:
- Book: Library catalog items, with the readers holding them
- Reader: Library members, with the books they hold

Plus the create/patch payload schemas and the validation helpers used by
the tools before any write.
"""

from .book import Book, BookCreateSchema, BookPatchSchema
from .reader import Reader, ReaderCreateSchema, ReaderPatchSchema
from .validation import FieldError, ValidationResult, validate_payload

__all__ = [
    "Book",
    "BookCreateSchema",
    "BookPatchSchema",
    "FieldError",
    "Reader",
    "ReaderCreateSchema",
    "ReaderPatchSchema",
    "ValidationResult",
    "validate_payload",
]
