"""Librarian Workplace Resources Package

Resources are the read-only side of the server, addressed by URI
(e.g. library://books/list). Changes go through tools.
"""

from .books import book_resources
from .readers import reader_resources

all_resources = book_resources + reader_resources

__all__ = [
    "all_resources",
    "book_resources",
    "reader_resources",
]
