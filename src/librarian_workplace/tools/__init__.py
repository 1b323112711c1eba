"""Librarian Workplace tools.

Tools are the write side of the server: catalog maintenance for books and
readers, plus the take/return circulation workflow. Each module exposes
tool definitions as dicts with ``name``, ``description``, ``inputSchema``
and ``handler``.
"""

from .books import add_book, change_book, delete_book
from .circulation import return_book, take_book
from .readers import add_reader, change_reader, delete_reader

book_tools = [add_book, change_book, delete_book]
reader_tools = [add_reader, change_reader, delete_reader]
circulation_tools = [take_book, return_book]

all_tools = book_tools + reader_tools + circulation_tools

__all__ = [
    "all_tools",
    "book_tools",
    "circulation_tools",
    "reader_tools",
]
