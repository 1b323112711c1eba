"""
Librarian Workplace MCP Server Package.

This package implements a library management server: book and reader
records plus the checkout ("take/return") workflow that links them.

Key Components:
- models: Pydantic models and request validation
- database: SQLAlchemy schema, session management and repositories
- circulation: The checkout workflow engine
- config: Configuration management with Pydantic v2
- resources: MCP resources (read-only endpoints)
- tools: MCP tools (operations with side effects)
"""

__version__ = "0.1.0"

from . import database

__all__ = [
    "__version__",
    "database",
]
