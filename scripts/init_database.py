#!/usr/bin/env python3
"""
Initialize the Librarian Workplace database.

This script:
1. Creates all database tables
2. Optionally loads sample data
3. Verifies the database is ready for server use

Usage:
    python scripts/init_database.py [--drop-existing] [--sample-data]
"""

import argparse
import logging
import sys
from datetime import date

from sqlalchemy import inspect

from librarian_workplace.database import (
    Book,
    Checkout,
    DatabaseManager,
    Reader,
    get_db_manager,
)

logging.basicConfig(
    level=logging.INFO, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)

EXPECTED_TABLES = {"books", "readers", "checkouts"}


def main() -> None:
    """Main entry point for database initialization."""
    parser = argparse.ArgumentParser(description="Initialize the Librarian Workplace database")
    parser.add_argument(
        "--drop-existing",
        action="store_true",
        help="Drop existing tables before creating new ones",
    )
    parser.add_argument(
        "--sample-data",
        action="store_true",
        help="Load sample data after creating tables",
    )
    parser.add_argument(
        "--database-url",
        help="Override default database URL",
    )

    args = parser.parse_args()

    logger.info("Initializing database manager...")
    db_manager = get_db_manager(args.database_url)

    if not db_manager.verify_connection():
        logger.error("Failed to connect to database")
        sys.exit(1)

    try:
        logger.info("Creating database schema...")
        db_manager.init_database(drop_existing=args.drop_existing)

        if args.sample_data:
            logger.info("Loading sample data...")
            load_sample_data(db_manager)

        tables = set(inspect(db_manager.engine).get_table_names())
        logger.info("Tables: %s", ", ".join(sorted(tables)))

        missing_tables = EXPECTED_TABLES - tables
        if missing_tables:
            logger.error("Missing expected tables: %s", missing_tables)
            sys.exit(1)

        logger.info("Database initialization complete")

    except Exception:
        logger.exception("Database initialization failed")
        sys.exit(1)
    finally:
        db_manager.close()


def load_sample_data(db_manager: DatabaseManager) -> None:
    """
    Load a small catalog for trying the server out.

    Three books, three readers, and two checkouts: "Best Book 1" has one of
    its two copies out, and the single copy of "Best Book 3" is taken.
    """
    with db_manager.session_scope() as session:
        books = [
            Book(
                title="Best Book 1",
                author="NoName",
                release_date=date(2000, 1, 1),
                number_of_copies=2,
            ),
            Book(
                title="Best Book 2",
                author="NoName",
                release_date=date(2005, 6, 15),
                number_of_copies=5,
            ),
            Book(
                title="Best Book 3",
                author="Somebody",
                release_date=date(2012, 3, 9),
                number_of_copies=1,
            ),
        ]
        readers = [
            Reader(full_name="John Smith", date_of_birth=date(1990, 4, 12)),
            Reader(full_name="Jane Doe", date_of_birth=date(1985, 11, 2)),
            Reader(full_name="Ivan Petrov", date_of_birth=date(2001, 7, 30)),
        ]
        session.add_all(books + readers)
        session.flush()

        session.add_all(
            [
                Checkout(reader_id=readers[0].id, book_vendor_code=books[0].vendor_code),
                Checkout(reader_id=readers[1].id, book_vendor_code=books[2].vendor_code),
            ]
        )

    logger.info("Loaded %d books and %d readers", len(books), len(readers))


if __name__ == "__main__":
    main()
