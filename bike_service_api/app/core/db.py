"""
SQLite database integration and simple migration system.

This module provides functions for resolving the database path
(``get_database_path``), obtaining a connection (``get_connection``),
a cursor context manager (``get_cursor``) and applying migrations on
application start (``init_db``).  Every function takes the database
location explicitly; repositories keep the resolved path and open a
fresh connection per operation.

The migration mechanism stores applied migration versions in the
``migrations`` table and executes new migrations in order.
"""

import os
import sqlite3
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator

from .exceptions import (
    BikeServiceError,
    ReferenceNotFoundError,
    StorageError,
    ValidationError,
)


# ISO‑8601 UTC with milliseconds, e.g. ``2025-10-18T18:49:18.123Z``.
SQL_NOW = "strftime('%Y-%m-%dT%H:%M:%fZ', 'now')"


MIGRATIONS: list[tuple[int, str]] = [
    # Migration 1: bikes
    (
        1,
        f"""
        CREATE TABLE IF NOT EXISTS bikes (
            bike_id TEXT PRIMARY KEY,
            user_id TEXT NOT NULL,
            bike_name VARCHAR(255) NOT NULL DEFAULT '',
            type VARCHAR(50) NOT NULL CHECK (type IN ('bmx', 'mtb', 'road')),
            model VARCHAR(255),
            year INTEGER NOT NULL DEFAULT 0,
            mileage INTEGER NOT NULL DEFAULT 0 CHECK (mileage >= 0),
            created_at TEXT NOT NULL DEFAULT ({SQL_NOW}),
            updated_at TEXT NOT NULL DEFAULT ({SQL_NOW})
        );

        CREATE INDEX IF NOT EXISTS idx_bikes_user_id ON bikes(user_id);
        """,
    ),
    # Migration 2: components, removed together with their bike
    (
        2,
        f"""
        CREATE TABLE IF NOT EXISTS components (
            id TEXT PRIMARY KEY,
            bike_id TEXT NOT NULL,
            name VARCHAR(50) NOT NULL CHECK (name IN ('handlebars', 'frame', 'wheels')),
            brand VARCHAR(100),
            model VARCHAR(100),
            installed_at TEXT NOT NULL,
            installed_mileage INTEGER NOT NULL DEFAULT 0 CHECK (installed_mileage >= 0),
            max_mileage INTEGER NOT NULL CHECK (max_mileage BETWEEN 1 AND 1000000),
            created_at TEXT NOT NULL DEFAULT ({SQL_NOW}),
            updated_at TEXT NOT NULL DEFAULT ({SQL_NOW}),
            CONSTRAINT fk_bike FOREIGN KEY (bike_id) REFERENCES bikes(bike_id) ON DELETE CASCADE
        );

        CREATE INDEX IF NOT EXISTS idx_components_bike_id ON components(bike_id);
        """,
    ),
]


def get_database_path(database_url: str) -> str:
    """Compute the path to the SQLite database file.

    Absolute paths are returned unchanged; relative paths are resolved
    against the project root.  ``:memory:`` is rejected: every operation
    opens its own connection, so each would see a different, empty
    database.
    """
    if database_url == ":memory:" or database_url.startswith("file::memory:"):
        raise ValueError(
            "DATABASE_URL must point to a file; in-memory SQLite databases "
            "are not shared between connections"
        )
    if os.path.isabs(database_url):
        return database_url
    base_dir = Path(__file__).resolve().parent.parent.parent.parent
    return str((base_dir / database_url).resolve())


def get_connection(db_path: str) -> sqlite3.Connection:
    """Create and return a new SQLite connection.

    Rows are returned as ``sqlite3.Row`` so columns can be accessed by
    name.  Foreign key enforcement is switched on for the lifetime of
    the connection; SQLite leaves it off by default and the
    ``components.bike_id`` reference depends on it.
    """
    conn = sqlite3.connect(db_path)
    conn.row_factory = sqlite3.Row
    conn.execute("PRAGMA foreign_keys = ON")
    return conn


@contextmanager
def get_cursor(db_path: str) -> Iterator[sqlite3.Cursor]:
    """Yield a cursor, commit on success, roll back on error, always close."""
    conn = get_connection(db_path)
    try:
        yield conn.cursor()
        conn.commit()
    except Exception:
        conn.rollback()
        raise
    finally:
        conn.close()


def init_db(db_path: str) -> int:
    """Initialise the database and apply pending migrations.

    Creates the ``migrations`` table if it does not exist, checks the
    current schema version and applies any newer entries from
    ``MIGRATIONS``.  Returns the schema version after migrating.
    """
    with get_cursor(db_path) as cursor:
        cursor.execute(
            "CREATE TABLE IF NOT EXISTS migrations (version INTEGER PRIMARY KEY)"
        )
        cursor.execute("SELECT MAX(version) as version FROM migrations")
        row = cursor.fetchone()
        current_version = row["version"] if row and row["version"] is not None else 0

        for version, sql in MIGRATIONS:
            if version > current_version:
                cursor.executescript(sql)
                cursor.execute(
                    "INSERT INTO migrations (version) VALUES (?)", (version,)
                )
                current_version = version
    return current_version


def translate_integrity_error(exc: sqlite3.IntegrityError, missing_reference: str) -> BikeServiceError:
    """Map an ``IntegrityError`` onto the domain error taxonomy.

    ``missing_reference`` is the message used when a foreign key points
    at a row that does not exist (an unknown owner or parent bike).
    """
    message = str(exc)
    if "FOREIGN KEY" in message:
        return ReferenceNotFoundError(missing_reference)
    if "NOT NULL" in message:
        return ValidationError("required field is missing")
    if "UNIQUE" in message:
        return ValidationError("record already exists")
    if "CHECK" in message:
        return ValidationError(f"value out of range: {message}")
    return StorageError(message)
