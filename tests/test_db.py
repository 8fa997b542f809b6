"""
Tests for the SQLite helpers: path resolution, migrations and error translation.
"""
import os
import sqlite3

import pytest

from bike_service_api.app.container import build_container
from bike_service_api.app.core.config import Settings
from bike_service_api.app.core.db import (
    MIGRATIONS,
    get_connection,
    get_database_path,
    init_db,
    translate_integrity_error,
)
from bike_service_api.app.core.exceptions import ReferenceNotFoundError, StorageError, ValidationError


def test_init_db_is_idempotent(tmp_path):
    path = str(tmp_path / "fresh.db")

    assert init_db(path) == len(MIGRATIONS)
    assert init_db(path) == len(MIGRATIONS)

    conn = get_connection(path)
    try:
        tables = {row["name"] for row in conn.execute("SELECT name FROM sqlite_master WHERE type = 'table'")}
        versions = [row["version"] for row in conn.execute("SELECT version FROM migrations ORDER BY version")]
    finally:
        conn.close()
    assert {"bikes", "components", "migrations"} <= tables
    assert versions == [version for version, _ in MIGRATIONS]


def test_connections_enforce_foreign_keys(db_path):
    conn = get_connection(db_path)
    try:
        assert conn.execute("PRAGMA foreign_keys").fetchone()[0] == 1
    finally:
        conn.close()


def test_translate_integrity_error():
    assert isinstance(
        translate_integrity_error(sqlite3.IntegrityError("FOREIGN KEY constraint failed"), "bike does not exist"),
        ReferenceNotFoundError,
    )
    assert isinstance(
        translate_integrity_error(sqlite3.IntegrityError("CHECK constraint failed: mileage >= 0"), "x"),
        ValidationError,
    )
    assert isinstance(
        translate_integrity_error(sqlite3.IntegrityError("NOT NULL constraint failed: bikes.type"), "x"),
        ValidationError,
    )
    assert isinstance(translate_integrity_error(sqlite3.IntegrityError("something else"), "x"), StorageError)


@pytest.mark.parametrize("database_url", [":memory:", "file::memory:?cache=shared"])
def test_in_memory_database_is_rejected(database_url):
    with pytest.raises(ValueError, match="in-memory"):
        get_database_path(database_url)


def test_container_refuses_in_memory_database():
    settings = Settings(database_url=":memory:", secret_key="x", redis_url="", user_service_url="")

    with pytest.raises(ValueError):
        build_container(settings)


def test_relative_path_is_resolved_to_absolute():
    path = get_database_path("data/bikes.db")

    assert os.path.isabs(path)
    assert path.endswith(os.path.join("data", "bikes.db"))


def test_absolute_path_is_unchanged(tmp_path):
    path = str(tmp_path / "bikes.db")

    assert get_database_path(path) == path
