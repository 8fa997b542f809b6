"""
SQLite implementation of ``BikeRepository``.

Each method opens its own connection through ``core.db.get_cursor`` so
concurrent requests never share a connection.  Row‑level statement
semantics are the only serialization point: concurrent updates to the
same bike are last‑writer‑wins.
"""

import logging
import sqlite3
from typing import List
from uuid import UUID

from ..core.db import SQL_NOW, get_cursor, translate_integrity_error
from ..core.exceptions import NotFoundError, StorageError
from ..schemas.bike import Bike, BikeUpdate
from .base import BikeRepository


logger = logging.getLogger(__name__)

BIKE_COLUMNS = "user_id, bike_id, bike_name, type, model, year, mileage, created_at, updated_at"


def _row_to_bike(row: sqlite3.Row) -> Bike:
    return Bike(
        user_id=row["user_id"],
        bike_id=row["bike_id"],
        bike_name=row["bike_name"],
        type=row["type"],
        model=row["model"] or "",
        year=row["year"],
        mileage=row["mileage"],
        created_at=row["created_at"],
        updated_at=row["updated_at"],
    )


class SqliteBikeRepository(BikeRepository):
    """Bikes stored in the ``bikes`` table."""

    def __init__(self, db_path: str) -> None:
        self.db_path = db_path

    def create_bike(self, bike: Bike) -> Bike:
        try:
            with get_cursor(self.db_path) as cursor:
                cursor.execute(
                    """
                    INSERT INTO bikes (user_id, bike_id, bike_name, type, model, year, mileage)
                    VALUES (?, ?, ?, ?, ?, ?, ?)
                    """,
                    (
                        str(bike.user_id),
                        str(bike.bike_id),
                        bike.bike_name,
                        bike.type.value,
                        bike.model,
                        bike.year,
                        bike.mileage,
                    ),
                )
                row = cursor.execute(
                    f"SELECT {BIKE_COLUMNS} FROM bikes WHERE bike_id = ?",
                    (str(bike.bike_id),),
                ).fetchone()
        except sqlite3.IntegrityError as exc:
            raise translate_integrity_error(exc, "user does not exist") from exc
        except sqlite3.Error as exc:
            raise StorageError(f"error creating bike: {exc}") from exc
        return _row_to_bike(row)

    def get_bike_by_id(self, bike_id: UUID) -> Bike:
        try:
            with get_cursor(self.db_path) as cursor:
                row = cursor.execute(
                    f"SELECT {BIKE_COLUMNS} FROM bikes WHERE bike_id = ?",
                    (str(bike_id),),
                ).fetchone()
        except sqlite3.Error as exc:
            raise StorageError(f"error reading bike: {exc}") from exc
        if not row:
            raise NotFoundError("bike not found")
        return _row_to_bike(row)

    def get_bikes_by_user_id(self, user_id: UUID) -> List[Bike]:
        try:
            with get_cursor(self.db_path) as cursor:
                rows = cursor.execute(
                    f"SELECT {BIKE_COLUMNS} FROM bikes WHERE user_id = ? ORDER BY created_at, bike_id",
                    (str(user_id),),
                ).fetchall()
        except sqlite3.Error as exc:
            raise StorageError(f"error listing bikes: {exc}") from exc
        return [_row_to_bike(row) for row in rows]

    def update_bike(self, bike_id: UUID, changes: BikeUpdate) -> Bike:
        # NULLIF turns the zero value of each column into NULL so COALESCE
        # falls back to the stored value.
        try:
            with get_cursor(self.db_path) as cursor:
                cursor.execute(
                    f"""
                    UPDATE bikes
                    SET
                        bike_name = COALESCE(NULLIF(?, ''), bike_name),
                        type = COALESCE(NULLIF(?, ''), type),
                        model = COALESCE(NULLIF(?, ''), model),
                        year = COALESCE(NULLIF(?, 0), year),
                        mileage = COALESCE(NULLIF(?, 0), mileage),
                        updated_at = {SQL_NOW}
                    WHERE bike_id = ?
                    """,
                    (
                        changes.bike_name,
                        changes.type.value if changes.type else None,
                        changes.model,
                        changes.year,
                        changes.mileage,
                        str(bike_id),
                    ),
                )
                if cursor.rowcount == 0:
                    raise NotFoundError("bike not found")
                row = cursor.execute(
                    f"SELECT {BIKE_COLUMNS} FROM bikes WHERE bike_id = ?",
                    (str(bike_id),),
                ).fetchone()
        except sqlite3.IntegrityError as exc:
            raise translate_integrity_error(exc, "user does not exist") from exc
        except sqlite3.Error as exc:
            raise StorageError(f"error updating bike: {exc}") from exc
        return _row_to_bike(row)

    def delete_bike(self, bike_id: UUID) -> None:
        # Components go first, in the same transaction, so the cascade holds
        # even on connections where foreign key enforcement is off.
        try:
            with get_cursor(self.db_path) as cursor:
                cursor.execute("DELETE FROM components WHERE bike_id = ?", (str(bike_id),))
                removed_components = cursor.rowcount
                cursor.execute("DELETE FROM bikes WHERE bike_id = ?", (str(bike_id),))
                if cursor.rowcount == 0:
                    raise NotFoundError("bike not found")
        except sqlite3.Error as exc:
            raise StorageError(f"error deleting bike: {exc}") from exc
        logger.debug("Deleted bike bike_id=%s components=%s", bike_id, removed_components)
