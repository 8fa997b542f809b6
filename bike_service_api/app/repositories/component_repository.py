"""
SQLite implementation of ``ComponentRepository``.
"""

import sqlite3
from typing import List
from uuid import UUID

from ..core.db import SQL_NOW, get_cursor, translate_integrity_error
from ..core.exceptions import NotFoundError, StorageError
from ..schemas.component import Component, ComponentUpdate
from .base import ComponentRepository


COMPONENT_COLUMNS = (
    "id, bike_id, name, brand, model, installed_at, installed_mileage, "
    "max_mileage, created_at, updated_at"
)


def _row_to_component(row: sqlite3.Row) -> Component:
    return Component(
        id=row["id"],
        bike_id=row["bike_id"],
        name=row["name"],
        brand=row["brand"],
        model=row["model"],
        installed_at=row["installed_at"],
        installed_mileage=row["installed_mileage"],
        max_mileage=row["max_mileage"],
        created_at=row["created_at"],
        updated_at=row["updated_at"],
    )


class SqliteComponentRepository(ComponentRepository):
    """Components stored in the ``components`` table."""

    def __init__(self, db_path: str) -> None:
        self.db_path = db_path

    def create_component(self, component: Component) -> Component:
        try:
            with get_cursor(self.db_path) as cursor:
                cursor.execute(
                    """
                    INSERT INTO components
                        (id, bike_id, name, brand, model, installed_at, installed_mileage, max_mileage)
                    VALUES (?, ?, ?, ?, ?, ?, ?, ?)
                    """,
                    (
                        str(component.id),
                        str(component.bike_id),
                        component.name.value,
                        component.brand,
                        component.model,
                        component.installed_at.isoformat(),
                        component.installed_mileage,
                        component.max_mileage,
                    ),
                )
                row = cursor.execute(
                    f"SELECT {COMPONENT_COLUMNS} FROM components WHERE id = ?",
                    (str(component.id),),
                ).fetchone()
        except sqlite3.IntegrityError as exc:
            raise translate_integrity_error(exc, "bike does not exist") from exc
        except sqlite3.Error as exc:
            raise StorageError(f"error creating component: {exc}") from exc
        return _row_to_component(row)

    def get_component_by_id(self, component_id: UUID) -> Component:
        try:
            with get_cursor(self.db_path) as cursor:
                row = cursor.execute(
                    f"SELECT {COMPONENT_COLUMNS} FROM components WHERE id = ?",
                    (str(component_id),),
                ).fetchone()
        except sqlite3.Error as exc:
            raise StorageError(f"error reading component: {exc}") from exc
        if not row:
            raise NotFoundError("component not found")
        return _row_to_component(row)

    def get_components_by_bike_id(self, bike_id: UUID) -> List[Component]:
        try:
            with get_cursor(self.db_path) as cursor:
                rows = cursor.execute(
                    f"SELECT {COMPONENT_COLUMNS} FROM components WHERE bike_id = ? ORDER BY installed_at, id",
                    (str(bike_id),),
                ).fetchall()
        except sqlite3.Error as exc:
            raise StorageError(f"error listing components: {exc}") from exc
        return [_row_to_component(row) for row in rows]

    def update_component(self, component_id: UUID, changes: ComponentUpdate) -> Component:
        try:
            with get_cursor(self.db_path) as cursor:
                cursor.execute(
                    f"""
                    UPDATE components
                    SET
                        name = COALESCE(NULLIF(?, ''), name),
                        brand = COALESCE(NULLIF(?, ''), brand),
                        model = COALESCE(NULLIF(?, ''), model),
                        installed_at = COALESCE(?, installed_at),
                        installed_mileage = COALESCE(NULLIF(?, 0), installed_mileage),
                        max_mileage = COALESCE(NULLIF(?, 0), max_mileage),
                        updated_at = {SQL_NOW}
                    WHERE id = ?
                    """,
                    (
                        changes.name.value if changes.name else None,
                        changes.brand,
                        changes.model,
                        changes.installed_at.isoformat() if changes.installed_at else None,
                        changes.installed_mileage,
                        changes.max_mileage,
                        str(component_id),
                    ),
                )
                if cursor.rowcount == 0:
                    raise NotFoundError("component not found")
                row = cursor.execute(
                    f"SELECT {COMPONENT_COLUMNS} FROM components WHERE id = ?",
                    (str(component_id),),
                ).fetchone()
        except sqlite3.IntegrityError as exc:
            raise translate_integrity_error(exc, "bike does not exist") from exc
        except sqlite3.Error as exc:
            raise StorageError(f"error updating component: {exc}") from exc
        return _row_to_component(row)

    def delete_component(self, component_id: UUID) -> None:
        try:
            with get_cursor(self.db_path) as cursor:
                cursor.execute("DELETE FROM components WHERE id = ?", (str(component_id),))
                if cursor.rowcount == 0:
                    raise NotFoundError("component not found")
        except sqlite3.Error as exc:
            raise StorageError(f"error deleting component: {exc}") from exc
