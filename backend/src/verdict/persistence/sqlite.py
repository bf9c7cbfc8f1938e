"""SQLite persistence adapter."""

import sqlite3
from pathlib import Path
from typing import Any

from verdict.errors import ConflictError
from verdict.metadata.loader import EntityModel, FieldDefinition
from verdict.persistence.adapter import blank_unique_values_to_null


STORAGE_TYPES: dict[str, str] = {
    "string": "TEXT",
    "text": "TEXT",
    "email": "TEXT",
    "url": "TEXT",
    "uuid": "TEXT",
    "picklist": "TEXT",
    "integer": "INTEGER",
    "number": "REAL",
    "boolean": "INTEGER",
}


class SQLiteAdapter:
    """Simple SQLite persistence adapter.

    Fields carrying a single-field uniqueness rule get a UNIQUE column
    (``COLLATE NOCASE`` when case-insensitive), which is the authoritative
    check at write time.
    """

    def __init__(self, db_path: Path | str = ":memory:"):
        self.db_path = str(db_path)
        self.conn: sqlite3.Connection | None = None

    def connect(self) -> None:
        """Establish database connection."""
        self.conn = sqlite3.connect(self.db_path, check_same_thread=False)
        self.conn.row_factory = sqlite3.Row

    def close(self) -> None:
        """Close database connection."""
        if self.conn:
            self.conn.close()
            self.conn = None

    def initialize_entity(self, entity: EntityModel) -> None:
        """Create table for entity if it doesn't exist."""
        conn = self._connection()

        columns = [self._column_def(entity, f) for f in entity.fields]
        table_name = self._table_name(entity.name)
        sql = f"CREATE TABLE IF NOT EXISTS {table_name} ({', '.join(columns)})"
        conn.execute(sql)
        conn.commit()

    def get(self, entity: EntityModel, id: Any) -> dict[str, Any] | None:
        """Fetch a single record by ID."""
        conn = self._connection()

        table_name = self._table_name(entity.name)
        sql = f'SELECT * FROM {table_name} WHERE "{entity.primary_key}" = ?'
        row = conn.execute(sql, [id]).fetchone()

        if row:
            return self._row_to_dict(entity, row)
        return None

    def create(self, entity: EntityModel, data: dict[str, Any]) -> dict[str, Any]:
        """Insert a new record and return it as stored."""
        data = blank_unique_values_to_null(entity, data)
        conn = self._connection()
        pk = entity.primary_key

        field_names = [
            f.name for f in entity.fields
            if f.name in data and not (f.primary_key and data[f.name] is None)
        ]
        columns = ", ".join(f'"{name}"' for name in field_names)
        placeholders = ", ".join("?" for _ in field_names)
        values = [data[name] for name in field_names]

        table_name = self._table_name(entity.name)
        if field_names:
            sql = f"INSERT INTO {table_name} ({columns}) VALUES ({placeholders})"
        else:
            sql = f"INSERT INTO {table_name} DEFAULT VALUES"

        try:
            cursor = conn.execute(sql, values)
            conn.commit()
        except sqlite3.IntegrityError as e:
            conn.rollback()
            raise ConflictError(entity.name, str(e)) from e

        new_id = data.get(pk)
        if new_id is None:
            new_id = cursor.lastrowid
        return self.get(entity, new_id)

    def update(
        self, entity: EntityModel, id: Any, data: dict[str, Any]
    ) -> dict[str, Any] | None:
        """Update an existing record; returns None if it does not exist."""
        data = blank_unique_values_to_null(entity, data)
        conn = self._connection()

        updatable = [
            f.name for f in entity.fields
            if f.name in data and not f.primary_key
        ]
        if not updatable:
            return self.get(entity, id)

        set_clause = ", ".join(f'"{name}" = ?' for name in updatable)
        values = [data[name] for name in updatable]
        values.append(id)

        table_name = self._table_name(entity.name)
        sql = f'UPDATE {table_name} SET {set_clause} WHERE "{entity.primary_key}" = ?'

        try:
            cursor = conn.execute(sql, values)
            conn.commit()
        except sqlite3.IntegrityError as e:
            conn.rollback()
            raise ConflictError(entity.name, str(e)) from e

        if cursor.rowcount == 0:
            return None
        return self.get(entity, id)

    def find(
        self,
        entity: EntityModel,
        conditions: dict[str, Any],
        *,
        exclude_id: Any = None,
        case_sensitive: bool = True,
    ) -> list[dict[str, Any]]:
        """Find records whose fields equal every condition."""
        conn = self._connection()

        clauses: list[str] = []
        values: list[Any] = []
        for name, value in conditions.items():
            if entity.get_field(name) is None:
                raise ValueError(f"Unknown field '{name}' on {entity.name}")
            if value is None:
                clauses.append(f'"{name}" IS NULL')
                continue
            collate = ""
            if isinstance(value, str):
                # Explicit collation overrides a NOCASE column default
                collate = " COLLATE BINARY" if case_sensitive else " COLLATE NOCASE"
            clauses.append(f'"{name}" = ?{collate}')
            values.append(value)

        if exclude_id is not None:
            clauses.append(f'"{entity.primary_key}" != ?')
            values.append(exclude_id)

        table_name = self._table_name(entity.name)
        sql = f"SELECT * FROM {table_name}"
        if clauses:
            sql += " WHERE " + " AND ".join(clauses)

        rows = conn.execute(sql, values).fetchall()
        return [self._row_to_dict(entity, row) for row in rows]

    def _column_def(self, entity: EntityModel, field: FieldDefinition) -> str:
        storage_type = STORAGE_TYPES.get(field.type, "TEXT")
        col_def = f'"{field.name}" {storage_type}'
        if field.primary_key:
            col_def += " PRIMARY KEY"
            if storage_type == "INTEGER":
                col_def += " AUTOINCREMENT"
        elif field.unique:
            col_def += " UNIQUE"
            if field.case_insensitive_unique:
                col_def += " COLLATE NOCASE"
        return col_def

    def _row_to_dict(self, entity: EntityModel, row: sqlite3.Row) -> dict[str, Any]:
        record = dict(row)
        for f in entity.fields:
            if f.type == "boolean" and record.get(f.name) is not None:
                record[f.name] = bool(record[f.name])
        return record

    def _connection(self) -> sqlite3.Connection:
        if not self.conn:
            raise RuntimeError("Database not connected")
        return self.conn

    def _table_name(self, entity_name: str) -> str:
        """Convert entity name to table name."""
        # Simple snake_case conversion
        result = []
        for i, char in enumerate(entity_name):
            if char.isupper() and i > 0:
                result.append("_")
            result.append(char.lower())
        return "".join(result)
