"""In-memory persistence adapter (tests, CLI dry runs)."""

import copy
from typing import Any

from verdict.errors import ConflictError
from verdict.metadata.loader import EntityModel
from verdict.persistence.adapter import blank_unique_values_to_null


def _same(a: Any, b: Any, case_sensitive: bool) -> bool:
    if not case_sensitive and isinstance(a, str) and isinstance(b, str):
        return a.casefold() == b.casefold()
    return a == b


class MemoryAdapter:
    """Dict-backed adapter with integer primary keys."""

    def __init__(self):
        self.tables: dict[str, dict[Any, dict[str, Any]]] = {}
        self._next_id: dict[str, int] = {}

    def connect(self) -> None:
        pass

    def close(self) -> None:
        self.tables.clear()
        self._next_id.clear()

    def initialize_entity(self, entity: EntityModel) -> None:
        self.tables.setdefault(entity.name, {})
        self._next_id.setdefault(entity.name, 1)

    def get(self, entity: EntityModel, id: Any) -> dict[str, Any] | None:
        row = self._table(entity).get(id)
        return copy.deepcopy(row) if row is not None else None

    def create(self, entity: EntityModel, data: dict[str, Any]) -> dict[str, Any]:
        data = blank_unique_values_to_null(entity, data)
        table = self._table(entity)
        pk = entity.primary_key

        record = {f.name: data.get(f.name) for f in entity.fields}
        if record.get(pk) is None:
            record[pk] = self._next_id[entity.name]
        if record[pk] in table:
            raise ConflictError(entity.name, {pk: record[pk]})
        self._check_unique(entity, record, exclude_id=None)

        table[record[pk]] = record
        if isinstance(record[pk], int):
            self._next_id[entity.name] = max(self._next_id[entity.name], record[pk] + 1)
        return copy.deepcopy(record)

    def update(
        self, entity: EntityModel, id: Any, data: dict[str, Any]
    ) -> dict[str, Any] | None:
        data = blank_unique_values_to_null(entity, data)
        table = self._table(entity)
        if id not in table:
            return None

        updated = dict(table[id])
        for f in entity.fields:
            if f.name in data and not f.primary_key:
                updated[f.name] = data[f.name]
        self._check_unique(entity, updated, exclude_id=id)

        table[id] = updated
        return copy.deepcopy(updated)

    def find(
        self,
        entity: EntityModel,
        conditions: dict[str, Any],
        *,
        exclude_id: Any = None,
        case_sensitive: bool = True,
    ) -> list[dict[str, Any]]:
        pk = entity.primary_key
        matches = []
        for row in self._table(entity).values():
            if exclude_id is not None and row.get(pk) == exclude_id:
                continue
            if all(_same(row.get(k), v, case_sensitive) for k, v in conditions.items()):
                matches.append(copy.deepcopy(row))
        return matches

    def _check_unique(
        self, entity: EntityModel, record: dict[str, Any], exclude_id: Any
    ) -> None:
        for f in entity.fields:
            value = record.get(f.name)
            if not f.unique or value is None:
                continue
            clashes = self.find(
                entity,
                {f.name: value},
                exclude_id=exclude_id,
                case_sensitive=not f.case_insensitive_unique,
            )
            if clashes:
                raise ConflictError(entity.name, {f.name: value})

    def _table(self, entity: EntityModel) -> dict[Any, dict[str, Any]]:
        if entity.name not in self.tables:
            raise RuntimeError(f"Entity '{entity.name}' not initialized")
        return self.tables[entity.name]
