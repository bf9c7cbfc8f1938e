"""PersistenceAdapter Protocol: shared interface for all storage adapters."""

from typing import Any, Protocol, runtime_checkable

from verdict.metadata.loader import EntityModel


@runtime_checkable
class PersistenceAdapter(Protocol):
    """Interface all persistence adapters must implement.

    Adapters enforce uniqueness of fields carrying a uniqueness rule at
    write time and raise ConflictError when a write would break it.
    """

    def connect(self) -> None: ...

    def close(self) -> None: ...

    def initialize_entity(self, entity: EntityModel) -> None: ...

    def get(self, entity: EntityModel, id: Any) -> dict[str, Any] | None: ...

    def create(self, entity: EntityModel, data: dict[str, Any]) -> dict[str, Any]: ...

    def update(
        self, entity: EntityModel, id: Any, data: dict[str, Any]
    ) -> dict[str, Any] | None: ...

    def find(
        self,
        entity: EntityModel,
        conditions: dict[str, Any],
        *,
        exclude_id: Any = None,
        case_sensitive: bool = True,
    ) -> list[dict[str, Any]]: ...


def blank_unique_values_to_null(entity: EntityModel, data: dict[str, Any]) -> dict[str, Any]:
    """Store blank strings in unique fields as NULL.

    Validation treats blank values as absent, so two records with a blank
    unique field must not conflict at write time.
    """
    cleaned = dict(data)
    for f in entity.fields:
        value = cleaned.get(f.name)
        if f.unique and isinstance(value, str) and not value.strip():
            cleaned[f.name] = None
    return cleaned
