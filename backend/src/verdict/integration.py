"""Integration between metadata, persistence and the validation engine.

This module bridges the gap between:
- Metadata loader types (EntityModel, FieldDefinition, RuleConfig)
- Validation engine types (RuleSet, Constraint, LookupService)
- Persistence layer (PersistenceAdapter)
"""

from typing import Any

from verdict.errors import MetadataError
from verdict.metadata.loader import EntityModel, FieldDefinition, MetadataLoader
from verdict.persistence.adapter import PersistenceAdapter
from verdict.validation.constraints import Format, Inclusion, Length, Presence, Range
from verdict.validation.registry import ConstraintRegistry
from verdict.validation.ruleset import RuleSet, define
from verdict.validation.types import Constraint, Operation


# =============================================================================
# RuleSet Construction
# =============================================================================


def shorthand_constraints(field: FieldDefinition) -> list[Constraint]:
    """Expand a field's ``validation`` shorthand into constraints.

    Order is fixed: presence, length, range, format, inclusion.
    """
    rules = field.validation
    constraints: list[Constraint] = []

    if rules.required:
        constraints.append(Presence())
    if rules.min_length is not None or rules.max_length is not None:
        constraints.append(Length(min=rules.min_length, max=rules.max_length))
    if rules.min is not None or rules.max is not None:
        constraints.append(Range(min=rules.min, max=rules.max))
    if rules.pattern:
        constraints.append(Format(pattern=rules.pattern))
    if rules.format:
        constraints.append(Format(kind=rules.format))
    if field.options:
        constraints.append(Inclusion(values=tuple(
            o.get("value") if isinstance(o, dict) else o for o in field.options
        )))

    return constraints


def ruleset_from_entity(entity: EntityModel) -> RuleSet:
    """Build the RuleSet declared by an entity's metadata.

    Raises:
        MetadataError: If a rule references an unknown constraint type,
            carries invalid params, or names an unknown operation
    """
    ruleset = define(entity.name)

    for field in entity.fields:
        try:
            shorthand = shorthand_constraints(field)
        except ValueError as e:
            raise MetadataError(f"{entity.name}.{field.name}: {e}") from e
        if shorthand:
            ruleset.add(field.name, *shorthand)

        for config in field.rules:
            constraint = ConstraintRegistry.create(config.type, config.params, config.message)
            try:
                operations = [Operation(op) for op in config.on]
            except ValueError as e:
                raise MetadataError(f"{entity.name}.{field.name}: {e}") from e
            ruleset.add(field.name, constraint, on=operations)

    return ruleset


def permit(data: dict[str, Any], entity: EntityModel) -> dict[str, Any]:
    """Keep only declared, writable fields from raw request input."""
    allowed = set(entity.writable_fields)
    return {k: v for k, v in data.items() if k in allowed}


# =============================================================================
# LookupService Implementation
# =============================================================================


class AdapterLookupService:
    """LookupService implementation that wraps a PersistenceAdapter.

    This allows constraints to query stored entities for uniqueness checks.
    """

    def __init__(self, adapter: PersistenceAdapter, metadata_loader: MetadataLoader):
        self.adapter = adapter
        self.metadata_loader = metadata_loader

    async def find_by_id(self, entity: str, id: Any) -> dict[str, Any] | None:
        return self.adapter.get(self._entity(entity), id)

    async def exists(
        self,
        entity: str,
        conditions: dict[str, Any],
        *,
        exclude_id: Any = None,
        case_sensitive: bool = True,
    ) -> bool:
        matches = self.adapter.find(
            self._entity(entity),
            conditions,
            exclude_id=exclude_id,
            case_sensitive=case_sensitive,
        )
        return len(matches) > 0

    def _entity(self, name: str) -> EntityModel:
        entity_model = self.metadata_loader.get_entity(name)
        if entity_model is None:
            raise LookupError(f"No metadata for entity '{name}'")
        return entity_model
