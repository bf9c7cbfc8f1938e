"""Load entity metadata from YAML files."""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from verdict.errors import MetadataError

logger = logging.getLogger(__name__)


@dataclass
class ValidationRules:
    """Shorthand constraints declared under a field's ``validation`` key."""

    required: bool = False
    min: float | None = None
    max: float | None = None
    min_length: int | None = None
    max_length: int | None = None
    pattern: str | None = None
    format: str | None = None


@dataclass
class RuleConfig:
    """An explicit constraint declared under a field's ``rules`` key."""

    type: str
    params: dict[str, Any] = field(default_factory=dict)
    message: str = ""
    on: list[str] = field(default_factory=lambda: ["create", "update"])


@dataclass
class FieldDefinition:
    name: str
    type: str
    display_name: str
    primary_key: bool = False
    read_only: bool = False
    options: list[Any] | None = None
    validation: ValidationRules = field(default_factory=ValidationRules)
    rules: list[RuleConfig] = field(default_factory=list)

    def _unique_rules(self) -> list[RuleConfig]:
        # Scoped uniqueness spans several columns; only single-field rules count
        return [r for r in self.rules if r.type == "uniqueness" and not r.params.get("scope")]

    @property
    def unique(self) -> bool:
        return bool(self._unique_rules())

    @property
    def case_insensitive_unique(self) -> bool:
        return any(not r.params.get("caseSensitive", True) for r in self._unique_rules())


@dataclass
class EntityModel:
    name: str
    display_name: str
    plural_name: str
    primary_key: str
    fields: list[FieldDefinition]

    def get_field(self, name: str) -> FieldDefinition | None:
        for f in self.fields:
            if f.name == name:
                return f
        return None

    @property
    def writable_fields(self) -> list[str]:
        return [f.name for f in self.fields if not f.primary_key and not f.read_only]


class MetadataLoader:
    """Loads entity definitions from ``<metadata_path>/entities/*.yaml``."""

    def __init__(self, metadata_path: Path):
        self.metadata_path = Path(metadata_path)
        self.entities: dict[str, EntityModel] = {}

    def load_all(self) -> None:
        """Load all entities.

        Raises:
            MetadataError: If a file cannot be parsed or is malformed
        """
        entities_path = self.metadata_path / "entities"
        if not entities_path.exists():
            logger.warning("No entities directory at %s", entities_path)
            return

        for yaml_file in sorted(entities_path.glob("*.yaml")):
            try:
                with open(yaml_file) as f:
                    data = yaml.safe_load(f)
            except yaml.YAMLError as e:
                raise MetadataError(f"{yaml_file.name}: invalid YAML: {e}") from e

            if not data or "entity" not in data:
                logger.warning("Skipping %s: no 'entity' key", yaml_file.name)
                continue

            try:
                entity = self._resolve_entity(data)
            except (KeyError, TypeError, ValueError) as e:
                raise MetadataError(f"{yaml_file.name}: {e!r}") from e

            if entity.name in self.entities:
                raise MetadataError(f"{yaml_file.name}: duplicate entity '{entity.name}'")
            self.entities[entity.name] = entity
            logger.debug("Loaded entity %s from %s", entity.name, yaml_file.name)

    def _resolve_entity(self, data: dict) -> EntityModel:
        name = data["entity"]
        fields = [self._resolve_field(f) for f in data.get("fields", [])]

        primary_key = "id"
        for f in fields:
            if f.primary_key:
                primary_key = f.name
                break

        return EntityModel(
            name=name,
            display_name=data.get("displayName", name),
            plural_name=data.get("pluralName", name + "s"),
            primary_key=primary_key,
            fields=fields,
        )

    def _resolve_field(self, data: dict) -> FieldDefinition:
        name = data["name"]

        validation_data = data.get("validation") or {}
        validation = ValidationRules(
            required=validation_data.get("required", False),
            min=validation_data.get("min"),
            max=validation_data.get("max"),
            min_length=validation_data.get("minLength"),
            max_length=validation_data.get("maxLength"),
            pattern=validation_data.get("pattern"),
            format=validation_data.get("format"),
        )

        rules = [self._resolve_rule(r) for r in data.get("rules", [])]

        return FieldDefinition(
            name=name,
            type=data.get("type", "string"),
            display_name=data.get("displayName", self._to_display_name(name)),
            primary_key=data.get("primaryKey", False),
            read_only=data.get("readOnly", False),
            options=data.get("options"),
            validation=validation,
            rules=rules,
        )

    def _resolve_rule(self, data: dict | str) -> RuleConfig:
        # "- presence" is shorthand for "- type: presence"
        if isinstance(data, str):
            return RuleConfig(type=data)
        return RuleConfig(
            type=data["type"],
            params=data.get("params") or {},
            message=data.get("message", ""),
            on=self._get_on(data),
        )

    def _get_on(self, data: dict) -> list[str]:
        """Extract the 'on' key from a YAML dict.

        PyYAML parses the bare key `on:` as boolean True, so we check
        both the string key "on" and the boolean key True.
        """
        on = data.get("on") or data.get(True, ["create", "update"])
        if isinstance(on, str):
            on = [on]
        return list(on)

    def _to_display_name(self, name: str) -> str:
        """Convert camelCase to Title Case."""
        result = []
        for i, char in enumerate(name):
            if char.isupper() and i > 0:
                result.append(" ")
            result.append(char)
        return "".join(result).title()

    def get_entity(self, name: str) -> EntityModel | None:
        return self.entities.get(name)

    def list_entities(self) -> list[str]:
        return list(self.entities.keys())
