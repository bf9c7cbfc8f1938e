"""Entity metadata - YAML definitions of fields and their rules."""

from verdict.metadata.loader import (
    EntityModel,
    FieldDefinition,
    MetadataLoader,
    RuleConfig,
    ValidationRules,
)

__all__ = [
    "EntityModel",
    "FieldDefinition",
    "MetadataLoader",
    "RuleConfig",
    "ValidationRules",
]
