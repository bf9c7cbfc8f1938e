"""Constraint registry for Verdict.

Maps constraint type names used in metadata (``presence``, ``uniqueness``,
...) to factories that build configured Constraint instances.
"""

from typing import Any, Callable

from verdict.errors import MetadataError
from verdict.validation.constraints import (
    Format,
    Inclusion,
    Length,
    Presence,
    Range,
    Uniqueness,
)
from verdict.validation.types import Constraint


ConstraintFactory = Callable[[dict[str, Any], str | None], Constraint]


class ConstraintRegistry:
    """Registry for constraint types.

    Constraint types must be registered before metadata can reference them.
    This applies to both built-in constraints (registered by
    ``register_builtin_constraints``) and application constraints
    (registered at startup).

    Example:
        # Register an application constraint
        ConstraintRegistry.register("wingspan", make_wingspan_constraint)

        # Later, resolve from metadata
        constraint = ConstraintRegistry.create("wingspan", {"max": 3.5})
    """

    _factories: dict[str, ConstraintFactory] = {}

    @classmethod
    def register(cls, name: str, factory: ConstraintFactory) -> None:
        """Register a factory by type name.

        Idempotent - re-registering the same name is a no-op.

        Args:
            name: Type name referenced from metadata (e.g., "uniqueness")
            factory: Callable taking (params, message) and returning a Constraint
        """
        if name in cls._factories:
            return
        cls._factories[name] = factory

    @classmethod
    def create(
        cls,
        type_name: str,
        params: dict[str, Any] | None = None,
        message: str | None = None,
    ) -> Constraint:
        """Create a configured constraint.

        Raises:
            MetadataError: If the type is unknown or the params are rejected
        """
        if type_name not in cls._factories:
            raise MetadataError(
                f"Constraint type '{type_name}' is not registered. "
                "Available types: " + ", ".join(cls.list_registered())
            )
        try:
            return cls._factories[type_name](params or {}, message or None)
        except (TypeError, ValueError) as e:
            raise MetadataError(f"Invalid params for constraint '{type_name}': {e}") from e

    @classmethod
    def is_registered(cls, name: str) -> bool:
        return name in cls._factories

    @classmethod
    def list_registered(cls) -> list[str]:
        return sorted(cls._factories.keys())

    @classmethod
    def clear(cls) -> None:
        """Clear all registrations. Primarily for testing."""
        cls._factories.clear()


# =============================================================================
# Built-in factories
# =============================================================================


def _with_message(kwargs: dict[str, Any], message: str | None) -> dict[str, Any]:
    if message:
        kwargs["message"] = message
    return kwargs


def _presence_factory(params: dict[str, Any], message: str | None) -> Presence:
    return Presence(**_with_message({}, message))


def _uniqueness_factory(params: dict[str, Any], message: str | None) -> Uniqueness:
    scope = params.get("scope", [])
    if isinstance(scope, str):
        scope = [scope]
    return Uniqueness(**_with_message({
        "case_sensitive": params.get("caseSensitive", True),
        "scope": tuple(scope),
        "exclude_self": params.get("excludeSelf", True),
    }, message))


def _format_factory(params: dict[str, Any], message: str | None) -> Format:
    return Format(**_with_message({
        "pattern": params.get("pattern"),
        "kind": params.get("kind"),
    }, message))


def _range_factory(params: dict[str, Any], message: str | None) -> Range:
    return Range(**_with_message({
        "min": params.get("min"),
        "max": params.get("max"),
    }, message))


def _length_factory(params: dict[str, Any], message: str | None) -> Length:
    return Length(**_with_message({
        "min": params.get("min"),
        "max": params.get("max"),
    }, message))


def _inclusion_factory(params: dict[str, Any], message: str | None) -> Inclusion:
    values = params.get("in", [])
    # Picklist-style options: [{value: x, label: y}, ...]
    values = [v.get("value") if isinstance(v, dict) else v for v in values]
    return Inclusion(**_with_message({"values": tuple(values)}, message))


def register_builtin_constraints() -> None:
    """Register all built-in constraint types. Safe to call repeatedly."""
    ConstraintRegistry.register("presence", _presence_factory)
    ConstraintRegistry.register("uniqueness", _uniqueness_factory)
    ConstraintRegistry.register("format", _format_factory)
    ConstraintRegistry.register("range", _range_factory)
    ConstraintRegistry.register("length", _length_factory)
    ConstraintRegistry.register("inclusion", _inclusion_factory)
