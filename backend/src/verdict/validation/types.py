"""Core types for the Verdict validation engine.

This module defines the values shared by every part of the engine:
- Candidate: the entity instance being validated
- ConstraintOutcome: the ok / violated result of one constraint
- ValidationError / ValidationResult: the aggregated report
- Constraint / LookupService: the two capabilities the engine depends on
"""

import re
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Any, Mapping, Protocol


class Operation(Enum):
    """The kind of mutation being validated."""

    CREATE = "create"
    UPDATE = "update"


ALL_OPERATIONS: tuple[Operation, ...] = (Operation.CREATE, Operation.UPDATE)


@dataclass(frozen=True)
class Candidate:
    """An entity instance under validation.

    Attributes:
        entity_name: Entity type name (e.g., "Bird")
        record: Field values being validated
        operation: CREATE or UPDATE
        identity: Primary key of the stored entity being updated; None on create
        original: The stored record for updates; None on create
    """

    entity_name: str
    record: dict[str, Any]
    operation: Operation = Operation.CREATE
    identity: Any = None
    original: dict[str, Any] | None = None

    def get(self, field_name: str) -> Any:
        return self.record.get(field_name)


@dataclass(frozen=True)
class ConstraintOutcome:
    """Result of evaluating one constraint against one field."""

    message: str | None = None

    @property
    def is_ok(self) -> bool:
        return self.message is None

    @classmethod
    def ok(cls) -> "ConstraintOutcome":
        return cls()

    @classmethod
    def violated(cls, message: str) -> "ConstraintOutcome":
        return cls(message=message)


@dataclass(frozen=True)
class ValidationError:
    """All violation messages for a single field.

    Attributes:
        field: Field name the messages relate to
        messages: Non-empty, in the order the violating constraints ran
    """

    field: str
    messages: tuple[str, ...]

    def __post_init__(self) -> None:
        if not self.messages:
            raise ValueError(f"ValidationError for '{self.field}' needs at least one message")

    def to_list(self) -> list[str]:
        return list(self.messages)


@dataclass(frozen=True)
class ValidationResult:
    """Aggregated outcome of running a RuleSet against one candidate.

    ``is_valid`` is derived from ``errors`` so the two can never disagree.
    ``errors`` is copied into a read-only mapping, so a returned result
    cannot be changed.
    """

    errors: Mapping[str, ValidationError] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "errors", MappingProxyType(dict(self.errors)))

    @property
    def is_valid(self) -> bool:
        return not self.errors

    def messages_for(self, field_name: str) -> list[str]:
        error = self.errors.get(field_name)
        return error.to_list() if error else []

    def to_dict(self) -> dict[str, list[str]]:
        return {name: error.to_list() for name, error in self.errors.items()}

    def full_messages(self, labels: dict[str, str] | None = None) -> list[str]:
        """Render "<Label> <message>" strings, e.g. "Name can't be blank"."""
        labels = labels or {}
        return [
            f"{labels.get(name) or _humanize(name)} {message}"
            for name, error in self.errors.items()
            for message in error.messages
        ]


def _humanize(name: str) -> str:
    """Convert camelCase or snake_case to a sentence-case label."""
    words = re.sub(r"([A-Z])", r" \1", name).replace("_", " ").split()
    return " ".join(words).capitalize()


class LookupService(Protocol):
    """Read access to stored entities, used for cross-entity checks.

    Implementations may perform I/O. Any exception they raise while a
    constraint is evaluating becomes a ConstraintEvaluationFault.
    """

    async def find_by_id(self, entity: str, id: Any) -> dict[str, Any] | None:
        """Return the stored record, or None when it does not exist."""
        ...

    async def exists(
        self,
        entity: str,
        conditions: dict[str, Any],
        *,
        exclude_id: Any = None,
        case_sensitive: bool = True,
    ) -> bool:
        """Check whether any stored record matches every condition.

        Args:
            entity: Entity name to search
            conditions: Field name -> value equality conditions
            exclude_id: Primary key to ignore (the candidate's own record)
            case_sensitive: Compare string values case-sensitively
        """
        ...


class Constraint(Protocol):
    """A named, pure rule over one field of a candidate.

    Constraints must be deterministic for a given candidate and lookup
    state, and must not mutate either.
    """

    name: str

    async def evaluate(
        self,
        field: str,
        candidate: Candidate,
        lookup: LookupService,
    ) -> ConstraintOutcome:
        ...
