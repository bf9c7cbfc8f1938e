"""Declarative rule sets.

A RuleSet maps field names to ordered constraints for one entity type:

    rules = (
        define("Bird")
        .add("name", Presence(), Uniqueness(case_sensitive=False))
        .add("wingspan", Range(min=0), on=[Operation.CREATE])
    )

Adding constraints to a field that already has some appends to its list.
"""

from dataclasses import dataclass
from typing import Iterable, Iterator

from verdict.validation.types import ALL_OPERATIONS, Constraint, Operation


@dataclass(frozen=True)
class Rule:
    """A constraint attached to a field, scoped to some operations."""

    constraint: Constraint
    on: tuple[Operation, ...] = ALL_OPERATIONS

    def applies_to(self, operation: Operation) -> bool:
        return operation in self.on


class RuleSet:
    """Ordered mapping of field name -> rules for one entity type."""

    def __init__(self, entity_type: str):
        self.entity_type = entity_type
        self._rules: dict[str, list[Rule]] = {}

    def add(
        self,
        field: str,
        *constraints: Constraint,
        on: Iterable[Operation] | None = None,
    ) -> "RuleSet":
        """Append constraints to a field's rule list.

        Args:
            field: Field name
            constraints: Constraints, run in the given order
            on: Operations these constraints apply to (default: all)

        Returns:
            self, for chaining
        """
        operations = tuple(on) if on is not None else ALL_OPERATIONS
        rules = self._rules.setdefault(field, [])
        for constraint in constraints:
            rules.append(Rule(constraint=constraint, on=operations))
        return self

    @property
    def fields(self) -> list[str]:
        """Field names in declaration order."""
        return list(self._rules.keys())

    def rules_for(self, field: str) -> tuple[Rule, ...]:
        return tuple(self._rules.get(field, ()))

    def describe(self) -> dict[str, list[str]]:
        """Field name -> constraint names, for listings."""
        return {
            name: [rule.constraint.name for rule in rules]
            for name, rules in self._rules.items()
        }

    def __iter__(self) -> Iterator[tuple[str, tuple[Rule, ...]]]:
        for name, rules in self._rules.items():
            yield name, tuple(rules)

    def __len__(self) -> int:
        return sum(len(rules) for rules in self._rules.values())

    def __repr__(self) -> str:
        return f"RuleSet({self.entity_type!r}, {self.describe()!r})"


def define(entity_type: str) -> RuleSet:
    """Start declaring the rules for an entity type."""
    return RuleSet(entity_type)
