"""Classification of a mutation attempt into a single terminal outcome.

Create and update requests share one decision:

    not found  -> NotFound   (validation is never consulted)
    invalid    -> Invalid(result)
    otherwise  -> Success(entity)
"""

from dataclasses import dataclass
from typing import Any, Union

from verdict.validation.types import ValidationResult


@dataclass(frozen=True)
class Success:
    entity: Any


@dataclass(frozen=True)
class NotFound:
    entity_name: str


@dataclass(frozen=True)
class Invalid:
    result: ValidationResult


Outcome = Union[Success, NotFound, Invalid]


def classify(
    found: bool,
    result: ValidationResult | None,
    *,
    entity_name: str,
    entity: Any = None,
) -> Outcome:
    """Map a lookup result and a validation result to an Outcome.

    Args:
        found: Whether the target entity exists. Always True for creates.
        result: Validation result; may be None only when ``found`` is False
        entity_name: Entity type name, used for the NotFound message
        entity: The entity to report on success

    Returns:
        Exactly one of Success, NotFound or Invalid
    """
    if not found:
        return NotFound(entity_name)
    if result is None:
        raise ValueError("A validation result is required when the entity was found")
    if not result.is_valid:
        return Invalid(result)
    return Success(entity)
