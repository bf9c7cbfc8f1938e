"""Exceptions raised by Verdict.

Ordinary validation violations and missing lookup targets are data
(ValidationResult / NotFound outcome) and never appear here. These classes
cover the cases that genuinely leave the normal request flow.
"""

from typing import Any


class VerdictError(Exception):
    """Base class for all Verdict errors."""
    pass


class ConstraintEvaluationFault(VerdictError):
    """A constraint's own machinery failed (e.g., its lookup errored).

    This is a system fault, not a validation outcome. It must reach the
    caller unchanged and be reported as a server error.
    """

    def __init__(self, entity: str, field: str, constraint: str, cause: BaseException):
        self.entity = entity
        self.field = field
        self.constraint = constraint
        self.cause = cause
        super().__init__(
            f"Constraint '{constraint}' on {entity}.{field} could not be evaluated: {cause}"
        )


class ConflictError(VerdictError):
    """A write was rejected by the store's own uniqueness enforcement."""

    def __init__(self, entity: str, detail: Any = None):
        self.entity = entity
        self.detail = detail
        super().__init__(f"{entity} conflicts with an existing record")


class MetadataError(VerdictError):
    """Entity metadata is malformed or references an unknown constraint."""
    pass


class UnknownEntityError(VerdictError):
    """A request named an entity type with no metadata."""

    def __init__(self, entity: str):
        self.entity = entity
        super().__init__(f"Entity '{entity}' not found")
