"""Verdict validation engine.

Usage:
    from verdict.validation import (
        Candidate,
        Presence,
        Uniqueness,
        Validator,
        define,
    )

    rules = define("Bird").add("name", Presence(), Uniqueness())
    result = await Validator().validate(rules, Candidate("Bird", data), lookup)
"""

from verdict.validation.aggregator import ErrorAggregator
from verdict.validation.constraints import (
    Custom,
    Format,
    Inclusion,
    Length,
    Presence,
    Range,
    Uniqueness,
    is_blank,
)
from verdict.validation.registry import ConstraintRegistry, register_builtin_constraints
from verdict.validation.ruleset import Rule, RuleSet, define
from verdict.validation.types import (
    ALL_OPERATIONS,
    Candidate,
    Constraint,
    ConstraintOutcome,
    LookupService,
    Operation,
    ValidationError,
    ValidationResult,
)
from verdict.validation.validator import Validator

__all__ = [
    # Types
    "ALL_OPERATIONS",
    "Candidate",
    "Constraint",
    "ConstraintOutcome",
    "LookupService",
    "Operation",
    "ValidationError",
    "ValidationResult",
    # Constraints
    "Custom",
    "Format",
    "Inclusion",
    "Length",
    "Presence",
    "Range",
    "Uniqueness",
    "is_blank",
    # Rules
    "Rule",
    "RuleSet",
    "define",
    "ConstraintRegistry",
    "register_builtin_constraints",
    # Engine
    "ErrorAggregator",
    "Validator",
]
