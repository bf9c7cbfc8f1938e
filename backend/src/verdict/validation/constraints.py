"""Built-in constraints.

Each constraint is a small dataclass with one async ``evaluate`` method:
- presence: value must be non-absent and non-blank
- uniqueness: no other stored entity shares the value
- format: value matches a regex or a named format (email, url, uuid, phone)
- range: numeric min/max bounds
- length: string length bounds
- inclusion: value is one of an allowed set
- custom: arbitrary (sync or async) predicate

Every constraint except presence skips blank values; pair it with presence
to require the field.
"""

import inspect
import math
import re
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, ClassVar

from verdict.validation.types import Candidate, ConstraintOutcome, LookupService


# =============================================================================
# Named Format Patterns
# =============================================================================

EMAIL_PATTERN = re.compile(
    r"^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$"
)

PHONE_PATTERN = re.compile(
    r"^[\+]?[(]?[0-9]{1,3}[)]?[-\s\.]?[(]?[0-9]{1,4}[)]?[-\s\.]?[0-9]{1,4}[-\s\.]?[0-9]{1,9}$"
)

URL_PATTERN = re.compile(
    r"^https?://[^\s/$.?#].[^\s]*$",
    re.IGNORECASE
)

UUID_PATTERN = re.compile(
    r"^[0-9a-f]{8}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{12}$",
    re.IGNORECASE
)

NAMED_FORMATS: dict[str, re.Pattern[str]] = {
    "email": EMAIL_PATTERN,
    "phone": PHONE_PATTERN,
    "url": URL_PATTERN,
    "uuid": UUID_PATTERN,
}


# =============================================================================
# Helpers
# =============================================================================


def is_blank(value: Any) -> bool:
    """Check if a value is considered absent."""
    if value is None:
        return True
    if isinstance(value, str) and value.strip() == "":
        return True
    if isinstance(value, (list, dict)) and len(value) == 0:
        return True
    return False


class _Placeholders(dict):
    def __missing__(self, key: str) -> str:
        return "{" + key + "}"


def render_message(template: str, **params: Any) -> str:
    """Fill ``{name}`` placeholders, leaving unknown ones untouched."""
    return template.format_map(_Placeholders(params))


def _to_number(value: Any) -> float | int | None:
    """Numeric value, or None for non-numbers. NaN and infinities are not numbers."""
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        number = value
    elif isinstance(value, str):
        try:
            number = float(value)
        except ValueError:
            return None
    else:
        return None
    return number if math.isfinite(number) else None


# =============================================================================
# Constraints
# =============================================================================


@dataclass(frozen=True)
class Presence:
    name: ClassVar[str] = "presence"

    message: str = "can't be blank"

    async def evaluate(
        self, field: str, candidate: Candidate, lookup: LookupService
    ) -> ConstraintOutcome:
        if is_blank(candidate.get(field)):
            return ConstraintOutcome.violated(render_message(self.message))
        return ConstraintOutcome.ok()


@dataclass(frozen=True)
class Uniqueness:
    """No other stored entity may share this field's value.

    Attributes:
        case_sensitive: Compare strings case-sensitively
        scope: Extra fields whose values must also match for a conflict
        exclude_self: On update, ignore the candidate's own stored record
    """

    name: ClassVar[str] = "uniqueness"

    message: str = "has already been taken"
    case_sensitive: bool = True
    scope: tuple[str, ...] = ()
    exclude_self: bool = True

    async def evaluate(
        self, field: str, candidate: Candidate, lookup: LookupService
    ) -> ConstraintOutcome:
        value = candidate.get(field)
        if is_blank(value):
            return ConstraintOutcome.ok()

        conditions = {field: value}
        for scope_field in self.scope:
            conditions[scope_field] = candidate.get(scope_field)

        exclude_id = candidate.identity if self.exclude_self else None
        taken = await lookup.exists(
            candidate.entity_name,
            conditions,
            exclude_id=exclude_id,
            case_sensitive=self.case_sensitive,
        )
        if taken:
            return ConstraintOutcome.violated(render_message(self.message, value=value))
        return ConstraintOutcome.ok()


@dataclass(frozen=True)
class Format:
    """Value must match ``pattern`` or the named format ``kind``.

    The whole string must match; a trailing newline is not accepted.
    """

    name: ClassVar[str] = "format"

    pattern: str | None = None
    kind: str | None = None
    message: str = "is invalid"

    def __post_init__(self) -> None:
        if (self.pattern is None) == (self.kind is None):
            raise ValueError("Format needs exactly one of 'pattern' or 'kind'")
        if self.kind is not None and self.kind not in NAMED_FORMATS:
            raise ValueError(
                f"Unknown format kind '{self.kind}'. "
                "Available kinds: " + ", ".join(sorted(NAMED_FORMATS))
            )
        if self.pattern is not None:
            try:
                re.compile(self.pattern)
            except re.error as e:
                raise ValueError(f"Invalid pattern '{self.pattern}': {e}") from e

    @property
    def regex(self) -> re.Pattern[str]:
        if self.kind is not None:
            return NAMED_FORMATS[self.kind]
        return re.compile(self.pattern or "")

    async def evaluate(
        self, field: str, candidate: Candidate, lookup: LookupService
    ) -> ConstraintOutcome:
        value = candidate.get(field)
        if is_blank(value):
            return ConstraintOutcome.ok()
        if not isinstance(value, str) or not self.regex.fullmatch(value):
            return ConstraintOutcome.violated(render_message(self.message, value=value))
        return ConstraintOutcome.ok()


@dataclass(frozen=True)
class Range:
    """Numeric bounds (inclusive). Numeric strings are accepted."""

    name: ClassVar[str] = "range"

    min: float | None = None
    max: float | None = None
    message: str | None = None
    not_a_number_message: str = "is not a number"

    async def evaluate(
        self, field: str, candidate: Candidate, lookup: LookupService
    ) -> ConstraintOutcome:
        value = candidate.get(field)
        if is_blank(value):
            return ConstraintOutcome.ok()

        number = _to_number(value)
        if number is None:
            return ConstraintOutcome.violated(
                render_message(self.not_a_number_message, value=value)
            )

        if self.min is not None and number < self.min:
            template = self.message or "must be greater than or equal to {min}"
            return ConstraintOutcome.violated(
                render_message(template, value=value, min=self.min, max=self.max)
            )
        if self.max is not None and number > self.max:
            template = self.message or "must be less than or equal to {max}"
            return ConstraintOutcome.violated(
                render_message(template, value=value, min=self.min, max=self.max)
            )
        return ConstraintOutcome.ok()


@dataclass(frozen=True)
class Length:
    """String (or list) length bounds."""

    name: ClassVar[str] = "length"

    min: int | None = None
    max: int | None = None
    message: str | None = None

    async def evaluate(
        self, field: str, candidate: Candidate, lookup: LookupService
    ) -> ConstraintOutcome:
        value = candidate.get(field)
        if is_blank(value) or not isinstance(value, (str, list)):
            return ConstraintOutcome.ok()

        length = len(value)
        if self.min is not None and length < self.min:
            template = self.message or "is too short (minimum is {min} characters)"
            return ConstraintOutcome.violated(
                render_message(template, value=value, min=self.min, max=self.max)
            )
        if self.max is not None and length > self.max:
            template = self.message or "is too long (maximum is {max} characters)"
            return ConstraintOutcome.violated(
                render_message(template, value=value, min=self.min, max=self.max)
            )
        return ConstraintOutcome.ok()


@dataclass(frozen=True)
class Inclusion:
    name: ClassVar[str] = "inclusion"

    values: tuple[Any, ...] = ()
    message: str = "is not included in the list"

    async def evaluate(
        self, field: str, candidate: Candidate, lookup: LookupService
    ) -> ConstraintOutcome:
        value = candidate.get(field)
        if is_blank(value):
            return ConstraintOutcome.ok()
        if value not in self.values:
            return ConstraintOutcome.violated(render_message(self.message, value=value))
        return ConstraintOutcome.ok()


Predicate = Callable[[Any, Candidate], "bool | Awaitable[bool]"]


@dataclass(frozen=True)
class Custom:
    """Wraps an application predicate ``(value, candidate) -> bool``.

    The predicate may be a coroutine function. A falsy result is a violation.
    Unlike the other constraints, custom predicates also see blank values.
    """

    predicate: Predicate
    message: str = "is invalid"
    label: str = "custom"

    @property
    def name(self) -> str:
        return self.label

    async def evaluate(
        self, field: str, candidate: Candidate, lookup: LookupService
    ) -> ConstraintOutcome:
        value = candidate.get(field)
        result = self.predicate(value, candidate)
        if inspect.isawaitable(result):
            result = await result
        if not result:
            return ConstraintOutcome.violated(
                render_message(self.message, value=value)
            )
        return ConstraintOutcome.ok()
