"""Per-call collection of field violations."""

from verdict.validation.types import ValidationError, ValidationResult


class ErrorAggregator:
    """Collects every violation of one validation pass, keyed by field.

    A new aggregator is created for each ``validate`` call; instances are
    never shared. The final mapping follows ``field_order`` (the RuleSet's
    declaration order) so repeated runs produce identical output. Fields
    outside ``field_order`` come last, in the order first recorded.
    """

    def __init__(self, field_order: list[str] | None = None):
        self._field_order = list(field_order or [])
        self._messages: dict[str, list[str]] = {}

    def record(self, field: str, message: str) -> None:
        self._messages.setdefault(field, []).append(message)

    def is_empty(self) -> bool:
        return not self._messages

    def to_validation_result(self) -> ValidationResult:
        ordered = [f for f in self._field_order if f in self._messages]
        ordered += [f for f in self._messages if f not in self._field_order]
        return ValidationResult(
            errors={
                name: ValidationError(field=name, messages=tuple(self._messages[name]))
                for name in ordered
            }
        )
