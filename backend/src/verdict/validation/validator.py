"""Validation engine.

Runs every applicable rule of a RuleSet against a candidate and aggregates
all violations. Nothing short-circuits: a failing constraint never prevents
the remaining constraints (of the same field or of other fields) from
running.
"""

import asyncio
import logging

from verdict.errors import ConstraintEvaluationFault
from verdict.validation.aggregator import ErrorAggregator
from verdict.validation.ruleset import Rule, RuleSet
from verdict.validation.types import (
    Candidate,
    ConstraintOutcome,
    LookupService,
    ValidationResult,
)

logger = logging.getLogger(__name__)


class Validator:
    """Evaluates a RuleSet against a candidate entity.

    Stateless; a single instance can serve concurrent ``validate`` calls.
    """

    async def validate(
        self,
        ruleset: RuleSet,
        candidate: Candidate,
        lookup: LookupService,
    ) -> ValidationResult:
        """Validate a candidate against all rules.

        All constraint evaluations run concurrently and are joined before
        aggregation, so the result is either complete or not produced.

        Args:
            ruleset: Declared rules for the candidate's entity type
            candidate: The entity instance to validate
            lookup: Read access to stored entities (uniqueness checks, etc.)

        Returns:
            ValidationResult with every violation, in declared order

        Raises:
            ConstraintEvaluationFault: If any constraint could not be evaluated
        """
        scheduled: list[tuple[str, Rule]] = [
            (field, rule)
            for field, rules in ruleset
            for rule in rules
            if rule.applies_to(candidate.operation)
        ]

        outcomes = await asyncio.gather(
            *(rule.constraint.evaluate(field, candidate, lookup) for field, rule in scheduled),
            return_exceptions=True,
        )

        aggregator = ErrorAggregator(ruleset.fields)
        for (field, rule), outcome in zip(scheduled, outcomes):
            if isinstance(outcome, BaseException):
                raise self._fault(candidate, field, rule, outcome)
            if not isinstance(outcome, ConstraintOutcome):
                raise self._fault(
                    candidate,
                    field,
                    rule,
                    TypeError(f"expected ConstraintOutcome, got {type(outcome).__name__}"),
                )
            if not outcome.is_ok:
                aggregator.record(field, outcome.message)

        result = aggregator.to_validation_result()
        logger.debug(
            "Validated %s (%s): %d rule(s), %d invalid field(s)",
            candidate.entity_name,
            candidate.operation.value,
            len(scheduled),
            len(result.errors),
        )
        return result

    def _fault(
        self,
        candidate: Candidate,
        field: str,
        rule: Rule,
        error: BaseException,
    ) -> BaseException:
        if isinstance(error, ConstraintEvaluationFault):
            return error
        if not isinstance(error, Exception):
            # Cancellation and interpreter exits pass through untouched
            return error
        fault = ConstraintEvaluationFault(
            entity=candidate.entity_name,
            field=field,
            constraint=rule.constraint.name,
            cause=error,
        )
        fault.__cause__ = error
        return fault
