"""Tests for built-in constraints.

Tests cover all constraints:
- presence
- uniqueness
- format
- range
- length
- inclusion
- custom
"""

import pytest
from unittest.mock import AsyncMock

from verdict.validation.constraints import (
    EMAIL_PATTERN,
    URL_PATTERN,
    Custom,
    Format,
    Inclusion,
    Length,
    Presence,
    Range,
    Uniqueness,
    is_blank,
    render_message,
)
from verdict.validation.types import Candidate, Operation


@pytest.fixture
def mock_lookup():
    """Create a mock LookupService."""
    lookup = AsyncMock()
    lookup.exists = AsyncMock(return_value=False)
    lookup.find_by_id = AsyncMock(return_value=None)
    return lookup


def make_candidate(
    record: dict,
    operation: Operation = Operation.CREATE,
    identity=None,
) -> Candidate:
    """Helper to create a candidate for testing."""
    return Candidate(
        entity_name="Bird",
        record=record,
        operation=operation,
        identity=identity,
    )


# =============================================================================
# Helper Tests
# =============================================================================


class TestBlank:
    def test_blank_values(self):
        for value in (None, "", "   ", [], {}):
            assert is_blank(value), f"{value!r} should be blank"

    def test_present_values(self):
        for value in ("x", 0, False, [1], {"a": 1}, 0.0):
            assert not is_blank(value), f"{value!r} should be present"

    def test_render_message_leaves_unknown_placeholders(self):
        assert render_message("{value} vs {other}", value=3) == "3 vs {other}"


# =============================================================================
# Presence Tests
# =============================================================================


class TestPresence:
    @pytest.mark.asyncio
    async def test_missing_field_is_violation(self, mock_lookup):
        outcome = await Presence().evaluate(
            "name", make_candidate({"species": "Archilochus colubris"}), mock_lookup
        )
        assert not outcome.is_ok
        assert outcome.message == "can't be blank"

    @pytest.mark.asyncio
    async def test_whitespace_is_violation(self, mock_lookup):
        outcome = await Presence().evaluate("name", make_candidate({"name": "  "}), mock_lookup)
        assert outcome.message == "can't be blank"

    @pytest.mark.asyncio
    async def test_present_value_is_ok(self, mock_lookup):
        outcome = await Presence().evaluate(
            "name", make_candidate({"name": "Hummingbird"}), mock_lookup
        )
        assert outcome.is_ok
        assert outcome.message is None

    @pytest.mark.asyncio
    async def test_custom_message(self, mock_lookup):
        outcome = await Presence(message="is required").evaluate(
            "name", make_candidate({}), mock_lookup
        )
        assert outcome.message == "is required"

    @pytest.mark.asyncio
    async def test_does_not_use_lookup(self, mock_lookup):
        await Presence().evaluate("name", make_candidate({}), mock_lookup)
        mock_lookup.exists.assert_not_called()


# =============================================================================
# Uniqueness Tests
# =============================================================================


class TestUniqueness:
    @pytest.mark.asyncio
    async def test_unique_value(self, mock_lookup):
        outcome = await Uniqueness().evaluate(
            "name", make_candidate({"name": "Hummingbird"}), mock_lookup
        )
        assert outcome.is_ok
        mock_lookup.exists.assert_called_once_with(
            "Bird",
            {"name": "Hummingbird"},
            exclude_id=None,
            case_sensitive=True,
        )

    @pytest.mark.asyncio
    async def test_duplicate_value(self, mock_lookup):
        mock_lookup.exists.return_value = True
        outcome = await Uniqueness().evaluate(
            "name", make_candidate({"name": "Hummingbird"}), mock_lookup
        )
        assert outcome.message == "has already been taken"

    @pytest.mark.asyncio
    async def test_update_excludes_own_record_by_default(self, mock_lookup):
        candidate = make_candidate({"id": 7, "name": "Robin"}, Operation.UPDATE, identity=7)
        await Uniqueness().evaluate("name", candidate, mock_lookup)

        kwargs = mock_lookup.exists.call_args.kwargs
        assert kwargs["exclude_id"] == 7

    @pytest.mark.asyncio
    async def test_update_can_include_own_record(self, mock_lookup):
        candidate = make_candidate({"id": 7, "name": "Robin"}, Operation.UPDATE, identity=7)
        await Uniqueness(exclude_self=False).evaluate("name", candidate, mock_lookup)

        kwargs = mock_lookup.exists.call_args.kwargs
        assert kwargs["exclude_id"] is None

    @pytest.mark.asyncio
    async def test_scope_and_case_are_passed_to_lookup(self, mock_lookup):
        candidate = make_candidate({"name": "Robin", "region": "EU"})
        await Uniqueness(case_sensitive=False, scope=("region",)).evaluate(
            "name", candidate, mock_lookup
        )
        mock_lookup.exists.assert_called_once_with(
            "Bird",
            {"name": "Robin", "region": "EU"},
            exclude_id=None,
            case_sensitive=False,
        )

    @pytest.mark.asyncio
    async def test_blank_value_skips_lookup(self, mock_lookup):
        outcome = await Uniqueness().evaluate("name", make_candidate({}), mock_lookup)
        assert outcome.is_ok
        mock_lookup.exists.assert_not_called()

    @pytest.mark.asyncio
    async def test_lookup_failure_propagates(self, mock_lookup):
        mock_lookup.exists.side_effect = ConnectionError("db down")
        with pytest.raises(ConnectionError):
            await Uniqueness().evaluate("name", make_candidate({"name": "Robin"}), mock_lookup)


# =============================================================================
# Format Tests
# =============================================================================


class TestFormat:
    def test_named_patterns(self):
        assert EMAIL_PATTERN.match("ringer@example.org")
        assert not EMAIL_PATTERN.match("not-an-email")
        assert URL_PATTERN.match("https://example.com/birds")
        assert not URL_PATTERN.match("example.com")

    @pytest.mark.asyncio
    async def test_pattern_match(self, mock_lookup):
        constraint = Format(pattern=r"^[A-Z]{2}-\d{4}$")
        ok = await constraint.evaluate("ringCode", make_candidate({"ringCode": "GB-1234"}), mock_lookup)
        bad = await constraint.evaluate("ringCode", make_candidate({"ringCode": "1234"}), mock_lookup)
        assert ok.is_ok
        assert bad.message == "is invalid"

    @pytest.mark.asyncio
    async def test_named_kind(self, mock_lookup):
        constraint = Format(kind="email")
        outcome = await constraint.evaluate(
            "contact", make_candidate({"contact": "nope"}), mock_lookup
        )
        assert outcome.message == "is invalid"

    @pytest.mark.asyncio
    async def test_whole_string_must_match(self, mock_lookup):
        email = Format(kind="email")
        trailing_newline = await email.evaluate(
            "contact", make_candidate({"contact": "ringer@example.org\n"}), mock_lookup
        )
        assert trailing_newline.message == "is invalid"

        prefix_only = await Format(pattern=r"[A-Z]{2}").evaluate(
            "ringCode", make_candidate({"ringCode": "GB-1234"}), mock_lookup
        )
        assert prefix_only.message == "is invalid"

    @pytest.mark.asyncio
    async def test_non_string_is_invalid(self, mock_lookup):
        outcome = await Format(pattern=r"^\d+$").evaluate(
            "ringCode", make_candidate({"ringCode": 1234}), mock_lookup
        )
        assert not outcome.is_ok

    @pytest.mark.asyncio
    async def test_blank_is_skipped(self, mock_lookup):
        outcome = await Format(kind="url").evaluate("site", make_candidate({}), mock_lookup)
        assert outcome.is_ok

    @pytest.mark.asyncio
    async def test_message_interpolates_value(self, mock_lookup):
        constraint = Format(pattern=r"^\d+$", message="'{value}' is not numeric")
        outcome = await constraint.evaluate("code", make_candidate({"code": "abc"}), mock_lookup)
        assert outcome.message == "'abc' is not numeric"

    def test_requires_exactly_one_of_pattern_or_kind(self):
        with pytest.raises(ValueError):
            Format()
        with pytest.raises(ValueError):
            Format(pattern="x", kind="email")

    def test_unknown_kind(self):
        with pytest.raises(ValueError, match="Unknown format kind"):
            Format(kind="postcode")


# =============================================================================
# Range Tests
# =============================================================================


class TestRange:
    @pytest.mark.asyncio
    async def test_within_bounds(self, mock_lookup):
        outcome = await Range(min=1, max=400).evaluate(
            "wingspanCm", make_candidate({"wingspanCm": 11}), mock_lookup
        )
        assert outcome.is_ok

    @pytest.mark.asyncio
    async def test_below_min(self, mock_lookup):
        outcome = await Range(min=1).evaluate(
            "wingspanCm", make_candidate({"wingspanCm": 0}), mock_lookup
        )
        assert outcome.message == "must be greater than or equal to 1"

    @pytest.mark.asyncio
    async def test_above_max(self, mock_lookup):
        outcome = await Range(max=400).evaluate(
            "wingspanCm", make_candidate({"wingspanCm": 401}), mock_lookup
        )
        assert outcome.message == "must be less than or equal to 400"

    @pytest.mark.asyncio
    async def test_numeric_string_is_accepted(self, mock_lookup):
        outcome = await Range(min=1).evaluate(
            "wingspanCm", make_candidate({"wingspanCm": "12.5"}), mock_lookup
        )
        assert outcome.is_ok

    @pytest.mark.asyncio
    async def test_not_a_number(self, mock_lookup):
        for value in ("wide", True):
            outcome = await Range(min=1).evaluate(
                "wingspanCm", make_candidate({"wingspanCm": value}), mock_lookup
            )
            assert outcome.message == "is not a number"

    @pytest.mark.asyncio
    async def test_nan_is_not_a_number(self, mock_lookup):
        for value in ("nan", "NaN", float("nan")):
            outcome = await Range(min=1, max=400).evaluate(
                "wingspanCm", make_candidate({"wingspanCm": value}), mock_lookup
            )
            assert outcome.message == "is not a number", f"{value!r} passed"

    @pytest.mark.asyncio
    async def test_infinity_is_not_a_number(self, mock_lookup):
        for value in ("inf", "-Infinity", "1e999", float("inf")):
            outcome = await Range(min=1).evaluate(
                "wingspanCm", make_candidate({"wingspanCm": value}), mock_lookup
            )
            assert outcome.message == "is not a number", f"{value!r} passed"

    @pytest.mark.asyncio
    async def test_custom_message(self, mock_lookup):
        constraint = Range(min=1, max=400, message="must be between {min} and {max}")
        outcome = await constraint.evaluate(
            "wingspanCm", make_candidate({"wingspanCm": 999}), mock_lookup
        )
        assert outcome.message == "must be between 1 and 400"


# =============================================================================
# Length Tests
# =============================================================================


class TestLength:
    @pytest.mark.asyncio
    async def test_too_short(self, mock_lookup):
        outcome = await Length(min=3).evaluate("name", make_candidate({"name": "Jo"}), mock_lookup)
        assert outcome.message == "is too short (minimum is 3 characters)"

    @pytest.mark.asyncio
    async def test_too_long(self, mock_lookup):
        outcome = await Length(max=5).evaluate(
            "name", make_candidate({"name": "Hummingbird"}), mock_lookup
        )
        assert outcome.message == "is too long (maximum is 5 characters)"

    @pytest.mark.asyncio
    async def test_within_bounds(self, mock_lookup):
        outcome = await Length(min=2, max=20).evaluate(
            "name", make_candidate({"name": "Wren"}), mock_lookup
        )
        assert outcome.is_ok


# =============================================================================
# Inclusion Tests
# =============================================================================


class TestInclusion:
    @pytest.mark.asyncio
    async def test_allowed_value(self, mock_lookup):
        constraint = Inclusion(values=("least_concern", "endangered"))
        outcome = await constraint.evaluate(
            "status", make_candidate({"status": "endangered"}), mock_lookup
        )
        assert outcome.is_ok

    @pytest.mark.asyncio
    async def test_disallowed_value(self, mock_lookup):
        constraint = Inclusion(values=("least_concern", "endangered"))
        outcome = await constraint.evaluate(
            "status", make_candidate({"status": "extinct"}), mock_lookup
        )
        assert outcome.message == "is not included in the list"


# =============================================================================
# Custom Tests
# =============================================================================


class TestCustom:
    @pytest.mark.asyncio
    async def test_sync_predicate(self, mock_lookup):
        constraint = Custom(
            predicate=lambda value, candidate: value != "Dodo",
            message="is extinct",
            label="notExtinct",
        )
        outcome = await constraint.evaluate("name", make_candidate({"name": "Dodo"}), mock_lookup)
        assert outcome.message == "is extinct"
        assert constraint.name == "notExtinct"

    @pytest.mark.asyncio
    async def test_async_predicate(self, mock_lookup):
        async def ringed(value, candidate):
            return candidate.get("ringCode") is not None

        constraint = Custom(predicate=ringed, message="needs a ring code")
        ok = await constraint.evaluate("name", make_candidate({"ringCode": "GB-1"}), mock_lookup)
        bad = await constraint.evaluate("name", make_candidate({}), mock_lookup)
        assert ok.is_ok
        assert bad.message == "needs a ring code"
