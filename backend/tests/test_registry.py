"""Tests for the constraint registry."""

import pytest

from verdict.errors import MetadataError
from verdict.validation import (
    ConstraintRegistry,
    Format,
    Inclusion,
    Presence,
    Uniqueness,
    register_builtin_constraints,
)


@pytest.fixture(autouse=True)
def clean_registry():
    """Start each test with only the built-in constraints registered."""
    ConstraintRegistry.clear()
    register_builtin_constraints()
    yield
    ConstraintRegistry.clear()


class TestConstraintRegistry:
    def test_builtins_registered(self):
        assert ConstraintRegistry.list_registered() == [
            "format",
            "inclusion",
            "length",
            "presence",
            "range",
            "uniqueness",
        ]

    def test_register_is_idempotent(self):
        def first(params, message):
            return Presence(message="first")

        def second(params, message):
            return Presence(message="second")

        ConstraintRegistry.register("ringed", first)
        ConstraintRegistry.register("ringed", second)

        assert ConstraintRegistry.create("ringed").message == "first"

    def test_register_builtins_twice(self):
        register_builtin_constraints()
        assert len(ConstraintRegistry.list_registered()) == 6

    def test_unknown_type(self):
        with pytest.raises(MetadataError, match="not registered"):
            ConstraintRegistry.create("telepathy")

    def test_clear(self):
        ConstraintRegistry.clear()
        assert not ConstraintRegistry.is_registered("presence")


class TestBuiltinFactories:
    def test_presence_with_message(self):
        constraint = ConstraintRegistry.create("presence", {}, "is required")
        assert constraint == Presence(message="is required")

    def test_empty_message_keeps_default(self):
        constraint = ConstraintRegistry.create("presence", {}, "")
        assert constraint.message == "can't be blank"

    def test_uniqueness_params(self):
        constraint = ConstraintRegistry.create(
            "uniqueness",
            {"caseSensitive": False, "scope": "region", "excludeSelf": False},
        )
        assert constraint == Uniqueness(
            case_sensitive=False, scope=("region",), exclude_self=False
        )

    def test_format_kind(self):
        assert ConstraintRegistry.create("format", {"kind": "email"}) == Format(kind="email")

    def test_format_without_pattern_is_metadata_error(self):
        with pytest.raises(MetadataError, match="Invalid params"):
            ConstraintRegistry.create("format", {})

    def test_format_bad_regex_is_metadata_error(self):
        with pytest.raises(MetadataError):
            ConstraintRegistry.create("format", {"pattern": "("})

    def test_range_params(self):
        constraint = ConstraintRegistry.create("range", {"min": 1, "max": 400})
        assert (constraint.min, constraint.max) == (1, 400)

    def test_inclusion_accepts_picklist_options(self):
        constraint = ConstraintRegistry.create(
            "inclusion",
            {"in": [{"value": "vulnerable", "label": "Vulnerable"}, "endangered"]},
        )
        assert constraint == Inclusion(values=("vulnerable", "endangered"))
