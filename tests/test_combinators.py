import dataclasses

import pytest

from fieldguard.errors import new_error
from fieldguard.validation import (
    BACKGROUND,
    InlineRule,
    Required,
    When,
    WhenRule,
    by,
    validate,
    validate_with_context,
)

ERR_NOT_ABC = new_error("not_abc", "must be abc")


def is_abc(ctx, value):
    return None if value == "abc" else ERR_NOT_ABC


class TestBy:
    def test_wraps_function(self):
        rule = by(is_abc)
        assert isinstance(rule, InlineRule)
        assert validate("abc", rule) is None
        assert validate("xyz", rule) is ERR_NOT_ABC

    def test_receives_context(self):
        def tenant_matches(ctx, value):
            if ctx.value("tenant") != value:
                return new_error("tenant", "tenant mismatch")
            return None

        ctx = BACKGROUND.with_value("tenant", "acme")
        assert validate_with_context(ctx, "acme", by(tenant_matches)) is None
        assert str(validate_with_context(ctx, "other", by(tenant_matches))) == "tenant mismatch"

    def test_receives_raw_value(self, ctx):
        seen = []
        by(lambda c, v: seen.append(v)).validate(ctx, None)
        assert seen == [None]


class TestWhen:
    @pytest.mark.parametrize("condition,value,expected", [
        (True, "abc", None),
        (True, "xyz", "must be abc"),
        (True, "", "must be abc"),
        (False, "xyz", None),
        (False, "", None),
    ])
    def test_without_otherwise(self, condition, value, expected):
        err = validate(value, When(condition, by(is_abc)))
        assert (err and str(err)) == expected

    @pytest.mark.parametrize("condition,value,expected", [
        (True, "abc", None),
        (True, "xyz", "must be abc"),
        (False, "xyz", None),
        (False, "", "cannot be blank"),
    ])
    def test_with_otherwise(self, condition, value, expected):
        err = validate(value, When(condition, by(is_abc)).otherwise(Required))
        assert (err and str(err)) == expected

    def test_otherwise_returns_copy(self):
        base = When(False, by(is_abc))
        derived = base.otherwise(Required)
        assert isinstance(derived, WhenRule)
        assert base.else_rules == ()
        assert derived.else_rules == (Required,)
        assert validate("", base) is None
        assert validate("", derived) is not None

    def test_is_immutable(self):
        rule = When(True, Required)
        with pytest.raises(dataclasses.FrozenInstanceError):
            rule.condition = False

    def test_rules_run_in_order(self, recorder):
        rule, seen = recorder
        assert validate("xyz", When(True, by(is_abc), rule)) is ERR_NOT_ABC
        assert seen == []
        assert validate("abc", When(True, by(is_abc), rule)) is None
        assert seen == ["abc"]

    def test_nested(self):
        inner = When(True, Required)
        assert str(validate("", When(True, inner))) == "cannot be blank"
        assert validate("", When(False, inner)) is None

    def test_passes_context(self):
        seen = []
        ctx = BACKGROUND.with_value("k", "v")
        validate_with_context(ctx, "x", When(True, by(lambda c, v: seen.append(c.value("k")))))
        assert seen == ["v"]
