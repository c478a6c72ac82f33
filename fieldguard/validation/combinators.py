"""Rule Combinators

- by: adapt a plain ``(ctx, value) -> error | None`` function into a Rule
- When: pick one of two rule lists by a condition fixed at construction

Usage:
    is_abc = by(lambda ctx, v: None if v == "abc" else new_error("abc", "must be abc"))
    validate("xyz", When(strict, is_abc).otherwise(Required))
"""
from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Any, Callable

from .context import Context
from .engine import validate_with_context
from .rules import Rule

RuleFunc = Callable[[Context, Any], "Exception | None"]


@dataclass(frozen=True, slots=True)
class InlineRule(Rule):
    """Rule backed by a function; see ``by``."""
    func: RuleFunc

    def validate(self, ctx: Context, value: Any) -> Exception | None:
        return self.func(ctx, value)


def by(func: RuleFunc) -> InlineRule:
    """Wrap a function into a Rule."""
    return InlineRule(func)


@dataclass(frozen=True, slots=True)
class WhenRule(Rule):
    """Validates with ``rules`` when ``condition`` holds, else ``else_rules``."""
    condition: bool
    rules: tuple[Rule, ...] = ()
    else_rules: tuple[Rule, ...] = ()

    def validate(self, ctx: Context, value: Any) -> Exception | None:
        if self.condition:
            return validate_with_context(ctx, value, *self.rules)
        return validate_with_context(ctx, value, *self.else_rules)

    def otherwise(self, *rules: Rule) -> WhenRule:
        return replace(self, else_rules=tuple(rules))


def When(condition: bool, *rules: Rule) -> WhenRule:
    return WhenRule(condition=condition, rules=tuple(rules))
