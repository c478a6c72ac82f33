"""Value Dispatch Engine

``validate_with_context`` combines a value, its rules and any nested
self-validation into one outcome:

1. Rules run in order; an active ``Skip`` ends validation successfully and
   the first rule error is returned as-is.
2. After the rules pass, the value's shape decides what else runs:
   nil values are valid, Validatable values validate themselves, collections
   of Validatable elements are validated element by element, and references
   are followed one level and dispatched again (rules are not re-run).

Rule errors always win over nested errors because nested validation only
starts once every rule has passed. An empty ``Errors`` from any rule or
nested validation counts as success, and an internal error from a
collection element ends the collection walk at once.
"""
from __future__ import annotations

from collections.abc import Mapping, Sequence
from enum import Enum
from typing import Any

from ..errors import Errors, is_internal
from .context import Context, Options, ensure_context, get_options
from .rules import Reference, Rule, SkipRule, Validatable

# unwrap hooks that never reach a fixed point stop here
_MAX_INDIRECTION = 32

_TEXT_TYPES = (str, bytes, bytearray, memoryview)


class ValueShape(Enum):
    """What the engine does with a value once its rules have passed."""
    NIL = "nil"
    SELF_VALIDATING = "self_validating"
    KEYED = "keyed"
    ORDERED = "ordered"
    REFERENCE = "reference"
    PLAIN = "plain"


def _target(element: Any) -> Any:
    """Follow references until a concrete element (or None) is reached."""
    while isinstance(element, Reference):
        element = element.deref()
    return element


def _all_validatable(elements) -> bool:
    for element in elements:
        if (target := _target(element)) is not None and not isinstance(target, Validatable):
            return False
    return True


def shape_of(value: Any) -> ValueShape:
    """Classify ``value`` in the engine's priority order."""
    if value is None: return ValueShape.NIL
    if isinstance(value, Validatable): return ValueShape.SELF_VALIDATING
    if isinstance(value, Mapping):
        return ValueShape.KEYED if _all_validatable(value.values()) else ValueShape.PLAIN
    if isinstance(value, Sequence) and not isinstance(value, _TEXT_TYPES):
        return ValueShape.ORDERED if _all_validatable(value) else ValueShape.PLAIN
    if isinstance(value, Reference): return ValueShape.REFERENCE
    return ValueShape.PLAIN


def as_error(err: Exception | None) -> Exception | None:
    """``err``, or None when it is an ``Errors`` without entries."""
    if isinstance(err, Errors) and not err:
        return None
    return err


def validate(value: Any, *rules: Rule) -> Exception | None:
    """Validate ``value`` against ``rules`` using the background context."""
    return validate_with_context(None, value, *rules)


def validate_with_context(ctx: Context | None, value: Any, *rules: Rule) -> Exception | None:
    """Validate ``value`` against ``rules``; returns the failure or None.

    The context is handed unchanged to every rule and every self-validating
    value, so caller data and option overrides reach nested validations.
    """
    ctx = ensure_context(ctx)

    for rule in rules:
        if isinstance(rule, SkipRule):
            if rule.skip: return None
            continue
        if (err := as_error(rule.validate(ctx, value))) is not None:
            return err

    match shape_of(value):
        case ValueShape.SELF_VALIDATING:
            return as_error(value.validate(ctx))
        case ValueShape.KEYED:
            return _validate_mapping(ctx, value)
        case ValueShape.ORDERED:
            return _validate_sequence(ctx, value)
        case ValueShape.REFERENCE:
            return validate_with_context(ctx, value.deref())
    return None


def _validate_elements(ctx: Context, items) -> Exception | None:
    errs = Errors()
    for key, element in items:
        if (target := _target(element)) is None:
            continue
        if (err := as_error(target.validate(ctx))) is None:
            continue
        if is_internal(err):
            return err
        errs[str(key)] = err
    return errs.as_error()


def _validate_mapping(ctx: Context, value: Mapping) -> Exception | None:
    return _validate_elements(ctx, value.items())


def _validate_sequence(ctx: Context, value: Sequence) -> Exception | None:
    return _validate_elements(ctx, enumerate(value))


def indirect(value: Any, options: Options | None = None) -> tuple[Any, bool]:
    """Resolve ``value`` to the primitive a leaf rule should look at.

    Dereferencing and the options' unwrap hook are applied as one pass,
    alternately, until neither changes the value. Returns ``(value, is_nil)``.
    """
    unwrap = (options or get_options(None)).unwrap
    for _ in range(_MAX_INDIRECTION):
        if value is None:
            return None, True
        if isinstance(value, Reference):
            value = value.deref()
            continue
        unwrapped, is_nil = unwrap(value)
        if is_nil:
            return None, True
        if unwrapped is value:
            return value, False
        value = unwrapped
    return value, value is None
