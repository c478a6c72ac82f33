"""Leaf Rules

Small, frequently needed predicates built on the Rule contract:

- Required / NilOrNotEmpty: reject blank values
- NotNil: reject absent values only
- StringRule: adapt a ``str -> bool`` check (blank strings pass)

Each rule resolves its input through ``indirect`` first, so references and
unwrap-able wrappers are looked through with the context's options.
"""
from __future__ import annotations

from collections.abc import Sized
from dataclasses import dataclass, replace
from datetime import timedelta
from decimal import Decimal
from typing import Any, Callable

from ..errors import ErrNotNilRequired, ErrRequired, ValidationError, new_error
from .context import Context, get_options
from .engine import indirect
from .records import is_record, record_fields
from .rules import Rule

ErrNotString = new_error("validation_not_string", "must be either a string or byte slice")


def is_empty(value: Any) -> bool:
    """True for None, zero numbers, False, empty sized values and records
    whose fields are all empty."""
    if value is None: return True
    if isinstance(value, (bool, int, float, complex, Decimal, timedelta)): return not value
    if isinstance(value, Sized): return len(value) == 0
    if is_record(value):
        return all(is_empty(getattr(value, f.name)) for f in record_fields(value))
    return False


def ensure_string(value: Any) -> str | None:
    """``value`` as text if it is ``str`` or ``bytes``, else None.

    Bytes that are not valid UTF-8 keep their raw bytes as surrogate escapes.
    """
    if isinstance(value, str): return value
    if isinstance(value, (bytes, bytearray)): return bytes(value).decode("utf-8", "surrogateescape")
    return None


@dataclass(frozen=True, slots=True)
class RequiredRule(Rule):
    """Fails on blank values; with ``skip_nil`` absent values pass."""
    skip_nil: bool = False
    condition: bool = True
    err: ValidationError = ErrRequired

    def validate(self, ctx: Context, value: Any) -> Exception | None:
        if not self.condition: return None
        value, is_nil = indirect(value, get_options(ctx))
        if self.skip_nil:
            blank = not is_nil and is_empty(value)
        else:
            blank = is_nil or is_empty(value)
        return self.err if blank else None

    def when(self, condition: bool) -> RequiredRule: return replace(self, condition=condition)

    def error(self, message: str) -> RequiredRule: return replace(self, err=self.err.set_message(message))

    def error_object(self, err: ValidationError) -> RequiredRule: return replace(self, err=err)


@dataclass(frozen=True, slots=True)
class NotNilRule(Rule):
    """Fails only when the value resolves to nothing."""
    err: ValidationError = ErrNotNilRequired

    def validate(self, ctx: Context, value: Any) -> Exception | None:
        _, is_nil = indirect(value, get_options(ctx))
        return self.err if is_nil else None

    def error(self, message: str) -> NotNilRule: return replace(self, err=self.err.set_message(message))

    def error_object(self, err: ValidationError) -> NotNilRule: return replace(self, err=err)


Required = RequiredRule()
NilOrNotEmpty = RequiredRule(skip_nil=True)
NotNil = NotNilRule()


@dataclass(frozen=True, slots=True)
class StringRule(Rule):
    """Checks string (or bytes) values with ``check``.

    Blank and absent values are valid; combine with ``Required`` to forbid
    them.
    """
    check: Callable[[Context, str], bool]
    err: ValidationError

    def validate(self, ctx: Context, value: Any) -> Exception | None:
        value, is_nil = indirect(value, get_options(ctx))
        if is_nil or is_empty(value): return None
        if (text := ensure_string(value)) is None: return ErrNotString
        return None if self.check(ctx, text) else self.err

    def error(self, message: str) -> StringRule: return replace(self, err=self.err.set_message(message))

    def error_object(self, err: ValidationError) -> StringRule: return replace(self, err=err)


def string_rule(validator: Callable[[str], bool], message: str | ValidationError) -> StringRule:
    """StringRule from a context-free check; ``message`` may be a full error."""
    err = message if isinstance(message, ValidationError) else new_error("", message)
    return StringRule(check=lambda _ctx, s: validator(s), err=err)


def string_rule_with_context(validator: Callable[[Context, str], bool],
                             message: str | ValidationError) -> StringRule:
    err = message if isinstance(message, ValidationError) else new_error("", message)
    return StringRule(check=validator, err=err)
