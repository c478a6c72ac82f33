"""Validation Context and Options

Configuration is explicit: every engine call receives a ``Context`` and reads
its ``Options`` from it. Overrides never mutate; ``with_options`` copies the
current options, applies the overrides and hangs the copy on a new context
node. Contexts derived from the same parent are fully independent, so
concurrent validations can branch from one base context freely.

Usage:
    ctx = with_options(None, with_error_key_name(lambda f: f.name.upper()))
    validate_record_with_context(ctx, user, named_field("email", Required))
"""
from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field, replace
from functools import lru_cache
from types import MappingProxyType
from typing import TYPE_CHECKING, Any, Callable, Mapping

from pydantic import SecretBytes, SecretStr

from ..config import get_settings

if TYPE_CHECKING:
    from .records import RecordField

UnwrapFunc = Callable[[Any], tuple[Any, bool]]
ErrorKeyNameFunc = Callable[["RecordField"], str]
FindFieldByNameFunc = Callable[[Any, str], "tuple[Any, RecordField | None, bool]"]


class Valuer(ABC):
    """Wrapper types that expose a primitive value for rule evaluation.

    ``value()`` returning None means the wrapper holds no value.
    """

    @abstractmethod
    def value(self) -> Any:
        """Return the wrapped value, or None when absent."""


def default_unwrap(value: Any) -> tuple[Any, bool]:
    """Open ``Valuer`` wrappers and pydantic secrets.

    Returns ``(unwrapped value, is_nil)``. Values that are not wrappers come
    back unchanged.
    """
    if isinstance(value, Valuer):
        inner = value.value()
        return inner, inner is None
    if isinstance(value, (SecretStr, SecretBytes)):
        return value.get_secret_value(), False
    return value, value is None


@dataclass(frozen=True, slots=True)
class Options:
    """Immutable bundle of the engine's pluggable functions."""
    unwrap: UnwrapFunc
    error_key_name: ErrorKeyNameFunc
    find_field_by_name: FindFieldByNameFunc


Option = Callable[[Options], Options]


def build_default_options(error_tag: str | None = None) -> Options:
    """Construct the default options; ``error_tag`` defaults to settings."""
    from .records import default_find_field_by_name, tag_error_key_name

    tag = error_tag if error_tag is not None else get_settings().ERROR_TAG

    def error_key_name(f: RecordField) -> str:
        return tag_error_key_name(f, tag)

    return Options(
        unwrap=default_unwrap,
        error_key_name=error_key_name,
        find_field_by_name=default_find_field_by_name,
    )


_EMPTY: Mapping[Any, Any] = MappingProxyType({})


@dataclass(frozen=True, slots=True)
class Context:
    """Immutable execution context node.

    Carries options plus arbitrary caller values (request data, cancellation
    events, ...) for user rules. The engine itself only reads ``options``.
    """
    options: Options | None = None
    values: Mapping[Any, Any] = field(default_factory=lambda: _EMPTY)
    parent: Context | None = None

    def get_options(self) -> Options:
        node: Context | None = self
        while node is not None:
            if node.options is not None: return node.options
            node = node.parent
        return default_options()

    def with_value(self, key: Any, value: Any) -> Context:
        return Context(values=MappingProxyType({key: value}), parent=self)

    def value(self, key: Any, default: Any = None) -> Any:
        """Look ``key`` up on this node, then on its ancestors."""
        node: Context | None = self
        while node is not None:
            if key in node.values: return node.values[key]
            node = node.parent
        return default

    def with_options(self, *opts: Option) -> Context:
        options = self.get_options()
        for opt in opts:
            options = opt(options)
        return Context(options=options, parent=self)


BACKGROUND = Context()


@lru_cache
def default_options() -> Options:
    """The process-wide default options, built once on first use."""
    return build_default_options()


def ensure_context(ctx: Context | None) -> Context:
    return ctx if ctx is not None else BACKGROUND


def get_options(ctx: Context | None) -> Options:
    return ensure_context(ctx).get_options()


def with_options(ctx: Context | None, *opts: Option) -> Context:
    """Derive a context whose options are the current ones plus ``opts``."""
    return ensure_context(ctx).with_options(*opts)


def with_unwrap(func: UnwrapFunc) -> Option:
    return lambda o: replace(o, unwrap=func)


def with_error_key_name(func: ErrorKeyNameFunc) -> Option:
    return lambda o: replace(o, error_key_name=func)


def with_find_field_by_name(func: FindFieldByNameFunc) -> Option:
    return lambda o: replace(o, find_field_by_name=func)
