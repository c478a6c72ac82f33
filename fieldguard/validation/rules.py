"""Rule and Capability Contracts

The engine only ever talks to these abstractions:

- Rule: immutable predicate over (context, value) returning an error or None
- Validatable: a value that knows how to validate itself
- Reference: one level of indirection (a pointer-like box or a field lens)

Capabilities are explicit ABCs, never inferred from method names.
"""
from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, replace
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from .context import Context


class Rule(ABC):
    """Base class for validation rules.

    Rules are configured once and reused across validations, possibly from
    several threads at once; they must not keep per-call state.
    """

    @abstractmethod
    def validate(self, ctx: Context, value: Any) -> Exception | None:
        """Validate a value. Returns the failure, or None when valid."""


class Validatable(ABC):
    """Values that run their own (usually record-level) validation."""

    @abstractmethod
    def validate(self, ctx: Context) -> Exception | None:
        """Validate self. Returns the failure, or None when valid."""


class Reference(ABC):
    """A single level of indirection to another value."""

    @abstractmethod
    def deref(self) -> Any:
        """Return the referenced value (may be None)."""


class Ref(Reference):
    """Mutable box holding one value; the plain pointer of this library."""

    __slots__ = ("value",)

    def __init__(self, value: Any = None):
        self.value = value

    def deref(self) -> Any: return self.value

    def set(self, value: Any) -> None: self.value = value

    def __repr__(self) -> str:
        return f"Ref({self.value!r})"


@dataclass(frozen=True, slots=True)
class SkipRule(Rule):
    """Marker rule: when active, everything after it is bypassed.

    The engine recognizes it by type; ``validate`` itself is a no-op.
    """
    skip: bool = True

    def validate(self, ctx: Context, value: Any) -> Exception | None:
        return None

    def when(self, condition: bool) -> SkipRule:
        """Skip only if ``condition`` holds; otherwise behave as absent."""
        return replace(self, skip=condition)


Skip = SkipRule(skip=True)
