"""Validation Error Types

Value types for validation failures. Three families, kept apart so callers can
tell "your data is invalid" from "your validation setup is broken":

- ValidationError: a single rule failure (stable code + templated message)
- Errors: keyed aggregate of failures (per field, per map key, per index)
- InternalError: a setup fault; always fatal to the validation call

All of them are Exceptions so a boundary can raise what the engine returns.
"""
from __future__ import annotations

from collections.abc import Iterator, Mapping, MutableMapping
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any


class ErrorCode(str, Enum):
    """Stable codes for built-in errors.

    Codes are plain strings so user rules can use their own without
    extending the enum.
    """
    REQUIRED = "validation_required"
    NOT_NIL_REQUIRED = "validation_not_nil_required"
    FIELD_REQUIRED = "validation_field_required"
    INTERNAL = "validation_internal"

    @property
    def category(self) -> str:
        return "internal" if self is ErrorCode.INTERNAL else "validation"


@dataclass(eq=True)
class ValidationError(Exception):
    """A single rule failure.

    The message is a ``str.format`` template; ``params`` fill its named
    placeholders on render. Every ``set_*`` returns a new error, the receiver
    is never changed, so module-level error constants are safe to share.
    """
    code: str
    message: str
    params: Mapping[str, Any] = field(default_factory=dict)

    def __post_init__(self):
        super().__init__(self.message)

    def __str__(self) -> str:
        return self.render()

    __hash__ = Exception.__hash__

    def render(self) -> str:
        """Message with params substituted; raw template if a key is missing."""
        if not self.params: return self.message
        try: return self.message.format_map(self.params)
        except (KeyError, IndexError, ValueError): return self.message

    def set_code(self, code: str) -> ValidationError: return replace(self, code=code)

    def set_message(self, message: str) -> ValidationError: return replace(self, message=message)

    def set_params(self, params: Mapping[str, Any]) -> ValidationError: return replace(self, params=dict(params))

    def to_dict(self) -> dict[str, Any]:
        result = {"code": self.code, "message": self.render()}
        if self.params: result["params"] = dict(self.params)
        return result


class Errors(Exception, MutableMapping[str, Exception]):
    """Keyed collection of validation failures.

    Values are leaf errors or nested ``Errors``. Iteration order carries no
    meaning; rendering sorts keys. An empty ``Errors`` is not a failure:
    use ``filter()`` or ``as_error()`` before handing one back to a caller.
    """

    def __init__(self, errors: Mapping[str, Exception] | None = None):
        super().__init__()
        self._errors: dict[str, Exception] = dict(errors or {})

    def __getitem__(self, key: str) -> Exception: return self._errors[key]

    def __setitem__(self, key: str, value: Exception) -> None: self._errors[key] = value

    def __delitem__(self, key: str) -> None: del self._errors[key]

    def __iter__(self) -> Iterator[str]: return iter(self._errors)

    def __len__(self) -> int: return len(self._errors)

    def __eq__(self, other: object) -> bool:
        if isinstance(other, Errors): return self._errors == other._errors
        if isinstance(other, Mapping): return self._errors == dict(other)
        return NotImplemented

    __hash__ = Exception.__hash__

    def __repr__(self) -> str:
        return f"Errors({self._errors!r})"

    def __str__(self) -> str:
        if not self._errors: return ""
        parts = []
        for key in sorted(self._errors):
            value = self._errors[key]
            if isinstance(value, Errors): parts.append(f"{key}: ({value})")
            else: parts.append(f"{key}: {value}")
        return "; ".join(parts) + "."

    def to_dict(self) -> dict[str, Any]:
        """Structured export: key -> message, nested aggregates as nested dicts."""
        result: dict[str, Any] = {}
        for key, value in self._errors.items():
            if isinstance(value, Errors): result[key] = value.to_dict()
            else: result[key] = str(value)
        return result

    def filter(self) -> Errors | None:
        """Drop ``None`` entries; return ``None`` if nothing is left."""
        for key in [k for k, v in self._errors.items() if v is None]:
            del self._errors[key]
        return self if self._errors else None

    def as_error(self) -> Errors | None:
        return self if self._errors else None


class InternalError(Exception):
    """Wraps a fault in the validation setup rather than in the data.

    ``str()`` reports the cause; ``cause`` exposes it for inspection.
    """

    code = ErrorCode.INTERNAL

    def __init__(self, cause: BaseException | None):
        super().__init__(str(cause) if cause is not None else "internal validation error")
        self.cause = cause
        self.__cause__ = cause

    @property
    def internal_error(self) -> BaseException | None:
        return self.cause

    def to_dict(self) -> dict[str, Any]:
        return {"code": self.code.value, "message": str(self), "cause": type(self.cause).__name__ if self.cause else None}


class RecordReferenceError(TypeError):
    """The validation target is neither a record nor a reference to one."""

    def __init__(self):
        super().__init__("only a record or a reference to a record can be validated")


class FieldPointerError(TypeError):
    """A pointer-identity locator was not given a field reference."""

    def __init__(self, index: int):
        super().__init__(f"field #{index} must be specified as a reference")
        self.index = index


class FieldNotFoundError(LookupError):
    """A locator's field could not be resolved inside the record."""

    def __init__(self, index: int):
        super().__init__(f"field #{index} cannot be found in the record")
        self.index = index
