"""Error Builders

Ergonomic constructors for leaf validation errors and setup faults.
"""
from collections.abc import Mapping
from typing import Any

from .types import (
    ErrorCode,
    FieldNotFoundError,
    FieldPointerError,
    InternalError,
    RecordReferenceError,
    ValidationError,
)


def new_error(code: str | ErrorCode, message: str, params: Mapping[str, Any] | None = None) -> ValidationError:
    """Create a leaf validation error with an optional set of template params."""
    if isinstance(code, ErrorCode):
        code = code.value
    return ValidationError(code=code, message=message, params=dict(params or {}))


def internal_error(cause: BaseException) -> InternalError:
    return InternalError(cause)


# =============================================================================
# Setup faults
# =============================================================================

def record_reference_error() -> InternalError:
    return InternalError(RecordReferenceError())


def field_pointer_error(index: int) -> InternalError:
    return InternalError(FieldPointerError(index))


def field_not_found_error(index: int) -> InternalError:
    return InternalError(FieldNotFoundError(index))


def is_internal(error: BaseException | None) -> bool:
    """True for an InternalError that actually carries a cause."""
    return isinstance(error, InternalError) and error.cause is not None


# =============================================================================
# Built-in leaf errors
# =============================================================================

ErrRequired = new_error(ErrorCode.REQUIRED, "cannot be blank")
ErrNotNilRequired = new_error(ErrorCode.NOT_NIL_REQUIRED, "is required")
ErrFieldRequired = new_error(ErrorCode.FIELD_REQUIRED, "missing required field: {field_name}")
