"""Validation Error System

Three kinds of outcome besides success:

- ValidationError: one rule failed (code + templated message)
- Errors: keyed aggregate produced by record fields or collection elements
- InternalError: the validation setup itself is wrong; never aggregated

Usage:
    from fieldguard.errors import Errors, InternalError, new_error

    ErrTooShort = new_error("validation_too_short", "must be at least {min} long")
    err = ErrTooShort.set_params({"min": 3})
    str(err)  # "must be at least 3 long"
"""
from .types import (
    ErrorCode,
    ValidationError,
    Errors,
    InternalError,
    RecordReferenceError,
    FieldPointerError,
    FieldNotFoundError,
)

from .builders import (
    new_error,
    internal_error,
    record_reference_error,
    field_pointer_error,
    field_not_found_error,
    is_internal,
    ErrRequired,
    ErrNotNilRequired,
    ErrFieldRequired,
)

__all__ = [
    "ErrorCode",
    "ValidationError",
    "Errors",
    "InternalError",
    "RecordReferenceError",
    "FieldPointerError",
    "FieldNotFoundError",
    "new_error",
    "internal_error",
    "record_reference_error",
    "field_pointer_error",
    "field_not_found_error",
    "is_internal",
    "ErrRequired",
    "ErrNotNilRequired",
    "ErrFieldRequired",
]
