"""fieldguard: composable, field-addressable validation for Python values."""
from .errors import (
    Errors,
    ErrorCode,
    InternalError,
    ValidationError,
    new_error,
)
from .validation import *  # noqa: F401,F403
from .validation import __all__ as _validation_all

__version__ = "0.1.0"

__all__ = ["Errors", "ErrorCode", "InternalError", "ValidationError", "new_error", *_validation_all]
