"""Validation of staff wish sets before they are accepted."""

from wardroster.validation.validator import (
    ValidationError,
    ValidationErrorType,
    ValidationResult,
    WishValidator,
    validate_wish_set,
)

__all__ = [
    "ValidationError",
    "ValidationErrorType",
    "ValidationResult",
    "WishValidator",
    "validate_wish_set",
]
