"""Domain validators. Pure validation functions."""

from account_audit.domain.validators.account_validator import (
    validate_length,
    validate_registration,
)

__all__ = [
    "validate_length",
    "validate_registration",
]
