"""Validators for account domain rules. Pure functions, no infrastructure or DB access."""

from typing import Optional

from account_audit.domain.exceptions import DomainValidationError

# Field length bounds (domain constants; avoid magic numbers)
NAME_MIN_LENGTH = 2
NAME_MAX_LENGTH = 255
EMAIL_MIN_LENGTH = 2
EMAIL_MAX_LENGTH = 255
PASSWORD_MIN_LENGTH = 6
PASSWORD_MAX_LENGTH = 255


def validate_length(field: str, value: Optional[str], minimum: int, maximum: int) -> None:
    """
    Raise DomainValidationError if value is missing, shorter than minimum characters,
    or longer than maximum bytes in UTF-8 (the column limit).
    """
    value = value or ""
    if len(value) < minimum or len(value.encode("utf-8")) > maximum:
        label = field.replace("_", " ")
        raise DomainValidationError(
            f"invalid {label} length (must be between {minimum} and {maximum} characters, {maximum} bytes at most)",
            field=field,
        )


def validate_registration(email: str, first_name: str, last_name: str, password: str) -> None:
    """
    Validate already-trimmed registration fields.
    Raises DomainValidationError naming the first offending field.
    """
    validate_length("email", email, EMAIL_MIN_LENGTH, EMAIL_MAX_LENGTH)
    validate_length("first_name", first_name, NAME_MIN_LENGTH, NAME_MAX_LENGTH)
    validate_length("last_name", last_name, NAME_MIN_LENGTH, NAME_MAX_LENGTH)
    validate_length("password", password, PASSWORD_MIN_LENGTH, PASSWORD_MAX_LENGTH)
