"""Email identity normalization and validation."""

import re

from callboard.charts.errors import IdentityValidationError

EMAIL_REGEX = re.compile(r"^[A-Za-z0-9._%+-]+@[A-Za-z0-9.-]+\.[A-Za-z]{2,}$")


def normalize_email(raw: str) -> str:
    """Trim and lower-case an email into its canonical lookup key."""
    return (raw or "").strip().lower()


def is_valid_email(value: str) -> bool:
    return bool(EMAIL_REGEX.fullmatch(value or ""))


def validate_email(raw: str) -> str:
    """Return the normalized email, raising IdentityValidationError if malformed."""
    normalized = normalize_email(raw)
    if not is_valid_email(normalized):
        raise IdentityValidationError()
    return normalized
