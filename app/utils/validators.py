"""Input validation utilities."""

import re
from datetime import date
from typing import Optional

EMAIL_PATTERN = re.compile(r"^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$")

PASSWORD_SPECIAL_CHARS = "!@#$%^&*()_+-=[]{};':\"\\|,.<>/?~"
PASSWORD_PATTERN = re.compile(
    r"^(?=.*[a-z])(?=.*[A-Z])(?=.*\d)(?=.*[" + re.escape(PASSWORD_SPECIAL_CHARS) + r"])"
    r"[A-Za-z\d" + re.escape(PASSWORD_SPECIAL_CHARS) + r"]{8,}$"
)
PASSWORD_STRENGTH_MESSAGE = (
    "Password must contain at least 8 characters, one uppercase letter, "
    "one lowercase letter, one number, and one special character"
)

ALLOWED_GENDERS = ("male", "female", "non-binary", "prefer-not-to-say", "")

_HTML_ESCAPES = {
    "<": "&lt;",
    ">": "&gt;",
    '"': "&quot;",
    "'": "&#x27;",
    "/": "&#x2F;",
}


def sanitize_input(value: str) -> str:
    """
    Escape characters that could be interpreted as markup.

    Example:
        >>> sanitize_input("<b>Ann</b>")
        '&lt;b&gt;Ann&lt;&#x2F;b&gt;'
    """
    return "".join(_HTML_ESCAPES.get(ch, ch) for ch in value)


def validate_email(email: str) -> str:
    """
    Validate email format.

    Raises:
        ValueError: If the address is malformed
    """
    if not isinstance(email, str) or not EMAIL_PATTERN.match(email):
        raise ValueError("Invalid email format")
    return email


def normalize_email(email: str) -> str:
    """Emails are stored trimmed and lowercased."""
    return email.strip().lower()


def validate_password_strength(password: str) -> str:
    """
    Validate password complexity.

    Raises:
        ValueError: If the password is too weak
    """
    if not PASSWORD_PATTERN.match(password):
        raise ValueError(PASSWORD_STRENGTH_MESSAGE)
    return password


def validate_name(name: str, label: str) -> str:
    """
    Validate a person name (2-50 characters).

    Raises:
        ValueError: If the name length is out of range
    """
    if not isinstance(name, str) or not 2 <= len(name) <= 50:
        raise ValueError(f"{label} must be between 2 and 50 characters")
    return name


def validate_date_of_birth(value: Optional[date], today: Optional[date] = None) -> Optional[date]:
    """
    Validate a date of birth: not in the future and at most 120 years ago.

    Raises:
        ValueError: If the date is out of range
    """
    if value is None:
        return None

    today = today or date.today()
    if value > today:
        raise ValueError("Date of birth cannot be in the future")

    try:
        earliest = today.replace(year=today.year - 120)
    except ValueError:
        # Feb 29 in a non-leap target year
        earliest = today.replace(year=today.year - 120, day=28)
    if value < earliest:
        raise ValueError("Date of birth cannot be more than 120 years ago")
    return value


def validate_gender(gender: str) -> str:
    """
    Validate gender against the allowed values.

    Raises:
        ValueError: If gender is not recognised
    """
    if gender not in ALLOWED_GENDERS:
        allowed = ", ".join(g for g in ALLOWED_GENDERS if g)
        raise ValueError(f"Gender must be one of: {allowed} or empty")
    return gender
