"""
Validation utilities for input validation and error handling.
"""
import re
from datetime import datetime, timezone
from typing import Any, Iterable

from .error_handlers import ValidationError

EMAIL_PATTERN = r'^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$'


def validate_email(email: str) -> str:
    """Validate email format."""
    if not email or not isinstance(email, str):
        raise ValidationError("Please provide an email")

    email = email.strip().lower()
    if len(email) > 255:
        raise ValidationError("Email too long (max 255 characters)")

    if not re.match(EMAIL_PATTERN, email):
        raise ValidationError("Please provide a valid email")

    return email


def validate_password(password: str) -> None:
    """Validate password strength."""
    if not password or not isinstance(password, str):
        raise ValidationError("Please provide a password")

    if len(password) < 6:
        raise ValidationError("Password must be at least 6 characters")

    if len(password) > 72:
        raise ValidationError("Password too long (max 72 characters)")


def validate_role(role: str) -> str:
    """Validate user role."""
    if not role or not isinstance(role, str):
        raise ValidationError("Please specify user role")

    role = role.strip().lower()
    valid_roles = ("candidate", "hr")

    if role not in valid_roles:
        raise ValidationError(f"Invalid role. Must be one of: {', '.join(valid_roles)}")

    return role


def validate_string_field(
    value: Any,
    field_name: str,
    min_length: int = 1,
    max_length: int = 1000,
    required: bool = True,
) -> str | None:
    """Validate a string field with common rules."""
    if value is None:
        if required:
            raise ValidationError(f"{field_name} is required")
        return None

    if not isinstance(value, str):
        raise ValidationError(f"{field_name} must be a string")

    value = value.strip()

    if not value:
        if required:
            raise ValidationError(f"{field_name} is required")
        return None

    if len(value) < min_length:
        raise ValidationError(f"{field_name} must be at least {min_length} characters")

    if len(value) > max_length:
        raise ValidationError(f"{field_name} must not exceed {max_length} characters")

    return value


def validate_integer_field(
    value: Any,
    field_name: str,
    min_value: int | None = None,
    max_value: int | None = None,
    required: bool = True,
) -> int | None:
    """Validate an integer field."""
    if value is None:
        if required:
            raise ValidationError(f"{field_name} is required")
        return None

    if isinstance(value, bool):
        raise ValidationError(f"{field_name} must be a valid integer")

    if not isinstance(value, int):
        try:
            value = int(value)
        except (ValueError, TypeError):
            raise ValidationError(f"{field_name} must be a valid integer")

    if min_value is not None and value < min_value:
        raise ValidationError(f"{field_name} must be at least {min_value}")

    if max_value is not None and value > max_value:
        raise ValidationError(f"{field_name} must not exceed {max_value}")

    return value


def validate_choice(value: Any, field_name: str, choices: Iterable[str], required: bool = True) -> str | None:
    """Validate that value is one of the allowed enum values (case-sensitive)."""
    if value is None or value == "":
        if required:
            raise ValidationError(f"{field_name} is required")
        return None

    allowed = tuple(choices)
    if value not in allowed:
        raise ValidationError(f"Invalid {field_name}. Must be one of: {', '.join(allowed)}")
    return value


def parse_id(value: Any) -> int | None:
    """Parse a record id from a path/body value; returns None when it can't name a record."""
    if value is None or isinstance(value, bool):
        return None
    try:
        parsed = int(str(value).strip())
    except (ValueError, TypeError):
        return None
    return parsed if parsed > 0 else None


def parse_datetime(value: Any, field_name: str, required: bool = True) -> datetime | None:
    """Parse an ISO-8601 date/datetime string into an aware UTC datetime."""
    if value is None or value == "":
        if required:
            raise ValidationError(f"{field_name} is required")
        return None

    if isinstance(value, datetime):
        parsed = value
    else:
        raw = str(value).strip()
        if raw.endswith("Z"):
            raw = raw[:-1] + "+00:00"
        try:
            parsed = datetime.fromisoformat(raw)
        except ValueError:
            raise ValidationError(f"{field_name} must be an ISO date or datetime")

    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


def as_utc(value: datetime | None) -> datetime | None:
    """SQLite hands back naive datetimes; treat them as UTC."""
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def isoformat(value: datetime | None) -> str | None:
    value = as_utc(value)
    return value.isoformat() if value else None


def sanitize_filename(filename: str) -> str:
    """Strip path tricks from an uploaded filename before it is stored or forwarded."""
    if not filename:
        raise ValidationError("Filename is required")

    filename = filename.replace("/", "_").replace("\\", "_").replace("\x00", "")
    filename = filename.replace("..", "_").lstrip(".")

    if len(filename) > 255:
        raise ValidationError("Filename too long")
    if not filename or filename == "_":
        raise ValidationError("Invalid filename")

    return filename
