"""
Exceptions raised by the service layer.

Both are ``ValueError`` subclasses so that routers can translate them
into HTTP errors the same way they handle any other invalid input.
Absence of a record is never an exception: services return ``None``
or ``False`` instead.
"""

from typing import Any, Iterable, Mapping


class ValidationFailed(ValueError):
    """Required input was missing or empty."""

    def __init__(self, message: str, fields: Iterable[str] = ()) -> None:
        super().__init__(message)
        self.fields = list(fields)


class DuplicateEmail(ValidationFailed):
    """An account with the same email (case-insensitive) already exists."""


def _is_empty(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    if isinstance(value, (list, tuple, set, dict)):
        return not value
    return False


def require_fields(data: Mapping[str, Any], *names: str) -> None:
    """Raise ``ValidationFailed`` listing every empty field in ``names``."""
    missing = [name for name in names if _is_empty(data.get(name))]
    if missing:
        raise ValidationFailed(
            "Missing required fields: " + ", ".join(missing), fields=missing
        )
