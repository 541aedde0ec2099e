"""
Exceptions raised by the RTRWH feasibility engine.
"""

from typing import Any


class InvalidInputError(ValueError):
    """Raised when a caller-supplied value makes the calculation meaningless."""

    def __init__(self, field_name: str, value: Any, reason: str):
        self.field_name = field_name
        self.value = value
        self.reason = reason
        super().__init__(f"Invalid {field_name}={value!r}: {reason}")


def require_positive(field_name: str, value: float) -> None:
    """Reject zero, negative and NaN values."""
    if not value > 0:
        raise InvalidInputError(field_name, value, "must be greater than zero")


def require_non_negative(field_name: str, value: float) -> None:
    if not value >= 0:
        raise InvalidInputError(field_name, value, "must not be negative")


def require_range(field_name: str, value: float, low: float, high: float) -> None:
    if not low <= value <= high:
        raise InvalidInputError(field_name, value, f"must be between {low} and {high}")
