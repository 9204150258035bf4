"""
Base Value Object Classes

Immutable values compared field by field, plus the Decimal coercion and
string-enum helpers the commerce types build on.
"""

from abc import ABC
from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from typing import Self


@dataclass(frozen=True)
class ValueObject(ABC):
    """
    Base class for all value objects.

    Value objects are:
    - Immutable (frozen=True)
    - Compared by value (dataclass equality)
    - Have no identity

    Example:
        ```python
        @dataclass(frozen=True)
        class Percentage(ValueObject):
            value: Decimal

            def _validate(self) -> None:
                if self.value < 0:
                    raise ValueError("Percentage cannot be negative")
        ```
    """

    def __post_init__(self):
        """Override to add validation logic."""
        self._validate()

    def _validate(self) -> None:
        """Validate the value object. Override in subclasses."""
        pass


def to_decimal(value: Decimal | int | str) -> Decimal:
    """
    Coerce a numeric value into a Decimal.

    Floats are rejected: money and rates never pass through binary floating point.
    """
    if isinstance(value, Decimal):
        return value
    if isinstance(value, bool) or isinstance(value, float):
        raise TypeError(f"Cannot build a Decimal from {type(value).__name__}: {value!r}")
    return Decimal(str(value))


class StatusEnum(str, Enum):
    """
    String enum for statuses and error kinds, parsed case-insensitively.
    """

    @classmethod
    def from_string(cls, value: str) -> Self:
        """Create from string value (case-insensitive)."""
        for member in cls:
            if member.value.lower() == value.lower():
                return member
        raise ValueError(f"Invalid {cls.__name__}: {value}")
