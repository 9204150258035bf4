"""
Domain Exceptions

Errors raised by the store domain and its repositories. Use cases catch
``DomainException`` and turn it into a failed response; anything else is a
programming error and propagates.
"""

from typing import Any


class DomainException(Exception):
    """
    Base exception for all domain-related errors.

    ``code`` is stable and machine-readable, ``message`` is the storefront
    wording, ``details`` carries the values the message was built from.
    """

    def __init__(self, message: str, code: str | None = None, details: dict[str, Any] | None = None):
        """
        Initialize domain exception.

        Args:
            message: Human-readable error message
            code: Machine-readable error code (e.g., "CART_INSUFFICIENT_STOCK")
            details: Values the message was rendered from
        """
        super().__init__(message)
        self.message = message
        self.code = code or self.__class__.__name__.upper()
        self.details = details or {}

    def to_dict(self) -> dict[str, Any]:
        """Serialize for a response body or a log entry."""
        return {
            "error": self.code,
            "message": self.message,
            "details": self.details,
        }


class ValidationException(DomainException):
    """An entity or request field holds a value the store cannot accept."""

    def __init__(self, message: str, field: str | None = None, value: Any = None):
        details: dict[str, Any] = {}
        if field:
            details["field"] = field
        if value is not None:
            details["value"] = str(value)
        super().__init__(message, "VALIDATION_ERROR", details)
        self.field = field
        self.value = value


class EntityNotFoundException(DomainException):
    """A repository lookup by id returned nothing."""

    def __init__(self, entity_type: str, entity_id: Any):
        self.entity_type = entity_type
        self.entity_id = entity_id
        super().__init__(
            f"{entity_type} {entity_id} not found",
            "ENTITY_NOT_FOUND",
            {"entity_type": entity_type, "entity_id": str(entity_id)},
        )


class BusinessRuleViolationException(DomainException):
    """
    Base for errors raised when a store rule rejects an operation.

    Subclasses set ``rule`` to the area whose rules they enforce (cart,
    coupon, checkout, shipping, order).
    """

    rule = "store"


class ConcurrencyException(DomainException):
    """Raised when a repository detects a stale aggregate version."""

    def __init__(self, entity_type: str, entity_id: Any, expected_version: int, actual_version: int):
        self.entity_type = entity_type
        self.entity_id = entity_id
        self.expected_version = expected_version
        self.actual_version = actual_version
        super().__init__(
            f"{entity_type} {entity_id} was modified concurrently "
            f"(saving version {expected_version}, stored version {actual_version})",
            "CONCURRENCY_CONFLICT",
            {
                "entity_type": entity_type,
                "entity_id": str(entity_id),
                "expected_version": expected_version,
                "actual_version": actual_version,
            },
        )
