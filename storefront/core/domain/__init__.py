"""
Domain Layer - Core DDD building blocks

Base classes shared by the commerce domain:
- Entities: Objects with identity and lifecycle
- Value Objects: Immutable objects compared by value
- Exceptions: Domain-specific error handling
"""

from storefront.core.domain.entities import (
    AggregateRoot,
    Entity,
    generate_uuid,
)
from storefront.core.domain.exceptions import (
    BusinessRuleViolationException,
    ConcurrencyException,
    DomainException,
    EntityNotFoundException,
    ValidationException,
)
from storefront.core.domain.value_objects import (
    StatusEnum,
    ValueObject,
    to_decimal,
)

__all__ = [
    # Entities
    "Entity",
    "AggregateRoot",
    "generate_uuid",
    # Value Objects
    "ValueObject",
    "StatusEnum",
    "to_decimal",
    # Exceptions
    "DomainException",
    "ValidationException",
    "EntityNotFoundException",
    "BusinessRuleViolationException",
    "ConcurrencyException",
]
