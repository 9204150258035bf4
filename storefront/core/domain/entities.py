"""
Base Entity Classes

Entities carry an id that stays the same while their attributes change.
Timestamps are never read from a global clock here: callers pass ``now``
explicitly so that every computation stays deterministic.
"""

from abc import ABC
from dataclasses import dataclass, field
from datetime import datetime
from typing import Generic, TypeVar
from uuid import UUID, uuid4

TId = TypeVar("TId")


@dataclass
class Entity(ABC, Generic[TId]):
    """
    Base class for domain entities.

    Two entities are equal when both have an id and the ids match.

    Example:
        ```python
        @dataclass
        class Cart(Entity[UUID]):
            items: list[CartItem] = field(default_factory=list)

            def clear(self, now: datetime) -> None:
                self.items.clear()
                self.touch(now)
        ```
    """

    id: TId | None = field(default=None)
    created_at: datetime | None = field(default=None)
    updated_at: datetime | None = field(default=None)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Entity):
            return False
        if self.id is None or other.id is None:
            return False
        return self.id == other.id

    def __hash__(self) -> int:
        return hash(self.id) if self.id is not None else id(self)

    def touch(self, now: datetime) -> None:
        """Record a modification at ``now``."""
        self.updated_at = now


@dataclass
class AggregateRoot(Entity[TId], Generic[TId]):
    """
    Entry point of a consistency boundary (a cart, an order, a coupon).

    Writes to one aggregate must be serialised by the caller. Repositories
    compare ``version`` on save and reject stale copies.
    """

    version: int = field(default=0)

    def increment_version(self) -> None:
        self.version += 1


def generate_uuid() -> UUID:
    """Generate a new UUID for entity identification."""
    return uuid4()
