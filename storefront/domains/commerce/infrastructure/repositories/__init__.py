"""
Commerce Infrastructure Repositories

In-memory repository implementations of the application ports.
"""

from .cart_repository import InMemoryCartRepository
from .catalog_repository import (
    InMemoryCouponRepository,
    InMemoryProductRepository,
    InMemoryShippingRepository,
    InMemoryTaxRepository,
)
from .order_repository import InMemoryOrderRepository

__all__ = [
    "InMemoryCartRepository",
    "InMemoryOrderRepository",
    "InMemoryProductRepository",
    "InMemoryCouponRepository",
    "InMemoryShippingRepository",
    "InMemoryTaxRepository",
]
