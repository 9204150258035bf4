"""
Order Repository Implementation

In-memory implementation of IOrderRepository.
"""

import copy
import logging
from uuid import UUID

from storefront.core.domain import ConcurrencyException, ValidationException
from storefront.domains.commerce.domain.entities.order import Order

logger = logging.getLogger(__name__)


class InMemoryOrderRepository:
    """
    Dictionary-backed order store.

    Order numbers are unique; saving a new order whose number is taken
    fails, and so does saving a stale version of a stored order.
    """

    def __init__(self):
        self._orders: dict[UUID, Order] = {}

    async def get(self, order_id: UUID) -> Order | None:
        """Get order by ID."""
        order = self._orders.get(order_id)
        return copy.deepcopy(order) if order is not None else None

    async def get_by_number(self, order_number: str) -> Order | None:
        """Get order by order number."""
        for order in self._orders.values():
            if order.order_number == order_number:
                return copy.deepcopy(order)
        return None

    async def get_by_customer(self, customer_id: UUID, limit: int = 10) -> list[Order]:
        """Most recent orders of a customer."""
        orders = [order for order in self._orders.values() if order.customer_id == customer_id]
        orders.sort(key=lambda order: order.created_at, reverse=True)
        return [copy.deepcopy(order) for order in orders[:limit]]

    async def save(self, order: Order) -> Order:
        """Save an order."""
        stored = self._orders.get(order.id)
        if stored is None:
            if any(existing.order_number == order.order_number for existing in self._orders.values()):
                raise ValidationException(f"Order number {order.order_number} is already taken", field="order_number")
        elif stored.version > order.version:
            raise ConcurrencyException("Order", order.id, order.version, stored.version)

        self._orders[order.id] = copy.deepcopy(order)
        logger.debug(f"Order {order.order_number} saved (version {order.version})")
        return order
