"""
Inventory Reserver Implementation

In-memory implementation of IInventoryReserver that holds stock per order.
"""

import logging
from uuid import UUID

from storefront.domains.commerce.domain.services.inventory_service import (
    InventoryCheckResult,
    InventoryService,
    StockLine,
    StockReservation,
)

logger = logging.getLogger(__name__)


class InMemoryInventoryReserver:
    """
    Holds stock for pending orders.

    Units held for other orders are subtracted from managed stock before
    each check. Unmanaged stock is never held.
    """

    def __init__(self, inventory: InventoryService | None = None):
        self.inventory = inventory or InventoryService()
        self._held: dict[UUID, dict[UUID, int]] = {}

    def held_quantity(self, stock_id: UUID) -> int:
        return sum(lines.get(stock_id, 0) for lines in self._held.values())

    async def try_reserve(self, order_id: UUID, lines: list[StockLine]) -> StockReservation:
        """Reserve every line or none."""
        results: list[InventoryCheckResult] = []
        holds: dict[UUID, int] = {}
        for line in lines:
            stock_id = self._stock_id(line)
            requested = line.quantity + holds.get(stock_id, 0) + self.held_quantity(stock_id)
            if line.variation is not None:
                result = self.inventory.check_variation(line.product, line.variation, requested)
            else:
                result = self.inventory.check(line.product, requested)
            results.append(result)
            if self._manages_stock(line):
                holds[stock_id] = holds.get(stock_id, 0) + line.quantity

        ok = all(result.is_available for result in results)
        if ok:
            self._held[order_id] = holds
            logger.debug(f"Stock held for order {order_id}: {len(holds)} items")
        return StockReservation(ok=ok, results=results)

    async def release(self, order_id: UUID) -> None:
        """Release the reservation held for an order."""
        if self._held.pop(order_id, None) is not None:
            logger.debug(f"Stock released for order {order_id}")

    @staticmethod
    def _manages_stock(line: StockLine) -> bool:
        if line.variation is not None and line.variation.manage_stock:
            return True
        return line.product.manage_stock

    @staticmethod
    def _stock_id(line: StockLine) -> UUID:
        """Variations managing their own stock are held separately from the parent."""
        if line.variation is not None and line.variation.manage_stock:
            return line.variation.id
        return line.product.id
