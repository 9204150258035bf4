"""
Update Order Status Use Case

Moves an order through its lifecycle.
"""

import logging

from storefront.core.domain import DomainException
from storefront.domains.commerce.application.dto import UpdateOrderStatusRequest, UpdateOrderStatusResponse
from storefront.domains.commerce.application.ports import IClock, IInventoryReserver, IOrderRepository
from storefront.domains.commerce.domain.exceptions import OrderError, OrderErrorKind
from storefront.domains.commerce.domain.services.order_service import OrderService
from storefront.domains.commerce.domain.value_objects.order_status import OrderStatus

logger = logging.getLogger(__name__)

RELEASING_STATUSES = (OrderStatus.CANCELLED, OrderStatus.FAILED)


class UpdateOrderStatusUseCase:
    """
    Use Case: Update Order Status

    Applies one status transition to an order.

    Responsibilities:
    - Enforce the transition table through OrderService
    - Persist the order only when the status changed
    - Release reserved stock for cancelled or failed orders
    """

    def __init__(
        self,
        order_repository: IOrderRepository,
        clock: IClock,
        order_service: OrderService | None = None,
        inventory_reserver: IInventoryReserver | None = None,
    ):
        self.order_repository = order_repository
        self.clock = clock
        self.order_service = order_service or OrderService()
        self.inventory_reserver = inventory_reserver

    async def execute(self, request: UpdateOrderStatusRequest) -> UpdateOrderStatusResponse:
        try:
            order = await self.order_repository.get(request.order_id)
            if order is None:
                raise OrderError(OrderErrorKind.NOT_FOUND, order_id=request.order_id)

            previous = order.status
            transition = self.order_service.update_status(
                order, request.new_status, self.clock.now(), note=request.note, actor=request.actor
            )
            if transition is None:
                return UpdateOrderStatusResponse(success=True, status=order.status, previous_status=previous)

            await self.order_repository.save(order)
            if order.status in RELEASING_STATUSES and self.inventory_reserver is not None:
                await self.inventory_reserver.release(order.id)

            return UpdateOrderStatusResponse(
                success=True,
                status=order.status,
                previous_status=previous,
                changed=True,
            )

        except DomainException as e:
            logger.warning(f"Status change rejected for order {request.order_id}: {e.message}")
            return UpdateOrderStatusResponse(success=False, error=e.message, error_code=e.code)


__all__ = ["UpdateOrderStatusUseCase"]
