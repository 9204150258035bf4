"""
Refund Order Use Case

Appends a refund to an order's ledger.
"""

import logging

from storefront.core.domain import DomainException
from storefront.domains.commerce.application.dto import RefundOrderRequest, RefundOrderResponse
from storefront.domains.commerce.application.ports import IClock, IOrderRepository
from storefront.domains.commerce.domain.exceptions import OrderError, OrderErrorKind
from storefront.domains.commerce.domain.services.order_service import OrderService

logger = logging.getLogger(__name__)


class RefundOrderUseCase:
    """
    Use Case: Refund Order

    Records a partial or full refund. Order totals never change; the
    refunded amount is tracked in the ledger.

    Responsibilities:
    - Bound the refund by what is left to refund
    - Persist the order with its new refund entry
    """

    def __init__(self, order_repository: IOrderRepository, clock: IClock, order_service: OrderService | None = None):
        self.order_repository = order_repository
        self.clock = clock
        self.order_service = order_service or OrderService()

    async def execute(self, request: RefundOrderRequest) -> RefundOrderResponse:
        """
        Refund an order.

        Args:
            request: Refund request

        Returns:
            RefundOrderResponse with the refund and remaining refundable amount
        """
        try:
            order = await self.order_repository.get(request.order_id)
            if order is None:
                raise OrderError(OrderErrorKind.NOT_FOUND, order_id=request.order_id)

            refund = self.order_service.create_refund(
                order,
                request.amount,
                self.clock.now(),
                reason=request.reason,
                actor=request.actor,
                items=request.items,
            )
            await self.order_repository.save(order)

            return RefundOrderResponse(
                success=True,
                refund_id=refund.id,
                amount=refund.amount,
                total_refunded=order.total_refunded,
                remaining_refundable=order.remaining_refundable,
            )

        except DomainException as e:
            logger.warning(f"Refund rejected for order {request.order_id}: {e.message}")
            return RefundOrderResponse(success=False, error=e.message, error_code=e.code)


__all__ = ["RefundOrderUseCase"]
