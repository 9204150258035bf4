"""
Process Payment Use Case

Charges a pending order through the payment gateway and applies the result.
"""

import logging

from storefront.core.domain import DomainException
from storefront.domains.commerce.application.dto import (
    PaymentRequest,
    ProcessPaymentRequest,
    ProcessPaymentResponse,
)
from storefront.domains.commerce.application.ports import (
    IClock,
    IInventoryReserver,
    IOrderRepository,
    IPaymentGateway,
)
from storefront.domains.commerce.domain.exceptions import OrderError, OrderErrorKind
from storefront.domains.commerce.domain.services.checkout_service import CheckoutService
from storefront.domains.commerce.domain.value_objects.order_status import OrderStatus

logger = logging.getLogger(__name__)


class ProcessPaymentUseCase:
    """
    Use Case: Process Payment

    Sends the order total to the gateway and records the outcome.

    Responsibilities:
    - Refuse orders that were already paid
    - Build the gateway request from the order
    - Move the order to processing or failed
    - Release reserved stock when the payment fails
    - Keep the gateway transaction id when the outcome cannot be saved
    """

    def __init__(
        self,
        order_repository: IOrderRepository,
        payment_gateway: IPaymentGateway,
        clock: IClock,
        checkout_service: CheckoutService | None = None,
        inventory_reserver: IInventoryReserver | None = None,
    ):
        self.order_repository = order_repository
        self.payment_gateway = payment_gateway
        self.clock = clock
        self.checkout_service = checkout_service or CheckoutService()
        self.inventory_reserver = inventory_reserver

    async def execute(self, request: ProcessPaymentRequest) -> ProcessPaymentResponse:
        """
        Charge an order.

        Args:
            request: Payment request for an order

        Returns:
            ProcessPaymentResponse with the new order status and gateway outcome
        """
        try:
            order = await self.order_repository.get(request.order_id)
            if order is None:
                raise OrderError(OrderErrorKind.NOT_FOUND, order_id=request.order_id)
            if order.is_paid():
                raise OrderError(OrderErrorKind.ALREADY_PAID, order_id=order.id)

            payment = PaymentRequest(
                order_id=order.id,
                order_number=order.order_number,
                amount=order.total,
                currency=order.currency,
                payment_method=order.payment_method,
                customer_email=order.billing_email,
                return_url=request.return_url,
            )
            result = await self.payment_gateway.process(payment)

            self.checkout_service.process_payment(order, result, self.clock.now())
            try:
                await self.order_repository.save(order)
            except DomainException as e:
                logger.error(
                    f"Gateway outcome {result.transaction_id} for order {order.order_number} was not recorded: {e.message}"
                )
                return ProcessPaymentResponse(
                    success=False,
                    transaction_id=result.transaction_id,
                    action_url=result.action_url,
                    error=e.message,
                    error_code=e.code,
                )

            if order.status == OrderStatus.FAILED and self.inventory_reserver is not None:
                await self.inventory_reserver.release(order.id)

            if result.success:
                logger.info(f"Payment captured for order {order.order_number}: {result.transaction_id}")
            else:
                logger.warning(f"Payment for order {order.order_number} not completed: {result.error}")

            return ProcessPaymentResponse(
                success=result.success,
                status=order.status,
                transaction_id=result.transaction_id,
                action_url=result.action_url,
                error=result.error,
                error_code=None if result.success or result.requires_action else "PAYMENT_FAILED",
            )

        except DomainException as e:
            logger.warning(f"Payment rejected for order {request.order_id}: {e.message}")
            return ProcessPaymentResponse(success=False, error=e.message, error_code=e.code)


__all__ = ["ProcessPaymentUseCase"]
