"""
Calculate Shipping Use Case

Lists the shipping rates for a cart and destination, and optionally
stores the customer's choice on the cart.
"""

import logging

from storefront.core.domain import DomainException, EntityNotFoundException, ValidationException
from storefront.domains.commerce.application.dto import (
    CalculateShippingRequest,
    CalculateShippingResponse,
    CartTotalsDTO,
    ShippingRateDTO,
)
from storefront.domains.commerce.application.ports import ICartRepository, IClock, IShippingRepository
from storefront.domains.commerce.domain.services.cart_service import CartService
from storefront.domains.commerce.domain.services.shipping_service import ShippingService

logger = logging.getLogger(__name__)


class CalculateShippingUseCase:
    """
    Use Case: Calculate Shipping

    Prices the shipping methods of the zone matching a destination.

    Responsibilities:
    - Load zones and shipping classes
    - Compute rates cheapest first
    - Select a rate on the cart when one is requested
    """

    def __init__(
        self,
        cart_repository: ICartRepository,
        shipping_repository: IShippingRepository,
        clock: IClock,
        cart_service: CartService | None = None,
        shipping_service: ShippingService | None = None,
    ):
        self.cart_repository = cart_repository
        self.shipping_repository = shipping_repository
        self.clock = clock
        self.cart_service = cart_service or CartService()
        self.shipping_service = shipping_service or ShippingService(self.cart_service.pricing.profile)

    async def execute(self, request: CalculateShippingRequest) -> CalculateShippingResponse:
        """
        Calculate shipping rates.

        Args:
            request: Shipping request with destination and optional rate to select

        Returns:
            CalculateShippingResponse with rates or error
        """
        try:
            cart = await self.cart_repository.get(request.cart_id)
            if cart is None:
                raise EntityNotFoundException("Cart", request.cart_id)

            self.cart_service.recalculate(cart)
            zones = await self.shipping_repository.zones()
            classes = await self.shipping_repository.shipping_classes()
            result = self.shipping_service.calculate_rates(cart, request.destination, zones, classes)

            profile = self.shipping_service.profile
            rates = [ShippingRateDTO.from_rate(rate, profile.format_price(rate.cost)) for rate in result.rates]

            if request.rate_id is None:
                return CalculateShippingResponse(success=True, needs_shipping=result.needs_shipping, rates=rates)

            rate = result.find_rate(request.rate_id)
            if rate is None:
                raise ValidationException(f"Shipping rate {request.rate_id} is not available", field="rate_id")

            self.cart_service.set_shipping(cart, ShippingService.to_selection(rate), self.clock.now())
            totals = self.cart_service.recalculate(cart)
            await self.cart_repository.save(cart)

            logger.info(f"Cart {cart.id}: shipping set to {rate.id} ({rate.cost})")

            return CalculateShippingResponse(
                success=True,
                needs_shipping=result.needs_shipping,
                rates=rates,
                selected_rate_id=rate.id,
                totals=CartTotalsDTO.from_totals(totals, self.cart_service.pricing.format_price(totals.total)),
            )

        except DomainException as e:
            logger.warning(f"Shipping calculation failed for cart {request.cart_id}: {e.message}")
            return CalculateShippingResponse(success=False, error=e.message, error_code=e.code)


__all__ = ["CalculateShippingUseCase"]
