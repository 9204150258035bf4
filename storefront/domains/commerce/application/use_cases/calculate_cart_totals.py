"""
Calculate Cart Totals Use Case

Recomputes discounts, taxes and totals of a cart for a customer address.
"""

import logging

from storefront.core.domain import DomainException, EntityNotFoundException
from storefront.domains.commerce.application.dto import (
    CalculateCartTotalsRequest,
    CalculateCartTotalsResponse,
    CartTotalsDTO,
)
from storefront.domains.commerce.application.ports import ICartRepository, IClock, ITaxRepository
from storefront.domains.commerce.domain.services.cart_service import CartService
from storefront.domains.commerce.domain.services.tax_service import TaxService

logger = logging.getLogger(__name__)


class CalculateCartTotalsUseCase:
    """
    Use Case: Calculate Cart Totals

    Refreshes a cart's taxes and totals.

    Responsibilities:
    - Store the addresses given with the request on the cart
    - Resolve the tax location and the current rate table
    - Recalculate discounts, write taxes, then settle totals
    """

    def __init__(
        self,
        cart_repository: ICartRepository,
        tax_repository: ITaxRepository,
        clock: IClock,
        cart_service: CartService | None = None,
        tax_service: TaxService | None = None,
    ):
        self.cart_repository = cart_repository
        self.tax_repository = tax_repository
        self.clock = clock
        self.cart_service = cart_service or CartService()
        self.tax_service = tax_service or TaxService()

    async def execute(self, request: CalculateCartTotalsRequest) -> CalculateCartTotalsResponse:
        """
        Recalculate a cart.

        Args:
            request: Totals request with optional billing/shipping addresses

        Returns:
            CalculateCartTotalsResponse with totals and per-rate taxes or error
        """
        try:
            cart = await self.cart_repository.get(request.cart_id)
            if cart is None:
                raise EntityNotFoundException("Cart", request.cart_id)

            if request.billing_address is not None:
                cart.billing_address = request.billing_address
            if request.shipping_address is not None:
                cart.shipping_address = request.shipping_address

            # Discounts first: taxes are written per line and do not depend on them
            self.cart_service.recalculate(cart)
            location = self.tax_service.tax_location(cart.billing_address, cart.shipping_address)
            rates = await self.tax_repository.rates()
            self.tax_service.calculate_cart_taxes(cart, location, rates)
            totals = self.cart_service.recalculate(cart)

            cart.touch(self.clock.now())
            await self.cart_repository.save(cart)

            taxes = {
                line.rate_id: line.tax_total + line.shipping_tax_total for line in self.tax_service.tax_lines(cart, rates)
            }
            logger.debug(f"Cart {cart.id} totals: {totals.total} (tax {totals.tax_total})")

            return CalculateCartTotalsResponse(
                success=True,
                totals=CartTotalsDTO.from_totals(totals, self.cart_service.pricing.format_price(totals.total)),
                taxes=taxes,
            )

        except DomainException as e:
            logger.warning(f"Totals calculation failed for cart {request.cart_id}: {e.message}")
            return CalculateCartTotalsResponse(success=False, error=e.message, error_code=e.code)


__all__ = ["CalculateCartTotalsUseCase"]
