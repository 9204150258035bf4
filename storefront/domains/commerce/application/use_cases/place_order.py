"""
Place Order Use Case

Validates a checkout, snapshots the cart into an order, reserves stock,
records coupon usage and empties the cart.
"""

import logging
from datetime import datetime
from uuid import UUID

from storefront.core.domain import DomainException, EntityNotFoundException
from storefront.core.shared.logger import get_use_case_logger
from storefront.domains.commerce.application.dto import PlaceOrderRequest, PlaceOrderResponse
from storefront.domains.commerce.application.ports import (
    ICartRepository,
    IClock,
    ICouponRepository,
    IInventoryReserver,
    IOrderRepository,
    IProductRepository,
    ITaxRepository,
)
from storefront.domains.commerce.domain.entities.cart import Cart
from storefront.domains.commerce.domain.entities.order import Order
from storefront.domains.commerce.domain.entities.product import Product, ProductVariation
from storefront.domains.commerce.domain.exceptions import CheckoutError, CheckoutErrorKind
from storefront.domains.commerce.domain.services.cart_service import CartService
from storefront.domains.commerce.domain.services.checkout_service import CheckoutService
from storefront.domains.commerce.domain.services.coupon_service import CouponService
from storefront.domains.commerce.domain.services.inventory_service import StockLine
from storefront.domains.commerce.domain.services.tax_service import TaxService

logger = logging.getLogger(__name__)
audit = get_use_case_logger("place_order")


class PlaceOrderUseCase:
    """
    Use Case: Place Order

    Turns a validated cart into a pending order.

    Responsibilities:
    - Re-check the cart against current catalog and stock
    - Collect every checkout validation error
    - Recalculate taxes and snapshot the cart into an order
    - Reserve stock when a reserver is configured
    - Persist the order, then count coupon redemptions and clear the cart
    - Release the stock hold when the order cannot be persisted
    """

    def __init__(
        self,
        cart_repository: ICartRepository,
        order_repository: IOrderRepository,
        product_repository: IProductRepository,
        coupon_repository: ICouponRepository,
        tax_repository: ITaxRepository,
        clock: IClock,
        checkout_service: CheckoutService | None = None,
        cart_service: CartService | None = None,
        tax_service: TaxService | None = None,
        coupon_service: CouponService | None = None,
        inventory_reserver: IInventoryReserver | None = None,
    ):
        """
        Initialize use case with dependencies.

        Args:
            cart_repository: Repository for cart data access
            order_repository: Repository for order persistence
            product_repository: Repository for catalog lookups
            coupon_repository: Repository for coupon usage counting
            tax_repository: Source of the tax-rate table
            clock: Source of the current time
            checkout_service: Checkout domain service
            cart_service: Cart domain service
            tax_service: Tax domain service
            coupon_service: Coupon domain service
            inventory_reserver: Optional stock reservation port
        """
        self.cart_repository = cart_repository
        self.order_repository = order_repository
        self.product_repository = product_repository
        self.coupon_repository = coupon_repository
        self.tax_repository = tax_repository
        self.clock = clock
        self.checkout_service = checkout_service or CheckoutService()
        self.cart_service = cart_service or CartService()
        self.tax_service = tax_service or TaxService()
        self.coupon_service = coupon_service or CouponService()
        self.inventory_reserver = inventory_reserver

    async def execute(self, request: PlaceOrderRequest) -> PlaceOrderResponse:
        """
        Place an order from a cart.

        Args:
            request: Place order request with the checkout form

        Returns:
            PlaceOrderResponse with the created order, or every validation error
        """
        try:
            cart = await self.cart_repository.get(request.cart_id)
            if cart is None:
                raise EntityNotFoundException("Cart", request.cart_id)

            now = self.clock.now()
            products, variations = await self._load_catalog(cart)
            validation = self.checkout_service.validate(cart, request.checkout, now, products, variations)
            if not validation.is_valid:
                return PlaceOrderResponse(
                    success=False,
                    error="Checkout validation failed",
                    error_code="CHECKOUT_VALIDATION_FAILED",
                    validation_errors=[error.message for error in validation.errors],
                )

            cart.billing_address = request.checkout.billing_address
            if request.checkout.ship_to_different_address:
                cart.shipping_address = request.checkout.shipping_address
            else:
                cart.shipping_address = request.checkout.billing_address

            self.cart_service.recalculate(cart)
            location = self.tax_service.tax_location(cart.billing_address, cart.shipping_address)
            rates = await self.tax_repository.rates()
            self.tax_service.calculate_cart_taxes(cart, location, rates)
            self.cart_service.recalculate(cart)

            tax_lines = self.tax_service.tax_lines(cart, rates)
            order = self.checkout_service.create_order(cart, request.checkout, now, tax_lines)

            if self.inventory_reserver is not None:
                await self._reserve_stock(order, cart, products, variations)

            saved = await self._save_order(order)
            await self._record_coupon_usage(saved, now)

            self.cart_service.clear(cart, now)
            await self.cart_repository.save(cart)

            audit.info(
                "Order placed",
                order_number=saved.order_number,
                cart_id=str(request.cart_id),
                total=str(saved.total),
            )

            return PlaceOrderResponse(
                success=True,
                order=saved.to_detail_dict(),
                order_id=saved.id,
                order_number=saved.order_number,
            )

        except DomainException as e:
            logger.warning(f"Checkout failed for cart {request.cart_id}: {e.message}")
            return PlaceOrderResponse(success=False, error=e.message, error_code=e.code)

    async def _load_catalog(self, cart: Cart) -> tuple[dict[UUID, Product], dict[UUID, ProductVariation]]:
        """Current catalog entries for every cart line; missing ones are left out."""
        products: dict[UUID, Product] = {}
        variations: dict[UUID, ProductVariation] = {}
        for item in cart.items:
            if item.product_id not in products:
                product = await self.product_repository.get(item.product_id)
                if product is not None:
                    products[item.product_id] = product
            if item.variation_id is not None and item.variation_id not in variations:
                variation = await self.product_repository.get_variation(item.variation_id)
                if variation is not None:
                    variations[item.variation_id] = variation
        return products, variations

    async def _save_order(self, order: Order) -> Order:
        """Persist the order, releasing its stock hold when the save is rejected."""
        try:
            return await self.order_repository.save(order)
        except DomainException:
            if self.inventory_reserver is not None:
                await self.inventory_reserver.release(order.id)
            raise

    async def _reserve_stock(
        self,
        order: Order,
        cart: Cart,
        products: dict[UUID, Product],
        variations: dict[UUID, ProductVariation],
    ) -> None:
        lines = [
            StockLine(
                product=products[item.product_id],
                quantity=item.quantity,
                variation=variations.get(item.variation_id) if item.variation_id else None,
            )
            for item in cart.items
        ]
        reservation = await self.inventory_reserver.try_reserve(order.id, lines)
        if not reservation.ok:
            failure = reservation.failures[0]
            raise CheckoutError(
                CheckoutErrorKind.STOCK_ERROR,
                reason=failure.message or "Out of stock",
                product_id=failure.product_id,
            )

    async def _record_coupon_usage(self, order: Order, now: datetime) -> None:
        for line in order.coupon_lines:
            coupon = await self.coupon_repository.find_by_code(line.code)
            if coupon is None:
                logger.warning(f"Coupon {line.code} vanished before order {order.order_number} was saved")
                continue
            usage = self.coupon_service.record_usage(coupon, order.customer_id, order.id, line.discount, now)
            await self.coupon_repository.save(coupon)
            await self.coupon_repository.record_usage(usage)


__all__ = ["PlaceOrderUseCase"]
