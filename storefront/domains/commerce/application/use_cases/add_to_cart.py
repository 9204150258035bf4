"""
Add To Cart Use Case

Loads a cart and a product, adds the requested quantity and persists the cart.
"""

import logging

from storefront.core.domain import DomainException, EntityNotFoundException
from storefront.domains.commerce.application.dto import AddToCartRequest, AddToCartResponse, CartTotalsDTO
from storefront.domains.commerce.application.ports import ICartRepository, IClock, IProductRepository
from storefront.domains.commerce.domain.exceptions import CartError, CartErrorKind
from storefront.domains.commerce.domain.services.cart_service import CartService

logger = logging.getLogger(__name__)


class AddToCartUseCase:
    """
    Use Case: Add To Cart

    Adds a product (or one of its variations) to a cart.

    Responsibilities:
    - Load the cart and the current catalog entry
    - Delegate quantity, stock and purchasability rules to CartService
    - Recalculate totals and persist the cart
    """

    def __init__(
        self,
        cart_repository: ICartRepository,
        product_repository: IProductRepository,
        clock: IClock,
        cart_service: CartService | None = None,
    ):
        """
        Initialize use case with dependencies.

        Args:
            cart_repository: Repository for cart data access
            product_repository: Repository for catalog lookups
            clock: Source of the current time
            cart_service: Cart domain service
        """
        self.cart_repository = cart_repository
        self.product_repository = product_repository
        self.clock = clock
        self.cart_service = cart_service or CartService()

    async def execute(self, request: AddToCartRequest) -> AddToCartResponse:
        """
        Add a product to a cart.

        Args:
            request: Add to cart request

        Returns:
            AddToCartResponse with the updated line and totals or error
        """
        try:
            cart = await self.cart_repository.get(request.cart_id)
            if cart is None:
                raise EntityNotFoundException("Cart", request.cart_id)

            product = await self.product_repository.get(request.product_id)
            if product is None:
                raise CartError(CartErrorKind.PRODUCT_NOT_FOUND, product_id=request.product_id)

            variation = None
            if request.variation_id is not None:
                variation = await self.product_repository.get_variation(request.variation_id)
                if variation is None:
                    raise CartError(CartErrorKind.VARIATION_NOT_FOUND, product_id=request.product_id)

            now = self.clock.now()
            item = self.cart_service.add_item(cart, product, request.quantity, now, variation, request.meta)
            totals = self.cart_service.recalculate(cart)
            await self.cart_repository.save(cart)

            logger.info(f"Added {request.quantity} x {item.product_name} to cart {cart.id}")

            return AddToCartResponse(
                success=True,
                item_key=item.key,
                quantity=item.quantity,
                totals=CartTotalsDTO.from_totals(totals, self.cart_service.pricing.format_price(totals.total)),
            )

        except DomainException as e:
            logger.warning(f"Add to cart rejected for cart {request.cart_id}: {e.message}")
            return AddToCartResponse(success=False, error=e.message, error_code=e.code)


__all__ = ["AddToCartUseCase"]
