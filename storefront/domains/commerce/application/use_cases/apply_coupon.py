"""
Apply Coupon Use Case

Looks a coupon up by code and applies it to a cart.
"""

import logging

from storefront.core.domain import DomainException, EntityNotFoundException
from storefront.core.shared.logger import get_use_case_logger
from storefront.domains.commerce.application.dto import ApplyCouponRequest, ApplyCouponResponse, CartTotalsDTO
from storefront.domains.commerce.application.ports import ICartRepository, IClock, ICouponRepository
from storefront.domains.commerce.domain.exceptions import CouponError, CouponErrorKind
from storefront.domains.commerce.domain.services.cart_service import CartService
from storefront.domains.commerce.domain.services.coupon_service import CouponContext

logger = logging.getLogger(__name__)
audit = get_use_case_logger("apply_coupon")


class ApplyCouponUseCase:
    """
    Use Case: Apply Coupon

    Validates a coupon code against a cart and applies its discount.

    Responsibilities:
    - Resolve the code through the coupon repository
    - Count the customer's previous redemptions for per-user limits
    - Apply the coupon through CartService and persist the cart
    """

    def __init__(
        self,
        cart_repository: ICartRepository,
        coupon_repository: ICouponRepository,
        clock: IClock,
        cart_service: CartService | None = None,
    ):
        self.cart_repository = cart_repository
        self.coupon_repository = coupon_repository
        self.clock = clock
        self.cart_service = cart_service or CartService()

    async def execute(self, request: ApplyCouponRequest) -> ApplyCouponResponse:
        """
        Apply a coupon code to a cart.

        Args:
            request: Apply coupon request

        Returns:
            ApplyCouponResponse with the discount and new totals or error
        """
        try:
            cart = await self.cart_repository.get(request.cart_id)
            if cart is None:
                raise EntityNotFoundException("Cart", request.cart_id)

            code = request.code.strip()
            if not code:
                raise CouponError(CouponErrorKind.INVALID_CODE, code=request.code)

            coupon = await self.coupon_repository.find_by_code(code)
            if coupon is None:
                raise CouponError(CouponErrorKind.NOT_FOUND, code=code)

            usage_count = 0
            if cart.customer_id is not None and coupon.usage_limit_per_user is not None and coupon.id is not None:
                usage_count = await self.coupon_repository.count_customer_usage(coupon.id, cart.customer_id)

            context = CouponContext(
                now=self.clock.now(),
                customer_id=cart.customer_id,
                customer_email=request.customer_email,
                customer_usage_count=usage_count,
            )
            applied = self.cart_service.apply_coupon(cart, coupon, context)
            await self.cart_repository.save(cart)

            audit.info("Coupon applied", cart_id=str(cart.id), coupon=applied.code, discount=str(applied.discount))

            totals = cart.totals
            return ApplyCouponResponse(
                success=True,
                code=applied.code,
                discount=applied.discount,
                totals=CartTotalsDTO.from_totals(totals, self.cart_service.pricing.format_price(totals.total)),
            )

        except DomainException as e:
            logger.warning(f"Coupon {request.code!r} rejected for cart {request.cart_id}: {e.message}")
            return ApplyCouponResponse(success=False, code=request.code, error=e.message, error_code=e.code)


__all__ = ["ApplyCouponUseCase"]
