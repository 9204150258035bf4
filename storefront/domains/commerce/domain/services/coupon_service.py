"""
Coupon Service for Commerce Domain

Validates coupons against a cart and spreads their discounts over the
cart lines. Applied coupons are evaluated in the order they were accepted.
"""

import logging
import secrets
import string
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from uuid import UUID

from ..entities.cart import AppliedCoupon, Cart, CartItem
from ..entities.coupon import Coupon, CouponScope, CouponUsage, DiscountType, normalize_code
from ..exceptions import CouponError, CouponErrorKind
from ..value_objects.money import HUNDRED, ZERO, FormattingProfile

logger = logging.getLogger(__name__)

CODE_ALPHABET = string.ascii_uppercase + string.digits


@dataclass(frozen=True)
class CouponConfig:
    enable_coupons: bool = True
    code_length: int = 8


@dataclass(frozen=True)
class CouponContext:
    """Who is applying the coupon, and when."""

    now: datetime
    customer_id: UUID | None = None
    customer_email: str | None = None
    customer_usage_count: int = 0


def email_matches(pattern: str, email: str) -> bool:
    """``*@example.com`` matches by suffix; anything else compares case-insensitively."""
    pattern = pattern.strip().lower()
    email = email.strip().lower()
    if "*" in pattern:
        return email.endswith(pattern.replace("*", ""))
    return pattern == email


def format_percent(value: Decimal) -> str:
    """``Decimal("10.00")`` -> ``"10%"``, ``Decimal("8.250")`` -> ``"8.25%"``."""
    text = f"{value.normalize():f}"
    return f"{text}%"


class CouponService:
    """
    Domain service for coupon validation and discount allocation.

    Example:
        ```python
        service = CouponService(profile=FormattingProfile())
        service.validate(coupon, cart, CouponContext(now=now, customer_email="ana@example.com"))
        cart.coupons.append(service.snapshot(coupon))
        service.allocate_discounts(cart)
        ```
    """

    def __init__(self, config: CouponConfig | None = None, profile: FormattingProfile | None = None):
        self.config = config or CouponConfig()
        self.profile = profile or FormattingProfile()

    # Validation

    def validate(self, coupon: Coupon, cart: Cart, context: CouponContext) -> None:
        """
        Check every rule that decides whether ``coupon`` may join ``cart``.

        Raises:
            CouponError: For the first rule that fails
        """
        if cart.has_coupon(coupon.code):
            raise CouponError(CouponErrorKind.ALREADY_APPLIED, code=coupon.code)

        if not coupon.is_published():
            raise CouponError(CouponErrorKind.NOT_FOUND, code=coupon.code)

        if coupon.is_expired(context.now):
            raise CouponError(CouponErrorKind.EXPIRED, code=coupon.code)

        if coupon.is_not_yet_valid(context.now):
            raise CouponError(CouponErrorKind.NOT_YET_VALID, code=coupon.code)

        if coupon.usage_limit is not None and coupon.usage_count >= coupon.usage_limit:
            raise CouponError(CouponErrorKind.USAGE_LIMIT_REACHED, code=coupon.code)

        if (
            coupon.usage_limit_per_user is not None
            and context.customer_id is not None
            and context.customer_usage_count >= coupon.usage_limit_per_user
        ):
            raise CouponError(CouponErrorKind.CUSTOMER_USAGE_LIMIT_REACHED, code=coupon.code)

        subtotal = self._cart_subtotal(cart)
        if coupon.minimum_amount is not None and subtotal < coupon.minimum_amount:
            raise CouponError(
                CouponErrorKind.MINIMUM_NOT_MET,
                code=coupon.code,
                minimum=coupon.minimum_amount,
                current=subtotal,
            )
        if coupon.maximum_spend is not None and subtotal > coupon.maximum_spend:
            raise CouponError(
                CouponErrorKind.MAXIMUM_EXCEEDED,
                code=coupon.code,
                maximum=coupon.maximum_spend,
                current=subtotal,
            )

        if cart.coupons and (coupon.individual_use or any(applied.individual_use for applied in cart.coupons)):
            raise CouponError(CouponErrorKind.INDIVIDUAL_USE, code=coupon.code)

        if coupon.email_restrictions:
            email = context.customer_email or cart.customer_email
            if not email or not any(email_matches(pattern, email) for pattern in coupon.email_restrictions):
                raise CouponError(CouponErrorKind.EMAIL_RESTRICTION, code=coupon.code)

        self._check_product_scope(coupon, cart)

    def _check_product_scope(self, coupon: Coupon, cart: Cart) -> None:
        product_ids = {item.product_id for item in cart.items}

        if coupon.product_ids and not product_ids.intersection(coupon.product_ids):
            raise CouponError(CouponErrorKind.NOT_APPLICABLE, code=coupon.code)
        if coupon.excluded_product_ids and product_ids and product_ids.issubset(coupon.excluded_product_ids):
            raise CouponError(CouponErrorKind.EXCLUDED_PRODUCT, code=coupon.code)

        if coupon.category_ids and not any(
            category_id in coupon.category_ids for item in cart.items for category_id in item.category_ids
        ):
            raise CouponError(CouponErrorKind.NOT_APPLICABLE, code=coupon.code)
        if (
            coupon.excluded_category_ids
            and cart.items
            and all(
                any(category_id in coupon.excluded_category_ids for category_id in item.category_ids)
                for item in cart.items
            )
        ):
            raise CouponError(CouponErrorKind.EXCLUDED_CATEGORY, code=coupon.code)

    @staticmethod
    def _cart_subtotal(cart: Cart) -> Decimal:
        return sum((item.subtotal for item in cart.items), ZERO)

    # Discounts

    def snapshot(self, coupon: Coupon) -> AppliedCoupon:
        """Copy of the coupon fields a cart needs to recompute its discount later."""
        return AppliedCoupon(
            code=coupon.code,
            discount_type=coupon.discount_type,
            amount=coupon.amount,
            coupon_id=coupon.id,
            free_shipping=coupon.free_shipping,
            individual_use=coupon.individual_use,
            scope=coupon.scope(),
        )

    def calculate_discount(self, coupon: Coupon | AppliedCoupon, cart: Cart) -> Decimal:
        """
        Discount ``coupon`` would give on ``cart`` on its own, ignoring other coupons.

        Returns:
            Amount rounded to the profile scale, between zero and the cart subtotal
        """
        applied = coupon if isinstance(coupon, AppliedCoupon) else self.snapshot(coupon)
        shares = self._line_discounts(applied, cart.items)
        total = sum(shares.values(), ZERO)
        return min(total, self._cart_subtotal(cart))

    def allocate_discounts(self, cart: Cart) -> Decimal:
        """
        Recompute every applied coupon's discount and each line's share of it.

        Coupons consume what is left of each line after earlier coupons, so the
        combined discount never exceeds the cart subtotal.

        Returns:
            Combined discount of all applied coupons
        """
        remaining = {item.key: item.subtotal for item in cart.items}
        for item in cart.items:
            item.discount = ZERO

        combined = ZERO
        for applied in cart.coupons:
            shares = self._line_discounts(applied, cart.items)
            applied_total = ZERO
            for item in cart.items:
                share = min(shares.get(item.key, ZERO), remaining[item.key])
                if share <= ZERO:
                    continue
                remaining[item.key] -= share
                item.discount += share
                applied_total += share
            applied.discount = applied_total
            combined += applied_total
            logger.debug("Coupon %s discounts %s", applied.code, applied_total)

        for item in cart.items:
            item.total = max(ZERO, item.subtotal - item.discount)
        return combined

    def _line_discounts(self, applied: AppliedCoupon, items: list[CartItem]) -> dict[str, Decimal]:
        scope = applied.scope
        applicable = [
            item
            for item in items
            if scope.applies_to_product(item.product_id, item.category_ids, item.is_on_sale)
        ]
        if not applicable:
            return {}

        match applied.discount_type:
            case DiscountType.PERCENT:
                base = sum((item.subtotal for item in applicable), ZERO)
                total = self._capped(base * applied.amount / HUNDRED, scope)
                return self._allocate(total, applicable)

            case DiscountType.PERCENT_PRODUCT:
                bases = self._limited_bases(applicable, scope)
                base = sum(bases.values(), ZERO)
                total = self._capped(base * applied.amount / HUNDRED, scope)
                weighted = [item for item in applicable if bases[item.key] > ZERO]
                return self._allocate(total, weighted, bases)

            case DiscountType.FIXED_PRODUCT:
                # Each share is bounded by its line, so the sum stays within the cart subtotal.
                units = self._limited_units(applicable, scope)
                return {
                    item.key: self.profile.round(min(applied.amount * units[item.key], item.subtotal))
                    for item in applicable
                }

            case DiscountType.FIXED_CART:
                base = sum((item.subtotal for item in applicable), ZERO)
                return self._allocate(min(applied.amount, base), applicable)

        return {}

    def _capped(self, raw: Decimal, scope: CouponScope) -> Decimal:
        if scope.maximum_amount is not None:
            raw = min(raw, scope.maximum_amount)
        return self.profile.round(raw)

    @staticmethod
    def _limited_units(items: list[CartItem], scope: CouponScope) -> dict[str, int]:
        """Units per line the coupon may discount, consuming ``limit_usage_to_x_items`` in line order."""
        left = scope.limit_usage_to_x_items
        units: dict[str, int] = {}
        for item in items:
            if left is None:
                units[item.key] = item.quantity
                continue
            units[item.key] = min(item.quantity, left)
            left -= units[item.key]
        return units

    def _limited_bases(self, items: list[CartItem], scope: CouponScope) -> dict[str, Decimal]:
        if scope.limit_usage_to_x_items is None:
            return {item.key: item.subtotal for item in items}
        units = self._limited_units(items, scope)
        return {item.key: item.unit_price * units[item.key] for item in items}

    def _allocate(
        self,
        total: Decimal,
        items: list[CartItem],
        weights: dict[str, Decimal] | None = None,
    ) -> dict[str, Decimal]:
        """
        Split ``total`` over ``items`` in proportion to their weights.

        Each share is rounded to the profile scale and capped at its line
        subtotal. The rounding difference is then settled from the last line
        backwards, within each line's headroom, so the shares add up to
        ``total`` whenever the lines can carry it.
        """
        if total <= ZERO or not items:
            return {}
        weights = weights or {item.key: item.subtotal for item in items}
        weight_total = sum((weights[item.key] for item in items), ZERO)
        if weight_total <= ZERO:
            return {}

        shares = {
            item.key: min(self.profile.round(total * weights[item.key] / weight_total), item.subtotal)
            for item in items
        }
        difference = total - sum(shares.values(), ZERO)
        for item in reversed(items):
            if difference == ZERO:
                break
            if difference > ZERO:
                step = min(difference, item.subtotal - shares[item.key])
            else:
                step = max(difference, -shares[item.key])
            shares[item.key] += step
            difference -= step
        return shares

    # Administration

    def generate_code(self, length: int | None = None) -> str:
        """Random upper-case alphanumeric code."""
        size = length or self.config.code_length
        if size < 1:
            raise ValueError("Coupon code length must be positive")
        return "".join(secrets.choice(CODE_ALPHABET) for _ in range(size))

    def format_discount(self, coupon: Coupon) -> str:
        if coupon.discount_type.is_percentage():
            return format_percent(coupon.amount)
        return self.profile.format_price(coupon.amount)

    def record_usage(
        self,
        coupon: Coupon,
        customer_id: UUID | None,
        order_id: UUID | None,
        amount: Decimal,
        now: datetime,
    ) -> CouponUsage:
        """Count one redemption against ``coupon`` and return its usage record."""
        coupon.usage_count += 1
        coupon.touch(now)
        logger.info("Coupon %s used (%d total)", normalize_code(coupon.code), coupon.usage_count)
        return CouponUsage(
            coupon_id=coupon.id,
            customer_id=customer_id,
            order_id=order_id,
            discount_amount=amount,
            created_at=now,
        )
