"""
Cart Service for Commerce Domain

Line-item management and totals for shopping carts. Every mutating call
must be serialised per cart by the caller.
"""

import logging
import secrets
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Any
from uuid import UUID

from storefront.core.domain import ValidationException, generate_uuid

from ..entities.cart import AppliedCoupon, Cart, CartFee, CartItem, CartTotals, SelectedShipping, compute_item_key
from ..entities.coupon import Coupon, normalize_code
from ..entities.product import Product, ProductVariation
from ..exceptions import CartError, CartErrorKind, CouponError, CouponErrorKind
from ..value_objects.money import ZERO
from .coupon_service import CouponContext, CouponService
from .inventory_service import InventoryService
from .pricing_service import PricingService

logger = logging.getLogger(__name__)

SESSION_KEY_BYTES = 16


@dataclass(frozen=True)
class CartConfig:
    expiry_days: int = 7
    prices_include_tax: bool = False
    enable_coupons: bool = True


class CartService:
    """
    Domain service for cart mutations and totals.

    Example:
        ```python
        service = CartService(CartConfig(), PricingService(), InventoryService(), CouponService())
        cart = service.create_cart(now)
        service.add_item(cart, product, 2, now)
        service.recalculate(cart)
        cart.totals.total
        ```
    """

    def __init__(
        self,
        config: CartConfig | None = None,
        pricing: PricingService | None = None,
        inventory: InventoryService | None = None,
        coupons: CouponService | None = None,
    ):
        self.config = config or CartConfig()
        self.pricing = pricing or PricingService()
        self.inventory = inventory or InventoryService()
        self.coupons = coupons or CouponService(profile=self.pricing.profile)

    def create_cart(self, now: datetime, customer_id: UUID | None = None) -> Cart:
        """New empty cart; guests get a random session key."""
        session_key = None if customer_id is not None else secrets.token_hex(SESSION_KEY_BYTES)
        return Cart(
            id=generate_uuid(),
            created_at=now,
            customer_id=customer_id,
            session_key=session_key,
            expires_at=now + timedelta(days=self.config.expiry_days),
        )

    # Items

    def add_item(
        self,
        cart: Cart,
        product: Product,
        quantity: int,
        now: datetime,
        variation: ProductVariation | None = None,
        meta: dict[str, Any] | None = None,
    ) -> CartItem:
        """
        Add ``quantity`` units, merging into an existing line with the same key.

        Raises:
            CartError: On a non-positive quantity, an unpurchasable product,
                a variation of another product, the sold-individually cap or
                insufficient stock
        """
        if quantity <= 0:
            raise CartError(CartErrorKind.INVALID_QUANTITY, product_id=product.id)

        if variation is not None and variation.product_id not in (None, product.id):
            raise CartError(CartErrorKind.VARIATION_NOT_FOUND, product_id=product.id)

        if not self.pricing.is_purchasable(product, now, variation):
            raise CartError(CartErrorKind.PRODUCT_NOT_PURCHASABLE, product_id=product.id)

        key = compute_item_key(product.id, variation.id if variation else None, meta)
        existing = cart.find_item(key)
        new_quantity = quantity + (existing.quantity if existing else 0)

        if product.sold_individually and new_quantity > 1:
            raise CartError(CartErrorKind.MAX_QUANTITY_EXCEEDED, max_quantity=1, product_id=product.id)

        stock = (
            self.inventory.check_variation(product, variation, new_quantity)
            if variation is not None
            else self.inventory.check(product, new_quantity)
        )
        if not stock.is_available:
            raise CartError(
                CartErrorKind.INSUFFICIENT_STOCK,
                available=stock.available_quantity or 0,
                requested=new_quantity,
                product_id=product.id,
            )

        if existing is not None:
            existing.quantity = new_quantity
            item = existing
        else:
            item = self._snapshot(key, product, variation, quantity, now, meta)
            cart.items.append(item)

        self._refresh_line(item)
        self._changed(cart, now)
        logger.debug("Cart %s: %s x%d", cart.id, item.product_name, item.quantity)
        return item

    def _snapshot(
        self,
        key: str,
        product: Product,
        variation: ProductVariation | None,
        quantity: int,
        now: datetime,
        meta: dict[str, Any] | None,
    ) -> CartItem:
        if variation is not None:
            base_price = self.pricing.variation_effective_price(product, variation, now)
            weight = variation.resolve(product, "weight")
            shipping_class = variation.resolve(product, "shipping_class")
            tax_class = variation.resolve(product, "tax_class")
            is_virtual = variation.resolve(product, "is_virtual")
            is_downloadable = variation.resolve(product, "is_downloadable")
            sku = variation.sku or product.sku
        else:
            base_price = self.pricing.effective_price(product, now)
            weight = product.weight
            shipping_class = product.shipping_class
            tax_class = product.tax_class
            is_virtual = product.is_virtual
            is_downloadable = product.is_downloadable
            sku = product.sku

        base_price = base_price if base_price is not None else ZERO
        return CartItem(
            key=key,
            product_id=product.id,
            variation_id=variation.id if variation else None,
            quantity=quantity,
            unit_price=base_price,
            base_price=base_price,
            price_tiers=list(product.price_tiers),
            regular_price=self.pricing.regular_price(product, variation),
            product_name=product.name,
            sku=sku,
            category_ids=list(product.category_ids),
            tax_class=tax_class,
            tax_status=product.tax_status,
            is_virtual=is_virtual or not product.needs_shipping,
            is_downloadable=is_downloadable,
            sold_individually=product.sold_individually,
            weight=weight,
            shipping_class=shipping_class,
            variation_attributes=dict(variation.attributes) if variation else {},
            meta=dict(meta or {}),
            added_at=now,
        )

    def remove_item(self, cart: Cart, key: str, now: datetime) -> CartItem:
        item = cart.find_item(key)
        if item is None:
            raise CartError(CartErrorKind.ITEM_NOT_IN_CART)
        cart.items.remove(item)
        self._changed(cart, now)
        return item

    def update_quantity(self, cart: Cart, key: str, quantity: int, now: datetime) -> CartItem | None:
        """
        Set a line's quantity; zero or less removes the line.

        Returns:
            The updated line, or None when it was removed
        """
        if quantity <= 0:
            self.remove_item(cart, key, now)
            return None

        item = cart.find_item(key)
        if item is None:
            raise CartError(CartErrorKind.ITEM_NOT_IN_CART)
        if item.sold_individually and quantity > 1:
            raise CartError(CartErrorKind.MAX_QUANTITY_EXCEEDED, max_quantity=1, product_id=item.product_id)

        item.quantity = quantity
        self._refresh_line(item)
        self._changed(cart, now)
        return item

    def clear(self, cart: Cart, now: datetime) -> None:
        """Drop items, coupons, fees and the chosen shipping rate."""
        cart.items.clear()
        cart.coupons.clear()
        cart.fees.clear()
        cart.shipping = None
        cart.totals = CartTotals()
        self._changed(cart, now)

    # Coupons

    def apply_coupon(self, cart: Cart, coupon: Coupon, context: CouponContext) -> AppliedCoupon:
        """
        Validate ``coupon`` against the current cart and append its snapshot.

        Raises:
            CouponError: When coupons are disabled or a coupon rule fails
        """
        if not self.config.enable_coupons:
            raise CouponError(CouponErrorKind.COUPONS_DISABLED, code=coupon.code)

        self.recalculate(cart)
        self.coupons.validate(coupon, cart, context)

        applied = self.coupons.snapshot(coupon)
        cart.coupons.append(applied)
        self._changed(cart, context.now)
        self.recalculate(cart)
        logger.info("Coupon %s applied to cart %s: -%s", applied.code, cart.id, applied.discount)
        return applied

    def remove_coupon(self, cart: Cart, code: str, now: datetime) -> None:
        normalized = normalize_code(code)
        for applied in cart.coupons:
            if normalize_code(applied.code) == normalized:
                cart.coupons.remove(applied)
                self._changed(cart, now)
                return
        raise CouponError(CouponErrorKind.NOT_FOUND, code=code)

    # Fees and shipping

    def add_fee(self, cart: Cart, fee: CartFee, now: datetime) -> CartFee:
        if any(existing.id == fee.id for existing in cart.fees):
            raise ValidationException(f"Fee {fee.id} is already in the cart", field="fee")
        cart.fees.append(fee)
        self._changed(cart, now)
        return fee

    def remove_fee(self, cart: Cart, fee_id: str, now: datetime) -> None:
        cart.fees = [fee for fee in cart.fees if fee.id != fee_id]
        self._changed(cart, now)

    def set_shipping(self, cart: Cart, shipping: SelectedShipping | None, now: datetime) -> None:
        cart.shipping = shipping
        cart.touch(now)

    # Totals

    def recalculate(self, cart: Cart) -> CartTotals:
        """
        Recompute line subtotals, coupon discounts and cart totals.

        Line and fee taxes and the shipping tax are inputs here; the tax service
        fills them in. When prices include tax the line taxes already sit inside
        the subtotal and only shipping and fee taxes are added.
        """
        if cart.is_empty():
            cart.totals = CartTotals()
            for applied in cart.coupons:
                applied.discount = ZERO
            return cart.totals

        for item in cart.items:
            self._refresh_line(item)
        discount_total = self.coupons.allocate_discounts(cart)

        subtotal = sum((item.subtotal for item in cart.items), ZERO)
        subtotal_tax = sum((item.subtotal_tax for item in cart.items), ZERO)
        fee_total = sum((fee.amount for fee in cart.fees), ZERO)
        fee_tax = sum((fee.tax for fee in cart.fees), ZERO)
        shipping_total = cart.shipping.cost if cart.shipping else ZERO
        shipping_tax = cart.shipping.tax if cart.shipping else ZERO

        tax_total = subtotal_tax + shipping_tax + fee_tax
        added_tax = shipping_tax + fee_tax if self.config.prices_include_tax else tax_total
        total = subtotal + shipping_total + fee_total + added_tax - discount_total

        cart.totals = CartTotals(
            subtotal=subtotal,
            subtotal_tax=subtotal_tax,
            discount_total=discount_total,
            discount_tax=ZERO,
            shipping_total=shipping_total,
            shipping_tax=shipping_tax,
            fee_total=fee_total,
            fee_tax=fee_tax,
            tax_total=tax_total,
            total=max(ZERO, total),
        )
        return cart.totals

    def _refresh_line(self, item: CartItem) -> None:
        if item.base_price is not None:
            item.unit_price = self.pricing.tiered_price(item.base_price, item.quantity, item.price_tiers)
        item.recalculate_subtotal()

    @staticmethod
    def _changed(cart: Cart, now: datetime) -> None:
        cart.update_hash()
        cart.touch(now)
        cart.increment_version()
