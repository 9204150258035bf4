"""
Cart Entity for Commerce Domain

Shopping cart owned by a customer or a guest session. The cart owns its
items, fees and applied-coupon snapshots; products and coupons are only
referenced by id.
"""

import hashlib
import json
from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from typing import Any
from uuid import UUID

from storefront.core.domain import AggregateRoot, ValidationException

from ..value_objects.address import OrderAddress
from .coupon import CouponScope, DiscountType, normalize_code
from .product import PriceTier, TaxStatus

ITEM_KEY_BYTES = 16


def canonical_json(meta: dict[str, Any]) -> str:
    """JSON with lexicographically sorted keys and no insignificant whitespace."""
    return json.dumps(meta, sort_keys=True, separators=(",", ":"), ensure_ascii=False, default=str)


def compute_item_key(product_id: UUID, variation_id: UUID | None, meta: dict[str, Any] | None = None) -> str:
    """
    Line key: hex of the first 16 bytes of SHA-256 over
    product id bytes, variation id bytes (when present) and canonical meta JSON.
    """
    digest = hashlib.sha256()
    digest.update(product_id.bytes)
    if variation_id is not None:
        digest.update(variation_id.bytes)
    digest.update(canonical_json(meta or {}).encode("utf-8"))
    return digest.digest()[:ITEM_KEY_BYTES].hex()


def compute_cart_hash(items: list["CartItem"], coupon_codes: list[str]) -> str:
    """SHA-256 over (product, variation, quantity) per item in order, then coupon codes in order."""
    digest = hashlib.sha256()
    for item in items:
        digest.update(item.product_id.bytes)
        if item.variation_id is not None:
            digest.update(item.variation_id.bytes)
        digest.update(str(item.quantity).encode("utf-8"))
    for code in coupon_codes:
        digest.update(code.encode("utf-8"))
    return digest.hexdigest()


@dataclass
class CartItem:
    """
    Cart line with a snapshot of the product taken when it was added.

    ``base_price`` is the effective price at add time and ``price_tiers`` the
    product's quantity tiers at that moment; the cart service re-derives
    ``unit_price`` from both whenever the quantity changes. ``subtotal`` is unit price × quantity;
    ``total`` is the subtotal after coupon discounts. ``taxes`` maps tax-rate
    id to amount.
    """

    key: str
    product_id: UUID
    quantity: int
    unit_price: Decimal
    product_name: str = ""
    variation_id: UUID | None = None
    sku: str | None = None
    regular_price: Decimal | None = None
    category_ids: list[UUID] = field(default_factory=list)
    tax_class: str = "standard"
    tax_status: TaxStatus = TaxStatus.TAXABLE
    is_virtual: bool = False
    is_downloadable: bool = False
    sold_individually: bool = False
    weight: Decimal | None = None
    shipping_class: str | None = None
    variation_attributes: dict[str, str] = field(default_factory=dict)
    meta: dict[str, Any] = field(default_factory=dict)
    added_at: datetime | None = None
    base_price: Decimal | None = None
    price_tiers: list[PriceTier] = field(default_factory=list)

    subtotal: Decimal = Decimal("0")
    subtotal_tax: Decimal = Decimal("0")
    discount: Decimal = Decimal("0")
    total: Decimal = Decimal("0")
    total_tax: Decimal = Decimal("0")
    taxes: dict[str, Decimal] = field(default_factory=dict)

    @property
    def is_on_sale(self) -> bool:
        """Sold below the regular price captured at add time."""
        price = self.unit_price if self.base_price is None else self.base_price
        return self.regular_price is not None and price < self.regular_price

    @property
    def needs_shipping(self) -> bool:
        return not self.is_virtual

    def recalculate_subtotal(self) -> None:
        self.subtotal = self.unit_price * self.quantity
        self.total = max(Decimal("0"), self.subtotal - self.discount)


@dataclass
class CartFee:
    """Ad-hoc fee line (gift wrap, handling, surcharge)."""

    id: str
    name: str
    amount: Decimal
    tax_class: str = "standard"
    taxable: bool = False
    tax: Decimal = Decimal("0")
    taxes: dict[str, Decimal] = field(default_factory=dict)


@dataclass
class AppliedCoupon:
    """
    Snapshot of a coupon accepted into a cart.

    ``discount`` is recomputed whenever cart lines change.
    """

    code: str
    discount_type: DiscountType
    amount: Decimal
    coupon_id: UUID | None = None
    discount: Decimal = Decimal("0")
    discount_tax: Decimal = Decimal("0")
    free_shipping: bool = False
    individual_use: bool = False
    scope: CouponScope = field(default_factory=CouponScope)


@dataclass(frozen=True)
class SelectedShipping:
    """Shipping rate chosen by the customer, copied from the computed rate list."""

    rate_id: str
    method_id: str
    label: str
    cost: Decimal
    taxable: bool = True
    instance_id: str | None = None
    tax: Decimal = Decimal("0")
    taxes: dict[str, Decimal] = field(default_factory=dict)


@dataclass
class CartTotals:
    subtotal: Decimal = Decimal("0")
    subtotal_tax: Decimal = Decimal("0")
    discount_total: Decimal = Decimal("0")
    discount_tax: Decimal = Decimal("0")
    shipping_total: Decimal = Decimal("0")
    shipping_tax: Decimal = Decimal("0")
    fee_total: Decimal = Decimal("0")
    fee_tax: Decimal = Decimal("0")
    tax_total: Decimal = Decimal("0")
    total: Decimal = Decimal("0")


@dataclass
class Cart(AggregateRoot[UUID]):
    """
    Cart aggregate root.

    Exactly one of ``customer_id`` and ``session_key`` identifies the owner.
    Mutations must be serialised per cart by the caller.
    """

    customer_id: UUID | None = None
    session_key: str | None = None
    items: list[CartItem] = field(default_factory=list)
    coupons: list[AppliedCoupon] = field(default_factory=list)
    fees: list[CartFee] = field(default_factory=list)
    shipping: SelectedShipping | None = None
    billing_address: OrderAddress | None = None
    shipping_address: OrderAddress | None = None
    customer_email: str | None = None
    totals: CartTotals = field(default_factory=CartTotals)
    cart_hash: str = ""
    expires_at: datetime | None = None

    def __post_init__(self):
        if (self.customer_id is None) == (self.session_key is None):
            raise ValidationException("A cart needs exactly one of customer_id or session_key", field="owner")
        if not self.cart_hash:
            self.update_hash()

    def find_item(self, key: str) -> CartItem | None:
        for item in self.items:
            if item.key == key:
                return item
        return None

    def has_coupon(self, code: str) -> bool:
        normalized = normalize_code(code)
        return any(normalize_code(applied.code) == normalized for applied in self.coupons)

    def coupon_codes(self) -> list[str]:
        return [applied.code for applied in self.coupons]

    def update_hash(self) -> None:
        self.cart_hash = compute_cart_hash(self.items, self.coupon_codes())

    @property
    def item_count(self) -> int:
        return sum(item.quantity for item in self.items)

    def is_empty(self) -> bool:
        return not self.items

    def needs_shipping(self) -> bool:
        return any(item.needs_shipping for item in self.items)

    def is_virtual(self) -> bool:
        return bool(self.items) and not self.needs_shipping()

    def has_free_shipping(self) -> bool:
        return any(applied.free_shipping for applied in self.coupons)

    def is_expired(self, now: datetime) -> bool:
        return self.expires_at is not None and now > self.expires_at
