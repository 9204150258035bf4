"""
Coupon Entity for Commerce Domain

Discount codes with scope, spend and usage restrictions.
"""

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from uuid import UUID

from storefront.core.domain import AggregateRoot, StatusEnum, ValidationException, to_decimal


class DiscountType(StatusEnum):
    PERCENT = "percent"
    FIXED_CART = "fixed_cart"
    FIXED_PRODUCT = "fixed_product"
    PERCENT_PRODUCT = "percent_product"

    @property
    def display_name(self) -> str:
        return _DISCOUNT_TYPE_NAMES[self]

    def is_product_level(self) -> bool:
        """Product-level coupons discount each applicable line separately."""
        return self in (DiscountType.FIXED_PRODUCT, DiscountType.PERCENT_PRODUCT)

    def is_percentage(self) -> bool:
        return self in (DiscountType.PERCENT, DiscountType.PERCENT_PRODUCT)


_DISCOUNT_TYPE_NAMES = {
    DiscountType.PERCENT: "Percentage discount",
    DiscountType.FIXED_CART: "Fixed cart discount",
    DiscountType.FIXED_PRODUCT: "Fixed product discount",
    DiscountType.PERCENT_PRODUCT: "Percentage product discount",
}


class CouponStatus(StatusEnum):
    PUBLISH = "publish"
    DRAFT = "draft"
    PENDING = "pending"
    TRASH = "trash"


@dataclass
class Coupon(AggregateRoot[UUID]):
    """
    Coupon aggregate root.

    Spend bounds (``minimum_amount``, ``maximum_spend``) gate whether the
    coupon may be applied at all; ``maximum_amount`` caps the discount a
    percentage coupon can produce.

    Example:
        ```python
        coupon = Coupon(
            code="SAVE10",
            discount_type=DiscountType.PERCENT,
            amount=Decimal("10"),
            maximum_amount=Decimal("15.00"),
        )
        ```
    """

    code: str = ""
    description: str | None = None
    status: CouponStatus = CouponStatus.PUBLISH

    discount_type: DiscountType = DiscountType.FIXED_CART
    amount: Decimal = Decimal("0")

    # Scope
    individual_use: bool = False
    product_ids: list[UUID] = field(default_factory=list)
    excluded_product_ids: list[UUID] = field(default_factory=list)
    category_ids: list[UUID] = field(default_factory=list)
    excluded_category_ids: list[UUID] = field(default_factory=list)
    exclude_sale_items: bool = False
    email_restrictions: list[str] = field(default_factory=list)

    # Usage limits
    usage_limit: int | None = None
    usage_limit_per_user: int | None = None
    limit_usage_to_x_items: int | None = None
    usage_count: int = 0

    # Spend bounds and cap
    minimum_amount: Decimal | None = None
    maximum_spend: Decimal | None = None
    maximum_amount: Decimal | None = None

    free_shipping: bool = False

    starts_at: datetime | None = None
    expires_at: datetime | None = None

    def __post_init__(self):
        self.code = self.code.strip()
        if not self.code:
            raise ValidationException("Coupon code is required", field="code")
        self.amount = to_decimal(self.amount)
        if self.amount < 0:
            raise ValidationException("Coupon amount cannot be negative", field="amount")
        for name in ("minimum_amount", "maximum_spend", "maximum_amount"):
            value = getattr(self, name)
            if value is not None:
                setattr(self, name, to_decimal(value))

    @property
    def normalized_code(self) -> str:
        return normalize_code(self.code)

    def is_published(self) -> bool:
        return self.status == CouponStatus.PUBLISH

    def is_expired(self, now: datetime) -> bool:
        return self.expires_at is not None and now > self.expires_at

    def is_not_yet_valid(self, now: datetime) -> bool:
        return self.starts_at is not None and now < self.starts_at

    def scope(self) -> "CouponScope":
        """Frozen copy of the rules that decide which lines the coupon discounts."""
        return CouponScope(
            product_ids=tuple(self.product_ids),
            excluded_product_ids=tuple(self.excluded_product_ids),
            category_ids=tuple(self.category_ids),
            excluded_category_ids=tuple(self.excluded_category_ids),
            exclude_sale_items=self.exclude_sale_items,
            maximum_amount=self.maximum_amount,
            limit_usage_to_x_items=self.limit_usage_to_x_items,
        )

    def applies_to_product(self, product_id: UUID, category_ids: list[UUID], is_on_sale: bool) -> bool:
        return self.scope().applies_to_product(product_id, category_ids, is_on_sale)


@dataclass(frozen=True)
class CouponScope:
    """
    Line-selection rules of a coupon, snapshotted into the cart when applied
    so discounts can be recomputed without going back to the coupon table.
    """

    product_ids: tuple[UUID, ...] = ()
    excluded_product_ids: tuple[UUID, ...] = ()
    category_ids: tuple[UUID, ...] = ()
    excluded_category_ids: tuple[UUID, ...] = ()
    exclude_sale_items: bool = False
    maximum_amount: Decimal | None = None
    limit_usage_to_x_items: int | None = None

    def applies_to_product(self, product_id: UUID, category_ids: list[UUID], is_on_sale: bool) -> bool:
        """Whether a single cart line falls inside the coupon's scope."""
        if product_id in self.excluded_product_ids:
            return False
        if any(category_id in self.excluded_category_ids for category_id in category_ids):
            return False
        if self.exclude_sale_items and is_on_sale:
            return False
        if self.product_ids and product_id not in self.product_ids:
            return False
        if self.category_ids and not any(category_id in self.category_ids for category_id in category_ids):
            return False
        return True


@dataclass(frozen=True)
class CouponUsage:
    """One redemption of a coupon, kept for per-user limits."""

    coupon_id: UUID | None
    customer_id: UUID | None
    order_id: UUID | None
    discount_amount: Decimal
    created_at: datetime


def normalize_code(code: str) -> str:
    """Coupon codes compare case-insensitively."""
    return code.strip().lower()
