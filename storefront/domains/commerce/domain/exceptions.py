"""
Commerce Domain Exceptions

One error-kind enum and one exception per area. Each exception carries
its kind plus the numbers a presentation layer needs to render a message,
so callers branch on ``kind`` rather than on message text.
"""

from decimal import Decimal
from typing import Any
from uuid import UUID

from storefront.core.domain import BusinessRuleViolationException, StatusEnum


def _amount(value: Decimal | None) -> str:
    return "" if value is None else f"{value}"


# ============================================================================
# Cart
# ============================================================================


class CartErrorKind(StatusEnum):
    PRODUCT_NOT_FOUND = "product_not_found"
    VARIATION_NOT_FOUND = "variation_not_found"
    INSUFFICIENT_STOCK = "insufficient_stock"
    INVALID_QUANTITY = "invalid_quantity"
    ITEM_NOT_IN_CART = "item_not_in_cart"
    MAX_QUANTITY_EXCEEDED = "max_quantity_exceeded"
    PRODUCT_NOT_PURCHASABLE = "product_not_purchasable"


class CartError(BusinessRuleViolationException):
    """Raised by cart operations."""

    rule = "cart"

    def __init__(
        self,
        kind: CartErrorKind,
        *,
        available: int | None = None,
        requested: int | None = None,
        max_quantity: int | None = None,
        product_id: UUID | None = None,
    ):
        self.kind = kind
        self.available = available
        self.requested = requested
        self.max_quantity = max_quantity
        self.product_id = product_id

        details: dict[str, Any] = {"kind": kind.value}
        if product_id is not None:
            details["product_id"] = str(product_id)
        if kind == CartErrorKind.INSUFFICIENT_STOCK:
            details.update(available=available, requested=requested)
        if kind == CartErrorKind.MAX_QUANTITY_EXCEEDED:
            details["max"] = max_quantity
        super().__init__(self._render(), f"CART_{kind.name}", details)

    def _render(self) -> str:
        match self.kind:
            case CartErrorKind.PRODUCT_NOT_FOUND:
                return "Product not found"
            case CartErrorKind.VARIATION_NOT_FOUND:
                return "Product variation not found"
            case CartErrorKind.INSUFFICIENT_STOCK:
                return f"Only {self.available} items available, {self.requested} requested"
            case CartErrorKind.INVALID_QUANTITY:
                return "Invalid quantity"
            case CartErrorKind.ITEM_NOT_IN_CART:
                return "Item not in cart"
            case CartErrorKind.MAX_QUANTITY_EXCEEDED:
                return f"Maximum quantity of {self.max_quantity} exceeded"
            case CartErrorKind.PRODUCT_NOT_PURCHASABLE:
                return "Product cannot be purchased"
        return self.kind.value


# ============================================================================
# Coupon
# ============================================================================


class CouponErrorKind(StatusEnum):
    NOT_FOUND = "not_found"
    INVALID_CODE = "invalid_code"
    COUPONS_DISABLED = "coupons_disabled"
    EXPIRED = "expired"
    NOT_YET_VALID = "not_yet_valid"
    USAGE_LIMIT_REACHED = "usage_limit_reached"
    CUSTOMER_USAGE_LIMIT_REACHED = "customer_usage_limit_reached"
    MINIMUM_NOT_MET = "minimum_not_met"
    MAXIMUM_EXCEEDED = "maximum_exceeded"
    NOT_APPLICABLE = "not_applicable"
    INDIVIDUAL_USE = "individual_use"
    EXCLUDED_PRODUCT = "excluded_product"
    EXCLUDED_CATEGORY = "excluded_category"
    EMAIL_RESTRICTION = "email_restriction"
    ALREADY_APPLIED = "already_applied"


_COUPON_MESSAGES = {
    CouponErrorKind.NOT_FOUND: "Coupon not found",
    CouponErrorKind.INVALID_CODE: "Invalid coupon code",
    CouponErrorKind.COUPONS_DISABLED: "Coupons are disabled",
    CouponErrorKind.EXPIRED: "This coupon has expired",
    CouponErrorKind.NOT_YET_VALID: "This coupon is not yet valid",
    CouponErrorKind.USAGE_LIMIT_REACHED: "Coupon usage limit has been reached",
    CouponErrorKind.CUSTOMER_USAGE_LIMIT_REACHED: "You have already used this coupon the maximum number of times",
    CouponErrorKind.NOT_APPLICABLE: "This coupon is not applicable to your cart",
    CouponErrorKind.INDIVIDUAL_USE: "This coupon cannot be used with other coupons",
    CouponErrorKind.EXCLUDED_PRODUCT: "This coupon does not apply to items in your cart",
    CouponErrorKind.EXCLUDED_CATEGORY: "This coupon does not apply to product categories in your cart",
    CouponErrorKind.EMAIL_RESTRICTION: "This coupon is restricted to specific email addresses",
    CouponErrorKind.ALREADY_APPLIED: "This coupon has already been applied",
}


class CouponError(BusinessRuleViolationException):
    """Raised when a coupon cannot be applied."""

    rule = "coupon"

    def __init__(
        self,
        kind: CouponErrorKind,
        *,
        code: str | None = None,
        minimum: Decimal | None = None,
        maximum: Decimal | None = None,
        current: Decimal | None = None,
    ):
        self.kind = kind
        self.coupon_code = code
        self.minimum = minimum
        self.maximum = maximum
        self.current = current

        details: dict[str, Any] = {"kind": kind.value}
        if code:
            details["coupon_code"] = code
        if minimum is not None:
            details["minimum"] = str(minimum)
        if maximum is not None:
            details["maximum"] = str(maximum)
        if current is not None:
            details["current"] = str(current)
        super().__init__(self._render(), f"COUPON_{kind.name}", details)

    def _render(self) -> str:
        if self.kind == CouponErrorKind.MINIMUM_NOT_MET:
            return f"Minimum spend of {_amount(self.minimum)} is required"
        if self.kind == CouponErrorKind.MAXIMUM_EXCEEDED:
            return f"Maximum spend of {_amount(self.maximum)} exceeded"
        return _COUPON_MESSAGES[self.kind]


# ============================================================================
# Checkout
# ============================================================================


class CheckoutErrorKind(StatusEnum):
    CART_EMPTY = "cart_empty"
    INVALID_EMAIL = "invalid_email"
    INVALID_BILLING_ADDRESS = "invalid_billing_address"
    INVALID_SHIPPING_ADDRESS = "invalid_shipping_address"
    NO_SHIPPING_METHOD = "no_shipping_method"
    NO_PAYMENT_METHOD = "no_payment_method"
    TERMS_NOT_ACCEPTED = "terms_not_accepted"
    STOCK_ERROR = "stock_error"


class CheckoutError(BusinessRuleViolationException):
    """
    One checkout validation failure.

    Checkout collects these in a ``CheckoutValidation`` instead of raising
    them one at a time.
    """

    rule = "checkout"

    def __init__(self, kind: CheckoutErrorKind, *, reason: str | None = None, product_id: UUID | None = None):
        self.kind = kind
        self.reason = reason
        self.product_id = product_id

        details: dict[str, Any] = {"kind": kind.value}
        if reason:
            details["reason"] = reason
        if product_id is not None:
            details["product_id"] = str(product_id)
        super().__init__(self._render(), f"CHECKOUT_{kind.name}", details)

    def _render(self) -> str:
        match self.kind:
            case CheckoutErrorKind.CART_EMPTY:
                return "Your cart is empty"
            case CheckoutErrorKind.INVALID_EMAIL:
                return "Please enter a valid email address"
            case CheckoutErrorKind.INVALID_BILLING_ADDRESS:
                return f"Invalid billing address: {self.reason}"
            case CheckoutErrorKind.INVALID_SHIPPING_ADDRESS:
                return f"Invalid shipping address: {self.reason}"
            case CheckoutErrorKind.NO_SHIPPING_METHOD:
                return "Please select a shipping method"
            case CheckoutErrorKind.NO_PAYMENT_METHOD:
                return "Please select a payment method"
            case CheckoutErrorKind.TERMS_NOT_ACCEPTED:
                return "Please accept the terms and conditions"
            case CheckoutErrorKind.STOCK_ERROR:
                return f"Stock error for product {self.product_id}: {self.reason}"
        return self.kind.value

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, CheckoutError):
            return NotImplemented
        return (self.kind, self.reason, self.product_id) == (other.kind, other.reason, other.product_id)

    def __hash__(self) -> int:
        return hash((self.kind, self.reason, self.product_id))


# ============================================================================
# Shipping
# ============================================================================


class ShippingErrorKind(StatusEnum):
    NO_SHIPPING_ZONE = "no_shipping_zone"
    NO_SHIPPING_METHODS_AVAILABLE = "no_shipping_methods_available"
    INVALID_DESTINATION = "invalid_destination"
    CALCULATION_FAILED = "calculation_failed"


class ShippingError(BusinessRuleViolationException):
    """Raised when no rate can be offered for a destination."""

    rule = "shipping"

    def __init__(self, kind: ShippingErrorKind, *, reason: str | None = None):
        self.kind = kind
        self.reason = reason
        messages = {
            ShippingErrorKind.NO_SHIPPING_ZONE: "No shipping zone found for this destination",
            ShippingErrorKind.NO_SHIPPING_METHODS_AVAILABLE: "No shipping methods available",
            ShippingErrorKind.INVALID_DESTINATION: "Invalid shipping destination",
            ShippingErrorKind.CALCULATION_FAILED: f"Shipping calculation failed: {reason}",
        }
        details: dict[str, Any] = {"kind": kind.value}
        if reason:
            details["reason"] = reason
        super().__init__(messages[kind], f"SHIPPING_{kind.name}", details)


# ============================================================================
# Order
# ============================================================================


class OrderErrorKind(StatusEnum):
    NOT_FOUND = "not_found"
    INVALID_STATUS_TRANSITION = "invalid_status_transition"
    ALREADY_PAID = "already_paid"
    CANNOT_REFUND = "cannot_refund"
    INVALID_AMOUNT = "invalid_amount"
    ORDER_LOCKED = "order_locked"


class OrderError(BusinessRuleViolationException):
    """Raised by order lifecycle operations."""

    rule = "order"

    def __init__(
        self,
        kind: OrderErrorKind,
        *,
        from_status: StatusEnum | None = None,
        to_status: StatusEnum | None = None,
        reason: str | None = None,
        order_id: Any = None,
    ):
        self.kind = kind
        self.from_status = from_status
        self.to_status = to_status
        self.reason = reason
        self.order_id = order_id

        details: dict[str, Any] = {"kind": kind.value}
        if from_status is not None:
            details["from"] = from_status.value
        if to_status is not None:
            details["to"] = to_status.value
        if reason:
            details["reason"] = reason
        if order_id is not None:
            details["order_id"] = str(order_id)
        super().__init__(self._render(), f"ORDER_{kind.name}", details)

    def _render(self) -> str:
        match self.kind:
            case OrderErrorKind.NOT_FOUND:
                return self.reason or "Order not found"
            case OrderErrorKind.INVALID_STATUS_TRANSITION:
                return f"Cannot transition from {self.from_status.value} to {self.to_status.value}"
            case OrderErrorKind.ALREADY_PAID:
                return "Order has already been paid"
            case OrderErrorKind.CANNOT_REFUND:
                return f"Cannot refund: {self.reason}"
            case OrderErrorKind.INVALID_AMOUNT:
                return "Invalid amount"
            case OrderErrorKind.ORDER_LOCKED:
                return "Order is locked and cannot be modified"
        return self.kind.value
