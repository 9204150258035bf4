"""
Commerce Application DTOs

Data Transfer Objects for the commerce use cases.
"""

from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any
from uuid import UUID

from storefront.domains.commerce.domain.entities.cart import CartTotals
from storefront.domains.commerce.domain.entities.order import RefundItem
from storefront.domains.commerce.domain.entities.shipping import ShippingRate
from storefront.domains.commerce.domain.services.checkout_service import CheckoutRequest
from storefront.domains.commerce.domain.value_objects.address import Location, OrderAddress
from storefront.domains.commerce.domain.value_objects.order_status import OrderStatus
from storefront.domains.commerce.domain.value_objects.payment import PaymentRequest, PaymentResult

# ==================== Shared DTOs ====================


@dataclass
class CartTotalsDTO:
    """Cart totals as shown to the customer"""

    subtotal: Decimal
    discount_total: Decimal
    shipping_total: Decimal
    fee_total: Decimal
    tax_total: Decimal
    total: Decimal
    formatted_total: str = ""

    @classmethod
    def from_totals(cls, totals: CartTotals, formatted_total: str = "") -> "CartTotalsDTO":
        return cls(
            subtotal=totals.subtotal,
            discount_total=totals.discount_total,
            shipping_total=totals.shipping_total,
            fee_total=totals.fee_total,
            tax_total=totals.tax_total,
            total=totals.total,
            formatted_total=formatted_total,
        )


@dataclass
class ShippingRateDTO:
    """Shipping rate offered at checkout"""

    id: str
    label: str
    cost: Decimal
    formatted_cost: str
    method_id: str

    @classmethod
    def from_rate(cls, rate: ShippingRate, formatted_cost: str) -> "ShippingRateDTO":
        return cls(id=rate.id, label=rate.label, cost=rate.cost, formatted_cost=formatted_cost, method_id=rate.method_id)


# ==================== Cart DTOs ====================


@dataclass
class AddToCartRequest:
    """Request to add a product to a cart"""

    cart_id: UUID
    product_id: UUID
    quantity: int = 1
    variation_id: UUID | None = None
    meta: dict[str, Any] | None = None


@dataclass
class AddToCartResponse:
    """Response after adding a product"""

    success: bool
    item_key: str | None = None
    quantity: int = 0
    totals: CartTotalsDTO | None = None
    error: str | None = None
    error_code: str | None = None


@dataclass
class ApplyCouponRequest:
    """Request to apply a coupon code to a cart"""

    cart_id: UUID
    code: str
    customer_email: str | None = None


@dataclass
class ApplyCouponResponse:
    """Response after applying a coupon"""

    success: bool
    code: str | None = None
    discount: Decimal = Decimal("0")
    totals: CartTotalsDTO | None = None
    error: str | None = None
    error_code: str | None = None


@dataclass
class CalculateCartTotalsRequest:
    """Request to recalculate cart totals including taxes"""

    cart_id: UUID
    billing_address: OrderAddress | None = None
    shipping_address: OrderAddress | None = None


@dataclass
class CalculateCartTotalsResponse:
    """Response with recalculated totals"""

    success: bool
    totals: CartTotalsDTO | None = None
    taxes: dict[str, Decimal] = field(default_factory=dict)
    error: str | None = None
    error_code: str | None = None


@dataclass
class CalculateShippingRequest:
    """Request for shipping rates, optionally selecting one"""

    cart_id: UUID
    destination: Location
    rate_id: str | None = None


@dataclass
class CalculateShippingResponse:
    """Response with the offered rates"""

    success: bool
    needs_shipping: bool = True
    rates: list[ShippingRateDTO] = field(default_factory=list)
    selected_rate_id: str | None = None
    totals: CartTotalsDTO | None = None
    error: str | None = None
    error_code: str | None = None


# ==================== Order DTOs ====================


@dataclass
class PlaceOrderRequest:
    """Request to turn a cart into an order"""

    cart_id: UUID
    checkout: CheckoutRequest


@dataclass
class PlaceOrderResponse:
    """Response from checkout"""

    success: bool
    order: dict[str, Any] | None = None
    order_id: UUID | None = None
    order_number: str | None = None
    error: str | None = None
    error_code: str | None = None
    validation_errors: list[str] = field(default_factory=list)


@dataclass
class ProcessPaymentRequest:
    """Request to charge an order through the payment gateway"""

    order_id: UUID
    return_url: str | None = None


@dataclass
class ProcessPaymentResponse:
    """Response from payment processing"""

    success: bool
    status: OrderStatus | None = None
    transaction_id: str | None = None
    action_url: str | None = None
    error: str | None = None
    error_code: str | None = None


@dataclass
class UpdateOrderStatusRequest:
    """Request to move an order to another status"""

    order_id: UUID
    new_status: OrderStatus
    note: str | None = None
    actor: str | None = None


@dataclass
class UpdateOrderStatusResponse:
    """Response after a status change"""

    success: bool
    status: OrderStatus | None = None
    previous_status: OrderStatus | None = None
    changed: bool = False
    error: str | None = None
    error_code: str | None = None


@dataclass
class RefundOrderRequest:
    """Request to refund part or all of an order"""

    order_id: UUID
    amount: Decimal
    reason: str | None = None
    actor: str | None = None
    items: list[RefundItem] = field(default_factory=list)


@dataclass
class RefundOrderResponse:
    """Response after a refund"""

    success: bool
    refund_id: UUID | None = None
    amount: Decimal = Decimal("0")
    total_refunded: Decimal = Decimal("0")
    remaining_refundable: Decimal = Decimal("0")
    error: str | None = None
    error_code: str | None = None


__all__ = [
    # Shared
    "CartTotalsDTO",
    "ShippingRateDTO",
    "PaymentRequest",
    "PaymentResult",
    # Cart
    "AddToCartRequest",
    "AddToCartResponse",
    "ApplyCouponRequest",
    "ApplyCouponResponse",
    "CalculateCartTotalsRequest",
    "CalculateCartTotalsResponse",
    "CalculateShippingRequest",
    "CalculateShippingResponse",
    # Orders
    "PlaceOrderRequest",
    "PlaceOrderResponse",
    "ProcessPaymentRequest",
    "ProcessPaymentResponse",
    "UpdateOrderStatusRequest",
    "UpdateOrderStatusResponse",
    "RefundOrderRequest",
    "RefundOrderResponse",
]
