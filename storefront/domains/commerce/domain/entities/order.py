"""
Order Entity for Commerce Domain

Immutable snapshot of a checked-out cart plus the parts of an order that
keep changing after creation: status, notes and the refund ledger.
"""

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from typing import Any
from uuid import UUID

from storefront.core.domain import AggregateRoot

from ..value_objects.address import OrderAddress
from ..value_objects.order_status import OrderStatus, StatusTransition
from .coupon import DiscountType

ZERO = Decimal("0")


@dataclass
class OrderLineItem:
    """Product line copied from the cart at checkout."""

    id: UUID
    product_id: UUID
    product_name: str
    quantity: int
    unit_price: Decimal
    variation_id: UUID | None = None
    sku: str | None = None
    tax_class: str = "standard"
    subtotal: Decimal = ZERO
    subtotal_tax: Decimal = ZERO
    total: Decimal = ZERO
    total_tax: Decimal = ZERO
    taxes: dict[str, Decimal] = field(default_factory=dict)
    variation_attributes: dict[str, str] = field(default_factory=dict)
    meta: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "id": str(self.id),
            "product_id": str(self.product_id),
            "variation_id": str(self.variation_id) if self.variation_id else None,
            "product_name": self.product_name,
            "sku": self.sku,
            "quantity": self.quantity,
            "unit_price": str(self.unit_price),
            "subtotal": str(self.subtotal),
            "subtotal_tax": str(self.subtotal_tax),
            "total": str(self.total),
            "total_tax": str(self.total_tax),
            "variation_attributes": dict(self.variation_attributes),
        }


@dataclass
class OrderShippingLine:
    id: UUID
    method_id: str
    method_title: str
    total: Decimal
    instance_id: str | None = None
    total_tax: Decimal = ZERO
    taxes: dict[str, Decimal] = field(default_factory=dict)


@dataclass
class OrderFeeLine:
    id: UUID
    name: str
    total: Decimal
    tax_class: str = "standard"
    taxable: bool = False
    total_tax: Decimal = ZERO


@dataclass(frozen=True)
class OrderTaxLine:
    """Per-rate tax aggregate shown on invoices."""

    rate_id: str
    rate_code: str
    label: str
    compound: bool
    rate_percent: Decimal
    tax_total: Decimal = ZERO
    shipping_tax_total: Decimal = ZERO


@dataclass(frozen=True)
class OrderCouponLine:
    code: str
    discount: Decimal
    discount_type: DiscountType
    discount_tax: Decimal = ZERO
    coupon_id: UUID | None = None


@dataclass(frozen=True)
class OrderNote:
    id: UUID
    content: str
    created_at: datetime
    is_customer_note: bool = False
    added_by: str | None = None


@dataclass(frozen=True)
class RefundItem:
    order_item_id: UUID
    quantity: int
    refund_total: Decimal
    refund_tax: Decimal = ZERO


@dataclass(frozen=True)
class Refund:
    """Append-only refund record; never mutated once created."""

    id: UUID
    order_id: UUID | None
    amount: Decimal
    created_at: datetime
    reason: str | None = None
    actor: str | None = None
    items: tuple[RefundItem, ...] = ()


@dataclass
class OrderSummary:
    order_number: str
    status: OrderStatus
    status_label: str
    item_count: int
    total: Decimal
    formatted_total: str
    created_at: datetime | None


@dataclass
class Order(AggregateRoot[UUID]):
    """
    Order aggregate root for commerce domain.

    Lines and addresses are frozen after checkout except while the status is
    editable (draft, pending, on hold). Writes must be serialised per order id.
    """

    order_number: str = ""
    customer_id: UUID | None = None
    status: OrderStatus = OrderStatus.PENDING
    currency: str = "USD"
    prices_include_tax: bool = False

    # Customer
    billing_email: str = ""
    billing_address: OrderAddress | None = None
    shipping_address: OrderAddress | None = None
    customer_note: str | None = None

    # Payment
    payment_method: str = ""
    payment_method_title: str = ""
    transaction_id: str | None = None

    # Lines
    items: list[OrderLineItem] = field(default_factory=list)
    shipping_lines: list[OrderShippingLine] = field(default_factory=list)
    fee_lines: list[OrderFeeLine] = field(default_factory=list)
    tax_lines: list[OrderTaxLine] = field(default_factory=list)
    coupon_lines: list[OrderCouponLine] = field(default_factory=list)

    # Totals
    subtotal: Decimal = ZERO
    discount_total: Decimal = ZERO
    discount_tax: Decimal = ZERO
    shipping_total: Decimal = ZERO
    shipping_tax: Decimal = ZERO
    fee_total: Decimal = ZERO
    fee_tax: Decimal = ZERO
    cart_tax: Decimal = ZERO
    total_tax: Decimal = ZERO
    total: Decimal = ZERO

    # Lifecycle
    paid_at: datetime | None = None
    completed_at: datetime | None = None
    status_history: list[StatusTransition] = field(default_factory=list)
    notes: list[OrderNote] = field(default_factory=list)
    refunds: list[Refund] = field(default_factory=list)

    @property
    def item_count(self) -> int:
        return sum(item.quantity for item in self.items)

    @property
    def total_refunded(self) -> Decimal:
        return sum((refund.amount for refund in self.refunds), ZERO)

    @property
    def remaining_refundable(self) -> Decimal:
        return self.total - self.total_refunded

    def is_editable(self) -> bool:
        return self.status.is_editable()

    def is_paid(self) -> bool:
        return self.paid_at is not None or self.status.is_paid()

    def needs_payment(self) -> bool:
        return self.status == OrderStatus.PENDING and self.total > ZERO

    def find_item(self, item_id: UUID) -> OrderLineItem | None:
        for item in self.items:
            if item.id == item_id:
                return item
        return None

    def to_summary_dict(self) -> dict[str, Any]:
        """Convert to summary dictionary (for lists)."""
        return {
            "id": str(self.id) if self.id else None,
            "order_number": self.order_number,
            "status": self.status.value,
            "status_label": self.status.label,
            "total": str(self.total),
            "currency": self.currency,
            "item_count": self.item_count,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }

    def to_detail_dict(self) -> dict[str, Any]:
        """Convert to detailed dictionary."""
        return {
            **self.to_summary_dict(),
            "items": [item.to_dict() for item in self.items],
            "subtotal": str(self.subtotal),
            "discount_total": str(self.discount_total),
            "shipping_total": str(self.shipping_total),
            "fee_total": str(self.fee_total),
            "total_tax": str(self.total_tax),
            "total_refunded": str(self.total_refunded),
            "billing_email": self.billing_email,
            "billing_address": str(self.billing_address) if self.billing_address else None,
            "shipping_address": str(self.shipping_address) if self.shipping_address else None,
            "payment_method": self.payment_method,
            "transaction_id": self.transaction_id,
            "paid_at": self.paid_at.isoformat() if self.paid_at else None,
            "completed_at": self.completed_at.isoformat() if self.completed_at else None,
        }
