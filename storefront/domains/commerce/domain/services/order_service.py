"""
Order Service for Commerce Domain

Order lifecycle after checkout: status transitions, notes, the refund
ledger and totals recomputation. Writes must be serialised per order.
"""

import logging
from datetime import datetime
from decimal import Decimal
from uuid import UUID

from storefront.core.domain import generate_uuid

from ..entities.order import (
    Order,
    OrderFeeLine,
    OrderLineItem,
    OrderNote,
    OrderShippingLine,
    OrderSummary,
    Refund,
    RefundItem,
)
from ..exceptions import OrderError, OrderErrorKind
from ..value_objects.money import ZERO, FormattingProfile
from ..value_objects.order_status import OrderStatus, StatusTransition

logger = logging.getLogger(__name__)


class OrderService:
    """
    Domain service for the order state machine and refunds.

    Example:
        ```python
        service = OrderService()
        service.update_status(order, OrderStatus.PROCESSING, now, note="Payment received")
        refund = service.create_refund(order, Decimal("50.00"), now, reason="Damaged")
        ```
    """

    def __init__(self, profile: FormattingProfile | None = None):
        self.profile = profile or FormattingProfile()

    # Status

    def update_status(
        self,
        order: Order,
        new_status: OrderStatus,
        now: datetime,
        note: str | None = None,
        actor: str | None = None,
    ) -> StatusTransition | None:
        """
        Move ``order`` to ``new_status``.

        Moving to the current status changes nothing and returns None.

        Raises:
            OrderError: If the transition is not allowed
        """
        old_status = order.status
        if new_status == old_status:
            return None

        if not old_status.can_transition_to(new_status):
            raise OrderError(
                OrderErrorKind.INVALID_STATUS_TRANSITION,
                from_status=old_status,
                to_status=new_status,
                order_id=order.id,
            )

        transition = StatusTransition(
            from_status=old_status,
            to_status=new_status,
            timestamp=now,
            note=note,
            actor=actor,
        )
        order.status = new_status
        order.status_history.append(transition)

        if new_status == OrderStatus.PROCESSING and order.paid_at is None:
            order.paid_at = now
        if new_status == OrderStatus.COMPLETED:
            order.completed_at = now

        message = f"Order status changed from {old_status.label} to {new_status.label}."
        if note:
            message = f"{message} {note}"
        self.add_note(order, message, now, added_by=actor or "system")
        order.increment_version()

        logger.info(f"Order {order.order_number}: {old_status.value} -> {new_status.value}")
        return transition

    def add_note(
        self,
        order: Order,
        content: str,
        now: datetime,
        is_customer_note: bool = False,
        added_by: str | None = None,
    ) -> OrderNote:
        note = OrderNote(
            id=generate_uuid(),
            content=content,
            created_at=now,
            is_customer_note=is_customer_note,
            added_by=added_by,
        )
        order.notes.append(note)
        order.touch(now)
        return note

    # Refunds

    def can_refund(self, order: Order) -> bool:
        return order.status.is_refundable() and order.remaining_refundable > ZERO

    def create_refund(
        self,
        order: Order,
        amount: Decimal,
        now: datetime,
        reason: str | None = None,
        actor: str | None = None,
        items: list[RefundItem] | None = None,
    ) -> Refund:
        """
        Append a refund to the ledger. Order totals are left untouched.

        Raises:
            OrderError: CANNOT_REFUND for a non-refundable status or an amount
                above what is left to refund; INVALID_AMOUNT for amount <= 0
        """
        if not order.status.is_refundable():
            raise OrderError(
                OrderErrorKind.CANNOT_REFUND,
                reason=f"Order status {order.status.label} cannot be refunded",
                order_id=order.id,
            )
        if amount <= ZERO:
            raise OrderError(OrderErrorKind.INVALID_AMOUNT, order_id=order.id)

        remaining = order.remaining_refundable
        if amount > remaining:
            raise OrderError(
                OrderErrorKind.CANNOT_REFUND,
                reason=f"Maximum refundable amount is {self.profile.format_decimal(remaining)}",
                order_id=order.id,
            )

        refund = Refund(
            id=generate_uuid(),
            order_id=order.id,
            amount=amount,
            created_at=now,
            reason=reason,
            actor=actor,
            items=tuple(items or ()),
        )
        order.refunds.append(refund)
        self.add_note(order, f"Refunded {self.profile.format_price(amount)}", now, added_by=actor or "system")
        order.increment_version()

        logger.info(f"Order {order.order_number}: refund {amount} ({order.total_refunded} of {order.total})")
        return refund

    # Totals

    def recalculate_totals(self, order: Order, now: datetime) -> None:
        """
        Recompute order totals from its lines.

        With tax-inclusive prices the line taxes are already part of the
        subtotal, so only shipping and fee taxes are added to the total.
        """
        order.subtotal = sum((item.subtotal for item in order.items), ZERO)
        order.cart_tax = sum((item.subtotal_tax for item in order.items), ZERO)
        order.shipping_total = sum((line.total for line in order.shipping_lines), ZERO)
        order.shipping_tax = sum((line.total_tax for line in order.shipping_lines), ZERO)
        order.fee_total = sum((line.total for line in order.fee_lines), ZERO)
        order.fee_tax = sum((line.total_tax for line in order.fee_lines), ZERO)
        order.discount_total = sum((line.discount for line in order.coupon_lines), ZERO)
        order.discount_tax = sum((line.discount_tax for line in order.coupon_lines), ZERO)

        order.total_tax = order.cart_tax + order.shipping_tax + order.fee_tax - order.discount_tax
        added_tax = order.total_tax - order.cart_tax if order.prices_include_tax else order.total_tax
        order.total = order.subtotal + order.shipping_total + order.fee_total + added_tax - order.discount_total
        order.touch(now)

    # Editing

    def _ensure_editable(self, order: Order) -> None:
        if not order.is_editable():
            raise OrderError(OrderErrorKind.ORDER_LOCKED, order_id=order.id)

    def add_item(self, order: Order, item: OrderLineItem, now: datetime) -> OrderLineItem:
        self._ensure_editable(order)
        order.items.append(item)
        self.recalculate_totals(order, now)
        return item

    def remove_item(self, order: Order, item_id: UUID, now: datetime) -> OrderLineItem:
        self._ensure_editable(order)
        item = order.find_item(item_id)
        if item is None:
            raise OrderError(OrderErrorKind.NOT_FOUND, reason=f"Order item {item_id} not found", order_id=order.id)
        order.items.remove(item)
        self.recalculate_totals(order, now)
        return item

    def update_item_quantity(self, order: Order, item_id: UUID, quantity: int, now: datetime) -> OrderLineItem | None:
        """
        Change a line's quantity, scaling its taxes and its share of coupon
        discounts; zero or less removes it.
        """
        if quantity <= 0:
            self.remove_item(order, item_id, now)
            return None

        self._ensure_editable(order)
        item = order.find_item(item_id)
        if item is None:
            raise OrderError(OrderErrorKind.NOT_FOUND, reason=f"Order item {item_id} not found", order_id=order.id)

        previous = item.quantity
        discount = item.subtotal - item.total
        item.quantity = quantity
        item.subtotal = item.unit_price * quantity
        if previous > 0:
            discount = self.profile.round(discount * quantity / previous)
            item.taxes = {rate_id: self.profile.round(tax * quantity / previous) for rate_id, tax in item.taxes.items()}
            item.subtotal_tax = self.profile.round(item.subtotal_tax * quantity / previous)
            item.total_tax = item.subtotal_tax
        item.total = item.subtotal - min(discount, item.subtotal)
        self.recalculate_totals(order, now)
        return item

    def add_shipping_line(self, order: Order, line: OrderShippingLine, now: datetime) -> OrderShippingLine:
        self._ensure_editable(order)
        order.shipping_lines.append(line)
        self.recalculate_totals(order, now)
        return line

    def add_fee_line(self, order: Order, line: OrderFeeLine, now: datetime) -> OrderFeeLine:
        self._ensure_editable(order)
        order.fee_lines.append(line)
        self.recalculate_totals(order, now)
        return line

    # Display

    def summary(self, order: Order) -> OrderSummary:
        return OrderSummary(
            order_number=order.order_number,
            status=order.status,
            status_label=order.status.label,
            item_count=order.item_count,
            total=order.total,
            formatted_total=self.profile.format_price(order.total),
            created_at=order.created_at,
        )
