"""
Checkout Service for Commerce Domain

Validates a checkout request against a cart, collecting every problem,
and turns a valid cart into an immutable order snapshot.
"""

import logging
import secrets
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime
from uuid import UUID

from storefront.core.domain import generate_uuid

from ..entities.cart import Cart
from ..entities.order import (
    Order,
    OrderCouponLine,
    OrderFeeLine,
    OrderLineItem,
    OrderShippingLine,
    OrderTaxLine,
)
from ..entities.product import Product, ProductVariation
from ..exceptions import CheckoutError, CheckoutErrorKind, OrderError, OrderErrorKind
from ..value_objects.address import OrderAddress
from ..value_objects.order_status import OrderStatus
from ..value_objects.payment import PaymentResult
from .inventory_service import InventoryService
from .order_service import OrderService

logger = logging.getLogger(__name__)

ORDER_NUMBER_PREFIX = "RC"
MIN_EMAIL_LENGTH = 5

OrderNumberGenerator = Callable[[datetime], str]


def random_order_number(now: datetime) -> str:
    """``RC-YYYYMMDD-NNNN`` with a random four-digit suffix."""
    return f"{ORDER_NUMBER_PREFIX}-{now:%Y%m%d}-{secrets.randbelow(10000):04d}"


def is_valid_email(email: str) -> bool:
    email = email.strip()
    return "@" in email and "." in email and len(email) >= MIN_EMAIL_LENGTH


@dataclass(frozen=True)
class CheckoutConfig:
    currency: str = "USD"
    prices_include_tax: bool = False
    terms_page_id: str | None = None

    @property
    def requires_terms(self) -> bool:
        return self.terms_page_id is not None


@dataclass
class CheckoutRequest:
    billing_email: str
    billing_address: OrderAddress
    payment_method: str
    payment_method_title: str | None = None
    shipping_address: OrderAddress | None = None
    ship_to_different_address: bool = False
    customer_id: UUID | None = None
    customer_note: str | None = None
    accept_terms: bool = False


@dataclass
class CheckoutValidation:
    is_valid: bool = True
    errors: list[CheckoutError] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    def add(self, error: CheckoutError) -> None:
        self.errors.append(error)
        self.is_valid = False

    def kinds(self) -> list[CheckoutErrorKind]:
        return [error.kind for error in self.errors]


class CheckoutService:
    """
    Domain service for checkout validation and order creation.

    Example:
        ```python
        service = CheckoutService(CheckoutConfig(currency="EUR"))
        validation = service.validate(cart, request, now)
        if validation.is_valid:
            order = service.create_order(cart, request, now, tax_lines)
        ```
    """

    def __init__(
        self,
        config: CheckoutConfig | None = None,
        order_service: OrderService | None = None,
        inventory: InventoryService | None = None,
        order_number_generator: OrderNumberGenerator | None = None,
    ):
        self.config = config or CheckoutConfig()
        self.order_service = order_service or OrderService()
        self.inventory = inventory or InventoryService()
        self.order_number_generator = order_number_generator or random_order_number

    def validate(
        self,
        cart: Cart,
        request: CheckoutRequest,
        now: datetime,
        products: dict[UUID, Product] | None = None,
        variations: dict[UUID, ProductVariation] | None = None,
    ) -> CheckoutValidation:
        """
        Run every checkout rule and collect all failures.

        Stock is re-checked only when the current catalog entries are given.
        """
        validation = CheckoutValidation()

        if cart.is_empty():
            validation.add(CheckoutError(CheckoutErrorKind.CART_EMPTY))

        if not is_valid_email(request.billing_email):
            validation.add(CheckoutError(CheckoutErrorKind.INVALID_EMAIL))

        billing_problem = request.billing_address.missing_field_message()
        if billing_problem:
            validation.add(CheckoutError(CheckoutErrorKind.INVALID_BILLING_ADDRESS, reason=billing_problem))

        if request.ship_to_different_address:
            if request.shipping_address is None:
                validation.add(
                    CheckoutError(CheckoutErrorKind.INVALID_SHIPPING_ADDRESS, reason="Shipping address required")
                )
            else:
                shipping_problem = request.shipping_address.missing_field_message()
                if shipping_problem:
                    validation.add(
                        CheckoutError(CheckoutErrorKind.INVALID_SHIPPING_ADDRESS, reason=shipping_problem)
                    )

        if cart.needs_shipping() and cart.shipping is None:
            validation.add(CheckoutError(CheckoutErrorKind.NO_SHIPPING_METHOD))

        if not request.payment_method.strip():
            validation.add(CheckoutError(CheckoutErrorKind.NO_PAYMENT_METHOD))

        if self.config.requires_terms and not request.accept_terms:
            validation.add(CheckoutError(CheckoutErrorKind.TERMS_NOT_ACCEPTED))

        if products is not None:
            for problem in self.inventory.validate_cart(cart, products, variations or {}):
                validation.add(
                    CheckoutError(CheckoutErrorKind.STOCK_ERROR, reason=problem.message, product_id=problem.product_id)
                )

        if cart.is_expired(now):
            validation.warnings.append("Cart has expired")

        if not validation.is_valid:
            logger.warning(f"Checkout rejected for cart {cart.id}: {[kind.value for kind in validation.kinds()]}")
        return validation

    def create_order(
        self,
        cart: Cart,
        request: CheckoutRequest,
        now: datetime,
        tax_lines: list[OrderTaxLine] | None = None,
    ) -> Order:
        """
        Snapshot ``cart`` into a pending order and compute its totals.

        The cart is expected to be validated and recalculated (taxes included).
        """
        order_id = generate_uuid()
        shipping_address = request.billing_address
        if request.ship_to_different_address and request.shipping_address is not None:
            shipping_address = request.shipping_address

        items = [
            OrderLineItem(
                id=generate_uuid(),
                product_id=item.product_id,
                variation_id=item.variation_id,
                product_name=item.product_name,
                sku=item.sku,
                quantity=item.quantity,
                unit_price=item.unit_price,
                tax_class=item.tax_class,
                subtotal=item.subtotal,
                subtotal_tax=item.subtotal_tax,
                total=item.total,
                total_tax=item.total_tax,
                taxes=dict(item.taxes),
                variation_attributes=dict(item.variation_attributes),
                meta=dict(item.meta),
            )
            for item in cart.items
        ]

        shipping_lines = []
        if cart.shipping is not None:
            shipping_lines.append(
                OrderShippingLine(
                    id=generate_uuid(),
                    method_id=cart.shipping.method_id,
                    method_title=cart.shipping.label,
                    instance_id=cart.shipping.instance_id,
                    total=cart.shipping.cost,
                    total_tax=cart.shipping.tax,
                    taxes=dict(cart.shipping.taxes),
                )
            )

        fee_lines = [
            OrderFeeLine(
                id=generate_uuid(),
                name=fee.name,
                total=fee.amount,
                tax_class=fee.tax_class,
                taxable=fee.taxable,
                total_tax=fee.tax,
            )
            for fee in cart.fees
        ]

        coupon_lines = [
            OrderCouponLine(
                code=applied.code,
                discount=applied.discount,
                discount_type=applied.discount_type,
                discount_tax=applied.discount_tax,
                coupon_id=applied.coupon_id,
            )
            for applied in cart.coupons
        ]

        order = Order(
            id=order_id,
            created_at=now,
            order_number=self.order_number_generator(now),
            customer_id=request.customer_id or cart.customer_id,
            status=OrderStatus.PENDING,
            currency=self.config.currency,
            prices_include_tax=self.config.prices_include_tax,
            billing_email=request.billing_email.strip(),
            billing_address=request.billing_address,
            shipping_address=shipping_address,
            customer_note=request.customer_note,
            payment_method=request.payment_method,
            payment_method_title=request.payment_method_title or request.payment_method,
            items=items,
            shipping_lines=shipping_lines,
            fee_lines=fee_lines,
            tax_lines=list(tax_lines or []),
            coupon_lines=coupon_lines,
        )
        self.order_service.recalculate_totals(order, now)

        logger.info(f"Order {order.order_number} created from cart {cart.id}: total {order.total}")
        return order

    def process_payment(self, order: Order, result: PaymentResult, now: datetime) -> Order:
        """
        Apply a gateway result to ``order``.

        Success stores the transaction id and moves the order to processing;
        a failure moves a pending order to failed. A result that still needs
        customer action leaves the order as it is.

        Raises:
            OrderError: ALREADY_PAID when the order was paid before
        """
        if order.is_paid():
            raise OrderError(OrderErrorKind.ALREADY_PAID, order_id=order.id)

        if result.success:
            order.transaction_id = result.transaction_id
            self.order_service.update_status(
                order, OrderStatus.PROCESSING, now, note=f"Payment received ({result.transaction_id})"
            )
        elif result.requires_action:
            self.order_service.add_note(order, "Awaiting customer payment action", now, added_by="system")
        elif order.status == OrderStatus.PENDING:
            self.order_service.update_status(order, OrderStatus.FAILED, now, note=result.error)
        return order
