"""
Commerce Use Cases

Business use cases for the commerce domain.
Each use case represents a single business operation.
"""

from .add_to_cart import AddToCartUseCase
from .apply_coupon import ApplyCouponUseCase
from .calculate_cart_totals import CalculateCartTotalsUseCase
from .calculate_shipping import CalculateShippingUseCase
from .place_order import PlaceOrderUseCase
from .process_payment import ProcessPaymentUseCase
from .refund_order import RefundOrderUseCase
from .update_order_status import UpdateOrderStatusUseCase

__all__ = [
    # Cart
    "AddToCartUseCase",
    "ApplyCouponUseCase",
    "CalculateCartTotalsUseCase",
    "CalculateShippingUseCase",
    # Checkout
    "PlaceOrderUseCase",
    "ProcessPaymentUseCase",
    # Orders
    "UpdateOrderStatusUseCase",
    "RefundOrderUseCase",
]
