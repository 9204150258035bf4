"""
Commerce Domain Value Objects

Immutable value objects for the commerce domain.
"""

from storefront.domains.commerce.domain.value_objects.address import Location, OrderAddress
from storefront.domains.commerce.domain.value_objects.money import (
    CURRENCY_SYMBOLS,
    FormattingProfile,
    Money,
    SymbolPosition,
    currency_symbol,
    round_amount,
)
from storefront.domains.commerce.domain.value_objects.order_status import OrderStatus, StatusTransition
from storefront.domains.commerce.domain.value_objects.payment import PaymentRequest, PaymentResult

__all__ = [
    "Money",
    "FormattingProfile",
    "SymbolPosition",
    "CURRENCY_SYMBOLS",
    "currency_symbol",
    "round_amount",
    "OrderStatus",
    "StatusTransition",
    "Location",
    "OrderAddress",
    "PaymentRequest",
    "PaymentResult",
]
