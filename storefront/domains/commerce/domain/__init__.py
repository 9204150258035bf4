"""
Commerce Domain Layer

Domain-Driven Design implementation for the storefront commerce context.

This module contains:
- Entities: Business objects with identity (Product, Cart, Coupon, Order)
- Value Objects: Immutable domain primitives (Money, Location, OrderStatus)
- Domain Services: Pure business logic (pricing, tax, shipping, checkout)
- Exceptions: One error kind per business failure
"""

from storefront.domains.commerce.domain.entities import (
    Cart,
    CartItem,
    Coupon,
    Order,
    Product,
    ProductVariation,
    ShippingZone,
    TaxRate,
)
from storefront.domains.commerce.domain.exceptions import (
    CartError,
    CartErrorKind,
    CheckoutError,
    CheckoutErrorKind,
    CouponError,
    CouponErrorKind,
    OrderError,
    OrderErrorKind,
    ShippingError,
    ShippingErrorKind,
)
from storefront.domains.commerce.domain.value_objects import (
    FormattingProfile,
    Location,
    Money,
    OrderAddress,
    OrderStatus,
)

__all__ = [
    # Entities
    "Product",
    "ProductVariation",
    "Cart",
    "CartItem",
    "Coupon",
    "TaxRate",
    "ShippingZone",
    "Order",
    # Value Objects
    "Money",
    "FormattingProfile",
    "Location",
    "OrderAddress",
    "OrderStatus",
    # Exceptions
    "CartError",
    "CartErrorKind",
    "CouponError",
    "CouponErrorKind",
    "CheckoutError",
    "CheckoutErrorKind",
    "ShippingError",
    "ShippingErrorKind",
    "OrderError",
    "OrderErrorKind",
]
