"""
Commerce Domain Services

Domain services that encapsulate business logic spanning several
entities: pricing, stock, coupons, tax, shipping, carts, checkout and
the order lifecycle.
"""

from storefront.domains.commerce.domain.services.cart_service import CartConfig, CartService
from storefront.domains.commerce.domain.services.checkout_service import (
    CheckoutConfig,
    CheckoutRequest,
    CheckoutService,
    CheckoutValidation,
    is_valid_email,
    random_order_number,
)
from storefront.domains.commerce.domain.services.coupon_service import (
    CouponConfig,
    CouponContext,
    CouponService,
    email_matches,
    format_percent,
)
from storefront.domains.commerce.domain.services.inventory_service import (
    InventoryCheckResult,
    InventoryConfig,
    InventoryService,
    StockChange,
    StockChangeType,
    StockLine,
    StockReservation,
)
from storefront.domains.commerce.domain.services.order_service import OrderService
from storefront.domains.commerce.domain.services.pricing_service import PricingService
from storefront.domains.commerce.domain.services.shipping_service import ShippingCalculationResult, ShippingService
from storefront.domains.commerce.domain.services.tax_service import (
    CartTaxResult,
    TaxBasis,
    TaxCalculationResult,
    TaxConfig,
    TaxService,
)

__all__ = [
    # Pricing
    "PricingService",
    # Inventory
    "InventoryService",
    "InventoryConfig",
    "InventoryCheckResult",
    "StockReservation",
    "StockLine",
    "StockChange",
    "StockChangeType",
    # Coupons
    "CouponService",
    "CouponConfig",
    "CouponContext",
    "email_matches",
    "format_percent",
    # Tax
    "TaxService",
    "TaxConfig",
    "TaxBasis",
    "TaxCalculationResult",
    "CartTaxResult",
    # Shipping
    "ShippingService",
    "ShippingCalculationResult",
    # Cart
    "CartService",
    "CartConfig",
    # Checkout
    "CheckoutService",
    "CheckoutConfig",
    "CheckoutRequest",
    "CheckoutValidation",
    "is_valid_email",
    "random_order_number",
    # Orders
    "OrderService",
]
