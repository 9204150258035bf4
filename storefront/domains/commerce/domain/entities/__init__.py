"""
Commerce Domain Entities
"""

from storefront.domains.commerce.domain.entities.cart import (
    AppliedCoupon,
    Cart,
    CartFee,
    CartItem,
    CartTotals,
    SelectedShipping,
    canonical_json,
    compute_cart_hash,
    compute_item_key,
)
from storefront.domains.commerce.domain.entities.coupon import (
    Coupon,
    CouponScope,
    CouponStatus,
    CouponUsage,
    DiscountType,
    normalize_code,
)
from storefront.domains.commerce.domain.entities.order import (
    Order,
    OrderCouponLine,
    OrderFeeLine,
    OrderLineItem,
    OrderNote,
    OrderShippingLine,
    OrderSummary,
    OrderTaxLine,
    Refund,
    RefundItem,
)
from storefront.domains.commerce.domain.entities.product import (
    BackorderPolicy,
    PriceTier,
    Product,
    ProductStatus,
    ProductType,
    ProductVariation,
    StockStatus,
    TaxStatus,
)
from storefront.domains.commerce.domain.entities.shipping import (
    CONTINENTS,
    LocationType,
    PackageItem,
    ShippingCalcType,
    ShippingClass,
    ShippingMethod,
    ShippingMethodInfo,
    ShippingMethodSettings,
    ShippingMethodType,
    ShippingPackage,
    ShippingRate,
    ShippingTaxStatus,
    ShippingZone,
    ZoneLocation,
)
from storefront.domains.commerce.domain.entities.tax_rate import (
    CalculatedTax,
    TaxClass,
    TaxRate,
    postcode_matches,
)

__all__ = [
    # Catalog
    "Product",
    "ProductVariation",
    "ProductType",
    "ProductStatus",
    "StockStatus",
    "BackorderPolicy",
    "TaxStatus",
    "PriceTier",
    # Cart
    "Cart",
    "CartItem",
    "CartFee",
    "CartTotals",
    "AppliedCoupon",
    "SelectedShipping",
    "canonical_json",
    "compute_cart_hash",
    "compute_item_key",
    # Coupon
    "Coupon",
    "CouponScope",
    "CouponStatus",
    "CouponUsage",
    "DiscountType",
    "normalize_code",
    # Tax
    "TaxRate",
    "TaxClass",
    "CalculatedTax",
    "postcode_matches",
    # Shipping
    "CONTINENTS",
    "ShippingZone",
    "ZoneLocation",
    "LocationType",
    "ShippingMethod",
    "ShippingMethodType",
    "ShippingMethodSettings",
    "ShippingCalcType",
    "ShippingTaxStatus",
    "ShippingClass",
    "ShippingPackage",
    "PackageItem",
    "ShippingRate",
    "ShippingMethodInfo",
    # Order
    "Order",
    "OrderLineItem",
    "OrderShippingLine",
    "OrderFeeLine",
    "OrderTaxLine",
    "OrderCouponLine",
    "OrderNote",
    "OrderSummary",
    "Refund",
    "RefundItem",
]
