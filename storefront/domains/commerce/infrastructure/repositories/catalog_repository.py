"""
Catalog Repository Implementations

In-memory implementations of the read-mostly ports: products, coupons,
shipping configuration and the tax-rate table.
"""

import copy
from uuid import UUID

from storefront.domains.commerce.domain.entities.coupon import Coupon, CouponUsage, normalize_code
from storefront.domains.commerce.domain.entities.product import Product, ProductVariation
from storefront.domains.commerce.domain.entities.shipping import ShippingClass, ShippingZone
from storefront.domains.commerce.domain.entities.tax_rate import TaxRate


class InMemoryProductRepository:
    """Products and variations keyed by id."""

    def __init__(self, products: list[Product] | None = None, variations: list[ProductVariation] | None = None):
        self._products = {product.id: product for product in products or []}
        self._variations = {variation.id: variation for variation in variations or []}

    async def get(self, product_id: UUID) -> Product | None:
        """Get product by ID."""
        return self._products.get(product_id)

    async def get_variation(self, variation_id: UUID) -> ProductVariation | None:
        """Get variation by ID."""
        return self._variations.get(variation_id)

    async def save(self, product: Product) -> Product:
        """Save a product."""
        self._products[product.id] = product
        return product

    async def save_variation(self, variation: ProductVariation) -> ProductVariation:
        """Save a variation."""
        self._variations[variation.id] = variation
        return variation


class InMemoryCouponRepository:
    """Coupons keyed by normalised code, with their redemption log."""

    def __init__(self, coupons: list[Coupon] | None = None):
        self._coupons: dict[str, Coupon] = {}
        self._usages: list[CouponUsage] = []
        for coupon in coupons or []:
            self._coupons[coupon.normalized_code] = copy.deepcopy(coupon)

    async def find_by_code(self, code: str) -> Coupon | None:
        """Get coupon by code, ignoring case and surrounding spaces."""
        coupon = self._coupons.get(normalize_code(code))
        return copy.deepcopy(coupon) if coupon is not None else None

    async def save(self, coupon: Coupon) -> Coupon:
        """Save a coupon."""
        self._coupons[coupon.normalized_code] = copy.deepcopy(coupon)
        return coupon

    async def record_usage(self, usage: CouponUsage) -> None:
        """Store one redemption."""
        self._usages.append(usage)

    async def count_customer_usage(self, coupon_id: UUID, customer_id: UUID) -> int:
        """Count redemptions of a coupon by one customer."""
        return sum(1 for usage in self._usages if usage.coupon_id == coupon_id and usage.customer_id == customer_id)

    @property
    def usages(self) -> list[CouponUsage]:
        return list(self._usages)


class InMemoryShippingRepository:
    """Static shipping zones and classes."""

    def __init__(self, zones: list[ShippingZone] | None = None, shipping_classes: list[ShippingClass] | None = None):
        self._zones = list(zones or [])
        self._classes = {shipping_class.slug: shipping_class for shipping_class in shipping_classes or []}

    async def zones(self) -> list[ShippingZone]:
        """Get all shipping zones."""
        return list(self._zones)

    async def shipping_classes(self) -> dict[str, ShippingClass]:
        """Get shipping classes by slug."""
        return dict(self._classes)


class InMemoryTaxRepository:
    """Static tax-rate table."""

    def __init__(self, rates: list[TaxRate] | None = None):
        self._rates = list(rates or [])

    async def rates(self) -> list[TaxRate]:
        """Get all tax rates."""
        return list(self._rates)
