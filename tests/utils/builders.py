"""
Test data builders using the Builder pattern.

Provides fluent interfaces for constructing test objects with sensible defaults.
"""

from datetime import datetime
from decimal import Decimal
from uuid import UUID

from storefront.core.domain import generate_uuid
from storefront.domains.commerce.domain.entities.coupon import Coupon, DiscountType
from storefront.domains.commerce.domain.entities.product import (
    BackorderPolicy,
    PriceTier,
    Product,
    ProductStatus,
    ProductVariation,
    StockStatus,
    TaxStatus,
)
from storefront.domains.commerce.domain.entities.shipping import (
    LocationType,
    ShippingMethod,
    ShippingMethodSettings,
    ShippingMethodType,
    ShippingZone,
    ZoneLocation,
)
from storefront.domains.commerce.domain.value_objects.address import OrderAddress


class ProductBuilder:
    """Builder for creating product test data."""

    def __init__(self):
        self._data = {
            "id": generate_uuid(),
            "name": "Test Product",
            "sku": "TEST-001",
            "status": ProductStatus.PUBLISHED,
            "regular_price": Decimal("100.00"),
            "manage_stock": False,
        }

    def with_id(self, product_id: UUID) -> "ProductBuilder":
        """Set product ID."""
        self._data["id"] = product_id
        return self

    def with_name(self, name: str) -> "ProductBuilder":
        """Set product name."""
        self._data["name"] = name
        return self

    def with_price(self, price: str) -> "ProductBuilder":
        """Set regular price."""
        self._data["regular_price"] = Decimal(price)
        return self

    def with_sale(self, price: str, starts: datetime | None = None, ends: datetime | None = None) -> "ProductBuilder":
        """Set sale price and its window."""
        self._data["sale_price"] = Decimal(price)
        self._data["sale_from"] = starts
        self._data["sale_to"] = ends
        return self

    def with_stock(self, quantity: int, backorders: BackorderPolicy = BackorderPolicy.NO) -> "ProductBuilder":
        """Manage stock with the given quantity."""
        self._data["manage_stock"] = True
        self._data["stock_quantity"] = quantity
        self._data["backorders"] = backorders
        return self

    def out_of_stock(self) -> "ProductBuilder":
        """Unmanaged product flagged out of stock."""
        self._data["stock_status"] = StockStatus.OUT_OF_STOCK
        return self

    def with_tiers(self, *tiers: tuple[int, str]) -> "ProductBuilder":
        """Set quantity price tiers as (min_quantity, price) pairs."""
        self._data["price_tiers"] = [PriceTier(minimum, Decimal(price)) for minimum, price in tiers]
        return self

    def with_categories(self, *category_ids: UUID) -> "ProductBuilder":
        """Set category IDs."""
        self._data["category_ids"] = list(category_ids)
        return self

    def with_shipping_class(self, slug: str) -> "ProductBuilder":
        """Set shipping class slug."""
        self._data["shipping_class"] = slug
        return self

    def with_weight(self, weight: str) -> "ProductBuilder":
        """Set weight."""
        self._data["weight"] = Decimal(weight)
        return self

    def with_tax_status(self, tax_status: TaxStatus) -> "ProductBuilder":
        """Set tax status."""
        self._data["tax_status"] = tax_status
        return self

    def sold_individually(self) -> "ProductBuilder":
        """Limit the product to one unit per cart."""
        self._data["sold_individually"] = True
        return self

    def virtual(self) -> "ProductBuilder":
        """Mark product as not needing shipping."""
        self._data["is_virtual"] = True
        return self

    def draft(self) -> "ProductBuilder":
        """Leave the product unpublished."""
        self._data["status"] = ProductStatus.DRAFT
        return self

    def build(self) -> Product:
        """Build product."""
        return Product(**self._data)


class VariationBuilder:
    """Builder for creating product variation test data."""

    def __init__(self, product: Product):
        self._data = {
            "id": generate_uuid(),
            "product_id": product.id,
            "sku": f"{product.sku}-V",
            "attributes": {"size": "M"},
        }

    def with_price(self, price: str) -> "VariationBuilder":
        """Set own regular price."""
        self._data["regular_price"] = Decimal(price)
        return self

    def with_stock(self, quantity: int) -> "VariationBuilder":
        """Manage the variation's own stock."""
        self._data["manage_stock"] = True
        self._data["stock_quantity"] = quantity
        return self

    def with_attributes(self, **attributes: str) -> "VariationBuilder":
        """Set variation attributes."""
        self._data["attributes"] = dict(attributes)
        return self

    def build(self) -> ProductVariation:
        """Build variation."""
        return ProductVariation(**self._data)


class CouponBuilder:
    """Builder for creating coupon test data."""

    def __init__(self, code: str = "SAVE10"):
        self._data = {
            "id": generate_uuid(),
            "code": code,
            "discount_type": DiscountType.PERCENT,
            "amount": Decimal("10"),
        }

    def percent(self, amount: str) -> "CouponBuilder":
        """Percentage off the cart."""
        self._data["discount_type"] = DiscountType.PERCENT
        self._data["amount"] = Decimal(amount)
        return self

    def fixed_cart(self, amount: str) -> "CouponBuilder":
        """Fixed amount off the cart."""
        self._data["discount_type"] = DiscountType.FIXED_CART
        self._data["amount"] = Decimal(amount)
        return self

    def fixed_product(self, amount: str) -> "CouponBuilder":
        """Fixed amount off every applicable unit."""
        self._data["discount_type"] = DiscountType.FIXED_PRODUCT
        self._data["amount"] = Decimal(amount)
        return self

    def percent_product(self, amount: str) -> "CouponBuilder":
        """Percentage off applicable lines."""
        self._data["discount_type"] = DiscountType.PERCENT_PRODUCT
        self._data["amount"] = Decimal(amount)
        return self

    def with_fields(self, **fields) -> "CouponBuilder":
        """Set any other coupon field."""
        self._data.update(fields)
        return self

    def build(self) -> Coupon:
        """Build coupon."""
        return Coupon(**self._data)


class ZoneBuilder:
    """Builder for creating shipping zone test data."""

    def __init__(self, name: str = "Zone"):
        self._data = {"id": generate_uuid(), "name": name, "zone_order": 0, "locations": [], "methods": []}

    def with_order(self, zone_order: int) -> "ZoneBuilder":
        """Set zone order."""
        self._data["zone_order"] = zone_order
        return self

    def covering(self, code: str, location_type: LocationType) -> "ZoneBuilder":
        """Add a location."""
        self._data["locations"].append(ZoneLocation(code, location_type))
        return self

    def with_flat_rate(self, cost: str, instance_id: str = "1", **settings) -> "ZoneBuilder":
        """Add a flat-rate method."""
        self._data["methods"].append(
            ShippingMethod(
                instance_id=instance_id,
                method_type=ShippingMethodType.FLAT_RATE,
                settings=ShippingMethodSettings(cost=Decimal(cost), **settings),
                method_order=len(self._data["methods"]),
            )
        )
        return self

    def with_free_shipping(self, min_amount: str | None = None, instance_id: str = "2", **settings) -> "ZoneBuilder":
        """Add a free-shipping method."""
        self._data["methods"].append(
            ShippingMethod(
                instance_id=instance_id,
                method_type=ShippingMethodType.FREE_SHIPPING,
                settings=ShippingMethodSettings(
                    min_amount=Decimal(min_amount) if min_amount is not None else None, **settings
                ),
                method_order=len(self._data["methods"]),
            )
        )
        return self

    def with_local_pickup(self, cost: str = "0", instance_id: str = "3", pickup_location: str | None = None) -> "ZoneBuilder":
        """Add a local-pickup method."""
        self._data["methods"].append(
            ShippingMethod(
                instance_id=instance_id,
                method_type=ShippingMethodType.LOCAL_PICKUP,
                settings=ShippingMethodSettings(cost=Decimal(cost), pickup_location=pickup_location),
                method_order=len(self._data["methods"]),
            )
        )
        return self

    def build(self) -> ShippingZone:
        """Build zone."""
        return ShippingZone(**self._data)


def make_address(**overrides) -> OrderAddress:
    """Complete US address; override any field."""
    fields = {
        "first_name": "Ana",
        "last_name": "Silva",
        "address_1": "1 Main St",
        "city": "Los Angeles",
        "state": "CA",
        "postcode": "90210",
        "country": "US",
    }
    fields.update(overrides)
    return OrderAddress(**fields)
