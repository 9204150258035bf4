"""
Commerce Application Ports

Interface definitions (ports) for the collaborators of the commerce core.
Uses Protocol for structural typing.
"""

from datetime import datetime
from typing import Protocol, runtime_checkable
from uuid import UUID

from storefront.domains.commerce.domain.entities.cart import Cart
from storefront.domains.commerce.domain.entities.coupon import Coupon, CouponUsage
from storefront.domains.commerce.domain.entities.order import Order
from storefront.domains.commerce.domain.entities.product import Product, ProductVariation
from storefront.domains.commerce.domain.entities.shipping import ShippingClass, ShippingZone
from storefront.domains.commerce.domain.entities.tax_rate import TaxRate
from storefront.domains.commerce.domain.services.inventory_service import StockLine, StockReservation
from storefront.domains.commerce.domain.value_objects.payment import PaymentRequest, PaymentResult


@runtime_checkable
class IProductRepository(Protocol):
    """
    Interface for product repository.

    Defines the contract for catalog data access.
    """

    async def get(self, product_id: UUID) -> Product | None:
        """Get product by ID"""
        ...

    async def get_variation(self, variation_id: UUID) -> ProductVariation | None:
        """Get variation by ID"""
        ...


@runtime_checkable
class ICouponRepository(Protocol):
    """
    Interface for coupon repository.

    Codes are looked up case-insensitively.
    """

    async def find_by_code(self, code: str) -> Coupon | None:
        """Get coupon by code"""
        ...

    async def save(self, coupon: Coupon) -> Coupon:
        """Save a coupon"""
        ...

    async def record_usage(self, usage: CouponUsage) -> None:
        """Store one redemption"""
        ...

    async def count_customer_usage(self, coupon_id: UUID, customer_id: UUID) -> int:
        """Count redemptions of a coupon by one customer"""
        ...


@runtime_checkable
class IShippingRepository(Protocol):
    """Interface for shipping configuration."""

    async def zones(self) -> list[ShippingZone]:
        """Get all shipping zones"""
        ...

    async def shipping_classes(self) -> dict[str, ShippingClass]:
        """Get shipping classes by slug"""
        ...


@runtime_checkable
class ITaxRepository(Protocol):
    """Interface for tax-rate table."""

    async def rates(self) -> list[TaxRate]:
        """Get all tax rates"""
        ...


@runtime_checkable
class IInventoryReserver(Protocol):
    """
    Interface for systems that persist stock reservations.

    The core only checks availability; holding stock is this port's job.
    """

    async def try_reserve(self, order_id: UUID, lines: list[StockLine]) -> StockReservation:
        """Reserve stock for every line or none"""
        ...

    async def release(self, order_id: UUID) -> None:
        """Release the reservation held for an order"""
        ...


@runtime_checkable
class IPaymentGateway(Protocol):
    """Interface for payment gateways."""

    async def process(self, request: PaymentRequest) -> PaymentResult:
        """Charge a payment"""
        ...


@runtime_checkable
class IClock(Protocol):
    """Source of the current time for use cases."""

    def now(self) -> datetime:
        """Current timezone-aware timestamp"""
        ...


@runtime_checkable
class ICartRepository(Protocol):
    """Interface for cart repository."""

    async def get(self, cart_id: UUID) -> Cart | None:
        """Get cart by ID"""
        ...

    async def save(self, cart: Cart) -> Cart:
        """Save a cart"""
        ...


@runtime_checkable
class IOrderRepository(Protocol):
    """Interface for order repository."""

    async def get(self, order_id: UUID) -> Order | None:
        """Get order by ID"""
        ...

    async def get_by_number(self, order_number: str) -> Order | None:
        """Get order by order number"""
        ...

    async def save(self, order: Order) -> Order:
        """Save an order"""
        ...


__all__ = [
    "IProductRepository",
    "ICouponRepository",
    "IShippingRepository",
    "ITaxRepository",
    "IInventoryReserver",
    "IPaymentGateway",
    "IClock",
    "ICartRepository",
    "IOrderRepository",
]
