"""
Shared pytest fixtures for all tests.

This module provides the fixed clock, domain services with their default
configuration, and common test data for the commerce suites.
"""

from datetime import UTC, datetime
from decimal import Decimal

import pytest

from storefront.config.settings import reset_settings
from storefront.domains.commerce.domain.entities.tax_rate import TaxRate
from storefront.domains.commerce.domain.services import (
    CartService,
    CheckoutService,
    CouponService,
    InventoryService,
    OrderService,
    PricingService,
    ShippingService,
    TaxService,
)
from storefront.domains.commerce.domain.value_objects.money import FormattingProfile
from storefront.domains.commerce.infrastructure.services import FixedClock
from tests.utils.builders import ProductBuilder, make_address


# ============================================================================
# CLOCK FIXTURES
# ============================================================================


@pytest.fixture
def now() -> datetime:
    """Fixed instant every test computes against."""
    return datetime(2025, 6, 15, 12, 0, tzinfo=UTC)


@pytest.fixture
def clock(now):
    """Clock frozen at ``now``."""
    return FixedClock(now)


# ============================================================================
# DOMAIN SERVICE FIXTURES
# ============================================================================


@pytest.fixture
def profile() -> FormattingProfile:
    """Default USD formatting profile."""
    return FormattingProfile()


@pytest.fixture
def pricing_service(profile) -> PricingService:
    return PricingService(profile)


@pytest.fixture
def inventory_service() -> InventoryService:
    return InventoryService()


@pytest.fixture
def coupon_service(profile) -> CouponService:
    return CouponService(profile=profile)


@pytest.fixture
def cart_service(pricing_service, inventory_service, coupon_service) -> CartService:
    return CartService(pricing=pricing_service, inventory=inventory_service, coupons=coupon_service)


@pytest.fixture
def tax_service(profile) -> TaxService:
    return TaxService(profile=profile)


@pytest.fixture
def shipping_service(profile) -> ShippingService:
    return ShippingService(profile)


@pytest.fixture
def order_service(profile) -> OrderService:
    return OrderService(profile)


@pytest.fixture
def checkout_service(order_service, inventory_service) -> CheckoutService:
    """Checkout service with a predictable order number."""
    return CheckoutService(
        order_service=order_service,
        inventory=inventory_service,
        order_number_generator=lambda at: f"RC-{at:%Y%m%d}-0001",
    )


# ============================================================================
# TEST DATA FIXTURES
# ============================================================================


@pytest.fixture
def product():
    """Published simple product at 100.00 with unmanaged stock."""
    return ProductBuilder().with_name("Espresso Beans").build()


@pytest.fixture
def stocked_product():
    """Published product at 25.00 with 10 units in stock."""
    return ProductBuilder().with_name("Grinder Brush").with_price("25.00").with_stock(10).build()


@pytest.fixture
def billing_address():
    return make_address()


@pytest.fixture
def ca_tax_rate() -> TaxRate:
    """Single 10% standard rate for California."""
    return TaxRate(id="us-ca", country="US", rate=Decimal("10"), name="CA Tax", state="CA")


@pytest.fixture(autouse=True)
def fresh_settings():
    """Drop cached settings so each test reads its own environment."""
    reset_settings()
    yield
    reset_settings()
