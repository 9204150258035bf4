"""
Tests for ShippingService.

Tests:
- Zone matching by specificity and zone order
- Flat rate, free shipping and local pickup pricing
- Shipping-class surcharges
- Error conditions
"""

from decimal import Decimal

import pytest

from storefront.domains.commerce.domain.entities.shipping import (
    LocationType,
    ShippingCalcType,
    ShippingClass,
    ShippingMethodSettings,
    ZoneLocation,
)
from storefront.domains.commerce.domain.exceptions import ShippingError, ShippingErrorKind
from storefront.domains.commerce.domain.services import CouponContext
from storefront.domains.commerce.domain.value_objects.address import Location
from tests.utils.builders import CouponBuilder, ProductBuilder, ZoneBuilder

BEVERLY_HILLS = Location(country="US", state="CA", postcode="90210")


@pytest.fixture
def zones():
    """Postcode, state, country and rest-of-world zones."""
    return [
        ZoneBuilder("Everywhere").with_order(9).with_flat_rate("30.00").build(),
        ZoneBuilder("United States").with_order(3).covering("US", LocationType.COUNTRY).with_flat_rate("10.00").build(),
        ZoneBuilder("California").with_order(2).covering("US:CA", LocationType.STATE).with_flat_rate("8.00").build(),
        ZoneBuilder("LA area").with_order(1).covering("90*", LocationType.POSTCODE).with_flat_rate("5.00").build(),
    ]


def _cart(cart_service, now, *prices, quantity=1):
    cart = cart_service.create_cart(now)
    for price in prices:
        cart_service.add_item(cart, ProductBuilder().with_price(price).build(), quantity, now)
    cart_service.recalculate(cart)
    return cart


# ============================================================================
# ZONES
# ============================================================================


@pytest.mark.unit
class TestZoneMatching:
    """Most specific zone wins."""

    def test_postcode_beats_state_and_country(self, shipping_service, zones):
        assert shipping_service.find_zone(BEVERLY_HILLS, zones).name == "LA area"

    def test_state_zone(self, shipping_service, zones):
        assert shipping_service.find_zone(Location(country="US", state="CA", postcode="94105"), zones).name == "California"

    def test_country_zone(self, shipping_service, zones):
        assert shipping_service.find_zone(Location(country="US", state="NY", postcode="10001"), zones).name == "United States"

    def test_rest_of_world(self, shipping_service, zones):
        assert shipping_service.find_zone(Location(country="FR"), zones).name == "Everywhere"

    def test_no_zone(self, shipping_service):
        us_only = [ZoneBuilder("US").covering("US", LocationType.COUNTRY).build()]

        assert shipping_service.find_zone(Location(country="FR"), us_only) is None

    def test_zone_order_breaks_ties(self, shipping_service):
        zones = [
            ZoneBuilder("Second").with_order(2).covering("US", LocationType.COUNTRY).build(),
            ZoneBuilder("First").with_order(1).covering("US", LocationType.COUNTRY).build(),
        ]

        assert shipping_service.find_zone(Location(country="US"), zones).name == "First"

    def test_continent(self, shipping_service):
        zones = [ZoneBuilder("Europe").covering("EU", LocationType.CONTINENT).build()]

        assert shipping_service.find_zone(Location(country="DE"), zones).name == "Europe"

    def test_postcode_range_is_strict(self):
        location = ZoneLocation("90000...91000", LocationType.POSTCODE)

        assert location.matches(BEVERLY_HILLS)
        assert not location.matches(Location(country="GB", postcode="SW1A 1AA"))
        assert not location.matches(Location(country="US"))

    def test_available_methods(self, shipping_service):
        zone = ZoneBuilder("US").with_flat_rate("5.00").with_free_shipping("50.00").build()
        zone.methods[1].enabled = False

        methods = shipping_service.available_methods(zone)

        assert [method.method_id for method in methods] == ["flat_rate"]
        assert methods[0].title == "Flat rate"


# ============================================================================
# RATES
# ============================================================================


@pytest.mark.unit
class TestRates:
    """Pricing each method type."""

    def test_free_shipping_threshold(self, shipping_service, cart_service, now):
        zone = ZoneBuilder("US").with_flat_rate("5.00").with_free_shipping("50.00").build()
        cart = _cart(cart_service, now, "49.99")

        below = shipping_service.calculate_rates(cart, BEVERLY_HILLS, [zone])
        assert [rate.id for rate in below.rates] == ["flat_rate:1"]

        cart_service.add_item(cart, ProductBuilder().with_price("0.01").build(), 1, now)
        cart_service.recalculate(cart)
        reached = shipping_service.calculate_rates(cart, BEVERLY_HILLS, [zone])

        free = reached.find_rate("free_shipping:2")
        assert free is not None
        assert free.cost == Decimal("0.00")
        assert not free.taxable
        assert reached.rates[0] is free

    def test_rates_sorted_by_cost(self, shipping_service, cart_service, now):
        zone = ZoneBuilder("US").with_flat_rate("12.00").with_local_pickup("2.00").build()

        result = shipping_service.calculate_rates(_cart(cart_service, now, "10.00"), BEVERLY_HILLS, [zone])

        assert [rate.cost for rate in result.rates] == [Decimal("2.00"), Decimal("12.00")]
        assert result.zone is zone
        assert result.needs_shipping

    def test_flat_rate_per_item_cost(self, shipping_service, cart_service, now):
        zone = ZoneBuilder("US").with_flat_rate("5.00", cost_per_item=Decimal("1.50")).build()

        result = shipping_service.calculate_rates(_cart(cart_service, now, "10.00", quantity=3), BEVERLY_HILLS, [zone])

        assert result.rates[0].cost == Decimal("9.50")

    def test_free_shipping_requiring_coupon(self, shipping_service, cart_service, now):
        zone = ZoneBuilder("US").with_free_shipping(requires_coupon=True).build()
        cart = _cart(cart_service, now, "20.00")

        assert shipping_service.calculate_rates(cart, BEVERLY_HILLS, [zone]).rates == []

        coupon = CouponBuilder("SHIPFREE").with_fields(free_shipping=True).build()
        cart_service.apply_coupon(cart, coupon, CouponContext(now=now))

        assert shipping_service.calculate_rates(cart, BEVERLY_HILLS, [zone]).rates[0].id == "free_shipping:2"

    def test_local_pickup_location(self, shipping_service, cart_service, now):
        zone = ZoneBuilder("US").with_local_pickup(pickup_location="12 Shop Rd").build()

        rate = shipping_service.calculate_rates(_cart(cart_service, now, "10.00"), BEVERLY_HILLS, [zone]).rates[0]

        assert rate.id == "local_pickup:3"
        assert rate.meta == {"pickup_location": "12 Shop Rd"}

    def test_virtual_cart_needs_no_shipping(self, shipping_service, cart_service, now):
        cart = cart_service.create_cart(now)
        cart_service.add_item(cart, ProductBuilder().virtual().build(), 1, now)

        result = shipping_service.calculate_rates(cart, BEVERLY_HILLS, [])

        assert not result.needs_shipping
        assert result.rates == []

    def test_package_skips_virtual_lines(self, shipping_service, cart_service, now):
        cart = cart_service.create_cart(now)
        cart_service.add_item(cart, ProductBuilder().with_price("10.00").with_weight("2.5").build(), 2, now)
        cart_service.add_item(cart, ProductBuilder().virtual().build(), 1, now)

        package = shipping_service.build_package(cart, BEVERLY_HILLS)

        assert package.item_count == 2
        assert package.contents_cost == Decimal("20.00")
        assert package.contents_weight == Decimal("5.0")

    def test_to_selection(self, shipping_service, cart_service, now):
        zone = ZoneBuilder("US").with_flat_rate("5.00").build()
        rate = shipping_service.calculate_rates(_cart(cart_service, now, "10.00"), BEVERLY_HILLS, [zone]).rates[0]

        selection = shipping_service.to_selection(rate)

        assert selection.rate_id == "flat_rate:1"
        assert selection.cost == Decimal("5.00")
        assert selection.taxable


@pytest.mark.unit
class TestShippingErrors:
    """Destinations that cannot be served."""

    def test_missing_country(self, shipping_service, cart_service, now, zones):
        with pytest.raises(ShippingError) as exc_info:
            shipping_service.calculate_rates(_cart(cart_service, now, "10.00"), Location(country=""), zones)

        assert exc_info.value.kind == ShippingErrorKind.INVALID_DESTINATION
        assert exc_info.value.code == "SHIPPING_INVALID_DESTINATION"

    def test_no_zone(self, shipping_service, cart_service, now):
        zones = [ZoneBuilder("US").covering("US", LocationType.COUNTRY).with_flat_rate("5.00").build()]

        with pytest.raises(ShippingError) as exc_info:
            shipping_service.calculate_rates(_cart(cart_service, now, "10.00"), Location(country="FR"), zones)

        assert exc_info.value.kind == ShippingErrorKind.NO_SHIPPING_ZONE

    def test_zone_without_methods(self, shipping_service, cart_service, now):
        with pytest.raises(ShippingError) as exc_info:
            shipping_service.calculate_rates(_cart(cart_service, now, "10.00"), BEVERLY_HILLS, [ZoneBuilder("Empty").build()])

        assert exc_info.value.kind == ShippingErrorKind.NO_SHIPPING_METHODS_AVAILABLE
        assert exc_info.value.message == "No shipping methods available"


# ============================================================================
# SHIPPING CLASSES
# ============================================================================


@pytest.mark.unit
class TestClassCosts:
    """Shipping-class surcharges on flat rates."""

    @pytest.fixture
    def items(self, cart_service, now):
        cart = cart_service.create_cart(now)
        cart_service.add_item(cart, ProductBuilder().with_shipping_class("bulky").build(), 2, now)
        cart_service.add_item(cart, ProductBuilder().build(), 1, now)
        return cart.items

    @pytest.mark.parametrize(
        "calc_type,expected",
        [
            (ShippingCalcType.PER_CLASS, "12.00"),
            (ShippingCalcType.PER_ORDER, "10.00"),
            (ShippingCalcType.PER_ITEM, "22.00"),
        ],
    )
    def test_calc_types(self, shipping_service, items, calc_type, expected):
        settings = ShippingMethodSettings(
            cost=Decimal("5.00"),
            class_costs={"bulky": Decimal("10.00")},
            no_class_cost=Decimal("2.00"),
            calc_type=calc_type,
        )

        assert shipping_service.class_costs(settings, items) == Decimal(expected)

    def test_unknown_class_uses_no_class_cost(self, shipping_service, items):
        settings = ShippingMethodSettings(class_costs={"bulky": Decimal("10.00")}, no_class_cost=Decimal("2.00"))
        classes = {"fragile": ShippingClass(slug="fragile", name="Fragile")}

        assert shipping_service.class_costs(settings, items, classes) == Decimal("2.00")

    def test_flat_rate_includes_class_cost(self, shipping_service, cart_service, now):
        zone = ZoneBuilder("US").with_flat_rate("5.00", class_costs={"bulky": Decimal("10.00")}).build()
        cart = cart_service.create_cart(now)
        cart_service.add_item(cart, ProductBuilder().with_shipping_class("bulky").build(), 1, now)

        assert shipping_service.calculate_rates(cart, BEVERLY_HILLS, [zone]).rates[0].cost == Decimal("15.00")
