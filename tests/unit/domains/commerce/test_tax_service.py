"""
Tests for TaxService and tax-rate matching.

Tests:
- Single, inclusive and compound rate calculations
- Postcode patterns and location matching
- Cart taxes, tax location and aggregated tax lines
"""

from decimal import Decimal

import pytest

from storefront.domains.commerce.domain.entities.product import TaxStatus
from storefront.domains.commerce.domain.entities.shipping import ShippingRate
from storefront.domains.commerce.domain.entities.tax_rate import TaxClass, TaxRate, postcode_matches
from storefront.domains.commerce.domain.services import CartConfig, CartService, TaxBasis, TaxConfig, TaxService
from storefront.domains.commerce.domain.services.shipping_service import ShippingService
from storefront.domains.commerce.domain.value_objects.address import Location
from tests.utils.builders import ProductBuilder, make_address

CALIFORNIA = Location(country="US", state="CA", postcode="90210", city="Beverly Hills")


@pytest.fixture
def compound_rates():
    """5% base rate plus a 10% compound rate in the next priority group."""
    return [
        TaxRate(id="gst", country="US", rate=Decimal("5"), name="GST", priority=1),
        TaxRate(id="pst", country="US", rate=Decimal("10"), name="PST", priority=2, compound=True),
    ]


# ============================================================================
# RATE CALCULATION
# ============================================================================


@pytest.mark.unit
class TestCalculateTax:
    """Per-amount tax calculation."""

    def test_single_exclusive_rate(self, tax_service, ca_tax_rate):
        result = tax_service.calculate_tax(Decimal("100.00"), CALIFORNIA, "standard", [ca_tax_rate])

        assert result.total_tax == Decimal("10.00")
        assert result.by_rate() == {"us-ca": Decimal("10.00")}

    def test_inclusive_price_extracts_tax(self, tax_service, ca_tax_rate):
        result = tax_service.calculate_tax(
            Decimal("110.00"), CALIFORNIA, "standard", [ca_tax_rate], prices_include_tax=True
        )

        assert result.total_tax == Decimal("10.00")

    def test_compound_rate_sees_lower_group_tax(self, tax_service, compound_rates):
        result = tax_service.calculate_tax(Decimal("100.00"), CALIFORNIA, "standard", compound_rates)

        assert [tax.tax_amount for tax in result.taxes] == [Decimal("5.00"), Decimal("10.50")]
        assert result.total_tax == Decimal("15.50")

    def test_same_priority_rates_share_base(self, tax_service):
        rates = [
            TaxRate(id="a", country="US", rate=Decimal("5"), priority=1),
            TaxRate(id="b", country="US", rate=Decimal("10"), priority=1, compound=True),
        ]

        result = tax_service.calculate_tax(Decimal("100.00"), CALIFORNIA, "standard", rates)

        assert result.total_tax == Decimal("15.00")

    def test_groups_apply_in_priority_order(self, tax_service, compound_rates):
        result = tax_service.calculate_tax(Decimal("100.00"), CALIFORNIA, "standard", list(reversed(compound_rates)))

        assert [tax.rate_id for tax in result.taxes] == ["gst", "pst"]

    def test_other_tax_class_is_ignored(self, tax_service, ca_tax_rate):
        result = tax_service.calculate_tax(Decimal("100.00"), CALIFORNIA, TaxClass.REDUCED_RATE.value, [ca_tax_rate])

        assert result.total_tax == Decimal("0")
        assert result.taxes == ()

    def test_taxes_disabled(self, ca_tax_rate):
        service = TaxService(TaxConfig(enable_taxes=False))

        assert service.calculate_tax(Decimal("100"), CALIFORNIA, "standard", [ca_tax_rate]).total_tax == Decimal("0")

    def test_rounding_half_even_per_rate(self, tax_service):
        rate = TaxRate(id="x", country="US", rate=Decimal("12.5"))

        # 0.20 * 12.5% = 0.025 -> 0.02
        assert tax_service.calculate_tax(Decimal("0.20"), CALIFORNIA, "standard", [rate]).total_tax == Decimal("0.02")

    def test_shipping_tax_only_uses_shipping_rates(self, tax_service):
        rates = [
            TaxRate(id="ship", country="US", rate=Decimal("10")),
            TaxRate(id="goods-only", country="US", rate=Decimal("5"), shipping=False),
        ]

        result = tax_service.calculate_shipping_tax(Decimal("20.00"), CALIFORNIA, rates)

        assert result.total_tax == Decimal("2.00")
        assert [tax.rate_id for tax in result.taxes] == ["ship"]


# ============================================================================
# LOCATION MATCHING
# ============================================================================


@pytest.mark.unit
class TestRateMatching:
    """Which rates apply to a destination."""

    @pytest.mark.parametrize(
        "pattern,postcode,expected",
        [
            ("9*", "90210", True),
            ("9*", "80210", False),
            ("90000...91000", "90500", True),
            ("90000...91000", "89999", False),
            ("90210", "90210", True),
            ("sw1a 1aa", "SW1A 1AA", True),
        ],
    )
    def test_postcode_patterns(self, pattern, postcode, expected):
        assert postcode_matches(pattern, postcode) is expected

    def test_non_numeric_range_is_lenient_unless_strict(self):
        assert postcode_matches("90000...91000", "SW1A")
        assert not postcode_matches("90000...91000", "SW1A", strict=True)

    def test_strict_matching_ignores_separators(self):
        assert postcode_matches("12345...12399", "123-50", strict=True)

    def test_state_and_city(self):
        rate = TaxRate(id="la", country="us", rate=Decimal("2"), state="ca", city="Beverly Hills")

        assert rate.matches_location(CALIFORNIA)
        assert not rate.matches_location(Location(country="US", state="NY"))
        assert not rate.matches_location(Location(country="US", state="CA", city="Fresno"))

    def test_empty_country_matches_anywhere(self):
        assert TaxRate(id="any", country="", rate=Decimal("1")).matches_location(Location(country="FR"))

    def test_rate_code(self, ca_tax_rate):
        assert ca_tax_rate.rate_code == "US_CA_TAX"

    def test_negative_rate_rejected(self):
        with pytest.raises(ValueError):
            TaxRate(id="bad", country="US", rate=Decimal("-1"))


# ============================================================================
# CART TAXES
# ============================================================================


@pytest.mark.unit
class TestCartTaxes:
    """Writing taxes onto carts."""

    def test_simple_cart_total(self, cart_service, tax_service, ca_tax_rate, product, now):
        cart = cart_service.create_cart(now)
        cart_service.add_item(cart, product, 1, now)
        cart_service.recalculate(cart)

        tax_service.calculate_cart_taxes(cart, CALIFORNIA, [ca_tax_rate])
        totals = cart_service.recalculate(cart)

        assert totals.subtotal == Decimal("100.00")
        assert totals.tax_total == Decimal("10.00")
        assert totals.total == Decimal("110.00")

    def test_tax_inclusive_cart_total(self, ca_tax_rate, now):
        cart_service = CartService(CartConfig(prices_include_tax=True))
        tax_service = TaxService(TaxConfig(prices_include_tax=True))
        cart = cart_service.create_cart(now)
        cart_service.add_item(cart, ProductBuilder().with_price("110.00").build(), 1, now)
        cart_service.recalculate(cart)

        tax_service.calculate_cart_taxes(cart, CALIFORNIA, [ca_tax_rate])
        totals = cart_service.recalculate(cart)

        assert totals.subtotal == Decimal("110.00")
        assert totals.subtotal_tax == Decimal("10.00")
        assert totals.subtotal - totals.subtotal_tax == Decimal("100.00")
        assert totals.total == Decimal("110.00")

    def test_compound_cart_total(self, cart_service, tax_service, compound_rates, product, now):
        cart = cart_service.create_cart(now)
        cart_service.add_item(cart, product, 1, now)

        tax_service.calculate_cart_taxes(cart, CALIFORNIA, compound_rates)
        totals = cart_service.recalculate(cart)

        assert totals.tax_total == Decimal("15.50")
        assert totals.total == Decimal("115.50")

    def test_shipping_and_untaxed_lines(self, cart_service, tax_service, ca_tax_rate, product, now):
        untaxed = ProductBuilder().with_price("40.00").with_tax_status(TaxStatus.NONE).build()
        cart = cart_service.create_cart(now)
        cart_service.add_item(cart, product, 1, now)
        cart_service.add_item(cart, untaxed, 1, now)
        rate = ShippingRate(id="flat_rate:1", method_id="flat_rate", instance_id="1", label="Flat", cost=Decimal("10.00"), package_id="p")
        cart_service.set_shipping(cart, ShippingService.to_selection(rate), now)

        result = tax_service.calculate_cart_taxes(cart, CALIFORNIA, [ca_tax_rate])
        totals = cart_service.recalculate(cart)

        assert result.total_item_tax == Decimal("10.00")
        assert result.shipping_tax == Decimal("1.00")
        assert cart.items[1].taxes == {}
        assert cart.shipping.taxes == {"us-ca": Decimal("1.00")}
        assert totals.total == Decimal("161.00")

    def test_no_location_clears_taxes(self, cart_service, tax_service, ca_tax_rate, product, now):
        cart = cart_service.create_cart(now)
        cart_service.add_item(cart, product, 1, now)
        tax_service.calculate_cart_taxes(cart, CALIFORNIA, [ca_tax_rate])

        result = tax_service.calculate_cart_taxes(cart, None, [ca_tax_rate])

        assert result.total_tax == Decimal("0")
        assert cart.items[0].subtotal_tax == Decimal("0")

    def test_tax_lines_aggregate_per_rate(self, cart_service, tax_service, compound_rates, product, now):
        cart = cart_service.create_cart(now)
        cart_service.add_item(cart, product, 2, now)
        tax_service.calculate_cart_taxes(cart, CALIFORNIA, compound_rates)

        lines = tax_service.tax_lines(cart, compound_rates)

        assert [(line.rate_id, line.tax_total) for line in lines] == [
            ("gst", Decimal("10.00")),
            ("pst", Decimal("21.00")),
        ]
        assert lines[1].compound


@pytest.mark.unit
class TestTaxLocationAndDisplay:
    """Tax basis and labels."""

    def test_shipping_basis_falls_back_to_billing(self, tax_service):
        billing = make_address(state="NY", postcode="10001")

        assert tax_service.tax_location(billing, None).state == "NY"
        assert tax_service.tax_location(billing, make_address()).state == "CA"

    def test_billing_basis(self):
        service = TaxService(TaxConfig(tax_based_on=TaxBasis.BILLING))

        assert service.tax_location(make_address(state="NY"), make_address()).state == "NY"

    def test_base_basis(self):
        base = Location(country="GB")
        service = TaxService(TaxConfig(tax_based_on=TaxBasis.BASE, base_location=base))

        assert service.tax_location(None, None) == base

    def test_no_country_means_no_location(self, tax_service):
        assert tax_service.tax_location(make_address(country=""), None) is None

    def test_format_tax_rate(self):
        assert TaxService.format_tax_rate(Decimal("8.250")) == "8.25%"
        assert TaxService.format_tax_rate(Decimal("10")) == "10%"

    def test_tax_label(self, tax_service, compound_rates):
        taxes = tax_service.calculate_tax(Decimal("100"), CALIFORNIA, "standard", compound_rates).taxes

        assert TaxService.tax_label([]) == "Tax"
        assert TaxService.tax_label(list(taxes[:1])) == "GST"
        assert TaxService.tax_label(list(taxes)) == "Taxes"

    def test_tax_classes(self):
        assert [tax_class.value for tax_class in TaxService.tax_classes()] == ["standard", "reduced-rate", "zero-rate"]
        assert TaxClass.REDUCED_RATE.display_name == "Reduced rate"
