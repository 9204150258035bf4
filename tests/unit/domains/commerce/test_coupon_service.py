"""Tests for CouponService validation and discount allocation."""

from datetime import timedelta
from decimal import Decimal

import pytest

from storefront.core.domain import ValidationException, generate_uuid
from storefront.domains.commerce.domain.entities.coupon import CouponStatus, DiscountType
from storefront.domains.commerce.domain.exceptions import CouponError, CouponErrorKind
from storefront.domains.commerce.domain.services import CouponContext, email_matches, format_percent
from tests.utils.builders import CouponBuilder, ProductBuilder


@pytest.fixture
def cart(cart_service, now, product):
    """Cart holding one 100.00 line."""
    cart = cart_service.create_cart(now)
    cart_service.add_item(cart, product, 1, now)
    cart_service.recalculate(cart)
    return cart


@pytest.fixture
def context(now):
    return CouponContext(now=now)


def _kind(coupon_service, coupon, cart, context) -> CouponErrorKind:
    with pytest.raises(CouponError) as exc_info:
        coupon_service.validate(coupon, cart, context)
    return exc_info.value.kind


@pytest.mark.unit
class TestCouponValidation:
    """Each rule that can reject a coupon."""

    def test_valid_coupon_passes(self, coupon_service, cart, context):
        coupon_service.validate(CouponBuilder().build(), cart, context)

    def test_already_applied_ignores_case(self, coupon_service, cart_service, cart, context):
        cart_service.apply_coupon(cart, CouponBuilder("SAVE10").build(), context)

        assert _kind(coupon_service, CouponBuilder("save10").build(), cart, context) == CouponErrorKind.ALREADY_APPLIED

    def test_unpublished_coupon_is_not_found(self, coupon_service, cart, context):
        coupon = CouponBuilder().with_fields(status=CouponStatus.DRAFT).build()

        assert _kind(coupon_service, coupon, cart, context) == CouponErrorKind.NOT_FOUND

    def test_expired(self, coupon_service, cart, context, now):
        coupon = CouponBuilder().with_fields(expires_at=now - timedelta(seconds=1)).build()

        assert _kind(coupon_service, coupon, cart, context) == CouponErrorKind.EXPIRED

    def test_not_yet_valid(self, coupon_service, cart, context, now):
        coupon = CouponBuilder().with_fields(starts_at=now + timedelta(days=1)).build()

        assert _kind(coupon_service, coupon, cart, context) == CouponErrorKind.NOT_YET_VALID

    def test_usage_limit(self, coupon_service, cart, context):
        coupon = CouponBuilder().with_fields(usage_limit=5, usage_count=5).build()

        assert _kind(coupon_service, coupon, cart, context) == CouponErrorKind.USAGE_LIMIT_REACHED

    def test_per_customer_limit(self, coupon_service, cart, now):
        coupon = CouponBuilder().with_fields(usage_limit_per_user=1).build()
        context = CouponContext(now=now, customer_id=generate_uuid(), customer_usage_count=1)

        assert _kind(coupon_service, coupon, cart, context) == CouponErrorKind.CUSTOMER_USAGE_LIMIT_REACHED

    def test_per_customer_limit_skipped_for_guests(self, coupon_service, cart, now):
        coupon = CouponBuilder().with_fields(usage_limit_per_user=1).build()

        coupon_service.validate(coupon, cart, CouponContext(now=now, customer_usage_count=3))

    def test_minimum_spend(self, coupon_service, cart, context):
        coupon = CouponBuilder().with_fields(minimum_amount=Decimal("150.00")).build()

        with pytest.raises(CouponError) as exc_info:
            coupon_service.validate(coupon, cart, context)

        error = exc_info.value
        assert error.kind == CouponErrorKind.MINIMUM_NOT_MET
        assert error.minimum == Decimal("150.00")
        assert error.current == Decimal("100.00")
        assert error.message == "Minimum spend of 150.00 is required"

    def test_maximum_spend(self, coupon_service, cart, context):
        coupon = CouponBuilder().with_fields(maximum_spend=Decimal("50.00")).build()

        assert _kind(coupon_service, coupon, cart, context) == CouponErrorKind.MAXIMUM_EXCEEDED

    def test_individual_use_conflict(self, coupon_service, cart_service, cart, context):
        cart_service.apply_coupon(cart, CouponBuilder("FIRST").build(), context)
        solo = CouponBuilder("SOLO").with_fields(individual_use=True).build()

        assert _kind(coupon_service, solo, cart, context) == CouponErrorKind.INDIVIDUAL_USE

    def test_email_restriction(self, coupon_service, cart, now):
        coupon = CouponBuilder().with_fields(email_restrictions=["*@example.com"]).build()

        coupon_service.validate(coupon, cart, CouponContext(now=now, customer_email="Ana@Example.com"))
        assert (
            _kind(coupon_service, coupon, cart, CouponContext(now=now, customer_email="ana@other.org"))
            == CouponErrorKind.EMAIL_RESTRICTION
        )
        assert _kind(coupon_service, coupon, cart, CouponContext(now=now)) == CouponErrorKind.EMAIL_RESTRICTION

    def test_product_scope(self, coupon_service, cart, context, product):
        other = CouponBuilder().with_fields(product_ids=[generate_uuid()]).build()
        excluded = CouponBuilder().with_fields(excluded_product_ids=[product.id]).build()

        assert _kind(coupon_service, other, cart, context) == CouponErrorKind.NOT_APPLICABLE
        assert _kind(coupon_service, excluded, cart, context) == CouponErrorKind.EXCLUDED_PRODUCT

    def test_category_scope(self, coupon_service, cart_service, now, context):
        category = generate_uuid()
        product = ProductBuilder().with_categories(category).build()
        cart = cart_service.create_cart(now)
        cart_service.add_item(cart, product, 1, now)

        wrong_category = CouponBuilder().with_fields(category_ids=[generate_uuid()]).build()
        excluded = CouponBuilder().with_fields(excluded_category_ids=[category]).build()

        assert _kind(coupon_service, wrong_category, cart, context) == CouponErrorKind.NOT_APPLICABLE
        assert _kind(coupon_service, excluded, cart, context) == CouponErrorKind.EXCLUDED_CATEGORY

    def test_code_is_required(self):
        with pytest.raises(ValidationException):
            CouponBuilder("   ").build()


@pytest.mark.unit
class TestDiscounts:
    """Discount amounts per coupon type."""

    def test_percent_with_cap(self, coupon_service, cart_service, now):
        cart = cart_service.create_cart(now)
        cart_service.add_item(cart, ProductBuilder().with_price("200.00").build(), 1, now)
        cart_service.recalculate(cart)
        coupon = CouponBuilder().percent("10").with_fields(maximum_amount=Decimal("15.00")).build()

        assert coupon_service.calculate_discount(coupon, cart) == Decimal("15.00")

    def test_fixed_cart_capped_at_subtotal(self, coupon_service, cart):
        coupon = CouponBuilder().fixed_cart("500").build()

        assert coupon_service.calculate_discount(coupon, cart) == Decimal("100.00")

    def test_fixed_product_per_unit_with_item_limit(self, coupon_service, cart_service, now):
        cart = cart_service.create_cart(now)
        cart_service.add_item(cart, ProductBuilder().with_price("20.00").build(), 3, now)
        cart_service.recalculate(cart)
        coupon = CouponBuilder().fixed_product("5").with_fields(limit_usage_to_x_items=2).build()

        assert coupon_service.calculate_discount(coupon, cart) == Decimal("10.00")

    def test_percent_product_only_on_applicable_lines(self, coupon_service, cart_service, now):
        included = ProductBuilder().with_price("40.00").build()
        other = ProductBuilder().with_price("60.00").build()
        cart = cart_service.create_cart(now)
        cart_service.add_item(cart, included, 1, now)
        cart_service.add_item(cart, other, 1, now)
        cart_service.recalculate(cart)
        coupon = CouponBuilder().percent_product("25").with_fields(product_ids=[included.id]).build()

        assert coupon_service.calculate_discount(coupon, cart) == Decimal("10.00")

    def test_exclude_sale_items(self, coupon_service, cart_service, now):
        cart = cart_service.create_cart(now)
        cart_service.add_item(cart, ProductBuilder().with_price("50.00").with_sale("40.00").build(), 1, now)
        cart_service.add_item(cart, ProductBuilder().with_price("60.00").build(), 1, now)
        cart_service.recalculate(cart)
        coupon = CouponBuilder().percent("10").with_fields(exclude_sale_items=True).build()

        assert coupon_service.calculate_discount(coupon, cart) == Decimal("6.00")

    def test_rounding_remainder_goes_to_last_line(self, coupon_service, cart_service, now):
        cart = cart_service.create_cart(now)
        for _ in range(3):
            cart_service.add_item(cart, ProductBuilder().with_price("10.00").build(), 1, now)
        cart.coupons.append(coupon_service.snapshot(CouponBuilder().fixed_cart("10").build()))
        cart_service.recalculate(cart)

        assert [item.discount for item in cart.items] == [Decimal("3.33"), Decimal("3.33"), Decimal("3.34")]
        assert cart.totals.discount_total == Decimal("10")

    def test_rounding_overflow_moves_to_lines_with_headroom(self, coupon_service, cart_service, now):
        cart = cart_service.create_cart(now)
        for _ in range(9):
            cart_service.add_item(cart, ProductBuilder().with_price("1.00").build(), 1, now)
        cart_service.add_item(cart, ProductBuilder().with_price("0.01").build(), 1, now)
        cart.coupons.append(coupon_service.snapshot(CouponBuilder().fixed_cart("0.13").build()))
        cart_service.recalculate(cart)

        assert cart.totals.subtotal == Decimal("9.01")
        assert cart.totals.discount_total == Decimal("0.13")
        assert all(item.discount <= item.subtotal for item in cart.items)
        assert cart.items[-1].discount == Decimal("0.01")

    def test_stacked_coupons_never_exceed_subtotal(self, coupon_service, cart_service, cart, context):
        cart_service.apply_coupon(cart, CouponBuilder("HALF").percent("60").build(), context)
        cart_service.apply_coupon(cart, CouponBuilder("FLAT").fixed_cart("80").build(), context)

        assert [applied.discount for applied in cart.coupons] == [Decimal("60.00"), Decimal("40.00")]
        assert cart.totals.discount_total == Decimal("100.00")
        assert cart.totals.total == Decimal("0")


@pytest.mark.unit
class TestCouponAdministration:
    """Codes, display and usage counting."""

    def test_generate_code(self, coupon_service):
        code = coupon_service.generate_code()

        assert len(code) == 8
        assert code.isalnum()
        assert code == code.upper()
        assert len(coupon_service.generate_code(12)) == 12

    def test_format_discount(self, coupon_service):
        assert coupon_service.format_discount(CouponBuilder().percent("12.50").build()) == "12.5%"
        assert coupon_service.format_discount(CouponBuilder().fixed_cart("5").build()) == "$5.00"

    def test_format_percent(self):
        assert format_percent(Decimal("10.00")) == "10%"
        assert format_percent(Decimal("8.250")) == "8.25%"

    def test_record_usage(self, coupon_service, now):
        coupon = CouponBuilder().build()
        customer_id = generate_uuid()

        usage = coupon_service.record_usage(coupon, customer_id, None, Decimal("7.50"), now)

        assert coupon.usage_count == 1
        assert usage.coupon_id == coupon.id
        assert usage.customer_id == customer_id
        assert usage.discount_amount == Decimal("7.50")

    @pytest.mark.parametrize(
        "pattern,email,expected",
        [
            ("*@example.com", "ana@example.com", True),
            ("*@example.com", "ana@example.org", False),
            ("Ana@Example.com", "ana@example.com", True),
            ("ana@example.com", "bob@example.com", False),
        ],
    )
    def test_email_matches(self, pattern, email, expected):
        assert email_matches(pattern, email) is expected

    def test_discount_type_helpers(self):
        assert DiscountType.PERCENT_PRODUCT.is_product_level()
        assert DiscountType.PERCENT_PRODUCT.is_percentage()
        assert not DiscountType.FIXED_CART.is_percentage()
        assert DiscountType.FIXED_CART.display_name == "Fixed cart discount"
