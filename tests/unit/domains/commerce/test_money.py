"""Tests for Money and FormattingProfile value objects."""

from decimal import Decimal

import pytest

from storefront.core.domain import to_decimal
from storefront.domains.commerce.domain.value_objects.money import (
    FormattingProfile,
    Money,
    SymbolPosition,
    currency_symbol,
    round_amount,
)


@pytest.mark.unit
class TestFormattingProfile:
    """Price rendering across currencies and separator settings."""

    def test_default_profile_formats_thousands(self):
        profile = FormattingProfile()

        assert profile.format_price(Decimal("1234.5")) == "$1,234.50"
        assert profile.format_decimal(Decimal("1234567.891")) == "1,234,567.89"

    def test_european_profile_right_space(self):
        profile = FormattingProfile(
            currency="EUR",
            symbol_position=SymbolPosition.RIGHT_SPACE,
            thousand_separator=".",
            decimal_separator=",",
        )

        assert profile.format_price(Decimal("1234567.891")) == "1.234.567,89 €"

    @pytest.mark.parametrize(
        "position,expected",
        [
            (SymbolPosition.LEFT, "£9.99"),
            (SymbolPosition.LEFT_SPACE, "£ 9.99"),
            (SymbolPosition.RIGHT, "9.99£"),
            (SymbolPosition.RIGHT_SPACE, "9.99 £"),
        ],
    )
    def test_symbol_positions(self, position, expected):
        profile = FormattingProfile(currency="GBP", symbol_position=position)

        assert profile.format_price(Decimal("9.99")) == expected

    def test_zero_decimals_omits_separator(self):
        profile = FormattingProfile(currency="JPY", number_of_decimals=0)

        # 1234.5 rounds half to even
        assert profile.format_price(Decimal("1234.5")) == "¥1,234"
        assert profile.format_price(Decimal("1235.5")) == "¥1,236"

    def test_negative_amount_sign_precedes_symbol(self):
        assert FormattingProfile().format_price(Decimal("-5")) == "-$5.00"

    def test_small_amount_has_no_separator(self):
        assert FormattingProfile().format_price(Decimal("0.5")) == "$0.50"

    def test_symbol_position_accepts_string(self):
        profile = FormattingProfile(symbol_position="left_space")

        assert profile.symbol_position == SymbolPosition.LEFT_SPACE

    def test_invalid_decimals_rejected(self):
        with pytest.raises(ValueError):
            FormattingProfile(number_of_decimals=5)

    def test_price_range(self):
        profile = FormattingProfile()

        assert profile.format_price_range(Decimal("10"), Decimal("20")) == "$10.00 – $20.00"
        assert profile.format_price_range(Decimal("10"), Decimal("10.001")) == "$10.00"

    def test_unknown_currency_falls_back_to_dollar(self):
        assert currency_symbol("xyz") == "$"
        assert currency_symbol("eur") == "€"


@pytest.mark.unit
class TestMoney:
    """Exact arithmetic and rounding."""

    def test_round_half_to_even(self):
        assert round_amount(Decimal("2.345"), 2) == Decimal("2.34")
        assert round_amount(Decimal("2.355"), 2) == Decimal("2.36")

    def test_arithmetic_keeps_precision_until_rounded(self):
        price = Money(Decimal("19.99"))
        line = price.mul_by_int(3)
        tax = line.mul_by_rate(Decimal("8.25"))

        assert line.amount == Decimal("59.97")
        assert tax.amount == Decimal("4.947525")
        assert line.add(tax.round_to_scale(2)).format(FormattingProfile()) == "$64.92"

    def test_sub_can_go_negative(self):
        result = Money("5.00").sub(Money("7.50"))

        assert result.amount == Decimal("-2.50")
        assert not result.is_positive()

    def test_currency_mismatch(self):
        with pytest.raises(ValueError, match="Currency mismatch"):
            Money("1.00", "USD").add(Money("1.00", "EUR"))

    @pytest.mark.parametrize("factor", [1.5, True, "2"])
    def test_mul_by_int_rejects_non_integers(self, factor):
        with pytest.raises(TypeError):
            Money("1.00").mul_by_int(factor)

    def test_floats_never_become_money(self):
        with pytest.raises(TypeError):
            to_decimal(0.1)

    def test_convert_applies_markup(self):
        converted = Money("10.00", "USD").convert("eur", Decimal("0.9"), markup=Decimal("2"))

        assert converted == Money(Decimal("9.18"), "EUR")

    def test_zero(self):
        assert Money.zero("EUR").is_zero()
        assert str(Money("3.10", "EUR")) == "EUR 3.10"
