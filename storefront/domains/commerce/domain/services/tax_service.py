"""
Tax Service for Commerce Domain

Multi-rate tax calculation with priority groups and compound rates, for
tax-inclusive and tax-exclusive prices alike.

Rates in one priority group share a base; groups are applied in ascending
priority, and a compound rate's base also includes the tax already produced
by lower-priority groups. Every per-rate amount is rounded half to even at
the store scale.
"""

import logging
from dataclasses import dataclass, field, replace
from decimal import Decimal
from itertools import groupby

from storefront.core.domain import StatusEnum

from ..entities.cart import Cart
from ..entities.order import OrderTaxLine
from ..entities.product import TaxStatus
from ..entities.tax_rate import CalculatedTax, TaxClass, TaxRate
from ..value_objects.address import Location, OrderAddress
from ..value_objects.money import HUNDRED, ZERO, FormattingProfile, round_amount
from .coupon_service import format_percent

logger = logging.getLogger(__name__)


class TaxBasis(StatusEnum):
    """Which address decides the tax location."""

    SHIPPING = "shipping"
    BILLING = "billing"
    BASE = "base"


@dataclass(frozen=True)
class TaxConfig:
    enable_taxes: bool = True
    prices_include_tax: bool = False
    tax_based_on: TaxBasis = TaxBasis.SHIPPING
    base_location: Location = Location(country="US")


@dataclass(frozen=True)
class TaxCalculationResult:
    taxes: tuple[CalculatedTax, ...] = ()
    total_tax: Decimal = ZERO

    def by_rate(self) -> dict[str, Decimal]:
        return {tax.rate_id: tax.tax_amount for tax in self.taxes}


@dataclass
class CartTaxResult:
    """Taxes written onto a cart; ``item_taxes`` is keyed by cart-item key."""

    item_taxes: dict[str, Decimal] = field(default_factory=dict)
    total_item_tax: Decimal = ZERO
    shipping_tax: Decimal = ZERO
    fee_tax: Decimal = ZERO
    total_tax: Decimal = ZERO


class TaxService:
    """
    Domain service for tax calculation.

    Example:
        ```python
        service = TaxService(TaxConfig(prices_include_tax=False))
        result = service.calculate_tax(Decimal("100.00"), Location("US", "CA"), "standard", rates)
        result.total_tax  # Decimal("10.00") for a single 10% rate
        ```
    """

    def __init__(self, config: TaxConfig | None = None, profile: FormattingProfile | None = None):
        self.config = config or TaxConfig()
        self.profile = profile or FormattingProfile()

    def taxes_enabled(self) -> bool:
        return self.config.enable_taxes

    def rates_for_location(self, location: Location, tax_class: str, rates: list[TaxRate]) -> list[TaxRate]:
        """Rates of ``tax_class`` matching ``location``, by priority then tax order."""
        applicable = [rate for rate in rates if rate.tax_class == tax_class and rate.matches_location(location)]
        return sorted(applicable, key=lambda rate: (rate.priority, rate.tax_order))

    # Calculation

    def calculate_tax(
        self,
        amount: Decimal,
        location: Location,
        tax_class: str,
        rates: list[TaxRate],
        prices_include_tax: bool | None = None,
    ) -> TaxCalculationResult:
        """
        Tax on ``amount`` for the given class and location.

        Args:
            amount: Taxable amount, gross when prices include tax
            location: Where the tax applies
            tax_class: Product tax class slug
            rates: Full tax table
            prices_include_tax: Overrides the configured pricing mode

        Returns:
            Per-rate taxes in application order and their sum
        """
        if not self.taxes_enabled():
            return TaxCalculationResult()

        inclusive = self.config.prices_include_tax if prices_include_tax is None else prices_include_tax
        applicable = self.rates_for_location(location, tax_class, rates)
        if not applicable:
            return TaxCalculationResult()

        taxes: list[CalculatedTax] = []
        running_tax = ZERO
        for _, group in groupby(applicable, key=lambda rate: rate.priority):
            group_tax = ZERO
            for rate in group:
                base = amount + running_tax if rate.compound else amount
                tax_amount = self._rate_tax(base, rate.rate, inclusive)
                taxes.append(self._calculated(rate, tax_amount))
                group_tax += tax_amount
            running_tax += group_tax

        logger.debug("Tax on %s (%s, %s): %s", amount, location.country, tax_class, running_tax)
        return TaxCalculationResult(taxes=tuple(taxes), total_tax=running_tax)

    def calculate_shipping_tax(self, cost: Decimal, location: Location, rates: list[TaxRate]) -> TaxCalculationResult:
        """Shipping is taxed exclusive of tax and never compound, with every matching shipping rate."""
        if not self.taxes_enabled() or cost <= ZERO:
            return TaxCalculationResult()

        taxes = []
        for rate in sorted(rates, key=lambda r: (r.priority, r.tax_order)):
            if not rate.shipping or not rate.matches_location(location):
                continue
            tax_amount = self._rate_tax(cost, rate.rate, inclusive=False)
            taxes.append(replace(self._calculated(rate, ZERO), shipping_tax_amount=tax_amount))
        return TaxCalculationResult(
            taxes=tuple(taxes),
            total_tax=sum((tax.shipping_tax_amount for tax in taxes), ZERO),
        )

    def _rate_tax(self, base: Decimal, rate: Decimal, inclusive: bool) -> Decimal:
        if inclusive:
            tax = base - base / (1 + rate / HUNDRED)
        else:
            tax = base * rate / HUNDRED
        return self.profile.round(tax)

    @staticmethod
    def _calculated(rate: TaxRate, tax_amount: Decimal) -> CalculatedTax:
        return CalculatedTax(
            rate_id=rate.id,
            rate_code=rate.rate_code,
            label=rate.name,
            rate=rate.rate,
            compound=rate.compound,
            tax_amount=tax_amount,
        )

    # Cart

    def calculate_cart_taxes(self, cart: Cart, location: Location | None, rates: list[TaxRate]) -> CartTaxResult:
        """
        Write line, fee and shipping taxes onto ``cart``.

        Lines whose tax status is not ``taxable`` are untaxed. Line taxes are
        computed on the line subtotal before coupon discounts. Without a
        location every tax is cleared.
        """
        result = CartTaxResult()
        enabled = self.taxes_enabled() and location is not None

        for item in cart.items:
            if enabled and item.tax_status == TaxStatus.TAXABLE:
                line = self.calculate_tax(item.subtotal, location, item.tax_class, rates)
            else:
                line = TaxCalculationResult()
            item.taxes = line.by_rate()
            item.subtotal_tax = line.total_tax
            item.total_tax = line.total_tax
            result.item_taxes[item.key] = line.total_tax
            result.total_item_tax += line.total_tax

        for fee in cart.fees:
            if enabled and fee.taxable:
                fee_result = self.calculate_tax(fee.amount, location, fee.tax_class, rates, prices_include_tax=False)
            else:
                fee_result = TaxCalculationResult()
            fee.taxes = fee_result.by_rate()
            fee.tax = fee_result.total_tax
            result.fee_tax += fee.tax

        if cart.shipping is not None:
            if enabled and cart.shipping.taxable:
                shipping = self.calculate_shipping_tax(cart.shipping.cost, location, rates)
            else:
                shipping = TaxCalculationResult()
            cart.shipping = replace(
                cart.shipping,
                tax=shipping.total_tax,
                taxes={tax.rate_id: tax.shipping_tax_amount for tax in shipping.taxes},
            )
            result.shipping_tax = shipping.total_tax

        result.total_tax = result.total_item_tax + result.fee_tax + result.shipping_tax
        return result

    def tax_location(
        self,
        billing: OrderAddress | None,
        shipping: OrderAddress | None,
    ) -> Location | None:
        """
        Location taxes are based on, per the configured basis.

        Shipping falls back to billing; None when the chosen address has no country.
        """
        match self.config.tax_based_on:
            case TaxBasis.BASE:
                return self.config.base_location
            case TaxBasis.BILLING:
                address = billing
            case _:
                address = shipping if shipping is not None and shipping.country else billing
        if address is None or not address.country.strip():
            return None
        return address.to_location()

    def tax_lines(self, cart: Cart, rates: list[TaxRate]) -> list[OrderTaxLine]:
        """One aggregate line per tax rate used anywhere on the cart, in tax-table order."""
        item_totals: dict[str, Decimal] = {}
        shipping_totals: dict[str, Decimal] = {}
        for taxes in [item.taxes for item in cart.items] + [fee.taxes for fee in cart.fees]:
            for rate_id, amount in taxes.items():
                item_totals[rate_id] = item_totals.get(rate_id, ZERO) + amount
        if cart.shipping is not None:
            for rate_id, amount in cart.shipping.taxes.items():
                shipping_totals[rate_id] = shipping_totals.get(rate_id, ZERO) + amount

        lines = []
        for rate in sorted(rates, key=lambda r: (r.priority, r.tax_order)):
            if rate.id not in item_totals and rate.id not in shipping_totals:
                continue
            lines.append(
                OrderTaxLine(
                    rate_id=rate.id,
                    rate_code=rate.rate_code,
                    label=rate.name,
                    compound=rate.compound,
                    rate_percent=rate.rate,
                    tax_total=item_totals.get(rate.id, ZERO),
                    shipping_tax_total=shipping_totals.get(rate.id, ZERO),
                )
            )
        return lines

    # Display

    def price_including_tax(self, price: Decimal, rate: Decimal) -> Decimal:
        return self.profile.round(price * (1 + rate / HUNDRED))

    def price_excluding_tax(self, price: Decimal, rate: Decimal) -> Decimal:
        return self.profile.round(price / (1 + rate / HUNDRED))

    @staticmethod
    def format_tax_rate(rate: Decimal) -> str:
        return format_percent(round_amount(rate, 2))

    @staticmethod
    def tax_label(taxes: list[CalculatedTax]) -> str:
        if not taxes:
            return "Tax"
        if len(taxes) == 1:
            return taxes[0].label
        return "Taxes"

    @staticmethod
    def tax_classes() -> list[TaxClass]:
        return list(TaxClass)
