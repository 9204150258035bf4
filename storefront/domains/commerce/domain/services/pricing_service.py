"""
Pricing Service for Commerce Domain

Domain service that picks the price a product sells at right now and
converts between tax-inclusive and tax-exclusive amounts.

Every function here is total: a missing price comes back as ``None`` and
callers decide whether that makes a product unpurchasable.
"""

import logging
from datetime import datetime
from decimal import ROUND_HALF_EVEN, Decimal

from ..entities.product import PriceTier, Product, ProductStatus, ProductVariation, StockStatus
from ..value_objects.money import HUNDRED, ZERO, FormattingProfile

logger = logging.getLogger(__name__)


def _sale_active(sale_price: Decimal | None, sale_from: datetime | None, sale_to: datetime | None, now: datetime) -> bool:
    if sale_price is None:
        return False
    if sale_from is not None and now < sale_from:
        return False
    if sale_to is not None and now > sale_to:
        return False
    return True


class PricingService:
    """
    Domain service for price selection and tax-inclusive conversions.

    Example:
        ```python
        service = PricingService(FormattingProfile(currency="EUR"))
        price = service.effective_price(product, now)
        unit = service.tiered_price(price, quantity=12, tiers=product.price_tiers)
        service.format_price(unit)  # "€18.00"
        ```
    """

    def __init__(self, profile: FormattingProfile | None = None):
        self.profile = profile or FormattingProfile()

    # Effective prices

    def is_on_sale(self, product: Product, now: datetime) -> bool:
        return _sale_active(product.sale_price, product.sale_from, product.sale_to, now)

    def effective_price(self, product: Product, now: datetime) -> Decimal | None:
        """
        Sale price while its window covers ``now``, otherwise the regular price.

        Returns:
            The unit price, or None when the product has no price at all
        """
        if self.is_on_sale(product, now):
            return product.sale_price
        return product.regular_price

    def variation_effective_price(self, product: Product, variation: ProductVariation, now: datetime) -> Decimal | None:
        """Same rule over the variation; a variation without prices sells at the parent's price."""
        if not variation.has_own_prices():
            return self.effective_price(product, now)
        if _sale_active(variation.sale_price, variation.sale_from, variation.sale_to, now):
            return variation.sale_price
        return variation.regular_price

    def regular_price(self, product: Product, variation: ProductVariation | None = None) -> Decimal | None:
        if variation is not None and variation.has_own_prices():
            return variation.regular_price
        return product.regular_price

    def is_purchasable(self, product: Product, now: datetime, variation: ProductVariation | None = None) -> bool:
        """
        Published, priced, and either not out of stock or open to backorders.
        """
        status = variation.status if variation is not None else product.status
        if product.status != ProductStatus.PUBLISHED or status != ProductStatus.PUBLISHED:
            return False

        if variation is not None:
            price = self.variation_effective_price(product, variation, now)
            stock_status = variation.resolve(product, "stock_status")
            backorders = variation.resolve(product, "backorders")
        else:
            price = self.effective_price(product, now)
            stock_status = product.stock_status
            backorders = product.backorders

        if price is None:
            return False
        return stock_status != StockStatus.OUT_OF_STOCK or backorders.allows_backorders()

    def price_range(self, product: Product, variations: list[ProductVariation], now: datetime) -> tuple[Decimal, Decimal] | None:
        """Lowest and highest effective price over a variable product's variations."""
        prices = [
            price
            for price in (self.variation_effective_price(product, variation, now) for variation in variations)
            if price is not None
        ]
        if not prices:
            return None
        return min(prices), max(prices)

    # Quantity pricing

    @staticmethod
    def tiered_price(base: Decimal, quantity: int, tiers: list[PriceTier]) -> Decimal:
        """
        Price of the highest tier whose minimum the quantity reaches.

        Args:
            base: Price used when no tier applies
            quantity: Units being bought
            tiers: Tiers in any order

        Returns:
            Unit price for the quantity
        """
        price = base
        for tier in sorted(tiers, key=lambda t: t.min_quantity):
            if quantity >= tier.min_quantity:
                price = tier.price
        return price

    @staticmethod
    def line_total(unit_price: Decimal, quantity: int) -> Decimal:
        return unit_price * quantity

    # Tax-inclusive conversions

    @staticmethod
    def include_tax(price: Decimal, rate: Decimal) -> Decimal:
        """price × (1 + rate/100), unrounded."""
        return price * (1 + rate / HUNDRED)

    @staticmethod
    def exclude_tax(price: Decimal, rate: Decimal) -> Decimal:
        """price / (1 + rate/100), unrounded."""
        return price / (1 + rate / HUNDRED)

    def price_including_tax(self, price: Decimal, rate: Decimal) -> Decimal:
        return self.profile.round(self.include_tax(price, rate))

    def price_excluding_tax(self, price: Decimal, rate: Decimal) -> Decimal:
        return self.profile.round(self.exclude_tax(price, rate))

    # Display

    @staticmethod
    def sale_percentage(regular_price: Decimal, sale_price: Decimal) -> Decimal | None:
        """Whole-number percentage saved, or None when there is no positive regular price."""
        if regular_price <= ZERO:
            return None
        saved = (regular_price - sale_price) / regular_price * HUNDRED
        return saved.quantize(Decimal("1"), rounding=ROUND_HALF_EVEN)

    def format_price(self, amount: Decimal) -> str:
        return self.profile.format_price(amount)

    def format_price_range(self, minimum: Decimal, maximum: Decimal) -> str:
        return self.profile.format_price_range(minimum, maximum)
