"""
Shipping Service for Commerce Domain

Matches a destination to the most specific shipping zone and prices the
zone's enabled methods for a cart.
"""

import logging
from dataclasses import dataclass, field
from decimal import Decimal

from ..entities.cart import Cart, CartItem, SelectedShipping
from ..entities.shipping import (
    PackageItem,
    ShippingCalcType,
    ShippingClass,
    ShippingMethod,
    ShippingMethodInfo,
    ShippingMethodSettings,
    ShippingMethodType,
    ShippingPackage,
    ShippingRate,
    ShippingTaxStatus,
    ShippingZone,
)
from ..exceptions import ShippingError, ShippingErrorKind
from ..value_objects.address import Location
from ..value_objects.money import ZERO, FormattingProfile

logger = logging.getLogger(__name__)

DEFAULT_PACKAGE_ID = "package_0"


@dataclass
class ShippingCalculationResult:
    rates: list[ShippingRate] = field(default_factory=list)
    packages: list[ShippingPackage] = field(default_factory=list)
    needs_shipping: bool = True
    zone: ShippingZone | None = None

    def find_rate(self, rate_id: str) -> ShippingRate | None:
        for rate in self.rates:
            if rate.id == rate_id:
                return rate
        return None


class ShippingService:
    """
    Domain service for zone matching and rate calculation.

    Example:
        ```python
        service = ShippingService()
        result = service.calculate_rates(cart, Location("US", "CA", "90210"), zones)
        cheapest = result.rates[0]
        ```
    """

    def __init__(self, profile: FormattingProfile | None = None):
        self.profile = profile or FormattingProfile()

    # Zones

    def find_zone(self, destination: Location, zones: list[ShippingZone]) -> ShippingZone | None:
        """
        Most specific zone matching ``destination``.

        Ties on specificity go to the lower ``zone_order``, then to list order.
        A zone without locations matches everywhere with specificity 0.
        """
        matching = [zone for zone in zones if zone.matches(destination)]
        if not matching:
            return None
        ranked = sorted(matching, key=lambda zone: (-zone.specificity(destination), zone.zone_order))
        return ranked[0]

    def available_methods(self, zone: ShippingZone) -> list[ShippingMethodInfo]:
        return [
            ShippingMethodInfo(
                instance_id=method.instance_id,
                method_id=method.method_type.value,
                title=method.display_title,
                description=method.method_type.description,
            )
            for method in zone.enabled_methods()
        ]

    # Rates

    def calculate_rates(
        self,
        cart: Cart,
        destination: Location,
        zones: list[ShippingZone],
        shipping_classes: dict[str, ShippingClass] | None = None,
    ) -> ShippingCalculationResult:
        """
        Rates offered for ``cart`` shipped to ``destination``, cheapest first.

        Raises:
            ShippingError: When the destination has no country, no zone matches,
                or the matched zone has no enabled method
        """
        if not cart.needs_shipping():
            return ShippingCalculationResult(needs_shipping=False)

        if not destination.country:
            raise ShippingError(ShippingErrorKind.INVALID_DESTINATION)

        zone = self.find_zone(destination, zones)
        if zone is None:
            raise ShippingError(ShippingErrorKind.NO_SHIPPING_ZONE)

        methods = zone.enabled_methods()
        if not methods:
            raise ShippingError(ShippingErrorKind.NO_SHIPPING_METHODS_AVAILABLE)

        package = self.build_package(cart, destination)
        subtotal = sum((item.subtotal for item in cart.items), ZERO)
        shippable = [item for item in cart.items if item.needs_shipping]

        rates = []
        for method in methods:
            rate = self._method_rate(method, cart, package, subtotal, shippable, shipping_classes)
            if rate is not None:
                rates.append(rate)

        logger.debug("Zone %s offers %d rates for %s", zone.name, len(rates), destination.country)
        return ShippingCalculationResult(
            rates=sorted(rates, key=lambda rate: rate.cost),
            packages=[package],
            zone=zone,
        )

    def build_package(self, cart: Cart, destination: Location) -> ShippingPackage:
        """Single package holding every line that needs shipping."""
        shippable = [item for item in cart.items if item.needs_shipping]
        return ShippingPackage(
            id=DEFAULT_PACKAGE_ID,
            contents_cost=sum((item.subtotal for item in shippable), ZERO),
            contents_weight=sum(((item.weight or ZERO) * item.quantity for item in shippable), ZERO),
            destination=destination,
            items=tuple(
                PackageItem(
                    product_id=item.product_id,
                    variation_id=item.variation_id,
                    quantity=item.quantity,
                    weight=item.weight,
                    shipping_class=item.shipping_class,
                )
                for item in shippable
            ),
        )

    def _method_rate(
        self,
        method: ShippingMethod,
        cart: Cart,
        package: ShippingPackage,
        subtotal: Decimal,
        items: list[CartItem],
        shipping_classes: dict[str, ShippingClass] | None,
    ) -> ShippingRate | None:
        settings = method.settings
        match method.method_type:
            case ShippingMethodType.FLAT_RATE:
                cost = settings.cost
                if settings.cost_per_item is not None:
                    cost += settings.cost_per_item * package.item_count
                if settings.cost_per_weight_unit is not None:
                    cost += settings.cost_per_weight_unit * package.contents_weight
                cost += self.class_costs(settings, items, shipping_classes)
                return self._rate(method, self.profile.round(cost), package)

            case ShippingMethodType.FREE_SHIPPING:
                if settings.min_amount is not None and subtotal < settings.min_amount:
                    return None
                if settings.requires_coupon and not cart.has_free_shipping():
                    return None
                return self._rate(method, ZERO, package, taxable=False)

            case ShippingMethodType.LOCAL_PICKUP:
                meta = {"pickup_location": settings.pickup_location} if settings.pickup_location else {}
                return self._rate(method, self.profile.round(settings.cost), package, meta=meta)

        return None

    @staticmethod
    def class_costs(
        settings: ShippingMethodSettings,
        items: list[CartItem],
        shipping_classes: dict[str, ShippingClass] | None = None,
    ) -> Decimal:
        """
        Shipping-class surcharge of a flat rate.

        Items whose class is unknown count as having no class and use
        ``no_class_cost``.
        """
        no_class_cost = settings.no_class_cost or ZERO

        def slug_of(item: CartItem) -> str | None:
            slug = item.shipping_class
            if slug is None or (shipping_classes is not None and slug not in shipping_classes):
                return None
            return slug

        def cost_of(slug: str | None) -> Decimal:
            return no_class_cost if slug is None else settings.class_costs.get(slug, ZERO)

        if settings.calc_type == ShippingCalcType.PER_ITEM:
            return sum((cost_of(slug_of(item)) * item.quantity for item in items), ZERO)

        present = list(dict.fromkeys(slug_of(item) for item in items))
        costs = [cost_of(slug) for slug in present]
        if settings.calc_type == ShippingCalcType.PER_ORDER:
            return max(costs, default=ZERO)
        return sum(costs, ZERO)

    @staticmethod
    def _rate(
        method: ShippingMethod,
        cost: Decimal,
        package: ShippingPackage,
        *,
        taxable: bool | None = None,
        meta: dict | None = None,
    ) -> ShippingRate:
        if taxable is None:
            taxable = method.settings.tax_status == ShippingTaxStatus.TAXABLE
        return ShippingRate(
            id=f"{method.method_type.value}:{method.instance_id}",
            method_id=method.method_type.value,
            instance_id=method.instance_id,
            label=method.display_title,
            cost=cost,
            package_id=package.id,
            taxable=taxable,
            meta=meta or {},
        )

    @staticmethod
    def to_selection(rate: ShippingRate) -> SelectedShipping:
        """Copy a computed rate into the cart's chosen-shipping slot."""
        return SelectedShipping(
            rate_id=rate.id,
            method_id=rate.method_id,
            label=rate.label,
            cost=rate.cost,
            taxable=rate.taxable,
            instance_id=rate.instance_id,
        )
