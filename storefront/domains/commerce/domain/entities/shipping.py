"""
Shipping Entities for Commerce Domain

Zones, their locations and methods, and the rates computed for a cart.
"""

from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any
from uuid import UUID

from storefront.core.domain import Entity, StatusEnum, ValueObject, to_decimal

from ..value_objects.address import Location
from .tax_rate import postcode_matches

CONTINENTS: dict[str, frozenset[str]] = {
    "NA": frozenset({"US", "CA", "MX"}),
    "EU": frozenset(
        {"GB", "DE", "FR", "IT", "ES", "NL", "BE", "AT", "CH", "PL", "SE", "NO", "DK", "FI"}
    ),
    "AS": frozenset({"CN", "JP", "KR", "IN", "SG", "HK", "TW", "TH", "MY", "ID", "PH", "VN"}),
    "OC": frozenset({"AU", "NZ"}),
    "SA": frozenset({"BR", "AR", "CL", "CO", "PE", "EC"}),
    "AF": frozenset({"ZA", "EG", "NG", "KE", "MA"}),
}


def country_in_continent(country: str, continent: str) -> bool:
    return country.upper() in CONTINENTS.get(continent.upper(), frozenset())


class LocationType(StatusEnum):
    COUNTRY = "country"
    STATE = "state"
    POSTCODE = "postcode"
    CONTINENT = "continent"

    @property
    def specificity(self) -> int:
        return _SPECIFICITY[self]


_SPECIFICITY = {
    LocationType.POSTCODE: 4,
    LocationType.STATE: 3,
    LocationType.COUNTRY: 2,
    LocationType.CONTINENT: 1,
}


class ShippingMethodType(StatusEnum):
    FLAT_RATE = "flat_rate"
    FREE_SHIPPING = "free_shipping"
    LOCAL_PICKUP = "local_pickup"

    @property
    def title(self) -> str:
        return _METHOD_TITLES[self]

    @property
    def description(self) -> str:
        return _METHOD_DESCRIPTIONS[self]


_METHOD_TITLES = {
    ShippingMethodType.FLAT_RATE: "Flat rate",
    ShippingMethodType.FREE_SHIPPING: "Free shipping",
    ShippingMethodType.LOCAL_PICKUP: "Local pickup",
}

_METHOD_DESCRIPTIONS = {
    ShippingMethodType.FLAT_RATE: "Fixed rate shipping",
    ShippingMethodType.FREE_SHIPPING: "Free shipping for qualifying orders",
    ShippingMethodType.LOCAL_PICKUP: "Pick up from store location",
}


class ShippingCalcType(StatusEnum):
    """How shipping-class costs add up on a flat rate."""

    PER_CLASS = "per_class"  # one charge per distinct class in the cart
    PER_ORDER = "per_order"  # only the most expensive class
    PER_ITEM = "per_item"  # class cost for every unit


class ShippingTaxStatus(StatusEnum):
    TAXABLE = "taxable"
    NONE = "none"


@dataclass(frozen=True)
class ZoneLocation(ValueObject):
    """
    One location entry of a zone.

    ``code`` is a country (``"US"``), a state (``"US:CA"``), a postcode
    pattern (``"90210"``, ``"9*"``, ``"90000...91000"``) or a continent (``"NA"``).
    """

    code: str
    location_type: LocationType

    def _validate(self) -> None:
        if not self.code.strip():
            raise ValueError("Zone location code is required")

    @property
    def specificity(self) -> int:
        return self.location_type.specificity

    def matches(self, destination: Location) -> bool:
        match self.location_type:
            case LocationType.COUNTRY:
                return self.code.strip().upper() == destination.country
            case LocationType.STATE:
                country, _, state = self.code.strip().upper().partition(":")
                return country == destination.country and state == destination.state
            case LocationType.POSTCODE:
                return bool(destination.postcode) and postcode_matches(
                    self.code, destination.postcode, strict=True
                )
            case LocationType.CONTINENT:
                return country_in_continent(destination.country, self.code)
        return False


@dataclass
class ShippingMethodSettings:
    """Settings payload; which fields matter depends on the method type."""

    cost: Decimal = Decimal("0")
    cost_per_item: Decimal | None = None
    cost_per_weight_unit: Decimal | None = None
    class_costs: dict[str, Decimal] = field(default_factory=dict)
    no_class_cost: Decimal | None = None
    calc_type: ShippingCalcType = ShippingCalcType.PER_CLASS
    tax_status: ShippingTaxStatus = ShippingTaxStatus.TAXABLE
    min_amount: Decimal | None = None
    requires_coupon: bool = False
    pickup_location: str | None = None

    def __post_init__(self):
        self.cost = to_decimal(self.cost)
        self.class_costs = {slug: to_decimal(value) for slug, value in self.class_costs.items()}
        for name in ("cost_per_item", "cost_per_weight_unit", "no_class_cost", "min_amount"):
            value = getattr(self, name)
            if value is not None:
                setattr(self, name, to_decimal(value))


@dataclass
class ShippingMethod:
    """Method instance configured on a zone."""

    instance_id: str
    method_type: ShippingMethodType
    settings: ShippingMethodSettings = field(default_factory=ShippingMethodSettings)
    title: str | None = None
    enabled: bool = True
    method_order: int = 0

    @property
    def display_title(self) -> str:
        return self.title or self.method_type.title


@dataclass
class ShippingZone(Entity[UUID]):
    """
    Named set of locations with the methods offered there.

    A zone without locations matches every destination ("rest of world").
    """

    name: str = ""
    zone_order: int = 0
    locations: list[ZoneLocation] = field(default_factory=list)
    methods: list[ShippingMethod] = field(default_factory=list)

    def is_rest_of_world(self) -> bool:
        return not self.locations

    def matches(self, destination: Location) -> bool:
        if self.is_rest_of_world():
            return True
        return any(location.matches(destination) for location in self.locations)

    def specificity(self, destination: Location | None = None) -> int:
        """
        Rank of the most specific location; with a destination, only matching
        locations count.
        """
        locations = self.locations
        if destination is not None:
            locations = [location for location in locations if location.matches(destination)]
        return max((location.specificity for location in locations), default=0)

    def enabled_methods(self) -> list[ShippingMethod]:
        return sorted((m for m in self.methods if m.enabled), key=lambda m: m.method_order)


@dataclass(frozen=True)
class ShippingClass:
    slug: str
    name: str
    description: str = ""


@dataclass(frozen=True)
class PackageItem:
    product_id: UUID
    variation_id: UUID | None
    quantity: int
    weight: Decimal | None
    shipping_class: str | None


@dataclass(frozen=True)
class ShippingPackage:
    id: str
    contents_cost: Decimal
    contents_weight: Decimal
    destination: Location
    items: tuple[PackageItem, ...] = ()

    @property
    def item_count(self) -> int:
        return sum(item.quantity for item in self.items)


@dataclass(frozen=True)
class ShippingRate:
    """Rate computed for one method on one package."""

    id: str
    method_id: str
    instance_id: str
    label: str
    cost: Decimal
    package_id: str
    taxable: bool = True
    meta: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class ShippingMethodInfo:
    instance_id: str
    method_id: str
    title: str
    description: str
