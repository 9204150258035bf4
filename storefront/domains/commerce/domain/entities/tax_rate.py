"""
Tax Rate Entity for Commerce Domain

Rows of the tax table and the results computed from them.
"""

from dataclasses import dataclass
from decimal import Decimal

from storefront.core.domain import StatusEnum, ValueObject, to_decimal

from ..value_objects.address import Location

POSTCODE_WILDCARD = "*"
POSTCODE_RANGE = "..."


class TaxClass(StatusEnum):
    """Built-in tax class slugs. Stores may define more; slugs are plain strings on rates."""

    STANDARD = "standard"
    REDUCED_RATE = "reduced-rate"
    ZERO_RATE = "zero-rate"

    @property
    def display_name(self) -> str:
        return f"{self.value.removesuffix('-rate').capitalize()} rate"


def postcode_matches(pattern: str, postcode: str, *, strict: bool = False) -> bool:
    """
    Match a postcode against a pattern.

    Patterns are exact (case-insensitive), ``*``-suffix wildcards compared as
    prefixes, or ``A...B`` numeric ranges. A range whose bounds or candidate
    are not integers does not constrain the match, unless ``strict`` is set;
    strict matching also ignores hyphens and spaces in the candidate.
    """
    candidate = postcode.strip().upper()
    if strict:
        candidate = candidate.replace("-", "").replace(" ", "")
    pattern = pattern.strip().upper()

    if POSTCODE_WILDCARD in pattern:
        return candidate.startswith(pattern.replace(POSTCODE_WILDCARD, ""))

    if POSTCODE_RANGE in pattern:
        start_text, _, end_text = pattern.partition(POSTCODE_RANGE)
        try:
            start, end, value = int(start_text), int(end_text), int(candidate)
        except ValueError:
            return not strict
        return start <= value <= end

    return candidate == pattern


@dataclass(frozen=True)
class TaxRate(ValueObject):
    """
    A single tax-table row.

    Empty ``state``, ``postcode`` and ``city`` match any destination.
    Rates with the same ``priority`` form one group; ``compound`` rates are
    computed on the amount plus the tax of lower-priority groups.
    """

    id: str
    country: str
    rate: Decimal
    name: str = "Tax"
    state: str = ""
    postcode: str = ""
    city: str = ""
    priority: int = 1
    compound: bool = False
    shipping: bool = True
    tax_order: int = 0
    tax_class: str = TaxClass.STANDARD.value

    def _validate(self) -> None:
        object.__setattr__(self, "rate", to_decimal(self.rate))
        object.__setattr__(self, "country", self.country.strip().upper())
        object.__setattr__(self, "state", self.state.strip().upper())
        if self.rate < 0:
            raise ValueError("Tax rate cannot be negative")

    @property
    def rate_code(self) -> str:
        return f"{self.country}_{self.name}".upper().replace(" ", "_")

    def matches_location(self, location: Location) -> bool:
        if self.country and self.country != location.country:
            return False
        if self.state and self.state != location.state:
            return False
        if self.postcode and not postcode_matches(self.postcode, location.postcode):
            return False
        if self.city and self.city.lower() != location.city.lower():
            return False
        return True


@dataclass(frozen=True)
class CalculatedTax:
    """Tax produced by one rate for one amount."""

    rate_id: str
    rate_code: str
    label: str
    rate: Decimal
    compound: bool
    tax_amount: Decimal
    shipping_tax_amount: Decimal = Decimal("0")
