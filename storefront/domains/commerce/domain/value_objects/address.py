"""
Address Value Objects for Commerce Domain

Billing/shipping addresses snapshotted on orders, and the reduced
location used for tax and shipping-zone matching.
"""

from dataclasses import dataclass

from storefront.core.domain import ValueObject


@dataclass(frozen=True)
class Location(ValueObject):
    """
    Destination used for tax-rate and shipping-zone lookups.

    Country and state codes are normalised to upper case.
    """

    country: str
    state: str = ""
    postcode: str = ""
    city: str = ""

    def _validate(self) -> None:
        object.__setattr__(self, "country", (self.country or "").strip().upper())
        object.__setattr__(self, "state", (self.state or "").strip().upper())
        object.__setattr__(self, "postcode", (self.postcode or "").strip())
        object.__setattr__(self, "city", (self.city or "").strip())


@dataclass(frozen=True)
class OrderAddress(ValueObject):
    """
    Physical address value object.

    Construction never fails: checkout reports missing fields as
    validation errors instead of raising.
    """

    first_name: str = ""
    last_name: str = ""
    company: str = ""
    address_1: str = ""
    address_2: str = ""
    city: str = ""
    state: str = ""
    postcode: str = ""
    country: str = ""
    phone: str = ""

    def missing_field_message(self) -> str | None:
        """First storefront message for a required field left blank, if any."""
        if not self.address_1.strip():
            return "Street address is required"
        if not self.city.strip():
            return "City is required"
        if not self.country.strip():
            return "Country is required"
        if not self.postcode.strip():
            return "Postal code is required"
        return None

    def to_location(self) -> Location:
        return Location(country=self.country, state=self.state, postcode=self.postcode, city=self.city)

    def get_full_address(self) -> str:
        """Get full formatted address."""
        parts = [self.address_1, self.address_2, self.city, self.state, self.postcode, self.country]
        return ", ".join(p for p in parts if p)

    def __str__(self) -> str:
        return self.get_full_address()
