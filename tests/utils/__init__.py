"""Test utilities and helpers."""

from tests.utils.builders import (
    CouponBuilder,
    ProductBuilder,
    VariationBuilder,
    ZoneBuilder,
    make_address,
)

__all__ = [
    # Builders
    "ProductBuilder",
    "VariationBuilder",
    "CouponBuilder",
    "ZoneBuilder",
    "make_address",
]
