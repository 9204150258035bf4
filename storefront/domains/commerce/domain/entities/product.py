"""
Product Entity for Commerce Domain

Catalog products and their variations. Product type is a tag: behaviour
is a function of the tag and the fields, there is no class per type.
Aggregations such as a product's variations come from repository queries,
never from fields on the entity.
"""

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from typing import Any
from uuid import UUID

from storefront.core.domain import AggregateRoot, Entity, StatusEnum, ValidationException, ValueObject, to_decimal


class ProductType(StatusEnum):
    SIMPLE = "simple"
    VARIABLE = "variable"
    GROUPED = "grouped"
    EXTERNAL = "external"
    VIRTUAL = "virtual"
    DOWNLOADABLE = "downloadable"
    BUNDLE = "bundle"
    SUBSCRIPTION = "subscription"
    BOOKING = "booking"


class ProductStatus(StatusEnum):
    DRAFT = "draft"
    PENDING = "pending"
    PRIVATE = "private"
    PUBLISHED = "published"
    TRASH = "trash"


class StockStatus(StatusEnum):
    IN_STOCK = "in_stock"
    OUT_OF_STOCK = "out_of_stock"
    ON_BACKORDER = "on_backorder"


class BackorderPolicy(StatusEnum):
    """Whether a managed product may be sold past its stock."""

    NO = "no"
    NOTIFY = "notify"
    YES = "yes"

    def allows_backorders(self) -> bool:
        return self is not BackorderPolicy.NO


class TaxStatus(StatusEnum):
    """Which charges of a product are taxable."""

    TAXABLE = "taxable"
    SHIPPING = "shipping"  # only shipping for the product is taxed
    NONE = "none"


@dataclass(frozen=True)
class PriceTier(ValueObject):
    """Unit price that applies from ``min_quantity`` units upward."""

    min_quantity: int
    price: Decimal

    def _validate(self) -> None:
        object.__setattr__(self, "price", to_decimal(self.price))
        if self.min_quantity < 1:
            raise ValueError("Tier min_quantity must be at least 1")
        if self.price < 0:
            raise ValueError("Tier price cannot be negative")


def _optional_decimal(value: Any) -> Decimal | None:
    return None if value is None else to_decimal(value)


def _check_sale_price(regular: Decimal | None, sale: Decimal | None, owner: str) -> None:
    if regular is not None and sale is not None and sale > regular:
        raise ValidationException(
            f"{owner} sale price {sale} exceeds regular price {regular}",
            field="sale_price",
        )


@dataclass
class Product(AggregateRoot[UUID]):
    """
    Product aggregate root for commerce domain.

    Example:
        ```python
        product = Product(
            id=generate_uuid(),
            name="Espresso Beans 1kg",
            status=ProductStatus.PUBLISHED,
            regular_price=Decimal("24.00"),
            sale_price=Decimal("19.50"),
            manage_stock=True,
            stock_quantity=40,
        )
        ```
    """

    name: str = ""
    sku: str | None = None
    product_type: ProductType = ProductType.SIMPLE
    status: ProductStatus = ProductStatus.DRAFT

    # Pricing
    regular_price: Decimal | None = None
    sale_price: Decimal | None = None
    sale_from: datetime | None = None
    sale_to: datetime | None = None
    price_tiers: list[PriceTier] = field(default_factory=list)

    # Tax
    tax_class: str = "standard"
    tax_status: TaxStatus = TaxStatus.TAXABLE

    # Inventory
    manage_stock: bool = False
    stock_quantity: int | None = None
    stock_status: StockStatus = StockStatus.IN_STOCK
    backorders: BackorderPolicy = BackorderPolicy.NO
    low_stock_amount: int | None = None
    sold_individually: bool = False

    # Shipping
    weight: Decimal | None = None
    length: Decimal | None = None
    width: Decimal | None = None
    height: Decimal | None = None
    shipping_class: str | None = None

    is_virtual: bool = False
    is_downloadable: bool = False

    category_ids: list[UUID] = field(default_factory=list)

    def __post_init__(self):
        """Normalise numbers and reject a sale price above the regular price."""
        self.regular_price = _optional_decimal(self.regular_price)
        self.sale_price = _optional_decimal(self.sale_price)
        self.weight = _optional_decimal(self.weight)
        _check_sale_price(self.regular_price, self.sale_price, "Product")

    @property
    def needs_shipping(self) -> bool:
        return not (self.is_virtual or self.product_type == ProductType.VIRTUAL)

    def allows_backorders(self) -> bool:
        return self.backorders.allows_backorders()


@dataclass
class ProductVariation(Entity[UUID]):
    """
    Variation of a variable product.

    Every ``None`` field inherits the parent's value; use ``resolve`` to read
    the effective value.
    """

    product_id: UUID | None = None
    sku: str | None = None
    status: ProductStatus = ProductStatus.PUBLISHED

    regular_price: Decimal | None = None
    sale_price: Decimal | None = None
    sale_from: datetime | None = None
    sale_to: datetime | None = None

    manage_stock: bool | None = None
    stock_quantity: int | None = None
    stock_status: StockStatus | None = None
    backorders: BackorderPolicy | None = None

    weight: Decimal | None = None
    length: Decimal | None = None
    width: Decimal | None = None
    height: Decimal | None = None
    shipping_class: str | None = None
    tax_class: str | None = None

    is_virtual: bool | None = None
    is_downloadable: bool | None = None

    attributes: dict[str, str] = field(default_factory=dict)

    def __post_init__(self):
        self.regular_price = _optional_decimal(self.regular_price)
        self.sale_price = _optional_decimal(self.sale_price)
        self.weight = _optional_decimal(self.weight)
        _check_sale_price(self.regular_price, self.sale_price, "Variation")

    def resolve(self, parent: Product, name: str) -> Any:
        """Own value of ``name`` when set, otherwise the parent's."""
        value = getattr(self, name)
        return getattr(parent, name) if value is None else value

    def has_own_prices(self) -> bool:
        return self.regular_price is not None or self.sale_price is not None
