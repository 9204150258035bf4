"""
Inventory Service for Commerce Domain

Stock availability checks with backorder semantics. Checks never mutate
products: persisting reservations is the caller's concern.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime
from uuid import UUID

from storefront.core.domain import StatusEnum

from ..entities.cart import Cart
from ..entities.product import BackorderPolicy, Product, ProductVariation, StockStatus
from ..exceptions import CartError, CartErrorKind

logger = logging.getLogger(__name__)

OUT_OF_STOCK_MESSAGE = "Out of stock"


@dataclass(frozen=True)
class InventoryConfig:
    manage_stock: bool = True
    low_stock_threshold: int = 5


class StockChangeType(StatusEnum):
    SALE = "sale"
    REFUND = "refund"
    RESTOCK = "restock"
    ADJUSTMENT = "adjustment"
    RETURN = "return"


@dataclass(frozen=True)
class InventoryCheckResult:
    product_id: UUID | None
    requested_quantity: int
    is_available: bool
    is_backorder: bool = False
    available_quantity: int | None = None
    message: str | None = None
    variation_id: UUID | None = None


@dataclass(frozen=True)
class StockReservation:
    """
    Outcome of validating a batch of lines.

    ``results`` always holds one entry per requested line, in order.
    """

    ok: bool
    results: list[InventoryCheckResult] = field(default_factory=list)

    @property
    def failures(self) -> list[InventoryCheckResult]:
        return [result for result in self.results if not result.is_available]


@dataclass(frozen=True)
class StockLine:
    product: Product
    quantity: int
    variation: ProductVariation | None = None


@dataclass(frozen=True)
class StockChange:
    product_id: UUID
    change_type: StockChangeType
    quantity_change: int
    previous_quantity: int | None
    new_quantity: int | None
    created_at: datetime
    variation_id: UUID | None = None
    order_id: UUID | None = None
    note: str | None = None


class InventoryService:
    """
    Domain service for stock checks and stock arithmetic.

    Example:
        ```python
        service = InventoryService(InventoryConfig(low_stock_threshold=3))
        result = service.check(product, requested_qty=2)
        if not result.is_available:
            print(result.message)  # "Only 1 in stock"
        ```
    """

    def __init__(self, config: InventoryConfig | None = None):
        self.config = config or InventoryConfig()

    def check(self, product: Product, requested_qty: int) -> InventoryCheckResult:
        """Availability of ``requested_qty`` units of a simple product."""
        return self._evaluate(
            product_id=product.id,
            variation_id=None,
            requested_qty=requested_qty,
            manages_stock=product.manage_stock,
            stock_quantity=product.stock_quantity,
            stock_status=product.stock_status,
            backorders=product.backorders,
        )

    def check_variation(self, product: Product, variation: ProductVariation, requested_qty: int) -> InventoryCheckResult:
        """
        Availability of a variation; stock fields the variation leaves unset come from the parent.

        A variation that does not manage its own stock uses the parent's managed
        quantity and backorder policy.
        """
        if variation.manage_stock:
            manages_stock = True
            stock_quantity = variation.stock_quantity
            backorders = variation.resolve(product, "backorders")
        else:
            manages_stock = product.manage_stock
            stock_quantity = product.stock_quantity
            backorders = product.backorders

        return self._evaluate(
            product_id=product.id,
            variation_id=variation.id,
            requested_qty=requested_qty,
            manages_stock=manages_stock,
            stock_quantity=stock_quantity,
            stock_status=variation.resolve(product, "stock_status"),
            backorders=backorders,
        )

    def _evaluate(
        self,
        *,
        product_id: UUID | None,
        variation_id: UUID | None,
        requested_qty: int,
        manages_stock: bool,
        stock_quantity: int | None,
        stock_status: StockStatus,
        backorders: BackorderPolicy,
    ) -> InventoryCheckResult:
        base = {"product_id": product_id, "variation_id": variation_id, "requested_quantity": requested_qty}

        if not self.config.manage_stock:
            return InventoryCheckResult(is_available=True, **base)

        if not manages_stock:
            out_of_stock = stock_status == StockStatus.OUT_OF_STOCK
            return InventoryCheckResult(
                is_available=not out_of_stock,
                message=OUT_OF_STOCK_MESSAGE if out_of_stock else None,
                **base,
            )

        stock = stock_quantity if stock_quantity is not None else 0
        if stock >= requested_qty:
            return InventoryCheckResult(is_available=True, available_quantity=stock, **base)

        if backorders.allows_backorders():
            return InventoryCheckResult(
                is_available=True,
                is_backorder=True,
                available_quantity=stock,
                message=f"{requested_qty - stock} on backorder",
                **base,
            )

        return InventoryCheckResult(
            is_available=False,
            available_quantity=stock,
            message=f"Only {stock} in stock",
            **base,
        )

    def reserve(self, lines: list[StockLine]) -> StockReservation:
        """Validate every line; succeeds only when all of them are available."""
        results = [
            self.check_variation(line.product, line.variation, line.quantity)
            if line.variation is not None
            else self.check(line.product, line.quantity)
            for line in lines
        ]
        ok = all(result.is_available for result in results)
        if not ok:
            logger.debug("Stock reservation rejected for %d of %d lines", sum(not r.is_available for r in results), len(results))
        return StockReservation(ok=ok, results=results)

    def validate_cart(
        self,
        cart: Cart,
        products: dict[UUID, Product],
        variations: dict[UUID, ProductVariation],
    ) -> list[CartError]:
        """Re-check every cart line against current catalog data, collecting every problem."""
        errors: list[CartError] = []
        for item in cart.items:
            product = products.get(item.product_id)
            if product is None:
                errors.append(CartError(CartErrorKind.PRODUCT_NOT_FOUND, product_id=item.product_id))
                continue

            if item.variation_id is not None:
                variation = variations.get(item.variation_id)
                if variation is None:
                    errors.append(CartError(CartErrorKind.VARIATION_NOT_FOUND, product_id=item.product_id))
                    continue
                result = self.check_variation(product, variation, item.quantity)
            else:
                result = self.check(product, item.quantity)

            if not result.is_available:
                errors.append(
                    CartError(
                        CartErrorKind.INSUFFICIENT_STOCK,
                        available=result.available_quantity or 0,
                        requested=item.quantity,
                        product_id=item.product_id,
                    )
                )
        return errors

    # Stock arithmetic

    @staticmethod
    def calculate_new_stock(current: int | None, change_type: StockChangeType, quantity: int) -> int | None:
        """
        Apply a stock change.

        Sales subtract, refunds, returns and restocks add, adjustments set the
        absolute level. Unmanaged stock (``None``) stays ``None``.
        """
        if current is None:
            return None
        match change_type:
            case StockChangeType.SALE:
                return current - quantity
            case StockChangeType.REFUND | StockChangeType.RETURN | StockChangeType.RESTOCK:
                return current + quantity
            case StockChangeType.ADJUSTMENT:
                return quantity
        raise ValueError(f"Unknown stock change type: {change_type}")

    def create_stock_change(
        self,
        product_id: UUID,
        change_type: StockChangeType,
        quantity: int,
        previous_quantity: int | None,
        now: datetime,
        variation_id: UUID | None = None,
        order_id: UUID | None = None,
        note: str | None = None,
    ) -> StockChange:
        return StockChange(
            product_id=product_id,
            variation_id=variation_id,
            change_type=change_type,
            quantity_change=quantity,
            previous_quantity=previous_quantity,
            new_quantity=self.calculate_new_stock(previous_quantity, change_type, quantity),
            order_id=order_id,
            note=note,
            created_at=now,
        )

    # Stock display

    def _threshold(self, product: Product) -> int:
        if product.low_stock_amount is not None:
            return product.low_stock_amount
        return self.config.low_stock_threshold

    def is_low_stock(self, product: Product) -> bool:
        if not product.manage_stock:
            return False
        stock = product.stock_quantity or 0
        return 0 < stock <= self._threshold(product)

    def is_out_of_stock(self, product: Product) -> bool:
        if not product.manage_stock:
            return product.stock_status == StockStatus.OUT_OF_STOCK
        return product.stock_quantity is not None and product.stock_quantity <= 0

    def stock_status(self, product: Product) -> StockStatus:
        if not product.manage_stock or product.stock_quantity is None:
            return product.stock_status
        if product.stock_quantity > 0:
            return StockStatus.IN_STOCK
        return StockStatus.ON_BACKORDER if product.allows_backorders() else StockStatus.OUT_OF_STOCK

    def stock_text(self, product: Product) -> str:
        status = self.stock_status(product)
        if status == StockStatus.OUT_OF_STOCK:
            return OUT_OF_STOCK_MESSAGE
        if status == StockStatus.ON_BACKORDER:
            return "Available on backorder"
        if not product.manage_stock or product.stock_quantity is None:
            return "In stock"
        if product.stock_quantity <= self._threshold(product):
            return f"Only {product.stock_quantity} left in stock"
        return f"{product.stock_quantity} in stock"
