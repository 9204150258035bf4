"""
Order Status Value Object for Commerce Domain

Represents the lifecycle states of an order with transition rules.
"""

from dataclasses import dataclass
from datetime import datetime

from storefront.core.domain import StatusEnum


class OrderStatus(StatusEnum):
    """
    Order lifecycle states.

    Valid transitions:
    - DRAFT -> PENDING
    - CHECKOUT -> PENDING, FAILED
    - PENDING -> PROCESSING, ON_HOLD, CANCELLED, FAILED
    - PROCESSING -> COMPLETED, ON_HOLD, CANCELLED, REFUNDED
    - ON_HOLD -> PENDING, PROCESSING, CANCELLED
    - COMPLETED -> REFUNDED
    - CANCELLED, FAILED -> PENDING
    - REFUNDED -> (terminal state)
    """

    DRAFT = "draft"
    CHECKOUT = "checkout"
    PENDING = "pending"
    PROCESSING = "processing"
    ON_HOLD = "on_hold"
    COMPLETED = "completed"
    CANCELLED = "cancelled"
    REFUNDED = "refunded"
    FAILED = "failed"

    def can_transition_to(self, new_status: "OrderStatus") -> bool:
        """
        Check if transition to new status is valid.

        Args:
            new_status: Target status

        Returns:
            True if transition is allowed
        """
        return new_status in _TRANSITIONS[self]

    def get_valid_transitions(self) -> list["OrderStatus"]:
        """Statuses reachable in one step, in table order."""
        return list(_TRANSITIONS[self])

    def is_terminal(self) -> bool:
        """Check if this is a terminal (final) state."""
        return not _TRANSITIONS[self]

    def is_editable(self) -> bool:
        """Items and lines may change only while the order is being prepared or held."""
        return self in (OrderStatus.DRAFT, OrderStatus.PENDING, OrderStatus.ON_HOLD)

    def is_refundable(self) -> bool:
        return self in (OrderStatus.PROCESSING, OrderStatus.COMPLETED, OrderStatus.ON_HOLD)

    def is_paid(self) -> bool:
        return self in (OrderStatus.PROCESSING, OrderStatus.COMPLETED)

    @property
    def label(self) -> str:
        return _LABELS[self]


_TRANSITIONS: dict[OrderStatus, tuple[OrderStatus, ...]] = {
    OrderStatus.DRAFT: (OrderStatus.PENDING,),
    OrderStatus.CHECKOUT: (OrderStatus.PENDING, OrderStatus.FAILED),
    OrderStatus.PENDING: (
        OrderStatus.PROCESSING,
        OrderStatus.ON_HOLD,
        OrderStatus.CANCELLED,
        OrderStatus.FAILED,
    ),
    OrderStatus.PROCESSING: (
        OrderStatus.COMPLETED,
        OrderStatus.ON_HOLD,
        OrderStatus.CANCELLED,
        OrderStatus.REFUNDED,
    ),
    OrderStatus.ON_HOLD: (OrderStatus.PENDING, OrderStatus.PROCESSING, OrderStatus.CANCELLED),
    OrderStatus.COMPLETED: (OrderStatus.REFUNDED,),
    OrderStatus.CANCELLED: (OrderStatus.PENDING,),
    OrderStatus.FAILED: (OrderStatus.PENDING,),
    OrderStatus.REFUNDED: (),
}

_LABELS: dict[OrderStatus, str] = {
    OrderStatus.DRAFT: "Draft",
    OrderStatus.CHECKOUT: "Checkout",
    OrderStatus.PENDING: "Pending payment",
    OrderStatus.PROCESSING: "Processing",
    OrderStatus.ON_HOLD: "On hold",
    OrderStatus.COMPLETED: "Completed",
    OrderStatus.CANCELLED: "Cancelled",
    OrderStatus.REFUNDED: "Refunded",
    OrderStatus.FAILED: "Failed",
}


@dataclass(frozen=True)
class StatusTransition:
    """Audit record of one status change."""

    from_status: OrderStatus
    to_status: OrderStatus
    timestamp: datetime
    note: str | None = None
    actor: str | None = None
