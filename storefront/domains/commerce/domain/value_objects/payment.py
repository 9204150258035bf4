"""
Payment Value Objects for Commerce Domain

Abstract request/response contract exchanged with payment gateways.
"""

from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any
from uuid import UUID


@dataclass(frozen=True)
class PaymentRequest:
    order_id: UUID | None
    order_number: str
    amount: Decimal
    currency: str
    payment_method: str
    customer_email: str = ""
    return_url: str | None = None
    metadata: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class PaymentResult:
    """
    Gateway answer.

    ``action_url`` is set when the customer must finish the payment
    elsewhere (3-D Secure, hosted checkout).
    """

    success: bool
    transaction_id: str | None = None
    error: str | None = None
    action_url: str | None = None

    @property
    def requires_action(self) -> bool:
        return self.action_url is not None

    @classmethod
    def succeeded(cls, transaction_id: str) -> "PaymentResult":
        return cls(success=True, transaction_id=transaction_id)

    @classmethod
    def failed(cls, error: str) -> "PaymentResult":
        return cls(success=False, error=error)
