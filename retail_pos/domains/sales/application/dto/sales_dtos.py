"""Sales DTOs.

Data Transfer Objects for order and stock operations: checkout,
item changes, payments, cancellations, returns and restocking.
"""

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from typing import Any

from retail_pos.core.domain import DomainException
from retail_pos.domains.sales.domain.value_objects import PaymentMethod

# =============================================================================
# Request DTOs
# =============================================================================


@dataclass(frozen=True)
class LineItemInput:
    """One requested line. ``unit_price`` defaults to the catalogue price."""

    product_id: str
    quantity: int
    unit_price: Decimal | None = None
    discount_percentage: Decimal | None = None
    notes: str | None = None


@dataclass(frozen=True)
class CreateOrderRequest:
    """Request DTO for opening a new sale."""

    order_id: str
    items: list[LineItemInput] = field(default_factory=list)
    order_number: str | None = None
    customer_name: str | None = None
    customer_email: str | None = None
    customer_phone: str | None = None
    employee_id: str | None = None
    payment_method: PaymentMethod = PaymentMethod.CASH
    notes: str | None = None


@dataclass(frozen=True)
class AddOrderItemRequest:
    """Request DTO for adding a line to a pending order."""

    order_id: str
    item: LineItemInput


@dataclass(frozen=True)
class UpdateOrderItemRequest:
    """
    Request DTO for changing a line.

    Only the fields that are set are applied; a fixed discount wins over a
    percentage when both are given.
    """

    order_id: str
    product_id: str
    quantity: int | None = None
    unit_price: Decimal | None = None
    discount_percentage: Decimal | None = None
    discount_amount: Decimal | None = None


@dataclass(frozen=True)
class RemoveOrderItemRequest:
    """Request DTO for removing a line by product."""

    order_id: str
    product_id: str


@dataclass(frozen=True)
class ApplyOrderDiscountRequest:
    """Request DTO for an order-level discount."""

    order_id: str
    amount: Decimal


@dataclass(frozen=True)
class RecordPaymentRequest:
    """Request DTO for the tendered amount."""

    order_id: str
    amount_paid: Decimal
    payment_method: PaymentMethod | None = None


@dataclass(frozen=True)
class CompleteOrderRequest:
    """Request DTO for checkout."""

    order_id: str
    require_full_payment: bool = True


@dataclass(frozen=True)
class CancelOrderRequest:
    """Request DTO for cancelling a pending order."""

    order_id: str
    reason: str | None = None


@dataclass(frozen=True)
class InitiateReturnRequest:
    """
    Request DTO for returning goods.

    ``quantities`` maps product id to units returned; None returns the whole
    order.
    """

    order_id: str
    return_order_id: str
    quantities: dict[str, int] | None = None
    return_order_number: str | None = None
    reason: str | None = None
    requested_at: datetime | None = None


@dataclass(frozen=True)
class RegisterProductRequest:
    """Request DTO for adding a product to the catalogue."""

    product_id: str
    name: str
    price: Decimal
    product_code: str | None = None
    description: str | None = None
    cost_price: Decimal | None = None
    quantity_on_hand: int = 0
    reorder_level: int | None = None
    max_stock_level: int | None = None


@dataclass(frozen=True)
class RestockProductRequest:
    """Request DTO for receiving goods."""

    product_id: str
    quantity: int


@dataclass(frozen=True)
class DiscontinueProductRequest:
    """Request DTO for withdrawing a product from sale."""

    product_id: str


# =============================================================================
# Result DTOs
# =============================================================================


@dataclass
class UseCaseResult:
    """Generic result for use case operations."""

    success: bool
    data: Any | None = None
    error_code: str | None = None
    error_message: str | None = None
    details: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def ok(cls, data: Any = None) -> "UseCaseResult":
        """Create successful result."""
        return cls(success=True, data=data)

    @classmethod
    def error(cls, code: str, message: str, details: dict[str, Any] | None = None) -> "UseCaseResult":
        """Create error result."""
        return cls(success=False, error_code=code, error_message=message, details=details or {})

    @classmethod
    def from_exception(cls, exc: DomainException) -> "UseCaseResult":
        """Create error result from a domain exception."""
        return cls.error(exc.code, exc.message, dict(exc.details))
