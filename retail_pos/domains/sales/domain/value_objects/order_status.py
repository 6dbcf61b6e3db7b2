"""
Order Status Value Objects

Lifecycle states of an order and the payment methods a sale can use.
"""

from dataclasses import dataclass

from retail_pos.core.domain import StatusEnum


class OrderStatus(StatusEnum):
    """
    Order lifecycle states.

    Valid transitions:
    - PENDING -> COMPLETED, CANCELLED
    - COMPLETED -> REFUNDED, PARTIALLY_REFUNDED (through a return order)
    - CANCELLED, REFUNDED, PARTIALLY_REFUNDED -> (terminal states)
    """

    PENDING = "pending"
    COMPLETED = "completed"
    CANCELLED = "cancelled"
    REFUNDED = "refunded"
    PARTIALLY_REFUNDED = "partially_refunded"

    def can_transition_to(self, new_status: "OrderStatus") -> bool:
        """
        Check if transition to new status is valid.

        Args:
            new_status: Target status

        Returns:
            True if transition is allowed
        """
        return new_status in ORDER_TRANSITIONS[self]

    def get_valid_transitions(self) -> list["OrderStatus"]:
        """Get list of valid next statuses."""
        return sorted(ORDER_TRANSITIONS[self], key=lambda s: s.value)

    def is_terminal(self) -> bool:
        """Check if this is a terminal (final) state."""
        return not ORDER_TRANSITIONS[self]

    def is_modifiable(self) -> bool:
        """Items, discounts and payments can only change while pending."""
        return self is OrderStatus.PENDING

    def is_refunded(self) -> bool:
        return self in (OrderStatus.REFUNDED, OrderStatus.PARTIALLY_REFUNDED)


ORDER_TRANSITIONS: dict[OrderStatus, frozenset[OrderStatus]] = {
    OrderStatus.PENDING: frozenset({OrderStatus.COMPLETED, OrderStatus.CANCELLED}),
    OrderStatus.COMPLETED: frozenset({OrderStatus.REFUNDED, OrderStatus.PARTIALLY_REFUNDED}),
    OrderStatus.CANCELLED: frozenset(),
    OrderStatus.REFUNDED: frozenset(),
    OrderStatus.PARTIALLY_REFUNDED: frozenset(),
}


class PaymentMethod(StatusEnum):
    """How the customer paid for an order."""

    CASH = "cash"
    CREDIT_CARD = "credit_card"
    DEBIT_CARD = "debit_card"
    MOBILE_PAYMENT = "mobile_payment"
    BANK_TRANSFER = "bank_transfer"


@dataclass(frozen=True)
class OrderStatusTransition:
    """
    A status change with its reason.

    Kept on the order as a status history.
    """

    from_status: OrderStatus | None
    to_status: OrderStatus
    reason: str | None = None

    def __str__(self) -> str:
        from_str = self.from_status.value if self.from_status else "NEW"
        return f"{from_str} -> {self.to_status.value}"
