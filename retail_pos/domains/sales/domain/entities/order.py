"""
Order Entity

A sale (or a return) with its line items, money totals and lifecycle.
"""

from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import UTC, datetime
from decimal import Decimal
from typing import TYPE_CHECKING, Any

from retail_pos.core.domain import (
    AggregateRoot,
    InvalidStateTransitionException,
    Money,
    Percentage,
    ValidationException,
    to_decimal,
)

from ..events import OrderCancelled, OrderCompleted, OrderReturned
from ..services import line_item_calculator as calculator
from ..services.return_policy import ReturnPolicy
from ..value_objects import OrderStatus, OrderStatusTransition, PaymentMethod
from .line_item import LineItem

if TYPE_CHECKING:
    from ..services.stock_ledger import StockLedger, StockReservation

DEFAULT_TAX_RATE = Decimal("0.08")


@dataclass(eq=False)
class Order(AggregateRoot[str]):
    """
    Order aggregate root.

    Totals are recalculated by every operation that changes items, discount
    or payment:

    - ``subtotal = sum(item.subtotal)``
    - ``tax_amount = round(subtotal * tax_rate, 2)``
    - ``total_amount = max(0, subtotal + tax_amount - discount_amount)``
    - ``discount_amount <= subtotal + tax_amount``; item changes that would
      break this are rejected and undone
    - ``change_amount = max(0, amount_paid - total_amount)``

    An Order is meant to be owned by one logical transaction at a time;
    its methods take no locks.

    Example:
        ```python
        order = Order.create("o-1")
        order.add_item(LineItem(product_id="p-1", quantity=3, unit_price=Money.of("10.00")))
        order.total_amount        # 32.40
        order.record_payment(Decimal("40.00"))
        order.change_amount       # 7.60
        order.complete(ledger)
        ```
    """

    order_number: str | None = None  # Opaque, generated elsewhere
    customer_name: str | None = None
    customer_email: str | None = None
    customer_phone: str | None = None
    employee_id: str | None = None
    payment_method: PaymentMethod = PaymentMethod.CASH
    notes: str | None = None

    items: list[LineItem] = field(default_factory=list)
    status: OrderStatus = OrderStatus.PENDING
    status_history: list[OrderStatusTransition] = field(default_factory=list, repr=False)

    # Money
    tax_rate: Decimal = DEFAULT_TAX_RATE
    subtotal: Money = field(default_factory=Money.zero)
    tax_amount: Money = field(default_factory=Money.zero)
    discount_amount: Money = field(default_factory=Money.zero)
    total_amount: Money = field(default_factory=Money.zero)
    amount_paid: Money = field(default_factory=Money.zero)
    change_amount: Money = field(default_factory=Money.zero)

    # Returns
    is_return: bool = False
    original_order_id: str | None = None

    completed_at: datetime | None = None
    cancelled_at: datetime | None = None

    def __post_init__(self):
        """Attach items and derive totals."""
        self.tax_rate = to_decimal(self.tax_rate, field="tax_rate")
        if self.tax_rate < 0:
            raise ValidationException("Tax rate cannot be negative", field="tax_rate")
        self.discount_amount = Money.of(self.discount_amount)
        self.amount_paid = Money.of(self.amount_paid)
        for item in self.items:
            item.order_id = self.id
        self.recalculate_totals()

    # Totals

    def recalculate_totals(self) -> None:
        """Recompute every derived amount from items, discount and payment."""
        subtotal = Money.zero()
        for item in self.items:
            subtotal = subtotal.add(item.subtotal)
        self.subtotal = subtotal
        self.tax_amount = subtotal.multiply(self.tax_rate)
        self.total_amount = subtotal.add(self.tax_amount).subtract(self.discount_amount).clamp_zero()
        self.change_amount = self.amount_paid.subtract(self.total_amount).clamp_zero()

    @property
    def balance_due(self) -> Money:
        return self.total_amount.subtract(self.amount_paid).clamp_zero()

    @property
    def total_items(self) -> int:
        """Sum of quantities across lines."""
        return sum(item.quantity for item in self.items)

    @property
    def unique_products_count(self) -> int:
        return len({item.product_id for item in self.items})

    # Item management (pending orders only)

    def add_item(self, item: LineItem) -> LineItem:
        """
        Append a line and recalculate totals.

        Raises:
            InvalidStateTransitionException: If the order is not pending
            ValidationException: If the line already belongs to an order
        """
        self._ensure_modifiable("add_item")
        if self._index_of(item) is not None or (item.order_id is not None and item.order_id != self.id):
            raise ValidationException("Line item already belongs to an order", field="items")

        item.order_id = self.id
        self.items.append(item)
        self.recalculate_totals()
        self.touch()
        return item

    def remove_item(self, item: LineItem) -> bool:
        """
        Remove a line by identity and recalculate totals.

        Returns:
            True if the line was part of this order

        Raises:
            ValidationException: If the order discount would exceed what is
                left; the line stays on the order
        """
        self._ensure_modifiable("remove_item")
        index = self._index_of(item)
        if index is None:
            return False

        del self.items[index]
        self.recalculate_totals()
        try:
            self._ensure_discount_covered(self.discount_amount)
        except ValidationException:
            self.items.insert(index, item)
            self.recalculate_totals()
            raise

        item.order_id = None
        self.touch()
        return True

    def find_item(self, product_id: str) -> LineItem | None:
        return next((item for item in self.items if item.product_id == product_id), None)

    def update_item_quantity(self, item: LineItem, quantity: int) -> LineItem:
        return self._change_item(
            item, "update_item_quantity", lambda line: calculator.update_quantity(line, quantity)
        )

    def update_item_unit_price(self, item: LineItem, unit_price: Money | Decimal | str) -> LineItem:
        return self._change_item(
            item, "update_item_unit_price", lambda line: calculator.update_unit_price(line, unit_price)
        )

    def apply_item_percentage_discount(self, item: LineItem, percentage: Percentage | Decimal | str) -> LineItem:
        return self._change_item(
            item,
            "apply_item_percentage_discount",
            lambda line: calculator.apply_percentage_discount(line, percentage),
        )

    def apply_item_fixed_discount(self, item: LineItem, amount: Money | Decimal | str) -> LineItem:
        return self._change_item(
            item, "apply_item_fixed_discount", lambda line: calculator.apply_fixed_discount(line, amount)
        )

    # Order level discount and payment

    def apply_discount(self, amount: Money | Decimal | str) -> None:
        """
        Set the order-level discount.

        Raises:
            ValidationException: If the discount is negative or larger than
                subtotal plus tax
        """
        self._ensure_modifiable("apply_discount")
        discount = Money.of(amount)
        if discount.is_negative():
            raise ValidationException(f"Discount cannot be negative: {discount}", field="discount_amount")
        self._ensure_discount_covered(discount)

        self.discount_amount = discount
        self.recalculate_totals()
        self.touch()

    def record_payment(self, amount_paid: Money | Decimal | str) -> Money:
        """
        Record the tendered amount and compute change.

        Returns:
            The change owed to the customer
        """
        self._ensure_modifiable("record_payment")
        paid = Money.of(amount_paid)
        if paid.is_negative():
            raise ValidationException(f"Amount paid cannot be negative: {paid}", field="amount_paid")

        self.amount_paid = paid
        self.recalculate_totals()
        self.touch()
        return self.change_amount

    def is_fully_paid(self) -> bool:
        return self.amount_paid >= self.total_amount

    # Lifecycle

    def complete(self, ledger: "StockLedger", now: datetime | None = None) -> list["StockReservation"]:
        """
        Check out the order, reserving stock for every line.

        Reservation is all-or-nothing: if any product is short the ledger and
        this order are left exactly as they were.

        Raises:
            InvalidStateTransitionException: If the order is not pending
            ValidationException: If the order has no items
            InsufficientStockException: If any product lacks stock
        """
        self._ensure_transition(OrderStatus.COMPLETED, "complete")
        if not self.items:
            raise ValidationException("Cannot complete an order without items", field="items")

        reservations = ledger.reserve_many((item.product_id, item.quantity) for item in self.items)

        self._transition(OrderStatus.COMPLETED)
        self.completed_at = now or datetime.now(UTC)
        self._record_event(
            OrderCompleted(
                order_id=self.id,
                order_number=self.order_number,
                total_amount=self.total_amount.amount,
                item_count=self.total_items,
            )
        )
        return reservations

    def cancel(self, reason: str | None = None, now: datetime | None = None) -> None:
        """
        Cancel a pending order. No stock was reserved, so none is released.

        Raises:
            InvalidStateTransitionException: If the order is not pending
        """
        self._ensure_transition(OrderStatus.CANCELLED, "cancel")
        self._transition(OrderStatus.CANCELLED, reason)
        self.cancelled_at = now or datetime.now(UTC)
        self._record_event(OrderCancelled(order_id=self.id, reason=reason))

    def can_return(self, now: datetime | None = None, policy: ReturnPolicy | None = None) -> bool:
        return (policy or ReturnPolicy()).can_return(self, now)

    def initiate_return(
        self,
        ledger: "StockLedger",
        return_order_id: str,
        quantities: dict[str, int] | None = None,
        now: datetime | None = None,
        policy: ReturnPolicy | None = None,
        order_number: str | None = None,
        reason: str | None = None,
    ) -> "Order":
        """
        Return goods from this completed order.

        Args:
            ledger: Stock ledger receiving the returned units
            return_order_id: Id for the new return order
            quantities: product_id -> units returned; None returns everything
            now: Evaluation time for the return window
            policy: Return policy (defaults to the 30 day window)
            order_number: Optional number for the return order
            reason: Optional note stored on the return order

        Returns:
            The new return order (``is_return=True``, already completed)

        Raises:
            InvalidStateTransitionException: If the policy refuses the return
            ValidationException: If a quantity is invalid or a product was not sold
        """
        now = now or datetime.now(UTC)
        (policy or ReturnPolicy()).ensure_returnable(self, now)

        sold = self._quantities_by_product()
        requested = dict(sold) if quantities is None else self._validate_return_quantities(quantities, sold)

        return_order = Order(
            id=return_order_id,
            order_number=order_number,
            customer_name=self.customer_name,
            customer_email=self.customer_email,
            customer_phone=self.customer_phone,
            employee_id=self.employee_id,
            payment_method=self.payment_method,
            notes=reason,
            tax_rate=self.tax_rate,
            is_return=True,
            original_order_id=self.id,
            created_at=now,
            updated_at=now,
        )
        remaining = dict(requested)
        for item in self.items:
            take = min(remaining.get(item.product_id, 0), item.quantity)
            if take:
                return_order.add_item(item.copy_for_return(take))
                remaining[item.product_id] -= take

        ledger.release_many(requested)

        return_order._transition(OrderStatus.COMPLETED, reason="return")
        return_order.completed_at = now

        full_return = requested == sold
        self._transition(
            OrderStatus.REFUNDED if full_return else OrderStatus.PARTIALLY_REFUNDED,
            reason=f"return {return_order_id}",
        )
        self._record_event(
            OrderReturned(
                order_id=self.id,
                return_order_id=return_order_id,
                refund_amount=return_order.total_amount.amount,
                full_return=full_return,
            )
        )
        return return_order

    # Helpers

    def _index_of(self, item: LineItem) -> int | None:
        return next((i for i, existing in enumerate(self.items) if existing is item), None)

    def _ensure_modifiable(self, operation: str) -> None:
        if not self.status.is_modifiable():
            raise InvalidStateTransitionException(
                operation=operation,
                current_state=self.status.value,
                message=f"Cannot {operation.replace('_', ' ')} on a {self.status.value} order",
            )

    def _ensure_owned(self, item: LineItem, operation: str) -> None:
        self._ensure_modifiable(operation)
        if self._index_of(item) is None:
            raise ValidationException("Line item does not belong to this order", field="items")

    def _ensure_discount_covered(self, discount: Money) -> None:
        gross = self.subtotal.add(self.tax_amount)
        if discount > gross:
            raise ValidationException(
                f"Discount {discount} exceeds order total {gross}",
                field="discount_amount",
                details={"subtotal": str(self.subtotal), "tax_amount": str(self.tax_amount)},
            )

    def _change_item(self, item: LineItem, operation: str, change: Callable[[LineItem], Any]) -> LineItem:
        """Apply ``change`` to an owned line; undo it if the order discount no longer fits."""
        self._ensure_owned(item, operation)
        saved = (item.quantity, item.unit_price, item.discount_amount)
        change(item)
        self.recalculate_totals()
        try:
            self._ensure_discount_covered(self.discount_amount)
        except ValidationException:
            item.quantity, item.unit_price, item.discount_amount = saved
            item.recompute_subtotal()
            self.recalculate_totals()
            raise

        self.touch()
        return item

    def _ensure_transition(self, target: OrderStatus, operation: str) -> None:
        if not self.status.can_transition_to(target):
            raise InvalidStateTransitionException(
                operation=operation,
                current_state=self.status.value,
                target_state=target.value,
            )

    def _transition(self, target: OrderStatus, reason: str | None = None) -> None:
        self._ensure_transition(target, target.value)
        self.status_history.append(OrderStatusTransition(self.status, target, reason))
        self.status = target
        self.touch()

    def _quantities_by_product(self) -> dict[str, int]:
        totals: dict[str, int] = {}
        for item in self.items:
            totals[item.product_id] = totals.get(item.product_id, 0) + item.quantity
        return totals

    @staticmethod
    def _validate_return_quantities(quantities: dict[str, int], sold: dict[str, int]) -> dict[str, int]:
        if not quantities:
            raise ValidationException("Return must include at least one product", field="quantities")

        requested: dict[str, int] = {}
        for product_id, quantity in quantities.items():
            if product_id not in sold:
                raise ValidationException(
                    f"Product {product_id} was not sold on this order",
                    field="quantities",
                    details={"product_id": product_id},
                )
            calculator.validate_quantity(quantity)
            if quantity > sold[product_id]:
                raise ValidationException(
                    f"Cannot return {quantity} units of product {product_id}; {sold[product_id]} were sold",
                    field="quantities",
                    details={"product_id": product_id, "requested": quantity, "sold": sold[product_id]},
                )
            requested[product_id] = quantity
        return requested

    # Serialization

    def to_summary_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "order_number": self.order_number,
            "status": self.status.value,
            "is_return": self.is_return,
            "original_order_id": self.original_order_id,
            "total_items": self.total_items,
            "total_amount": str(self.total_amount),
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }

    def to_detail_dict(self) -> dict[str, Any]:
        return {
            **self.to_summary_dict(),
            "customer_name": self.customer_name,
            "customer_email": self.customer_email,
            "customer_phone": self.customer_phone,
            "employee_id": self.employee_id,
            "payment_method": self.payment_method.value,
            "items": [item.to_dict() for item in self.items],
            "subtotal": str(self.subtotal),
            "tax_amount": str(self.tax_amount),
            "discount_amount": str(self.discount_amount),
            "amount_paid": str(self.amount_paid),
            "change_amount": str(self.change_amount),
            "balance_due": str(self.balance_due),
            "notes": self.notes,
            "completed_at": self.completed_at.isoformat() if self.completed_at else None,
            "cancelled_at": self.cancelled_at.isoformat() if self.cancelled_at else None,
        }

    @classmethod
    def create(
        cls,
        order_id: str,
        order_number: str | None = None,
        customer_name: str | None = None,
        employee_id: str | None = None,
        payment_method: PaymentMethod = PaymentMethod.CASH,
        tax_rate: Decimal = DEFAULT_TAX_RATE,
    ) -> "Order":
        """Factory for a new pending sale."""
        return cls(
            id=order_id,
            order_number=order_number,
            customer_name=customer_name,
            employee_id=employee_id,
            payment_method=payment_method,
            tax_rate=tax_rate,
            status=OrderStatus.PENDING,
        )
