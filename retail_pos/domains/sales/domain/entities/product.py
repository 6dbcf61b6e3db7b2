"""
Product Entity

Catalogue product together with its stock record.
"""

from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any

from retail_pos.core.domain import RATIO_PLACES, AggregateRoot, Money, ValidationException

from ..events import StockStatusChanged
from ..value_objects import StockStatus


@dataclass(eq=False)
class Product(AggregateRoot[str]):
    """
    Product aggregate root.

    ``stock_status`` is derived from ``quantity_on_hand`` and
    ``reorder_level`` unless the product was discontinued, which sticks.
    Stock quantities only change through ``StockLedger``; the ledger holds the
    per-product lock that makes reserve/release atomic.

    Example:
        ```python
        product = Product(
            id="p-1",
            name="Linen Shirt",
            price=Money.of("10.00"),
            quantity_on_hand=8,
            reorder_level=10,
        )
        product.stock_status  # StockStatus.LOW_STOCK
        ```
    """

    name: str = ""
    product_code: str | None = None  # Opaque, generated elsewhere
    description: str | None = None
    price: Money = field(default_factory=Money.zero)
    cost_price: Money | None = None

    quantity_on_hand: int = 0
    reorder_level: int = 10
    max_stock_level: int = 100
    stock_status: StockStatus = StockStatus.AVAILABLE
    is_active: bool = True

    def __post_init__(self):
        """Validate product and derive its stock status."""
        for name in ("quantity_on_hand", "reorder_level", "max_stock_level"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, int) or value < 0:
                raise ValidationException(f"{name} must be a non-negative integer, got {value!r}", field=name)

        self.price = Money.of(self.price)
        if self.price.is_negative():
            raise ValidationException("Price cannot be negative", field="price")
        if self.cost_price is not None:
            self.cost_price = Money.of(self.cost_price)

        if self.stock_status is not StockStatus.DISCONTINUED:
            self.stock_status = StockStatus.derive(self.quantity_on_hand, self.reorder_level)

    # Stock (mutated by StockLedger only)

    def _adjust_on_hand(self, delta: int) -> None:
        new_quantity = self.quantity_on_hand + delta
        if new_quantity < 0:
            # The ledger checks availability under lock before calling this
            raise ValidationException(
                f"Stock for product {self.id} cannot go below zero",
                field="quantity_on_hand",
            )
        self.quantity_on_hand = new_quantity
        self.refresh_stock_status()
        self.touch()

    def refresh_stock_status(self) -> bool:
        """
        Re-derive stock status from the current quantity.

        Returns:
            True if the status changed
        """
        if self.stock_status is StockStatus.DISCONTINUED:
            return False

        previous = self.stock_status
        self.stock_status = StockStatus.derive(self.quantity_on_hand, self.reorder_level)
        if previous is self.stock_status:
            return False

        self._record_event(
            StockStatusChanged(
                product_id=self.id,
                previous_status=previous,
                new_status=self.stock_status,
                quantity_on_hand=self.quantity_on_hand,
            )
        )
        return True

    def discontinue(self) -> None:
        """Mark product as discontinued. Later quantity changes keep this status."""
        if self.stock_status is StockStatus.DISCONTINUED:
            return
        previous = self.stock_status
        self.stock_status = StockStatus.DISCONTINUED
        self._record_event(
            StockStatusChanged(
                product_id=self.id,
                previous_status=previous,
                new_status=StockStatus.DISCONTINUED,
                quantity_on_hand=self.quantity_on_hand,
            )
        )
        self.touch()

    # Stock queries

    def has_stock_for(self, quantity: int) -> bool:
        return quantity <= self.quantity_on_hand

    def is_out_of_stock(self) -> bool:
        return self.quantity_on_hand <= 0

    def is_low_stock(self) -> bool:
        return 0 < self.quantity_on_hand <= self.reorder_level

    def needs_reorder(self) -> bool:
        return self.quantity_on_hand <= self.reorder_level

    def reorder_quantity(self) -> int:
        """Units needed to fill back up to the max stock level."""
        return max(0, self.max_stock_level - self.quantity_on_hand)

    # Valuation

    def stock_value(self) -> Money:
        return self.price.multiply(self.quantity_on_hand)

    def profit_margin(self) -> Decimal:
        """Markup over cost as a percentage; zero without a positive cost price."""
        if self.cost_price is None or not self.cost_price.is_positive():
            return Decimal("0")
        return self.price.subtract(self.cost_price).divide(self.cost_price, RATIO_PLACES) * 100

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "product_code": self.product_code,
            "price": str(self.price),
            "quantity_on_hand": self.quantity_on_hand,
            "reorder_level": self.reorder_level,
            "max_stock_level": self.max_stock_level,
            "stock_status": self.stock_status.value,
            "is_active": self.is_active,
        }
