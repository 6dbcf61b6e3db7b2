"""
Line Item Entity

One product/quantity/price/discount entry owned by exactly one Order.
"""

from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any

from retail_pos.core.domain import RATIO_PLACES, Money, ValidationException

from ..services import line_item_calculator as calculator


@dataclass(eq=False)
class LineItem:
    """
    Order line.

    ``subtotal`` is derived and always equals
    ``max(0, quantity * unit_price - discount_amount)``. Change the line
    through the calculator operations (or the Order methods wrapping them),
    never by assigning fields directly.

    Lines compare by identity: two lines for the same product at the same
    price are still distinct lines.
    """

    product_id: str
    quantity: int
    unit_price: Money
    discount_amount: Money = field(default_factory=Money.zero)
    product_name: str = ""
    notes: str | None = None
    order_id: str | None = None
    subtotal: Money = field(init=False, default_factory=Money.zero)

    def __post_init__(self):
        if not self.product_id:
            raise ValidationException("Line item requires a product id", field="product_id")
        calculator.validate_quantity(self.quantity)
        self.unit_price = calculator.validate_unit_price(self.unit_price)

        discount = Money.of(self.discount_amount)
        if discount.is_negative():
            raise ValidationException(f"Discount cannot be negative: {discount}", field="discount_amount")
        if discount > self.total_before_discount:
            raise ValidationException(
                f"Discount {discount} exceeds line total {self.total_before_discount}",
                field="discount_amount",
            )
        self.discount_amount = discount
        self.recompute_subtotal()

    def recompute_subtotal(self) -> Money:
        self.subtotal = calculator.compute_subtotal(self.quantity, self.unit_price, self.discount_amount)
        return self.subtotal

    @property
    def total_before_discount(self) -> Money:
        return calculator.total_before_discount(self.quantity, self.unit_price)

    @property
    def discount_percentage(self) -> Decimal:
        """Discount as a percentage of the pre-discount total (ratio kept at four places)."""
        gross = self.total_before_discount
        if not gross.is_positive():
            return Decimal("0")
        return self.discount_amount.divide(gross, RATIO_PLACES) * 100

    def has_discount(self) -> bool:
        return self.discount_amount.is_positive()

    def copy_for_return(self, quantity: int) -> "LineItem":
        """
        Build a detached line returning ``quantity`` units of this line.

        The discount is prorated to the returned units and rounded to cents.
        """
        calculator.validate_quantity(quantity)
        if quantity > self.quantity:
            raise ValidationException(
                f"Cannot return {quantity} units of a line with {self.quantity}",
                field="quantity",
            )
        if quantity == self.quantity:
            discount = self.discount_amount
        else:
            discount = Money.of(self.discount_amount.multiply(quantity).divide(self.quantity))
        return LineItem(
            product_id=self.product_id,
            quantity=quantity,
            unit_price=self.unit_price,
            discount_amount=discount,
            product_name=self.product_name,
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "product_id": self.product_id,
            "product_name": self.product_name,
            "quantity": self.quantity,
            "unit_price": str(self.unit_price),
            "discount_amount": str(self.discount_amount),
            "subtotal": str(self.subtotal),
            "notes": self.notes,
        }
