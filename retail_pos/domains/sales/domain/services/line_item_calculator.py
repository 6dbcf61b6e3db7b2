"""
Line Item Calculator

Pricing rules for a single order line. Each operation validates its input
first, then mutates only the LineItem passed in and recomputes its subtotal,
so a rejected call leaves the item untouched.
"""

from decimal import Decimal
from typing import TYPE_CHECKING

from retail_pos.core.domain import Money, Percentage, ValidationException

if TYPE_CHECKING:
    from ..entities.line_item import LineItem


def validate_quantity(quantity: int) -> int:
    if isinstance(quantity, bool) or not isinstance(quantity, int) or quantity <= 0:
        raise ValidationException(
            f"Quantity must be a positive integer, got {quantity!r}",
            field="quantity",
        )
    return quantity


def validate_unit_price(unit_price: Money | Decimal | int | str) -> Money:
    price = Money.of(unit_price)
    if price.is_negative():
        raise ValidationException(f"Unit price cannot be negative: {price}", field="unit_price")
    return price


def total_before_discount(quantity: int, unit_price: Money) -> Money:
    return unit_price.multiply(quantity)


def compute_subtotal(quantity: int, unit_price: Money, discount_amount: Money) -> Money:
    """
    Line subtotal: ``max(0, quantity * unit_price - discount_amount)``.

    Args:
        quantity: Units sold
        unit_price: Price per unit
        discount_amount: Absolute discount for the whole line

    Returns:
        The non-negative subtotal in cents
    """
    return total_before_discount(quantity, unit_price).subtract(discount_amount).clamp_zero()


def apply_percentage_discount(item: "LineItem", percentage: Percentage | Decimal | int | str) -> "LineItem":
    """
    Set the line discount to a percentage of its pre-discount total.

    The discount is ``round(quantity * unit_price * percentage / 100, 2)``.

    Raises:
        ValidationException: If percentage is outside [0, 100]
    """
    pct = percentage if isinstance(percentage, Percentage) else Percentage(percentage)
    item.discount_amount = pct.apply_to(item.total_before_discount)
    item.recompute_subtotal()
    return item


def apply_fixed_discount(item: "LineItem", amount: Money | Decimal | int | str) -> "LineItem":
    """
    Set an absolute line discount, capped at the pre-discount total.

    Raises:
        ValidationException: If amount is negative
    """
    discount = Money.of(amount)
    if discount.is_negative():
        raise ValidationException(f"Discount cannot be negative: {discount}", field="discount_amount")
    item.discount_amount = Money.min(discount, item.total_before_discount)
    item.recompute_subtotal()
    return item


def update_quantity(item: "LineItem", quantity: int) -> "LineItem":
    """
    Change the quantity of a line.

    An existing discount larger than the new pre-discount total is capped.

    Raises:
        ValidationException: If quantity is not a positive integer
    """
    item.quantity = validate_quantity(quantity)
    item.discount_amount = Money.min(item.discount_amount, item.total_before_discount)
    item.recompute_subtotal()
    return item


def update_unit_price(item: "LineItem", unit_price: Money | Decimal | int | str) -> "LineItem":
    """
    Change the unit price of a line.

    Raises:
        ValidationException: If unit_price is negative
    """
    item.unit_price = validate_unit_price(unit_price)
    item.discount_amount = Money.min(item.discount_amount, item.total_before_discount)
    item.recompute_subtotal()
    return item
