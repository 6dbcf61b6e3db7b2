"""
Unit tests for the Order aggregate.

Tests:
- Item management and totals
- Order discount and payment
- complete / cancel lifecycle and stock rollback
"""

from datetime import UTC, datetime
from decimal import Decimal

import pytest

from retail_pos.core.domain import (
    InsufficientStockException,
    InvalidStateTransitionException,
    Money,
    ValidationException,
)
from retail_pos.domains.sales.domain import (
    LineItem,
    Order,
    OrderCancelled,
    OrderCompleted,
    OrderStatus,
    PaymentMethod,
)

# ============================================================================
# Items and totals
# ============================================================================


@pytest.mark.unit
@pytest.mark.domain
def test_new_order_is_pending_and_empty():
    order = Order.create("o-1", payment_method=PaymentMethod.CREDIT_CARD)

    assert order.status is OrderStatus.PENDING
    assert order.items == []
    assert order.total_amount == Money.zero()
    assert order.payment_method is PaymentMethod.CREDIT_CARD


@pytest.mark.unit
@pytest.mark.domain
def test_pending_order_totals(pending_order):
    # 3 x 10.00 + 2 x 4.50 = 39.00 ; tax 3.12
    assert pending_order.subtotal == Money.of("39.00")
    assert pending_order.tax_amount == Money.of("3.12")
    assert pending_order.total_amount == Money.of("42.12")
    assert pending_order.total_items == 5
    assert pending_order.unique_products_count == 2


@pytest.mark.unit
@pytest.mark.domain
def test_add_item_sets_back_reference(line_factory):
    order = Order.create("o-1")
    item = line_factory()

    order.add_item(item)

    assert item.order_id == "o-1"
    assert order.items == [item]


@pytest.mark.unit
@pytest.mark.domain
def test_add_same_item_twice_rejected(line_factory):
    order = Order.create("o-1")
    item = line_factory()
    order.add_item(item)

    with pytest.raises(ValidationException):
        order.add_item(item)


@pytest.mark.unit
@pytest.mark.domain
def test_item_owned_by_other_order_rejected(line_factory):
    first, second = Order.create("o-1"), Order.create("o-2")
    item = line_factory()
    first.add_item(item)

    with pytest.raises(ValidationException):
        second.add_item(item)


@pytest.mark.unit
@pytest.mark.domain
def test_remove_item_by_identity(line_factory):
    order = Order.create("o-1")
    first = order.add_item(line_factory("p-1", 1, "5.00"))
    twin = order.add_item(line_factory("p-1", 1, "5.00"))

    assert order.remove_item(first) is True

    assert order.items == [twin]
    assert first.order_id is None
    assert order.subtotal == Money.of("5.00")
    assert order.remove_item(first) is False


@pytest.mark.unit
@pytest.mark.domain
def test_item_updates_recalculate_order(pending_order):
    shirt_line = pending_order.find_item("p-shirt")

    pending_order.update_item_quantity(shirt_line, 1)
    assert pending_order.subtotal == Money.of("19.00")

    pending_order.update_item_unit_price(shirt_line, Money.of("20.00"))
    assert pending_order.subtotal == Money.of("29.00")

    pending_order.apply_item_percentage_discount(shirt_line, Decimal("50"))
    assert pending_order.subtotal == Money.of("19.00")

    pending_order.apply_item_fixed_discount(shirt_line, Money.of("100.00"))
    assert shirt_line.subtotal == Money.zero()
    assert pending_order.subtotal == Money.of("9.00")


@pytest.mark.unit
@pytest.mark.domain
def test_updating_foreign_item_rejected(pending_order, line_factory):
    with pytest.raises(ValidationException):
        pending_order.update_item_quantity(line_factory(), 2)


# ============================================================================
# Discount and payment
# ============================================================================


@pytest.mark.unit
@pytest.mark.domain
def test_order_discount_reduces_total(pending_order):
    pending_order.apply_discount(Money.of("2.12"))

    assert pending_order.total_amount == Money.of("40.00")


@pytest.mark.unit
@pytest.mark.domain
def test_order_discount_equal_to_total_gives_zero(pending_order):
    pending_order.apply_discount(Money.of("42.12"))

    assert pending_order.total_amount == Money.zero()


@pytest.mark.unit
@pytest.mark.domain
@pytest.mark.parametrize("amount", ["42.13", "-0.01"])
def test_invalid_order_discount_rejected(pending_order, amount):
    with pytest.raises(ValidationException):
        pending_order.apply_discount(Money.of(amount))

    assert pending_order.discount_amount == Money.zero()
    assert pending_order.total_amount == Money.of("42.12")


@pytest.mark.unit
@pytest.mark.domain
def test_removing_item_below_order_discount_is_rejected(pending_order):
    pending_order.apply_discount(Money.of("40.00"))
    shirt_line = pending_order.find_item("p-shirt")
    mug_line = pending_order.find_item("p-mug")

    # 9.00 + 0.72 would be left against a 40.00 discount
    with pytest.raises(ValidationException) as exc_info:
        pending_order.remove_item(shirt_line)

    assert exc_info.value.details["field"] == "discount_amount"
    assert pending_order.items == [shirt_line, mug_line]
    assert shirt_line.order_id == "o-1"
    assert pending_order.subtotal == Money.of("39.00")
    assert pending_order.total_amount == Money.of("2.12")


@pytest.mark.unit
@pytest.mark.domain
@pytest.mark.parametrize(
    "change",
    [
        lambda order, line: order.update_item_quantity(line, 1),
        lambda order, line: order.update_item_unit_price(line, Money.of("1.00")),
        lambda order, line: order.apply_item_percentage_discount(line, Decimal("50")),
        lambda order, line: order.apply_item_fixed_discount(line, Money.of("20.00")),
    ],
    ids=["quantity", "unit_price", "percentage_discount", "fixed_discount"],
)
def test_line_change_below_order_discount_is_undone(pending_order, change):
    pending_order.apply_discount(Money.of("40.00"))
    shirt_line = pending_order.find_item("p-shirt")

    with pytest.raises(ValidationException):
        change(pending_order, shirt_line)

    assert shirt_line.quantity == 3
    assert shirt_line.unit_price == Money.of("10.00")
    assert shirt_line.discount_amount == Money.zero()
    assert shirt_line.subtotal == Money.of("30.00")
    assert pending_order.total_amount == Money.of("2.12")


@pytest.mark.unit
@pytest.mark.domain
def test_line_change_within_order_discount_is_kept(pending_order):
    pending_order.apply_discount(Money.of("10.00"))
    shirt_line = pending_order.find_item("p-shirt")

    pending_order.update_item_quantity(shirt_line, 1)

    # (10.00 + 9.00) * 1.08 - 10.00
    assert pending_order.total_amount == Money.of("10.52")


@pytest.mark.unit
@pytest.mark.domain
def test_partial_payment(pending_order):
    change = pending_order.record_payment(Decimal("20.00"))

    assert change == Money.zero()
    assert not pending_order.is_fully_paid()
    assert pending_order.balance_due == Money.of("22.12")


@pytest.mark.unit
@pytest.mark.domain
def test_change_follows_later_item_changes(pending_order, line_factory):
    pending_order.record_payment(Decimal("50.00"))
    assert pending_order.change_amount == Money.of("7.88")

    pending_order.add_item(line_factory("p-extra", 1, "10.00"))

    # total 52.92, paid 50.00
    assert pending_order.change_amount == Money.zero()
    assert pending_order.balance_due == Money.of("2.92")


@pytest.mark.unit
@pytest.mark.domain
def test_negative_payment_rejected(pending_order):
    with pytest.raises(ValidationException):
        pending_order.record_payment(Decimal("-1"))


@pytest.mark.unit
@pytest.mark.domain
def test_custom_tax_rate():
    order = Order.create("o-1", tax_rate=Decimal("0.21"))
    order.add_item(LineItem(product_id="p-1", quantity=1, unit_price=Money.of("10.00")))

    assert order.tax_amount == Money.of("2.10")


# ============================================================================
# complete / cancel
# ============================================================================


@pytest.mark.unit
@pytest.mark.domain
def test_complete_reserves_every_line(pending_order, ledger, shirt, mug, now):
    reservations = pending_order.complete(ledger, now=now)

    assert pending_order.status is OrderStatus.COMPLETED
    assert pending_order.completed_at == now
    assert shirt.quantity_on_hand == 47
    assert mug.quantity_on_hand == 3
    assert {r.product_id for r in reservations} == {"p-shirt", "p-mug"}

    events = pending_order.get_domain_events()
    assert isinstance(events[-1], OrderCompleted)
    assert events[-1].total_amount == Decimal("42.12")
    assert events[-1].item_count == 5


@pytest.mark.unit
@pytest.mark.domain
def test_complete_rolls_back_on_insufficient_stock(pending_order, ledger, shirt, mug):
    pending_order.update_item_quantity(pending_order.find_item("p-mug"), 6)

    with pytest.raises(InsufficientStockException):
        pending_order.complete(ledger)

    assert pending_order.status is OrderStatus.PENDING
    assert shirt.quantity_on_hand == 50
    assert mug.quantity_on_hand == 5


@pytest.mark.unit
@pytest.mark.domain
def test_complete_sums_duplicate_product_lines(ledger, mug, line_factory):
    order = Order.create("o-1")
    order.add_item(line_factory("p-mug", 3, "4.50"))
    order.add_item(line_factory("p-mug", 3, "4.00"))

    with pytest.raises(InsufficientStockException):
        order.complete(ledger)

    assert mug.quantity_on_hand == 5


@pytest.mark.unit
@pytest.mark.domain
def test_complete_empty_order_rejected(ledger):
    with pytest.raises(ValidationException):
        Order.create("o-1").complete(ledger)


@pytest.mark.unit
@pytest.mark.domain
def test_complete_twice_rejected(completed_order, ledger, shirt):
    with pytest.raises(InvalidStateTransitionException):
        completed_order.complete(ledger)

    assert shirt.quantity_on_hand == 47


@pytest.mark.unit
@pytest.mark.domain
def test_completed_order_is_frozen(completed_order, line_factory):
    with pytest.raises(InvalidStateTransitionException):
        completed_order.add_item(line_factory())
    with pytest.raises(InvalidStateTransitionException):
        completed_order.remove_item(completed_order.items[0])
    with pytest.raises(InvalidStateTransitionException):
        completed_order.apply_discount(Money.of("1.00"))
    with pytest.raises(InvalidStateTransitionException):
        completed_order.record_payment(Decimal("100.00"))


@pytest.mark.unit
@pytest.mark.domain
def test_cancel_pending_releases_nothing(pending_order, ledger, shirt):
    pending_order.cancel("customer left")

    assert pending_order.status is OrderStatus.CANCELLED
    assert pending_order.cancelled_at is not None
    assert shirt.quantity_on_hand == 50
    event = pending_order.get_domain_events()[-1]
    assert isinstance(event, OrderCancelled)
    assert event.reason == "customer left"


@pytest.mark.unit
@pytest.mark.domain
def test_cancel_only_from_pending(completed_order):
    with pytest.raises(InvalidStateTransitionException) as exc_info:
        completed_order.cancel()

    assert exc_info.value.details["current_state"] == "completed"
    assert exc_info.value.details["target_state"] == "cancelled"


@pytest.mark.unit
@pytest.mark.domain
def test_cancelled_order_cannot_complete(pending_order, ledger):
    pending_order.cancel()

    with pytest.raises(InvalidStateTransitionException):
        pending_order.complete(ledger)


@pytest.mark.unit
@pytest.mark.domain
def test_status_history_records_transitions(pending_order, ledger):
    pending_order.complete(ledger, now=datetime(2024, 1, 1, tzinfo=UTC))

    assert [str(t) for t in pending_order.status_history] == ["pending -> completed"]


@pytest.mark.unit
@pytest.mark.domain
@pytest.mark.parametrize(
    "status,terminal",
    [
        (OrderStatus.PENDING, False),
        (OrderStatus.COMPLETED, False),
        (OrderStatus.CANCELLED, True),
        (OrderStatus.REFUNDED, True),
        (OrderStatus.PARTIALLY_REFUNDED, True),
    ],
)
def test_terminal_statuses(status, terminal):
    assert status.is_terminal() is terminal


@pytest.mark.unit
@pytest.mark.domain
def test_order_detail_dict(pending_order):
    data = pending_order.to_detail_dict()

    assert data["status"] == "pending"
    assert data["total_amount"] == "42.12"
    assert data["balance_due"] == "42.12"
    assert len(data["items"]) == 2
