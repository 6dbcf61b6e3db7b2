"""
Unit tests for the return policy and Order.initiate_return.
"""

from datetime import UTC, datetime, timedelta

import pytest

from retail_pos.core.domain import InvalidStateTransitionException, Money, ValidationException
from retail_pos.domains.sales.domain import (
    Order,
    OrderReturned,
    OrderStatus,
    ReturnPolicy,
    StockStatus,
)

# ============================================================================
# ReturnPolicy
# ============================================================================


@pytest.mark.unit
@pytest.mark.domain
def test_completed_order_within_window_is_returnable(completed_order, now):
    policy = ReturnPolicy()

    assert policy.can_return(completed_order, now + timedelta(days=29))
    assert policy.rejection_reason(completed_order, now) is None


@pytest.mark.unit
@pytest.mark.domain
def test_window_expired(completed_order, now):
    policy = ReturnPolicy()

    assert not policy.can_return(completed_order, now + timedelta(days=31))
    assert "expired" in policy.rejection_reason(completed_order, now + timedelta(days=31))


@pytest.mark.unit
@pytest.mark.domain
def test_custom_window(completed_order, now):
    assert not ReturnPolicy(window_days=7).can_return(completed_order, now + timedelta(days=8))


@pytest.mark.unit
@pytest.mark.domain
@pytest.mark.parametrize(
    "status",
    [OrderStatus.PENDING, OrderStatus.CANCELLED, OrderStatus.REFUNDED, OrderStatus.PARTIALLY_REFUNDED],
)
def test_only_completed_orders_are_returnable(status, now):
    order = Order(id="o-1", status=status, created_at=now)

    assert not ReturnPolicy().can_return(order, now)


@pytest.mark.unit
@pytest.mark.domain
def test_return_orders_are_not_returnable(now):
    order = Order(id="r-1", status=OrderStatus.COMPLETED, is_return=True, created_at=now)

    assert not ReturnPolicy().can_return(order, now)


@pytest.mark.unit
@pytest.mark.domain
def test_naive_datetimes_are_read_as_utc(completed_order, now):
    naive_now = (now + timedelta(days=1)).replace(tzinfo=None)

    assert ReturnPolicy().can_return(completed_order, naive_now)


@pytest.mark.unit
@pytest.mark.domain
def test_order_can_return_shortcut(completed_order, now):
    assert completed_order.can_return(now)
    assert not completed_order.can_return(now + timedelta(days=40))


# ============================================================================
# initiate_return
# ============================================================================


@pytest.mark.unit
@pytest.mark.domain
def test_full_return(completed_order, ledger, shirt, mug, now):
    return_order = completed_order.initiate_return(ledger, "r-1", now=now + timedelta(days=2))

    assert return_order.is_return
    assert return_order.original_order_id == "o-1"
    assert return_order.status is OrderStatus.COMPLETED
    assert return_order.total_amount == completed_order.total_amount
    assert return_order.total_items == 5
    assert completed_order.status is OrderStatus.REFUNDED
    assert shirt.quantity_on_hand == 50
    assert mug.quantity_on_hand == 5
    assert mug.stock_status is StockStatus.LOW_STOCK


@pytest.mark.unit
@pytest.mark.domain
def test_partial_return(completed_order, ledger, shirt, mug, now):
    return_order = completed_order.initiate_return(ledger, "r-1", quantities={"p-shirt": 1}, now=now)

    assert completed_order.status is OrderStatus.PARTIALLY_REFUNDED
    assert return_order.subtotal == Money.of("10.00")
    assert return_order.tax_amount == Money.of("0.80")
    assert return_order.total_amount == Money.of("10.80")
    assert shirt.quantity_on_hand == 48
    assert mug.quantity_on_hand == 3

    event = completed_order.get_domain_events()[-1]
    assert isinstance(event, OrderReturned)
    assert event.return_order_id == "r-1"
    assert not event.full_return


@pytest.mark.unit
@pytest.mark.domain
def test_returning_every_unit_explicitly_is_a_full_return(completed_order, ledger, now):
    completed_order.initiate_return(ledger, "r-1", quantities={"p-shirt": 3, "p-mug": 2}, now=now)

    assert completed_order.status is OrderStatus.REFUNDED


@pytest.mark.unit
@pytest.mark.domain
def test_return_prorates_line_discount(ledger, line_factory, now):
    order = Order.create("o-1")
    line = order.add_item(line_factory("p-shirt", 3, "10.00"))
    order.apply_item_fixed_discount(line, Money.of("10.00"))
    order.created_at = now
    order.complete(ledger, now=now)

    return_order = order.initiate_return(ledger, "r-1", quantities={"p-shirt": 1}, now=now)

    assert return_order.items[0].discount_amount == Money.of("3.33")
    assert return_order.subtotal == Money.of("6.67")


@pytest.mark.unit
@pytest.mark.domain
def test_return_after_window_rejected(completed_order, ledger, shirt, now):
    with pytest.raises(InvalidStateTransitionException) as exc_info:
        completed_order.initiate_return(ledger, "r-1", now=now + timedelta(days=31))

    assert "expired" in exc_info.value.message
    assert completed_order.status is OrderStatus.COMPLETED
    assert shirt.quantity_on_hand == 47


@pytest.mark.unit
@pytest.mark.domain
def test_second_return_rejected(completed_order, ledger, shirt, now):
    completed_order.initiate_return(ledger, "r-1", quantities={"p-shirt": 1}, now=now)

    with pytest.raises(InvalidStateTransitionException):
        completed_order.initiate_return(ledger, "r-2", quantities={"p-shirt": 1}, now=now)

    assert shirt.quantity_on_hand == 48


@pytest.mark.unit
@pytest.mark.domain
def test_return_of_return_rejected(completed_order, ledger, now):
    return_order = completed_order.initiate_return(ledger, "r-1", now=now)

    with pytest.raises(InvalidStateTransitionException):
        return_order.initiate_return(ledger, "r-2", now=now)


@pytest.mark.unit
@pytest.mark.domain
def test_pending_order_return_rejected(pending_order, ledger, now):
    pending_order.created_at = now

    with pytest.raises(InvalidStateTransitionException):
        pending_order.initiate_return(ledger, "r-1", now=now)


@pytest.mark.unit
@pytest.mark.domain
@pytest.mark.parametrize(
    "quantities",
    [
        {"p-shirt": 4},
        {"p-shirt": 0},
        {"p-unknown": 1},
        {},
    ],
)
def test_invalid_return_quantities_rejected(completed_order, ledger, shirt, now, quantities):
    with pytest.raises(ValidationException):
        completed_order.initiate_return(ledger, "r-1", quantities=quantities, now=now)

    assert completed_order.status is OrderStatus.COMPLETED
    assert shirt.quantity_on_hand == 47


@pytest.mark.unit
@pytest.mark.domain
def test_return_copies_customer_and_payment(completed_order, ledger, now):
    return_order = completed_order.initiate_return(
        ledger, "r-1", now=now, order_number="RET-0001", reason="wrong size"
    )

    assert return_order.customer_name == "Ana Ruiz"
    assert return_order.payment_method is completed_order.payment_method
    assert return_order.order_number == "RET-0001"
    assert return_order.notes == "wrong size"
    assert return_order.created_at == now
    assert all(item.order_id == "r-1" for item in return_order.items)


@pytest.mark.unit
@pytest.mark.domain
def test_return_reads_created_at_not_completed_at(ledger, line_factory, now):
    order = Order.create("o-1")
    order.add_item(line_factory("p-shirt", 1, "10.00"))
    order.created_at = now - timedelta(days=35)
    order.complete(ledger, now=now)

    assert not order.can_return(now)
