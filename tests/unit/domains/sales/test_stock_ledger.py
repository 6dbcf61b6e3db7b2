"""
Unit tests for the StockLedger domain service and the Product stock record.

Tests:
- Reserve / release and derived stock status
- All-or-nothing multi-product reservation
- Concurrent reservations never oversell
"""

import threading
from concurrent.futures import ThreadPoolExecutor

import pytest

from retail_pos.core.domain import (
    EntityNotFoundException,
    InsufficientStockException,
    Money,
    ValidationException,
)
from retail_pos.domains.sales.domain import Product, StockLedger, StockStatus, StockStatusChanged

# ============================================================================
# Stock status derivation
# ============================================================================


@pytest.mark.unit
@pytest.mark.domain
@pytest.mark.parametrize(
    "quantity,reorder_level,expected",
    [
        (0, 10, StockStatus.OUT_OF_STOCK),
        (0, 0, StockStatus.OUT_OF_STOCK),
        (1, 10, StockStatus.LOW_STOCK),
        (10, 10, StockStatus.LOW_STOCK),
        (11, 10, StockStatus.AVAILABLE),
        (1, 0, StockStatus.AVAILABLE),
    ],
)
def test_stock_status_precedence(quantity, reorder_level, expected):
    assert StockStatus.derive(quantity, reorder_level) is expected

    product = Product(id="p", quantity_on_hand=quantity, reorder_level=reorder_level)
    assert product.stock_status is expected


@pytest.mark.unit
@pytest.mark.domain
@pytest.mark.parametrize("field", ["quantity_on_hand", "reorder_level", "max_stock_level"])
def test_product_rejects_negative_stock_fields(field):
    with pytest.raises(ValidationException):
        Product(id="p", **{field: -1})


# ============================================================================
# reserve / release
# ============================================================================


@pytest.mark.unit
@pytest.mark.domain
def test_reserve_decrements_and_updates_status(ledger, shirt):
    reservation = ledger.reserve("p-shirt", 45)

    assert reservation.quantity == 45
    assert reservation.remaining == 5
    assert shirt.quantity_on_hand == 5
    assert shirt.stock_status is StockStatus.LOW_STOCK


@pytest.mark.unit
@pytest.mark.domain
def test_reserve_exact_stock_goes_out_of_stock(ledger, mug):
    ledger.reserve("p-mug", 5)

    assert mug.quantity_on_hand == 0
    assert mug.stock_status is StockStatus.OUT_OF_STOCK


@pytest.mark.unit
@pytest.mark.domain
def test_reserve_more_than_on_hand_fails_without_change(ledger, mug):
    with pytest.raises(InsufficientStockException) as exc_info:
        ledger.reserve("p-mug", 6)

    assert exc_info.value.details == {"product_id": "p-mug", "requested": 6, "available": 5}
    assert mug.quantity_on_hand == 5
    assert mug.stock_status is StockStatus.LOW_STOCK


@pytest.mark.unit
@pytest.mark.domain
def test_release_increments_and_recovers_status(ledger, mug):
    ledger.reserve("p-mug", 5)

    ledger.release("p-mug", 20)

    assert mug.quantity_on_hand == 20
    assert mug.stock_status is StockStatus.AVAILABLE


@pytest.mark.unit
@pytest.mark.domain
@pytest.mark.parametrize("quantity", [0, -2])
def test_non_positive_quantities_rejected(ledger, quantity):
    with pytest.raises(ValidationException):
        ledger.reserve("p-shirt", quantity)
    with pytest.raises(ValidationException):
        ledger.release("p-shirt", quantity)


@pytest.mark.unit
@pytest.mark.domain
def test_unknown_product(ledger):
    with pytest.raises(EntityNotFoundException):
        ledger.reserve("p-missing", 1)


@pytest.mark.unit
@pytest.mark.domain
def test_status_change_is_recorded_as_event(ledger, mug):
    ledger.reserve("p-mug", 5)

    events = mug.get_domain_events()
    assert len(events) == 1
    assert isinstance(events[0], StockStatusChanged)
    assert events[0].previous_status is StockStatus.LOW_STOCK
    assert events[0].new_status is StockStatus.OUT_OF_STOCK


@pytest.mark.unit
@pytest.mark.domain
def test_discontinued_is_sticky(ledger, shirt):
    ledger.discontinue("p-shirt")
    ledger.reserve("p-shirt", 50)
    ledger.restock("p-shirt", 100)

    assert shirt.quantity_on_hand == 100
    assert shirt.stock_status is StockStatus.DISCONTINUED
    assert not shirt.stock_status.is_sellable()


@pytest.mark.unit
@pytest.mark.domain
def test_track_keeps_existing_instance(ledger, shirt):
    duplicate = Product(id="p-shirt", quantity_on_hand=999)

    tracked = ledger.track(duplicate)

    assert tracked is shirt
    assert ledger.quantity_on_hand("p-shirt") == 50


@pytest.mark.unit
@pytest.mark.domain
def test_forget_then_track_replaces_instance(ledger, shirt):
    lock = ledger._locks["p-shirt"]

    assert ledger.forget("p-shirt") is True
    assert ledger.forget("p-shirt") is False
    assert not ledger.is_tracked("p-shirt")
    with pytest.raises(EntityNotFoundException):
        ledger.reserve("p-shirt", 1)

    reloaded = Product(id="p-shirt", quantity_on_hand=12, version=4)
    assert ledger.track(reloaded) is reloaded
    assert ledger.quantity_on_hand("p-shirt") == 12
    assert ledger._locks["p-shirt"] is lock


@pytest.mark.unit
@pytest.mark.domain
def test_track_requires_id():
    with pytest.raises(ValidationException):
        StockLedger().track(Product(name="nameless"))


# ============================================================================
# reserve_many
# ============================================================================


@pytest.mark.unit
@pytest.mark.domain
def test_reserve_many_sums_lines_per_product(ledger, shirt, mug):
    reservations = ledger.reserve_many([("p-shirt", 2), ("p-mug", 1), ("p-shirt", 3)])

    assert {(r.product_id, r.quantity) for r in reservations} == {("p-shirt", 5), ("p-mug", 1)}
    assert shirt.quantity_on_hand == 45
    assert mug.quantity_on_hand == 4


@pytest.mark.unit
@pytest.mark.domain
def test_reserve_many_is_all_or_nothing(ledger, shirt, mug):
    with pytest.raises(InsufficientStockException) as exc_info:
        ledger.reserve_many({"p-shirt": 10, "p-mug": 6})

    assert exc_info.value.product_id == "p-mug"
    assert shirt.quantity_on_hand == 50
    assert mug.quantity_on_hand == 5


@pytest.mark.unit
@pytest.mark.domain
def test_reserve_many_unknown_product_changes_nothing(ledger, shirt):
    with pytest.raises(EntityNotFoundException):
        ledger.reserve_many({"p-shirt": 1, "p-missing": 1})

    assert shirt.quantity_on_hand == 50


@pytest.mark.unit
@pytest.mark.domain
def test_release_many(ledger, shirt, mug):
    ledger.release_many({"p-shirt": 5, "p-mug": 5})

    assert shirt.quantity_on_hand == 55
    assert mug.quantity_on_hand == 10


# ============================================================================
# Concurrency
# ============================================================================


@pytest.mark.unit
@pytest.mark.domain
def test_concurrent_reservations_never_oversell():
    product = Product(id="p-hot", price=Money.of("1.00"), quantity_on_hand=100, reorder_level=5)
    ledger = StockLedger([product])
    start = threading.Barrier(20)

    def buy() -> int:
        start.wait()
        won = 0
        for _ in range(10):
            try:
                ledger.reserve("p-hot", 1)
                won += 1
            except InsufficientStockException:
                pass
        return won

    with ThreadPoolExecutor(max_workers=20) as pool:
        results = list(pool.map(lambda _: buy(), range(20)))

    assert sum(results) == 100
    assert product.quantity_on_hand == 0
    assert product.stock_status is StockStatus.OUT_OF_STOCK


@pytest.mark.unit
@pytest.mark.domain
def test_concurrent_multi_product_reservations_do_not_deadlock():
    a = Product(id="a", quantity_on_hand=1000)
    b = Product(id="b", quantity_on_hand=1000)
    ledger = StockLedger([a, b])

    def forward():
        for _ in range(200):
            ledger.reserve_many([("a", 1), ("b", 1)])

    def backward():
        for _ in range(200):
            ledger.reserve_many([("b", 1), ("a", 1)])

    threads = [threading.Thread(target=fn) for fn in (forward, backward, forward, backward)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join(timeout=10)

    assert not any(thread.is_alive() for thread in threads)
    assert a.quantity_on_hand == 200
    assert b.quantity_on_hand == 200
