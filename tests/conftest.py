"""
Shared pytest fixtures for all tests.

Products, orders, a stock ledger and mocked ports for the sales domain.
"""

import os
from datetime import UTC, datetime
from decimal import Decimal
from unittest.mock import AsyncMock

import pytest

from retail_pos.config.settings import reset_settings
from retail_pos.core.domain import Money
from retail_pos.domains.sales.domain import LineItem, Order, Product, StockLedger

# Ensure test environment
os.environ["ENVIRONMENT"] = "test"


@pytest.fixture(autouse=True)
def _fresh_settings():
    """Every test reads settings from a clean cache."""
    reset_settings()
    yield
    reset_settings()


# ============================================================================
# DOMAIN FIXTURES
# ============================================================================


@pytest.fixture
def now() -> datetime:
    return datetime(2024, 6, 1, 12, 0, tzinfo=UTC)


@pytest.fixture
def shirt() -> Product:
    """Product with plenty of stock."""
    return Product(
        id="p-shirt",
        name="Linen Shirt",
        product_code="SH-001",
        price=Money.of("10.00"),
        cost_price=Money.of("6.00"),
        quantity_on_hand=50,
        reorder_level=10,
    )


@pytest.fixture
def mug() -> Product:
    """Product with only a few units left."""
    return Product(
        id="p-mug",
        name="Coffee Mug",
        product_code="MG-001",
        price=Money.of("4.50"),
        quantity_on_hand=5,
        reorder_level=10,
    )


@pytest.fixture
def ledger(shirt: Product, mug: Product) -> StockLedger:
    return StockLedger([shirt, mug])


def make_line(product_id: str = "p-shirt", quantity: int = 1, unit_price: str = "10.00", **kwargs) -> LineItem:
    return LineItem(product_id=product_id, quantity=quantity, unit_price=Money.of(unit_price), **kwargs)


@pytest.fixture
def line_factory():
    """Build LineItems with sensible defaults."""
    return make_line


@pytest.fixture
def pending_order() -> Order:
    """Pending order: 3 shirts at 10.00 and 2 mugs at 4.50."""
    order = Order.create("o-1", order_number="ORD-0001", customer_name="Ana Ruiz")
    order.add_item(make_line("p-shirt", 3, "10.00", product_name="Linen Shirt"))
    order.add_item(make_line("p-mug", 2, "4.50", product_name="Coffee Mug"))
    return order


@pytest.fixture
def completed_order(pending_order: Order, ledger: StockLedger, now: datetime) -> Order:
    """The pending order paid in full and checked out at ``now``."""
    pending_order.created_at = now
    pending_order.record_payment(Decimal("50.00"))
    pending_order.complete(ledger, now=now)
    pending_order.clear_domain_events()
    return pending_order


# ============================================================================
# PORT MOCKS
# ============================================================================


@pytest.fixture
def mock_order_repository():
    """Order repository that echoes saved orders back."""
    repository = AsyncMock()
    repository.get_by_id.return_value = None
    repository.save.side_effect = lambda order: order
    return repository


@pytest.fixture
def mock_product_repository():
    """Product repository that echoes saved products back."""
    repository = AsyncMock()
    repository.get_by_id.return_value = None
    repository.get_many.return_value = []
    repository.save.side_effect = lambda product: product
    return repository


@pytest.fixture
def mock_transaction():
    return AsyncMock()
