"""
Stock Ledger

Domain service that owns on-hand quantities for tracked products.

Every reserve/release runs under a per-product lock, so a check-then-act on
``quantity_on_hand`` cannot interleave with another caller touching the same
product. Multi-product reservations take their locks in sorted product id
order and either apply every decrement or none.
"""

import logging
import threading
from collections.abc import Iterable, Mapping
from contextlib import ExitStack
from dataclasses import dataclass
from typing import TYPE_CHECKING

from retail_pos.core.domain import (
    EntityNotFoundException,
    InsufficientStockException,
    ValidationException,
)

if TYPE_CHECKING:
    from ..entities.product import Product

logger = logging.getLogger(__name__)

StockLines = Mapping[str, int] | Iterable[tuple[str, int]]


@dataclass(frozen=True)
class StockReservation:
    """Outcome of a successful reservation."""

    product_id: str
    quantity: int
    remaining: int


class StockLedger:
    """
    In-process ledger of product stock.

    Products are tracked once (usually after loading them from the product
    repository) and the ledger's instance stays authoritative afterwards.

    Example:
        ```python
        ledger = StockLedger([product])
        ledger.reserve("p-1", 3)
        ledger.release("p-1", 3)
        ```
    """

    def __init__(self, products: Iterable["Product"] = ()):
        self._products: dict[str, Product] = {}
        self._locks: dict[str, threading.Lock] = {}
        self._registry_lock = threading.Lock()
        for product in products:
            self.track(product)

    # Registry

    def track(self, product: "Product") -> "Product":
        """
        Start tracking a product.

        Returns:
            The tracked instance. If the id is already tracked the existing
            instance wins and is returned.
        """
        if not product.id:
            raise ValidationException("Cannot track a product without an id", field="product_id")
        with self._registry_lock:
            existing = self._products.get(product.id)
            if existing is not None:
                return existing
            self._products[product.id] = product
            # A re-tracked product keeps its lock
            self._locks.setdefault(product.id, threading.Lock())
            return product

    def forget(self, product_id: str) -> bool:
        """
        Stop tracking a product so the next caller reloads it from storage.

        Used when the in-memory copy can no longer be trusted, e.g. after a
        failed write whose stock changes could not be undone.

        Returns:
            True if the product was tracked
        """
        with self._registry_lock:
            forgotten = self._products.pop(product_id, None) is not None
        if forgotten:
            logger.info(f"Product {product_id} dropped from stock ledger")
        return forgotten

    def is_tracked(self, product_id: str) -> bool:
        return product_id in self._products

    def get(self, product_id: str) -> "Product":
        product = self._products.get(product_id)
        if product is None:
            raise EntityNotFoundException("Product", product_id)
        return product

    def quantity_on_hand(self, product_id: str) -> int:
        return self.get(product_id).quantity_on_hand

    # Single product operations

    def reserve(self, product_id: str, quantity: int) -> StockReservation:
        """
        Take ``quantity`` units out of stock.

        Raises:
            InsufficientStockException: If fewer units are on hand; stock is unchanged
            EntityNotFoundException: If the product is not tracked
            ValidationException: If quantity is not a positive integer
        """
        quantity = _validate_quantity(quantity)
        product = self.get(product_id)
        with self._locks[product_id]:
            self._ensure_available(product, quantity)
            return self._apply(product, -quantity)

    def release(self, product_id: str, quantity: int) -> StockReservation:
        """Put ``quantity`` units back on hand (cancellations and returns)."""
        quantity = _validate_quantity(quantity)
        product = self.get(product_id)
        with self._locks[product_id]:
            return self._apply(product, quantity)

    def restock(self, product_id: str, quantity: int) -> StockReservation:
        """Receive goods from a supplier."""
        result = self.release(product_id, quantity)
        logger.info(f"Restocked product {product_id} with {quantity} units (on hand: {result.remaining})")
        return result

    def discontinue(self, product_id: str) -> None:
        product = self.get(product_id)
        with self._locks[product_id]:
            product.discontinue()
        logger.info(f"Product {product_id} discontinued")

    # Multi product operations

    def reserve_many(self, lines: StockLines) -> list[StockReservation]:
        """
        Reserve several products as one unit.

        Quantities for the same product are summed. Either every product has
        enough stock and all are decremented, or InsufficientStockException is
        raised for the first short product and nothing changes.
        """
        totals = _aggregate(lines)
        products = {product_id: self.get(product_id) for product_id in totals}

        with ExitStack() as stack:
            for product_id in sorted(totals):
                stack.enter_context(self._locks[product_id])

            for product_id in sorted(totals):
                self._ensure_available(products[product_id], totals[product_id])

            return [self._apply(products[pid], -qty) for pid, qty in sorted(totals.items())]

    def release_many(self, lines: StockLines) -> list[StockReservation]:
        """Release several products; unknown ids fail before anything is released."""
        totals = _aggregate(lines)
        products = {product_id: self.get(product_id) for product_id in totals}

        with ExitStack() as stack:
            for product_id in sorted(totals):
                stack.enter_context(self._locks[product_id])
            return [self._apply(products[pid], qty) for pid, qty in sorted(totals.items())]

    # Internals (caller holds the product lock)

    def _ensure_available(self, product: "Product", quantity: int) -> None:
        if not product.has_stock_for(quantity):
            logger.warning(
                f"Insufficient stock for product {product.id}: requested {quantity}, "
                f"on hand {product.quantity_on_hand}"
            )
            raise InsufficientStockException(
                product_id=product.id or "",
                requested=quantity,
                available=product.quantity_on_hand,
            )

    def _apply(self, product: "Product", delta: int) -> StockReservation:
        previous_status = product.stock_status
        product._adjust_on_hand(delta)
        logger.debug(f"Stock for product {product.id} changed by {delta:+d} to {product.quantity_on_hand}")
        if product.stock_status is not previous_status:
            logger.info(
                f"Product {product.id} stock status {previous_status.value} -> {product.stock_status.value}"
            )
        return StockReservation(product_id=product.id or "", quantity=abs(delta), remaining=product.quantity_on_hand)


def _validate_quantity(quantity: int) -> int:
    if isinstance(quantity, bool) or not isinstance(quantity, int) or quantity <= 0:
        raise ValidationException(f"Stock quantity must be a positive integer, got {quantity!r}", field="quantity")
    return quantity


def _aggregate(lines: StockLines) -> dict[str, int]:
    pairs = lines.items() if isinstance(lines, Mapping) else lines
    totals: dict[str, int] = {}
    for product_id, quantity in pairs:
        totals[product_id] = totals.get(product_id, 0) + _validate_quantity(quantity)
    return totals
