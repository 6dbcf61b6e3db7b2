"""
Stock Status Value Object

Derived classification of a product's on-hand quantity.
"""

from retail_pos.core.domain import StatusEnum


class StockStatus(StatusEnum):
    """
    Product stock status.

    AVAILABLE, LOW_STOCK and OUT_OF_STOCK are derived from quantity on hand
    and reorder level. DISCONTINUED is set explicitly and survives any later
    quantity change.
    """

    AVAILABLE = "available"
    LOW_STOCK = "low_stock"
    OUT_OF_STOCK = "out_of_stock"
    DISCONTINUED = "discontinued"

    @classmethod
    def derive(cls, quantity_on_hand: int, reorder_level: int) -> "StockStatus":
        """
        Status for a quantity. Out of stock beats low stock beats available.

        Args:
            quantity_on_hand: Units currently on hand
            reorder_level: Threshold at or below which stock is low

        Returns:
            The derived StockStatus (never DISCONTINUED)
        """
        if quantity_on_hand <= 0:
            return cls.OUT_OF_STOCK
        if quantity_on_hand <= reorder_level:
            return cls.LOW_STOCK
        return cls.AVAILABLE

    def is_sellable(self) -> bool:
        """Check if new reservations may be taken."""
        return self in (StockStatus.AVAILABLE, StockStatus.LOW_STOCK)
