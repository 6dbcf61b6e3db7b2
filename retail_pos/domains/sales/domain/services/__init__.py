"""
Sales Domain Services

Rules that span more than one entity: line pricing, stock bookkeeping and
return eligibility.
"""

from retail_pos.domains.sales.domain.services import line_item_calculator
from retail_pos.domains.sales.domain.services.return_policy import (
    DEFAULT_RETURN_WINDOW_DAYS,
    ReturnPolicy,
    can_return,
)
from retail_pos.domains.sales.domain.services.stock_ledger import (
    StockLedger,
    StockReservation,
)

__all__ = [
    "line_item_calculator",
    "DEFAULT_RETURN_WINDOW_DAYS",
    "ReturnPolicy",
    "can_return",
    "StockLedger",
    "StockReservation",
]
