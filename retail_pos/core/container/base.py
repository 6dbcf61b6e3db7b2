"""
Base Container - Shared Singletons.

Single Responsibility: Hold process-wide resources (settings, stock ledger,
event publisher).
"""

import logging

from retail_pos.config.settings import Settings, get_settings
from retail_pos.core.domain import DomainEventPublisher
from retail_pos.domains.sales.domain.services import StockLedger

logger = logging.getLogger(__name__)


class BaseContainer:
    """
    Base container for shared singletons.

    The stock ledger must be shared by every request in the process: its
    per-product locks are what serialize concurrent checkouts.
    """

    def __init__(self, settings: Settings | None = None):
        """
        Initialize base container.

        Args:
            settings: Optional settings (defaults to the cached instance)
        """
        self.settings = settings or get_settings()

        self._ledger_instance: StockLedger | None = None
        self._event_publisher_instance: DomainEventPublisher | None = None

        logger.info("BaseContainer initialized")

    def get_stock_ledger(self) -> StockLedger:
        """Get the stock ledger (singleton)."""
        if self._ledger_instance is None:
            logger.info("Creating StockLedger instance")
            self._ledger_instance = StockLedger()
        return self._ledger_instance

    def get_event_publisher(self) -> DomainEventPublisher:
        """Get the domain event publisher (singleton)."""
        if self._event_publisher_instance is None:
            self._event_publisher_instance = DomainEventPublisher()
        return self._event_publisher_instance
