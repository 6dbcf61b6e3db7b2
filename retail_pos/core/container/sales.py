"""
Sales Domain Container.

Single Responsibility: Wire all sales domain dependencies.
"""

import logging
from typing import TYPE_CHECKING

from sqlalchemy.ext.asyncio import AsyncSession

from retail_pos.domains.sales.application.use_cases import (
    AddOrderItemUseCase,
    ApplyOrderDiscountUseCase,
    CancelOrderUseCase,
    CompleteOrderUseCase,
    CreateOrderUseCase,
    DiscontinueProductUseCase,
    GetReorderListUseCase,
    InitiateReturnUseCase,
    RecordPaymentUseCase,
    RegisterProductUseCase,
    RemoveOrderItemUseCase,
    RestockProductUseCase,
    UpdateOrderItemUseCase,
)
from retail_pos.domains.sales.infrastructure.repositories import (
    SQLAlchemyOrderRepository,
    SQLAlchemyProductRepository,
)

if TYPE_CHECKING:
    from retail_pos.core.container.base import BaseContainer
    from retail_pos.core.domain import DomainEventPublisher
    from retail_pos.domains.sales.domain.services import StockLedger

logger = logging.getLogger(__name__)


class SalesContainer:
    """
    Sales domain container.

    Repositories and use cases are created per database session; the session
    also acts as the use case transaction.
    """

    def __init__(self, base: "BaseContainer"):
        """
        Initialize sales container.

        Args:
            base: BaseContainer with shared singletons
        """
        self._base = base

    @property
    def settings(self):
        return self._base.settings

    def get_stock_ledger(self) -> "StockLedger":
        """Process-wide stock ledger shared with every checkout."""
        return self._base.get_stock_ledger()

    def get_event_publisher(self) -> "DomainEventPublisher":
        return self._base.get_event_publisher()

    # ==================== REPOSITORIES ====================

    def create_order_repository(self, db: AsyncSession) -> SQLAlchemyOrderRepository:
        """Create Order Repository."""
        return SQLAlchemyOrderRepository(session=db)

    def create_product_repository(self, db: AsyncSession) -> SQLAlchemyProductRepository:
        """Create Product Repository."""
        return SQLAlchemyProductRepository(session=db)

    # ==================== ORDER USE CASES ====================

    def create_create_order_use_case(self, db: AsyncSession) -> CreateOrderUseCase:
        """Create CreateOrderUseCase with dependencies."""
        return CreateOrderUseCase(
            order_repository=self.create_order_repository(db),
            product_repository=self.create_product_repository(db),
            transaction=db,
            tax_rate=self.settings.TAX_RATE,
            event_publisher=self._base.get_event_publisher(),
        )

    def create_add_order_item_use_case(self, db: AsyncSession) -> AddOrderItemUseCase:
        return AddOrderItemUseCase(
            order_repository=self.create_order_repository(db),
            product_repository=self.create_product_repository(db),
            transaction=db,
        )

    def create_update_order_item_use_case(self, db: AsyncSession) -> UpdateOrderItemUseCase:
        return UpdateOrderItemUseCase(order_repository=self.create_order_repository(db), transaction=db)

    def create_remove_order_item_use_case(self, db: AsyncSession) -> RemoveOrderItemUseCase:
        return RemoveOrderItemUseCase(order_repository=self.create_order_repository(db), transaction=db)

    def create_apply_order_discount_use_case(self, db: AsyncSession) -> ApplyOrderDiscountUseCase:
        return ApplyOrderDiscountUseCase(order_repository=self.create_order_repository(db), transaction=db)

    def create_record_payment_use_case(self, db: AsyncSession) -> RecordPaymentUseCase:
        return RecordPaymentUseCase(order_repository=self.create_order_repository(db), transaction=db)

    def create_complete_order_use_case(self, db: AsyncSession) -> CompleteOrderUseCase:
        """Create CompleteOrderUseCase wired to the shared stock ledger."""
        return CompleteOrderUseCase(
            order_repository=self.create_order_repository(db),
            product_repository=self.create_product_repository(db),
            ledger=self._base.get_stock_ledger(),
            transaction=db,
            event_publisher=self._base.get_event_publisher(),
        )

    def create_cancel_order_use_case(self, db: AsyncSession) -> CancelOrderUseCase:
        return CancelOrderUseCase(
            order_repository=self.create_order_repository(db),
            transaction=db,
            event_publisher=self._base.get_event_publisher(),
        )

    def create_initiate_return_use_case(self, db: AsyncSession) -> InitiateReturnUseCase:
        """Create InitiateReturnUseCase with the configured return window."""
        return InitiateReturnUseCase(
            order_repository=self.create_order_repository(db),
            product_repository=self.create_product_repository(db),
            ledger=self._base.get_stock_ledger(),
            transaction=db,
            return_window_days=self.settings.RETURN_WINDOW_DAYS,
            event_publisher=self._base.get_event_publisher(),
        )

    # ==================== STOCK USE CASES ====================

    def create_register_product_use_case(self, db: AsyncSession) -> RegisterProductUseCase:
        return RegisterProductUseCase(
            product_repository=self.create_product_repository(db),
            ledger=self._base.get_stock_ledger(),
            transaction=db,
            default_reorder_level=self.settings.DEFAULT_REORDER_LEVEL,
            default_max_stock_level=self.settings.DEFAULT_MAX_STOCK_LEVEL,
        )

    def create_restock_product_use_case(self, db: AsyncSession) -> RestockProductUseCase:
        return RestockProductUseCase(
            product_repository=self.create_product_repository(db),
            ledger=self._base.get_stock_ledger(),
            transaction=db,
            event_publisher=self._base.get_event_publisher(),
        )

    def create_discontinue_product_use_case(self, db: AsyncSession) -> DiscontinueProductUseCase:
        return DiscontinueProductUseCase(
            product_repository=self.create_product_repository(db),
            ledger=self._base.get_stock_ledger(),
            transaction=db,
            event_publisher=self._base.get_event_publisher(),
        )

    def create_get_reorder_list_use_case(self, db: AsyncSession) -> GetReorderListUseCase:
        return GetReorderListUseCase(product_repository=self.create_product_repository(db))
