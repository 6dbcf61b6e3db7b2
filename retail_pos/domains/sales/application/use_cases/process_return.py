"""
Process Return Use Case

Returns goods from a completed order within the return window.
"""

from retail_pos.core.domain import DomainException, DomainEventPublisher, InsufficientStockException
from retail_pos.core.shared import get_use_case_logger
from retail_pos.domains.sales.application.dto import InitiateReturnRequest, UseCaseResult
from retail_pos.domains.sales.application.ports import IOrderRepository, IProductRepository, ITransaction
from retail_pos.domains.sales.domain.entities import Order
from retail_pos.domains.sales.domain.services import DEFAULT_RETURN_WINDOW_DAYS, ReturnPolicy, StockLedger

from .common import (
    discard_events,
    load_order,
    publish_events,
    snapshot_versions,
    track_products,
    untrack_products,
)

logger = get_use_case_logger("process_return")


class InitiateReturnUseCase:
    """
    Use Case: Initiate Return

    Responsibilities:
    - Check the return policy (status, not already a return, window)
    - Create the return order and put the returned units back on hand
    - Mark the original order refunded or partially refunded
    - Persist both orders and the affected products together
    """

    def __init__(
        self,
        order_repository: IOrderRepository,
        product_repository: IProductRepository,
        ledger: StockLedger,
        transaction: ITransaction,
        return_window_days: int = DEFAULT_RETURN_WINDOW_DAYS,
        event_publisher: DomainEventPublisher | None = None,
    ):
        self.order_repository = order_repository
        self.product_repository = product_repository
        self.ledger = ledger
        self.transaction = transaction
        self.policy = ReturnPolicy(return_window_days)
        self.event_publisher = event_publisher

    async def execute(self, request: InitiateReturnRequest) -> UseCaseResult:
        """
        Process a return.

        Args:
            request: Return request; ``quantities=None`` returns the whole order

        Returns:
            UseCaseResult with ``original`` and ``return_order`` summaries
        """
        log = logger.with_context(order_id=request.order_id, return_order_id=request.return_order_id)
        return_order: Order | None = None
        products = []
        versions: dict[str, int] = {}
        try:
            order = await load_order(self.order_repository, request.order_id)
            products = await track_products(
                self.ledger,
                self.product_repository,
                (item.product_id for item in order.items),
            )
            versions = snapshot_versions(products)
            return_order = order.initiate_return(
                self.ledger,
                request.return_order_id,
                quantities=request.quantities,
                now=request.requested_at,
                policy=self.policy,
                order_number=request.return_order_number,
                reason=request.reason,
            )

            await self.order_repository.save(return_order)
            await self.order_repository.save(order)
            for product in products:
                await self.product_repository.save(product)
            await self.transaction.commit()

        except DomainException as e:
            await self._abort(return_order, products, versions)
            log.warning(f"Return rejected: {e.message}", error_code=e.code)
            return UseCaseResult.from_exception(e)
        except Exception:
            await self._abort(return_order, products, versions)
            log.exception("Unexpected error processing return")
            raise

        await publish_events(self.event_publisher, order, *products)
        log.info(f"Return processed: refund {return_order.total_amount}, original now {order.status.value}")
        return UseCaseResult.ok(
            {
                "original": order.to_summary_dict(),
                "return_order": return_order.to_detail_dict(),
                "refund_amount": str(return_order.total_amount),
            }
        )

    async def _abort(self, return_order: Order | None, products, versions: dict[str, int]) -> None:
        await self.transaction.rollback()
        if return_order is not None:
            # Units were released in memory; take them back out
            try:
                self.ledger.reserve_many((item.product_id, item.quantity) for item in return_order.items)
            except InsufficientStockException as e:
                logger.error(f"Could not reverse released stock after failed return: {e.message}")
            untrack_products(self.ledger, products, versions)
        discard_events(*products)


__all__ = ["InitiateReturnUseCase"]
