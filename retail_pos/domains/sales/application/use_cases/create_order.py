"""
Create Order Use Case

Opens a new pending sale, optionally with its first lines.
"""

from decimal import Decimal

from retail_pos.core.domain import DomainException, DomainEventPublisher, ValidationException
from retail_pos.core.shared import get_use_case_logger
from retail_pos.domains.sales.application.dto import CreateOrderRequest, UseCaseResult
from retail_pos.domains.sales.application.ports import IOrderRepository, IProductRepository, ITransaction
from retail_pos.domains.sales.domain.entities import Order
from retail_pos.domains.sales.domain.entities.order import DEFAULT_TAX_RATE

from .common import build_line_item, load_product, publish_events

logger = get_use_case_logger("create_order")


class CreateOrderUseCase:
    """
    Use Case: Create Order

    Responsibilities:
    - Reject duplicate order ids
    - Price lines from the product catalogue
    - Calculate totals
    - Persist via repository

    Stock is not touched here; it is reserved at checkout.
    """

    def __init__(
        self,
        order_repository: IOrderRepository,
        product_repository: IProductRepository,
        transaction: ITransaction,
        tax_rate: Decimal = DEFAULT_TAX_RATE,
        event_publisher: DomainEventPublisher | None = None,
    ):
        """
        Initialize use case with dependencies.

        Args:
            order_repository: Repository for order data access
            product_repository: Repository for catalogue lookups
            transaction: Unit of work to commit or roll back
            tax_rate: Sales tax rate for new orders
            event_publisher: Optional publisher for domain events
        """
        self.order_repository = order_repository
        self.product_repository = product_repository
        self.transaction = transaction
        self.tax_rate = tax_rate
        self.event_publisher = event_publisher

    async def execute(self, request: CreateOrderRequest) -> UseCaseResult:
        """
        Create a new order.

        Args:
            request: Order creation request

        Returns:
            UseCaseResult with the order detail dict or the domain error
        """
        log = logger.with_context(order_id=request.order_id)
        try:
            if await self.order_repository.get_by_id(request.order_id) is not None:
                raise ValidationException(f"Order {request.order_id} already exists", field="order_id")

            order = Order.create(
                order_id=request.order_id,
                order_number=request.order_number,
                customer_name=request.customer_name,
                employee_id=request.employee_id,
                payment_method=request.payment_method,
                tax_rate=self.tax_rate,
            )
            order.customer_email = request.customer_email
            order.customer_phone = request.customer_phone
            order.notes = request.notes

            for item in request.items:
                product = await load_product(self.product_repository, item.product_id)
                order.add_item(build_line_item(product, item))

            saved = await self.order_repository.save(order)
            await self.transaction.commit()

        except DomainException as e:
            await self.transaction.rollback()
            log.warning(f"Order not created: {e.message}", error_code=e.code)
            return UseCaseResult.from_exception(e)
        except Exception:
            await self.transaction.rollback()
            log.exception("Unexpected error creating order")
            raise

        await publish_events(self.event_publisher, order)
        log.info(f"Order created with {saved.total_items} items, total {saved.total_amount}")
        return UseCaseResult.ok(saved.to_detail_dict())


__all__ = ["CreateOrderUseCase"]
