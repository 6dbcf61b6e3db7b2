"""
Stock Management Use Cases

Catalogue registration, restocking, discontinuing and the reorder list.
All stock quantity changes go through the shared StockLedger.
"""

from retail_pos.core.domain import (
    DomainException,
    DomainEventPublisher,
    InsufficientStockException,
    Money,
    ValidationException,
)
from retail_pos.core.shared import get_use_case_logger
from retail_pos.domains.sales.application.dto import (
    DiscontinueProductRequest,
    RegisterProductRequest,
    RestockProductRequest,
    UseCaseResult,
)
from retail_pos.domains.sales.application.ports import IProductRepository, ITransaction
from retail_pos.domains.sales.domain.entities import Product
from retail_pos.domains.sales.domain.services import StockLedger

from .common import discard_events, publish_events, snapshot_versions, track_products, untrack_products

logger = get_use_case_logger("manage_stock")


class RegisterProductUseCase:
    """
    Use Case: Register Product

    Adds a product to the catalogue and starts tracking its stock.
    Reorder and max stock levels fall back to the configured defaults.
    """

    def __init__(
        self,
        product_repository: IProductRepository,
        ledger: StockLedger,
        transaction: ITransaction,
        default_reorder_level: int = 10,
        default_max_stock_level: int = 100,
    ):
        self.product_repository = product_repository
        self.ledger = ledger
        self.transaction = transaction
        self.default_reorder_level = default_reorder_level
        self.default_max_stock_level = default_max_stock_level

    async def execute(self, request: RegisterProductRequest) -> UseCaseResult:
        log = logger.with_context(product_id=request.product_id)
        try:
            if self.ledger.is_tracked(request.product_id) or (
                await self.product_repository.get_by_id(request.product_id) is not None
            ):
                raise ValidationException(f"Product {request.product_id} already exists", field="product_id")

            product = Product(
                id=request.product_id,
                name=request.name,
                product_code=request.product_code,
                description=request.description,
                price=Money.of(request.price),
                cost_price=Money.of(request.cost_price) if request.cost_price is not None else None,
                quantity_on_hand=request.quantity_on_hand,
                reorder_level=(
                    self.default_reorder_level if request.reorder_level is None else request.reorder_level
                ),
                max_stock_level=(
                    self.default_max_stock_level if request.max_stock_level is None else request.max_stock_level
                ),
            )
            saved = await self.product_repository.save(product)
            await self.transaction.commit()

        except DomainException as e:
            await self.transaction.rollback()
            log.warning(f"Product not registered: {e.message}", error_code=e.code)
            return UseCaseResult.from_exception(e)
        except Exception:
            await self.transaction.rollback()
            log.exception("Unexpected error registering product")
            raise

        self.ledger.track(saved)
        log.info(f"Product registered with {saved.quantity_on_hand} units ({saved.stock_status.value})")
        return UseCaseResult.ok(saved.to_dict())


class RestockProductUseCase:
    """
    Use Case: Restock Product

    Receives goods into stock. Low or out of stock products go back to
    AVAILABLE once the quantity rises above the reorder level.
    """

    def __init__(
        self,
        product_repository: IProductRepository,
        ledger: StockLedger,
        transaction: ITransaction,
        event_publisher: DomainEventPublisher | None = None,
    ):
        self.product_repository = product_repository
        self.ledger = ledger
        self.transaction = transaction
        self.event_publisher = event_publisher

    async def execute(self, request: RestockProductRequest) -> UseCaseResult:
        log = logger.with_context(product_id=request.product_id)
        products = []
        versions: dict[str, int] = {}
        restocked = False
        try:
            products = await track_products(self.ledger, self.product_repository, [request.product_id])
            versions = snapshot_versions(products)
            self.ledger.restock(request.product_id, request.quantity)
            restocked = True
            await self.product_repository.save(products[0])
            await self.transaction.commit()

        except DomainException as e:
            await self._abort(request, restocked, products, versions)
            log.warning(f"Restock failed: {e.message}", error_code=e.code)
            return UseCaseResult.from_exception(e)
        except Exception:
            await self._abort(request, restocked, products, versions)
            log.exception("Unexpected error restocking product")
            raise

        await publish_events(self.event_publisher, *products)
        return UseCaseResult.ok(products[0].to_dict())

    async def _abort(
        self,
        request: RestockProductRequest,
        restocked: bool,
        products: list[Product],
        versions: dict[str, int],
    ) -> None:
        await self.transaction.rollback()
        if restocked:
            try:
                self.ledger.reserve(request.product_id, request.quantity)
            except InsufficientStockException as e:
                # Units sold since the restock; storage still has the old quantity
                logger.error(
                    f"Could not take back restocked units: {e.message}",
                    product_id=request.product_id,
                    quantity=request.quantity,
                )
            untrack_products(self.ledger, products, versions)
        discard_events(*products)


class DiscontinueProductUseCase:
    """Use Case: Discontinue Product"""

    def __init__(
        self,
        product_repository: IProductRepository,
        ledger: StockLedger,
        transaction: ITransaction,
        event_publisher: DomainEventPublisher | None = None,
    ):
        self.product_repository = product_repository
        self.ledger = ledger
        self.transaction = transaction
        self.event_publisher = event_publisher

    async def execute(self, request: DiscontinueProductRequest) -> UseCaseResult:
        log = logger.with_context(product_id=request.product_id)
        products: list[Product] = []
        versions: dict[str, int] = {}
        discontinued = False
        try:
            products = await track_products(self.ledger, self.product_repository, [request.product_id])
            versions = snapshot_versions(products)
            self.ledger.discontinue(request.product_id)
            discontinued = True
            await self.product_repository.save(products[0])
            await self.transaction.commit()

        except DomainException as e:
            await self._abort(discontinued, products, versions)
            log.warning(f"Discontinue failed: {e.message}", error_code=e.code)
            return UseCaseResult.from_exception(e)
        except Exception:
            await self._abort(discontinued, products, versions)
            log.exception("Unexpected error discontinuing product")
            raise

        await publish_events(self.event_publisher, *products)
        return UseCaseResult.ok(products[0].to_dict())

    async def _abort(self, discontinued: bool, products: list[Product], versions: dict[str, int]) -> None:
        await self.transaction.rollback()
        if discontinued:
            # Discontinuing is one way in memory, so the stored row wins
            untrack_products(self.ledger, products, versions)
        discard_events(*products)


class GetReorderListUseCase:
    """
    Use Case: Get Reorder List

    Products at or below their reorder level with the quantity needed to
    refill them to their max stock level.
    """

    def __init__(self, product_repository: IProductRepository):
        self.product_repository = product_repository

    async def execute(self, limit: int = 50) -> UseCaseResult:
        products = await self.product_repository.find_needing_reorder(limit=limit)
        return UseCaseResult.ok(
            [
                {
                    **product.to_dict(),
                    "reorder_quantity": product.reorder_quantity(),
                }
                for product in products
            ]
        )


__all__ = [
    "RegisterProductUseCase",
    "RestockProductUseCase",
    "DiscontinueProductUseCase",
    "GetReorderListUseCase",
]
