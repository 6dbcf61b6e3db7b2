"""
Shared steps for sales use cases.

Loading aggregates, syncing products into the stock ledger and publishing
recorded domain events.
"""

from collections.abc import Iterable

from retail_pos.core.domain import (
    AggregateRoot,
    DomainEventPublisher,
    EntityNotFoundException,
    Money,
    ValidationException,
)
from retail_pos.domains.sales.application.dto import LineItemInput
from retail_pos.domains.sales.application.ports import IOrderRepository, IProductRepository
from retail_pos.domains.sales.domain.entities import LineItem, Order, Product
from retail_pos.domains.sales.domain.services import StockLedger, line_item_calculator


async def load_order(order_repository: IOrderRepository, order_id: str) -> Order:
    order = await order_repository.get_by_id(order_id)
    if order is None:
        raise EntityNotFoundException("Order", order_id)
    return order


async def load_product(product_repository: IProductRepository, product_id: str) -> Product:
    product = await product_repository.get_by_id(product_id)
    if product is None:
        raise EntityNotFoundException("Product", product_id)
    return product


async def track_products(
    ledger: StockLedger,
    product_repository: IProductRepository,
    product_ids: Iterable[str],
) -> list[Product]:
    """
    Make sure every product is tracked by the ledger.

    Products already tracked keep their in-ledger instance; the rest are
    loaded from the repository.

    Raises:
        EntityNotFoundException: If a product does not exist
    """
    wanted = list(dict.fromkeys(product_ids))
    missing = [product_id for product_id in wanted if not ledger.is_tracked(product_id)]
    if missing:
        loaded = {product.id: product for product in await product_repository.get_many(missing)}
        for product_id in missing:
            if product_id not in loaded:
                raise EntityNotFoundException("Product", product_id)
            ledger.track(loaded[product_id])
    return [ledger.get(product_id) for product_id in wanted]


def build_line_item(product: Product, item: LineItemInput) -> LineItem:
    """
    Build a line for ``product``, priced from the catalogue unless overridden.

    Raises:
        ValidationException: If the product cannot be sold or an input is malformed
    """
    if not product.is_active or not product.stock_status.is_sellable():
        raise ValidationException(
            f"Product {product.id} is not available for sale",
            field="product_id",
            details={"product_id": product.id, "stock_status": product.stock_status.value},
        )

    unit_price = product.price if item.unit_price is None else Money.of(item.unit_price)
    line = LineItem(
        product_id=product.id or item.product_id,
        quantity=item.quantity,
        unit_price=unit_price,
        product_name=product.name,
        notes=item.notes,
    )
    if item.discount_percentage is not None:
        line_item_calculator.apply_percentage_discount(line, item.discount_percentage)
    return line


async def publish_events(publisher: DomainEventPublisher | None, *aggregates: AggregateRoot) -> None:
    """Publish and clear the events recorded on ``aggregates``."""
    events = []
    for aggregate in aggregates:
        events.extend(aggregate.get_domain_events())
        aggregate.clear_domain_events()
    if publisher is not None and events:
        await publisher.publish_all(events)


def discard_events(*aggregates: AggregateRoot) -> None:
    for aggregate in aggregates:
        aggregate.clear_domain_events()


def snapshot_versions(products: Iterable[Product]) -> dict[str, int]:
    """Versions to put back if a save is flushed but the commit never happens."""
    return {product.id: product.version for product in products if product.id}


def untrack_products(ledger: StockLedger, products: Iterable[Product], versions: dict[str, int]) -> None:
    """
    Drop products from the ledger after a failed write.

    Repositories bump versions on flush, so versions are restored first for
    anyone still holding the instances. The next request then reloads the
    persisted row instead of trusting the in-memory copy.
    """
    for product in products:
        if product.id in versions:
            product.version = versions[product.id]
        ledger.forget(product.id)
