"""
Product Repository Implementation

SQLAlchemy implementation of IProductRepository.
"""

import logging
from decimal import Decimal
from typing import Any, cast

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from retail_pos.core.domain import ConcurrencyException, Money
from retail_pos.domains.sales.application.ports import IProductRepository
from retail_pos.domains.sales.domain.entities import Product
from retail_pos.domains.sales.domain.value_objects import StockStatus
from retail_pos.models.db.products import ProductModel

logger = logging.getLogger(__name__)


class SQLAlchemyProductRepository(IProductRepository):
    """
    SQLAlchemy implementation of product repository.

    Saves are guarded by the ``version`` column: an update only applies when
    the stored version still matches the entity's, so two writers holding
    the same product cannot silently overwrite each other's stock count.
    """

    def __init__(self, session: AsyncSession):
        """
        Initialize repository.

        Args:
            session: SQLAlchemy async session
        """
        self.session = session

    async def get_by_id(self, product_id: str) -> Product | None:
        """Get product by ID."""
        try:
            result = await self.session.execute(select(ProductModel).where(ProductModel.id == product_id))
            model = result.scalar_one_or_none()
            return self._to_entity(model) if model else None
        except Exception as e:
            logger.error(f"Error getting product by ID {product_id}: {e}")
            raise

    async def get_many(self, product_ids: list[str]) -> list[Product]:
        """Get products by IDs; unknown IDs are skipped."""
        if not product_ids:
            return []
        result = await self.session.execute(select(ProductModel).where(ProductModel.id.in_(product_ids)))
        models = result.scalars().all()
        return [self._to_entity(m) for m in models]

    async def save(self, product: Product) -> Product:
        """
        Insert or update a product with an optimistic version check.

        Raises:
            ConcurrencyException: If the stored version moved on since the
                product was loaded
        """
        values = self._to_values(product)
        result = await self.session.execute(
            update(ProductModel)
            .where(ProductModel.id == product.id, ProductModel.version == product.version)
            .values(**values, version=product.version + 1)
        )

        if result.rowcount == 0:
            current = await self.session.execute(select(ProductModel.version).where(ProductModel.id == product.id))
            actual_version = current.scalar_one_or_none()
            if actual_version is not None:
                logger.warning(
                    f"Stale write for product {product.id}: expected version {product.version}, "
                    f"found {actual_version}"
                )
                raise ConcurrencyException("Product", product.id, product.version, actual_version)

            self.session.add(ProductModel(id=product.id, version=product.version + 1, **values))
            logger.debug(f"Inserting product {product.id}")

        await self.session.flush()
        product.increment_version()
        return product

    async def find_needing_reorder(self, limit: int = 50) -> list[Product]:
        """Find active, not discontinued products at or below their reorder level."""
        result = await self.session.execute(
            select(ProductModel)
            .where(
                ProductModel.is_active.is_(True),
                ProductModel.stock_status != StockStatus.DISCONTINUED.value,
                ProductModel.quantity_on_hand <= ProductModel.reorder_level,
            )
            .order_by(ProductModel.quantity_on_hand, ProductModel.name)
            .limit(limit)
        )
        models = result.scalars().all()
        return [self._to_entity(m) for m in models]

    # Mapping methods

    def _to_entity(self, model: ProductModel) -> Product:
        """Convert model to entity."""
        cost_price = cast(Decimal | None, model.cost_price)
        product = Product(
            id=cast(str, model.id),
            name=cast(str, model.name),
            product_code=cast(str | None, model.product_code),
            description=cast(str | None, model.description),
            price=Money.of(cast(Decimal, model.price)),
            cost_price=Money.of(cost_price) if cost_price is not None else None,
            quantity_on_hand=cast(int, model.quantity_on_hand),
            reorder_level=cast(int, model.reorder_level),
            max_stock_level=cast(int, model.max_stock_level),
            stock_status=StockStatus(cast(str, model.stock_status)),
            is_active=bool(model.is_active),
            version=cast(int, model.version) or 0,
        )
        if model.created_at is not None:
            product.created_at = model.created_at
        if model.updated_at is not None:
            product.updated_at = model.updated_at
        return product

    def _to_values(self, product: Product) -> dict[str, Any]:
        """Column values for an insert or update."""
        return {
            "name": product.name,
            "product_code": product.product_code,
            "description": product.description,
            "price": product.price.amount,
            "cost_price": product.cost_price.amount if product.cost_price is not None else None,
            "quantity_on_hand": product.quantity_on_hand,
            "reorder_level": product.reorder_level,
            "max_stock_level": product.max_stock_level,
            "stock_status": product.stock_status.value,
            "is_active": product.is_active,
        }


__all__ = ["SQLAlchemyProductRepository"]
