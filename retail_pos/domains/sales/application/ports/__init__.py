"""
Sales Application Ports

Interface definitions (ports) for the Sales domain.
Uses Protocol for structural typing.
"""

from typing import Protocol, runtime_checkable

from retail_pos.domains.sales.domain.entities import Order, Product
from retail_pos.domains.sales.domain.value_objects import OrderStatus


@runtime_checkable
class IProductRepository(Protocol):
    """
    Interface for product repository.

    Defines the contract for product data access.
    """

    async def get_by_id(self, product_id: str) -> Product | None:
        """Get product by ID"""
        ...

    async def get_many(self, product_ids: list[str]) -> list[Product]:
        """Get several products; unknown ids are skipped"""
        ...

    async def save(self, product: Product) -> Product:
        """Save a product (optimistic version check)"""
        ...

    async def find_needing_reorder(self, limit: int = 50) -> list[Product]:
        """Get active products at or below their reorder level"""
        ...


@runtime_checkable
class IOrderRepository(Protocol):
    """
    Interface for order repository.

    Defines the contract for order data access.
    """

    async def get_by_id(self, order_id: str) -> Order | None:
        """Get order by ID"""
        ...

    async def get_by_order_number(self, order_number: str) -> Order | None:
        """Get order by its order number"""
        ...

    async def save(self, order: Order) -> Order:
        """Insert or update an order with its items"""
        ...

    async def find_by_status(self, status: OrderStatus, limit: int = 50) -> list[Order]:
        """Get orders in a status, newest first"""
        ...

    async def find_returns_for(self, order_id: str) -> list[Order]:
        """Get return orders that reference an original order"""
        ...


@runtime_checkable
class ITransaction(Protocol):
    """
    Unit of work boundary.

    ``AsyncSession`` satisfies this protocol.
    """

    async def commit(self) -> None:
        """Commit pending changes"""
        ...

    async def rollback(self) -> None:
        """Discard pending changes"""
        ...


__all__ = [
    "IOrderRepository",
    "IProductRepository",
    "ITransaction",
]
