"""
Sales Use Cases

Business use cases for the sales domain.
Each use case represents a single business operation.
"""

from .checkout import CancelOrderUseCase, CompleteOrderUseCase
from .create_order import CreateOrderUseCase
from .manage_stock import (
    DiscontinueProductUseCase,
    GetReorderListUseCase,
    RegisterProductUseCase,
    RestockProductUseCase,
)
from .modify_order import (
    AddOrderItemUseCase,
    ApplyOrderDiscountUseCase,
    RecordPaymentUseCase,
    RemoveOrderItemUseCase,
    UpdateOrderItemUseCase,
)
from .process_return import InitiateReturnUseCase

__all__ = [
    # Order lifecycle
    "CreateOrderUseCase",
    "CompleteOrderUseCase",
    "CancelOrderUseCase",
    "InitiateReturnUseCase",
    # Order changes
    "AddOrderItemUseCase",
    "UpdateOrderItemUseCase",
    "RemoveOrderItemUseCase",
    "ApplyOrderDiscountUseCase",
    "RecordPaymentUseCase",
    # Stock
    "RegisterProductUseCase",
    "RestockProductUseCase",
    "DiscontinueProductUseCase",
    "GetReorderListUseCase",
]
