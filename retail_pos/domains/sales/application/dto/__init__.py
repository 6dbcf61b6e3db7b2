"""Application DTOs for the Sales domain."""

from .sales_dtos import (
    AddOrderItemRequest,
    ApplyOrderDiscountRequest,
    CancelOrderRequest,
    CompleteOrderRequest,
    CreateOrderRequest,
    DiscontinueProductRequest,
    InitiateReturnRequest,
    LineItemInput,
    RecordPaymentRequest,
    RegisterProductRequest,
    RemoveOrderItemRequest,
    RestockProductRequest,
    UpdateOrderItemRequest,
    UseCaseResult,
)

__all__ = [
    # Request DTOs
    "LineItemInput",
    "CreateOrderRequest",
    "AddOrderItemRequest",
    "UpdateOrderItemRequest",
    "RemoveOrderItemRequest",
    "ApplyOrderDiscountRequest",
    "RecordPaymentRequest",
    "CompleteOrderRequest",
    "CancelOrderRequest",
    "InitiateReturnRequest",
    "RegisterProductRequest",
    "RestockProductRequest",
    "DiscontinueProductRequest",
    # Result DTOs
    "UseCaseResult",
]
