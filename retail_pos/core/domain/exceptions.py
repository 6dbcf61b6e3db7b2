"""
Domain Exceptions

Business rule violations raised by the order and inventory engine.
They are recoverable by the immediate caller and carry a machine-readable code
so an outer layer can translate them without parsing messages.
"""

from typing import Any


class DomainException(Exception):
    """
    Base exception for all domain-related errors.

    Provides a standardized way to communicate business rule violations.
    """

    def __init__(self, message: str, code: str | None = None, details: dict[str, Any] | None = None):
        """
        Initialize domain exception.

        Args:
            message: Human-readable error message
            code: Machine-readable error code (e.g., "INSUFFICIENT_STOCK")
            details: Additional context about the error
        """
        super().__init__(message)
        self.message = message
        self.code = code or self.__class__.__name__.upper()
        self.details = details or {}

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to a transport-friendly dictionary."""
        return {
            "error": self.code,
            "message": self.message,
            "details": self.details,
        }


class ValidationException(DomainException):
    """
    Raised when an input value is malformed.

    Quantities, prices, discounts, percentages and payments end up here.
    Nothing is mutated before this is raised.
    """

    def __init__(self, message: str, field: str | None = None, details: dict[str, Any] | None = None):
        details = details or {}
        if field:
            details["field"] = field
        super().__init__(message, "VALIDATION_ERROR", details)
        self.field = field


class EntityNotFoundException(DomainException):
    """Raised when an order or product id is unknown."""

    def __init__(
        self,
        entity_type: str,
        entity_id: Any,
        message: str | None = None,
    ):
        self.entity_type = entity_type
        self.entity_id = entity_id
        msg = message or f"{entity_type} with ID {entity_id} not found"
        super().__init__(
            msg,
            "ENTITY_NOT_FOUND",
            {"entity_type": entity_type, "entity_id": str(entity_id)},
        )


class InsufficientStockException(DomainException):
    """Raised when a reservation asks for more than is on hand."""

    def __init__(self, product_id: str, requested: int, available: int):
        self.product_id = product_id
        self.requested = requested
        self.available = available
        super().__init__(
            f"Insufficient stock for product {product_id}. Requested: {requested}, Available: {available}",
            "INSUFFICIENT_STOCK",
            {
                "product_id": product_id,
                "requested": requested,
                "available": available,
            },
        )


class InvalidOperationException(DomainException):
    """Raised when an operation is not valid in the current state."""

    def __init__(self, operation: str, current_state: str, message: str | None = None):
        self.operation = operation
        self.current_state = current_state
        msg = message or f"Cannot perform '{operation}' in state '{current_state}'"
        super().__init__(
            msg,
            "INVALID_OPERATION",
            {"operation": operation, "current_state": current_state},
        )


class InvalidStateTransitionException(InvalidOperationException):
    """
    Raised when an order lifecycle transition is not allowed.

    Covers completing a non-pending order, returning an order that is not
    completed or is itself a return, and returning after the return window.
    """

    def __init__(
        self,
        operation: str,
        current_state: str,
        target_state: str | None = None,
        message: str | None = None,
    ):
        super().__init__(operation, current_state, message)
        self.code = "INVALID_STATE_TRANSITION"
        self.target_state = target_state
        if target_state:
            self.details["target_state"] = target_state


class ConcurrencyException(DomainException):
    """Raised when there's a concurrency conflict (optimistic locking)."""

    def __init__(self, entity_type: str, entity_id: Any, expected_version: int, actual_version: int | None):
        self.entity_type = entity_type
        self.entity_id = entity_id
        self.expected_version = expected_version
        self.actual_version = actual_version
        super().__init__(
            f"Concurrency conflict for {entity_type} {entity_id}. "
            f"Expected version {expected_version}, but found {actual_version}",
            "CONCURRENCY_CONFLICT",
            {
                "entity_type": entity_type,
                "entity_id": str(entity_id),
                "expected_version": expected_version,
                "actual_version": actual_version,
            },
        )
