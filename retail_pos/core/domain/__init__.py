"""
Domain Layer - Core DDD building blocks

This module provides base classes for Domain-Driven Design:
- Entities: Objects with identity and lifecycle
- Value Objects: Immutable objects compared by value
- Events: Domain events for communication
- Exceptions: Domain-specific error handling
"""

from retail_pos.core.domain.entities import (
    AggregateRoot,
    Entity,
)
from retail_pos.core.domain.events import (
    DomainEvent,
    DomainEventPublisher,
)
from retail_pos.core.domain.exceptions import (
    ConcurrencyException,
    DomainException,
    EntityNotFoundException,
    InsufficientStockException,
    InvalidOperationException,
    InvalidStateTransitionException,
    ValidationException,
)
from retail_pos.core.domain.value_objects import (
    CURRENCY_PLACES,
    RATIO_PLACES,
    Money,
    Percentage,
    StatusEnum,
    ValueObject,
    to_decimal,
)

__all__ = [
    # Entities
    "Entity",
    "AggregateRoot",
    # Value Objects
    "ValueObject",
    "Money",
    "Percentage",
    "StatusEnum",
    "CURRENCY_PLACES",
    "RATIO_PLACES",
    "to_decimal",
    # Events
    "DomainEvent",
    "DomainEventPublisher",
    # Exceptions
    "DomainException",
    "ValidationException",
    "EntityNotFoundException",
    "InsufficientStockException",
    "InvalidOperationException",
    "InvalidStateTransitionException",
    "ConcurrencyException",
]
