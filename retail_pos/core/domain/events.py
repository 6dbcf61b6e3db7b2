"""
Base Domain Event Classes

Domain Events record something that happened to an aggregate (an order was
completed, a product ran low). Aggregates collect them and the application
layer publishes them after the aggregate has been saved.
"""

import logging
from dataclasses import dataclass, field, fields
from datetime import UTC, datetime
from decimal import Decimal
from enum import Enum
from typing import Any, Callable, Coroutine
from uuid import UUID, uuid4

logger = logging.getLogger(__name__)


@dataclass(frozen=True, kw_only=True)
class DomainEvent:
    """
    Base class for all domain events.

    Example:
        ```python
        @dataclass(frozen=True, kw_only=True)
        class OrderCompleted(DomainEvent):
            order_id: str
            total_amount: Decimal
        ```
    """

    event_id: UUID = field(default_factory=uuid4)
    occurred_at: datetime = field(default_factory=lambda: datetime.now(UTC))
    version: int = field(default=1)

    @property
    def event_type(self) -> str:
        """Get the event type name (class name)."""
        return self.__class__.__name__

    def to_dict(self) -> dict[str, Any]:
        """Convert event to dictionary for serialization."""
        result: dict[str, Any] = {"event_type": self.event_type}
        for f in fields(self):
            value = getattr(self, f.name)
            if isinstance(value, datetime):
                result[f.name] = value.isoformat()
            elif isinstance(value, (UUID, Decimal)):
                result[f.name] = str(value)
            elif isinstance(value, Enum):
                result[f.name] = value.value
            else:
                result[f.name] = value
        return result


# Type aliases for event handlers
EventHandler = Callable[[DomainEvent], Coroutine[Any, Any, None]]


class DomainEventPublisher:
    """
    In-process domain event publisher.

    Handlers are async callables subscribed per event type. A failing handler
    is logged and does not stop the remaining handlers.
    """

    def __init__(self) -> None:
        self._handlers: dict[str, list[EventHandler]] = {}

    def subscribe(self, event_type: type[DomainEvent], handler: EventHandler) -> None:
        """
        Subscribe to an event type.

        Args:
            event_type: Type of event to subscribe to
            handler: Async handler function
        """
        self._handlers.setdefault(event_type.__name__, []).append(handler)

    async def publish(self, event: DomainEvent) -> None:
        """
        Publish a domain event to all subscribers.

        Args:
            event: Event to publish
        """
        event_name = event.event_type
        for handler in self._handlers.get(event_name, []):
            try:
                await handler(event)
            except Exception as e:
                logger.error(f"Error in event handler for {event_name}: {e}", exc_info=True)

    async def publish_all(self, events: list[DomainEvent]) -> None:
        """Publish multiple events in order."""
        for event in events:
            await self.publish(event)

    def clear_handlers(self) -> None:
        """Clear all event handlers (useful for testing)."""
        self._handlers.clear()
