"""
Return Policy

Decides whether a completed sale can still be returned.
"""

from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from typing import TYPE_CHECKING

from retail_pos.core.domain import InvalidStateTransitionException

from ..value_objects import OrderStatus

if TYPE_CHECKING:
    from ..entities.order import Order

DEFAULT_RETURN_WINDOW_DAYS = 30


def _as_utc(value: datetime) -> datetime:
    return value.replace(tzinfo=UTC) if value.tzinfo is None else value


@dataclass(frozen=True)
class ReturnPolicy:
    """
    Return eligibility rule.

    An order can be returned when it is COMPLETED, is not itself a return,
    and was created no more than ``window_days`` ago. Naive datetimes are
    read as UTC.
    """

    window_days: int = DEFAULT_RETURN_WINDOW_DAYS

    @property
    def window(self) -> timedelta:
        return timedelta(days=self.window_days)

    def rejection_reason(self, order: "Order", now: datetime | None = None) -> str | None:
        """Why ``order`` cannot be returned, or None when it can."""
        if order.status is not OrderStatus.COMPLETED:
            return f"Only completed orders can be returned (status: {order.status.value})"
        if order.is_return:
            return "A return order cannot itself be returned"

        now = _as_utc(now or datetime.now(UTC))
        if now - _as_utc(order.created_at) > self.window:
            return f"Return window of {self.window_days} days has expired"
        return None

    def can_return(self, order: "Order", now: datetime | None = None) -> bool:
        return self.rejection_reason(order, now) is None

    def ensure_returnable(self, order: "Order", now: datetime | None = None) -> None:
        """
        Raises:
            InvalidStateTransitionException: With the reason the return is refused
        """
        reason = self.rejection_reason(order, now)
        if reason is not None:
            raise InvalidStateTransitionException(
                operation="initiate_return",
                current_state=order.status.value,
                message=reason,
            )


def can_return(order: "Order", now: datetime | None = None, window_days: int = DEFAULT_RETURN_WINDOW_DAYS) -> bool:
    """Module-level shortcut for ``ReturnPolicy(window_days).can_return``."""
    return ReturnPolicy(window_days).can_return(order, now)
