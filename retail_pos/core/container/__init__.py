"""
Dependency Injection Container.

Wires concrete implementations to the sales ports.
"""

import logging

from retail_pos.config.settings import Settings

from .base import BaseContainer
from .sales import SalesContainer

logger = logging.getLogger(__name__)

_container: SalesContainer | None = None


def get_container(settings: Settings | None = None) -> SalesContainer:
    """Get the process-wide sales container (singleton)."""
    global _container
    if _container is None:
        _container = SalesContainer(BaseContainer(settings))
    return _container


def reset_container() -> None:
    """Drop the container; the next call builds a fresh ledger."""
    global _container
    _container = None


__all__ = [
    "BaseContainer",
    "SalesContainer",
    "get_container",
    "reset_container",
]
