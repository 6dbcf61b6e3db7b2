"""
Shared utilities module

Domain-agnostic helpers used across the application.
"""

from .logger import (
    ColoredFormatter,
    ContextLogger,
    JSONFormatter,
    configure_logging,
    configure_logging_from_settings,
    get_logger,
    get_use_case_logger,
)

__all__ = [
    "ColoredFormatter",
    "ContextLogger",
    "JSONFormatter",
    "configure_logging",
    "configure_logging_from_settings",
    "get_logger",
    "get_use_case_logger",
]
