"""Shared core utilities for the courier client.

Provides structured logging used by every layer.
"""

from .logging_config import (
    setup_logging,
    get_logger,
    set_action_context,
    generate_action_id,
    LoggerAdapter,
    SecurityFilter,
    StructuredFormatter,
)

__all__ = [
    "setup_logging",
    "get_logger",
    "set_action_context",
    "generate_action_id",
    "LoggerAdapter",
    "SecurityFilter",
    "StructuredFormatter",
]
