"""
Observability components.

Provides structured logging bound to the active request scope.
"""

from .logging import (
    ContextualLoggerAdapter,
    clear_scope_context,
    configure_logging,
    get_logger,
    get_logging_context,
    get_scope_id,
    set_scope_context,
)

__all__ = [
    "ContextualLoggerAdapter",
    "clear_scope_context",
    "configure_logging",
    "get_logger",
    "get_logging_context",
    "get_scope_id",
    "set_scope_context",
]
