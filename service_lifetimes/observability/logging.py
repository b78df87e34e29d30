"""
Logging utilities for SERVICE_LIFETIMES.

Provides structured logging that carries the current request scope id.
"""

import contextvars
import logging
from datetime import datetime
from typing import Any

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"

# Context variable for the active request scope
_scope_context: contextvars.ContextVar[dict[str, Any] | None] = contextvars.ContextVar(
    "scope_context", default=None
)


def configure_logging(level: str | int = logging.INFO) -> None:
    """
    Configure the root logger once at process startup.

    Args:
        level: Log level name or number
    """
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
    logging.basicConfig(level=level, format=LOG_FORMAT)
    logging.getLogger().setLevel(level)


def set_scope_context(scope_id: str | None = None, **kwargs: Any) -> None:
    """
    Set request scope context for logging.

    Args:
        scope_id: Id of the active RequestScope
        **kwargs: Additional context (path, method, etc.)
    """
    _scope_context.set({"scope_id": scope_id, **kwargs})


def clear_scope_context() -> None:
    """Clear request scope context."""
    _scope_context.set(None)


def get_scope_id() -> str | None:
    """Get the scope id of the current logging context."""
    context = _scope_context.get()
    if context:
        return context.get("scope_id")
    return None


def get_logging_context() -> dict[str, Any]:
    """
    Get current logging context (timestamp and scope context).

    Returns:
        Dictionary with context information
    """
    context: dict[str, Any] = {
        "timestamp": datetime.now().isoformat(),
    }

    scope_context = _scope_context.get()
    if scope_context:
        context.update(scope_context)

    return context


class ContextualLoggerAdapter(logging.LoggerAdapter):
    """
    Logger adapter that automatically adds scope context to log records.
    """

    def process(self, msg: str, kwargs: dict[str, Any]) -> tuple[str, dict[str, Any]]:
        context = get_logging_context()

        extra = kwargs.get("extra", {})
        if extra:
            context.update(extra)

        kwargs["extra"] = context
        scope_id = context.get("scope_id")
        if scope_id:
            msg = f"[scope={scope_id}] {msg}"
        return msg, kwargs


def get_logger(name: str) -> ContextualLoggerAdapter:
    """
    Get a contextual logger that automatically adds the request scope context.

    Args:
        name: Logger name (typically __name__)

    Returns:
        ContextualLoggerAdapter instance
    """
    return ContextualLoggerAdapter(logging.getLogger(name), {})
