"""Context binding for structured logging.

Values bound here are merged into every log event emitted inside the
block (or thread) through ``structlog.contextvars``.
"""

import uuid
from contextlib import contextmanager
from typing import Any, Generator, Optional

import structlog


@contextmanager
def bind_log_context(
    correlation_id: Optional[str] = None,
    **extra_context: Any,
) -> Generator[str, None, None]:
    """Bind a correlation id and extra fields for the duration of a block.

    Args:
        correlation_id: Identifier shared by all events in the block.
            Generated when not provided.
        **extra_context: Additional key-value pairs to include in logs.

    Yields:
        The correlation id in use.

    Example:
        with bind_log_context(cycle_id="c-1"):
            logger.info("dispatch_cycle_started")
    """
    context: dict[str, Any] = {"correlation_id": correlation_id or str(uuid.uuid4())}
    context.update(extra_context)

    structlog.contextvars.bind_contextvars(**context)
    try:
        yield context["correlation_id"]
    finally:
        structlog.contextvars.unbind_contextvars(*context.keys())


def get_correlation_id() -> Optional[str]:
    """Return the correlation id bound to the current context, if any."""
    return structlog.contextvars.get_contextvars().get("correlation_id")


def clear_log_context() -> None:
    """Drop everything bound to the current logging context."""
    structlog.contextvars.clear_contextvars()
