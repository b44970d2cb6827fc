"""Structured logging infrastructure.

Public API:
    - configure_logging(): Initialize logging for the application
    - get_module_logger(): Get a logger bound to the calling module
    - bind_log_context(): Context manager binding a correlation id
    - get_correlation_id(): Current correlation id, if any
    - clear_log_context(): Drop all bound context

Example:
    from infrastructure.logging import configure_logging, get_module_logger

    configure_logging()

    logger = get_module_logger()
    logger.info("module_initialized")
"""

from infrastructure.logging.setup import (
    configure_logging,
    get_module_logger,
    redact_secrets,
)
from infrastructure.logging.context import (
    bind_log_context,
    clear_log_context,
    get_correlation_id,
)

__all__ = [
    "configure_logging",
    "get_module_logger",
    "redact_secrets",
    "bind_log_context",
    "clear_log_context",
    "get_correlation_id",
]
