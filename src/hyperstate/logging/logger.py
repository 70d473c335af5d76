"""Structured logging configuration for hyperstate using structlog."""

import logging
import sys
from typing import Any, cast

import structlog

from ..config import get_settings


def setup_logging(
    level: str = "INFO",
    structured: bool = True,
    console: bool = True,
    add_timestamp: bool = True,
) -> None:
    """Configure structured logging for hyperstate.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        structured: Use JSON structured output
        console: Enable console output on stderr
        add_timestamp: Add timestamps to logs
    """
    processors: list[Any] = [
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
    ]

    if add_timestamp:
        processors.append(structlog.processors.TimeStamper(fmt="iso"))

    processors.extend(
        [
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
        ]
    )

    if structured:
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=False))

    structlog.configure(
        processors=processors,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    handlers: list[logging.Handler] = []
    if console:
        console_handler = logging.StreamHandler(sys.stderr)
        console_handler.setFormatter(logging.Formatter("%(message)s"))
        handlers.append(console_handler)
    else:
        handlers.append(logging.NullHandler())

    logging.basicConfig(
        format="%(message)s",
        level=getattr(logging, level.upper()),
        handlers=handlers,
        force=True,
    )


# Global state for lazy initialization
_logging_initialized = False


def _ensure_logging_initialized() -> None:
    """Ensure logging is initialized (called lazily, not at import time)."""
    global _logging_initialized

    if _logging_initialized:
        return

    settings = get_settings()
    setup_logging(
        level=settings.effective_log_level(),
        structured=settings.structured_logging,
    )
    _logging_initialized = True


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """Get a structured logger instance.

    Args:
        name: Logger name (typically __name__)

    Returns:
        Structured logger instance
    """
    _ensure_logging_initialized()
    return cast(structlog.stdlib.BoundLogger, structlog.get_logger(name))


class LinkLogger:
    """Specialized logger for link resolution and injection."""

    def __init__(self, base_logger: structlog.stdlib.BoundLogger | None = None) -> None:
        """Initialize link logger.

        Args:
            base_logger: Base logger to use
        """
        self.logger = base_logger or get_logger(__name__)

    def log_link_skipped(self, transition_id: str, reason: str, **kwargs) -> None:
        """Log a transition that produced no link.

        Args:
            transition_id: Canonical id of the transition
            reason: Why no link was produced
            **kwargs: Additional context
        """
        self.logger.warning("link_skipped", transition=transition_id, reason=reason, **kwargs)

    def log_links_injected(self, state_id: str, count: int, item_count: int = 0) -> None:
        """Log the outcome of a link injection pass.

        Args:
            state_id: Id of the current state
            count: Number of links on the resource itself
            item_count: Number of links attached to collection items
        """
        self.logger.debug(
            "links_injected", state=state_id, links=count, item_links=item_count
        )
