"""
Logging setup for the finance tracker.

Modules grab a logger with ``structlog.get_logger(__name__)``; the CLI
calls :func:`configure_logging` once at start-up to decide how much of
it reaches the terminal.
"""
import logging
import sys

import structlog


def configure_logging(verbose: bool = False, json_output: bool = False) -> None:
    """
    Configure structlog for the process.

    Args:
        verbose: Emit debug-level events (unmatched budget labels, etc.)
        json_output: Render events as JSON lines instead of the console format
    """
    level = logging.DEBUG if verbose else logging.WARNING

    renderer = (
        structlog.processors.JSONRenderer()
        if json_output
        else structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty())
    )

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=False,
    )
