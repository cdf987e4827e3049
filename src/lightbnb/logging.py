"""Structured logging for the LightBnB data layer and CLI.

Events are snake_case names (``query_failed``, ``property_search``) with
their details as key-value pairs. Each event carries the ``logger`` that
emitted it, so a failing query can be traced back to the repository, the
pool or the CLI.
"""

import logging
import sys

import structlog


def configure_logging(*, json_output: bool = False, level: int = logging.INFO) -> None:
    """Set up structlog for the ``lightbnb`` command and library callers.

    Args:
        json_output: One JSON object per line on stderr, for log shipping.
            Otherwise a human-readable console format.
        level: Minimum level to emit. ``--debug`` lowers this to DEBUG, which
            adds a ``property_search`` event with match and argument counts.
    """
    shared_processors: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
    ]

    renderer: structlog.types.Processor
    if json_output:
        renderer = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty())

    structlog.configure(
        processors=[*shared_processors, renderer],
        wrapper_class=structlog.make_filtering_bound_logger(level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=True,
    )


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """Module logger whose events are tagged with ``logger=name``."""
    logger: structlog.stdlib.BoundLogger = structlog.get_logger(name, logger=name)
    return logger
