"""Structured logging for graph_mapper.

Every module logger wraps a stdlib logger under the ``graph_mapper``
namespace, so nothing is printed until the application enables that
namespace (stdlib defaults to WARNING) or calls configure_logging().
"""

from __future__ import annotations

import logging
import sys
from typing import IO

import structlog

PACKAGE_LOGGER = "graph_mapper"


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """Structured logger gated by the stdlib logger of the same name."""
    return structlog.wrap_logger(  # type: ignore[no-any-return]
        logging.getLogger(name),
        wrapper_class=structlog.stdlib.BoundLogger,
    )


def configure_logging(
    level: str = "INFO",
    json_output: bool = False,
    stream: IO[str] | None = None,
) -> None:
    """Route graph_mapper events to ``stream`` at ``level``.

    Args:
        level: Log level name. DEBUG shows skipped members, cycle hits,
            depth truncation and per-call timings.
        json_output: Render JSON lines instead of plain key=value text.
        stream: Destination stream, stdout by default.
    """
    renderer: structlog.types.Processor = (
        structlog.processors.JSONRenderer()
        if json_output
        else structlog.dev.ConsoleRenderer(colors=False)
    )
    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            renderer,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        logger_factory=structlog.stdlib.LoggerFactory(),
    )

    handler = logging.StreamHandler(stream if stream is not None else sys.stdout)
    handler.setFormatter(logging.Formatter("%(message)s"))
    package_logger = logging.getLogger(PACKAGE_LOGGER)
    package_logger.handlers[:] = [handler]
    package_logger.setLevel(level.upper())
    package_logger.propagate = False
