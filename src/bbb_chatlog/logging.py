"""structlog setup for bbb_chatlog.

Diagnostics (session creation, skipped lines, run totals) go to stderr
through stdlib logging, leaving stdout to the echoed lines and the report.
Nothing is configured on import; the CLI calls ``configure_logging`` once
per run.
"""

import logging
import sys
from typing import Any

import structlog

__all__ = [
    "configure_logging",
    "get_logger",
]


def configure_logging(level: int = logging.INFO, json_output: bool = False) -> None:
    """Route structlog events to stderr.

    Args:
        level: Lowest stdlib level that is written
        json_output: Render one JSON object per event instead of console lines
    """
    renderer: Any
    if json_output:
        renderer = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty())

    structlog.configure(
        processors=[
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.stdlib.add_log_level,
            structlog.stdlib.add_logger_name,
            renderer,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    # force: replace handlers left by an earlier call in the same process
    logging.basicConfig(format="%(message)s", stream=sys.stderr, level=level, force=True)


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    """Logger for a bbb_chatlog module, usually ``get_logger(__name__)``."""
    return structlog.get_logger(name)
