"""structlog configuration for orgctl.

All log output goes to stderr so stdout stays clean for command results.

- Human (default): console renderer, coloured when stderr is a TTY
- JSON (--log-json): one JSON object per line

Library modules log through plain ``logging.getLogger(__name__)``; the
``foreign_pre_chain`` below runs those records through the same processors.
"""

from __future__ import annotations

import logging
import sys

import structlog

_QUIET_LIBRARIES = ("sqlalchemy.engine", "sqlalchemy.pool")


def configure_logging(
    *,
    verbose: bool = False,
    log_json: bool = False,
) -> None:
    """Configure structlog processors and output routing.

    Args:
        verbose: Enable DEBUG-level output for ``orgctl.*``. When False, only WARNING+.
        log_json: Use JSON renderer instead of console renderer.
    """
    org_level = logging.DEBUG if verbose else logging.WARNING

    shared_processors: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
    ]

    if log_json:
        renderer: structlog.types.Processor = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty())

    structlog.configure(
        processors=[
            *shared_processors,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=False,
    )

    formatter = structlog.stdlib.ProcessorFormatter(
        foreign_pre_chain=shared_processors,
        processors=[
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            renderer,
        ],
    )

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(formatter)

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.addHandler(handler)
    root_logger.setLevel(logging.WARNING)

    logging.getLogger("orgctl").setLevel(org_level)
    for name in _QUIET_LIBRARIES:
        logging.getLogger(name).setLevel(logging.WARNING)


def bind_command(name: str | None) -> None:
    """Tag every log line of this invocation with the command name."""
    structlog.contextvars.clear_contextvars()
    if name:
        structlog.contextvars.bind_contextvars(command=name)
