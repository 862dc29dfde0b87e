"""Logging configuration for WeaveIt."""

from __future__ import annotations

import logging
import os

import structlog

HANDLER_NAME = "weaveit-json"


def configure_logging(level: int | str | None = None) -> None:
    """Render stdlib and structlog records as JSON lines on stderr.

    Values bound with :func:`structlog.contextvars.bound_contextvars` and the
    ``extra`` mapping of stdlib calls both end up as top-level keys.
    """
    level = level or os.getenv("LOG_LEVEL", "INFO")
    shared_processors = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
    ]

    structlog.configure(
        processors=[
            *shared_processors,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    handler = logging.StreamHandler()
    handler.set_name(HANDLER_NAME)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            foreign_pre_chain=[*shared_processors, structlog.stdlib.ExtraAdder()],
            processors=[
                structlog.stdlib.ProcessorFormatter.remove_processors_meta,
                structlog.processors.JSONRenderer(default=str),
            ],
        )
    )

    root = logging.getLogger()
    # repeated app factories must not stack handlers
    for existing in [h for h in root.handlers if h.get_name() == HANDLER_NAME]:
        root.removeHandler(existing)
    root.addHandler(handler)
    root.setLevel(level)
