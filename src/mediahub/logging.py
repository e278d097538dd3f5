"""Logging setup for media services.

Module loggers emit dotted event names (``media.upload.conflict``) with their
fields in ``extra``. ``configure_logging`` installs the root handler at the
configured level and the structlog JSON pipeline.
"""

from __future__ import annotations

import logging

import structlog

# Transport libraries log every request and retry at INFO/DEBUG.
QUIET_LOGGERS = ("httpx", "httpcore", "urllib3", "PIL")


def resolve_level(level: str | int) -> int:
    """Return the numeric level for ``level`` (``"debug"``, ``"INFO"``, ``20``)."""
    if isinstance(level, int):
        return level
    resolved = logging.getLevelName(level.strip().upper())
    if not isinstance(resolved, int):
        raise ValueError(f"Unknown log level: {level!r}")
    return resolved


def configure_logging(level: str | int = logging.INFO) -> int:
    """Configure stdlib logging and structlog; return the applied level."""
    numeric = resolve_level(level)
    logging.basicConfig(
        level=numeric,
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
    )
    logging.getLogger("src.mediahub").setLevel(numeric)
    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(max(numeric, logging.WARNING))

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.JSONRenderer(),
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.make_filtering_bound_logger(numeric),
        cache_logger_on_first_use=True,
    )
    return numeric


__all__ = ["configure_logging", "resolve_level"]
