from __future__ import annotations

import logging
from typing import Optional

import structlog

from paper_gen.config.schema import LoggingConfig

# Per-request chatter from these drowns out delivery attempts unless DEBUG is asked for.
HTTP_CLIENT_LOGGERS = ("urllib3", "python_multipart", "httpx", "httpcore")


def configure_logging(config: LoggingConfig) -> None:
    """
    Apply the `logging` config section to stdlib logging and structlog.

    Delivery attempts and relay forwards are structlog events (`delivery.attempt`,
    `relay.forward`, ...), rendered for the console locally or as JSON lines when
    `logging.json` is set. Stdlib loggers share the same level.
    """
    level = logging.getLevelName(config.level)
    logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s")
    logging.getLogger().setLevel(level)
    for name in HTTP_CLIENT_LOGGERS:
        logging.getLogger(name).setLevel(level if level <= logging.DEBUG else max(level, logging.WARNING))

    renderer = structlog.processors.JSONRenderer() if config.json_output else structlog.dev.ConsoleRenderer()
    structlog.configure(
        wrapper_class=structlog.make_filtering_bound_logger(level),
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            structlog.processors.add_log_level,
            structlog.processors.format_exc_info,
            renderer,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=False,
    )


def get_logger(name: Optional[str] = None):
    """Return a structlog logger that inherits the global configuration."""
    return structlog.get_logger(name)
