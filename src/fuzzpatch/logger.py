from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Optional

import structlog

if TYPE_CHECKING:
    from fuzzpatch.settings.models import LoggingSettings

LOGGER_NAME = "fuzzpatch"
LOG_FORMAT = "%(message)s"

_LEVELS = {
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warning": logging.WARNING,
    "error": logging.ERROR,
    "critical": logging.CRITICAL,
}


def _to_level(value: object) -> int:
    name = getattr(value, "value", value)
    return _LEVELS.get(str(name).lower(), logging.WARNING)


def configure_logging(settings: Optional["LoggingSettings"] = None) -> None:
    """
    Route log output for the fuzzpatch logger according to settings.
    Without settings only warnings and errors reach stderr.
    """
    level = logging.WARNING
    log_file: Optional[str] = None
    overrides = {}
    if settings is not None:
        level = _to_level(settings.default_level)
        log_file = settings.log_file
        overrides = dict(settings.enabled_loggers)

    handler: logging.Handler
    if log_file:
        handler = logging.FileHandler(log_file, mode="a", encoding="utf-8", delay=True)
    else:
        handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter(LOG_FORMAT))

    root_logger = logging.getLogger(LOGGER_NAME)
    for old in list(root_logger.handlers):
        root_logger.removeHandler(old)
        old.close()
    root_logger.addHandler(handler)
    root_logger.setLevel(level)
    root_logger.propagate = False

    for name, lvl in overrides.items():
        logging.getLogger(name).setLevel(_to_level(lvl))


structlog.configure(
    wrapper_class=structlog.make_filtering_bound_logger(logging.NOTSET),
    logger_factory=structlog.stdlib.LoggerFactory(),
    cache_logger_on_first_use=True,
    processors=[
        structlog.processors.add_log_level,
        structlog.processors.StackInfoRenderer(),
        structlog.dev.set_exc_info,
        structlog.processors.TimeStamper(fmt="%Y-%m-%d %H:%M:%S", utc=False),
        structlog.dev.ConsoleRenderer(colors=False),
    ],
)

logger: structlog.BoundLogger = structlog.get_logger(LOGGER_NAME)
