import logging
import sys

import structlog

DEV_ENVS = frozenset({"dev", "local"})

# Engine echo is configured on the engine itself.
QUIET_LOGGERS = ("sqlalchemy.engine", "uvicorn.access")


def _renderer(app_env: str | None) -> structlog.types.Processor:
    if app_env in DEV_ENVS and sys.stdout.isatty():
        return structlog.dev.ConsoleRenderer()
    return structlog.processors.JSONRenderer()


def configure_logging(log_level: str = "INFO", *, app_env: str | None = None) -> None:
    """Route stdlib and structlog records through one JSON stream on stdout.

    Terminals in dev get the console renderer; every other target gets JSON.
    """
    level = logging.getLevelName(log_level.upper())
    if not isinstance(level, int):
        level = logging.INFO
    logging.basicConfig(format="%(message)s", stream=sys.stdout, level=level)
    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(max(level, logging.WARNING))

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_log_level,
            structlog.stdlib.add_logger_name,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            _renderer(app_env),
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )
    structlog.contextvars.clear_contextvars()
    if app_env:
        structlog.contextvars.bind_contextvars(app_env=app_env, service="waitlist-growth")
