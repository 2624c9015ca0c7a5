"""structlog configuration for GardenShare.

Two output modes:
- Human (default): console renderer to stderr
- JSON (LOG_JSON=true): one JSON object per line to stderr

Module loggers are created with structlog.get_logger() and log
key/value events; the request id is merged in from contextvars.
"""

import logging
import sys

import structlog


def configure_logging(level: str = "INFO", *, log_json: bool = False) -> None:
    """Configure structlog processors and route stdlib logging through them.

    Args:
        level: Level name for the gardenshare loggers (DEBUG, INFO, ...).
        log_json: Use the JSON renderer instead of the console renderer.
    """
    gardenshare_level = logging.getLevelName(level.upper())
    if not isinstance(gardenshare_level, int):
        gardenshare_level = logging.INFO

    shared_processors: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
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
    root_logger.setLevel(gardenshare_level)

    logging.getLogger("gardenshare").setLevel(gardenshare_level)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("alembic").setLevel(logging.WARNING)
