"""structlog wiring for amarr and the uvicorn server it runs in.

Everything (our own structlog loggers as well as plain stdlib records from
uvicorn, starlette and indexer backends) ends up in one stdlib handler
per stream, formatted by ``structlog.stdlib.ProcessorFormatter``.
"""

from __future__ import annotations

import logging.config
from typing import Any

import structlog

from amarr.infrastructure.config.schema import AppConfig

log = structlog.get_logger(__name__)

# Loggers that must not propagate to root, or uvicorn lines print twice.
SERVER_LOGGERS: tuple[str, ...] = ("uvicorn", "uvicorn.error", "uvicorn.access", "fastapi")


def _drop_color_message(_: Any, __: Any, event_dict: dict[str, Any]) -> dict[str, Any]:
    # uvicorn duplicates the message with ANSI codes under this key.
    event_dict.pop("color_message", None)
    return event_dict


def _shared_processors() -> list[structlog.typing.Processor]:
    return [
        _drop_color_message,
        structlog.contextvars.merge_contextvars,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
    ]


def _renderer(config: AppConfig) -> structlog.typing.Processor:
    if config.log_format == "json":
        return structlog.processors.JSONRenderer()
    return structlog.dev.ConsoleRenderer()


def _stream_handler(stream: str) -> dict[str, Any]:
    return {
        "class": "logging.StreamHandler",
        "formatter": "structlog",
        "stream": stream,
    }


def build_logging_config(config: AppConfig) -> dict[str, Any]:
    """Return a ``dictConfig`` mapping usable as ``uvicorn.run(log_config=...)``.

    Access logs go to stdout, everything else to stderr.
    """
    level = config.log_level

    loggers: dict[str, dict[str, Any]] = {
        name: {"handlers": ["default"], "level": level, "propagate": False}
        for name in SERVER_LOGGERS
    }
    loggers["uvicorn.access"]["handlers"] = ["access"]
    # uvicorn.error is a child of uvicorn; let it reach the parent handler.
    loggers["uvicorn.error"] = {"level": level}

    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "structlog": {
                "()": structlog.stdlib.ProcessorFormatter,
                "foreign_pre_chain": _shared_processors(),
                "processors": [
                    structlog.stdlib.ProcessorFormatter.remove_processors_meta,
                    _renderer(config),
                ],
            },
        },
        "handlers": {
            "default": _stream_handler("ext://sys.stderr"),
            "access": _stream_handler("ext://sys.stdout"),
        },
        "loggers": loggers,
        "root": {"handlers": ["default"], "level": level},
    }


def configure_logging(config: AppConfig) -> dict[str, Any]:
    """Configure structlog and stdlib logging; returns the applied dictConfig."""
    structlog.configure(
        processors=[
            *_shared_processors(),
            structlog.processors.format_exc_info,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    cfg = build_logging_config(config)
    logging.config.dictConfig(cfg)
    log.info("logging_configured", log_format=config.log_format, log_level=config.log_level)
    return cfg
