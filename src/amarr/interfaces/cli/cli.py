"""``amarr`` console entrypoint: load config, set up logging, serve."""

from __future__ import annotations

import argparse
import sys
from collections.abc import Iterable
from pathlib import Path
from typing import Any

import structlog
import uvicorn

from amarr.infrastructure.config import load_config
from amarr.infrastructure.logging.setup import configure_logging
from amarr.interfaces.app import create_app

log = structlog.get_logger(__name__)

# argparse dest -> AppConfig field, for flags that override config values.
_OVERRIDE_FLAGS: dict[str, str] = {
    "host": "host",
    "port": "port",
    "default_indexer": "default_indexer",
    "log_level": "log_level",
    "log_format": "log_format",
}


def _parse_args(argv: Iterable[str] | None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="amarr",
        description="Serve aMule / ddunlimited.net indexers over the Torznab API.",
    )

    sources = parser.add_argument_group("config sources")
    sources.add_argument("--config", type=Path, help="YAML config file.")
    sources.add_argument("--dotenv", type=Path, help=".env file with AMARR_* variables.")

    overrides = parser.add_argument_group("overrides (beat YAML and env)")
    overrides.add_argument("--host", help="Bind host.")
    overrides.add_argument("--port", type=int, help="Bind port.")
    overrides.add_argument(
        "--default-indexer", help="Indexer served by the legacy /api route."
    )
    overrides.add_argument(
        "--log-level", choices=["DEBUG", "INFO", "WARNING", "ERROR"]
    )
    overrides.add_argument("--log-format", choices=["json", "console"])

    return parser.parse_args(list(argv) if argv is not None else None)


def build_cli_overrides(args: argparse.Namespace) -> dict[str, Any]:
    """Collect the override flags that were actually given."""
    return {
        field: getattr(args, dest)
        for dest, field in _OVERRIDE_FLAGS.items()
        if getattr(args, dest) is not None
    }


def start(argv: Iterable[str] | None = None) -> None:
    args = _parse_args(sys.argv[1:] if argv is None else argv)

    config = load_config(
        config_path=args.config,
        dotenv_path=args.dotenv,
        cli_overrides=build_cli_overrides(args),
    )
    log_config = configure_logging(config)
    log.info("server_starting", host=config.host, port=config.port)

    uvicorn.run(
        create_app(config),
        host=config.host,
        port=config.port,
        log_config=log_config,
    )


if __name__ == "__main__":
    raise SystemExit(start())
