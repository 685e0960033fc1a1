"""Hardcoded default configuration values."""

from __future__ import annotations

from typing import Any

DEFAULT_CONFIG: dict[str, Any] = {
    "app_name": "amarr",
    "environment": "dev",
    "server": {
        "host": "0.0.0.0",
        "port": 8080,
    },
    "indexers": {
        "default": "amule",
        "targets": {},
    },
    "logging": {
        "level": "INFO",
        "format": None,  # Derived from environment in schema.py
    },
}
