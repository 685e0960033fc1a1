"""Layered configuration loading: defaults < YAML < env < CLI."""

from __future__ import annotations

from copy import deepcopy
from pathlib import Path
from typing import Any, Mapping

import structlog
import yaml
from dotenv import load_dotenv

from .defaults import DEFAULT_CONFIG
from .schema import AppConfig, EnvOverrides

log = structlog.get_logger(__name__)

# Flat override key -> (section, key) in the YAML layout.
FLAT_KEYS: dict[str, tuple[str, str]] = {
    "host": ("server", "host"),
    "port": ("server", "port"),
    "default_indexer": ("indexers", "default"),
    "indexer_targets": ("indexers", "targets"),
    "log_level": ("logging", "level"),
    "log_format": ("logging", "format"),
}
_TOP_LEVEL_KEYS = ("app_name", "environment")
_SECTIONS = frozenset(section for section, _ in FLAT_KEYS.values())


def _deep_merge(base: dict[str, Any], override: Mapping[str, Any]) -> dict[str, Any]:
    """Merge ``override`` into ``base`` in place; nested mappings merge, anything else replaces."""
    for key, value in override.items():
        current = base.get(key)
        if isinstance(current, dict) and isinstance(value, Mapping):
            _deep_merge(current, value)
        else:
            base[key] = value
    return base


def _normalize_layer(data: Mapping[str, Any]) -> dict[str, Any]:
    """Bring one layer into the sectioned shape.

    Layers may mix both spellings (``port: 80`` and ``server: {port: 80}``);
    a flat key wins over its sectioned twin within the same layer.
    """
    layer: dict[str, Any] = {
        key: deepcopy(dict(value))
        for key, value in data.items()
        if key in _SECTIONS and isinstance(value, Mapping)
    }
    layer.update({key: data[key] for key in _TOP_LEVEL_KEYS if key in data})

    for flat_key, (section, key) in FLAT_KEYS.items():
        if flat_key in data:
            layer.setdefault(section, {})[key] = data[flat_key]
    return layer


def _read_yaml_config(config_path: Path) -> dict[str, Any]:
    if not config_path.exists():
        raise FileNotFoundError(config_path)
    parsed = yaml.safe_load(config_path.read_text(encoding="utf-8"))
    if parsed is None:
        return {}
    if not isinstance(parsed, dict):
        raise ValueError(f"Config YAML must be a mapping, got: {type(parsed)!r}")
    return parsed


def load_config(
    *,
    config_path: Path | None = None,
    dotenv_path: Path | None = None,
    cli_overrides: Mapping[str, Any] | None = None,
) -> AppConfig:
    """Build the validated ``AppConfig``.

    A ``.env`` file only fills variables that are not already set in the
    process environment. Nothing is written to disk.

    Raises:
        FileNotFoundError: ``config_path`` or ``dotenv_path`` does not exist.
        ValueError: the YAML document is not a mapping.
        pydantic.ValidationError: the merged result is invalid.
    """
    if dotenv_path is not None:
        if not dotenv_path.exists():
            raise FileNotFoundError(dotenv_path)
        load_dotenv(dotenv_path, override=False)

    layers: list[Mapping[str, Any]] = [DEFAULT_CONFIG]
    if config_path is not None:
        layers.append(_read_yaml_config(config_path))
    layers.append(EnvOverrides().to_update_dict())
    layers.append(cli_overrides or {})

    merged: dict[str, Any] = {}
    for layer in layers:
        _deep_merge(merged, _normalize_layer(layer))

    config = AppConfig.model_validate(merged)
    log.debug(
        "config_loaded",
        config_path=str(config_path) if config_path else None,
        config=config.to_sectioned_dict(),
    )
    return config
