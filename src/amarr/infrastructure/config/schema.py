"""Pydantic configuration models with validation."""

from __future__ import annotations

from typing import Any, Literal, Optional

from pydantic import (
    AliasChoices,
    AliasPath,
    BaseModel,
    Field,
    field_validator,
    model_validator,
)
from pydantic_settings import BaseSettings, SettingsConfigDict

Environment = Literal["dev", "test", "prod"]
LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR"]
LogFormat = Literal["json", "console"]


def _sectioned(flat: str, section: str, key: str) -> AliasChoices:
    """Accept both ``flat`` and ``section.key`` when validating."""
    return AliasChoices(flat, AliasPath(section, key))


class AppConfig(BaseModel):
    """Final, validated configuration.

    Fields are flat; the YAML layout groups them under ``server``,
    ``indexers`` and ``logging``. See ``load.load_config`` for layering.
    """

    app_name: str = Field(default="amarr")
    environment: Environment = Field(default="dev")

    host: str = Field(
        default="0.0.0.0",
        validation_alias=_sectioned("host", "server", "host"),
    )
    port: int = Field(
        default=8080,
        validation_alias=_sectioned("port", "server", "port"),
    )

    default_indexer: str = Field(
        default="amule",
        validation_alias=_sectioned("default_indexer", "indexers", "default"),
        description="Indexer served by the legacy /api route.",
    )
    indexer_targets: dict[str, str] = Field(
        default_factory=dict,
        validation_alias=_sectioned("indexer_targets", "indexers", "targets"),
        description="Route identifier -> 'package.module:attribute' import target.",
    )

    log_level: LogLevel = Field(
        default="INFO",
        validation_alias=_sectioned("log_level", "logging", "level"),
    )
    log_format: Optional[LogFormat] = Field(
        default=None,
        validation_alias=_sectioned("log_format", "logging", "format"),
        description="console or json; derived from environment when unset.",
    )

    @field_validator("port")
    @classmethod
    def _check_port(cls, v: int) -> int:
        if not 0 < v < 65536:
            raise ValueError("port must be between 1 and 65535")
        return v

    @field_validator("indexer_targets")
    @classmethod
    def _check_targets(cls, v: dict[str, str]) -> dict[str, str]:
        bad = sorted(name for name, target in v.items() if ":" not in target)
        if bad:
            raise ValueError(
                f"indexer target(s) {bad} must look like 'package.module:attribute'"
            )
        return v

    @model_validator(mode="after")
    def _fill_log_format(self) -> "AppConfig":
        if self.log_format is None:
            self.log_format = "json" if self.environment == "prod" else "console"
        return self

    def to_sectioned_dict(self) -> dict[str, Any]:
        """Dump in the YAML layout (inverse of the aliases above)."""
        return {
            "app_name": self.app_name,
            "environment": self.environment,
            "server": {"host": self.host, "port": self.port},
            "indexers": {
                "default": self.default_indexer,
                "targets": dict(self.indexer_targets),
            },
            "logging": {"level": self.log_level, "format": self.log_format},
        }


class EnvOverrides(BaseSettings):
    """``AMARR_*`` environment variables, all optional.

    ``AMARR_INDEXER_TARGETS`` is parsed as JSON, e.g.
    ``'{"amule": "my_backends.amule:indexer"}'``.
    """

    model_config = SettingsConfigDict(
        env_prefix="AMARR_",
        extra="ignore",
        case_sensitive=False,
    )

    app_name: Optional[str] = None
    environment: Optional[Environment] = None
    host: Optional[str] = None
    port: Optional[int] = None
    default_indexer: Optional[str] = None
    indexer_targets: Optional[dict[str, str]] = None
    log_level: Optional[LogLevel] = None
    log_format: Optional[LogFormat] = None

    def to_update_dict(self) -> dict[str, Any]:
        """Only the variables that were actually set."""
        return self.model_dump(exclude_none=True)
