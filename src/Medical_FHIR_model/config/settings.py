"""Configuration system for the model runtime."""

from __future__ import annotations

from functools import lru_cache

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class LoggingSettings(BaseModel):
    """Structured logging configuration."""

    level: str = Field(default="INFO", description="Log level for runtime output")
    json_output: bool = Field(
        default=True,
        alias="json",
        description="Render log lines as JSON instead of the console renderer",
    )

    model_config = ConfigDict(populate_by_name=True)

    @field_validator("level")
    @classmethod
    def _normalise_level(cls, value: str) -> str:
        return value.upper()


class ValidationSettings(BaseModel):
    """Switches for the build-time validation chain."""

    collect_all: bool = Field(
        default=True,
        description="Collect every violation of a node before raising instead of failing fast",
    )
    check_reference_types: bool = Field(
        default=True,
        description="Enforce allowed target kinds on typed references",
    )
    check_primitive_values: bool = Field(
        default=True,
        description="Enforce lexical rules on primitive values (string, code, id, uri, ...)",
    )
    enforce_required_bindings: bool = Field(
        default=True,
        description="Reject codes outside locally declared required bindings",
    )
    check_resource_kinds: bool = Field(
        default=False,
        description=(
            "Reject typed references whose kind is not a concrete resource type known "
            "to the registry of the referencing class"
        ),
    )


class ModelSettings(BaseSettings):
    """Top-level runtime settings."""

    validation: ValidationSettings = Field(default_factory=ValidationSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)

    model_config = SettingsConfigDict(env_prefix="MFM_", env_nested_delimiter="__")


def load_settings(**overrides: object) -> ModelSettings:
    """Load settings from the environment, applying explicit overrides last."""
    return ModelSettings(**overrides)


@lru_cache(maxsize=1)
def get_settings() -> ModelSettings:
    """Cached accessor used by production code."""
    return load_settings()


__all__ = [
    "LoggingSettings",
    "ModelSettings",
    "ValidationSettings",
    "get_settings",
    "load_settings",
]
