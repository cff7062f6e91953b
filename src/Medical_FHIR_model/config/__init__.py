"""Lightweight configuration package exports."""

from __future__ import annotations

from .settings import (
    LoggingSettings,
    ModelSettings,
    ValidationSettings,
    get_settings,
    load_settings,
)

__all__ = [
    "LoggingSettings",
    "ModelSettings",
    "ValidationSettings",
    "get_settings",
    "load_settings",
]
