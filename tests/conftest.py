from __future__ import annotations

import pytest

from Medical_FHIR_model.config.settings import get_settings
from Medical_FHIR_model.model.registry import CORE_REGISTRY, TypeRegistry


@pytest.fixture(autouse=True)
def _reset_settings(monkeypatch):
    for name in (
        "MFM_VALIDATION__COLLECT_ALL",
        "MFM_VALIDATION__CHECK_REFERENCE_TYPES",
        "MFM_VALIDATION__CHECK_PRIMITIVE_VALUES",
        "MFM_VALIDATION__ENFORCE_REQUIRED_BINDINGS",
        "MFM_VALIDATION__CHECK_RESOURCE_KINDS",
        "MFM_LOGGING__LEVEL",
        "MFM_LOGGING__JSON",
    ):
        monkeypatch.delenv(name, raising=False)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def registry() -> TypeRegistry:
    return CORE_REGISTRY.child("test")


@pytest.fixture
def settings_env(monkeypatch):
    """Set ``MFM_*`` environment overrides and refresh the cached settings."""

    def apply(**values: str) -> None:
        for key, value in values.items():
            monkeypatch.setenv(f"MFM_{key.upper()}", value)
        get_settings.cache_clear()

    return apply
