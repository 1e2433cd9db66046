from __future__ import annotations

import os
import socket
import sys
from collections.abc import Callable
from copy import deepcopy
from pathlib import Path
from typing import Any

import pytest

_ENV_KEYS = (
    "CONFIG_PATH",
    "SERVICENOW_INSTANCE",
    "SERVICENOW_USERNAME",
    "SERVICENOW_PASSWORD",
    "SERVICENOW_TIMEOUT_SECONDS",
    "SERVICENOW_VERIFY_TLS",
    "SERVICENOW_TRUST_ENV",
    "LOG_LEVEL",
    "LOG_FORMAT",
    "LOG_JSON",
    # Legacy aliases
    "SERVICENOW_USER",
    "SERVICENOW_INSTANCE_NAME",
    # Nested form (supported by pydantic-settings)
    "SERVICENOW",
    "SERVICENOW__INSTANCE",
    "SERVICENOW__USERNAME",
    "SERVICENOW__PASSWORD",
    "OBSERVABILITY__LOG_LEVEL",
)


def pytest_configure() -> None:
    repo_root = Path(__file__).resolve().parents[1]
    src_path = repo_root / "src"
    sys.path.insert(0, str(src_path))


@pytest.fixture(autouse=True)
def _disable_network(monkeypatch: pytest.MonkeyPatch) -> None:
    """
    Prevent accidental real network calls in tests.

    Respx mocks should still work because they intercept at the HTTP client layer.
    """
    if (os.environ.get("ALLOW_NETWORK_TESTS") or "").strip().lower() in {"1", "true", "yes"}:
        return

    def _blocked(*_args: object, **_kwargs: object) -> None:
        raise RuntimeError(
            "Network access is disabled in tests (set ALLOW_NETWORK_TESTS=1 to override)."
        )

    monkeypatch.setattr(socket, "create_connection", _blocked)
    monkeypatch.setattr(socket.socket, "connect", _blocked, raising=True)


@pytest.fixture
def clean_env(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> Path:
    """Empty working directory and no ServiceNow/logging variables in the environment."""
    monkeypatch.chdir(tmp_path)
    for key in _ENV_KEYS:
        monkeypatch.delenv(key, raising=False)
    return tmp_path


def _deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    result = deepcopy(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(result.get(key), dict):
            result[key] = _deep_merge(result[key], value)
        else:
            result[key] = value
    return result


@pytest.fixture
def make_settings() -> Callable[..., Any]:
    from servicenow_client.config.settings import Settings

    def _make(overrides: dict[str, Any] | None = None) -> Settings:
        data: dict[str, Any] = {
            "servicenow": {"instance": "acme", "username": "bob", "password": "secret"},
        }
        if overrides:
            data = _deep_merge(data, overrides)
        return Settings.from_mapping(data)

    return _make
