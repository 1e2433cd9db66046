"""Flat environment variable names for the nested settings sections.

Legacy names are still honoured and emit a DeprecationWarning.
"""
from __future__ import annotations

import os
import warnings
from collections.abc import Iterable, Mapping
from typing import Any

# Mapping of deprecated env vars to their canonical names
_DEPRECATED_ALIASES: dict[str, str] = {
    "SERVICENOW_USER": "SERVICENOW_USERNAME",
    "SERVICENOW_INSTANCE_NAME": "SERVICENOW_INSTANCE",
}


def _warn_deprecated_env_var(old_name: str, new_name: str) -> None:
    warnings.warn(
        f"Environment variable '{old_name}' is deprecated. Use '{new_name}' instead. "
        f"Support for '{old_name}' will be removed in a future version.",
        DeprecationWarning,
        stacklevel=3,
    )


def _set_nested(data: dict[str, Any], path: tuple[str, ...], value: Any) -> None:
    node = data
    for part in path[:-1]:
        child = node.get(part)
        if not isinstance(child, dict):
            child = {}
            node[part] = child
        node = child
    node[path[-1]] = value


def _apply_alias_mappings(
    env: Mapping[str, str],
    data: dict[str, Any],
    mappings: Iterable[tuple[str, tuple[str, ...]]],
) -> None:
    for env_name, path in mappings:
        value = env.get(env_name)
        if value:
            _set_nested(data, path, value)


def _apply_deprecated_aliases(
    env: Mapping[str, str],
    data: dict[str, Any],
) -> None:
    for old_name, new_name in _DEPRECATED_ALIASES.items():
        old_value = env.get(old_name)
        if not old_value:
            continue
        if env.get(new_name):
            continue
        _warn_deprecated_env_var(old_name, new_name)
        path = dict(_CANONICAL_MAPPINGS)[new_name]
        _set_nested(data, path, old_value)


_CANONICAL_MAPPINGS: tuple[tuple[str, tuple[str, ...]], ...] = (
    # ServiceNow
    ("SERVICENOW_INSTANCE", ("servicenow", "instance")),
    ("SERVICENOW_USERNAME", ("servicenow", "username")),
    ("SERVICENOW_PASSWORD", ("servicenow", "password")),
    ("SERVICENOW_TIMEOUT_SECONDS", ("servicenow", "timeout_seconds")),
    ("SERVICENOW_VERIFY_TLS", ("servicenow", "verify_tls")),
    ("SERVICENOW_TRUST_ENV", ("servicenow", "trust_env")),
    # Observability
    ("LOG_LEVEL", ("observability", "log_level")),
    ("LOG_FORMAT", ("observability", "log_format")),
    ("LOG_JSON", ("observability", "json_logs")),
)


def get_flat_env_settings_source() -> dict[str, Any]:
    env = os.environ
    data: dict[str, Any] = {}

    _apply_alias_mappings(env, data, _CANONICAL_MAPPINGS)
    _apply_deprecated_aliases(env, data)

    return data
