"""Configuration loading from environment variables."""

from __future__ import annotations

import os

from kubediscovery.models.config import DiscoveryConfig, KubeDiscoveryConfig, LogConfig


def _env(key: str, default: str = "") -> str:
    return os.environ.get(f"KUBEDISCOVERY_{key}", default)


def _env_bool(key: str, default: bool = False) -> bool:
    val = _env(key, str(default).lower())
    return val.lower() in ("true", "1", "yes")


def _env_float(
    key: str,
    default: float,
    min_val: float | None = None,
    max_val: float | None = None,
) -> float:
    val = float(_env(key, str(default)))
    if min_val is not None:
        val = max(val, min_val)
    if max_val is not None:
        val = min(val, max_val)
    return val


def _validate_log_format(value: str) -> str:
    valid = {"json", "console"}
    if value.lower() not in valid:
        raise ValueError(f"Invalid log format: {value}. Must be one of {valid}")
    return value.lower()


def _validate_log_level(value: str) -> str:
    valid = {"debug", "info", "warning", "error"}
    if value.lower() not in valid:
        raise ValueError(f"Invalid log level: {value}. Must be one of {valid}")
    return value.lower()


def load_config() -> KubeDiscoveryConfig:
    """Load configuration from KUBEDISCOVERY_* environment variables."""
    return KubeDiscoveryConfig(
        discovery=DiscoveryConfig(
            refresh_interval_seconds=_env_float("REFRESH_INTERVAL", 30.0, min_val=1.0, max_val=3600.0),
            request_timeout_seconds=_env_float("REQUEST_TIMEOUT", 10.0, min_val=1.0, max_val=120.0),
            strict_group_versions=_env_bool("STRICT_GROUP_VERSIONS", True),
        ),
        log=LogConfig(
            level=_validate_log_level(_env("LOG_LEVEL", "info")),
            format=_validate_log_format(_env("LOG_FORMAT", "json")),
        ),
    )
