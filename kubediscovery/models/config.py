"""Configuration data structures."""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass
class DiscoveryConfig:
    """API discovery refresh configuration."""

    refresh_interval_seconds: float = 30.0
    request_timeout_seconds: float = 10.0
    strict_group_versions: bool = True


@dataclass
class LogConfig:
    """Logging configuration."""

    level: str = "info"
    format: str = "json"


@dataclass
class KubeDiscoveryConfig:
    """Top-level kubediscovery configuration."""

    discovery: DiscoveryConfig = field(default_factory=DiscoveryConfig)
    log: LogConfig = field(default_factory=LogConfig)
