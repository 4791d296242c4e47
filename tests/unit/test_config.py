"""Unit tests for environment-driven configuration and the ResourceMap factory."""

from __future__ import annotations

from unittest.mock import MagicMock

import pytest
import structlog

from kubediscovery.config import load_config
from kubediscovery.discovery import KubernetesDiscoverySource, ResourceMap, build_resource_map
from kubediscovery.models.config import DiscoveryConfig
from kubediscovery.observability.logging import get_logger, setup_logging


class TestLoadConfig:
    def test_defaults(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Without environment overrides every setting takes its default."""
        for key in ("REFRESH_INTERVAL", "REQUEST_TIMEOUT", "STRICT_GROUP_VERSIONS", "LOG_LEVEL", "LOG_FORMAT"):
            monkeypatch.delenv(f"KUBEDISCOVERY_{key}", raising=False)
        config = load_config()
        assert config.discovery.refresh_interval_seconds == 30.0
        assert config.discovery.request_timeout_seconds == 10.0
        assert config.discovery.strict_group_versions is True
        assert config.log.level == "info"
        assert config.log.format == "json"

    def test_overrides(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """KUBEDISCOVERY_* variables override the defaults."""
        monkeypatch.setenv("KUBEDISCOVERY_REFRESH_INTERVAL", "5")
        monkeypatch.setenv("KUBEDISCOVERY_REQUEST_TIMEOUT", "2.5")
        monkeypatch.setenv("KUBEDISCOVERY_STRICT_GROUP_VERSIONS", "false")
        monkeypatch.setenv("KUBEDISCOVERY_LOG_LEVEL", "DEBUG")
        monkeypatch.setenv("KUBEDISCOVERY_LOG_FORMAT", "console")
        config = load_config()
        assert config.discovery.refresh_interval_seconds == 5.0
        assert config.discovery.request_timeout_seconds == 2.5
        assert config.discovery.strict_group_versions is False
        assert config.log.level == "debug"
        assert config.log.format == "console"

    def test_interval_is_clamped(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Out-of-range intervals and timeouts are clamped to their bounds."""
        monkeypatch.setenv("KUBEDISCOVERY_REFRESH_INTERVAL", "0.01")
        monkeypatch.setenv("KUBEDISCOVERY_REQUEST_TIMEOUT", "600")
        config = load_config()
        assert config.discovery.refresh_interval_seconds == 1.0
        assert config.discovery.request_timeout_seconds == 120.0

    def test_invalid_log_level_rejected(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """An unknown log level raises ValueError."""
        monkeypatch.setenv("KUBEDISCOVERY_LOG_LEVEL", "verbose")
        with pytest.raises(ValueError, match="Invalid log level"):
            load_config()


class TestBuildResourceMap:
    def test_wires_kubernetes_source(self) -> None:
        """build_resource_map() wires the Kubernetes source with the configured timeout and mode."""
        config = DiscoveryConfig(request_timeout_seconds=4.0, strict_group_versions=False)
        resources = build_resource_map(config, MagicMock())
        assert isinstance(resources, ResourceMap)
        assert isinstance(resources._source, KubernetesDiscoverySource)
        assert resources._source._request_timeout == 4.0
        assert resources._strict is False


class TestLogging:
    def test_setup_logging_emits_json(self, capsys: pytest.CaptureFixture[str]) -> None:
        """JSON output carries the event, component and bound fields."""
        setup_logging("debug")
        try:
            get_logger("test").info("discovery_test_event", answer=42)
        finally:
            structlog.reset_defaults()
        err = capsys.readouterr().err
        assert '"event": "discovery_test_event"' in err
        assert '"component": "test"' in err
        assert '"answer": 42' in err

    def test_console_format(self, capsys: pytest.CaptureFixture[str]) -> None:
        """Console output filters by level and renders key=value pairs."""
        setup_logging("info", fmt="console")
        try:
            get_logger("test").debug("discovery_hidden_event")
            get_logger("test").warning("discovery_console_event", group_version="apps/v1")
        finally:
            structlog.reset_defaults()
        err = capsys.readouterr().err
        assert "discovery_hidden_event" not in err
        assert "discovery_console_event" in err
        assert "group_version=apps/v1" in err

    def test_unknown_format_rejected(self) -> None:
        """An unknown log format raises ValueError."""
        with pytest.raises(ValueError, match="Invalid log format"):
            setup_logging("info", fmt="xml")
