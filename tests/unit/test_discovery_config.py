"""Unit tests for discovery configuration."""

from __future__ import annotations

import pytest

from imir.discovery import DiscoveryConfig, DiscoverySource
from imir.discovery.config import (
    DEFAULT_BADGE_URL_PATTERN,
    DEFAULT_METRICS_PATH_PATTERN,
    DEFAULT_STARGAZER_REPOSITORY,
)
from imir.retry import RetryPolicy


class TestDiscoveryConfigDefaults:
    """Tests for default discovery settings."""

    def test_defaults(self) -> None:
        """Defaults query both signals with the standard retry schedule."""
        config = DiscoveryConfig()

        assert config.source is DiscoverySource.ALL
        assert config.max_pages == 10
        assert config.per_page == 100
        assert config.retry_policy == RetryPolicy()
        assert config.badge_url_pattern == DEFAULT_BADGE_URL_PATTERN
        assert config.stargazer_repository == DEFAULT_STARGAZER_REPOSITORY

    def test_search_query_combines_markers(self) -> None:
        """The code search query contains both markers."""
        config = DiscoveryConfig(badge_url_pattern="org/badge", metrics_path_pattern="/m/")

        assert config.search_query == "org/badge /m/"

    @pytest.mark.parametrize(
        ("kwargs", "message"),
        [
            ({"max_pages": 0}, "max_pages"),
            ({"per_page": 0}, "per_page"),
            ({"per_page": 101}, "per_page"),
            ({"badge_url_pattern": " "}, "badge_url_pattern"),
            ({"metrics_path_pattern": ""}, "metrics_path_pattern"),
            ({"stargazer_repository": "no-slash"}, "Invalid repository slug"),
        ],
    )
    def test_rejects_invalid_settings(
        self, kwargs: dict[str, object], message: str
    ) -> None:
        """Out-of-range or malformed settings raise ValueError."""
        with pytest.raises(ValueError, match=message):
            DiscoveryConfig(**kwargs)  # type: ignore[arg-type]


class TestDiscoveryConfigFromEnv:
    """Tests for DiscoveryConfig.from_env."""

    def test_defaults_when_unset(self) -> None:
        """An empty environment yields the defaults."""
        assert DiscoveryConfig.from_env() == DiscoveryConfig()

    def test_reads_every_variable(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Every documented variable is honoured."""
        monkeypatch.setenv("IMIR_DISCOVERY_SOURCE", " Stargazers ")
        monkeypatch.setenv("IMIR_DISCOVERY_MAX_PAGES", "3")
        monkeypatch.setenv("IMIR_DISCOVERY_BADGE_PATTERN", "acme/badge")
        monkeypatch.setenv("IMIR_DISCOVERY_METRICS_PATTERN", "/dash/")
        monkeypatch.setenv("IMIR_DISCOVERY_STARGAZER_REPOSITORY", "acme/renderer")
        monkeypatch.setenv("IMIR_RETRY_MAX_ATTEMPTS", "5")
        monkeypatch.setenv("IMIR_RETRY_INITIAL_DELAY_MS", "250")
        monkeypatch.setenv("IMIR_RETRY_BACKOFF_FACTOR", "1.5")

        config = DiscoveryConfig.from_env()

        assert config.source is DiscoverySource.STARGAZERS
        assert config.max_pages == 3
        assert config.badge_url_pattern == "acme/badge"
        assert config.metrics_path_pattern == "/dash/"
        assert config.stargazer_repository == "acme/renderer"
        assert config.retry_policy == RetryPolicy(
            max_attempts=5, initial_delay=250, backoff_factor=1.5
        )

    def test_blank_values_fall_back_to_defaults(
        self, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        """Whitespace-only values are treated as unset."""
        monkeypatch.setenv("IMIR_DISCOVERY_METRICS_PATTERN", "   ")
        monkeypatch.setenv("IMIR_DISCOVERY_MAX_PAGES", "")

        config = DiscoveryConfig.from_env()

        assert config.metrics_path_pattern == DEFAULT_METRICS_PATH_PATTERN
        assert config.max_pages == 10

    @pytest.mark.parametrize(
        ("name", "value", "message"),
        [
            ("IMIR_DISCOVERY_MAX_PAGES", "many", "must be an integer"),
            ("IMIR_DISCOVERY_SOURCE", "forks", "must be one of badge"),
            ("IMIR_RETRY_BACKOFF_FACTOR", "fast", "must be a number"),
            ("IMIR_RETRY_BACKOFF_FACTOR", "1", "backoff_factor"),
            ("IMIR_RETRY_MAX_ATTEMPTS", "0", "max_attempts"),
        ],
    )
    def test_invalid_values_raise(
        self,
        monkeypatch: pytest.MonkeyPatch,
        name: str,
        value: str,
        message: str,
    ) -> None:
        """Unparseable or out-of-range values raise ValueError."""
        monkeypatch.setenv(name, value)

        with pytest.raises(ValueError, match=message):
            DiscoveryConfig.from_env()
