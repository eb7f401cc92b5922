"""Configuration for repository discovery.

Create a configuration with defaults:

>>> config = DiscoveryConfig()
>>> config.max_pages
10

Or load from environment variables with :meth:`DiscoveryConfig.from_env`.

"""

from __future__ import annotations

import dataclasses as dc
import enum
import os

from imir.common.slug import parse_repo_slug
from imir.retry import RetryPolicy

DEFAULT_BADGE_URL_PATTERN = "RAprogramm/infra-metrics-insight-renderer"
DEFAULT_METRICS_PATH_PATTERN = "/metrics/"
DEFAULT_STARGAZER_REPOSITORY = "RAprogramm/infra-metrics-insight-renderer"


class DiscoverySource(enum.StrEnum):
    """Signals discovery can query."""

    BADGE = "badge"
    STARGAZERS = "stargazers"
    ALL = "all"


@dc.dataclass(frozen=True, slots=True)
class DiscoveryConfig:
    """Settings shared by every discovery strategy.

    Attributes
    ----------
    source
        Strategy run by :meth:`~imir.discovery.service.DiscoveryService.discover`
        when none is passed explicitly.
    max_pages
        Upper bound on pages fetched per strategy.
    badge_url_pattern
        Text identifying the metrics badge; also names the repository that
        hosts the badge, which is never reported as a discovery.
    metrics_path_pattern
        Second marker that must accompany the badge.
    retry_policy
        Backoff schedule applied to every page and README fetch.
    stargazer_repository
        ``owner/name`` of the repository whose stargazers are inspected.
    per_page
        Page size requested from GitHub, at most 100.

    """

    source: DiscoverySource = DiscoverySource.ALL
    max_pages: int = 10
    badge_url_pattern: str = DEFAULT_BADGE_URL_PATTERN
    metrics_path_pattern: str = DEFAULT_METRICS_PATH_PATTERN
    retry_policy: RetryPolicy = dc.field(default_factory=RetryPolicy)
    stargazer_repository: str = DEFAULT_STARGAZER_REPOSITORY
    per_page: int = 100

    def __post_init__(self) -> None:
        """Reject settings discovery cannot honour."""
        if self.max_pages < 1:
            msg = f"max_pages must be positive, got: {self.max_pages}"
            raise ValueError(msg)
        if not 1 <= self.per_page <= 100:  # noqa: PLR2004
            msg = f"per_page must be between 1 and 100, got: {self.per_page}"
            raise ValueError(msg)
        if not self.badge_url_pattern.strip():
            msg = "badge_url_pattern must not be empty"
            raise ValueError(msg)
        if not self.metrics_path_pattern.strip():
            msg = "metrics_path_pattern must not be empty"
            raise ValueError(msg)
        parse_repo_slug(self.stargazer_repository)

    @property
    def search_query(self) -> str:
        """Return the code search query matching both markers."""
        return f"{self.badge_url_pattern} {self.metrics_path_pattern}"

    @staticmethod
    def _read(env_var: str) -> str | None:
        raw = os.environ.get(env_var, "").strip()
        return raw or None

    @classmethod
    def _parse_int(cls, env_var: str, default: int) -> int:
        """Read an integer env var, falling back to a default."""
        raw = cls._read(env_var)
        if raw is None:
            return default
        try:
            return int(raw)
        except ValueError as exc:
            msg = f"{env_var} must be an integer, got: {raw!r}"
            raise ValueError(msg) from exc

    @classmethod
    def _parse_float(cls, env_var: str, default: float) -> float:
        """Read a float env var, falling back to a default."""
        raw = cls._read(env_var)
        if raw is None:
            return default
        try:
            return float(raw)
        except ValueError as exc:
            msg = f"{env_var} must be a number, got: {raw!r}"
            raise ValueError(msg) from exc

    @classmethod
    def _parse_source(cls, env_var: str) -> DiscoverySource:
        raw = cls._read(env_var)
        if raw is None:
            return DiscoverySource.ALL
        try:
            return DiscoverySource(raw.lower())
        except ValueError as exc:
            choices = ", ".join(source.value for source in DiscoverySource)
            msg = f"{env_var} must be one of {choices}, got: {raw!r}"
            raise ValueError(msg) from exc

    @classmethod
    def from_env(cls) -> DiscoveryConfig:
        """Create configuration from environment variables.

        Reads the following environment variables:

        - ``IMIR_DISCOVERY_SOURCE``: ``badge``, ``stargazers``, or ``all``.
        - ``IMIR_DISCOVERY_MAX_PAGES``: pages fetched per strategy.
        - ``IMIR_DISCOVERY_BADGE_PATTERN``: badge marker text.
        - ``IMIR_DISCOVERY_METRICS_PATTERN``: metrics path marker text.
        - ``IMIR_DISCOVERY_STARGAZER_REPOSITORY``: ``owner/name`` to inspect.
        - ``IMIR_RETRY_MAX_ATTEMPTS``, ``IMIR_RETRY_INITIAL_DELAY_MS``,
          ``IMIR_RETRY_BACKOFF_FACTOR``: retry schedule.

        Raises
        ------
        ValueError
            If a variable cannot be parsed or holds an out-of-range value.

        """
        defaults = RetryPolicy()
        retry_policy = RetryPolicy(
            max_attempts=cls._parse_int(
                "IMIR_RETRY_MAX_ATTEMPTS", defaults.max_attempts
            ),
            initial_delay=cls._parse_int(
                "IMIR_RETRY_INITIAL_DELAY_MS", defaults.initial_delay
            ),
            backoff_factor=cls._parse_float(
                "IMIR_RETRY_BACKOFF_FACTOR", defaults.backoff_factor
            ),
        )
        return cls(
            source=cls._parse_source("IMIR_DISCOVERY_SOURCE"),
            max_pages=cls._parse_int("IMIR_DISCOVERY_MAX_PAGES", 10),
            badge_url_pattern=cls._read("IMIR_DISCOVERY_BADGE_PATTERN")
            or DEFAULT_BADGE_URL_PATTERN,
            metrics_path_pattern=cls._read("IMIR_DISCOVERY_METRICS_PATTERN")
            or DEFAULT_METRICS_PATH_PATTERN,
            retry_policy=retry_policy,
            stargazer_repository=cls._read("IMIR_DISCOVERY_STARGAZER_REPOSITORY")
            or DEFAULT_STARGAZER_REPOSITORY,
        )
