"""Discovery of repositories that display the metrics badge.

Quick example
-------------

    >>> from imir.discovery import DiscoveryConfig, DiscoveryService
    >>> from imir.github import GitHubRestClient, GitHubRestConfig
    >>> async with GitHubRestClient(GitHubRestConfig.from_env()) as client:
    ...     service = DiscoveryService(client, DiscoveryConfig.from_env())
    ...     repositories = await service.discover()
"""

from __future__ import annotations

from .config import DiscoveryConfig, DiscoverySource
from .extraction import badge_repository, extract_repository_reference
from .models import DiscoveredRepository
from .service import DiscoveryService, deduplicate

__all__ = [
    "DiscoveredRepository",
    "DiscoveryConfig",
    "DiscoveryService",
    "DiscoverySource",
    "badge_repository",
    "deduplicate",
    "extract_repository_reference",
]
