"""GitHub REST client used by target discovery."""

from __future__ import annotations

from .client import GitHubDiscoveryClient, GitHubRestClient, GitHubRestConfig
from .errors import (
    GitHubAPIError,
    GitHubConfigError,
    GitHubResponseShapeError,
    classify_github_error,
)
from .models import Account, CodeSearchItem, CodeSearchPage, SearchRepository, TextMatch

__all__ = [
    "Account",
    "CodeSearchItem",
    "CodeSearchPage",
    "GitHubAPIError",
    "GitHubConfigError",
    "GitHubDiscoveryClient",
    "GitHubResponseShapeError",
    "GitHubRestClient",
    "GitHubRestConfig",
    "SearchRepository",
    "TextMatch",
    "classify_github_error",
]
