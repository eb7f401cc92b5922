"""Discover repositories that display the metrics badge.

Two strategies are available:

* **badge** pages through GitHub code search for files mentioning both the
  badge and the metrics path, and reports the repository each match links.
* **stargazers** pages through the accounts that starred the reference
  repository and inspects each account's profile README the same way.

Every page and README request runs under the configured
:class:`~imir.retry.RetryPolicy`. A request that keeps failing retryably is
skipped with a warning; fatal failures such as bad credentials abort
discovery.
"""

from __future__ import annotations

import asyncio
import functools
import typing as typ

from imir.common.slug import parse_repo_slug
from imir.github.errors import classify_github_error
from imir.logging import get_logger, log_debug, log_info, log_warning
from imir.retry import ExhaustedRetriesError, RetryExecutor

from .config import DiscoveryConfig, DiscoverySource
from .extraction import extract_repository_reference
from .models import DiscoveredRepository

if typ.TYPE_CHECKING:
    import collections.abc as cabc

    from imir.github.client import GitHubDiscoveryClient
    from imir.github.models import Account, CodeSearchItem
    from imir.retry import Sleep

logger = get_logger(__name__)

P = typ.TypeVar("P")


def deduplicate(
    repositories: cabc.Iterable[DiscoveredRepository],
) -> list[DiscoveredRepository]:
    """Drop repeated repositories, keeping the first occurrence of each."""
    return list(dict.fromkeys(repositories))


async def _collect(
    repositories: cabc.AsyncIterator[DiscoveredRepository],
) -> list[DiscoveredRepository]:
    return [repository async for repository in repositories]


class DiscoveryService:
    """Run discovery strategies against a GitHub client."""

    def __init__(
        self,
        client: GitHubDiscoveryClient,
        config: DiscoveryConfig | None = None,
        *,
        sleep: Sleep = asyncio.sleep,
    ) -> None:
        """Initialise with a client, settings, and the backoff sleep coroutine."""
        self._client = client
        self._config = config or DiscoveryConfig()
        self._executor = RetryExecutor(self._config.retry_policy, sleep=sleep)

    @property
    def config(self) -> DiscoveryConfig:
        """Return the settings used by every strategy."""
        return self._config

    async def discover(
        self, source: DiscoverySource | None = None
    ) -> list[DiscoveredRepository]:
        """Return repositories found by ``source`` without duplicates.

        ``source`` defaults to the configured one. ``all`` runs both
        strategies concurrently and lists badge results before stargazer
        results, keeping the first occurrence of each repository.

        Raises
        ------
        GitHubAPIError
            For non-retryable API failures.
        GitHubConfigError, GitHubResponseShapeError
            When the client is misconfigured or GitHub returns an unexpected
            payload.

        """
        source = source or self._config.source
        if source is DiscoverySource.BADGE:
            found = await _collect(self.iter_badge_repositories())
        elif source is DiscoverySource.STARGAZERS:
            found = await _collect(self.iter_stargazer_repositories())
        else:
            found = await self._discover_all()
        log_info(logger, "Discovered %d repositories via %s", len(found), source)
        return found

    async def _discover_all(self) -> list[DiscoveredRepository]:
        try:
            async with asyncio.TaskGroup() as group:
                badge = group.create_task(_collect(self.iter_badge_repositories()))
                stargazers = group.create_task(
                    _collect(self.iter_stargazer_repositories())
                )
        except ExceptionGroup as failures:
            raise failures.exceptions[0] from None
        return deduplicate([*badge.result(), *stargazers.result()])

    async def iter_badge_repositories(
        self,
    ) -> cabc.AsyncIterator[DiscoveredRepository]:
        """Yield repositories linked from code search matches, once each."""
        query = self._config.search_query
        fetch = functools.partial(
            self._search_page, query, per_page=self._config.per_page
        )
        seen: set[DiscoveredRepository] = set()
        async for page in self._iter_pages("badge search", fetch):
            for item in page:
                hosting = DiscoveredRepository(
                    owner=item.repository.owner.login,
                    repository=item.repository.name,
                )
                found = self._extract(item.content, fallback=hosting)
                if found is None:
                    log_debug(logger, "Skipping %s/%s: no badge", hosting, item.path)
                    continue
                if found not in seen:
                    seen.add(found)
                    yield found

    async def iter_stargazer_repositories(
        self,
    ) -> cabc.AsyncIterator[DiscoveredRepository]:
        """Yield repositories linked from stargazers' profile READMEs, once each."""
        owner, name = parse_repo_slug(self._config.stargazer_repository)
        fetch = functools.partial(
            self._stargazer_page, owner, name, per_page=self._config.per_page
        )
        seen: set[DiscoveredRepository] = set()
        description = f"stargazers of {owner}/{name}"
        async for page in self._iter_pages(description, fetch):
            for account in page:
                readme = await self._fetch_readme(account.login)
                if readme is None:
                    continue
                found = self._extract(
                    readme,
                    fallback=DiscoveredRepository(
                        owner=account.login, repository=account.login
                    ),
                )
                if found is not None and found not in seen:
                    seen.add(found)
                    yield found

    def _extract(
        self, content: str, *, fallback: DiscoveredRepository
    ) -> DiscoveredRepository | None:
        return extract_repository_reference(
            content,
            badge_url_pattern=self._config.badge_url_pattern,
            metrics_path_pattern=self._config.metrics_path_pattern,
            fallback=fallback,
        )

    async def _search_page(
        self, query: str, page: int, *, per_page: int
    ) -> list[CodeSearchItem]:
        result = await self._client.search_code(query, page=page, per_page=per_page)
        return list(result.items)

    async def _stargazer_page(
        self, owner: str, name: str, page: int, *, per_page: int
    ) -> list[Account]:
        return await self._client.list_stargazers(
            owner, name, page=page, per_page=per_page
        )

    async def _fetch_readme(self, login: str) -> str | None:
        try:
            return await self._executor.execute(
                functools.partial(self._client.fetch_profile_readme, login),
                classify_github_error,
                description=f"profile README of {login}",
            )
        except ExhaustedRetriesError as exc:
            log_warning(logger, "Skipping stargazer %s: %s", login, exc)
            return None

    async def _iter_pages(
        self,
        description: str,
        fetch: cabc.Callable[[int], cabc.Awaitable[list[P]]],
    ) -> cabc.AsyncIterator[list[P]]:
        """Yield non-empty pages 1..max_pages, stopping at the first empty one."""
        max_pages = self._config.max_pages
        for page in range(1, max_pages + 1):
            try:
                items = await self._executor.execute(
                    functools.partial(fetch, page),
                    classify_github_error,
                    description=f"{description} page {page}",
                )
            except ExhaustedRetriesError as exc:
                log_warning(logger, "Skipping %s page %d: %s", description, page, exc)
                continue
            if not items:
                log_debug(logger, "%s: page %d is empty, stopping", description, page)
                return
            log_debug(logger, "%s: page %d has %d items", description, page, len(items))
            yield items
        log_info(
            logger,
            "%s stopped after %d pages; further results were not fetched",
            description,
            max_pages,
        )
