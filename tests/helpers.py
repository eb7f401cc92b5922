"""Shared test utilities."""

from __future__ import annotations

import collections
import dataclasses
import typing as typ

from imir.github.models import (
    Account,
    CodeSearchItem,
    CodeSearchPage,
    SearchRepository,
    TextMatch,
)

BADGE_SNIPPET = (
    "![metrics](https://github.com/RAprogramm/infra-metrics-insight-renderer"
    "/raw/main/metrics/{slug}.svg)"
)


class FakeLogger:
    """Collects log calls for assertions."""

    def __init__(self) -> None:
        self.calls: list[tuple[str, str, object | None, bool]] = []

    def log(
        self,
        level: str,
        message: str,
        /,
        *,
        exc_info: object | None = None,
        stack_info: bool = False,
    ) -> str:
        self.calls.append((level, message, exc_info, stack_info))
        return message

    def messages(self, level: str) -> list[str]:
        """Return messages logged at ``level``."""
        return [message for lvl, message, _, _ in self.calls if lvl == level]


@dataclasses.dataclass(slots=True)
class RecordingSleep:
    """Stand-in for :func:`asyncio.sleep` that records requested delays."""

    delays: list[float] = dataclasses.field(default_factory=list)

    async def __call__(self, seconds: float) -> None:
        self.delays.append(seconds)


def badge_readme(slug: str, *links: str) -> str:
    """Return README text carrying the metrics badge and optional links."""
    lines = [BADGE_SNIPPET.format(slug=slug)]
    lines.extend(f"[project](https://github.com/{link})" for link in links)
    return "\n".join(lines)


def search_item(owner: str, name: str, fragment: str) -> CodeSearchItem:
    """Build a code search match hosted by ``owner/name``."""
    return CodeSearchItem(
        repository=SearchRepository(name=name, owner=Account(login=owner)),
        path="README.md",
        text_matches=(TextMatch(fragment=fragment),),
    )


Response = typ.Any


@dataclasses.dataclass(slots=True)
class FakeGitHubClient:
    """Scripted GitHub client.

    Each queue entry is either a value to return or an exception to raise.
    Pages without scripted responses come back empty.
    """

    search_pages: collections.deque[Response] = dataclasses.field(
        default_factory=collections.deque
    )
    stargazer_pages: collections.deque[Response] = dataclasses.field(
        default_factory=collections.deque
    )
    readmes: dict[str, collections.deque[Response]] = dataclasses.field(
        default_factory=dict
    )
    calls: list[tuple[str, object]] = dataclasses.field(default_factory=list)

    @staticmethod
    def _next(queue: collections.deque[Response], empty: Response) -> Response:
        result = queue.popleft() if queue else empty
        if isinstance(result, Exception):
            raise result
        return result

    async def search_code(
        self, query: str, *, page: int, per_page: int = 100
    ) -> CodeSearchPage:
        self.calls.append(("search", page))
        return self._next(self.search_pages, CodeSearchPage())

    async def list_stargazers(
        self, owner: str, repository: str, *, page: int, per_page: int = 100
    ) -> list[Account]:
        self.calls.append(("stargazers", page))
        return self._next(self.stargazer_pages, [])

    async def fetch_profile_readme(self, login: str) -> str | None:
        self.calls.append(("readme", login))
        return self._next(self.readmes.get(login, collections.deque()), None)
