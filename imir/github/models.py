"""Typed views of the GitHub REST responses used for discovery.

Only the fields discovery reads are declared; GitHub adds fields freely, so
unknown keys are ignored when decoding.
"""

from __future__ import annotations

import msgspec


class Account(msgspec.Struct, kw_only=True, frozen=True):
    """User or organisation as it appears in REST payloads."""

    login: str


class SearchRepository(msgspec.Struct, kw_only=True, frozen=True):
    """Repository hosting a code search match."""

    name: str
    owner: Account
    full_name: str | None = None


class TextMatch(msgspec.Struct, kw_only=True, frozen=True):
    """Excerpt of matched content returned with the text-match media type."""

    fragment: str = ""


class CodeSearchItem(msgspec.Struct, kw_only=True, frozen=True):
    """Single file matched by code search."""

    repository: SearchRepository
    name: str = ""
    path: str = ""
    text_matches: tuple[TextMatch, ...] = ()

    @property
    def content(self) -> str:
        """Return every matched fragment joined by newlines."""
        return "\n".join(match.fragment for match in self.text_matches)


class CodeSearchPage(msgspec.Struct, kw_only=True, frozen=True):
    """One page of ``GET /search/code`` results."""

    total_count: int = 0
    incomplete_results: bool = False
    items: tuple[CodeSearchItem, ...] = ()
