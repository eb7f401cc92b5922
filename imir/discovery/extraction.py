"""Locate the repository a metrics badge refers to."""

from __future__ import annotations

import re
import typing as typ

from .models import DiscoveredRepository

_REPOSITORY_LINK = re.compile(
    r"(?<![\w.-])(?:https?://)?(?:www\.)?github\.com/"
    r"(?P<owner>[A-Za-z0-9](?:[A-Za-z0-9-]*[A-Za-z0-9])?)/"
    r"(?P<repository>[A-Za-z0-9._-]+)"
)

# ``[![alt](image)](target)``
_MARKDOWN_IMAGE_LINK = re.compile(
    r"\[\s*!\[[^\]]*\]\((?P<body>[^)]*)\)\s*\]\((?P<target>[^)\s]+)[^)]*\)"
)

# ``<a href="target"> ... </a>``
_HTML_ANCHOR = re.compile(
    r"<a\b[^>]*?\bhref\s*=\s*[\"'](?P<target>[^\"']+)[\"'][^>]*>(?P<body>.*?)</a\s*>",
    re.IGNORECASE | re.DOTALL,
)

# First path segments on github.com that never name an account.
_RESERVED_OWNERS = frozenset(
    {"apps", "features", "marketplace", "orgs", "settings", "sponsors", "topics"}
)


def _clean_repository(name: str) -> str:
    return name.removesuffix(".git").rstrip(".")


def _key(owner: str, repository: str) -> tuple[str, str]:
    return (owner.lower(), repository.lower())


def badge_repository(badge_url_pattern: str) -> tuple[str, str] | None:
    """Return the lower-cased ``(owner, name)`` the badge pattern points at.

    >>> badge_repository("RAprogramm/infra-metrics-insight-renderer")
    ('raprogramm', 'infra-metrics-insight-renderer')

    """
    match = _REPOSITORY_LINK.search(badge_url_pattern)
    if match is not None:
        return _key(match["owner"], _clean_repository(match["repository"]))
    parts = [part for part in badge_url_pattern.strip().split("/") if part]
    if len(parts) < 2:  # noqa: PLR2004
        return None
    return _key(parts[-2], _clean_repository(parts[-1]))


def _as_repository(
    match: re.Match[str], excluded: tuple[str, str] | None
) -> DiscoveredRepository | None:
    owner = match["owner"]
    repository = _clean_repository(match["repository"])
    if not repository or owner.lower() in _RESERVED_OWNERS:
        return None
    if _key(owner, repository) == excluded:
        return None
    return DiscoveredRepository(owner=owner, repository=repository)


def _wrapping_link(
    content: str, badge_url_pattern: str, excluded: tuple[str, str] | None
) -> DiscoveredRepository | None:
    anchors: list[re.Match[str]] = [
        *_MARKDOWN_IMAGE_LINK.finditer(content),
        *_HTML_ANCHOR.finditer(content),
    ]
    anchors.sort(key=lambda anchor: anchor.start())
    for anchor in anchors:
        if badge_url_pattern not in anchor["body"]:
            continue
        match = _REPOSITORY_LINK.match(anchor["target"].strip())
        if match is None:
            continue
        found = _as_repository(match, excluded)
        if found is not None:
            return found
    return None


def _following_links(
    content: str, start: int, excluded: tuple[str, str] | None
) -> typ.Iterator[DiscoveredRepository]:
    for match in _REPOSITORY_LINK.finditer(content, start):
        found = _as_repository(match, excluded)
        if found is not None:
            yield found


def extract_repository_reference(
    content: str,
    *,
    badge_url_pattern: str,
    metrics_path_pattern: str,
    fallback: DiscoveredRepository,
) -> DiscoveredRepository | None:
    """Return the repository advertised next to a metrics badge.

    The link wrapping the badge image (a Markdown image link or an HTML
    anchor) wins. Otherwise the nearest repository link after the badge is
    used. Links that only precede the badge are never reported.

    Parameters
    ----------
    content
        README text or search text fragments.
    badge_url_pattern, metrics_path_pattern
        Markers that must both appear for ``content`` to count as carrying
        the badge.
    fallback
        Repository reported when no repository link accompanies the badge,
        typically the one hosting ``content``.

    Returns
    -------
    DiscoveredRepository | None
        The repository linked from or after the badge, ``fallback`` when
        there is none, or ``None`` when a marker is missing.

    """
    badge_at = content.find(badge_url_pattern)
    if badge_at < 0 or metrics_path_pattern not in content:
        return None

    excluded = badge_repository(badge_url_pattern)
    wrapped = _wrapping_link(content, badge_url_pattern, excluded)
    if wrapped is not None:
        return wrapped
    return next(_following_links(content, badge_at, excluded), fallback)
