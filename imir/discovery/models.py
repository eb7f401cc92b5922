"""Value types produced by target discovery."""

from __future__ import annotations

import dataclasses

from imir.common.slug import parse_repo_slug, repo_slug


@dataclasses.dataclass(frozen=True, slots=True)
class DiscoveredRepository:
    """Repository found by a discovery strategy.

    Two instances are equal when owner and repository match exactly, so
    instances can be collected in sets to deduplicate results.
    """

    owner: str
    repository: str

    @classmethod
    def from_slug(cls, slug: str) -> DiscoveredRepository:
        """Build an instance from ``owner/repository`` notation."""
        owner, repository = parse_repo_slug(slug)
        return cls(owner=owner, repository=repository)

    def __str__(self) -> str:
        """Return the ``owner/repository`` slug."""
        return repo_slug(self.owner, self.repository)
