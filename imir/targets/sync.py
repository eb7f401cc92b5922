"""Merge discovered repositories into a validated target document."""

from __future__ import annotations

import dataclasses
import typing as typ

import msgspec

from imir.logging import get_logger, log_debug, log_info

from .models import RawTargetEntry, TargetConfig, TargetKind
from .normalizer import normalize_target
from .validation import validate_targets

if typ.TYPE_CHECKING:
    import collections.abc as cabc

    from imir.discovery.models import DiscoveredRepository

    from .models import NormalizedTarget, TargetsDocument
    from .normalizer import NormalizationPolicy

logger = get_logger(__name__)


@dataclasses.dataclass(frozen=True, slots=True)
class SyncResult:
    """Outcome of :func:`sync_targets`.

    Attributes
    ----------
    document
        Validated document holding the existing targets followed by the
        additions.
    added
        Targets appended by this sync, in discovery order.

    """

    document: TargetsDocument
    added: tuple[NormalizedTarget, ...] = ()

    @property
    def added_count(self) -> int:
        """Return the number of targets appended."""
        return len(self.added)


def _new_pairs(
    existing: TargetsDocument,
    discovered: cabc.Iterable[DiscoveredRepository],
) -> list[tuple[str, str]]:
    known = existing.repository_keys()
    pairs: list[tuple[str, str]] = []
    for repository in discovered:
        key = (repository.owner, repository.repository)
        if key in known:
            continue
        known.add(key)
        pairs.append(key)
    return pairs


def sync_targets(
    existing: TargetsDocument,
    discovered: cabc.Iterable[DiscoveredRepository],
    *,
    policy: NormalizationPolicy | None = None,
) -> SyncResult:
    """Append discovered repositories that ``existing`` does not track yet.

    Each new ``(owner, repository)`` pair becomes a minimal open-source entry
    normalized at its final position. Profile targets never match a
    discovered repository. ``existing`` is never modified: the candidate
    document is validated in full before it is returned.

    Raises
    ------
    TargetValidationError
        If a new entry is malformed or collides with an existing target.

    """
    offset = len(existing.targets)
    additions = tuple(
        normalize_target(
            RawTargetEntry(
                owner=owner, repository=repository, kind=TargetKind.OPEN_SOURCE
            ),
            policy=policy,
            index=offset + position,
        )
        for position, (owner, repository) in enumerate(
            _new_pairs(existing, discovered)
        )
    )
    if not additions:
        log_debug(logger, "No new repositories to add to %d targets", offset)
        return SyncResult(document=existing)

    candidate = existing.extended(additions)
    validate_targets(candidate.targets)
    log_info(
        logger,
        "Added %d targets: %s",
        len(additions),
        ", ".join(target.label for target in additions),
    )
    return SyncResult(document=candidate, added=additions)


def append_discovered_entries(config: TargetConfig, result: SyncResult) -> TargetConfig:
    """Return ``config`` with minimal raw entries for ``result.added``.

    Existing authored entries are kept verbatim, so overrides written by
    hand survive a rewrite of the catalogue.
    """
    additions = [
        RawTargetEntry(
            owner=target.owner, repository=target.repository, kind=target.kind
        )
        for target in result.added
    ]
    return msgspec.structs.replace(config, targets=[*config.targets, *additions])
