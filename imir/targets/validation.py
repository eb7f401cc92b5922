"""Document-wide uniqueness rules for normalized targets."""

from __future__ import annotations

import dataclasses
import typing as typ

from .errors import DuplicateFieldError

if typ.TYPE_CHECKING:
    import collections.abc as cabc

    from .models import NormalizedTarget


@dataclasses.dataclass(slots=True)
class _SeenValues:
    """First-occurrence index of every value seen so far, per namespace."""

    slugs: dict[str, int] = dataclasses.field(default_factory=dict)
    branches: dict[str, int] = dataclasses.field(default_factory=dict)
    target_paths: dict[str, int] = dataclasses.field(default_factory=dict)
    paths: dict[str, int] = dataclasses.field(default_factory=dict)


def _claim(
    seen: dict[str, int],
    field: str,
    value: str,
    index: int,
    targets: cabc.Sequence[NormalizedTarget],
) -> None:
    first_index = seen.setdefault(value, index)
    if first_index != index:
        raise DuplicateFieldError(
            field,
            value,
            first_index=first_index,
            conflicting_index=index,
            first_label=targets[first_index].label,
            conflicting_label=targets[index].label,
        )


def validate_targets(targets: cabc.Sequence[NormalizedTarget]) -> None:
    """Check slug, branch, and path uniqueness across ``targets``.

    Values are claimed in document order, so the first occurrence always
    wins and the error blames the later entry. ``target_path`` and
    ``temp_artifact`` share one path namespace: no temporary artifact may
    coincide with any published artifact, including its own entry's.

    Raises
    ------
    DuplicateFieldError
        On the first collision found.

    """
    seen = _SeenValues()
    for index, target in enumerate(targets):
        _claim(seen.slugs, "slug", target.slug, index, targets)
        _claim(seen.branches, "branch_name", target.branch_name, index, targets)
        _claim(seen.target_paths, "target_path", target.target_path, index, targets)
        _claim(seen.paths, "target_path", target.target_path, index, targets)
        if target.temp_artifact in seen.paths:
            first_index = seen.paths[target.temp_artifact]
            raise DuplicateFieldError(
                "temp_artifact",
                target.temp_artifact,
                first_index=first_index,
                conflicting_index=index,
                first_label=targets[first_index].label,
                conflicting_label=target.label,
            )
        seen.paths[target.temp_artifact] = index
