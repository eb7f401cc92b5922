"""Conversion of authored catalogue entries into normalized targets.

Normalization is a pure transform: it resolves every optional value of a
:class:`~imir.targets.models.RawTargetEntry` using deterministic naming rules
and the supplied :class:`NormalizationPolicy`, and rejects entries whose
fields are missing, malformed, or inconsistent with their kind. Document-wide
uniqueness is checked afterwards by :func:`imir.targets.validation.validate_targets`.
"""

from __future__ import annotations

import dataclasses
import typing as typ

from imir.common.slug import repo_slug, slugify, slugify_text

from .errors import (
    DuplicateFieldError,
    InvalidFieldError,
    InvalidKindCombinationError,
    MissingFieldError,
)
from .models import (
    MAX_BADGE_BORDER_RADIUS,
    MAX_BADGE_COLUMNS,
    MIN_BADGE_COLUMNS,
    BadgeDescriptor,
    BadgeOptions,
    BadgeStyle,
    BadgeWidgetAlignment,
    BadgeWidgetDescriptor,
    BadgeWidgetOptions,
    OpenSourceTarget,
    PrivateProjectTarget,
    ProfileTarget,
    RawTargetEntry,
    TargetKind,
    TargetsDocument,
)
from .validation import validate_targets

if typ.TYPE_CHECKING:
    import collections.abc as cabc

    from .models import NormalizedTarget


class PrivateOwnerPolicy(typ.Protocol):
    """Decides the default ``include_private`` flag for an owner."""

    def includes_private(self, owner: str, kind: TargetKind) -> bool:
        """Return ``True`` when private insights are enabled by default."""
        ...


@dataclasses.dataclass(frozen=True, slots=True)
class NeverIncludePrivate:
    """Default policy: private insights are opt-in for every owner."""

    def includes_private(self, owner: str, kind: TargetKind) -> bool:
        """Return ``False`` regardless of owner and kind."""
        del owner, kind
        return False


@dataclasses.dataclass(frozen=True, slots=True)
class OwnerAllowList:
    """Enable private insights by default for specific owners.

    Attributes
    ----------
    owners
        Account names, matched exactly, whose targets default to private
        insights.
    kinds
        Target kinds the flip applies to; profiles only by default.

    """

    owners: frozenset[str]
    kinds: frozenset[TargetKind] = frozenset({TargetKind.PROFILE})

    def includes_private(self, owner: str, kind: TargetKind) -> bool:
        """Return ``True`` when ``owner`` is listed and ``kind`` is covered."""
        return kind in self.kinds and owner in self.owners


@dataclasses.dataclass(frozen=True, slots=True)
class NormalizationPolicy:
    """Defaults applied to values an entry leaves unset."""

    branch_prefix: str = "ci/metrics-refresh-"
    output_dir: str = "metrics"
    temp_dir: str = ".metrics-tmp"
    extension: str = "svg"
    time_zone: str = "UTC"
    contributors_branch: str = "main"
    badge_style: BadgeStyle = BadgeStyle.CLASSIC
    badge_columns: int = 1
    badge_alignment: BadgeWidgetAlignment = BadgeWidgetAlignment.START
    badge_border_radius: int = 4
    private_owners: PrivateOwnerPolicy = NeverIncludePrivate()

    def target_path(self, slug: str) -> str:
        """Return the default published artifact path for ``slug``."""
        return f"{self.output_dir}/{slug}.{self.extension}"

    def temp_artifact(self, slug: str) -> str:
        """Return the default staging artifact path for ``slug``."""
        return f"{self.temp_dir}/{slug}.{self.extension}"


DEFAULT_POLICY = NormalizationPolicy()


@dataclasses.dataclass(frozen=True, slots=True)
class _EntryContext:
    index: int
    label: str


def _entry_label(entry: RawTargetEntry) -> str:
    owner = entry.owner.strip()
    if entry.repository and entry.repository.strip():
        return repo_slug(owner, entry.repository.strip())
    return owner


def _identifier(value: str, field: str, ctx: _EntryContext) -> str:
    trimmed = value.strip()
    if not trimmed:
        raise MissingFieldError(field, index=ctx.index, label=ctx.label)
    if any(char.isspace() for char in trimmed):
        raise InvalidFieldError(
            field,
            trimmed,
            "must not contain whitespace",
            index=ctx.index,
            label=ctx.label,
        )
    return trimmed


def _override(value: str | None, field: str, ctx: _EntryContext) -> str | None:
    if value is None:
        return None
    trimmed = value.strip()
    if not trimmed:
        raise MissingFieldError(field, index=ctx.index, label=ctx.label)
    return trimmed


def _resolve_repository(
    entry: RawTargetEntry, ctx: _EntryContext
) -> tuple[TargetKind, str | None]:
    repository = (
        None
        if entry.repository is None
        else _identifier(entry.repository, "repository", ctx)
    )
    kind = entry.kind
    if kind.requires_repository != (repository is not None):
        raise InvalidKindCombinationError(
            kind.value,
            repository_present=repository is not None,
            index=ctx.index,
            label=ctx.label,
        )
    return kind, repository


def _resolve_slug(
    entry: RawTargetEntry,
    owner: str,
    repository: str | None,
    ctx: _EntryContext,
) -> str:
    custom = _override(entry.slug, "slug", ctx)
    if custom is not None:
        slug = slugify_text(custom)
        source = custom
    else:
        slug = slugify(owner, repository, entry.kind)
        source = ctx.label
    if not slug:
        raise InvalidFieldError(
            "slug",
            source,
            "does not contain any letters or digits to derive a slug from",
            index=ctx.index,
            label=ctx.label,
        )
    return slug


def display_label(slug: str) -> str:
    """Return a readable label for ``slug``.

    >>> display_label("octocat-hello-world")
    'Octocat Hello World'

    """
    return " ".join(part.capitalize() for part in slug.split("-"))


def _resolve_badge(
    options: BadgeOptions | None,
    policy: NormalizationPolicy,
    ctx: _EntryContext,
) -> BadgeDescriptor:
    widget = options.widget if options is not None else None
    style = options.style if options is not None and options.style else None
    columns = policy.badge_columns
    alignment = policy.badge_alignment
    border_radius = policy.badge_border_radius
    if widget is not None:
        if widget.columns is not None:
            columns = widget.columns
        if widget.alignment is not None:
            alignment = widget.alignment
        if widget.border_radius is not None:
            border_radius = widget.border_radius

    if not MIN_BADGE_COLUMNS <= columns <= MAX_BADGE_COLUMNS:
        raise InvalidFieldError(
            "badge.widget.columns",
            columns,
            f"must be between {MIN_BADGE_COLUMNS} and {MAX_BADGE_COLUMNS}",
            index=ctx.index,
            label=ctx.label,
        )
    if not 0 <= border_radius <= MAX_BADGE_BORDER_RADIUS:
        raise InvalidFieldError(
            "badge.widget.border_radius",
            border_radius,
            f"must be between 0 and {MAX_BADGE_BORDER_RADIUS}",
            index=ctx.index,
            label=ctx.label,
        )

    return BadgeDescriptor(
        style=style or policy.badge_style,
        widget=BadgeWidgetDescriptor(
            columns=columns, alignment=alignment, border_radius=border_radius
        ),
    )


def normalize_target(
    entry: RawTargetEntry,
    *,
    policy: NormalizationPolicy | None = None,
    index: int = 0,
) -> NormalizedTarget:
    """Resolve every optional value of ``entry``.

    Parameters
    ----------
    entry
        Authored catalogue entry.
    policy
        Defaults for unset values; :data:`DEFAULT_POLICY` when omitted.
    index
        Position of the entry in its document, used in error messages.

    Returns
    -------
    NormalizedTarget
        The profile, open-source, or private-project variant matching
        ``entry.kind``.

    Raises
    ------
    MissingFieldError
        If ``owner``, an explicit empty ``repository``, or an explicit
        override is blank.
    InvalidKindCombinationError
        If ``repository`` is set for a profile or missing for a repository
        target.
    InvalidFieldError
        If an identifier contains whitespace, no slug can be derived, or a
        badge setting is out of range.
    DuplicateFieldError
        If ``target_path`` and ``temp_artifact`` resolve to the same path.

    """
    policy = policy or DEFAULT_POLICY
    ctx = _EntryContext(index=index, label=_entry_label(entry))

    owner = _identifier(entry.owner, "owner", ctx)
    kind, repository = _resolve_repository(entry, ctx)
    slug = _resolve_slug(entry, owner, repository, ctx)

    display_name = _override(entry.display_name, "display_name", ctx)
    branch_name = _override(entry.branch_name, "branch_name", ctx)
    contributors_branch = (
        policy.contributors_branch
        if entry.contributors_branch is None
        else _identifier(entry.contributors_branch, "contributors_branch", ctx)
    )
    target_path = _override(entry.target_path, "target_path", ctx)
    temp_artifact = _override(entry.temp_artifact, "temp_artifact", ctx)
    target_path = target_path or policy.target_path(slug)
    temp_artifact = temp_artifact or policy.temp_artifact(slug)
    if target_path == temp_artifact:
        raise DuplicateFieldError(
            "temp_artifact",
            temp_artifact,
            first_index=index,
            conflicting_index=index,
            first_label=ctx.label,
            conflicting_label=ctx.label,
        )

    time_zone = (entry.time_zone or "").strip() or policy.time_zone
    include_private = (
        entry.include_private
        if entry.include_private is not None
        else policy.private_owners.includes_private(owner, kind)
    )

    fields: dict[str, typ.Any] = {
        "owner": owner,
        "slug": slug,
        "display_name": display_name or display_label(slug),
        "branch_name": branch_name or f"{policy.branch_prefix}{slug}",
        "contributors_branch": contributors_branch,
        "target_path": target_path,
        "temp_artifact": temp_artifact,
        "time_zone": time_zone,
        "include_private": include_private,
        "badge": _resolve_badge(entry.badge, policy, ctx),
    }
    if kind is TargetKind.PROFILE:
        return ProfileTarget(**fields)
    if kind is TargetKind.OPEN_SOURCE:
        return OpenSourceTarget(repository=typ.cast("str", repository), **fields)
    return PrivateProjectTarget(repository=typ.cast("str", repository), **fields)


def denormalize_target(target: NormalizedTarget) -> RawTargetEntry:
    """Return an authored entry that pins every value of ``target``.

    Normalizing the result yields ``target`` again.
    """
    return RawTargetEntry(
        owner=target.owner,
        kind=target.kind,
        repository=target.repository,
        slug=target.slug,
        display_name=target.display_name,
        branch_name=target.branch_name,
        contributors_branch=target.contributors_branch,
        target_path=target.target_path,
        temp_artifact=target.temp_artifact,
        time_zone=target.time_zone,
        include_private=target.include_private,
        badge=BadgeOptions(
            style=target.badge.style,
            widget=BadgeWidgetOptions(
                columns=target.badge.widget.columns,
                alignment=target.badge.widget.alignment,
                border_radius=target.badge.widget.border_radius,
            ),
        ),
    )


def normalize_entries(
    entries: cabc.Sequence[RawTargetEntry],
    *,
    policy: NormalizationPolicy | None = None,
    allow_empty: bool = False,
) -> TargetsDocument:
    """Normalize ``entries`` in order and validate the resulting document.

    The first failing entry or collision aborts the whole pass; no partial
    document is returned. A catalogue without entries is rejected unless
    ``allow_empty`` is set, as when sync seeds a new catalogue.
    """
    if not entries:
        if allow_empty:
            return TargetsDocument()
        raise MissingFieldError("targets")
    targets = [
        normalize_target(entry, policy=policy, index=index)
        for index, entry in enumerate(entries)
    ]
    validate_targets(targets)
    return TargetsDocument(targets=tuple(targets))
