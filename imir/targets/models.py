"""Typed metrics target catalogue structures.

Two layers of models live here:

* The **authored** layer (:class:`TargetConfig`, :class:`RawTargetEntry`,
  :class:`BadgeOptions`) mirrors the YAML catalogue and keeps every override
  optional.
* The **normalized** layer (:class:`ProfileTarget`, :class:`OpenSourceTarget`,
  :class:`PrivateProjectTarget`, :class:`TargetsDocument`) has every value
  resolved. The target variants form a closed tagged union on ``kind``; only
  the repository variants declare a ``repository`` field.
"""

from __future__ import annotations

import enum
import typing as typ

import msgspec

from imir.common.slug import repo_slug


class TargetKind(enum.StrEnum):
    """Supported categories of metrics targets."""

    PROFILE = "profile"
    OPEN_SOURCE = "open_source"
    PRIVATE_PROJECT = "private_project"

    @property
    def requires_repository(self) -> bool:
        """Return ``True`` for kinds that render a single repository."""
        return self is not TargetKind.PROFILE


class BadgeStyle(enum.StrEnum):
    """Visual presets supported by the badge renderer."""

    CLASSIC = "classic"
    FLAT = "flat"
    FLAT_SQUARE = "flat_square"
    PLASTIC = "plastic"
    FOR_THE_BADGE = "for_the_badge"


class BadgeWidgetAlignment(enum.StrEnum):
    """Horizontal alignment of the badge widget contents."""

    START = "start"
    CENTER = "center"
    END = "end"


MIN_BADGE_COLUMNS = 1
MAX_BADGE_COLUMNS = 4
MAX_BADGE_BORDER_RADIUS = 32

BadgeColumns = typ.Annotated[
    int, msgspec.Meta(ge=MIN_BADGE_COLUMNS, le=MAX_BADGE_COLUMNS)
]
BadgeBorderRadius = typ.Annotated[int, msgspec.Meta(ge=0, le=MAX_BADGE_BORDER_RADIUS)]


class BadgeWidgetOptions(
    msgspec.Struct, kw_only=True, forbid_unknown_fields=True, omit_defaults=True
):
    """Layout overrides for the badge widget.

    Attributes
    ----------
    columns : int, optional
        Number of columns, between 1 and 4.
    alignment : BadgeWidgetAlignment, optional
        Alignment applied to the widget contents.
    border_radius : int, optional
        Corner radius in pixels, between 0 and 32.

    """

    columns: BadgeColumns | None = None
    alignment: BadgeWidgetAlignment | None = None
    border_radius: BadgeBorderRadius | None = None


class BadgeOptions(
    msgspec.Struct, kw_only=True, forbid_unknown_fields=True, omit_defaults=True
):
    """Badge customisation authored alongside a target."""

    style: BadgeStyle | None = None
    widget: BadgeWidgetOptions | None = None


class RawTargetEntry(msgspec.Struct, kw_only=True, omit_defaults=True):
    """Catalogue entry as authored, before normalization.

    Attributes
    ----------
    owner : str
        GitHub account that owns the profile or repository.
    kind : TargetKind
        Target category, persisted under the ``type`` key.
    repository : str, optional
        Repository name; required for repository kinds, forbidden for
        profiles.
    slug, display_name, branch_name, contributors_branch, target_path,
    temp_artifact, time_zone : str, optional
        Overrides for values the normalizer would otherwise derive.
    include_private : bool, optional
        Whether the renderer should include private repository insights.
    badge : BadgeOptions, optional
        Badge widget customisation.

    """

    owner: str
    kind: TargetKind = msgspec.field(name="type")
    repository: str | None = None
    slug: str | None = None
    display_name: str | None = None
    branch_name: str | None = None
    contributors_branch: str | None = None
    target_path: str | None = None
    temp_artifact: str | None = None
    time_zone: str | None = None
    include_private: bool | None = None
    badge: BadgeOptions | None = None


class TargetConfig(msgspec.Struct, kw_only=True):
    """Root of the authored catalogue document."""

    targets: list[RawTargetEntry] = msgspec.field(default_factory=list)


class BadgeWidgetDescriptor(msgspec.Struct, kw_only=True, frozen=True):
    """Resolved badge widget layout."""

    columns: int
    alignment: BadgeWidgetAlignment
    border_radius: int


class BadgeDescriptor(msgspec.Struct, kw_only=True, frozen=True):
    """Resolved badge style and layout."""

    style: BadgeStyle
    widget: BadgeWidgetDescriptor


class _NormalizedTargetBase(
    msgspec.Struct, kw_only=True, frozen=True, tag_field="kind"
):
    """Fields shared by every normalized target variant."""

    owner: str
    slug: str
    display_name: str
    branch_name: str
    contributors_branch: str
    target_path: str
    temp_artifact: str
    time_zone: str
    include_private: bool
    badge: BadgeDescriptor


class ProfileTarget(_NormalizedTargetBase, tag=TargetKind.PROFILE.value):
    """Dashboard for a GitHub account profile."""

    @property
    def kind(self) -> TargetKind:
        """Return the target category."""
        return TargetKind.PROFILE

    @property
    def repository(self) -> None:
        """Profiles never reference a repository."""
        return None

    @property
    def label(self) -> str:
        """Return a human-readable identifier for diagnostics."""
        return self.owner


class _RepositoryTargetBase(_NormalizedTargetBase, frozen=True):
    repository: str

    @property
    def label(self) -> str:
        """Return the ``owner/repository`` identifier for diagnostics."""
        return repo_slug(self.owner, self.repository)


class OpenSourceTarget(_RepositoryTargetBase, tag=TargetKind.OPEN_SOURCE.value):
    """Dashboard for a public repository."""

    @property
    def kind(self) -> TargetKind:
        """Return the target category."""
        return TargetKind.OPEN_SOURCE


class PrivateProjectTarget(
    _RepositoryTargetBase, tag=TargetKind.PRIVATE_PROJECT.value
):
    """Dashboard for a private repository."""

    @property
    def kind(self) -> TargetKind:
        """Return the target category."""
        return TargetKind.PRIVATE_PROJECT


NormalizedTarget = ProfileTarget | OpenSourceTarget | PrivateProjectTarget


class TargetsDocument(msgspec.Struct, kw_only=True, frozen=True):
    """Validated, ordered collection of normalized targets.

    Instances are immutable; :meth:`extended` returns a new document so a
    candidate can be validated before it replaces the original.
    """

    targets: tuple[NormalizedTarget, ...] = ()

    def extended(self, additions: typ.Iterable[NormalizedTarget]) -> TargetsDocument:
        """Return a copy with ``additions`` appended in order."""
        return TargetsDocument(targets=(*self.targets, *additions))

    def repository_keys(self) -> set[tuple[str, str]]:
        """Return ``(owner, repository)`` pairs of repository targets."""
        return {
            (target.owner, target.repository)
            for target in self.targets
            if not isinstance(target, ProfileTarget)
        }
