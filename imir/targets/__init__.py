"""Metrics target catalogue: models, normalization, validation, and sync.

The catalogue is authored as YAML and normalized into an immutable
:class:`TargetsDocument` whose entries have every value resolved.

Quick examples
--------------

Load and validate a catalogue file::

    >>> from imir.targets import load_targets
    >>> document = load_targets("examples/targets.yaml")

Normalize a single authored entry::

    >>> from imir.targets import RawTargetEntry, TargetKind, normalize_target
    >>> target = normalize_target(
    ...     RawTargetEntry(owner="octocat", kind=TargetKind.PROFILE)
    ... )
    >>> target.target_path
    'metrics/octocat.svg'

Merge discovered repositories::

    >>> from imir.discovery import DiscoveredRepository
    >>> from imir.targets import sync_targets
    >>> result = sync_targets(document, [DiscoveredRepository("octocat", "demo")])
    >>> result.added_count
    1
"""

from __future__ import annotations

from .errors import (
    CatalogueFormatError,
    DuplicateFieldError,
    InvalidFieldError,
    InvalidKindCombinationError,
    MissingFieldError,
    PersistenceError,
    TargetsError,
    TargetValidationError,
)
from .loader import (
    load_target_config,
    load_targets,
    parse_target_config,
    write_target_config,
)
from .models import (
    BadgeDescriptor,
    BadgeOptions,
    BadgeStyle,
    BadgeWidgetAlignment,
    BadgeWidgetDescriptor,
    BadgeWidgetOptions,
    NormalizedTarget,
    OpenSourceTarget,
    PrivateProjectTarget,
    ProfileTarget,
    RawTargetEntry,
    TargetConfig,
    TargetKind,
    TargetsDocument,
)
from .normalizer import (
    DEFAULT_POLICY,
    NeverIncludePrivate,
    NormalizationPolicy,
    OwnerAllowList,
    PrivateOwnerPolicy,
    denormalize_target,
    normalize_entries,
    normalize_target,
)
from .schema import build_normalized_schema, build_targets_schema, write_targets_schema
from .sync import SyncResult, append_discovered_entries, sync_targets
from .validation import validate_targets

__all__ = [
    "DEFAULT_POLICY",
    "BadgeDescriptor",
    "BadgeOptions",
    "BadgeStyle",
    "BadgeWidgetAlignment",
    "BadgeWidgetDescriptor",
    "BadgeWidgetOptions",
    "CatalogueFormatError",
    "DuplicateFieldError",
    "InvalidFieldError",
    "InvalidKindCombinationError",
    "MissingFieldError",
    "NeverIncludePrivate",
    "NormalizationPolicy",
    "NormalizedTarget",
    "OpenSourceTarget",
    "OwnerAllowList",
    "PersistenceError",
    "PrivateOwnerPolicy",
    "PrivateProjectTarget",
    "ProfileTarget",
    "RawTargetEntry",
    "SyncResult",
    "TargetConfig",
    "TargetKind",
    "TargetValidationError",
    "TargetsDocument",
    "TargetsError",
    "append_discovered_entries",
    "build_normalized_schema",
    "build_targets_schema",
    "denormalize_target",
    "load_target_config",
    "load_targets",
    "normalize_entries",
    "normalize_target",
    "parse_target_config",
    "sync_targets",
    "validate_targets",
    "write_target_config",
    "write_targets_schema",
]
