"""YAML loading and saving for metrics target catalogues."""

from __future__ import annotations

import contextlib
import os
import tempfile
import typing as typ
from pathlib import Path

import msgspec
from ruamel.yaml import YAML
from ruamel.yaml.error import YAMLError

from imir.logging import get_logger, log_info

from .errors import CatalogueFormatError, PersistenceError
from .models import TargetConfig, TargetsDocument
from .normalizer import normalize_entries

if typ.TYPE_CHECKING:
    from .normalizer import NormalizationPolicy

YAML_VERSION = (1, 2)

# Alternate spellings accepted for entry keys in authored catalogues.
ENTRY_KEY_ALIASES: dict[str, str] = {
    "user": "owner",
    "repo": "repository",
    "kind": "type",
    "branch": "branch_name",
    "branch-name": "branch_name",
    "branchName": "branch_name",
    "contributors-branch": "contributors_branch",
    "contributorsBranch": "contributors_branch",
}

logger = get_logger(__name__)


def _yaml() -> YAML:
    yaml = YAML(typ="safe")
    yaml.version = YAML_VERSION
    yaml.allow_duplicate_keys = False
    yaml.default_flow_style = False
    return yaml


def _canonical_entry(entry: object) -> object:
    if not isinstance(entry, dict):
        return entry
    canonical: dict[object, object] = {}
    for key, value in entry.items():
        name = ENTRY_KEY_ALIASES.get(key, key) if isinstance(key, str) else key
        if name in canonical:
            raise CatalogueFormatError.schema_mismatch(
                f"entry sets {name!r} more than once (via key {key!r})"
            )
        canonical[name] = value
    return canonical


def _canonical_document(loaded: object) -> object:
    if not isinstance(loaded, dict):
        return loaded
    entries = loaded.get("targets")
    if not isinstance(entries, list):
        return loaded
    return {**loaded, "targets": [_canonical_entry(entry) for entry in entries]}


def parse_target_config(text: str) -> TargetConfig:
    """Decode catalogue YAML ``text`` into its authored form.

    Raises
    ------
    CatalogueFormatError
        If the text is not valid YAML, is empty, or does not match the
        catalogue schema.

    """
    try:
        loaded = _yaml().load(text)
    except YAMLError as exc:
        raise CatalogueFormatError.invalid_yaml(exc) from exc

    if loaded is None:
        raise CatalogueFormatError.empty()

    try:
        return msgspec.convert(_canonical_document(loaded), type=TargetConfig)
    except msgspec.ValidationError as exc:
        raise CatalogueFormatError.schema_mismatch(exc) from exc


def load_target_config(path: Path | str) -> TargetConfig:
    """Read and decode the catalogue at ``path`` without normalizing it."""
    path_obj = Path(path)
    try:
        text = path_obj.read_text(encoding="utf-8")
    except OSError as exc:
        raise PersistenceError(path_obj, "read", exc) from exc
    return parse_target_config(text)


def load_targets(
    path: Path | str, *, policy: NormalizationPolicy | None = None
) -> TargetsDocument:
    """Load, normalize, and validate the catalogue at ``path``."""
    config = load_target_config(path)
    document = normalize_entries(config.targets, policy=policy)
    log_info(logger, "Loaded %d targets from %s", len(document.targets), path)
    return document


def dump_target_config(config: TargetConfig, stream: typ.TextIO) -> None:
    """Serialise ``config`` as YAML 1.2 onto ``stream``."""
    _yaml().dump(msgspec.to_builtins(config), stream)


def write_target_config(path: Path | str, config: TargetConfig) -> Path:
    """Persist ``config`` to ``path`` atomically.

    The document is written to a temporary file in the destination directory
    and moved over ``path`` with :meth:`pathlib.Path.replace`, so readers
    observe either the previous or the new catalogue.

    Raises
    ------
    PersistenceError
        If the temporary file cannot be written or moved into place.

    """
    path_obj = Path(path)
    directory = path_obj.parent
    try:
        directory.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(
            dir=directory, prefix=f".{path_obj.name}.", suffix=".tmp"
        )
    except OSError as exc:
        raise PersistenceError(path_obj, "write", exc) from exc

    try:
        with os.fdopen(fd, "w", encoding="utf-8") as handle:
            dump_target_config(config, handle)
        Path(tmp_name).replace(path_obj)
    except OSError as exc:
        with contextlib.suppress(FileNotFoundError):
            Path(tmp_name).unlink()
        raise PersistenceError(path_obj, "write", exc) from exc

    log_info(logger, "Wrote %d targets to %s", len(config.targets), path_obj)
    return path_obj
