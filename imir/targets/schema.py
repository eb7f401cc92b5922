"""JSON Schema generation for metrics target catalogues."""

from __future__ import annotations

import json
import typing as typ
from pathlib import Path  # noqa: TC003

import msgspec

from .models import TargetConfig, TargetsDocument

SCHEMA_ID = "https://imir.example/schemas/targets.json"
NORMALIZED_SCHEMA_ID = "https://imir.example/schemas/targets-normalized.json"


def build_targets_schema() -> dict[str, typ.Any]:
    """Build the JSON Schema for authored catalogue files.

    Returns
    -------
    dict[str, Any]
        JSON Schema describing :class:`~imir.targets.models.TargetConfig`,
        with ``$id`` set to ``SCHEMA_ID``.

    """
    schema = msgspec.json.schema(TargetConfig)
    schema["$id"] = SCHEMA_ID
    return schema


def build_normalized_schema() -> dict[str, typ.Any]:
    """Build the JSON Schema for normalized target documents."""
    schema = msgspec.json.schema(TargetsDocument)
    schema["$id"] = NORMALIZED_SCHEMA_ID
    return schema


def write_targets_schema(path: Path, *, normalized: bool = False) -> Path:
    """Persist a generated JSON Schema to disk, creating parent directories.

    Parameters
    ----------
    path : Path
        Destination path for the schema JSON file.
    normalized : bool, optional
        Write the schema of the normalized output instead of the authored
        catalogue.

    Returns
    -------
    Path
        The path written to, for convenience in call chains.

    """
    schema = build_normalized_schema() if normalized else build_targets_schema()
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(schema, indent=2), encoding="utf-8")
    return path
