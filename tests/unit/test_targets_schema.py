"""Tests for catalogue JSON Schema generation."""

from __future__ import annotations

import json
import typing as typ

from imir.targets.schema import (
    NORMALIZED_SCHEMA_ID,
    SCHEMA_ID,
    build_normalized_schema,
    build_targets_schema,
    write_targets_schema,
)

if typ.TYPE_CHECKING:
    from pathlib import Path


def _definition(schema: dict[str, typ.Any], name: str) -> dict[str, typ.Any]:
    return schema["$defs"][name]


def test_targets_schema_describes_authored_entries() -> None:
    """The authored schema uses the ``type`` key and requires an owner."""
    schema = build_targets_schema()

    assert schema["$id"] == SCHEMA_ID
    entry = _definition(schema, "RawTargetEntry")
    assert "type" in entry["properties"]
    assert "kind" not in entry["properties"]
    assert set(entry["required"]) == {"owner", "type"}


def test_targets_schema_bounds_badge_columns() -> None:
    """Badge widget limits are carried into the schema."""
    widget = _definition(build_targets_schema(), "BadgeWidgetOptions")
    columns = widget["properties"]["columns"]

    bounded = next(option for option in columns["anyOf"] if "minimum" in option)
    assert (bounded["minimum"], bounded["maximum"]) == (1, 4)


def test_normalized_schema_tags_variants_by_kind() -> None:
    """Each normalized variant is distinguished by its ``kind`` constant."""
    schema = build_normalized_schema()

    assert schema["$id"] == NORMALIZED_SCHEMA_ID
    profile = _definition(schema, "ProfileTarget")
    open_source = _definition(schema, "OpenSourceTarget")
    assert profile["properties"]["kind"] == {"enum": ["profile"]}
    assert "repository" not in profile["properties"]
    assert "repository" in open_source["required"]


def test_write_targets_schema_creates_parents(tmp_path: Path) -> None:
    """The schema file is written as JSON under missing parent directories."""
    path = tmp_path / "schemas" / "targets.json"

    written = write_targets_schema(path)

    assert written == path
    assert json.loads(path.read_text(encoding="utf-8"))["$id"] == SCHEMA_ID


def test_write_normalized_schema(tmp_path: Path) -> None:
    """The normalized flag selects the document schema."""
    path = tmp_path / "normalized.json"

    write_targets_schema(path, normalized=True)

    assert json.loads(path.read_text(encoding="utf-8"))["$id"] == NORMALIZED_SCHEMA_ID
