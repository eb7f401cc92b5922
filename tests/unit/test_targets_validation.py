"""Unit tests for document-wide target uniqueness checks."""
# ruff: noqa: D103

from __future__ import annotations

import pytest

from imir.targets import (
    DuplicateFieldError,
    NormalizedTarget,
    RawTargetEntry,
    TargetKind,
    normalize_target,
    validate_targets,
)


def _target(repository: str | None = None, **overrides: str) -> NormalizedTarget:
    kind = TargetKind.PROFILE if repository is None else TargetKind.OPEN_SOURCE
    return normalize_target(
        RawTargetEntry(owner="octocat", repository=repository, kind=kind, **overrides)
    )


def test_distinct_targets_pass() -> None:
    validate_targets([_target(), _target("a"), _target("b")])


def test_empty_sequence_passes() -> None:
    validate_targets([])


def test_duplicate_slug_blames_later_entry() -> None:
    targets = [_target("hello-world"), _target("other"), _target("Hello_World")]

    with pytest.raises(DuplicateFieldError) as excinfo:
        validate_targets(targets)

    error = excinfo.value
    assert error.field == "slug"
    assert error.value == "octocat-hello-world"
    assert error.first_index == 0
    assert error.conflicting_index == 2
    assert error.index == 2
    assert error.label == "octocat/Hello_World"
    assert "first used by targets[0] (octocat/hello-world)" in str(error)


def test_duplicate_branch_is_rejected() -> None:
    targets = [
        _target("a", branch_name="metrics"),
        _target("b", branch_name="metrics"),
    ]

    with pytest.raises(DuplicateFieldError) as excinfo:
        validate_targets(targets)

    assert excinfo.value.field == "branch_name"
    assert excinfo.value.first_index == 0


def test_duplicate_target_path_is_rejected() -> None:
    targets = [
        _target("a", target_path="out/shared.svg"),
        _target("b", target_path="out/shared.svg"),
    ]

    with pytest.raises(DuplicateFieldError) as excinfo:
        validate_targets(targets)

    assert excinfo.value.field == "target_path"
    assert excinfo.value.conflicting_index == 1


def test_temp_artifact_may_not_shadow_earlier_target_path() -> None:
    targets = [_target("a"), _target("b", temp_artifact="metrics/octocat-a.svg")]

    with pytest.raises(DuplicateFieldError) as excinfo:
        validate_targets(targets)

    assert excinfo.value.field == "temp_artifact"
    assert excinfo.value.first_index == 0
    assert excinfo.value.conflicting_index == 1


def test_target_path_may_not_shadow_earlier_temp_artifact() -> None:
    targets = [_target("a"), _target("b", target_path=".metrics-tmp/octocat-a.svg")]

    with pytest.raises(DuplicateFieldError) as excinfo:
        validate_targets(targets)

    assert excinfo.value.field == "target_path"
    assert excinfo.value.first_index == 0


def test_duplicate_temp_artifacts_are_rejected() -> None:
    targets = [
        _target("a", temp_artifact="tmp/shared.svg"),
        _target("b", temp_artifact="tmp/shared.svg"),
    ]

    with pytest.raises(DuplicateFieldError) as excinfo:
        validate_targets(targets)

    assert excinfo.value.field == "temp_artifact"


def test_first_collision_in_document_order_wins() -> None:
    targets = [
        _target("a", branch_name="shared"),
        _target("b", branch_name="shared", slug="octocat-a"),
    ]

    with pytest.raises(DuplicateFieldError) as excinfo:
        validate_targets(targets)

    assert excinfo.value.field == "slug"
