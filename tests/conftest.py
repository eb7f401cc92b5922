"""Shared fixtures for unit and feature tests."""

from __future__ import annotations

from pathlib import Path

import pytest

from tests.helpers import FakeLogger, RecordingSleep

_IMIR_ENV_VARS = (
    "IMIR_LOG_LEVEL",
    "IMIR_GITHUB_TOKEN",
    "GITHUB_TOKEN",
    "IMIR_GITHUB_API_URL",
    "IMIR_DISCOVERY_SOURCE",
    "IMIR_DISCOVERY_MAX_PAGES",
    "IMIR_DISCOVERY_BADGE_PATTERN",
    "IMIR_DISCOVERY_METRICS_PATTERN",
    "IMIR_DISCOVERY_STARGAZER_REPOSITORY",
    "IMIR_RETRY_MAX_ATTEMPTS",
    "IMIR_RETRY_INITIAL_DELAY_MS",
    "IMIR_RETRY_BACKOFF_FACTOR",
)


def _find_repo_root(start: Path) -> Path:
    for parent in (start, *start.parents):
        if (parent / "pyproject.toml").exists():
            return parent
    raise RuntimeError


@pytest.fixture(autouse=True)
def _clean_imir_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Isolate tests from imir settings in the developer's environment."""
    for name in _IMIR_ENV_VARS:
        monkeypatch.delenv(name, raising=False)


@pytest.fixture(scope="session")
def repo_root() -> Path:
    """Return the repository root directory."""
    return _find_repo_root(Path(__file__).resolve())


@pytest.fixture(scope="session")
def targets_fixture_dir(repo_root: Path) -> Path:
    """Return the directory holding YAML catalogue fixtures."""
    return repo_root / "tests" / "fixtures" / "targets"


@pytest.fixture(scope="session")
def example_catalogue_path(repo_root: Path) -> Path:
    """Return the path to the example catalogue file."""
    return repo_root / "examples" / "targets.yaml"


@pytest.fixture
def fake_logger() -> FakeLogger:
    """Return a logger double that records every call."""
    return FakeLogger()


@pytest.fixture
def recording_sleep() -> RecordingSleep:
    """Return a sleep double that records requested delays."""
    return RecordingSleep()
