"""Command-line interface for catalogue linting, discovery, and sync."""

from __future__ import annotations

import argparse
import asyncio
import dataclasses as dc
import os
from pathlib import Path

import msgspec

from imir.discovery import (
    DiscoveredRepository,
    DiscoveryConfig,
    DiscoveryService,
    DiscoverySource,
)
from imir.github import (
    GitHubAPIError,
    GitHubConfigError,
    GitHubResponseShapeError,
    GitHubRestClient,
    GitHubRestConfig,
)
from imir.github.client import DEFAULT_API_URL
from imir.logging import configure_logging, get_logger, log_error, log_warning
from imir.targets import (
    DEFAULT_POLICY,
    NormalizationPolicy,
    OwnerAllowList,
    PersistenceError,
    TargetsDocument,
    TargetsError,
    append_discovered_entries,
    load_target_config,
    normalize_entries,
    sync_targets,
    write_target_config,
    write_targets_schema,
)

logger = get_logger(__name__)

EXIT_OK = 0
EXIT_INVALID = 1
EXIT_DISCOVERY_FAILED = 2

_DISCOVERY_ERRORS = (
    GitHubAPIError,
    GitHubConfigError,
    GitHubResponseShapeError,
    ValueError,
)


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="imir", description=__doc__)
    parser.add_argument(
        "--log-level",
        default=None,
        help="Log level (defaults to IMIR_LOG_LEVEL, then INFO)",
    )
    commands = parser.add_subparsers(dest="command", required=True)

    lint = commands.add_parser("lint", help="Normalize and validate a catalogue")
    lint.add_argument("catalogue", type=Path, help="YAML catalogue to validate")
    lint.add_argument(
        "--json-out",
        type=Path,
        default=None,
        help="Optional path to write the normalized targets as JSON",
    )
    _add_policy_arguments(lint)

    schema = commands.add_parser("schema", help="Export the catalogue JSON Schema")
    schema.add_argument("out", type=Path, help="Destination for the schema JSON")
    schema.add_argument(
        "--normalized",
        action="store_true",
        help="Export the schema of normalized output instead",
    )

    discover = commands.add_parser("discover", help="List badge-bearing repositories")
    _add_discovery_arguments(discover)

    sync = commands.add_parser(
        "sync", help="Append newly discovered repositories to a catalogue"
    )
    sync.add_argument("catalogue", type=Path, help="YAML catalogue to update")
    sync.add_argument(
        "--dry-run",
        action="store_true",
        help="Report additions without rewriting the catalogue",
    )
    _add_discovery_arguments(sync)
    _add_policy_arguments(sync)
    return parser


def _add_policy_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--private-owner",
        action="append",
        default=[],
        metavar="OWNER",
        help="Owner whose profile defaults to include_private (repeatable)",
    )


def _add_discovery_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--source",
        choices=[source.value for source in DiscoverySource],
        default=None,
        help="Discovery strategy (defaults to IMIR_DISCOVERY_SOURCE, then all)",
    )
    parser.add_argument(
        "--max-pages",
        type=int,
        default=None,
        help="Maximum pages fetched per strategy",
    )
    parser.add_argument(
        "--token",
        default=None,
        help="GitHub token (defaults to IMIR_GITHUB_TOKEN or GITHUB_TOKEN)",
    )


def _policy(args: argparse.Namespace) -> NormalizationPolicy:
    owners = frozenset(owner.strip() for owner in args.private_owner if owner.strip())
    if not owners:
        return DEFAULT_POLICY
    return dc.replace(DEFAULT_POLICY, private_owners=OwnerAllowList(owners=owners))


def _github_config(token: str | None) -> GitHubRestConfig:
    if token is None:
        return GitHubRestConfig.from_env()
    api_url = os.environ.get("IMIR_GITHUB_API_URL", "").strip() or DEFAULT_API_URL
    return GitHubRestConfig(token=token, api_url=api_url)


def _open_client(config: GitHubRestConfig) -> GitHubRestClient:
    return GitHubRestClient(config)


def _discovery_config(args: argparse.Namespace) -> DiscoveryConfig:
    config = DiscoveryConfig.from_env()
    if args.source is not None:
        config = dc.replace(config, source=DiscoverySource(args.source))
    if args.max_pages is not None:
        config = dc.replace(config, max_pages=args.max_pages)
    return config


async def _discover(args: argparse.Namespace) -> list[DiscoveredRepository]:
    config = _discovery_config(args)
    async with _open_client(_github_config(args.token)) as client:
        return await DiscoveryService(client, config).discover()


def _report_targets_error(path: Path, exc: TargetsError) -> int:
    print(f"Target catalogue {path} is invalid:")
    print(f"  - {exc}")
    return EXIT_INVALID


def _report_discovery_error(exc: Exception) -> int:
    log_error(logger, "Discovery failed: %s", exc)
    print(f"Discovery failed: {exc}")
    return EXIT_DISCOVERY_FAILED


def _write_json(out: Path, document: TargetsDocument) -> None:
    try:
        out.parent.mkdir(parents=True, exist_ok=True)
        out.write_bytes(msgspec.json.encode(document))
    except OSError as exc:
        raise PersistenceError(out, "write", exc) from exc


def _run_lint(args: argparse.Namespace) -> int:
    path: Path = args.catalogue
    try:
        config = load_target_config(path)
        document = normalize_entries(config.targets, policy=_policy(args))
    except TargetsError as exc:
        return _report_targets_error(path, exc)

    if args.json_out:
        try:
            _write_json(args.json_out, document)
        except PersistenceError as exc:
            return _report_targets_error(path, exc)

    print(f"targets {path} are valid ({len(document.targets)} targets)")
    return EXIT_OK


def _run_schema(args: argparse.Namespace) -> int:
    written = write_targets_schema(args.out, normalized=args.normalized)
    print(f"schema written to {written}")
    return EXIT_OK


def _run_discover(args: argparse.Namespace) -> int:
    try:
        repositories = asyncio.run(_discover(args))
    except _DISCOVERY_ERRORS as exc:
        return _report_discovery_error(exc)
    for repository in repositories:
        print(repository)
    return EXIT_OK


def _run_sync(args: argparse.Namespace) -> int:
    path: Path = args.catalogue
    policy = _policy(args)
    try:
        config = load_target_config(path)
        document: TargetsDocument = normalize_entries(
            config.targets, policy=policy, allow_empty=True
        )
    except TargetsError as exc:
        return _report_targets_error(path, exc)

    try:
        repositories = asyncio.run(_discover(args))
    except _DISCOVERY_ERRORS as exc:
        return _report_discovery_error(exc)

    try:
        result = sync_targets(document, repositories, policy=policy)
        if result.added_count and not args.dry_run:
            write_target_config(path, append_discovered_entries(config, result))
    except TargetsError as exc:
        return _report_targets_error(path, exc)

    verb = "would add" if args.dry_run else "added"
    print(f"{verb} {result.added_count} targets to {path}")
    for target in result.added:
        print(f"  + {target.label}")
    return EXIT_OK


_COMMANDS = {
    "lint": _run_lint,
    "schema": _run_schema,
    "discover": _run_discover,
    "sync": _run_sync,
}


def main(argv: list[str] | None = None) -> int:
    """Run the ``imir`` command line.

    Parameters
    ----------
    argv : list[str] | None, optional
        Command-line arguments. ``None`` defaults to ``sys.argv``.

    Returns
    -------
    int
        Exit code: 0 on success, 1 when the catalogue is invalid or cannot be
        read or written, 2 when discovery fails.

    """
    args = _build_parser().parse_args(argv)

    raw_level = args.log_level or os.environ.get("IMIR_LOG_LEVEL")
    normalized_level, invalid_level = configure_logging(raw_level)
    if invalid_level and raw_level is not None:
        log_warning(
            logger,
            "Invalid log level %r, falling back to %s",
            raw_level,
            normalized_level,
        )

    return _COMMANDS[args.command](args)


if __name__ == "__main__":
    raise SystemExit(main())
