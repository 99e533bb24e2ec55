"""sync-rdme command line entrypoint."""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path
from typing import Callable, Sequence

from syncrdme import __version__
from syncrdme.adapters.cargo import CargoRustdocProvider, CargoWorkspaceProvider, StaticDocTreeProvider
from syncrdme.adapters.git_vcs import GitDiscovery
from syncrdme.app.sync import SyncReport, SyncService, UpdatePolicy
from syncrdme.domain.errors import SyncRdmeError
from syncrdme.domain.readme.diagnostics import render_diagnostic
from syncrdme.domain.workspace import FeatureSelection
from syncrdme.ports.rustdoc import DocTreeProvider
from syncrdme.settings import SETTINGS
from syncrdme.utils.telemetry import clear as telemetry_clear
from syncrdme.utils.telemetry import iter_events as telemetry_iter
from syncrdme.utils.telemetry import summarize as telemetry_summarize
from syncrdme.utils.telemetry import tail as telemetry_tail

HELP_OVERVIEW = """Keep README files in sync with crate metadata and rustdoc output.

Mark regions in a README with HTML comments such as
  <!-- sync-rdme title -->
  <!-- sync-rdme badge:ci [[ --> ... <!-- sync-rdme ]] -->
  <!-- sync-rdme doc-summary -->
and run `sync-rdme sync` to regenerate them.
"""

# verbosity thresholds for progress lines
LEVELS = {"error": -1, "warn": 0, "info": 0, "debug": 1}


def _split_features(values: Sequence[str]) -> tuple[str, ...]:
    features: list[str] = []
    for value in values:
        features.extend(part for part in value.replace(",", " ").split() if part)
    return tuple(features)


def _progress_printer(verbosity: int, *, enabled: bool) -> Callable[[str, str], None]:
    def emit(level: str, message: str) -> None:
        if not enabled or LEVELS.get(level, 0) > verbosity:
            return
        if level == "warn":
            print(f"warning: {message}", file=sys.stderr)
        elif level == "debug":
            print(f"  {message}", file=sys.stderr)
        else:
            print(message)

    return emit


def _doc_tree_provider(args: argparse.Namespace, emit: Callable[[str, str], None]) -> DocTreeProvider:
    if args.rustdoc_json:
        return StaticDocTreeProvider(Path(args.rustdoc_json))
    features = FeatureSelection(
        features=_split_features(args.features),
        all_features=args.all_features,
        no_default_features=args.no_default_features,
    )
    return CargoRustdocProvider(
        toolchain=args.toolchain,
        features=features,
        on_command=lambda command: emit("debug", f"executing {command}"),
    )


def _print_errors(report: SyncReport) -> None:
    for outcome in report.outcomes:
        if outcome.error is None:
            continue
        for line in render_diagnostic(outcome.error):
            print(line, file=sys.stderr)


def _sync_cmd(args: argparse.Namespace) -> int:
    verbosity = args.verbose - args.quiet
    emit = _progress_printer(verbosity, enabled=not args.json)
    service = SyncService(
        SETTINGS,
        workspaces=CargoWorkspaceProvider(),
        doc_trees=_doc_tree_provider(args, emit),
        vcs=GitDiscovery(),
        progress=emit,
    )
    policy = UpdatePolicy(
        check=args.check,
        allow_no_vcs=args.allow_no_vcs,
        allow_dirty=args.allow_dirty,
        allow_staged=args.allow_staged,
    )
    try:
        report = service.run(
            manifest_path=Path(args.manifest_path) if args.manifest_path else None,
            all_members=args.workspace,
            names=args.package or (),
            policy=policy,
        )
    except SyncRdmeError as exc:
        if args.json:
            print(json.dumps({"ok": False, "error": exc.as_dict()}, ensure_ascii=False, indent=2))
        else:
            for line in render_diagnostic(exc):
                print(line, file=sys.stderr)
        return 1

    if args.json:
        print(json.dumps(report.as_dict(), ensure_ascii=False, indent=2))
    else:
        _print_errors(report)
    return 0 if report.ok else 1


def _telemetry_cmd(args: argparse.Namespace) -> int:
    if args.telemetry_command == "report":
        recent = getattr(args, "recent", 0)
        events = telemetry_tail(SETTINGS, recent) if recent and recent > 0 else list(telemetry_iter(SETTINGS))
        print(json.dumps(telemetry_summarize(events), indent=2, ensure_ascii=False))
        return 0
    if args.telemetry_command == "clear":
        removed = telemetry_clear(SETTINGS)
        print("Telemetry log cleared" if removed else "Telemetry log is already empty")
        return 0
    if args.telemetry_command == "tail":
        for evt in telemetry_tail(SETTINGS, args.limit):
            print(json.dumps(evt, ensure_ascii=False))
        return 0
    print("Unsupported telemetry command", file=sys.stderr)
    return 2


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="sync-rdme",
        description=HELP_OVERVIEW,
        formatter_class=argparse.RawTextHelpFormatter,
    )
    parser.add_argument("--version", action="version", version=f"sync-rdme {__version__}")

    sub = parser.add_subparsers(dest="command", required=True)

    sync_cmd = sub.add_parser("sync", help="Synchronize README regions of one or more packages")
    sync_cmd.add_argument("--manifest-path", metavar="PATH", help="Path to Cargo.toml")
    selection = sync_cmd.add_mutually_exclusive_group()
    selection.add_argument("--workspace", action="store_true", help="Sync READMEs of every workspace member")
    selection.add_argument("-p", "--package", action="append", metavar="SPEC", help="Package to sync (repeatable)")
    sync_cmd.add_argument(
        "-F",
        "--features",
        action="append",
        default=[],
        metavar="FEATURES",
        help="Space or comma separated list of features to activate",
    )
    sync_cmd.add_argument("--all-features", action="store_true", help="Activate all available features")
    sync_cmd.add_argument("--no-default-features", action="store_true", help="Do not activate the `default` feature")
    sync_cmd.add_argument("--toolchain", help="Toolchain to run `cargo rustdoc` with (via `rustup run`)")
    sync_cmd.add_argument("--rustdoc-json", metavar="PATH", help="Use a prebuilt rustdoc JSON file instead of running cargo")
    sync_cmd.add_argument("--check", action="store_true", help="Fail with a diff instead of writing changes")
    sync_cmd.add_argument("--allow-no-vcs", action="store_true", help="Sync even if no VCS was detected")
    sync_cmd.add_argument("--allow-dirty", action="store_true", help="Sync even if the target has uncommitted changes")
    sync_cmd.add_argument("--allow-staged", action="store_true", help="Sync even if the target has staged changes")
    noise = sync_cmd.add_mutually_exclusive_group()
    noise.add_argument("-v", "--verbose", action="count", default=0, help="More output per occurrence")
    noise.add_argument("-q", "--quiet", action="count", default=0, help="Less output per occurrence")
    sync_cmd.add_argument("--json", action="store_true", help="Emit the sync report as JSON")
    sync_cmd.set_defaults(func=_sync_cmd)

    telemetry_cmd = sub.add_parser("telemetry", help="Inspect local telemetry logs")
    telemetry_sub = telemetry_cmd.add_subparsers(dest="telemetry_command", required=True)

    telemetry_report = telemetry_sub.add_parser("report", help="Print aggregated telemetry stats")
    telemetry_report.add_argument(
        "--recent",
        type=int,
        default=0,
        help="Limit aggregation to the last N telemetry events",
    )
    telemetry_report.set_defaults(func=_telemetry_cmd)

    telemetry_clear_cmd = telemetry_sub.add_parser("clear", help="Remove telemetry log file")
    telemetry_clear_cmd.set_defaults(func=_telemetry_cmd)

    telemetry_tail_cmd = telemetry_sub.add_parser("tail", help="Print last N telemetry events")
    telemetry_tail_cmd.add_argument("--limit", type=int, default=20, help="Number of events to print")
    telemetry_tail_cmd.set_defaults(func=_telemetry_cmd)

    return parser


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
