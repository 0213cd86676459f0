"""CLI entry point for the upgrade differ."""
import argparse
from dotenv import load_dotenv
import json
import sys
import traceback
from pathlib import Path

from upgrade_differ.config import ConfigError, LINE_TERMINATORS, load_config
from upgrade_differ.index.exceptions import IndexingError
from upgrade_differ.logging_config import setup_logging
from upgrade_differ.models import EntryStatus, RunReport
from upgrade_differ.orchestrator.emission import ABORT_PREFIX
from upgrade_differ.orchestrator.exceptions import OrchestratorError

load_dotenv()

# Exit codes
EXIT_SUCCESS = 0
EXIT_INVALID_INPUT = 1
EXIT_SOURCE_UNREADABLE = 2
EXIT_ORCHESTRATOR_ERROR = 3
EXIT_ABORTED = 4
EXIT_UNEXPECTED = 5
EXIT_KEYBOARD_INTERRUPT = 130

INDEX_ERROR_PREFIX = "index_node error:"


def build_parser() -> argparse.ArgumentParser:
    """Build and return the argument parser."""
    parser = argparse.ArgumentParser(
        prog="upgrade-differ",
        description=(
            "Write unified diff patches for files an ext plugin overrides, "
            "compared against the portal source they were copied from"
        ),
    )
    parser.add_argument("plugin_sdk_path", type=str, help="Path to the plugins SDK working tree")
    parser.add_argument(
        "portal_source",
        type=str,
        help="Portal source zip file, or an unpacked portal source directory",
    )
    parser.add_argument(
        "--context",
        type=int,
        default=None,
        help="Unchanged lines around each change (default: 3)",
    )
    parser.add_argument(
        "--line-terminator",
        type=str,
        default=None,
        choices=sorted(LINE_TERMINATORS),
        help="Line terminator used to split files and write patches (default: lf)",
    )
    parser.add_argument("--encoding", type=str, default=None, help="Text encoding (default: utf-8)")
    parser.add_argument(
        "--output-dir",
        type=str,
        default=None,
        help="Directory under the SDK that receives patches (default: diffs)",
    )
    parser.add_argument(
        "--scope-pattern",
        type=str,
        default=None,
        help=r"Regex selecting extension module files (default: .*ext/\w+-ext/.*)",
    )
    parser.add_argument(
        "--workers",
        type=int,
        default=None,
        help="Number of entries emitted in parallel (default: 1)",
    )
    parser.add_argument(
        "--fail-fast",
        action="store_true",
        default=None,
        help="Stop emitting patches at the first unreadable or unwritable entry",
    )
    parser.add_argument("--verbose", action="store_true", help="Enable verbose output")
    parser.add_argument(
        "--dry-run", action="store_true", help="Print config and exit without running"
    )
    parser.add_argument(
        "--output-json", action="store_true", help="Output results as JSON"
    )
    return parser


def validate_paths(sdk_path: str, portal_source: str) -> tuple[str, str]:
    """Validate and resolve the working tree and baseline paths.

    Raises:
        SystemExit: If either path does not exist or the SDK is not a directory.
    """
    sdk = Path(sdk_path).resolve()
    if not sdk.is_dir():
        print(f"Error: '{sdk_path}' is not a valid directory.", file=sys.stderr)
        raise SystemExit(EXIT_INVALID_INPUT)
    source = Path(portal_source).resolve()
    if not source.exists():
        print(f"Error: '{portal_source}' does not exist.", file=sys.stderr)
        raise SystemExit(EXIT_INVALID_INPUT)
    return str(sdk), str(source)


def format_result_json(report: RunReport) -> str:
    """Serialize a RunReport to a JSON string."""
    return json.dumps(report.model_dump(mode="json"), indent=2)


def print_result_human(report: RunReport) -> None:
    """Print one status line per entry, then a summary."""
    for outcome in report.outcomes:
        print(outcome.status_line())

    print(f"\n{'='*60}")
    print("Upgrade Differ Results")
    print(f"{'='*60}")
    print(f"Baseline: {report.baseline_label}")
    print(f"Working tree: {report.working_root}")
    for status in EntryStatus:
        print(f"  {status.value}: {report.count(status)}")

    if report.errors:
        print(f"\nErrors ({len(report.errors)}):")
        for err in report.errors:
            print(f"  - {err}")

    print(f"{'='*60}")


def determine_exit_code(report: RunReport) -> int:
    """Determine the exit code from the run report."""
    for err in report.errors:
        if err.startswith(INDEX_ERROR_PREFIX):
            return EXIT_SOURCE_UNREADABLE
    for err in report.errors:
        if err.startswith(ABORT_PREFIX):
            return EXIT_ABORTED
    if not report.succeeded:
        return EXIT_ORCHESTRATOR_ERROR
    return EXIT_SUCCESS


def _handle_error(label: str, exc: BaseException, verbose: bool, exit_code: int) -> int:
    """Print error message to stderr and return the exit code."""
    print(f"{label}: {exc}", file=sys.stderr)
    if verbose:
        traceback.print_exc(file=sys.stderr)
    return exit_code


def main(argv: list[str] | None = None) -> int:
    """Main CLI entry point.

    Args:
        argv: Command-line arguments (defaults to sys.argv[1:]).

    Returns:
        Exit code integer.
    """
    parser = build_parser()
    args = parser.parse_args(argv)

    setup_logging("DEBUG" if args.verbose else None)

    try:
        sdk_path, portal_source = validate_paths(args.plugin_sdk_path, args.portal_source)
    except SystemExit as exc:
        return exc.code

    try:
        config = load_config(
            context_lines=args.context,
            line_terminator=args.line_terminator,
            encoding=args.encoding,
            output_dir=args.output_dir,
            scope_pattern=args.scope_pattern,
            max_workers=args.workers,
            fail_fast=args.fail_fast,
        )
    except ConfigError as exc:
        return _handle_error("Configuration error", exc, args.verbose, EXIT_INVALID_INPUT)

    if args.dry_run:
        settings = {
            "plugin_sdk_path": sdk_path,
            "portal_source": portal_source,
            **config.model_dump(mode="json", exclude={"source_roots"}),
        }
        if args.output_json:
            print(json.dumps(settings, indent=2))
        else:
            print("\nConfiguration:")
            print(f"{'='*40}")
            for key, value in settings.items():
                print(f"  {key}: {value!r}")
            print(f"{'='*40}")
        return EXIT_SUCCESS

    # Deferred so --help and --dry-run do not load langgraph
    from upgrade_differ.index.sources import WorkingTree, open_baseline_source
    from upgrade_differ.orchestrator.graph import run_differ

    baseline = open_baseline_source(portal_source)
    try:
        report = run_differ(baseline, WorkingTree(sdk_path), config)

        if args.output_json:
            print(format_result_json(report))
        else:
            print_result_human(report)

        return determine_exit_code(report)

    except IndexingError as exc:
        return _handle_error("Indexing error", exc, args.verbose, EXIT_SOURCE_UNREADABLE)

    except OrchestratorError as exc:
        return _handle_error("Orchestrator error", exc, args.verbose, EXIT_ORCHESTRATOR_ERROR)

    except KeyboardInterrupt:
        print("\nInterrupted.", file=sys.stderr)
        return EXIT_KEYBOARD_INTERRUPT

    except Exception as exc:
        return _handle_error("Unexpected error", exc, args.verbose, EXIT_UNEXPECTED)

    finally:
        close = getattr(baseline, "close", None)
        if close is not None:
            close()


if __name__ == "__main__":
    sys.exit(main())
