"""
Module: cli
Purpose: Command-line interface entry point.
"""

import argparse
import os
import sys

from . import config as config_loader
from . import reporting
from .cli_formatter import CLIFormatter, detect_terminal_capabilities
from .exceptions import (
    ConfigError,
    ConflictError,
    MoveExecutionError,
    PlanError,
    ProtectedDirectoryError,
    RefileError,
    ScanError,
    StorageError,
)
from .guard import default_home_dir
from .models.runplan import PlanOptions
from .refile_engine import run_refile

EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_CONFIG_ERROR = 2
EXIT_INTERRUPTED = 130


def _render_dangerous_warning(formatter: CLIFormatter) -> None:
    formatter.frame(
        "WARNING",
        [
            "--allow-dangerous-directories is enabled!",
            "This allows moving protected directories including the root directory (/), "
            "your home directory, and top-level system directories (/tmp, /var, /usr, ...).",
            "This can cause SEVERE SYSTEM DAMAGE. Use with extreme caution!",
        ],
        error=True,
    )


def _remediation_for(exc: RefileError) -> list[str]:
    if isinstance(exc, ProtectedDirectoryError):
        return [
            "Point refile at a subdirectory instead.",
            "Only if you really mean it, rerun with --allow-dangerous-directories.",
        ]
    if isinstance(exc, ConflictError):
        return [
            "Rerun with --allow-rename (-r) to keep both items under numbered names.",
            "Or move the conflicting item out of the bucket first.",
        ]
    if isinstance(exc, ConfigError):
        return ["Fix the bucket definition or config file, then rerun."]
    return [f"Review {reporting.log_file_path()} for details, then rerun."]


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="refile",
        description=(
            "Sort files and folders into age buckets (last-week, current-month, ...) "
            "under a base folder. Rerun any time: refiled items move on as they age."
        ),
    )
    parser.add_argument("source_dir", help="Directory to organize")
    parser.add_argument(
        "target_dir",
        nargs="?",
        default=None,
        help="Directory that receives the base folder (defaults to SOURCE_DIR)",
    )
    parser.add_argument(
        "-n",
        "--dry-run",
        action="store_true",
        help="Show what would happen without touching anything.",
    )
    parser.add_argument(
        "-r",
        "--allow-rename",
        action="store_true",
        help="Rename conflicting items to 'name (1).ext' instead of failing.",
    )
    parser.add_argument(
        "--allow-dangerous-directories",
        action="store_true",
        help="Allow moving /, your home directory and top-level system directories.",
    )
    parser.add_argument(
        "--base-folder",
        default=None,
        help="Name of the folder holding the buckets (default: refile).",
    )
    parser.add_argument(
        "--buckets",
        default=None,
        metavar="SPEC",
        help="Bucket list such as 'today=1,week=7,old=null' (null = catch-all).",
    )
    parser.add_argument(
        "--config",
        default=None,
        metavar="PATH",
        help=(
            "Config file (default: $REFILE_CONFIG or "
            "$XDG_CONFIG_HOME/refile/config.toml)."
        ),
    )
    parser.add_argument(
        "--report",
        default=None,
        metavar="PATH",
        help="Write a JSON report of the run to PATH.",
    )
    parser.add_argument(
        "--plain",
        action="store_true",
        help="Plain mode: ASCII-only separators, no ANSI colors.",
    )
    parser.add_argument(
        "--no-color",
        action="store_true",
        help="Disable ANSI colors regardless of terminal support.",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Explain skipped items and print resolved settings.",
    )
    return parser


def run(args: argparse.Namespace, formatter: CLIFormatter) -> int:
    """
    Execute one refile run for parsed arguments and return the exit code.
    """
    source_dir = os.path.abspath(os.path.expanduser(args.source_dir))
    target_dir = (
        os.path.abspath(os.path.expanduser(args.target_dir)) if args.target_dir else source_dir
    )

    if args.allow_dangerous_directories:
        _render_dangerous_warning(formatter)

    try:
        config_file = config_loader.load_config_file(args.config, required=bool(args.config))
        bucket_config = config_loader.resolve_bucket_config(
            source_dir,
            config_file,
            base_folder_override=args.base_folder,
            buckets_override=args.buckets,
        )
    except ConfigError as exc:
        reporting.write_log([f"[ERROR] Configuration error: {exc}"])
        formatter.failure_summary(
            header="CONFIGURATION ERROR", reason=str(exc), remediation=_remediation_for(exc)
        )
        return EXIT_CONFIG_ERROR

    formatter.verbose(f"Source: {source_dir}")
    formatter.verbose(f"Target: {target_dir}")
    formatter.verbose(
        "Buckets: "
        + ", ".join(
            f"{bucket.name}={'null' if bucket.max_age_days is None else bucket.max_age_days}"
            for bucket in bucket_config.buckets
        )
        + f" (base folder '{bucket_config.base_folder}')"
    )

    options = PlanOptions(
        dry_run=args.dry_run,
        allow_rename=args.allow_rename,
        allow_dangerous_directories=args.allow_dangerous_directories,
        home_dir=default_home_dir(),
    )

    try:
        summary = run_refile(
            source_dir,
            target_dir,
            bucket_config,
            options,
            reporter=formatter.outcome,
        )
    except (PlanError, ScanError, StorageError, MoveExecutionError) as exc:
        reporting.write_log([f"[ERROR] {exc}"])
        formatter.failure_summary(
            header="STOPPED", reason=str(exc), remediation=_remediation_for(exc)
        )
        return EXIT_FAILURE

    formatter.summary(summary)
    if args.report:
        report = reporting.build_run_report(
            summary,
            source_dir=source_dir,
            target_dir=target_dir,
            config=bucket_config,
            options=options,
        )
        reporting.write_json_report(report, args.report)
        formatter.muted(f"Report saved to {os.path.abspath(args.report)}")
    return EXIT_OK if summary.ok else EXIT_FAILURE


def main():
    """
    Argument parser entry point.

    Args:
        None

    Returns:
        None

    Raises:
        SystemExit: Always, carrying the run's exit code.
    """
    parser = build_parser()
    args = parser.parse_args()
    formatter = CLIFormatter(
        detect_terminal_capabilities(
            plain_mode=args.plain,
            no_color_flag=args.no_color,
            verbose=args.verbose,
        )
    )
    formatter.verbose(f"Log file: {reporting.ensure_log_initialized()}")
    try:
        exit_code = run(args, formatter)
    except KeyboardInterrupt:
        reporting.write_log(["[WARNING] Operation aborted via Ctrl+C"])
        formatter.failure_summary(
            header="ABORTED",
            reason="Interrupted by user (Ctrl+C).",
            remediation=["Rerun the command; items already moved stay in their buckets."],
        )
        sys.exit(EXIT_INTERRUPTED)
    except RefileError as exc:
        reporting.write_log([f"[ERROR] {exc}"])
        formatter.failure_summary(header="FAILED", reason=str(exc), remediation=_remediation_for(exc))
        sys.exit(EXIT_FAILURE)
    sys.exit(exit_code)


if __name__ == "__main__":
    main()
