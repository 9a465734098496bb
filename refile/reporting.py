"""
Module: reporting
Purpose: Run log and JSON run report.
"""

import json
import os
from dataclasses import asdict, is_dataclass
from datetime import datetime, timezone
from typing import Any, List

from .models.buckets import BucketConfig
from .models.runplan import PlanOptions, RunSummary


LOG_FILE_ENV = "REFILE_LOG_FILE"
STATE_HOME_ENV = "XDG_STATE_HOME"
LOG_FILE_NAME = "refile.log"


def log_file_path() -> str:
    """
    Absolute path of the run log.

    Preference order: $REFILE_LOG_FILE > $XDG_STATE_HOME/refile/refile.log
    > ~/.local/state/refile/refile.log.
    The default never lives in the working directory.
    """
    configured = os.environ.get(LOG_FILE_ENV)
    if configured:
        return os.path.abspath(os.path.expanduser(configured))
    state_home = os.environ.get(STATE_HOME_ENV) or os.path.join(
        os.path.expanduser("~"), ".local", "state"
    )
    return os.path.abspath(os.path.join(state_home, "refile", LOG_FILE_NAME))


def ensure_log_initialized() -> str:
    """Ensure the refile log file exists and return its absolute path."""
    path = log_file_path()
    directory = os.path.dirname(path) or "."
    os.makedirs(directory, exist_ok=True)
    with open(path, "a", encoding="utf-8"):
        pass
    return path


def write_log(entries: List[str], outfile: str | None = None):
    """
    Append entries to logfile.
    """
    target = outfile or log_file_path()
    directory = os.path.dirname(os.path.abspath(target)) or "."
    os.makedirs(directory, exist_ok=True)
    timestamp = datetime.now(timezone.utc).isoformat()
    with open(target, "a", encoding="utf-8") as handle:
        for entry in entries:
            normalized = entry if entry.startswith("[") else f"[INFO] {entry}"
            handle.write(f"[{timestamp}] {normalized}\n")


class EnhancedJSONEncoder(json.JSONEncoder):
    def default(self, o: Any) -> Any:
        if is_dataclass(o):
            return asdict(o)
        return super().default(o)


def build_run_report(
    summary: RunSummary,
    *,
    source_dir: str,
    target_dir: str,
    config: BucketConfig,
    options: PlanOptions,
) -> dict[str, Any]:
    """
    Collect a JSON-serializable description of one run.
    """
    return {
        "generated_at": datetime.now(timezone.utc).isoformat(),
        "source_dir": os.path.abspath(source_dir),
        "target_dir": os.path.abspath(target_dir),
        "dry_run": summary.dry_run,
        "ok": summary.ok,
        "options": {
            "allow_rename": options.allow_rename,
            "allow_dangerous_directories": options.allow_dangerous_directories,
        },
        "config": {
            "base_folder": config.base_folder,
            "buckets": [asdict(bucket) for bucket in config.buckets],
        },
        "counts": summary.counts(),
        "outcomes": [
            {**asdict(outcome), "message": outcome.message} for outcome in summary.outcomes
        ],
    }


def write_json_report(report: dict[str, Any], outfile: str):
    """
    Write a run report as indented JSON, creating parent folders as needed.
    """
    directory = os.path.dirname(os.path.abspath(outfile)) or "."
    os.makedirs(directory, exist_ok=True)
    with open(outfile, "w", encoding="utf-8") as handle:
        json.dump(report, handle, indent=2, cls=EnhancedJSONEncoder)
    write_log([f"[INFO] Run report saved to {os.path.abspath(outfile)}"])
