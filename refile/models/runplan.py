"""
Module: runplan
Purpose: Run options, run plan and execution outcome dataclasses.
"""

from dataclasses import dataclass, field
from typing import List, Optional

from .actions import CreateFolderAction, FileAction
from .buckets import BucketConfig

OUTCOME_CREATED_DIR = "created_dir"
OUTCOME_PREVIEW_DIR = "preview_dir"
OUTCOME_SKIPPED = "skipped"
OUTCOME_PREVIEW = "preview"
OUTCOME_MOVED = "moved"
OUTCOME_MOVED_COPY = "moved_copy"
OUTCOME_PARTIAL = "partial"
OUTCOME_FAILED = "failed"

MOVE_OUTCOMES = {OUTCOME_MOVED, OUTCOME_MOVED_COPY}


@dataclass(frozen=True)
class PlanOptions:
    """
    Caller-supplied switches for one run.

    ``home_dir`` and ``root_dir`` feed the protected-directory guard;
    ``now`` pins the clock used for age computation.
    """

    dry_run: bool = False
    allow_rename: bool = False
    allow_dangerous_directories: bool = False
    home_dir: Optional[str] = None
    root_dir: Optional[str] = None
    now: Optional[float] = None


@dataclass
class RunPlan:
    """
    Everything decided before the first filesystem mutation.
    """

    source_dir: str
    target_dir: str
    refile_base: str
    config: BucketConfig
    folders: List[CreateFolderAction]
    actions: List[FileAction]
    scanned_items: int = 0
    in_place: int = 0


@dataclass(frozen=True)
class ActionOutcome:
    """Result of executing one action; ``message`` is the status line."""

    status: str
    path: str
    dst: Optional[str] = None
    reason: Optional[str] = None

    @property
    def message(self) -> str:
        if self.status == OUTCOME_CREATED_DIR:
            return f"Created directory {self.path}"
        if self.status == OUTCOME_PREVIEW_DIR:
            return f"[dry-run] CREATE DIR {self.path}"
        if self.status == OUTCOME_SKIPPED:
            return f"Skipping {self.path}: {self.reason}"
        if self.status == OUTCOME_PREVIEW:
            return f"[dry-run] MOVE {self.path} -> {self.dst}"
        if self.status in MOVE_OUTCOMES:
            return f"Moved {self.path} -> {self.dst}"
        if self.status == OUTCOME_PARTIAL:
            return (
                f"Copied {self.path} -> {self.dst} but could not remove the source "
                f"({self.reason}); both locations now hold a copy"
            )
        if self.status == OUTCOME_FAILED:
            return f"Failed to move {self.path} -> {self.dst}: {self.reason}"
        return f"{self.status}: {self.path}"


@dataclass
class RunSummary:
    """
    Outcomes of a run in execution order plus derived counts.
    """

    dry_run: bool
    outcomes: List[ActionOutcome] = field(default_factory=list)
    scanned_items: int = 0
    in_place: int = 0

    def count(self, *statuses: str) -> int:
        return sum(1 for outcome in self.outcomes if outcome.status in statuses)

    @property
    def moved(self) -> int:
        return self.count(*MOVE_OUTCOMES)

    @property
    def previewed(self) -> int:
        return self.count(OUTCOME_PREVIEW)

    @property
    def skipped(self) -> int:
        return self.count(OUTCOME_SKIPPED)

    @property
    def failed(self) -> int:
        return self.count(OUTCOME_FAILED)

    @property
    def partial(self) -> int:
        return self.count(OUTCOME_PARTIAL)

    @property
    def ok(self) -> bool:
        return self.failed == 0 and self.partial == 0

    def counts(self) -> dict[str, int]:
        return {
            "scanned": self.scanned_items,
            "in_place": self.in_place,
            "moved": self.moved,
            "previewed": self.previewed,
            "skipped": self.skipped,
            "partial": self.partial,
            "failed": self.failed,
        }
