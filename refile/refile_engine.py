"""
Module: refile_engine
Purpose: Build and execute refile plans with safety checks.
"""

import os
from typing import Callable, List, Optional, Set

from .classifier import pick_bucket
from .exceptions import (
    ConflictError,
    MoveExecutionError,
    ProtectedDirectoryError,
    ScanError,
)
from .guard import is_protected_directory
from .models.actions import CreateFolderAction, FileAction, MoveAction, SkipAction
from .models.buckets import BucketConfig
from .models.runplan import (
    OUTCOME_CREATED_DIR,
    OUTCOME_FAILED,
    OUTCOME_MOVED,
    OUTCOME_MOVED_COPY,
    OUTCOME_PARTIAL,
    OUTCOME_PREVIEW,
    OUTCOME_PREVIEW_DIR,
    OUTCOME_SKIPPED,
    ActionOutcome,
    PlanOptions,
    RunPlan,
    RunSummary,
)
from .organizer import compute_dest_path, ensure_structure, plan_structure, refile_base_path
from .scanner import collect_items_to_process
from .skip_reasons import SKIP_REASON_CONTAINS_BASE, SKIP_REASON_NO_FILE_NAME, age_skip_reason
from .utils import (
    copy_tree,
    ensure_directory,
    find_unique_dest,
    get_item_age,
    is_within,
    log_error,
    log_info,
    log_warning,
    paths_equal,
    remove_tree,
)

OutcomeReporter = Callable[[ActionOutcome], None]


def plan_action(
    path: str,
    target_dir: str,
    options: PlanOptions,
    config: BucketConfig,
    taken: Optional[Set[str]] = None,
) -> FileAction | None:
    """
    Decide what to do with one item.

    Args:
        path: Candidate item.
        target_dir: Directory holding the base folder.
        options: Run switches.
        config: Validated bucket configuration.
        taken: Destinations claimed by earlier items of the same run.

    Returns:
        MoveAction, SkipAction, or None when the item already sits in its bucket.

    Raises:
        ProtectedDirectoryError: For protected paths unless explicitly allowed.
        ConflictError: When the destination exists and renaming is disabled.
        ConflictExhaustedError: When no numbered variant is free.
    """
    if not options.allow_dangerous_directories and is_protected_directory(
        path, home=options.home_dir, root=options.root_dir
    ):
        message = (
            f"Refusing to move protected directory: {path}. Protected directories "
            "include the root (/), your home directory, and top-level directories "
            "(/tmp, /var, /usr, ...)."
        )
        log_error(message)
        raise ProtectedDirectoryError(message)

    try:
        age = get_item_age(path, now=options.now)
    except OSError as exc:
        reason = age_skip_reason(exc)
        log_warning(f"Skipping {path}: {reason}")
        return SkipAction(path=path, reason=reason)

    bucket = pick_bucket(age, config)
    dest_path = compute_dest_path(path, target_dir, bucket, config)
    if dest_path is None:
        log_warning(f"Skipping {path}: {SKIP_REASON_NO_FILE_NAME}")
        return SkipAction(path=path, reason=SKIP_REASON_NO_FILE_NAME)

    if os.path.isdir(path) and is_within(refile_base_path(target_dir, config), path):
        log_warning(f"Skipping {path}: {SKIP_REASON_CONTAINS_BASE}")
        return SkipAction(path=path, reason=SKIP_REASON_CONTAINS_BASE)

    if paths_equal(path, dest_path):
        return None

    claimed = taken if taken is not None else set()
    final_dest = dest_path
    if os.path.lexists(dest_path) or dest_path in claimed:
        if not options.allow_rename:
            message = (
                f"Conflict: destination path already exists: {dest_path} (source: {path}). "
                "Use --allow-rename to automatically rename conflicting files."
            )
            log_error(message)
            raise ConflictError(message)
        final_dest = find_unique_dest(dest_path, claimed)
        log_info(f"Destination {dest_path} is taken; using {final_dest} for {path}")

    if taken is not None:
        taken.add(final_dest)
    return MoveAction(src=path, dst=final_dest, renamed=final_dest != dest_path)


def build_run_plan(
    source_dir: str,
    target_dir: str,
    config: BucketConfig,
    options: PlanOptions,
) -> RunPlan:
    """
    Scan the source and plan every item before anything is moved.

    Args:
        source_dir: Directory being organized.
        target_dir: Directory holding the base folder.
        config: Validated bucket configuration.
        options: Run switches.

    Returns:
        RunPlan with missing folders and per-item actions.

    Raises:
        ScanError: If the source cannot be listed.
        PlanError: On protected paths or unresolved conflicts.
    """
    if not os.path.isdir(source_dir):
        log_error(f"Source directory does not exist: {source_dir}")
        raise ScanError(f"Source directory does not exist or is not a directory: {source_dir}")

    refile_base = refile_base_path(target_dir, config)
    folders = plan_structure(refile_base, config)
    items = collect_items_to_process(source_dir, refile_base, config)

    taken: Set[str] = set()
    actions: List[FileAction] = []
    in_place = 0
    for item in items:
        action = plan_action(item, target_dir, options, config, taken)
        if action is None:
            in_place += 1
            continue
        actions.append(action)

    log_info(
        f"Planned {len(actions)} action(s) for {len(items)} item(s) in {source_dir} "
        f"({in_place} already in place)"
    )
    return RunPlan(
        source_dir=source_dir,
        target_dir=target_dir,
        refile_base=refile_base,
        config=config,
        folders=folders,
        actions=actions,
        scanned_items=len(items),
        in_place=in_place,
    )


def move_cross_filesystem(src: str, dst: str, rename_error: OSError) -> ActionOutcome:
    """
    Copy ``src`` to ``dst`` and remove the original.

    Args:
        src: Item to move.
        dst: Destination path on another filesystem.
        rename_error: The error that made the atomic rename fail.

    Returns:
        A ``moved_copy`` outcome, or a ``partial`` outcome when the copy
        succeeded but the source could not be removed.

    Raises:
        MoveExecutionError: If the copy fails; the source is left untouched.
    """
    try:
        copy_tree(src, dst)
    except OSError as copy_error:
        message = (
            f"Failed to move {src} -> {dst} (rename: {rename_error}, copy: {copy_error})"
        )
        log_error(message)
        raise MoveExecutionError(message) from copy_error

    try:
        remove_tree(src)
    except OSError as remove_error:
        log_warning(f"Copied {src} -> {dst} but failed to remove the source: {remove_error}")
        return ActionOutcome(status=OUTCOME_PARTIAL, path=src, dst=dst, reason=str(remove_error))

    log_info(f"Moved {src} -> {dst} (copy and delete after rename failed: {rename_error})")
    return ActionOutcome(status=OUTCOME_MOVED_COPY, path=src, dst=dst)


def execute_action(action: FileAction, dry_run: bool) -> ActionOutcome:
    """
    Perform one planned action.

    Args:
        action: MoveAction, SkipAction or CreateFolderAction.
        dry_run: Report only, without touching the filesystem.

    Returns:
        ActionOutcome describing what happened.

    Raises:
        MoveExecutionError: If a move fails outright.
        StorageError: If a folder cannot be created.
    """
    if isinstance(action, SkipAction):
        return ActionOutcome(status=OUTCOME_SKIPPED, path=action.path, reason=action.reason)

    if isinstance(action, CreateFolderAction):
        if dry_run:
            return ActionOutcome(status=OUTCOME_PREVIEW_DIR, path=action.path)
        ensure_directory(action.path)
        log_info(f"Created directory {action.path}")
        return ActionOutcome(status=OUTCOME_CREATED_DIR, path=action.path)

    if not isinstance(action, MoveAction):
        raise MoveExecutionError(f"Unknown action type: {action.type}")

    if dry_run:
        return ActionOutcome(status=OUTCOME_PREVIEW, path=action.src, dst=action.dst)

    ensure_directory(os.path.dirname(action.dst))
    try:
        os.rename(action.src, action.dst)
    except OSError as rename_error:
        log_warning(
            f"Rename {action.src} -> {action.dst} failed ({rename_error}); "
            "falling back to copy and delete"
        )
        return move_cross_filesystem(action.src, action.dst, rename_error)

    log_info(f"Moved {action.src} -> {action.dst}")
    return ActionOutcome(status=OUTCOME_MOVED, path=action.src, dst=action.dst)


def execute_plan(
    plan: RunPlan,
    dry_run: bool,
    reporter: OutcomeReporter | None = None,
) -> RunSummary:
    """
    Execute folder bootstrap and every action of a plan, in order.

    A failed move is recorded and the remaining actions still run.

    Args:
        plan: RunPlan from build_run_plan.
        dry_run: Report only.
        reporter: Optional callback invoked with each outcome as it happens.

    Returns:
        RunSummary of all outcomes.

    Raises:
        StorageError: If bucket folders cannot be created.
    """
    summary = RunSummary(
        dry_run=dry_run,
        scanned_items=plan.scanned_items,
        in_place=plan.in_place,
    )

    def _record(outcome: ActionOutcome) -> None:
        summary.outcomes.append(outcome)
        if reporter:
            reporter(outcome)

    if dry_run:
        for folder in plan.folders:
            _record(execute_action(folder, dry_run=True))
    else:
        for created in ensure_structure(plan.refile_base, plan.config):
            _record(ActionOutcome(status=OUTCOME_CREATED_DIR, path=created))

    for action in plan.actions:
        try:
            outcome = execute_action(action, dry_run)
        except MoveExecutionError as exc:
            src = getattr(action, "src", "")
            dst = getattr(action, "dst", None)
            outcome = ActionOutcome(status=OUTCOME_FAILED, path=src, dst=dst, reason=str(exc))
        _record(outcome)

    mode = "Dry run" if dry_run else "Run"
    log_info(f"{mode} finished: {summary.counts()}")
    return summary


def run_refile(
    source_dir: str,
    target_dir: str | None,
    config: BucketConfig,
    options: PlanOptions,
    reporter: OutcomeReporter | None = None,
) -> RunSummary:
    """
    Plan and execute a full run over ``source_dir``.

    Args:
        source_dir: Directory being organized.
        target_dir: Directory holding the base folder; defaults to ``source_dir``.
        config: Validated bucket configuration.
        options: Run switches.
        reporter: Optional per-outcome callback.

    Returns:
        RunSummary of the run.
    """
    target = target_dir or source_dir
    log_info(
        f"Refile {'preview' if options.dry_run else 'run'} started: source={source_dir} "
        f"target={target} base={config.base_folder} buckets={config.bucket_names()}"
    )
    plan = build_run_plan(source_dir, target, config, options)
    return execute_plan(plan, options.dry_run, reporter=reporter)
