"""
Module: utils
Purpose: Shared helper utilities for refile.
"""

import os
import shutil
import time
from datetime import timedelta
from typing import Collection

from .exceptions import ConflictExhaustedError, StorageError

MAX_UNIQUE_SUFFIX = 9999

COLOR_RESET = "\033[0m"
BOLD = "\033[1m"


def color_256(code: int) -> str:
    return f"\033[38;5;{code}m"


def final_component(path: str) -> str | None:
    """
    Return the last path component, or None when the path has none.

    Trailing separators are ignored; "/", "" and paths ending in ".." or "."
    have no usable name.
    """
    stripped = path.rstrip(os.sep)
    if os.altsep:
        stripped = stripped.rstrip(os.altsep)
    if not stripped:
        return None
    name = os.path.basename(stripped)
    if name in ("", os.curdir, os.pardir):
        return None
    return name


def canonical_path(path: str) -> str | None:
    """
    Resolve symlinks strictly; return None when the path cannot be resolved.
    """
    try:
        return os.path.realpath(path, strict=True)
    except (OSError, ValueError):
        return None


def canonical_or_literal(path: str) -> str:
    """Canonical form when resolvable, otherwise the absolute literal path."""
    return canonical_path(path) or os.path.abspath(path)


def paths_equal(a: str, b: str) -> bool:
    """
    True only when both paths exist and resolve to the same location.

    A path that cannot be canonicalized (typically because it does not exist
    yet) never compares equal to anything.
    """
    canonical_a = canonical_path(a)
    canonical_b = canonical_path(b)
    if canonical_a is None or canonical_b is None:
        return False
    return canonical_a == canonical_b


def is_within(path: str, ancestor: str) -> bool:
    """True when ``path`` is ``ancestor`` or lives beneath it (canonical forms)."""
    child = canonical_or_literal(path)
    parent = canonical_or_literal(ancestor)
    try:
        return os.path.commonpath([child, parent]) == parent
    except ValueError:
        return False


def generate_unique_name(base: str, suffix: int) -> str:
    """
    Build the numbered variant ``stem (N).ext`` of ``base`` in the same folder.

    Only the last dot-delimited segment counts as the extension, so
    ``archive.tar.gz`` becomes ``archive.tar (1).gz``.
    """
    parent, name = os.path.split(base)
    stem, ext = os.path.splitext(name)
    if ext:
        return os.path.join(parent, f"{stem} ({suffix}){ext}")
    return os.path.join(parent, f"{stem} ({suffix})")


def find_unique_dest(base: str, taken: Collection[str] = ()) -> str:
    """
    Return ``base`` if it is free, else the first free numbered variant.

    Args:
        base: Preferred destination path.
        taken: Destinations already claimed by earlier plan steps.

    Returns:
        A path that neither exists nor appears in ``taken``.

    Raises:
        ConflictExhaustedError: When all variants up to MAX_UNIQUE_SUFFIX are occupied.
    """
    if not _occupied(base, taken):
        return base

    candidate = base
    for index in range(1, MAX_UNIQUE_SUFFIX + 1):
        candidate = generate_unique_name(base, index)
        if not _occupied(candidate, taken):
            return candidate

    log_error(f"Unique name search exhausted for {base}")
    raise ConflictExhaustedError(
        f"Cannot find a unique name for '{base}': every variant up to "
        f"'{os.path.basename(candidate)}' already exists. "
        "Tidy the destination folder or remove duplicates, then rerun."
    )


def _occupied(path: str, taken: Collection[str]) -> bool:
    return os.path.lexists(path) or path in taken


def get_item_age(path: str, now: float | None = None) -> timedelta:
    """
    Time since ``path`` was last modified.

    Args:
        path: File or directory; symlinks are followed.
        now: Reference timestamp (defaults to the current time).

    Returns:
        A non-negative timedelta; modification times in the future count as age 0.

    Raises:
        OSError: When the metadata cannot be read.
    """
    stat_result = os.stat(path)
    reference = time.time() if now is None else now
    seconds = reference - stat_result.st_mtime
    if seconds < 0:
        log_warning(f"Modification time of {path} is in the future; treating it as new.")
        seconds = 0
    return timedelta(seconds=seconds)


def ensure_directory(path: str):
    """
    Create directory if it does not exist.

    Args:
        path: Directory path to create.

    Returns:
        None

    Raises:
        StorageError: If the directory cannot be created.
    """
    normalized = os.path.abspath(path)
    try:
        os.makedirs(normalized, exist_ok=True)
    except OSError as exc:
        log_error(f"Failed to create directory: {normalized} ({exc})")
        raise StorageError(f"Unable to create directory: {normalized}") from exc


def copy_tree(src: str, dst: str) -> None:
    """
    Copy a file or a whole directory tree to ``dst``.

    Symlinks inside a copied tree are recreated as symlinks.

    Raises:
        OSError: If any part of the copy fails.
    """
    if os.path.isdir(src) and not os.path.islink(src):
        shutil.copytree(src, dst, symlinks=True)
    else:
        shutil.copy2(src, dst, follow_symlinks=False)


def remove_tree(path: str) -> None:
    """Remove a file, symlink or directory tree."""
    if os.path.isdir(path) and not os.path.islink(path):
        shutil.rmtree(path)
    else:
        os.remove(path)


def log_error(message: str):
    """
    Log an error message.

    Args:
        message: Error message to log.

    Returns:
        None

    Raises:
        None
    """
    from . import reporting  # Local import to avoid circular dependency rules

    reporting.write_log([f"[ERROR] {message}"])


def log_warning(message: str):
    """
    Log a warning message.

    Args:
        message: Warning message to log.

    Returns:
        None
    """
    from . import reporting  # Local import to avoid circular dependency rules

    reporting.write_log([f"[WARNING] {message}"])


def log_info(message: str):
    """
    Log an informational message.
    """
    from . import reporting  # Local import to avoid circular dependency rules

    reporting.write_log([f"[INFO] {message}"])


def color_text(text: str, color: str) -> str:
    """
    Wrap text with ANSI color codes.

    Args:
        text: Text to wrap.
        color: ANSI color code.

    Returns:
        Colored text string.

    Raises:
        None
    """
    return f"{color}{text}{COLOR_RESET}"
