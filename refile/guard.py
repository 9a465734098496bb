"""
Module: guard
Purpose: Refuse to relocate the filesystem root, the home directory, or
top-level system directories.
"""

import os

from .utils import canonical_or_literal

HOME_ENV = "HOME"


def default_home_dir() -> str | None:
    """Home directory from the environment, or None when unset."""
    value = os.environ.get(HOME_ENV)
    return value or None


def default_root_dir() -> str:
    return os.path.abspath(os.sep)


def is_protected_directory(
    path: str,
    *,
    home: str | None = None,
    root: str | None = None,
) -> bool:
    """
    Report whether ``path`` is too dangerous to move.

    Protected paths are the root itself, the given home directory, and any
    direct child of the root (``/tmp``, ``/var`` and so on). Deeper paths such
    as ``/tmp/random`` are never protected.

    Args:
        path: Candidate item.
        home: Home directory to protect; None disables the home check.
        root: Filesystem root; defaults to the platform root.

    Returns:
        True if the path is protected.
    """
    canonical = canonical_or_literal(path)
    root_path = canonical_or_literal(root) if root else default_root_dir()

    if canonical == root_path:
        return True

    if home:
        if canonical == canonical_or_literal(home):
            return True

    return os.path.dirname(canonical) == root_path
