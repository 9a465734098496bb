"""
Module: skip_reasons
Purpose: Shared constants and helpers for items the planner leaves in place.
"""

from __future__ import annotations

SKIP_REASON_NO_FILE_NAME = "no file name"
SKIP_REASON_CONTAINS_BASE = "contains the refile base folder"
SKIP_REASON_AGE_PREFIX = "cannot get age"

_REASON_HINTS = {
    SKIP_REASON_NO_FILE_NAME: "The path has no final component to keep as a name.",
    SKIP_REASON_CONTAINS_BASE: "Moving it would nest the bucket tree inside itself.",
}


def age_skip_reason(exc: BaseException) -> str:
    return f"{SKIP_REASON_AGE_PREFIX}: {exc}"


def describe_skip_reason(reason: str | None) -> str:
    """
    Return a human-readable hint for a skip reason.
    """
    if not reason:
        return "Left in place"
    if reason.startswith(SKIP_REASON_AGE_PREFIX):
        return "Metadata could not be read (deleted or unreadable while scanning?)."
    return _REASON_HINTS.get(reason, reason)
