"""
Module: scanner
Purpose: Enumerate the items a run has to (re)classify.
"""

import os
from typing import List

from .exceptions import ScanError
from .models.buckets import BucketConfig
from .organizer import is_bucket_dir
from .utils import log_error, log_info


def collect_items_to_process(
    source_dir: str,
    refile_base: str,
    config: BucketConfig,
) -> List[str]:
    """
    List candidate items for one run.

    Immediate children of ``source_dir`` are candidates as-is; directories are
    opaque units. The base folder itself is special: the contents of each
    bucket directory inside it are candidates, so earlier results are
    re-evaluated as they age, and anything else directly under the base folder
    is picked up as a stray item.

    Args:
        source_dir: Directory being organized.
        refile_base: ``<target_dir>/<base_folder>``.
        config: Validated bucket configuration.

    Returns:
        Candidate paths, sorted by name within each directory.

    Raises:
        ScanError: If a directory cannot be listed.
    """
    normalized_base = os.path.normpath(os.path.abspath(refile_base))
    items: List[str] = []

    for path in _list_children(source_dir):
        if os.path.normpath(os.path.abspath(path)) != normalized_base:
            items.append(path)
            continue
        if not os.path.isdir(path):
            items.append(path)
            continue
        for child in _list_children(path):
            if os.path.isdir(child) and is_bucket_dir(child, config):
                items.extend(_list_children(child))
            else:
                log_info(f"Stray item found in base folder: {child}")
                items.append(child)

    return items


def _list_children(directory: str) -> List[str]:
    try:
        names = sorted(os.listdir(directory))
    except OSError as exc:
        log_error(f"Error reading directory {directory}: {exc}")
        raise ScanError(f"Cannot read directory {directory}: {exc}") from exc
    return [os.path.join(directory, name) for name in names]
