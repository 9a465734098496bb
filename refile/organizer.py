"""
Module: organizer
Purpose: Destination path determination for the bucket tree.
"""

import os
from typing import List

from .exceptions import StorageError
from .models.actions import CreateFolderAction
from .models.buckets import BucketConfig, BucketDef
from .utils import ensure_directory, final_component, log_info, log_warning


def refile_base_path(target_dir: str, config: BucketConfig) -> str:
    """Return ``<target_dir>/<base_folder>``."""
    return os.path.join(target_dir, config.base_folder)


def bucket_dest_dir(target_dir: str, bucket: BucketDef, config: BucketConfig) -> str:
    """Return ``<target_dir>/<base_folder>/<bucket>``."""
    return os.path.join(refile_base_path(target_dir, config), bucket.name)


def compute_dest_path(
    source: str,
    target_dir: str,
    bucket: BucketDef,
    config: BucketConfig,
) -> str | None:
    """
    Compute where ``source`` lands inside its bucket.

    Args:
        source: File or directory being refiled.
        target_dir: Directory holding the base folder.
        bucket: Bucket picked for the item.
        config: Bucket configuration (for the base folder name).

    Returns:
        The bucket directory joined with the source's name, or None when the
        source has no final component (for example "/").

    Raises:
        None
    """
    name = final_component(source)
    if name is None:
        return None
    return os.path.join(bucket_dest_dir(target_dir, bucket, config), name)


def is_bucket_dir(path: str, config: BucketConfig) -> bool:
    """
    True when ``path`` is named after a bucket and sits in a folder named
    after the base folder.
    """
    name = final_component(path)
    if name is None:
        return False
    parent = os.path.dirname(path.rstrip(os.sep))
    parent_name = final_component(parent) if parent else None
    if parent_name != config.base_folder:
        return False
    return name in config.bucket_names()


def plan_structure(refile_base: str, config: BucketConfig) -> List[CreateFolderAction]:
    """
    List the base and bucket folders that do not exist yet, in creation order.

    Raises:
        StorageError: If a non-directory occupies one of the folder paths.
    """
    folders = [refile_base] + [os.path.join(refile_base, bucket.name) for bucket in config.buckets]
    planned: List[CreateFolderAction] = []
    for folder in folders:
        if os.path.isdir(folder):
            continue
        if os.path.lexists(folder):
            message = (
                f"'{folder}' exists but is not a directory. "
                "Rename or remove it so the bucket folder can be created."
            )
            log_warning(message)
            raise StorageError(message)
        planned.append(CreateFolderAction(path=folder))
    return planned


def ensure_structure(refile_base: str, config: BucketConfig) -> List[str]:
    """
    Create the base folder and every bucket folder.

    Args:
        refile_base: ``<target_dir>/<base_folder>``.
        config: Validated bucket configuration.

    Returns:
        Folders that were created by this call.

    Raises:
        StorageError: If a folder cannot be created or a non-directory is in the way.
    """
    created: List[str] = []
    for action in plan_structure(refile_base, config):
        ensure_directory(action.path)
        log_info(f"Created directory {action.path}")
        created.append(action.path)
    return created
