"""
Module: classifier
Purpose: Map an item's age onto a configured bucket.
"""

from datetime import timedelta

from .models.buckets import BucketConfig, BucketDef

SECONDS_PER_DAY = 24 * 3600


def age_in_days(age: timedelta) -> int:
    """
    Whole days in ``age``; fractions truncate and negative ages count as 0.
    """
    seconds = int(age.total_seconds())
    if seconds <= 0:
        return 0
    return seconds // SECONDS_PER_DAY


def pick_bucket(age: timedelta, config: BucketConfig) -> BucketDef:
    """
    Return the bucket an item of the given age belongs to.

    Buckets are checked in configuration order. The first bucket whose
    ``max_age_days`` is at least the age in days wins, as does the first
    catch-all reached. An age equal to a threshold stays in that bucket.

    Args:
        age: Time since the item was last modified.
        config: Validated bucket configuration.

    Returns:
        The matching BucketDef. Falls back to the last bucket when nothing
        matches, which only happens for unvalidated configurations.
    """
    days = age_in_days(age)
    for bucket in config.buckets:
        if bucket.max_age_days is None:
            return bucket
        if days <= bucket.max_age_days:
            return bucket
    return config.buckets[-1]
