"""
Module: buckets
Purpose: Bucket definitions and the validated bucket configuration.
"""

from dataclasses import dataclass, field
from typing import Iterable, Optional, Tuple

from ..exceptions import ConfigError

DEFAULT_BASE_FOLDER = "refile"
_RESERVED_NAMES = {".", ".."}


@dataclass(frozen=True)
class BucketDef:
    """
    A named destination category. ``max_age_days=None`` marks a catch-all.
    """

    name: str
    max_age_days: Optional[int] = None

    @property
    def is_catch_all(self) -> bool:
        return self.max_age_days is None


@dataclass(frozen=True)
class BucketConfig:
    """
    Base folder name plus the ordered bucket list.

    Order is the ascending-age search order and the directory creation order.
    """

    base_folder: str = DEFAULT_BASE_FOLDER
    buckets: Tuple[BucketDef, ...] = field(default_factory=tuple)

    def __post_init__(self):
        # Accept any iterable (lists from config files) but store a tuple.
        object.__setattr__(self, "buckets", tuple(self.buckets))

    def bucket_names(self) -> list[str]:
        return [bucket.name for bucket in self.buckets]

    def find(self, name: str) -> BucketDef | None:
        for bucket in self.buckets:
            if bucket.name == name:
                return bucket
        return None

    def validate(self) -> "BucketConfig":
        """
        Check the configuration invariants.

        Returns:
            The same configuration, so callers can chain ``.validate()``.

        Raises:
            ConfigError: When any invariant is violated.
        """
        _validate_folder_name(self.base_folder, label="Base folder")

        if not self.buckets:
            raise ConfigError("At least one bucket must be defined")

        if not any(bucket.is_catch_all for bucket in self.buckets):
            raise ConfigError(
                "At least one bucket must have no age limit (null) to catch all old files"
            )

        seen: set[str] = set()
        for bucket in self.buckets:
            _validate_folder_name(bucket.name, label="Bucket name")
            if bucket.name in seen:
                raise ConfigError(f"Bucket name '{bucket.name}' is defined more than once")
            seen.add(bucket.name)

        previous: int | None = None
        for bucket in self.buckets:
            age = bucket.max_age_days
            if age is None:
                continue
            if isinstance(age, bool) or not isinstance(age, int):
                raise ConfigError(
                    f"Bucket '{bucket.name}' has a non-integer age limit: {age!r}"
                )
            if age < 0:
                raise ConfigError(f"Bucket '{bucket.name}' has a negative age limit: {age}")
            if previous is not None and age <= previous:
                raise ConfigError(f"Bucket ages must be in ascending order: {age} <= {previous}")
            previous = age
        return self


def _validate_folder_name(name: str, *, label: str) -> None:
    if not isinstance(name, str) or not name:
        raise ConfigError(f"{label} cannot be empty")
    if "/" in name or "\\" in name:
        raise ConfigError(f"{label} '{name}' contains invalid characters")
    if name in _RESERVED_NAMES:
        raise ConfigError(f"{label} '{name}' is not a usable directory name")


def default_buckets() -> Tuple[BucketDef, ...]:
    return (
        BucketDef("last-week", 7),
        BucketDef("current-month", 28),
        BucketDef("last-months", 92),
        BucketDef("old-stuff", None),
    )


def default_config() -> BucketConfig:
    """Return the built-in configuration."""
    return BucketConfig(base_folder=DEFAULT_BASE_FOLDER, buckets=default_buckets())


def make_config(base_folder: str, buckets: Iterable[BucketDef]) -> BucketConfig:
    """Build and validate a configuration in one step."""
    return BucketConfig(base_folder=base_folder, buckets=tuple(buckets)).validate()
