import dataclasses

import pytest

from refile.exceptions import ConfigError
from refile.models.buckets import BucketConfig, BucketDef, default_config, make_config


def test_default_config_is_valid():
    config = default_config()
    assert config.base_folder == "refile"
    assert config.bucket_names() == ["last-week", "current-month", "last-months", "old-stuff"]
    assert [b.max_age_days for b in config.buckets] == [7, 28, 92, None]
    assert config.validate() is config


def test_bucket_def_is_immutable():
    bucket = BucketDef("week", 7)
    with pytest.raises(dataclasses.FrozenInstanceError):
        bucket.name = "other"


def test_buckets_are_stored_as_tuple():
    config = BucketConfig("base", [BucketDef("old", None)])
    assert isinstance(config.buckets, tuple)


def test_validate_no_buckets():
    with pytest.raises(ConfigError, match="At least one bucket"):
        BucketConfig("test", ()).validate()


def test_validate_requires_catch_all():
    with pytest.raises(ConfigError, match="no age limit"):
        make_config("test", [BucketDef("a", 7), BucketDef("b", 14)])


def test_validate_ages_must_ascend():
    with pytest.raises(ConfigError, match="ascending"):
        make_config("test", [BucketDef("a", 14), BucketDef("b", 7), BucketDef("c", None)])


def test_validate_equal_ages_rejected():
    with pytest.raises(ConfigError, match="ascending"):
        make_config("test", [BucketDef("a", 7), BucketDef("b", 7), BucketDef("c", None)])


def test_validate_catch_all_need_not_be_last():
    config = make_config("test", [BucketDef("a", 1), BucketDef("rest", None), BucketDef("b", 30)])
    assert config.find("rest").is_catch_all


@pytest.mark.parametrize("name", ["", "a/b", "a\\b", ".", ".."])
def test_validate_rejects_bad_bucket_names(name):
    with pytest.raises(ConfigError):
        make_config("test", [BucketDef(name, 7), BucketDef("old", None)])


@pytest.mark.parametrize("base", ["", "x/y", ".."])
def test_validate_rejects_bad_base_folder(base):
    with pytest.raises(ConfigError):
        make_config(base, [BucketDef("old", None)])


def test_validate_rejects_duplicate_names():
    with pytest.raises(ConfigError, match="more than once"):
        make_config("test", [BucketDef("same", 3), BucketDef("same", None)])


def test_validate_rejects_negative_and_non_integer_ages():
    with pytest.raises(ConfigError, match="negative"):
        make_config("test", [BucketDef("a", -1), BucketDef("old", None)])
    with pytest.raises(ConfigError, match="non-integer"):
        make_config("test", [BucketDef("a", True), BucketDef("old", None)])


def test_zero_day_bucket_allowed():
    config = make_config("test", [BucketDef("today", 0), BucketDef("old", None)])
    assert config.find("today").max_age_days == 0
    assert config.find("missing") is None
