import pytest

from refile import scanner
from refile.exceptions import ScanError
from refile.models.buckets import BucketDef, default_config, make_config


def test_children_are_candidates_and_directories_stay_opaque(tmp_path):
    (tmp_path / "a.txt").write_text("a")
    project = tmp_path / "project"
    (project / "deep").mkdir(parents=True)
    (project / "deep" / "inner.txt").write_text("x")

    items = scanner.collect_items_to_process(str(tmp_path), str(tmp_path / "refile"), default_config())

    assert items == [str(tmp_path / "a.txt"), str(project)]


def test_bucket_contents_are_expanded_one_level(tmp_path):
    config = default_config()
    base = tmp_path / "refile"
    (base / "last-week" / "folder").mkdir(parents=True)
    (base / "last-week" / "folder" / "nested.txt").write_text("n")
    (base / "old-stuff").mkdir()
    (base / "old-stuff" / "ancient.txt").write_text("old")
    (tmp_path / "new.txt").write_text("new")

    items = scanner.collect_items_to_process(str(tmp_path), str(base), config)

    assert items == [
        str(tmp_path / "new.txt"),
        str(base / "last-week" / "folder"),
        str(base / "old-stuff" / "ancient.txt"),
    ]


def test_stray_items_under_base_are_candidates(tmp_path):
    config = default_config()
    base = tmp_path / "refile"
    (base / "last-week").mkdir(parents=True)
    (base / "renamed-bucket").mkdir()
    (base / "renamed-bucket" / "keep.txt").write_text("k")
    (base / "dropped.txt").write_text("d")

    items = scanner.collect_items_to_process(str(tmp_path), str(base), config)

    assert str(base / "renamed-bucket") in items
    assert str(base / "dropped.txt") in items
    assert str(base / "renamed-bucket" / "keep.txt") not in items
    assert str(base) not in items


def test_custom_base_folder_name(tmp_path):
    config = make_config("sorted", [BucketDef("new", 3), BucketDef("old", None)])
    base = tmp_path / "sorted"
    (base / "old").mkdir(parents=True)
    (base / "old" / "x.txt").write_text("x")
    # A folder named like the default base is just another item here.
    (tmp_path / "refile").mkdir()

    items = scanner.collect_items_to_process(str(tmp_path), str(base), config)

    assert items == [str(tmp_path / "refile"), str(base / "old" / "x.txt")]


def test_base_in_separate_target_is_not_scanned(tmp_path):
    source = tmp_path / "source"
    source.mkdir()
    (source / "a.txt").write_text("a")
    target_base = tmp_path / "target" / "refile"
    (target_base / "last-week").mkdir(parents=True)
    (target_base / "last-week" / "b.txt").write_text("b")

    items = scanner.collect_items_to_process(str(source), str(target_base), default_config())

    assert items == [str(source / "a.txt")]


def test_missing_source_raises(tmp_path):
    with pytest.raises(ScanError):
        scanner.collect_items_to_process(
            str(tmp_path / "missing"), str(tmp_path / "refile"), default_config()
        )


def test_empty_directory(tmp_path):
    assert scanner.collect_items_to_process(str(tmp_path), str(tmp_path / "refile"), default_config()) == []
