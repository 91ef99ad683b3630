"""Tests for data utility functions."""

from pathlib import Path

import pytest

from cardiomegaly_prediction.data.utils import (
    build_class_to_idx,
    get_files,
    list_class_dirs,
)


class TestGetFiles:
    def test_no_filter_returns_every_file(self, tmp_path: Path) -> None:
        (tmp_path / "a.jpg").touch()
        (tmp_path / "b.txt").touch()
        (tmp_path / "sub").mkdir()

        result = get_files(tmp_path)
        assert [p.name for p in result] == ["a.jpg", "b.txt"]

    def test_finds_files_with_matching_extension(self, tmp_path: Path) -> None:
        (tmp_path / "a.jpg").touch()
        (tmp_path / "b.jpeg").touch()
        (tmp_path / "c.txt").touch()

        result = get_files(tmp_path, (".jpg", ".jpeg"))
        names = [p.name for p in result]
        assert "a.jpg" in names
        assert "b.jpeg" in names
        assert "c.txt" not in names

    def test_non_recursive_by_default(self, tmp_path: Path) -> None:
        sub = tmp_path / "sub"
        sub.mkdir()
        (tmp_path / "top.jpg").touch()
        (sub / "deep.jpg").touch()

        assert [p.name for p in get_files(tmp_path)] == ["top.jpg"]
        assert len(get_files(tmp_path, recursive=True)) == 2

    def test_returns_sorted_paths(self, tmp_path: Path) -> None:
        for name in ("c.jpg", "a.jpg", "b.jpg"):
            (tmp_path / name).touch()

        result = get_files(tmp_path)
        assert result == sorted(result)

    def test_empty_directory_returns_empty_list(self, tmp_path: Path) -> None:
        assert get_files(tmp_path) == []

    def test_case_insensitive_extension_match(self, tmp_path: Path) -> None:
        (tmp_path / "img.JPG").touch()
        (tmp_path / "img2.Jpeg").touch()

        assert len(get_files(tmp_path, (".jpg", ".jpeg"))) == 2


class TestClassDirs:
    def test_sorted_by_name_and_files_ignored(self, tmp_path: Path) -> None:
        for name in ("zeta", "alpha", "mid"):
            (tmp_path / name).mkdir()
        (tmp_path / "README.txt").touch()

        assert [p.name for p in list_class_dirs(tmp_path)] == ["alpha", "mid", "zeta"]

    def test_missing_root_raises(self, tmp_path: Path) -> None:
        with pytest.raises(FileNotFoundError):
            list_class_dirs(tmp_path / "missing")

    def test_file_root_raises(self, tmp_path: Path) -> None:
        f = tmp_path / "file.jpg"
        f.touch()
        with pytest.raises(NotADirectoryError):
            list_class_dirs(f)

    def test_class_to_idx_follows_sorted_names(self, tmp_path: Path) -> None:
        (tmp_path / "no_cardiomegaly").mkdir()
        (tmp_path / "cardiomegaly").mkdir()

        assert build_class_to_idx(tmp_path) == {
            "cardiomegaly": 0,
            "no_cardiomegaly": 1,
        }

    def test_empty_class_dir_keeps_its_index(self, tmp_path: Path) -> None:
        for name in ("a", "b", "c"):
            (tmp_path / name).mkdir()
        (tmp_path / "c" / "x.jpg").touch()

        assert build_class_to_idx(tmp_path) == {"a": 0, "b": 1, "c": 2}
