from __future__ import annotations

import os
from pathlib import Path

import pytest

from zipedit.errors import ContainmentError, InvalidPathError
from zipedit.paths import (
    ensure_valid_name,
    entry_base_name,
    is_valid_name,
    relative_to,
    split_archive_path,
    to_archive_path,
    without_extension,
)


@pytest.mark.parametrize(
    "parts",
    [
        ("a.txt",),
        ("nested", "b.bin"),
        ("deep", "er", "still", "c"),
        ("with space", "file name.json"),
    ],
)
def test_relative_to_nested_paths(tmp_path: Path, parts: tuple[str, ...]) -> None:
    full = tmp_path.joinpath(*parts)

    rel = relative_to(tmp_path, full)

    assert rel == "/".join(parts)
    assert not rel.startswith("/")
    assert "\\" not in rel
    assert os.path.normpath(f"{tmp_path}/{rel}") == os.path.normpath(full)


def test_relative_to_trims_trailing_separator_on_base(tmp_path: Path) -> None:
    assert relative_to(f"{tmp_path}{os.sep}", tmp_path / "a" / "b.txt") == "a/b.txt"


def test_relative_to_accepts_relative_inputs(tmp_path: Path, monkeypatch) -> None:
    monkeypatch.chdir(tmp_path)
    assert relative_to("src", os.path.join("src", "pkg", "mod.py")) == "pkg/mod.py"


def test_relative_to_same_path_is_empty(tmp_path: Path) -> None:
    assert relative_to(tmp_path, tmp_path) == ""


def test_relative_to_rejects_sibling_with_shared_prefix(tmp_path: Path) -> None:
    with pytest.raises(ContainmentError):
        relative_to(tmp_path / "app", tmp_path / "application" / "x.txt")


def test_relative_to_rejects_dotdot_escape(tmp_path: Path) -> None:
    with pytest.raises(ContainmentError) as excinfo:
        relative_to(tmp_path / "base", tmp_path / "base" / ".." / "other.txt")
    assert excinfo.value.base == os.fspath(tmp_path / "base")


def test_relative_to_rejects_parent_of_base(tmp_path: Path) -> None:
    with pytest.raises(ContainmentError):
        relative_to(tmp_path / "base", tmp_path)


def test_relative_to_is_case_insensitive_by_default(tmp_path: Path) -> None:
    base = str(tmp_path).upper()
    full = tmp_path / "Sub" / "File.TXT"

    assert relative_to(base, full) == "Sub/File.TXT"


@pytest.mark.skipif(os.name == "nt", reason="case folding is enforced by the host on Windows")
def test_relative_to_case_sensitive_option(tmp_path: Path) -> None:
    base = str(tmp_path).upper()
    with pytest.raises(ContainmentError):
        relative_to(base, tmp_path / "Sub" / "File.TXT", case_sensitive=True)


@pytest.mark.parametrize(
    "candidate",
    ["manifest.json", "classes.dex", Path("dir") / "file.txt", "lib/arm64/libfoo.so"],
)
def test_is_valid_name_accepts_file_names(candidate) -> None:
    assert is_valid_name(candidate) is True


@pytest.mark.parametrize("candidate", ["", "   ", "/", "///", "a\0b", "..", ".", None, 42])
def test_is_valid_name_rejects_unusable_names(candidate) -> None:
    assert is_valid_name(candidate) is False


def test_ensure_valid_name_raises() -> None:
    assert ensure_valid_name("ok.txt") == "ok.txt"
    with pytest.raises(InvalidPathError):
        ensure_valid_name("")


def test_without_extension_keeps_directory() -> None:
    assert without_extension(os.path.join("out", "app.apk")) == os.path.join("out", "app")
    assert without_extension("archive.tar.gz") == "archive.tar"
    assert without_extension("app") == "app"


@pytest.mark.parametrize("path", ["", os.sep])
def test_without_extension_requires_file_component(path: str) -> None:
    with pytest.raises(InvalidPathError):
        without_extension(path)


def test_to_archive_path_normalizes_separators() -> None:
    assert to_archive_path("meta", "manifest.json") == "meta/manifest.json"
    assert to_archive_path("\\lib\\arm64\\", "libfoo.so") == "lib/arm64/libfoo.so"
    assert to_archive_path("", "a.txt") == "a.txt"
    assert to_archive_path(None, "./a.txt") == "a.txt"
    assert to_archive_path("/root//dir/", "x") == "root/dir/x"


@pytest.mark.parametrize("parts", [("a/../b",), (), ("/", ""), ("..", "x")])
def test_to_archive_path_rejects_empty_or_escaping(parts) -> None:
    with pytest.raises(InvalidPathError):
        to_archive_path(*parts)


def test_archive_path_helpers() -> None:
    assert split_archive_path("meta/manifest.json") == ("meta", "manifest.json")
    assert split_archive_path("x.txt") == ("", "x.txt")
    assert entry_base_name("res/values/") == "values"
    assert entry_base_name("a/b/c.xml") == "c.xml"
