from __future__ import annotations

import zipfile
from pathlib import Path

import pytest

from zipedit import archive
from zipedit.errors import ContainmentError, EntryNotFoundError


def _snapshot(root: Path) -> dict[str, bytes]:
    return {
        path.relative_to(root).as_posix(): path.read_bytes()
        for path in sorted(root.rglob("*"))
        if path.is_file()
    }


def test_extract_file_writes_base_name_and_overwrites(make_archive, tmp_path):
    path = make_archive({"lib/arm64/libapp.so": b"\x7fELF"})
    dest = tmp_path / "out"
    dest.mkdir()
    (dest / "libapp.so").write_bytes(b"stale")

    target = archive.extract_file(path, "libapp", dest)

    assert target == dest / "libapp.so"
    assert target.read_bytes() == b"\x7fELF"


def test_extract_file_creates_destination(make_archive, tmp_path):
    path = make_archive({"a.txt": "a"})

    target = archive.extract_file(path, "a.txt", tmp_path / "new" / "dir")

    assert target is not None
    assert target.read_text(encoding="utf-8") == "a"


def test_extract_file_skips_directory_entries(make_archive, tmp_path):
    path = make_archive({"assets/": b"", "assets/data.bin": b"data"})

    target = archive.extract_file(path, "assets", tmp_path / "out")

    assert target == tmp_path / "out" / "data.bin"


def test_extract_file_no_match_lenient_and_strict(make_archive, tmp_path):
    path = make_archive({"a.txt": "a"})

    assert archive.extract_file(path, "missing", tmp_path / "out") is None
    with pytest.raises(EntryNotFoundError):
        archive.extract_file(path, "missing", tmp_path / "out", strict=True)


def test_add_directory_tree_then_extract_all_round_trips(tmp_path):
    src = tmp_path / "src"
    files = {
        "AndroidManifest.xml": b"<manifest/>",
        "res/values/strings.xml": b"<resources/>",
        "res/drawable/icon.png": bytes(range(256)),
        "smali/com/app/Main.smali": b".class Lcom/app/Main;",
    }
    for rel, content in files.items():
        target = src / rel
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_bytes(content)
    app_zip = archive.create_archive(tmp_path / "app.zip")

    archive.add_directory_tree(app_zip, src)
    archive.extract_all(app_zip, tmp_path / "restored")

    assert _snapshot(tmp_path / "restored") == _snapshot(src)


def test_extract_all_flatten_collision_last_wins(make_archive, tmp_path):
    path = make_archive({"a/x.txt": "from a", "b/x.txt": "from b"})
    dest = tmp_path / "flat"

    written = archive.extract_all(path, dest, flatten=True)

    assert [p.name for p in dest.iterdir()] == ["x.txt"]
    assert (dest / "x.txt").read_text(encoding="utf-8") == "from b"
    assert written == [dest / "x.txt", dest / "x.txt"]


def test_extract_all_creates_directory_entries(make_archive, tmp_path):
    path = make_archive({"empty/": b"", "full/f.txt": "f"})

    archive.extract_all(path, tmp_path / "out")

    assert (tmp_path / "out" / "empty").is_dir()
    assert (tmp_path / "out" / "full" / "f.txt").read_text(encoding="utf-8") == "f"


def test_extract_all_rejects_entries_outside_destination(tmp_path):
    evil = tmp_path / "evil.zip"
    with zipfile.ZipFile(evil, "w") as z:
        z.writestr("../evil.txt", "bad")

    with pytest.raises(ContainmentError):
        archive.extract_all(evil, tmp_path / "out")
    assert not (tmp_path / "evil.txt").exists()


def test_extract_all_flatten_neutralises_traversal(tmp_path):
    evil = tmp_path / "evil.zip"
    with zipfile.ZipFile(evil, "w") as z:
        z.writestr("../../evil.txt", "bad")

    archive.extract_all(evil, tmp_path / "out", flatten=True)

    assert (tmp_path / "out" / "evil.txt").exists()


def test_extract_directory_filters_by_folder(make_archive, tmp_path):
    path = make_archive(
        {
            "res/values/strings.xml": "s",
            "res/layout/main.xml": "m",
            "assets/res/readme.txt": "r",
            "classes.dex": "d",
        }
    )

    archive.extract_directory(path, "res/", tmp_path / "out")

    assert _snapshot(tmp_path / "out") == {
        "res/values/strings.xml": b"s",
        "res/layout/main.xml": b"m",
        "assets/res/readme.txt": b"r",
    }


def test_extract_directory_flatten(make_archive, tmp_path):
    path = make_archive({"lib/arm64/a.so": "a", "lib/x86/b.so": "b", "other.txt": "o"})

    archive.extract_directory(path, "lib/", tmp_path / "libs", flatten=True)

    assert _snapshot(tmp_path / "libs") == {"a.so": b"a", "b.so": b"b"}
