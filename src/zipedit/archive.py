"""In-place ZIP archive operations.

Every function here opens its own :class:`~zipedit.handle.ArchiveHandle`,
does its work and closes the handle before returning. Nothing is cached
between calls.

Entry lookup follows one rule everywhere: entries are scanned in archive
order and the first one satisfying the predicate wins. The default predicate
is substring containment on the full entry path, so ``"lib"`` matches both
``lib/a.so`` and ``mylib/b.txt``. Pass ``exact=True`` to require the full
entry path to equal the predicate (or ``folder/predicate`` when a folder is
given).

Lookups that find nothing are not errors for :func:`find_entry`. For
:func:`remove_file` and :func:`extract_file` they are logged no-ops unless
``strict=True``, in which case :class:`~zipedit.errors.EntryNotFoundError` is
raised.
"""

from __future__ import annotations

import logging
import os
import zipfile
from collections.abc import Iterable, Iterator
from datetime import datetime
from pathlib import Path

from .errors import ArchiveIOError, EntryNotFoundError
from .handle import ArchiveHandle
from .models import EntryInfo, EntryMatch
from .paths import ARCHIVE_SEP, ensure_valid_name, entry_base_name, relative_to, to_archive_path

logger = logging.getLogger(__name__)

COMPRESSION_NAMES: dict[int, str] = {
    zipfile.ZIP_STORED: "stored",
    zipfile.ZIP_DEFLATED: "deflated",
    zipfile.ZIP_BZIP2: "bzip2",
    zipfile.ZIP_LZMA: "lzma",
}

PathArg = str | os.PathLike[str]


def _normalize_predicate(value: str) -> str:
    return value.replace("\\", ARCHIVE_SEP).lstrip(ARCHIVE_SEP)


def entry_matches(name: str, predicate: str, folder: str = "", *, exact: bool = False) -> bool:
    """Return ``True`` when the entry path ``name`` satisfies the predicates."""

    if exact:
        wanted = _normalize_predicate(predicate)
        if folder:
            prefix = _normalize_predicate(folder).rstrip(ARCHIVE_SEP)
            return name == f"{prefix}{ARCHIVE_SEP}{wanted}"
        return name == wanted
    return predicate in name and (not folder or folder in name)


def _first_match(
    entries: Iterable[zipfile.ZipInfo],
    predicate: str,
    folder: str = "",
    *,
    exact: bool = False,
    files_only: bool = False,
) -> zipfile.ZipInfo | None:
    for info in entries:
        if files_only and info.is_dir():
            continue
        if entry_matches(info.filename, predicate, folder, exact=exact):
            return info
    return None


def create_archive(archive: PathArg, *, overwrite: bool = False) -> Path:
    """Create an empty ZIP container at ``archive``.

    Update operations require the container to exist beforehand; this is the
    supported way to produce one.
    """

    path = Path(archive)
    if path.exists() and not overwrite:
        raise ArchiveIOError(path, "Archive already exists")
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        with zipfile.ZipFile(path, "w"):
            pass
    except OSError as exc:
        raise ArchiveIOError(path, exc.strerror or str(exc)) from exc
    logger.info("Created empty archive %s", path)
    return path


def _entry_timestamp(info: zipfile.ZipInfo) -> datetime | None:
    try:
        return datetime(*info.date_time)
    except ValueError:
        # zeroed DOS dates are common in tool-generated archives
        return None


def list_entries(archive: PathArg) -> list[EntryInfo]:
    with ArchiveHandle(archive) as handle:
        infos = handle.entries
    return [
        EntryInfo(
            name=info.filename,
            is_dir=info.is_dir(),
            file_size=info.file_size,
            compress_size=info.compress_size,
            compression=COMPRESSION_NAMES.get(info.compress_type, str(info.compress_type)),
            modified=_entry_timestamp(info),
        )
        for info in infos
    ]


def find_entry(archive: PathArg, name: str, folder: str = "", *, exact: bool = False) -> EntryMatch:
    """Return the first entry whose path satisfies ``name`` (and ``folder``)."""

    with ArchiveHandle(archive) as handle:
        info = _first_match(handle.entries, name, folder, exact=exact)
    if info is None:
        return EntryMatch.missing()
    return EntryMatch(name=info.filename, found=True)


def exists(archive: PathArg, name: str, folder: str = "", *, exact: bool = False) -> bool:
    return find_entry(archive, name, folder, exact=exact).found


def get_file_name(archive: PathArg, name: str, folder: str = "", *, exact: bool = False) -> str:
    """Base name of the first matching entry, or ``""`` when nothing matches."""

    return find_entry(archive, name, folder, exact=exact).file_name


def get_file_name_without_extension(
    archive: PathArg, name: str, folder: str = "", *, exact: bool = False
) -> str:
    return find_entry(archive, name, folder, exact=exact).stem


def _archive_path_for(source_file: PathArg, target_folder: str | None) -> str:
    base_name = ensure_valid_name(os.path.basename(os.fspath(source_file)))
    return to_archive_path(target_folder, base_name)


def add_file(
    archive: PathArg,
    source_file: PathArg,
    target_folder: str | None = "",
    *,
    compression: int = zipfile.ZIP_DEFLATED,
    compresslevel: int | None = None,
) -> str:
    """Store ``source_file`` as ``target_folder/<base name>`` and return that path.

    Any entry already stored under the same path is removed first, so the
    archive never holds two entries with one name.
    """

    arcname = _archive_path_for(source_file, target_folder)
    with ArchiveHandle(
        archive, "a", compression=compression, compresslevel=compresslevel
    ) as handle:
        handle.write_file(source_file, arcname)
    logger.info("Added %s to %s as %s", source_file, archive, arcname)
    return arcname


def remove_file(
    archive: PathArg, name: str, *, exact: bool = False, strict: bool = False
) -> EntryMatch:
    """Delete the first entry matching ``name`` and return what was removed."""

    with ArchiveHandle(archive, "a") as handle:
        info = _first_match(handle.entries, name, exact=exact)
        if info is None:
            if strict:
                raise EntryNotFoundError(archive, name)
            logger.warning("No entry matching '%s' in %s; nothing removed", name, archive)
            return EntryMatch.missing()
        handle.delete(info.filename)
    logger.info("Removed %s from %s", info.filename, archive)
    return EntryMatch(name=info.filename, found=True)


def update_file(
    archive: PathArg,
    source_file: PathArg,
    target_folder: str | None = "",
    *,
    compression: int = zipfile.ZIP_DEFLATED,
    compresslevel: int | None = None,
) -> str:
    """Remove the entry at the computed archive path, then add ``source_file``.

    Repeating the call with the same arguments leaves the archive unchanged.
    """

    arcname = _archive_path_for(source_file, target_folder)
    remove_file(archive, arcname, exact=True)
    return add_file(
        archive,
        source_file,
        target_folder,
        compression=compression,
        compresslevel=compresslevel,
    )


def extract_file(
    archive: PathArg,
    name: str,
    destination_dir: PathArg,
    *,
    exact: bool = False,
    strict: bool = False,
) -> Path | None:
    """Extract the first matching file entry to ``destination_dir/<base name>``.

    An existing file at the destination is overwritten.
    """

    with ArchiveHandle(archive) as handle:
        info = _first_match(handle.entries, name, exact=exact, files_only=True)
        if info is None:
            if strict:
                raise EntryNotFoundError(archive, name)
            logger.warning("No entry matching '%s' in %s; nothing extracted", name, archive)
            return None
        target = Path(destination_dir) / entry_base_name(info.filename)
        return handle.extract(info, target)


def _extract_entries(
    handle: ArchiveHandle,
    infos: Iterable[zipfile.ZipInfo],
    destination_dir: PathArg,
    flatten: bool,
) -> list[Path]:
    destination = Path(destination_dir)
    try:
        destination.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        raise ArchiveIOError(destination, exc.strerror or str(exc)) from exc

    written: list[Path] = []
    for info in infos:
        if flatten:
            # entries sharing a base name overwrite each other; last one wins
            if info.is_dir():
                continue
            target = destination / entry_base_name(info.filename)
        else:
            target = destination / info.filename
            relative_to(destination, target, case_sensitive=True)
            if info.is_dir():
                target.mkdir(parents=True, exist_ok=True)
                continue
        written.append(handle.extract(info, target))
    logger.info("Extracted %d entries from %s to %s", len(written), handle.path, destination)
    return written


def extract_all(archive: PathArg, destination_dir: PathArg, flatten: bool = False) -> list[Path]:
    """Extract every entry below ``destination_dir``.

    With ``flatten=True`` folders are dropped and each file lands directly in
    ``destination_dir``; files sharing a base name overwrite one another in
    archive order.

    Raises:
        ContainmentError: an entry would be written outside ``destination_dir``.
    """

    with ArchiveHandle(archive) as handle:
        return _extract_entries(handle, handle.entries, destination_dir, flatten)


def extract_directory(
    archive: PathArg, folder: str, destination_dir: PathArg, flatten: bool = False
) -> list[Path]:
    """Like :func:`extract_all`, limited to entries whose path contains ``folder``."""

    with ArchiveHandle(archive) as handle:
        infos = [info for info in handle.entries if folder in info.filename]
        return _extract_entries(handle, infos, destination_dir, flatten)


def _walk_files(root: Path) -> Iterator[Path]:
    def _raise(exc: OSError) -> None:
        raise ArchiveIOError(exc.filename or root, exc.strerror or str(exc)) from exc

    for current, dirs, files in os.walk(root, onerror=_raise):
        dirs.sort()
        for name in sorted(files):
            yield Path(current) / name


def add_directory_tree(
    archive: PathArg,
    source_dir: PathArg,
    target_folder: str | None = "",
    *,
    compression: int = zipfile.ZIP_DEFLATED,
    compresslevel: int | None = None,
) -> list[str]:
    """Add every file below ``source_dir`` keeping its relative location.

    Each file is stored at ``target_folder/<path relative to source_dir>``,
    replacing an existing entry at that path. The walk stops at the first
    file that cannot be stored; files stored before it are kept.
    """

    root = Path(source_dir)
    if not root.is_dir():
        raise ArchiveIOError(root, "Source directory not found")

    added: list[str] = []
    with ArchiveHandle(
        archive, "a", compression=compression, compresslevel=compresslevel
    ) as handle:
        for path in _walk_files(root):
            arcname = to_archive_path(target_folder, relative_to(root, path, case_sensitive=True))
            handle.write_file(path, arcname)
            added.append(arcname)
    logger.info("Added %d files from %s to %s", len(added), root, archive)
    return added
