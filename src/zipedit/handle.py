"""Scoped access to a single ZIP container.

:class:`ArchiveHandle` is opened for one operation and closed before that
operation returns. In update mode the handle records edits (deletions and new
entries) and, on close, writes a fresh container beside the original and
swaps it in with :func:`os.replace`. Surviving entries keep their order and
compression method; new entries are appended in the order they were written.

Sources of new entries are copied into a private staging directory as soon as
they are written, so an unreadable source fails at the call that named it and
not later during the commit.
"""

from __future__ import annotations

import logging
import os
import shutil
import stat
import struct
import tempfile
import zipfile
from dataclasses import dataclass
from pathlib import Path
from types import TracebackType
from typing import Literal

from .errors import ArchiveIOError, ArchiveNotFoundError, CorruptArchiveError

logger = logging.getLogger(__name__)

HandleMode = Literal["r", "a"]


@dataclass
class _Entry:
    name: str
    info: zipfile.ZipInfo | None = None
    staged: Path | None = None


_ZIP64_EXTRA_ID = 0x0001


def _strip_zip64_extra(extra: bytes) -> bytes:
    """Drop the ZIP64 size record; :mod:`zipfile` writes a fresh one when needed."""

    kept = bytearray()
    offset = 0
    while offset + 4 <= len(extra):
        header_id, size = struct.unpack_from("<HH", extra, offset)
        end = offset + 4 + size
        if header_id != _ZIP64_EXTRA_ID:
            kept += extra[offset:end]
        offset = end
    return bytes(kept)


def _clone_info(info: zipfile.ZipInfo) -> zipfile.ZipInfo:
    clone = zipfile.ZipInfo(info.filename, info.date_time)
    clone.compress_type = info.compress_type
    clone.comment = info.comment
    clone.extra = _strip_zip64_extra(info.extra)
    clone.create_system = info.create_system
    clone.create_version = info.create_version
    clone.extract_version = info.extract_version
    clone.flag_bits = info.flag_bits
    clone.internal_attr = info.internal_attr
    clone.external_attr = info.external_attr
    return clone


class ArchiveHandle:
    def __init__(
        self,
        path: str | os.PathLike[str],
        mode: HandleMode = "r",
        *,
        compression: int = zipfile.ZIP_DEFLATED,
        compresslevel: int | None = None,
    ) -> None:
        if mode not in ("r", "a"):
            raise ValueError(f"Unsupported archive mode: {mode!r}")
        self.path = Path(path)
        self.mode = mode
        self.compression = compression
        self.compresslevel = compresslevel
        self._zip: zipfile.ZipFile | None = None
        self._entries: list[_Entry] = []
        self._staging: Path | None = None
        self._staged_count = 0
        self._dirty = False

    def __enter__(self) -> ArchiveHandle:
        self.open()
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()

    @property
    def writable(self) -> bool:
        return self.mode == "a"

    @property
    def entries(self) -> list[zipfile.ZipInfo]:
        """Current entries in enumeration order.

        Entries written through this handle are reported with a synthetic
        :class:`zipfile.ZipInfo` until the handle is committed.
        """

        result: list[zipfile.ZipInfo] = []
        for entry in self._entries:
            if entry.info is not None:
                result.append(entry.info)
            else:
                result.append(zipfile.ZipInfo(entry.name))
        return result

    def names(self) -> list[str]:
        return [entry.name for entry in self._entries]

    def open(self) -> None:
        if self._zip is not None:
            return
        if not self.path.is_file():
            raise ArchiveNotFoundError(self.path)
        try:
            self._zip = zipfile.ZipFile(self.path, "r")
        except zipfile.BadZipFile as exc:
            raise CorruptArchiveError(self.path, f"Not a valid ZIP container ({exc})") from exc
        except OSError as exc:
            raise ArchiveIOError(self.path, exc.strerror or str(exc)) from exc
        self._entries = [_Entry(info.filename, info=info) for info in self._zip.infolist()]
        logger.debug("Opened %s (%s) with %d entries", self.path, self.mode, len(self._entries))

    def _require_open(self) -> zipfile.ZipFile:
        if self._zip is None:
            raise ValueError(f"Archive handle for {self.path} is not open")
        return self._zip

    def _require_writable(self) -> None:
        self._require_open()
        if not self.writable:
            raise ValueError(f"Archive {self.path} was opened read-only")

    def delete(self, name: str) -> bool:
        """Remove every entry named exactly ``name``."""

        self._require_writable()
        remaining = [entry for entry in self._entries if entry.name != name]
        removed = len(remaining) != len(self._entries)
        if removed:
            for entry in self._entries:
                if entry.name == name and entry.staged is not None:
                    entry.staged.unlink(missing_ok=True)
            self._entries = remaining
            self._dirty = True
            logger.debug("Removed entry %s from %s", name, self.path)
        return removed

    def write_file(self, source: str | os.PathLike[str], arcname: str) -> None:
        """Replace or create ``arcname`` with the contents of ``source``."""

        self._require_writable()
        source_path = Path(source)
        if not source_path.is_file():
            raise ArchiveIOError(source_path, "Source file not found")

        if self._staging is None:
            self._staging = Path(tempfile.mkdtemp(prefix="zipedit-"))
        self._staged_count += 1
        staged = self._staging / f"{self._staged_count:06d}"
        try:
            shutil.copy2(source_path, staged)
        except OSError as exc:
            raise ArchiveIOError(source_path, exc.strerror or str(exc)) from exc

        self.delete(arcname)
        self._entries.append(_Entry(arcname, staged=staged))
        self._dirty = True
        logger.debug("Staged %s as %s in %s", source_path, arcname, self.path)

    def extract(self, info: zipfile.ZipInfo, target: str | os.PathLike[str]) -> Path:
        """Write the bytes of ``info`` to ``target``, overwriting it."""

        archive = self._require_open()
        target_path = Path(target)
        try:
            target_path.parent.mkdir(parents=True, exist_ok=True)
            with archive.open(info) as source, target_path.open("wb") as dest:
                shutil.copyfileobj(source, dest)
        except zipfile.BadZipFile as exc:
            raise CorruptArchiveError(self.path, f"Cannot read entry {info.filename} ({exc})") from exc
        except OSError as exc:
            raise ArchiveIOError(target_path, exc.strerror or str(exc)) from exc
        logger.debug("Extracted %s to %s", info.filename, target_path)
        return target_path

    def _copy_entry(self, info: zipfile.ZipInfo, out: zipfile.ZipFile) -> None:
        archive = self._require_open()
        clone = _clone_info(info)
        if info.is_dir():
            out.writestr(clone, b"")
            return
        force_zip64 = info.file_size > zipfile.ZIP64_LIMIT
        with archive.open(info) as source, out.open(clone, "w", force_zip64=force_zip64) as dest:
            shutil.copyfileobj(source, dest)

    def _commit(self) -> None:
        fd, tmp_name = tempfile.mkstemp(
            prefix=f".{self.path.name}.", suffix=".tmp", dir=self.path.parent
        )
        os.close(fd)
        tmp = Path(tmp_name)
        try:
            with zipfile.ZipFile(
                tmp,
                "w",
                compression=self.compression,
                compresslevel=self.compresslevel,
                strict_timestamps=False,
            ) as out:
                for entry in self._entries:
                    if entry.staged is not None:
                        out.write(entry.staged, entry.name)
                    elif entry.info is not None:
                        self._copy_entry(entry.info, out)
            # mkstemp creates 0600; keep the archive's own permission bits
            os.chmod(tmp, stat.S_IMODE(self.path.stat().st_mode))
            if self._zip is not None:
                self._zip.close()
                self._zip = None
            os.replace(tmp, self.path)
        except zipfile.BadZipFile as exc:
            tmp.unlink(missing_ok=True)
            raise CorruptArchiveError(self.path, f"Cannot rewrite archive ({exc})") from exc
        except OSError as exc:
            tmp.unlink(missing_ok=True)
            raise ArchiveIOError(self.path, exc.strerror or str(exc)) from exc
        except BaseException:
            tmp.unlink(missing_ok=True)
            raise
        logger.info("Committed %d entries to %s", len(self._entries), self.path)

    def close(self) -> None:
        """Flush pending edits and release every resource held by the handle."""

        try:
            if self._dirty and self._zip is not None:
                self._commit()
        finally:
            self._dirty = False
            if self._zip is not None:
                self._zip.close()
                self._zip = None
            if self._staging is not None:
                shutil.rmtree(self._staging, ignore_errors=True)
                self._staging = None
