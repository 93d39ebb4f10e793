"""Path helpers shared by the archive operations.

Everything in this module is a pure function of its arguments. Filesystem
paths are accepted as ``str`` or ``os.PathLike``; archive paths are always
plain ``str`` values separated by ``/``.

``relative_to`` compares paths case-insensitively unless asked otherwise,
which mirrors case-insensitive host filesystems. Callers targeting a
case-sensitive layout pass ``case_sensitive=True`` (the CLI reads the
``case_sensitive`` setting from :mod:`zipedit.config`).
"""

from __future__ import annotations

import os
from pathlib import PurePath

from .errors import ContainmentError, InvalidPathError

ARCHIVE_SEP = "/"

_WINDOWS_INVALID_CHARS = frozenset('<>:"|?*')


def _final_component(value: str) -> str:
    normalized = value.replace("\\", ARCHIVE_SEP).rstrip(ARCHIVE_SEP)
    return normalized.rsplit(ARCHIVE_SEP, 1)[-1]


def is_valid_name(candidate: object) -> bool:
    """Return ``True`` when ``candidate`` can be used as a file name.

    Failure is reported through the return value; this function never raises.
    """

    try:
        value = os.fspath(candidate)  # type: ignore[arg-type]
    except TypeError:
        return False
    if isinstance(value, bytes):
        try:
            value = os.fsdecode(value)
        except UnicodeDecodeError:
            return False

    if not value.strip() or "\0" in value:
        return False

    name = _final_component(value)
    if not name.strip() or name in (".", ".."):
        return False

    if os.name == "nt":
        if any(ch in _WINDOWS_INVALID_CHARS or ord(ch) < 32 for ch in name):
            return False
    return True


def ensure_valid_name(candidate: object) -> str:
    """Return ``candidate`` as a string or raise :class:`InvalidPathError`."""

    if not is_valid_name(candidate):
        raise InvalidPathError(f"Invalid file name: {candidate!r}")
    return os.fsdecode(os.fspath(candidate))  # type: ignore[arg-type]


def without_extension(path: str | os.PathLike[str]) -> str:
    """Return ``path`` with the final extension removed from its file name.

    The directory part is preserved as-is, so ``"out/app.apk"`` becomes
    ``"out/app"``. Raises :class:`InvalidPathError` for an empty path or a
    filesystem root, neither of which has a file name to strip.
    """

    value = os.fspath(path)
    if not value:
        raise InvalidPathError("Path is empty")

    directory = os.path.dirname(value)
    if directory == value:
        raise InvalidPathError(f"Path has no file name component: {value}")

    stem, _ = os.path.splitext(os.path.basename(value))
    return os.path.join(directory, stem)


def _fold(part: str, case_sensitive: bool) -> str:
    part = os.path.normcase(part)
    return part if case_sensitive else part.casefold()


def relative_to(
    base_path: str | os.PathLike[str],
    full_path: str | os.PathLike[str],
    *,
    case_sensitive: bool = False,
) -> str:
    """Return ``full_path`` relative to ``base_path`` as an archive path.

    Both inputs are made absolute first so ``..`` segments cannot escape the
    base. Containment is checked component by component; ``/a/b`` does not
    contain ``/a/bc``. The result has no leading separator, uses ``/``
    throughout and keeps the casing of ``full_path``.

    Raises:
        ContainmentError: ``full_path`` does not lie under ``base_path``.
    """

    base_parts = PurePath(os.path.abspath(base_path)).parts
    full_parts = PurePath(os.path.abspath(full_path)).parts

    if len(full_parts) < len(base_parts):
        raise ContainmentError(base_path, full_path)
    for base_part, full_part in zip(base_parts, full_parts):
        if _fold(base_part, case_sensitive) != _fold(full_part, case_sensitive):
            raise ContainmentError(base_path, full_path)

    return ARCHIVE_SEP.join(full_parts[len(base_parts) :])


def to_archive_path(*parts: str | os.PathLike[str] | None) -> str:
    """Join ``parts`` into a normalized archive path.

    Backslashes become ``/``; empty and ``.`` segments are dropped, which also
    removes any leading separator. ``..`` segments are rejected.
    """

    segments: list[str] = []
    for part in parts:
        if part is None:
            continue
        text = os.fspath(part).replace("\\", ARCHIVE_SEP)
        for segment in text.split(ARCHIVE_SEP):
            if segment in ("", "."):
                continue
            if segment == "..":
                raise InvalidPathError(f"Archive path may not contain '..': {text}")
            segments.append(segment)

    if not segments:
        raise InvalidPathError("Archive path is empty")
    return ARCHIVE_SEP.join(segments)


def entry_base_name(name: str) -> str:
    """Return the last segment of an archive path (directories included)."""

    return _final_component(name)


def split_archive_path(name: str) -> tuple[str, str]:
    """Split an archive path into ``(folder, base_name)``."""

    stripped = name.replace("\\", ARCHIVE_SEP).rstrip(ARCHIVE_SEP)
    folder, _, base = stripped.rpartition(ARCHIVE_SEP)
    return folder, base
