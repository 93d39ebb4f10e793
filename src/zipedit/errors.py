from __future__ import annotations

import os


class ZipeditError(Exception):
    """Base error for zipedit."""


class InvalidPathError(ZipeditError):
    pass


class ContainmentError(ZipeditError):
    def __init__(self, base: str | os.PathLike[str], path: str | os.PathLike[str]) -> None:
        super().__init__(f"'{os.fspath(path)}' is not within '{os.fspath(base)}'")
        self.base = os.fspath(base)
        self.path = os.fspath(path)


class ArchiveError(ZipeditError):
    """Error tied to a concrete archive or filesystem path."""

    def __init__(self, path: str | os.PathLike[str], message: str) -> None:
        super().__init__(f"{message}: {os.fspath(path)}")
        self.path = os.fspath(path)


class ArchiveNotFoundError(ArchiveError):
    def __init__(self, path: str | os.PathLike[str]) -> None:
        super().__init__(path, "Archive not found")


class CorruptArchiveError(ArchiveError):
    pass


class EntryNotFoundError(ArchiveError):
    def __init__(self, path: str | os.PathLike[str], predicate: str) -> None:
        super().__init__(path, f"No entry matching '{predicate}'")
        self.predicate = predicate


class ArchiveIOError(ArchiveError):
    pass
