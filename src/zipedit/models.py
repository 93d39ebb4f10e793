from __future__ import annotations

import posixpath
from datetime import datetime

from pydantic import BaseModel, computed_field

from .paths import entry_base_name


class EntryMatch(BaseModel):
    """Outcome of a predicate lookup; at most one entry."""

    name: str = ""
    found: bool = False

    @classmethod
    def missing(cls) -> EntryMatch:
        return cls()

    @computed_field  # type: ignore[prop-decorator]
    @property
    def file_name(self) -> str:
        return entry_base_name(self.name) if self.found else ""

    @computed_field  # type: ignore[prop-decorator]
    @property
    def stem(self) -> str:
        return posixpath.splitext(self.file_name)[0]

    def __bool__(self) -> bool:
        return self.found


class EntryInfo(BaseModel):
    name: str
    is_dir: bool = False
    file_size: int = 0
    compress_size: int = 0
    compression: str = "stored"
    modified: datetime | None = None
