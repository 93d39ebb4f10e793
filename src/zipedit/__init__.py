"""zipedit: in-place ZIP archive mutation and relative path helpers."""

from .archive import (
    add_directory_tree,
    add_file,
    create_archive,
    exists,
    extract_all,
    extract_directory,
    extract_file,
    find_entry,
    get_file_name,
    get_file_name_without_extension,
    list_entries,
    remove_file,
    update_file,
)
from .errors import (
    ArchiveError,
    ArchiveIOError,
    ArchiveNotFoundError,
    ContainmentError,
    CorruptArchiveError,
    EntryNotFoundError,
    InvalidPathError,
    ZipeditError,
)
from .handle import ArchiveHandle
from .models import EntryInfo, EntryMatch
from .paths import is_valid_name, relative_to, to_archive_path, without_extension

__all__ = [
    "ArchiveError",
    "ArchiveHandle",
    "ArchiveIOError",
    "ArchiveNotFoundError",
    "ContainmentError",
    "CorruptArchiveError",
    "EntryInfo",
    "EntryMatch",
    "EntryNotFoundError",
    "InvalidPathError",
    "ZipeditError",
    "add_directory_tree",
    "add_file",
    "create_archive",
    "exists",
    "extract_all",
    "extract_directory",
    "extract_file",
    "find_entry",
    "get_file_name",
    "get_file_name_without_extension",
    "is_valid_name",
    "list_entries",
    "relative_to",
    "remove_file",
    "to_archive_path",
    "update_file",
    "without_extension",
]

__version__ = "0.1.0"
