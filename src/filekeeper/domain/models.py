from __future__ import annotations

"""
Registry and Filesystem Data Models.

Defines the immutable records exchanged between the registry, the naming
resolver and the filesystem collaborators.
"""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum

# -----------------------------------------------------------------------------
# REGISTRY RECORDS
# -----------------------------------------------------------------------------

class FileClass(str, Enum):
    """Lifecycle class of a managed file."""

    REGULAR = "regular"
    TEMPORARY = "temporary"
    LOG = "log"


@dataclass(frozen=True)
class FileRecord:
    """
    A managed file known to the registry.

    Attributes:
        key: Symbolic name, unique within its registry.
        path: Absolute filesystem path of the file.
        file_class: Lifecycle class tag.
    """
    key: str
    path: str
    file_class: FileClass = FileClass.REGULAR

    @property
    def is_temporary(self) -> bool:
        return self.file_class is FileClass.TEMPORARY


@dataclass(frozen=True)
class NameResolution:
    """
    Outcome of applying a naming policy to a desired path.

    Attributes:
        path: Final absolute path to use.
        truncate: Whether an empty file must be written at that path.
        key: Registry key derived from the final file name.
    """
    path: str
    truncate: bool
    key: str

# -----------------------------------------------------------------------------
# FILESYSTEM METADATA
# -----------------------------------------------------------------------------

@dataclass(frozen=True)
class FileMetadata:
    """Subset of stat() information exposed to callers."""
    size: int
    created_at: datetime
    modified_at: datetime
    is_directory: bool
    is_file: bool
