from __future__ import annotations

"""
FileSystem Infrastructure Layer.

Provides cross-platform path resolution, directory creation and the thin
OS-call collaborators (metadata, listing search, backup naming) used by the
file manager. Acts as an abstraction over the 'os' and 'shutil' modules so
the core never touches them for anything beyond its own tree logic.
"""

import os
from datetime import datetime
from typing import List, Optional

from filekeeper.domain.errors import NotFoundError
from filekeeper.domain.models import FileMetadata

# -----------------------------------------------------------------------------
# GLOBAL CONSTANTS
# -----------------------------------------------------------------------------

APP_DIR_NAME = "FileKeeper"
UNIX_APP_DIR_NAME = ".filekeeper"

# -----------------------------------------------------------------------------
# PATH RESOLUTION API
# -----------------------------------------------------------------------------

def get_user_data_dir() -> str:
    """
    Resolve the standard OS-specific directory for persistent application data.

    Automatically creates the hierarchy if it does not exist.
    Standards:
    - Windows: %LOCALAPPDATA%/FileKeeper
    - Linux/Mac: ~/.filekeeper

    Returns:
        str: Absolute path to the application data directory.
    """
    path: str = ""

    # Windows specific resolution
    if os.name == "nt":
        base = os.environ.get("LOCALAPPDATA") or os.environ.get("APPDATA")
        if base:
            path = os.path.join(base, APP_DIR_NAME)

    # Posix fallback (Linux/Mac)
    if not path:
        home = os.path.expanduser("~")
        path = os.path.join(home, UNIX_APP_DIR_NAME)

    # Idempotent directory creation
    try:
        os.makedirs(path, exist_ok=True)
    except OSError:
        pass

    return os.path.abspath(path)


def normalize_path(path: Optional[str], fallback: str) -> str:
    """
    Normalize a path string into an absolute filesystem path.

    Handles environment variable expansion ($VAR/%VAR%) and user home
    shortcuts (~/). Reverts to fallback if the input is empty.

    Args:
        path: Raw input path string.
        fallback: Default path to use if the input is empty.

    Returns:
        str: Normalized absolute path.
    """
    p = (path or "").strip()
    if not p:
        p = fallback
    p = os.path.expandvars(os.path.expanduser(p))
    return os.path.abspath(p)

# -----------------------------------------------------------------------------
# DIRECTORY CREATION API
# -----------------------------------------------------------------------------

def ensure_path_exists(path: str) -> str:
    """
    Create every missing directory of `path` (idempotent, recursive).

    Returns:
        str: The absolute directory path.
    """
    full = os.path.abspath(path)
    os.makedirs(full, exist_ok=True)
    return full

# -----------------------------------------------------------------------------
# INSPECTION API
# -----------------------------------------------------------------------------

def get_metadata(path: str) -> FileMetadata:
    """
    Retrieve size, timestamps and kind of a filesystem entry.

    `created_at` is the birth time where the platform records one and the
    inode change time otherwise.

    Raises:
        NotFoundError: If the path does not exist.
    """
    if not os.path.exists(path):
        raise NotFoundError(f"File does not exist: {path}")

    st = os.stat(path)
    created = getattr(st, "st_birthtime", None) or st.st_ctime
    return FileMetadata(
        size=st.st_size,
        created_at=datetime.fromtimestamp(created),
        modified_at=datetime.fromtimestamp(st.st_mtime),
        is_directory=os.path.isdir(path),
        is_file=os.path.isfile(path),
    )


def search(directory: str, query: str) -> List[str]:
    """
    List the entries of `directory` whose name contains `query`.

    Returns:
        List[str]: Matching absolute paths, sorted by name.

    Raises:
        NotFoundError: If the directory does not exist.
    """
    if not os.path.isdir(directory):
        raise NotFoundError(f"Directory does not exist: {directory}")

    return [
        os.path.join(directory, name)
        for name in sorted(os.listdir(directory))
        if query in name
    ]

# -----------------------------------------------------------------------------
# NAMING HELPERS
# -----------------------------------------------------------------------------

def backup_path_for(path: str, now: Optional[datetime] = None) -> str:
    """
    Derive the timestamped sibling path used for a backup copy.

    `report.txt` becomes `report_2024-05-01T10-20-30.123456.txt`; colons are
    replaced so the name is valid on every platform.
    """
    stamp = (now or datetime.now()).isoformat().replace(":", "-")
    root, ext = os.path.splitext(path)
    return f"{root}_{stamp}{ext}"
