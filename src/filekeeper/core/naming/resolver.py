from __future__ import annotations

"""
Naming Policy Resolver.

Decides the final path of a file about to be created, given the path the
caller asked for and a collision policy:

- preserve: an existing file is kept untouched, a missing one is created.
- overwrite: the path is always (re)written empty.
- unique: an occupied path gets the first free `_<n>` suffix before its
  extension.

The same resolver serves basic, temporary and log file creation. Log files
additionally derive their desired name from a naming mode (date or
increment).
"""

import logging
import os
from datetime import date
from typing import Optional

from filekeeper.domain import constants as const
from filekeeper.domain.errors import InvalidModeError
from filekeeper.domain.models import NameResolution

logger = logging.getLogger(__name__)

# -----------------------------------------------------------------------------
# PUBLIC API
# -----------------------------------------------------------------------------

def derive_key(path: str) -> str:
    """Registry key for a path: the file name without its extension."""
    return os.path.splitext(os.path.basename(path))[0]


def resolve_name(desired_path: str, policy: str) -> NameResolution:
    """
    Apply a naming policy to `desired_path`.

    Args:
        desired_path: Path the caller wants to create.
        policy: One of 'preserve', 'overwrite', 'unique'.

    Returns:
        NameResolution: Final path, whether to write an empty file, derived key.

    Raises:
        InvalidModeError: If the policy is not recognized.
    """
    path = os.path.abspath(desired_path)

    if policy == const.POLICY_PRESERVE:
        truncate = not os.path.exists(path)
    elif policy == const.POLICY_OVERWRITE:
        truncate = True
    elif policy == const.POLICY_UNIQUE:
        path = _first_free_path(path)
        truncate = True
    else:
        raise InvalidModeError(
            f"Invalid naming policy '{policy}'. Use one of: {', '.join(const.NAMING_POLICIES)}."
        )

    logger.debug(f"Naming: {policy} resolved {desired_path} -> {path} (truncate={truncate})")
    return NameResolution(path=path, truncate=truncate, key=derive_key(path))


def log_file_name(directory: str, mode: str, rotate: bool = True, today: Optional[date] = None) -> str:
    """
    Build the desired path of a log file inside `directory`.

    Args:
        directory: Existing directory holding the logs.
        mode: 'date' for `log_<YYYY-MM-DD>.txt`, 'increment' for `log_<N>.txt`.
        rotate: In increment mode, start a new index instead of reusing the
                highest existing one.
        today: Date override for the 'date' mode.

    Returns:
        str: Absolute desired path.

    Raises:
        InvalidModeError: If the mode is not recognized.
    """
    if mode == const.LOG_MODE_DATE:
        suffix = (today or date.today()).isoformat()
    elif mode == const.LOG_MODE_INCREMENT:
        latest = latest_log_index(directory)
        if latest is None:
            suffix = "0"
        else:
            suffix = str(latest + 1 if rotate else latest)
    else:
        raise InvalidModeError(
            f"Invalid log naming mode '{mode}'. Use one of: {', '.join(const.LOG_NAMING_MODES)}."
        )

    return os.path.abspath(os.path.join(directory, const.LOG_FILE_TEMPLATE.format(suffix=suffix)))


def latest_log_index(directory: str) -> Optional[int]:
    """Highest N among `log_<N>.txt` files in `directory`, or None."""
    if not os.path.isdir(directory):
        return None

    indices = []
    for name in os.listdir(directory):
        match = const.LOG_INDEX_PATTERN.match(name)
        if match:
            indices.append(int(match.group(1)))
    return max(indices) if indices else None

# -----------------------------------------------------------------------------
# PRIVATE HELPERS
# -----------------------------------------------------------------------------

def _first_free_path(path: str) -> str:
    if not os.path.exists(path):
        return path

    root, ext = os.path.splitext(path)
    directory, stem = os.path.split(root)
    index = 1
    while True:
        candidate = os.path.join(
            directory, const.UNIQUE_SUFFIX_TEMPLATE.format(stem=stem, index=index, ext=ext)
        )
        if not os.path.exists(candidate):
            return candidate
        index += 1
