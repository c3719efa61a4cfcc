from __future__ import annotations

"""
Folder Tree Walker.

Creates or deletes directory hierarchies described by a folder
specification relative to an existing base directory.

Deletion understands two dialects, never mixed within one call:

- delete_tree(): the mode-based dialect. Leaf folders are deletion targets
  ('preserve' removes them only when empty, 'force' removes them with their
  content). Folders with children are containers: their children are
  processed first and the container goes only if it ended up empty.
- delete_tree_legacy(): the wildcard dialect. '*' followed by a list removes
  the listed entries under the cursor, '*' alone removes every child
  directory of the cursor, '..' moves the cursor up.

Deletion is best effort: missing entries are logged and skipped. The base
directory itself is never removed, and neither is anything that resolves
outside it (symlinks included).
"""

import logging
import os
import shutil
from typing import Any, List, Sequence, Tuple

from filekeeper.core.tree.parser import is_single_component, parse_folder_spec
from filekeeper.domain import constants as const
from filekeeper.domain.errors import InvalidModeError, InvalidStructureError, NotFoundError
from filekeeper.domain.tree_models import FolderNode, FolderSpec

logger = logging.getLogger(__name__)

# -----------------------------------------------------------------------------
# CREATION
# -----------------------------------------------------------------------------

def create_tree(base_path: str, spec: FolderSpec) -> List[str]:
    """
    Create the folders described by `spec` under `base_path`.

    Existing folders are left untouched, so running the same spec twice is
    harmless.

    Args:
        base_path: Existing directory the folder spec is relative to.
        spec: Folder specification.

    Returns:
        List[str]: Directories created by this call, parents first.

    Raises:
        NotFoundError: If `base_path` is not an existing directory.
        InvalidStructureError: If the folder spec is malformed.
    """
    base = os.path.abspath(base_path)
    if not os.path.isdir(base):
        raise NotFoundError(f"Base directory does not exist: {base}")

    created: List[str] = []
    for node in parse_folder_spec(spec):
        for parts in node.walk():
            path = os.path.join(base, *parts)
            if not os.path.isdir(path):
                os.mkdir(path)
                created.append(path)
                logger.debug(f"Tree: mkdir {path}")

    logger.info(f"Tree: Created {len(created)} folder(s) under {base}")
    return created

# -----------------------------------------------------------------------------
# DELETION (MODE DIALECT)
# -----------------------------------------------------------------------------

def delete_tree(base_path: str, spec: FolderSpec, mode: str = const.DELETE_PRESERVE) -> List[str]:
    """
    Delete the folders described by `spec` under `base_path`.

    Args:
        base_path: Directory the folder spec is relative to. Never deleted.
        spec: Folder specification (without legacy tokens).
        mode: 'preserve' or 'force'.

    Returns:
        List[str]: Directories removed by this call.

    Raises:
        InvalidModeError: If the mode is not recognized.
        InvalidStructureError: If the folder spec is malformed or uses legacy tokens.
    """
    if mode not in const.DELETE_MODES:
        raise InvalidModeError(
            f"Invalid deletion mode '{mode}'. Use one of: {', '.join(const.DELETE_MODES)}."
        )

    nodes = parse_folder_spec(spec, reserved=const.LEGACY_TOKENS)
    base = os.path.abspath(base_path)
    removed: List[str] = []

    if not os.path.isdir(base):
        logger.warning(f"Tree: Base directory not found, nothing to delete: {base}")
        return removed

    _delete_nodes(base, base, nodes, mode, removed)
    logger.info(f"Tree: Removed {len(removed)} folder(s) under {base} ({mode})")
    return removed


def _delete_nodes(
        base: str,
        parent: str,
        nodes: Sequence[FolderNode],
        mode: str,
        removed: List[str],
) -> None:
    for node in nodes:
        path = os.path.normpath(os.path.join(parent, node.name))

        if not os.path.isdir(path):
            logger.debug(f"Tree: Skipping missing directory {path}")
            continue
        if not _is_within(path, base):
            logger.warning(f"Tree: Refusing to delete outside the base directory: {path}")
            continue

        if not node.is_leaf:
            _delete_nodes(base, path, node.children, mode, removed)
            if _guards_base(path, base):
                continue
            if os.listdir(path):
                logger.debug(f"Tree: Keeping non-empty container {path}")
                continue
            os.rmdir(path)
            removed.append(path)
            logger.debug(f"Tree: rmdir {path}")
            continue

        if _guards_base(path, base):
            logger.warning(f"Tree: Refusing to delete base directory or its ancestor: {path}")
            continue

        if mode == const.DELETE_FORCE:
            shutil.rmtree(path)
            removed.append(path)
            logger.debug(f"Tree: rmtree {path}")
        elif os.listdir(path):
            logger.info(f"Tree: Preserving non-empty directory {path}")
        else:
            os.rmdir(path)
            removed.append(path)
            logger.debug(f"Tree: rmdir {path}")

# -----------------------------------------------------------------------------
# DELETION (WILDCARD DIALECT)
# -----------------------------------------------------------------------------

def delete_tree_legacy(base_path: str, spec: FolderSpec) -> List[str]:
    """
    Delete folders using the wildcard dialect.

    The whole spec is planned before anything is removed, so a malformed
    spec never leaves a partial deletion behind.

    Args:
        base_path: Directory the cursor starts at. Never deleted.
        spec: List of names, '*', '..' and nested lists.

    Returns:
        List[str]: Directories removed by this call.

    Raises:
        InvalidStructureError: If the folder spec is malformed or climbs above the base.
    """
    if not isinstance(spec, (list, tuple)):
        raise InvalidStructureError(
            f"Folder spec must be a list, received {type(spec).__name__}."
        )

    base = os.path.abspath(base_path)
    targets: List[str] = []
    _plan_legacy(base, base, spec, "", targets)

    removed: List[str] = []
    for target in targets:
        if _guards_base(target, base):
            logger.warning(f"Tree: Refusing to delete base directory or its ancestor: {target}")
        elif not _is_within(target, base):
            logger.warning(f"Tree: Refusing to delete outside the base directory: {target}")
        elif os.path.isdir(target):
            shutil.rmtree(target)
            removed.append(target)
            logger.info(f"Tree: Deleted {target}")
        else:
            logger.info(f"Tree: Directory not found: {target}")
    return removed


def _plan_legacy(
        base: str,
        cursor: str,
        items: Sequence[Any],
        location: str,
        targets: List[str],
) -> None:
    index = 0
    while index < len(items):
        item = items[index]
        where = f"{location}[{index}]"

        if item == const.WILDCARD_TOKEN:
            following = items[index + 1] if index + 1 < len(items) else None
            if isinstance(following, (list, tuple)):
                targets.extend(os.path.join(cursor, n) for n in _names(following, f"{location}[{index + 1}]"))
                index += 1
            else:
                targets.extend(_child_directories(cursor))
        elif item == const.PARENT_TOKEN:
            parent = os.path.dirname(cursor)
            if not _is_within(parent, base):
                raise InvalidStructureError(f"'..' at {where} climbs above the base directory.")
            cursor = parent
        elif isinstance(item, str) and item:
            if not is_single_component(item):
                raise InvalidStructureError(
                    f"Folder name '{item}' at {where} must be a single path component."
                )
            cursor = os.path.normpath(os.path.join(cursor, item))
            if not os.path.exists(cursor):
                logger.debug(f"Tree: Cursor moved to missing path {cursor}")
        elif isinstance(item, (list, tuple)):
            _plan_legacy(base, cursor, item, where, targets)
        else:
            raise InvalidStructureError(f"Invalid item at {where}: {item!r}.")
        index += 1


def _names(group: Sequence[Any], location: str) -> Tuple[str, ...]:
    for i, entry in enumerate(group):
        if not isinstance(entry, str) or not entry or not is_single_component(entry):
            raise InvalidStructureError(
                f"Wildcard targets at {location} must be folder names, found {entry!r} at [{i}]."
            )
    return tuple(group)


def _child_directories(directory: str) -> List[str]:
    if not os.path.isdir(directory):
        return []
    return [
        os.path.join(directory, name)
        for name in sorted(os.listdir(directory))
        if os.path.isdir(os.path.join(directory, name))
    ]

# -----------------------------------------------------------------------------
# PATH GUARDS
# -----------------------------------------------------------------------------

def _is_within(path: str, base: str) -> bool:
    """True if `path` is `base` or below it."""
    path, base = os.path.realpath(path), os.path.realpath(base)
    return os.path.commonpath([path, base]) == base


def _guards_base(path: str, base: str) -> bool:
    """True if removing `path` would remove `base` (it is the base or an ancestor)."""
    path, base = os.path.realpath(path), os.path.realpath(base)
    return os.path.commonpath([path, base]) == path
