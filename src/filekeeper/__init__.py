from __future__ import annotations

from filekeeper.core.naming.resolver import resolve_name
from filekeeper.core.services.lifecycle import LifecycleHook
from filekeeper.core.services.manager import FileManager
from filekeeper.core.services.registry import KeyRegistry
from filekeeper.core.tree.parser import parse_folder_spec
from filekeeper.core.tree.walker import create_tree, delete_tree, delete_tree_legacy
from filekeeper.domain.errors import (
    ConflictError,
    FileKeeperError,
    InvalidModeError,
    InvalidStructureError,
    NotFoundError,
)
from filekeeper.domain.models import FileClass, FileRecord

__all__ = [
    "FileManager",
    "KeyRegistry",
    "LifecycleHook",
    "FileClass",
    "FileRecord",
    "create_tree",
    "delete_tree",
    "delete_tree_legacy",
    "parse_folder_spec",
    "resolve_name",
    "FileKeeperError",
    "NotFoundError",
    "ConflictError",
    "InvalidModeError",
    "InvalidStructureError",
]
