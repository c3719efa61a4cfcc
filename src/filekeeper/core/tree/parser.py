from __future__ import annotations

"""
Folder Specification Parser.

Turns the nested-list notation into a tuple of FolderNode trees.

Attachment rule: a nested list attaches to the folder name immediately
before it in the same list. Several lists in a row after one name all
attach to that name, in order. A list with no preceding name in its own
level has nothing to attach to and is rejected. Folder names are single
path components: separators and ".." are rejected so no entry can resolve
outside the base directory.

    ["a", ["b", "c"], "d"]  ->  a/{b, c}, d
"""

import os
from typing import Any, Iterable, List, Sequence, Tuple

from filekeeper.domain import constants as const
from filekeeper.domain.errors import InvalidStructureError
from filekeeper.domain.tree_models import FolderNode, FolderSpec


def parse_folder_spec(spec: FolderSpec, reserved: Iterable[str] = ()) -> Tuple[FolderNode, ...]:
    """
    Parse a folder specification.

    Args:
        spec: List (or tuple) of names and nested lists.
        reserved: Names that are not allowed anywhere in the folder spec.

    Returns:
        Tuple[FolderNode, ...]: Top-level folders in declaration order.

    Raises:
        InvalidStructureError: If the folder spec is malformed.
    """
    if not _is_group(spec):
        raise InvalidStructureError(
            f"Folder spec must be a list, received {type(spec).__name__}."
        )
    return _parse_level(spec, frozenset(reserved), "")


def _is_group(item: Any) -> bool:
    return isinstance(item, (list, tuple))


def _parse_level(items: Sequence[Any], reserved: frozenset, location: str) -> Tuple[FolderNode, ...]:
    names: List[str] = []
    children: List[List[FolderNode]] = []

    for index, item in enumerate(items):
        where = f"{location}[{index}]"
        if isinstance(item, str):
            if not item:
                raise InvalidStructureError(f"Empty folder name at {where}.")
            if item in reserved:
                raise InvalidStructureError(f"Token '{item}' is not allowed here ({where}).")
            if not is_single_component(item):
                raise InvalidStructureError(
                    f"Folder name '{item}' at {where} must be a single path component."
                )
            names.append(item)
            children.append([])
        elif _is_group(item):
            if not names:
                raise InvalidStructureError(
                    f"Group at {where} has no preceding folder name to attach to."
                )
            children[-1].extend(_parse_level(item, reserved, where))
        else:
            raise InvalidStructureError(
                f"Invalid item at {where}: expected str or list, received {type(item).__name__}."
            )

    return tuple(FolderNode(name, tuple(kids)) for name, kids in zip(names, children))


def is_single_component(name: str) -> bool:
    """True if `name` stays in its parent directory: no separators, not '..'."""
    return os.path.basename(name) == name and name != const.PARENT_TOKEN
