from __future__ import annotations

"""
Folder Specification Data Models.

Provides the recursive node type the folder-spec parser produces from the
nested-list notation, so walkers never re-derive group attachment from
list positions.
"""

from dataclasses import dataclass, field
from typing import Iterator, List, Tuple, Union

# Raw external notation: names mixed with nested lists
FolderSpec = List[Union[str, "FolderSpec"]]

# -----------------------------------------------------------------------------
# STRUCTURAL COMPONENTS
# -----------------------------------------------------------------------------

@dataclass(frozen=True)
class FolderNode:
    """
    A named folder and the folders declared beneath it.

    Attributes:
        name: Folder name relative to its parent.
        children: Nested folders, in declaration order.
    """
    name: str
    children: Tuple["FolderNode", ...] = field(default_factory=tuple)

    @property
    def is_leaf(self) -> bool:
        return not self.children

    def walk(self, prefix: Tuple[str, ...] = ()) -> Iterator[Tuple[str, ...]]:
        """Yield the relative path parts of this node and its descendants, parents first."""
        parts = prefix + (self.name,)
        yield parts
        for child in self.children:
            yield from child.walk(parts)
