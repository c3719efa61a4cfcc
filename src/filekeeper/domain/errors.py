from __future__ import annotations

"""
Domain Error Hierarchy.

Every failure raised by the registry, the naming resolver and the tree
walker derives from FileKeeperError so interface layers can map domain
errors to exit codes without catching unrelated exceptions.
"""


class FileKeeperError(Exception):
    """Base class for all domain errors."""


class NotFoundError(FileKeeperError, LookupError):
    """A key, alias, file or directory is absent where it must exist."""


class ConflictError(FileKeeperError):
    """An alias or key collides with an existing key or alias."""


class InvalidModeError(FileKeeperError, ValueError):
    """An unrecognized policy or mode string was supplied."""


class InvalidStructureError(FileKeeperError, ValueError):
    """A folder specification is malformed."""
