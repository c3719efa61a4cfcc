from __future__ import annotations

"""
Key Registry Service.

Maps short symbolic keys to absolute file paths. Keeps a single-hop alias
table on top of the keys and tracks which records are temporary so the
lifecycle hook can purge them at shutdown. Every public operation runs
under one re-entrant lock.
"""

import logging
import os
import threading
from typing import Dict, FrozenSet, List, Optional

from filekeeper.domain.errors import ConflictError, NotFoundError
from filekeeper.domain.models import FileClass, FileRecord

logger = logging.getLogger(__name__)


class KeyRegistry:
    """
    In-process table of managed files.

    Aliases resolve in exactly one hop and may only target real keys.
    Renaming a key moves every alias that pointed at it to the new key.
    """

    def __init__(self) -> None:
        self._records: Dict[str, FileRecord] = {}
        self._aliases: Dict[str, str] = {}
        self._temporary: set = set()
        self._lock = threading.RLock()

    # -------------------------------------------------------------------------
    # Records
    # -------------------------------------------------------------------------

    def register(self, key: str, path: str, file_class: FileClass = FileClass.REGULAR) -> FileRecord:
        """
        Insert or overwrite the record stored under `key`.

        Args:
            key: Symbolic name.
            path: File path (stored absolute).
            file_class: Lifecycle class tag.

        Returns:
            FileRecord: The stored record.
        """
        record = FileRecord(key=key, path=os.path.abspath(path), file_class=file_class)
        with self._lock:
            if self._aliases.pop(key, None) is not None:
                logger.warning(f"Registry: Key '{key}' replaces an alias of the same name.")
            self._records[key] = record
            if record.is_temporary:
                self._temporary.add(key)
            else:
                self._temporary.discard(key)
        logger.debug(f"Registry: {key} -> {record.path} ({file_class.value})")
        return record

    def get(self, key: str) -> FileRecord:
        """
        Fetch the record stored under `key` (no alias resolution).

        Raises:
            NotFoundError: If no record exists.
        """
        with self._lock:
            record = self._records.get(key)
        if record is None:
            raise NotFoundError(f"File not found: no record for key '{key}'.")
        return record

    def lookup(self, name_or_alias: str) -> FileRecord:
        """Resolve an alias, then fetch the record."""
        with self._lock:
            return self.get(self.resolve_key(name_or_alias))

    def path_of(self, name_or_alias: str) -> str:
        return self.lookup(name_or_alias).path

    def find_by_path(self, path: str) -> List[str]:
        """Keys whose record points at `path`."""
        target = os.path.abspath(path)
        with self._lock:
            return [k for k, r in self._records.items() if r.path == target]

    def remove(self, key: str) -> None:
        """
        Delete the file of `key` and forget everything attached to it.

        The record, its temporary mark and every alias targeting it are
        dropped. A record whose file is already gone is dropped as well
        before NotFoundError is raised.

        Raises:
            NotFoundError: If there is no record or the file is already absent.
        """
        with self._lock:
            record = self._records.get(key)
            if record is None:
                raise NotFoundError(f"File not found or already deleted: '{key}'.")

            file_present = os.path.isfile(record.path)
            if file_present:
                os.unlink(record.path)
            self._forget(key)

        if not file_present:
            raise NotFoundError(f"File not found or already deleted: {record.path}")
        logger.debug(f"Registry: Removed {key} ({record.path})")

    def discard(self, key: str) -> None:
        """Forget `key` without touching the disk. Unknown keys are ignored."""
        with self._lock:
            self._forget(key)

    def rename(self, old_key: str, new_name: str, new_key: Optional[str] = None) -> FileRecord:
        """
        Rename the file of `old_key` within its directory.

        Args:
            old_key: Key (or alias) of the file to rename.
            new_name: New file name.
            new_key: Key for the renamed file. Defaults to `new_name`.

        Returns:
            FileRecord: The record stored under the new key.

        Raises:
            NotFoundError: If `old_key` is unknown.
            ConflictError: If the new key belongs to another file or is an alias,
                           or a different file already exists at the new path.
        """
        key = new_key or new_name
        with self._lock:
            old_key = self.resolve_key(old_key)
            record = self.get(old_key)

            if key in self._aliases or (key != old_key and key in self._records):
                raise ConflictError(f"Key '{key}' conflicts with an existing key or alias.")

            new_path = os.path.join(os.path.dirname(record.path), new_name)
            if os.path.lexists(new_path) and not _same_entry(new_path, record.path):
                raise ConflictError(f"Cannot rename '{old_key}': {new_path} already exists.")
            os.replace(record.path, new_path)

            dependants = [a for a, target in self._aliases.items() if target == old_key]
            self._forget(old_key)
            renamed = self.register(key, new_path, record.file_class)
            for alias in dependants:
                self._aliases[alias] = key

        logger.debug(f"Registry: Renamed {old_key} -> {key} ({len(dependants)} alias(es) moved)")
        return renamed

    # -------------------------------------------------------------------------
    # Aliases
    # -------------------------------------------------------------------------

    def resolve_key(self, name_or_alias: str) -> str:
        """Return the key an alias points at, or the input unchanged."""
        with self._lock:
            return self._aliases.get(name_or_alias, name_or_alias)

    def add_alias(self, alias: str, original_key: str) -> None:
        """
        Make `alias` resolve to `original_key`.

        Raises:
            ConflictError: If `original_key` is not a key, or `alias` is
                           already a key or an alias.
        """
        with self._lock:
            if original_key not in self._records:
                raise ConflictError(f"Original key '{original_key}' does not exist.")
            if alias in self._records or alias in self._aliases:
                raise ConflictError(f"Alias '{alias}' conflicts with an existing key or alias.")
            self._aliases[alias] = original_key
        logger.debug(f"Registry: Alias {alias} -> {original_key}")

    def remove_alias(self, alias: str) -> None:
        with self._lock:
            if self._aliases.pop(alias, None) is None:
                raise NotFoundError(f"Alias '{alias}' does not exist.")

    # -------------------------------------------------------------------------
    # Views
    # -------------------------------------------------------------------------

    def keys(self) -> List[str]:
        with self._lock:
            return list(self._records)

    def records(self) -> List[FileRecord]:
        with self._lock:
            return list(self._records.values())

    def aliases(self) -> Dict[str, str]:
        with self._lock:
            return dict(self._aliases)

    def temporary_keys(self) -> FrozenSet[str]:
        with self._lock:
            return frozenset(self._temporary)

    def __contains__(self, key: object) -> bool:
        with self._lock:
            return key in self._records

    def __len__(self) -> int:
        with self._lock:
            return len(self._records)

    # -------------------------------------------------------------------------
    # Internals
    # -------------------------------------------------------------------------

    def _forget(self, key: str) -> None:
        """Drop the record, temporary mark and aliases of `key`. Caller holds the lock."""
        self._records.pop(key, None)
        self._temporary.discard(key)
        for alias in [a for a, target in self._aliases.items() if target == key]:
            del self._aliases[alias]


def _same_entry(path: str, other: str) -> bool:
    """True if both paths name the same file (e.g. a case-only rename)."""
    try:
        return os.path.samefile(path, other)
    except OSError:
        return False
