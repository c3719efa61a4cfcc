from __future__ import annotations

"""
File Manager Facade.

Single entry point combining the folder tree walker, the naming resolver,
the key registry and the shutdown hook. File creation resolves the final
name, writes the file and registers it; every keyed operation resolves its
key (one alias hop) before touching the disk.
"""

import json
import logging
import os
import shutil
import threading
from concurrent.futures import Future
from typing import Any, Dict, List, Optional

from filekeeper.core.naming.resolver import derive_key, log_file_name, resolve_name
from filekeeper.core.services.lifecycle import LifecycleHook, purge_temporary
from filekeeper.core.services.registry import KeyRegistry
from filekeeper.core.tree.walker import create_tree, delete_tree, delete_tree_legacy
from filekeeper.core.validator import validate_config
from filekeeper.domain.config import get_default_config
from filekeeper.domain.errors import FileKeeperError, NotFoundError
from filekeeper.domain.models import FileClass, FileMetadata, FileRecord
from filekeeper.infra import compression, fs

logger = logging.getLogger(__name__)


class FileManager:
    """
    Keyed access to files plus bulk folder operations.

    Usable as a context manager: leaving the block purges temporary files
    and detaches the shutdown hook.
    """

    def __init__(
            self,
            config: Optional[Dict[str, Any]] = None,
            registry: Optional[KeyRegistry] = None,
            *,
            install_hooks: bool = True,
            handle_signals: bool = True,
    ) -> None:
        """
        Args:
            config: Configuration dictionary. Defaults to get_default_config().
            registry: Registry to manage. A fresh one is created otherwise.
            install_hooks: Register the temporary-file sweep for process exit.
            handle_signals: Also run the sweep on SIGTERM.
        """
        clean, warnings = validate_config(config if config is not None else get_default_config())
        for w in warnings:
            logger.warning(f"Configuration Constraint: {w}")

        self.config: Dict[str, Any] = clean
        self.registry = registry if registry is not None else KeyRegistry()
        self.lifecycle = LifecycleHook(self.registry)
        self._lock = threading.RLock()

        if install_hooks:
            self.lifecycle.install(handle_signals=handle_signals)

    def __enter__(self) -> "FileManager":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    # -------------------------------------------------------------------------
    # Folder structures
    # -------------------------------------------------------------------------

    def create_folder_structure(self, base_path: str, spec: Any, ensure_base: bool = False) -> List[str]:
        """Create the folders of `spec` under `base_path`. See walker.create_tree."""
        if ensure_base:
            fs.ensure_path_exists(base_path)
        return create_tree(base_path, spec)

    def delete_folder_structure(
            self,
            base_path: str,
            spec: Any,
            mode: Optional[str] = None,
            legacy: bool = False,
    ) -> List[str]:
        """
        Delete the folders of `spec` under `base_path`.

        Args:
            mode: 'preserve' or 'force' (config 'delete_mode' when omitted).
            legacy: Interpret `spec` with the wildcard dialect instead. `mode`
                    does not apply there.
        """
        if legacy:
            return delete_tree_legacy(base_path, spec)
        return delete_tree(base_path, spec, mode or self.config["delete_mode"])

    # -------------------------------------------------------------------------
    # File creation
    # -------------------------------------------------------------------------

    def create_basic_file(self, file_path: str, policy: Optional[str] = None) -> str:
        """
        Create a regular file and register it.

        Returns:
            str: The registry key of the created file.
        """
        return self._create(file_path, policy or self.config["naming_policy"], FileClass.REGULAR)

    def create_temp_file(self, file_path: str, policy: Optional[str] = None) -> str:
        """
        Create a temporary file, deleted automatically at shutdown.

        The file name gets the configured temporary prefix (`temp_` by
        default): `out/data.json` becomes `out/temp_data.json`.

        Returns:
            str: The registry key of the created file.

        Raises:
            FileKeeperError: If the manager was already closed.
        """
        if self.lifecycle.swept:
            raise FileKeeperError("FileManager is closed; it no longer creates temporary files.")
        directory, name = os.path.split(os.path.abspath(file_path))
        temp_path = os.path.join(directory, f"{self.config['temp_prefix']}{name}")
        return self._create(temp_path, policy or self.config["temp_naming_policy"], FileClass.TEMPORARY)

    def create_log_file(
            self,
            directory: str,
            mode: Optional[str] = None,
            rotate: bool = True,
            policy: Optional[str] = None,
    ) -> str:
        """
        Create (or reopen) a log file in `directory`.

        Args:
            directory: Folder holding the logs, created if missing.
            mode: 'date' or 'increment' (config 'log_naming_mode' when omitted).
            rotate: Increment mode only; False reuses the latest index.
            policy: Naming policy (config 'log_naming_policy' when omitted).

        Returns:
            str: The registry key of the log file.
        """
        with self._lock:
            fs.ensure_path_exists(directory)
            desired = log_file_name(directory, mode or self.config["log_naming_mode"], rotate=rotate)
            return self._create(desired, policy or self.config["log_naming_policy"], FileClass.LOG)

    def _create(self, desired_path: str, policy: str, file_class: FileClass) -> str:
        with self._lock:
            fs.ensure_path_exists(os.path.dirname(os.path.abspath(desired_path)))
            resolution = resolve_name(desired_path, policy)
            if resolution.truncate:
                with open(resolution.path, "w", encoding="utf-8"):
                    pass
            self.registry.register(resolution.key, resolution.path, file_class)

        logger.info(f"FileManager: Created {file_class.value} file {resolution.key} -> {resolution.path}")
        return resolution.key

    # -------------------------------------------------------------------------
    # Keys & aliases
    # -------------------------------------------------------------------------

    def add_alias(self, alias: str, original_key: str) -> None:
        self.registry.add_alias(alias, original_key)

    def resolve_key(self, key: str) -> str:
        return self.registry.resolve_key(key)

    def get_path(self, key: str) -> str:
        """Absolute path of the file registered under `key` (or an alias)."""
        return self.registry.path_of(key)

    def get_record(self, key: str) -> FileRecord:
        return self.registry.lookup(key)

    # -------------------------------------------------------------------------
    # Keyed I/O
    # -------------------------------------------------------------------------

    def write_to_file(self, key: str, data: Any, pretty: bool = True) -> None:
        """Replace the content of a managed file. Non-string data is written as JSON."""
        with self._lock:
            path = self.registry.path_of(key)
            with open(path, "w", encoding="utf-8") as f:
                f.write(self._format_data(data, pretty))

    def append_to_file(self, key: str, data: Any, pretty: bool = True) -> None:
        with self._lock:
            path = self.registry.path_of(key)
            with open(path, "a", encoding="utf-8") as f:
                f.write(self._format_data(data, pretty))

    def read_file(self, key: str) -> str:
        with self._lock:
            path = self.registry.path_of(key)
            if not os.path.isfile(path):
                raise NotFoundError(f"File not found: {path}")
            with open(path, "r", encoding="utf-8") as f:
                return f.read()

    def rename_file(self, key: str, new_name: str) -> str:
        """
        Rename a managed file within its directory.

        Aliases of the old key follow the file to the new key.

        Returns:
            str: The new key (`new_name`).
        """
        with self._lock:
            record = self.registry.rename(key, new_name)
        logger.info(f"FileManager: Renamed {key} -> {record.key}")
        return record.key

    def delete_file(self, key: str) -> None:
        """
        Delete a managed file and drop its key and aliases.

        Raises:
            NotFoundError: If the key is unknown or the file is already gone.
        """
        with self._lock:
            self.registry.remove(self.registry.resolve_key(key))
        logger.info(f"FileManager: Deleted {key}")

    def clear_temp_files(self) -> int:
        """Delete every temporary file registered so far."""
        with self._lock:
            return purge_temporary(self.registry)

    # -------------------------------------------------------------------------
    # Path-based operations
    # -------------------------------------------------------------------------

    def exists(self, path: str) -> bool:
        return os.path.exists(path)

    def copy_file(self, src_path: str, dest_path: str) -> str:
        """
        Copy a file and register the copy under its own key.

        Returns:
            str: Key of the destination file.
        """
        if not os.path.isfile(src_path):
            raise NotFoundError(f"File does not exist: {src_path}")
        with self._lock:
            shutil.copyfile(src_path, dest_path)
            key = derive_key(dest_path)
            self.registry.register(key, dest_path)
        return key

    def move_file(self, src_path: str, dest_path: str) -> str:
        """
        Move a file. Keys pointing at the source are replaced by one for the destination.

        Returns:
            str: Key of the destination file.
        """
        if not os.path.exists(src_path):
            raise NotFoundError(f"File does not exist: {src_path}")
        with self._lock:
            previous = [self.registry.get(k) for k in self.registry.find_by_path(src_path)]
            shutil.move(src_path, dest_path)
            for record in previous:
                self.registry.discard(record.key)

            file_class = previous[0].file_class if previous else FileClass.REGULAR
            key = derive_key(dest_path)
            self.registry.register(key, dest_path, file_class)
        return key

    def get_metadata(self, path: str) -> FileMetadata:
        return fs.get_metadata(path)

    def search(self, directory: str, query: str) -> List[str]:
        return fs.search(directory, query)

    def backup_file(self, path: str) -> str:
        """
        Copy `path` to a timestamped sibling and register the copy.

        Returns:
            str: Absolute path of the backup.
        """
        if not os.path.isfile(path):
            raise NotFoundError(f"File does not exist: {path}")
        backup = os.path.abspath(fs.backup_path_for(path))
        self.copy_file(path, backup)
        logger.info(f"FileManager: Backup {path} -> {backup}")
        return backup

    def compress_file(self, src_path: str, dest_path: str) -> "Future[str]":
        """Gzip `src_path` into `dest_path` in the background."""
        return compression.compress_file(src_path, dest_path)

    # -------------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------------

    def close(self) -> None:
        """
        Run the temporary-file sweep now and detach it from process exit.

        Afterwards the manager still serves regular and log files, but
        create_temp_file() is refused.
        """
        self.lifecycle.sweep()
        self.lifecycle.uninstall()

    # -------------------------------------------------------------------------
    # Helpers
    # -------------------------------------------------------------------------

    def _format_data(self, data: Any, pretty: bool) -> str:
        if isinstance(data, str):
            return data
        indent = self.config["json_indent"] if pretty else None
        return json.dumps(data, indent=indent, ensure_ascii=False)
