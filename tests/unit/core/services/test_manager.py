from __future__ import annotations

"""
Unit tests for the File Manager Facade.

Verifies:
1. File creation paths (basic, temporary, log) and their policies.
2. Keyed I/O through keys and aliases, JSON formatting.
3. Rename / delete / copy / move / backup bookkeeping.
4. Scoped disposal of temporary files.
"""

import json
from pathlib import Path

import pytest

from filekeeper.core.services.manager import FileManager
from filekeeper.domain.errors import ConflictError, FileKeeperError, InvalidModeError, NotFoundError
from filekeeper.domain.models import FileClass

# -----------------------------------------------------------------------------
# CREATION
# -----------------------------------------------------------------------------

def test_create_basic_file_creates_parents(manager: FileManager, tmp_path: Path) -> None:
    """TC-01: Missing parent folders are created and the key is the stem."""
    key = manager.create_basic_file(str(tmp_path / "deep" / "dir" / "report.txt"))

    assert key == "report"
    assert (tmp_path / "deep" / "dir" / "report.txt").read_text() == ""
    assert manager.get_record(key).file_class is FileClass.REGULAR


def test_create_basic_file_unique(manager: FileManager, tmp_path: Path) -> None:
    """TC-02: unique policy with report.txt and report_1.txt taken yields report_2."""
    (tmp_path / "report.txt").write_text("a")
    (tmp_path / "report_1.txt").write_text("b")

    key = manager.create_basic_file(str(tmp_path / "report.txt"), policy="unique")

    assert key == "report_2"
    assert manager.get_path(key) == str(tmp_path / "report_2.txt")
    assert (tmp_path / "report.txt").read_text() == "a"


def test_create_basic_file_preserve_and_overwrite(manager: FileManager, tmp_path: Path) -> None:
    """TC-03: preserve keeps existing content, overwrite truncates it."""
    target = tmp_path / "data.txt"
    target.write_text("keep me")

    manager.create_basic_file(str(target), policy="preserve")
    assert target.read_text() == "keep me"

    manager.create_basic_file(str(target), policy="overwrite")
    assert target.read_text() == ""


def test_create_basic_file_invalid_policy(manager: FileManager, tmp_path: Path) -> None:
    """TC-04: Unknown policies fail before anything is written."""
    with pytest.raises(InvalidModeError):
        manager.create_basic_file(str(tmp_path / "x.txt"), policy="maybe")
    assert not (tmp_path / "x.txt").exists()


def test_create_temp_file(manager: FileManager, tmp_path: Path) -> None:
    """TC-05: Temporary files get the prefix and are tracked as temporary."""
    key = manager.create_temp_file(str(tmp_path / "scratch.json"))

    assert key == "temp_scratch"
    assert (tmp_path / "temp_scratch.json").exists()
    assert key in manager.registry.temporary_keys()


def test_create_log_file_modes(manager: FileManager, tmp_path: Path) -> None:
    """TC-06: Increment mode rotates; preserve keeps the reused log's content."""
    logs = tmp_path / "logs"

    first = manager.create_log_file(str(logs), mode="increment")
    manager.append_to_file(first, "line 1\n")
    second = manager.create_log_file(str(logs), mode="increment")
    again = manager.create_log_file(str(logs), mode="increment", rotate=False)

    assert (first, second, again) == ("log_0", "log_1", "log_1")
    assert (logs / "log_0.txt").read_text() == "line 1\n"
    assert manager.get_record(second).file_class is FileClass.LOG


def test_create_log_file_date_mode(manager: FileManager, tmp_path: Path) -> None:
    """TC-07: Default mode names the log after today's date."""
    key = manager.create_log_file(str(tmp_path))

    assert key.startswith("log_")
    assert len(key) == len("log_YYYY-MM-DD")

# -----------------------------------------------------------------------------
# KEYED I/O
# -----------------------------------------------------------------------------

def test_write_read_append_through_alias(manager: FileManager, tmp_path: Path) -> None:
    """TC-08: Aliases resolve before every keyed operation."""
    key = manager.create_basic_file(str(tmp_path / "notes.txt"))
    manager.add_alias("n", key)

    manager.write_to_file("n", "hello")
    manager.append_to_file(key, " world")

    assert manager.read_file("n") == "hello world"
    assert manager.resolve_key("n") == key


def test_write_structured_data_as_json(manager: FileManager, tmp_path: Path) -> None:
    """TC-09: Dicts are serialized as JSON, pretty or compact."""
    key = manager.create_basic_file(str(tmp_path / "state.json"))
    payload = {"a": 1, "b": [1, 2]}

    manager.write_to_file(key, payload)
    assert manager.read_file(key) == json.dumps(payload, indent=2)

    manager.write_to_file(key, payload, pretty=False)
    assert json.loads(manager.read_file(key)) == payload
    assert "\n" not in manager.read_file(key)


def test_keyed_io_unknown_key(manager: FileManager) -> None:
    """TC-10: Unknown keys raise NotFoundError at the point of use."""
    with pytest.raises(NotFoundError):
        manager.read_file("ghost")
    with pytest.raises(NotFoundError):
        manager.write_to_file("ghost", "x")


def test_alias_conflict(manager: FileManager, tmp_path: Path) -> None:
    """TC-11: A second alias with the same name conflicts."""
    k1 = manager.create_basic_file(str(tmp_path / "one.txt"))
    k2 = manager.create_basic_file(str(tmp_path / "two.txt"))
    manager.add_alias("x", k1)

    with pytest.raises(ConflictError):
        manager.add_alias("x", k2)

# -----------------------------------------------------------------------------
# RENAME / DELETE / COPY / MOVE
# -----------------------------------------------------------------------------

def test_rename_and_delete(manager: FileManager, tmp_path: Path) -> None:
    """TC-12: Renamed files keep their aliases; deleting drops them."""
    key = manager.create_basic_file(str(tmp_path / "old.txt"))
    manager.add_alias("alias", key)

    new_key = manager.rename_file("alias", "new.txt")
    assert new_key == "new.txt"
    assert (tmp_path / "new.txt").exists()
    assert manager.resolve_key("alias") == "new.txt"

    manager.delete_file("alias")
    assert not (tmp_path / "new.txt").exists()
    assert manager.resolve_key("alias") == "alias"

    with pytest.raises(NotFoundError):
        manager.delete_file("new.txt")


def test_copy_and_move(manager: FileManager, tmp_path: Path) -> None:
    """TC-13: Copies and moves register the destination under its stem."""
    src = tmp_path / "src.txt"
    src.write_text("payload")
    manager.create_basic_file(str(src), policy="preserve")

    copy_key = manager.copy_file(str(src), str(tmp_path / "copy.txt"))
    assert copy_key == "copy"
    assert manager.read_file("copy") == "payload"

    move_key = manager.move_file(str(src), str(tmp_path / "moved.txt"))
    assert move_key == "moved"
    assert "src" not in manager.registry
    assert manager.read_file("moved") == "payload"

    with pytest.raises(NotFoundError):
        manager.copy_file(str(src), str(tmp_path / "again.txt"))


def test_backup_file(manager: FileManager, tmp_path: Path) -> None:
    """TC-14: Backups are timestamped siblings registered like copies."""
    src = tmp_path / "config.ini"
    src.write_text("[main]")

    backup = Path(manager.backup_file(str(src)))

    assert backup.parent == tmp_path
    assert backup.name.startswith("config_")
    assert backup.suffix == ".ini"
    assert ":" not in backup.name
    assert backup.read_text() == "[main]"
    assert manager.get_path(backup.stem) == str(backup)


def test_search_and_metadata(manager: FileManager, tmp_path: Path) -> None:
    """TC-15: Collaborator operations are reachable from the facade."""
    (tmp_path / "alpha.log").write_text("12345")
    (tmp_path / "beta.txt").write_text("")

    assert manager.search(str(tmp_path), "alp") == [str(tmp_path / "alpha.log")]
    meta = manager.get_metadata(str(tmp_path / "alpha.log"))
    assert meta.size == 5 and meta.is_file and not meta.is_directory
    assert manager.exists(str(tmp_path / "beta.txt"))

# -----------------------------------------------------------------------------
# FOLDERS & LIFECYCLE
# -----------------------------------------------------------------------------

def test_folder_structure_round_trip(manager: FileManager, tmp_path: Path) -> None:
    """TC-16: Facade folder operations honour the configured delete mode."""
    base = tmp_path / "base"
    manager.create_folder_structure(str(base), ["a", ["b"]], ensure_base=True)
    assert (base / "a" / "b").is_dir()

    manager.delete_folder_structure(str(base), ["a", ["b"]])
    assert not (base / "a").exists()
    assert base.is_dir()

    manager.create_folder_structure(str(base), ["x", ["y"]])
    manager.delete_folder_structure(str(base), ["x", "*", ["y"]], legacy=True)
    assert not (base / "x" / "y").exists()


def test_context_manager_purges_temporaries(tmp_path: Path) -> None:
    """TC-17: Leaving the block deletes temporary files but keeps regular ones."""
    with FileManager(install_hooks=False) as fm:
        temp_key = fm.create_temp_file(str(tmp_path / "a.txt"))
        fm.create_basic_file(str(tmp_path / "b.txt"))
        temp_path = Path(fm.get_path(temp_key))
        assert temp_path.exists()

    assert not temp_path.exists()
    assert (tmp_path / "b.txt").exists()
    assert fm.registry.temporary_keys() == frozenset()


def test_clear_temp_files_skips_vanished(manager: FileManager, tmp_path: Path) -> None:
    """TC-18: Manual purge tolerates files removed behind the registry's back."""
    k1 = manager.create_temp_file(str(tmp_path / "one.txt"))
    manager.create_temp_file(str(tmp_path / "two.txt"))
    Path(manager.get_path(k1)).unlink()

    assert manager.clear_temp_files() == 1
    assert manager.registry.temporary_keys() == frozenset()


def test_invalid_config_falls_back(tmp_path: Path) -> None:
    """TC-19: Bad configuration values are replaced by defaults."""
    fm = FileManager({"naming_policy": "bogus", "temp_prefix": "tmp-"}, install_hooks=False)

    assert fm.config["naming_policy"] == "overwrite"
    assert fm.create_temp_file(str(tmp_path / "x.txt")) == "tmp-x"
    fm.close()


def test_closed_manager_refuses_temp_files(tmp_path: Path) -> None:
    """TC-20: After close() no temporary file can be created that would outlive the sweep."""
    fm = FileManager(install_hooks=False)
    fm.close()

    with pytest.raises(FileKeeperError):
        fm.create_temp_file(str(tmp_path / "late.txt"))
    assert not (tmp_path / "temp_late.txt").exists()

    key = fm.create_basic_file(str(tmp_path / "still.txt"))
    assert Path(fm.get_path(key)).exists()
