from __future__ import annotations

"""
Unit tests for the Key Registry.

Verifies:
1. Registration and temporary tracking.
2. Single-hop alias resolution and conflicts.
3. Removal semantics (file, aliases, temporary mark).
4. Rename with alias cascading.
"""

from pathlib import Path

import pytest

from filekeeper.core.services.registry import KeyRegistry
from filekeeper.domain.errors import ConflictError, NotFoundError
from filekeeper.domain.models import FileClass


@pytest.fixture
def registry(tmp_path: Path) -> KeyRegistry:
    """Registry holding one regular file 'a' and one temporary file 'tmp'."""
    reg = KeyRegistry()
    (tmp_path / "a.txt").write_text("A")
    (tmp_path / "tmp.txt").write_text("T")
    reg.register("a", str(tmp_path / "a.txt"))
    reg.register("tmp", str(tmp_path / "tmp.txt"), FileClass.TEMPORARY)
    return reg


def test_register_tracks_temporary(registry: KeyRegistry) -> None:
    """TC-01: Temporary records are tracked, regular ones are not."""
    assert registry.temporary_keys() == frozenset({"tmp"})
    assert "a" in registry
    assert len(registry) == 2

    registry.register("tmp", registry.get("tmp").path, FileClass.REGULAR)
    assert registry.temporary_keys() == frozenset()


def test_alias_resolution(registry: KeyRegistry) -> None:
    """TC-02: addAlias then resolveKey returns the key; unknown names pass through."""
    registry.add_alias("first", "a")

    assert registry.resolve_key("first") == "a"
    assert registry.resolve_key("unknown") == "unknown"
    assert registry.path_of("first") == registry.get("a").path


def test_alias_conflicts(registry: KeyRegistry) -> None:
    """TC-03: Aliases never collide with keys or aliases and target real keys only."""
    registry.add_alias("first", "a")

    with pytest.raises(ConflictError):
        registry.add_alias("first", "tmp")
    with pytest.raises(ConflictError):
        registry.add_alias("tmp", "a")
    with pytest.raises(ConflictError):
        registry.add_alias("other", "missing")
    with pytest.raises(ConflictError):
        registry.add_alias("chained", "first")


def test_lookup_unknown_key(registry: KeyRegistry) -> None:
    """TC-04: Unknown keys are reported at the point of use."""
    with pytest.raises(NotFoundError):
        registry.lookup("nothing")


def test_remove_drops_file_aliases_and_mark(registry: KeyRegistry) -> None:
    """TC-05: remove deletes the file and everything attached to the key."""
    path = Path(registry.get("tmp").path)
    registry.add_alias("scratch", "tmp")

    registry.remove("tmp")

    assert not path.exists()
    assert "tmp" not in registry
    assert registry.temporary_keys() == frozenset()
    assert "scratch" not in registry.aliases()


def test_remove_missing(registry: KeyRegistry) -> None:
    """TC-06: Unknown key or vanished file raise NotFoundError."""
    with pytest.raises(NotFoundError):
        registry.remove("nothing")

    Path(registry.get("a").path).unlink()
    with pytest.raises(NotFoundError):
        registry.remove("a")
    assert "a" not in registry


def test_rename_moves_file_and_cascades_aliases(registry: KeyRegistry, tmp_path: Path) -> None:
    """TC-07: rename moves the file, re-keys it and keeps aliases pointing at it."""
    registry.add_alias("first", "a")

    record = registry.rename("first", "b.txt")

    assert record.key == "b.txt"
    assert record.path == str(tmp_path / "b.txt")
    assert (tmp_path / "b.txt").read_text() == "A"
    assert not (tmp_path / "a.txt").exists()
    assert "a" not in registry
    assert registry.resolve_key("first") == "b.txt"


def test_rename_keeps_file_class(registry: KeyRegistry) -> None:
    """TC-08: A renamed temporary file stays temporary under its new key."""
    registry.rename("tmp", "scratch.txt", new_key="scratch")

    assert registry.temporary_keys() == frozenset({"scratch"})


def test_rename_conflict(registry: KeyRegistry) -> None:
    """TC-09: Renaming onto another key or an alias is refused."""
    registry.add_alias("first", "a")

    with pytest.raises(ConflictError):
        registry.rename("a", "tmp")
    with pytest.raises(ConflictError):
        registry.rename("tmp", "x.txt", new_key="first")


def test_register_over_alias_name(registry: KeyRegistry, tmp_path: Path) -> None:
    """TC-10: A new key replaces an alias with the same name."""
    registry.add_alias("first", "a")
    registry.register("first", str(tmp_path / "tmp.txt"))

    assert registry.resolve_key("first") == "first"
    assert "first" not in registry.aliases()


def test_remove_alias(registry: KeyRegistry) -> None:
    """TC-11: Removing an alias leaves the original key untouched."""
    registry.add_alias("first", "a")
    registry.remove_alias("first")

    assert "first" not in registry.aliases()
    assert "a" in registry
    with pytest.raises(NotFoundError):
        registry.remove_alias("first")


def test_rename_onto_existing_file_is_refused(registry: KeyRegistry, tmp_path: Path) -> None:
    """TC-12: Renaming onto a file that already exists keeps both files intact."""
    (tmp_path / "draft.txt").write_text("draft")
    (tmp_path / "unmanaged.txt").write_text("u")
    registry.register("draft", str(tmp_path / "draft.txt"))

    with pytest.raises(ConflictError):
        registry.rename("draft", "a.txt")
    with pytest.raises(ConflictError):
        registry.rename("draft", "unmanaged.txt")

    assert (tmp_path / "a.txt").read_text() == "A"
    assert (tmp_path / "draft.txt").read_text() == "draft"
    assert (tmp_path / "unmanaged.txt").read_text() == "u"
    assert registry.path_of("draft") == str(tmp_path / "draft.txt")
