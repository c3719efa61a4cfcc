from __future__ import annotations

"""
Global Pytest Configuration and Fixtures.

This module sets up the testing environment, including:
1. Path manipulation to ensure the 'src' directory is importable.
2. Shared fixtures: an isolated user data directory and a FileManager whose
   shutdown hook is not attached to the test process.
"""

import os
import sys
from pathlib import Path
from typing import Generator
from unittest.mock import patch

import pytest

# -----------------------------------------------------------------------------
# Path Configuration
# -----------------------------------------------------------------------------
_SRC_PATH = os.path.abspath(os.path.join(os.path.dirname(__file__), "..", "src"))
if _SRC_PATH not in sys.path:
    sys.path.insert(0, _SRC_PATH)

from filekeeper.core.services.manager import FileManager  # noqa: E402


# -----------------------------------------------------------------------------
# Shared Fixtures
# -----------------------------------------------------------------------------
@pytest.fixture
def user_data_dir(tmp_path: Path) -> Generator[Path, None, None]:
    """
    Redirect the user data directory into a temporary folder.

    Yields:
        Path: The fake user data directory.
    """
    data_dir = tmp_path / "user_data"
    data_dir.mkdir()
    with patch("filekeeper.domain.config.get_user_data_dir", return_value=str(data_dir)):
        yield data_dir


@pytest.fixture
def manager() -> Generator[FileManager, None, None]:
    """
    Provide a FileManager with default configuration and no process hooks.

    Yields:
        FileManager: Manager closed (temporary files purged) after the test.
    """
    fm = FileManager(install_hooks=False)
    yield fm
    fm.close()
