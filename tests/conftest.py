# tests/conftest.py
"""Shared test fixtures.

Every fixture builds on pytest's tmp_path so tests never touch the real
data root, backup directory, or home directory.
"""

from __future__ import annotations

import logging
import os
import sys
from collections.abc import Iterator
from pathlib import Path

import pytest

from litepad.commands import LitepadCommands
from litepad.core.backup import BackupArchiver
from litepad.core.blob_store import FilesystemBlobStore
from litepad.core.config import BackupSettings
from litepad.core.context import StoreContext

# Permission tests rely on the OS refusing writes; root ignores mode bits
# and Windows does not honour chmod on directories.
requires_permission_enforcement = pytest.mark.skipif(
    sys.platform == "win32" or (hasattr(os, "geteuid") and os.geteuid() == 0),
    reason="directory permissions are not enforced for this user/platform",
)


@pytest.fixture
def install_dir(tmp_path: Path) -> Path:
    path = tmp_path / "install"
    path.mkdir()
    return path


@pytest.fixture
def context(tmp_path: Path, install_dir: Path) -> StoreContext:
    """Store context rooted at a fresh data directory."""
    return StoreContext(tmp_path / "data", install_dir=install_dir)


@pytest.fixture
def store(context: StoreContext) -> FilesystemBlobStore:
    return FilesystemBlobStore(context)


@pytest.fixture
def archiver() -> BackupArchiver:
    return BackupArchiver()


@pytest.fixture
def backup_dir(tmp_path: Path) -> Path:
    return tmp_path / "backups"


@pytest.fixture
def commands(context: StoreContext, backup_dir: Path) -> LitepadCommands:
    """Commands facade whose settings point at a temp backup directory."""
    context.settings_store.set_backup_settings(BackupSettings(backup_directory=backup_dir, max_backups=3))
    return LitepadCommands(context)


@pytest.fixture(autouse=True)
def _restore_root_logging() -> Iterator[None]:
    """Undo configure_logging calls made by CLI and logging tests.

    configure_logging binds the root handler to the current sys.stderr,
    which CliRunner and capsys close after the test.
    """
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield
    root.handlers = handlers
    root.setLevel(level)
