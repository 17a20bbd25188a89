"""Tests for the auto-backup due check."""

from datetime import datetime, timedelta
from pathlib import Path

import pytest

from litepad.core.backup import is_auto_backup_due
from litepad.core.config import BackupSettings

NOW = datetime(2024, 5, 1, 12, 0, 0)


@pytest.fixture
def enabled(tmp_path: Path) -> BackupSettings:
    return BackupSettings(backup_directory=tmp_path, auto_backup_enabled=True, auto_backup_interval=30)


def test_disabled_is_never_due(tmp_path: Path) -> None:
    settings = BackupSettings(backup_directory=tmp_path, auto_backup_enabled=False)

    assert not is_auto_backup_due(settings, None, NOW)


def test_unconfigured_directory_is_never_due() -> None:
    settings = BackupSettings(backup_directory=None, auto_backup_enabled=True)

    assert not is_auto_backup_due(settings, None, NOW)


def test_first_backup_is_due(enabled: BackupSettings) -> None:
    assert is_auto_backup_due(enabled, None, NOW)


@pytest.mark.parametrize(
    ("elapsed", "expected"),
    [
        (timedelta(minutes=29, seconds=59), False),
        (timedelta(minutes=30), True),
        (timedelta(hours=5), True),
    ],
)
def test_interval_boundary(enabled: BackupSettings, elapsed: timedelta, expected: bool) -> None:
    assert is_auto_backup_due(enabled, NOW - elapsed, NOW) is expected
