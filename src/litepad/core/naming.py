"""Backup archive naming convention shared by the archiver and retention.

    litepad_backup_{YYYYMMDD_HHMMSS}.zip

The timestamp is fixed-width and zero-padded, so sorting filenames as
strings sorts archives chronologically.
"""

from __future__ import annotations

import re
from datetime import datetime
from pathlib import Path, PurePosixPath, PureWindowsPath

BACKUP_PREFIX = "litepad_backup_"
BACKUP_SUFFIX = ".zip"
TIMESTAMP_FORMAT = "%Y%m%d_%H%M%S"

_TIMESTAMP_PATTERN = re.compile(rf"^{BACKUP_PREFIX}(\d{{8}}_\d{{6}}){re.escape(BACKUP_SUFFIX)}$")


def backup_filename(moment: datetime) -> str:
    """Archive filename for a backup taken at moment (local time)."""
    return f"{BACKUP_PREFIX}{moment.strftime(TIMESTAMP_FORMAT)}{BACKUP_SUFFIX}"


def is_backup_filename(name: str) -> bool:
    """Whether name follows the archive naming convention."""
    return name.startswith(BACKUP_PREFIX) and name.endswith(BACKUP_SUFFIX)


def validate_backup_filename(name: str) -> None:
    """Raise ValueError unless name is a bare archive filename.

    Filenames arrive from the UI and are joined onto the backup directory,
    so anything carrying a directory component is rejected.
    """
    bare = PurePosixPath(name).name == name and PureWindowsPath(name).name == name
    if not bare or not is_backup_filename(name):
        raise ValueError(f"Invalid backup filename: {name!r}")


def parse_backup_timestamp(name: str) -> datetime | None:
    """Timestamp encoded in a conforming filename, or None."""
    match = _TIMESTAMP_PATTERN.match(name)
    if match is None:
        return None
    try:
        return datetime.strptime(match.group(1), TIMESTAMP_FORMAT)
    except ValueError:
        return None


def list_backup_filenames(backup_dir: Path) -> list[str]:
    """Timestamped archive filenames in backup_dir, newest first.

    Names with the prefix and suffix but no parseable timestamp (such as
    litepad_backup_manual.zip) are excluded, so retention only ever orders
    archives by their encoded creation time.

    Raises:
        OSError: If the directory cannot be read
    """
    names = [
        entry.name
        for entry in backup_dir.iterdir()
        if entry.is_file() and parse_backup_timestamp(entry.name) is not None
    ]
    names.sort(reverse=True)
    return names
