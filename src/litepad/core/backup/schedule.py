"""Auto-backup due check.

The application timer calls is_auto_backup_due periodically; whether a
backup is due depends only on the settings and the newest archive's
timestamp, so restarting the application does not reset the interval.
"""

from __future__ import annotations

from datetime import datetime, timedelta

from litepad.core.config import BackupSettings


def is_auto_backup_due(
    settings: BackupSettings,
    last_backup_at: datetime | None,
    now: datetime,
) -> bool:
    """Whether an automatic backup should run now.

    Args:
        settings: Current backup settings (interval in minutes)
        last_backup_at: Timestamp of the newest archive, None if there is none
        now: Current local time
    """
    if not settings.auto_backup_enabled or settings.backup_directory is None:
        return False
    if last_backup_at is None:
        return True
    return now - last_backup_at >= timedelta(minutes=settings.auto_backup_interval)
