"""Backup archives of the document snapshot and image store."""

from litepad.core.backup.archive import DATA_ENTRY, IMAGES_PREFIX, BackupArchiver
from litepad.core.backup.schedule import is_auto_backup_due

__all__ = ["DATA_ENTRY", "IMAGES_PREFIX", "BackupArchiver", "is_auto_backup_due"]
