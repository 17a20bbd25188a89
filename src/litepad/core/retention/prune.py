# src/litepad/core/retention/prune.py
"""Retention for backup archives.

Keeps the newest N archives in a backup directory and deletes the rest.
Ordering is by filename, which encodes the creation timestamp.
"""

from __future__ import annotations

from pathlib import Path

from litepad.contracts.backup import RetentionResult
from litepad.contracts.errors import StorageIOError
from litepad.core.logging import get_logger
from litepad.core.naming import list_backup_filenames

logger = get_logger(__name__)


class RetentionManager:
    """Prunes old backup archives.

    Deletion is best-effort: an archive that cannot be removed (locked,
    permission denied) is reported in RetentionResult.failed and the pass
    continues, so one stuck old archive never fails a new backup.
    """

    def enforce(self, backup_dir: Path, max_backups: int) -> RetentionResult:
        """Delete every archive beyond the newest max_backups.

        Args:
            backup_dir: Directory holding archives
            max_backups: Number of archives to keep

        Returns:
            Which archives were kept, deleted, and failed to delete

        Raises:
            ValueError: If max_backups is negative
            StorageIOError: If backup_dir cannot be listed
        """
        if max_backups < 0:
            raise ValueError(f"max_backups must be >= 0, got {max_backups}")

        try:
            filenames = list_backup_filenames(backup_dir)
        except FileNotFoundError:
            return RetentionResult(kept=(), deleted=(), failed=())
        except OSError as e:
            raise StorageIOError(f"Failed to list backups: {e}", path=backup_dir) from e

        kept = filenames[:max_backups]
        deleted: list[str] = []
        failed: list[str] = []
        for filename in filenames[max_backups:]:
            try:
                (backup_dir / filename).unlink()
            except OSError as e:
                logger.warning("old_backup_delete_failed", filename=filename, error=str(e))
                failed.append(filename)
                continue
            logger.info("old_backup_deleted", filename=filename)
            deleted.append(filename)

        return RetentionResult(kept=tuple(kept), deleted=tuple(deleted), failed=tuple(failed))
