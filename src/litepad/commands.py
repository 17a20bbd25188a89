# src/litepad/commands.py
"""Operations exposed to the application's command layer.

LitepadCommands binds the blob store, migrator, archiver, and path
validator to one StoreContext and reads backup settings afresh on every
call. Methods raise LitepadError subclasses; the *_payload helpers and
describe_error convert results and failures into the JSON-ready shapes the
frontend expects, and are the only place where errors become strings.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping, Sequence
from datetime import datetime
from pathlib import Path
from typing import Any

from litepad.contracts.backup import (
    BackupInfo,
    BackupResult,
    MigrationReport,
    PathValidationResult,
)
from litepad.contracts.blob_store import BlobDescriptor
from litepad.contracts.errors import LitepadError
from litepad.core.backup import BackupArchiver, is_auto_backup_due
from litepad.core.blob_store import FilesystemBlobStore
from litepad.core.config import BackupSettings, default_backup_directory
from litepad.core.context import StoreContext
from litepad.core.logging import get_logger
from litepad.core.migration import LegacyMigrator
from litepad.core.paths import PathValidator, select_backup_directory

__all__ = [
    "LitepadCommands",
    "backup_info_payload",
    "describe_error",
    "descriptor_payload",
    "migration_payload",
    "validation_payload",
]

logger = get_logger(__name__)


class LitepadCommands:
    """Facade over the store and backup subsystems for one data root."""

    def __init__(
        self,
        context: StoreContext,
        *,
        archiver: BackupArchiver | None = None,
        validator: PathValidator | None = None,
    ) -> None:
        self._context = context
        self._store = FilesystemBlobStore(context)
        self._migrator = LegacyMigrator(self._store)
        self._archiver = archiver if archiver is not None else BackupArchiver()
        self._validator = validator if validator is not None else PathValidator()

    @property
    def context(self) -> StoreContext:
        return self._context

    # Images

    def save_image(self, content: bytes, ext: str) -> BlobDescriptor:
        return self._store.save(content, ext)

    def has_image(self, digest: str, ext: str) -> bool:
        return self._store.exists(digest, ext)

    def get_image_path(self, digest: str, ext: str) -> str:
        return str(self._store.resolve_path(digest, ext))

    def read_image(self, digest: str, ext: str) -> bytes:
        return self._store.read(digest, ext)

    def save_downloaded_image(self, digest: str, ext: str, content: bytes) -> str:
        return str(self._store.save_verified(digest, ext, content))

    # Legacy migration

    def migrate_old_image(self, old_path: str) -> BlobDescriptor:
        return self._migrator.migrate(old_path)

    def check_old_images_exist(self, paths: Sequence[str]) -> list[bool]:
        return self._migrator.check_existing(paths)

    def migrate_documents(self, documents: Mapping[str, str]) -> MigrationReport:
        return self._migrator.migrate_documents(documents)

    # Backups

    def get_backup_settings(self) -> BackupSettings:
        return self._context.settings_store.get_backup_settings()

    def set_backup_settings(self, settings: BackupSettings) -> None:
        self._context.settings_store.set_backup_settings(settings)

    def get_default_backup_dir(self) -> str:
        return str(default_backup_directory())

    def backup(self, snapshot: str) -> BackupResult:
        """Create an archive using the current settings and prune old ones."""
        settings = self.get_backup_settings()
        return self._archiver.create_backup(
            snapshot,
            self._context.images_root,
            settings.backup_directory,
            max_backups=settings.max_backups,
        )

    def perform_backup(self, snapshot: str) -> str:
        return self.backup(snapshot).filename

    def get_backup_list(self) -> list[BackupInfo]:
        return self._archiver.list_backups(self.get_backup_settings().backup_directory)

    def restore_backup(self, filename: str) -> str:
        settings = self.get_backup_settings()
        return self._archiver.restore_backup(filename, settings.backup_directory, self._context.images_root)

    def delete_backup(self, filename: str) -> None:
        self._archiver.delete_backup(filename, self.get_backup_settings().backup_directory)

    def run_auto_backup_if_due(
        self,
        snapshot_provider: Callable[[], str],
        *,
        now: datetime | None = None,
    ) -> str | None:
        """Create a backup when auto-backup is enabled and the interval elapsed.

        The snapshot is only requested when a backup will actually be made.

        Returns:
            The new archive's filename, or None when no backup was due
        """
        settings = self.get_backup_settings()
        moment = now if now is not None else datetime.now()
        last = self._archiver.latest_backup_time(settings.backup_directory)
        if not is_auto_backup_due(settings, last, moment):
            return None
        result = self._archiver.create_backup(
            snapshot_provider(),
            self._context.images_root,
            settings.backup_directory,
            max_backups=settings.max_backups,
            now=moment,
        )
        logger.info("auto_backup_completed", filename=result.filename)
        return result.filename

    # Backup location

    def validate_backup_path(self, path: str) -> PathValidationResult:
        return self._validator.validate(path)

    def select_backup_directory(self, picker: Callable[[], str | Path | None]) -> str | None:
        chosen = select_backup_directory(picker, self._context.install_dir)
        return None if chosen is None else str(chosen)


def descriptor_payload(descriptor: BlobDescriptor) -> dict[str, Any]:
    """Shape returned by save_image."""
    return {
        "hash": descriptor.digest,
        "url": descriptor.url,
        "size": descriptor.size,
        "ext": descriptor.extension,
    }


def migration_payload(descriptor: BlobDescriptor) -> dict[str, Any]:
    """Shape returned by migrate_old_image."""
    return {
        "hash": descriptor.digest,
        "ext": descriptor.extension,
        "size": descriptor.size,
        "newUrl": descriptor.url,
    }


def backup_info_payload(info: BackupInfo) -> dict[str, Any]:
    return {"filename": info.filename, "createdAt": info.created_at, "size": info.size}


def validation_payload(result: PathValidationResult) -> dict[str, Any]:
    return {
        "isValid": result.is_valid,
        "exists": result.exists,
        "isWritable": result.is_writable,
        "errorCode": None if result.error_code is None else str(result.error_code),
    }


def describe_error(error: LitepadError) -> dict[str, Any]:
    """Convert a failure into {kind, message} for the frontend."""
    return {"kind": str(error.kind), "message": error.to_display()}
