# src/litepad/core/backup/archive.py
"""Zip archives of the full document state.

Archive layout:
    data.json          snapshot text, UTF-8, stored verbatim
    images/<relpath>   every file under the images root, same relative paths

data.json is always the first entry. Archives are written to a hidden temp
file and renamed into place once complete, and retention runs only after
that rename, so a backup can never be pruned before it exists and no
truncated archive is left behind by a failure.

Restores stage extracted images in a temp directory inside the images
root and move them into place only after every entry was extracted.
"""

from __future__ import annotations

import os
import shutil
import tempfile
import zipfile
import zlib
from collections.abc import Iterator
from datetime import datetime
from pathlib import Path, PurePosixPath

from litepad.contracts.backup import BackupInfo, BackupResult
from litepad.contracts.errors import (
    ArchiveFormatError,
    ConfigError,
    NotFoundError,
    StorageIOError,
)
from litepad.core.files import PARTIAL_PREFIX, atomic_writer, is_partial
from litepad.core.logging import get_logger
from litepad.core.naming import (
    backup_filename,
    is_backup_filename,
    list_backup_filenames,
    parse_backup_timestamp,
    validate_backup_filename,
)
from litepad.core.retention import RetentionManager

__all__ = ["DATA_ENTRY", "IMAGES_PREFIX", "BackupArchiver"]

logger = get_logger(__name__)

DATA_ENTRY = "data.json"
IMAGES_PREFIX = "images/"


def _require_backup_dir(backup_dir: Path | None) -> Path:
    if backup_dir is None:
        raise ConfigError("Backup directory not configured")
    return backup_dir


def _creation_time(stat: os.stat_result) -> int:
    """Filesystem creation time in whole seconds, or 0 when unavailable."""
    birthtime = getattr(stat, "st_birthtime", None)
    if birthtime is None:
        return 0
    return int(birthtime)


def _iter_image_files(blob_root: Path) -> Iterator[tuple[Path, str]]:
    """Yield (path, archive name) for every committed file under blob_root.

    In-flight temp files and restore staging directories are skipped.
    """
    if not blob_root.is_dir():
        return
    for path in sorted(blob_root.rglob("*")):
        relative = path.relative_to(blob_root)
        if any(is_partial(Path(part)) for part in relative.parts):
            continue
        if path.is_file():
            yield path, f"{IMAGES_PREFIX}{relative.as_posix()}"


def _safe_relative(entry_name: str, archive_name: str) -> PurePosixPath:
    """Path of an images/ entry relative to the images root.

    Raises:
        ArchiveFormatError: If the entry would land outside the images root
    """
    relative = PurePosixPath(entry_name[len(IMAGES_PREFIX) :])
    if relative.is_absolute() or ".." in relative.parts or "\\" in entry_name or not relative.parts:
        raise ArchiveFormatError(archive_name, f"unsafe entry path {entry_name!r}")
    return relative


class BackupArchiver:
    """Creates, lists, restores, and deletes backup archives.

    Directory arguments are passed on every call; nothing about the backup
    directory's contents is cached between calls.
    """

    def __init__(self, retention: RetentionManager | None = None) -> None:
        self._retention = retention if retention is not None else RetentionManager()

    def create_backup(
        self,
        snapshot: str,
        blob_root: Path,
        backup_dir: Path | None,
        *,
        max_backups: int,
        now: datetime | None = None,
    ) -> BackupResult:
        """Write a new archive, then prune old ones.

        Args:
            snapshot: Opaque document snapshot, stored verbatim as data.json
            blob_root: Images root to copy into the archive
            backup_dir: Destination directory (created if missing)
            max_backups: Archives to keep after this one is written
            now: Timestamp for the filename (default: local now)

        Returns:
            Filename, entry count, archive size, and the retention outcome

        Raises:
            ConfigError: If backup_dir is None
            StorageIOError: If the directory or archive cannot be written
        """
        directory = _require_backup_dir(backup_dir)
        try:
            directory.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise StorageIOError(f"Failed to create backup directory: {e}", path=directory) from e

        filename = backup_filename(now if now is not None else datetime.now())
        destination = directory / filename

        entry_count = 0
        try:
            with (
                atomic_writer(destination) as handle,
                zipfile.ZipFile(handle, "w", compression=zipfile.ZIP_DEFLATED, strict_timestamps=False) as archive,
            ):
                archive.writestr(DATA_ENTRY, snapshot.encode("utf-8"))
                entry_count += 1
                for path, arcname in _iter_image_files(blob_root):
                    archive.write(path, arcname)
                    entry_count += 1
            size = destination.stat().st_size
        except OSError as e:
            raise StorageIOError(f"Failed to write backup {filename}: {e}", path=destination) from e

        logger.info("backup_created", filename=filename, entries=entry_count, size=size)

        retention = self._retention.enforce(directory, max_backups)
        return BackupResult(filename=filename, entry_count=entry_count, size=size, retention=retention)

    def list_backups(self, backup_dir: Path | None) -> list[BackupInfo]:
        """List archives, newest first.

        A missing or unconfigured directory yields an empty list.

        Raises:
            StorageIOError: If the directory exists but cannot be read
        """
        if backup_dir is None or not backup_dir.exists():
            return []

        backups: list[BackupInfo] = []
        try:
            for entry in backup_dir.iterdir():
                if not is_backup_filename(entry.name) or not entry.is_file():
                    continue
                stat = entry.stat()
                backups.append(BackupInfo(filename=entry.name, created_at=_creation_time(stat), size=stat.st_size))
        except OSError as e:
            raise StorageIOError(f"Failed to list backups: {e}", path=backup_dir) from e

        backups.sort(key=lambda info: (info.created_at, info.filename), reverse=True)
        return backups

    def restore_backup(self, filename: str, backup_dir: Path | None, blob_root: Path) -> str:
        """Restore images from an archive and return its snapshot text.

        Images are written into blob_root, overwriting files of the same
        name. Since names are content digests, an overwrite replaces a file
        with identical bytes. Reloading application state from the returned
        snapshot is the caller's job.

        Raises:
            ConfigError: If backup_dir is None
            ValueError: If filename is not a bare archive filename
            NotFoundError: If the archive does not exist
            ArchiveFormatError: If the archive is corrupt or lacks data.json
            StorageIOError: If reading the archive or writing images fails
        """
        directory = _require_backup_dir(backup_dir)
        validate_backup_filename(filename)
        archive_path = directory / filename
        if not archive_path.is_file():
            raise NotFoundError("Backup", filename)

        try:
            with zipfile.ZipFile(archive_path, "r") as archive:
                snapshot = self._read_snapshot(archive, filename)
                restored = self._restore_images(archive, filename, blob_root)
        except (zipfile.BadZipFile, zlib.error, EOFError) as e:
            # Damaged container or deflate stream
            raise ArchiveFormatError(filename, str(e)) from e
        except (NotImplementedError, RuntimeError) as e:
            # zipfile signals unsupported compression and encrypted entries this way
            raise ArchiveFormatError(filename, f"unsupported entry: {e}") from e
        except OSError as e:
            raise StorageIOError(f"Failed to restore backup {filename}: {e}", path=archive_path) from e

        logger.info("backup_restored", filename=filename, images=restored)
        return snapshot

    def _read_snapshot(self, archive: zipfile.ZipFile, filename: str) -> str:
        try:
            raw = archive.read(DATA_ENTRY)
        except KeyError:
            raise ArchiveFormatError(filename, f"missing {DATA_ENTRY}") from None
        try:
            return raw.decode("utf-8")
        except UnicodeDecodeError as e:
            raise ArchiveFormatError(filename, f"{DATA_ENTRY} is not valid UTF-8") from e

    def _restore_images(self, archive: zipfile.ZipFile, filename: str, blob_root: Path) -> int:
        """Extract images/ entries into blob_root via a staging directory."""
        entries = [
            (info, _safe_relative(info.filename, filename))
            for info in archive.infolist()
            if info.filename.startswith(IMAGES_PREFIX) and not info.is_dir()
        ]
        if not entries:
            return 0

        blob_root.mkdir(parents=True, exist_ok=True)
        staging = Path(tempfile.mkdtemp(dir=blob_root, prefix=PARTIAL_PREFIX))
        try:
            for info, relative in entries:
                staged = staging.joinpath(*relative.parts)
                staged.parent.mkdir(parents=True, exist_ok=True)
                with archive.open(info) as source, staged.open("wb") as target:
                    shutil.copyfileobj(source, target)

            for _, relative in entries:
                destination = blob_root.joinpath(*relative.parts)
                destination.parent.mkdir(parents=True, exist_ok=True)
                os.replace(staging.joinpath(*relative.parts), destination)
        finally:
            shutil.rmtree(staging, ignore_errors=True)
        return len(entries)

    def delete_backup(self, filename: str, backup_dir: Path | None) -> None:
        """Delete one archive.

        Raises:
            ConfigError: If backup_dir is None
            ValueError: If filename is not a bare archive filename
            NotFoundError: If the archive does not exist
            StorageIOError: If removal fails
        """
        directory = _require_backup_dir(backup_dir)
        validate_backup_filename(filename)
        path = directory / filename
        try:
            path.unlink()
        except FileNotFoundError:
            raise NotFoundError("Backup", filename) from None
        except OSError as e:
            raise StorageIOError(f"Failed to delete backup {filename}: {e}", path=path) from e
        logger.info("backup_deleted", filename=filename)

    def latest_backup_time(self, backup_dir: Path | None) -> datetime | None:
        """Timestamp of the newest archive, read from its filename."""
        if backup_dir is None or not backup_dir.is_dir():
            return None
        try:
            filenames = list_backup_filenames(backup_dir)
        except OSError as e:
            raise StorageIOError(f"Failed to list backups: {e}", path=backup_dir) from e
        for name in filenames:
            moment = parse_backup_timestamp(name)
            if moment is not None:
                return moment
        return None
