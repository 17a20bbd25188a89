"""Result records for backup, retention, path validation, and migration."""

from __future__ import annotations

from dataclasses import dataclass, field

from litepad.contracts.enums import PathErrorCode


@dataclass(frozen=True, slots=True)
class BackupInfo:
    """One archive in the backup directory.

    created_at is filesystem creation time in whole seconds since the
    epoch, or 0 when the platform cannot report it.
    """

    filename: str
    created_at: int
    size: int


@dataclass(frozen=True, slots=True)
class RetentionResult:
    """Result of a retention pass over a backup directory.

    Deletion failures do not abort the pass; filenames that could not be
    removed are reported in failed so callers can surface them.
    """

    kept: tuple[str, ...]
    deleted: tuple[str, ...]
    failed: tuple[str, ...]


@dataclass(frozen=True, slots=True)
class BackupResult:
    """Result of creating one backup archive."""

    filename: str
    entry_count: int  # data.json plus image entries
    size: int
    retention: RetentionResult


@dataclass(frozen=True, slots=True)
class PathValidationResult:
    """Outcome of probing a candidate backup directory."""

    is_valid: bool
    exists: bool
    is_writable: bool
    error_code: PathErrorCode | None = None


@dataclass(frozen=True, slots=True)
class MigrationReport:
    """Result of migrating legacy image links across a set of documents.

    documents maps document IDs to rewritten content, for changed documents only.
    """

    migrated: int
    failed: int
    skipped: int
    documents: dict[str, str] = field(default_factory=dict)
