"""Typed errors for the LitePad store.

Each exception maps to one ErrorKind. Structured fields (paths, digests)
are kept on the exception so callers and tests never parse messages;
conversion to a display string happens only at the outermost boundary
via to_display().
"""

from __future__ import annotations

from pathlib import Path

from litepad.contracts.enums import ErrorKind


class LitepadError(Exception):
    """Base exception for all store and backup failures."""

    kind: ErrorKind

    def to_display(self) -> str:
        """Return the message shown to the user."""
        return str(self)


class StorageIOError(LitepadError):
    """Raised when a filesystem read, write, or create fails.

    The originating OSError is chained as __cause__.
    """

    kind = ErrorKind.IO

    def __init__(self, message: str, path: Path | None = None) -> None:
        self.path = path
        super().__init__(message)


class NotFoundError(LitepadError):
    """Raised for a missing blob, backup file, or archive entry."""

    kind = ErrorKind.NOT_FOUND

    def __init__(self, what: str, name: str) -> None:
        self.what = what
        self.name = name
        super().__init__(f"{what} not found: {name}")


class HashMismatchError(LitepadError):
    """Raised when content does not hash to the digest it claims."""

    kind = ErrorKind.HASH_MISMATCH

    def __init__(self, expected: str, actual: str) -> None:
        self.expected = expected
        self.actual = actual
        super().__init__(f"Hash mismatch: expected {expected}, got {actual}")


class ConfigError(LitepadError):
    """Raised when required configuration is absent (no backup directory)."""

    kind = ErrorKind.CONFIG


class WritePermissionError(LitepadError):
    """Raised when a location cannot be written or must not be used."""

    kind = ErrorKind.PERMISSION

    def __init__(self, path: Path, reason: str | None = None) -> None:
        self.path = path
        self.reason = reason
        super().__init__(reason or f"No write permission: {path}")


class ArchiveFormatError(LitepadError):
    """Raised when a backup archive is unreadable or lacks data.json."""

    kind = ErrorKind.ARCHIVE_FORMAT

    def __init__(self, filename: str, reason: str) -> None:
        self.filename = filename
        self.reason = reason
        super().__init__(f"Invalid backup archive {filename}: {reason}")
