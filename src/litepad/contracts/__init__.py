"""Shared contracts for cross-boundary data types.

This package is a LEAF MODULE with no outbound dependencies to core.
Settings classes are NOT re-exported here - import them from
litepad.core.config.
"""

from litepad.contracts.backup import (
    BackupInfo,
    BackupResult,
    MigrationReport,
    PathValidationResult,
    RetentionResult,
)
from litepad.contracts.blob_store import (
    IMAGE_URL_PREFIX,
    IMAGE_URL_SCHEME,
    BlobDescriptor,
    BlobStore,
    image_url,
)
from litepad.contracts.enums import ErrorKind, PathErrorCode
from litepad.contracts.errors import (
    ArchiveFormatError,
    ConfigError,
    HashMismatchError,
    LitepadError,
    NotFoundError,
    StorageIOError,
    WritePermissionError,
)

__all__ = [
    "IMAGE_URL_PREFIX",
    "IMAGE_URL_SCHEME",
    "ArchiveFormatError",
    "BackupInfo",
    "BackupResult",
    "BlobDescriptor",
    "BlobStore",
    "ConfigError",
    "ErrorKind",
    "HashMismatchError",
    "LitepadError",
    "MigrationReport",
    "NotFoundError",
    "PathErrorCode",
    "PathValidationResult",
    "RetentionResult",
    "StorageIOError",
    "WritePermissionError",
    "image_url",
]
