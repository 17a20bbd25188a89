"""BlobStore protocol for content-addressable image storage.

This protocol defines the interface used by:
- core/blob_store.py (FilesystemBlobStore implementation)
- core/migration.py (LegacyMigrator ingests legacy files through it)
- commands.py (the calling-layer facade)

Consolidated here to avoid circular imports and provide single source of truth.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Protocol, runtime_checkable

# Reference URLs hand the frontend a location that survives reinstalls and
# machine moves; the serving layer resolves them against the images root.
IMAGE_URL_SCHEME = "litepad"
IMAGE_URL_PREFIX = f"{IMAGE_URL_SCHEME}://images/"


def image_url(digest: str, extension: str) -> str:
    """Build the reference URL for a stored blob."""
    return f"{IMAGE_URL_PREFIX}{digest}{extension}"


@dataclass(frozen=True, slots=True)
class BlobDescriptor:
    """Result of saving or migrating one image.

    Attributes:
        digest: SHA-256 hex digest of the content (64 lowercase chars)
        url: litepad://images/{digest}{extension}
        size: Content length in bytes
        extension: File extension including the leading dot
    """

    digest: str
    url: str
    size: int
    extension: str

    @property
    def filename(self) -> str:
        """On-disk filename inside the images root."""
        return f"{self.digest}{self.extension}"


@runtime_checkable
class BlobStore(Protocol):
    """Protocol for image storage backends.

    All implementations must provide content-addressable storage where
    blobs are named by the SHA-256 of their content plus an extension.
    """

    def save(self, content: bytes, extension: str) -> BlobDescriptor:
        """Store content unless an identical blob exists.

        Args:
            content: Raw image bytes
            extension: Extension with leading dot, e.g. ".png"

        Returns:
            Descriptor for the stored blob
        """
        ...

    def exists(self, digest: str, extension: str) -> bool:
        """Check whether a blob is present."""
        ...

    def resolve_path(self, digest: str, extension: str) -> Path:
        """Return the absolute on-disk path of a present blob.

        Raises:
            NotFoundError: If the blob is absent
        """
        ...

    def read(self, digest: str, extension: str) -> bytes:
        """Read blob content.

        Raises:
            NotFoundError: If the blob is absent
            StorageIOError: If the file cannot be read
        """
        ...

    def save_verified(self, digest: str, extension: str, content: bytes) -> Path:
        """Store content received from an untrusted source claiming a digest.

        Raises:
            HashMismatchError: If content does not hash to digest (nothing written)
        """
        ...
