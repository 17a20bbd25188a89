# src/litepad/core/blob_store.py
"""
Blob store for user images.

Uses content-addressable storage (hash-based) for:
- Automatic deduplication of identical content
- Tamper detection for content arriving from remote sources
- Stable reference URLs that survive reinstalls and machine moves

Layout: <images_root>/{sha256-hex}{extension}

A blob is immutable once written. Digest collisions are treated as
impossible: when {digest}{extension} already exists the write is skipped
without comparing content.
"""

from __future__ import annotations

import hashlib
import hmac
import re
from pathlib import Path

from litepad.contracts.blob_store import BlobDescriptor, image_url
from litepad.contracts.errors import HashMismatchError, NotFoundError, StorageIOError
from litepad.core.context import StoreContext
from litepad.core.files import atomic_write_bytes
from litepad.core.logging import get_logger

__all__ = ["FilesystemBlobStore", "compute_digest", "validate_digest", "validate_extension"]

logger = get_logger(__name__)

# SHA-256 hex digest: exactly 64 lowercase hex characters
_SHA256_HEX_PATTERN = re.compile(r"^[a-f0-9]{64}$")
# Leading dot plus a short alphanumeric suffix; anything else could smuggle
# path separators into the filename.
_EXTENSION_PATTERN = re.compile(r"^\.[A-Za-z0-9]{1,16}$")


def compute_digest(content: bytes) -> str:
    """Return the SHA-256 hex digest used as the blob key."""
    return hashlib.sha256(content).hexdigest()


def validate_digest(digest: str) -> None:
    """Raise ValueError unless digest is 64 lowercase hex characters."""
    if not _SHA256_HEX_PATTERN.match(digest):
        raise ValueError(f"Invalid digest: must be 64 lowercase hex characters, got {repr(digest)[:50]}")


def validate_extension(extension: str) -> None:
    """Raise ValueError unless extension looks like '.png'."""
    if not _EXTENSION_PATTERN.match(extension):
        raise ValueError(f"Invalid extension: must be a dot followed by 1-16 letters or digits, got {extension!r}")


class FilesystemBlobStore:
    """Filesystem-based image store.

    The images root is read from the StoreContext on every call, so a
    relocation of the data root is observed by the next operation.
    """

    def __init__(self, context: StoreContext) -> None:
        """Initialize filesystem store.

        Args:
            context: Store configuration holding the images root
        """
        self._context = context

    @property
    def root(self) -> Path:
        """Current images root directory."""
        return self._context.images_root

    def _path_for(self, digest: str, extension: str) -> Path:
        """Get filesystem path for a blob after validating its name parts."""
        validate_digest(digest)
        validate_extension(extension)
        return self.root / f"{digest}{extension}"

    def _write_if_absent(self, path: Path, content: bytes) -> None:
        if path.exists():
            logger.debug("blob_exists", filename=path.name)
            return
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            atomic_write_bytes(path, content)
        except OSError as e:
            raise StorageIOError(f"Failed to write image {path.name}: {e}", path=path) from e
        logger.debug("blob_written", filename=path.name, size=len(content))

    def save(self, content: bytes, extension: str) -> BlobDescriptor:
        """Store content and return its descriptor.

        Saving byte-identical content again is a no-op that returns an
        equal descriptor.

        Raises:
            StorageIOError: If the images root is not writable
        """
        digest = compute_digest(content)
        path = self._path_for(digest, extension)
        self._write_if_absent(path, content)
        return BlobDescriptor(
            digest=digest,
            url=image_url(digest, extension),
            size=len(content),
            extension=extension,
        )

    def exists(self, digest: str, extension: str) -> bool:
        """Check if a blob exists."""
        return self._path_for(digest, extension).exists()

    def resolve_path(self, digest: str, extension: str) -> Path:
        """Return the absolute path of a present blob.

        Raises:
            NotFoundError: If the blob is absent
        """
        path = self._path_for(digest, extension)
        if not path.exists():
            raise NotFoundError("Image", path.name)
        return path.resolve()

    def read(self, digest: str, extension: str) -> bytes:
        """Read blob content.

        Content is returned as stored; integrity is established at write
        time (save hashes, save_verified checks the claim).

        Raises:
            NotFoundError: If the blob is absent
            StorageIOError: If the file exists but cannot be read
        """
        path = self._path_for(digest, extension)
        try:
            return path.read_bytes()
        except FileNotFoundError:
            raise NotFoundError("Image", path.name) from None
        except OSError as e:
            raise StorageIOError(f"Failed to read image {path.name}: {e}", path=path) from e

    def save_verified(self, digest: str, extension: str, content: bytes) -> Path:
        """Store content downloaded from a remote source claiming a digest.

        The digest is recomputed before anything touches the disk; a
        disagreeing claim is rejected and nothing is written.

        Returns:
            Absolute path of the stored blob

        Raises:
            HashMismatchError: If content does not hash to digest
        """
        actual = compute_digest(content)
        # Timing-safe comparison; the claim comes from an untrusted peer
        if not hmac.compare_digest(actual.encode(), digest.encode()):
            logger.warning("blob_hash_mismatch", expected=digest, actual=actual)
            raise HashMismatchError(expected=digest, actual=actual)

        path = self._path_for(digest, extension)
        self._write_if_absent(path, content)
        return path.resolve()
