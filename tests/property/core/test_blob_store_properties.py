# tests/property/core/test_blob_store_properties.py
"""Property-based tests for the content-addressed image store.

- Round trip: read(save(content)) returns the bytes that were saved
- Naming: the stored filename is sha256(content) plus the given extension
- Idempotence: saving the same content twice leaves one file
- Verification: save_verified accepts exactly the true digest
"""

from __future__ import annotations

import hashlib
import tempfile
from pathlib import Path

import pytest
from hypothesis import assume, given

from litepad.contracts.errors import HashMismatchError
from litepad.core.blob_store import FilesystemBlobStore, compute_digest, validate_digest
from litepad.core.context import StoreContext
from tests.property.conftest import binary_content, extensions, invalid_digests, nonempty_binary
from tests.property.settings import DETERMINISM_SETTINGS, QUICK_SETTINGS, SLOW_SETTINGS


def _store(tmp_dir: str) -> FilesystemBlobStore:
    root = Path(tmp_dir)
    return FilesystemBlobStore(StoreContext(root / "data", install_dir=root / "install"))


class TestRoundTripProperties:
    @given(content=binary_content, ext=extensions)
    @SLOW_SETTINGS
    def test_read_returns_saved_bytes(self, content: bytes, ext: str) -> None:
        with tempfile.TemporaryDirectory() as tmp_dir:
            store = _store(tmp_dir)

            descriptor = store.save(content, ext)

            assert store.read(descriptor.digest, ext) == content
            assert descriptor.size == len(content)

    @given(content=binary_content, ext=extensions)
    @SLOW_SETTINGS
    def test_filename_is_digest_plus_extension(self, content: bytes, ext: str) -> None:
        with tempfile.TemporaryDirectory() as tmp_dir:
            store = _store(tmp_dir)

            descriptor = store.save(content, ext)

            assert descriptor.digest == hashlib.sha256(content).hexdigest()
            assert [p.name for p in store.root.iterdir()] == [f"{descriptor.digest}{ext}"]
            assert descriptor.url == f"litepad://images/{descriptor.digest}{ext}"


class TestIdempotenceProperties:
    @given(content=nonempty_binary, ext=extensions)
    @SLOW_SETTINGS
    def test_double_save_leaves_one_file(self, content: bytes, ext: str) -> None:
        with tempfile.TemporaryDirectory() as tmp_dir:
            store = _store(tmp_dir)

            first = store.save(content, ext)
            second = store.save(content, ext)

            assert first == second
            assert len(list(store.root.iterdir())) == 1


class TestVerificationProperties:
    @given(content=binary_content)
    @SLOW_SETTINGS
    def test_true_digest_is_accepted(self, content: bytes) -> None:
        with tempfile.TemporaryDirectory() as tmp_dir:
            store = _store(tmp_dir)

            path = store.save_verified(compute_digest(content), ".png", content)

            assert path.read_bytes() == content

    @given(claimed=nonempty_binary, actual=nonempty_binary)
    @SLOW_SETTINGS
    def test_wrong_digest_writes_nothing(self, claimed: bytes, actual: bytes) -> None:
        assume(claimed != actual)
        with tempfile.TemporaryDirectory() as tmp_dir:
            store = _store(tmp_dir)

            with pytest.raises(HashMismatchError):
                store.save_verified(compute_digest(claimed), ".png", actual)

            assert list(store.root.iterdir()) == []


class TestDigestProperties:
    @given(content=binary_content)
    @DETERMINISM_SETTINGS
    def test_digest_is_valid_lookup_key(self, content: bytes) -> None:
        validate_digest(compute_digest(content))

    @given(digest=invalid_digests)
    @QUICK_SETTINGS
    def test_invalid_digests_rejected(self, digest: str) -> None:
        with pytest.raises(ValueError):
            validate_digest(digest)
