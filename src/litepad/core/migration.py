# src/litepad/core/migration.py
"""Migration of legacy path-addressed images into the blob store.

Releases before 2.0 embedded images in documents as
``![alt](asset://localhost/<absolute path>)``. Migration copies each
referenced file into the content-addressed store and rewrites the links to
``litepad://images/{digest}{ext}``. Ingestion is additive: original files
are never deleted, so a failure in a later step never loses the source.
"""

from __future__ import annotations

import re
from collections.abc import Mapping, Sequence
from pathlib import Path
from urllib.parse import unquote

from litepad.contracts.backup import MigrationReport
from litepad.contracts.blob_store import BlobDescriptor, BlobStore
from litepad.contracts.errors import LitepadError, NotFoundError, StorageIOError
from litepad.core.blob_store import validate_extension
from litepad.core.logging import get_logger
from litepad.core.paths import is_blank_path

logger = get_logger(__name__)

DEFAULT_EXTENSION = ".png"

# ![alt](asset://localhost/<path>) - group 1 is alt text, group 2 the encoded path
LEGACY_IMAGE_LINK = re.compile(r"!\[([^\]]*)\]\(asset://localhost/([^)]+)\)")


def extract_legacy_paths(text: str) -> list[str]:
    """Return legacy image paths referenced in text.

    Paths are returned as written in the link (still URL-encoded), unique,
    in first-seen order.
    """
    seen: dict[str, None] = {}
    for match in LEGACY_IMAGE_LINK.finditer(text):
        seen.setdefault(match.group(2), None)
    return list(seen)


def rewrite_legacy_links(text: str, replacements: Mapping[str, str]) -> str:
    """Replace legacy links whose path is in replacements with the new URL.

    Links without a replacement are left exactly as they were.
    """

    def replacer(match: re.Match[str]) -> str:
        new_url = replacements.get(match.group(2))
        if new_url is None:
            return match.group(0)
        return f"![{match.group(1)}]({new_url})"

    return LEGACY_IMAGE_LINK.sub(replacer, text)


def _filesystem_path(legacy_path: str) -> str:
    return unquote(legacy_path)


def legacy_extension(source: Path) -> str:
    """Extension a legacy file is stored under.

    The file's own suffix when it is a plain alphanumeric one, otherwise
    .png (no suffix, or suffixes like .jpg_large or .my-img).
    """
    try:
        validate_extension(source.suffix)
    except ValueError:
        return DEFAULT_EXTENSION
    return source.suffix


class LegacyMigrator:
    """Ingest pre-existing image files into a BlobStore."""

    def __init__(self, store: BlobStore) -> None:
        self._store = store

    def migrate(self, old_path: str | Path) -> BlobDescriptor:
        """Copy one legacy image into the store.

        The extension comes from legacy_extension: the old file's suffix, or
        .png when it has none or an unusable one. Identical content migrated
        from different paths yields the same digest and a single stored file.

        Raises:
            NotFoundError: If old_path is empty or does not exist
            StorageIOError: If old_path cannot be read
        """
        if is_blank_path(old_path):
            raise NotFoundError("Legacy image", str(old_path))
        source = Path(old_path)
        if not source.exists():
            raise NotFoundError("Legacy image", str(source))
        try:
            content = source.read_bytes()
        except OSError as e:
            raise StorageIOError(f"Failed to read legacy image {source}: {e}", path=source) from e

        extension = legacy_extension(source)
        descriptor = self._store.save(content, extension)
        logger.info("legacy_image_migrated", source=str(source), url=descriptor.url)
        return descriptor

    def check_existing(self, paths: Sequence[str | Path]) -> list[bool]:
        """Report existence of each path, one boolean per input, in order."""
        return [not is_blank_path(p) and Path(p).exists() for p in paths]

    def migrate_documents(self, documents: Mapping[str, str]) -> MigrationReport:
        """Migrate every legacy image referenced by documents and rewrite links.

        Each distinct legacy path is migrated at most once even when several
        documents reference it. Missing files are skipped, files that fail to
        migrate are counted as failed; in both cases their links stay as-is.

        Args:
            documents: Document ID to markdown content

        Returns:
            Counts plus the rewritten content of documents that changed
        """
        legacy_paths: dict[str, None] = {}
        for content in documents.values():
            for legacy_path in extract_legacy_paths(content):
                legacy_paths.setdefault(legacy_path, None)
        if not legacy_paths:
            return MigrationReport(migrated=0, failed=0, skipped=0)

        ordered = list(legacy_paths)
        present = self.check_existing([_filesystem_path(p) for p in ordered])

        replacements: dict[str, str] = {}
        migrated = failed = skipped = 0
        for legacy_path, exists in zip(ordered, present, strict=True):
            if not exists:
                logger.warning("legacy_image_missing", path=legacy_path)
                skipped += 1
                continue
            try:
                descriptor = self.migrate(_filesystem_path(legacy_path))
            except (LitepadError, ValueError) as e:
                logger.error("legacy_image_migration_failed", path=legacy_path, error=str(e))
                failed += 1
                continue
            replacements[legacy_path] = descriptor.url
            migrated += 1

        changed: dict[str, str] = {}
        for doc_id, content in documents.items():
            rewritten = rewrite_legacy_links(content, replacements)
            if rewritten != content:
                changed[doc_id] = rewritten

        logger.info(
            "legacy_migration_complete",
            migrated=migrated,
            failed=failed,
            skipped=skipped,
            documents_changed=len(changed),
        )
        return MigrationReport(migrated=migrated, failed=failed, skipped=skipped, documents=changed)
