"""Write-then-rename helpers shared by the blob store, backups, and settings.

A file produced here is either absent or complete: content goes to a
hidden sibling temp file, which is renamed over the destination only
after it has been fully written and closed.
"""

from __future__ import annotations

import contextlib
import os
import tempfile
from collections.abc import Iterator
from pathlib import Path
from typing import BinaryIO

# Temp files carry this prefix so directory walks can tell them apart
# from committed content (see BackupArchiver._iter_image_files).
PARTIAL_PREFIX = ".partial-"


def is_partial(path: Path) -> bool:
    """Whether path names an in-flight temp file or staging directory."""
    return path.name.startswith(PARTIAL_PREFIX)


@contextlib.contextmanager
def atomic_writer(destination: Path) -> Iterator[BinaryIO]:
    """Yield a binary handle whose content replaces destination on success.

    On any exception the temp file is removed and the exception propagates;
    destination is left untouched.
    """
    fd, temp_name = tempfile.mkstemp(
        dir=destination.parent,
        prefix=PARTIAL_PREFIX,
        suffix=".tmp",
    )
    temp_path = Path(temp_name)
    try:
        with os.fdopen(fd, "wb") as handle:
            yield handle
        os.replace(temp_path, destination)
    except BaseException:
        temp_path.unlink(missing_ok=True)
        raise


def atomic_write_bytes(destination: Path, content: bytes) -> None:
    """Write content to destination via write-then-rename."""
    with atomic_writer(destination) as handle:
        handle.write(content)
