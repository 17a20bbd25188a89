# src/litepad/core/paths.py
"""Validation of candidate backup directories.

Nothing here mutates application state. Writability is determined
empirically by creating and removing a uniquely named probe file,
because permission bits alone do not reflect ACLs, read-only mounts,
or network shares.
"""

from __future__ import annotations

import contextlib
import sys
import uuid
from collections.abc import Callable
from pathlib import Path

from litepad.contracts.backup import PathValidationResult
from litepad.contracts.enums import PathErrorCode
from litepad.contracts.errors import WritePermissionError
from litepad.core.logging import get_logger

logger = get_logger(__name__)

_PROBE_PREFIX = ".litepad_write_test_"


def default_install_dir() -> Path:
    """Directory holding the running application's entry point."""
    entry = sys.argv[0] if sys.argv and sys.argv[0] else sys.executable
    return Path(entry).resolve().parent


def is_blank_path(path: str | Path) -> bool:
    """Whether path is an empty or whitespace-only string."""
    return isinstance(path, str) and not path.strip()


def _probe_writable(directory: Path) -> bool:
    """Create and remove a probe file in directory.

    The probe is removed whether or not creation succeeded, so no marker
    file survives a check.
    """
    probe = directory / f"{_PROBE_PREFIX}{uuid.uuid4().hex}"
    try:
        with probe.open("xb"):
            pass
    except OSError:
        return False
    finally:
        with contextlib.suppress(OSError):
            probe.unlink(missing_ok=True)
    return True


class PathValidator:
    """Probe a candidate backup directory for existence and writability.

    Outcome table:

        exists  writable                  is_valid  error_code
        yes     yes                       True      None
        yes     no                        False     NO_WRITE_PERMISSION
        no      parent exists & writable  True      None (creatable)
        no      parent missing/unwritable False     PATH_NOT_ACCESSIBLE
    """

    def validate(self, path: str | Path) -> PathValidationResult:
        if is_blank_path(path):
            # Path("") means the working directory; an empty choice names nothing
            exists = is_writable = False
        else:
            candidate = Path(path)
            exists = candidate.exists()
            if exists:
                is_writable = _probe_writable(candidate)
            else:
                parent = candidate.parent
                # A filesystem root is its own parent; nothing above it to create into
                is_writable = parent != candidate and parent.is_dir() and _probe_writable(parent)

        if is_writable:
            result = PathValidationResult(is_valid=True, exists=exists, is_writable=True)
        elif exists:
            result = PathValidationResult(
                is_valid=False,
                exists=True,
                is_writable=False,
                error_code=PathErrorCode.NO_WRITE_PERMISSION,
            )
        else:
            result = PathValidationResult(
                is_valid=False,
                exists=False,
                is_writable=False,
                error_code=PathErrorCode.PATH_NOT_ACCESSIBLE,
            )

        logger.debug(
            "backup_path_validated",
            path=str(path),
            is_valid=result.is_valid,
            error_code=result.error_code,
        )
        return result


def is_inside_install_dir(path: Path, install_dir: Path) -> bool:
    """Whether path equals or is nested inside install_dir."""
    resolved = path.resolve()
    install = install_dir.resolve()
    return resolved == install or install in resolved.parents


def ensure_outside_install_dir(path: Path, install_dir: Path) -> None:
    """Reject backup locations that a reinstall or uninstall would wipe.

    Raises:
        WritePermissionError: If path is the install dir or inside it
    """
    if is_inside_install_dir(path, install_dir):
        raise WritePermissionError(
            path,
            reason="Cannot select installation directory as backup location",
        )


def select_backup_directory(
    picker: Callable[[], str | Path | None],
    install_dir: Path,
) -> Path | None:
    """Run an interactive folder picker and vet the chosen directory.

    Args:
        picker: Shows the folder dialog; returns None when cancelled
        install_dir: Application installation directory

    Returns:
        The chosen directory, or None if the user cancelled

    Raises:
        WritePermissionError: If the choice lies inside install_dir
    """
    chosen = picker()
    if chosen is None:
        return None
    chosen_path = Path(chosen)
    ensure_outside_install_dir(chosen_path, install_dir)
    return chosen_path
