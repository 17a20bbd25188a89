"""StoreContext: explicit configuration shared by store and backup operations.

Holds the data root behind a single lock. The lock is held only while the
path is read or swapped, never for the duration of file I/O, so a
long-running backup does not block unrelated path lookups.
"""

from __future__ import annotations

import threading
from pathlib import Path

from litepad.core.config import SETTINGS_FILENAME, LitepadSettings, SettingsStore
from litepad.core.paths import default_install_dir

IMAGES_DIRNAME = "images"


class StoreContext:
    """Configuration context passed into every BlobStore and backup operation."""

    def __init__(self, data_root: Path, *, install_dir: Path | None = None) -> None:
        """Initialize the context and create the images directory.

        Args:
            data_root: Root of application data
            install_dir: Application installation directory (default: entry script dir)
        """
        self._lock = threading.Lock()
        self._data_root = Path(data_root)
        self._install_dir = install_dir if install_dir is not None else default_install_dir()
        (self._data_root / IMAGES_DIRNAME).mkdir(parents=True, exist_ok=True)

    @classmethod
    def from_settings(cls, settings: LitepadSettings) -> StoreContext:
        return cls(settings.data_root, install_dir=settings.install_dir)

    @property
    def data_root(self) -> Path:
        with self._lock:
            return self._data_root

    @property
    def images_root(self) -> Path:
        """Directory holding content-addressed images."""
        with self._lock:
            return self._data_root / IMAGES_DIRNAME

    @property
    def install_dir(self) -> Path:
        return self._install_dir

    @property
    def settings_store(self) -> SettingsStore:
        """Key-value settings file under the data root."""
        return SettingsStore(self.data_root / SETTINGS_FILENAME)

    def relocate(self, data_root: Path) -> None:
        """Point the context at a different data root.

        Operations already holding the old images root finish against it;
        the next operation sees the new one.
        """
        new_root = Path(data_root)
        (new_root / IMAGES_DIRNAME).mkdir(parents=True, exist_ok=True)
        with self._lock:
            self._data_root = new_root
