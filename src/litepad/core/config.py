"""
Configuration schema and loading for LitePad store.

Uses Pydantic for validation and Dynaconf for multi-source loading.
Settings are frozen (immutable) after construction.

Two kinds of configuration live here:
- LitepadSettings: process configuration (data root, logging, image server),
  loaded once from settings.yaml plus LITEPAD_* environment variables.
- BackupSettings: user-editable backup preferences persisted in the
  application's key-value settings file (config.json) and re-read on
  every operation that needs them.
"""

from __future__ import annotations

import json
import re
from pathlib import Path
from typing import Any, Literal

import yaml
from pydantic import BaseModel, Field, ValidationError
from pydantic.alias_generators import to_camel

from litepad.contracts.errors import StorageIOError
from litepad.core.files import atomic_write_bytes
from litepad.core.logging import get_logger

logger = get_logger(__name__)

SETTINGS_FILENAME = "config.json"
BACKUP_SETTINGS_KEY = "backupSettings"

# ${VAR} or ${VAR:-default}
_ENV_VAR_PATTERN = re.compile(r"\$\{([A-Za-z_][A-Za-z0-9_]*)(?::-([^}]*))?\}")


def default_backup_directory() -> Path:
    """Documents/LitePad/Backups under the user's home directory."""
    return Path.home() / "Documents" / "LitePad" / "Backups"


class BackupSettings(BaseModel):
    """Backup preferences as persisted under the backupSettings key.

    Field names serialize to camelCase to stay compatible with records
    written by earlier releases of the application.

    Example record:
        {
          "backupDirectory": "/home/me/Documents/LitePad/Backups",
          "maxBackups": 5,
          "autoBackupEnabled": false,
          "autoBackupInterval": 30
        }
    """

    model_config = {
        "frozen": True,
        "alias_generator": to_camel,
        "populate_by_name": True,
    }

    backup_directory: Path | None = Field(
        default_factory=default_backup_directory,
        description="Directory receiving backup archives; None means not configured",
    )
    max_backups: int = Field(default=5, ge=1, description="Archives kept after each backup")
    auto_backup_enabled: bool = Field(default=False, description="Whether periodic backups run")
    auto_backup_interval: int = Field(default=30, ge=1, description="Minutes between automatic backups")

    def to_record(self) -> dict[str, Any]:
        """Serialize for the settings file."""
        return self.model_dump(mode="json", by_alias=True)


class LitepadSettings(BaseModel):
    """Top-level process configuration.

    All settings are validated and frozen after construction.
    """

    model_config = {"frozen": True}

    data_root: Path = Field(
        default=Path("data"),
        description="Root of application data; images live in <data_root>/images",
    )
    install_dir: Path | None = Field(
        default=None,
        description="Application installation directory (default: directory of the entry script)",
    )
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(default="INFO")
    json_logs: bool = Field(default=False, description="Emit JSON log lines instead of console output")
    serve_host: str = Field(default="127.0.0.1", description="Bind address for the image server")
    serve_port: int = Field(default=8765, gt=0, lt=65536, description="Port for the image server")


def _expand_env_vars(config: dict[str, Any]) -> dict[str, Any]:
    """Recursively expand ${VAR} and ${VAR:-default} patterns in config values."""
    import os

    def _expand_string(value: str) -> str:
        def replacer(match: re.Match[str]) -> str:
            env_value = os.environ.get(match.group(1))
            if env_value is not None:
                return env_value
            if match.group(2) is not None:
                return match.group(2)
            # Unresolved - keep original so validation reports it
            return match.group(0)

        return _ENV_VAR_PATTERN.sub(replacer, value)

    def _expand_value(value: Any) -> Any:
        if isinstance(value, str):
            return _expand_string(value)
        elif isinstance(value, dict):
            return {k: _expand_value(v) for k, v in value.items()}
        elif isinstance(value, list):
            return [_expand_value(item) for item in value]
        else:
            return value

    return {k: _expand_value(v) for k, v in config.items()}


def load_settings(config_path: Path) -> LitepadSettings:
    """Load settings from YAML file with environment variable overrides.

    Uses Dynaconf for multi-source loading with precedence:
    1. Environment variables (LITEPAD_*) - highest priority
    2. Config file (settings.yaml)
    3. Defaults from Pydantic schema - lowest priority

    Args:
        config_path: Path to YAML configuration file

    Returns:
        Validated LitepadSettings instance

    Raises:
        ValidationError: If configuration fails Pydantic validation
        FileNotFoundError: If config file doesn't exist
    """
    from dynaconf import Dynaconf

    # Dynaconf silently accepts missing files
    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    dynaconf_settings = Dynaconf(
        envvar_prefix="LITEPAD",
        settings_files=[str(config_path)],
        environments=False,
        load_dotenv=False,
        merge_enabled=True,
    )

    # Dynaconf returns uppercase keys; Pydantic fields are lowercase
    internal_keys = {"LOAD_DOTENV", "ENVIRONMENTS", "SETTINGS_FILES"}
    raw_config = {k.lower(): v for k, v in dynaconf_settings.as_dict().items() if k not in internal_keys}
    raw_config = _expand_env_vars(raw_config)

    settings = LitepadSettings(**raw_config)
    # Relative paths in the file are relative to the file, not the cwd
    if not settings.data_root.is_absolute():
        settings = settings.model_copy(update={"data_root": config_path.parent / settings.data_root})
    return settings


def render_settings(settings: LitepadSettings) -> str:
    """Render effective settings as YAML, e.g. for `litepad config`."""
    return yaml.safe_dump(settings.model_dump(mode="json"), sort_keys=False)


class SettingsStore:
    """The application's key-value settings file.

    Only the backupSettings key is interpreted here; every other key is
    preserved untouched on write. Nothing is cached: each get re-reads the
    file, so edits made by another component are observed on the next call.
    """

    def __init__(self, path: Path) -> None:
        self._path = path

    @property
    def path(self) -> Path:
        return self._path

    def _read_all(self) -> dict[str, Any]:
        try:
            raw = self._path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return {}
        except OSError as e:
            raise StorageIOError(f"Failed to read settings: {e}", path=self._path) from e

        try:
            data = json.loads(raw)
        except json.JSONDecodeError as e:
            logger.warning("settings_file_unreadable", path=str(self._path), error=str(e))
            return {}
        if not isinstance(data, dict):
            logger.warning("settings_file_unreadable", path=str(self._path), error="top level is not an object")
            return {}
        return data

    def get_backup_settings(self) -> BackupSettings:
        """Read backup settings, falling back to defaults.

        A missing file or key yields BackupSettings(). Within a record, each
        invalid field falls back to its own default while valid fields are
        kept, so a bad maxBackups never discards the configured directory.
        """
        record = self._read_all().get(BACKUP_SETTINGS_KEY)
        if not isinstance(record, dict):
            if record is not None:
                logger.warning("backup_settings_invalid", path=str(self._path), error="record is not an object")
            return BackupSettings()
        try:
            return BackupSettings.model_validate(record)
        except ValidationError as e:
            invalid = {str(error["loc"][0]) for error in e.errors() if error["loc"]}
            logger.warning("backup_settings_invalid", path=str(self._path), fields=sorted(invalid))
            valid = {key: value for key, value in record.items() if key not in invalid and to_camel(key) not in invalid}
            try:
                return BackupSettings.model_validate(valid)
            except ValidationError:
                return BackupSettings()

    def set_backup_settings(self, settings: BackupSettings) -> None:
        """Persist backup settings, keeping other keys intact.

        Raises:
            StorageIOError: If the settings file cannot be written
        """
        data = self._read_all()
        data[BACKUP_SETTINGS_KEY] = settings.to_record()
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            atomic_write_bytes(self._path, json.dumps(data, indent=2, ensure_ascii=False).encode("utf-8"))
        except OSError as e:
            raise StorageIOError(f"Failed to write settings: {e}", path=self._path) from e
        logger.info("backup_settings_saved", path=str(self._path))
