"""Tests for the litepad CLI."""

from __future__ import annotations

import json
import zipfile
from pathlib import Path

import pytest
import yaml
from typer.testing import CliRunner

from litepad.cli import app
from litepad.core.blob_store import compute_digest

runner = CliRunner()


@pytest.fixture
def config_file(tmp_path: Path, install_dir: Path) -> Path:
    """Settings file pointing at temp directories, logging warnings only."""
    path = tmp_path / "settings.yaml"
    path.write_text(
        yaml.safe_dump(
            {
                "data_root": str(tmp_path / "data"),
                "install_dir": str(install_dir),
                "log_level": "WARNING",
            }
        )
    )
    return path


@pytest.fixture
def invoke(config_file: Path):
    def _invoke(*args: str, input: str | None = None):
        return runner.invoke(app, ["--no-dotenv", "--config", str(config_file), *args], input=input)

    return _invoke


@pytest.fixture
def configured(invoke, backup_dir: Path):
    """Invoke helper with a backup directory already configured."""
    result = invoke("settings", "--backup-dir", str(backup_dir), "--max-backups", "2")
    assert result.exit_code == 0, result.output
    return invoke


class TestCLIBasics:
    def test_version_flag(self) -> None:
        result = runner.invoke(app, ["--version"])

        assert result.exit_code == 0
        assert "litepad" in result.stdout.lower()

    def test_help_lists_commands(self) -> None:
        result = runner.invoke(app, ["--help"])

        assert result.exit_code == 0
        for command in ("backup", "list", "restore", "delete", "validate-path", "settings", "serve"):
            assert command in result.stdout

    def test_missing_explicit_config(self, tmp_path: Path) -> None:
        result = runner.invoke(app, ["--no-dotenv", "--config", str(tmp_path / "absent.yaml"), "list"])

        assert result.exit_code == 1
        assert "config file not found" in result.output

    def test_invalid_config(self, tmp_path: Path) -> None:
        config = tmp_path / "settings.yaml"
        config.write_text("serve_port: -1\n")

        result = runner.invoke(app, ["--no-dotenv", "--config", str(config), "list"])

        assert result.exit_code == 1
        assert "invalid settings" in result.output

    def test_missing_env_file(self, tmp_path: Path) -> None:
        result = runner.invoke(app, ["--env-file", str(tmp_path / "nope.env"), "list"])

        assert result.exit_code == 1
        assert ".env file not found" in result.output

    def test_config_command_prints_yaml(self, invoke, tmp_path: Path) -> None:
        result = invoke("config")

        assert result.exit_code == 0
        assert yaml.safe_load(result.stdout)["data_root"] == str(tmp_path / "data")

    def test_data_root_option_overrides_settings(self, invoke, tmp_path: Path) -> None:
        result = invoke("--data-root", str(tmp_path / "other"), "config")

        assert result.exit_code == 0
        assert yaml.safe_load(result.stdout)["data_root"] == str(tmp_path / "other")


class TestSettingsCommand:
    def test_shows_defaults(self, invoke) -> None:
        result = invoke("settings")

        assert result.exit_code == 0
        record = json.loads(result.stdout)
        assert record["maxBackups"] == 5
        assert record["autoBackupEnabled"] is False

    def test_updates_persist(self, invoke, backup_dir: Path) -> None:
        invoke("settings", "--backup-dir", str(backup_dir), "--auto", "--interval", "15")

        record = json.loads(invoke("settings").stdout)

        assert record["backupDirectory"] == str(backup_dir)
        assert record["autoBackupEnabled"] is True
        assert record["autoBackupInterval"] == 15

    def test_rejects_install_dir(self, invoke, install_dir: Path) -> None:
        result = invoke("settings", "--backup-dir", str(install_dir / "backups"))

        assert result.exit_code == 1
        assert "installation directory" in result.output

    def test_rejects_zero_max_backups(self, invoke) -> None:
        assert invoke("settings", "--max-backups", "0").exit_code != 0


class TestBackupCommands:
    def test_backup_list_restore_delete(self, configured, tmp_path: Path, backup_dir: Path) -> None:
        snapshot_file = tmp_path / "snapshot.json"
        snapshot_file.write_text('{"tabs": ["a"]}', encoding="utf-8")

        created = configured("backup", str(snapshot_file))
        assert created.exit_code == 0, created.output
        filename = created.stdout.strip()
        assert (backup_dir / filename).is_file()

        listed = json.loads(configured("list").stdout)
        assert [entry["filename"] for entry in listed] == [filename]
        assert set(listed[0]) == {"filename", "createdAt", "size"}

        restored = configured("restore", filename)
        assert restored.exit_code == 0
        assert restored.stdout == '{"tabs": ["a"]}'

        output = tmp_path / "restored.json"
        assert configured("restore", filename, "--output", str(output)).exit_code == 0
        assert output.read_text(encoding="utf-8") == '{"tabs": ["a"]}'

        deleted = configured("delete", filename, "--yes")
        assert deleted.exit_code == 0
        assert json.loads(configured("list").stdout) == []

    def test_restore_output_unwritable(self, configured, tmp_path: Path) -> None:
        filename = configured("backup", "-", input="{}").stdout.strip()

        result = configured("restore", filename, "--output", str(tmp_path / "missing_dir" / "out.json"))

        assert result.exit_code == 1
        assert "cannot write snapshot" in result.output
        assert result.exception is None or isinstance(result.exception, SystemExit)

    def test_backup_from_stdin(self, configured, backup_dir: Path) -> None:
        result = configured("backup", "-", input='{"from": "stdin"}')

        assert result.exit_code == 0
        with zipfile.ZipFile(backup_dir / result.stdout.strip()) as archive:
            assert archive.read("data.json") == b'{"from": "stdin"}'

    def test_backup_unreadable_snapshot(self, configured, tmp_path: Path) -> None:
        result = configured("backup", str(tmp_path / "missing.json"))

        assert result.exit_code == 1
        assert "cannot read snapshot" in result.output

    def test_backup_without_directory(self, invoke, tmp_path: Path) -> None:
        data_root = tmp_path / "data"
        data_root.mkdir(parents=True, exist_ok=True)
        (data_root / "config.json").write_text(json.dumps({"backupSettings": {"backupDirectory": None}}))

        result = invoke("backup", "-", input="{}")

        assert result.exit_code == 1
        assert "Backup directory not configured" in result.output

    def test_restore_unknown(self, configured) -> None:
        result = configured("restore", "litepad_backup_19990101_000000.zip")

        assert result.exit_code == 1
        assert "Backup not found" in result.output

    def test_restore_rejects_traversal(self, configured) -> None:
        result = configured("restore", "../litepad_backup_19990101_000000.zip")

        assert result.exit_code == 1
        assert "Invalid backup filename" in result.output

    def test_delete_requires_confirmation(self, configured, backup_dir: Path) -> None:
        filename = configured("backup", "-", input="{}").stdout.strip()

        result = configured("delete", filename, input="n\n")

        assert result.exit_code == 1
        assert "Aborted" in result.output
        assert (backup_dir / filename).exists()


class TestValidatePath:
    def test_valid(self, invoke, tmp_path: Path) -> None:
        result = invoke("validate-path", str(tmp_path))

        assert result.exit_code == 0
        assert json.loads(result.stdout) == {
            "isValid": True,
            "exists": True,
            "isWritable": True,
            "errorCode": None,
        }

    def test_invalid_exits_nonzero(self, invoke, tmp_path: Path) -> None:
        result = invoke("validate-path", str(tmp_path / "no" / "such"))

        assert result.exit_code == 1
        assert json.loads(result.stdout)["errorCode"] == "PATH_NOT_ACCESSIBLE"


class TestImageCommands:
    def test_save_image(self, invoke, tmp_path: Path) -> None:
        image = tmp_path / "shot.webp"
        image.write_bytes(b"webp bytes")

        result = invoke("save-image", str(image))

        assert result.exit_code == 0
        payload = json.loads(result.stdout)
        assert payload["hash"] == compute_digest(b"webp bytes")
        assert payload["ext"] == ".webp"
        assert (tmp_path / "data" / "images" / f"{payload['hash']}.webp").is_file()

    def test_migrate_image(self, invoke, tmp_path: Path) -> None:
        legacy = tmp_path / "legacy.gif"
        legacy.write_bytes(b"gif")

        result = invoke("migrate-image", str(legacy))

        assert result.exit_code == 0
        payload = json.loads(result.stdout)
        assert payload["newUrl"] == f"litepad://images/{compute_digest(b'gif')}.gif"
        assert legacy.exists()

    def test_migrate_missing_image(self, invoke, tmp_path: Path) -> None:
        result = invoke("migrate-image", str(tmp_path / "gone.png"))

        assert result.exit_code == 1
        assert "Legacy image not found" in result.output
