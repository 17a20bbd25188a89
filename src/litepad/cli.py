"""LitePad store command line interface.

Entry point for the litepad CLI tool: manual backups and restores,
backup-location checks, image ingestion, and the image server.
"""

from __future__ import annotations

import contextlib
import json
import sys
from collections.abc import Iterator
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import typer
from pydantic import ValidationError

from litepad import __version__
from litepad.commands import (
    LitepadCommands,
    backup_info_payload,
    descriptor_payload,
    migration_payload,
    validation_payload,
)
from litepad.contracts.errors import LitepadError
from litepad.core.config import LitepadSettings, load_settings, render_settings
from litepad.core.context import StoreContext

__all__ = ["app"]

DEFAULT_SETTINGS_FILE = Path("settings.yaml")

app = typer.Typer(
    name="litepad",
    help="LitePad store: images, backups, and restores for LitePad data.",
    no_args_is_help=True,
)


@dataclass
class _CliState:
    settings: LitepadSettings

    def commands(self) -> LitepadCommands:
        return LitepadCommands(StoreContext.from_settings(self.settings))


def _state(ctx: typer.Context) -> _CliState:
    state: _CliState = ctx.obj
    return state


def _echo_json(payload: Any) -> None:
    typer.echo(json.dumps(payload, indent=2, ensure_ascii=False))


@contextlib.contextmanager
def _reporting_errors() -> Iterator[None]:
    """Turn store failures into an error line and exit code 1."""
    try:
        yield
    except (LitepadError, ValueError) as e:
        message = e.to_display() if isinstance(e, LitepadError) else str(e)
        typer.secho(f"Error: {message}", fg=typer.colors.RED, err=True)
        raise typer.Exit(1) from None


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        typer.echo(f"litepad version {__version__}")
        raise typer.Exit()


def _load_dotenv(env_file: Path | None = None) -> bool:
    """Load LITEPAD_* overrides from a .env file.

    Raises:
        typer.Exit: If explicit env_file path doesn't exist.
    """
    from dotenv import load_dotenv

    if env_file is not None:
        if not env_file.exists():
            typer.secho(f"Error: .env file not found: {env_file}", fg=typer.colors.RED, err=True)
            raise typer.Exit(1)
        return load_dotenv(env_file, override=False)
    return load_dotenv(override=False)


def _resolve_settings(config: Path | None, data_root: Path | None) -> LitepadSettings:
    config_path = config if config is not None else DEFAULT_SETTINGS_FILE
    if config_path.exists():
        try:
            settings = load_settings(config_path)
        except ValidationError as e:
            typer.secho(f"Error: invalid settings in {config_path}:\n{e}", fg=typer.colors.RED, err=True)
            raise typer.Exit(1) from None
    elif config is not None:
        typer.secho(f"Error: config file not found: {config}", fg=typer.colors.RED, err=True)
        raise typer.Exit(1)
    else:
        settings = LitepadSettings()

    if data_root is not None:
        settings = settings.model_copy(update={"data_root": data_root})
    return settings


@app.callback()
def main(
    ctx: typer.Context,
    version: bool | None = typer.Option(
        None,
        "--version",
        "-V",
        callback=version_callback,
        is_eager=True,
        help="Show version and exit.",
    ),
    config: Path | None = typer.Option(
        None,
        "--config",
        "-c",
        help="Settings file (default: ./settings.yaml when present).",
    ),
    data_root: Path | None = typer.Option(
        None,
        "--data-root",
        "-d",
        help="Application data directory (overrides settings).",
    ),
    no_dotenv: bool = typer.Option(
        False,
        "--no-dotenv",
        help="Skip loading .env file.",
    ),
    env_file: Path | None = typer.Option(
        None,
        "--env-file",
        help="Path to .env file (skips automatic search).",
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Enable debug logging.",
    ),
    json_logs: bool = typer.Option(
        False,
        "--json-logs",
        help="Output structured JSON logs.",
    ),
) -> None:
    """LitePad store: images, backups, and restores for LitePad data."""
    from litepad.core.logging import configure_logging

    if not no_dotenv:
        _load_dotenv(env_file=env_file)

    settings = _resolve_settings(config, data_root)
    log_level = "DEBUG" if verbose else settings.log_level
    configure_logging(json_output=json_logs or settings.json_logs, level=log_level)

    ctx.obj = _CliState(settings=settings)


@app.command()
def backup(
    ctx: typer.Context,
    snapshot_file: str = typer.Argument(..., help="Snapshot JSON file, or '-' for stdin."),
) -> None:
    """Create a backup archive from a snapshot and the image store."""
    try:
        snapshot = sys.stdin.read() if snapshot_file == "-" else Path(snapshot_file).read_text(encoding="utf-8")
    except OSError as e:
        typer.secho(f"Error: cannot read snapshot: {e}", fg=typer.colors.RED, err=True)
        raise typer.Exit(1) from None
    with _reporting_errors():
        result = _state(ctx).commands().backup(snapshot)

    typer.echo(result.filename)
    for failed in result.retention.failed:
        typer.secho(f"Warning: could not delete old backup {failed}", fg=typer.colors.YELLOW, err=True)


@app.command("list")
def list_backups(ctx: typer.Context) -> None:
    """List backup archives, newest first."""
    with _reporting_errors():
        backups = _state(ctx).commands().get_backup_list()
    _echo_json([backup_info_payload(info) for info in backups])


@app.command()
def restore(
    ctx: typer.Context,
    filename: str = typer.Argument(..., help="Archive filename in the backup directory."),
    output: Path | None = typer.Option(
        None,
        "--output",
        "-o",
        help="Write the restored snapshot here instead of stdout.",
    ),
) -> None:
    """Restore images from an archive and print its snapshot."""
    with _reporting_errors():
        snapshot = _state(ctx).commands().restore_backup(filename)

    if output is None:
        typer.echo(snapshot, nl=False)
    else:
        try:
            output.write_text(snapshot, encoding="utf-8")
        except OSError as e:
            typer.secho(f"Error: cannot write snapshot: {e}", fg=typer.colors.RED, err=True)
            raise typer.Exit(1) from None
        typer.echo(f"Snapshot written to {output}", err=True)


@app.command()
def delete(
    ctx: typer.Context,
    filename: str = typer.Argument(..., help="Archive filename in the backup directory."),
    yes: bool = typer.Option(False, "--yes", "-y", help="Skip confirmation prompt."),
) -> None:
    """Delete one backup archive."""
    if not yes and not typer.confirm(f"Delete {filename}?"):
        typer.echo("Aborted.")
        raise typer.Exit(1)
    with _reporting_errors():
        _state(ctx).commands().delete_backup(filename)
    typer.echo(f"Deleted {filename}")


@app.command("validate-path")
def validate_path(
    ctx: typer.Context,
    path: str = typer.Argument(..., help="Candidate backup directory."),
) -> None:
    """Check whether a directory can hold backups."""
    result = _state(ctx).commands().validate_backup_path(path)
    _echo_json(validation_payload(result))
    if not result.is_valid:
        raise typer.Exit(1)


@app.command("save-image")
def save_image(
    ctx: typer.Context,
    file: Path = typer.Argument(..., exists=True, dir_okay=False, help="Image file to store."),
) -> None:
    """Store an image file and print its reference."""
    with _reporting_errors():
        descriptor = _state(ctx).commands().save_image(file.read_bytes(), file.suffix or ".png")
    _echo_json(descriptor_payload(descriptor))


@app.command("migrate-image")
def migrate_image(
    ctx: typer.Context,
    path: str = typer.Argument(..., help="Legacy image path."),
) -> None:
    """Ingest a legacy image into the store without touching the original."""
    with _reporting_errors():
        descriptor = _state(ctx).commands().migrate_old_image(path)
    _echo_json(migration_payload(descriptor))


@app.command()
def settings(
    ctx: typer.Context,
    backup_dir: Path | None = typer.Option(None, "--backup-dir", help="Backup directory."),
    max_backups: int | None = typer.Option(None, "--max-backups", min=1, help="Archives to keep."),
    auto: bool | None = typer.Option(None, "--auto/--no-auto", help="Enable automatic backups."),
    interval: int | None = typer.Option(None, "--interval", min=1, help="Minutes between automatic backups."),
) -> None:
    """Show backup settings, updating any given options first."""
    commands = _state(ctx).commands()
    with _reporting_errors():
        current = commands.get_backup_settings()
        updates: dict[str, Any] = {}
        if backup_dir is not None:
            commands.select_backup_directory(lambda: backup_dir)
            updates["backup_directory"] = backup_dir
        if max_backups is not None:
            updates["max_backups"] = max_backups
        if auto is not None:
            updates["auto_backup_enabled"] = auto
        if interval is not None:
            updates["auto_backup_interval"] = interval
        if updates:
            current = current.model_copy(update=updates)
            commands.set_backup_settings(current)
    _echo_json(current.to_record())


@app.command("config")
def show_config(ctx: typer.Context) -> None:
    """Print the effective process settings as YAML."""
    typer.echo(render_settings(_state(ctx).settings), nl=False)


@app.command()
def serve(
    ctx: typer.Context,
    host: str | None = typer.Option(None, "--host", help="Bind address (default from settings)."),
    port: int | None = typer.Option(None, "--port", "-p", help="Port (default from settings)."),
) -> None:
    """Serve stored images over HTTP at /images/{hash}{ext}."""
    import uvicorn

    from litepad.core.serving import create_app

    state = _state(ctx)
    bind_host = host if host is not None else state.settings.serve_host
    bind_port = port if port is not None else state.settings.serve_port
    context = StoreContext.from_settings(state.settings)

    typer.echo(f"Serving {context.images_root} on http://{bind_host}:{bind_port}/images/")
    uvicorn.run(create_app(context), host=bind_host, port=bind_port, log_config=None)


if __name__ == "__main__":
    app()
