"""Admin commands for init, backup, export and import."""

import shutil
import sqlite3
import sys
import tomllib
from datetime import datetime
from pathlib import Path

from masarify.commands.common import console, load_settings, open_session, save_state
from masarify.config import Settings, create_default_config, get_config_path, get_settings
from masarify.errors import SnapshotImportError
from masarify.store.gateway import export_csv, export_snapshot, import_snapshot
from masarify.store.schema import get_db_path, init_database


def init_command(force: bool = False) -> None:
    """Initialize masarify database and configuration."""
    config_path = get_config_path()
    if force:
        # An unreadable config is about to be replaced
        try:
            settings = get_settings()
        except (tomllib.TOMLDecodeError, ValueError, TypeError):
            settings = Settings()
    else:
        settings = load_settings()
    db_path = settings.db_path or get_db_path()

    db_exists = db_path.exists()
    config_exists = config_path.exists()

    # Guard: refuse to overwrite without force flag
    if not force and (db_exists or config_exists):
        console.print("[red]Initialization failed:[/red]", style="bold")
        if db_exists:
            console.print(f"  Database already exists: {db_path}")
        if config_exists:
            console.print(f"  Config already exists: {config_path}")
        console.print("\n[yellow]Use 'masarify init --force' to overwrite[/yellow]")
        sys.exit(1)

    try:
        if force and db_exists:
            db_path.unlink()

        console.print(f"[cyan]Initializing database at {db_path}...[/cyan]")
        init_database(db_path)
        console.print("[green]✓[/green] Database initialized")

        console.print(f"[cyan]Creating config file at {config_path}...[/cyan]")
        create_default_config(config_path)
        console.print("[green]✓[/green] Config file created (permissions: 600)")

    except sqlite3.Error as e:
        console.print(f"[red]Database error: {e}[/red]", style="bold")
        sys.exit(1)
    except OSError as e:
        console.print(f"[red]Filesystem error: {e}[/red]", style="bold")
        sys.exit(1)

    console.print("\n[green]Initialization complete![/green]", style="bold")


def backup_command(output_dir: str | None = None) -> None:
    """Backup database and configuration files."""
    db_path = load_settings().db_path or get_db_path()
    config_path = get_config_path()

    if not db_path.exists():
        console.print("[red]Database not found. Run 'masarify init' first.[/red]", style="bold")
        sys.exit(1)

    if output_dir:
        backup_dir = Path(output_dir).expanduser()
    else:
        backup_dir = db_path.parent / "backups"

    backup_dir.mkdir(parents=True, exist_ok=True)
    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")

    try:
        db_backup = backup_dir / f"masarify_{timestamp}.db"
        shutil.copy2(db_path, db_backup)
        console.print(f"[green]✓[/green] Database backed up to: {db_backup}")

        if config_path.exists():
            config_backup = backup_dir / f"config_{timestamp}.toml"
            shutil.copy2(config_path, config_backup)
            console.print(f"[green]✓[/green] Config backed up to: {config_backup}")

    except OSError as e:
        console.print(f"[red]Backup failed: {e}[/red]", style="bold")
        sys.exit(1)

    console.print("\n[green]Backup complete![/green]", style="bold")


def default_export_path(extension: str) -> Path:
    return Path.cwd() / f"masarify_backup_{datetime.now().strftime('%Y-%m-%d')}.{extension}"


def export_json_command(output: str | None = None) -> None:
    """Write the full state to a JSON backup file."""
    _, state = open_session()
    path = Path(output).expanduser() if output else default_export_path("json")

    try:
        path.write_text(export_snapshot(state), encoding="utf-8")
    except OSError as e:
        console.print(f"[red]Export failed: {e}[/red]", style="bold")
        sys.exit(1)

    console.print(f"[green]✓[/green] Exported {len(state.transactions)} transactions to: {path}")


def export_csv_command(output: str | None = None) -> None:
    """Write transactions to a CSV file for spreadsheets."""
    _, state = open_session()
    path = Path(output).expanduser() if output else default_export_path("csv")

    csv_text = export_csv(state.transactions, state.categories, state.accounts, state.language)
    try:
        # The text already carries its byte-order mark
        path.write_text(csv_text, encoding="utf-8", newline="")
    except OSError as e:
        console.print(f"[red]Export failed: {e}[/red]", style="bold")
        sys.exit(1)

    console.print(f"[green]✓[/green] Exported {len(state.transactions)} transactions to: {path}")


def import_command(path: str) -> None:
    """Replace the current state with a JSON backup file."""
    source = Path(path).expanduser()

    try:
        raw = source.read_text(encoding="utf-8-sig")
    except OSError as e:
        console.print(f"[red]Cannot read {source}: {e}[/red]", style="bold")
        sys.exit(1)

    # Load first: saving is refused until the stored state has been read
    session, _ = open_session()

    try:
        state = import_snapshot(raw)
    except SnapshotImportError as e:
        console.print(f"[red]Import failed: {e}[/red]", style="bold")
        console.print("[dim]Current data was left unchanged[/dim]")
        sys.exit(1)

    save_state(session, state)
    console.print(
        f"[green]✓[/green] Imported {len(state.transactions)} transactions and {len(state.categories)} categories"
    )
