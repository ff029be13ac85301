"""Restore runner: pick a backup, confirm, replay it into the database."""

from __future__ import annotations

import logging
import re
from collections.abc import Callable
from pathlib import Path

from rich.console import Console
from rich.table import Table

from osl_backup.config import BackupConfig
from osl_backup.database import restore_database, terminate_connections
from osl_backup.prompts import ConsolePrompter, Prompter
from osl_backup.storage import BackupEntry, format_size, local
from osl_backup.target import running_containers, select_target

logger = logging.getLogger(__name__)

CONFIRM_TOKEN = "yes"


class RestoreError(RuntimeError):
    """The restore cannot proceed or failed."""


def resolve_backup_path(identifier: str, backup_dir: Path) -> Path:
    """Absolute paths are used as-is, anything else is looked up in ``backup_dir``."""
    path = Path(identifier)
    return path if path.is_absolute() else backup_dir / path


def backups_table(entries: list[BackupEntry], title: str) -> Table:
    table = Table(title=title)
    table.add_column("#", style="dim", width=4)
    table.add_column("Filename")
    table.add_column("Size", justify="right")
    table.add_column("Date")

    for i, entry in enumerate(entries, 1):
        table.add_row(
            str(i),
            entry.filename,
            format_size(entry.size),
            entry.modified.strftime("%Y-%m-%d %H:%M:%S"),
        )
    return table


def choose_backup(config: BackupConfig, prompter: Prompter, console: Console) -> Path:
    """List local backups and ask which one to restore."""
    entries = local.list_backups(config.backup_dir)
    if not entries:
        raise RestoreError(f"No backups found in {config.backup_dir}")

    console.print(backups_table(entries, f"Available backups in {config.backup_dir}"))

    selection = prompter.ask(f"Select backup to restore (1-{len(entries)})")
    if not re.fullmatch(r"[0-9]+", selection) or not 1 <= int(selection) <= len(entries):
        raise RestoreError("Invalid selection")

    return entries[int(selection) - 1].path


def confirm_restore(config: BackupConfig, prompter: Prompter) -> bool:
    """Warn about data loss. Only the exact answer ``yes`` confirms."""
    logger.warning(f"WARNING: This will drop and recreate the database '{config.db_name}'")
    logger.warning("All current data will be lost!")
    return prompter.ask("Are you sure you want to continue? (yes/no)") == CONFIRM_TOKEN


def run_restore(
    config: BackupConfig,
    backup: str | None = None,
    prompter: Prompter | None = None,
    console: Console | None = None,
    probe: Callable[[], list[str]] = running_containers,
) -> bool:
    """Restore ``backup`` (or an interactively chosen one).

    Returns True when the database was restored, False when the user
    cancelled. Raises RestoreError on every hard failure.
    """
    console = console or Console()
    prompter = prompter or ConsolePrompter(console)

    logger.info("=== OpenStreetLifting Database Restore ===")

    if backup:
        backup_path = resolve_backup_path(backup, config.backup_dir)
    else:
        backup_path = choose_backup(config, prompter, console)

    if not backup_path.is_file():
        raise RestoreError(f"Backup file not found: {backup_path}")

    if not confirm_restore(config, prompter):
        logger.info("Restore cancelled")
        return False

    logger.info(f"Starting database restore from: {backup_path.name}")
    target = select_target(config, probe=probe)

    logger.info("Dropping existing connections...")
    terminate_connections(target)

    logger.info("Restoring backup...")
    if not restore_database(target, backup_path):
        raise RestoreError("Database restore failed!")

    logger.info("Database restored successfully!")
    logger.info("=== Restore completed ===")
    return True
