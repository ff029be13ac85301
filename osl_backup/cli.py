"""CLI for OpenStreetLifting database backups (Typer + Rich)."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Annotated, Optional

import typer
from rich.console import Console
from rich.panel import Panel

from osl_backup.backup import BackupError, run_backup
from osl_backup.config import DEFAULT_ENV_FILE, BackupConfig, load_config
from osl_backup.prompts import ConsolePrompter
from osl_backup.restore import RestoreError, backups_table, run_restore
from osl_backup.storage import local
from osl_backup.target import select_target

app = typer.Typer(
    name="osl-db",
    help="OpenStreetLifting database backup and restore.",
    no_args_is_help=True,
)
console = Console()

logger = logging.getLogger("osl_backup")


def _config(ctx: typer.Context) -> BackupConfig:
    return ctx.obj


@app.callback()
def main(
    ctx: typer.Context,
    env_file: Annotated[
        Path, typer.Option("--env-file", "-e", help="Settings file loaded over the environment")
    ] = DEFAULT_ENV_FILE,
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Debug logging")] = False,
) -> None:
    """Load configuration once for the invoked command."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s [%(levelname)s] %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    ctx.obj = load_config(env_file)


# ── backup ──────────────────────────────────────────────────────────────


@app.command()
def backup(ctx: typer.Context) -> None:
    """Dump, compress, upload and prune old backups."""
    try:
        run_backup(_config(ctx))
    except BackupError as e:
        logger.error(str(e))
        raise typer.Exit(1)


# ── restore ─────────────────────────────────────────────────────────────


@app.command()
def restore(
    ctx: typer.Context,
    backup_file: Annotated[
        Optional[str],
        typer.Argument(help="Backup filename (looked up in BACKUP_DIR) or absolute path"),
    ] = None,
) -> None:
    """Restore the database from a backup. Prompts for one when omitted."""
    try:
        run_restore(
            _config(ctx),
            backup=backup_file,
            prompter=ConsolePrompter(console),
            console=console,
        )
    except RestoreError as e:
        logger.error(str(e))
        raise typer.Exit(1)


# ── list ────────────────────────────────────────────────────────────────


@app.command("list")
def list_backups(ctx: typer.Context) -> None:
    """List local backups."""
    config = _config(ctx)
    entries = local.list_backups(config.backup_dir)

    if not entries:
        console.print(f"[yellow]No backups found in {config.backup_dir}.[/]")
        return

    console.print(backups_table(entries, f"Available backups in {config.backup_dir}"))


# ── status ──────────────────────────────────────────────────────────────


@app.command()
def status(ctx: typer.Context) -> None:
    """Show resolved configuration and the execution target."""
    config = _config(ctx)
    target = select_target(config)
    entries = local.list_backups(config.backup_dir)

    dsn = f"{config.db_user}:{config.masked_password}@{config.db_host}:{config.db_port}/{config.db_name}"
    retention = f"{config.local_retention_days} days local, {config.remote_retention_days} days remote"

    lines = [
        f"[bold]Database:[/]       {dsn}",
        f"[bold]Container:[/]      {config.container_name}",
        f"[bold]Target:[/]         {target.name}",
        "",
        f"[bold]Backup Dir:[/]     {config.backup_dir.resolve()}",
        f"[bold]Local Backups:[/]  {len(entries)}",
        f"[bold]Retention:[/]      {retention}",
        "",
        f"[bold]S3:[/]             {config.s3_bucket or '[dim](not configured)[/]'}",
        f"[bold]Remote SSH:[/]     {config.remote_ssh or '[dim](not configured)[/]'}",
    ]

    console.print(Panel("\n".join(lines), title="Backup Status"))


if __name__ == "__main__":
    app()
