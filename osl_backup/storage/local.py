"""Backup artifacts on the local filesystem."""

from __future__ import annotations

import logging
from datetime import datetime, timedelta
from pathlib import Path

from osl_backup.storage import ARTIFACT_GLOB, BackupEntry

logger = logging.getLogger(__name__)


def list_backups(backup_dir: Path) -> list[BackupEntry]:
    """Backup artifacts in ``backup_dir``, in filename order (oldest first)."""
    if not backup_dir.is_dir():
        return []

    entries: list[BackupEntry] = []
    for f in sorted(backup_dir.glob(ARTIFACT_GLOB)):
        if not f.is_file():
            continue
        stat = f.stat()
        entries.append(
            BackupEntry(
                path=f,
                filename=f.name,
                size=stat.st_size,
                modified=datetime.fromtimestamp(stat.st_mtime),
            )
        )
    return entries


def cleanup_old(backup_dir: Path, retention_days: int, now: datetime | None = None) -> int:
    """Delete artifacts modified more than ``retention_days`` ago. Returns count deleted."""
    cutoff = (now or datetime.now()).timestamp() - timedelta(days=retention_days).total_seconds()
    deleted = 0

    if not backup_dir.is_dir():
        return 0

    for f in backup_dir.glob(ARTIFACT_GLOB):
        if not f.is_file():
            continue
        if f.stat().st_mtime < cutoff:
            f.unlink()
            logger.info(f"Deleted old backup: {f.name}")
            deleted += 1

    return deleted
