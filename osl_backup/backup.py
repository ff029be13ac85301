"""Backup runner: dump, compress, upload, prune."""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import datetime
from pathlib import Path

from botocore.exceptions import BotoCoreError

from osl_backup.config import BackupConfig
from osl_backup.database import dump_database
from osl_backup.storage import artifact_name, format_size, local
from osl_backup.storage.remote import sync_to_remote
from osl_backup.storage.s3 import S3Target
from osl_backup.target import running_containers, select_target

logger = logging.getLogger(__name__)


class BackupError(RuntimeError):
    """The dump failed; the run is aborted."""


def create_backup(
    config: BackupConfig,
    now: datetime,
    probe: Callable[[], list[str]] = running_containers,
) -> Path:
    """Dump the database into a new compressed artifact. Raises BackupError."""
    logger.info("Starting database backup...")

    config.backup_dir.mkdir(parents=True, exist_ok=True)
    backup_path = config.backup_dir / artifact_name(now)

    try:
        level = config.gzip_level
    except ValueError:
        level = None
    if level is None or not 0 <= level <= 9:
        raise BackupError(f"Invalid compression level: {config.compression_level!r}")

    target = select_target(config, probe=probe)
    if not dump_database(target, backup_path, compression_level=level):
        raise BackupError("Backup failed!")

    size = format_size(backup_path.stat().st_size)
    logger.info(f"Backup created successfully: {backup_path.name} ({size})")
    return backup_path


def upload_to_s3(config: BackupConfig, backup_path: Path, s3: S3Target | None) -> None:
    if s3 is None:
        return

    logger.info(f"Uploading backup to S3: {config.s3_bucket}")
    if not s3.available():
        logger.warning("AWS credentials not found. Skipping S3 upload.")
        return

    if s3.upload(backup_path):
        logger.info("Successfully uploaded to S3")


def upload_to_remote(config: BackupConfig, backup_path: Path) -> None:
    if not config.remote_ssh:
        return

    logger.info(f"Uploading backup to remote server: {config.remote_ssh}")
    sync_to_remote(backup_path, config.remote_ssh)


def cleanup_old_backups(config: BackupConfig, s3: S3Target | None, now: datetime) -> None:
    """Local retention sweep, then the S3 sweep when S3 is usable."""
    logger.info(f"Cleaning up old local backups (older than {config.local_retention_days} days)...")
    try:
        deleted = local.cleanup_old(config.backup_dir, config.local_retention, now=now)
    except ValueError:
        logger.error(f"Invalid LOCAL_RETENTION_DAYS: {config.local_retention_days!r}")
    except OSError as e:
        logger.error(f"Local cleanup failed: {e}")
    else:
        logger.info(f"Local cleanup completed ({deleted} removed)")

    if s3 is None or not s3.available():
        return

    logger.info(f"Cleaning up old S3 backups (older than {config.remote_retention_days} days)...")
    try:
        retention = config.remote_retention
    except ValueError:
        logger.error(f"Invalid REMOTE_RETENTION_DAYS: {config.remote_retention_days!r}")
        return

    deleted = s3.cleanup_old(retention, now=now)
    logger.info(f"S3 cleanup completed ({deleted} removed)")


def run_backup(
    config: BackupConfig,
    probe: Callable[[], list[str]] = running_containers,
    s3: S3Target | None = None,
    now: datetime | None = None,
) -> Path:
    """Run a full backup. Only a failed dump is fatal."""
    now = now or datetime.now()
    if s3 is None and config.s3_bucket:
        try:
            s3 = S3Target.from_config(config)
        except BotoCoreError as e:
            logger.warning(f"S3 unavailable, skipping S3 upload and cleanup: {e}")

    logger.info("=== OpenStreetLifting Database Backup ===")
    logger.info(f"Timestamp: {now:%Y-%m-%d %H:%M:%S}")
    logger.info(f"Database: {config.db_name}")
    logger.info(f"Backup directory: {config.backup_dir}")

    backup_path = create_backup(config, now, probe=probe)
    upload_to_s3(config, backup_path, s3)
    upload_to_remote(config, backup_path)
    cleanup_old_backups(config, s3, now)

    logger.info("=== Backup completed successfully ===")
    logger.info(f"Backup file: {backup_path}")
    return backup_path
