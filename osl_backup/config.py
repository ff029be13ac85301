"""Backup configuration (settings file + environment)."""

from __future__ import annotations

import logging
import os
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path

from dotenv import dotenv_values

logger = logging.getLogger(__name__)

DEFAULT_ENV_FILE = Path(".env")


def load_settings(env_file: Path | None = DEFAULT_ENV_FILE) -> dict[str, str]:
    """Merge the settings file over the process environment.

    Values from the file win, the same as sourcing it before the run.
    ``os.environ`` itself is left untouched.
    """
    settings = dict(os.environ)
    if env_file is not None and env_file.is_file():
        file_values = {k: v for k, v in dotenv_values(env_file).items() if v is not None}
        settings.update(file_values)
        logger.debug(f"Loaded {len(file_values)} setting(s) from {env_file}")
    return settings


@dataclass
class BackupConfig:
    """Configuration for backup and restore runs."""

    backup_dir: Path = field(default_factory=lambda: Path("./backups"))

    # Retention (days). Kept raw, interpreted where used.
    local_retention_days: str = "7"
    remote_retention_days: str = "30"

    # Database
    db_user: str = "appuser"
    db_password: str = "apppassword"
    db_name: str = "appdb"
    db_host: str = "localhost"
    db_port: str = "5432"
    container_name: str = "openstreetlifting_postgres"

    # Optional remote targets
    s3_bucket: str | None = None
    remote_ssh: str | None = None
    s3_endpoint_url: str | None = None
    s3_region: str | None = None

    compression_level: str = "6"

    @classmethod
    def from_env(cls, settings: Mapping[str, str] | None = None) -> BackupConfig:
        """Build configuration from a settings mapping (defaults to ``os.environ``)."""
        env = os.environ if settings is None else settings

        def setting(key: str, default: str) -> str:
            return env.get(key) or default

        def optional(key: str) -> str | None:
            return env.get(key) or None

        return cls(
            backup_dir=Path(setting("BACKUP_DIR", "./backups")),
            local_retention_days=setting("LOCAL_RETENTION_DAYS", "7"),
            remote_retention_days=setting("REMOTE_RETENTION_DAYS", "30"),
            db_user=setting("DB_USER", "appuser"),
            db_password=setting("DB_PASSWORD", "apppassword"),
            db_name=setting("DB_NAME", "appdb"),
            db_host=setting("DB_HOST", "localhost"),
            db_port=setting("DB_PORT", "5432"),
            container_name=setting("CONTAINER_NAME", "openstreetlifting_postgres"),
            s3_bucket=optional("S3_BUCKET"),
            remote_ssh=optional("REMOTE_SSH"),
            s3_endpoint_url=optional("S3_ENDPOINT_URL"),
            s3_region=optional("S3_REGION"),
            compression_level=setting("BACKUP_COMPRESSION_LEVEL", "6"),
        )

    @property
    def local_retention(self) -> int:
        return int(self.local_retention_days)

    @property
    def remote_retention(self) -> int:
        return int(self.remote_retention_days)

    @property
    def gzip_level(self) -> int:
        return int(self.compression_level)

    @property
    def masked_password(self) -> str:
        """Password masked for display."""
        return "****" if self.db_password else ""


def load_config(env_file: Path | None = DEFAULT_ENV_FILE) -> BackupConfig:
    """Load the settings file and environment into a ``BackupConfig``."""
    return BackupConfig.from_env(load_settings(env_file))
