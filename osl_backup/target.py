"""Execution targets: run database tools directly or through ``docker exec``."""

from __future__ import annotations

import logging
import os
import subprocess
from collections.abc import Callable
from dataclasses import dataclass
from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from osl_backup.config import BackupConfig

logger = logging.getLogger(__name__)

DUMP_FLAGS = ["--verbose", "--clean", "--if-exists", "--no-owner", "--no-acl"]

# Read by psql from stdin
TERMINATE_SQL = (
    "SELECT pg_terminate_backend(pid) FROM pg_stat_activity "
    "WHERE datname = :'dbname' AND pid <> pg_backend_pid();\n"
)


class ExecutionTarget(Protocol):
    """How dump, restore and connection-termination commands are issued."""

    name: str

    def env(self) -> dict[str, str]: ...

    def dump_command(self) -> list[str]: ...

    def restore_command(self) -> list[str]: ...

    def terminate_command(self) -> list[str]: ...


def _child_env(config: BackupConfig) -> dict[str, str]:
    env = os.environ.copy()
    env["PGPASSWORD"] = config.db_password
    return env


@dataclass
class DirectTarget:
    """Local PostgreSQL client tools talking to ``DB_HOST:DB_PORT``."""

    config: BackupConfig
    name: str = "direct"

    def env(self) -> dict[str, str]:
        return _child_env(self.config)

    def _connection(self, database: str) -> list[str]:
        c = self.config
        return ["-U", c.db_user, "-d", database, "-h", c.db_host, "-p", c.db_port]

    def dump_command(self) -> list[str]:
        return ["pg_dump", *self._connection(self.config.db_name), *DUMP_FLAGS]

    def restore_command(self) -> list[str]:
        return ["psql", *self._connection(self.config.db_name)]

    def terminate_command(self) -> list[str]:
        return ["psql", *self._connection("postgres"), "-v", f"dbname={self.config.db_name}"]


@dataclass
class ContainerTarget:
    """Client tools inside the running database container."""

    config: BackupConfig
    name: str = "container"

    def env(self) -> dict[str, str]:
        # docker exec -e PGPASSWORD forwards the value from this environment
        return _child_env(self.config)

    def _exec(self, interactive: bool = False) -> list[str]:
        cmd = ["docker", "exec"]
        if interactive:
            cmd.append("-i")
        cmd.extend(["-e", "PGPASSWORD", self.config.container_name])
        return cmd

    def dump_command(self) -> list[str]:
        c = self.config
        return [
            *self._exec(),
            "pg_dump",
            "-U",
            c.db_user,
            "-d",
            c.db_name,
            "-h",
            "localhost",
            "-p",
            "5432",
            *DUMP_FLAGS,
        ]

    def restore_command(self) -> list[str]:
        c = self.config
        return [
            *self._exec(interactive=True),
            "psql",
            "-U",
            c.db_user,
            "-d",
            c.db_name,
            "-h",
            "localhost",
            "-p",
            "5432",
        ]

    def terminate_command(self) -> list[str]:
        c = self.config
        return [*self._exec(interactive=True), "psql", "-U", c.db_user, "-d", "postgres", "-v", f"dbname={c.db_name}"]


def running_containers() -> list[str]:
    """Names of the currently running containers (empty if docker is unavailable)."""
    try:
        result = subprocess.run(
            ["docker", "ps", "--format", "{{.Names}}"],
            capture_output=True,
            text=True,
        )
    except OSError as e:
        logger.debug(f"docker not available: {e}")
        return []

    if result.returncode != 0:
        logger.debug(f"docker ps failed: {result.stderr.strip()}")
        return []

    return [line.strip() for line in result.stdout.splitlines() if line.strip()]


def select_target(
    config: BackupConfig,
    probe: Callable[[], list[str]] = running_containers,
) -> ExecutionTarget:
    """Pick the container target when ``CONTAINER_NAME`` is running, else direct."""
    if config.container_name in probe():
        logger.info(f"Using Docker container: {config.container_name}")
        return ContainerTarget(config)

    logger.info("Using local PostgreSQL client")
    return DirectTarget(config)
