"""Entry point for ``python -m osl_backup``."""

from osl_backup.cli import app

app()
