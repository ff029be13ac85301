"""Backup and restore for the OpenStreetLifting PostgreSQL database."""

__version__ = "0.1.0"
