# Overview: Application settings loaded from environment variables.

from __future__ import annotations
import os


def _env_bool(name: str, default: bool = False) -> bool:
    value = os.environ.get(name)
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


class Config:
    # SQLite file holding the durable (production) data
    DATABASE_PATH = os.environ.get(
        "DEALERSHIP_DB_PATH", #optional alternative location
        "dealership.sqlite3", #default local location
    )

    # bcrypt cost factor; tests drop this to the minimum (4)
    BCRYPT_ROUNDS = int(os.environ.get("BCRYPT_ROUNDS", "12"))

    # Non-admin accounts are deactivated after this many consecutive failures
    MAX_FAILED_ATTEMPTS = int(os.environ.get("MAX_FAILED_ATTEMPTS", "3"))

    MIN_PASSWORD_LENGTH = int(os.environ.get("MIN_PASSWORD_LENGTH", "6"))

    SQL_ECHO = _env_bool("SQL_ECHO")

    LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")
