# Overview: Owns the durable and sandbox engines and decides which one is active.

"""
Sandbox mode

The durable store is a SQLite file. Entering sandbox mode builds a private
in-memory database with the same table structure, seeds it with fixture rows
and routes every store call there until exit. Exiting drops the in-memory
database; nothing is ever merged back into the file.

A single re-entrant lock guards the mode flag. StoreHandle holds the same
lock for the length of each transaction, so a mode switch can never
interleave with an in-flight store operation.
"""

from __future__ import annotations

import logging
import threading
from pathlib import Path
from typing import Callable, Optional

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Connection, Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.pool import StaticPool

from ..errors import StoreError
from .catalog import schema_ddl

logger = logging.getLogger(__name__)

FixtureSeeder = Callable[[Connection], None]


def _enable_foreign_keys(engine: Engine) -> None:
    @event.listens_for(engine, "connect")
    def _set_sqlite_pragma(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


def create_durable_engine(database_path: str | Path, *, echo: bool = False) -> Engine:
    path = Path(database_path).expanduser()
    if path.parent and not path.parent.exists():
        path.parent.mkdir(parents=True, exist_ok=True)
    engine = create_engine(f"sqlite:///{path}", echo=echo)
    _enable_foreign_keys(engine)
    return engine


def create_sandbox_engine(*, echo: bool = False) -> Engine:
    # StaticPool keeps the single in-memory connection alive for the engine's lifetime
    engine = create_engine(
        "sqlite://",
        echo=echo,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    _enable_foreign_keys(engine)
    return engine


class SandboxController:
    """Production/Sandbox mode switch."""

    def __init__(
        self,
        database_path: str | Path,
        *,
        seed_fixtures: Optional[FixtureSeeder] = None,
        echo: bool = False,
    ):
        self.database_path = Path(database_path)
        self._echo = echo
        self._seed_fixtures = seed_fixtures
        self._lock = threading.RLock()
        self._durable_engine = create_durable_engine(self.database_path, echo=echo)
        self._sandbox_engine: Optional[Engine] = None
        logger.info("Opened durable store %s", self.database_path)

    @property
    def lock(self) -> threading.RLock:
        return self._lock

    @property
    def durable_engine(self) -> Engine:
        return self._durable_engine

    def is_active(self) -> bool:
        with self._lock:
            return self._sandbox_engine is not None

    def active_engine(self) -> Engine:
        """Engine for the current mode. Resolve on every call; never cache across a switch."""
        with self._lock:
            if self._sandbox_engine is not None:
                return self._sandbox_engine
            return self._durable_engine

    def enter(self) -> bool:
        """
        Switch to sandbox mode.

        Returns False (and changes nothing) if sandbox mode is already active.
        If the schema copy or the fixture seed fails, the half-built database
        is discarded, the mode stays Production and StoreError is raised.
        """
        with self._lock:
            if self._sandbox_engine is not None:
                logger.info("Sandbox mode already active")
                return False

            engine = create_sandbox_engine(echo=self._echo)
            try:
                with self._durable_engine.connect() as source:
                    statements = schema_ddl(source)

                with engine.begin() as conn:
                    for ddl in statements:
                        conn.exec_driver_sql(ddl)
                    if self._seed_fixtures is not None:
                        self._seed_fixtures(conn)
            except Exception as exc:
                engine.dispose()
                logger.exception("Failed to build sandbox store; staying in production mode")
                if isinstance(exc, SQLAlchemyError):
                    raise StoreError(f"Could not build sandbox store: {exc}") from exc
                raise

            self._sandbox_engine = engine
            logger.info("Sandbox mode activated (%d schema statements copied)", len(statements))
            return True

    def exit(self) -> bool:
        """
        Leave sandbox mode and throw the sandbox database away.

        Returns False if sandbox mode was not active.
        """
        with self._lock:
            if self._sandbox_engine is None:
                logger.info("Sandbox mode not active")
                return False

            self._sandbox_engine.dispose()
            self._sandbox_engine = None
            logger.info("Sandbox mode deactivated, sandbox data discarded")
            return True

    def close(self) -> None:
        with self._lock:
            if self._sandbox_engine is not None:
                self._sandbox_engine.dispose()
                self._sandbox_engine = None
            self._durable_engine.dispose()
            logger.info("Closed durable store %s", self.database_path)
