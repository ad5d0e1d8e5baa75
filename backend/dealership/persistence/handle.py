# Overview: Store access that always resolves to the active (durable or sandbox) engine.

from __future__ import annotations

from contextlib import contextmanager
from typing import Any, Iterator, Mapping, Optional

from sqlalchemy import text
from sqlalchemy.engine import Connection, RowMapping
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..errors import StoreError
from . import catalog
from .sandbox import SandboxController

Params = Optional[Mapping[str, Any]]


class StoreHandle:
    """
    One logical transaction per call.

    Every method asks the SandboxController for the active engine at call
    time and holds the controller's lock until the transaction commits or
    rolls back. Statements take named parameters (``:name``).

    Any SQLAlchemyError, whether raised by the store itself or inside a
    ``with`` block, is rolled back and re-raised as StoreError. Other
    exceptions raised inside a block also roll back and propagate unchanged.
    """

    def __init__(self, controller: SandboxController):
        self._controller = controller

    @property
    def is_sandbox(self) -> bool:
        return self._controller.is_active()

    @contextmanager
    def transaction(self) -> Iterator[Connection]:
        with self._controller.lock:
            engine = self._controller.active_engine()
            try:
                with engine.begin() as conn:
                    yield conn
            except SQLAlchemyError as exc:
                raise StoreError(str(exc)) from exc

    @contextmanager
    def session(self) -> Iterator[Session]:
        """ORM session scoped to one transaction; objects stay readable after commit."""
        with self._controller.lock:
            engine = self._controller.active_engine()
            try:
                with Session(engine, expire_on_commit=False) as session:
                    with session.begin():
                        yield session
            except SQLAlchemyError as exc:
                raise StoreError(str(exc)) from exc

    def execute(self, sql: str, params: Params = None) -> int:
        """Run a statement and commit. Returns the affected row count."""
        with self.transaction() as conn:
            return conn.execute(text(sql), params or {}).rowcount

    def query(self, sql: str, params: Params = None) -> list[RowMapping]:
        with self.transaction() as conn:
            return list(conn.execute(text(sql), params or {}).mappings())

    def insert_returning_id(self, sql: str, params: Params = None) -> int:
        with self.transaction() as conn:
            return conn.execute(text(sql), params or {}).lastrowid

    def list_tables(self) -> list[str]:
        with self.transaction() as conn:
            return catalog.list_tables(conn)

    def table_definition_sql(self, name: str) -> str | None:
        with self.transaction() as conn:
            return catalog.table_definition_sql(conn, name)

    def row_counts(self) -> dict[str, int]:
        """Rows per table in the active store."""
        with self.transaction() as conn:
            return {
                name: conn.execute(text(f'SELECT COUNT(*) FROM "{name}"')).scalar_one()
                for name in catalog.list_tables(conn)
            }
