# Overview: SQLite catalog queries used to enumerate and clone a schema.

from __future__ import annotations

from sqlalchemy import text
from sqlalchemy.engine import Connection


def list_tables(conn: Connection) -> list[str]:
    """User tables in creation order; sqlite_* internals are skipped."""
    rows = conn.execute(text(
        "SELECT name FROM sqlite_master "
        "WHERE type = 'table' AND name NOT LIKE 'sqlite_%' "
        "ORDER BY rowid"
    ))
    return [row[0] for row in rows]


def table_definition_sql(conn: Connection, name: str) -> str | None:
    """CREATE TABLE statement for one table, or None if it does not exist."""
    return conn.execute(
        text("SELECT sql FROM sqlite_master WHERE type = 'table' AND name = :name"),
        {"name": name},
    ).scalar()


def index_definitions_sql(conn: Connection) -> list[str]:
    """
    CREATE INDEX statements for explicit indexes.

    Indexes backing UNIQUE / PRIMARY KEY constraints have no sql of their own;
    they come back with the table definition.
    """
    rows = conn.execute(text(
        "SELECT sql FROM sqlite_master "
        "WHERE type = 'index' AND sql IS NOT NULL AND name NOT LIKE 'sqlite_%' "
        "ORDER BY rowid"
    ))
    return [row[0] for row in rows]


def schema_ddl(conn: Connection) -> list[str]:
    """Every statement needed to rebuild the structure (not the data) of a database."""
    statements = []
    for name in list_tables(conn):
        ddl = table_definition_sql(conn, name)
        if ddl:
            statements.append(ddl)
    statements.extend(index_definitions_sql(conn))
    return statements
