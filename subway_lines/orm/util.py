"""Database lifecycle helpers for subway_lines.

CREATE DATABASE and DROP DATABASE refuse to run inside a transaction, so on
PostgreSQL these helpers open their own autocommit psycopg connection to the
server's maintenance database rather than going through a SQLAlchemy engine.
A SQLite database is a file created on first connect, so for it only the
tables are managed.
"""

import logging
from typing import TYPE_CHECKING

import psycopg
from psycopg import sql

from subway_lines.exceptions import MissingDBNameError

if TYPE_CHECKING:
    from subway_lines.orm.connection import DBConnection

logger = logging.getLogger("subway-lines")

MAINTENANCE_DATABASE = "postgres"


def _target_database(connection: "DBConnection") -> str:
    if not connection.database:
        raise MissingDBNameError
    return connection.database


def _connect_maintenance(connection: "DBConnection") -> psycopg.Connection:
    return psycopg.connect(
        host=connection.host or "localhost",
        port=connection.port or 5432,
        user=connection.username,
        password=connection.password,
        dbname=MAINTENANCE_DATABASE,
        autocommit=True,
    )


def _has_database(cursor: psycopg.Cursor, database: str) -> bool:
    cursor.execute("SELECT 1 FROM pg_database WHERE datname = %s", (database,))
    return cursor.fetchone() is not None


def database_exists(connection: "DBConnection") -> bool:
    """Check whether the configured PostgreSQL database exists on its server.

    Raises:
        MissingDBNameError: If the connection names no database.
    """
    database = _target_database(connection)
    with _connect_maintenance(connection) as conn, conn.cursor() as cursor:
        return _has_database(cursor, database)


def create_database(connection: "DBConnection") -> bool:
    """Create the configured database if needed, then its subway tables.

    The tables are created even when the database was already there, so a
    half-initialised database is completed.

    Args:
        connection: Target database. Its user needs CREATE DATABASE privileges
            on PostgreSQL.

    Returns:
        True if a new database was created, False if it already existed.
        Always True for SQLite.

    Raises:
        MissingDBNameError: If the connection names no database.
        psycopg.Error: If the server rejects the connection or the statement.
    """
    database = _target_database(connection)
    if connection.is_sqlite:
        connection.create_schema()
        return True

    with _connect_maintenance(connection) as conn, conn.cursor() as cursor:
        created = not _has_database(cursor, database)
        if created:
            cursor.execute(
                sql.SQL("CREATE DATABASE {} ENCODING 'UTF8' TEMPLATE template0").format(sql.Identifier(database))
            )
            logger.info(f"Created database '{database}'")
        else:
            logger.info(f"Database '{database}' already exists, creating missing tables only")

    connection.create_schema()
    return created


def drop_database(connection: "DBConnection", force: bool = False) -> bool:
    """Drop the configured database, or only its subway tables on SQLite.

    Args:
        connection: Target database.
        force: Terminate other sessions on the database first (PostgreSQL 13+).

    Returns:
        True if something was dropped, False if the database did not exist.

    Raises:
        MissingDBNameError: If the connection names no database.
    """
    database = _target_database(connection)
    if connection.is_sqlite:
        connection.drop_schema()
        return True

    with _connect_maintenance(connection) as conn, conn.cursor() as cursor:
        if not _has_database(cursor, database):
            logger.info(f"Database '{database}' does not exist, nothing to drop")
            return False
        statement = sql.SQL("DROP DATABASE {}").format(sql.Identifier(database))
        if force:
            statement = sql.SQL("{} WITH (FORCE)").format(statement)
        cursor.execute(statement)

    logger.info(f"Dropped database '{database}'")
    return True
