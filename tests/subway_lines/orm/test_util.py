"""Tests for subway_lines.orm.util module."""

from unittest.mock import MagicMock, patch

import pytest
from sqlalchemy import inspect

from subway_lines.exceptions import MissingDBNameError
from subway_lines.orm.connection import DBConnection
from subway_lines.orm.util import create_database, database_exists, drop_database


def _mock_connect(existing: bool) -> tuple[MagicMock, MagicMock]:
    cursor = MagicMock()
    cursor.fetchone.return_value = (1,) if existing else None
    conn = MagicMock()
    conn.cursor.return_value.__enter__.return_value = cursor
    connect = MagicMock()
    connect.return_value.__enter__.return_value = conn
    return connect, cursor


@pytest.fixture
def metro_connection():
    return DBConnection(host="db", port=5433, username="subway", password="secret", database="metro")


class TestPostgresLifecycle:
    def test_connects_to_maintenance_database(self, metro_connection):
        connect, cursor = _mock_connect(existing=True)

        with patch("subway_lines.orm.util.psycopg.connect", connect):
            assert database_exists(metro_connection) is True

        connect.assert_called_once_with(
            host="db", port=5433, user="subway", password="secret", dbname="postgres", autocommit=True
        )
        cursor.execute.assert_called_once_with("SELECT 1 FROM pg_database WHERE datname = %s", ("metro",))

    def test_default_host_and_port(self):
        connect, _ = _mock_connect(existing=False)

        with patch("subway_lines.orm.util.psycopg.connect", connect):
            assert database_exists(DBConnection(username="subway", password="secret", database="metro")) is False

        assert connect.call_args.kwargs["host"] == "localhost"
        assert connect.call_args.kwargs["port"] == 5432

    def test_create_missing_database_then_tables(self, metro_connection):
        connect, cursor = _mock_connect(existing=False)

        with (
            patch("subway_lines.orm.util.psycopg.connect", connect),
            patch.object(DBConnection, "create_schema") as create_schema,
        ):
            assert create_database(metro_connection) is True

        assert cursor.execute.call_count == 2
        create_schema.assert_called_once_with()

    def test_create_existing_database_still_creates_tables(self, metro_connection):
        connect, cursor = _mock_connect(existing=True)

        with (
            patch("subway_lines.orm.util.psycopg.connect", connect),
            patch.object(DBConnection, "create_schema") as create_schema,
        ):
            assert create_database(metro_connection) is False

        assert cursor.execute.call_count == 1
        create_schema.assert_called_once_with()

    def test_drop_missing_database(self, metro_connection):
        connect, cursor = _mock_connect(existing=False)

        with patch("subway_lines.orm.util.psycopg.connect", connect):
            assert drop_database(metro_connection) is False

        assert cursor.execute.call_count == 1

    def test_drop_existing_database(self, metro_connection):
        connect, cursor = _mock_connect(existing=True)

        with patch("subway_lines.orm.util.psycopg.connect", connect):
            assert drop_database(metro_connection, force=True) is True

        assert cursor.execute.call_count == 2

    def test_missing_name_never_connects(self):
        connect, _ = _mock_connect(existing=False)

        with patch("subway_lines.orm.util.psycopg.connect", connect), pytest.raises(MissingDBNameError):
            create_database(DBConnection(host="db", username="subway", password="secret"))

        connect.assert_not_called()


class TestSqliteLifecycle:
    def test_create_and_drop_tables(self, tmp_path):
        conn = DBConnection.from_url(f"sqlite:///{tmp_path / 'metro.db'}")

        assert create_database(conn) is True
        assert {"line", "line_station", "station"} <= set(inspect(conn.get_engine()).get_table_names())

        assert drop_database(conn) is True
        assert inspect(conn.get_engine()).get_table_names() == []
