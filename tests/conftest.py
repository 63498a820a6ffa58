import os
from collections.abc import Generator
from typing import Any

import pytest
from sqlalchemy.orm import Session, scoped_session, sessionmaker

from subway_lines.orm.connection import DBConnection
from subway_lines.orm.schema import Base


def _test_db_url() -> str:
    """Pick the database the tests run against.

    TEST_DB_URL wins. Otherwise POSTGRES_HOST, POSTGRES_USER, POSTGRES_PASSWORD,
    POSTGRES_PORT and TEST_DB_NAME select a PostgreSQL test database, and an
    in-memory SQLite database is used when they are not all set.
    """
    url = os.getenv("TEST_DB_URL")
    if url:
        return url

    host = os.getenv("POSTGRES_HOST")
    user = os.getenv("POSTGRES_USER")
    pwd = os.getenv("POSTGRES_PASSWORD")
    port = os.getenv("POSTGRES_PORT")
    db_name = os.getenv("TEST_DB_NAME")
    if all([host, user, pwd, port, db_name]):
        return f"postgresql+psycopg://{user}:{pwd}@{host}:{port}/{db_name}"
    return "sqlite://"


@pytest.fixture(scope="session")
def db_connection() -> DBConnection:
    return DBConnection.from_url(_test_db_url())


@pytest.fixture(scope="session")
def db_engine(db_connection: DBConnection):
    """Create a database engine with the subway tables for the test session."""
    engine_kwargs = {} if db_connection.is_sqlite else {"pool_pre_ping": True, "pool_size": 10, "max_overflow": 20}
    engine = db_connection.get_engine(**engine_kwargs)
    db_connection.create_schema(engine)

    yield engine

    db_connection.drop_schema(engine)
    engine.dispose()


@pytest.fixture(scope="session")
def session_factory(db_engine):
    """Create a thread-safe scoped session factory for the test session."""
    return scoped_session(sessionmaker(bind=db_engine))


@pytest.fixture(autouse=True)
def clean_tables(db_engine):
    """Remove rows committed by a test so every test starts from empty tables."""
    yield

    with db_engine.begin() as conn:
        for table in reversed(Base.metadata.sorted_tables):
            conn.execute(table.delete())


@pytest.fixture
def db_session(session_factory) -> Generator[Session, Any, None]:
    """Create a new database session for each test.

    The session is rolled back after the test to maintain isolation.
    """
    session = session_factory()

    yield session

    session.rollback()
    session_factory.remove()
