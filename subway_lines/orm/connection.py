import logging
import os
from dataclasses import dataclass
from pathlib import Path

from sqlalchemy import Engine, event
from sqlalchemy.engine import URL, make_url
from sqlalchemy.orm import Session, scoped_session, sessionmaker
from sqlalchemy.pool import StaticPool

from subway_lines.exceptions import EnvNotFoundError

logger = logging.getLogger("subway-lines")

DEFAULT_DRIVER = "postgresql+psycopg"


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record) -> None:
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


@dataclass
class DBConnection:
    """Database connection configuration."""

    host: str | None = None
    port: int | None = None
    username: str | None = None
    password: str | None = None
    database: str | None = None
    driver: str = DEFAULT_DRIVER

    @property
    def url(self) -> URL:
        return URL.create(
            self.driver,
            username=self.username,
            password=self.password,
            host=self.host,
            port=self.port,
            database=self.database,
        )

    @property
    def db_url(self) -> str:
        """Construct the SQLAlchemy database URL."""
        return self.url.render_as_string(hide_password=False)

    @property
    def is_sqlite(self) -> bool:
        return self.url.get_backend_name() == "sqlite"

    def get_engine(self, **engine_kwargs) -> Engine:
        """Create a SQLAlchemy engine using the connection configuration.

        SQLite engines get foreign key enforcement turned on for every connection.
        In-memory SQLite databases share a single connection so every session
        sees the same tables.
        """
        from sqlalchemy import create_engine

        if not self.is_sqlite:
            return create_engine(self.db_url, **engine_kwargs)

        if self.database in (None, "", ":memory:"):
            engine_kwargs.setdefault("poolclass", StaticPool)
            engine_kwargs.setdefault("connect_args", {"check_same_thread": False})
        engine = create_engine(self.db_url, **engine_kwargs)
        event.listen(engine, "connect", _enable_sqlite_foreign_keys)
        return engine

    def get_session_factory(self, engine: Engine | None = None) -> sessionmaker[Session]:
        """Create a SQLAlchemy session factory using the connection configuration."""
        return sessionmaker(bind=engine or self.get_engine())

    def get_scoped_session_factory(self, engine: Engine | None = None) -> scoped_session[Session]:
        """Create a thread-safe scoped SQLAlchemy session factory."""
        return scoped_session(self.get_session_factory(engine))

    def create_schema(self, engine: Engine | None = None) -> Engine:
        """Create the station, line and line_station tables if they do not exist.

        Args:
            engine: Engine to use. A new one is created when omitted.

        Returns:
            The engine the tables were created on.
        """
        from subway_lines.orm.schema import Base

        engine = engine or self.get_engine()
        Base.metadata.create_all(engine)
        logger.info(f"Created tables {sorted(Base.metadata.tables)} on '{self.url.render_as_string()}'")
        return engine

    def drop_schema(self, engine: Engine | None = None) -> None:
        """Drop every table of the subway schema."""
        from subway_lines.orm.schema import Base

        engine = engine or self.get_engine()
        Base.metadata.drop_all(engine)
        logger.info(f"Dropped tables {sorted(Base.metadata.tables)} on '{self.url.render_as_string()}'")

    def create_database(self) -> bool:
        """Create the configured database if it is missing, then its tables.

        Returns:
            True if a new database was created, False if it already existed.

        Raises:
            MissingDBNameError: If database name is not set.
        """
        from subway_lines.orm.util import create_database

        return create_database(self)

    def drop_database(self, force: bool = False) -> bool:
        """Drop the configured database. On SQLite only the tables are dropped.

        Raises:
            MissingDBNameError: If database name is not set.
        """
        from subway_lines.orm.util import drop_database

        return drop_database(self, force=force)

    @classmethod
    def from_url(cls, url: str | URL) -> "DBConnection":
        """Build a connection configuration from a SQLAlchemy URL.

        Args:
            url: URL such as ``postgresql+psycopg://user:pw@host:5432/subway`` or ``sqlite://``.

        Returns:
            DBConnection instance with the URL's parts.
        """
        parsed = make_url(url)
        return cls(
            host=parsed.host,
            port=parsed.port,
            username=parsed.username,
            password=parsed.password,
            database=parsed.database,
            driver=parsed.drivername,
        )

    @classmethod
    def from_config(cls, config_path: str | Path) -> "DBConnection":
        """Load database connection configuration from a YAML file.

        Args:
            config_path: Path to a ``db.yaml`` file, or to a directory containing one.

        Returns:
            DBConnection instance with loaded configuration.
        """
        from omegaconf import DictConfig, OmegaConf

        resolved_path = Path(config_path)
        if resolved_path.is_dir():
            resolved_path = resolved_path / "db.yaml"

        cfg = OmegaConf.load(resolved_path)
        if not isinstance(cfg, DictConfig):
            raise TypeError("db.yaml must be a YAML mapping.")  # noqa: TRY003

        if cfg.get("url"):
            return cls.from_url(cfg.url)

        password = os.environ.get("POSTGRES_PASSWORD", cfg.get("password"))
        if password is None:
            raise ValueError("Database password not found in config or POSTGRES_PASSWORD env variable.")  # noqa: TRY003

        logger.info(f"Loaded database configuration from '{resolved_path}'")
        return cls(
            host=cfg.host,
            port=int(cfg.get("port", 5432)),
            username=cfg.user,
            password=str(password),
            database=cfg.get("database"),
            driver=cfg.get("driver", DEFAULT_DRIVER),
        )

    @classmethod
    def from_env(cls) -> "DBConnection":
        """Load database connection configuration from environment variables.

        ``DB_URL`` wins when set. Otherwise the ``POSTGRES_*`` variables are used.

        Returns:
            DBConnection instance with loaded configuration.

        Raises:
            EnvNotFoundError: If POSTGRES_USER or POSTGRES_PASSWORD is missing.
        """
        url = os.getenv("DB_URL")
        if url:
            return cls.from_url(url)

        host = os.getenv("POSTGRES_HOST", "localhost")
        port = int(os.getenv("POSTGRES_PORT", "5432"))
        database = os.getenv("POSTGRES_DB", None)
        for env_var_name in ("POSTGRES_USER", "POSTGRES_PASSWORD"):
            if not os.getenv(env_var_name):
                raise EnvNotFoundError(env_var_name)

        return cls(
            host=host,
            port=port,
            username=os.getenv("POSTGRES_USER"),
            password=os.getenv("POSTGRES_PASSWORD"),
            database=database,
        )
