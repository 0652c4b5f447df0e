import logging

from sqlalchemy import create_engine
from sqlalchemy.engine import URL, Connection, Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.pool import NullPool

from multimigrate.config import DatabaseCredentials
from multimigrate.errors import ExecutionError, TargetConnectionError


logger = logging.getLogger(__name__)


def build_url(credentials: DatabaseCredentials, database: str) -> URL:
    return URL.create(
        drivername=credentials.driver,
        username=credentials.username,
        password=credentials.password,
        host=credentials.host,
        port=credentials.port,
        database=database,
    )


def build_engine(url: URL) -> Engine:
    connect_args: dict[str, object] = {}
    if url.drivername.startswith("sqlite"):
        connect_args["check_same_thread"] = False

    # One engine per target per run, nothing is pooled between runs.
    # Autocommit so statements like CREATE INDEX CONCURRENTLY are allowed.
    return create_engine(
        url,
        poolclass=NullPool,
        isolation_level="AUTOCOMMIT",
        connect_args=connect_args,
    )


class TargetConnection:
    def __init__(self, database: str, engine: Engine, connection: Connection) -> None:
        self.database = database
        self._engine = engine
        self._connection: Connection | None = connection

    @property
    def closed(self) -> bool:
        return self._connection is None

    def execute(self, script: str) -> None:
        if self._connection is None:
            raise ExecutionError(f"connection to {self.database!r} is already closed")

        dbapi_error = self._connection.dialect.loaded_dbapi.Error
        try:
            if self._connection.dialect.name == "sqlite":
                # sqlite3 only takes one statement per execute().
                self._connection.connection.driver_connection.executescript(script)
            else:
                # No parameters, so "%" in the script is not read as a placeholder.
                self._connection.execution_options(no_parameters=True).exec_driver_sql(script)
        except (SQLAlchemyError, dbapi_error, TypeError) as exc:
            raise ExecutionError(f"migration failed on {self.database!r}: {exc}") from exc

    def close(self) -> None:
        if self._connection is None:
            return
        connection, self._connection = self._connection, None
        try:
            connection.close()
        finally:
            self._engine.dispose()


def connect_to_database(credentials: DatabaseCredentials, database: str) -> TargetConnection:
    try:
        engine = build_engine(build_url(credentials, database))
    except (SQLAlchemyError, ImportError) as exc:
        raise TargetConnectionError(f"cannot connect to {database!r}: {exc}") from exc

    try:
        connection = engine.connect()
    except SQLAlchemyError as exc:
        engine.dispose()
        raise TargetConnectionError(f"cannot connect to {database!r}: {exc}") from exc

    logger.debug("connected to target", extra={"database": database})
    return TargetConnection(database, engine, connection)
