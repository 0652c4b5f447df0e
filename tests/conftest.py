from pathlib import Path
from threading import Lock
import time

import pytest

from multimigrate.config import DEFAULT_DIRECTORY_QUERY, DatabaseCredentials, Settings
from multimigrate.errors import ExecutionError, TargetConnectionError


class FakeConnection:
    def __init__(self, provider: "FakeConnectionProvider", database: str) -> None:
        self.provider = provider
        self.database = database

    def execute(self, script: str) -> None:
        delay = self.provider.delays.get(self.database, 0)
        if delay:
            time.sleep(delay)
        if self.database in self.provider.execute_failures:
            raise ExecutionError(f"syntax error on {self.database}")
        with self.provider.lock:
            self.provider.executed.append((self.database, script))

    def close(self) -> None:
        with self.provider.lock:
            self.provider.closed.append(self.database)


class FakeConnectionProvider:
    """Connection provider that records every acquire, execute and close."""

    def __init__(
        self,
        *,
        connect_failures: set[str] | None = None,
        execute_failures: set[str] | None = None,
        delays: dict[str, float] | None = None,
    ) -> None:
        self.connect_failures = connect_failures or set()
        self.execute_failures = execute_failures or set()
        self.delays = delays or {}
        self.lock = Lock()
        self.acquired: list[str] = []
        self.executed: list[tuple[str, str]] = []
        self.closed: list[str] = []
        self.credentials_seen: list[DatabaseCredentials] = []

    def __call__(self, credentials: DatabaseCredentials, database: str) -> FakeConnection:
        with self.lock:
            self.credentials_seen.append(credentials)
        if database in self.connect_failures:
            raise TargetConnectionError(f"cannot connect to {database!r}: refused")
        with self.lock:
            self.acquired.append(database)
        return FakeConnection(self, database)


@pytest.fixture()
def temp_workspace(tmp_path: Path) -> Path:
    migration_dir = tmp_path / "migration"
    migration_dir.mkdir(parents=True, exist_ok=True)
    (migration_dir / "migration_script.sql").write_text(
        "CREATE TABLE IF NOT EXISTS accounts (id INTEGER PRIMARY KEY, email TEXT);\n"
        "CREATE INDEX IF NOT EXISTS accounts_email ON accounts (email);\n",
        encoding="utf-8",
    )
    (tmp_path / "databases").mkdir(parents=True, exist_ok=True)
    return tmp_path


@pytest.fixture()
def test_settings(temp_workspace: Path) -> Settings:
    return Settings(
        app_name="multimigrate",
        log_level="INFO",
        db_driver="sqlite",
        db_username=None,
        db_password=None,
        db_host=None,
        db_port=None,
        control_database=str(temp_workspace / "databases" / "control.db"),
        directory_query=DEFAULT_DIRECTORY_QUERY,
        target_databases=(),
        migration_dir=str(temp_workspace / "migration"),
        script_name="migration_script.sql",
        max_workers=None,
    )


@pytest.fixture()
def provider() -> FakeConnectionProvider:
    return FakeConnectionProvider()


@pytest.fixture()
def make_provider():
    return FakeConnectionProvider
