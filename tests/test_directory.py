from dataclasses import replace
from pathlib import Path

import pytest
from sqlalchemy import create_engine, text

from multimigrate.directory import fetch_databases
from multimigrate.errors import DirectoryFetchError


def seed_control_database(path: Path, names: list[str]) -> None:
    engine = create_engine(f"sqlite:///{path}")
    with engine.begin() as connection:
        connection.execute(text("CREATE TABLE tenants (name TEXT NOT NULL)"))
        for name in names:
            connection.execute(text("INSERT INTO tenants (name) VALUES (:name)"), {"name": name})
    engine.dispose()


def test_configured_list_is_returned_as_is(test_settings) -> None:
    settings = replace(test_settings, target_databases=("db2", "db1", "db2"))

    assert fetch_databases(settings) == ["db2", "db1", "db2"]


def test_live_query_against_control_database(test_settings) -> None:
    seed_control_database(Path(test_settings.control_database), ["alpha", "beta"])
    settings = replace(test_settings, directory_query="SELECT name FROM tenants ORDER BY name")

    assert fetch_databases(settings) == ["alpha", "beta"]


def test_empty_directory_is_not_an_error(test_settings) -> None:
    seed_control_database(Path(test_settings.control_database), [])
    settings = replace(test_settings, directory_query="SELECT name FROM tenants")

    assert fetch_databases(settings) == []


def test_query_failure_raises_directory_fetch_error(test_settings) -> None:
    # SQLite has no pg_database catalog.
    with pytest.raises(DirectoryFetchError, match="failed to fetch databases"):
        fetch_databases(test_settings)


def test_unknown_driver_raises_directory_fetch_error(test_settings) -> None:
    settings = replace(test_settings, db_driver="nosuchdriver")

    with pytest.raises(DirectoryFetchError, match="failed to fetch databases"):
        fetch_databases(settings)
