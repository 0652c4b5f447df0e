from dataclasses import dataclass
import os

from dotenv import load_dotenv


load_dotenv()

DEFAULT_DIRECTORY_QUERY = "SELECT datname FROM pg_database WHERE datistemplate = false"


@dataclass(frozen=True)
class DatabaseCredentials:
    driver: str
    username: str | None
    password: str | None
    host: str | None
    port: int | None


@dataclass(frozen=True)
class Settings:
    app_name: str
    log_level: str
    db_driver: str
    db_username: str | None
    db_password: str | None
    db_host: str | None
    db_port: int | None
    control_database: str
    directory_query: str
    target_databases: tuple[str, ...]
    migration_dir: str
    script_name: str
    max_workers: int | None

    @property
    def credentials(self) -> DatabaseCredentials:
        return DatabaseCredentials(
            driver=self.db_driver,
            username=self.db_username,
            password=self.db_password,
            host=self.db_host,
            port=self.db_port,
        )


def _optional(name: str) -> str | None:
    value = os.getenv(name, "").strip()
    return value or None


def _optional_int(name: str) -> int | None:
    value = _optional(name)
    return int(value) if value is not None else None


def parse_database_list(raw: str) -> tuple[str, ...]:
    return tuple(name.strip() for name in raw.split(",") if name.strip())


def validate_max_workers(value: int | None) -> int | None:
    if value is not None and value < 1:
        raise ValueError(f"MAX_WORKERS must be at least 1, got {value}")
    return value


def get_settings() -> Settings:
    return Settings(
        app_name=os.getenv("APP_NAME", "multimigrate"),
        log_level=os.getenv("LOG_LEVEL", "INFO"),
        db_driver=os.getenv("DB_DRIVER", "postgresql+psycopg2"),
        db_username=os.getenv("DB_USERNAME", "username") or None,
        db_password=_optional("DB_PASSWORD"),
        db_host=_optional("DB_HOST"),
        db_port=_optional_int("DB_PORT"),
        control_database=os.getenv("CONTROL_DATABASE", "postgres"),
        directory_query=os.getenv("DIRECTORY_QUERY", DEFAULT_DIRECTORY_QUERY),
        target_databases=parse_database_list(os.getenv("TARGET_DATABASES", "")),
        migration_dir=os.getenv("MIGRATION_DIR", "src/migration"),
        script_name=os.getenv("MIGRATION_SCRIPT", "migration_script.sql"),
        max_workers=validate_max_workers(_optional_int("MAX_WORKERS")),
    )
