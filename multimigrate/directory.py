import logging

from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from multimigrate.config import Settings
from multimigrate.database import build_engine, build_url
from multimigrate.errors import DirectoryFetchError


logger = logging.getLogger(__name__)


def fetch_databases(settings: Settings) -> list[str]:
    """Return the configured target list, or ask the control database for one."""
    if settings.target_databases:
        logger.info("using configured target databases", extra={"count": len(settings.target_databases)})
        return list(settings.target_databases)

    engine = None
    try:
        engine = build_engine(build_url(settings.credentials, settings.control_database))
        with engine.connect() as connection:
            rows = connection.execute(text(settings.directory_query))
            databases = [str(row[0]) for row in rows]
    except (SQLAlchemyError, ImportError) as exc:
        raise DirectoryFetchError(
            f"failed to fetch databases from {settings.control_database!r}: {exc}"
        ) from exc
    finally:
        if engine is not None:
            engine.dispose()

    logger.info(
        "fetched target databases",
        extra={"control_database": settings.control_database, "count": len(databases)},
    )
    return databases
