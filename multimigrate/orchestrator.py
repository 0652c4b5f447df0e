from collections.abc import Callable, Iterable
from concurrent.futures import ThreadPoolExecutor
import logging
import time

from multimigrate.collector import OutcomeCollector
from multimigrate.config import DatabaseCredentials, Settings
from multimigrate.database import TargetConnection, connect_to_database
from multimigrate.schemas import FailureKind, MigrationOutcome, MigrationRun, MigrationTarget
from multimigrate.scripts import read_migration_script


logger = logging.getLogger(__name__)

ConnectFn = Callable[[DatabaseCredentials, str], TargetConnection]
LoadScriptFn = Callable[[str, str], str]


class MigrationOrchestrator:
    """Runs one migration attempt per target database concurrently."""

    def __init__(
        self,
        settings: Settings,
        *,
        connect: ConnectFn = connect_to_database,
        load_script: LoadScriptFn = read_migration_script,
    ) -> None:
        self.settings = settings
        self.connect = connect
        self.load_script = load_script

    def run(self, databases: Iterable[str]) -> MigrationRun:
        targets = [MigrationTarget(database) for database in databases]
        if not targets:
            logger.info("no target databases, nothing to migrate")
            return MigrationRun(dispatched=0)

        collector = OutcomeCollector(expected=len(targets))
        max_workers = self.settings.max_workers if self.settings.max_workers is not None else len(targets)
        started = time.perf_counter()

        logger.info(
            "dispatching migrations",
            extra={"targets": len(targets), "max_workers": max_workers},
        )

        with ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="migrate") as executor:
            futures = {executor.submit(self._dispatch, target, collector): target for target in targets}
        # Leaving the with block waits for every attempt.

        for future, target in futures.items():
            exc = future.exception()
            if exc is not None:
                # The attempt died before reporting, record it so nothing goes missing.
                logger.error("migration attempt crashed", exc_info=exc, extra={"database": target.database})
                collector.add(
                    MigrationOutcome.failed(
                        target,
                        failure_kind="internal",
                        error=str(exc) or type(exc).__name__,
                        duration_ms=0.0,
                    )
                )

        run = MigrationRun(dispatched=len(targets), outcomes=collector.drain())
        logger.info(
            "migration run finished",
            extra={
                "targets": run.dispatched,
                "succeeded": len(run.succeeded),
                "failed": len(run.failed),
                "duration_ms": (time.perf_counter() - started) * 1000,
            },
        )
        return run

    def _dispatch(self, target: MigrationTarget, collector: OutcomeCollector) -> None:
        collector.add(self.migrate(target))

    def migrate(self, target: MigrationTarget) -> MigrationOutcome:
        """Connect, load, execute and release for a single target."""
        started = time.perf_counter()

        def elapsed_ms() -> float:
            return (time.perf_counter() - started) * 1000

        try:
            connection = self.connect(self.settings.credentials, target.database)
        except Exception as exc:
            return self._failed(target, "connection", exc, elapsed_ms())

        try:
            try:
                script = self.load_script(self.settings.migration_dir, self.settings.script_name)
            except Exception as exc:
                return self._failed(target, "load", exc, elapsed_ms())

            try:
                connection.execute(script)
            except Exception as exc:
                return self._failed(target, "execution", exc, elapsed_ms())
        finally:
            self._release(target, connection)

        logger.info("migration succeeded", extra={"database": target.database})
        return MigrationOutcome.succeeded(target, duration_ms=elapsed_ms())

    def _release(self, target: MigrationTarget, connection: TargetConnection) -> None:
        try:
            connection.close()
        except Exception:
            logger.warning("failed to close connection", exc_info=True, extra={"database": target.database})

    def _failed(
        self, target: MigrationTarget, failure_kind: FailureKind, exc: Exception, duration_ms: float
    ) -> MigrationOutcome:
        logger.warning(
            "migration failed",
            extra={"database": target.database, "failure_kind": failure_kind, "error": str(exc)},
        )
        return MigrationOutcome.failed(
            target,
            failure_kind=failure_kind,
            error=str(exc),
            duration_ms=duration_ms,
        )
