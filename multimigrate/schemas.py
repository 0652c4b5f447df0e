from dataclasses import dataclass, field
from typing import Literal


FailureKind = Literal["connection", "load", "execution", "internal"]


@dataclass(frozen=True)
class MigrationTarget:
    database: str


@dataclass(frozen=True)
class MigrationOutcome:
    database: str
    success: bool
    failure_kind: FailureKind | None = None
    error: str | None = None
    duration_ms: float = 0.0

    @classmethod
    def succeeded(cls, target: MigrationTarget, *, duration_ms: float) -> "MigrationOutcome":
        return cls(database=target.database, success=True, duration_ms=duration_ms)

    @classmethod
    def failed(
        cls,
        target: MigrationTarget,
        *,
        failure_kind: FailureKind,
        error: str,
        duration_ms: float,
    ) -> "MigrationOutcome":
        return cls(
            database=target.database,
            success=False,
            failure_kind=failure_kind,
            error=error,
            duration_ms=duration_ms,
        )


@dataclass(frozen=True)
class MigrationRun:
    dispatched: int
    outcomes: tuple[MigrationOutcome, ...] = field(default_factory=tuple)

    @property
    def succeeded(self) -> list[MigrationOutcome]:
        return [outcome for outcome in self.outcomes if outcome.success]

    @property
    def failed(self) -> list[MigrationOutcome]:
        return [outcome for outcome in self.outcomes if not outcome.success]

    def sorted_outcomes(self) -> list[MigrationOutcome]:
        # sorted() is stable, so duplicates keep completion order.
        return sorted(self.outcomes, key=lambda outcome: outcome.database)
