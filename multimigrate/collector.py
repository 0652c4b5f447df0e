from threading import Lock

from multimigrate.schemas import MigrationOutcome


class OutcomeCollector:
    """Thread-safe fan-in of attempt outcomes, each kept exactly once."""

    def __init__(self, expected: int) -> None:
        self.expected = expected
        self._lock = Lock()
        self._outcomes: list[MigrationOutcome] = []

    def add(self, outcome: MigrationOutcome) -> None:
        with self._lock:
            if len(self._outcomes) >= self.expected:
                raise RuntimeError(
                    f"collector already holds {self.expected} outcomes, refusing {outcome.database!r}"
                )
            self._outcomes.append(outcome)

    def drain(self) -> tuple[MigrationOutcome, ...]:
        with self._lock:
            if len(self._outcomes) != self.expected:
                raise RuntimeError(
                    f"expected {self.expected} outcomes, collected {len(self._outcomes)}"
                )
            outcomes = tuple(self._outcomes)
            self._outcomes.clear()
        return outcomes
