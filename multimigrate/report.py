from multimigrate.schemas import MigrationOutcome, MigrationRun


def format_outcome(outcome: MigrationOutcome) -> list[str]:
    status = "Success" if outcome.success else "Failed"
    lines = [f"[{status}] Database: {outcome.database}"]
    if not outcome.success:
        lines.append(f"Error: {outcome.failure_kind}: {outcome.error}")
    return lines


def format_report(run: MigrationRun) -> str:
    lines = ["Migration Results:"]
    for outcome in run.sorted_outcomes():
        lines.extend(format_outcome(outcome))
    lines.append(
        "succeeded={succeeded} failed={failed} total={total}".format(
            succeeded=len(run.succeeded),
            failed=len(run.failed),
            total=run.dispatched,
        )
    )
    return "\n".join(lines)
