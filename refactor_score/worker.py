"""
RefactorScore polling worker.

Each cycle checks the model server, lists the commits of the lookback window
and analyzes up to `commits_per_cycle` of them, one at a time. A failing
commit is logged and left for a later cycle.

Usage:
    refactor-score-worker              # run forever
    refactor-score-worker --once       # run a single cycle
    refactor-score-worker --commit SHA # analyze one commit and exit
"""

import asyncio
import logging
from datetime import datetime, timedelta, timezone

import typer

from .logging_config import setup_logging
from .pipeline.entities import AnalysisStatus
from .pipeline.errors import RefactorScoreError
from .settings import Settings, get_settings
from .wiring import Components, build_components

logger = logging.getLogger(__name__)


async def run_cycle(components: Components, settings: Settings) -> dict[str, int]:
    """
    One polling cycle.

    Returns a count of commits per outcome ("Completed", "Skipped",
    "AlreadyExists", "Failed"). Nothing is analyzed when the model server
    does not answer the health probe.
    """
    counts = {status.value: 0 for status in (AnalysisStatus.COMPLETED, AnalysisStatus.SKIPPED, AnalysisStatus.ALREADY_EXISTS)}
    counts["Failed"] = 0

    if not await components.ollama.ping():
        logger.warning("Ollama is not reachable, skipping this cycle")
        return counts

    until = datetime.now(timezone.utc)
    since = until - timedelta(days=settings.worker.lookback_days)
    commits = await asyncio.to_thread(components.git.get_commits_by_period, since, until)
    logger.info(f"Found {len(commits)} commits since {since:%Y-%m-%d}")

    for commit in commits[:settings.worker.commits_per_cycle]:
        try:
            run = await components.orchestrator.analyze_commit(commit.id)
        except RefactorScoreError as e:
            logger.error(f"Analysis of commit {commit.id} failed: {e}", extra={"commit_id": commit.id})
            counts["Failed"] += 1
            continue
        counts[run.status.value] += 1

    logger.info(f"Cycle finished: {counts}")
    return counts


async def run_forever(components: Components, settings: Settings) -> None:
    while True:
        try:
            await run_cycle(components, settings)
        except Exception:
            logger.exception("Unexpected error in worker cycle")
        await asyncio.sleep(settings.worker.interval_seconds)


async def _run(once: bool, commit: str | None) -> int:
    settings = get_settings()
    components = build_components(settings)
    try:
        if commit:
            run = await components.orchestrator.analyze_commit(commit)
            logger.info(f"Commit {commit}: {run.status.value}")
            return 0
        if once:
            counts = await run_cycle(components, settings)
            return 1 if counts["Failed"] else 0
        await run_forever(components, settings)
        return 0
    finally:
        await components.aclose()


app = typer.Typer(
    name="refactor-score-worker",
    help="RefactorScore commit analysis worker",
    add_completion=False,
)


@app.command()
def worker(
    once: bool = typer.Option(False, "--once", help="Run a single cycle and exit"),
    commit: str | None = typer.Option(None, "--commit", metavar="SHA", help="Analyze one commit and exit"),
    log_level: str | None = typer.Option(None, "--log-level", help="Override LOG_LEVEL"),
):
    """Analyze recent commits of the configured repository."""
    setup_logging(level=log_level)
    try:
        code = asyncio.run(_run(once, commit))
    except RefactorScoreError as e:
        logger.error(str(e))
        raise typer.Exit(1)
    except KeyboardInterrupt:
        logger.info("Worker stopped")
        raise typer.Exit(130)
    raise typer.Exit(code)


def main():
    app()


if __name__ == "__main__":
    main()
