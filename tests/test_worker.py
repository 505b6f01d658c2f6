"""Tests for the polling worker cycle."""

import httpx
import pytest
from typer.testing import CliRunner

from refactor_score.pipeline.llm_client import LLMAnalysisClient
from refactor_score.pipeline.orchestrator import CommitAnalysisOrchestrator
from refactor_score.settings import Settings, WorkerSettings
from refactor_score.wiring import Components
from refactor_score.worker import app, run_cycle

from conftest import ANALYSIS_JSON, SUGGESTIONS_JSON, OllamaStub, make_change


async def _no_sleep(delay):
    return None


@pytest.fixture
def settings(ollama_settings):
    return Settings(ollama=ollama_settings, worker=WorkerSettings(lookback_days=7, commits_per_cycle=2))


@pytest.fixture
def make_components(fake_git, store, make_ollama, ollama_settings):
    def _make(stub: OllamaStub) -> Components:
        ollama = make_ollama(stub)
        return Components(
            ollama=ollama,
            git=fake_git,
            repository=store,
            orchestrator=CommitAnalysisOrchestrator(
                llm=LLMAnalysisClient(ollama, ollama_settings, sleeper=_no_sleep),
                git=fake_git,
                store=store,
            ),
            http_client=ollama._http_client,
        )
    return _make


@pytest.mark.asyncio
async def test_cycle_skipped_when_model_unreachable(make_components, settings, fake_git, recent_date):
    fake_git.add_commit("c1", [make_change("a.py")], date=recent_date)
    stub = OllamaStub(healthy=False)

    counts = await run_cycle(make_components(stub), settings)

    assert sum(counts.values()) == 0
    assert stub.calls == 0


@pytest.mark.asyncio
async def test_cycle_analyzes_up_to_commits_per_cycle(make_components, settings, fake_git, store, recent_date):
    for commit_id in ("c1", "c2", "c3"):
        fake_git.add_commit(commit_id, [make_change("a.py")], date=recent_date)
    stub = OllamaStub([ANALYSIS_JSON, SUGGESTIONS_JSON] * 2)

    counts = await run_cycle(make_components(stub), settings)

    assert counts["Completed"] == 2
    assert sorted(store.saved) == ["c1", "c2"]


@pytest.mark.asyncio
async def test_failing_commit_does_not_stop_cycle(make_components, settings, fake_git, store, recent_date):
    fake_git.add_commit("c1", [make_change("a.py")], date=recent_date)
    fake_git.add_commit("c2", [make_change("README.md", language="Markdown", is_source_code=False)],
                        date=recent_date)
    stub = OllamaStub([httpx.ConnectError("refused")])

    counts = await run_cycle(make_components(stub), settings)

    assert counts == {"Completed": 0, "Skipped": 1, "AlreadyExists": 0, "Failed": 1}
    assert store.saved == {}


@pytest.mark.asyncio
async def test_old_commits_are_ignored(make_components, settings, fake_git, store):
    fake_git.add_commit("old", [make_change("a.py")])
    counts = await run_cycle(make_components(OllamaStub()), settings)
    assert counts["Completed"] == 0


def test_cli_help():
    result = CliRunner().invoke(app, ["--help"])
    assert result.exit_code == 0
    assert "--once" in result.output
    assert "--commit" in result.output
