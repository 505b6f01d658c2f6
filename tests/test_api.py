"""Tests for the FastAPI endpoints, with the model and git faked."""

import httpx
import pytest
from fastapi.testclient import TestClient

from refactor_score.main import app, get_components
from refactor_score.pipeline.llm_client import LLMAnalysisClient
from refactor_score.pipeline.orchestrator import CommitAnalysisOrchestrator
from refactor_score.wiring import Components

from conftest import ANALYSIS_JSON, SUGGESTIONS_JSON, OllamaStub, make_change


async def _no_sleep(delay):
    return None


@pytest.fixture
def stub():
    return OllamaStub()


@pytest.fixture
def client(stub, fake_git, repository, make_ollama, ollama_settings):
    ollama = make_ollama(stub)
    components = Components(
        ollama=ollama,
        git=fake_git,
        repository=repository,
        orchestrator=CommitAnalysisOrchestrator(
            llm=LLMAnalysisClient(ollama, ollama_settings, sleeper=_no_sleep),
            git=fake_git,
            store=repository,
        ),
        http_client=ollama._http_client,
    )
    app.dependency_overrides[get_components] = lambda: components
    yield TestClient(app)
    app.dependency_overrides.clear()


def test_root(client):
    response = client.get("/")
    assert response.status_code == 200
    assert response.json()["status"] == "ok"


@pytest.mark.parametrize("healthy, status", [(True, "ok"), (False, "degraded")])
def test_health(client, stub, healthy, status):
    stub.healthy = healthy
    assert client.get("/health").json() == {"status": status, "ollama": healthy}


def test_analyze_then_read_back(client, stub, fake_git):
    fake_git.add_commit("c1", [make_change("app.py"), make_change("README.md", language="Markdown",
                                                                  is_source_code=False)])
    stub.replies = [ANALYSIS_JSON, SUGGESTIONS_JSON]

    response = client.post("/analyses/c1")
    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "Completed"
    analysis = body["analysis"]
    assert analysis["language"] == "Python"
    assert analysis["overall_note"] == pytest.approx(8.4)
    assert analysis["rating"]["quality"] == "VeryGood"
    assert [f["path"] for f in analysis["files"]] == ["app.py"]
    assert "content" not in analysis["files"][0]
    assert analysis["suggestions"][0]["file_reference"] == "app.py"

    stored = client.get("/analyses/c1")
    assert stored.status_code == 200
    assert stored.json()["rating"] == analysis["rating"]

    listing = client.get("/analyses").json()
    assert [(a["commit_id"], a["file_count"]) for a in listing] == [("c1", 1)]


def test_analyze_twice_returns_existing(client, stub, fake_git):
    fake_git.add_commit("c1", [make_change("app.py")])
    stub.replies = [ANALYSIS_JSON, SUGGESTIONS_JSON]
    client.post("/analyses/c1")

    response = client.post("/analyses/c1")
    assert response.json()["status"] == "AlreadyExists"
    assert stub.calls == 2


def test_analyze_unknown_commit(client):
    response = client.post("/analyses/missing")
    assert response.status_code == 404


def test_skipped_commit_is_not_saved(client, fake_git):
    fake_git.add_commit("c1", [make_change("README.md", language="Markdown", is_source_code=False)])

    body = client.post("/analyses/c1").json()
    assert body == {"commit_id": "c1", "status": "Skipped", "analysis": None}
    assert client.get("/analyses/c1").status_code == 404


def test_model_failure_returns_502_and_saves_nothing(client, stub, fake_git):
    fake_git.add_commit("c1", [make_change("app.py")])
    stub.replies = [httpx.ConnectError("connection refused")]

    assert client.post("/analyses/c1").status_code == 502
    assert client.get("/analyses/c1").status_code == 404


def test_get_missing_analysis(client):
    assert client.get("/analyses/nope").status_code == 404


def test_list_limit_is_validated(client):
    assert client.get("/analyses", params={"limit": 0}).status_code == 422
