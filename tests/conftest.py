"""Shared fixtures and in-memory collaborators for RefactorScore tests."""

import json
from datetime import datetime, timedelta, timezone

import httpx
import pytest

from refactor_score.database import create_session_factory
from refactor_score.pipeline.entities import CommitData, FileChange, FileChangeType
from refactor_score.pipeline.rating import CleanCodeRating
from refactor_score.services.ollama import OllamaClient
from refactor_score.services.storage import CommitAnalysisRepository
from refactor_score.settings import OllamaSettings

COMMIT_DATE = datetime(2024, 3, 1, 12, 0, tzinfo=timezone.utc)

ANALYSIS_JSON = json.dumps({
    "variableScore": 8,
    "functionScore": 7,
    "commentScore": 9,
    "cohesionScore": 8,
    "deadCodeScore": 10,
    "justifications": {
        "VariableNaming": "Clear names",
        "FunctionSizes": "Mostly short functions",
        "NoNeedsComments": "Self-explanatory",
        "MethodCohesion": "Focused class",
        "DeadCode": "No unused code",
    },
})

SUGGESTIONS_JSON = json.dumps([
    {
        "title": "Split long function",
        "description": "Extract the validation block into its own function",
        "priority": "High",
        "type": "Structure",
        "difficulty": "Medium",
        "studyResources": ["Clean Code - Chapter 3: Functions"],
    },
])


def make_rating(score: int, **justifications) -> CleanCodeRating:
    return CleanCodeRating(
        variable_naming=score,
        function_sizes=score,
        no_needs_comments=score,
        method_cohesion=score,
        dead_code=score,
        justifications=justifications,
    )


def make_change(
    path: str,
    language: str = "Python",
    content: str = "def f():\n    return 1\n",
    change_type: FileChangeType = FileChangeType.MODIFIED,
    is_source_code: bool = True,
    added_lines: int = 10,
    removed_lines: int = 2,
) -> FileChange:
    return FileChange(
        path=path,
        language=language,
        added_lines=added_lines,
        removed_lines=removed_lines,
        content=content,
        change_type=change_type,
        is_source_code=is_source_code,
    )


# =============================================================================
# MODEL ENDPOINT
# =============================================================================

class OllamaStub:
    """
    Scripted Ollama server for httpx.MockTransport.

    Each queued reply is either the model text to put in the `response`
    field, an httpx.Response returned as is, or an exception raised from the
    transport. Requests to /api/tags answer 200 unless `healthy` is False.
    """

    def __init__(self, replies=(), healthy: bool = True):
        self.replies = list(replies)
        self.healthy = healthy
        self.prompts: list[str] = []
        self.payloads: list[dict] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        if request.url.path == "/api/tags":
            return httpx.Response(200 if self.healthy else 503, json={"models": []})

        payload = json.loads(request.content)
        self.payloads.append(payload)
        self.prompts.append(payload["prompt"])

        if not self.replies:
            raise AssertionError(f"Unexpected model call #{len(self.prompts)}")
        reply = self.replies.pop(0)
        if isinstance(reply, Exception):
            raise reply
        if isinstance(reply, httpx.Response):
            return reply
        return httpx.Response(200, json={"model": payload["model"], "response": reply, "done": True})

    @property
    def calls(self) -> int:
        return len(self.prompts)


@pytest.fixture
def ollama_settings() -> OllamaSettings:
    return OllamaSettings(
        base_url="http://ollama.test",
        model="test-model",
        analysis_timeout_seconds=5,
        suggestions_timeout_seconds=5,
        health_timeout_seconds=1,
        max_json_fix_retries=2,
        suggestion_attempts=3,
    )


@pytest.fixture
def make_ollama(ollama_settings):
    """Factory: OllamaClient backed by an OllamaStub."""
    def _make(stub: OllamaStub, settings: OllamaSettings | None = None) -> OllamaClient:
        http_client = httpx.AsyncClient(transport=httpx.MockTransport(stub))
        return OllamaClient(settings or ollama_settings, http_client=http_client)
    return _make


# =============================================================================
# COLLABORATORS
# =============================================================================

class FakeGit:
    """In-memory git collaborator."""

    def __init__(self):
        self.commits: dict[str, CommitData] = {}
        self.changes: dict[str, list[FileChange]] = {}

    def add_commit(self, commit_id: str, changes: list[FileChange], author: str = "Ada", date: datetime = COMMIT_DATE):
        self.commits[commit_id] = CommitData(id=commit_id, author=author, email=f"{author.lower()}@example.com", date=date)
        self.changes[commit_id] = changes

    def get_commit_by_id(self, commit_id):
        return self.commits.get(commit_id)

    def get_commit_changes(self, commit_id):
        return list(self.changes.get(commit_id, []))

    def get_commits_by_period(self, since, until):
        return [c for c in self.commits.values() if since <= c.date <= until]


class InMemoryStore:
    def __init__(self):
        self.saved = {}

    def get_by_commit_id(self, commit_id):
        return self.saved.get(commit_id)

    def add(self, analysis):
        self.saved[analysis.commit_id] = analysis


@pytest.fixture
def fake_git() -> FakeGit:
    return FakeGit()


@pytest.fixture
def store() -> InMemoryStore:
    return InMemoryStore()


@pytest.fixture
def repository() -> CommitAnalysisRepository:
    return CommitAnalysisRepository(create_session_factory("sqlite://"))


@pytest.fixture
def recent_date() -> datetime:
    return datetime.now(timezone.utc) - timedelta(days=1)
