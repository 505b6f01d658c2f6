"""
Object graph for the API and the worker.

Everything is built from one Settings value; nothing is registered globally.
"""

import logging
from dataclasses import dataclass

import httpx

from .database import create_session_factory
from .pipeline.llm_client import LLMAnalysisClient
from .pipeline.orchestrator import CommitAnalysisOrchestrator
from .services.git import GitRepository
from .services.ollama import OllamaClient
from .services.storage import CommitAnalysisRepository
from .settings import Settings

logger = logging.getLogger(__name__)


@dataclass
class Components:
    ollama: OllamaClient
    git: GitRepository
    repository: CommitAnalysisRepository
    orchestrator: CommitAnalysisOrchestrator
    http_client: httpx.AsyncClient

    async def aclose(self) -> None:
        await self.http_client.aclose()


def build_components(settings: Settings, http_client: httpx.AsyncClient | None = None) -> Components:
    http_client = http_client or httpx.AsyncClient()
    ollama = OllamaClient(settings.ollama, http_client=http_client)
    git = GitRepository(settings.worker.repository_path)
    repository = CommitAnalysisRepository(create_session_factory(settings.database_url))
    orchestrator = CommitAnalysisOrchestrator(
        llm=LLMAnalysisClient(ollama, settings.ollama),
        git=git,
        store=repository,
        max_concurrency=settings.max_concurrent_analysis,
    )
    logger.info(
        f"Components ready: model={settings.ollama.model} at {settings.ollama.base_url}, "
        f"repository={settings.worker.repository_path}"
    )
    return Components(
        ollama=ollama,
        git=git,
        repository=repository,
        orchestrator=orchestrator,
        http_client=http_client,
    )
