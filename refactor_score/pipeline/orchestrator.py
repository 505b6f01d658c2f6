"""
Commit analysis orchestration.

One run takes a commit id through:
    NotStarted -> InProgress -> Completed
                             -> Skipped (nothing analyzable / language unknown)
    AlreadyExists (a stored analysis is returned unchanged)

Eligible files are analyzed concurrently, at most `max_concurrency` model
calls in flight. A hard model failure on any file aborts the commit after
every file task has finished; nothing is persisted in that case.
"""

import asyncio
import logging
import time
from collections import Counter
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Protocol

from .entities import (
    UNKNOWN_LANGUAGE,
    AnalysisStatus,
    CommitAnalysis,
    CommitData,
    CommitFile,
    FileChange,
    FileChangeType,
)
from .errors import CommitNotFoundError
from .llm_client import LLMAnalysisClient

logger = logging.getLogger(__name__)

DEFAULT_MAX_CONCURRENCY = 2


# =============================================================================
# COLLABORATORS
# =============================================================================

class GitCollaborator(Protocol):
    def get_commit_by_id(self, commit_id: str) -> CommitData | None: ...

    def get_commit_changes(self, commit_id: str) -> list[FileChange]: ...


class AnalysisStore(Protocol):
    def get_by_commit_id(self, commit_id: str) -> CommitAnalysis | None: ...

    def add(self, analysis: CommitAnalysis) -> None: ...


@dataclass
class AnalysisRun:
    """Outcome of one orchestration run"""
    commit_id: str
    status: AnalysisStatus
    analysis: CommitAnalysis | None = None


# =============================================================================
# FILE SELECTION
# =============================================================================

def select_eligible_files(changes: list[FileChange]) -> list[FileChange]:
    """Source files that still exist after the commit and have content."""
    return [
        change for change in changes
        if change.is_source_code
        and change.change_type != FileChangeType.DELETED
        and change.content
        and change.content.strip()
    ]


def determine_language(files: list[FileChange]) -> str:
    """Most frequent language; ties go to the language seen first."""
    languages = [f.language for f in files if f.language and f.language.strip()]
    if not languages:
        logger.warning(f"Could not infer language from {len(files)} eligible file(s). Returning '{UNKNOWN_LANGUAGE}'.")
        return UNKNOWN_LANGUAGE

    # most_common sorts stably, so equal counts keep first-seen order
    return Counter(languages).most_common(1)[0][0]


# =============================================================================
# ORCHESTRATOR
# =============================================================================

class CommitAnalysisOrchestrator:
    def __init__(
        self,
        llm: LLMAnalysisClient,
        git: GitCollaborator,
        store: AnalysisStore,
        max_concurrency: int = DEFAULT_MAX_CONCURRENCY,
    ):
        if max_concurrency < 1:
            raise ValueError("max_concurrency must be >= 1")
        self.llm = llm
        self.git = git
        self.store = store
        self.max_concurrency = max_concurrency
        logger.info(f"CommitAnalysisOrchestrator initialized with max_concurrency={max_concurrency}")

    async def analyze_commit(self, commit_id: str) -> AnalysisRun:
        """
        Analyze one commit end to end.

        Raises:
            CommitNotFoundError: the git collaborator does not know `commit_id`
            DomainError: duplicate file paths in the commit
            LLMError: a file's analysis call failed; the commit is not persisted
        """
        existing = await asyncio.to_thread(self.store.get_by_commit_id, commit_id)
        if existing is not None:
            logger.info(f"Commit analysis already exists for commit {commit_id}")
            return AnalysisRun(commit_id, AnalysisStatus.ALREADY_EXISTS, existing)

        commit = await asyncio.to_thread(self.git.get_commit_by_id, commit_id)
        if commit is None:
            raise CommitNotFoundError(commit_id)

        changes = await asyncio.to_thread(self.git.get_commit_changes, commit_id)
        eligible = select_eligible_files(changes)

        analysis = CommitAnalysis(
            commit_id=commit.id,
            author=commit.author,
            email=commit.email,
            commit_date=commit.date,
            analysis_date=datetime.now(timezone.utc),
            language=determine_language(eligible),
            added_lines=sum(c.added_lines for c in changes),
            removed_lines=sum(c.removed_lines for c in changes),
        )
        for change in eligible:
            analysis.add_file(CommitFile(
                path=change.path,
                language=change.language,
                added_lines=change.added_lines,
                removed_lines=change.removed_lines,
                content=change.content,
            ))

        logger.info(f"Starting parallel analysis of {len(eligible)} files for commit {commit_id}")
        started = time.monotonic()

        semaphore = asyncio.Semaphore(self.max_concurrency)
        results = await asyncio.gather(
            *(self._analyze_file(change, analysis, semaphore) for change in eligible),
            return_exceptions=True,
        )

        failures = [r for r in results if isinstance(r, BaseException)]
        if failures:
            logger.error(
                f"Aborting commit {commit_id}: {len(failures)} of {len(eligible)} file analyses failed, "
                f"nothing will be saved"
            )
            raise failures[0]

        logger.info(f"Completed parallel analysis in {time.monotonic() - started:.1f}s for commit {commit_id}")

        if not analysis.analyzed_files:
            logger.warning(
                f"Skipping commit {commit_id} - no source code files were analyzed. "
                f"Language={analysis.language}, TotalFiles={len(changes)}"
            )
            return AnalysisRun(commit_id, AnalysisStatus.SKIPPED, analysis)

        if analysis.language == UNKNOWN_LANGUAGE:
            logger.warning(
                f"Skipping commit {commit_id} - language could not be determined. "
                f"AnalyzedFiles={len(analysis.analyzed_files)}"
            )
            return AnalysisRun(commit_id, AnalysisStatus.SKIPPED, analysis)

        await asyncio.to_thread(self.store.add, analysis)
        logger.info(
            f"Commit analysis saved for {commit_id}. Files analyzed: {len(analysis.analyzed_files)}, "
            f"Language: {analysis.language}, Note: {analysis.overall_note:.2f}"
        )
        return AnalysisRun(commit_id, AnalysisStatus.COMPLETED, analysis)

    async def _analyze_file(self, change: FileChange, analysis: CommitAnalysis, semaphore: asyncio.Semaphore) -> None:
        async with semaphore:
            logger.info(f"Analyzing file {change.path} for commit {analysis.commit_id}")
            started = time.monotonic()
            try:
                rating = await self.llm.analyze_file(change.content)
                drafts = await self.llm.generate_suggestions(change.content, rating)
            except Exception:
                logger.exception(
                    f"Error analyzing file {change.path} for commit {analysis.commit_id}",
                    extra={"commit_id": analysis.commit_id, "file_path": change.path},
                )
                raise

            now = datetime.now(timezone.utc)
            suggestions = [draft.for_file(change.path, now) for draft in drafts]
            analysis.complete_file_analysis(change.path, rating, suggestions)

            logger.info(f"Completed analysis of {change.path} in {time.monotonic() - started:.1f}s")
