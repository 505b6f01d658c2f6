"""
Commit analysis aggregate and its inputs.

FileChange and CommitData come from the git collaborator. CommitAnalysis is
the aggregate root built and mutated by one orchestration run; its file and
suggestion collections are only ever changed through its own methods, which
hold a lock for the duration of the in-memory update.
"""

import threading
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum

from .errors import DomainError
from .rating import CleanCodeRating, aggregate_ratings
from .suggestions import Suggestion

UNKNOWN_LANGUAGE = "Unknown"


# =============================================================================
# INPUTS
# =============================================================================

class FileChangeType(str, Enum):
    ADDED = "Added"
    MODIFIED = "Modified"
    DELETED = "Deleted"
    RENAMED = "Renamed"


@dataclass(frozen=True)
class FileChange:
    """One file touched by a commit, as reported by git"""
    path: str
    language: str
    added_lines: int
    removed_lines: int
    content: str
    change_type: FileChangeType
    is_source_code: bool


@dataclass(frozen=True)
class CommitData:
    """Commit metadata"""
    id: str
    author: str
    email: str
    date: datetime
    message: str = ""


class AnalysisStatus(str, Enum):
    NOT_STARTED = "NotStarted"
    IN_PROGRESS = "InProgress"
    COMPLETED = "Completed"
    SKIPPED = "Skipped"
    ALREADY_EXISTS = "AlreadyExists"


# =============================================================================
# AGGREGATE
# =============================================================================

@dataclass
class CommitFile:
    """A file registered in a commit analysis, analyzed at most once per run"""
    path: str
    language: str
    added_lines: int
    removed_lines: int
    content: str
    rating: CleanCodeRating | None = None
    suggestions: list[Suggestion] = field(default_factory=list)

    @property
    def has_analysis(self) -> bool:
        return self.rating is not None

    def set_analysis(self, rating: CleanCodeRating, suggestions: list[Suggestion]) -> None:
        """Replace rating and suggestions wholesale (last write wins)."""
        self.rating = rating
        self.suggestions = list(suggestions)


def as_utc(value: datetime) -> datetime:
    return value if value.tzinfo is not None else value.replace(tzinfo=timezone.utc)


@dataclass
class CommitAnalysis:
    """
    Aggregate root for the analysis of one commit.

    The commit-level rating is derived on every read from the files that have
    completed analysis; it is None until at least one has.
    """
    commit_id: str
    author: str
    email: str
    commit_date: datetime
    analysis_date: datetime
    language: str
    added_lines: int
    removed_lines: int
    files: list[CommitFile] = field(default_factory=list)
    suggestions: list[Suggestion] = field(default_factory=list)
    _lock: threading.Lock = field(default_factory=threading.Lock, init=False, repr=False, compare=False)

    def __post_init__(self):
        for name in ("commit_id", "author", "language"):
            if not getattr(self, name) or not getattr(self, name).strip():
                raise DomainError(f"{name} must not be empty")
        if self.added_lines < 0 or self.removed_lines < 0:
            raise DomainError("Line counts must not be negative")
        if as_utc(self.analysis_date) < as_utc(self.commit_date):
            raise DomainError("analysis_date cannot be before commit_date")

        seen: set[str] = set()
        for commit_file in self.files:
            if commit_file.path in seen:
                raise DomainError(f"File {commit_file.path} already exists in this analysis")
            seen.add(commit_file.path)

    @property
    def analyzed_files(self) -> list[CommitFile]:
        return [f for f in self.files if f.has_analysis]

    @property
    def rating(self) -> CleanCodeRating | None:
        return aggregate_ratings([f.rating for f in self.analyzed_files])

    @property
    def overall_note(self) -> float:
        rating = self.rating
        return rating.note if rating is not None else 0.0

    def get_file(self, path: str) -> CommitFile | None:
        return next((f for f in self.files if f.path == path), None)

    def add_file(self, commit_file: CommitFile) -> None:
        with self._lock:
            if any(f.path == commit_file.path for f in self.files):
                raise DomainError(f"File {commit_file.path} already exists in this analysis")
            self.files.append(commit_file)

    def add_suggestion(self, suggestion: Suggestion) -> None:
        with self._lock:
            self.suggestions.append(suggestion)

    def complete_file_analysis(self, path: str, rating: CleanCodeRating, suggestions: list[Suggestion]) -> None:
        """
        Record a file's rating and suggestions.

        A second call for the same file replaces that file's earlier
        suggestions in the flattened list instead of appending to them.
        """
        with self._lock:
            commit_file = self.get_file(path)
            if commit_file is None:
                raise DomainError(f"File {path} not found in this analysis")

            previous = commit_file.suggestions
            if previous:
                self.suggestions = [s for s in self.suggestions if not any(s is p for p in previous)]

            commit_file.set_analysis(rating, suggestions)
            self.suggestions.extend(commit_file.suggestions)
