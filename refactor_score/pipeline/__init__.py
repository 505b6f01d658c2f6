"""
Commit analysis pipeline.

Leaf to root:
- scoring / extraction / parsing: turn raw model text into validated values
- repair: ask the model to fix its own malformed JSON, bounded
- llm_client: prompt building and the two model operations
- orchestrator: per-commit fan-out under a concurrency limit

Only the value types are re-exported here; import llm_client and
orchestrator from their modules.
"""

from .entities import (
    AnalysisStatus,
    CommitAnalysis,
    CommitData,
    CommitFile,
    FileChange,
    FileChangeType,
    UNKNOWN_LANGUAGE,
)
from .errors import (
    CommitNotFoundError,
    DomainError,
    LLMError,
    LLMProtocolError,
    LLMTimeoutError,
    LLMTransportError,
    RefactorScoreError,
)
from .rating import CleanCodeRating, CriterionScores, RatingQuality, aggregate_ratings
from .suggestions import Difficulty, LLMSuggestion, Priority, Suggestion, SuggestionCategory

__all__ = [
    "AnalysisStatus",
    "CommitAnalysis",
    "CommitData",
    "CommitFile",
    "FileChange",
    "FileChangeType",
    "UNKNOWN_LANGUAGE",
    "CommitNotFoundError",
    "DomainError",
    "LLMError",
    "LLMProtocolError",
    "LLMTimeoutError",
    "LLMTransportError",
    "RefactorScoreError",
    "CleanCodeRating",
    "CriterionScores",
    "RatingQuality",
    "aggregate_ratings",
    "Difficulty",
    "LLMSuggestion",
    "Priority",
    "Suggestion",
    "SuggestionCategory",
]
