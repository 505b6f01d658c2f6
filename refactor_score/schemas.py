"""
RefactorScore API Schema Definitions

Pydantic models describing what the API returns for a commit analysis.
Builders convert the domain aggregate into these response shapes.
"""

from datetime import datetime

from pydantic import BaseModel, Field

from .pipeline.entities import CommitAnalysis, CommitFile
from .pipeline.rating import CleanCodeRating, RatingQuality
from .pipeline.suggestions import Suggestion


# =============================================================================
# RATING
# =============================================================================

class RatingResponse(BaseModel):
    """Clean-code rating with its derived note and quality tier"""
    variable_naming: int = Field(..., ge=1, le=10)
    function_sizes: int = Field(..., ge=1, le=10)
    no_needs_comments: int = Field(..., ge=1, le=10)
    method_cohesion: int = Field(..., ge=1, le=10)
    dead_code: int = Field(..., ge=1, le=10)
    note: float = Field(..., ge=1, le=10, description="Mean of the five criterion scores")
    quality: RatingQuality = Field(..., description="Tier derived from the note")
    justifications: dict[str, str] = Field(default_factory=dict, description="Criterion -> justification text")


def build_rating_response(rating: CleanCodeRating | None) -> RatingResponse | None:
    if rating is None:
        return None
    return RatingResponse(
        **rating.model_dump(exclude={"justifications"}),
        note=rating.note,
        quality=rating.quality,
        justifications=rating.justifications,
    )


# =============================================================================
# FILES
# =============================================================================

class CommitFileResponse(BaseModel):
    """A file of the commit with its analysis, if any"""
    path: str
    language: str
    added_lines: int = Field(..., ge=0)
    removed_lines: int = Field(..., ge=0)
    has_analysis: bool
    rating: RatingResponse | None = None
    suggestions: list[Suggestion] = Field(default_factory=list)


def build_file_response(commit_file: CommitFile) -> CommitFileResponse:
    return CommitFileResponse(
        path=commit_file.path,
        language=commit_file.language,
        added_lines=commit_file.added_lines,
        removed_lines=commit_file.removed_lines,
        has_analysis=commit_file.has_analysis,
        rating=build_rating_response(commit_file.rating),
        suggestions=commit_file.suggestions,
    )


# =============================================================================
# COMMIT ANALYSIS
# =============================================================================

class CommitAnalysisSummary(BaseModel):
    """Listing entry for a stored analysis"""
    commit_id: str
    author: str
    commit_date: datetime
    analysis_date: datetime
    language: str
    overall_note: float
    quality: RatingQuality | None = None
    file_count: int = Field(..., ge=0)


class CommitAnalysisResponse(BaseModel):
    """Full commit analysis, as returned by GET/POST /analyses/{commit_id}"""
    commit_id: str
    author: str
    email: str
    commit_date: datetime
    analysis_date: datetime
    language: str
    added_lines: int = Field(..., ge=0)
    removed_lines: int = Field(..., ge=0)
    overall_note: float = Field(..., description="Commit rating note, 0.0 when nothing was analyzed")
    rating: RatingResponse | None = None
    files: list[CommitFileResponse] = Field(default_factory=list)
    suggestions: list[Suggestion] = Field(default_factory=list)


def build_commit_analysis_response(analysis: CommitAnalysis) -> CommitAnalysisResponse:
    return CommitAnalysisResponse(
        commit_id=analysis.commit_id,
        author=analysis.author,
        email=analysis.email,
        commit_date=analysis.commit_date,
        analysis_date=analysis.analysis_date,
        language=analysis.language,
        added_lines=analysis.added_lines,
        removed_lines=analysis.removed_lines,
        overall_note=analysis.overall_note,
        rating=build_rating_response(analysis.rating),
        files=[build_file_response(f) for f in analysis.files],
        suggestions=analysis.suggestions,
    )


class AnalyzeCommitResponse(BaseModel):
    """Result of POST /analyses/{commit_id}"""
    commit_id: str
    status: str = Field(..., description="Completed, Skipped or AlreadyExists")
    analysis: CommitAnalysisResponse | None = None


def build_summary(analysis: CommitAnalysis) -> CommitAnalysisSummary:
    rating = analysis.rating
    return CommitAnalysisSummary(
        commit_id=analysis.commit_id,
        author=analysis.author,
        commit_date=analysis.commit_date,
        analysis_date=analysis.analysis_date,
        language=analysis.language,
        overall_note=analysis.overall_note,
        quality=rating.quality if rating else None,
        file_count=len(analysis.files),
    )
