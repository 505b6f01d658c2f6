"""
Clean-code rating value objects.

A rating holds five 1-10 criterion scores plus a justification per
criterion. Its note is the plain mean of the five scores and its quality
tier is picked from fixed thresholds over that note.
"""

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, field_validator


# =============================================================================
# CRITERIA
# =============================================================================

VARIABLE_NAMING = "VariableNaming"
FUNCTION_SIZES = "FunctionSizes"
NO_NEEDS_COMMENTS = "NoNeedsComments"
METHOD_COHESION = "MethodCohesion"
DEAD_CODE = "DeadCode"

CRITERIA = (VARIABLE_NAMING, FUNCTION_SIZES, NO_NEEDS_COMMENTS, METHOD_COHESION, DEAD_CODE)

MISSING_JUSTIFICATION = "Justification not provided"


class RatingQuality(str, Enum):
    """Quality tier derived from a rating note"""
    EXCELLENT = "Excellent"
    VERY_GOOD = "VeryGood"
    GOOD = "Good"
    ACCEPTABLE = "Acceptable"
    NEEDS_IMPROVEMENT = "NeedsImprovement"
    PROBLEMATIC = "Problematic"


# Lower bound (inclusive) of each tier, best first
QUALITY_THRESHOLDS = (
    (9.0, RatingQuality.EXCELLENT),
    (7.5, RatingQuality.VERY_GOOD),
    (6.0, RatingQuality.GOOD),
    (5.0, RatingQuality.ACCEPTABLE),
    (3.5, RatingQuality.NEEDS_IMPROVEMENT),
)


def quality_for_note(note: float) -> RatingQuality:
    for threshold, quality in QUALITY_THRESHOLDS:
        if note >= threshold:
            return quality
    return RatingQuality.PROBLEMATIC


# =============================================================================
# VALUE OBJECTS
# =============================================================================

class CriterionScores(BaseModel):
    """Five clean-code criterion scores, each an integer in [1, 10]"""
    model_config = ConfigDict(frozen=True)

    variable_naming: int = Field(..., ge=1, le=10, description="Meaningful variable names")
    function_sizes: int = Field(..., ge=1, le=10, description="Small, focused functions")
    no_needs_comments: int = Field(..., ge=1, le=10, description="Code explains itself without comments")
    method_cohesion: int = Field(..., ge=1, le=10, description="Methods belong together")
    dead_code: int = Field(..., ge=1, le=10, description="Absence of unused code")

    def by_criterion(self) -> dict[str, int]:
        return {
            VARIABLE_NAMING: self.variable_naming,
            FUNCTION_SIZES: self.function_sizes,
            NO_NEEDS_COMMENTS: self.no_needs_comments,
            METHOD_COHESION: self.method_cohesion,
            DEAD_CODE: self.dead_code,
        }


class CleanCodeRating(CriterionScores):
    """
    Immutable clean-code rating.

    Equality is structural and includes the justification texts. Criteria
    without a justification get a placeholder so all five keys are present.
    """
    justifications: dict[str, str] = Field(default_factory=dict, validate_default=True)

    @field_validator("justifications")
    @classmethod
    def _fill_missing_justifications(cls, value: dict[str, str]) -> dict[str, str]:
        filled = dict(value)
        for criterion in CRITERIA:
            filled.setdefault(criterion, MISSING_JUSTIFICATION)
        return filled

    @property
    def note(self) -> float:
        return sum(self.by_criterion().values()) / len(CRITERIA)

    @property
    def quality(self) -> RatingQuality:
        return quality_for_note(self.note)

    @property
    def lowest_criteria(self) -> list[str]:
        """Criteria sharing the lowest score, in canonical order."""
        scores = self.by_criterion()
        lowest = min(scores.values())
        return [name for name, score in scores.items() if score == lowest]

    @classmethod
    def from_scores(cls, scores: CriterionScores, justifications: dict[str, str] | None = None) -> "CleanCodeRating":
        return cls(
            variable_naming=scores.variable_naming,
            function_sizes=scores.function_sizes,
            no_needs_comments=scores.no_needs_comments,
            method_cohesion=scores.method_cohesion,
            dead_code=scores.dead_code,
            justifications=justifications or {},
        )


# =============================================================================
# AGGREGATION
# =============================================================================

def aggregate_ratings(ratings: list[CleanCodeRating]) -> CleanCodeRating | None:
    """
    Combine per-file ratings into one commit-level rating.

    Each criterion is the integer-truncated mean over the given ratings.
    Justifications are merged by criterion, the first rating's text winning.
    Returns None when there is nothing to aggregate.
    """
    if not ratings:
        return None

    count = len(ratings)

    def mean(attribute: str) -> int:
        return int(sum(getattr(rating, attribute) for rating in ratings) / count)

    merged: dict[str, str] = {}
    for rating in ratings:
        for criterion, text in rating.justifications.items():
            merged.setdefault(criterion, text)

    return CleanCodeRating(
        variable_naming=mean("variable_naming"),
        function_sizes=mean("function_sizes"),
        no_needs_comments=mean("no_needs_comments"),
        method_cohesion=mean("method_cohesion"),
        dead_code=mean("dead_code"),
        justifications=merged,
    )
