"""
Structured parsing of model output.

Two response schemas exist: the per-file analysis (a JSON object with five
scores and justifications) and the suggestion list (a JSON array). Parsing
only fails on broken JSON syntax or a root value of the wrong shape; missing
or unexpected fields fall back to defaults.

Each schema is described once by a ResponseSchema instance that bundles its
extraction, parsing, repair prompt and fallback payload. The self-repair loop
works against that description only.
"""

import json
import logging
import re
from dataclasses import dataclass
from typing import Any, Callable

from .errors import ResponseParseError
from .extraction import EMPTY_ARRAY, EMPTY_OBJECT, find_array_span, find_json_span
from .prompts import build_analysis_repair_prompt, build_suggestions_repair_prompt
from .rating import (
    CRITERIA,
    DEAD_CODE,
    FUNCTION_SIZES,
    METHOD_COHESION,
    MISSING_JUSTIFICATION,
    NO_NEEDS_COMMENTS,
    VARIABLE_NAMING,
    CleanCodeRating,
)
from .scoring import NEUTRAL_SCORE, clamp_score
from .suggestions import (
    DEFAULT_SUGGESTIONS,
    LLMSuggestion,
    default_study_resources,
    normalize_category,
    normalize_difficulty,
    normalize_priority,
)

logger = logging.getLogger(__name__)


# =============================================================================
# CONFIGURATION
# =============================================================================

MAX_SUGGESTIONS = 5

UNAVAILABLE_JUSTIFICATION = "Analysis not available"

# JSON key of each score -> rating field
SCORE_FIELDS = {
    "variableScore": "variable_naming",
    "functionScore": "function_sizes",
    "commentScore": "no_needs_comments",
    "cohesionScore": "method_cohesion",
    "deadCodeScore": "dead_code",
}

# Lowercased justification keys the model uses -> canonical criterion
JUSTIFICATION_ALIASES = {
    "variablenaming": VARIABLE_NAMING,
    "variable": VARIABLE_NAMING,
    "variables": VARIABLE_NAMING,
    "functionsizes": FUNCTION_SIZES,
    "function": FUNCTION_SIZES,
    "functions": FUNCTION_SIZES,
    "noneedscomments": NO_NEEDS_COMMENTS,
    "comment": NO_NEEDS_COMMENTS,
    "comments": NO_NEEDS_COMMENTS,
    "methodcohesion": METHOD_COHESION,
    "cohesion": METHOD_COHESION,
    "deadcode": DEAD_CODE,
}

TRAILING_COMMA = re.compile(r",\s*([}\]])")


# =============================================================================
# SHARED HELPERS
# =============================================================================

def _loads(text: str) -> Any:
    """json.loads, retried once with trailing commas removed."""
    try:
        return json.loads(text)
    except json.JSONDecodeError:
        pass
    except TypeError as e:
        raise ResponseParseError(f"Invalid JSON: {e}") from e

    try:
        return json.loads(TRAILING_COMMA.sub(r"\1", text))
    except json.JSONDecodeError as e:
        raise ResponseParseError(f"Invalid JSON: {e}") from e


def _lowercase_keys(obj: dict) -> dict:
    """Case-insensitive view of a JSON object; the first spelling of a key wins."""
    lowered: dict[str, Any] = {}
    for key, value in obj.items():
        lowered.setdefault(str(key).lower(), value)
    return lowered


def _as_int(value: Any) -> int | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    if isinstance(value, str):
        try:
            return int(value.strip())
        except ValueError:
            return None
    return None


def _as_text(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, str):
        return value.strip()
    return str(value).strip()


# =============================================================================
# ANALYSIS SCHEMA
# =============================================================================

def parse_analysis(text: str) -> CleanCodeRating:
    """
    Parse an analysis object into a rating.

    Missing or non-integer scores default to the neutral value, present scores
    are clamped, and all five justification keys are always filled.

    Raises:
        ResponseParseError: malformed JSON or a root value that is not an object
    """
    root = _loads(text)
    if not isinstance(root, dict):
        raise ResponseParseError(f"Expected a JSON object, got {type(root).__name__}")

    fields = _lowercase_keys(root)

    # Some models nest the scores under "score"
    nested = fields.get("score")
    if isinstance(nested, dict):
        logger.debug("Found nested 'score' object")
        fields = _lowercase_keys(nested)

    scores: dict[str, int] = {}
    for json_key, field_name in SCORE_FIELDS.items():
        value = _as_int(fields.get(json_key.lower()))
        if value is None:
            logger.warning(f"Missing or invalid '{json_key}' in analysis JSON. Using default.")
            scores[field_name] = NEUTRAL_SCORE
        else:
            scores[field_name] = clamp_score(value)

    justifications: dict[str, str] = {}
    raw_justifications = fields.get("justifications")
    if isinstance(raw_justifications, dict):
        for key, value in raw_justifications.items():
            criterion = JUSTIFICATION_ALIASES.get(str(key).replace("_", "").replace(" ", "").lower())
            if criterion is None:
                logger.debug(f"Ignoring unknown justification key '{key}'")
                continue
            justifications.setdefault(criterion, _as_text(value) or MISSING_JUSTIFICATION)

    for criterion in CRITERIA:
        if criterion not in justifications:
            logger.warning(f"Missing justification '{criterion}' in analysis JSON. Filled with default.")
            justifications[criterion] = MISSING_JUSTIFICATION

    rating = CleanCodeRating(**scores, justifications=justifications)
    logger.info(
        f"Parsed analysis: Variable={rating.variable_naming}, Function={rating.function_sizes}, "
        f"Comment={rating.no_needs_comments}, Cohesion={rating.method_cohesion}, DeadCode={rating.dead_code}"
    )
    return rating


def default_analysis() -> CleanCodeRating:
    """Neutral rating used when the model never yields a parseable analysis."""
    return CleanCodeRating(
        variable_naming=NEUTRAL_SCORE,
        function_sizes=NEUTRAL_SCORE,
        no_needs_comments=NEUTRAL_SCORE,
        method_cohesion=NEUTRAL_SCORE,
        dead_code=NEUTRAL_SCORE,
        justifications={criterion: UNAVAILABLE_JUSTIFICATION for criterion in CRITERIA},
    )


# =============================================================================
# SUGGESTION-LIST SCHEMA
# =============================================================================

def _parse_suggestion(item: Any) -> LLMSuggestion | None:
    if not isinstance(item, dict):
        logger.debug(f"Skipping non-object suggestion entry: {item!r}")
        return None

    fields = _lowercase_keys(item)
    title = _as_text(fields.get("title"))
    description = _as_text(fields.get("description"))
    if not title or not description:
        logger.debug("Skipping suggestion without title or description")
        return None

    category = normalize_category(fields.get("type", fields.get("category")))

    raw_resources = fields.get("studyresources", fields.get("study_resources"))
    if isinstance(raw_resources, str):
        raw_resources = [raw_resources]
    resources: list[str] = []
    if isinstance(raw_resources, list):
        resources = [_as_text(r) for r in raw_resources if _as_text(r)]
    if not resources:
        resources = default_study_resources(category)

    return LLMSuggestion(
        title=title,
        description=description,
        priority=normalize_priority(fields.get("priority")),
        category=category,
        difficulty=normalize_difficulty(fields.get("difficulty", fields.get("difficult"))),
        study_resources=resources,
    )


def parse_suggestions(text: str) -> list[LLMSuggestion]:
    """
    Parse a suggestion array.

    Entries without a title or description are dropped and at most
    MAX_SUGGESTIONS are kept, in order. An empty array is a valid result.

    Raises:
        ResponseParseError: malformed JSON or a root value that is not an array
    """
    root = _loads(text)
    if not isinstance(root, list):
        raise ResponseParseError(f"Expected a JSON array, got {type(root).__name__}")

    if not root:
        logger.info("Parsed empty suggestions list")
        return []

    suggestions = [s for s in (_parse_suggestion(item) for item in root) if s is not None]
    suggestions = suggestions[:MAX_SUGGESTIONS]
    logger.info(f"Parsed {len(suggestions)} suggestions")
    return suggestions


def default_suggestions() -> list[LLMSuggestion]:
    return list(DEFAULT_SUGGESTIONS)


# =============================================================================
# SCHEMA DEFINITIONS
# =============================================================================

@dataclass(frozen=True)
class ResponseSchema:
    """Everything the self-repair loop needs to know about one response shape."""
    name: str
    empty: str
    find_span: Callable[[str], str | None]
    parse: Callable[[str], Any]
    default: Callable[[], Any]
    repair_prompt: Callable[[str], str]

    def extract(self, text: str) -> str:
        span = self.find_span(text)
        if span is None:
            logger.warning(f"No JSON found in {self.name} response")
            return self.empty
        return span


ANALYSIS_SCHEMA = ResponseSchema(
    name="analysis",
    empty=EMPTY_OBJECT,
    find_span=lambda text: find_json_span(text, "{", "}"),
    parse=parse_analysis,
    default=default_analysis,
    repair_prompt=build_analysis_repair_prompt,
)

SUGGESTIONS_SCHEMA = ResponseSchema(
    name="suggestions",
    empty=EMPTY_ARRAY,
    find_span=find_array_span,
    parse=parse_suggestions,
    default=default_suggestions,
    repair_prompt=build_suggestions_repair_prompt,
)
