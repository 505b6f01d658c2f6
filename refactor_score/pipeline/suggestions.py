"""
Improvement suggestions produced by the model.

The model's free-text priority / difficulty / category values are mapped onto
fixed enums here, in one place, so the rest of the pipeline only ever sees
normalized values.
"""

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


# =============================================================================
# ENUMS
# =============================================================================

class Priority(str, Enum):
    LOW = "Low"
    MEDIUM = "Medium"
    HIGH = "High"


class Difficulty(str, Enum):
    EASY = "Easy"
    MEDIUM = "Medium"
    HARD = "Hard"


class SuggestionCategory(str, Enum):
    """What area of the code a suggestion targets"""
    CODE_STYLE = "CodeStyle"
    STRUCTURE = "Structure"
    DOCUMENTATION = "Documentation"
    COHESION = "Cohesion"
    DEAD_CODE = "DeadCode"
    ERROR_HANDLING = "ErrorHandling"
    TESTING = "Testing"
    PERFORMANCE = "Performance"


DEFAULT_PRIORITY = Priority.MEDIUM
DEFAULT_DIFFICULTY = Difficulty.MEDIUM
DEFAULT_CATEGORY = SuggestionCategory.CODE_STYLE

# Extra spellings seen in model output, lowercased and stripped of separators
PRIORITY_ALIASES = {
    "baixa": Priority.LOW,
    "minor": Priority.LOW,
    "media": Priority.MEDIUM,
    "média": Priority.MEDIUM,
    "normal": Priority.MEDIUM,
    "alta": Priority.HIGH,
    "critical": Priority.HIGH,
    "major": Priority.HIGH,
}

DIFFICULTY_ALIASES = {
    "facil": Difficulty.EASY,
    "fácil": Difficulty.EASY,
    "simple": Difficulty.EASY,
    "media": Difficulty.MEDIUM,
    "média": Difficulty.MEDIUM,
    "moderate": Difficulty.MEDIUM,
    "dificil": Difficulty.HARD,
    "difícil": Difficulty.HARD,
    "complex": Difficulty.HARD,
}

CATEGORY_ALIASES = {
    "style": SuggestionCategory.CODE_STYLE,
    "naming": SuggestionCategory.CODE_STYLE,
    "variablenaming": SuggestionCategory.CODE_STYLE,
    "readability": SuggestionCategory.CODE_STYLE,
    "refactoring": SuggestionCategory.STRUCTURE,
    "functions": SuggestionCategory.STRUCTURE,
    "functionsizes": SuggestionCategory.STRUCTURE,
    "design": SuggestionCategory.STRUCTURE,
    "comments": SuggestionCategory.DOCUMENTATION,
    "noneedscomments": SuggestionCategory.DOCUMENTATION,
    "methodcohesion": SuggestionCategory.COHESION,
    "unusedcode": SuggestionCategory.DEAD_CODE,
    "errors": SuggestionCategory.ERROR_HANDLING,
    "exceptions": SuggestionCategory.ERROR_HANDLING,
    "tests": SuggestionCategory.TESTING,
    "unittests": SuggestionCategory.TESTING,
}

# Clean Code chapters recommended when the model gives no study resources
STUDY_RESOURCES = {
    SuggestionCategory.CODE_STYLE: ["Clean Code - Chapter 2: Meaningful Names", "Clean Code - Chapter 5: Formatting"],
    SuggestionCategory.STRUCTURE: ["Clean Code - Chapter 3: Functions", "Clean Code - Chapter 10: Classes"],
    SuggestionCategory.DOCUMENTATION: ["Clean Code - Chapter 4: Comments"],
    SuggestionCategory.COHESION: ["Clean Code - Chapter 10: Classes", "Clean Code - Chapter 6: Objects and Data Structures"],
    SuggestionCategory.DEAD_CODE: ["Clean Code - Chapter 17: Smells and Heuristics"],
    SuggestionCategory.ERROR_HANDLING: ["Clean Code - Chapter 7: Error Handling"],
    SuggestionCategory.TESTING: ["Clean Code - Chapter 9: Unit Tests"],
    SuggestionCategory.PERFORMANCE: ["Clean Code - Chapter 17: Smells and Heuristics"],
}


# =============================================================================
# NORMALIZATION
# =============================================================================

def _key(value) -> str:
    if not isinstance(value, str):
        return ""
    return value.strip().lower().replace(" ", "").replace("_", "").replace("-", "")


def _normalize(value, enum_type, aliases: dict, default):
    key = _key(value)
    if not key:
        return default
    for member in enum_type:
        if key == member.value.lower():
            return member
    return aliases.get(key, default)


def normalize_priority(value) -> Priority:
    return _normalize(value, Priority, PRIORITY_ALIASES, DEFAULT_PRIORITY)


def normalize_difficulty(value) -> Difficulty:
    return _normalize(value, Difficulty, DIFFICULTY_ALIASES, DEFAULT_DIFFICULTY)


def normalize_category(value) -> SuggestionCategory:
    return _normalize(value, SuggestionCategory, CATEGORY_ALIASES, DEFAULT_CATEGORY)


def default_study_resources(category: SuggestionCategory) -> list[str]:
    return list(STUDY_RESOURCES.get(category, STUDY_RESOURCES[DEFAULT_CATEGORY]))


# =============================================================================
# MODELS
# =============================================================================

class LLMSuggestion(BaseModel):
    """A suggestion as parsed from model output, not yet bound to a file"""
    model_config = ConfigDict(frozen=True)

    title: str = Field(..., min_length=1)
    description: str = Field(..., min_length=1)
    priority: Priority = DEFAULT_PRIORITY
    category: SuggestionCategory = DEFAULT_CATEGORY
    difficulty: Difficulty = DEFAULT_DIFFICULTY
    study_resources: list[str] = Field(default_factory=list)

    def for_file(self, file_path: str, timestamp: datetime) -> "Suggestion":
        return Suggestion(
            title=self.title,
            description=self.description,
            priority=self.priority,
            category=self.category,
            difficulty=self.difficulty,
            file_reference=file_path,
            last_update=timestamp,
            study_resources=list(self.study_resources),
        )


class Suggestion(BaseModel):
    """Immutable improvement suggestion attached to one file of a commit"""
    model_config = ConfigDict(frozen=True)

    title: str
    description: str
    priority: Priority
    category: SuggestionCategory
    difficulty: Difficulty
    file_reference: str = Field(..., description="Path of the file the suggestion is about")
    last_update: datetime
    study_resources: list[str] = Field(default_factory=list)


# Returned when the model never produces a parseable suggestion list
DEFAULT_SUGGESTIONS = (
    LLMSuggestion(
        title="Review variable naming",
        description="Check that variable names are descriptive and follow the project's conventions",
        priority=Priority.MEDIUM,
        category=SuggestionCategory.CODE_STYLE,
        difficulty=Difficulty.EASY,
        study_resources=["Clean Code - Chapter 2: Meaningful Names"],
    ),
    LLMSuggestion(
        title="Review function sizes",
        description="Check that functions are small and focused on a single responsibility",
        priority=Priority.MEDIUM,
        category=SuggestionCategory.STRUCTURE,
        difficulty=Difficulty.MEDIUM,
        study_resources=["Clean Code - Chapter 3: Functions"],
    ),
    LLMSuggestion(
        title="Review the need for comments",
        description="Check whether the code explains itself or whether comments are compensating for unclear code",
        priority=Priority.LOW,
        category=SuggestionCategory.DOCUMENTATION,
        difficulty=Difficulty.EASY,
        study_resources=["Clean Code - Chapter 4: Comments"],
    ),
)
