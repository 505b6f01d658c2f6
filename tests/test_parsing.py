"""Tests for analysis and suggestion parsing."""

import json

import pytest

from refactor_score.pipeline.errors import ResponseParseError
from refactor_score.pipeline.parsing import (
    MAX_SUGGESTIONS,
    UNAVAILABLE_JUSTIFICATION,
    default_analysis,
    default_suggestions,
    parse_analysis,
    parse_suggestions,
)
from refactor_score.pipeline.rating import CRITERIA, MISSING_JUSTIFICATION
from refactor_score.pipeline.suggestions import (
    STUDY_RESOURCES,
    Difficulty,
    Priority,
    SuggestionCategory,
)

from conftest import ANALYSIS_JSON, SUGGESTIONS_JSON


# =============================================================================
# ANALYSIS
# =============================================================================

class TestParseAnalysis:
    def test_well_formed(self):
        rating = parse_analysis(ANALYSIS_JSON)
        assert (rating.variable_naming, rating.function_sizes, rating.no_needs_comments,
                rating.method_cohesion, rating.dead_code) == (8, 7, 9, 8, 10)
        assert rating.justifications["VariableNaming"] == "Clear names"
        assert rating.note == pytest.approx(8.4)

    def test_commas_inside_strings_are_kept(self):
        text = json.dumps({"variableScore": 6, "justifications": {"VariableNaming": "a, ] b, }"}})
        rating = parse_analysis(text)
        assert rating.justifications["VariableNaming"] == "a, ] b, }"

    def test_missing_scores_default_to_neutral_and_justifications_are_filled(self):
        rating = parse_analysis('{"variableScore": 9}')
        assert rating.variable_naming == 9
        assert rating.function_sizes == 5
        assert rating.dead_code == 5
        assert set(rating.justifications) == set(CRITERIA)
        assert all(text == MISSING_JUSTIFICATION for text in rating.justifications.values())

    def test_out_of_range_scores_are_clamped(self):
        rating = parse_analysis(
            '{"variableScore": 85, "functionScore": -3, "commentScore": 0, '
            '"cohesionScore": 1000, "deadCodeScore": 10}'
        )
        assert rating.variable_naming == 8
        assert rating.function_sizes == 1
        assert rating.no_needs_comments == 1
        assert rating.method_cohesion == 10
        assert rating.dead_code == 10

    def test_permissive_keys_and_values(self):
        text = """{
            "VARIABLESCORE": "7",
            "functionscore": 6.0,
            "commentScore": true,
            "score": null,
            "Justifications": {"variable_naming": "ok", "Dead Code": "none", "Other": "ignored"},
        }"""
        rating = parse_analysis(text)
        assert rating.variable_naming == 7
        assert rating.function_sizes == 6
        assert rating.no_needs_comments == 5
        assert rating.justifications["VariableNaming"] == "ok"
        assert rating.justifications["DeadCode"] == "none"
        assert "Other" not in rating.justifications

    def test_nested_score_object(self):
        rating = parse_analysis('{"score": {"variableScore": 3, "functionScore": 4}}')
        assert rating.variable_naming == 3
        assert rating.function_sizes == 4

    @pytest.mark.parametrize("text", ["", "{not json", '{"a": 1', "[1, 2]", '"text"'])
    def test_invalid_input_raises(self, text):
        with pytest.raises(ResponseParseError):
            parse_analysis(text)

    def test_default_analysis(self):
        rating = default_analysis()
        assert rating.by_criterion() == {criterion: 5 for criterion in CRITERIA}
        assert all(text == UNAVAILABLE_JUSTIFICATION for text in rating.justifications.values())


# =============================================================================
# SUGGESTIONS
# =============================================================================

def _suggestion(i: int, **overrides) -> dict:
    item = {"title": f"Title {i}", "description": f"Description {i}"}
    item.update(overrides)
    return item


class TestParseSuggestions:
    def test_well_formed(self):
        [suggestion] = parse_suggestions(SUGGESTIONS_JSON)
        assert suggestion.title == "Split long function"
        assert suggestion.priority == Priority.HIGH
        assert suggestion.category == SuggestionCategory.STRUCTURE
        assert suggestion.difficulty == Difficulty.MEDIUM
        assert suggestion.study_resources == ["Clean Code - Chapter 3: Functions"]

    def test_empty_array_is_a_valid_result(self):
        assert parse_suggestions("[]") == []

    def test_truncated_to_first_five_in_order(self):
        items = [_suggestion(i) for i in range(8)]
        suggestions = parse_suggestions(json.dumps(items))
        assert len(suggestions) == MAX_SUGGESTIONS
        assert [s.title for s in suggestions] == [f"Title {i}" for i in range(5)]

    def test_unknown_enum_values_use_defaults(self):
        [suggestion] = parse_suggestions(json.dumps([
            _suggestion(1, priority="urgent-ish", type="Weird", difficulty=None),
        ]))
        assert suggestion.priority == Priority.MEDIUM
        assert suggestion.category == SuggestionCategory.CODE_STYLE
        assert suggestion.difficulty == Difficulty.MEDIUM
        assert suggestion.study_resources == STUDY_RESOURCES[SuggestionCategory.CODE_STYLE]

    def test_aliases_and_alternative_keys(self):
        [suggestion] = parse_suggestions(json.dumps([
            _suggestion(1, Priority="alta", category="error_handling", difficult="Fácil",
                        study_resources="Clean Code - Chapter 7: Error Handling"),
        ]))
        assert suggestion.priority == Priority.HIGH
        assert suggestion.category == SuggestionCategory.ERROR_HANDLING
        assert suggestion.difficulty == Difficulty.EASY
        assert suggestion.study_resources == ["Clean Code - Chapter 7: Error Handling"]

    def test_entries_without_title_or_description_are_dropped(self):
        suggestions = parse_suggestions(json.dumps([
            {"title": "", "description": "x"},
            {"title": "only title"},
            "not an object",
            _suggestion(1),
        ]))
        assert [s.title for s in suggestions] == ["Title 1"]

    def test_trailing_commas_are_tolerated(self):
        suggestions = parse_suggestions('[{"title": "a", "description": "b",},]')
        assert len(suggestions) == 1

    @pytest.mark.parametrize("text", ["", "[{", '{"title": "a"}'])
    def test_invalid_input_raises(self, text):
        with pytest.raises(ResponseParseError):
            parse_suggestions(text)

    def test_default_suggestions(self):
        defaults = default_suggestions()
        assert len(defaults) == 3
        assert defaults == default_suggestions()
