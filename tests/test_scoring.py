"""Tests for score clamping."""

import pytest

from refactor_score.pipeline.scoring import MAX_SCORE, MIN_SCORE, clamp_score


@pytest.mark.parametrize("raw, expected", [
    (-5, 1),
    (0, 1),
    (1, 1),
    (7, 7),
    (10, 10),
    (11, 1),
    (85, 8),
    (100, 10),
    (1000, 10),
])
def test_clamp_score(raw, expected):
    assert clamp_score(raw) == expected


@pytest.mark.parametrize("raw", range(-50, 1200, 7))
def test_clamp_score_is_bounded_and_idempotent(raw):
    once = clamp_score(raw)
    assert MIN_SCORE <= once <= MAX_SCORE
    assert clamp_score(once) == once
