"""Score normalization for model-reported criterion scores."""

import logging

logger = logging.getLogger(__name__)

MIN_SCORE = 1
MAX_SCORE = 10

# Neutral value used when the model omits a score
NEUTRAL_SCORE = 5


def clamp_score(score: int) -> int:
    """
    Normalize a raw model score into [1, 10].

    Values above 10 are assumed to be on a 0-100 scale and are integer-divided
    by 10 before the bounds are applied again (85 -> 8, 1000 -> 10).
    """
    if score < MIN_SCORE:
        logger.warning(f"Score {score} is below minimum ({MIN_SCORE}), clamping to {MIN_SCORE}")
        return MIN_SCORE

    if score > MAX_SCORE:
        rescaled = score // 10
        logger.warning(f"Score {score} is above maximum ({MAX_SCORE}), rescaled to {rescaled}")
        return min(max(rescaled, MIN_SCORE), MAX_SCORE)

    return score
