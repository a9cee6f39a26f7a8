"""
HireBridge - Difficulty Policy.

Maps the score of the last answer to the difficulty of the next question.
"""

from __future__ import annotations

import math

from hirebridge.core.domain.models import MAX_SCORE, MIN_SCORE, Difficulty


EASY_CEILING = 4
MEDIUM_CEILING = 7


def clamp_score(value: float) -> int:
    """Round and clamp any numeric score into [1, 10]."""
    if isinstance(value, float) and math.isnan(value):
        return MIN_SCORE
    return max(MIN_SCORE, min(MAX_SCORE, int(round(value))))


def next_difficulty(last_score: float | None) -> Difficulty:
    """
    Pick the difficulty tier for the next question.

    No prior answer starts easy; 1-4 stays easy, 5-7 is medium, 8-10 is hard.
    A NaN score is treated like no score at all.
    """
    if last_score is None or (isinstance(last_score, float) and math.isnan(last_score)):
        return Difficulty.EASY

    score = clamp_score(last_score)
    if score <= EASY_CEILING:
        return Difficulty.EASY
    if score <= MEDIUM_CEILING:
        return Difficulty.MEDIUM
    return Difficulty.HARD
