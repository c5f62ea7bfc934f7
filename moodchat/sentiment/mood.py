"""Mood labels derived from a numeric sentiment score."""

from enum import Enum


class Mood(str, Enum):
    """Advisory mood attached to delivered messages."""
    HAPPY = "happy"
    SAD = "sad"
    ANGRY = "angry"
    NEUTRAL = "neutral"


HAPPY_ABOVE = 2
SAD_BELOW = -2


def mood_for_score(score: float) -> Mood:
    """Map a classifier score to a mood.

    Thresholds are part of the client contract: > 2 happy, < -2 sad,
    < 0 angry, otherwise neutral.
    """
    if score > HAPPY_ABOVE:
        return Mood.HAPPY
    if score < SAD_BELOW:
        return Mood.SAD
    if score < 0:
        return Mood.ANGRY
    return Mood.NEUTRAL
