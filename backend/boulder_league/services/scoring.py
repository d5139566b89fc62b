# Boulder League Scoring System
# Points are relative to the climber's working grade at the moment of the send

import math
from fractions import Fraction
from typing import Iterable

from boulder_league.schemas import Ascent

BASE_POINTS = 100
POINTS_PER_GRADE = 25
# Sends more than this many grades below the working grade score nothing
MIN_SCORING_DELTA = -3
FLASH_MULTIPLIER = Fraction(6, 5)  # Flash gets +20%, rounded down


def compute_points(
    working_grade_when_sent: int, absolute_grade: int, is_flash: bool = False
) -> int:
    """
    Points for a single send.

    Uses the working grade snapshotted on the ascent, never the climber's
    current grade, so historical scores stay put across promotions. Large
    positive deltas are not capped.
    """
    delta = absolute_grade - working_grade_when_sent
    if delta < MIN_SCORING_DELTA:
        return 0

    base_points = BASE_POINTS + POINTS_PER_GRADE * delta
    if is_flash:
        return math.floor(base_points * FLASH_MULTIPLIER)
    return base_points


def ascent_points(ascent: Ascent) -> int:
    """Price a stored ascent."""
    return compute_points(
        ascent.working_grade_when_sent, ascent.absolute_grade, ascent.is_flash
    )


def total_points(ascents: Iterable[Ascent]) -> int:
    """Running score implied by an ascent history."""
    return sum(ascent_points(ascent) for ascent in ascents)


def get_scoring_config() -> dict:
    """Scoring rules in a shape the frontend can render."""
    # Deltas from the first non-scoring one up to +3, priced from a V4 baseline
    baseline = 4
    points_table = [
        {
            "delta": delta,
            "points": compute_points(baseline, baseline + delta, False),
            "flash_points": compute_points(baseline, baseline + delta, True),
        }
        for delta in range(MIN_SCORING_DELTA - 1, 4)
    ]

    return {
        "points_table": points_table,
        "base_points": BASE_POINTS,
        "points_per_grade": POINTS_PER_GRADE,
        "min_scoring_delta": MIN_SCORING_DELTA,
        "flash_multiplier": float(FLASH_MULTIPLIER),
        "description": "100 points at your working grade, 25 per grade above or below",
    }
