"""
Working grade tracking.

A climber holds grade N once they have N sends at grade N. Each climber is
either stable at a tier or waiting on promotion input: right after a
promotion the member must report how many sends at the new next grade they
already had, which seeds ``ascents_of_next_grade`` for the new tier.

Promotions only ever affect the grade used for the next logged ascent.
Ascents keep their ``working_grade_when_sent`` snapshot, so past scores are
never recomputed.
"""

import logging
from typing import Iterable

from boulder_league.core.exceptions import NotFoundError, ValidationError
from boulder_league.db.store import RecordStore
from boulder_league.schemas import Ascent, Climber, PromotionCheck, PromotionStatus

logger = logging.getLogger(__name__)


def sends_needed(grade: int) -> int:
    """Sends at ``grade`` required to hold it as working grade."""
    return grade


def sends_toward_next_grade(climber: Climber, ascents: Iterable[Ascent]) -> int:
    """
    Sends counting toward promotion from the climber's current tier.

    The reported baseline (``ascents_of_next_grade``) plus logged sends of the
    next grade made while at the current tier. Sends logged at an earlier tier
    are covered by the count the member reported when promoted.
    """
    next_grade = climber.working_grade + 1
    logged = sum(
        1
        for ascent in ascents
        if ascent.absolute_grade == next_grade
        and ascent.working_grade_when_sent == climber.working_grade
    )
    return climber.ascents_of_next_grade + logged


def reconciliation_range(climber: Climber) -> tuple[int, int]:
    """Inclusive bounds for the reported next-grade count."""
    return 0, climber.working_grade + 1


def _get_climber(store: RecordStore, climber_id: str) -> Climber:
    climber = store.get_climber(climber_id)
    if climber is None:
        raise NotFoundError(f"Climber {climber_id} not found")
    return climber


def promotion_status(store: RecordStore, climber_id: str) -> PromotionStatus:
    climber = _get_climber(store, climber_id)
    next_grade = climber.working_grade + 1
    return PromotionStatus(
        climber_id=climber.id,
        state=(
            "pending_promotion_input" if climber.promotion_input_needed else "stable"
        ),
        working_grade=climber.working_grade,
        next_grade=next_grade,
        sends=sends_toward_next_grade(climber, store.list_ascents(climber.id)),
        needed=sends_needed(next_grade),
        reconciliation_range=reconciliation_range(climber),
    )


def check_promotion(store: RecordStore, climber_id: str) -> PromotionCheck:
    """
    Promote the climber one tier if they have enough sends at the next grade.

    The write is conditional on the tier and flag we read, so two racing
    checks cannot both promote; the loser gets StateConflictError from the
    store. Nothing happens while promotion input is still pending.
    """
    climber = _get_climber(store, climber_id)

    if climber.promotion_input_needed:
        return PromotionCheck(promoted=False)

    next_grade = climber.working_grade + 1
    sends = sends_toward_next_grade(climber, store.list_ascents(climber.id))
    if sends < sends_needed(next_grade):
        return PromotionCheck(promoted=False)

    store.update_climber(
        climber.id,
        {
            "working_grade": next_grade,
            "promotion_input_needed": True,
            "ascents_of_next_grade": 0,
        },
        expected={
            "working_grade": climber.working_grade,
            "promotion_input_needed": False,
        },
    )
    logger.info(
        f"Promoted climber {climber.id} from V{climber.working_grade} to V{next_grade} "
        f"({sends} sends), awaiting promotion input"
    )
    return PromotionCheck(promoted=True, new_tier=next_grade)


def resolve_promotion(
    store: RecordStore, climber_id: str, next_grade_count: int
) -> Climber:
    """
    Record how many sends at the new next grade the climber already had.

    Rejected values leave the climber untouched. The counter write and the
    flag clear happen in one conditional update.
    """
    climber = _get_climber(store, climber_id)

    if not climber.promotion_input_needed:
        raise ValidationError(f"Climber {climber_id} has no pending promotion input")

    low, high = reconciliation_range(climber)
    if not low <= next_grade_count <= high:
        raise ValidationError(
            f"ascents_of_next_grade must be between {low} and {high}, got {next_grade_count}"
        )

    updated = store.update_climber(
        climber.id,
        {"ascents_of_next_grade": next_grade_count, "promotion_input_needed": False},
        expected={
            "working_grade": climber.working_grade,
            "promotion_input_needed": True,
        },
    )
    logger.info(
        f"Climber {climber.id} reported {next_grade_count} sends at "
        f"V{climber.working_grade + 1}, promotion resolved"
    )
    return updated
