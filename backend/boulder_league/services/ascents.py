import logging
from collections import defaultdict

from boulder_league.core.exceptions import (
    NotFoundError,
    PermissionDeniedError,
    StateConflictError,
)
from boulder_league.db.store import RecordStore
from boulder_league.schemas import (
    Ascent,
    AscentCreate,
    AscentLogged,
    AscentWithPoints,
    Climber,
    GradeCount,
    PromotionCheck,
)
from boulder_league.services.scoring import ascent_points, compute_points
from boulder_league.services.working_grade import check_promotion

logger = logging.getLogger(__name__)

# Conditional score updates tried per deletion before giving up
SCORE_UPDATE_ATTEMPTS = 5


def record_ascent(
    store: RecordStore, climber_id: str, ascent_in: AscentCreate
) -> AscentLogged:
    """
    Log a send for a climber.

    The ascent is priced against the working grade in effect when it was
    logged; a promotion it triggers only applies to later ascents.
    """
    climber = store.get_climber(climber_id)
    if climber is None:
        raise NotFoundError(f"Climber {climber_id} not found")

    working_grade = climber.working_grade
    ascent = store.create_ascent(climber.id, ascent_in, working_grade)
    points = compute_points(working_grade, ascent.absolute_grade, ascent.is_flash)

    try:
        updated = store.update_climber(
            climber.id,
            {"running_score": climber.running_score + points},
            expected={"running_score": climber.running_score},
        )
    except StateConflictError:
        # Leave no half-logged ascent behind; the caller retries the whole send
        store.delete_ascent(ascent.id)
        raise
    logger.info(
        f"Climber {climber.id} sent V{ascent.absolute_grade}"
        f"{' (flash)' if ascent.is_flash else ''} at working grade V{working_grade}: "
        f"{points} points"
    )

    try:
        promotion = check_promotion(store, climber.id)
    except StateConflictError:
        # A concurrent check already moved the climber on
        logger.warning(f"Promotion check for climber {climber.id} raced another request")
        promotion = PromotionCheck(promoted=False)

    return AscentLogged(
        ascent=ascent,
        points=points,
        running_score=updated.running_score,
        promotion=promotion,
    )


def delete_ascent(store: RecordStore, ascent_id: str, requester_id: str) -> Climber:
    """
    Delete an ascent and take its points off the owner's running score.

    The row goes first, and only the request that actually removed it adjusts
    the score. The adjustment is relative, so a conditional update that loses
    to a concurrent send is retried against the fresh score.
    """
    ascent = store.get_ascent(ascent_id)
    if ascent is None:
        raise NotFoundError(f"Ascent {ascent_id} not found")
    if ascent.climber_id != requester_id:
        raise PermissionDeniedError("You can only delete your own ascents")

    if not store.delete_ascent(ascent.id):
        raise NotFoundError(f"Ascent {ascent_id} not found")

    points = ascent_points(ascent)
    for attempt in range(1, SCORE_UPDATE_ATTEMPTS + 1):
        climber = store.get_climber(ascent.climber_id)
        if climber is None:
            raise NotFoundError(f"Climber {ascent.climber_id} not found")
        try:
            updated = store.update_climber(
                climber.id,
                {"running_score": climber.running_score - points},
                expected={"running_score": climber.running_score},
            )
        except StateConflictError:
            logger.warning(
                f"Score update for climber {climber.id} raced another request "
                f"(attempt {attempt} of {SCORE_UPDATE_ATTEMPTS})"
            )
            continue

        logger.info(
            f"Deleted ascent {ascent.id} of climber {climber.id}, "
            f"running score {climber.running_score} -> {updated.running_score}"
        )
        return updated

    logger.error(
        f"Deleted ascent {ascent.id} but could not take {points} points off "
        f"climber {ascent.climber_id}"
    )
    raise StateConflictError(
        f"Climber {ascent.climber_id} is being updated concurrently, retry the operation"
    )


def list_ascents_with_points(
    store: RecordStore, climber_id: str | None = None
) -> list[AscentWithPoints]:
    ascents = store.list_ascents(climber_id)
    return [
        AscentWithPoints(**ascent.model_dump(), points=ascent_points(ascent))
        for ascent in ascents
    ]


def grade_distribution(ascents: list[Ascent]) -> list[GradeCount]:
    """Sends and flashes per absolute grade, lowest grade first."""
    sends: dict[int, int] = defaultdict(int)
    flashes: dict[int, int] = defaultdict(int)
    for ascent in ascents:
        sends[ascent.absolute_grade] += 1
        if ascent.is_flash:
            flashes[ascent.absolute_grade] += 1

    return [
        GradeCount(grade=grade, sends=sends[grade], flashes=flashes[grade])
        for grade in sorted(sends)
    ]
