import logging
from typing import List

from boulder_league.core.auth import get_current_user_id
from boulder_league.db.store import RecordStore, get_record_store
from boulder_league.schemas import (
    Climber,
    ClimberCreate,
    GradeCount,
    PromotionCheck,
    PromotionResolve,
    PromotionStatus,
)
from boulder_league.services.ascents import grade_distribution
from boulder_league.services.working_grade import (
    check_promotion,
    promotion_status,
    resolve_promotion,
)
from fastapi import APIRouter, Depends, Header, HTTPException

logger = logging.getLogger(__name__)
router = APIRouter()


def _require_self(climber_id: str, user_id: str) -> None:
    if climber_id != user_id:
        raise HTTPException(
            status_code=403, detail="You can only update your own climber profile"
        )


@router.post("/", response_model=Climber)
def register_climber(
    climber_in: ClimberCreate,
    authorization: str = Header(None),
    store: RecordStore = Depends(get_record_store),
):
    """Create the acting user's climber profile."""
    user_id = get_current_user_id(authorization)

    if store.get_climber(user_id) is not None:
        raise HTTPException(status_code=400, detail="Climber profile already exists")

    climber = store.create_climber(user_id, climber_in)
    logger.info(
        f"Registered climber {user_id} at V{climber.working_grade} "
        f"with {climber.ascents_of_next_grade} sends of the next grade"
    )
    return climber


@router.get("/", response_model=List[Climber])
def get_climbers(store: RecordStore = Depends(get_record_store)):
    """Get all climbers."""
    return store.list_climbers()


@router.get("/{climber_id}", response_model=Climber)
def get_climber(climber_id: str, store: RecordStore = Depends(get_record_store)):
    """Get a specific climber by ID."""
    climber = store.get_climber(climber_id)
    if climber is None:
        raise HTTPException(status_code=404, detail="Climber not found")
    return climber


@router.get("/{climber_id}/grades", response_model=List[GradeCount])
def get_grade_distribution(
    climber_id: str, store: RecordStore = Depends(get_record_store)
):
    """Sends per absolute grade for a climber's profile chart."""
    if store.get_climber(climber_id) is None:
        raise HTTPException(status_code=404, detail="Climber not found")
    return grade_distribution(store.list_ascents(climber_id))


@router.get("/{climber_id}/promotion", response_model=PromotionStatus)
def get_promotion_status(
    climber_id: str, store: RecordStore = Depends(get_record_store)
):
    """Progress toward the next working grade and any pending promotion input."""
    return promotion_status(store, climber_id)


@router.post("/{climber_id}/promotion/check", response_model=PromotionCheck)
def run_promotion_check(
    climber_id: str,
    authorization: str = Header(None),
    store: RecordStore = Depends(get_record_store),
):
    """Re-run the promotion check, e.g. after a conflict while logging."""
    _require_self(climber_id, get_current_user_id(authorization))
    return check_promotion(store, climber_id)


@router.put("/{climber_id}/promotion", response_model=Climber)
def submit_promotion_input(
    climber_id: str,
    promotion_in: PromotionResolve,
    authorization: str = Header(None),
    store: RecordStore = Depends(get_record_store),
):
    """Report sends of the new next grade made before the promotion."""
    _require_self(climber_id, get_current_user_id(authorization))
    return resolve_promotion(store, climber_id, promotion_in.ascents_of_next_grade)
