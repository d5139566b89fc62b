from typing import List, Optional

from boulder_league.core.auth import get_current_user_id
from boulder_league.db.store import RecordStore, get_record_store
from boulder_league.schemas import AscentCreate, AscentLogged, AscentWithPoints, Climber
from boulder_league.services.ascents import (
    delete_ascent,
    list_ascents_with_points,
    record_ascent,
)
from fastapi import APIRouter, Depends, Header

router = APIRouter()


@router.post("/", response_model=AscentLogged)
def log_ascent(
    ascent_in: AscentCreate,
    authorization: str = Header(None),
    store: RecordStore = Depends(get_record_store),
):
    """Log a send for the acting climber and score it."""
    user_id = get_current_user_id(authorization)
    return record_ascent(store, user_id, ascent_in)


@router.get("/", response_model=List[AscentWithPoints])
def get_ascents(
    climber_id: Optional[str] = None,
    store: RecordStore = Depends(get_record_store),
):
    """Logbook entries, optionally for one climber, with their points."""
    return list_ascents_with_points(store, climber_id)


@router.delete("/{ascent_id}", response_model=Climber)
def remove_ascent(
    ascent_id: str,
    authorization: str = Header(None),
    store: RecordStore = Depends(get_record_store),
):
    """Delete one of your own ascents. Returns the climber with the new score."""
    user_id = get_current_user_id(authorization)
    return delete_ascent(store, ascent_id, user_id)
