from typing import List, Optional

from boulder_league.core.auth import get_optional_user_id
from boulder_league.db.store import RecordStore, get_record_store
from boulder_league.services.leaderboard import LeaderboardEntry, get_leaderboard
from fastapi import APIRouter, Depends

router = APIRouter()


@router.get("", response_model=List[LeaderboardEntry])
def get_league_leaderboard(
    user_id: Optional[str] = Depends(get_optional_user_id),
    store: RecordStore = Depends(get_record_store),
):
    """Get the current league leaderboard."""
    return get_leaderboard(store, current_user_id=user_id)
