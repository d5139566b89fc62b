"""
Ranking endpoints for the nickname and profile photo votes.
"""

from typing import List

from boulder_league.core.auth import get_current_user_id
from boulder_league.db.store import RecordStore, get_record_store
from boulder_league.schemas import RankedCandidate, RankingSubmit, SubjectType
from boulder_league.services.voting import effective_order, submit_ranking
from fastapi import APIRouter, Depends, Header

router = APIRouter()


@router.put("/{subject_type}/{climber_id}", response_model=List[RankedCandidate])
def save_ranking(
    subject_type: SubjectType,
    climber_id: str,
    ranking_in: RankingSubmit,
    authorization: str = Header(None),
    store: RecordStore = Depends(get_record_store),
):
    """Replace your ranking for a climber's nicknames or photos."""
    user_id = get_current_user_id(authorization)
    submit_ranking(store, user_id, subject_type, climber_id, ranking_in.candidate_ids)
    return effective_order(store, user_id, subject_type, climber_id)


@router.get("/{subject_type}/{climber_id}", response_model=List[RankedCandidate])
def get_my_ranking(
    subject_type: SubjectType,
    climber_id: str,
    authorization: str = Header(None),
    store: RecordStore = Depends(get_record_store),
):
    """Your last saved ranking, with unranked candidates at the end."""
    user_id = get_current_user_id(authorization)
    return effective_order(store, user_id, subject_type, climber_id)
