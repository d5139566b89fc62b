from typing import List

from boulder_league.core.auth import get_current_user_id
from boulder_league.db.store import RecordStore, get_record_store
from boulder_league.schemas import Candidate, CandidateCreate, SubjectType
from boulder_league.services.voting import create_candidate, delete_candidate
from fastapi import APIRouter, Depends, Header

router = APIRouter()


@router.get("/{subject_type}/{climber_id}", response_model=List[Candidate])
def get_candidates(
    subject_type: SubjectType,
    climber_id: str,
    store: RecordStore = Depends(get_record_store),
):
    """Nickname or photo candidates proposed for a climber, oldest first."""
    return store.list_candidates(subject_type, climber_id)


@router.post("/{subject_type}/{climber_id}", response_model=Candidate)
def propose_candidate(
    subject_type: SubjectType,
    climber_id: str,
    candidate_in: CandidateCreate,
    authorization: str = Header(None),
    store: RecordStore = Depends(get_record_store),
):
    """Suggest a nickname or photo. Each member gets two per climber."""
    user_id = get_current_user_id(authorization)
    return create_candidate(store, subject_type, climber_id, user_id, candidate_in)


@router.delete("/{subject_type}/{candidate_id}")
def withdraw_candidate(
    subject_type: SubjectType,
    candidate_id: str,
    authorization: str = Header(None),
    store: RecordStore = Depends(get_record_store),
):
    """Delete a candidate you proposed, freeing a slot."""
    user_id = get_current_user_id(authorization)
    delete_candidate(store, subject_type, candidate_id, user_id)
    return {"message": "Candidate deleted"}
