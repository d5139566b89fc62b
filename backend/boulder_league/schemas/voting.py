from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel, Field

SubjectType = Literal["nickname", "profile_photo"]


class CandidateCreate(BaseModel):
    """A nickname or photo proposal. Which field is required depends on the subject."""

    nickname: Optional[str] = Field(None, min_length=1, max_length=40)
    image_url: Optional[str] = Field(None, min_length=1, max_length=500)


class Candidate(BaseModel):
    id: str
    subject_type: SubjectType
    climber_id: str
    submitted_by: str
    value: str
    created_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


class Ballot(BaseModel):
    """One row of a voter's ranking."""

    voter_id: str
    subject_type: SubjectType
    climber_id: str
    candidate_id: str
    rank: int = Field(..., ge=1)


class RankingSubmit(BaseModel):
    candidate_ids: list[str] = Field(
        ..., description="Candidate ids, most preferred first"
    )


class RankedCandidate(BaseModel):
    candidate: Candidate
    rank: Optional[int] = None  # None = not ranked by this voter

