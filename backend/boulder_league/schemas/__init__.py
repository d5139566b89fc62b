# Schemas package
from boulder_league.schemas.ascent import (
    Ascent,
    AscentCreate,
    AscentLogged,
    AscentWithPoints,
)
from boulder_league.schemas.climber import (
    Climber,
    ClimberCreate,
    GradeCount,
    PromotionCheck,
    PromotionResolve,
    PromotionStatus,
)
from boulder_league.schemas.voting import (
    Ballot,
    Candidate,
    CandidateCreate,
    RankedCandidate,
    RankingSubmit,
    SubjectType,
)

__all__ = [
    "Ascent",
    "AscentCreate",
    "AscentLogged",
    "AscentWithPoints",
    "Climber",
    "ClimberCreate",
    "GradeCount",
    "PromotionCheck",
    "PromotionResolve",
    "PromotionStatus",
    "Ballot",
    "Candidate",
    "CandidateCreate",
    "RankedCandidate",
    "RankingSubmit",
    "SubjectType",
]
