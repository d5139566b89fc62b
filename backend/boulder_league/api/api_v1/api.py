from boulder_league.api.api_v1.endpoints import (
    ascents,
    candidates,
    climbers,
    leaderboard,
    rankings,
    scoring,
)
from fastapi import APIRouter

api_router = APIRouter()

api_router.include_router(climbers.router, prefix="/climbers", tags=["climbers"])
api_router.include_router(ascents.router, prefix="/ascents", tags=["ascents"])
api_router.include_router(
    candidates.router, prefix="/candidates", tags=["candidates"]
)
api_router.include_router(rankings.router, prefix="/rankings", tags=["rankings"])
api_router.include_router(
    leaderboard.router, prefix="/leaderboard", tags=["leaderboard"]
)
api_router.include_router(scoring.router, prefix="/scoring", tags=["scoring"])
