"""
Scoring API endpoint to serve scoring configuration to the frontend.
"""

from boulder_league.services.scoring import get_scoring_config
from fastapi import APIRouter

router = APIRouter()


@router.get("")
def get_scoring_rules():
    """Get the current scoring configuration."""
    return get_scoring_config()
