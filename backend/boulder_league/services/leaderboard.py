import logging
from collections import defaultdict
from typing import List, Optional

from boulder_league.db.store import RecordStore
from boulder_league.schemas import Ascent
from boulder_league.services.working_grade import sends_needed, sends_toward_next_grade
from pydantic import BaseModel

logger = logging.getLogger(__name__)

NAME_FORMATS = [
    '{first} "{nickname}" {last}',
    "{first} ({nickname}) {last}",
    "{first} {last}, AKA {nickname}",
    "{nickname} ({first} {last})",
]


class LeaderboardEntry(BaseModel):
    rank: int
    climber_id: str
    display_name: str
    working_grade: int
    running_score: int
    ascent_count: int = 0
    sends_toward_next_grade: int = 0
    sends_needed: int = 0
    promotion_input_needed: bool = False
    is_me: bool = False


def _name_hash(text: str) -> int:
    """Signed 32-bit string hash (h * 31 + c) over UTF-16 code units."""
    encoded = text.encode("utf-16-le")
    h = 0
    for i in range(0, len(encoded), 2):
        unit = int.from_bytes(encoded[i : i + 2], "little")
        h = ((h << 5) - h + unit) & 0xFFFFFFFF
    if h >= 0x80000000:
        h -= 0x100000000
    return h


def format_display_name(first_name: str, last_name: str, nickname: Optional[str]) -> str:
    """Fold a nickname into the name; the same person always gets the same format."""
    if not nickname:
        return f"{first_name} {last_name}"

    index = abs(_name_hash(first_name + last_name + nickname)) % len(NAME_FORMATS)
    return NAME_FORMATS[index].format(first=first_name, last=last_name, nickname=nickname)


def get_leaderboard(
    store: RecordStore, current_user_id: Optional[str] = None
) -> List[LeaderboardEntry]:
    """Rank all climbers by running score."""
    climbers = store.list_climbers()
    if not climbers:
        return []

    # Bulk fetch every ascent once rather than per climber
    ascents_by_climber: dict[str, list[Ascent]] = defaultdict(list)
    for ascent in store.list_ascents():
        ascents_by_climber[ascent.climber_id].append(ascent)

    leaderboard = []
    for climber in climbers:
        ascents = ascents_by_climber.get(climber.id, [])
        leaderboard.append(
            LeaderboardEntry(
                rank=0,  # Will be set after sorting
                climber_id=climber.id,
                display_name=format_display_name(
                    climber.first_name, climber.last_name, climber.nickname
                ),
                working_grade=climber.working_grade,
                running_score=climber.running_score,
                ascent_count=len(ascents),
                sends_toward_next_grade=sends_toward_next_grade(climber, ascents),
                sends_needed=sends_needed(climber.working_grade + 1),
                promotion_input_needed=climber.promotion_input_needed,
                is_me=climber.id == current_user_id,
            )
        )

    # Sort by running score descending, then name for a stable order
    leaderboard.sort(key=lambda x: (-x.running_score, x.display_name))

    for i, entry in enumerate(leaderboard):
        entry.rank = i + 1

    logger.debug(f"Built leaderboard with {len(leaderboard)} climbers")
    return leaderboard
