"""
Nickname and profile photo rankings.

Each member keeps one ranked ballot per (subject type, target climber).
Saving a ranking replaces the member's whole ballot; the store performs the
delete and insert as one serializable operation.
"""

import logging
from collections import Counter

from boulder_league.core.exceptions import NotFoundError, ValidationError
from boulder_league.db.store import RecordStore
from boulder_league.schemas import (
    Ballot,
    Candidate,
    CandidateCreate,
    RankedCandidate,
    SubjectType,
)

logger = logging.getLogger(__name__)

MAX_CANDIDATES_PER_PROPOSER = 2

# Sort key for candidates the voter has not ranked
UNRANKED = float("inf")


def _require_climber(store: RecordStore, climber_id: str) -> None:
    if store.get_climber(climber_id) is None:
        raise NotFoundError(f"Climber {climber_id} not found")


def candidate_value(subject_type: SubjectType, candidate_in: CandidateCreate) -> str:
    value = (
        candidate_in.nickname if subject_type == "nickname" else candidate_in.image_url
    )
    if not value or not value.strip():
        field = "nickname" if subject_type == "nickname" else "image_url"
        raise ValidationError(f"{field} is required for {subject_type} candidates")
    return value.strip()


def remaining_candidate_slots(
    store: RecordStore, subject_type: SubjectType, climber_id: str, proposer_id: str
) -> int:
    live = sum(
        1
        for candidate in store.list_candidates(subject_type, climber_id)
        if candidate.submitted_by == proposer_id
    )
    return max(MAX_CANDIDATES_PER_PROPOSER - live, 0)


def create_candidate(
    store: RecordStore,
    subject_type: SubjectType,
    climber_id: str,
    proposer_id: str,
    candidate_in: CandidateCreate,
) -> Candidate:
    """Propose a nickname or photo, subject to the per-proposer quota."""
    _require_climber(store, climber_id)
    value = candidate_value(subject_type, candidate_in)

    if remaining_candidate_slots(store, subject_type, climber_id, proposer_id) == 0:
        logger.warning(
            f"Climber {proposer_id} hit the {subject_type} candidate quota for {climber_id}"
        )
        raise ValidationError(
            f"You can suggest at most {MAX_CANDIDATES_PER_PROPOSER} "
            f"{subject_type.replace('_', ' ')}s per climber. Delete one to add another."
        )

    return store.create_candidate(subject_type, climber_id, proposer_id, value)


def delete_candidate(
    store: RecordStore, subject_type: SubjectType, candidate_id: str, requester_id: str
) -> None:
    store.delete_candidate(subject_type, candidate_id, requester_id)
    logger.info(f"Climber {requester_id} withdrew {subject_type} candidate {candidate_id}")


def submit_ranking(
    store: RecordStore,
    voter_id: str,
    subject_type: SubjectType,
    climber_id: str,
    ordered_candidate_ids: list[str],
) -> list[Ballot]:
    """
    Replace the voter's ranking for a subject.

    Everything is validated before the store is touched, so a rejected
    ranking leaves the previous ballot intact. An empty list clears it.
    """
    _require_climber(store, climber_id)

    duplicates = sorted(
        candidate_id
        for candidate_id, count in Counter(ordered_candidate_ids).items()
        if count > 1
    )
    if duplicates:
        raise ValidationError(f"Duplicate candidates in ranking: {', '.join(duplicates)}")

    live_ids = {c.id for c in store.list_candidates(subject_type, climber_id)}
    foreign = [cid for cid in ordered_candidate_ids if cid not in live_ids]
    if foreign:
        raise ValidationError(
            f"Candidates not proposed for this {subject_type.replace('_', ' ')}: "
            f"{', '.join(foreign)}"
        )

    ballots = store.replace_ballots(
        voter_id, subject_type, climber_id, list(ordered_candidate_ids)
    )
    logger.info(
        f"Climber {voter_id} ranked {len(ordered_candidate_ids)} {subject_type} "
        f"candidates for {climber_id}"
    )
    return ballots


def effective_order(
    store: RecordStore, voter_id: str, subject_type: SubjectType, climber_id: str
) -> list[RankedCandidate]:
    """
    The voter's own ranking, used to seed their editing view.

    Ranked candidates come first by rank; unranked ones follow in the order
    they were proposed. Rankings of deleted candidates are ignored.
    """
    _require_climber(store, climber_id)

    candidates = store.list_candidates(subject_type, climber_id)
    ranks = {
        ballot.candidate_id: ballot.rank
        for ballot in store.list_ballots(voter_id, subject_type, climber_id)
    }

    # sorted() is stable, so unranked candidates keep their proposal order
    ordered = sorted(candidates, key=lambda c: ranks.get(c.id, UNRANKED))
    return [
        RankedCandidate(candidate=candidate, rank=ranks.get(candidate.id))
        for candidate in ordered
    ]
