"""Shared fixtures: an in-memory record store and an authenticated test client."""

import uuid
from datetime import date, datetime, timezone
from typing import Any, Optional

import jwt
import pytest
from fastapi.testclient import TestClient

from boulder_league.core.exceptions import (
    NotFoundError,
    PermissionDeniedError,
    StateConflictError,
    ValidationError,
)
from boulder_league.db.store import RecordStore, get_record_store
from boulder_league.main import app
from boulder_league.schemas import (
    Ascent,
    AscentCreate,
    Ballot,
    Candidate,
    Climber,
    ClimberCreate,
)
from boulder_league.services.voting import MAX_CANDIDATES_PER_PROPOSER


class InMemoryRecordStore(RecordStore):
    """Dict-backed RecordStore with the same conditional-update contract."""

    def __init__(self):
        self.climbers: dict[str, Climber] = {}
        self.ascents: dict[str, Ascent] = {}
        self.candidates: dict[str, list[Candidate]] = {
            "nickname": [],
            "profile_photo": [],
        }
        self.ballots: list[Ballot] = []

    def get_climber(self, climber_id: str) -> Optional[Climber]:
        return self.climbers.get(climber_id)

    def list_climbers(self) -> list[Climber]:
        return list(self.climbers.values())

    def create_climber(self, climber_id: str, climber_in: ClimberCreate) -> Climber:
        climber = Climber(
            id=climber_id,
            first_name=climber_in.first_name,
            last_name=climber_in.last_name,
            working_grade=climber_in.working_grade,
            ascents_of_next_grade=climber_in.ascents_of_next_grade,
        )
        self.climbers[climber_id] = climber
        return climber

    def update_climber(
        self,
        climber_id: str,
        fields: dict[str, Any],
        expected: Optional[dict[str, Any]] = None,
    ) -> Climber:
        climber = self.climbers.get(climber_id)
        if climber is None:
            raise NotFoundError(f"Climber {climber_id} not found")
        for column, value in (expected or {}).items():
            if getattr(climber, column) != value:
                raise StateConflictError(f"Climber {climber_id} was modified concurrently")
        updated = climber.model_copy(update=fields)
        self.climbers[climber_id] = updated
        return updated

    def list_ascents(self, climber_id: Optional[str] = None) -> list[Ascent]:
        return [
            a
            for a in self.ascents.values()
            if climber_id is None or a.climber_id == climber_id
        ]

    def get_ascent(self, ascent_id: str) -> Optional[Ascent]:
        return self.ascents.get(ascent_id)

    def create_ascent(
        self, climber_id: str, ascent_in: AscentCreate, working_grade_when_sent: int
    ) -> Ascent:
        ascent = Ascent(
            id=str(uuid.uuid4()),
            climber_id=climber_id,
            name=ascent_in.name,
            description=ascent_in.description,
            absolute_grade=ascent_in.absolute_grade,
            is_flash=ascent_in.is_flash,
            sent_date=ascent_in.sent_date or date.today(),
            working_grade_when_sent=working_grade_when_sent,
            create_date=datetime.now(timezone.utc),
        )
        self.ascents[ascent.id] = ascent
        return ascent

    def delete_ascent(self, ascent_id: str) -> bool:
        return self.ascents.pop(ascent_id, None) is not None

    def list_candidates(self, subject_type, climber_id: str) -> list[Candidate]:
        return [c for c in self.candidates[subject_type] if c.climber_id == climber_id]

    def get_candidate(self, subject_type, candidate_id: str) -> Optional[Candidate]:
        for candidate in self.candidates[subject_type]:
            if candidate.id == candidate_id:
                return candidate
        return None

    def create_candidate(
        self, subject_type, climber_id: str, submitted_by: str, value: str
    ) -> Candidate:
        # Same check as the insert trigger, against the current rows
        live = [
            c
            for c in self.candidates[subject_type]
            if c.climber_id == climber_id and c.submitted_by == submitted_by
        ]
        if len(live) >= MAX_CANDIDATES_PER_PROPOSER:
            raise ValidationError("Candidate quota exceeded")
        candidate = Candidate(
            id=str(uuid.uuid4()),
            subject_type=subject_type,
            climber_id=climber_id,
            submitted_by=submitted_by,
            value=value,
            created_at=datetime.now(timezone.utc),
        )
        self.candidates[subject_type].append(candidate)
        return candidate

    def delete_candidate(self, subject_type, candidate_id: str, requester_id: str) -> None:
        candidate = self.get_candidate(subject_type, candidate_id)
        if candidate is None:
            raise NotFoundError(f"Candidate {candidate_id} not found")
        if candidate.submitted_by != requester_id:
            raise PermissionDeniedError("Only the proposer can delete a candidate")
        self.candidates[subject_type].remove(candidate)
        self.ballots = [b for b in self.ballots if b.candidate_id != candidate_id]

    def list_ballots(self, voter_id=None, subject_type=None, climber_id=None) -> list[Ballot]:
        rows = [
            b
            for b in self.ballots
            if (voter_id is None or b.voter_id == voter_id)
            and (subject_type is None or b.subject_type == subject_type)
            and (climber_id is None or b.climber_id == climber_id)
        ]
        return sorted(rows, key=lambda b: b.rank)

    def replace_ballots(
        self, voter_id: str, subject_type, climber_id: str, ranked_ids: list[str]
    ) -> list[Ballot]:
        self.ballots = [
            b
            for b in self.ballots
            if not (
                b.voter_id == voter_id
                and b.subject_type == subject_type
                and b.climber_id == climber_id
            )
        ]
        new_rows = [
            Ballot(
                voter_id=voter_id,
                subject_type=subject_type,
                climber_id=climber_id,
                candidate_id=candidate_id,
                rank=position + 1,
            )
            for position, candidate_id in enumerate(ranked_ids)
        ]
        self.ballots.extend(new_rows)
        return new_rows


@pytest.fixture
def store():
    return InMemoryRecordStore()


@pytest.fixture
def make_climber(store):
    """Register a climber directly in the store."""

    def _make(
        climber_id: str = "alice",
        working_grade: int = 5,
        ascents_of_next_grade: int = 0,
        first_name: str = "Alice",
        last_name: str = "Crimper",
        **fields,
    ) -> Climber:
        store.create_climber(
            climber_id,
            ClimberCreate(
                first_name=first_name,
                last_name=last_name,
                working_grade=working_grade,
                ascents_of_next_grade=ascents_of_next_grade,
            ),
        )
        if fields:
            store.update_climber(climber_id, fields)
        return store.get_climber(climber_id)

    return _make


TEST_SIGNING_KEY = "boulder-league-test-signing-key-0123456789"


def auth_header(user_id: str) -> dict[str, str]:
    token = jwt.encode({"sub": user_id}, TEST_SIGNING_KEY, algorithm="HS256")
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def client(store):
    app.dependency_overrides[get_record_store] = lambda: store
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def as_user():
    return auth_header
