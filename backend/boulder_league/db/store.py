"""
Record store used by the scoring and ranking services.

The services only talk to a ``RecordStore``. ``SupabaseRecordStore`` is the
production implementation; tests substitute an in-memory one.

Three operations must be serializable at this boundary:

- ``update_climber`` with ``expected`` values is a compare-and-swap on the
  climber row (used for promotions and running score updates).
- ``replace_ballots`` swaps a voter's whole ballot for one subject in a single
  transaction (the ``replace_ballots`` Postgres function, see
  ``backend/sql/schema.sql``).
- ``create_candidate`` rejects a proposal past the per-proposer quota even
  when two proposals race (the ``enforce_candidate_quota`` trigger).
"""

import logging
from abc import ABC, abstractmethod
from datetime import date, datetime, timezone
from typing import Any, Optional

from boulder_league.core.exceptions import (
    NotFoundError,
    PermissionDeniedError,
    StateConflictError,
    ValidationError,
)
from boulder_league.schemas import (
    Ascent,
    AscentCreate,
    Ballot,
    Candidate,
    Climber,
    ClimberCreate,
    SubjectType,
)
from postgrest.exceptions import APIError
from supabase import Client

logger = logging.getLogger(__name__)

# SQLSTATE raised by the candidate quota trigger (check_violation)
QUOTA_VIOLATION = "23514"

# subject type -> (table, value column)
CANDIDATE_TABLES: dict[str, tuple[str, str]] = {
    "nickname": ("nickname_candidates", "nickname"),
    "profile_photo": ("profile_photo_candidates", "image_url"),
}


class RecordStore(ABC):
    """Narrow persistence interface consumed by the services."""

    # Climbers

    @abstractmethod
    def get_climber(self, climber_id: str) -> Optional[Climber]:
        pass

    @abstractmethod
    def list_climbers(self) -> list[Climber]:
        pass

    @abstractmethod
    def create_climber(self, climber_id: str, climber_in: ClimberCreate) -> Climber:
        pass

    @abstractmethod
    def update_climber(
        self,
        climber_id: str,
        fields: dict[str, Any],
        expected: Optional[dict[str, Any]] = None,
    ) -> Climber:
        """Write ``fields`` to the climber row.

        When ``expected`` is given the write only happens if every listed
        column still holds the expected value.

        Raises:
            NotFoundError: no such climber
            StateConflictError: the row no longer matches ``expected``
        """

    # Ascents

    @abstractmethod
    def list_ascents(self, climber_id: Optional[str] = None) -> list[Ascent]:
        """Ascents for one climber, or for everyone when climber_id is None."""

    @abstractmethod
    def get_ascent(self, ascent_id: str) -> Optional[Ascent]:
        pass

    @abstractmethod
    def create_ascent(
        self, climber_id: str, ascent_in: AscentCreate, working_grade_when_sent: int
    ) -> Ascent:
        pass

    @abstractmethod
    def delete_ascent(self, ascent_id: str) -> bool:
        """Delete an ascent; False when there was no such row to delete."""

    # Candidates

    @abstractmethod
    def list_candidates(
        self, subject_type: SubjectType, climber_id: str
    ) -> list[Candidate]:
        """Live candidates for a target climber, oldest first."""

    @abstractmethod
    def get_candidate(
        self, subject_type: SubjectType, candidate_id: str
    ) -> Optional[Candidate]:
        pass

    @abstractmethod
    def create_candidate(
        self, subject_type: SubjectType, climber_id: str, submitted_by: str, value: str
    ) -> Candidate:
        """Insert a candidate.

        Raises:
            ValidationError: the proposer already holds the maximum number of
                live candidates for this target
        """

    @abstractmethod
    def delete_candidate(
        self, subject_type: SubjectType, candidate_id: str, requester_id: str
    ) -> None:
        """Delete a candidate. Only its proposer may do so.

        Raises:
            NotFoundError: no such candidate
            PermissionDeniedError: requester is not the proposer
        """

    # Ballots

    @abstractmethod
    def list_ballots(
        self,
        voter_id: Optional[str] = None,
        subject_type: Optional[SubjectType] = None,
        climber_id: Optional[str] = None,
    ) -> list[Ballot]:
        pass

    @abstractmethod
    def replace_ballots(
        self,
        voter_id: str,
        subject_type: SubjectType,
        climber_id: str,
        ranked_ids: list[str],
    ) -> list[Ballot]:
        """Atomically replace the voter's ballot; rank = position + 1."""


def _filter_value(value: Any) -> Any:
    # PostgREST expects lowercase booleans in filters
    if isinstance(value, bool):
        return str(value).lower()
    return value


class SupabaseRecordStore(RecordStore):
    """RecordStore backed by the league's Supabase (PostgREST) schema."""

    def __init__(self, client: Client):
        self.client = client

    def get_climber(self, climber_id: str) -> Optional[Climber]:
        response = (
            self.client.table("climbers")
            .select("*")
            .eq("id", climber_id)
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        return Climber(**response.data[0])

    def list_climbers(self) -> list[Climber]:
        response = self.client.table("climbers").select("*").execute()
        return [Climber(**row) for row in (response.data or [])]

    def create_climber(self, climber_id: str, climber_in: ClimberCreate) -> Climber:
        climber_data = {
            "id": climber_id,
            "first_name": climber_in.first_name,
            "last_name": climber_in.last_name,
            "working_grade": climber_in.working_grade,
            "ascents_of_next_grade": climber_in.ascents_of_next_grade,
            "running_score": 0,
            "promotion_input_needed": False,
        }
        response = self.client.table("climbers").insert(climber_data).execute()
        if not response.data:
            logger.error(f"Insert returned no row for climber {climber_id}")
            raise RuntimeError("Failed to create climber")
        return Climber(**response.data[0])

    def update_climber(
        self,
        climber_id: str,
        fields: dict[str, Any],
        expected: Optional[dict[str, Any]] = None,
    ) -> Climber:
        query = self.client.table("climbers").update(fields).eq("id", climber_id)
        for column, value in (expected or {}).items():
            query = query.eq(column, _filter_value(value))

        response = query.execute()
        if response.data:
            return Climber(**response.data[0])

        # Nothing matched: either the climber is gone or the row moved on
        if self.get_climber(climber_id) is None:
            raise NotFoundError(f"Climber {climber_id} not found")
        logger.warning(
            f"Conditional update of climber {climber_id} lost a race (expected {expected})"
        )
        raise StateConflictError(
            f"Climber {climber_id} was modified concurrently, retry the operation"
        )

    def list_ascents(self, climber_id: Optional[str] = None) -> list[Ascent]:
        query = self.client.table("ascents").select("*")
        if climber_id:
            query = query.eq("climber_id", climber_id)
        response = query.order("create_date", desc=False).execute()
        return [Ascent(**row) for row in (response.data or [])]

    def get_ascent(self, ascent_id: str) -> Optional[Ascent]:
        response = (
            self.client.table("ascents")
            .select("*")
            .eq("id", ascent_id)
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        return Ascent(**response.data[0])

    def create_ascent(
        self, climber_id: str, ascent_in: AscentCreate, working_grade_when_sent: int
    ) -> Ascent:
        ascent_data = {
            "climber_id": climber_id,
            "name": ascent_in.name,
            "description": ascent_in.description,
            "absolute_grade": ascent_in.absolute_grade,
            "working_grade_when_sent": working_grade_when_sent,
            "is_flash": ascent_in.is_flash,
            "sent_date": (ascent_in.sent_date or date.today()).isoformat(),
            "create_date": datetime.now(timezone.utc).isoformat(),
        }
        response = self.client.table("ascents").insert(ascent_data).execute()
        if not response.data:
            logger.error(f"Insert returned no row for ascent of climber {climber_id}")
            raise RuntimeError("Failed to create ascent")
        return Ascent(**response.data[0])

    def delete_ascent(self, ascent_id: str) -> bool:
        response = self.client.table("ascents").delete().eq("id", ascent_id).execute()
        return bool(response.data)

    @staticmethod
    def _to_candidate(subject_type: SubjectType, row: dict) -> Candidate:
        _, value_column = CANDIDATE_TABLES[subject_type]
        return Candidate(
            id=row["id"],
            subject_type=subject_type,
            climber_id=row["user_id"],
            submitted_by=row["submitted_by"],
            value=row[value_column],
            created_at=row.get("created_at"),
        )

    def list_candidates(
        self, subject_type: SubjectType, climber_id: str
    ) -> list[Candidate]:
        table, _ = CANDIDATE_TABLES[subject_type]
        response = (
            self.client.table(table)
            .select("*")
            .eq("user_id", climber_id)
            .order("created_at", desc=False)
            .execute()
        )
        return [self._to_candidate(subject_type, row) for row in (response.data or [])]

    def get_candidate(
        self, subject_type: SubjectType, candidate_id: str
    ) -> Optional[Candidate]:
        table, _ = CANDIDATE_TABLES[subject_type]
        response = (
            self.client.table(table)
            .select("*")
            .eq("id", candidate_id)
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        return self._to_candidate(subject_type, response.data[0])

    def create_candidate(
        self, subject_type: SubjectType, climber_id: str, submitted_by: str, value: str
    ) -> Candidate:
        table, value_column = CANDIDATE_TABLES[subject_type]
        try:
            response = (
                self.client.table(table)
                .insert(
                    {
                        "user_id": climber_id,
                        "submitted_by": submitted_by,
                        value_column: value,
                    }
                )
                .execute()
            )
        except APIError as e:
            if e.code == QUOTA_VIOLATION:
                # A concurrent proposal took the last slot
                logger.warning(
                    f"Quota trigger rejected {subject_type} candidate by {submitted_by} "
                    f"for {climber_id}"
                )
                raise ValidationError(
                    f"No {subject_type.replace('_', ' ')} suggestions left for this "
                    f"climber. Delete one to add another."
                ) from e
            logger.error(f"Error creating {subject_type} candidate: {e}")
            raise
        if not response.data:
            logger.error(f"Insert returned no row for {subject_type} candidate")
            raise RuntimeError("Failed to create candidate")
        return self._to_candidate(subject_type, response.data[0])

    def delete_candidate(
        self, subject_type: SubjectType, candidate_id: str, requester_id: str
    ) -> None:
        candidate = self.get_candidate(subject_type, candidate_id)
        if candidate is None:
            raise NotFoundError(f"Candidate {candidate_id} not found")
        if candidate.submitted_by != requester_id:
            raise PermissionDeniedError("Only the proposer can delete a candidate")

        table, _ = CANDIDATE_TABLES[subject_type]
        (
            self.client.table(table)
            .delete()
            .eq("id", candidate_id)
            .eq("submitted_by", requester_id)
            .execute()
        )
        # Rankings that mention the candidate are dropped with it
        self.client.table("votes").delete().eq("candidate_id", candidate_id).execute()

    def list_ballots(
        self,
        voter_id: Optional[str] = None,
        subject_type: Optional[SubjectType] = None,
        climber_id: Optional[str] = None,
    ) -> list[Ballot]:
        query = self.client.table("votes").select(
            "voter_id, subject_type, climber_id, candidate_id, rank"
        )
        if voter_id:
            query = query.eq("voter_id", voter_id)
        if subject_type:
            query = query.eq("subject_type", subject_type)
        if climber_id:
            query = query.eq("climber_id", climber_id)

        response = query.order("rank", desc=False).execute()
        return [Ballot(**row) for row in (response.data or [])]

    def replace_ballots(
        self,
        voter_id: str,
        subject_type: SubjectType,
        climber_id: str,
        ranked_ids: list[str],
    ) -> list[Ballot]:
        # Delete and insert run inside one Postgres function call
        response = self.client.rpc(
            "replace_ballots",
            {
                "p_voter_id": voter_id,
                "p_subject_type": subject_type,
                "p_climber_id": climber_id,
                "p_candidate_ids": ranked_ids,
            },
        ).execute()
        return [Ballot(**row) for row in (response.data or [])]


def get_record_store() -> RecordStore:
    """FastAPI dependency; tests override it with an in-memory store."""
    from boulder_league.db.supabase import get_supabase_client

    return SupabaseRecordStore(get_supabase_client())
