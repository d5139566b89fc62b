"""
Error taxonomy for the scoring and ranking engine.

Services raise these; the API layer maps them to HTTP status codes in
``boulder_league.main``.
"""


class BoulderLeagueError(Exception):
    """Base class for all engine errors."""

    status_code = 500

    def __init__(self, detail: str):
        super().__init__(detail)
        self.detail = detail


class ValidationError(BoulderLeagueError):
    """Malformed input. The caller must correct it; never retried."""

    status_code = 400


class PermissionDeniedError(BoulderLeagueError):
    """The acting user may not touch this record."""

    status_code = 403


class NotFoundError(BoulderLeagueError):
    """A climber, ascent, candidate or ballot is missing."""

    status_code = 404


class StateConflictError(BoulderLeagueError):
    """A concurrent mutation won the race. Retry the whole operation."""

    status_code = 409
