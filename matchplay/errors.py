class MatchPlayError(Exception):
    pass


class ValidationError(MatchPlayError):
    """Malformed or out-of-domain input: bad scores, self-matchups, unknown matchups."""


class ScheduleError(ValidationError):
    """The static matchup table does not form a complete round robin."""

    def __init__(self, message: str, problems: list[str] | None = None) -> None:
        super().__init__(message)
        self.problems = problems or []


class ConflictError(MatchPlayError):
    """A result already exists for the matchup."""


class NotFoundError(MatchPlayError):
    """No stored result has the requested id."""
