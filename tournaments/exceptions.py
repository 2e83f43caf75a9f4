"""Tournament error types."""


class TournamentError(Exception):
    """Base class for tournament engine errors."""


class TournamentValidationError(TournamentError, ValueError):
    """Raised when an operation would violate a tournament rule.

    The operation is aborted before any state changes, so the tournament
    stays exactly as it was.
    """


class TournamentNotFoundError(TournamentError, LookupError):
    """Raised when a tournament, round, match or debate link does not exist."""

    def __init__(self, entity: str, key: object):
        self.entity = entity
        self.key = key
        super().__init__(f"{entity} {key} not found")


class TournamentStateError(TournamentError):
    """Raised when persisted tournament state is inconsistent."""
