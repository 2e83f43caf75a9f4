"""Tournament advancement engine for debate competitions."""

from .manager import TournamentManager
from .database import TournamentDatabaseManager
from .api import TournamentAPI
from .debate_integration import (
    DebateService,
    HttpDebateService,
    TournamentDebateCallback,
    create_debate_service,
)
from .exceptions import (
    TournamentError,
    TournamentNotFoundError,
    TournamentStateError,
    TournamentValidationError,
)
from .notifications import LoggingNotificationDispatcher, NotificationDispatcher
from .models import (
    BracketData,
    DebateOutcome,
    MatchKind,
    MatchStatus,
    ParticipantStatus,
    Position,
    RegistrationRequest,
    ReseedMethod,
    RoundStatus,
    Tournament,
    TournamentCompletedEvent,
    TournamentCreateRequest,
    TournamentFormat,
    TournamentMatch,
    TournamentParticipant,
    TournamentStatus,
    TournamentSummary,
)

__all__ = [
    "TournamentManager",
    "TournamentDatabaseManager",
    "TournamentAPI",
    "DebateService",
    "HttpDebateService",
    "TournamentDebateCallback",
    "create_debate_service",
    "TournamentError",
    "TournamentNotFoundError",
    "TournamentStateError",
    "TournamentValidationError",
    "LoggingNotificationDispatcher",
    "NotificationDispatcher",
    "BracketData",
    "DebateOutcome",
    "MatchKind",
    "MatchStatus",
    "ParticipantStatus",
    "Position",
    "RegistrationRequest",
    "ReseedMethod",
    "RoundStatus",
    "Tournament",
    "TournamentCompletedEvent",
    "TournamentCreateRequest",
    "TournamentFormat",
    "TournamentMatch",
    "TournamentParticipant",
    "TournamentStatus",
    "TournamentSummary",
]
