"""Tournament system data models."""

from datetime import datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, Field


class TournamentFormat(Enum):
    """Competition formats supported by the advancement engine."""

    BRACKET = "bracket"  # Single elimination, win/loss
    CHAMPIONSHIP = "championship"  # PRO/CON groups, score-based first round
    KING_OF_THE_HILL = "king_of_the_hill"  # Group rounds, bottom 25% out


class TournamentStatus(Enum):
    """Tournament execution status."""

    UPCOMING = "upcoming"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"


class RoundStatus(Enum):
    """Round execution status."""

    UPCOMING = "upcoming"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"


class ParticipantStatus(Enum):
    """Participant standing within a tournament."""

    REGISTERED = "registered"
    ACTIVE = "active"
    ELIMINATED = "eliminated"


class MatchStatus(Enum):
    """Individual match status."""

    SCHEDULED = "scheduled"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"


class MatchKind(Enum):
    """Shape of the debate behind a match."""

    HEAD_TO_HEAD = "head_to_head"
    GROUP = "group"


class ReseedMethod(Enum):
    """How participants are re-ordered between rounds."""

    ELO_BASED = "elo_based"
    TOURNAMENT_WINS = "tournament_wins"
    RANDOM = "random"


class Position(Enum):
    """Championship side selected at registration."""

    PRO = "pro"
    CON = "con"


class RegistrationRequest(BaseModel):
    """Request to join a tournament."""

    user_id: str = Field(..., description="External user ID")
    username: str = Field(..., description="Display name")
    elo_rating: int = Field(default=1200, description="Rating at registration")
    selected_position: Position | None = Field(
        default=None, description="PRO or CON (championship only)"
    )


class TournamentCreateRequest(BaseModel):
    """Request to create a new tournament."""

    name: str = Field(..., description="Tournament name")
    format: TournamentFormat = Field(
        default=TournamentFormat.BRACKET, description="Competition format"
    )
    max_participants: int = Field(
        default=16, description="Tournament size (4, 8, 16, 32, 64)"
    )
    reseed_after_round: bool = Field(
        default=True, description="Reseed surviving participants after each round"
    )
    reseed_method: ReseedMethod = Field(
        default=ReseedMethod.ELO_BASED, description="Reseeding method"
    )
    round_duration_hours: int = Field(
        default=24, description="Time allowed per debate round in hours"
    )
    creator: RegistrationRequest | None = Field(
        default=None, description="Creator, registered automatically as seed 1"
    )


class TournamentParticipant(BaseModel):
    """Tournament participant."""

    id: int | None = None
    tournament_id: int
    user_id: str
    username: str
    seed: int | None = None
    current_seed: int | None = None
    elo_at_start: int = 1200
    status: ParticipantStatus = ParticipantStatus.REGISTERED
    wins: int = 0
    losses: int = 0
    cumulative_score: float = 0.0
    selected_position: Position | None = None
    registered_at: datetime | None = None
    eliminated_at: datetime | None = None
    elimination_round: int | None = None
    elimination_reason: str | None = None

    @property
    def is_active(self) -> bool:
        return self.status != ParticipantStatus.ELIMINATED


class TournamentRound(BaseModel):
    """One round of a tournament. Unique per (tournament_id, round_number)."""

    id: int | None = None
    tournament_id: int
    round_number: int
    status: RoundStatus = RoundStatus.UPCOMING
    start_date: datetime | None = None
    end_date: datetime | None = None
    eliminations_applied: bool = False


class TournamentMatch(BaseModel):
    """Individual tournament match, head-to-head or group."""

    id: int | None = None
    tournament_id: int
    round_id: int
    round_number: int
    match_number: int  # Creation order within the round
    topic: str | None = None
    kind: MatchKind = MatchKind.HEAD_TO_HEAD
    participant1_id: int
    participant2_id: int | None = None
    participant_ids: list[int] = Field(default_factory=list)
    winner_id: int | None = None
    status: MatchStatus = MatchStatus.SCHEDULED
    debate_id: str | None = None  # Links to the external debate subsystem
    debate_rounds: int = 3
    scores: dict[int, float] = Field(default_factory=dict)
    score_breakdown: dict[int, dict[str, float]] = Field(default_factory=dict)
    completed_at: datetime | None = None

    @property
    def entrants(self) -> list[int]:
        if self.participant_ids:
            return list(self.participant_ids)
        return [
            pid
            for pid in (self.participant1_id, self.participant2_id)
            if pid is not None
        ]

    def opponent_of(self, participant_id: int) -> int | None:
        """Return the other side of a head-to-head match."""
        if participant_id == self.participant1_id:
            return self.participant2_id
        if participant_id == self.participant2_id:
            return self.participant1_id
        return None


class Tournament(BaseModel):
    """Complete tournament information.

    ``current_round`` and ``total_rounds`` are not stored; they are derived
    from the round list and the format projection every time the tournament
    is read.
    """

    id: int | None = None
    name: str
    format: TournamentFormat
    status: TournamentStatus = TournamentStatus.UPCOMING
    max_participants: int
    reseed_after_round: bool = True
    reseed_method: ReseedMethod = ReseedMethod.ELO_BASED
    round_duration_hours: int = 24
    current_round: int = 0
    total_rounds: int = 0
    created_at: datetime | None = None
    started_at: datetime | None = None
    end_date: datetime | None = None
    winner_participant_id: int | None = None
    tournament_metadata: dict[str, Any] | None = None


class DebateOutcome(BaseModel):
    """Resolved-outcome event emitted by the debate subsystem."""

    debate_id: str
    winner_id: int | None = Field(
        default=None, description="Winning participant ID (head-to-head)"
    )
    scores: dict[int, float] | None = Field(
        default=None, description="Per-participant score for the debate"
    )
    score_breakdown: dict[int, dict[str, float]] | None = Field(
        default=None, description="Per-participant, per-judge scores"
    )
    submissions: dict[int, str] | None = Field(
        default=None, description="Submitted text per participant (group rounds)"
    )


class DebateEntrant(BaseModel):
    """A participant as presented to the debate subsystem."""

    participant_id: int
    user_id: str
    username: str
    position: Position | None = None


class DebateRequest(BaseModel):
    """Payload sent to the debate subsystem to create a match debate."""

    tournament_id: int
    match_id: int
    topic: str
    kind: MatchKind
    rounds: int
    round_duration_hours: int
    participants: list[DebateEntrant]


class TournamentCompletedEvent(BaseModel):
    """Emitted once when a tournament completes."""

    tournament_id: int
    champion_participant_id: int | None = None
    champion_user_id: str | None = None
    completed_at: datetime = Field(default_factory=datetime.now)


class BracketData(BaseModel):
    """Tournament bracket visualization data."""

    tournament: Tournament
    participants: list[TournamentParticipant]
    rounds: list[TournamentRound]
    matches: list[TournamentMatch]


class TournamentSummary(BaseModel):
    """Tournament summary for listing."""

    id: int
    name: str
    format: TournamentFormat
    status: TournamentStatus
    max_participants: int
    participant_count: int
    current_round: int
    created_at: datetime
    winner_participant_id: int | None = None


class RoundProgress(BaseModel):
    """Status of all matches in a round."""

    round_number: int
    status: RoundStatus
    total_matches: int
    completed_matches: int
    scheduled_matches: int
    in_progress_matches: int
    all_completed: bool
