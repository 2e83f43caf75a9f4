"""Base classes and interfaces for tournament formats."""

import logging
import random
from abc import ABC, abstractmethod
from dataclasses import dataclass, field

from ..exceptions import TournamentValidationError
from ..models import (
    MatchKind,
    MatchStatus,
    ParticipantStatus,
    RegistrationRequest,
    Tournament,
    TournamentMatch,
    TournamentParticipant,
)
from ..tiebreak import ParticipantStanding

logger = logging.getLogger(__name__)


@dataclass
class PlannedMatch:
    """A match produced by pairing, not yet persisted."""

    participant_ids: list[int]
    kind: MatchKind = MatchKind.HEAD_TO_HEAD
    debate_rounds: int = 3


@dataclass
class EliminationResult:
    """Outcome of applying a format's elimination policy to one round."""

    advancing: list[int]  # Ordered; the pairing source for the next round
    eliminated: dict[int, str] = field(default_factory=dict)  # id -> reason
    score_deltas: dict[int, float] = field(default_factory=dict)


@dataclass
class RoundContext:
    """Snapshot of a finished round handed to a format strategy."""

    tournament: Tournament
    participants: list[TournamentParticipant]
    round_number: int
    matches: list[TournamentMatch]
    rng: random.Random = field(default_factory=random.Random)

    @property
    def by_id(self) -> dict[int, TournamentParticipant]:
        return {p.id: p for p in self.participants if p.id is not None}

    def active_participants(self) -> list[TournamentParticipant]:
        return [p for p in self.participants if p.is_active]


def active_by_seed(
    participants: list[TournamentParticipant],
) -> list[TournamentParticipant]:
    """Active or registered participants ordered by seed ascending."""
    active = [p for p in participants if p.is_active]
    return sorted(
        active,
        key=lambda p: (
            p.current_seed if p.current_seed is not None else p.seed or 0,
            p.id or 0,
        ),
    )


def pair_consecutively(participant_ids: list[int], debate_rounds: int) -> list[PlannedMatch]:
    """Pair 1st vs 2nd, 3rd vs 4th, and so on."""
    return [
        PlannedMatch(
            participant_ids=[participant_ids[i], participant_ids[i + 1]],
            debate_rounds=debate_rounds,
        )
        for i in range(0, len(participant_ids) - 1, 2)
    ]


def is_power_of_two(n: int) -> bool:
    return n >= 2 and n & (n - 1) == 0


def match_score_deltas(matches: list[TournamentMatch]) -> dict[int, float]:
    """Score every entrant earned across the round's matches."""
    deltas: dict[int, float] = {}
    for match in matches:
        for participant_id, score in match.scores.items():
            deltas[participant_id] = deltas.get(participant_id, 0.0) + score
    return deltas


def head_to_head_standing(
    match: TournamentMatch, participant: TournamentParticipant
) -> ParticipantStanding:
    """Build a ranking entry for one side of a head-to-head match."""
    assert participant.id is not None
    score = match.scores.get(participant.id)
    opponent_id = match.opponent_of(participant.id)
    opponent_score = match.scores.get(opponent_id) if opponent_id else None

    differential = 0.0
    if score is not None and opponent_score is not None:
        differential = score - opponent_score

    return ParticipantStanding(
        participant_id=participant.id,
        score=score,
        score_differential=differential,
        match_won=match.winner_id == participant.id,
        elo_rating=participant.elo_at_start,
        registered_at=participant.registered_at,
    )


class TournamentFormatStrategy(ABC):
    """Capability interface implemented once per tournament format."""

    @property
    @abstractmethod
    def name(self) -> str:
        """Format name (matches ``TournamentFormat.value``)."""
        pass

    @property
    @abstractmethod
    def display_name(self) -> str:
        """Human-readable format name."""
        pass

    @property
    @abstractmethod
    def description(self) -> str:
        """Format description."""
        pass

    def __init__(self, match_debate_rounds: int = 3):
        self.match_debate_rounds = match_debate_rounds

    def get_min_participants(self) -> int:
        """Minimum number of participants required to start."""
        return 2

    def validate_registration(
        self,
        tournament: Tournament,
        participants: list[TournamentParticipant],
        request: RegistrationRequest,
    ) -> None:
        """Reject a registration this format cannot accept."""
        if request.selected_position is not None:
            logger.debug(
                f"Ignoring position {request.selected_position.value} for "
                f"{self.name} tournament {tournament.id}"
            )

    def validate_start(
        self, tournament: Tournament, participants: list[TournamentParticipant]
    ) -> None:
        """Raise ``TournamentValidationError`` if the tournament cannot start."""
        active = [p for p in participants if p.is_active]
        if len(active) < self.get_min_participants():
            raise TournamentValidationError(
                f"{self.display_name} tournament needs at least "
                f"{self.get_min_participants()} participants, has {len(active)}"
            )

    @abstractmethod
    def projected_total_rounds(
        self,
        tournament: Tournament,
        participants: list[TournamentParticipant],
        rounds_played: int,
    ) -> int:
        """Total rounds this tournament is expected to run."""
        pass

    @abstractmethod
    def pair_round(
        self,
        tournament: Tournament,
        participants: list[TournamentParticipant],
        round_number: int,
        advancing: list[int] | None = None,
    ) -> list[PlannedMatch]:
        """Produce the matches for a round.

        ``advancing`` is the ordered advancing set from the previous round's
        elimination, or None for round 1.
        """
        pass

    @abstractmethod
    def eliminate(self, context: RoundContext) -> EliminationResult:
        """Decide who leaves the tournament after a completed round."""
        pass

    def is_terminal(self, context: RoundContext) -> bool:
        """Whether completing this round ends the tournament."""
        total = self.projected_total_rounds(
            context.tournament, context.participants, context.round_number
        )
        return context.round_number >= total

    def requires_match_winner(self, round_number: int) -> bool:
        """Whether head-to-head matches in this round must name a winner."""
        return True

    def champion_adjustments(
        self, participants: list[TournamentParticipant], champion_id: int
    ) -> dict[int, float]:
        """Score adjustments applied once at completion."""
        return {}

    def eliminate_by_result(self, context: RoundContext) -> EliminationResult:
        """Standard win/loss elimination shared by the pairwise formats."""
        advancing: list[int] = []
        eliminated: dict[int, str] = {}

        for match in sorted(context.matches, key=lambda m: m.match_number):
            if match.status != MatchStatus.COMPLETED:
                raise TournamentValidationError(
                    f"Match {match.id} is not completed"
                )
            if match.winner_id is None:
                raise TournamentValidationError(
                    f"Match {match.id} completed without a winner"
                )
            advancing.append(match.winner_id)
            for participant_id in match.entrants:
                if participant_id != match.winner_id:
                    eliminated[participant_id] = (
                        f"Lost match {match.match_number} in round "
                        f"{context.round_number}"
                    )

        return EliminationResult(
            advancing=advancing,
            eliminated=eliminated,
            score_deltas=match_score_deltas(context.matches),
        )

    def standings_for_round(
        self, context: RoundContext
    ) -> list[ParticipantStanding]:
        """Ranking entries for every entrant of a head-to-head round."""
        by_id = context.by_id
        standings = []
        for match in context.matches:
            for participant_id in match.entrants:
                participant = by_id.get(participant_id)
                if participant is None or participant.status == ParticipantStatus.ELIMINATED:
                    continue
                standings.append(head_to_head_standing(match, participant))
        return standings
