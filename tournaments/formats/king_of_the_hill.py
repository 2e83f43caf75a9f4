"""King of the Hill format.

Every active participant argues the same topic in one group debate per
round. A judge panel scores each submission and the bottom quarter of the
field (at least one participant) is eliminated. Once two participants are
left they meet in a classic best-of-3 head-to-head finals.
"""

import logging
import math

from ..exceptions import TournamentValidationError
from ..models import MatchKind, Tournament, TournamentParticipant
from ..tiebreak import ParticipantStanding, rank_standings
from .base import (
    EliminationResult,
    PlannedMatch,
    RoundContext,
    TournamentFormatStrategy,
    active_by_seed,
)

logger = logging.getLogger(__name__)


def elimination_count(active_count: int, fraction: float = 0.25) -> int:
    """How many participants a group round removes."""
    return max(1, math.ceil(active_count * fraction))


def remaining_rounds(active_count: int, fraction: float = 0.25) -> int:
    """Group rounds still needed to reach two participants, plus the finals."""
    if active_count <= 1:
        return 0
    rounds = 0
    while active_count > 2:
        active_count -= elimination_count(active_count, fraction)
        rounds += 1
    return rounds + 1


class KingOfTheHillFormat(TournamentFormatStrategy):
    """Free-for-all rounds with bottom-quarter elimination and a finals."""

    def __init__(
        self,
        match_debate_rounds: int = 3,
        elimination_fraction: float = 0.25,
        finals_debate_rounds: int = 3,
    ):
        super().__init__(match_debate_rounds)
        self.elimination_fraction = elimination_fraction
        self.finals_debate_rounds = finals_debate_rounds

    @property
    def name(self) -> str:
        return "king_of_the_hill"

    @property
    def display_name(self) -> str:
        return "King of the Hill"

    @property
    def description(self) -> str:
        return (
            "All participants debate the same topic at once; the lowest scorers "
            "are eliminated each round until two meet in the finals"
        )

    def projected_total_rounds(
        self,
        tournament: Tournament,
        participants: list[TournamentParticipant],
        rounds_played: int,
    ) -> int:
        active = len([p for p in participants if p.is_active])
        return rounds_played + remaining_rounds(active, self.elimination_fraction)

    def pair_round(
        self,
        tournament: Tournament,
        participants: list[TournamentParticipant],
        round_number: int,
        advancing: list[int] | None = None,
    ) -> list[PlannedMatch]:
        active = active_by_seed(participants)
        if advancing is not None:
            keep = set(advancing)
            active = [p for p in active if p.id in keep]

        if len(active) < 2:
            raise TournamentValidationError(
                "Not enough active participants for King of the Hill round"
            )

        ids = [p.id for p in active if p.id is not None]
        if len(ids) == 2:
            logger.info(
                f"Tournament {tournament.id} round {round_number} is the finals"
            )
            return [
                PlannedMatch(
                    participant_ids=ids,
                    kind=MatchKind.HEAD_TO_HEAD,
                    debate_rounds=self.finals_debate_rounds,
                )
            ]

        return [PlannedMatch(participant_ids=ids, kind=MatchKind.GROUP, debate_rounds=1)]

    def is_terminal(self, context: RoundContext) -> bool:
        return any(m.kind == MatchKind.HEAD_TO_HEAD for m in context.matches)

    def eliminate(self, context: RoundContext) -> EliminationResult:
        if self.is_terminal(context):
            result = self.eliminate_by_result(context)
            for participant_id in result.eliminated:
                result.eliminated[participant_id] = "Lost the finals"
            return result
        return self._eliminate_group_round(context)

    def _eliminate_group_round(self, context: RoundContext) -> EliminationResult:
        by_id = context.by_id
        scores: dict[int, float] = {}
        entrants: list[int] = []
        for match in context.matches:
            for participant_id in match.entrants:
                participant = by_id.get(participant_id)
                if participant is None or not participant.is_active:
                    continue
                entrants.append(participant_id)
                if participant_id in match.scores:
                    scores[participant_id] = match.scores[participant_id]

        eliminated: dict[int, str] = {}
        if scores:
            for participant_id in entrants:
                if participant_id not in scores:
                    eliminated[participant_id] = (
                        "Did not submit an argument for this round"
                    )
            scored = [pid for pid in entrants if pid in scores]
        else:
            logger.warning(
                f"No scores recorded for round {context.round_number} of "
                f"tournament {context.tournament.id}; ranking everyone at 0"
            )
            scores = {pid: 0.0 for pid in entrants}
            scored = list(entrants)

        mean = sum(scores[pid] for pid in scored) / len(scored) if scored else 0.0
        standings = [
            ParticipantStanding(
                participant_id=pid,
                score=scores[pid],
                score_differential=scores[pid] - mean,
                elo_rating=by_id[pid].elo_at_start,
                registered_at=by_id[pid].registered_at,
            )
            for pid in scored
        ]
        ranked = rank_standings(standings, context.rng)

        cut = elimination_count(len(ranked), self.elimination_fraction)
        cut = min(cut, max(len(ranked) - 1, 0))
        survivors = ranked[: len(ranked) - cut]
        dropped = ranked[len(ranked) - cut :]

        for rank, standing in enumerate(dropped, start=len(survivors) + 1):
            eliminated[standing.participant_id] = (
                f"Ranked {rank} of {len(ranked)} with a round score of "
                f"{standing.score:g}"
            )

        logger.info(
            f"King of the Hill round {context.round_number}: {len(ranked)} scored, "
            f"eliminating {len(eliminated)} ({cut} by score), "
            f"{len(survivors)} remain"
        )

        return EliminationResult(
            advancing=[s.participant_id for s in survivors],
            eliminated=eliminated,
            score_deltas={pid: scores[pid] for pid in scored},
        )

    def champion_adjustments(
        self, participants: list[TournamentParticipant], champion_id: int
    ) -> dict[int, float]:
        """Winner takes all: the champion collects every eliminated score."""
        pot = sum(
            p.cumulative_score
            for p in participants
            if not p.is_active and p.id != champion_id
        )
        return {champion_id: pot} if pot else {}
