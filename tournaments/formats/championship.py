"""Championship format: PRO/CON groups with score-based first round.

Round 1 pairs every PRO participant against the CON participant of the
same seed. Advancement out of round 1 ignores who won the match: each side
is ranked by its own debate scores and the top quarter of the field from
each side goes through, which keeps the sides balanced. Later rounds are
decided by match result on the narrowed bracket.
"""

import logging
import math

from ..exceptions import TournamentValidationError
from ..models import (
    Position,
    RegistrationRequest,
    Tournament,
    TournamentParticipant,
)
from ..tiebreak import select_advancing
from .base import (
    EliminationResult,
    PlannedMatch,
    RoundContext,
    TournamentFormatStrategy,
    active_by_seed,
    match_score_deltas,
    pair_consecutively,
)

logger = logging.getLogger(__name__)


def split_by_position(
    participants: list[TournamentParticipant],
) -> tuple[list[TournamentParticipant], list[TournamentParticipant]]:
    pro = [p for p in participants if p.selected_position == Position.PRO]
    con = [p for p in participants if p.selected_position == Position.CON]
    return pro, con


class ChampionshipFormat(TournamentFormatStrategy):
    """Balanced PRO/CON tournament with score-based opening round."""

    @property
    def name(self) -> str:
        return "championship"

    @property
    def display_name(self) -> str:
        return "Championship"

    @property
    def description(self) -> str:
        return (
            "PRO and CON sides debate head-to-head; the best scorers from each "
            "side advance after round 1, then winners advance"
        )

    def get_min_participants(self) -> int:
        return 4

    def validate_registration(
        self,
        tournament: Tournament,
        participants: list[TournamentParticipant],
        request: RegistrationRequest,
    ) -> None:
        if request.selected_position is None:
            raise TournamentValidationError(
                "Championship format requires selecting a position (PRO or CON)"
            )

        per_side = tournament.max_participants // 2
        taken = len(
            [p for p in participants if p.selected_position == request.selected_position]
        )
        if taken >= per_side:
            raise TournamentValidationError(
                f"All {per_side} {request.selected_position.value.upper()} "
                f"positions are taken"
            )

    def validate_start(
        self, tournament: Tournament, participants: list[TournamentParticipant]
    ) -> None:
        super().validate_start(tournament, participants)
        active = [p for p in participants if p.is_active]
        if len(active) != tournament.max_participants:
            raise TournamentValidationError(
                f"Championship tournament must be full to start "
                f"({len(active)}/{tournament.max_participants})"
            )

        pro, con = split_by_position(active)
        per_side = tournament.max_participants // 2
        if len(pro) != per_side or len(con) != per_side:
            raise TournamentValidationError(
                f"Championship needs {per_side} PRO and {per_side} CON participants, "
                f"has {len(pro)} PRO and {len(con)} CON"
            )

    def projected_total_rounds(
        self,
        tournament: Tournament,
        participants: list[TournamentParticipant],
        rounds_played: int,
    ) -> int:
        return max(1, int(math.log2(tournament.max_participants)))

    def pair_round(
        self,
        tournament: Tournament,
        participants: list[TournamentParticipant],
        round_number: int,
        advancing: list[int] | None = None,
    ) -> list[PlannedMatch]:
        if round_number == 1 or advancing is None:
            return self._pair_opening_round(participants)

        by_id = {p.id: p for p in participants}
        ordered = [by_id[pid] for pid in advancing if pid in by_id]
        if len(ordered) < 2:
            raise TournamentValidationError(
                f"Not enough advancing participants to pair round {round_number}"
            )

        pro, con = split_by_position(ordered)
        total = self.projected_total_rounds(tournament, participants, round_number)

        if round_number >= total:
            if len(pro) == 1 and len(con) == 1:
                return [self._planned(pro[0], con[0])]
            logger.warning(
                f"Championship final for tournament {tournament.id} has "
                f"{len(pro)} PRO and {len(con)} CON finalists; pairing in advancing order"
            )
            return pair_consecutively([p.id for p in ordered], self.match_debate_rounds)

        if len(pro) == len(con):
            return [self._planned(p, c) for p, c in zip(pro, con)]

        logger.info(
            f"Round {round_number} of tournament {tournament.id} is unbalanced "
            f"({len(pro)} PRO, {len(con)} CON); pairing in advancing order"
        )
        return pair_consecutively([p.id for p in ordered], self.match_debate_rounds)

    def _pair_opening_round(
        self, participants: list[TournamentParticipant]
    ) -> list[PlannedMatch]:
        pro, con = split_by_position(active_by_seed(participants))
        if len(pro) != len(con):
            raise TournamentValidationError(
                f"Unbalanced positions: {len(pro)} PRO vs {len(con)} CON"
            )
        if not pro:
            raise TournamentValidationError(
                "Not enough active participants to generate matches"
            )
        return [self._planned(p, c) for p, c in zip(pro, con)]

    def _planned(
        self, pro: TournamentParticipant, con: TournamentParticipant
    ) -> PlannedMatch:
        assert pro.id is not None and con.id is not None
        return PlannedMatch(
            participant_ids=[pro.id, con.id], debate_rounds=self.match_debate_rounds
        )

    def requires_match_winner(self, round_number: int) -> bool:
        # Round 1 advances on side scores, so a level match is a valid result
        return round_number != 1

    def eliminate(self, context: RoundContext) -> EliminationResult:
        if context.round_number != 1:
            return self.eliminate_by_result(context)
        return self._eliminate_by_score(context)

    def _eliminate_by_score(self, context: RoundContext) -> EliminationResult:
        """Top floor(max/4) from each position group advance."""
        advance_count = context.tournament.max_participants // 4
        standings = {s.participant_id: s for s in self.standings_for_round(context)}
        by_id = context.by_id

        advancing: list[int] = []
        for position in (Position.PRO, Position.CON):
            group = [
                standing
                for pid, standing in standings.items()
                if by_id[pid].selected_position == position
            ]
            top = select_advancing(group, advance_count, context.rng)
            advancing.extend(s.participant_id for s in top)
            logger.info(
                f"Championship round 1: {len(top)}/{len(group)} {position.value.upper()} "
                f"participants advance"
            )

        eliminated = {}
        advancing_set = set(advancing)
        for pid, standing in standings.items():
            if pid in advancing_set:
                continue
            position = by_id[pid].selected_position
            side = position.value.upper() if position else "unassigned"
            score = "no score" if standing.score is None else f"score {standing.score:g}"
            eliminated[pid] = (
                f"Did not rank in the top {advance_count} {side} scores ({score})"
            )

        return EliminationResult(
            advancing=advancing,
            eliminated=eliminated,
            score_deltas=match_score_deltas(context.matches),
        )
