"""Single-elimination bracket format."""

import math

from ..exceptions import TournamentValidationError
from ..models import Tournament, TournamentParticipant
from .base import (
    EliminationResult,
    PlannedMatch,
    RoundContext,
    TournamentFormatStrategy,
    active_by_seed,
    is_power_of_two,
    pair_consecutively,
)


class BracketFormat(TournamentFormatStrategy):
    """Classic seeded bracket: seed 1 meets seed N, winners advance."""

    @property
    def name(self) -> str:
        return "bracket"

    @property
    def display_name(self) -> str:
        return "Bracket"

    @property
    def description(self) -> str:
        return "Seeded single elimination where each match winner advances and the loser is out"

    def validate_start(
        self, tournament: Tournament, participants: list[TournamentParticipant]
    ) -> None:
        super().validate_start(tournament, participants)
        count = len([p for p in participants if p.is_active])
        if not is_power_of_two(count):
            raise TournamentValidationError(
                f"Bracket tournament needs a power-of-two participant count, has {count}"
            )

    def projected_total_rounds(
        self,
        tournament: Tournament,
        participants: list[TournamentParticipant],
        rounds_played: int,
    ) -> int:
        # Participants are never deleted, so the full list is the starting field.
        field_size = len(participants) or tournament.max_participants
        return max(1, math.ceil(math.log2(max(field_size, 2))))

    def pair_round(
        self,
        tournament: Tournament,
        participants: list[TournamentParticipant],
        round_number: int,
        advancing: list[int] | None = None,
    ) -> list[PlannedMatch]:
        if round_number == 1 or advancing is None:
            return self._pair_by_seed(participants)

        if len(advancing) < 2:
            raise TournamentValidationError(
                f"Not enough winners to pair round {round_number}"
            )
        return pair_consecutively(advancing, self.match_debate_rounds)

    def _pair_by_seed(
        self, participants: list[TournamentParticipant]
    ) -> list[PlannedMatch]:
        """Seed 1 vs seed N, seed 2 vs seed N-1, and so on."""
        seeded = active_by_seed(participants)
        n = len(seeded)
        if n < 2:
            raise TournamentValidationError(
                "Not enough active participants to generate matches"
            )
        if n % 2 != 0:
            raise TournamentValidationError(
                f"Bracket pairing needs an even participant count, has {n}"
            )

        pairs = []
        for i in range(n // 2):
            high, low = seeded[i], seeded[n - 1 - i]
            assert high.id is not None and low.id is not None
            pairs.append(
                PlannedMatch(
                    participant_ids=[high.id, low.id],
                    debate_rounds=self.match_debate_rounds,
                )
            )
        return pairs

    def eliminate(self, context: RoundContext) -> EliminationResult:
        return self.eliminate_by_result(context)
