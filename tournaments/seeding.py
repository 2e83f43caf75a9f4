"""Participant seeding and reseeding."""

import logging
import random

from .models import ParticipantStatus, ReseedMethod, TournamentParticipant

logger = logging.getLogger(__name__)


def seeding_snapshot(
    participants: list[TournamentParticipant],
) -> list[TournamentParticipant]:
    """Active and registered participants in their current seed order."""
    candidates = [
        p
        for p in participants
        if p.status in (ParticipantStatus.ACTIVE, ParticipantStatus.REGISTERED)
    ]
    return sorted(
        candidates,
        key=lambda p: (
            p.current_seed if p.current_seed is not None else p.seed or 0,
            p.id or 0,
        ),
    )


def order_participants(
    participants: list[TournamentParticipant],
    method: ReseedMethod,
    rng: random.Random | None = None,
) -> list[TournamentParticipant]:
    """Order a participant snapshot by the given reseed method.

    ELO_BASED and TOURNAMENT_WINS are stable sorts over the snapshot, so
    calling them twice yields the same order. RANDOM may reorder every time.
    """
    snapshot = seeding_snapshot(participants)

    if method == ReseedMethod.ELO_BASED:
        return sorted(snapshot, key=lambda p: -p.elo_at_start)

    if method == ReseedMethod.TOURNAMENT_WINS:
        return sorted(snapshot, key=lambda p: (-p.wins, -p.elo_at_start))

    if method == ReseedMethod.RANDOM:
        shuffled = list(snapshot)
        (rng or random.Random()).shuffle(shuffled)
        return shuffled

    raise ValueError(f"Unknown reseed method: {method}")


def assign_seeds(ordered: list[TournamentParticipant]) -> dict[int, int]:
    """Map participant ID to its 1-indexed seed."""
    seeds: dict[int, int] = {}
    for index, participant in enumerate(ordered):
        if participant.id is None:
            raise ValueError("Cannot seed a participant without an ID")
        seeds[participant.id] = index + 1
    return seeds
