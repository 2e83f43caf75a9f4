"""Ranking with the tiebreak chain used by score-based formats.

Participants are ordered by their primary score first. Only participants
whose primary scores are exactly equal are separated by the chain:

1. won their head-to-head match
2. larger score differential
3. higher rating at tournament start
4. earlier registration
5. random selection, logged as a warning
"""

import functools
import logging
import random
from dataclasses import dataclass
from datetime import datetime
from itertools import groupby

logger = logging.getLogger(__name__)


@dataclass
class ParticipantStanding:
    """Everything the ranking needs to know about one participant."""

    participant_id: int
    score: float | None  # None ranks below every real score
    score_differential: float = 0.0
    match_won: bool = False
    elo_rating: int = 0
    registered_at: datetime | None = None


def _primary_key(standing: ParticipantStanding) -> tuple[int, float]:
    if standing.score is None:
        return (1, 0.0)
    return (0, -standing.score)


def _compare(
    a: ParticipantStanding, b: ParticipantStanding, draws: dict[int, float]
) -> int:
    if a.match_won != b.match_won:
        return -1 if a.match_won else 1

    if a.score_differential != b.score_differential:
        return -1 if a.score_differential > b.score_differential else 1

    if a.elo_rating != b.elo_rating:
        return -1 if a.elo_rating > b.elo_rating else 1

    if a.registered_at and b.registered_at and a.registered_at != b.registered_at:
        return -1 if a.registered_at < b.registered_at else 1

    logger.warning(
        f"All tiebreakers exhausted for participants {a.participant_id} and "
        f"{b.participant_id}; using random selection"
    )
    first, second = draws[a.participant_id], draws[b.participant_id]
    if first == second:
        return -1 if a.participant_id < b.participant_id else 1
    return -1 if first < second else 1


def break_ties(
    tied: list[ParticipantStanding], rng: random.Random | None = None
) -> list[ParticipantStanding]:
    """Order a group of participants that share the same primary score."""
    if len(tied) <= 1:
        return list(tied)

    rng = rng or random.Random()
    # One draw per participant keeps the random fallback a total order
    draws = {standing.participant_id: rng.random() for standing in tied}
    return sorted(tied, key=functools.cmp_to_key(lambda a, b: _compare(a, b, draws)))


def rank_standings(
    standings: list[ParticipantStanding], rng: random.Random | None = None
) -> list[ParticipantStanding]:
    """Rank by primary score descending, breaking ties inside equal scores."""
    ranked: list[ParticipantStanding] = []
    ordered = sorted(standings, key=_primary_key)
    for _, group in groupby(ordered, key=_primary_key):
        ranked.extend(break_ties(list(group), rng))
    return ranked


def select_advancing(
    standings: list[ParticipantStanding],
    count: int,
    rng: random.Random | None = None,
) -> list[ParticipantStanding]:
    """Return the top ``count`` participants of a ranking."""
    if count <= 0:
        return []
    return rank_standings(standings, rng)[:count]
