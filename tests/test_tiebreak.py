"""Tests for the ranking tiebreak chain."""

import logging
import random
from datetime import datetime, timedelta

import pytest

from tournaments.tiebreak import (
    ParticipantStanding,
    break_ties,
    rank_standings,
    select_advancing,
)

pytestmark = pytest.mark.unit


def ids(standings: list[ParticipantStanding]) -> list[int]:
    return [s.participant_id for s in standings]


def test_primary_score_orders_before_any_tiebreaker() -> None:
    """A higher score always ranks first, whatever the tiebreak fields say."""
    standings = [
        ParticipantStanding(1, score=40.0, match_won=True, elo_rating=2000),
        ParticipantStanding(2, score=90.0),
        ParticipantStanding(3, score=65.0),
    ]

    assert ids(rank_standings(standings, random.Random(1))) == [2, 3, 1]


def test_missing_scores_rank_last() -> None:
    standings = [
        ParticipantStanding(1, score=None, elo_rating=3000),
        ParticipantStanding(2, score=0.0),
    ]

    assert ids(rank_standings(standings)) == [2, 1]


def test_match_win_breaks_equal_scores() -> None:
    standings = [
        ParticipantStanding(1, score=70.0, match_won=False, elo_rating=1900),
        ParticipantStanding(2, score=70.0, match_won=True, elo_rating=1000),
    ]

    assert ids(break_ties(standings, random.Random(3))) == [2, 1]


def test_differential_then_rating_then_registration() -> None:
    now = datetime(2024, 1, 1, 12, 0, 0)
    standings = [
        ParticipantStanding(1, score=50.0, score_differential=5.0, elo_rating=1200,
                            registered_at=now),
        ParticipantStanding(2, score=50.0, score_differential=10.0, elo_rating=1100,
                            registered_at=now),
        ParticipantStanding(3, score=50.0, score_differential=5.0, elo_rating=1300,
                            registered_at=now),
        ParticipantStanding(4, score=50.0, score_differential=5.0, elo_rating=1200,
                            registered_at=now - timedelta(minutes=5)),
    ]

    assert ids(rank_standings(standings, random.Random(0))) == [2, 3, 4, 1]


def test_exhausted_tiebreakers_fall_back_to_random_with_warning(
    caplog: pytest.LogCaptureFixture,
) -> None:
    standings = [
        ParticipantStanding(1, score=50.0, elo_rating=1200),
        ParticipantStanding(2, score=50.0, elo_rating=1200),
    ]

    with caplog.at_level(logging.WARNING, logger="tournaments.tiebreak"):
        ranked = break_ties(standings, random.Random(11))

    assert sorted(ids(ranked)) == [1, 2]
    assert "random selection" in caplog.text


def test_random_fallback_is_reproducible_with_the_same_seed() -> None:
    standings = [ParticipantStanding(i, score=10.0) for i in range(1, 7)]

    first = ids(rank_standings(standings, random.Random(42)))
    second = ids(rank_standings(standings, random.Random(42)))

    assert first == second
    assert sorted(first) == [1, 2, 3, 4, 5, 6]


def test_random_fallback_follows_one_draw_per_participant() -> None:
    standings = [ParticipantStanding(i, score=10.0) for i in range(1, 9)]
    replay = random.Random(5)
    draws = {s.participant_id: replay.random() for s in standings}

    ranked = ids(break_ties(standings, random.Random(5)))

    assert ranked == sorted(draws, key=draws.__getitem__)


def test_random_fallback_only_orders_what_the_chain_leaves_tied() -> None:
    standings = [
        ParticipantStanding(1, score=10.0, elo_rating=1000),
        ParticipantStanding(2, score=10.0, elo_rating=1500),
        ParticipantStanding(3, score=10.0, elo_rating=1000),
        ParticipantStanding(4, score=10.0, elo_rating=1500),
    ]

    for seed in range(20):
        ranked = ids(break_ties(standings, random.Random(seed)))
        assert sorted(ranked[:2]) == [2, 4]
        assert sorted(ranked[2:]) == [1, 3]


def test_select_advancing_takes_top_of_ranking() -> None:
    standings = [
        ParticipantStanding(1, score=10.0),
        ParticipantStanding(2, score=30.0),
        ParticipantStanding(3, score=20.0),
    ]

    assert ids(select_advancing(standings, 2)) == [2, 3]
    assert select_advancing(standings, 0) == []
