"""King of the Hill tournaments and group-round judging."""

import asyncio
import logging
import random

import pytest

from conftest import FakeJudgePool
from judges.base import Judge, JudgePoolError
from judges.panel import NEUTRAL_SCORE, score_group_round, select_panel
from tournaments.manager import TournamentManager
from tournaments.models import (
    DebateOutcome,
    MatchKind,
    ParticipantStatus,
    TournamentCreateRequest,
    TournamentFormat,
    TournamentStatus,
)


async def create_koth(manager: TournamentManager, size: int = 8) -> int:
    return await manager.create_tournament(
        TournamentCreateRequest(name="Hill Climb", format=TournamentFormat.KING_OF_THE_HILL,
                                max_participants=size)
    )


def rating_scorer(ratings: dict[int, int]):
    """Each judge gives (rating - 1000) / 5, so 1500 scores 100 and 1150 scores 30."""

    def _score(judge: Judge, participant_id: int, text: str) -> float:
        return (ratings[participant_id] - 1000) / 5

    return _score


async def submit_everyone(manager: TournamentManager, tournament_id: int,
                          round_number: int, skip: tuple[int, ...] = ()) -> None:
    match = manager.db.get_matches(tournament_id, round_number)[0]
    submissions = {pid: f"Argument from {pid}" for pid in match.entrants if pid not in skip}
    await manager.handle_debate_outcome(
        DebateOutcome(debate_id=match.debate_id, submissions=submissions)
    )


@pytest.mark.integration
def test_eight_player_hill_runs_to_a_winner_takes_all_champion(
    make_manager, register_players, debate_service
) -> None:
    ratings: dict[int, int] = {}
    pool = FakeJudgePool(judge_count=4, scorer=rating_scorer(ratings))

    async def scenario():
        manager = make_manager(judge_pool=pool)
        tournament_id = await create_koth(manager)
        players = await register_players(manager, tournament_id, 8)
        ratings.update({p.id: p.elo_at_start for p in players})
        started = await manager.start_tournament(tournament_id)
        assert started.total_rounds == 5

        for round_number in range(1, 5):
            matches = manager.db.get_matches(tournament_id, round_number)
            assert [m.kind for m in matches] == [MatchKind.GROUP]
            await submit_everyone(manager, tournament_id, round_number)

        finals = manager.db.get_matches(tournament_id, 5)
        assert [m.kind for m in finals] == [MatchKind.HEAD_TO_HEAD]
        by_user = {p.user_id: p.id for p in players}
        assert sorted(finals[0].entrants) == sorted([by_user["user-1"], by_user["user-2"]])

        # The underdog takes the finals
        await manager.handle_debate_outcome(
            DebateOutcome(debate_id=finals[0].debate_id, winner_id=by_user["user-2"])
        )
        return manager, tournament_id, by_user

    manager, tournament_id, by_user = asyncio.run(scenario())

    tournament = manager.get_tournament_status(tournament_id)
    participants = {p.user_id: p for p in manager.db.get_participants(tournament_id)}
    eliminated_per_round = [
        len([p for p in participants.values() if p.elimination_round == r]) for r in range(1, 6)
    ]

    assert tournament.status == TournamentStatus.COMPLETED
    assert tournament.winner_participant_id == by_user["user-2"]
    assert tournament.current_round == tournament.total_rounds == 5
    assert eliminated_per_round == [2, 2, 1, 1, 1]

    # user-2 earned 270 a round over four group rounds, then collected the rest
    assert participants["user-1"].cumulative_score == pytest.approx(1200)
    assert participants["user-2"].cumulative_score == pytest.approx(1080 + 3660)
    rollup = tournament.tournament_metadata["winner_takes_all"]
    assert rollup["score_before_rollup"] == pytest.approx(1080)
    assert rollup["transferred_score"] == pytest.approx(3660)

    group_request = debate_service.requests[0]
    assert group_request.kind == MatchKind.GROUP
    assert group_request.rounds == 1
    assert all(entrant.position is None for entrant in group_request.participants)
    assert debate_service.requests[-1].rounds == 3


@pytest.mark.integration
def test_missing_submission_is_eliminated_before_the_cut(make_manager, register_players) -> None:
    ratings: dict[int, int] = {}
    pool = FakeJudgePool(scorer=rating_scorer(ratings))

    async def scenario():
        manager = make_manager(judge_pool=pool)
        tournament_id = await create_koth(manager)
        players = await register_players(manager, tournament_id, 8)
        ratings.update({p.id: p.elo_at_start for p in players})
        await manager.start_tournament(tournament_id)
        await submit_everyone(manager, tournament_id, 1, skip=(players[0].id,))
        return manager, tournament_id

    manager, tournament_id = asyncio.run(scenario())

    participants = {p.user_id: p for p in manager.db.get_participants(tournament_id)}
    eliminated = {u for u, p in participants.items() if p.status == ParticipantStatus.ELIMINATED}
    assert eliminated == {"user-1", "user-7", "user-8"}
    assert participants["user-1"].elimination_reason.startswith("Did not submit")
    assert participants["user-1"].cumulative_score == 0


@pytest.mark.integration
def test_duplicate_group_outcome_is_not_scored_twice(make_manager, register_players) -> None:
    pool = FakeJudgePool()

    async def scenario():
        manager = make_manager(judge_pool=pool)
        tournament_id = await create_koth(manager, 4)
        await register_players(manager, tournament_id, 4)
        await manager.start_tournament(tournament_id)
        await submit_everyone(manager, tournament_id, 1)
        await submit_everyone(manager, tournament_id, 1)
        return manager, tournament_id

    manager, tournament_id = asyncio.run(scenario())

    assert len(pool.calls) == 3
    assert len(manager.db.get_rounds(tournament_id)) == 2
    scores = [p.cumulative_score for p in manager.db.get_participants(tournament_id)]
    assert scores == [150.0] * 4


@pytest.mark.integration
def test_event_scores_are_used_without_a_judge_pool(make_manager, register_players) -> None:
    async def scenario():
        manager = make_manager()
        tournament_id = await create_koth(manager, 4)
        players = await register_players(manager, tournament_id, 4)
        await manager.start_tournament(tournament_id)
        match = manager.db.get_matches(tournament_id, 1)[0]
        scores = {p.id: 100.0 + i for i, p in enumerate(players)}
        await manager.handle_debate_outcome(DebateOutcome(debate_id=match.debate_id, scores=scores))
        return manager, tournament_id

    manager, tournament_id = asyncio.run(scenario())

    eliminated = [p.user_id for p in manager.db.get_participants(tournament_id)
                  if p.status == ParticipantStatus.ELIMINATED]
    assert eliminated == ["user-1"]


# =============================================================================
# JUDGE PANEL
# =============================================================================


@pytest.mark.unit
def test_panel_draws_three_distinct_judges() -> None:
    judges = [Judge(f"judge-{i}", f"Judge {i}") for i in range(6)]

    panel = select_panel(judges, 3, random.Random(2))

    assert len({j.judge_id for j in panel}) == 3


@pytest.mark.unit
def test_panel_with_too_few_judges(caplog: pytest.LogCaptureFixture) -> None:
    with pytest.raises(JudgePoolError):
        select_panel([], 3)

    with caplog.at_level(logging.WARNING, logger="judges.panel"):
        panel = select_panel([Judge("a", "A"), Judge("b", "B")], 3)
    assert len(panel) == 2
    assert "Only 2 judges available" in caplog.text


@pytest.mark.unit
def test_scores_are_clamped_and_failed_judges_count_as_neutral(
    caplog: pytest.LogCaptureFixture,
) -> None:
    pool = FakeJudgePool(
        judge_count=3,
        scorer=lambda judge, pid, text: 130.0 if pid == 1 else -5.0,
        failing=("judge-2",),
    )

    with caplog.at_level(logging.WARNING, logger="judges.panel"):
        scores, breakdown = asyncio.run(
            score_group_round(pool, "Topic", {1: "yes", 2: "no"}, 3, random.Random(0))
        )

    assert breakdown[1] == {"judge-0": 100.0, "judge-1": 100.0, "judge-2": NEUTRAL_SCORE}
    assert scores == {1: 250.0, 2: 50.0}
    assert "clamped" in caplog.text
    assert "judge-2 failed" in caplog.text


@pytest.mark.integration
def test_four_player_hill_cuts_one_per_round_before_the_finals(
    make_manager, register_players, debate_service
) -> None:
    async def scenario():
        manager = make_manager()
        tournament_id = await create_koth(manager, 4)
        players = await register_players(manager, tournament_id, 4)
        p1, p2, p3, p4 = (p.id for p in players)
        await manager.start_tournament(tournament_id)

        round_one = manager.db.get_matches(tournament_id, 1)[0]
        await manager.handle_debate_outcome(DebateOutcome(
            debate_id=round_one.debate_id, scores={p1: 250, p2: 180, p3: 300, p4: 90}
        ))
        round_two = manager.db.get_matches(tournament_id, 2)[0]
        assert sorted(round_two.entrants) == sorted([p1, p2, p3])
        assert round_two.kind == MatchKind.GROUP

        await manager.handle_debate_outcome(DebateOutcome(
            debate_id=round_two.debate_id, scores={p1: 200, p2: 120, p3: 240}
        ))
        return manager, tournament_id, (p1, p2, p3, p4)

    manager, tournament_id, (p1, p2, p3, p4) = asyncio.run(scenario())

    participants = {p.id: p for p in manager.db.get_participants(tournament_id)}
    finals = manager.db.get_matches(tournament_id, 3)

    assert participants[p4].elimination_round == 1
    assert participants[p2].elimination_round == 2
    assert [m.kind for m in finals] == [MatchKind.HEAD_TO_HEAD]
    assert sorted(finals[0].entrants) == sorted([p1, p3])
    assert finals[0].debate_rounds == 3
    assert debate_service.requests[-1].rounds == 3
    assert manager.get_tournament_status(tournament_id).total_rounds == 3
