"""Championship tournaments: PRO/CON sides with a score-based opening round."""

import asyncio

import pytest

from tournaments.exceptions import TournamentValidationError
from tournaments.manager import TournamentManager
from tournaments.models import (
    DebateOutcome,
    MatchStatus,
    ParticipantStatus,
    Position,
    RegistrationRequest,
    TournamentCreateRequest,
    TournamentFormat,
    TournamentStatus,
)

ALTERNATING = [Position.PRO, Position.CON] * 4


async def create_championship(manager: TournamentManager, size: int = 8) -> int:
    return await manager.create_tournament(
        TournamentCreateRequest(name="Championship", format=TournamentFormat.CHAMPIONSHIP,
                                max_participants=size)
    )


async def report_scores(manager: TournamentManager, tournament_id: int, round_number: int,
                        by_user: dict[str, int], scores: dict[str, float]) -> None:
    for match in manager.db.get_matches(tournament_id, round_number):
        match_scores = {
            pid: scores[user] for user, pid in by_user.items() if pid in match.entrants
        }
        await manager.handle_debate_outcome(
            DebateOutcome(debate_id=match.debate_id, scores=match_scores)
        )


@pytest.mark.integration
def test_eight_player_championship_advances_by_side_scores(
    make_manager, register_players, debate_service
) -> None:
    async def scenario():
        manager = make_manager()
        tournament_id = await create_championship(manager)
        players = await register_players(manager, tournament_id, 8, ALTERNATING)
        by_user = {p.user_id: p.id for p in players}
        await manager.start_tournament(tournament_id)

        opening = [
            sorted(m.entrants) for m in manager.db.get_matches(tournament_id, 1)
        ]
        assert opening == [
            sorted([by_user[f"user-{a}"], by_user[f"user-{b}"]])
            for a, b in ((1, 2), (3, 4), (5, 6), (7, 8))
        ]

        # user-5 loses to user-6 but still has the second best PRO score;
        # user-2 beats user-1 but only has the third best CON score
        await report_scores(manager, tournament_id, 1, by_user, {
            "user-1": 70, "user-2": 80, "user-3": 90, "user-4": 60,
            "user-5": 85, "user-6": 88, "user-7": 40, "user-8": 95,
        })
        round_two = [m.entrants for m in manager.db.get_matches(tournament_id, 2)]
        assert round_two == [
            [by_user["user-3"], by_user["user-8"]],
            [by_user["user-5"], by_user["user-6"]],
        ]

        await report_scores(manager, tournament_id, 2, by_user, {
            "user-3": 75, "user-8": 70, "user-5": 60, "user-6": 65,
        })
        final = manager.db.get_matches(tournament_id, 3)
        assert [m.entrants for m in final] == [[by_user["user-3"], by_user["user-6"]]]

        await manager.handle_debate_outcome(
            DebateOutcome(debate_id=final[0].debate_id, winner_id=by_user["user-6"])
        )
        return manager, tournament_id, by_user

    manager, tournament_id, by_user = asyncio.run(scenario())

    tournament = manager.get_tournament_status(tournament_id)
    participants = {p.user_id: p for p in manager.db.get_participants(tournament_id)}

    assert tournament.status == TournamentStatus.COMPLETED
    assert tournament.winner_participant_id == by_user["user-6"]
    assert tournament.current_round == tournament.total_rounds == 3
    assert participants["user-2"].status == ParticipantStatus.ELIMINATED
    assert participants["user-2"].elimination_round == 1
    assert participants["user-2"].wins == 1
    assert participants["user-5"].elimination_round == 2
    assert participants["user-3"].elimination_reason
    assert participants["user-6"].cumulative_score == pytest.approx(88 + 65)

    opening_request = debate_service.requests[0]
    assert [e.position for e in opening_request.participants] == [Position.PRO, Position.CON]


@pytest.mark.unit
def test_championship_registration_rules(make_manager, register_players) -> None:
    async def scenario():
        manager = make_manager()
        tournament_id = await create_championship(manager, 4)

        with pytest.raises(TournamentValidationError, match="position"):
            await manager.register_participant(
                tournament_id, RegistrationRequest(user_id="nobody", username="Nobody")
            )

        await register_players(manager, tournament_id, 2, [Position.PRO, Position.PRO])
        with pytest.raises(TournamentValidationError, match="PRO positions are taken"):
            await manager.register_participant(
                tournament_id,
                RegistrationRequest(user_id="extra", username="Extra",
                                    selected_position=Position.PRO),
            )

        with pytest.raises(TournamentValidationError, match="must be full"):
            await manager.start_tournament(tournament_id)

        await manager.register_participant(
            tournament_id,
            RegistrationRequest(user_id="con-1", username="Con 1", selected_position=Position.CON),
        )
        return manager, tournament_id

    manager, tournament_id = asyncio.run(scenario())

    positions = [p.selected_position for p in manager.db.get_participants(tournament_id)]
    assert positions == [Position.PRO, Position.PRO, Position.CON]


@pytest.mark.unit
def test_championship_needs_four_participants(make_manager) -> None:
    async def scenario():
        manager = make_manager()
        with pytest.raises(TournamentValidationError):
            await manager.create_tournament(
                TournamentCreateRequest(name="Tiny", format=TournamentFormat.CHAMPIONSHIP,
                                        max_participants=2)
            )

    asyncio.run(scenario())


@pytest.mark.integration
def test_level_opening_match_is_recorded_without_a_winner(make_manager, register_players) -> None:
    async def scenario():
        manager = make_manager()
        tournament_id = await create_championship(manager, 4)
        players = await register_players(manager, tournament_id, 4, ALTERNATING[:4])
        by_user = {p.user_id: p.id for p in players}
        await manager.start_tournament(tournament_id)

        level = await manager.handle_debate_outcome(DebateOutcome(
            debate_id=manager.db.get_matches(tournament_id, 1)[0].debate_id,
            scores={by_user["user-1"]: 70, by_user["user-2"]: 70},
        ))
        assert level.status == MatchStatus.COMPLETED
        assert level.winner_id is None

        await report_scores(manager, tournament_id, 1, by_user, {"user-3": 65, "user-4": 75})
        return manager, tournament_id, by_user

    manager, tournament_id, by_user = asyncio.run(scenario())

    participants = {p.user_id: p for p in manager.db.get_participants(tournament_id)}
    final = manager.db.get_matches(tournament_id, 2)
    assert [m.entrants for m in final] == [[by_user["user-1"], by_user["user-4"]]]
    assert (participants["user-1"].wins, participants["user-1"].losses) == (0, 0)
    assert (participants["user-2"].wins, participants["user-2"].losses) == (0, 0)
    assert participants["user-2"].status == ParticipantStatus.ELIMINATED


@pytest.mark.integration
def test_level_later_round_still_needs_a_winner(make_manager, register_players) -> None:
    async def scenario():
        manager = make_manager()
        tournament_id = await create_championship(manager, 4)
        players = await register_players(manager, tournament_id, 4, ALTERNATING[:4])
        by_user = {p.user_id: p.id for p in players}
        await manager.start_tournament(tournament_id)
        await report_scores(manager, tournament_id, 1, by_user, {
            "user-1": 80, "user-2": 70, "user-3": 60, "user-4": 75,
        })

        final = manager.db.get_matches(tournament_id, 2)[0]
        with pytest.raises(TournamentValidationError, match="ended level"):
            await manager.handle_debate_outcome(DebateOutcome(
                debate_id=final.debate_id, scores={pid: 50 for pid in final.entrants}
            ))
        return manager, final

    manager, final = asyncio.run(scenario())

    assert manager.db.get_match(final.id).status == MatchStatus.IN_PROGRESS


@pytest.mark.integration
def test_equal_side_scores_are_split_by_the_tiebreak_chain(
    make_manager, register_players
) -> None:
    async def scenario():
        manager = make_manager()
        tournament_id = await create_championship(manager)
        players = await register_players(manager, tournament_id, 8, ALTERNATING)
        by_user = {p.user_id: p.id for p in players}
        await manager.start_tournament(tournament_id)

        # Four PRO participants score 80. user-5 won its match; user-1 and
        # user-7 drew level; user-3 lost by 10. On the CON side user-2 and
        # user-8 drew level on 80 behind user-4.
        await report_scores(manager, tournament_id, 1, by_user, {
            "user-1": 80, "user-2": 80, "user-3": 80, "user-4": 90,
            "user-5": 80, "user-6": 60, "user-7": 80, "user-8": 80,
        })
        return manager, tournament_id, by_user

    manager, tournament_id, by_user = asyncio.run(scenario())

    participants = {p.user_id: p for p in manager.db.get_participants(tournament_id)}
    advancing = {u for u, p in participants.items() if p.is_active}
    round_two = [m.entrants for m in manager.db.get_matches(tournament_id, 2)]

    # Match won beats the draws, differential drops user-3, rating prefers
    # user-1 over user-7 and user-2 over user-8
    assert advancing == {"user-5", "user-1", "user-4", "user-2"}
    assert round_two == [
        [by_user["user-5"], by_user["user-4"]],
        [by_user["user-1"], by_user["user-2"]],
    ]
    assert participants["user-7"].elimination_reason.startswith("Did not rank")


@pytest.mark.integration
def test_sixteen_player_championship_advances_four_per_side(
    make_manager, register_players
) -> None:
    async def scenario():
        manager = make_manager()
        tournament_id = await create_championship(manager, 16)
        players = await register_players(manager, tournament_id, 16, ALTERNATING * 2)
        by_user = {p.user_id: p.id for p in players}
        await manager.start_tournament(tournament_id)

        opening = [m.entrants for m in manager.db.get_matches(tournament_id, 1)]
        assert opening == [
            [by_user[f"user-{2 * i - 1}"], by_user[f"user-{2 * i}"]] for i in range(1, 9)
        ]

        # Every CON participant outscores its opponent
        await report_scores(manager, tournament_id, 1, by_user,
                            {f"user-{n}": 3.0 * n for n in range(1, 17)})
        return manager, tournament_id, by_user

    manager, tournament_id, by_user = asyncio.run(scenario())

    active = [p for p in manager.db.get_participants(tournament_id) if p.is_active]
    round_two = [m.entrants for m in manager.db.get_matches(tournament_id, 2)]

    assert len([p for p in active if p.selected_position == Position.PRO]) == 4
    assert len([p for p in active if p.selected_position == Position.CON]) == 4
    assert round_two == [
        [by_user[f"user-{pro}"], by_user[f"user-{con}"]]
        for pro, con in ((15, 16), (13, 14), (11, 12), (9, 10))
    ]
    assert manager.get_tournament_status(tournament_id).total_rounds == 4
