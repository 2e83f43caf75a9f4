"""Tournament management and round advancement."""

import asyncio
import logging
import random
import sqlite3
from datetime import datetime
from typing import Awaitable, Callable

from config.settings import TournamentConfig
from judges.base import JudgePool
from judges.panel import score_group_round
from .database import TournamentDatabaseManager
from .debate_integration import DebateService
from .exceptions import (
    TournamentNotFoundError,
    TournamentStateError,
    TournamentValidationError,
)
from .formats import FormatRegistry, PlannedMatch, RoundContext, TournamentFormatStrategy
from .models import (
    BracketData,
    DebateEntrant,
    DebateOutcome,
    DebateRequest,
    MatchKind,
    MatchStatus,
    Position,
    ReseedMethod,
    RegistrationRequest,
    RoundProgress,
    RoundStatus,
    Tournament,
    TournamentCompletedEvent,
    TournamentCreateRequest,
    TournamentFormat,
    TournamentMatch,
    TournamentParticipant,
    TournamentRound,
    TournamentStatus,
    TournamentSummary,
)
from .notifications import (
    LoggingNotificationDispatcher,
    NotificationDispatcher,
    dispatch_completion_notifications,
)
from .seeding import assign_seeds, order_participants

logger = logging.getLogger(__name__)

CompletionHook = Callable[[TournamentCompletedEvent], Awaitable[None]]

# Default debate topics for tournament matches
DEFAULT_TOPICS = [
    "Technology companies should be broken up to prevent monopolies",
    "Universal basic income should be implemented globally",
    "Artificial intelligence development should be regulated by government",
    "Nuclear energy is essential for achieving carbon neutrality",
    "Social media platforms should be treated as public utilities",
    "Remote work will fundamentally improve society",
    "Privacy is more important than security in digital systems",
    "Education should be completely personalized using AI",
    "Scientific research should be completely open and unrestricted",
    "Healthcare should be a human right regardless of cost",
    "Competition is more effective than cooperation for human progress",
    "Meritocracy is achievable in modern society",
]


class TournamentManager:
    """Manages tournament creation, progression, and completion.

    Every entry point that can move a tournament forward takes the
    tournament's lock; the conditional updates in the database layer keep
    triggers from other processes from applying a transition twice.
    """

    def __init__(
        self,
        db_path: str | None = None,
        config: TournamentConfig | None = None,
        debate_service: DebateService | None = None,
        judge_pool: JudgePool | None = None,
        notifier: NotificationDispatcher | None = None,
        rng: random.Random | None = None,
    ):
        self.config = config or TournamentConfig()
        self.db = TournamentDatabaseManager(db_path or self.config.database_path)
        self.formats = FormatRegistry(
            match_debate_rounds=self.config.match_debate_rounds,
            finals_debate_rounds=self.config.finals_debate_rounds,
            elimination_fraction=self.config.elimination_fraction,
        )
        self.debate_service = debate_service
        self.judge_pool = judge_pool
        self.notifier = notifier or LoggingNotificationDispatcher()
        self.rng = rng or random.Random()
        self._completion_hooks: list[CompletionHook] = []
        self._locks: dict[int, asyncio.Lock] = {}

    def _lock(self, tournament_id: int) -> asyncio.Lock:
        if tournament_id not in self._locks:
            self._locks[tournament_id] = asyncio.Lock()
        return self._locks[tournament_id]

    def add_completion_hook(self, hook: CompletionHook) -> None:
        """Register a coroutine called once when a tournament completes."""
        self._completion_hooks.append(hook)

    # Lifecycle

    async def create_tournament(self, request: TournamentCreateRequest) -> int:
        """Create a tournament, registering the creator as seed 1 if given."""
        logger.info(f"Creating tournament: {request.name} ({request.format.value})")

        if not request.name.strip():
            raise TournamentValidationError("Tournament name must not be empty")
        if request.max_participants not in self.config.valid_sizes:
            raise TournamentValidationError(
                f"Tournament size must be one of {self.config.valid_sizes}, "
                f"got {request.max_participants}"
            )
        if request.round_duration_hours < 1:
            raise TournamentValidationError("round_duration_hours must be at least 1")

        strategy = self.formats.get_format(request.format)
        if request.max_participants < strategy.get_min_participants():
            raise TournamentValidationError(
                f"{strategy.display_name} needs at least "
                f"{strategy.get_min_participants()} participants"
            )

        tournament = Tournament(
            name=request.name,
            format=request.format,
            status=TournamentStatus.UPCOMING,
            max_participants=request.max_participants,
            reseed_after_round=request.reseed_after_round,
            reseed_method=request.reseed_method,
            round_duration_hours=request.round_duration_hours,
            tournament_metadata={},
        )
        if request.creator is not None:
            strategy.validate_registration(tournament, [], request.creator)

        tournament_id = self.db.create_tournament(tournament)

        if request.creator is not None:
            await self.register_participant(tournament_id, request.creator)

        return tournament_id

    async def register_participant(
        self, tournament_id: int, request: RegistrationRequest
    ) -> TournamentParticipant:
        """Register a user; seeds follow registration order."""
        async with self._lock(tournament_id):
            tournament = self._load_tournament(tournament_id)
            if tournament.status != TournamentStatus.UPCOMING:
                raise TournamentValidationError(
                    f"Tournament {tournament_id} is not open for registration"
                )

            participants = self.db.get_participants(tournament_id)
            if len(participants) >= tournament.max_participants:
                raise TournamentValidationError(f"Tournament {tournament_id} is full")
            if any(p.user_id == request.user_id for p in participants):
                raise TournamentValidationError(
                    f"User {request.user_id} is already registered"
                )

            strategy = self.formats.get_format(tournament.format)
            strategy.validate_registration(tournament, participants, request)

            seed = len(participants) + 1
            participant = TournamentParticipant(
                tournament_id=tournament_id,
                user_id=request.user_id,
                username=request.username,
                seed=seed,
                current_seed=seed,
                elo_at_start=request.elo_rating,
                selected_position=request.selected_position,
                registered_at=datetime.now(),
            )
            participant.id = self.db.add_participant(participant)
            logger.info(
                f"Registered {request.username} in tournament {tournament_id} as seed {seed}"
            )

            if (
                self.config.auto_start_when_full
                and seed == tournament.max_participants
            ):
                logger.info(f"Tournament {tournament_id} is full, starting automatically")
                await self._start_tournament(tournament_id)

            return participant

    async def start_tournament(self, tournament_id: int) -> Tournament:
        """Begin tournament execution by opening round 1."""
        async with self._lock(tournament_id):
            await self._start_tournament(tournament_id)
        return self.get_tournament_status(tournament_id)

    async def _start_tournament(self, tournament_id: int) -> None:
        tournament = self._load_tournament(tournament_id)
        if tournament.status != TournamentStatus.UPCOMING:
            raise TournamentValidationError(
                f"Tournament {tournament_id} has already started"
            )

        participants = self.db.get_participants(tournament_id)
        strategy = self.formats.get_format(tournament.format)
        strategy.validate_start(tournament, participants)
        planned = strategy.pair_round(tournament, participants, 1)

        if not self.db.mark_tournament_started(tournament_id):
            raise TournamentValidationError(
                f"Tournament {tournament_id} has already started"
            )

        first_round = self.db.get_or_create_round(tournament_id, 1)
        matches = await self._open_round(tournament, first_round, planned)
        logger.info(
            f"Started tournament {tournament_id} with {len(participants)} participants "
            f"and {len(matches)} matches"
        )

    async def advance_tournament(self, tournament_id: int) -> Tournament:
        """Re-drive advancement from the current round.

        Recovers a tournament whose round finished but whose next round was
        never opened, for example after a crash. A no-op otherwise.
        """
        async with self._lock(tournament_id):
            tournament = self._load_tournament(tournament_id)
            if tournament.status != TournamentStatus.IN_PROGRESS:
                raise TournamentValidationError(
                    f"Tournament {tournament_id} is not in progress"
                )
            await self._advance_rounds(tournament_id, tournament.current_round)
        return self.get_tournament_status(tournament_id)

    async def resume_pending_matches(self, tournament_id: int) -> int:
        """Request debates for scheduled matches that never got one."""
        async with self._lock(tournament_id):
            tournament = self._load_tournament(tournament_id)
            if tournament.status != TournamentStatus.IN_PROGRESS:
                return 0

            participants = self.db.get_participants(tournament_id)
            started = 0
            for match in self.db.get_matches(tournament_id, tournament.current_round):
                if match.status == MatchStatus.SCHEDULED and match.debate_id is None:
                    if await self._start_match_debate(tournament, match, participants):
                        started += 1

            logger.info(f"Resumed {started} pending matches in tournament {tournament_id}")
            return started

    def reseed_tournament(
        self, tournament_id: int, method: ReseedMethod | None = None
    ) -> list[TournamentParticipant]:
        """Reassign seeds of the remaining participants."""
        tournament = self._load_tournament(tournament_id)
        method = method or tournament.reseed_method
        participants = self.db.get_participants(tournament_id)

        ordered = order_participants(participants, method, self.rng)
        self.db.update_seeds(tournament_id, assign_seeds(ordered))
        logger.info(
            f"Reseeded {len(ordered)} participants of tournament {tournament_id} "
            f"by {method.value}"
        )
        return self.db.get_participants(tournament_id)

    # Outcomes and advancement

    async def handle_debate_outcome(self, outcome: DebateOutcome) -> TournamentMatch:
        """Record a resolved debate and advance the tournament as far as possible."""
        match = self.db.get_match_by_debate(outcome.debate_id)
        if match is None or match.id is None:
            raise TournamentNotFoundError("Debate", outcome.debate_id)

        async with self._lock(match.tournament_id):
            tournament = self._load_tournament(match.tournament_id)
            match = self._load_match(match.id)

            if tournament.status == TournamentStatus.COMPLETED:
                logger.warning(
                    f"Ignoring outcome for debate {outcome.debate_id}: "
                    f"tournament {tournament.id} is already completed"
                )
                return match

            if match.status == MatchStatus.COMPLETED:
                logger.info(
                    f"Match {match.id} already completed, ignoring duplicate outcome "
                    f"for debate {outcome.debate_id}"
                )
            else:
                scores, breakdown = await self._resolve_scores(match, outcome)
                winner_id = self._resolve_winner(
                    self.formats.get_format(tournament.format), match, outcome, scores
                )
                self.db.record_match_outcome(match.id, winner_id, scores, breakdown)

            await self._advance_rounds(match.tournament_id, match.round_number)
            return self._load_match(match.id)

    async def _resolve_scores(
        self, match: TournamentMatch, outcome: DebateOutcome
    ) -> tuple[dict[int, float], dict[int, dict[str, float]]]:
        if match.scores:
            logger.info(f"Reusing stored scores for match {match.id}")
            return match.scores, match.score_breakdown

        entrants = set(match.entrants)
        if outcome.scores:
            unknown = set(outcome.scores) - entrants
            if unknown:
                raise TournamentValidationError(
                    f"Scores for participants {sorted(unknown)} who are not in match {match.id}"
                )
            return dict(outcome.scores), dict(outcome.score_breakdown or {})

        if match.kind != MatchKind.GROUP:
            return {}, {}

        submissions = {
            pid: text
            for pid, text in (outcome.submissions or {}).items()
            if pid in entrants and text and text.strip()
        }
        if not submissions:
            logger.warning(f"Group match {match.id} finished without submissions")
            return {}, {}
        if self.judge_pool is None:
            logger.warning(
                f"No judge pool configured, group match {match.id} cannot be scored"
            )
            return {}, {}

        scores, breakdown = await score_group_round(
            self.judge_pool,
            match.topic or "",
            submissions,
            self.config.judges_per_round,
            self.rng,
        )
        assert match.id is not None
        self.db.save_match_scores(match.id, scores, breakdown)
        return scores, breakdown

    def _resolve_winner(
        self,
        strategy: TournamentFormatStrategy,
        match: TournamentMatch,
        outcome: DebateOutcome,
        scores: dict[int, float],
    ) -> int | None:
        if match.kind == MatchKind.GROUP:
            return None

        if outcome.winner_id is not None:
            if outcome.winner_id not in match.entrants:
                raise TournamentValidationError(
                    f"Winner {outcome.winner_id} is not in match {match.id}"
                )
            return outcome.winner_id

        entrants = match.entrants
        winner_required = strategy.requires_match_winner(match.round_number)
        if len(entrants) == 2 and all(pid in scores for pid in entrants):
            first, second = entrants
            if scores[first] == scores[second]:
                if not winner_required:
                    logger.info(
                        f"Match {match.id} ended level at {scores[first]:g}, "
                        f"recording it without a winner"
                    )
                    return None
                raise TournamentValidationError(
                    f"Match {match.id} ended level at {scores[first]:g} with no winner"
                )
            return first if scores[first] > scores[second] else second

        raise TournamentValidationError(f"Outcome for match {match.id} names no winner")

    async def _advance_rounds(self, tournament_id: int, round_number: int) -> None:
        """Advance round after round while each new round is already complete."""
        current: int | None = round_number
        depth = 0
        while current is not None:
            if depth >= self.config.max_cascade_depth:
                logger.error(
                    f"Tournament {tournament_id} advanced {depth} rounds in one trigger, "
                    f"stopping at round {current}"
                )
                raise TournamentStateError(
                    f"Round advancement of tournament {tournament_id} did not settle "
                    f"within {self.config.max_cascade_depth} rounds"
                )
            depth += 1
            current = await self._advance_round(tournament_id, current)

    async def _advance_round(self, tournament_id: int, round_number: int) -> int | None:
        """Complete one round and open the next.

        Returns the next round number when that round turned out to be
        complete already, otherwise None.
        """
        tournament = self._load_tournament(tournament_id)
        if tournament.status != TournamentStatus.IN_PROGRESS:
            return None

        round_ = self.db.get_round(tournament_id, round_number)
        if round_ is None or round_.id is None:
            raise TournamentNotFoundError("Round", (tournament_id, round_number))

        if round_.status == RoundStatus.COMPLETED:
            if self.db.get_round(tournament_id, round_number + 1) is not None:
                return None
            logger.warning(
                f"Round {round_number} of tournament {tournament_id} completed without a "
                f"successor, resuming advancement"
            )
        else:
            progress = self.db.get_round_progress(tournament_id, round_number)
            if progress is None or not progress.all_completed:
                return None
            if not self.db.complete_round(round_.id):
                logger.info(
                    f"Round {round_number} of tournament {tournament_id} was already "
                    f"advanced by another trigger"
                )
                return None
            logger.info(f"Round {round_number} of tournament {tournament_id} completed")

        strategy = self.formats.get_format(tournament.format)
        context = RoundContext(
            tournament=tournament,
            participants=self.db.get_participants(tournament_id),
            round_number=round_number,
            matches=self.db.get_matches(tournament_id, round_number),
            rng=self.rng,
        )
        terminal = strategy.is_terminal(context)
        advancing = self._apply_elimination(strategy, context, round_)

        if terminal or len(advancing) < 2:
            await self._complete_tournament(tournament, strategy, context.matches)
            return None

        if tournament.reseed_after_round:
            self.reseed_tournament(tournament_id, tournament.reseed_method)

        next_round = self.db.get_or_create_round(tournament_id, round_number + 1)
        participants = self.db.get_participants(tournament_id)
        planned = strategy.pair_round(
            tournament, participants, next_round.round_number, advancing
        )
        matches = await self._open_round(tournament, next_round, planned, participants)

        logger.info(
            f"Advanced tournament {tournament_id} to round {next_round.round_number}"
        )
        if matches and all(m.status == MatchStatus.COMPLETED for m in matches):
            return next_round.round_number
        return None

    def _apply_elimination(
        self,
        strategy: TournamentFormatStrategy,
        context: RoundContext,
        round_: TournamentRound,
    ) -> list[int]:
        """Apply the round's elimination once and return the advancing IDs."""
        assert round_.id is not None and context.tournament.id is not None
        result = strategy.eliminate(context)
        if self.db.apply_elimination(
            context.tournament.id, round_.id, context.round_number, result
        ):
            return result.advancing

        logger.info(
            f"Eliminations for round {context.round_number} of tournament "
            f"{context.tournament.id} were already applied"
        )
        active = {
            p.id for p in self.db.get_participants(context.tournament.id) if p.is_active
        }
        advancing = [pid for pid in result.advancing if pid in active]
        advancing.extend(sorted(active - set(advancing), key=lambda pid: pid or 0))
        return [pid for pid in advancing if pid is not None]

    async def _open_round(
        self,
        tournament: Tournament,
        round_: TournamentRound,
        planned: list[PlannedMatch],
        participants: list[TournamentParticipant] | None = None,
    ) -> list[TournamentMatch]:
        """Persist a round's matches (once) and request their debates."""
        assert tournament.id is not None and round_.id is not None
        if participants is None:
            participants = self.db.get_participants(tournament.id)

        matches = self.db.get_matches(tournament.id, round_.round_number)
        if matches:
            logger.info(
                f"Round {round_.round_number} of tournament {tournament.id} already has "
                f"{len(matches)} matches"
            )
        else:
            topics = self._generate_unique_topics(len(planned))
            try:
                for i, plan in enumerate(planned):
                    ids = plan.participant_ids
                    match = TournamentMatch(
                        tournament_id=tournament.id,
                        round_id=round_.id,
                        round_number=round_.round_number,
                        match_number=i + 1,
                        topic=topics[i],
                        kind=plan.kind,
                        participant1_id=ids[0],
                        participant2_id=ids[1] if len(ids) > 1 else None,
                        participant_ids=ids,
                        debate_rounds=plan.debate_rounds,
                    )
                    self.db.add_match(match)
            except sqlite3.IntegrityError:
                logger.info(
                    f"Matches for round {round_.round_number} of tournament "
                    f"{tournament.id} were created concurrently"
                )
            matches = self.db.get_matches(tournament.id, round_.round_number)

        self.db.mark_round_in_progress(round_.id)

        for match in matches:
            if match.status == MatchStatus.SCHEDULED and match.debate_id is None:
                await self._start_match_debate(tournament, match, participants)

        return self.db.get_matches(tournament.id, round_.round_number)

    async def _start_match_debate(
        self,
        tournament: Tournament,
        match: TournamentMatch,
        participants: list[TournamentParticipant],
    ) -> bool:
        """Start a debate for a tournament match."""
        if not self.debate_service:
            logger.warning("Debate service not available, cannot start match debates")
            return False

        if match.id is None:
            raise ValueError("Match retrieved from database missing required ID")

        by_id = {p.id: p for p in participants}
        entrants = []
        for index, participant_id in enumerate(match.entrants):
            participant = by_id.get(participant_id)
            if participant is None:
                raise TournamentNotFoundError("Participant", participant_id)
            entrants.append(
                DebateEntrant(
                    participant_id=participant_id,
                    user_id=participant.user_id,
                    username=participant.username,
                    position=self._debate_position(tournament, match, participant, index),
                )
            )

        request = DebateRequest(
            tournament_id=match.tournament_id,
            match_id=match.id,
            topic=match.topic or "",
            kind=match.kind,
            rounds=match.debate_rounds,
            round_duration_hours=tournament.round_duration_hours,
            participants=entrants,
        )

        try:
            debate_id = await self.debate_service.create_debate(request)
        except Exception as e:
            logger.error(f"Failed to start debate for match {match.id}: {e}")
            return False

        if not self.db.attach_debate(match.id, debate_id):
            logger.warning(f"Match {match.id} already has a debate, ignoring {debate_id}")
            return False

        logger.info(f"Started debate {debate_id} for match {match.id}")
        return True

    def _debate_position(
        self,
        tournament: Tournament,
        match: TournamentMatch,
        participant: TournamentParticipant,
        index: int,
    ) -> Position | None:
        if match.kind == MatchKind.GROUP:
            return None
        if tournament.format == TournamentFormat.CHAMPIONSHIP and participant.selected_position:
            return participant.selected_position
        return Position.PRO if index == 0 else Position.CON

    def _generate_unique_topics(self, num_topics: int) -> list[str]:
        """Generate unique topics for tournament matches."""
        topics = DEFAULT_TOPICS.copy()
        for i in range(num_topics - len(topics)):
            topics.append(f"Generated topic #{i + 1} for extended tournament")
        self.rng.shuffle(topics)
        return topics[:num_topics]

    # Completion

    async def _complete_tournament(
        self,
        tournament: Tournament,
        strategy: TournamentFormatStrategy,
        final_matches: list[TournamentMatch],
    ) -> bool:
        """Complete tournament and crown champion."""
        assert tournament.id is not None
        participants = self.db.get_participants(tournament.id)
        active = [p for p in participants if p.is_active]

        champion: TournamentParticipant | None = None
        if len(active) == 1:
            champion = active[0]
        else:
            winners = [m.winner_id for m in final_matches if m.winner_id is not None]
            if winners:
                logger.warning(
                    f"Tournament {tournament.id} ended with {len(active)} active "
                    f"participants, using the final match winner"
                )
                champion = next((p for p in participants if p.id == winners[-1]), None)

        if champion is None or champion.id is None:
            logger.error(f"Could not determine winner for tournament {tournament.id}")
            return False

        adjustments = strategy.champion_adjustments(participants, champion.id)
        metadata = {}
        if tournament.format == TournamentFormat.KING_OF_THE_HILL:
            metadata["winner_takes_all"] = {
                "champion_participant_id": champion.id,
                "score_before_rollup": champion.cumulative_score,
                "transferred_score": adjustments.get(champion.id, 0.0),
            }

        if not self.db.finalize_tournament(tournament.id, champion.id, adjustments, metadata):
            logger.info(f"Tournament {tournament.id} was already completed")
            return False

        logger.info(
            f"Tournament {tournament.id} completed, winner: {champion.username} "
            f"(participant {champion.id})"
        )

        event = TournamentCompletedEvent(
            tournament_id=tournament.id,
            champion_participant_id=champion.id,
            champion_user_id=champion.user_id,
        )
        for hook in self._completion_hooks:
            try:
                await hook(event)
            except Exception as e:
                logger.error(f"Completion hook failed for tournament {tournament.id}: {e}")

        completed = self.get_tournament_status(tournament.id)
        await dispatch_completion_notifications(
            self.notifier, completed, self.db.get_participants(tournament.id), champion
        )
        return True

    # Queries

    def _load_tournament(self, tournament_id: int) -> Tournament:
        tournament = self.db.get_tournament(tournament_id)
        if tournament is None:
            raise TournamentNotFoundError("Tournament", tournament_id)
        return tournament

    def _load_match(self, match_id: int) -> TournamentMatch:
        match = self.db.get_match(match_id)
        if match is None:
            raise TournamentNotFoundError("Match", match_id)
        return match

    def get_tournament_status(self, tournament_id: int) -> Tournament:
        """Get current tournament state with its projected round count."""
        tournament = self._load_tournament(tournament_id)
        strategy = self.formats.get_format(tournament.format)
        rounds_played = sum(
            1 for r in self.db.get_rounds(tournament_id) if r.eliminations_applied
        )
        tournament.total_rounds = strategy.projected_total_rounds(
            tournament, self.db.get_participants(tournament_id), rounds_played
        )
        return tournament

    def list_tournaments(
        self,
        limit: int | None = None,
        offset: int = 0,
        status: TournamentStatus | None = None,
    ) -> list[TournamentSummary]:
        return self.db.list_tournaments(limit=limit, offset=offset, status=status)

    def get_bracket_view(self, tournament_id: int) -> BracketData:
        """Get bracket visualization data."""
        return self.db.get_bracket_data(self.get_tournament_status(tournament_id))

    def get_round_progress(self, tournament_id: int, round_number: int) -> RoundProgress:
        self._load_tournament(tournament_id)
        progress = self.db.get_round_progress(tournament_id, round_number)
        if progress is None:
            raise TournamentNotFoundError("Round", (tournament_id, round_number))
        return progress

    def get_standings(self, tournament_id: int) -> list[TournamentParticipant]:
        """Participants ordered from best to worst placing."""
        self._load_tournament(tournament_id)
        participants = self.db.get_participants(tournament_id)
        return sorted(
            participants,
            key=lambda p: (
                0 if p.is_active else 1,
                -(p.elimination_round or 0),
                -p.wins,
                -p.cumulative_score,
                p.current_seed if p.current_seed is not None else p.seed or 0,
            ),
        )

    def delete_tournament(self, tournament_id: int) -> bool:
        self._locks.pop(tournament_id, None)
        return self.db.delete_tournament(tournament_id)
