"""Tournament database operations."""

import json
import logging
import sqlite3
from contextlib import contextmanager
from datetime import datetime
from pathlib import Path
from typing import Any, Iterator

from .exceptions import TournamentNotFoundError
from .formats.base import EliminationResult
from .models import (
    BracketData,
    MatchKind,
    MatchStatus,
    ParticipantStatus,
    Position,
    ReseedMethod,
    RoundProgress,
    RoundStatus,
    Tournament,
    TournamentFormat,
    TournamentMatch,
    TournamentParticipant,
    TournamentRound,
    TournamentStatus,
    TournamentSummary,
)
from .schema import SchemaManager

logger = logging.getLogger(__name__)


def _now() -> str:
    return datetime.now().isoformat()


class TournamentDatabaseManager:
    """Manages SQLite database operations for tournaments.

    Every status transition is a conditional update: the caller learns from
    the return value whether *it* performed the transition, which is what
    makes overlapping advancement triggers safe.
    """

    def __init__(self, db_path: str = "tournaments.db"):
        self.db_path = Path(db_path)
        self.schema_manager = SchemaManager()
        self._init_database()

    def _init_database(self) -> None:
        if not self.schema_manager.validate_schema_files():
            raise RuntimeError("Tournament schema validation failed - missing schema files")

        with self._get_connection() as conn:
            self.schema_manager.initialize_database_schema(conn.cursor())
            conn.commit()
            logger.info(f"Tournament database initialized at {self.db_path}")

    @contextmanager
    def _get_connection(self) -> Iterator[sqlite3.Connection]:
        """Get a database connection with proper error handling."""
        conn = None
        try:
            conn = sqlite3.connect(self.db_path, timeout=30.0)
            conn.row_factory = sqlite3.Row  # Enable column access by name
            conn.execute("PRAGMA foreign_keys = ON")
            yield conn
        except sqlite3.Error as e:
            if conn:
                conn.rollback()
            logger.error(f"Tournament database error: {e}")
            raise
        finally:
            if conn:
                conn.close()

    # Tournaments

    def create_tournament(self, tournament: Tournament) -> int:
        """Create a new tournament and return its ID."""
        with self._get_connection() as conn:
            cursor = conn.cursor()

            cursor.execute(
                """
                INSERT INTO tournaments (
                    name, format, status, max_participants, reseed_after_round,
                    reseed_method, round_duration_hours, created_at, tournament_metadata
                ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    tournament.name,
                    tournament.format.value,
                    tournament.status.value,
                    tournament.max_participants,
                    int(tournament.reseed_after_round),
                    tournament.reseed_method.value,
                    tournament.round_duration_hours,
                    _now(),
                    json.dumps(tournament.tournament_metadata or {}),
                ),
            )

            tournament_id = cursor.lastrowid
            if tournament_id is None:
                raise RuntimeError("Failed to get tournament ID from database")

            conn.commit()
            logger.info(f"Created tournament {tournament_id}: {tournament.name}")
            return tournament_id

    def get_tournament(self, tournament_id: int) -> Tournament | None:
        """Get tournament by ID. ``current_round`` comes from the round list."""
        with self._get_connection() as conn:
            cursor = conn.cursor()

            cursor.execute(
                """
                SELECT t.*, (
                    SELECT COALESCE(MAX(r.round_number), 0)
                    FROM tournament_rounds r WHERE r.tournament_id = t.id
                ) AS current_round
                FROM tournaments t WHERE t.id = ?
                """,
                (tournament_id,),
            )
            row = cursor.fetchone()

            if not row:
                return None

            return self._row_to_tournament(row)

    def _row_to_tournament(self, row: sqlite3.Row) -> Tournament:
        return Tournament(
            id=row["id"],
            name=row["name"],
            format=TournamentFormat(row["format"]),
            status=TournamentStatus(row["status"]),
            max_participants=row["max_participants"],
            reseed_after_round=bool(row["reseed_after_round"]),
            reseed_method=ReseedMethod(row["reseed_method"]),
            round_duration_hours=row["round_duration_hours"],
            current_round=row["current_round"],
            created_at=row["created_at"],
            started_at=row["started_at"],
            end_date=row["end_date"],
            winner_participant_id=row["winner_participant_id"],
            tournament_metadata=json.loads(row["tournament_metadata"] or "{}"),
        )

    def list_tournaments(
        self,
        limit: int | None = None,
        offset: int = 0,
        status: TournamentStatus | None = None,
    ) -> list[TournamentSummary]:
        """List tournaments with summary information."""
        with self._get_connection() as conn:
            cursor = conn.cursor()

            query = """
                SELECT t.id, t.name, t.format, t.status, t.max_participants,
                       t.created_at, t.winner_participant_id,
                       (SELECT COUNT(*) FROM tournament_participants p
                        WHERE p.tournament_id = t.id) AS participant_count,
                       (SELECT COALESCE(MAX(r.round_number), 0) FROM tournament_rounds r
                        WHERE r.tournament_id = t.id) AS current_round
                FROM tournaments t
            """

            params: list[Any] = []
            if status is not None:
                query += " WHERE t.status = ?"
                params.append(status.value)

            query += " ORDER BY t.created_at DESC, t.id DESC"
            if limit:
                query += " LIMIT ? OFFSET ?"
                params.extend([limit, offset])

            cursor.execute(query, params)

            return [
                TournamentSummary(
                    id=row["id"],
                    name=row["name"],
                    format=TournamentFormat(row["format"]),
                    status=TournamentStatus(row["status"]),
                    max_participants=row["max_participants"],
                    participant_count=row["participant_count"],
                    current_round=row["current_round"],
                    created_at=row["created_at"],
                    winner_participant_id=row["winner_participant_id"],
                )
                for row in cursor.fetchall()
            ]

    def mark_tournament_started(self, tournament_id: int) -> bool:
        """UPCOMING -> IN_PROGRESS; registered participants become active."""
        with self._get_connection() as conn:
            cursor = conn.cursor()

            cursor.execute(
                """
                UPDATE tournaments SET status = ?, started_at = ?
                WHERE id = ? AND status = ?
                """,
                (
                    TournamentStatus.IN_PROGRESS.value,
                    _now(),
                    tournament_id,
                    TournamentStatus.UPCOMING.value,
                ),
            )
            if cursor.rowcount == 0:
                conn.rollback()
                return False

            cursor.execute(
                """
                UPDATE tournament_participants SET status = ?
                WHERE tournament_id = ? AND status = ?
                """,
                (
                    ParticipantStatus.ACTIVE.value,
                    tournament_id,
                    ParticipantStatus.REGISTERED.value,
                ),
            )
            conn.commit()
            logger.info(f"Tournament {tournament_id} is now in progress")
            return True

    def finalize_tournament(
        self,
        tournament_id: int,
        champion_id: int | None,
        score_adjustments: dict[int, float] | None = None,
        metadata_updates: dict[str, Any] | None = None,
    ) -> bool:
        """Complete a tournament exactly once.

        The status transition, the champion and any completion score
        adjustments are committed together or not at all.
        """
        with self._get_connection() as conn:
            cursor = conn.cursor()

            cursor.execute(
                "SELECT tournament_metadata FROM tournaments WHERE id = ?",
                (tournament_id,),
            )
            row = cursor.fetchone()
            if not row:
                raise TournamentNotFoundError("Tournament", tournament_id)

            metadata = json.loads(row["tournament_metadata"] or "{}")
            metadata.update(metadata_updates or {})

            cursor.execute(
                """
                UPDATE tournaments
                SET status = ?, end_date = ?, winner_participant_id = ?,
                    tournament_metadata = ?
                WHERE id = ? AND status != ?
                """,
                (
                    TournamentStatus.COMPLETED.value,
                    _now(),
                    champion_id,
                    json.dumps(metadata),
                    tournament_id,
                    TournamentStatus.COMPLETED.value,
                ),
            )
            if cursor.rowcount == 0:
                conn.rollback()
                return False

            for participant_id, delta in (score_adjustments or {}).items():
                cursor.execute(
                    """
                    UPDATE tournament_participants
                    SET cumulative_score = cumulative_score + ?
                    WHERE id = ? AND tournament_id = ?
                    """,
                    (delta, participant_id, tournament_id),
                )

            conn.commit()
            logger.info(
                f"Tournament {tournament_id} completed, champion participant: {champion_id}"
            )
            return True

    def delete_tournament(self, tournament_id: int) -> bool:
        """Delete tournament and all related data."""
        with self._get_connection() as conn:
            cursor = conn.cursor()

            cursor.execute("DELETE FROM tournaments WHERE id = ?", (tournament_id,))
            deleted = cursor.rowcount > 0
            conn.commit()

            if deleted:
                logger.info(f"Deleted tournament {tournament_id}")

            return deleted

    # Participants

    def add_participant(self, participant: TournamentParticipant) -> int:
        """Add participant to tournament."""
        with self._get_connection() as conn:
            cursor = conn.cursor()

            cursor.execute(
                """
                INSERT INTO tournament_participants (
                    tournament_id, user_id, username, seed, current_seed,
                    elo_at_start, status, selected_position, registered_at
                ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    participant.tournament_id,
                    participant.user_id,
                    participant.username,
                    participant.seed,
                    participant.current_seed,
                    participant.elo_at_start,
                    participant.status.value,
                    participant.selected_position.value
                    if participant.selected_position
                    else None,
                    (participant.registered_at or datetime.now()).isoformat(),
                ),
            )

            participant_id = cursor.lastrowid
            if participant_id is None:
                raise RuntimeError("Failed to get participant ID from database")

            conn.commit()
            return participant_id

    def get_participants(self, tournament_id: int) -> list[TournamentParticipant]:
        """Get all participants for a tournament, in seed order."""
        with self._get_connection() as conn:
            cursor = conn.cursor()

            cursor.execute(
                """
                SELECT * FROM tournament_participants
                WHERE tournament_id = ?
                ORDER BY COALESCE(current_seed, seed), id
                """,
                (tournament_id,),
            )

            return [self._row_to_participant(row) for row in cursor.fetchall()]

    def _row_to_participant(self, row: sqlite3.Row) -> TournamentParticipant:
        return TournamentParticipant(
            id=row["id"],
            tournament_id=row["tournament_id"],
            user_id=row["user_id"],
            username=row["username"],
            seed=row["seed"],
            current_seed=row["current_seed"],
            elo_at_start=row["elo_at_start"],
            status=ParticipantStatus(row["status"]),
            wins=row["wins"],
            losses=row["losses"],
            cumulative_score=row["cumulative_score"],
            selected_position=Position(row["selected_position"])
            if row["selected_position"]
            else None,
            registered_at=row["registered_at"],
            eliminated_at=row["eliminated_at"],
            elimination_round=row["elimination_round"],
            elimination_reason=row["elimination_reason"],
        )

    def update_seeds(self, tournament_id: int, seeds: dict[int, int]) -> None:
        """Write ``seed`` and ``current_seed`` for the given participants."""
        with self._get_connection() as conn:
            cursor = conn.cursor()
            cursor.executemany(
                """
                UPDATE tournament_participants SET seed = ?, current_seed = ?
                WHERE id = ? AND tournament_id = ?
                """,
                [(seed, seed, pid, tournament_id) for pid, seed in seeds.items()],
            )
            conn.commit()

    def apply_elimination(
        self, tournament_id: int, round_id: int, round_number: int, result: EliminationResult
    ) -> bool:
        """Apply an elimination result once per round.

        Returns False when the round's eliminations were already applied.
        """
        with self._get_connection() as conn:
            cursor = conn.cursor()

            cursor.execute(
                """
                UPDATE tournament_rounds SET eliminations_applied = 1
                WHERE id = ? AND eliminations_applied = 0
                """,
                (round_id,),
            )
            if cursor.rowcount == 0:
                conn.rollback()
                return False

            for participant_id, delta in result.score_deltas.items():
                cursor.execute(
                    """
                    UPDATE tournament_participants
                    SET cumulative_score = cumulative_score + ?
                    WHERE id = ? AND tournament_id = ?
                    """,
                    (delta, participant_id, tournament_id),
                )

            eliminated_at = _now()
            for participant_id, reason in result.eliminated.items():
                # ELIMINATED is one-way
                cursor.execute(
                    """
                    UPDATE tournament_participants
                    SET status = ?, eliminated_at = ?, elimination_round = ?,
                        elimination_reason = ?
                    WHERE id = ? AND tournament_id = ? AND status != ?
                    """,
                    (
                        ParticipantStatus.ELIMINATED.value,
                        eliminated_at,
                        round_number,
                        reason,
                        participant_id,
                        tournament_id,
                        ParticipantStatus.ELIMINATED.value,
                    ),
                )

            for participant_id in result.advancing:
                cursor.execute(
                    """
                    UPDATE tournament_participants SET status = ?
                    WHERE id = ? AND tournament_id = ? AND status = ?
                    """,
                    (
                        ParticipantStatus.ACTIVE.value,
                        participant_id,
                        tournament_id,
                        ParticipantStatus.REGISTERED.value,
                    ),
                )

            conn.commit()
            logger.info(
                f"Round {round_number} of tournament {tournament_id}: "
                f"{len(result.advancing)} advance, {len(result.eliminated)} eliminated"
            )
            return True

    # Rounds

    def get_or_create_round(self, tournament_id: int, round_number: int) -> TournamentRound:
        """Return the round for (tournament, round_number), creating it if needed."""
        with self._get_connection() as conn:
            cursor = conn.cursor()

            cursor.execute(
                """
                INSERT OR IGNORE INTO tournament_rounds (
                    tournament_id, round_number, status, start_date
                ) VALUES (?, ?, ?, ?)
                """,
                (tournament_id, round_number, RoundStatus.UPCOMING.value, _now()),
            )
            if cursor.rowcount:
                logger.info(f"Created round {round_number} for tournament {tournament_id}")
            conn.commit()

        created = self.get_round(tournament_id, round_number)
        if created is None:
            raise TournamentNotFoundError("Round", (tournament_id, round_number))
        return created

    def get_round(self, tournament_id: int, round_number: int) -> TournamentRound | None:
        with self._get_connection() as conn:
            cursor = conn.cursor()

            cursor.execute(
                """
                SELECT * FROM tournament_rounds
                WHERE tournament_id = ? AND round_number = ?
                """,
                (tournament_id, round_number),
            )
            row = cursor.fetchone()
            return self._row_to_round(row) if row else None

    def get_rounds(self, tournament_id: int) -> list[TournamentRound]:
        with self._get_connection() as conn:
            cursor = conn.cursor()

            cursor.execute(
                """
                SELECT * FROM tournament_rounds
                WHERE tournament_id = ? ORDER BY round_number
                """,
                (tournament_id,),
            )
            return [self._row_to_round(row) for row in cursor.fetchall()]

    def _row_to_round(self, row: sqlite3.Row) -> TournamentRound:
        return TournamentRound(
            id=row["id"],
            tournament_id=row["tournament_id"],
            round_number=row["round_number"],
            status=RoundStatus(row["status"]),
            start_date=row["start_date"],
            end_date=row["end_date"],
            eliminations_applied=bool(row["eliminations_applied"]),
        )

    def mark_round_in_progress(self, round_id: int) -> bool:
        """UPCOMING -> IN_PROGRESS."""
        with self._get_connection() as conn:
            cursor = conn.cursor()
            cursor.execute(
                "UPDATE tournament_rounds SET status = ? WHERE id = ? AND status = ?",
                (RoundStatus.IN_PROGRESS.value, round_id, RoundStatus.UPCOMING.value),
            )
            updated = cursor.rowcount > 0
            conn.commit()
            return updated

    def complete_round(self, round_id: int) -> bool:
        """Mark a round completed if every match in it is completed.

        The check and the write happen in one statement, so exactly one of
        several concurrent callers gets True.
        """
        with self._get_connection() as conn:
            cursor = conn.cursor()
            cursor.execute(
                """
                UPDATE tournament_rounds SET status = ?, end_date = ?
                WHERE id = ? AND status != ?
                  AND EXISTS (SELECT 1 FROM tournament_matches m WHERE m.round_id = ?)
                  AND NOT EXISTS (
                      SELECT 1 FROM tournament_matches m
                      WHERE m.round_id = ? AND m.status != ?
                  )
                """,
                (
                    RoundStatus.COMPLETED.value,
                    _now(),
                    round_id,
                    RoundStatus.COMPLETED.value,
                    round_id,
                    round_id,
                    MatchStatus.COMPLETED.value,
                ),
            )
            updated = cursor.rowcount > 0
            conn.commit()
            return updated

    def get_round_progress(self, tournament_id: int, round_number: int) -> RoundProgress | None:
        """Get status of all matches in a round."""
        round_ = self.get_round(tournament_id, round_number)
        if round_ is None:
            return None

        with self._get_connection() as conn:
            cursor = conn.cursor()

            cursor.execute(
                """
                SELECT status, COUNT(*) as count
                FROM tournament_matches
                WHERE round_id = ?
                GROUP BY status
                """,
                (round_.id,),
            )
            status_counts = {row["status"]: row["count"] for row in cursor.fetchall()}

        total_matches = sum(status_counts.values())
        completed_matches = status_counts.get(MatchStatus.COMPLETED.value, 0)

        return RoundProgress(
            round_number=round_number,
            status=round_.status,
            total_matches=total_matches,
            completed_matches=completed_matches,
            scheduled_matches=status_counts.get(MatchStatus.SCHEDULED.value, 0),
            in_progress_matches=status_counts.get(MatchStatus.IN_PROGRESS.value, 0),
            all_completed=completed_matches == total_matches and total_matches > 0,
        )

    # Matches

    def add_match(self, match: TournamentMatch) -> int:
        """Add match to tournament."""
        with self._get_connection() as conn:
            cursor = conn.cursor()

            cursor.execute(
                """
                INSERT INTO tournament_matches (
                    tournament_id, round_id, round_number, match_number, topic, kind,
                    participant1_id, participant2_id, participant_ids, status,
                    debate_rounds
                ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    match.tournament_id,
                    match.round_id,
                    match.round_number,
                    match.match_number,
                    match.topic,
                    match.kind.value,
                    match.participant1_id,
                    match.participant2_id,
                    json.dumps(match.entrants),
                    match.status.value,
                    match.debate_rounds,
                ),
            )

            match_id = cursor.lastrowid
            if match_id is None:
                raise RuntimeError("Failed to get match ID from database")

            conn.commit()
            return match_id

    def get_matches(
        self, tournament_id: int, round_number: int | None = None
    ) -> list[TournamentMatch]:
        """Get matches for tournament, optionally filtered by round."""
        with self._get_connection() as conn:
            cursor = conn.cursor()

            if round_number is not None:
                cursor.execute(
                    """
                    SELECT * FROM tournament_matches
                    WHERE tournament_id = ? AND round_number = ?
                    ORDER BY match_number
                    """,
                    (tournament_id, round_number),
                )
            else:
                cursor.execute(
                    """
                    SELECT * FROM tournament_matches
                    WHERE tournament_id = ?
                    ORDER BY round_number, match_number
                    """,
                    (tournament_id,),
                )
            rows = cursor.fetchall()

            return [self._row_to_match(cursor, row) for row in rows]

    def get_match(self, match_id: int) -> TournamentMatch | None:
        with self._get_connection() as conn:
            cursor = conn.cursor()
            cursor.execute("SELECT * FROM tournament_matches WHERE id = ?", (match_id,))
            row = cursor.fetchone()
            return self._row_to_match(cursor, row) if row else None

    def get_match_by_debate(self, debate_id: str) -> TournamentMatch | None:
        """Find the match linked to an external debate."""
        with self._get_connection() as conn:
            cursor = conn.cursor()
            cursor.execute(
                "SELECT * FROM tournament_matches WHERE debate_id = ?", (debate_id,)
            )
            row = cursor.fetchone()
            return self._row_to_match(cursor, row) if row else None

    def _row_to_match(self, cursor: sqlite3.Cursor, row: sqlite3.Row) -> TournamentMatch:
        scores, breakdown = self._load_scores(cursor, row["id"])
        return TournamentMatch(
            id=row["id"],
            tournament_id=row["tournament_id"],
            round_id=row["round_id"],
            round_number=row["round_number"],
            match_number=row["match_number"],
            topic=row["topic"],
            kind=MatchKind(row["kind"]),
            participant1_id=row["participant1_id"],
            participant2_id=row["participant2_id"],
            participant_ids=json.loads(row["participant_ids"] or "[]"),
            winner_id=row["winner_id"],
            status=MatchStatus(row["status"]),
            debate_id=row["debate_id"],
            debate_rounds=row["debate_rounds"],
            scores=scores,
            score_breakdown=breakdown,
            completed_at=row["completed_at"],
        )

    def _load_scores(
        self, cursor: sqlite3.Cursor, match_id: int
    ) -> tuple[dict[int, float], dict[int, dict[str, float]]]:
        cursor.execute(
            """
            SELECT participant_id, score, breakdown FROM tournament_match_scores
            WHERE match_id = ?
            """,
            (match_id,),
        )
        scores: dict[int, float] = {}
        breakdown: dict[int, dict[str, float]] = {}
        for score_row in cursor.fetchall():
            scores[score_row["participant_id"]] = score_row["score"]
            if score_row["breakdown"]:
                breakdown[score_row["participant_id"]] = json.loads(score_row["breakdown"])
        return scores, breakdown

    def attach_debate(self, match_id: int, debate_id: str) -> bool:
        """Link a debate to a scheduled match and mark it in progress."""
        with self._get_connection() as conn:
            cursor = conn.cursor()
            cursor.execute(
                """
                UPDATE tournament_matches SET debate_id = ?, status = ?
                WHERE id = ? AND debate_id IS NULL AND status = ?
                """,
                (
                    debate_id,
                    MatchStatus.IN_PROGRESS.value,
                    match_id,
                    MatchStatus.SCHEDULED.value,
                ),
            )
            updated = cursor.rowcount > 0
            conn.commit()

            if updated:
                logger.info(f"Match {match_id} linked to debate {debate_id}")

            return updated

    def save_match_scores(
        self,
        match_id: int,
        scores: dict[int, float],
        breakdown: dict[int, dict[str, float]] | None = None,
    ) -> int:
        """Store scores for a match; existing rows are kept. Returns rows written."""
        breakdown = breakdown or {}
        with self._get_connection() as conn:
            cursor = conn.cursor()
            written = self._insert_scores(cursor, match_id, scores, breakdown)
            conn.commit()
            return written

    def _insert_scores(
        self,
        cursor: sqlite3.Cursor,
        match_id: int,
        scores: dict[int, float],
        breakdown: dict[int, dict[str, float]],
    ) -> int:
        written = 0
        for participant_id, score in scores.items():
            detail = breakdown.get(participant_id)
            cursor.execute(
                """
                INSERT OR IGNORE INTO tournament_match_scores (
                    match_id, participant_id, score, breakdown
                ) VALUES (?, ?, ?, ?)
                """,
                (match_id, participant_id, score, json.dumps(detail) if detail else None),
            )
            written += cursor.rowcount
        return written

    def record_match_outcome(
        self,
        match_id: int,
        winner_id: int | None,
        scores: dict[int, float] | None = None,
        breakdown: dict[int, dict[str, float]] | None = None,
    ) -> bool:
        """Complete a match and count its result exactly once.

        Returns False if the match was already completed; nothing is written
        in that case.
        """
        with self._get_connection() as conn:
            cursor = conn.cursor()

            cursor.execute(
                """
                UPDATE tournament_matches SET status = ?, winner_id = ?, completed_at = ?
                WHERE id = ? AND status != ?
                """,
                (
                    MatchStatus.COMPLETED.value,
                    winner_id,
                    _now(),
                    match_id,
                    MatchStatus.COMPLETED.value,
                ),
            )
            if cursor.rowcount == 0:
                conn.rollback()
                return False

            self._insert_scores(cursor, match_id, scores or {}, breakdown or {})

            cursor.execute(
                "SELECT participant_ids FROM tournament_matches WHERE id = ?",
                (match_id,),
            )
            entrants = json.loads(cursor.fetchone()["participant_ids"] or "[]")
            if winner_id is not None:
                cursor.execute(
                    "UPDATE tournament_participants SET wins = wins + 1 WHERE id = ?",
                    (winner_id,),
                )
                for participant_id in entrants:
                    if participant_id != winner_id:
                        cursor.execute(
                            """
                            UPDATE tournament_participants SET losses = losses + 1
                            WHERE id = ?
                            """,
                            (participant_id,),
                        )

            conn.commit()
            logger.info(f"Match {match_id} completed, winner: {winner_id}")
            return True

    def get_bracket_data(self, tournament: Tournament) -> BracketData:
        """Get complete bracket data for visualization."""
        assert tournament.id is not None
        return BracketData(
            tournament=tournament,
            participants=self.get_participants(tournament.id),
            rounds=self.get_rounds(tournament.id),
            matches=self.get_matches(tournament.id),
        )
