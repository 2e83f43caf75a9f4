"""Tournament API endpoint handlers."""

import logging
from typing import Any

from fastapi import HTTPException

from .debate_integration import TournamentDebateCallback
from .exceptions import TournamentNotFoundError
from .manager import TournamentManager
from .models import (
    RegistrationRequest,
    ReseedMethod,
    Tournament,
    TournamentCreateRequest,
    TournamentMatch,
    TournamentParticipant,
    TournamentStatus,
)

logger = logging.getLogger(__name__)


def _tournament_dict(tournament: Tournament) -> dict[str, Any]:
    return tournament.model_dump(mode="json")


def _participant_dict(participant: TournamentParticipant) -> dict[str, Any]:
    return {
        "id": participant.id,
        "user_id": participant.user_id,
        "username": participant.username,
        "seed": participant.seed,
        "current_seed": participant.current_seed,
        "elo_at_start": participant.elo_at_start,
        "status": participant.status.value,
        "wins": participant.wins,
        "losses": participant.losses,
        "cumulative_score": participant.cumulative_score,
        "selected_position": (
            participant.selected_position.value if participant.selected_position else None
        ),
        "elimination_round": participant.elimination_round,
        "elimination_reason": participant.elimination_reason,
        "is_active": participant.is_active,
    }


def _match_dict(match: TournamentMatch) -> dict[str, Any]:
    return match.model_dump(mode="json")


class TournamentAPI:
    """FastAPI endpoint handlers for tournament operations."""

    def __init__(self, tournament_manager: TournamentManager):
        self.manager = tournament_manager
        self.debate_callback = TournamentDebateCallback(tournament_manager)

    async def create_tournament(self, request: TournamentCreateRequest) -> dict[str, Any]:
        """Create a new tournament."""
        try:
            tournament_id = await self.manager.create_tournament(request)

            return {
                "tournament_id": tournament_id,
                "message": f"Tournament '{request.name}' created successfully",
                "format": request.format.value,
                "max_participants": request.max_participants,
            }

        except ValueError as e:
            raise HTTPException(status_code=400, detail=str(e))
        except Exception as e:
            logger.error(f"Failed to create tournament: {e}")
            raise HTTPException(status_code=500, detail="Internal server error")

    async def list_tournaments(
        self,
        limit: int | None = None,
        offset: int = 0,
        status: TournamentStatus | None = None,
    ) -> dict[str, Any]:
        """List all tournaments."""
        try:
            tournaments = self.manager.list_tournaments(limit, offset, status)

            return {
                "tournaments": [t.model_dump(mode="json") for t in tournaments],
                "count": len(tournaments),
            }

        except Exception as e:
            logger.error(f"Failed to list tournaments: {e}")
            raise HTTPException(status_code=500, detail="Internal server error")

    async def get_tournament(self, tournament_id: int) -> dict[str, Any]:
        """Get tournament details."""
        try:
            return _tournament_dict(self.manager.get_tournament_status(tournament_id))

        except TournamentNotFoundError:
            raise HTTPException(status_code=404, detail="Tournament not found")
        except Exception as e:
            logger.error(f"Failed to get tournament {tournament_id}: {e}")
            raise HTTPException(status_code=500, detail="Internal server error")

    async def register_participant(
        self, tournament_id: int, request: RegistrationRequest
    ) -> dict[str, Any]:
        """Register a user in a tournament."""
        try:
            participant = await self.manager.register_participant(tournament_id, request)
            return {
                "tournament_id": tournament_id,
                "participant": _participant_dict(participant),
                "message": f"{participant.username} registered as seed {participant.seed}",
            }

        except TournamentNotFoundError:
            raise HTTPException(status_code=404, detail="Tournament not found")
        except ValueError as e:
            raise HTTPException(status_code=400, detail=str(e))
        except Exception as e:
            logger.error(f"Failed to register for tournament {tournament_id}: {e}")
            raise HTTPException(status_code=500, detail="Internal server error")

    async def start_tournament(self, tournament_id: int) -> dict[str, Any]:
        """Start a tournament."""
        try:
            tournament = await self.manager.start_tournament(tournament_id)

            return {
                "tournament_id": tournament_id,
                "message": "Tournament started successfully",
                "status": tournament.status.value,
                "current_round": tournament.current_round,
                "total_rounds": tournament.total_rounds,
            }

        except TournamentNotFoundError:
            raise HTTPException(status_code=404, detail="Tournament not found")
        except ValueError as e:
            raise HTTPException(status_code=400, detail=str(e))
        except Exception as e:
            logger.error(f"Failed to start tournament {tournament_id}: {e}")
            raise HTTPException(status_code=500, detail="Internal server error")

    async def advance_tournament(self, tournament_id: int) -> dict[str, Any]:
        """Re-drive advancement of a tournament."""
        try:
            tournament = await self.manager.advance_tournament(tournament_id)

            return {
                "tournament_id": tournament_id,
                "status": tournament.status.value,
                "current_round": tournament.current_round,
                "total_rounds": tournament.total_rounds,
            }

        except TournamentNotFoundError:
            raise HTTPException(status_code=404, detail="Tournament not found")
        except ValueError as e:
            raise HTTPException(status_code=400, detail=str(e))
        except Exception as e:
            logger.error(f"Failed to advance tournament {tournament_id}: {e}")
            raise HTTPException(status_code=500, detail="Internal server error")

    async def resume_pending_matches(self, tournament_id: int) -> dict[str, Any]:
        """Retry debate creation for scheduled matches."""
        try:
            started = await self.manager.resume_pending_matches(tournament_id)
            return {"tournament_id": tournament_id, "started_matches": started}

        except TournamentNotFoundError:
            raise HTTPException(status_code=404, detail="Tournament not found")
        except Exception as e:
            logger.error(f"Failed to resume matches for tournament {tournament_id}: {e}")
            raise HTTPException(status_code=500, detail="Internal server error")

    async def reseed_tournament(
        self, tournament_id: int, method: ReseedMethod | None = None
    ) -> dict[str, Any]:
        """Reseed the remaining participants."""
        try:
            participants = self.manager.reseed_tournament(tournament_id, method)
            return {
                "tournament_id": tournament_id,
                "participants": [_participant_dict(p) for p in participants],
            }

        except TournamentNotFoundError:
            raise HTTPException(status_code=404, detail="Tournament not found")
        except ValueError as e:
            raise HTTPException(status_code=400, detail=str(e))
        except Exception as e:
            logger.error(f"Failed to reseed tournament {tournament_id}: {e}")
            raise HTTPException(status_code=500, detail="Internal server error")

    async def get_bracket(self, tournament_id: int) -> dict[str, Any]:
        """Get tournament bracket visualization data."""
        try:
            bracket_data = self.manager.get_bracket_view(tournament_id)

            return {
                "tournament": _tournament_dict(bracket_data.tournament),
                "participants": [_participant_dict(p) for p in bracket_data.participants],
                "rounds": [r.model_dump(mode="json") for r in bracket_data.rounds],
                "matches": [_match_dict(m) for m in bracket_data.matches],
            }

        except TournamentNotFoundError:
            raise HTTPException(status_code=404, detail="Tournament not found")
        except Exception as e:
            logger.error(f"Failed to get bracket for tournament {tournament_id}: {e}")
            raise HTTPException(status_code=500, detail="Internal server error")

    async def get_matches(
        self, tournament_id: int, round_number: int | None = None
    ) -> dict[str, Any]:
        """Get tournament matches, optionally filtered by round."""
        try:
            self.manager.get_tournament_status(tournament_id)
            matches = self.manager.db.get_matches(tournament_id, round_number)

            return {
                "tournament_id": tournament_id,
                "round_number": round_number,
                "matches": [_match_dict(m) for m in matches],
                "count": len(matches),
            }

        except TournamentNotFoundError:
            raise HTTPException(status_code=404, detail="Tournament not found")
        except Exception as e:
            logger.error(f"Failed to get matches for tournament {tournament_id}: {e}")
            raise HTTPException(status_code=500, detail="Internal server error")

    async def get_round_status(self, tournament_id: int, round_number: int) -> dict[str, Any]:
        """Get status of all matches in a specific round."""
        try:
            progress = self.manager.get_round_progress(tournament_id, round_number)

            return {
                "tournament_id": tournament_id,
                **progress.model_dump(mode="json"),
                "completion_percentage": (
                    progress.completed_matches / progress.total_matches * 100
                    if progress.total_matches > 0
                    else 0
                ),
            }

        except TournamentNotFoundError as e:
            raise HTTPException(status_code=404, detail=str(e))
        except Exception as e:
            logger.error(
                f"Failed to get round status for tournament {tournament_id}, round {round_number}: {e}"
            )
            raise HTTPException(status_code=500, detail="Internal server error")

    async def get_tournament_participants(self, tournament_id: int) -> dict[str, Any]:
        """Get all participants in a tournament."""
        try:
            self.manager.get_tournament_status(tournament_id)
            participants = self.manager.db.get_participants(tournament_id)

            return {
                "tournament_id": tournament_id,
                "participants": [_participant_dict(p) for p in participants],
                "count": len(participants),
                "active_count": len([p for p in participants if p.is_active]),
            }

        except TournamentNotFoundError:
            raise HTTPException(status_code=404, detail="Tournament not found")
        except Exception as e:
            logger.error(f"Failed to get participants for tournament {tournament_id}: {e}")
            raise HTTPException(status_code=500, detail="Internal server error")

    async def get_standings(self, tournament_id: int) -> dict[str, Any]:
        """Get participants ordered by placing."""
        try:
            standings = self.manager.get_standings(tournament_id)
            return {
                "tournament_id": tournament_id,
                "standings": [
                    {"place": place, **_participant_dict(p)}
                    for place, p in enumerate(standings, start=1)
                ],
            }

        except TournamentNotFoundError:
            raise HTTPException(status_code=404, detail="Tournament not found")
        except Exception as e:
            logger.error(f"Failed to get standings for tournament {tournament_id}: {e}")
            raise HTTPException(status_code=500, detail="Internal server error")

    async def delete_tournament(self, tournament_id: int) -> dict[str, Any]:
        """Delete a tournament and all related data."""
        try:
            success = self.manager.delete_tournament(tournament_id)
            if not success:
                raise HTTPException(status_code=404, detail="Tournament not found")

            return {
                "tournament_id": tournament_id,
                "message": "Tournament deleted successfully",
            }

        except HTTPException:
            raise
        except Exception as e:
            logger.error(f"Failed to delete tournament {tournament_id}: {e}")
            raise HTTPException(status_code=500, detail="Internal server error")

    async def handle_debate_outcome(self, payload: dict[str, Any]) -> dict[str, Any]:
        """Receive a resolved debate outcome from the debate subsystem."""
        try:
            handled = await self.debate_callback.on_debate_completed(payload)
            return {"debate_id": payload.get("debate_id"), "handled": handled}

        except ValueError as e:
            raise HTTPException(status_code=400, detail=str(e))
        except Exception as e:
            logger.error(f"Failed to handle outcome for debate {payload.get('debate_id')}: {e}")
            raise HTTPException(status_code=500, detail="Internal server error")
