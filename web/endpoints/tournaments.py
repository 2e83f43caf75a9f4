"""Tournament management endpoints."""

import logging
from typing import Any

from fastapi import APIRouter, Request

from tournaments import TournamentAPI
from tournaments.models import (
    RegistrationRequest,
    ReseedMethod,
    TournamentCreateRequest,
    TournamentStatus,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api")


def get_tournament_api(request: Request) -> TournamentAPI:
    """Tournament API instance created at application startup."""
    return request.app.state.tournament_api


@router.post("/tournaments")
async def create_tournament(body: TournamentCreateRequest, request: Request):
    """Create a new tournament."""
    return await get_tournament_api(request).create_tournament(body)


@router.get("/tournaments")
async def list_tournaments(
    request: Request,
    limit: int | None = None,
    offset: int = 0,
    status: TournamentStatus | None = None,
):
    """List all tournaments."""
    return await get_tournament_api(request).list_tournaments(limit, offset, status)


@router.get("/tournaments/{tournament_id}")
async def get_tournament(tournament_id: int, request: Request):
    """Get tournament details."""
    return await get_tournament_api(request).get_tournament(tournament_id)


@router.delete("/tournaments/{tournament_id}")
async def delete_tournament(tournament_id: int, request: Request):
    """Delete a tournament and all related data."""
    return await get_tournament_api(request).delete_tournament(tournament_id)


@router.post("/tournaments/{tournament_id}/participants")
async def register_participant(
    tournament_id: int, body: RegistrationRequest, request: Request
):
    """Register a user in a tournament."""
    return await get_tournament_api(request).register_participant(tournament_id, body)


@router.get("/tournaments/{tournament_id}/participants")
async def get_tournament_participants(tournament_id: int, request: Request):
    """Get all participants in a tournament."""
    return await get_tournament_api(request).get_tournament_participants(tournament_id)


@router.get("/tournaments/{tournament_id}/standings")
async def get_standings(tournament_id: int, request: Request):
    """Get participants ordered by placing."""
    return await get_tournament_api(request).get_standings(tournament_id)


@router.post("/tournaments/{tournament_id}/start")
async def start_tournament(tournament_id: int, request: Request):
    """Start a tournament."""
    return await get_tournament_api(request).start_tournament(tournament_id)


@router.post("/tournaments/{tournament_id}/advance")
async def advance_tournament(tournament_id: int, request: Request):
    """Re-drive round advancement."""
    return await get_tournament_api(request).advance_tournament(tournament_id)


@router.post("/tournaments/{tournament_id}/resume")
async def resume_pending_matches(tournament_id: int, request: Request):
    """Retry debate creation for scheduled matches."""
    return await get_tournament_api(request).resume_pending_matches(tournament_id)


@router.post("/tournaments/{tournament_id}/reseed")
async def reseed_tournament(
    tournament_id: int, request: Request, method: ReseedMethod | None = None
):
    """Reseed the remaining participants."""
    return await get_tournament_api(request).reseed_tournament(tournament_id, method)


@router.get("/tournaments/{tournament_id}/bracket")
async def get_tournament_bracket(tournament_id: int, request: Request):
    """Get tournament bracket visualization data."""
    return await get_tournament_api(request).get_bracket(tournament_id)


@router.get("/tournaments/{tournament_id}/matches")
async def get_tournament_matches(
    tournament_id: int, request: Request, round_number: int | None = None
):
    """Get tournament matches, optionally filtered by round."""
    return await get_tournament_api(request).get_matches(tournament_id, round_number)


@router.get("/tournaments/{tournament_id}/rounds/{round_number}/status")
async def get_round_status(tournament_id: int, round_number: int, request: Request):
    """Get status of all matches in a specific round."""
    return await get_tournament_api(request).get_round_status(tournament_id, round_number)


@router.post("/debates/outcome")
async def debate_outcome(payload: dict[str, Any], request: Request):
    """Webhook for resolved debate outcomes."""
    return await get_tournament_api(request).handle_debate_outcome(payload)
