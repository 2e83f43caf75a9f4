"""Tournament integration with the debate subsystem."""

import logging
from typing import TYPE_CHECKING, Any, Protocol

import httpx
from pydantic import ValidationError

from config.settings import DebateServiceConfig
from .models import DebateOutcome, DebateRequest

if TYPE_CHECKING:
    from .manager import TournamentManager

logger = logging.getLogger(__name__)


class DebateService(Protocol):
    """Creates the debate behind a tournament match."""

    async def create_debate(self, request: DebateRequest) -> str:
        """Create and start a debate, returning its ID."""
        ...


class HttpDebateService:
    """Debate subsystem reached over HTTP."""

    def __init__(self, config: DebateServiceConfig):
        if not config.base_url:
            raise ValueError("Debate service base_url is not configured")
        self.config = config
        self.base_url = config.base_url.rstrip("/")

    async def create_debate(self, request: DebateRequest) -> str:
        headers = {"Content-Type": "application/json"}
        if self.config.api_key:
            headers["Authorization"] = f"Bearer {self.config.api_key}"

        async with httpx.AsyncClient() as client:
            response = await client.post(
                f"{self.base_url}/debates",
                json=request.model_dump(mode="json"),
                headers=headers,
                timeout=float(self.config.timeout),
            )
            response.raise_for_status()

        debate_id = response.json().get("debate_id")
        if not debate_id:
            raise RuntimeError(
                f"Debate service returned no debate_id for match {request.match_id}"
            )
        return str(debate_id)


def create_debate_service(config: DebateServiceConfig) -> HttpDebateService | None:
    """Create the debate service client described by the configuration."""
    if not config.base_url:
        logger.info("No debate service configured - matches will stay scheduled")
        return None
    return HttpDebateService(config)


class TournamentDebateCallback:
    """Handles tournament-specific debate completion callbacks."""

    def __init__(self, tournament_manager: "TournamentManager"):
        self.tournament_manager = tournament_manager

    async def on_debate_completed(self, payload: dict[str, Any]) -> bool:
        """Feed a resolved debate outcome into the tournament.

        Returns False for debates that do not belong to a tournament match.
        """
        try:
            outcome = DebateOutcome.model_validate(payload)
        except ValidationError as e:
            logger.error(f"Malformed debate outcome payload: {e}")
            raise

        if self.tournament_manager.db.get_match_by_debate(outcome.debate_id) is None:
            # Not a tournament match, ignore
            logger.debug(f"Debate {outcome.debate_id} is not linked to a tournament match")
            return False

        match = await self.tournament_manager.handle_debate_outcome(outcome)

        logger.info(
            f"Tournament match {match.id} completed (debate {outcome.debate_id}), "
            f"winner: {match.winner_id}"
        )
        return True
