"""FastAPI web application for the tournament engine."""

import logging
import os
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from tournaments import TournamentAPI, TournamentManager, TournamentStatus
from web.endpoints.system import router as system_router
from web.endpoints.tournaments import router as tournaments_router

logger: logging.Logger = logging.getLogger(__name__)


def build_tournament_manager() -> TournamentManager:
    """Create the tournament manager from the application configuration."""
    from config.settings import get_default_config
    from judges import create_judge_pool
    from tournaments import create_debate_service

    config = get_default_config()
    return TournamentManager(
        config=config.tournament,
        debate_service=create_debate_service(config.debate_service),
        judge_pool=create_judge_pool(config.judge_pool),
    )


async def resume_in_progress_tournaments(manager: TournamentManager) -> None:
    """Retry debate creation for matches left scheduled by a previous run."""
    for summary in manager.list_tournaments(status=TournamentStatus.IN_PROGRESS):
        try:
            await manager.resume_pending_matches(summary.id)
        except Exception as e:
            logger.error(f"Failed to resume tournament {summary.id}: {e}")


def get_allowed_origins() -> list[str] | None:
    """Get CORS origins from environment or use development defaults."""
    env_origins: str | None = os.environ.get("ALLOWED_ORIGINS")
    if env_origins:
        origins = [origin.strip() for origin in env_origins.split(",")]
        return origins
    return None


def create_app(manager: TournamentManager | None = None) -> FastAPI:
    """Build the FastAPI application, optionally around an existing manager."""

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
        """Manage application lifespan - startup and shutdown."""
        if getattr(app.state, "tournament_api", None) is None:
            app.state.tournament_api = TournamentAPI(build_tournament_manager())

        await resume_in_progress_tournaments(app.state.tournament_api.manager)
        yield
        logger.info("Tournament API shutting down")

    app = FastAPI(
        title="Debate Tournament Engine",
        description="Round advancement, seeding and elimination for debate tournaments",
        version="1.0.0",
        lifespan=lifespan,
    )
    app.state.tournament_api = TournamentAPI(manager) if manager is not None else None

    # CORS middleware setup
    allowed_origins = get_allowed_origins()
    if allowed_origins:
        logger.info(f"Setting CORS allowed origins: {allowed_origins}")

        # Production: Use specific origins
        app.add_middleware(
            CORSMiddleware,
            allow_origins=allowed_origins,
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )
    else:
        logger.info("No ALLOWED_ORIGINS set, using development CORS settings")

        # Development: Allow any localhost/127.0.0.1
        app.add_middleware(
            CORSMiddleware,
            allow_origin_regex=r"https?://(localhost|127\.0\.0\.1)(:\d+)?",
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )

    app.include_router(system_router, prefix="/v1")
    app.include_router(tournaments_router, prefix="/v1")
    return app
