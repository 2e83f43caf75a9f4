"""System health and format endpoints."""

import logging

from fastapi import APIRouter

from tournaments.formats import format_registry

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api")


@router.get("/health")
async def health_check():
    """Health check endpoint to verify API is running."""
    return {"isAlive": True}


@router.get("/formats")
async def get_formats():
    """Get available tournament formats."""
    return {"formats": format_registry.get_format_descriptions()}
