"""Factory for creating the judge pool."""

import logging
from typing import Optional

from config.settings import JudgePoolConfig
from .base import JudgePool
from .http_pool import HttpJudgePool

logger = logging.getLogger(__name__)


def create_judge_pool(config: JudgePoolConfig) -> Optional[JudgePool]:
    """Create the judge pool described by the configuration."""
    if not config.base_url:
        logger.info("No judge pool configured - group rounds will use event scores")
        return None

    logger.info(f"Using HTTP judge pool at {config.base_url}")
    return HttpJudgePool(config)
