"""Judge panel selection and group-round scoring."""

import asyncio
import logging
import random

from .base import Judge, JudgePool, JudgePoolError

logger = logging.getLogger(__name__)

MIN_SCORE = 0.0
MAX_SCORE = 100.0
NEUTRAL_SCORE = 50.0


def select_panel(
    judges: list[Judge], size: int = 3, rng: random.Random | None = None
) -> list[Judge]:
    """Draw ``size`` distinct judges at random."""
    if not judges:
        raise JudgePoolError("No judges available to score the round")

    if len(judges) < size:
        logger.warning(f"Only {len(judges)} judges available, wanted {size}")
        return list(judges)

    return (rng or random.Random()).sample(judges, size)


def clamp_score(score: float, judge: Judge, participant_id: int) -> float:
    if score < MIN_SCORE or score > MAX_SCORE:
        clamped = min(MAX_SCORE, max(MIN_SCORE, score))
        logger.warning(
            f"Judge {judge.judge_id} gave participant {participant_id} an out of "
            f"range score {score}, clamped to {clamped}"
        )
        return clamped
    return score


async def score_group_round(
    pool: JudgePool,
    topic: str,
    submissions: dict[int, str],
    panel_size: int = 3,
    rng: random.Random | None = None,
) -> tuple[dict[int, float], dict[int, dict[str, float]]]:
    """Score a group round with a random judge panel.

    Each judge scores every submission from 0 to 100 and a participant's
    round score is the sum over the panel. A judge that fails, or skips a
    submission, contributes the neutral score for it.

    Returns (scores, breakdown) where breakdown maps participant to judge to
    score.
    """
    if not submissions:
        return {}, {}

    panel = select_panel(await pool.list_judges(), panel_size, rng)
    results = await asyncio.gather(
        *(pool.score_submissions(judge, topic, submissions) for judge in panel),
        return_exceptions=True,
    )

    breakdown: dict[int, dict[str, float]] = {pid: {} for pid in submissions}
    for judge, result in zip(panel, results):
        if isinstance(result, Exception):
            logger.error(f"Judge {judge.judge_id} failed to score the round: {result}")
            result = {}

        for participant_id in submissions:
            raw = result.get(participant_id)
            if raw is None:
                if result:
                    logger.error(
                        f"Judge {judge.judge_id} returned no score for participant "
                        f"{participant_id}"
                    )
                score = NEUTRAL_SCORE
            else:
                score = clamp_score(float(raw), judge, participant_id)
            breakdown[participant_id][judge.judge_id] = score

    scores = {pid: sum(by_judge.values()) for pid, by_judge in breakdown.items()}
    logger.info(
        f"Panel of {len(panel)} judges scored {len(submissions)} submissions"
    )
    return scores, breakdown
