"""Judge pool interfaces and group-round scoring."""

from .base import Judge, JudgePool, JudgePoolError
from .factory import create_judge_pool
from .http_pool import HttpJudgePool
from .panel import score_group_round, select_panel

__all__ = [
    "Judge",
    "JudgePool",
    "JudgePoolError",
    "HttpJudgePool",
    "create_judge_pool",
    "score_group_round",
    "select_panel",
]
