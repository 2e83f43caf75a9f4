"""Judge pool backed by an HTTP judging service."""

import logging

import httpx

from config.settings import JudgePoolConfig
from .base import Judge, JudgePool

logger = logging.getLogger(__name__)


class HttpJudgePool(JudgePool):
    """Talks to a judging service exposing ``/judges`` and ``/judges/{id}/score``."""

    def __init__(self, config: JudgePoolConfig):
        if not config.base_url:
            raise ValueError("Judge pool base_url is not configured")
        self.config = config
        self.base_url = config.base_url.rstrip("/")

    def _headers(self) -> dict[str, str]:
        headers = {"Content-Type": "application/json"}
        if self.config.api_key:
            headers["Authorization"] = f"Bearer {self.config.api_key}"
        return headers

    async def list_judges(self) -> list[Judge]:
        async with httpx.AsyncClient() as client:
            response = await client.get(
                f"{self.base_url}/judges",
                headers=self._headers(),
                timeout=float(self.config.timeout),
            )
            response.raise_for_status()

        judges = [
            Judge(judge_id=str(item["id"]), name=item.get("name", str(item["id"])))
            for item in response.json()
        ]
        logger.debug(f"Judge pool returned {len(judges)} judges")
        return judges

    async def score_submissions(
        self, judge: Judge, topic: str, submissions: dict[int, str]
    ) -> dict[int, float]:
        payload = {
            "topic": topic,
            "submissions": {str(pid): text for pid, text in submissions.items()},
        }
        async with httpx.AsyncClient() as client:
            response = await client.post(
                f"{self.base_url}/judges/{judge.judge_id}/score",
                json=payload,
                headers=self._headers(),
                timeout=float(self.config.timeout),
            )
            response.raise_for_status()

        scores = response.json().get("scores", {})
        return {int(pid): float(score) for pid, score in scores.items()}
