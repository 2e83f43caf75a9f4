"""Base classes and interfaces for the judge pool."""

from abc import ABC, abstractmethod
from dataclasses import dataclass


@dataclass(frozen=True)
class Judge:
    """A judge that can score group-round submissions."""

    judge_id: str
    name: str


class JudgePool(ABC):
    """Source of judges for King of the Hill group rounds."""

    @abstractmethod
    async def list_judges(self) -> list[Judge]:
        """Return every judge currently available."""
        pass

    @abstractmethod
    async def score_submissions(
        self, judge: Judge, topic: str, submissions: dict[int, str]
    ) -> dict[int, float]:
        """Have one judge score each submission from 0 to 100.

        Keys are participant IDs.
        """
        pass


class JudgePoolError(RuntimeError):
    """Raised when no judges are available to score a round."""
