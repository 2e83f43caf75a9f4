"""Pytest configuration and shared fixtures.

The fakes here stand in for the external collaborators of the engine: the
debate subsystem, the judge pool and notification delivery. Every test gets
its own SQLite file under ``tmp_path``.
"""

import random
from collections.abc import Awaitable, Callable
from typing import Any

import pytest

from config.settings import TournamentConfig
from judges.base import Judge, JudgePool
from tournaments.manager import TournamentManager
from tournaments.models import (
    DebateRequest,
    Position,
    RegistrationRequest,
    TournamentParticipant,
)
from tournaments.notifications import NotificationDispatcher


# =============================================================================
# FAKE COLLABORATORS
# =============================================================================


class FakeDebateService:
    """Records debate requests and hands out predictable debate IDs."""

    def __init__(self, fail_times: int = 0):
        self.requests: list[DebateRequest] = []
        self.fail_times = fail_times

    async def create_debate(self, request: DebateRequest) -> str:
        if self.fail_times > 0:
            self.fail_times -= 1
            raise RuntimeError("debate service unavailable")
        self.requests.append(request)
        return f"debate-{request.match_id}"


Scorer = Callable[[Judge, int, str], float]


class FakeJudgePool(JudgePool):
    """Judge pool whose scores come from a plain function."""

    def __init__(
        self,
        judge_count: int = 3,
        scorer: Scorer | None = None,
        failing: tuple[str, ...] = (),
    ):
        self.judges = [Judge(f"judge-{i}", f"Judge {i}") for i in range(judge_count)]
        self.scorer = scorer or (lambda judge, pid, text: 50.0)
        self.failing = set(failing)
        self.calls: list[tuple[str, dict[int, str]]] = []

    async def list_judges(self) -> list[Judge]:
        return list(self.judges)

    async def score_submissions(
        self, judge: Judge, topic: str, submissions: dict[int, str]
    ) -> dict[int, float]:
        self.calls.append((judge.judge_id, dict(submissions)))
        if judge.judge_id in self.failing:
            raise RuntimeError("judge offline")
        return {pid: self.scorer(judge, pid, text) for pid, text in submissions.items()}


class RecordingNotifier(NotificationDispatcher):
    """Keeps every notification; can be told to fail for some users."""

    def __init__(self, fail_for: tuple[str, ...] = ()):
        self.sent: list[tuple[str, str, dict[str, Any]]] = []
        self.fail_for = set(fail_for)

    async def notify(self, user_id: str, message: str, data: dict[str, Any]) -> None:
        if user_id in self.fail_for:
            raise RuntimeError("delivery failed")
        self.sent.append((user_id, message, data))


# =============================================================================
# SHARED FIXTURES
# =============================================================================


@pytest.fixture
def debate_service() -> FakeDebateService:
    return FakeDebateService()


@pytest.fixture
def notifier() -> RecordingNotifier:
    return RecordingNotifier()


@pytest.fixture
def make_manager(
    tmp_path, debate_service: FakeDebateService, notifier: RecordingNotifier
) -> Callable[..., TournamentManager]:
    """Build a manager on a fresh database with a seeded random source."""

    def _make(**overrides: Any) -> TournamentManager:
        options: dict[str, Any] = {
            "db_path": str(tmp_path / "tournaments.db"),
            "config": TournamentConfig(),
            "debate_service": debate_service,
            "notifier": notifier,
            "rng": random.Random(7),
        }
        options.update(overrides)
        return TournamentManager(**options)

    return _make


RegisterPlayers = Callable[..., Awaitable[list[TournamentParticipant]]]


@pytest.fixture
def register_players() -> RegisterPlayers:
    """Register ``count`` players whose rating falls with registration order.

    Player N registers N-th, gets seed N and a rating of 1500 - 50 * (N - 1),
    so rating order and seed order agree.
    """

    async def _register(
        manager: TournamentManager,
        tournament_id: int,
        count: int,
        positions: list[Position] | None = None,
    ) -> list[TournamentParticipant]:
        registered = []
        for i in range(count):
            request = RegistrationRequest(
                user_id=f"user-{i + 1}",
                username=f"Player {i + 1}",
                elo_rating=1500 - 50 * i,
                selected_position=positions[i] if positions else None,
            )
            registered.append(await manager.register_participant(tournament_id, request))
        return registered

    return _register


# =============================================================================
# PYTEST CONFIGURATION HOOKS
# =============================================================================


def pytest_configure(config: pytest.Config) -> None:
    """Configure pytest with custom markers."""
    config.addinivalue_line(
        "markers", "slow: marks tests as slow (deselect with '-m \"not slow\"')"
    )
    config.addinivalue_line(
        "markers", "integration: marks tests as integration tests"
    )
    config.addinivalue_line(
        "markers", "unit: marks tests as unit tests"
    )
