"""Participant notifications for tournament events."""

import logging
from abc import ABC, abstractmethod
from typing import Any

from .models import Tournament, TournamentParticipant

logger = logging.getLogger(__name__)


class NotificationDispatcher(ABC):
    """Delivers a message to one user."""

    @abstractmethod
    async def notify(self, user_id: str, message: str, data: dict[str, Any]) -> None:
        pass


class LoggingNotificationDispatcher(NotificationDispatcher):
    """Writes notifications to the log instead of delivering them."""

    async def notify(self, user_id: str, message: str, data: dict[str, Any]) -> None:
        logger.info(f"Notification for {user_id}: {message}")


def completion_message(
    tournament: Tournament,
    participant: TournamentParticipant,
    champion: TournamentParticipant | None,
) -> str:
    if champion is not None and participant.id == champion.id:
        return f"Congratulations! You won {tournament.name}"
    if champion is None:
        return f"{tournament.name} has finished"
    return f"{tournament.name} has finished. Champion: {champion.username}"


async def dispatch_completion_notifications(
    dispatcher: NotificationDispatcher,
    tournament: Tournament,
    participants: list[TournamentParticipant],
    champion: TournamentParticipant | None,
) -> int:
    """Tell every participant the tournament is over.

    Delivery is best effort: failures are logged and the remaining
    participants are still notified. Returns the number delivered.
    """
    delivered = 0
    for participant in participants:
        data = {
            "tournament_id": tournament.id,
            "participant_id": participant.id,
            "champion_participant_id": champion.id if champion else None,
            "final_status": participant.status.value,
        }
        try:
            await dispatcher.notify(
                participant.user_id,
                completion_message(tournament, participant, champion),
                data,
            )
            delivered += 1
        except Exception as e:
            logger.error(
                f"Failed to notify {participant.user_id} about tournament "
                f"{tournament.id}: {e}"
            )
    return delivered
