import logging
from typing import Optional

from fastapi import BackgroundTasks

from valheimbot.config import BotConfig
from valheimbot.exceptions import DeliveryError
from valheimbot.models import CommandResult, InteractionResponse
from valheimbot.repository.message.pub import BroadcastPubService
from valheimbot.repository.message.webhook import WebhookPublisher

logger = logging.getLogger(__name__)


class ResponseDispatcher:
    """
    Delivers a command result to the caller and, when asked, to the channel.

    The ephemeral reply is always produced. The broadcast runs as a
    background task after the reply has gone out, so a slow or broken
    webhook can never change what the caller sees.
    """

    def __init__(self, broadcast_service: BroadcastPubService) -> None:
        self._broadcast_service = broadcast_service

    @classmethod
    def from_config(cls, config: BotConfig) -> "ResponseDispatcher":
        """Dispatcher broadcasting to the configured Discord webhook."""
        publisher = WebhookPublisher(
            config.webhook_url, timeout=config.webhook_timeout_seconds
        )
        return cls(BroadcastPubService(publisher, username=config.webhook_username))

    def broadcast(self, message: str) -> None:
        try:
            self._broadcast_service.broadcast(message)
        except DeliveryError as e:
            logger.error("failed to send webhook: %s", e)
            return
        logger.info("broadcast sent")

    def reply(
        self,
        result: CommandResult,
        background_tasks: Optional[BackgroundTasks] = None,
    ) -> InteractionResponse:
        if result.broadcast:
            if background_tasks is not None:
                background_tasks.add_task(self.broadcast, result.message)
            else:
                self.broadcast(result.message)
        return InteractionResponse.ephemeral(result.message)

    def close(self) -> None:
        self._broadcast_service.close()
