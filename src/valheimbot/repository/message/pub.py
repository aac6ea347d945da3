import logging

from valheimbot.models import WebhookMessage
from valheimbot.repository.message.abstract_interface import MessagePublisherInterface

logger = logging.getLogger(__name__)


class PubServiceInterface:
    def __init__(self, publisher: MessagePublisherInterface) -> None:
        self._publisher = publisher
        logger.debug(
            "%s initialized with publisher %s",
            self.__class__.__name__,
            self._publisher,
        )

    def close(self) -> None:
        self._publisher.close()


class BroadcastPubService(PubServiceInterface):
    def __init__(self, publisher: MessagePublisherInterface, username: str) -> None:
        super().__init__(publisher)
        self._username = username

    def broadcast(self, content: str) -> None:
        """
        Announce a message to the shared channel.

        :param content: The text everyone in the channel should see.
        """
        message = WebhookMessage(username=self._username, content=content)
        self._publisher.publish(message.model_dump_json())
