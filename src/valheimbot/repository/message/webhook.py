import logging

import requests

from valheimbot.exceptions import DeliveryError
from valheimbot.repository.message.abstract_interface import MessagePublisherInterface

logger = logging.getLogger(__name__)


class WebhookPublisher(MessagePublisherInterface):
    """Posts JSON documents to a Discord webhook URL."""

    def __init__(self, webhook_url: str, timeout: float = 5.0) -> None:
        if len(webhook_url) == 0:
            raise ValueError("webhook url is required")
        self._webhook_url = webhook_url
        self._timeout = timeout
        self._session = requests.Session()
        self._session.headers["Content-Type"] = "application/json"

    def __repr__(self) -> str:
        # the webhook url embeds its token, keep it out of the logs
        return f"{self.__class__.__name__}()"

    def publish(self, message: str) -> None:
        try:
            response = self._session.post(
                self._webhook_url, data=message, timeout=self._timeout
            )
        except requests.RequestException as e:
            raise DeliveryError(f"webhook post failed: {e}") from e

        if not response.ok:
            raise DeliveryError(
                f"webhook rejected message: {response.status_code} {response.text}"
            )

    def close(self) -> None:
        self._session.close()
