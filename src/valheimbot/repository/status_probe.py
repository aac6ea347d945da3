import logging

import pydantic
import requests

from valheimbot.exceptions import ProbeError
from valheimbot.models import PlayerStatus

logger = logging.getLogger(__name__)


class GameStatusProber:
    """
    Reads the status.json document served next to the game server.

    The timeout is kept short, a hung game server must not hold up the
    interaction reply.
    """

    def __init__(self, port: int, timeout: float = 1.0) -> None:
        self._port = port
        self._timeout = timeout

    def status_url(self, external_ip: str) -> str:
        return f"http://{external_ip}:{self._port}/status.json"

    def probe(self, external_ip: str) -> PlayerStatus:
        url = self.status_url(external_ip)
        try:
            response = requests.get(url, timeout=self._timeout)
        except requests.RequestException as e:
            raise ProbeError(f"could not reach {url}: {e}") from e

        # the status code is not consulted, only whether the body is readable
        try:
            status = PlayerStatus.model_validate_json(response.content)
        except pydantic.ValidationError as e:
            raise ProbeError(
                f"unreadable status from {url} (HTTP {response.status_code})"
            ) from e

        if status.error:
            logger.warning("game server reported an error: %s", status.error)
        return status
