import abc
import logging
from types import TracebackType
from typing import Optional

import google.api_core.exceptions
import google.auth.exceptions
import requests
from google.cloud import compute_v1

from valheimbot.config import BotConfig
from valheimbot.exceptions import InfrastructureError
from valheimbot.models import InstanceSnapshot, InstanceState, NetworkInterface

logger = logging.getLogger(__name__)

# everything the google client can throw at us for a single call
_COMPUTE_ERRORS = (
    google.api_core.exceptions.GoogleAPIError,
    google.auth.exceptions.GoogleAuthError,
    requests.RequestException,
)


class InstanceClientInterface(abc.ABC):
    """
    Operations on the one compute instance the bot manages.

    Implementations are bound to a fixed instance identity and must be closed
    after use; use them as a context manager.
    """

    @abc.abstractmethod
    def get(self) -> Optional[InstanceSnapshot]:
        pass

    @abc.abstractmethod
    def start(self) -> None:
        pass

    @abc.abstractmethod
    def stop(self) -> None:
        pass

    @abc.abstractmethod
    def close(self) -> None:
        pass

    def __enter__(self) -> "InstanceClientInterface":
        return self

    def __exit__(
        self,
        exc_type: Optional[type[BaseException]],
        exc: Optional[BaseException],
        tb: Optional[TracebackType],
    ) -> None:
        self.close()


def snapshot_from_instance(instance: compute_v1.Instance) -> InstanceSnapshot:
    """Convert a compute API instance into the bot's snapshot."""
    network_interfaces = [
        NetworkInterface(
            nat_ips=[
                access_config.nat_i_p
                for access_config in interface.access_configs
                if access_config.nat_i_p
            ]
        )
        for interface in instance.network_interfaces
    ]
    return InstanceSnapshot(
        state=InstanceState.from_status(instance.status),
        last_start_timestamp=instance.last_start_timestamp or None,
        network_interfaces=network_interfaces,
    )


class ComputeInstanceClient(InstanceClientInterface):
    """Google Compute Engine backed instance client."""

    def __init__(
        self,
        project: str,
        zone: str,
        instance: str,
        timeout: float = 30.0,
        client: Optional[compute_v1.InstancesClient] = None,
    ) -> None:
        self._project = project
        self._zone = zone
        self._instance = instance
        self._timeout = timeout
        if client is None:
            try:
                client = compute_v1.InstancesClient()
            except _COMPUTE_ERRORS as e:
                raise InfrastructureError("connect") from e
        self._client = client

    @classmethod
    def from_config(cls, config: BotConfig) -> "ComputeInstanceClient":
        return cls(
            project=config.gcp_project,
            zone=config.gcp_zone,
            instance=config.gcp_instance_name,
            timeout=config.compute_timeout_seconds,
        )

    def _identity(self) -> dict:
        return {
            "project": self._project,
            "zone": self._zone,
            "instance": self._instance,
        }

    def get(self) -> Optional[InstanceSnapshot]:
        try:
            instance = self._client.get(**self._identity(), timeout=self._timeout)
        except _COMPUTE_ERRORS as e:
            raise InfrastructureError("get") from e
        if instance is None:
            return None
        return snapshot_from_instance(instance)

    def start(self) -> None:
        # fire and forget, the operation is not awaited
        try:
            self._client.start(**self._identity(), timeout=self._timeout)
        except _COMPUTE_ERRORS as e:
            raise InfrastructureError("start") from e
        logger.info("start requested for instance %s", self._instance)

    def stop(self) -> None:
        try:
            self._client.stop(**self._identity(), timeout=self._timeout)
        except _COMPUTE_ERRORS as e:
            raise InfrastructureError("stop") from e
        logger.info("stop requested for instance %s", self._instance)

    def close(self) -> None:
        try:
            self._client.transport.close()
        except Exception as e:
            logger.warning("Error closing compute client: %s", e)
