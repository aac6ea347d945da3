import datetime
import functools
import logging
from typing import Callable, Optional

from valheimbot.config import BotConfig
from valheimbot.exceptions import InfrastructureError, ProbeError
from valheimbot.host import messages
from valheimbot.models import CommandResult, InstanceSnapshot, InstanceState
from valheimbot.repository.compute import (
    ComputeInstanceClient,
    InstanceClientInterface,
)
from valheimbot.repository.status_probe import GameStatusProber

logger = logging.getLogger(__name__)

SUB_COMMANDS = ("status", "start", "stop")


def _utcnow() -> datetime.datetime:
    return datetime.datetime.now(datetime.timezone.utc)


class CommandExecutor:
    """
    Turns a slash command into instance operations and a reply.

    Every call reads the instance state fresh, applies the guard for the
    requested operation and only then touches the instance. Nothing is
    shared between calls except the configuration.
    """

    def __init__(
        self,
        config: BotConfig,
        instance_client_factory: Callable[[], InstanceClientInterface],
        prober: GameStatusProber,
        clock: Callable[[], datetime.datetime] = _utcnow,
    ) -> None:
        self._config = config
        self._instance_client_factory = instance_client_factory
        self._prober = prober
        self._clock = clock

    @classmethod
    def from_config(cls, config: BotConfig) -> "CommandExecutor":
        """Executor talking to the real compute API and game server."""
        return cls(
            config=config,
            instance_client_factory=functools.partial(
                ComputeInstanceClient.from_config, config
            ),
            prober=GameStatusProber(
                port=config.status_server_port, timeout=config.probe_timeout_seconds
            ),
        )

    def execute(
        self, command_name: Optional[str], sub_option_name: Optional[str]
    ) -> CommandResult:
        if command_name != self._config.command_name:
            logger.info("ignoring unknown command %s", command_name)
            return CommandResult(message=messages.UNRECOGNIZED_MESSAGE)

        try:
            client = self._instance_client_factory()
        except InfrastructureError:
            logger.exception("failed to connect to the compute api")
            return CommandResult(message=messages.FAILED_MESSAGE)

        with client:
            try:
                snapshot = client.get()
            except InfrastructureError:
                logger.exception("failed to find the instance")
                return CommandResult(message=messages.FAILED_MESSAGE)
            if snapshot is None:
                logger.error("compute api returned no instance")
                return CommandResult(message=messages.FAILED_MESSAGE)

            logger.info(
                "executing %s with instance in state %s",
                sub_option_name,
                snapshot.state.value,
            )
            match sub_option_name:
                case "status":
                    return self._status(snapshot)
                case "start":
                    return self._start(client, snapshot)
                case "stop":
                    return self._stop(client, snapshot)
                case _:
                    logger.info("ignoring unknown sub command %s", sub_option_name)
                    return CommandResult(message=messages.UNRECOGNIZED_MESSAGE)

    def _player_count(self, snapshot: InstanceSnapshot) -> int:
        external_ip = snapshot.external_ip()
        if external_ip is None:
            raise ProbeError("could not find an external ip")
        return self._prober.probe(external_ip).player_count

    def _status(self, snapshot: InstanceSnapshot) -> CommandResult:
        parts = [messages.format_instance_status(snapshot.state)]
        if snapshot.state == InstanceState.RUNNING:
            try:
                started_at = messages.parse_start_timestamp(
                    snapshot.last_start_timestamp or ""
                )
            except ValueError as e:
                logger.warning("couldn't get server uptime: %s", e)
            else:
                parts.append(messages.format_uptime(started_at, self._clock()))

            try:
                player_count = self._player_count(snapshot)
            except ProbeError as e:
                logger.warning("couldn't get player count: %s", e)
            else:
                parts.append(messages.format_player_count(player_count))

        return CommandResult(message=" ".join(parts))

    def _start(
        self, client: InstanceClientInterface, snapshot: InstanceSnapshot
    ) -> CommandResult:
        if snapshot.state != InstanceState.TERMINATED:
            logger.info("refusing to start, server is not in terminated state")
            return CommandResult(message=messages.ALREADY_STARTED_MESSAGE)

        try:
            client.start()
        except InfrastructureError:
            logger.exception("failed to start server")
            return CommandResult(message=messages.START_FAILED_MESSAGE, broadcast=True)
        return CommandResult(message=messages.STARTED_MESSAGE, broadcast=True)

    def _stop(
        self, client: InstanceClientInterface, snapshot: InstanceSnapshot
    ) -> CommandResult:
        if snapshot.state != InstanceState.RUNNING:
            logger.info("refusing to stop, server is not in running state")
            return CommandResult(message=messages.ALREADY_STOPPED_MESSAGE)

        try:
            player_count = self._player_count(snapshot)
        except ProbeError as e:
            # fail open: an unreachable status endpoint does not block the stop,
            # even though players may still be connected
            logger.warning(
                "couldn't get player count, stopping without checking for players: %s",
                e,
            )
        else:
            if player_count > 0:
                logger.info("refusing to stop, %d players online", player_count)
                return CommandResult(
                    message=messages.format_stop_refusal(player_count)
                )

        try:
            client.stop()
        except InfrastructureError:
            logger.exception("failed to stop server")
            return CommandResult(message=messages.STOP_FAILED_MESSAGE, broadcast=True)
        return CommandResult(message=messages.STOPPED_MESSAGE, broadcast=True)
