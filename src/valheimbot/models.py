from enum import Enum, IntEnum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class ValheimBotBase(BaseModel):
    model_config = ConfigDict(frozen=True)


### DISCORD INTERACTIONS


class InteractionType(IntEnum):
    PING = 1
    APPLICATION_COMMAND = 2
    MESSAGE_COMPONENT = 3
    APPLICATION_COMMAND_AUTOCOMPLETE = 4
    MODAL_SUBMIT = 5


class InteractionResponseType(IntEnum):
    PONG = 1
    CHANNEL_MESSAGE_WITH_SOURCE = 4


# message flag that hides the reply from everyone but the caller
EPHEMERAL_FLAG = 1 << 6


class InteractionOption(ValheimBotBase):
    model_config = ConfigDict(frozen=True, extra="ignore")

    name: str


class InteractionData(ValheimBotBase):
    model_config = ConfigDict(frozen=True, extra="ignore")

    name: str
    options: list[InteractionOption] = Field(default_factory=list)


# {"type": 1}
# {"type": 2, "data": {"name": "valheim", "options": [{"name": "status"}]}}
class Interaction(ValheimBotBase):
    """
    Inbound Discord interaction.

    Only the fields the bot routes on are modelled; everything else Discord
    sends is ignored.
    """

    model_config = ConfigDict(frozen=True, extra="ignore")

    # kept as a plain int so unknown types decode and can be rejected explicitly
    type: int
    data: Optional[InteractionData] = None

    @property
    def command_name(self) -> Optional[str]:
        return self.data.name if self.data is not None else None

    @property
    def sub_option_name(self) -> Optional[str]:
        if self.data is None or len(self.data.options) == 0:
            return None
        return self.data.options[0].name


class PingResponse(ValheimBotBase):
    type: InteractionResponseType = InteractionResponseType.PONG


class InteractionCallbackData(ValheimBotBase):
    content: str
    flags: int = EPHEMERAL_FLAG


class InteractionResponse(ValheimBotBase):
    type: InteractionResponseType = InteractionResponseType.CHANNEL_MESSAGE_WITH_SOURCE
    data: InteractionCallbackData

    @classmethod
    def ephemeral(cls, content: str) -> "InteractionResponse":
        return cls(data=InteractionCallbackData(content=content))


class WebhookMessage(ValheimBotBase):
    username: str
    content: str


### INSTANCE


class InstanceState(Enum):
    RUNNING = "RUNNING"
    STOPPING = "STOPPING"
    TERMINATED = "TERMINATED"
    OTHER = "OTHER"

    @classmethod
    def from_status(cls, status: Optional[str]) -> "InstanceState":
        """Map a provider status string onto the states the bot cares about."""
        match status:
            case "RUNNING":
                return cls.RUNNING
            case "STOPPING":
                return cls.STOPPING
            case "TERMINATED":
                return cls.TERMINATED
            case _:
                return cls.OTHER


class NetworkInterface(ValheimBotBase):
    nat_ips: list[str] = Field(default_factory=list)


class InstanceSnapshot(ValheimBotBase):
    state: InstanceState
    # raw RFC 3339 string, parsed lazily so a bad value only costs the uptime line
    last_start_timestamp: Optional[str] = None
    network_interfaces: list[NetworkInterface] = Field(default_factory=list)

    def external_ip(self) -> Optional[str]:
        for interface in self.network_interfaces:
            for ip in interface.nat_ips:
                if ip:
                    return ip
        return None


### GAME SERVER


# body of http://<ip>:<port>/status.json
class PlayerStatus(ValheimBotBase):
    model_config = ConfigDict(frozen=True, extra="ignore")

    server_name: Optional[str] = None
    player_count: int = Field(default=0, ge=0)
    error: Optional[str] = None

    @field_validator("player_count", mode="before")
    @classmethod
    def null_count_is_zero(cls, value):
        # null reads as zero, same as a missing count
        return 0 if value is None else value


### COMMANDS


class CommandResult(ValheimBotBase):
    message: str
    broadcast: bool = False
