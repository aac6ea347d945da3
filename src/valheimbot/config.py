"""
Configuration for the valheimbot service.

Configuration is loaded once at process start into a frozen ``BotConfig``
and handed explicitly to everything that needs it.
"""

import os
from dataclasses import dataclass
from typing import Mapping, Optional

# Global service name for logging/observability systems
SERVICE_NAME = "valheimbot"

# Well-known component names (used as the log prefix)
INTERACTIONS_API = "interactions-api"
CLI = "cli"

# Environment variables read by from_env and the CLI
PUBLIC_KEY_ENV = "DISCORD_PUBKEY"
WEBHOOK_URL_ENV = "DISCORD_WEBHOOK_URL"
GCP_PROJECT_ENV = "GCP_PROJECT"
GCP_ZONE_ENV = "GCP_ZONE"
GCP_INSTANCE_NAME_ENV = "GCP_INSTANCE_NAME"
STATUS_SERVER_PORT_ENV = "STATUS_SERVER_PORT"

# Optional, each falls back to the BotConfig default
COMMAND_NAME_ENV = "VALHEIMBOT_COMMAND_NAME"
WEBHOOK_USERNAME_ENV = "VALHEIMBOT_WEBHOOK_USERNAME"
PROBE_TIMEOUT_ENV = "VALHEIMBOT_PROBE_TIMEOUT"
COMPUTE_TIMEOUT_ENV = "VALHEIMBOT_COMPUTE_TIMEOUT"
WEBHOOK_TIMEOUT_ENV = "VALHEIMBOT_WEBHOOK_TIMEOUT"

REQUIRED_ENV_VARS = (
    PUBLIC_KEY_ENV,
    WEBHOOK_URL_ENV,
    GCP_PROJECT_ENV,
    GCP_ZONE_ENV,
    GCP_INSTANCE_NAME_ENV,
    STATUS_SERVER_PORT_ENV,
)

DEFAULT_COMMAND_NAME = "valheim"
DEFAULT_WEBHOOK_USERNAME = "valheimbot"
DEFAULT_PROBE_TIMEOUT = 1.0
DEFAULT_COMPUTE_TIMEOUT = 30.0
DEFAULT_WEBHOOK_TIMEOUT = 5.0


@dataclass(frozen=True)
class BotConfig:
    """Everything the bot needs to talk to Discord, GCP and the game server."""

    public_key_hex: str
    webhook_url: str
    gcp_project: str
    gcp_zone: str
    gcp_instance_name: str
    status_server_port: int

    command_name: str = DEFAULT_COMMAND_NAME
    webhook_username: str = DEFAULT_WEBHOOK_USERNAME

    probe_timeout_seconds: float = DEFAULT_PROBE_TIMEOUT
    compute_timeout_seconds: float = DEFAULT_COMPUTE_TIMEOUT
    webhook_timeout_seconds: float = DEFAULT_WEBHOOK_TIMEOUT

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "BotConfig":
        """
        Build the configuration from environment variables.

        :param environ: mapping to read from, defaults to ``os.environ``
        :raises ValueError: if a required variable is missing, or the port or a
            timeout is not a number
        """
        if environ is None:
            environ = os.environ

        missing = [name for name in REQUIRED_ENV_VARS if not environ.get(name)]
        if missing:
            raise ValueError(
                f"Missing required environment variables: {', '.join(missing)}"
            )

        port = environ[STATUS_SERVER_PORT_ENV]
        try:
            status_server_port = int(port)
        except ValueError:
            raise ValueError(
                f"{STATUS_SERVER_PORT_ENV} must be an integer, got {port!r}"
            ) from None

        return cls(
            public_key_hex=environ[PUBLIC_KEY_ENV],
            webhook_url=environ[WEBHOOK_URL_ENV],
            gcp_project=environ[GCP_PROJECT_ENV],
            gcp_zone=environ[GCP_ZONE_ENV],
            gcp_instance_name=environ[GCP_INSTANCE_NAME_ENV],
            status_server_port=status_server_port,
            command_name=environ.get(COMMAND_NAME_ENV) or DEFAULT_COMMAND_NAME,
            webhook_username=(
                environ.get(WEBHOOK_USERNAME_ENV) or DEFAULT_WEBHOOK_USERNAME
            ),
            probe_timeout_seconds=_timeout_from_env(
                environ, PROBE_TIMEOUT_ENV, DEFAULT_PROBE_TIMEOUT
            ),
            compute_timeout_seconds=_timeout_from_env(
                environ, COMPUTE_TIMEOUT_ENV, DEFAULT_COMPUTE_TIMEOUT
            ),
            webhook_timeout_seconds=_timeout_from_env(
                environ, WEBHOOK_TIMEOUT_ENV, DEFAULT_WEBHOOK_TIMEOUT
            ),
        )


def _timeout_from_env(environ: Mapping[str, str], name: str, default: float) -> float:
    raw = environ.get(name)
    if not raw:
        return default
    try:
        timeout = float(raw)
    except ValueError:
        raise ValueError(f"{name} must be a number of seconds, got {raw!r}") from None
    if timeout <= 0:
        raise ValueError(f"{name} must be positive, got {raw!r}")
    return timeout
