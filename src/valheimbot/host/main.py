import functools
import logging
from typing import Optional

import typer
from gunicorn.app.base import BaseApplication
from typing_extensions import Annotated

from valheimbot.config import (
    CLI,
    COMMAND_NAME_ENV,
    COMPUTE_TIMEOUT_ENV,
    DEFAULT_COMMAND_NAME,
    DEFAULT_COMPUTE_TIMEOUT,
    DEFAULT_PROBE_TIMEOUT,
    DEFAULT_WEBHOOK_TIMEOUT,
    DEFAULT_WEBHOOK_USERNAME,
    GCP_INSTANCE_NAME_ENV,
    GCP_PROJECT_ENV,
    GCP_ZONE_ENV,
    INTERACTIONS_API,
    PROBE_TIMEOUT_ENV,
    PUBLIC_KEY_ENV,
    STATUS_SERVER_PORT_ENV,
    WEBHOOK_TIMEOUT_ENV,
    WEBHOOK_URL_ENV,
    WEBHOOK_USERNAME_ENV,
    BotConfig,
)
from valheimbot.host.dispatcher import ResponseDispatcher
from valheimbot.host.executor import SUB_COMMANDS, CommandExecutor
from valheimbot.logging_config import (
    get_gunicorn_config,
    setup_logging,
    setup_server_logging,
)

app = typer.Typer()
logger = logging.getLogger(__name__)

# options shared by every command, all of them backed by the same env vars
PublicKeyOption = Annotated[str, typer.Option(envvar=PUBLIC_KEY_ENV)]
WebhookUrlOption = Annotated[str, typer.Option(envvar=WEBHOOK_URL_ENV)]
GcpProjectOption = Annotated[str, typer.Option(envvar=GCP_PROJECT_ENV)]
GcpZoneOption = Annotated[str, typer.Option(envvar=GCP_ZONE_ENV)]
GcpInstanceNameOption = Annotated[str, typer.Option(envvar=GCP_INSTANCE_NAME_ENV)]
StatusServerPortOption = Annotated[int, typer.Option(envvar=STATUS_SERVER_PORT_ENV)]
CommandNameOption = Annotated[
    str,
    typer.Option(envvar=COMMAND_NAME_ENV, help="Slash command the bot answers to"),
]
WebhookUsernameOption = Annotated[
    str,
    typer.Option(envvar=WEBHOOK_USERNAME_ENV, help="Name shown on broadcasts"),
]
ProbeTimeoutOption = Annotated[
    float,
    typer.Option(envvar=PROBE_TIMEOUT_ENV, help="Seconds to wait for status.json"),
]
ComputeTimeoutOption = Annotated[
    float,
    typer.Option(envvar=COMPUTE_TIMEOUT_ENV, help="Seconds per compute API call"),
]
WebhookTimeoutOption = Annotated[
    float,
    typer.Option(envvar=WEBHOOK_TIMEOUT_ENV, help="Seconds per webhook post"),
]
AppEnvOption = Annotated[Optional[str], typer.Option(envvar="APP_ENV")]
LogOtlpOption = Annotated[
    bool,
    typer.Option(envvar="VALHEIMBOT_LOG_OTLP", help="Enable OpenTelemetry OTLP logging"),
]


class GunicornApplication(BaseApplication):
    """Custom Gunicorn application that allows programmatic configuration."""

    def __init__(self, app_factory, options=None):
        self.options = options or {}
        self.app_factory = app_factory
        super().__init__()

    def load_config(self):
        """Load configuration from the options dict."""
        config = {
            key: value
            for key, value in self.options.items()
            if key in self.cfg.settings and value is not None
        }
        for key, value in config.items():
            self.cfg.set(key.lower(), value)

    def load(self):
        """Load the application."""
        return self.app_factory()


def create_interactions_app(config: BotConfig):
    """Factory function to create the interactions API inside a gunicorn worker."""
    setup_server_logging(INTERACTIONS_API)

    from valheimbot.host.api import create_app

    return create_app(config)


@app.command()
def start_interactions_api(
    public_key: PublicKeyOption,
    webhook_url: WebhookUrlOption,
    gcp_project: GcpProjectOption,
    gcp_zone: GcpZoneOption,
    gcp_instance_name: GcpInstanceNameOption,
    status_server_port: StatusServerPortOption,
    command_name: CommandNameOption = DEFAULT_COMMAND_NAME,
    webhook_username: WebhookUsernameOption = DEFAULT_WEBHOOK_USERNAME,
    probe_timeout: ProbeTimeoutOption = DEFAULT_PROBE_TIMEOUT,
    compute_timeout: ComputeTimeoutOption = DEFAULT_COMPUTE_TIMEOUT,
    webhook_timeout: WebhookTimeoutOption = DEFAULT_WEBHOOK_TIMEOUT,
    app_env: AppEnvOption = None,
    port: int = 8000,
    workers: Annotated[
        int, typer.Option(help="Number of Gunicorn worker processes")
    ] = 1,
    preload_app: Annotated[
        bool,
        typer.Option(
            help="Preload app before forking workers (recommended for multiple workers)"
        ),
    ] = True,
    log_otlp: LogOtlpOption = False,
):
    """Start the interactions API that Discord sends slash commands to."""
    setup_logging(
        microservice_name=INTERACTIONS_API,
        app_env=app_env,
        enable_otel=log_otlp,
    )

    config = BotConfig(
        public_key_hex=public_key,
        webhook_url=webhook_url,
        gcp_project=gcp_project,
        gcp_zone=gcp_zone,
        gcp_instance_name=gcp_instance_name,
        status_server_port=status_server_port,
        command_name=command_name,
        webhook_username=webhook_username,
        probe_timeout_seconds=probe_timeout,
        compute_timeout_seconds=compute_timeout,
        webhook_timeout_seconds=webhook_timeout,
    )

    options = get_gunicorn_config(
        microservice_name=INTERACTIONS_API,
        port=port,
        workers=workers,
        preload_app=preload_app,
    )

    logger.info("starting interactions api on port %d", port)
    GunicornApplication(
        functools.partial(create_interactions_app, config), options
    ).run()


@app.command()
def execute_command(
    sub_command: Annotated[
        str, typer.Argument(help=f"One of: {', '.join(SUB_COMMANDS)}")
    ],
    webhook_url: WebhookUrlOption,
    gcp_project: GcpProjectOption,
    gcp_zone: GcpZoneOption,
    gcp_instance_name: GcpInstanceNameOption,
    status_server_port: StatusServerPortOption,
    # not needed to run a command, only to verify interactions
    public_key: PublicKeyOption = "",
    webhook_username: WebhookUsernameOption = DEFAULT_WEBHOOK_USERNAME,
    probe_timeout: ProbeTimeoutOption = DEFAULT_PROBE_TIMEOUT,
    compute_timeout: ComputeTimeoutOption = DEFAULT_COMPUTE_TIMEOUT,
    webhook_timeout: WebhookTimeoutOption = DEFAULT_WEBHOOK_TIMEOUT,
    broadcast: Annotated[
        bool,
        typer.Option(help="Also announce start/stop results on the webhook"),
    ] = False,
    log_otlp: LogOtlpOption = False,
):
    """Run a single server command from the terminal, as if it came from Discord."""
    setup_logging(microservice_name=CLI, enable_otel=log_otlp)

    config = BotConfig(
        public_key_hex=public_key,
        webhook_url=webhook_url,
        gcp_project=gcp_project,
        gcp_zone=gcp_zone,
        gcp_instance_name=gcp_instance_name,
        status_server_port=status_server_port,
        webhook_username=webhook_username,
        probe_timeout_seconds=probe_timeout,
        compute_timeout_seconds=compute_timeout,
        webhook_timeout_seconds=webhook_timeout,
    )

    executor = CommandExecutor.from_config(config)
    result = executor.execute(config.command_name, sub_command)
    if broadcast:
        dispatcher = ResponseDispatcher.from_config(config)
        try:
            dispatcher.reply(result)
        finally:
            dispatcher.close()
    typer.echo(result.message)
