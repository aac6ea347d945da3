from unittest.mock import patch

import pytest
from typer.testing import CliRunner

from valheimbot.host.main import app
from valheimbot.models import CommandResult

runner = CliRunner()

ENV = {
    "DISCORD_WEBHOOK_URL": "https://discord.example/api/webhooks/1/token",
    "GCP_PROJECT": "my-project",
    "GCP_ZONE": "us-east1-b",
    "GCP_INSTANCE_NAME": "valheim",
    "STATUS_SERVER_PORT": "8080",
}


@pytest.fixture
def mock_executor():
    with patch("valheimbot.host.main.CommandExecutor.from_config") as from_config:
        yield from_config.return_value


@pytest.fixture
def mock_dispatcher():
    with patch("valheimbot.host.main.ResponseDispatcher.from_config") as from_config:
        yield from_config.return_value


def test_execute_command_prints_result(mock_executor, mock_dispatcher):
    mock_executor.execute.return_value = CommandResult(
        message="The server is shut down."
    )

    result = runner.invoke(app, ["execute-command", "status"], env=ENV)

    assert result.exit_code == 0, result.output
    assert "The server is shut down." in result.output
    mock_executor.execute.assert_called_once_with("valheim", "status")
    mock_dispatcher.reply.assert_not_called()


def test_execute_command_broadcasts_when_asked(mock_executor, mock_dispatcher):
    command_result = CommandResult(message="The server is shutting down.", broadcast=True)
    mock_executor.execute.return_value = command_result

    result = runner.invoke(app, ["execute-command", "stop", "--broadcast"], env=ENV)

    assert result.exit_code == 0, result.output
    mock_dispatcher.reply.assert_called_once_with(command_result)


def test_execute_command_requires_configuration(mock_executor):
    result = runner.invoke(
        app, ["execute-command", "status"], env={"GCP_PROJECT": "my-project"}
    )

    assert result.exit_code != 0
    mock_executor.execute.assert_not_called()


def test_execute_command_reads_optional_settings(mock_dispatcher):
    env = {
        **ENV,
        "VALHEIMBOT_WEBHOOK_USERNAME": "Odin",
        "VALHEIMBOT_PROBE_TIMEOUT": "2.5",
        "VALHEIMBOT_COMPUTE_TIMEOUT": "60",
    }

    with patch(
        "valheimbot.host.main.CommandExecutor.from_config"
    ) as executor_from_config:
        executor_from_config.return_value.execute.return_value = CommandResult(
            message="The server has been started! It should be up soon!",
            broadcast=True,
        )
        result = runner.invoke(
            app,
            ["execute-command", "start", "--broadcast", "--webhook-timeout", "9"],
            env=env,
        )

    assert result.exit_code == 0, result.output
    config = executor_from_config.call_args.args[0]
    assert config.webhook_username == "Odin"
    assert config.probe_timeout_seconds == 2.5
    assert config.compute_timeout_seconds == 60.0
    assert config.webhook_timeout_seconds == 9.0
    mock_dispatcher.close.assert_called_once()


def test_start_interactions_api_builds_config():
    env = {
        **ENV,
        "DISCORD_PUBKEY": "ab" * 32,
        "VALHEIMBOT_COMMAND_NAME": "midgard",
    }

    with patch("valheimbot.host.main.GunicornApplication") as gunicorn_app:
        result = runner.invoke(
            app, ["start-interactions-api", "--workers", "2"], env=env
        )

    assert result.exit_code == 0, result.output
    app_factory, options = gunicorn_app.call_args.args
    config = app_factory.args[0]
    assert config.command_name == "midgard"
    assert config.public_key_hex == "ab" * 32
    assert config.compute_timeout_seconds == 30.0
    assert options["workers"] == 2
    gunicorn_app.return_value.run.assert_called_once()
