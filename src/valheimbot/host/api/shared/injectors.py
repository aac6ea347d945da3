import logging
from typing import Annotated

from fastapi import Depends, Request

from valheimbot.config import BotConfig
from valheimbot.host.dispatcher import ResponseDispatcher
from valheimbot.host.executor import CommandExecutor
from valheimbot.host.signature import SignatureVerifier

logger = logging.getLogger(__name__)


async def bot_config(request: Request) -> BotConfig:
    """
    Dependency to inject the configuration the app was created with.

    The config lives on ``app.state`` instead of a module global so each app
    instance (and each test) carries its own.
    """
    return request.app.state.config


async def signature_verifier(request: Request) -> SignatureVerifier:
    return request.app.state.signature_verifier


async def command_executor(
    config: Annotated[BotConfig, Depends(bot_config)],
) -> CommandExecutor:
    """
    Dependency to inject the command executor.

    No compute client exists until a command actually runs, and each command
    gets its own.
    """
    return CommandExecutor.from_config(config)


async def response_dispatcher(request: Request) -> ResponseDispatcher:
    """Dependency to inject the dispatcher, and its webhook session, built by create_app."""
    return request.app.state.response_dispatcher
