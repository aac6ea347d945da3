import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from valheimbot.config import BotConfig

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app):
    """Lifespan context manager for FastAPI application."""
    # Startup
    yield
    # Shutdown - release the webhook session
    app.state.response_dispatcher.close()


def create_app(config: BotConfig) -> FastAPI:
    """
    Factory function to create the interactions API.

    The signature verifier and the response dispatcher are built once here and
    shared by every request. Compute clients are still created per command.

    :param config: configuration shared by every request the app serves
    """
    from valheimbot.host.api.interactions import router as interactions_router
    from valheimbot.host.api.shared import add_health_check
    from valheimbot.host.dispatcher import ResponseDispatcher
    from valheimbot.host.signature import SignatureVerifier

    app = FastAPI(title="Valheim Bot Interactions API", lifespan=lifespan)
    app.state.config = config
    app.state.signature_verifier = SignatureVerifier(config.public_key_hex)
    app.state.response_dispatcher = ResponseDispatcher.from_config(config)
    app.include_router(interactions_router)
    add_health_check(app)
    logger.info(
        "interactions api created for instance %s/%s/%s",
        config.gcp_project,
        config.gcp_zone,
        config.gcp_instance_name,
    )
    return app


__all__ = ["create_app"]
