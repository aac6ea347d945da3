"""
ASGI application for running under an external server.

    uvicorn valheimbot.host.asgi:app

Configuration comes from the environment, see ``BotConfig.from_env``.
"""

import os

from valheimbot.config import INTERACTIONS_API, BotConfig
from valheimbot.host.api import create_app
from valheimbot.logging_config import setup_logging, setup_server_logging

setup_logging(microservice_name=INTERACTIONS_API, app_env=os.getenv("APP_ENV"))
setup_server_logging(INTERACTIONS_API)

app = create_app(BotConfig.from_env())
