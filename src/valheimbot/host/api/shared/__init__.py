from .health import add_health_check
from .injectors import (
    bot_config,
    command_executor,
    response_dispatcher,
    signature_verifier,
)

__all__ = [
    "add_health_check",
    "bot_config",
    "command_executor",
    "response_dispatcher",
    "signature_verifier",
]
