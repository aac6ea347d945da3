"""
Custom exceptions for the valheimbot application.

Every error here is recovered before it reaches the process boundary; the
HTTP layer maps the first two onto status codes, the rest are logged and
turned into friendly messages.
"""


class ValheimBotError(Exception):
    """Base class for all valheimbot errors."""


class AuthenticationError(ValheimBotError):
    """Raised when an inbound request cannot be authenticated."""


class InvalidPublicKeyError(AuthenticationError):
    """Raised when the configured Discord public key is not valid Ed25519 key material."""

    def __init__(self, reason: str, message: str = None):
        self.reason = reason
        if message is None:
            message = f"Configured Discord public key is malformed: {reason}"
        super().__init__(message)


class MalformedRequestError(ValheimBotError):
    """Raised when an interaction body cannot be decoded or has an unknown type."""


class InfrastructureError(ValheimBotError):
    """Raised when the compute API cannot be reached or an instance operation fails."""

    def __init__(self, operation: str, message: str = None):
        self.operation = operation
        if message is None:
            message = f"Compute operation '{operation}' failed"
        super().__init__(message)


class ProbeError(ValheimBotError):
    """Raised when the game server's status endpoint is unreachable or unreadable."""


class DeliveryError(ValheimBotError):
    """Raised when a broadcast could not be delivered to the webhook."""
