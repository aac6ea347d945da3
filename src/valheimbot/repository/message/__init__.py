from .abstract_interface import MessagePublisherInterface
from .pub import BroadcastPubService
from .webhook import WebhookPublisher

__all__ = [
    "MessagePublisherInterface",
    "BroadcastPubService",
    "WebhookPublisher",
]
