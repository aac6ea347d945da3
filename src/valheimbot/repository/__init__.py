"""
Repository package for everything outside the process.

Wraps the compute API, the game server's status endpoint and the broadcast
webhook behind small interfaces so the command logic never talks to a
client library directly.
"""

from .compute import ComputeInstanceClient, InstanceClientInterface
from .status_probe import GameStatusProber

__all__ = [
    "ComputeInstanceClient",
    "InstanceClientInterface",
    "GameStatusProber",
]
