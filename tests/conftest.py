"""
Shared pytest fixtures and fakes.

## Fakes

- `FakeInstanceClient`: in-memory `InstanceClientInterface`
  - `snapshot` is what `get()` returns
  - `get_error` / `start_error` / `stop_error` make the matching call raise
  - records `start_calls`, `stop_calls` and whether `close()` ran

- `FakeProber`: stands in for `GameStatusProber`
  - returns `player_count` or raises `error`
  - records every IP it was asked about in `probed_ips`

- `RecordingPublisher`: `MessagePublisherInterface` that keeps every message

## Fixtures

- `config`: a `BotConfig` whose public key matches `signing_key`
- `signing_key`: fresh Ed25519 key pair for signing requests in API tests
- `fake_client`, `fake_prober`, `executor`: executor wired to the fakes with
  a fixed clock (`NOW`)
"""

import datetime
from typing import List, Optional

import nacl.signing
import pytest

from valheimbot.config import BotConfig
from valheimbot.host.executor import CommandExecutor
from valheimbot.models import (
    InstanceSnapshot,
    InstanceState,
    NetworkInterface,
    PlayerStatus,
)
from valheimbot.repository.compute import InstanceClientInterface
from valheimbot.repository.message.abstract_interface import MessagePublisherInterface

NOW = datetime.datetime(2024, 3, 1, 12, 0, 0, tzinfo=datetime.timezone.utc)
EXTERNAL_IP = "203.0.113.10"


def make_snapshot(
    state: InstanceState,
    last_start_timestamp: Optional[str] = "2024-03-01T01:30:00.000-08:00",
    nat_ips: Optional[List[str]] = None,
) -> InstanceSnapshot:
    if nat_ips is None:
        nat_ips = [EXTERNAL_IP]
    return InstanceSnapshot(
        state=state,
        last_start_timestamp=last_start_timestamp,
        network_interfaces=[NetworkInterface(nat_ips=nat_ips)],
    )


class FakeInstanceClient(InstanceClientInterface):
    def __init__(self, snapshot: Optional[InstanceSnapshot] = None):
        self.snapshot = snapshot
        self.get_error: Optional[Exception] = None
        self.start_error: Optional[Exception] = None
        self.stop_error: Optional[Exception] = None
        self.get_calls = 0
        self.start_calls = 0
        self.stop_calls = 0
        self.closed = False

    def get(self) -> Optional[InstanceSnapshot]:
        self.get_calls += 1
        if self.get_error is not None:
            raise self.get_error
        return self.snapshot

    def start(self) -> None:
        self.start_calls += 1
        if self.start_error is not None:
            raise self.start_error

    def stop(self) -> None:
        self.stop_calls += 1
        if self.stop_error is not None:
            raise self.stop_error

    def close(self) -> None:
        self.closed = True


class FakeProber:
    def __init__(self, player_count: int = 0, error: Optional[Exception] = None):
        self.player_count = player_count
        self.error = error
        self.probed_ips: List[str] = []

    def probe(self, external_ip: str) -> PlayerStatus:
        self.probed_ips.append(external_ip)
        if self.error is not None:
            raise self.error
        return PlayerStatus(server_name="Midgard", player_count=self.player_count)


class RecordingPublisher(MessagePublisherInterface):
    def __init__(self, error: Optional[Exception] = None):
        self.published_messages: List[str] = []
        self.error = error

    def publish(self, message: str) -> None:
        if self.error is not None:
            raise self.error
        self.published_messages.append(message)


@pytest.fixture
def signing_key() -> nacl.signing.SigningKey:
    return nacl.signing.SigningKey.generate()


@pytest.fixture
def config(signing_key) -> BotConfig:
    return BotConfig(
        public_key_hex=signing_key.verify_key.encode().hex(),
        webhook_url="https://discord.example/api/webhooks/1/token",
        gcp_project="my-project",
        gcp_zone="us-east1-b",
        gcp_instance_name="valheim",
        status_server_port=8080,
    )


@pytest.fixture
def fake_client() -> FakeInstanceClient:
    return FakeInstanceClient(make_snapshot(InstanceState.RUNNING))


@pytest.fixture
def fake_prober() -> FakeProber:
    return FakeProber()


@pytest.fixture
def executor(config, fake_client, fake_prober) -> CommandExecutor:
    return CommandExecutor(
        config=config,
        instance_client_factory=lambda: fake_client,
        prober=fake_prober,
        clock=lambda: NOW,
    )
