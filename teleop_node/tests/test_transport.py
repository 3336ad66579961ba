"""Tests for the OSC transport lifecycle, publishing, and subscriptions."""

from __future__ import annotations

import asyncio
import json
import socket
from dataclasses import dataclass, field
from typing import Any, List, Tuple

import pytest

from teleop_node.transport import Closed, Connected, OscTransport, TransportError, TransportEvent


@dataclass
class FakeClient:
    host: str
    port: int
    sent: List[Tuple[str, Any]] = field(default_factory=list)
    fail: bool = False

    def send_message(self, address: str, value: Any) -> None:
        if self.fail:
            raise OSError("network unreachable")
        self.sent.append((address, value))


@pytest.fixture
def clients() -> List[FakeClient]:
    return []


@pytest.fixture
def transport(clients: List[FakeClient]) -> OscTransport:
    def factory(host: str, port: int) -> FakeClient:
        client = FakeClient(host, port)
        clients.append(client)
        return client

    return OscTransport("127.0.0.1", 9090, "127.0.0.1", 0, client_factory=factory)


def record_events(transport: OscTransport) -> List[TransportEvent]:
    events: List[TransportEvent] = []
    transport.add_listener(events.append)
    return events


def test_publish_before_connect_is_dropped(transport: OscTransport, clients: List[FakeClient]) -> None:
    transport.publish("/cmd_vel", {"twist": {}})
    assert clients == []
    assert not transport.connected


def test_connect_publish_close_lifecycle(transport: OscTransport, clients: List[FakeClient]) -> None:
    events = record_events(transport)

    async def scenario() -> None:
        assert await transport.connect()
        transport.publish("/cmd_vel", {"twist": {"linear": {"x": 0.5}}})
        transport.close()
        transport.publish("/cmd_vel", {"twist": {"linear": {"x": 0.9}}})

    asyncio.run(scenario())

    assert events == [Connected(), Closed()]
    assert len(clients) == 1
    assert clients[0].host == "127.0.0.1" and clients[0].port == 9090
    address, payload = clients[0].sent[0]
    assert address == "/cmd_vel"
    assert json.loads(payload) == {"twist": {"linear": {"x": 0.5}}}
    assert len(clients[0].sent) == 1


def test_close_twice_emits_once(transport: OscTransport) -> None:
    events = record_events(transport)

    async def scenario() -> None:
        await transport.connect()
        transport.close()
        transport.close()

    asyncio.run(scenario())
    assert events.count(Closed()) == 1


def test_connect_failure_reports_error() -> None:
    blocker = socket.socket(socket.AF_INET, socket.SOCK_DGRAM)
    blocker.bind(("127.0.0.1", 0))
    port = blocker.getsockname()[1]
    try:
        transport = OscTransport("127.0.0.1", 9090, "127.0.0.1", port, client_factory=FakeClient)
        events = record_events(transport)
        connected = asyncio.run(transport.connect())
    finally:
        blocker.close()

    assert connected is False
    assert len(events) == 1
    assert isinstance(events[0], TransportError)
    assert not transport.connected


def test_send_failure_reports_error_and_keeps_running(
    transport: OscTransport, clients: List[FakeClient]
) -> None:
    events = record_events(transport)

    async def scenario() -> None:
        await transport.connect()
        clients[0].fail = True
        transport.publish("/cmd_vel", {})
        transport.close()

    asyncio.run(scenario())
    assert isinstance(events[1], TransportError)
    assert events[1].detail == "network unreachable"


def test_subscription_receives_data_wrapper(transport: OscTransport) -> None:
    received: List[Any] = []
    transport.subscribe("/soil_sensor", received.append)
    transport.subscribe("/soil_sensor", received.append)

    transport.inject("/soil_sensor", '{"ph": 6.5}')
    transport.inject("/soil_sensor")
    transport.inject("/bme680", "[1, 2]")

    assert received == [{"data": '{"ph": 6.5}'}, {"data": '{"ph": 6.5}'}]
