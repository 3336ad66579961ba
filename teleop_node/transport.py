"""OSC transport to the robot: lifecycle events plus publish/subscribe."""

from __future__ import annotations

import asyncio
import json
import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional, Protocol, Tuple, Union

from pythonosc import dispatcher
from pythonosc.osc_server import AsyncIOOSCUDPServer
from pythonosc.udp_client import SimpleUDPClient

LOGGER = logging.getLogger(__name__)

Message = Dict[str, Any]
MessageHandler = Callable[[Message], None]


@dataclass(frozen=True)
class Connected:
    """The transport is ready to publish."""


@dataclass(frozen=True)
class TransportError:
    """The transport reported a failure."""

    detail: str


@dataclass(frozen=True)
class Closed:
    """The transport was shut down."""


TransportEvent = Union[Connected, TransportError, Closed]
TransportListener = Callable[[TransportEvent], None]


class Transport(Protocol):
    """Connection to the robot as seen by the command pipeline."""

    def publish(self, channel: str, message: Message) -> None:
        ...

    def subscribe(self, channel: str, handler: MessageHandler) -> None:
        ...

    def add_listener(self, listener: TransportListener) -> None:
        ...


class OscClient(Protocol):
    """Subset of the python-osc UDP client API used by the transport."""

    def send_message(self, address: str, value: Any) -> None:
        ...


def _log_event(event: str, **fields: object) -> None:
    LOGGER.info(json.dumps({"event": event, **fields}))


class OscTransport:
    """Publishes JSON-encoded messages over OSC and serves subscriptions.

    Each published message travels as a single string argument at the OSC
    address named by the channel. Incoming messages on subscribed channels are
    handed to their handlers as ``{"data": <first argument>}``.
    """

    def __init__(
        self,
        remote_host: str,
        remote_port: int,
        listen_host: str,
        listen_port: int,
        loop: Optional[asyncio.AbstractEventLoop] = None,
        client_factory: Callable[[str, int], OscClient] = SimpleUDPClient,
    ) -> None:
        self._loop = loop
        self._remote = (remote_host, remote_port)
        self._listen = (listen_host, listen_port)
        self._client_factory = client_factory
        self._client: Optional[OscClient] = None
        self._server_transport: Optional[asyncio.BaseTransport] = None
        self._dispatcher = dispatcher.Dispatcher()
        self._subscriptions: Dict[str, List[MessageHandler]] = {}
        self._listeners: List[TransportListener] = []

    @property
    def connected(self) -> bool:
        return self._client is not None

    @property
    def remote_address(self) -> Tuple[str, int]:
        return self._remote

    @property
    def listen_address(self) -> Tuple[str, int]:
        """Return the bound listen address, or the configured one before connecting."""
        if self._server_transport is not None:
            sockname = self._server_transport.get_extra_info("sockname")
            if sockname:
                return sockname[0], sockname[1]
        return self._listen

    def add_listener(self, listener: TransportListener) -> None:
        self._listeners.append(listener)

    async def connect(self) -> bool:
        """Open the outbound client and the subscription server.

        Failures are reported as a :class:`TransportError` event rather than
        raised.
        """
        if self.connected:
            return True
        loop = self._loop or asyncio.get_running_loop()
        try:
            client = self._client_factory(*self._remote)
            server = AsyncIOOSCUDPServer(self._listen, self._dispatcher, loop)
            self._server_transport, _protocol = await server.create_serve_endpoint()
        except OSError as exc:
            _log_event("transport_connect_failed", remote=list(self._remote), error=str(exc))
            self._emit(TransportError(str(exc)))
            return False
        self._client = client
        _log_event(
            "transport_connected",
            remote=list(self._remote),
            listen=list(self.listen_address),
        )
        self._emit(Connected())
        return True

    def close(self) -> None:
        if self._client is None and self._server_transport is None:
            return
        if self._server_transport is not None:
            self._server_transport.close()
        self._server_transport = None
        self._client = None
        _log_event("transport_closed")
        self._emit(Closed())

    def publish(self, channel: str, message: Message) -> None:
        """Send ``message`` on ``channel``; dropped while not connected."""
        client = self._client
        if client is None:
            LOGGER.debug("Dropping message on %s: transport not connected", channel)
            return
        try:
            client.send_message(channel, json.dumps(message))
        except OSError as exc:
            _log_event("transport_send_error", channel=channel, error=str(exc))
            self._emit(TransportError(str(exc)))

    def subscribe(self, channel: str, handler: MessageHandler) -> None:
        if channel not in self._subscriptions:
            self._subscriptions[channel] = []
            self._dispatcher.map(channel, self._on_message)
        self._subscriptions[channel].append(handler)

    def inject(self, channel: str, *args: Any) -> None:
        """Testing helper to deliver a message as if it arrived over OSC."""
        self._on_message(channel, *args)

    # Handlers -----------------------------------------------------------------

    def _on_message(self, address: str, *args: Any) -> None:
        if not args:
            LOGGER.debug("Ignoring empty payload on %s", address)
            return
        message = {"data": args[0]}
        for handler in self._subscriptions.get(address, []):
            handler(message)

    def _emit(self, event: TransportEvent) -> None:
        for listener in list(self._listeners):
            listener(event)


__all__ = [
    "Closed",
    "Connected",
    "Message",
    "MessageHandler",
    "OscTransport",
    "Transport",
    "TransportError",
    "TransportEvent",
    "TransportListener",
]
