"""OSC receiver for the touch control surface (virtual joystick and sliders)."""

from __future__ import annotations

import asyncio
import logging
import math
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional, Tuple

from pythonosc import dispatcher
from pythonosc.osc_server import AsyncIOOSCUDPServer

from .state import Multipliers
from .touch_input import TouchInput

LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class SurfaceAddresses:
    """OSC addresses sent by the control surface layout."""

    move: str = "/joystick/move"
    release: str = "/joystick/release"
    linear_mul: str = "/multipliers/linear"
    angular_mul: str = "/multipliers/angular"


def _axis(value: Any) -> Optional[float]:
    if value is None:
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    return number if math.isfinite(number) else None


class ControlSurfaceReceiver:
    """Receives joystick and multiplier messages and routes them onwards."""

    def __init__(
        self,
        touch: TouchInput,
        multipliers: Multipliers,
        host: str,
        port: int,
        addresses: SurfaceAddresses = SurfaceAddresses(),
        loop: Optional[asyncio.AbstractEventLoop] = None,
    ) -> None:
        self._touch = touch
        self._multipliers = multipliers
        self._address = (host, port)
        self._addresses = addresses
        self._loop = loop
        self._routes: Dict[str, Callable[..., None]] = {
            addresses.move: self._on_move,
            addresses.release: self._on_release,
            addresses.linear_mul: self._on_linear_mul,
            addresses.angular_mul: self._on_angular_mul,
        }
        self._dispatcher = dispatcher.Dispatcher()
        for osc_address, handler in self._routes.items():
            self._dispatcher.map(osc_address, handler)
        self._transport: Optional[asyncio.BaseTransport] = None

    async def start(self) -> None:
        """Start listening for control surface messages."""
        if self._transport is not None:
            return
        loop = self._loop or asyncio.get_running_loop()
        server = AsyncIOOSCUDPServer(self._address, self._dispatcher, loop)
        self._transport, _protocol = await server.create_serve_endpoint()
        LOGGER.info("Control surface listening on %s:%s", *self.address)

    async def stop(self) -> None:
        if self._transport is None:
            return
        self._transport.close()
        self._transport = None

    @property
    def address(self) -> Tuple[str, int]:
        return self._address

    @property
    def addresses(self) -> SurfaceAddresses:
        return self._addresses

    def inject(self, osc_address: str, *args: Any) -> None:
        """Testing helper to deliver a message as if it arrived over OSC."""
        self._routes[osc_address](osc_address, *args)

    # Handlers -----------------------------------------------------------------

    def _on_move(self, _addr: str, *args: Any) -> None:
        x = _axis(args[0]) if len(args) > 0 else None
        y = _axis(args[1]) if len(args) > 1 else None
        self._touch.handle_move(x, y)

    def _on_release(self, _addr: str, *_args: Any) -> None:
        self._touch.handle_release()

    def _on_linear_mul(self, _addr: str, *args: Any) -> None:
        value = _axis(args[0]) if args else None
        if value is None:
            LOGGER.debug("Ignoring non-float linear multiplier payload: %s", args)
            return
        applied = self._multipliers.set_linear(value)
        LOGGER.info("Linear multiplier set to %.1f", applied)

    def _on_angular_mul(self, _addr: str, *args: Any) -> None:
        value = _axis(args[0]) if args else None
        if value is None:
            LOGGER.debug("Ignoring non-float angular multiplier payload: %s", args)
            return
        applied = self._multipliers.set_angular(value)
        LOGGER.info("Angular multiplier set to %.1f", applied)


__all__ = ["ControlSurfaceReceiver", "SurfaceAddresses"]
