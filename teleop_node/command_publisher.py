"""Stamping and publishing of velocity commands."""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Callable, Optional

from .state import Command, Stamp
from .transport import Transport

LOGGER = logging.getLogger(__name__)

DEFAULT_CHANNEL = "/cmd_vel"
DEFAULT_FRAME_ID = "base_link"


class CommandPublisher:
    """Builds stamped commands and forwards them to the transport.

    Both input sources share one publisher. There is no arbitration: the most
    recent call determines what the robot receives.
    """

    def __init__(
        self,
        transport: Optional[Transport],
        channel: str = DEFAULT_CHANNEL,
        frame_id: str = DEFAULT_FRAME_ID,
        clock_ns: Callable[[], int] = time.time_ns,
    ) -> None:
        self._transport = transport
        self._channel = channel
        self._frame_id = frame_id
        self._clock_ns = clock_ns
        self._last_ns = 0

    @property
    def channel(self) -> str:
        return self._channel

    def attach(self, transport: Optional[Transport]) -> None:
        self._transport = transport

    def publish(self, linear: float, angular: float) -> Optional[Command]:
        """Publish one command; a silent no-op without a transport."""
        if self._transport is None:
            return None
        command = Command(linear=linear, angular=angular, stamp=self._next_stamp())
        self._transport.publish(self._channel, command.to_message(self._frame_id))
        LOGGER.debug("Published lin=%.3f ang=%.3f", linear, angular)
        return command

    def stop(self) -> Optional[Command]:
        return self.publish(0.0, 0.0)

    def _next_stamp(self) -> Stamp:
        # Wall clock can step backwards; stamps must not.
        now_ns = max(self._clock_ns(), self._last_ns)
        self._last_ns = now_ns
        return Stamp.from_ns(now_ns)


@dataclass
class CommandLogThrottle:
    """Limits per-command diagnostic lines to meaningful changes.

    A line is allowed when ``interval_s`` has passed since the last one or a
    component moved by more than ``min_delta``.
    """

    interval_s: float = 0.1
    min_delta: float = 0.01
    last_s: float = float("-inf")
    last_linear: float = 0.0
    last_angular: float = 0.0

    def should_log(self, now: float, linear: float, angular: float) -> bool:
        changed = (
            abs(linear - self.last_linear) > self.min_delta
            or abs(angular - self.last_angular) > self.min_delta
        )
        if now - self.last_s > self.interval_s or changed:
            self.last_s = now
            self.last_linear = linear
            self.last_angular = angular
            return True
        return False


__all__ = ["CommandLogThrottle", "CommandPublisher", "DEFAULT_CHANNEL", "DEFAULT_FRAME_ID"]
