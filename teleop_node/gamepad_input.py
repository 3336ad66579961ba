"""Frame-synchronised gamepad polling."""

from __future__ import annotations

import logging
import time
from typing import Callable, Optional, Protocol, Sequence, Tuple

from .command_publisher import CommandLogThrottle, CommandPublisher
from .frame_clock import FrameScheduler
from .shaping import apply_deadzone
from .state import GamepadSample, GamepadSession, Multipliers
from .status import StatusReporter

LOGGER = logging.getLogger(__name__)

DEADZONE = 0.1


class AxisSource(Protocol):
    """Provides current axis values for a device, or ``None`` if it is gone."""

    def read_axes(self, device_index: int) -> Optional[Sequence[float]]:
        ...


def shape_gamepad(
    sample: GamepadSample,
    multipliers: Multipliers,
    deadzone: float = DEADZONE,
) -> Tuple[float, float]:
    """Apply the deadzone and linear scaling to stick axes 0 (x) and 1 (y).

    The device reports forward as negative y, so both axes are inverted.
    """
    linear = apply_deadzone(sample.y, deadzone)
    angular = apply_deadzone(sample.x, deadzone)
    linear = -linear * multipliers.linear if linear else 0.0
    angular = -angular * multipliers.angular if angular else 0.0
    return linear, angular


class GamepadInput:
    """Polls the tracked gamepad once per frame and publishes every tick.

    Unlike the touch path there is no throttle or magnitude gate; frame
    pacing already limits the rate. A disconnect stops the loop without
    sending a stop command.
    """

    def __init__(
        self,
        publisher: CommandPublisher,
        status: StatusReporter,
        multipliers: Multipliers,
        axes: AxisSource,
        scheduler: FrameScheduler,
        deadzone: float = DEADZONE,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if not 0.0 <= deadzone < 1.0:
            raise ValueError("deadzone must be within [0, 1)")
        self._publisher = publisher
        self._status = status
        self._multipliers = multipliers
        self._axes = axes
        self._scheduler = scheduler
        self._deadzone = deadzone
        self._clock = clock
        self._session = GamepadSession()
        self._log_throttle = CommandLogThrottle()
        self._missed_ticks = 0

    @property
    def session(self) -> GamepadSession:
        return self._session

    @property
    def missed_ticks(self) -> int:
        return self._missed_ticks

    def handle_connected(self, device_index: int, device_id: str) -> None:
        generation = self._session.start(device_index, device_id)
        self._missed_ticks = 0
        self._status.log.append(f"Gamepad connected: {device_id}")
        self._scheduler.request_frame(lambda: self._poll(generation))

    def handle_disconnected(self, device_index: Optional[int] = None) -> None:
        if device_index is not None and device_index != self._session.device_index:
            LOGGER.debug("Ignoring disconnect of untracked gamepad %s", device_index)
            return
        self._session.stop()
        self._status.log.append("Gamepad disconnected.")

    def _poll(self, generation: int) -> None:
        if not self._session.is_current(generation):
            return
        index = self._session.device_index
        raw = self._axes.read_axes(index) if index is not None else None
        if raw is None or len(raw) < 2:
            self._missed_ticks += 1
        else:
            self._apply(GamepadSample(axes=raw))
        if self._session.is_current(generation):
            self._scheduler.request_frame(lambda: self._poll(generation))

    def _apply(self, sample: GamepadSample) -> None:
        linear, angular = shape_gamepad(sample, self._multipliers, self._deadzone)
        self._publisher.publish(linear, angular)
        if linear or angular:
            if self._log_throttle.should_log(self._clock(), linear, angular):
                self._status.log.append(f"Pad -> lin {linear:.2f}, ang {angular:.2f}")
            self._status.report_active()
        else:
            self._status.report_idle()


__all__ = ["AxisSource", "DEADZONE", "GamepadInput", "shape_gamepad"]
