"""Virtual joystick input: easing, throttle, and magnitude gate."""

from __future__ import annotations

import logging
import time
from typing import Callable, Optional, Tuple

from .command_publisher import CommandLogThrottle, CommandPublisher
from .shaping import ease
from .state import Multipliers, ThrottleState, TouchSample
from .status import DiagnosticLog, StatusReporter

LOGGER = logging.getLogger(__name__)

THROTTLE_S = 0.030
MIN_MAGNITUDE = 0.01

Velocity = Tuple[float, float]


def shape_touch(
    sample: TouchSample,
    now: float,
    state: ThrottleState,
    multipliers: Multipliers,
    throttle_s: float = THROTTLE_S,
    min_magnitude: float = MIN_MAGNITUDE,
) -> Tuple[Optional[Velocity], ThrottleState]:
    """Turn one joystick sample into a ``(linear, angular)`` pair, or ``None``.

    Samples with a missing axis and samples inside the throttle window leave
    the state untouched. Any other sample restarts the throttle window, even
    when the magnitude gate then discards it.
    """
    if sample.x is None or sample.y is None:
        return None, state
    if state.last_emit_s is not None and now - state.last_emit_s < throttle_s:
        return None, state
    state.last_emit_s = now

    linear = ease(sample.y) * multipliers.linear
    # Pushing right turns clockwise, which is negative angular velocity.
    angular = -ease(sample.x) * multipliers.angular

    if abs(linear) <= min_magnitude and abs(angular) <= min_magnitude:
        return None, state
    return (linear, angular), state


class TouchInput:
    """Feeds virtual joystick events into the publisher and status reporter."""

    def __init__(
        self,
        publisher: CommandPublisher,
        status: StatusReporter,
        multipliers: Multipliers,
        throttle_s: float = THROTTLE_S,
        min_magnitude: float = MIN_MAGNITUDE,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if throttle_s < 0.0:
            raise ValueError("throttle_s must be non-negative")
        self._publisher = publisher
        self._status = status
        self._multipliers = multipliers
        self._throttle_s = throttle_s
        self._min_magnitude = min_magnitude
        self._clock = clock
        self._state = ThrottleState()
        self._log_throttle = CommandLogThrottle()

    @property
    def throttle_state(self) -> ThrottleState:
        return self._state

    @property
    def log(self) -> DiagnosticLog:
        return self._status.log

    def handle_move(
        self, x: Optional[float], y: Optional[float], now: Optional[float] = None
    ) -> Optional[Velocity]:
        """Process a pointer move; returns the emitted pair if one was sent."""
        if now is None:
            now = self._clock()
        emitted, self._state = shape_touch(
            TouchSample(x=x, y=y),
            now,
            self._state,
            self._multipliers,
            self._throttle_s,
            self._min_magnitude,
        )
        if emitted is None:
            return None
        linear, angular = emitted
        self._publisher.publish(linear, angular)
        if self._log_throttle.should_log(now, linear, angular):
            self.log.append(f"Joystick -> lin {linear:.2f}, ang {angular:.2f}")
        self._status.report_active()
        return emitted

    def handle_release(self) -> None:
        """Stop the robot; bypasses both the throttle and the magnitude gate."""
        self._publisher.stop()
        self.log.append("Joystick released - stop.")
        self._status.report_idle()


__all__ = ["MIN_MAGNITUDE", "THROTTLE_S", "TouchInput", "Velocity", "shape_touch"]
