"""Dataclasses modelling commands, input samples, and status values."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Optional, Sequence, Tuple


@dataclass(frozen=True)
class Stamp:
    """Wall-clock capture time split the way ROS headers expect it."""

    sec: int
    nanosec: int

    @classmethod
    def from_ns(cls, total_ns: int) -> "Stamp":
        return cls(sec=total_ns // 1_000_000_000, nanosec=total_ns % 1_000_000_000)

    def to_ns(self) -> int:
        return self.sec * 1_000_000_000 + self.nanosec


@dataclass(frozen=True)
class Command:
    """A single stamped velocity command."""

    linear: float
    angular: float
    stamp: Stamp

    def to_message(self, frame_id: str = "base_link") -> Dict[str, Any]:
        """Render the TwistStamped-shaped message sent to the robot."""
        return {
            "header": {
                "frame_id": frame_id,
                "stamp": {"sec": self.stamp.sec, "nanosec": self.stamp.nanosec},
            },
            "twist": {
                "linear": {"x": float(self.linear), "y": 0.0, "z": 0.0},
                "angular": {"x": 0.0, "y": 0.0, "z": float(self.angular)},
            },
        }


@dataclass(frozen=True)
class TouchSample:
    """Virtual joystick reading; ``None`` on an axis means no contact."""

    x: Optional[float]
    y: Optional[float]


@dataclass(frozen=True)
class GamepadSample:
    """Axis values read from a gamepad during one poll."""

    axes: Sequence[float]

    @property
    def x(self) -> float:
        return float(self.axes[0])

    @property
    def y(self) -> float:
        return float(self.axes[1])


@dataclass
class ThrottleState:
    """Mutable throttle state owned by the touch input source."""

    last_emit_s: Optional[float] = None

    def reset(self) -> None:
        self.last_emit_s = None


@dataclass
class GamepadSession:
    """Tracks the gamepad currently driving the polling loop."""

    device_index: Optional[int] = None
    device_id: str = ""
    generation: int = field(default=0, repr=False)

    @property
    def active(self) -> bool:
        return self.device_index is not None

    def start(self, device_index: int, device_id: str = "") -> int:
        """Track a new device and return the generation of its loop."""
        self.device_index = device_index
        self.device_id = device_id
        self.generation += 1
        return self.generation

    def stop(self) -> None:
        self.device_index = None
        self.device_id = ""

    def is_current(self, generation: int) -> bool:
        return self.device_index is not None and self.generation == generation


@dataclass
class Multipliers:
    """Operator-controlled scale factors shared by both input sources."""

    linear: float = 0.5
    angular: float = 1.0
    linear_range: Tuple[float, float] = (0.0, 2.0)
    angular_range: Tuple[float, float] = (0.0, 3.0)

    def set_linear(self, value: float) -> float:
        self.linear = _clamp(float(value), *self.linear_range)
        return self.linear

    def set_angular(self, value: float) -> float:
        self.angular = _clamp(float(value), *self.angular_range)
        return self.angular


def _clamp(value: float, lower: float, upper: float) -> float:
    if value < lower:
        return lower
    if value > upper:
        return upper
    return value


@dataclass(frozen=True)
class StatusValue:
    """Text and color hint shown on the status surface."""

    text: str
    color: str


class StatusState(Enum):
    """Command-activity status."""

    IDLE = StatusValue("Idle", "#ccc")
    ACTIVE = StatusValue("Active", "#00ffcc")
    ERROR = StatusValue("Error", "#f55")
    DISCONNECTED = StatusValue("Disconnected", "#fa0")

    @property
    def text(self) -> str:
        return self.value.text

    @property
    def color(self) -> str:
        return self.value.color


class LinkState(Enum):
    """Transport link status, tracked independently of command activity."""

    CONNECTED = StatusValue("Connected", "#00ffcc")
    ERROR = StatusValue("Error", "#f55")
    DISCONNECTED = StatusValue("Disconnected", "#fa0")

    @property
    def text(self) -> str:
        return self.value.text

    @property
    def color(self) -> str:
        return self.value.color


LINK_STARTUP = StatusValue("Connecting...", "#00ffcc")
COMMAND_STARTUP = StatusValue("Pending...", "#ccc")


__all__ = [
    "COMMAND_STARTUP",
    "Command",
    "GamepadSample",
    "GamepadSession",
    "LINK_STARTUP",
    "LinkState",
    "Multipliers",
    "Stamp",
    "StatusState",
    "StatusValue",
    "ThrottleState",
    "TouchSample",
]
