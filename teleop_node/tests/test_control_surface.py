"""Tests for routing control surface OSC messages."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Tuple

import pytest

from teleop_node.command_publisher import CommandPublisher
from teleop_node.control_surface import ControlSurfaceReceiver, SurfaceAddresses
from teleop_node.state import Multipliers, StatusState
from teleop_node.status import DiagnosticLog, StatusReporter
from teleop_node.touch_input import TouchInput


@dataclass
class RecordingTransport:
    messages: List[Tuple[str, Dict[str, Any]]] = field(default_factory=list)

    def publish(self, channel: str, message: Dict[str, Any]) -> None:
        self.messages.append((channel, message))

    def subscribe(self, channel, handler) -> None:
        pass

    def add_listener(self, listener) -> None:
        pass


class SteppingClock:
    def __init__(self, step: float = 1.0) -> None:
        self.now = 0.0
        self.step = step

    def __call__(self) -> float:
        self.now += self.step
        return self.now


def make_receiver():
    transport = RecordingTransport()
    status = StatusReporter(DiagnosticLog())
    multipliers = Multipliers(linear=1.0, angular=1.0)
    touch = TouchInput(CommandPublisher(transport), status, multipliers, clock=SteppingClock())
    receiver = ControlSurfaceReceiver(touch, multipliers, "127.0.0.1", 0)
    return receiver, transport, status, multipliers


def test_move_routes_to_touch_input() -> None:
    receiver, transport, status, _ = make_receiver()
    receiver.inject("/joystick/move", 0.0, 100.0)
    assert transport.messages[0][1]["twist"]["linear"]["x"] == pytest.approx(1.0)
    assert status.command_state is StatusState.ACTIVE


@pytest.mark.parametrize(
    "args",
    [(), (50.0,), (None, 50.0), ("left", 50.0), (float("nan"), 50.0)],
)
def test_incomplete_moves_are_dropped(args: tuple) -> None:
    receiver, transport, _, _ = make_receiver()
    receiver.inject("/joystick/move", *args)
    assert transport.messages == []


def test_release_publishes_stop() -> None:
    receiver, transport, status, _ = make_receiver()
    receiver.inject("/joystick/release")
    twist = transport.messages[0][1]["twist"]
    assert twist["linear"]["x"] == 0.0
    assert twist["angular"]["z"] == 0.0
    assert status.command_state is StatusState.IDLE


def test_multiplier_messages_clamp_to_range() -> None:
    receiver, _, _, multipliers = make_receiver()
    receiver.inject("/multipliers/linear", 1.5)
    receiver.inject("/multipliers/angular", 9.0)
    assert multipliers.linear == pytest.approx(1.5)
    assert multipliers.angular == pytest.approx(3.0)

    receiver.inject("/multipliers/linear", "fast")
    receiver.inject("/multipliers/angular")
    assert multipliers.linear == pytest.approx(1.5)
    assert multipliers.angular == pytest.approx(3.0)


def test_custom_addresses() -> None:
    transport = RecordingTransport()
    multipliers = Multipliers()
    touch = TouchInput(CommandPublisher(transport), StatusReporter(DiagnosticLog()), multipliers)
    receiver = ControlSurfaceReceiver(
        touch,
        multipliers,
        "127.0.0.1",
        0,
        SurfaceAddresses(move="/1/xy", release="/1/xy/release"),
    )
    receiver.inject("/1/xy/release")
    assert len(transport.messages) == 1
    with pytest.raises(KeyError):
        receiver.inject("/joystick/move", 1.0, 1.0)
