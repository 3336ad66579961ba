"""Tests for the link and command-activity status state machine."""

from __future__ import annotations

from datetime import datetime
from typing import List, Tuple

from teleop_node.command_publisher import CommandPublisher
from teleop_node.state import COMMAND_STARTUP, LINK_STARTUP, LinkState, StatusState, StatusValue
from teleop_node.status import DiagnosticLog, StatusReporter
from teleop_node.transport import Closed, Connected, OscTransport, TransportError


def make_reporter() -> StatusReporter:
    return StatusReporter(DiagnosticLog(now=lambda: datetime(2026, 1, 13, 9, 30, 5)))


def test_startup_values() -> None:
    reporter = make_reporter()
    assert reporter.link_status == LINK_STARTUP
    assert reporter.command_status == COMMAND_STARTUP
    assert reporter.link_status.text == "Connecting..."


def test_connect_sets_link_connected_and_command_idle() -> None:
    reporter = make_reporter()
    reporter.handle_transport_event(Connected())
    assert reporter.link_state is LinkState.CONNECTED
    assert reporter.command_state is StatusState.IDLE


def test_error_applies_to_both_statuses() -> None:
    reporter = make_reporter()
    reporter.handle_transport_event(Connected())
    reporter.handle_transport_event(TransportError("connection refused"))
    assert reporter.link_state is LinkState.ERROR
    assert reporter.command_state is StatusState.ERROR
    assert reporter.command_status.color == "#f55"
    assert any("connection refused" in line for line in reporter.log.lines)


def test_activity_only_moves_command_status() -> None:
    reporter = make_reporter()
    reporter.handle_transport_event(Connected())
    reporter.report_active()
    assert reporter.command_state is StatusState.ACTIVE
    assert reporter.link_state is LinkState.CONNECTED
    reporter.report_idle()
    assert reporter.command_state is StatusState.IDLE


def test_machine_is_reenterable() -> None:
    reporter = make_reporter()
    for _ in range(2):
        reporter.handle_transport_event(Connected())
        reporter.report_active()
        reporter.handle_transport_event(Closed())
    assert reporter.link_state is LinkState.DISCONNECTED
    reporter.handle_transport_event(Connected())
    assert reporter.command_state is StatusState.IDLE


def test_log_lines_are_stamped_and_repeats_suppressed() -> None:
    reporter = make_reporter()
    reporter.report_idle()
    reporter.report_idle()
    reporter.report_idle()
    assert reporter.log.lines == ["[09:30:05] Command status: Idle"]


def test_listeners_receive_both_values() -> None:
    reporter = make_reporter()
    seen: List[Tuple[StatusValue, StatusValue]] = []
    reporter.add_listener(lambda link, command: seen.append((link, command)))
    reporter.handle_transport_event(Connected())
    reporter.report_active()
    assert seen == [
        (LinkState.CONNECTED.value, StatusState.IDLE.value),
        (LinkState.CONNECTED.value, StatusState.ACTIVE.value),
    ]


def test_close_disconnects_both_and_publishes_become_noops() -> None:
    reporter = make_reporter()
    transport = OscTransport("127.0.0.1", 9, "127.0.0.1", 0)
    transport.add_listener(reporter.handle_transport_event)
    publisher = CommandPublisher(transport)

    reporter.handle_transport_event(Connected())
    reporter.handle_transport_event(Closed())

    assert reporter.link_state is LinkState.DISCONNECTED
    assert reporter.command_state is StatusState.DISCONNECTED
    assert reporter.link_status.text == "Disconnected"
    # Publishing is still attempted; the unconnected transport drops it.
    assert publisher.publish(0.5, 0.0) is not None
    assert not transport.connected


def test_diagnostic_log_bounded() -> None:
    log = DiagnosticLog(max_lines=2)
    for idx in range(5):
        log.append(f"line {idx}")
    assert len(log) == 2
    assert log.lines[-1].endswith("line 4")
