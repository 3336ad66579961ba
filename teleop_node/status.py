"""Link and command-activity status tracking with an operator diagnostic log."""

from __future__ import annotations

import logging
from collections import deque
from datetime import datetime
from typing import Callable, Deque, List, Optional

from .state import (
    COMMAND_STARTUP,
    LINK_STARTUP,
    LinkState,
    StatusState,
    StatusValue,
)
from .transport import Closed, Connected, TransportError, TransportEvent

LOGGER = logging.getLogger(__name__)

StatusListener = Callable[[StatusValue, StatusValue], None]


class DiagnosticLog:
    """Append-only, wall-clock stamped log shown to the operator."""

    def __init__(
        self,
        max_lines: Optional[int] = None,
        now: Callable[[], datetime] = datetime.now,
    ) -> None:
        self._lines: Deque[str] = deque(maxlen=max_lines)
        self._now = now

    def append(self, message: str) -> str:
        line = f"[{self._now().strftime('%H:%M:%S')}] {message}"
        self._lines.append(line)
        LOGGER.info("%s", message)
        return line

    @property
    def lines(self) -> List[str]:
        return list(self._lines)

    def __len__(self) -> int:
        return len(self._lines)


class StatusReporter:
    """State machine behind the link and command-activity indicators.

    Transport lifecycle events move both indicators; input sources only move
    the command-activity indicator. Every change is written to the diagnostic
    log and pushed to registered listeners.
    """

    def __init__(self, log: DiagnosticLog) -> None:
        self._log = log
        self._link_state: Optional[LinkState] = None
        self._command_state: Optional[StatusState] = None
        self._listeners: List[StatusListener] = []

    @property
    def log(self) -> DiagnosticLog:
        return self._log

    @property
    def link_state(self) -> Optional[LinkState]:
        return self._link_state

    @property
    def command_state(self) -> Optional[StatusState]:
        return self._command_state

    @property
    def link_status(self) -> StatusValue:
        if self._link_state is None:
            return LINK_STARTUP
        return self._link_state.value

    @property
    def command_status(self) -> StatusValue:
        if self._command_state is None:
            return COMMAND_STARTUP
        return self._command_state.value

    def add_listener(self, listener: StatusListener) -> None:
        """Register a callback receiving ``(link_status, command_status)``."""
        self._listeners.append(listener)

    def handle_transport_event(self, event: TransportEvent) -> None:
        if isinstance(event, Connected):
            self._log.append("Connected to robot transport.")
            self._update(LinkState.CONNECTED, StatusState.IDLE)
        elif isinstance(event, TransportError):
            self._log.append(f"Transport error: {event.detail}")
            self._update(LinkState.ERROR, StatusState.ERROR)
        elif isinstance(event, Closed):
            self._log.append("Disconnected from robot transport.")
            self._update(LinkState.DISCONNECTED, StatusState.DISCONNECTED)
        else:
            raise TypeError(f"Unknown transport event: {event!r}")

    def report_active(self) -> None:
        self._update(self._link_state, StatusState.ACTIVE)

    def report_idle(self) -> None:
        self._update(self._link_state, StatusState.IDLE)

    def _update(self, link: Optional[LinkState], command: StatusState) -> None:
        if link == self._link_state and command == self._command_state:
            return
        if command != self._command_state:
            self._log.append(f"Command status: {command.text}")
        self._link_state = link
        self._command_state = command
        for listener in list(self._listeners):
            listener(self.link_status, self.command_status)


__all__ = ["DiagnosticLog", "StatusListener", "StatusReporter"]
