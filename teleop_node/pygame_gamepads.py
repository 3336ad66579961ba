"""pygame-backed gamepad discovery and axis reads."""

from __future__ import annotations

import logging
from typing import Callable, Dict, List, Optional

import pygame

LOGGER = logging.getLogger(__name__)

ConnectCallback = Callable[[int, str], None]
DisconnectCallback = Callable[[int], None]


class PygameGamepads:
    """Tracks attached joysticks by pygame instance id.

    :meth:`pump` must run once per frame; it drains the pygame event queue
    and forwards device events to the callbacks registered with :meth:`bind`.
    """

    def __init__(self) -> None:
        pygame.init()
        pygame.joystick.init()
        self._on_connected: Optional[ConnectCallback] = None
        self._on_disconnected: Optional[DisconnectCallback] = None
        self._joysticks: Dict[int, "pygame.joystick.JoystickType"] = {}
        LOGGER.info("pygame joystick subsystem ready (%d attached)", pygame.joystick.get_count())

    def bind(self, on_connected: ConnectCallback, on_disconnected: DisconnectCallback) -> None:
        self._on_connected = on_connected
        self._on_disconnected = on_disconnected

    def pump(self) -> None:
        # Drain all events; a full SDL queue drops device add/remove events.
        for event in pygame.event.get():
            if event.type == pygame.JOYDEVICEADDED:
                self._add(event.device_index)
            elif event.type == pygame.JOYDEVICEREMOVED:
                self._remove(event.instance_id)

    def read_axes(self, device_index: int) -> Optional[List[float]]:
        joystick = self._joysticks.get(device_index)
        if joystick is None:
            return None
        return [joystick.get_axis(axis) for axis in range(joystick.get_numaxes())]

    def close(self) -> None:
        for joystick in self._joysticks.values():
            joystick.quit()
        self._joysticks.clear()
        pygame.joystick.quit()
        pygame.quit()

    def _add(self, device_index: int) -> None:
        joystick = pygame.joystick.Joystick(device_index)
        joystick.init()
        instance_id = joystick.get_instance_id()
        self._joysticks[instance_id] = joystick
        LOGGER.info("Joystick added: %s (instance %d)", joystick.get_name(), instance_id)
        if self._on_connected is not None:
            self._on_connected(instance_id, joystick.get_name())

    def _remove(self, instance_id: int) -> None:
        joystick = self._joysticks.pop(instance_id, None)
        if joystick is None:
            return
        LOGGER.info("Joystick removed: instance %d", instance_id)
        if self._on_disconnected is not None:
            self._on_disconnected(instance_id)


__all__ = ["PygameGamepads"]
