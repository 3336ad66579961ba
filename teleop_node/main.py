"""Entrypoint for the teleop node asyncio application."""

from __future__ import annotations

import argparse
import asyncio
import contextlib
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, List, Optional

from .command_publisher import CommandPublisher
from .configuration import AppConfig, load_config, load_default_config
from .control_surface import ControlSurfaceReceiver
from .frame_clock import FrameClock, frame_loop
from .gamepad_input import AxisSource, GamepadInput
from .sensors import SensorPanel
from .state import Multipliers, StatusValue
from .status import DiagnosticLog, StatusReporter
from .touch_input import TouchInput
from .transport import OscTransport

LOGGER = logging.getLogger(__name__)


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Teleoperation node for velocity command streaming.")
    parser.add_argument(
        "--config",
        type=Path,
        help="Path to configuration YAML. Defaults to bundled config.yaml if omitted.",
    )
    parser.add_argument(
        "--no-gamepad",
        action="store_true",
        help="Disable gamepad polling even if enabled in the configuration.",
    )
    return parser.parse_args()


@dataclass
class TeleopNode:
    """The wired-up command pipeline, independent of any real device backend."""

    config: AppConfig
    log: DiagnosticLog
    status: StatusReporter
    transport: OscTransport
    publisher: CommandPublisher
    multipliers: Multipliers
    touch: TouchInput
    receiver: ControlSurfaceReceiver
    sensors: SensorPanel
    clock: FrameClock


def build_node(config: AppConfig, transport: Optional[OscTransport] = None) -> TeleopNode:
    log = DiagnosticLog(max_lines=config.logging.diagnostic_lines)
    log.append("Initializing...")
    status = StatusReporter(log)
    status.add_listener(_log_status)

    if transport is None:
        transport = OscTransport(
            config.transport.remote_host,
            config.transport.remote_port,
            config.transport.listen_host,
            config.transport.listen_port,
        )
    transport.add_listener(status.handle_transport_event)

    publisher = CommandPublisher(
        transport,
        channel=config.command.channel,
        frame_id=config.command.frame_id,
    )
    multipliers = Multipliers(
        linear=config.multipliers.linear,
        angular=config.multipliers.angular,
        linear_range=config.multipliers.linear_range,
        angular_range=config.multipliers.angular_range,
    )
    touch = TouchInput(
        publisher,
        status,
        multipliers,
        throttle_s=config.touch.throttle_ms / 1000.0,
        min_magnitude=config.touch.min_magnitude,
    )
    receiver = ControlSurfaceReceiver(
        touch,
        multipliers,
        config.control_surface.host,
        config.control_surface.port,
        config.control_surface.addresses,
    )
    sensors = SensorPanel(config.sensors.soil_channel, config.sensors.bme680_channel)
    sensors.attach(transport)

    return TeleopNode(
        config=config,
        log=log,
        status=status,
        transport=transport,
        publisher=publisher,
        multipliers=multipliers,
        touch=touch,
        receiver=receiver,
        sensors=sensors,
        clock=FrameClock(),
    )


def attach_gamepad(node: TeleopNode, axes: AxisSource) -> GamepadInput:
    return GamepadInput(
        node.publisher,
        node.status,
        node.multipliers,
        axes,
        node.clock,
        deadzone=node.config.gamepad.deadzone,
    )


def _log_status(link: StatusValue, command: StatusValue) -> None:
    LOGGER.debug("Status link=%s command=%s", link.text, command.text)


async def async_main(args: argparse.Namespace) -> None:
    config = load_config(args.config) if args.config else load_default_config()
    logging.basicConfig(level=getattr(logging, config.logging.level.upper(), logging.INFO))

    node = build_node(config)
    before_frame: List[Callable[[], None]] = []
    gamepads = None
    if config.gamepad.enabled and not args.no_gamepad:
        from .pygame_gamepads import PygameGamepads

        gamepads = PygameGamepads()
        gamepad = attach_gamepad(node, gamepads)
        gamepads.bind(gamepad.handle_connected, gamepad.handle_disconnected)
        before_frame.append(gamepads.pump)

    loop_task: asyncio.Task[None] | None = None
    try:
        await node.transport.connect()
        await node.receiver.start()
        loop_task = asyncio.create_task(
            frame_loop(node.clock, config.gamepad.frame_hz, before_frame)
        )
        await loop_task
    except asyncio.CancelledError:
        if loop_task is not None:
            loop_task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await loop_task
        raise
    finally:
        await node.receiver.stop()
        node.transport.close()
        if gamepads is not None:
            gamepads.close()


def main() -> None:
    args = parse_args()
    try:
        asyncio.run(async_main(args))
    except KeyboardInterrupt:
        LOGGER.info("Interrupted by user")


if __name__ == "__main__":
    main()
