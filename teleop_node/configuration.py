"""Configuration loading and dataclasses for the teleop node."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Tuple

import yaml

from .control_surface import SurfaceAddresses


@dataclass(frozen=True)
class TransportConfig:
    remote_host: str
    remote_port: int
    listen_host: str
    listen_port: int


@dataclass(frozen=True)
class CommandConfig:
    channel: str = "/cmd_vel"
    frame_id: str = "base_link"


@dataclass(frozen=True)
class MultiplierConfig:
    linear: float = 0.5
    angular: float = 1.0
    linear_range: Tuple[float, float] = (0.0, 2.0)
    angular_range: Tuple[float, float] = (0.0, 3.0)

    def __post_init__(self) -> None:
        for name, (lower, upper) in (
            ("linear_range", self.linear_range),
            ("angular_range", self.angular_range),
        ):
            if lower < 0.0 or lower > upper:
                raise ValueError(f"{name} must satisfy 0 <= min <= max")
        for name, value, (lower, upper) in (
            ("linear", self.linear, self.linear_range),
            ("angular", self.angular, self.angular_range),
        ):
            if not lower <= value <= upper:
                raise ValueError(f"multipliers.{name} must lie within {name}_range")


@dataclass(frozen=True)
class TouchConfig:
    throttle_ms: float = 30.0
    min_magnitude: float = 0.01

    def __post_init__(self) -> None:
        if self.throttle_ms < 0.0:
            raise ValueError("touch.throttle_ms must be non-negative")


@dataclass(frozen=True)
class GamepadConfig:
    enabled: bool = True
    deadzone: float = 0.1
    frame_hz: float = 60.0

    def __post_init__(self) -> None:
        if not 0.0 <= self.deadzone < 1.0:
            raise ValueError("gamepad.deadzone must be within [0, 1)")
        if self.frame_hz <= 0:
            raise ValueError("gamepad.frame_hz must be greater than zero")


@dataclass(frozen=True)
class ControlSurfaceConfig:
    host: str
    port: int
    addresses: SurfaceAddresses


@dataclass(frozen=True)
class SensorConfig:
    soil_channel: str = "/soil_sensor"
    bme680_channel: str = "/bme680"


@dataclass(frozen=True)
class LoggingConfig:
    level: str
    diagnostic_lines: int = 500


@dataclass(frozen=True)
class AppConfig:
    transport: TransportConfig
    command: CommandConfig
    multipliers: MultiplierConfig
    touch: TouchConfig
    gamepad: GamepadConfig
    control_surface: ControlSurfaceConfig
    sensors: SensorConfig
    logging: LoggingConfig


def load_config(path: Path) -> AppConfig:
    """Load configuration from a YAML file."""
    with path.open("r", encoding="utf-8") as handle:
        raw = yaml.safe_load(handle) or {}

    return AppConfig(
        transport=TransportConfig(
            remote_host=str(raw["transport"]["remote_host"]),
            remote_port=int(raw["transport"]["remote_port"]),
            listen_host=str(raw["transport"].get("listen_host", "0.0.0.0")),
            listen_port=int(raw["transport"]["listen_port"]),
        ),
        command=_parse_command(raw.get("command", {})),
        multipliers=_parse_multipliers(raw.get("multipliers", {})),
        touch=TouchConfig(
            throttle_ms=float(raw.get("touch", {}).get("throttle_ms", 30.0)),
            min_magnitude=float(raw.get("touch", {}).get("min_magnitude", 0.01)),
        ),
        gamepad=GamepadConfig(
            enabled=bool(raw.get("gamepad", {}).get("enabled", True)),
            deadzone=float(raw.get("gamepad", {}).get("deadzone", 0.1)),
            frame_hz=float(raw.get("gamepad", {}).get("frame_hz", 60.0)),
        ),
        control_surface=_parse_control_surface(raw["control_surface"]),
        sensors=SensorConfig(
            soil_channel=str(raw.get("sensors", {}).get("soil_channel", "/soil_sensor")),
            bme680_channel=str(raw.get("sensors", {}).get("bme680_channel", "/bme680")),
        ),
        logging=LoggingConfig(
            level=str(raw.get("logging", {}).get("level", "INFO")),
            diagnostic_lines=int(raw.get("logging", {}).get("diagnostic_lines", 500)),
        ),
    )


def _parse_command(raw: Any) -> CommandConfig:
    if not isinstance(raw, dict):
        raw = {}
    return CommandConfig(
        channel=str(raw.get("channel", "/cmd_vel")),
        frame_id=str(raw.get("frame_id", "base_link")),
    )


def _parse_range(raw: Any, default: Tuple[float, float]) -> Tuple[float, float]:
    if raw is None:
        return default
    lower, upper = raw
    return float(lower), float(upper)


def _parse_multipliers(raw: Any) -> MultiplierConfig:
    if not isinstance(raw, dict):
        raw = {}
    return MultiplierConfig(
        linear=float(raw.get("linear", 0.5)),
        angular=float(raw.get("angular", 1.0)),
        linear_range=_parse_range(raw.get("linear_range"), (0.0, 2.0)),
        angular_range=_parse_range(raw.get("angular_range"), (0.0, 3.0)),
    )


def _parse_control_surface(raw: Any) -> ControlSurfaceConfig:
    defaults = SurfaceAddresses()
    addresses = raw.get("addresses", {}) or {}
    return ControlSurfaceConfig(
        host=str(raw.get("host", "0.0.0.0")),
        port=int(raw["port"]),
        addresses=SurfaceAddresses(
            move=str(addresses.get("move", defaults.move)),
            release=str(addresses.get("release", defaults.release)),
            linear_mul=str(addresses.get("linear_mul", defaults.linear_mul)),
            angular_mul=str(addresses.get("angular_mul", defaults.angular_mul)),
        ),
    )


def load_default_config() -> AppConfig:
    """Load the default config.yaml shipped with the package."""
    path = Path(__file__).resolve().parent / "config.yaml"
    return load_config(path)


__all__ = [
    "AppConfig",
    "CommandConfig",
    "ControlSurfaceConfig",
    "GamepadConfig",
    "LoggingConfig",
    "MultiplierConfig",
    "SensorConfig",
    "TouchConfig",
    "TransportConfig",
    "load_config",
    "load_default_config",
]
