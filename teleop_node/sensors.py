"""Parsing of auxiliary sensor payloads into display strings."""

from __future__ import annotations

import json
import logging
from typing import Any, Dict, Optional

from .transport import Message, Transport

LOGGER = logging.getLogger(__name__)

MISSING = "—"

SOIL_KEYS = ("ph", "moist", "k", "n", "p", "k2")
BME680_FIELDS = (
    ("temp", " °C"),
    ("humidity", " %"),
    ("pressure", " hPa"),
    ("gas", ""),
    ("altitude", " m"),
)


def parse_soil(message: Message) -> Optional[Dict[str, str]]:
    """Decode a soil sensor reading published as a JSON object string."""
    try:
        data = json.loads(message["data"])
    except (KeyError, TypeError, ValueError):
        return None
    if not isinstance(data, dict):
        return None
    reading = {key: str(data[key]) if key in data else MISSING for key in SOIL_KEYS}
    if "moist" in data:
        reading["moist"] = f"{data['moist']}%"
    return reading


def parse_bme680(message: Message) -> Optional[Dict[str, str]]:
    """Decode a BME680 reading: a list ``[temp, humidity, pressure, gas, altitude]``.

    The list may arrive directly or JSON-encoded in a string.
    """
    raw: Any = message.get("data")
    if not isinstance(raw, list):
        try:
            raw = json.loads(raw)
        except (TypeError, ValueError):
            return None
    if not isinstance(raw, list):
        return None
    reading: Dict[str, str] = {}
    for idx, (name, unit) in enumerate(BME680_FIELDS):
        if idx >= len(raw):
            reading[name] = MISSING
            continue
        try:
            reading[name] = f"{float(raw[idx]):.2f}{unit}"
        except (TypeError, ValueError):
            return None
    return reading


class SensorPanel:
    """Keeps the latest soil and BME680 readings received from the robot."""

    def __init__(self, soil_channel: str, bme680_channel: str) -> None:
        self._soil_channel = soil_channel
        self._bme680_channel = bme680_channel
        self.soil: Dict[str, str] = {key: MISSING for key in SOIL_KEYS}
        self.bme680: Dict[str, str] = {name: MISSING for name, _ in BME680_FIELDS}

    def attach(self, transport: Transport) -> None:
        transport.subscribe(self._soil_channel, self._on_soil)
        transport.subscribe(self._bme680_channel, self._on_bme680)

    def _on_soil(self, message: Message) -> None:
        reading = parse_soil(message)
        if reading is None:
            LOGGER.debug("Ignoring unparsable soil payload: %s", message)
            return
        self.soil = reading

    def _on_bme680(self, message: Message) -> None:
        reading = parse_bme680(message)
        if reading is None:
            LOGGER.debug("Ignoring unparsable BME680 payload: %s", message)
            return
        self.bme680 = reading


__all__ = ["MISSING", "SensorPanel", "parse_bme680", "parse_soil"]
