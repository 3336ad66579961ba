"""Response shaping utilities for joystick and gamepad axes."""

from __future__ import annotations

import math

JOYSTICK_RANGE = 100.0


def ease(raw: float) -> float:
    """Map a joystick deflection in [-100, 100] onto a quadratic curve in [-1, 1].

    Small deflections near the centre produce proportionally smaller output,
    full deflection still reaches full output. The curve is odd-symmetric so
    ``ease(-x) == -ease(x)``.
    """
    normalized = raw / JOYSTICK_RANGE
    magnitude = abs(normalized)
    return math.copysign(magnitude * magnitude, normalized) if magnitude else 0.0


def apply_deadzone(value: float, deadzone: float) -> float:
    """Return ``value`` unchanged outside the deadzone, exactly ``0.0`` inside."""
    if deadzone < 0.0:
        raise ValueError("deadzone must be non-negative")
    if abs(value) > deadzone:
        return value
    return 0.0


__all__ = ["JOYSTICK_RANGE", "apply_deadzone", "ease"]
