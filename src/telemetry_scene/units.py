"""
Unit conversion for decoded distances and rotations.
"""

from __future__ import annotations

import math
from dataclasses import dataclass

# Factors convert one unit into the base unit of its group
DISTANCE_UNITS: dict[str, float] = {
    "meters": 1.0,
    "centimeters": 0.01,
    "millimeters": 0.001,
    "inches": 0.0254,
    "feet": 0.3048,
    "yards": 0.9144,
}

ROTATION_UNITS: dict[str, float] = {
    "radians": 1.0,
    "degrees": math.pi / 180.0,
    "rotations": 2.0 * math.pi,
}


def _table_for(unit: str) -> dict[str, float]:
    if unit in DISTANCE_UNITS:
        return DISTANCE_UNITS
    if unit in ROTATION_UNITS:
        return ROTATION_UNITS
    raise ValueError(f"Unknown unit: {unit}")


def convert(value: float, from_unit: str, to_unit: str) -> float:
    """Convert ``value`` between two units of the same group."""
    table = _table_for(from_unit)
    if to_unit not in table:
        raise ValueError(f"Cannot convert {from_unit} to {to_unit}")
    return value * table[from_unit] / table[to_unit]


@dataclass(frozen=True, slots=True)
class UnitConversions:
    """Factors applied once at decode time."""

    distance: float = 1.0
    rotation: float = 1.0

    @classmethod
    def from_units(cls, unit_distance: str, unit_rotation: str) -> UnitConversions:
        return cls(
            distance=convert(1.0, unit_distance, "meters"),
            rotation=convert(1.0, unit_rotation, "radians"),
        )
