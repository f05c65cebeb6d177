"""
Log lookups that span several fields: alliance, driver station and mechanism trees.
"""

from __future__ import annotations

import math
from collections.abc import Iterable

from .log_source import LoggableType, LogSource
from .types import MechanismLine, MechanismState, Translation2d

ALLIANCE_STATION_KEYS: tuple[str, ...] = (
    "DriverStation/AllianceStation",
    "NT:/AdvantageKit/DriverStation/AllianceStation",
)
FMS_RED_ALLIANCE_KEY = "NT:/FMSInfo/IsRedAlliance"
ALLIANCE_KEYS: tuple[str, ...] = (*ALLIANCE_STATION_KEYS, FMS_RED_ALLIANCE_KEY)

# Stations 0-2 are red 1-3, stations 3-5 are blue 1-3
RED_STATION_MAX = 2

DEFAULT_LINE_COLOR = "#ffffff"
DEFAULT_LINE_WEIGHT = 1.0


def get_alliance_station(log: LogSource, time: float) -> int | None:
    for key in ALLIANCE_STATION_KEYS:
        station = log.get_or_default(key, LoggableType.NUMBER, time, None)
        if station is not None and math.isfinite(station):
            return int(station)
    return None


def get_is_red_alliance(log: LogSource, time: float) -> bool:
    """Alliance at ``time``; blue when the log carries no indicator."""
    station = get_alliance_station(log, time)
    if station is not None:
        return station <= RED_STATION_MAX
    return bool(log.get_or_default(FMS_RED_ALLIANCE_KEY, LoggableType.BOOLEAN, time, False))


def get_driver_station(log: LogSource, time: float) -> int:
    """Driver station number 1-3, or -1 when unknown."""
    station = get_alliance_station(log, time)
    if station is None or station < 0:
        return -1
    return station % 3 + 1


# Mechanisms


def _child_tree(field_keys: Iterable[str], prefix: str) -> dict[str, dict]:
    tree: dict[str, dict] = {}
    start = prefix + "/"
    for key in field_keys:
        if not key.startswith(start):
            continue
        node = tree
        for part in key[len(start) :].split("/"):
            node = node.setdefault(part, {})
    return tree


def _append_ligaments(
    log: LogSource,
    prefix: str,
    children: dict[str, dict],
    start: Translation2d,
    base_angle: float,
    time: float,
    lines: list[MechanismLine],
) -> None:
    for name, grandchildren in children.items():
        ligament_key = f"{prefix}/{name}"
        angle = log.get_or_default(ligament_key + "/angle", LoggableType.NUMBER, time, None)
        length = log.get_or_default(ligament_key + "/length", LoggableType.NUMBER, time, None)
        if angle is None or length is None:
            continue
        total_angle = base_angle + math.radians(angle)
        end = (
            start[0] + length * math.cos(total_angle),
            start[1] + length * math.sin(total_angle),
        )
        lines.append(
            MechanismLine(
                start=start,
                end=end,
                color=log.get_or_default(
                    ligament_key + "/color", LoggableType.STRING, time, DEFAULT_LINE_COLOR
                ),
                weight=log.get_or_default(
                    ligament_key + "/weight", LoggableType.NUMBER, time, DEFAULT_LINE_WEIGHT
                ),
            )
        )
        _append_ligaments(log, ligament_key, grandchildren, end, total_angle, time, lines)


def get_mechanism_state(log: LogSource, key: str, time: float) -> MechanismState | None:
    """Flatten a logged Mechanism2d tree into line segments."""
    background = log.get_or_default(key + "/backgroundColor", LoggableType.STRING, time, None)
    dims = log.get_or_default(key + "/dims", LoggableType.NUMBER_ARRAY, time, None)
    if background is None or dims is None or len(dims) < 2:
        return None

    lines: list[MechanismLine] = []
    for root_name, root_children in _child_tree(log.get_field_keys(), key).items():
        root_key = f"{key}/{root_name}"
        x = log.get_or_default(root_key + "/x", LoggableType.NUMBER, time, None)
        y = log.get_or_default(root_key + "/y", LoggableType.NUMBER, time, None)
        if x is None or y is None:
            continue
        _append_ligaments(log, root_key, root_children, (x, y), 0.0, time, lines)

    return MechanismState(
        background_color=background,
        dimensions=(dims[0], dims[1]),
        lines=tuple(lines),
    )


def merge_mechanism_states(states: list[MechanismState]) -> MechanismState:
    """Concatenate line lists; the first state supplies the background."""
    if not states:
        raise ValueError("Cannot merge an empty list of mechanism states")
    lines: list[MechanismLine] = []
    for state in states:
        lines.extend(state.lines)
    return MechanismState(
        background_color=states[0].background_color,
        dimensions=(
            max(state.dimensions[0] for state in states),
            max(state.dimensions[1] for state in states),
        ),
        lines=tuple(lines),
    )
