"""
Value decoders: read one logical value from the log at a timestamp.

Struct values are stored as child fields, so a ``Pose2d`` at ``key`` is read from
``key/translation/x``, ``key/translation/y`` and ``key/rotation/value``. Arrays follow the
length-prefixed convention: ``key/length`` bounds the loop and element ``i`` lives under
``key/i/...``. Logs written by existing robots depend on this layout.

Missing data never raises. Scalar readers return ``None`` and list readers return ``[]``.
"""

from __future__ import annotations

import math

from .geometry import pose2d_array_to_3d, pose2d_to_3d, scale_value
from .log_source import LoggableType, LogSource, latest_at
from .roles import DeclaredType
from .types import IDENTITY_ROTATION, Pose2d, Pose3d, Translation2d
from .units import UnitConversions, convert

POSE2D_STRIDE = 3  # x, y, theta
POSE3D_STRIDE = 7  # x, y, z, qw, qx, qy, qz


def _number(log: LogSource, key: str, time: float) -> float | None:
    return log.get_or_default(key, LoggableType.NUMBER, time, None)


def read_length(log: LogSource, key: str, time: float) -> int:
    """Element count of a length-prefixed array, 0 when absent or not finite."""
    length = log.get_or_default(key + "/length", LoggableType.NUMBER, time, 0)
    if not math.isfinite(length):
        return 0
    return max(int(length), 0)


# 2D readers


def read_pose2d(
    log: LogSource, key: str, time: float, distance: float = 1.0
) -> Pose2d | None:
    x = _number(log, key + "/translation/x", time)
    y = _number(log, key + "/translation/y", time)
    r = _number(log, key + "/rotation/value", time)
    if x is None or y is None or r is None:
        return None
    return Pose2d(translation=(x * distance, y * distance), rotation=r)


def read_pose2d_array(
    log: LogSource, key: str, time: float, distance: float = 1.0
) -> list[Pose2d]:
    poses: list[Pose2d] = []
    for i in range(read_length(log, key, time)):
        pose = read_pose2d(log, f"{key}/{i}", time, distance)
        if pose is not None:
            poses.append(pose)
    return poses


def read_translation2d(
    log: LogSource, key: str, time: float, distance: float = 1.0
) -> Pose2d | None:
    x = _number(log, key + "/x", time)
    y = _number(log, key + "/y", time)
    if x is None or y is None:
        return None
    return Pose2d(translation=(x * distance, y * distance), rotation=0.0)


def read_translation2d_array(
    log: LogSource, key: str, time: float, distance: float = 1.0
) -> list[Pose2d]:
    poses: list[Pose2d] = []
    for i in range(read_length(log, key, time)):
        pose = read_translation2d(log, f"{key}/{i}", time, distance)
        if pose is not None:
            poses.append(pose)
    return poses


def read_trajectory(
    log: LogSource, key: str, time: float, distance: float = 1.0
) -> list[Pose2d]:
    """Poses of every state in a logged trajectory."""
    poses: list[Pose2d] = []
    states_key = key + "/states"
    for i in range(read_length(log, states_key, time)):
        pose = read_pose2d(log, f"{states_key}/{i}/pose", time, distance)
        if pose is not None:
            poses.append(pose)
    return poses


def read_number_array_pose2d(
    log: LogSource, key: str, time: float, distance: float = 1.0, rotation: float = 1.0
) -> list[Pose2d]:
    sample = latest_at(log.get_number_array(key, time, time), time)
    if sample is None:
        return []
    values = sample[1]
    if len(values) % POSE2D_STRIDE != 0:
        return []
    return [
        Pose2d(
            translation=(values[i] * distance, values[i + 1] * distance),
            rotation=values[i + 2] * rotation,
        )
        for i in range(0, len(values), POSE2D_STRIDE)
    ]


# 3D readers


def read_pose3d(
    log: LogSource, key: str, time: float, distance: float = 1.0
) -> Pose3d | None:
    tx = _number(log, key + "/translation/x", time)
    ty = _number(log, key + "/translation/y", time)
    tz = _number(log, key + "/translation/z", time)
    qw = _number(log, key + "/rotation/q/w", time)
    qx = _number(log, key + "/rotation/q/x", time)
    qy = _number(log, key + "/rotation/q/y", time)
    qz = _number(log, key + "/rotation/q/z", time)
    if None in (tx, ty, tz, qw, qx, qy, qz):
        return None
    return Pose3d(
        translation=(tx * distance, ty * distance, tz * distance),
        rotation=(qw, qx, qy, qz),
    )


def read_pose3d_array(
    log: LogSource, key: str, time: float, distance: float = 1.0
) -> list[Pose3d]:
    poses: list[Pose3d] = []
    for i in range(read_length(log, key, time)):
        pose = read_pose3d(log, f"{key}/{i}", time, distance)
        if pose is not None:
            poses.append(pose)
    return poses


def read_translation3d(
    log: LogSource, key: str, time: float, distance: float = 1.0
) -> Pose3d | None:
    x = _number(log, key + "/x", time)
    y = _number(log, key + "/y", time)
    z = _number(log, key + "/z", time)
    if x is None or y is None or z is None:
        return None
    return Pose3d(
        translation=(x * distance, y * distance, z * distance),
        rotation=IDENTITY_ROTATION,
    )


def read_translation3d_array(
    log: LogSource, key: str, time: float, distance: float = 1.0
) -> list[Pose3d]:
    poses: list[Pose3d] = []
    for i in range(read_length(log, key, time)):
        pose = read_translation3d(log, f"{key}/{i}", time, distance)
        if pose is not None:
            poses.append(pose)
    return poses


def read_number_array_pose3d(
    log: LogSource, key: str, time: float, distance: float = 1.0
) -> list[Pose3d]:
    sample = latest_at(log.get_number_array(key, time, time), time)
    if sample is None:
        return []
    values = sample[1]
    if len(values) % POSE3D_STRIDE != 0:
        return []
    return [
        Pose3d(
            translation=(
                values[i] * distance,
                values[i + 1] * distance,
                values[i + 2] * distance,
            ),
            rotation=(values[i + 3], values[i + 4], values[i + 5], values[i + 6]),
        )
        for i in range(0, len(values), POSE3D_STRIDE)
    ]


# Dispatch by declared type


def decode_3d(
    log: LogSource,
    key: str,
    time: float,
    declared_type: DeclaredType,
    conversions: UnitConversions,
) -> list[Pose3d]:
    """Poses of a field configured in the 3D list."""
    distance = conversions.distance
    if declared_type is DeclaredType.NUMBER_ARRAY:
        return read_number_array_pose3d(log, key, time, distance)
    if declared_type is DeclaredType.APRIL_TAG_ARRAY:
        poses: list[Pose3d] = []
        for i in range(read_length(log, key, time)):
            pose = read_pose3d(log, f"{key}/{i}/pose", time, distance)
            if pose is not None:
                poses.append(pose)
        return poses
    if declared_type is DeclaredType.APRIL_TAG:
        pose = read_pose3d(log, key + "/pose", time, distance)
        return [] if pose is None else [pose]
    if declared_type.is_array:
        if declared_type.is_translation:
            return read_translation3d_array(log, key, time, distance)
        return read_pose3d_array(log, key, time, distance)
    if declared_type.is_translation:
        pose = read_translation3d(log, key, time, distance)
    else:
        pose = read_pose3d(log, key, time, distance)
    return [] if pose is None else [pose]


def decode_2d(
    log: LogSource,
    key: str,
    time: float,
    declared_type: DeclaredType,
    conversions: UnitConversions,
    height: float = 0.0,
) -> list[Pose3d]:
    """Poses of a field configured in the 2D list, lifted to ``height``."""
    distance = conversions.distance
    if declared_type is DeclaredType.NUMBER_ARRAY:
        return pose2d_array_to_3d(
            read_number_array_pose2d(log, key, time, distance, conversions.rotation),
            height,
        )
    if declared_type is DeclaredType.TRAJECTORY:
        return pose2d_array_to_3d(read_trajectory(log, key, time, distance), height)
    if declared_type.is_array:
        if declared_type.is_translation:
            poses = read_translation2d_array(log, key, time, distance)
        else:
            poses = read_pose2d_array(log, key, time, distance)
        return pose2d_array_to_3d(poses, height)
    if declared_type.is_translation:
        pose = read_translation2d(log, key, time, distance)
    else:
        pose = read_pose2d(log, key, time, distance)
    return [] if pose is None else [pose2d_to_3d(pose, height)]


# AprilTag ids


def read_april_tag_ids(
    log: LogSource, key: str, time: float, declared_type: DeclaredType
) -> list[float | None]:
    """Ids stored beside AprilTag poses, positionally aligned with the tag entries.

    A missing id keeps its slot as ``None`` so later ids stay matched to their poses.
    """
    if declared_type is DeclaredType.APRIL_TAG:
        return [_number(log, key + "/ID", time)]
    if declared_type is DeclaredType.APRIL_TAG_ARRAY:
        return [
            _number(log, f"{key}/{i}/ID", time)
            for i in range(read_length(log, key, time))
        ]
    return []


def read_id_array(log: LogSource, key: str, time: float) -> list[float | None]:
    """Ids from a dedicated number array field."""
    sample = latest_at(log.get_number_array(key, time, time), time)
    if sample is None:
        return []
    return list(sample[1])


# Zebra


def _interpolated_number(log: LogSource, key: str, time: float) -> float | None:
    samples = log.get_number(key, time, time)
    if not samples:
        return None
    if len(samples) == 1:
        return samples[0][1]
    (t0, v0), (t1, v1) = samples[0], samples[1]
    # Outside the bracketing samples the nearest value holds
    return scale_value(min(max(time, t0), t1), (t0, t1), (v0, v1))


def read_zebra_translation(log: LogSource, key: str, time: float) -> Translation2d | None:
    """Tracker position in meters, interpolated between bracketing samples."""
    x = _interpolated_number(log, key + "/x", time)
    y = _interpolated_number(log, key + "/y", time)
    if x is None or y is None:
        return None
    return (convert(x, "feet", "meters"), convert(y, "feet", "meters"))


def read_zebra_alliance(log: LogSource, key: str) -> str:
    return log.get_or_default(key + "/alliance", LoggableType.STRING, float("inf"), "blue")


def zebra_team(key: str) -> str:
    """Team number embedded after ``FRC`` in a tracker key."""
    _, _, team = key.partition("FRC")
    return team
