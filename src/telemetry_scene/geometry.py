"""
Rotation and pose helpers shared by the decoders and the scene builder.
"""

from __future__ import annotations

import math
from collections.abc import Iterable

from .types import IDENTITY_ROTATION, Pose2d, Pose3d, Rotation3d, Translation2d


def rotation2d_to_3d(theta: float) -> Rotation3d:
    """Quaternion for a rotation of ``theta`` about the vertical axis."""
    return (math.cos(theta * 0.5), 0.0, 0.0, math.sin(theta * 0.5))


def rotation3d_to_2d(rotation: Rotation3d) -> float:
    """Yaw of a quaternion (w, x, y, z)."""
    w, x, y, z = rotation
    return math.atan2(2.0 * (w * z + x * y), 1.0 - 2.0 * (y * y + z * z))


def pose2d_to_3d(pose: Pose2d, height: float = 0.0) -> Pose3d:
    return Pose3d(
        translation=(pose.translation[0], pose.translation[1], height),
        rotation=rotation2d_to_3d(pose.rotation),
    )


def pose2d_array_to_3d(poses: Iterable[Pose2d], height: float = 0.0) -> list[Pose3d]:
    return [pose2d_to_3d(pose, height) for pose in poses]


def translation2d_to_pose3d(translation: Translation2d, rotation: Rotation3d = IDENTITY_ROTATION) -> Pose3d:
    return Pose3d(translation=(translation[0], translation[1], 0.0), rotation=rotation)


def scale_value(value: float, from_range: tuple[float, float], to_range: tuple[float, float]) -> float:
    """Linearly map ``value`` from one range onto another.

    A degenerate source range maps everything onto the start of the target range.
    """
    span = from_range[1] - from_range[0]
    if abs(span) < 1e-9:
        return to_range[0]
    u = (value - from_range[0]) / span
    return to_range[0] + (to_range[1] - to_range[0]) * u


def clean_float(value: float) -> float:
    """Strip float noise such as 2.9999999999 so ids round predictably."""
    return round(value, 10)
