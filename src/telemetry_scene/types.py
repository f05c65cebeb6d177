"""
Data types produced by the scene builder.

All values are immutable so a snapshot can be handed to a renderer without copying.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any

import numpy as np

Translation2d = tuple[float, float]
Translation3d = tuple[float, float, float]
Rotation3d = tuple[float, float, float, float]  # quaternion (w, x, y, z)

IDENTITY_ROTATION: Rotation3d = (1.0, 0.0, 0.0, 0.0)


@dataclass(frozen=True, slots=True)
class Pose2d:
    """Planar pose, rotation in radians."""

    translation: Translation2d = (0.0, 0.0)
    rotation: float = 0.0


@dataclass(frozen=True, slots=True)
class Pose3d:
    """Spatial pose with a unit quaternion rotation."""

    translation: Translation3d = (0.0, 0.0, 0.0)
    rotation: Rotation3d = IDENTITY_ROTATION


@dataclass(frozen=True, slots=True)
class AprilTag:
    pose: Pose3d
    id: int | None = None


@dataclass(frozen=True, slots=True)
class MapRaster:
    """Occupancy grid decoded from a raw map payload.

    Attributes:
        width: Cells along X.
        height: Cells along Y.
        origin_x: Grid origin in meters.
        origin_y: Grid origin in meters.
        cell_resolution: Meters per cell.
        cells: ``width * height`` bytes, row-major.
    """

    width: int
    height: int
    origin_x: float
    origin_y: float
    cell_resolution: float
    cells: bytes

    def grid(self) -> np.ndarray:
        """Return the cells as a read-only ``(height, width)`` uint8 array."""
        return np.frombuffer(self.cells, dtype=np.uint8).reshape(self.height, self.width)


@dataclass(frozen=True, slots=True)
class MechanismLine:
    start: Translation2d
    end: Translation2d
    color: str = "#ffffff"
    weight: float = 1.0


@dataclass(frozen=True, slots=True)
class MechanismState:
    """Line segments of an animated linkage."""

    background_color: str
    dimensions: tuple[float, float]
    lines: tuple[MechanismLine, ...] = ()


@dataclass(frozen=True, slots=True)
class ZebraMarker:
    translation: Translation2d
    alliance: str = "blue"


@dataclass(frozen=True, slots=True)
class PointCloudFrame:
    """One raw point-cloud packet at the query time."""

    x: int
    y: int
    payload: bytes
    source_timestamp: float | None = None
    options: Mapping[str, Any] = field(default_factory=dict)

    def as_array(self) -> np.ndarray:
        """View the payload as ``(N, point_elems)`` values of the configured dtype."""
        from .point_cloud import numpy_dtype

        dtype = numpy_dtype(
            str(self.options.get("dtype", "f32")),
            bool(self.options.get("dtype_signed", True)),
        )
        elems = max(1, int(self.options.get("point_elems", 4)))
        point_bytes = dtype.itemsize * elems
        usable = len(self.payload) - (len(self.payload) % point_bytes)
        values = np.frombuffer(self.payload[:usable], dtype=dtype)
        return values.reshape(-1, elems)


@dataclass(frozen=True, slots=True)
class SceneSnapshot:
    """Everything the renderer needs for one frame."""

    robot: tuple[Pose3d, ...] = ()
    ghost: Mapping[str, tuple[Pose3d, ...]] = field(default_factory=dict)
    april_tag_36h11: tuple[AprilTag, ...] = ()
    april_tag_16h5: tuple[AprilTag, ...] = ()
    camera_override: tuple[Pose3d, ...] = ()
    component_robot: tuple[Pose3d, ...] = ()
    component_ghost: tuple[Pose3d, ...] = ()
    game_piece: tuple[tuple[Pose3d, ...], ...] = ()
    trajectory: tuple[tuple[Pose3d, ...], ...] = ()
    vision_target: tuple[Pose3d, ...] = ()
    axes: tuple[Pose3d, ...] = ()
    cone_blue_front: tuple[Pose3d, ...] = ()
    cone_blue_center: tuple[Pose3d, ...] = ()
    cone_blue_back: tuple[Pose3d, ...] = ()
    cone_yellow_front: tuple[Pose3d, ...] = ()
    cone_yellow_center: tuple[Pose3d, ...] = ()
    cone_yellow_back: tuple[Pose3d, ...] = ()
    mechanism_robot: MechanismState | None = None
    mechanism_ghost: MechanismState | None = None
    zebra_marker: Mapping[str, ZebraMarker] = field(default_factory=dict)
    zebra_ghost: Mapping[str, tuple[Pose3d, ...]] = field(default_factory=dict)
    map: MapRaster | None = None
    options: Mapping[str, Any] = field(default_factory=dict)
    alliance_red_origin: bool = False
    auto_driver_station: int = -1
    new_assets_counter: int = 0
    has_user_game_pieces: bool = False


def freeze_mapping(data: dict[str, Any]) -> Mapping[str, Any]:
    """Wrap a dict in a read-only proxy over a private copy."""
    return MappingProxyType(dict(data))
