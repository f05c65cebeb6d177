"""
Scene assembly.

:class:`SceneBuilder` resolves the configured fields once and then turns any query time into a
:class:`~telemetry_scene.types.SceneSnapshot`. A build only reads from the log and never
touches state shared with other builds, apart from the asset counter that :meth:`new_assets`
bumps between builds.
"""

from __future__ import annotations

import math
from collections.abc import Iterable, Sequence
from enum import Enum

from loguru import logger

from .binary_parsers import parse_map_raster
from .config import AXES_FIELD, MAP_FIELD, SceneConfig
from .dispatcher import SceneBuckets, dispatch, has_game_piece_roles, resolve_fields
from .geometry import clean_float, rotation2d_to_3d, rotation3d_to_2d, translation2d_to_pose3d
from .log_source import LogSource, latest_at
from .log_util import ALLIANCE_KEYS, get_driver_station, get_is_red_alliance, merge_mechanism_states
from .point_cloud import build_point_cloud
from .resample import clean_trajectories
from .roles import APRIL_TAG_FAMILIES, CONE_ROLES, DeclaredType
from .types import (
    AprilTag,
    MapRaster,
    MechanismState,
    PointCloudFrame,
    Pose3d,
    SceneSnapshot,
    Translation2d,
    freeze_mapping,
)
from .units import UnitConversions


class AllianceMode(str, Enum):
    AUTO = "auto"
    BLUE = "blue"
    RED = "red"


def effective_alliance(field: str, alliance: str) -> AllianceMode:
    """Axes and map views have no alliance-specific layout and always use blue."""
    if field in (AXES_FIELD, MAP_FIELD):
        return AllianceMode.BLUE
    return AllianceMode(alliance)


def resolve_red_origin(mode: AllianceMode, log: LogSource, time: float) -> bool:
    if mode is AllianceMode.AUTO:
        return get_is_red_alliance(log, time)
    return mode is AllianceMode.RED


def zebra_ghost_poses(
    translations: Iterable[Translation2d], robot: Sequence[Pose3d], red_origin: bool
) -> list[Pose3d]:
    """Place tracker translations using the primary robot's heading."""
    if robot:
        heading = rotation3d_to_2d(robot[0].rotation)
        if not red_origin:
            heading += math.pi
    else:
        heading = 0.0
    rotation = rotation2d_to_3d(heading)
    return [translation2d_to_pose3d(translation, rotation) for translation in translations]


def combine_april_tags(
    poses: Sequence[Pose3d], ids: Sequence[float | None], family_count: int
) -> list[AprilTag]:
    """Pair tag poses with ids by position.

    Ids past the end of the pose list are dropped. Ids outside ``[0, family_count)`` leave the
    tag without an id.
    """
    tags: list[AprilTag] = []
    for index, pose in enumerate(poses):
        tag_id: int | None = None
        if index < len(ids) and ids[index] is not None:
            value = ids[index]
            if math.isfinite(value):
                rounded = round(clean_float(value))
                if 0 <= rounded < family_count:
                    tag_id = rounded
        tags.append(AprilTag(pose=pose, id=tag_id))
    return tags


def _freeze_poses(poses: Iterable[Pose3d]) -> tuple[Pose3d, ...]:
    return tuple(poses)


def _merge_or_none(states: list[MechanismState]) -> MechanismState | None:
    return merge_mechanism_states(states) if states else None


class SceneBuilder:
    """Build scene snapshots for one field configuration.

    Args:
        config: Validated configuration. Field bindings are resolved here, once.
    """

    def __init__(self, config: SceneConfig) -> None:
        self.config = config
        self.alliance_mode = effective_alliance(config.field, config.alliance)
        self.conversions = UnitConversions.from_units(config.unit_distance, config.unit_rotation)
        self.bound_fields = resolve_fields(config.field_specs(), self.conversions)
        self.has_user_game_pieces = has_game_piece_roles(self.bound_fields)
        self.point_cloud_options = config.point_cloud_options()
        self.new_assets_counter = 0
        logger.debug(
            f"Resolved {len(self.bound_fields)} of {len(config.field_specs())} fields "
            f"for field '{config.field}'"
        )

    def new_assets(self) -> int:
        """Signal that static assets changed and must be reloaded by the renderer."""
        self.new_assets_counter += 1
        logger.info(f"Assets reloaded (generation {self.new_assets_counter})")
        return self.new_assets_counter

    def active_keys(self) -> list[str]:
        """Keys read in addition to the configured fields."""
        if self.alliance_mode is AllianceMode.AUTO:
            return list(ALLIANCE_KEYS)
        return []

    def _read_map(self, log: LogSource, time: float) -> MapRaster | None:
        spec = self.config.map_field
        if self.config.field != MAP_FIELD or spec is None:
            return None
        if spec.declared_type is not DeclaredType.RAW:
            return None
        sample = latest_at(log.get_raw(spec.key, time, time), time)
        if sample is None:
            return None
        return parse_map_raster(sample[1])

    def _options(self) -> dict[str, str]:
        return {
            "field": self.config.field,
            "alliance": self.config.alliance,
            "robot": self.config.robot,
            "unit_distance": self.config.unit_distance,
            "unit_rotation": self.config.unit_rotation,
        }

    def build(self, log: LogSource, time: float) -> SceneSnapshot:
        """Assemble the scene at ``time``."""
        buckets: SceneBuckets = dispatch(self.bound_fields, log, time)
        red_origin = resolve_red_origin(self.alliance_mode, log, time)

        april_tags = {
            family: tuple(
                combine_april_tags(
                    buckets.april_tag_poses[family], buckets.april_tag_ids[family], count
                )
            )
            for family, count in APRIL_TAG_FAMILIES.items()
        }
        trajectories = clean_trajectories(buckets.trajectory, self.config.trajectory_max_length)
        cones = {role: _freeze_poses(buckets.cones[role]) for role in CONE_ROLES}
        zebra_ghost = {
            color: tuple(zebra_ghost_poses(translations, buckets.robot, red_origin))
            for color, translations in buckets.zebra_ghost_translations.items()
        }

        return SceneSnapshot(
            robot=_freeze_poses(buckets.robot),
            ghost=freeze_mapping(
                {color: _freeze_poses(poses) for color, poses in buckets.ghost.items()}
            ),
            april_tag_36h11=april_tags["36h11"],
            april_tag_16h5=april_tags["16h5"],
            camera_override=_freeze_poses(buckets.camera_override),
            component_robot=_freeze_poses(buckets.component_robot),
            component_ghost=_freeze_poses(buckets.component_ghost),
            game_piece=tuple(_freeze_poses(poses) for poses in buckets.game_piece),
            trajectory=tuple(_freeze_poses(trajectory) for trajectory in trajectories),
            vision_target=_freeze_poses(buckets.vision_target),
            axes=_freeze_poses(buckets.axes),
            cone_blue_front=cones["Blue Cone (Front)"],
            cone_blue_center=cones["Blue Cone (Center)"],
            cone_blue_back=cones["Blue Cone (Back)"],
            cone_yellow_front=cones["Yellow Cone (Front)"],
            cone_yellow_center=cones["Yellow Cone (Center)"],
            cone_yellow_back=cones["Yellow Cone (Back)"],
            mechanism_robot=_merge_or_none(buckets.mechanism_robot),
            mechanism_ghost=_merge_or_none(buckets.mechanism_ghost),
            zebra_marker=freeze_mapping(buckets.zebra_marker),
            zebra_ghost=freeze_mapping(zebra_ghost),
            map=self._read_map(log, time),
            options=freeze_mapping(self._options()),
            alliance_red_origin=red_origin,
            auto_driver_station=get_driver_station(log, time),
            new_assets_counter=self.new_assets_counter,
            has_user_game_pieces=self.has_user_game_pieces,
        )

    def build_point_cloud(self, log: LogSource, time: float) -> PointCloudFrame | None:
        return build_point_cloud(
            log,
            self.config.point_cloud_field,
            time,
            self.point_cloud_options,
            self.config.point_stride,
        )
