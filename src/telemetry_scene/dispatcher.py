"""
Field role dispatch.

Every configured field is resolved once, when the configuration is loaded, into a
:class:`BoundField` that already knows which decoder to call and which bucket to fill.
Each frame then runs the bound fields in configuration order against a fresh
:class:`SceneBuckets`, so no type or role strings are compared per frame and no state
survives between frames.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable
from dataclasses import dataclass, field
from functools import partial

from loguru import logger

from . import decoders
from .log_source import LogSource
from .log_util import get_mechanism_state
from .roles import (
    APRIL_TAG_FAMILIES,
    CONE_ROLES,
    GAME_PIECE_COUNT,
    GAME_PIECE_ROLES,
    GHOST_COLORS,
    MECHANISM_GHOST_ROLE,
    MECHANISM_ROBOT_ROLE,
    TRAJECTORY_ROLE,
    VISION_TARGET_ROLE,
    ZEBRA_MARKER_ROLE,
    DeclaredType,
    Dimension,
    april_tag_id_role,
    april_tag_role,
    game_piece_role,
    ghost_role,
    is_legal,
)
from .types import MechanismState, Pose3d, Translation2d, ZebraMarker
from .units import UnitConversions

# Lift 2D overlays off the field carpet
TRAJECTORY_HEIGHT = 0.02
VISION_TARGET_HEIGHT = 0.75


@dataclass(frozen=True, slots=True)
class FieldSpec:
    """A log key bound to a role in the 3D or 2D field list."""

    key: str
    declared_type: DeclaredType
    role: str
    dimension: Dimension = Dimension.THREE_D


@dataclass
class SceneBuckets:
    """Per-frame accumulators, one per role."""

    robot: list[Pose3d] = field(default_factory=list)
    ghost: dict[str, list[Pose3d]] = field(
        default_factory=lambda: {color: [] for color in GHOST_COLORS}
    )
    april_tag_poses: dict[str, list[Pose3d]] = field(
        default_factory=lambda: {family: [] for family in APRIL_TAG_FAMILIES}
    )
    april_tag_ids: dict[str, list[float | None]] = field(
        default_factory=lambda: {family: [] for family in APRIL_TAG_FAMILIES}
    )
    camera_override: list[Pose3d] = field(default_factory=list)
    component_robot: list[Pose3d] = field(default_factory=list)
    component_ghost: list[Pose3d] = field(default_factory=list)
    game_piece: list[list[Pose3d]] = field(
        default_factory=lambda: [[] for _ in range(GAME_PIECE_COUNT)]
    )
    trajectory: list[list[Pose3d]] = field(default_factory=list)
    vision_target: list[Pose3d] = field(default_factory=list)
    axes: list[Pose3d] = field(default_factory=list)
    cones: dict[str, list[Pose3d]] = field(
        default_factory=lambda: {role: [] for role in CONE_ROLES}
    )
    mechanism_robot: list[MechanismState] = field(default_factory=list)
    mechanism_ghost: list[MechanismState] = field(default_factory=list)
    zebra_marker: dict[str, ZebraMarker] = field(default_factory=dict)
    zebra_ghost_translations: dict[str, list[Translation2d]] = field(
        default_factory=lambda: {color: [] for color in GHOST_COLORS}
    )


PoseSink = Callable[[SceneBuckets], list[Pose3d]]
FieldReader = Callable[[LogSource, float, SceneBuckets], None]


def _pose_sinks() -> dict[str, PoseSink]:
    sinks: dict[str, PoseSink] = {
        "Robot": lambda b: b.robot,
        "Camera Override": lambda b: b.camera_override,
        "Component (Robot)": lambda b: b.component_robot,
        "Component (Ghost)": lambda b: b.component_ghost,
        VISION_TARGET_ROLE: lambda b: b.vision_target,
        "Axes": lambda b: b.axes,
    }
    for color in GHOST_COLORS:
        sinks[ghost_role(color)] = lambda b, color=color: b.ghost[color]
    for index in range(GAME_PIECE_COUNT):
        sinks[game_piece_role(index)] = lambda b, index=index: b.game_piece[index]
    for role in CONE_ROLES:
        sinks[role] = lambda b, role=role: b.cones[role]
    for family in APRIL_TAG_FAMILIES:
        sinks[april_tag_role(family)] = lambda b, family=family: b.april_tag_poses[family]
    return sinks


_POSE_SINKS = _pose_sinks()
_ID_ROLES = {april_tag_id_role(family): family for family in APRIL_TAG_FAMILIES}
_TAG_ROLES = {april_tag_role(family): family for family in APRIL_TAG_FAMILIES}
_GHOST_ROLES = {ghost_role(color): color for color in GHOST_COLORS}


@dataclass(frozen=True, slots=True)
class BoundField:
    """A field whose decode path has already been chosen."""

    spec: FieldSpec
    reader: FieldReader

    def __call__(self, log: LogSource, time: float, buckets: SceneBuckets) -> None:
        self.reader(log, time, buckets)


# Readers. The leading arguments are bound at resolve time.


def _extend_3d(spec: FieldSpec, conversions: UnitConversions, sink: PoseSink, log, time, buckets):
    sink(buckets).extend(
        decoders.decode_3d(log, spec.key, time, spec.declared_type, conversions)
    )


def _extend_2d(
    spec: FieldSpec, conversions: UnitConversions, sink: PoseSink, height: float, log, time, buckets
):
    sink(buckets).extend(
        decoders.decode_2d(log, spec.key, time, spec.declared_type, conversions, height)
    )


def _trajectory_3d(spec: FieldSpec, conversions: UnitConversions, log, time, buckets):
    buckets.trajectory.append(
        decoders.decode_3d(log, spec.key, time, spec.declared_type, conversions)
    )


def _trajectory_2d(spec: FieldSpec, conversions: UnitConversions, log, time, buckets):
    buckets.trajectory.append(
        decoders.decode_2d(
            log, spec.key, time, spec.declared_type, conversions, TRAJECTORY_HEIGHT
        )
    )


def _april_tag(spec: FieldSpec, conversions: UnitConversions, family: str, log, time, buckets):
    buckets.april_tag_poses[family].extend(
        decoders.decode_3d(log, spec.key, time, spec.declared_type, conversions)
    )
    buckets.april_tag_ids[family].extend(
        decoders.read_april_tag_ids(log, spec.key, time, spec.declared_type)
    )


def _april_tag_ids(spec: FieldSpec, family: str, log, time, buckets):
    buckets.april_tag_ids[family].extend(decoders.read_id_array(log, spec.key, time))


def _mechanism(spec: FieldSpec, ghost: bool, log, time, buckets):
    state = get_mechanism_state(log, spec.key, time)
    if state is not None:
        target = buckets.mechanism_ghost if ghost else buckets.mechanism_robot
        target.append(state)


def _zebra_marker(spec: FieldSpec, log, time, buckets):
    translation = decoders.read_zebra_translation(log, spec.key, time)
    if translation is not None:
        buckets.zebra_marker[decoders.zebra_team(spec.key)] = ZebraMarker(
            translation=translation,
            alliance=decoders.read_zebra_alliance(log, spec.key),
        )


def _zebra_ghost(spec: FieldSpec, color: str, log, time, buckets):
    translation = decoders.read_zebra_translation(log, spec.key, time)
    if translation is not None:
        buckets.zebra_ghost_translations[color].append(translation)


def _resolve_3d(spec: FieldSpec, conversions: UnitConversions) -> FieldReader | None:
    role = spec.role
    if role in _ID_ROLES:
        return partial(_april_tag_ids, spec, _ID_ROLES[role])
    if role in _TAG_ROLES:
        return partial(_april_tag, spec, conversions, _TAG_ROLES[role])
    if role == TRAJECTORY_ROLE:
        return partial(_trajectory_3d, spec, conversions)
    sink = _POSE_SINKS.get(role)
    if sink is None:
        return None
    return partial(_extend_3d, spec, conversions, sink)


def _resolve_2d(spec: FieldSpec, conversions: UnitConversions) -> FieldReader | None:
    role = spec.role
    if role == TRAJECTORY_ROLE:
        return partial(_trajectory_2d, spec, conversions)
    if role == MECHANISM_ROBOT_ROLE:
        return partial(_mechanism, spec, False)
    if role == MECHANISM_GHOST_ROLE:
        return partial(_mechanism, spec, True)
    if role == ZEBRA_MARKER_ROLE:
        return partial(_zebra_marker, spec)
    if role in _GHOST_ROLES and spec.declared_type is DeclaredType.ZEBRA_TRANSLATION:
        return partial(_zebra_ghost, spec, _GHOST_ROLES[role])
    sink = _POSE_SINKS.get(role)
    if sink is None:
        return None
    height = VISION_TARGET_HEIGHT if role == VISION_TARGET_ROLE else 0.0
    return partial(_extend_2d, spec, conversions, sink, height)


def resolve_field(spec: FieldSpec, conversions: UnitConversions) -> BoundField | None:
    """Choose the decode path for ``spec``; ``None`` if the pairing has none."""
    if not is_legal(spec.dimension, spec.declared_type, spec.role):
        return None
    if spec.dimension is Dimension.THREE_D:
        reader = _resolve_3d(spec, conversions)
    else:
        reader = _resolve_2d(spec, conversions)
    return None if reader is None else BoundField(spec=spec, reader=reader)


def resolve_fields(
    specs: Iterable[FieldSpec], conversions: UnitConversions
) -> list[BoundField]:
    """Resolve a field list, skipping pairings that have no decode path."""
    bound: list[BoundField] = []
    for spec in specs:
        field_reader = resolve_field(spec, conversions)
        if field_reader is None:
            logger.warning(
                f"Skipping field {spec.key}: no {spec.dimension.value} decoder for "
                f"{spec.declared_type.value} as '{spec.role}'"
            )
            continue
        bound.append(field_reader)
    return bound


def dispatch(bound_fields: Iterable[BoundField], log: LogSource, time: float) -> SceneBuckets:
    """Run every bound field for ``time`` into a fresh set of buckets."""
    buckets = SceneBuckets()
    for bound in bound_fields:
        bound(log, time, buckets)
    return buckets


def has_game_piece_roles(bound_fields: Iterable[BoundField]) -> bool:
    return any(bound.spec.role in GAME_PIECE_ROLES for bound in bound_fields)
