"""
Declared types, role vocabulary and the legal (type, role) pairings per dimension.
"""

from __future__ import annotations

from enum import Enum

GHOST_COLORS: tuple[str, ...] = ("Green", "Yellow", "Blue", "Red")
GAME_PIECE_COUNT = 6

APRIL_TAG_36H11_COUNT = 587
APRIL_TAG_16H5_COUNT = 30

APRIL_TAG_FAMILIES: dict[str, int] = {
    "36h11": APRIL_TAG_36H11_COUNT,
    "16h5": APRIL_TAG_16H5_COUNT,
}

MAP_ROLE = "Map"
TRAJECTORY_ROLE = "Trajectory"
VISION_TARGET_ROLE = "Vision Target"
CAMERA_OVERRIDE_ROLE = "Camera Override"
ZEBRA_MARKER_ROLE = "Zebra Marker"
MECHANISM_ROBOT_ROLE = "Mechanism (Robot)"
MECHANISM_GHOST_ROLE = "Mechanism (Ghost)"


class Dimension(str, Enum):
    THREE_D = "3d"
    TWO_D = "2d"


class DeclaredType(str, Enum):
    RAW = "Raw"
    NUMBER_ARRAY = "NumberArray"

    POSE2D = "Pose2d"
    POSE2D_ARRAY = "Pose2d[]"
    TRANSFORM2D = "Transform2d"
    TRANSFORM2D_ARRAY = "Transform2d[]"
    TRANSLATION2D = "Translation2d"
    TRANSLATION2D_ARRAY = "Translation2d[]"
    TRAJECTORY = "Trajectory"
    MECHANISM2D = "Mechanism2d"
    ZEBRA_TRANSLATION = "ZebraTranslation"

    POSE3D = "Pose3d"
    POSE3D_ARRAY = "Pose3d[]"
    TRANSFORM3D = "Transform3d"
    TRANSFORM3D_ARRAY = "Transform3d[]"
    TRANSLATION3D = "Translation3d"
    TRANSLATION3D_ARRAY = "Translation3d[]"
    APRIL_TAG = "AprilTag"
    APRIL_TAG_ARRAY = "AprilTag[]"

    @property
    def is_array(self) -> bool:
        return self.value.endswith("[]")

    @property
    def is_translation(self) -> bool:
        return self.value.startswith("Translation")


def ghost_role(color: str) -> str:
    return f"{color} Ghost"


def game_piece_role(index: int) -> str:
    return f"Game Piece {index}"


def april_tag_role(family: str) -> str:
    return f"AprilTag {family}"


def april_tag_id_role(family: str) -> str:
    return f"AprilTag {family} ID"


CONE_ROLES: tuple[str, ...] = (
    "Blue Cone (Front)",
    "Blue Cone (Center)",
    "Blue Cone (Back)",
    "Yellow Cone (Front)",
    "Yellow Cone (Center)",
    "Yellow Cone (Back)",
)

GHOST_ROLES: tuple[str, ...] = tuple(ghost_role(color) for color in GHOST_COLORS)
GAME_PIECE_ROLES: tuple[str, ...] = tuple(game_piece_role(i) for i in range(GAME_PIECE_COUNT))

POSE_3D_ROLES: tuple[str, ...] = (
    "Robot",
    *GHOST_ROLES,
    CAMERA_OVERRIDE_ROLE,
    "Component (Robot)",
    "Component (Ghost)",
    *GAME_PIECE_ROLES,
    TRAJECTORY_ROLE,
    VISION_TARGET_ROLE,
    "Axes",
    april_tag_role("36h11"),
    april_tag_id_role("36h11"),
    april_tag_role("16h5"),
    april_tag_id_role("16h5"),
    *CONE_ROLES,
)

APRIL_TAG_ROLES: tuple[str, ...] = (
    april_tag_role("36h11"),
    april_tag_role("16h5"),
    VISION_TARGET_ROLE,
    "Axes",
    *CONE_ROLES,
)

POSE_2D_ROLES: tuple[str, ...] = (
    "Robot",
    *GHOST_ROLES,
    TRAJECTORY_ROLE,
    VISION_TARGET_ROLE,
    *CONE_ROLES,
)


def _without(roles: tuple[str, ...], *excluded: str) -> tuple[str, ...]:
    return tuple(
        role for role in roles if role not in excluded and not role.endswith(" ID")
    )


_SINGLE_3D = _without(POSE_3D_ROLES, TRAJECTORY_ROLE)
_ARRAY_3D = _without(POSE_3D_ROLES, CAMERA_OVERRIDE_ROLE)
_SINGLE_2D = tuple(role for role in POSE_2D_ROLES if role != TRAJECTORY_ROLE)

LEGAL_ROLES: dict[Dimension, dict[DeclaredType, tuple[str, ...]]] = {
    Dimension.THREE_D: {
        DeclaredType.NUMBER_ARRAY: POSE_3D_ROLES,
        DeclaredType.POSE3D: _SINGLE_3D,
        DeclaredType.POSE3D_ARRAY: _ARRAY_3D,
        DeclaredType.TRANSFORM3D: _SINGLE_3D,
        DeclaredType.TRANSFORM3D_ARRAY: _ARRAY_3D,
        DeclaredType.TRANSLATION3D: (VISION_TARGET_ROLE,),
        DeclaredType.TRANSLATION3D_ARRAY: (TRAJECTORY_ROLE, VISION_TARGET_ROLE),
        DeclaredType.APRIL_TAG: APRIL_TAG_ROLES,
        DeclaredType.APRIL_TAG_ARRAY: APRIL_TAG_ROLES,
    },
    Dimension.TWO_D: {
        DeclaredType.NUMBER_ARRAY: POSE_2D_ROLES,
        DeclaredType.POSE2D: _SINGLE_2D,
        DeclaredType.POSE2D_ARRAY: POSE_2D_ROLES,
        DeclaredType.TRANSFORM2D: _SINGLE_2D,
        DeclaredType.TRANSFORM2D_ARRAY: POSE_2D_ROLES,
        DeclaredType.TRANSLATION2D: (VISION_TARGET_ROLE,),
        DeclaredType.TRANSLATION2D_ARRAY: (TRAJECTORY_ROLE, VISION_TARGET_ROLE),
        DeclaredType.TRAJECTORY: (TRAJECTORY_ROLE,),
        DeclaredType.MECHANISM2D: (MECHANISM_ROBOT_ROLE, MECHANISM_GHOST_ROLE),
        DeclaredType.ZEBRA_TRANSLATION: (ZEBRA_MARKER_ROLE, *GHOST_ROLES),
    },
}


def is_legal(dimension: Dimension, declared_type: DeclaredType, role: str) -> bool:
    """Whether ``role`` may be bound to a field of ``declared_type``."""
    return role in LEGAL_ROLES[dimension].get(declared_type, ())
