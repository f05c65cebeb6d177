"""
Telemetry Scene Package

Turns a time-indexed robot telemetry log into a renderable scene: robot and ghost poses,
AprilTags, game pieces, trajectories, mechanisms, tracker markers, occupancy maps and point
clouds, all decoded from the fields a user binds to roles.

Main Classes:
    SceneBuilder: Resolves a field configuration once and builds snapshots per query time
    MemoryLog: In-memory log implementing the LogSource protocol

Examples:
    from telemetry_scene import MemoryLog, SceneBuilder, create_config
    from telemetry_scene.dispatcher import FieldSpec
    from telemetry_scene.roles import DeclaredType

    config, _ = create_config(overrides={
        "fields_3d": [FieldSpec("Odometry/Robot", DeclaredType.POSE3D, "Robot")],
    })
    builder = SceneBuilder(config)
    snapshot = builder.build(log, time=12.5)
"""

from importlib.metadata import PackageNotFoundError, version

from .config import (
    AssetCatalog,
    ConfigurationError,
    DefaultConfigError,
    FieldAsset,
    SceneConfig,
    create_config,
    select_field,
)
from .dispatcher import FieldSpec
from .log_source import LoggableType, LogSource, MemoryLog
from .roles import DeclaredType, Dimension
from .scene import AllianceMode, SceneBuilder
from .types import (
    AprilTag,
    MapRaster,
    MechanismLine,
    MechanismState,
    PointCloudFrame,
    Pose2d,
    Pose3d,
    SceneSnapshot,
    ZebraMarker,
)

# Export public API
__all__ = [
    # Builder API
    "SceneBuilder",
    "AllianceMode",
    # Configuration
    "SceneConfig",
    "FieldSpec",
    "DeclaredType",
    "Dimension",
    "AssetCatalog",
    "FieldAsset",
    "create_config",
    "select_field",
    "ConfigurationError",
    "DefaultConfigError",
    # Log access
    "LogSource",
    "LoggableType",
    "MemoryLog",
    # Data types
    "Pose2d",
    "Pose3d",
    "AprilTag",
    "MapRaster",
    "MechanismLine",
    "MechanismState",
    "PointCloudFrame",
    "SceneSnapshot",
    "ZebraMarker",
]

try:
    __version__ = version("telemetry-scene")
except PackageNotFoundError:
    __version__ = "unknown"
