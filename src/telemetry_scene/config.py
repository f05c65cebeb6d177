"""Configuration management for the scene builder.

This module provides TOML-based configuration with explicit override support.

Configuration priority: explicit overrides > user config > default config
"""

from __future__ import annotations

import importlib.resources
import tomllib
from dataclasses import dataclass, fields
from dataclasses import replace as dataclass_replace
from pathlib import Path
from typing import Any, NamedTuple

from loguru import logger

from .dispatcher import FieldSpec
from .point_cloud import POINT_DTYPES, PointCloudOptions
from .roles import MAP_ROLE, DeclaredType, Dimension
from .units import DISTANCE_UNITS, ROTATION_UNITS

ALLIANCE_MODES = ("auto", "blue", "red")

# Built-in fields that have no alliance-specific layout
AXES_FIELD = "Axes"
MAP_FIELD = MAP_ROLE
EVERGREEN_FIELD = "Evergreen"


class ConfigurationError(Exception):
    """Raised when configuration validation fails.

    Attributes:
        errors: List of validation error messages.
    """

    def __init__(self, errors: list[str]) -> None:
        self.errors = errors
        super().__init__(f"Configuration validation failed: {'; '.join(errors)}")


class DefaultConfigError(Exception):
    """Raised when the bundled default configuration cannot be loaded."""

    def __init__(self, message: str) -> None:
        super().__init__(f"Failed to load default configuration: {message}")


class ConfigOverride(NamedTuple):
    """A configuration value that differs from the default.

    Attributes:
        key: The configuration field name.
        default_value: The value before the override.
        new_value: The value from the user config or explicit overrides.
    """

    key: str
    default_value: Any
    new_value: Any


@dataclass
class SceneConfig:
    """Scene builder configuration.

    All fields are required. Default values are loaded from default.toml.
    """

    # Field selection
    field: str
    alliance: str
    robot: str

    # Units applied at decode time
    unit_distance: str
    unit_rotation: str

    # Processing limits
    trajectory_max_length: int
    point_stride: int

    # Field bindings
    fields_3d: list[FieldSpec]
    fields_2d: list[FieldSpec]
    map_field: FieldSpec | None
    point_cloud_field: FieldSpec | None

    # Point cloud display
    point_dtype: str
    point_dtype_signed: bool
    point_elems: int
    use_point_colors: bool
    static_color: str
    point_size: float

    # Logging settings
    log_dir: str | None
    log_level_console: str
    log_json_console: bool
    log_rotation: str | None
    log_retention: str | None

    def field_specs(self) -> list[FieldSpec]:
        """3D fields first, then 2D fields, each in configured order."""
        return [*self.fields_3d, *self.fields_2d]

    def point_cloud_options(self) -> PointCloudOptions:
        return PointCloudOptions(
            dtype=self.point_dtype,
            dtype_signed=self.point_dtype_signed,
            point_elems=self.point_elems,
            use_point_colors=self.use_point_colors,
            static_color=self.static_color,
            point_size=self.point_size,
        )


_VALID_KEYS: set[str] = {f.name for f in fields(SceneConfig)}

_OPTIONAL_STRING_KEYS = ("log_dir", "log_rotation", "log_retention")
_FIELD_LIST_KEYS = {"fields_3d": Dimension.THREE_D, "fields_2d": Dimension.TWO_D}
_SINGLE_FIELD_KEYS = ("map_field", "point_cloud_field")


@dataclass(frozen=True)
class FieldAsset:
    """A field model the renderer can load."""

    name: str
    default_origin: str = "blue"
    game_pieces: tuple[str, ...] = ()


@dataclass(frozen=True)
class AssetCatalog:
    fields: tuple[FieldAsset, ...] = ()
    robots: tuple[str, ...] = ()

    def find_field(self, name: str) -> FieldAsset | None:
        for asset in self.fields:
            if asset.name == name:
                return asset
        return None

    def field_options(self) -> list[str]:
        return [*(asset.name for asset in self.fields), EVERGREEN_FIELD, AXES_FIELD, MAP_FIELD]


def load_default_toml_data() -> dict[str, Any]:
    """Load the default.toml data from the bundled package resource.

    Raises:
        DefaultConfigError: If default.toml cannot be found or parsed.
    """
    try:
        files = importlib.resources.files("telemetry_scene")
        content = files.joinpath("default.toml").read_bytes()
        return tomllib.loads(content.decode("utf-8"))
    except FileNotFoundError as e:
        raise DefaultConfigError(f"default.toml not found in package: {e}") from e
    except tomllib.TOMLDecodeError as e:
        raise DefaultConfigError(f"Invalid TOML syntax in default.toml: {e}") from e


def load_config_from_toml(path: Path) -> dict[str, Any]:
    """Load configuration from a TOML file.

    Raises:
        FileNotFoundError: If the configuration file does not exist.
        tomllib.TOMLDecodeError: If the TOML syntax is invalid.
    """
    with open(path, "rb") as f:
        return tomllib.load(f)


def parse_field_table(
    table: Any, dimension: Dimension, default_type: DeclaredType | None = None
) -> FieldSpec | None:
    """Turn a ``{key, type, role}`` table into a FieldSpec.

    Entries that cannot be bound are skipped with a warning.
    """
    if not isinstance(table, dict) or not table.get("key"):
        logger.warning(f"Ignoring field entry without a key: {table!r}")
        return None
    type_name = table.get("type", default_type.value if default_type else None)
    try:
        declared_type = DeclaredType(type_name)
    except ValueError:
        logger.warning(f"Ignoring field {table['key']}: unknown type {type_name!r}")
        return None
    return FieldSpec(
        key=str(table["key"]),
        declared_type=declared_type,
        role=str(table.get("role", "")),
        dimension=dimension,
    )


def process_toml_config(toml_data: dict[str, Any]) -> dict[str, Any]:
    """Convert parsed TOML data into SceneConfig keyword arguments.

    Unknown keys are dropped here; see :func:`get_unknown_keys`.
    """
    result: dict[str, Any] = {}

    for key, value in toml_data.items():
        if key not in _VALID_KEYS:
            continue
        if key in _OPTIONAL_STRING_KEYS and value == "":
            value = None
        elif key in _FIELD_LIST_KEYS:
            dimension = _FIELD_LIST_KEYS[key]
            specs = [parse_field_table(table, dimension) for table in value]
            value = [spec for spec in specs if spec is not None]
        elif key in _SINGLE_FIELD_KEYS:
            if value in ("", {}):
                value = None
            else:
                value = parse_field_table(value, Dimension.THREE_D, DeclaredType.RAW)
        result[key] = value

    return result


def get_unknown_keys(toml_data: dict[str, Any]) -> list[str]:
    """Keys in ``toml_data`` that SceneConfig does not define."""
    return [key for key in toml_data if key not in _VALID_KEYS]


def validate_config(config: SceneConfig) -> list[str]:
    """Validate configuration values.

    Returns:
        List of error messages. Empty list if configuration is valid.
    """
    errors: list[str] = []

    if config.alliance not in ALLIANCE_MODES:
        errors.append(f"alliance must be one of {list(ALLIANCE_MODES)}, got {config.alliance}")

    if config.unit_distance not in DISTANCE_UNITS:
        errors.append(
            f"unit_distance must be one of {sorted(DISTANCE_UNITS)}, got {config.unit_distance}"
        )
    if config.unit_rotation not in ROTATION_UNITS:
        errors.append(
            f"unit_rotation must be one of {sorted(ROTATION_UNITS)}, got {config.unit_rotation}"
        )

    if config.trajectory_max_length < 2:
        errors.append(
            f"trajectory_max_length must be at least 2, got {config.trajectory_max_length}"
        )
    if config.point_stride < 1:
        errors.append(f"point_stride must be positive, got {config.point_stride}")

    for field_name in _SINGLE_FIELD_KEYS:
        spec = getattr(config, field_name)
        if spec is not None and spec.declared_type is not DeclaredType.RAW:
            errors.append(f"{field_name} must be a Raw field, got {spec.declared_type.value}")

    if config.point_dtype not in POINT_DTYPES:
        errors.append(
            f"point_dtype must be one of {list(POINT_DTYPES)}, got {config.point_dtype}"
        )
    if config.point_elems < 1:
        errors.append(f"point_elems must be positive, got {config.point_elems}")
    if config.point_size <= 0:
        errors.append(f"point_size must be positive, got {config.point_size}")

    valid_log_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
    if config.log_level_console.upper() not in valid_log_levels:
        errors.append(
            f"log_level_console must be one of {valid_log_levels}, "
            f"got {config.log_level_console}"
        )

    return errors


def load_default_config() -> SceneConfig:
    """Load the default configuration from the bundled default.toml.

    Raises:
        DefaultConfigError: If default.toml cannot be loaded or is incomplete.
    """
    try:
        config_data = process_toml_config(load_default_toml_data())

        missing = _VALID_KEYS - set(config_data.keys())
        if missing:
            raise DefaultConfigError(
                f"Missing required fields in default.toml: {', '.join(sorted(missing))}"
            )

        return SceneConfig(**config_data)
    except TypeError as e:
        raise DefaultConfigError(f"Invalid field types in default.toml: {e}") from e


def create_config(
    path: Path | str | None = None,
    overrides: dict[str, Any] | None = None,
) -> tuple[SceneConfig, list[ConfigOverride]]:
    """Create a SceneConfig with layered loading.

    Args:
        path: Optional user TOML file.
        overrides: Values that take precedence over the file, already in
            SceneConfig form (FieldSpec instances for field bindings).

    Returns:
        Tuple of (SceneConfig, list of ConfigOverride for every value that differs
        from the defaults).

    Raises:
        DefaultConfigError: If default.toml cannot be loaded.
        FileNotFoundError: If the user config file does not exist.
        tomllib.TOMLDecodeError: If the user config has invalid TOML syntax.
        ConfigurationError: If validation fails or an override names an unknown key.
    """
    config = load_default_config()
    applied: list[ConfigOverride] = []

    def _apply(base: SceneConfig, updates: dict[str, Any]) -> SceneConfig:
        for key, new_value in updates.items():
            default_value = getattr(base, key)
            if default_value != new_value:
                applied.append(ConfigOverride(key, default_value, new_value))
        return dataclass_replace(base, **updates)

    if path is not None:
        user_config_path = Path(path)
        toml_data = load_config_from_toml(user_config_path)

        unknown = get_unknown_keys(toml_data)
        if unknown:
            logger.warning(f"Unknown keys in {user_config_path}: {', '.join(unknown)}")

        config_data = process_toml_config(toml_data)
        if config_data:
            config = _apply(config, config_data)

    if overrides:
        unknown = get_unknown_keys(overrides)
        if unknown:
            raise ConfigurationError([f"Unknown configuration key: {key}" for key in unknown])
        config = _apply(config, overrides)

    errors = validate_config(config)
    if errors:
        raise ConfigurationError(errors)

    return config, applied


def select_field(
    config: SceneConfig, name: str, assets: AssetCatalog | None = None
) -> SceneConfig:
    """Switch to another field model, adopting its default alliance origin.

    The axes and map views have no alliance-specific layout and always use blue.
    """
    alliance = config.alliance
    asset = assets.find_field(name) if assets is not None else None
    if asset is not None:
        alliance = asset.default_origin
    if name in (AXES_FIELD, MAP_FIELD):
        alliance = "blue"
    return dataclass_replace(config, field=name, alliance=alliance)
