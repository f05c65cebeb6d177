"""
Point-cloud frames for the point-cloud view.

Only the first configured Raw field is read. The packet is split into its header and whole
points; the renderer interprets the point bytes according to :class:`PointCloudOptions`.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any

import numpy as np

from .binary_parsers import DEFAULT_POINT_STRIDE, parse_point_cloud
from .dispatcher import FieldSpec
from .log_source import LogSource, latest_at
from .roles import DeclaredType
from .types import PointCloudFrame, freeze_mapping

# Element width in bytes, and whether the signed flag applies
POINT_DTYPES: dict[str, tuple[int, bool]] = {
    "f32": (4, False),
    "f64": (8, False),
    "i8": (1, True),
    "i16": (2, True),
    "i32": (4, True),
    "i64": (8, True),
    "u8": (1, True),
}


def numpy_dtype(name: str, signed: bool = True) -> np.dtype:
    """Little-endian numpy dtype for a point element type name."""
    if name not in POINT_DTYPES:
        raise ValueError(f"Unknown point dtype: {name}")
    width, integer = POINT_DTYPES[name]
    if not integer:
        return np.dtype(f"<f{width}")
    if name.startswith("u"):
        signed = False
    return np.dtype(f"<{'i' if signed else 'u'}{width}")


@dataclass(frozen=True, slots=True)
class PointCloudOptions:
    dtype: str = "f32"
    dtype_signed: bool = True
    point_elems: int = 4
    use_point_colors: bool = False
    static_color: str = "#ffffff"
    point_size: float = 0.05

    def as_dict(self) -> dict[str, Any]:
        return asdict(self)


def build_point_cloud(
    log: LogSource,
    field: FieldSpec | None,
    time: float,
    options: PointCloudOptions | None = None,
    stride: int = DEFAULT_POINT_STRIDE,
) -> PointCloudFrame | None:
    """Latest point-cloud packet at or before ``time``, or ``None``."""
    if field is None or field.declared_type is not DeclaredType.RAW:
        return None
    sample = latest_at(log.get_raw(field.key, time, time), time)
    if sample is None:
        return None

    timestamp, buffer = sample
    packet = parse_point_cloud(buffer, stride)
    if packet is None:
        return None
    return PointCloudFrame(
        x=packet.x,
        y=packet.y,
        payload=packet.payload,
        source_timestamp=timestamp,
        options=freeze_mapping((options or PointCloudOptions()).as_dict()),
    )
