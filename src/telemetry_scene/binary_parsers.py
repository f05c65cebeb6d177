"""
Parsers for raw payloads carried in Raw log fields.

Both formats start with a fixed header that describes the payload geometry, followed by a
variable-length body. A buffer handed out by the log may be a view into a larger allocation
that starts at any byte offset, so every parser first copies it into a fresh buffer and only
then interprets multi-byte fields.

Malformed frames are dropped: the parsers return ``None`` and the caller moves on.
"""

import struct
from dataclasses import dataclass

from loguru import logger

from .types import MapRaster

# Point-cloud packet: x (u8), y (u8), then fixed-size points
POINT_CLOUD_HEADER_SIZE = 2
DEFAULT_POINT_STRIDE = 16  # bytes per point

# Occupancy map: size_x, size_y (i32), origin_x, origin_y, resolution (f32)
MAP_HEADER_FORMAT = "<iifff"
MAP_HEADER_SIZE = struct.calcsize(MAP_HEADER_FORMAT)  # 20
MAP_BYTES_PER_CELL = 1


@dataclass(frozen=True, slots=True)
class PointCloudPacket:
    x: int
    y: int
    payload: bytes


def normalize_buffer(data: bytes | bytearray | memoryview) -> bytes:
    """Copy a possibly offset view into a standalone, zero-offset buffer."""
    if isinstance(data, memoryview):
        return data.tobytes()
    return bytes(data)


def parse_point_cloud(
    data: bytes | bytearray | memoryview | None, stride: int = DEFAULT_POINT_STRIDE
) -> PointCloudPacket | None:
    """Split a point-cloud packet into its header and whole points.

    Trailing bytes that do not fill a complete point are dropped.
    """
    if data is None:
        return None
    if stride < 1:
        raise ValueError(f"stride must be positive, got {stride}")

    buffer = normalize_buffer(data)
    if len(buffer) < POINT_CLOUD_HEADER_SIZE:
        logger.debug(f"Point cloud packet too short ({len(buffer)} bytes)")
        return None

    x, y = struct.unpack_from("<BB", buffer, 0)
    body_length = len(buffer) - POINT_CLOUD_HEADER_SIZE
    trimmed_length = (body_length // stride) * stride
    payload = buffer[POINT_CLOUD_HEADER_SIZE : POINT_CLOUD_HEADER_SIZE + trimmed_length]
    return PointCloudPacket(x=x, y=y, payload=payload)


def parse_map_raster(data: bytes | bytearray | memoryview | None) -> MapRaster | None:
    """Decode an occupancy map payload.

    Returns ``None`` when the buffer holds no cells, declares a non-positive area or is
    shorter than the area it declares.
    """
    if data is None:
        return None

    buffer = normalize_buffer(data)
    if len(buffer) <= MAP_HEADER_SIZE:
        logger.debug(f"Map payload has no cells ({len(buffer)} bytes)")
        return None

    size_x, size_y, origin_x, origin_y, resolution = struct.unpack_from(
        MAP_HEADER_FORMAT, buffer, 0
    )
    area = size_x * size_y
    map_bytes = area * MAP_BYTES_PER_CELL
    # Two negative sizes would still give a positive area
    if size_x < 1 or size_y < 1 or len(buffer) - MAP_HEADER_SIZE < map_bytes:
        logger.debug(
            f"Map header inconsistent: {size_x}x{size_y} with "
            f"{len(buffer) - MAP_HEADER_SIZE} cell bytes"
        )
        return None

    return MapRaster(
        width=size_x,
        height=size_y,
        origin_x=origin_x,
        origin_y=origin_y,
        cell_resolution=resolution,
        cells=buffer[MAP_HEADER_SIZE : MAP_HEADER_SIZE + map_bytes],
    )
