"""Tests for point-cloud frames."""

from __future__ import annotations

import struct

import numpy as np
import pytest

from telemetry_scene.dispatcher import FieldSpec
from telemetry_scene.log_source import MemoryLog
from telemetry_scene.point_cloud import PointCloudOptions, build_point_cloud, numpy_dtype
from telemetry_scene.roles import DeclaredType

CLOUD = FieldSpec("Lidar/Points", DeclaredType.RAW, "")


def packet(x: int, y: int, payload: bytes) -> bytes:
    return struct.pack("<BB", x, y) + payload


class TestBuildPointCloud:
    """Tests for build_point_cloud."""

    def test_latest_packet(self):
        log = MemoryLog()
        log.put_raw("Lidar/Points", 1.0, packet(1, 1, bytes(16)))
        log.put_raw("Lidar/Points", 2.0, packet(3, 7, bytes(34)))

        frame = build_point_cloud(log, CLOUD, 2.5)

        assert frame is not None
        assert (frame.x, frame.y) == (3, 7)
        assert len(frame.payload) == 32
        assert frame.source_timestamp == 2.0
        assert frame.options["dtype"] == "f32"

    def test_before_first_packet(self):
        log = MemoryLog()
        log.put_raw("Lidar/Points", 2.0, packet(0, 0, bytes(16)))

        assert build_point_cloud(log, CLOUD, 1.0) is None

    def test_no_field(self):
        assert build_point_cloud(MemoryLog(), None, 0.0) is None

    def test_non_raw_field(self):
        log = MemoryLog()
        log.put_number_array("Lidar/Points", 0.0, [1.0])
        field = FieldSpec("Lidar/Points", DeclaredType.NUMBER_ARRAY, "")

        assert build_point_cloud(log, field, 0.0) is None

    def test_memoryview_sample(self):
        """Test a sample stored as a view into a larger buffer."""
        backing = bytearray(b"\x00" + packet(2, 9, bytes(range(16))))
        log = MemoryLog()
        log.put_raw("Lidar/Points", 0.0, memoryview(backing)[1:])

        frame = build_point_cloud(log, CLOUD, 0.0)

        assert frame is not None
        assert (frame.x, frame.y) == (2, 9)
        assert frame.payload == bytes(range(16))


class TestPointArray:
    """Tests for the numpy view of a frame."""

    def test_float_points(self):
        points = [(1.0, 2.0, 3.0, 0.5), (4.0, 5.0, 6.0, 1.0)]
        payload = b"".join(struct.pack("<4f", *point) for point in points)
        log = MemoryLog()
        log.put_raw("Lidar/Points", 0.0, packet(0, 0, payload))

        frame = build_point_cloud(log, CLOUD, 0.0)

        assert frame is not None
        array = frame.as_array()
        assert array.shape == (2, 4)
        np.testing.assert_allclose(array, np.array(points, dtype=np.float32))

    def test_integer_points(self):
        payload = struct.pack("<8h", 1, -2, 3, -4, 5, -6, 7, -8)
        log = MemoryLog()
        log.put_raw("Lidar/Points", 0.0, packet(0, 0, payload))
        options = PointCloudOptions(dtype="i16", point_elems=2)

        frame = build_point_cloud(log, CLOUD, 0.0, options)

        assert frame is not None
        assert frame.as_array().tolist() == [[1, -2], [3, -4], [5, -6], [7, -8]]


class TestNumpyDtype:
    @pytest.mark.parametrize(
        ("name", "signed", "expected"),
        [
            ("f32", True, "<f4"),
            ("f64", False, "<f8"),
            ("i8", True, "i1"),
            ("i32", False, "<u4"),
            ("u8", True, "u1"),
        ],
    )
    def test_mapping(self, name, signed, expected):
        assert numpy_dtype(name, signed) == np.dtype(expected)

    def test_unknown(self):
        with pytest.raises(ValueError):
            numpy_dtype("f16")
