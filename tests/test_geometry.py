"""Tests for geometry and unit helpers."""

from __future__ import annotations

import math

import pytest

from telemetry_scene import geometry
from telemetry_scene.types import Pose2d
from telemetry_scene.units import UnitConversions, convert


class TestRotations:
    """Tests for rotation conversions."""

    @pytest.mark.parametrize("theta", [0.0, 0.5, -1.2, math.pi / 2, 3.0])
    def test_yaw_survives_round_trip(self, theta: float) -> None:
        """Test that yaw extraction inverts the vertical-axis quaternion."""
        yaw = geometry.rotation3d_to_2d(geometry.rotation2d_to_3d(theta))
        assert yaw == pytest.approx(math.atan2(math.sin(theta), math.cos(theta)))

    def test_rotation_is_unit_quaternion(self) -> None:
        """Test that the produced quaternion has unit norm."""
        w, x, y, z = geometry.rotation2d_to_3d(1.0)
        assert w * w + x * x + y * y + z * z == pytest.approx(1.0)
        assert (x, y) == (0.0, 0.0)


class TestPosePromotion:
    """Tests for 2D to 3D promotion."""

    def test_height_applied(self) -> None:
        """Test that promotion fixes the caller's height."""
        pose = geometry.pose2d_to_3d(Pose2d(translation=(1.0, 2.0), rotation=0.0), 0.02)

        assert pose.translation == (1.0, 2.0, 0.02)
        assert pose.rotation == pytest.approx((1.0, 0.0, 0.0, 0.0))

    def test_translation_identity_rotation(self) -> None:
        pose = geometry.translation2d_to_pose3d((4.0, 5.0))
        assert pose.translation == (4.0, 5.0, 0.0)
        assert pose.rotation == (1.0, 0.0, 0.0, 0.0)


class TestScaleValue:
    """Tests for linear range mapping."""

    def test_midpoint(self) -> None:
        assert geometry.scale_value(1.5, (1.0, 2.0), (10.0, 20.0)) == pytest.approx(15.0)

    def test_degenerate_range(self) -> None:
        """Test that a zero-width source range maps to the target start."""
        assert geometry.scale_value(1.0, (1.0, 1.0), (3.0, 9.0)) == 3.0


class TestCleanFloat:
    def test_strips_noise(self) -> None:
        assert geometry.clean_float(2.9999999999999) == 3.0
        assert geometry.clean_float(0.1 + 0.2) == 0.3


class TestUnits:
    """Tests for unit conversion."""

    def test_feet_to_meters(self) -> None:
        assert convert(10.0, "feet", "meters") == pytest.approx(3.048)

    def test_degrees_to_radians(self) -> None:
        assert convert(180.0, "degrees", "radians") == pytest.approx(math.pi)

    def test_cross_group_rejected(self) -> None:
        """Test that distances cannot be converted into angles."""
        with pytest.raises(ValueError):
            convert(1.0, "meters", "radians")

    def test_unknown_unit(self) -> None:
        with pytest.raises(ValueError):
            convert(1.0, "furlongs", "meters")

    def test_conversions_from_units(self) -> None:
        """Test the factors applied at decode time."""
        conversions = UnitConversions.from_units("inches", "degrees")

        assert conversions.distance == pytest.approx(0.0254)
        assert conversions.rotation == pytest.approx(math.pi / 180.0)
