"""Tests for alliance lookups and mechanism handling."""

from __future__ import annotations

import pytest

from telemetry_scene import log_util
from telemetry_scene.log_source import MemoryLog
from telemetry_scene.types import MechanismLine, MechanismState


def put_mechanism(log: MemoryLog, key: str, t: float = 0.0) -> None:
    """Root at (1, 0) with an arm that points up and a wrist that turns right."""
    log.put_string(f"{key}/backgroundColor", t, "#000020")
    log.put_number_array(f"{key}/dims", t, [3.0, 2.0])
    log.put_number(f"{key}/base/x", t, 1.0)
    log.put_number(f"{key}/base/y", t, 0.0)
    log.put_number(f"{key}/base/arm/angle", t, 90.0)
    log.put_number(f"{key}/base/arm/length", t, 1.0)
    log.put_string(f"{key}/base/arm/color", t, "#ff0000")
    log.put_number(f"{key}/base/arm/weight", t, 4.0)
    log.put_number(f"{key}/base/arm/wrist/angle", t, -90.0)
    log.put_number(f"{key}/base/arm/wrist/length", t, 0.5)


class TestAlliance:
    """Tests for alliance and driver station detection."""

    def test_no_indicator_is_blue(self):
        log = MemoryLog()
        assert log_util.get_is_red_alliance(log, 1.0) is False
        assert log_util.get_driver_station(log, 1.0) == -1

    @pytest.mark.parametrize(
        ("station", "red", "driver_station"),
        [(0, True, 1), (2, True, 3), (3, False, 1), (5, False, 3)],
    )
    def test_station_number(self, station, red, driver_station):
        log = MemoryLog()
        log.put_number("DriverStation/AllianceStation", 0.0, station)

        assert log_util.get_is_red_alliance(log, 1.0) is red
        assert log_util.get_driver_station(log, 1.0) == driver_station

    def test_networktables_station_key(self):
        log = MemoryLog()
        log.put_number("NT:/AdvantageKit/DriverStation/AllianceStation", 0.0, 1)

        assert log_util.get_is_red_alliance(log, 0.0) is True

    def test_fms_flag(self):
        log = MemoryLog()
        log.put_boolean("NT:/FMSInfo/IsRedAlliance", 0.0, True)

        assert log_util.get_is_red_alliance(log, 0.0) is True
        assert log_util.get_driver_station(log, 0.0) == -1

    @pytest.mark.parametrize("station", [float("nan"), float("inf")])
    def test_non_finite_station_falls_back_to_fms(self, station):
        """Test that an unusable station number is treated as absent."""
        log = MemoryLog()
        log.put_number("DriverStation/AllianceStation", 0.0, station)

        assert log_util.get_alliance_station(log, 0.0) is None
        assert log_util.get_is_red_alliance(log, 0.0) is False
        assert log_util.get_driver_station(log, 0.0) == -1

        log.put_boolean("NT:/FMSInfo/IsRedAlliance", 0.0, True)
        assert log_util.get_is_red_alliance(log, 0.0) is True

    def test_reads_value_at_time(self):
        """Test that a later station change is not visible earlier."""
        log = MemoryLog()
        log.put_number("DriverStation/AllianceStation", 0.0, 4)
        log.put_number("DriverStation/AllianceStation", 10.0, 1)

        assert log_util.get_is_red_alliance(log, 5.0) is False
        assert log_util.get_is_red_alliance(log, 10.0) is True


class TestMechanismState:
    """Tests for reading a mechanism tree."""

    def test_lines(self):
        log = MemoryLog()
        put_mechanism(log, "Arm")

        state = log_util.get_mechanism_state(log, "Arm", 0.0)

        assert state is not None
        assert state.background_color == "#000020"
        assert state.dimensions == (3.0, 2.0)
        assert len(state.lines) == 2
        arm, wrist = state.lines
        assert arm.start == (1.0, 0.0)
        assert arm.end == pytest.approx((1.0, 1.0))
        assert arm.color == "#ff0000"
        assert arm.weight == 4.0
        assert wrist.start == arm.end
        assert wrist.end == pytest.approx((1.5, 1.0))
        assert wrist.color == "#ffffff"
        assert wrist.weight == 1.0

    def test_missing_header(self):
        """Test that a tree without a background colour is absent."""
        log = MemoryLog()
        log.put_number_array("Arm/dims", 0.0, [1.0, 1.0])

        assert log_util.get_mechanism_state(log, "Arm", 0.0) is None

    def test_ignores_sibling_prefix(self):
        """Test that keys sharing only a name prefix are not walked."""
        log = MemoryLog()
        put_mechanism(log, "Arm")
        put_mechanism(log, "Arm2")

        state = log_util.get_mechanism_state(log, "Arm", 0.0)

        assert state is not None
        assert len(state.lines) == 2


class TestMergeMechanismStates:
    def test_concatenates_in_order(self):
        first = MechanismState(
            "#111111", (2.0, 1.0), (MechanismLine((0.0, 0.0), (1.0, 0.0), "#aa0000"),)
        )
        second = MechanismState(
            "#222222", (1.0, 4.0), (MechanismLine((0.0, 0.0), (0.0, 1.0), "#00aa00"),)
        )

        merged = log_util.merge_mechanism_states([first, second])

        assert merged.background_color == "#111111"
        assert merged.dimensions == (2.0, 4.0)
        assert [line.color for line in merged.lines] == ["#aa0000", "#00aa00"]
        assert len(first.lines) == 1

    def test_empty(self):
        with pytest.raises(ValueError):
            log_util.merge_mechanism_states([])
