"""Tests for trajectory resampling."""

import pytest

from telemetry_scene.resample import clean_trajectories, resample_trajectory


class TestResampleTrajectory:
    """Tests for resample_trajectory."""

    def test_long_trajectory(self):
        """Test that 100 vertices reduce to at most 40 with both ends kept."""
        trajectory = list(range(100))

        result = resample_trajectory(trajectory, 40)

        assert len(result) <= 40
        assert result[0] == 0
        assert result[-1] == 99
        assert result == sorted(set(result))

    def test_idempotent(self):
        """Test that a second pass at the same limit changes nothing."""
        once = resample_trajectory(list(range(100)), 40)
        assert resample_trajectory(once, 40) == once

    def test_short_trajectory_unchanged(self):
        trajectory = [1, 2, 3]
        result = resample_trajectory(trajectory, 40)

        assert result == trajectory
        assert result is not trajectory

    def test_input_not_modified(self):
        trajectory = list(range(50))
        resample_trajectory(trajectory, 10)
        assert trajectory == list(range(50))

    def test_half_up_rounding(self):
        """Test index selection with ties rounded up."""
        # Source indices 0, 1.5, 3; the tie at 1.5 picks 2
        assert resample_trajectory(list("abcd"), 3) == ["a", "c", "d"]

    @pytest.mark.parametrize("max_length", [0, 1])
    def test_invalid_max_length(self, max_length):
        with pytest.raises(ValueError):
            resample_trajectory([1, 2, 3], max_length)


class TestCleanTrajectories:
    def test_drops_empty(self):
        """Test that empty trajectories are removed before resampling."""
        result = clean_trajectories([[], list(range(10)), []], 4)

        assert len(result) == 1
        assert result[0][0] == 0
        assert result[0][-1] == 9
        assert len(result[0]) <= 4
