"""
Trajectory vertex reduction.
"""

from __future__ import annotations

import math
from collections.abc import Sequence
from typing import TypeVar

T = TypeVar("T")

DEFAULT_TRAJECTORY_MAX_LENGTH = 40


def resample_trajectory(trajectory: Sequence[T], max_length: int) -> list[T]:
    """Pick at most ``max_length`` evenly spaced vertices, always keeping both ends.

    Returns a new list; the input is never modified.
    """
    if max_length < 2:
        raise ValueError(f"max_length must be at least 2, got {max_length}")

    length = len(trajectory)
    if length <= max_length:
        return list(trajectory)

    resampled: list[T] = []
    last_index = -1
    for i in range(max_length):
        # Half-up rounding keeps the index sequence monotonic
        index = math.floor(i * (length - 1) / (max_length - 1) + 0.5)
        if index != last_index:
            last_index = index
            resampled.append(trajectory[index])
    return resampled


def clean_trajectories(
    trajectories: Sequence[Sequence[T]], max_length: int
) -> list[list[T]]:
    """Drop empty trajectories and resample the rest."""
    return [
        resample_trajectory(trajectory, max_length)
        for trajectory in trajectories
        if len(trajectory) > 0
    ]
