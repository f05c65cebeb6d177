"""
Log query interface consumed by the scene builder.

The builder never owns log storage. It only needs point and interval lookups by key, which
any store can provide by implementing :class:`LogSource`. :class:`MemoryLog` is a small
in-memory implementation used by tests and by embedders that already hold samples in memory.

Lookup semantics:

* A point lookup at ``t`` returns the most recent sample at or before ``t``.
* A range lookup ``[t0, t1]`` returns the sample at or before ``t0``, every sample inside the
  range and the first sample after ``t1``. For ``t0 == t1`` that is at most two samples that
  bracket the query time.
"""

from __future__ import annotations

import bisect
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Protocol, TypeVar, runtime_checkable

T = TypeVar("T")

Samples = list[tuple[float, T]]


class LoggableType(str, Enum):
    RAW = "Raw"
    BOOLEAN = "Boolean"
    NUMBER = "Number"
    STRING = "String"
    BOOLEAN_ARRAY = "BooleanArray"
    NUMBER_ARRAY = "NumberArray"
    STRING_ARRAY = "StringArray"


@runtime_checkable
class LogSource(Protocol):
    """Read-only view of a time-indexed telemetry log."""

    def get_raw(self, key: str, start: float, end: float) -> Samples[bytes] | None: ...

    def get_number(self, key: str, start: float, end: float) -> Samples[float] | None: ...

    def get_number_array(
        self, key: str, start: float, end: float
    ) -> Samples[list[float]] | None: ...

    def get_or_default(
        self, key: str, type: LoggableType, timestamp: float, default: Any
    ) -> Any: ...

    def get_field_keys(self) -> list[str]: ...


@dataclass
class _Field:
    type: LoggableType
    timestamps: list[float] = field(default_factory=list)
    values: list[Any] = field(default_factory=list)


class MemoryLog:
    """In-memory :class:`LogSource` backed by time-sorted sample lists."""

    def __init__(self) -> None:
        self._fields: dict[str, _Field] = {}

    def put(self, key: str, type: LoggableType, timestamp: float, value: Any) -> None:
        """Insert a sample, replacing any sample already stored at ``timestamp``."""
        entry = self._fields.get(key)
        if entry is None:
            entry = _Field(type=type)
            self._fields[key] = entry
        elif entry.type != type:
            raise ValueError(
                f"Field {key} is {entry.type.value}, cannot store {type.value}"
            )

        index = bisect.bisect_left(entry.timestamps, timestamp)
        if index < len(entry.timestamps) and entry.timestamps[index] == timestamp:
            entry.values[index] = value
            return
        entry.timestamps.insert(index, timestamp)
        entry.values.insert(index, value)

    def put_number(self, key: str, timestamp: float, value: float) -> None:
        self.put(key, LoggableType.NUMBER, timestamp, float(value))

    def put_number_array(self, key: str, timestamp: float, value: list[float]) -> None:
        self.put(key, LoggableType.NUMBER_ARRAY, timestamp, [float(v) for v in value])

    def put_string(self, key: str, timestamp: float, value: str) -> None:
        self.put(key, LoggableType.STRING, timestamp, value)

    def put_boolean(self, key: str, timestamp: float, value: bool) -> None:
        self.put(key, LoggableType.BOOLEAN, timestamp, bool(value))

    def put_raw(self, key: str, timestamp: float, value: bytes | memoryview) -> None:
        self.put(key, LoggableType.RAW, timestamp, value)

    def get_type(self, key: str) -> LoggableType | None:
        entry = self._fields.get(key)
        return None if entry is None else entry.type

    def get_field_keys(self) -> list[str]:
        return sorted(self._fields)

    def _get_range(
        self, key: str, type: LoggableType, start: float, end: float
    ) -> Samples[Any] | None:
        entry = self._fields.get(key)
        if entry is None or entry.type != type or not entry.timestamps:
            return None
        first = max(bisect.bisect_right(entry.timestamps, start) - 1, 0)
        last = bisect.bisect_right(entry.timestamps, end)
        return list(
            zip(entry.timestamps[first : last + 1], entry.values[first : last + 1])
        )

    def get_raw(self, key: str, start: float, end: float) -> Samples[bytes] | None:
        return self._get_range(key, LoggableType.RAW, start, end)

    def get_number(self, key: str, start: float, end: float) -> Samples[float] | None:
        return self._get_range(key, LoggableType.NUMBER, start, end)

    def get_number_array(
        self, key: str, start: float, end: float
    ) -> Samples[list[float]] | None:
        return self._get_range(key, LoggableType.NUMBER_ARRAY, start, end)

    def get_or_default(
        self, key: str, type: LoggableType, timestamp: float, default: Any
    ) -> Any:
        samples = self._get_range(key, type, timestamp, timestamp)
        if samples and samples[0][0] <= timestamp:
            return samples[0][1]
        return default


def latest_at(samples: Samples[T] | None, timestamp: float) -> tuple[float, T] | None:
    """First sample of a range result if it is at or before ``timestamp``."""
    if samples and samples[0][0] <= timestamp:
        return samples[0]
    return None
