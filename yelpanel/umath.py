"""Small numeric helpers: value mapping, fixed-width sums and averages, hex decoding."""

from __future__ import annotations

import string
import struct
import time
from collections.abc import Iterable, MutableSequence
from enum import Enum

__all__ = [
    "NumericKind",
    "abs_double",
    "parse_string",
    "pressure_to_speed",
    "shift_and_insert",
    "total",
    "average",
    "hex_to_bytes",
    "get_time_seconds",
]

_START = time.monotonic()

# Pressure (cmH2O) to blower speed (%) mapping, in ascending pressure order.
_PRESSURE_SPEED_TABLE: tuple[tuple[float, float], ...] = (
    (0, 0.1),
    (1, 8.1),
    (2, 9.6),
    (3, 9.8),
    (4, 10.4),
    (5, 11.2),
    (6, 11.8),
    (7, 12.5),
    (8, 13.3),
    (9, 13.9),
    (10, 14.4),
    (20, 19.7),
    (30, 24.4),
    (40, 27.7),
    (50, 35.1),
    (100, 50.7),
    (200, 70.0),
    (300, 61.5),
    (400, 98.7),
)


class NumericKind(Enum):
    """Element type used for accumulation, with the overflow rules of that type."""

    FLOAT = ("float", None, None)
    DOUBLE = ("double", None, None)
    UINT16 = ("uint16", 16, False)
    INT16 = ("int16", 16, True)
    UINT64 = ("uint64", 64, False)
    INT64 = ("int64", 64, True)

    def __init__(self, label: str, bits: int | None, signed: bool | None) -> None:
        self.label = label
        self.bits = bits
        self.signed = signed

    @property
    def is_integer(self) -> bool:
        return self.bits is not None

    def wrap(self, value: int) -> int:
        """Reduce an integer to the range of this kind, two's-complement style."""
        if self.bits is None:
            raise TypeError(f"{self.label} is not an integer kind")
        mask = (1 << self.bits) - 1
        value &= mask
        if self.signed and value >> (self.bits - 1):
            value -= 1 << self.bits
        return value


def _f32(value: float) -> float:
    return struct.unpack("<f", struct.pack("<f", value))[0]


def abs_double(x: float) -> float:
    """Absolute value; negative zero is returned unchanged."""
    return -x if x < 0 else x


def parse_string(text: str) -> tuple[int, str]:
    """Split a frame such as ``~0,548`` into its action digit and data text."""
    if text is None or len(text) < 3:
        raise ValueError("frame must hold at least three characters")
    action_type = (ord(text[1]) - ord("0")) & 0xFF
    return action_type, text[3:]


def pressure_to_speed(pressure: float) -> float:
    """Map a pressure to a blower speed by linear interpolation over a fixed table."""
    first_pressure, first_speed = _PRESSURE_SPEED_TABLE[0]
    last_pressure, last_speed = _PRESSURE_SPEED_TABLE[-1]
    if pressure <= first_pressure:
        return first_speed
    if pressure >= last_pressure:
        return last_speed
    for (p1, s1), (p2, s2) in zip(_PRESSURE_SPEED_TABLE, _PRESSURE_SPEED_TABLE[1:]):
        if p1 <= pressure <= p2:
            return s1 + (pressure - p1) * (s2 - s1) / (p2 - p1)
    return last_speed


def shift_and_insert(values: MutableSequence, new_value):
    """Push ``new_value`` onto the front of a fixed-size window and return the dropped item."""
    if not values:
        raise ValueError("cannot shift an empty window")
    values.insert(0, new_value)
    return values.pop()


def total(values: Iterable, kind: NumericKind = NumericKind.DOUBLE):
    """Sum ``values`` with the accumulator semantics of ``kind``."""
    if kind is NumericKind.FLOAT:
        acc = 0.0
        for value in values:
            acc = _f32(acc + _f32(value))
        return acc
    if kind is NumericKind.DOUBLE:
        acc = 0.0
        for value in values:
            acc += float(value)
        return acc
    acc = 0
    for value in values:
        acc = kind.wrap(acc + kind.wrap(int(value)))
    return acc


def average(values: Iterable, kind: NumericKind = NumericKind.DOUBLE):
    """Mean of ``values``; integer kinds truncate toward zero."""
    items = list(values)
    if not items:
        raise ValueError("cannot average an empty sequence")
    count = len(items)
    accumulated = total(items, kind)
    if kind is NumericKind.FLOAT:
        return _f32(accumulated / count)
    if kind is NumericKind.DOUBLE:
        return accumulated / count
    quotient = abs(accumulated) // count
    return kind.wrap(-quotient if accumulated < 0 else quotient)


def hex_to_bytes(text: str) -> bytes:
    """Decode a string of hex digit pairs; anything else is rejected."""
    if text is None:
        raise ValueError("hex text is missing")
    if len(text) % 2:
        raise ValueError("hex text must have an even number of digits")
    bad = [c for c in text if c not in string.hexdigits]
    if bad:
        raise ValueError(f"invalid hex character {bad[0]!r}")
    return bytes.fromhex(text)


def get_time_seconds() -> float:
    """Seconds elapsed since this module was loaded, from a monotonic clock."""
    return time.monotonic() - _START