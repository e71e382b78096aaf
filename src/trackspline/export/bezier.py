"""
Bezier segment - One cubic piece of exported track.

Defines:
- SegmentFlags: interpretation hints for the simulator and their byte form
- BezierSegment: endpoint, two handles and roll
"""

from dataclasses import dataclass, field
import numpy as np

FLAG_TRUE = 0xFF
FLAG_FALSE = 0x00


@dataclass(frozen=True)
class SegmentFlags:
    """Roll and control point hints attached to a segment."""
    continuous_roll: bool = False
    relative_roll: bool = False
    equal_distance_control_points: bool = False

    def to_bytes(self) -> bytes:
        """Pack as three bytes, 0xFF for true and 0x00 for false."""
        return bytes(
            FLAG_TRUE if flag else FLAG_FALSE
            for flag in (
                self.continuous_roll,
                self.relative_roll,
                self.equal_distance_control_points,
            )
        )

    @classmethod
    def from_bytes(cls, raw: bytes) -> "SegmentFlags":
        """Unpack three flag bytes; any non-zero byte reads as true."""
        if len(raw) != 3:
            raise ValueError(f"expected 3 flag bytes, got {len(raw)}")
        return cls(bool(raw[0]), bool(raw[1]), bool(raw[2]))


@dataclass(eq=False)
class BezierSegment:
    """A cubic Bezier arc ending at ``p1``.

    The curve starts at the previous segment's ``p1``; ``handle1`` and
    ``handle2`` are its two inner control points.
    """
    p1: np.ndarray = field(default_factory=lambda: np.zeros(3))
    handle1: np.ndarray = field(default_factory=lambda: np.zeros(3))
    handle2: np.ndarray = field(default_factory=lambda: np.zeros(3))
    roll: float = 0.0                  # Radians
    flags: SegmentFlags = field(default_factory=SegmentFlags)

    def __post_init__(self):
        self.p1 = np.array(self.p1, dtype=float).reshape(3)
        self.handle1 = np.array(self.handle1, dtype=float).reshape(3)
        self.handle2 = np.array(self.handle2, dtype=float).reshape(3)

    @property
    def continuous_roll(self) -> bool:
        return self.flags.continuous_roll

    @property
    def relative_roll(self) -> bool:
        return self.flags.relative_roll

    @property
    def equal_distance_control_points(self) -> bool:
        return self.flags.equal_distance_control_points
