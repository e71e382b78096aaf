"""
Export module - Bezier segments and the simulator's binary format.

This module contains:
- BezierSegment, SegmentFlags: Exported curve pieces
- serializer: 50-byte big-endian segment records
- exporter: Chain to file pipeline (import trackspline.export.exporter)
"""

from trackspline.export.bezier import BezierSegment, SegmentFlags
from trackspline.export.serializer import (
    write_to_export_file,
    read_export_file,
    RECORD_SIZE,
)

__all__ = [
    "BezierSegment",
    "SegmentFlags",
    "write_to_export_file",
    "read_export_file",
    "RECORD_SIZE",
]
