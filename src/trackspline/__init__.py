"""
trackspline - Track spline and export kernel for roller coaster design.

This package converts an ordered chain of track nodes into:
- Smoothed normal and lateral rider forces per node
- Cubic Bezier segments approximating the track between nodes
- The 50-byte-per-segment binary format read by the ride simulator
"""

__version__ = "0.1.0"

from trackspline.track.node import Node
from trackspline.track.chain import NodeChain
from trackspline.export.bezier import BezierSegment, SegmentFlags
from trackspline.export.serializer import write_to_export_file, read_export_file
from trackspline.export.exporter import TrackExporter, ExporterConfig
from trackspline.errors import TrackSplineError, ExportError

__all__ = [
    "Node",
    "NodeChain",
    "BezierSegment",
    "SegmentFlags",
    "write_to_export_file",
    "read_export_file",
    "TrackExporter",
    "ExporterConfig",
    "TrackSplineError",
    "ExportError",
    "__version__",
]
