"""
Track exporter - Write a node chain to the simulator's binary format.

Provides:
- Export configuration
- Chain to segment list to file pipeline
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import List
import io
import logging
import math

from trackspline.export.bezier import BezierSegment
from trackspline.export.serializer import write_to_export_file
from trackspline.track.chain import NodeChain

logger = logging.getLogger("trackspline.export")


@dataclass
class ExporterConfig:
    """Exporter configuration."""
    output_dir: str = "./export"
    max_segment_angle: float = field(default_factory=lambda: math.radians(10.0))
    smooth_forces: bool = True


class TrackExporter:
    """Export node chains as Bezier segment files.

    The chain must already carry its metrics (from the kinematic solver or
    :meth:`NodeChain.update_metrics`).
    """

    def __init__(self, config: ExporterConfig | None = None):
        """Initialize exporter.

        Args:
            config: Exporter configuration
        """
        self.config = config or ExporterConfig()
        self._output_path = Path(self.config.output_dir)

    def export_bytes(self, chain: NodeChain) -> bytes:
        """Export a chain to an in-memory byte string."""
        segments = self._export_segments(chain)
        buffer = io.BytesIO()
        write_to_export_file(buffer, segments)
        return buffer.getvalue()

    def export_file(self, chain: NodeChain, filename: str = "track.bez") -> Path:
        """Export a chain to a file in the output directory.

        Segments are built before the file is opened.

        Args:
            chain: Node chain with populated metrics
            filename: Output filename

        Returns:
            Path to exported file
        """
        segments = self._export_segments(chain)

        self._output_path.mkdir(parents=True, exist_ok=True)
        output_file = self._output_path / filename

        with open(output_file, "wb") as f:
            written = write_to_export_file(f, segments)

        logger.info("Wrote %d bytes to %s", written, output_file)
        return output_file

    def _export_segments(self, chain: NodeChain) -> List[BezierSegment]:
        if self.config.smooth_forces:
            chain.calc_smooth_forces()

        logger.info(
            "Exporting %d nodes (max segment angle %.2f deg)",
            len(chain),
            math.degrees(self.config.max_segment_angle),
        )
        segments = chain.export(self.config.max_segment_angle)
        logger.info("Exported %d segments", len(segments))
        return segments
