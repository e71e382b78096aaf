"""
Node chain - Ordered collection of track nodes.

Contains:
- Flat node storage with index-based neighbour access
- Metric population from node geometry
- Export traversal producing the ordered Bezier list
"""

from pathlib import Path
from typing import Any, Dict, Iterator, List
import json
import logging
import math
import numpy as np

from trackspline.export.bezier import BezierSegment
from trackspline.track import vectors
from trackspline.track.node import Node

logger = logging.getLogger("trackspline.core")

# Solver metrics a chain file may carry per node
METRIC_FIELDS = (
    "total_length",
    "total_heart_length",
    "dist_from_last",
    "heart_dist_from_last",
    "angle_from_last",
    "track_angle_from_last",
    "pitch_from_last",
    "yaw_from_last",
    "roll_speed",
    "smooth_speed",
)


class NodeChain:
    """Ordered track nodes from the station to the end of the ride.

    The chain owns its nodes; neighbours are looked up by index, nodes hold
    no references to each other.

    Usage:
        chain = NodeChain()
        chain.append(Node([0, 0, 0], [0, 0, 1]))
        chain.append(Node([0, 0, 1], [0, 0, 1]))
        chain.update_metrics()
        segments = chain.export(math.radians(10))
    """

    def __init__(self, nodes: List[Node] | None = None):
        """Initialize chain.

        Args:
            nodes: Initial nodes in track order
        """
        self._nodes: List[Node] = list(nodes or [])

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "NodeChain":
        """Build a chain from ``{"nodes": [{"position": ..., ...}, ...]}``."""
        chain = cls()
        for entry in data.get("nodes", []):
            node = Node(
                position=entry["position"],
                direction=entry.get("direction", [0.0, 0.0, 1.0]),
                roll=float(entry.get("roll", 0.0)),
                velocity=float(entry.get("velocity", 10.0)),
                force_normal=float(entry.get("force_normal", 1.0)),
                force_lateral=float(entry.get("force_lateral", 0.0)),
                heart=float(entry.get("heart", 0.0)),
                friction=float(entry.get("friction", 0.0)),
                resistance=float(entry.get("resistance", 0.0)),
            )
            for name in METRIC_FIELDS:
                if name in entry:
                    setattr(node, name, float(entry[name]))
            chain.append(node)
        return chain

    @classmethod
    def from_json(cls, path: str | Path) -> "NodeChain":
        """Load a chain from a JSON file."""
        with open(path) as f:
            data = json.load(f)
        return cls.from_dict(data)

    @property
    def nodes(self) -> List[Node]:
        return self._nodes

    def __len__(self) -> int:
        return len(self._nodes)

    def __iter__(self) -> Iterator[Node]:
        return iter(self._nodes)

    def __getitem__(self, index: int) -> Node:
        return self._nodes[index]

    def append(self, node: Node) -> None:
        self._nodes.append(node)

    def update_metrics(self) -> None:
        """Fill distances, lengths and turn metrics from node geometry.

        Frames are updated first so the spine positions include the heart
        offset. The first node keeps zero metrics.
        """
        for node in self._nodes:
            node.update_norm()

        for i, node in enumerate(self._nodes):
            if i == 0:
                node.total_length = 0.0
                node.total_heart_length = 0.0
                continue

            previous = self._nodes[i - 1]
            node.heart_dist_from_last = vectors.length(node.position - previous.position)
            node.dist_from_last = vectors.length(
                node.spine_position - previous.spine_position
            )
            node.total_length = previous.total_length + node.dist_from_last
            node.total_heart_length = (
                previous.total_heart_length + node.heart_dist_from_last
            )

            node.angle_from_last = vectors.angle_between(
                previous.direction, node.direction
            )
            # Turn within the previous node's track plane
            in_plane = node.direction - previous.normal * np.dot(
                node.direction, previous.normal
            )
            node.track_angle_from_last = vectors.angle_between(
                previous.direction, in_plane
            )

            node.pitch_from_last = node.pitch - previous.pitch
            node.yaw_from_last = vectors.wrap_degrees(node.yaw - previous.yaw)

            if node.heart_dist_from_last > vectors.EPSILON and node.velocity > 0.0:
                step_time = node.heart_dist_from_last / node.velocity
                node.roll_speed = vectors.wrap_degrees(node.roll - previous.roll) / step_time
            else:
                node.roll_speed = 0.0

        logger.debug(
            "Updated metrics for %d nodes, length %.2f m",
            len(self._nodes),
            self.length,
        )

    @property
    def length(self) -> float:
        """Total track length in meters (after :meth:`update_metrics`)."""
        if not self._nodes:
            return 0.0
        return self._nodes[-1].total_length

    def calc_smooth_forces(self) -> None:
        """Run the smooth-force evaluator on every node."""
        for node in self._nodes:
            node.calc_smooth_forces()

    def export(self, max_segment_angle: float) -> List[BezierSegment]:
        """Export the chain to an ordered Bezier segment list.

        The first node is the initial anchor; every exported node becomes
        the anchor of the next arc.

        Args:
            max_segment_angle: Largest turn per segment in radians

        Returns:
            Segments in track order
        """
        segments: List[BezierSegment] = []
        if len(self._nodes) < 2:
            return segments

        anchor = self._nodes[0]
        for i in range(1, len(self._nodes)):
            node = self._nodes[i]
            previous = self._nodes[i - 1]
            next_node = self._nodes[i + 1] if i + 1 < len(self._nodes) else None
            node.export_node(segments, previous, next_node, anchor, 0.0, max_segment_angle)
            anchor = node

        logger.debug(
            "Exported %d nodes to %d segments (max angle %.1f deg)",
            len(self._nodes),
            len(segments),
            math.degrees(max_segment_angle),
        )
        return segments
