"""
Track node - One sampled station along the track centerline.

Contains:
- Node position, heading and the local (lateral, normal) frame
- Per-segment metrics supplied by the kinematic solver
- Smoothed rider-comfort forces
- Entry point of the curve exporter
"""

from dataclasses import dataclass, field
from typing import List, Optional
import math
import numpy as np

from trackspline.track import vectors
from trackspline.track.curve import export_arc
from trackspline.export.bezier import BezierSegment

# Node sample rate of the track solver (nodes per second of ride time)
NODE_RATE = 1000.0

# Standard gravity in m/s^2
GRAVITY = 9.80665


@dataclass(eq=False)
class Node:
    """A single station on the track.

    The node stores its heart-line position and heading. The frame
    (``lateral``/``normal``) is derived from ``direction`` and ``roll`` by
    :meth:`update_norm` and never set by callers.

    Angle metrics (``*_from_last``) describe the step from the previous
    node and are filled in by the kinematic solver before smoothing or
    export run; the node never recomputes them.

    Usage:
        node = Node([0, 0, 0], [0, 0, 1], roll=0.0, velocity=10.0)
        node.update_norm()
        node.calc_smooth_forces()
    """
    # Construction parameters
    position: np.ndarray = field(default_factory=lambda: np.zeros(3))
    direction: np.ndarray = field(default_factory=lambda: np.array([0.0, 0.0, 1.0]))
    roll: float = 0.0                  # Banking in degrees
    velocity: float = 10.0             # m/s
    force_normal: float = 1.0          # Solver's raw normal force (g)
    force_lateral: float = 0.0         # Solver's raw lateral force (g)
    heart: float = 0.0                 # Rail to rider centre of mass (m)
    friction: float = 0.0
    resistance: float = 0.0

    # Derived frame
    lateral: np.ndarray = field(init=False)
    normal: np.ndarray = field(init=False)

    # Metrics populated by the kinematic solver
    total_length: float = field(init=False, default=0.0)
    total_heart_length: float = field(init=False, default=0.0)
    dist_from_last: float = field(init=False, default=0.0)
    heart_dist_from_last: float = field(init=False, default=0.0)
    angle_from_last: float = field(init=False, default=0.0)        # rad
    track_angle_from_last: float = field(init=False, default=0.0)  # rad
    pitch_from_last: float = field(init=False, default=0.0)        # deg
    yaw_from_last: float = field(init=False, default=0.0)          # deg
    roll_speed: float = field(init=False, default=0.0)             # deg/s
    smooth_speed: float = field(init=False, default=0.0)

    # Smooth-force outputs
    smooth_normal: float = field(init=False, default=0.0)
    smooth_lateral: float = field(init=False, default=0.0)

    def __post_init__(self):
        self.position = vectors.as_vector(self.position)
        self.direction = vectors.normalize(vectors.as_vector(self.direction))
        self.lateral = vectors.LEVEL_LATERAL.copy()
        self.normal = vectors.WORLD_UP.copy()

    @property
    def pitch(self) -> float:
        """Pitch of the heading in degrees (positive = climbing)."""
        return math.degrees(math.asin(float(np.clip(self.direction[1], -1.0, 1.0))))

    @property
    def yaw(self) -> float:
        """Heading angle around the up axis in degrees."""
        return math.degrees(math.atan2(self.direction[0], self.direction[2]))

    @property
    def spine_position(self) -> np.ndarray:
        """Track reference point, one heart offset below the heart line."""
        return self.position - self.normal * self.heart

    def update_norm(self) -> None:
        """Recompute the local frame from ``direction`` and ``roll``.

        The level frame uses world up; a vertical heading takes the level
        lateral axis as reference and a zero-length heading keeps the
        canonical frame.
        """
        if vectors.length(self.direction) < vectors.EPSILON:
            self.lateral = vectors.LEVEL_LATERAL.copy()
            self.normal = vectors.WORLD_UP.copy()
            return

        direction = vectors.normalize(self.direction)
        level_lateral = vectors.normalize(
            np.cross(direction, vectors.WORLD_UP),
            fallback=vectors.LEVEL_LATERAL,
        )
        level_normal = vectors.normalize(np.cross(level_lateral, direction))

        roll = math.radians(self.roll)
        self.lateral = vectors.rotate_about_axis(level_lateral, direction, roll)
        self.normal = vectors.rotate_about_axis(level_normal, direction, roll)

    def calc_smooth_forces(self) -> None:
        """Estimate the smoothed normal and lateral force at this node.

        Normal force follows the heart line: the heart-line speed squared
        over the curvature radius implied by the normal turn rate. Lateral
        force uses the train speed and the lateral turn rate. Both add the
        gravity share along the frame axis, are damped by the smoothing
        speed, and are reported relative to the solver's raw force.
        """
        roll = math.radians(self.roll)
        cos_pitch = math.cos(math.radians(abs(self.pitch)))

        normal_rate = math.radians(
            self.pitch_from_last * math.cos(roll)
            - cos_pitch * self.yaw_from_last * math.sin(roll)
        )
        lateral_rate = math.radians(
            self.pitch_from_last * math.sin(roll)
            + cos_pitch * self.yaw_from_last * math.cos(roll)
        )

        damping = 1.0 / (1.0 + abs(self.smooth_speed * self.angle_from_last))

        if abs(self.heart_dist_from_last) < vectors.EPSILON:
            # No travel since the last node: no curvature contribution
            normal_curvature_force = 0.0
        else:
            heart_speed = self.heart_dist_from_last * NODE_RATE
            curvature = normal_rate / self.heart_dist_from_last
            normal_curvature_force = heart_speed * heart_speed * curvature / GRAVITY

        lateral_curvature_force = self.velocity * NODE_RATE * lateral_rate / GRAVITY

        roll_rate = math.radians(self.roll_speed)
        roll_force = self.heart * roll_rate * roll_rate / GRAVITY

        normal = damping * normal_curvature_force + roll_force + float(self.normal[1])
        lateral = damping * lateral_curvature_force + float(self.lateral[1])

        self.smooth_normal = normal - self.force_normal
        self.smooth_lateral = lateral - self.force_lateral

    def export_node(
        self,
        output: List[BezierSegment],
        previous: "Node",
        next_node: Optional["Node"],
        anchor: "Node",
        start_param: float,
        max_segment_angle: float,
    ) -> None:
        """Append the Bezier segment(s) from ``previous`` to this node.

        Args:
            output: Ordered segment list shared by the whole traversal
            previous: Preceding node (start point and start tangent)
            next_node: Following node for look-ahead smoothing, or None
            anchor: Last exported node, the roll and turn reference
            start_param: Curve parameter this call starts at (0 for whole arc)
            max_segment_angle: Largest turn per emitted segment in radians

        Raises:
            ExportError: Invalid geometry or threshold. Nothing is appended.
        """
        export_arc(
            output,
            self,
            previous,
            next_node,
            anchor,
            start_param,
            max_segment_angle,
        )
