"""
Curve exporter - Bezier approximation of the track arc between two nodes.

Provides:
- Handle length for a circular-arc cubic
- Worklist subdivision of an arc by turn angle
- Exact cubic sub-curves (de Casteljau)
"""

from typing import TYPE_CHECKING, List, Optional, Tuple
import math
import numpy as np

from trackspline.errors import ExportError
from trackspline.export.bezier import BezierSegment, SegmentFlags
from trackspline.track import vectors

if TYPE_CHECKING:
    from trackspline.track.node import Node

# Roll speeds closer than this (deg/s) count as a continuous roll
ROLL_SPEED_TOLERANCE = 1e-3


def handle_length(distance: float, turn_angle: float) -> float:
    """Length of a tangent handle for an arc of ``distance`` turning ``turn_angle``.

    Straight track gives the classic thirds rule; the handle grows with
    the turn so the curve keeps its bulge.
    """
    turn_angle = min(abs(turn_angle), math.pi)
    return distance / (3.0 * math.cos(turn_angle / 3.0))


def split_cubic(control: np.ndarray, t: float) -> Tuple[np.ndarray, np.ndarray]:
    """Split a cubic (4x3 control array) at ``t`` into two cubics."""
    p0, p1, p2, p3 = control
    p01 = p0 + (p1 - p0) * t
    p12 = p1 + (p2 - p1) * t
    p23 = p2 + (p3 - p2) * t
    p012 = p01 + (p12 - p01) * t
    p123 = p12 + (p23 - p12) * t
    mid = p012 + (p123 - p012) * t
    return (
        np.array([p0, p01, p012, mid]),
        np.array([mid, p123, p23, p3]),
    )


def sub_cubic(control: np.ndarray, start: float, end: float) -> np.ndarray:
    """Control points of the cubic restricted to ``[start, end]``."""
    if end < 1.0:
        control, _ = split_cubic(control, end)
    if start > 0.0:
        _, control = split_cubic(control, start / end)
    return control


def subdivide_range(
    start: float,
    end: float,
    turn_angle: float,
    max_segment_angle: float,
) -> List[Tuple[float, float]]:
    """Bisect ``[start, end]`` until each piece turns at most ``max_segment_angle``.

    ``turn_angle`` is the turn over the whole ``[0, 1]`` arc. Pieces come
    back in parameter order.
    """
    pieces = []
    worklist = [(start, end)]
    while worklist:
        a, b = worklist.pop()
        if abs(turn_angle) * (b - a) <= max_segment_angle:
            pieces.append((a, b))
            continue
        mid = 0.5 * (a + b)
        worklist.append((mid, b))
        worklist.append((a, mid))
    return pieces


def _check_node(node: "Node", role: str) -> None:
    if not vectors.is_finite(node.position):
        raise ExportError(f"{role} node has a non-finite position")
    if not vectors.is_finite(node.direction):
        raise ExportError(f"{role} node has a non-finite direction")
    if vectors.length(node.direction) < vectors.EPSILON:
        raise ExportError(f"{role} node has a zero-length direction")


def _validate(
    node: "Node",
    previous: "Node",
    next_node: Optional["Node"],
    anchor: "Node",
    start_param: float,
    max_segment_angle: float,
) -> None:
    if not math.isfinite(max_segment_angle) or max_segment_angle <= 0.0:
        raise ExportError(f"max_segment_angle must be positive, got {max_segment_angle}")
    if not math.isfinite(start_param) or not 0.0 <= start_param < 1.0:
        raise ExportError(f"start_param must lie in [0, 1), got {start_param}")

    _check_node(node, "current")
    _check_node(previous, "previous")
    _check_node(anchor, "anchor")
    if next_node is not None:
        _check_node(next_node, "next")

    if not math.isfinite(node.angle_from_last):
        raise ExportError("current node has a non-finite angle_from_last")
    if not math.isfinite(node.heart_dist_from_last):
        raise ExportError("current node has a non-finite heart_dist_from_last")


def export_arc(
    output: List[BezierSegment],
    node: "Node",
    previous: "Node",
    next_node: Optional["Node"],
    anchor: "Node",
    start_param: float,
    max_segment_angle: float,
) -> None:
    """Append Bezier segment(s) for the arc ``previous`` -> ``node`` to ``output``.

    See :meth:`trackspline.track.node.Node.export_node`.
    """
    _validate(node, previous, next_node, anchor, start_param, max_segment_angle)

    turn_angle = node.angle_from_last + vectors.angle_between(
        anchor.direction, previous.direction
    )

    start = vectors.to_export_space(previous.spine_position)
    end = vectors.to_export_space(node.spine_position)
    distance = node.heart_dist_from_last
    if distance < vectors.EPSILON:
        distance = vectors.length(end - start)

    start_tangent = vectors.to_export_space(vectors.normalize(previous.direction))
    end_tangent = vectors.to_export_space(vectors.normalize(node.direction))

    end_turn = turn_angle
    if next_node is not None:
        end_turn = 0.5 * (turn_angle + next_node.angle_from_last)

    control = np.array([
        start,
        start + start_tangent * handle_length(distance, turn_angle),
        end - end_tangent * handle_length(distance, end_turn),
        end,
    ])

    roll_delta = vectors.wrap_degrees(node.roll - previous.roll)
    continuous_roll = abs(node.roll_speed - anchor.roll_speed) <= ROLL_SPEED_TOLERANCE

    segments = []
    last_roll = None
    for a, b in subdivide_range(start_param, 1.0, turn_angle, max_segment_angle):
        piece = sub_cubic(control, a, b)
        piece_roll = node.roll - roll_delta * (1.0 - b)

        relative_roll = last_roll is not None
        roll = piece_roll - last_roll if relative_roll else piece_roll
        last_roll = piece_roll

        equal_distance = math.isclose(
            vectors.length(piece[1] - piece[0]),
            vectors.length(piece[3] - piece[2]),
            rel_tol=1e-6,
            abs_tol=1e-9,
        )

        segments.append(BezierSegment(
            p1=piece[3],
            handle1=piece[1],
            handle2=piece[2],
            roll=math.radians(roll),
            flags=SegmentFlags(
                continuous_roll=continuous_roll,
                relative_roll=relative_roll,
                equal_distance_control_points=equal_distance,
            ),
        ))

    output.extend(segments)
