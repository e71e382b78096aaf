"""Tests for the Bezier curve exporter."""

import math

import numpy as np
import pytest

from trackspline.errors import ExportError
from trackspline.export.bezier import BezierSegment
from trackspline.track.curve import handle_length, subdivide_range, sub_cubic
from trackspline.track.node import Node

REFERENCE_HANDLE = 0.3335137


def _straight_nodes(angle: float = 0.1):
    anchor = Node([0.0, 0.0, 0.0], [0.0, 0.0, 1.0], 0.0, 10.0, 0.0, 0.0)
    last = Node([0.0, 0.0, 0.0], [0.0, 0.0, 1.0], 0.0, 10.0, 0.0, 0.0)
    current = Node([0.0, 0.0, 1.0], [0.0, 0.0, 1.0], 0.0, 10.0, 0.0, 0.0)
    for node in (anchor, last, current):
        node.update_norm()

    last.total_length = 0.0
    current.total_length = 1.0
    current.track_angle_from_last = angle
    current.angle_from_last = angle
    current.heart_dist_from_last = 1.0
    return anchor, last, current


class TestReferenceSegment:
    """Test the single-segment reference export."""

    def test_reference_control_points(self):
        """Straight unit step exports the reference segment."""
        anchor, last, current = _straight_nodes()
        segments = []
        current.export_node(segments, last, None, anchor, 0.0, 0.1)

        assert len(segments) == 1
        segment = segments[0]
        assert not segment.relative_roll

        assert np.allclose(segment.p1, [0.0, 0.0, -1.0])

        assert segment.handle1[0] == 0.0
        assert segment.handle1[1] == 0.0
        assert abs(segment.handle1[2] + REFERENCE_HANDLE) < 1e-5

        assert segment.handle2[0] == 0.0
        assert segment.handle2[1] == 0.0
        assert abs(segment.handle2[2] - (-1.0 + REFERENCE_HANDLE)) < 1e-5

        assert segment.roll == 0.0

    def test_zero_turn_gives_one_segment(self):
        """No turn never subdivides, whatever the threshold."""
        for threshold in (1e-6, 0.01, 1.0):
            anchor, last, current = _straight_nodes(angle=0.0)
            segments = []
            current.export_node(segments, last, None, anchor, 0.0, threshold)
            assert len(segments) == 1

    def test_zero_turn_with_skewed_heading(self):
        """Matching headings normalized from different vectors add no turn."""
        rng = np.random.default_rng(7)
        for _ in range(200):
            heading = rng.normal(size=3)
            unit = heading / np.linalg.norm(heading)
            anchor = Node([0.0, 0.0, 0.0], heading * 3.0, 0.0, 10.0, 0.0, 0.0)
            last = Node([0.0, 0.0, 0.0], heading, 0.0, 10.0, 0.0, 0.0)
            current = Node(unit, heading, 0.0, 10.0, 0.0, 0.0)
            for node in (anchor, last, current):
                node.update_norm()
            current.heart_dist_from_last = 1.0
            current.angle_from_last = 0.0

            segments = []
            current.export_node(segments, last, None, anchor, 0.0, 1e-9)
            assert len(segments) == 1

    def test_flags_of_plain_segment(self):
        """Matching roll speeds and symmetric handles set their flags."""
        anchor, last, current = _straight_nodes()
        segments = []
        current.export_node(segments, last, None, anchor, 0.0, 0.1)

        assert segments[0].continuous_roll
        assert segments[0].equal_distance_control_points


class TestSubdivision:
    """Test turn-angle subdivision."""

    def test_threshold_is_inclusive(self):
        """A turn equal to the threshold stays one segment."""
        anchor, last, current = _straight_nodes(angle=0.25)
        segments = []
        current.export_node(segments, last, None, anchor, 0.0, 0.25)

        assert len(segments) == 1

    def test_just_above_threshold_splits(self):
        """A turn just above the threshold is bisected once."""
        anchor, last, current = _straight_nodes(angle=0.25 + 1e-6)
        segments = []
        current.export_node(segments, last, None, anchor, 0.0, 0.25)

        assert len(segments) == 2

    def test_pieces_in_track_order(self):
        """Subdivided pieces run from the previous node to the current one."""
        anchor, last, current = _straight_nodes(angle=0.4)
        segments = []
        current.export_node(segments, last, None, anchor, 0.0, 0.1)

        assert len(segments) == 4
        z = [segment.p1[2] for segment in segments]
        assert all(a > b for a, b in zip(z, z[1:]))
        assert np.allclose(segments[-1].p1, [0.0, 0.0, -1.0])
        assert [s.relative_roll for s in segments] == [False, True, True, True]

    def test_negative_turn_subdivides(self):
        """A negative turn angle splits like its magnitude."""
        anchor, last, current = _straight_nodes(angle=-0.4)
        segments = []
        current.export_node(segments, last, None, anchor, 0.0, 0.1)

        assert len(segments) == 4

    def test_subdivided_roll_is_relative(self):
        """Later pieces carry the roll change since the preceding piece."""
        anchor, last, current = _straight_nodes(angle=0.2)
        current.roll = 30.0
        current.update_norm()
        segments = []
        current.export_node(segments, last, None, anchor, 0.0, 0.1)

        assert len(segments) == 2
        assert segments[0].roll == pytest.approx(math.radians(15.0))
        assert segments[1].roll == pytest.approx(math.radians(15.0))
        assert not segments[0].relative_roll
        assert segments[1].relative_roll

    def test_anchor_turn_counts(self):
        """Turn accumulated since the anchor adds to the node's own turn."""
        anchor, last, current = _straight_nodes(angle=0.1)
        anchor.direction = np.array([math.sin(0.1), 0.0, math.cos(0.1)])
        anchor.update_norm()
        segments = []
        current.export_node(segments, last, None, anchor, 0.0, 0.15)

        assert len(segments) == 2

    def test_start_param_exports_remaining_arc(self):
        """A start parameter exports only the tail of the arc."""
        anchor, last, current = _straight_nodes()
        segments = []
        current.export_node(segments, last, None, anchor, 0.5, 0.1)

        assert len(segments) == 1
        assert np.allclose(segments[0].p1, [0.0, 0.0, -1.0])
        assert -1.0 < segments[0].handle2[2] < segments[0].handle1[2] < -0.5

    def test_subdivide_range_contiguous(self):
        """Worklist pieces tile the range in order."""
        pieces = subdivide_range(0.0, 1.0, 0.35, 0.1)

        assert len(pieces) == 4
        assert pieces[0][0] == 0.0
        assert pieces[-1][1] == 1.0
        for (_, end), (start, _) in zip(pieces, pieces[1:]):
            assert end == start

    def test_sub_cubic_full_range(self):
        """Restricting to [0, 1] returns the unsplit cubic."""
        control = np.array([[0.0, 0.0, 0.0], [1.0, 0.0, 0.0], [2.0, 1.0, 0.0], [3.0, 1.0, 0.0]])

        assert np.allclose(sub_cubic(control, 0.0, 1.0), control)


class TestHandles:
    """Test handle placement."""

    def test_straight_handle_is_a_third(self):
        """Zero turn gives the thirds rule."""
        assert handle_length(3.0, 0.0) == pytest.approx(1.0)

    def test_handle_grows_with_turn(self):
        """Handles lengthen as the arc turns further."""
        assert handle_length(1.0, 0.5) > handle_length(1.0, 0.1) > handle_length(1.0, 0.0)

    def test_look_ahead_changes_end_handle(self):
        """A sharper next arc lengthens the end handle."""
        anchor, last, current = _straight_nodes()
        following = Node([0.0, 0.0, 2.0], [0.0, 0.0, 1.0])
        following.update_norm()
        following.angle_from_last = 0.9
        segments = []
        current.export_node(segments, last, following, anchor, 0.0, 0.1)

        segment = segments[0]
        end_handle = np.linalg.norm(segment.p1 - segment.handle2)
        assert end_handle > abs(segment.handle1[2])
        assert not segment.equal_distance_control_points

    def test_heart_offset_moves_endpoint(self):
        """Endpoints follow the spine below the heart line."""
        anchor, last, current = _straight_nodes()
        for node in (last, current):
            node.heart = 1.2
        segments = []
        current.export_node(segments, last, None, anchor, 0.0, 0.1)

        assert np.allclose(segments[0].p1, [0.0, -1.2, -1.0])

    def test_roll_speed_change_breaks_continuity(self):
        """A roll speed different from the anchor's clears continuous roll."""
        anchor, last, current = _straight_nodes()
        current.roll_speed = 5.0
        segments = []
        current.export_node(segments, last, None, anchor, 0.0, 0.1)

        assert not segments[0].continuous_roll


class TestExportContract:
    """Test accumulator and error behaviour."""

    def test_appends_after_existing_entries(self):
        """Existing segments stay in place."""
        anchor, last, current = _straight_nodes()
        sentinel = BezierSegment()
        segments = [sentinel]
        current.export_node(segments, last, None, anchor, 0.0, 0.1)

        assert len(segments) == 2
        assert segments[0] is sentinel

    def test_inputs_not_mutated(self):
        """Exporting leaves every node untouched."""
        anchor, last, current = _straight_nodes()
        before = [(n.position.copy(), n.direction.copy(), n.normal.copy()) for n in (anchor, last, current)]
        current.export_node([], last, None, anchor, 0.0, 0.1)

        for node, (position, direction, normal) in zip((anchor, last, current), before):
            assert np.array_equal(node.position, position)
            assert np.array_equal(node.direction, direction)
            assert np.array_equal(node.normal, normal)

    @pytest.mark.parametrize("threshold", [0.0, -0.1, float("nan")])
    def test_rejects_bad_threshold(self, threshold):
        """Non-positive thresholds are rejected."""
        anchor, last, current = _straight_nodes()
        segments = []
        with pytest.raises(ExportError):
            current.export_node(segments, last, None, anchor, 0.0, threshold)
        assert segments == []

    def test_rejects_nan_position(self):
        """NaN geometry fails before anything is appended."""
        anchor, last, current = _straight_nodes()
        current.position = np.array([0.0, float("nan"), 1.0])
        segments = [BezierSegment()]
        with pytest.raises(ExportError):
            current.export_node(segments, last, None, anchor, 0.0, 0.1)
        assert len(segments) == 1

    def test_rejects_zero_direction(self):
        """A zero-length heading cannot be exported."""
        anchor, last, current = _straight_nodes()
        last.direction = np.zeros(3)
        with pytest.raises(ExportError):
            current.export_node([], last, None, anchor, 0.0, 0.1)

    def test_rejects_start_param_outside_range(self):
        """start_param must lie in [0, 1)."""
        anchor, last, current = _straight_nodes()
        with pytest.raises(ExportError):
            current.export_node([], last, None, anchor, 1.0, 0.1)

    def test_export_error_is_value_error(self):
        """Callers catching ValueError also catch export errors."""
        assert issubclass(ExportError, ValueError)
