"""
Tests for curve projection and the measurement helpers.
"""

import math

import pytest

from cadassist.core.measure import (
    ask_curve_ends,
    curve_length,
    lowest_point_on_curve,
    measure_body_volume,
    minimum_distance,
    offset_curve_length,
    total_curve_length,
)
from cadassist.core.projection import project_curves_and_edges
from cadassist.enums import ChainRule, EntityKind, ErrorKind
from cadassist.errors import HostOperationError, InvalidInputError
from cadassist.host.protocol import Point3d
from cadassist.io.settings import MeasureSettings, OperationSettings

from fakes import FakeFeature, Handle


class TestProjection:
    """Tests for project_curves_and_edges()."""

    def test_projects_onto_plane(self, doc):
        plane = doc.plane()
        items = [doc.curve("ARC"), doc.edge("EDGE(2)")]

        result = project_curves_and_edges(doc, items, plane)

        assert result.ok
        assert len(result.value) == 2
        assert all(c.kind == EntityKind.CURVE for c in result.value)
        builder = doc.committed[0]
        assert builder.target_rules[0].rule == ChainRule.FACE_DATUM
        assert builder.target_rules[0].seeds == (plane,)
        rules, seed, tolerances = builder.sections[0]
        assert seed is items[0]
        assert tolerances.chaining == 0.0095
        assert tolerances.distance == 0.01
        assert doc.checkpoint_names == ["Project Curves"]

    def test_host_failure_is_empty(self, doc):
        doc.fail_commits = {"project": {1}}

        result = project_curves_and_edges(doc, [doc.curve("ARC")], doc.plane())

        assert result.value == []
        assert result.error_kind == ErrorKind.HOST_REJECTED
        assert doc.balanced

    def test_missing_plane(self, doc):
        with pytest.raises(InvalidInputError):
            project_curves_and_edges(doc, [doc.curve("ARC")], None)
        assert doc.calls == []


class TestVolumeAndLength:
    """Tests for volume and length measurement."""

    def test_body_volume(self, doc):
        assert measure_body_volume(doc, doc.body("BLOCK", 125.0)) == 125.0

    def test_body_volume_failure_raises(self, doc):
        body = doc.body("BLOCK")
        doc.fail_volume = {"BLOCK"}
        with pytest.raises(HostOperationError):
            measure_body_volume(doc, body)

    def test_curve_length(self, doc):
        assert curve_length(doc, doc.curve("ARC", 12.5)) == 12.5

    def test_curve_length_failure_is_zero(self, doc, caplog):
        ghost = Handle(EntityKind.CURVE, "GHOST")
        assert curve_length(doc, ghost) == 0.0
        assert "curve_length" in caplog.text

    def test_curve_length_none(self, doc):
        with pytest.raises(InvalidInputError):
            curve_length(doc, None)

    def test_total_length(self, doc, outline):
        assert total_curve_length(doc, outline) == pytest.approx(100.0)
        assert total_curve_length(doc, outline + [None]) == pytest.approx(100.0)
        assert total_curve_length(doc, None) == 0.0

    def test_offset_curve_length(self, doc, outline):
        feature = FakeFeature("OFFSET", outline + [doc.body("BLOCK")])
        assert offset_curve_length(doc, feature) == pytest.approx(100.0)
        assert offset_curve_length(doc, None) == 0.0

    def test_strict_length_raises(self, doc, outline):
        doc.fail_lengths = {"LINE(2)"}

        assert total_curve_length(doc, outline) == pytest.approx(75.0)
        with pytest.raises(HostOperationError, match="LINE\\(2\\)"):
            total_curve_length(doc, outline, strict=True)
        with pytest.raises(HostOperationError):
            curve_length(doc, Handle(EntityKind.CURVE, "GHOST"), strict=True)

    def test_strict_offset_length_raises(self, doc, outline):
        doc.fail_lengths = {"LINE(4)"}
        feature = FakeFeature("OFFSET", outline)

        with pytest.raises(HostOperationError):
            offset_curve_length(doc, feature, strict=True)


class TestCurveEnds:
    """Tests for ask_curve_ends()."""

    def test_ends(self, doc):
        line = doc.curve("LINE", start=(1, 2, 3), end=(4, 5, 6))
        start, end = ask_curve_ends(doc, line)
        assert start == Point3d(1, 2, 3)
        assert end == Point3d(4, 5, 6)

    def test_failure_message(self, doc):
        with pytest.raises(HostOperationError, match="Error while evaluating curve endpoints"):
            ask_curve_ends(doc, Handle(EntityKind.CURVE, "GHOST"))


class TestMinimumDistance:
    """Tests for minimum_distance()."""

    def test_minimum_over_sketches(self, doc):
        body = doc.body("BLOCK")
        a, b, c = doc.curve("A"), doc.curve("B"), doc.curve("C")
        doc.distances = {("A", "BLOCK"): 4.0, ("B", "BLOCK"): 1.5, ("C", "BLOCK"): 3.0}
        sketches = [doc.sketch("S1", [a, doc.plane()]), doc.sketch("S2", [b, c])]

        assert minimum_distance(doc, sketches, body) == 1.5

    def test_no_curves_is_infinite(self, doc):
        sketches = [doc.sketch("S1", [])]
        assert minimum_distance(doc, sketches, doc.body("BLOCK")) == math.inf

    def test_host_failure_raises(self, doc):
        sketches = [doc.sketch("S1", [doc.curve("A")])]
        with pytest.raises(HostOperationError):
            minimum_distance(doc, sketches, doc.body("BLOCK"))

    def test_invalid(self, doc):
        with pytest.raises(InvalidInputError):
            minimum_distance(doc, [], doc.body("BLOCK"))
        with pytest.raises(InvalidInputError):
            minimum_distance(doc, [doc.sketch("S1", [])], None)


class TestLowestPoint:
    """Tests for lowest_point_on_curve()."""

    def test_samples_count(self, doc):
        line = doc.curve("LINE", start=(0, 0, 0), end=(100, 0, 0))

        lowest_point_on_curve(doc, line)

        assert doc.calls.count("evaluate_curve") == 151

    def test_finds_dip(self, doc):
        """The fake curve sags to its lowest Z a quarter of the way along."""
        line = doc.curve("LINE", start=(0, 0, 0), end=(100, 0, 0))

        point = lowest_point_on_curve(doc, line)

        assert point.x == pytest.approx(25.0, abs=1.0)
        assert point.z == pytest.approx(-0.0625, abs=1e-3)

    def test_failed_samples_skipped(self, doc):
        line = doc.curve("LINE", start=(0, 0, 0), end=(100, 0, 0))
        doc.fail_evaluate = {0.25}

        point = lowest_point_on_curve(
            doc, line, OperationSettings(measure=MeasureSettings(lowest_point_samples=4))
        )

        assert doc.calls.count("evaluate_curve") == 5
        assert point.x != pytest.approx(25.0)

    def test_all_samples_failed(self, doc):
        with pytest.raises(HostOperationError):
            lowest_point_on_curve(doc, Handle(EntityKind.CURVE, "GHOST"))
