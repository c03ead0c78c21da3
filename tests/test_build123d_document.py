"""
Integration tests against the build123d host.

These build real OpenCascade geometry and are marked slow.
"""

import math

import pytest

pytest.importorskip("build123d")

from build123d import Box, Cylinder, Edge, Plane, Pos, Wire

from cadassist.core import (
    create_dual_offset_curves,
    create_offset_curves,
    extract_body,
    extrude_connected_curves_and_edges,
    extrude_curves,
    extrude_tangent_curves_and_edges,
    lowest_point_on_curve,
    measure_body_volume,
    minimum_distance,
    project_curves_and_edges,
    set_curve_color,
    subtract_single,
    total_curve_length,
    trim_body_large_cut,
    trim_body_small_cut,
    unique_curve_endpoints,
)
from cadassist.enums import EntityKind, ErrorKind
from cadassist.host import Build123dDocument, HostDocument

pytestmark = pytest.mark.slow

UP = (0.0, 0.0, 1.0)


@pytest.fixture
def block_doc():
    """A 10 mm cube centred on the origin and a thin panel at z=3."""
    document = Build123dDocument()
    document.add_body("BLOCK", Box(10, 10, 10))
    document.add_body("PANEL", Pos(0, 0, 3) * Box(20, 20, 0.1))
    return document


@pytest.fixture
def square_doc():
    """A document with a closed 10 mm square of four line curves."""
    document = Build123dDocument()
    corners = [(0, 0, 0), (10, 0, 0), (10, 10, 0), (0, 10, 0)]
    for i in range(4):
        document.add_curve(f"LINE({i + 1})", Edge.make_line(corners[i], corners[(i + 1) % 4]))
    return document


def _curves(document):
    return document.entities(EntityKind.CURVE)


class TestDocument:
    """Tests for the entity table and checkpoints."""

    def test_satisfies_protocol(self):
        assert isinstance(Build123dDocument(), HostDocument)

    def test_find_body(self, block_doc):
        assert block_doc.find_body("BLOCK").kind == EntityKind.BODY
        assert block_doc.find_body("NOPE") is None

    def test_duplicate_name_rejected(self, block_doc):
        with pytest.raises(ValueError):
            block_doc.add_body("BLOCK", Box(1, 1, 1))

    def test_rollback_restores_shapes_and_entities(self, block_doc):
        block = block_doc.find_body("BLOCK")
        mark = block_doc.set_checkpoint("Before")
        block.shape = Box(1, 1, 1)
        block_doc.add_body("EXTRA", Box(2, 2, 2))

        block_doc.rollback_to(mark)
        block_doc.release_checkpoint(mark)

        assert block.shape.volume == pytest.approx(1000.0)
        assert block_doc.get("EXTRA") is None
        assert block_doc.open_checkpoints == 0

    def test_step_round_trip(self, block_doc, tmp_path):
        path = tmp_path / "bodies.step"
        block_doc.export_step(path)

        loaded = Build123dDocument.from_step(path)

        volumes = sorted(b.shape.volume for b in loaded.entities(EntityKind.BODY))
        assert volumes == pytest.approx([40.0, 1000.0], rel=1e-3)


class TestTrim:
    """Volume trims on real solids."""

    def test_small_cut(self, block_doc):
        result = trim_body_small_cut(block_doc, "BLOCK", "PANEL", reverse=False)

        assert result.ok and result.satisfied
        assert result.value.removed_percent == pytest.approx(20.0, abs=1.0)
        volume = measure_body_volume(block_doc, block_doc.find_body("BLOCK"))
        assert volume == pytest.approx(result.value.final_volume)
        assert block_doc.open_checkpoints == 0

    def test_large_cut(self, block_doc):
        result = trim_body_large_cut(block_doc, "BLOCK", "PANEL", reverse=False)

        assert result.satisfied
        assert result.value.removed_percent == pytest.approx(80.0, abs=1.0)

    def test_directions_disagree(self, block_doc):
        """Starting from opposite flags ends on the same side."""
        first = trim_body_small_cut(block_doc, "BLOCK", "PANEL", reverse=False)
        other_doc = Build123dDocument()
        other_doc.add_body("BLOCK", Box(10, 10, 10))
        other_doc.add_body("PANEL", Pos(0, 0, 3) * Box(20, 20, 0.1))
        second = trim_body_small_cut(other_doc, "BLOCK", "PANEL", reverse=True)

        assert first.value.final_volume == pytest.approx(second.value.final_volume)
        assert first.attempts + second.attempts == 3

    def test_trim_outside_body_rolls_back(self, block_doc):
        block_doc.add_body("FAR", Pos(0, 0, 50) * Box(20, 20, 0.1))

        result = trim_body_large_cut(block_doc, "BLOCK", "FAR", reverse=False)

        assert block_doc.find_body("BLOCK").shape.volume == pytest.approx(
            1000.0 if not result.ok else result.value.final_volume
        )
        assert block_doc.open_checkpoints == 0


class TestCreation:
    """Extrude, subtract and extract on real geometry."""

    def test_extrude_curves(self, square_doc):
        body = extrude_curves(square_doc, _curves(square_doc), 10.0, UP)
        assert body.shape.volume == pytest.approx(100.0 * 510.0)

    def test_connected_chain_from_one_seed(self, square_doc):
        seed = _curves(square_doc)[0]

        result = extrude_connected_curves_and_edges(square_doc, [seed], 10.0, UP)

        assert result.ok
        assert result.value.shape.volume == pytest.approx(100.0 * 260.0)

    def test_tangent_chain_stops_at_corners(self, square_doc):
        """A square's sides are not tangent, so one seed gives an open section."""
        seed = _curves(square_doc)[0]

        result = extrude_tangent_curves_and_edges(square_doc, [seed], 10.0, UP)

        assert result.error_kind == ErrorKind.HOST_REJECTED
        assert square_doc.open_checkpoints == 0

    def test_subtract_single(self, block_doc):
        block_doc.add_body("PIN", Cylinder(2, 20))
        block = block_doc.find_body("BLOCK")

        subtract_single(block_doc, block, block_doc.find_body("PIN"))

        assert block.shape.volume == pytest.approx(1000.0 - math.pi * 4 * 10, rel=1e-4)
        assert block_doc.find_body("PIN") is None

    def test_subtract_keeps_copied_tool(self, block_doc):
        block_doc.add_body("PIN", Cylinder(2, 20))

        subtract_single(block_doc, block_doc.find_body("BLOCK"), block_doc.find_body("PIN"),
                        copy_tools=True)

        assert block_doc.find_body("PIN") is not None

    def test_extract_body(self, block_doc):
        block = block_doc.find_body("BLOCK")

        result = extract_body(block_doc, block)

        assert result.ok
        assert result.value is not block
        assert result.value.shape.volume == pytest.approx(1000.0)


class TestCurves:
    """Offsets, projection and curve measurements."""

    def test_offset_lengthens(self, square_doc):
        curves = _curves(square_doc)

        result = create_offset_curves(square_doc, curves, 1.0)

        assert result.satisfied
        assert total_curve_length(square_doc, result.value) == pytest.approx(48.0, rel=1e-3)

    def test_dual_offset(self, square_doc):
        curves = _curves(square_doc)

        results = create_dual_offset_curves(square_doc, curves, large_distance=2.0,
                                            small_distance=1.0)

        assert total_curve_length(square_doc, results[2.0].value) == pytest.approx(24.0, rel=1e-3)
        assert total_curve_length(square_doc, results[1.0].value) == pytest.approx(48.0, rel=1e-3)

    def test_projection_flattens(self):
        document = Build123dDocument()
        slanted = document.add_curve("SLANT", Edge.make_line((0, 0, 5), (10, 0, 8)))
        plane = document.add_plane("XY", Plane.XY)

        result = project_curves_and_edges(document, [slanted], plane)

        assert result.ok
        assert total_curve_length(document, result.value) == pytest.approx(10.0, rel=1e-4)
        start, end = document.curve_ends(result.value[0])
        assert abs(start.z) < 1e-6 and abs(end.z) < 1e-6

    def test_open_triangle_endpoints(self):
        document = Build123dDocument()
        a, b, c, d = (0, 0, 0), (10, 0, 0), (5, 8, 0), (0.5, 0.5, 0)
        curves = [
            document.add_curve("AB", Edge.make_line(a, b)),
            document.add_curve("BC", Edge.make_line(b, c)),
            document.add_curve("CD", Edge.make_line(c, d)),
        ]

        free = unique_curve_endpoints(document, [curves], 0.001)

        assert [tuple(round(v, 6) for v in p) for p in free] == [a, d]

    def test_minimum_distance(self, block_doc):
        sketch = block_doc.add_sketch("SKETCH", Wire([Edge.make_line((0, 0, 20), (10, 0, 20))]))

        distance = minimum_distance(block_doc, [sketch], block_doc.find_body("BLOCK"))

        assert distance == pytest.approx(15.0)

    def test_lowest_point(self):
        document = Build123dDocument()
        circle = document.add_curve("CIRCLE", Edge.make_circle(5, Plane.XZ))

        point = lowest_point_on_curve(document, circle)

        assert point.z == pytest.approx(-5.0, abs=0.01)

    def test_set_curve_color(self, square_doc):
        curves = _curves(square_doc)

        assert set_curve_color(square_doc, curves, 186) == 4
        assert {curve.color for curve in curves} == {186}
