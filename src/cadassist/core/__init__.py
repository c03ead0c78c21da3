"""
Cadassist Core - operations over a host document.

Every operation takes the host document as its first argument. Nothing in
this package imports a CAD kernel; the host is reached only through the
:class:`~cadassist.host.protocol.HostDocument` contract.

Example:
    >>> from cadassist.core import create_dual_offset_curves
    >>>
    >>> results = create_dual_offset_curves(doc, [outline])
    >>> for distance, result in results.items():
    ...     print(distance, result.ok, len(result.value))
"""

from .listing import attach_listing, detach_listing, HostListingHandler
from .extrude import (
    extrude_curves,
    extrude_tangent_curves_and_edges,
    extrude_connected_curves_and_edges,
    extrude_sketch,
)
from .boolean import subtract, subtract_single
from .extract import extract_bodies_as_single_body, extract_bodies, extract_body
from .trim import (
    TrimOutcome,
    trim_body_by_volume,
    trim_body_small_cut,
    trim_body_large_cut,
)
from .offset import OffsetPlan, create_offset_curves, create_dual_offset_curves
from .projection import project_curves_and_edges
from .measure import (
    measure_body_volume,
    curve_length,
    total_curve_length,
    offset_curve_length,
    ask_curve_ends,
    minimum_distance,
    lowest_point_on_curve,
)
from .endpoints import EndpointCounter, unique_curve_endpoints
from .display import set_curve_color

__all__ = [
    # Logging
    "attach_listing",
    "detach_listing",
    "HostListingHandler",

    # Creation
    "extrude_curves",
    "extrude_tangent_curves_and_edges",
    "extrude_connected_curves_and_edges",
    "extrude_sketch",
    "subtract",
    "subtract_single",
    "extract_bodies_as_single_body",
    "extract_bodies",
    "extract_body",
    "project_curves_and_edges",

    # Direction heuristics
    "TrimOutcome",
    "trim_body_by_volume",
    "trim_body_small_cut",
    "trim_body_large_cut",
    "OffsetPlan",
    "create_offset_curves",
    "create_dual_offset_curves",

    # Measurement
    "measure_body_volume",
    "curve_length",
    "total_curve_length",
    "offset_curve_length",
    "ask_curve_ends",
    "minimum_distance",
    "lowest_point_on_curve",
    "EndpointCounter",
    "unique_curve_endpoints",

    # Display
    "set_curve_color",
]
