"""
Measurement and evaluation helpers.

All geometry is evaluated by the host; these helpers validate inputs,
aggregate the host's answers and translate host failures into
:class:`~cadassist.errors.HostOperationError`. The length helpers return 0.0
instead unless called with ``strict=True``.
"""

import logging
import math
from typing import Any, List, Optional, Sequence, Tuple

from ..enums import EntityKind
from ..errors import HostOperationError
from ..host.protocol import Point3d, kind_of
from ..io.settings import DEFAULT_SETTINGS, OperationSettings
from .listing import log_error, log_info
from .selection import entities_of_kind, require, require_items

logger = logging.getLogger(__name__)


def measure_body_volume(document: Any, body: Any,
                        settings: Optional[OperationSettings] = None) -> float:
    """Volume of a solid body as reported by the host's mass properties.

    Raises:
        InvalidInputError: If body is None
        HostOperationError: If the host cannot measure the body
    """
    settings = settings or DEFAULT_SETTINGS
    require(body, "body", "measure_body_volume")
    try:
        return float(document.body_volume(body, settings.measure.mass_accuracy))
    except Exception as e:
        log_error(logger, "measure_body_volume", e)
        raise HostOperationError(str(e), operation="measure_body_volume") from e


def curve_length(document: Any, curve: Any, strict: bool = False) -> float:
    """Arc length of one curve, 0.0 if the host cannot evaluate it.

    With ``strict`` a host failure raises :class:`HostOperationError`
    instead, for callers that make decisions from the number.
    """
    require(curve, "curve", "curve_length")
    try:
        return float(document.curve_length(curve))
    except Exception as e:
        log_error(logger, "curve_length", e)
        if strict:
            raise HostOperationError(
                f"Cannot measure length of {getattr(curve, 'name', curve)}: {e}",
                operation="curve_length",
            ) from e
        return 0.0


def total_curve_length(document: Any, curves: Optional[Sequence[Any]],
                       strict: bool = False) -> float:
    """Summed arc length of a curve set; None entries are ignored."""
    if curves is None:
        return 0.0
    return sum(curve_length(document, curve, strict)
               for curve in curves if curve is not None)


def offset_curve_length(document: Any, feature: Any, strict: bool = False) -> float:
    """Summed arc length of the curves produced by a feature."""
    try:
        curves = entities_of_kind(feature, EntityKind.CURVE)
    except Exception as e:
        log_error(logger, "offset_curve_length", e)
        if strict:
            raise HostOperationError(str(e), operation="offset_curve_length") from e
        return 0.0
    return total_curve_length(document, curves, strict)


def ask_curve_ends(document: Any, curve: Any) -> Tuple[Point3d, Point3d]:
    """Positions at the start and end parameter of a curve.

    Raises:
        InvalidInputError: If curve is None
        HostOperationError: If the host cannot evaluate the curve
    """
    require(curve, "curve", "ask_curve_ends")
    try:
        start, end = document.curve_ends(curve)
    except Exception as e:
        log_error(logger, "ask_curve_ends", e)
        raise HostOperationError(
            f"Error while evaluating curve endpoints: {e}", operation="ask_curve_ends"
        ) from e
    return Point3d(*start), Point3d(*end)


def minimum_distance(document: Any, sketches: Sequence[Any], body: Any) -> float:
    """Smallest distance between any curve of the sketches and a body.

    Returns:
        The minimum distance, or ``math.inf`` if the sketches hold no curves.

    Raises:
        InvalidInputError: If sketches is empty or body is None
        HostOperationError: If the host distance query fails
    """
    sketches = require_items(sketches, "sketches", "minimum_distance")
    require(body, "body", "minimum_distance")

    overall = math.inf
    try:
        for sketch in sketches:
            for item in document.sketch_geometry(sketch):
                if kind_of(item) != EntityKind.CURVE:
                    continue
                distance = float(document.minimum_distance(item, body))
                if distance < overall:
                    overall = distance
    except Exception as e:
        log_error(logger, "minimum_distance", e)
        raise HostOperationError(str(e), operation="minimum_distance") from e

    if overall == math.inf:
        logger.warning("minimum_distance: sketches contain no curves")
    return overall


def lowest_point_on_curve(document: Any, curve: Any,
                          settings: Optional[OperationSettings] = None) -> Point3d:
    """Sampled point of a curve with the smallest Z coordinate.

    The curve is evaluated at ``samples + 1`` evenly spaced parameters.
    Samples the host cannot evaluate are logged and skipped.

    Raises:
        InvalidInputError: If curve is None
        HostOperationError: If no sample could be evaluated
    """
    settings = settings or DEFAULT_SETTINGS
    require(curve, "curve", "lowest_point_on_curve")
    samples = settings.measure.lowest_point_samples

    log_info(logger, f"Processing curve {getattr(curve, 'name', curve)}")
    points: List[Point3d] = []
    for i in range(samples + 1):
        fraction = i / samples
        try:
            points.append(Point3d(*document.evaluate_curve(curve, fraction)))
        except Exception as e:
            log_error(logger, f"lowest_point_on_curve at {fraction:.4f}", e)

    if not points:
        raise HostOperationError("No curve sample could be evaluated",
                                 operation="lowest_point_on_curve")

    lowest = min(points, key=lambda p: p.z)
    log_info(logger, f"Lowest point: X={lowest.x}, Y={lowest.y}, Z={lowest.z}")
    return lowest
