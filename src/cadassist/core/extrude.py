"""
Extrusion helpers: curves, curves mixed with body edges, and sketches.

All variants build a solid body. The start limit comes from
``settings.extrude``; the end limit is the requested distance.
"""

import logging
from typing import Any, List, Optional, Sequence

from ..enums import EntityKind, ErrorKind
from ..errors import HostOperationError, InvalidInputError, OperationResult
from ..host.protocol import kind_of
from ..io.settings import DEFAULT_SETTINGS, OperationSettings
from .listing import log_error, log_info
from .scopes import BuilderScope, Checkpoint, host_errors
from .selection import (
    chain_rules,
    curve_set_rule,
    entities_of_kind,
    require,
    require_items,
    tangent_rules,
)

logger = logging.getLogger(__name__)


def _configure(builder: Any, direction: Any, start: float, end: float) -> None:
    builder.direction = direction
    builder.solid = True
    builder.start_distance = start
    builder.end_distance = end


def extrude_curves(document: Any, curves: Sequence[Any], distance: float, direction: Any,
                   settings: Optional[OperationSettings] = None) -> Any:
    """
    Extrude curves, chaining tangent neighbours, into a solid body.

    Each curve seeds its own tangent-chain section. The extrusion starts
    ``settings.extrude.curves_start`` behind the curves.

    Returns:
        The extruded body

    Raises:
        InvalidInputError: If curves is None/empty or direction is None
        HostOperationError: If the host fails or produces no body
    """
    settings = settings or DEFAULT_SETTINGS
    operation = "extrude_curves"
    curves = require_items(curves, "curves", operation)
    require(direction, "direction", operation)

    with host_errors(operation), BuilderScope(document.create_extrude_builder) as scope:
        builder = scope.builder
        tolerances = settings.section.as_tolerances()
        for curve in curves:
            builder.add_to_section(tangent_rules([curve], settings.rules), curve, tolerances)
        _configure(builder, direction, settings.extrude.curves_start, distance)

        feature = builder.commit()
        bodies = entities_of_kind(feature, EntityKind.BODY)
        if not bodies:
            raise HostOperationError(
                "Failed to create an extruded body. Please check the input curves and direction.",
                operation=operation,
            )

    log_info(logger, "extrude_curves successful.")
    return bodies[0]


def _extrude_section(document: Any, operation: str, checkpoint_name: str, rules: List[Any],
                     seed: Any, distance: float, direction: Any, start: float,
                     settings: OperationSettings) -> OperationResult:
    try:
        with Checkpoint(document, checkpoint_name), \
                BuilderScope(document.create_extrude_builder) as scope:
            builder = scope.builder
            builder.add_to_section(rules, seed, settings.section.as_tolerances())
            _configure(builder, direction, start, distance)
            feature = builder.commit()
            bodies = entities_of_kind(feature, EntityKind.BODY)
    except Exception as e:
        log_error(logger, operation, e)
        return OperationResult.failure(operation, ErrorKind.HOST_REJECTED, str(e), attempts=1)

    if not bodies:
        return OperationResult.failure(operation, ErrorKind.HOST_REJECTED,
                                       "Extrusion produced no body", attempts=1)
    log_info(logger, f"{operation} successful.")
    return OperationResult(operation, value=bodies[0])


def extrude_tangent_curves_and_edges(document: Any, items: Sequence[Any], distance: float,
                                     direction: Any,
                                     settings: Optional[OperationSettings] = None) -> OperationResult:
    """
    Extrude a section of tangent-chained curves and body edges from zero.

    Returns:
        OperationResult whose value is the first body, or None on host failure

    Raises:
        InvalidInputError: If items is None/empty, holds no curves or edges,
            or direction is None
    """
    settings = settings or DEFAULT_SETTINGS
    operation = "extrude_tangent_curves_and_edges"
    items = require_items(items, "items", operation)
    require(direction, "direction", operation)
    rules = tangent_rules(items, settings.rules)
    if not rules:
        raise InvalidInputError("items contains no curves or edges.", operation=operation)

    return _extrude_section(document, operation, "Extrude Tangent Curves", rules, items[0],
                            distance, direction, settings.extrude.tangent_start, settings)


def extrude_connected_curves_and_edges(document: Any, items: Sequence[Any], distance: float,
                                       direction: Any,
                                       settings: Optional[OperationSettings] = None) -> OperationResult:
    """
    Extrude a section of connected curves and body edges.

    The extrusion starts ``settings.extrude.connected_start`` behind the section.

    Returns:
        OperationResult whose value is the first body, or None on host failure

    Raises:
        InvalidInputError: If items is None/empty, holds no curves or edges,
            or direction is None
    """
    settings = settings or DEFAULT_SETTINGS
    operation = "extrude_connected_curves_and_edges"
    items = require_items(items, "items", operation)
    require(direction, "direction", operation)
    rules = chain_rules(items, settings.rules)
    if not rules:
        raise InvalidInputError("items contains no curves or edges.", operation=operation)

    return _extrude_section(document, operation, "Extrude Connected Curves", rules, items[0],
                            distance, direction, settings.extrude.connected_start, settings)


def extrude_sketch(document: Any, sketch: Any, distance: float, direction: Any,
                   settings: Optional[OperationSettings] = None) -> OperationResult:
    """
    Extrude every curve of a sketch as a solid.

    Returns:
        OperationResult whose value is the list of produced bodies. A sketch
        without curves gives an empty list with ErrorKind.INVALID_INPUT.

    Raises:
        InvalidInputError: If sketch or direction is None
    """
    settings = settings or DEFAULT_SETTINGS
    operation = "extrude_sketch"
    require(sketch, "sketch", operation)
    require(direction, "direction", operation)

    try:
        curves = [item for item in document.sketch_geometry(sketch)
                  if kind_of(item) == EntityKind.CURVE]
        if not curves:
            log_info(logger, "extrude_sketch: No valid curves found in the sketch.")
            return OperationResult.failure(operation, ErrorKind.INVALID_INPUT,
                                           "No valid curves found in the sketch", value=[])

        with BuilderScope(document.create_extrude_builder) as scope:
            builder = scope.builder
            builder.add_to_section([curve_set_rule(curves)], sketch,
                                   settings.section.as_tolerances())
            _configure(builder, direction, settings.extrude.sketch_start, distance)
            feature = builder.commit()
            bodies = entities_of_kind(feature, EntityKind.BODY)
    except Exception as e:
        log_error(logger, operation, e)
        return OperationResult.failure(operation, ErrorKind.HOST_REJECTED, str(e),
                                       value=[], attempts=1)

    log_info(logger, "extrude_sketch successful.")
    return OperationResult(operation, value=bodies)
