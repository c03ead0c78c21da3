"""Projection of curves and body edges onto a datum plane."""

import logging
from typing import Any, Optional, Sequence

from ..enums import EntityKind, ErrorKind
from ..errors import InvalidInputError, OperationResult
from ..io.settings import DEFAULT_SETTINGS, OperationSettings
from .listing import log_error, log_info
from .scopes import BuilderScope, Checkpoint
from .selection import entities_of_kind, face_datum_rule, require, require_items, tangent_rules

logger = logging.getLogger(__name__)


def project_curves_and_edges(document: Any, items: Sequence[Any], plane: Any,
                             settings: Optional[OperationSettings] = None) -> OperationResult:
    """
    Project tangent-chained curves and edges onto a plane along its normal.

    Projection keeps equal arc length along the projected curves.

    Returns:
        OperationResult whose value is the list of projected curves
        (empty on host failure)

    Raises:
        InvalidInputError: If items is None/empty or holds no curves or
            edges, or plane is None
    """
    settings = settings or DEFAULT_SETTINGS
    operation = "project_curves_and_edges"
    items = require_items(items, "items", operation)
    require(plane, "plane", operation)
    rules = tangent_rules(items, settings.rules)
    if not rules:
        raise InvalidInputError("items contains no curves or edges.", operation=operation)

    try:
        with Checkpoint(document, "Project Curves"), \
                BuilderScope(document.create_project_builder) as scope:
            builder = scope.builder
            builder.fit_tolerance = settings.projection.fit_tolerance
            builder.angle_tolerance = settings.projection.angle_tolerance
            builder.add_to_section(rules, items[0], settings.projection.as_tolerances())
            builder.add_target([face_datum_rule(plane)])
            feature = builder.commit()
            projected = entities_of_kind(feature, EntityKind.CURVE)
    except Exception as e:
        log_error(logger, operation, e)
        return OperationResult.failure(operation, ErrorKind.HOST_REJECTED, str(e),
                                       value=[], attempts=1)

    log_info(logger, "project_curves_and_edges successful.")
    return OperationResult(operation, value=projected)
