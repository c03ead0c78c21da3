"""
Offset curves with direction disambiguation.

An offset of a curve set can land on either side of it and the host does
not say which side a direction flag selects. The offset is committed,
its total length compared with the original total length ``L``, and if
the comparison disagrees with what the caller expects the commit is
rolled back and redone once with the opposite flag.

    create_offset_curves        first reverse=False, keep when length >= L
    create_dual_offset_curves   large magnitude: first reverse=True,  keep when length <= L
                                small magnitude: first reverse=False, keep when length >= L

The result after at most one retry is returned; ``satisfied`` on the
result tells whether it passed the comparison.
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Sequence

from ..enums import EntityKind, ErrorKind, OffsetSense
from ..errors import InvalidInputError, OperationResult
from ..io.settings import DEFAULT_SETTINGS, OperationSettings
from .listing import log_error, log_info
from .measure import offset_curve_length, total_curve_length
from .scopes import BuilderScope, Checkpoint
from .selection import curve_rules, entities_of_kind, require_items

logger = logging.getLogger(__name__)


@dataclass
class OffsetPlan:
    """One offset to produce: magnitude, first direction and expected length change."""
    distance: float
    first_reverse: bool
    sense: OffsetSense

    def keeps(self, offset_length: float, original_length: float) -> bool:
        if self.sense == OffsetSense.LENGTHEN:
            return offset_length >= original_length
        return offset_length <= original_length


def _configure(builder: Any, plan: OffsetPlan, reverse: bool, rules: List[Any], seed: Any,
               settings: OperationSettings) -> None:
    builder.distance = plan.distance
    builder.fit_tolerance = settings.offset.fit_tolerance
    builder.angle_tolerance = settings.offset.angle_tolerance
    builder.reverse_direction = reverse
    builder.rough = settings.offset.rough
    builder.add_to_section(rules, seed)


def _offset(document: Any, curves: List[Any], original_length: float, plan: OffsetPlan,
            operation: str, settings: OperationSettings) -> OperationResult:
    """Commit one offset, flipping direction once if the plan rejects it."""
    rules = curve_rules(curves)
    attempts = 0
    try:
        with BuilderScope(document.create_offset_builder) as scope:
            reverse = plan.first_reverse
            _configure(scope.builder, plan, reverse, rules, curves[0], settings)

            with Checkpoint(document, f"Offset {plan.distance:g} Commit",
                            rollback_on_error=True) as attempt:
                feature = scope.builder.commit()
                attempts += 1
                length = offset_curve_length(document, feature, strict=True)

                if not plan.keeps(length, original_length):
                    logger.debug(
                        f"{operation}: offset length {length:.4f} vs original "
                        f"{original_length:.4f} with reverse={reverse}, flipping"
                    )
                    attempt.rollback()
                    reverse = not reverse
                    builder = scope.renew()
                    _configure(builder, plan, reverse, rules, curves[0], settings)
                    feature = builder.commit()
                    attempts += 1
                    length = offset_curve_length(document, feature, strict=True)

            offset_curves = entities_of_kind(feature, EntityKind.CURVE)
    except Exception as e:
        log_error(logger, operation, e)
        return OperationResult.failure(operation, ErrorKind.HOST_REJECTED, str(e),
                                       value=[], attempts=attempts)

    if plan.keeps(length, original_length):
        return OperationResult(operation, value=offset_curves, attempts=attempts)

    message = (f"Offset length {length:.4f} still fails the {plan.sense.value} check "
               f"against {original_length:.4f} after flipping direction")
    logger.warning(f"{operation}: {message}")
    return OperationResult(operation, value=offset_curves,
                           error_kind=ErrorKind.DIRECTION_UNRESOLVED, message=message,
                           attempts=attempts, satisfied=False)


def _original_length(document: Any, curves: List[Any], operation: str) -> float:
    # Every curve must be measured; a partial sum would pick the wrong side
    length = total_curve_length(document, curves, strict=True)
    if length <= 0:
        raise InvalidInputError(
            f"Curves to offset have no measurable length ({length}).", operation=operation
        )
    return length


def create_offset_curves(document: Any, curves: Sequence[Any], distance: float,
                         settings: Optional[OperationSettings] = None) -> OperationResult:
    """
    Offset curves by a single distance, on the side that does not shorten them.

    Returns:
        OperationResult whose value is the list of offset curves (empty on failure)

    Raises:
        InvalidInputError: If curves is None/empty or has no measurable length
        HostOperationError: If the host cannot measure one of the curves
    """
    settings = settings or DEFAULT_SETTINGS
    operation = "create_offset_curves"
    curves = require_items(curves, "curves", operation)
    original_length = _original_length(document, curves, operation)

    plan = OffsetPlan(distance=distance, first_reverse=False, sense=OffsetSense.LENGTHEN)
    result = _offset(document, curves, original_length, plan, operation, settings)
    if result.ok and result.satisfied:
        log_info(logger, "create_offset_curves (single) successful.")
    return result


def create_dual_offset_curves(document: Any, curves: Sequence[Any],
                              large_distance: Optional[float] = None,
                              small_distance: Optional[float] = None,
                              settings: Optional[OperationSettings] = None
                              ) -> Dict[float, OperationResult]:
    """
    Offset curves by a large and a small distance.

    The large offset is expected not to be longer than the original curves,
    the small offset not to be shorter. Each magnitude is committed and
    checked independently; a failure of one does not stop the other.

    Args:
        large_distance: Defaults to ``settings.offset.large_distance`` (50)
        small_distance: Defaults to ``settings.offset.small_distance`` (10)

    Returns:
        Mapping of distance to OperationResult (value: list of offset curves),
        large distance first

    Raises:
        InvalidInputError: If curves is None/empty or has no measurable length
        HostOperationError: If the host cannot measure one of the curves
    """
    settings = settings or DEFAULT_SETTINGS
    operation = "create_dual_offset_curves"
    curves = require_items(curves, "curves", operation)
    if large_distance is None:
        large_distance = settings.offset.large_distance
    if small_distance is None:
        small_distance = settings.offset.small_distance
    if small_distance >= large_distance:
        raise InvalidInputError(
            f"Small distance {small_distance} must be less than large distance {large_distance}.",
            operation=operation,
        )
    original_length = _original_length(document, curves, operation)

    plans = [
        OffsetPlan(distance=large_distance, first_reverse=True, sense=OffsetSense.SHORTEN),
        OffsetPlan(distance=small_distance, first_reverse=False, sense=OffsetSense.LENGTHEN),
    ]
    results: Dict[float, OperationResult] = {}
    for plan in plans:
        results[plan.distance] = _offset(
            document, curves, original_length, plan,
            f"{operation}[{plan.distance:g}]", settings,
        )

    log_info(logger, "create_dual_offset_curves (multi distance) completed.")
    return results
