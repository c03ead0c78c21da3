"""
Volume-based trimming of a solid body by the faces of another body.

The host cannot tell in advance which side of the cutting faces a trim
keeps. The trim is therefore committed speculatively, the removed volume
is measured, and if the caller's policy rejects the result the trim is
rolled back and recommitted once with the opposite direction.

Policies (``p`` is the removed share of the baseline volume in percent,
``t`` is ``settings.trim.threshold_percent``, 50 by default):

    SMALL_CUT  keep when p <  t, otherwise flip once
    LARGE_CUT  keep when p >= t, otherwise flip once

At exactly ``t`` a SMALL_CUT trim is retried and a LARGE_CUT trim is not.

The result after at most one retry is returned as is. Whether it satisfies
the policy is reported in :attr:`OperationResult.satisfied`; an unsatisfied
retry is reported as ErrorKind.DIRECTION_UNRESOLVED.
"""

import logging
from dataclasses import dataclass
from typing import Any, Optional

from ..enums import ErrorKind, TrimPolicy
from ..errors import HostOperationError, InvalidInputError, OperationResult
from ..io.settings import DEFAULT_SETTINGS, OperationSettings
from .listing import log_error, log_info
from .measure import measure_body_volume
from .scopes import BuilderScope, Checkpoint
from .selection import body_rule, face_body_rule

logger = logging.getLogger(__name__)


@dataclass
class TrimOutcome:
    """What a volume-based trim did.

    Attributes:
        body: The trimmed target body (same handle that was looked up)
        reverse: Direction flag of the commit that was kept
        baseline_volume: Target volume before trimming
        final_volume: Target volume after the kept commit
        removed_percent: Removed share of the baseline volume, in percent
    """
    body: Any
    reverse: bool
    baseline_volume: float
    final_volume: float
    removed_percent: float


def removed_percent(baseline: float, after: float) -> float:
    """Relative volume change in percent.

    Raises:
        InvalidInputError: If the baseline is not positive
    """
    if baseline <= 0:
        raise InvalidInputError(
            f"Cannot measure a relative change against a baseline of {baseline}"
        )
    return abs(baseline - after) / baseline * 100.0


def keeps(policy: TrimPolicy, percent: float, threshold: float = 50.0) -> bool:
    """Whether a trim that removed ``percent`` of the body satisfies the policy."""
    if policy == TrimPolicy.SMALL_CUT:
        return percent < threshold
    return percent >= threshold


def trim_body_by_volume(document: Any, target_name: str, tool_name: str, reverse: bool,
                        policy: TrimPolicy = TrimPolicy.SMALL_CUT,
                        settings: Optional[OperationSettings] = None) -> OperationResult:
    """
    Trim a named body by the faces of another named body.

    Args:
        document: Host document
        target_name: Name of the body to trim
        tool_name: Name of the body whose faces cut the target
        reverse: Direction flag for the first attempt
        policy: Which side of the cut the caller expects to keep
        settings: Operation settings (defaults if None)

    Returns:
        OperationResult whose value is a TrimOutcome, or None if the host
        failed (the document is then rolled back to its state before the call)

    Raises:
        InvalidInputError: If a name is empty, a body cannot be found,
            or the target has no volume
    """
    settings = settings or DEFAULT_SETTINGS
    operation = f"trim_body_by_volume[{policy.value}]"
    if not target_name or not tool_name:
        raise InvalidInputError("Target and tool body names are required.", operation=operation)

    target = document.find_body(target_name)
    tool = document.find_body(tool_name)
    if target is None or tool is None:
        raise InvalidInputError(
            f"Could not find target '{target_name}' or tool '{tool_name}' body by name.",
            operation=operation,
        )

    try:
        baseline = measure_body_volume(document, target, settings)
    except HostOperationError as e:
        return OperationResult.failure(operation, ErrorKind.HOST_REJECTED, str(e))
    if baseline <= 0:
        raise InvalidInputError(
            f"Target body '{target_name}' has no volume ({baseline}); cannot judge trim direction.",
            operation=operation,
        )

    threshold = settings.trim.threshold_percent
    attempts = 0
    try:
        with Checkpoint(document, "Trim Body Start", rollback_on_error=True) as start, \
                BuilderScope(document.create_trim_builder) as scope:
            builder = scope.builder
            builder.tolerance = settings.trim.tolerance
            builder.distance_tolerance = settings.trim.distance_tolerance
            builder.chaining_tolerance = settings.trim.chaining_tolerance
            start.rename("Trim Body Dialog")
            builder.set_target([body_rule([target])])
            builder.set_tool([face_body_rule(tool)])

            direction = reverse
            with Checkpoint(document, "Trim Body", visible=False) as attempt:
                builder.reverse_direction = direction
                builder.commit()
                attempts += 1
                after = measure_body_volume(document, target, settings)
                percent = removed_percent(baseline, after)

                if not keeps(policy, percent, threshold):
                    logger.debug(
                        f"{operation}: removed {percent:.2f}% with reverse={direction}, flipping"
                    )
                    attempt.rollback()
                    direction = not direction
                    builder.reverse_direction = direction
                    builder.commit()
                    attempts += 1
                    after = measure_body_volume(document, target, settings)
                    percent = removed_percent(baseline, after)

            start.rename("Trim Body")
    except Exception as e:
        log_error(logger, operation, e)
        return OperationResult.failure(operation, ErrorKind.HOST_REJECTED, str(e),
                                       attempts=attempts)

    outcome = TrimOutcome(
        body=target,
        reverse=direction,
        baseline_volume=baseline,
        final_volume=after,
        removed_percent=percent,
    )
    satisfied = keeps(policy, percent, threshold)
    if satisfied:
        log_info(logger, f"{operation} successful.")
        return OperationResult(operation, value=outcome, attempts=attempts)

    message = (f"Removed {percent:.2f}% after flipping direction; "
               f"{policy.value} policy not satisfied")
    logger.warning(f"{operation}: {message}")
    return OperationResult(operation, value=outcome, error_kind=ErrorKind.DIRECTION_UNRESOLVED,
                           message=message, attempts=attempts, satisfied=False)


def trim_body_small_cut(document: Any, target_name: str, tool_name: str, reverse: bool,
                        settings: Optional[OperationSettings] = None) -> OperationResult:
    """Trim keeping the larger part of the body (removes less than half)."""
    return trim_body_by_volume(document, target_name, tool_name, reverse,
                               TrimPolicy.SMALL_CUT, settings)


def trim_body_large_cut(document: Any, target_name: str, tool_name: str, reverse: bool,
                        settings: Optional[OperationSettings] = None) -> OperationResult:
    """Trim removing at least half of the body."""
    return trim_body_by_volume(document, target_name, tool_name, reverse,
                               TrimPolicy.LARGE_CUT, settings)
