"""
Selection rules and input validation shared by the operations.

Curve and edge inputs are told apart by their ``kind``: curves get curve
rules, body edges get edge rules, anything else is skipped with a warning.
"""

import logging
from typing import Any, Iterable, List, Optional, Sequence

from ..enums import ChainRule, EntityKind
from ..errors import InvalidInputError
from ..host.protocol import SelectionRule, kind_of
from ..io.settings import RuleSettings

logger = logging.getLogger(__name__)


def require(value: Any, name: str, operation: str) -> Any:
    """Reject a missing argument before any host call."""
    if value is None:
        raise InvalidInputError(f"{name} cannot be None.", operation=operation)
    return value


def require_items(items: Optional[Sequence[Any]], name: str, operation: str) -> List[Any]:
    """Reject a None or empty collection before any host call.

    Returns:
        The items as a list, with None entries dropped.

    Raises:
        InvalidInputError: If items is None, empty, or holds only None entries
    """
    if items is None or len(items) == 0:
        raise InvalidInputError(f"{name} cannot be None or empty.", operation=operation)
    present = [item for item in items if item is not None]
    if not present:
        raise InvalidInputError(f"{name} contains no usable entries.", operation=operation)
    return present


def tangent_rules(items: Iterable[Any], rules: RuleSettings) -> List[SelectionRule]:
    """One tangent-chain rule per curve or edge."""
    selection = []
    for item in items:
        kind = kind_of(item)
        if kind == EntityKind.CURVE:
            selection.append(SelectionRule(
                ChainRule.CURVE_TANGENT, (item,),
                angle_tolerance=rules.angle_tolerance,
                gap_tolerance=rules.gap_tolerance,
            ))
        elif kind == EntityKind.EDGE:
            selection.append(SelectionRule(
                ChainRule.EDGE_TANGENT, (item,),
                angle_tolerance=rules.angle_tolerance,
            ))
        else:
            logger.warning(f"Skipping {item!r}: not a curve or edge")
    return selection


def chain_rules(items: Iterable[Any], rules: RuleSettings) -> List[SelectionRule]:
    """One connected-chain rule per curve or edge."""
    selection = []
    for item in items:
        kind = kind_of(item)
        if kind == EntityKind.CURVE:
            selection.append(SelectionRule(
                ChainRule.CURVE_CHAIN, (item,),
                gap_tolerance=rules.chain_gap_tolerance,
            ))
        elif kind == EntityKind.EDGE:
            selection.append(SelectionRule(ChainRule.EDGE_CHAIN, (item,)))
        else:
            logger.warning(f"Skipping {item!r}: not a curve or edge")
    return selection


def curve_rules(curves: Iterable[Any]) -> List[SelectionRule]:
    """One rule per curve selecting exactly that curve."""
    return [SelectionRule(ChainRule.CURVE_DUMB, (curve,)) for curve in curves]


def curve_set_rule(curves: Sequence[Any]) -> SelectionRule:
    """A single rule selecting exactly the given curves."""
    return SelectionRule(ChainRule.CURVE_DUMB, tuple(curves))


def body_rule(bodies: Sequence[Any]) -> SelectionRule:
    return SelectionRule(ChainRule.BODY_DUMB, tuple(bodies))


def face_body_rule(body: Any) -> SelectionRule:
    return SelectionRule(ChainRule.FACE_BODY, (body,))


def face_datum_rule(plane: Any) -> SelectionRule:
    return SelectionRule(ChainRule.FACE_DATUM, (plane,))


def entities_of_kind(feature: Any, kind: EntityKind) -> List[Any]:
    """Entities of a committed feature with the given kind."""
    if feature is None:
        return []
    return [entity for entity in feature.get_entities() if kind_of(entity) == kind]
